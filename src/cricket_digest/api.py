"""
FastAPI application for the cricket digest.

This module provides:
1. A trigger endpoint that runs the daily report (GET or POST)
2. A root endpoint with basic API info

Endpoints:
- GET /: API info
- GET|POST /api/cricket-report: Run the report and email it

Other methods on the report endpoint get 405 from FastAPI's router.
A run that exceeds REPORT_TIMEOUT_SECONDS is abandoned with a 504.

Usage:
    # Run with uvicorn
    uvicorn cricket_digest.api:app --reload

    # Or use the main.py entrypoint
    python -m cricket_digest.main serve
"""

import asyncio
from datetime import UTC, datetime

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from cricket_digest.config import get_settings
from cricket_digest.graph import run_daily_report

logger = structlog.get_logger()


# ========================================
# FASTAPI APP
# ========================================

app = FastAPI(
    title="Cricket Digest",
    description="Collects daily cricket news, summarizes it with Claude and emails the report",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ========================================
# PYDANTIC MODELS
# ========================================


class ReportResponse(BaseModel):
    """Response after a successful report run."""

    success: bool = Field(description="Always true for a completed run")
    message: str = Field(description="Human-readable status message")
    article_count: int = Field(description="Articles included in the report")
    sources: list[str] = Field(description="Distinct sources of those articles")
    timestamp: datetime = Field(description="Server time when the run finished")


class ErrorResponse(BaseModel):
    """Response after a failed or abandoned report run."""

    success: bool = Field(default=False)
    error: str = Field(description="What went wrong")
    timestamp: datetime = Field(description="Server time when the run failed")


def error_response(status_code: int, error: str) -> JSONResponse:
    body = ErrorResponse(error=error, timestamp=datetime.now(UTC))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


# ========================================
# ENDPOINTS
# ========================================


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic API info."""
    return {
        "name": "Cricket Digest API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.api_route(
    "/api/cricket-report",
    methods=["GET", "POST"],
    response_model=ReportResponse,
    responses={500: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
    tags=["Report"],
)
async def cricket_report():
    """
    Run the daily cricket report and email it.

    Returns:
        Article count and sources on success, an error body otherwise
    """
    logger.info("Cricket report API called")

    try:
        # Loaded here so configuration errors get the JSON error body
        settings = get_settings()
        result = await asyncio.wait_for(
            run_daily_report(settings),
            timeout=settings.report_timeout_seconds,
        )

    except asyncio.TimeoutError:
        logger.error("Report run timed out", timeout=settings.report_timeout_seconds)
        return error_response(
            504,
            f"Report run exceeded {settings.report_timeout_seconds:g}s and was abandoned",
        )

    except Exception as e:
        logger.error("Report run failed", error=str(e), error_type=type(e).__name__)
        return error_response(500, str(e))

    return ReportResponse(
        success=result.success,
        message=result.message,
        article_count=result.article_count,
        sources=result.sources,
        timestamp=datetime.now(UTC),
    )

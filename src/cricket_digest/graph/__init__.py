"""
LangGraph pipeline for the cricket digest.

This package contains:
- state.py: State schema (DigestState) and record types
- nodes/: Individual pipeline nodes
- orchestrator.py: Graph wiring and execution

Usage:
    from cricket_digest.graph import run_daily_report

    result = await run_daily_report(settings)
"""

from cricket_digest.graph.orchestrator import (
    build_components,
    create_graph,
    run_daily_report,
    run_pipeline,
)
from cricket_digest.graph.state import Article, CollectionError, DigestState, ReportResult

__all__ = [
    # Orchestration
    "build_components",
    "create_graph",
    "run_daily_report",
    "run_pipeline",
    # State types
    "Article",
    "CollectionError",
    "DigestState",
    "ReportResult",
]

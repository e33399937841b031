"""
Data model for the cricket digest.

This module defines:
1. Article - One news item as produced by a source adapter
2. CollectionError - A source that failed during collection (non-fatal)
3. ReportResult - What a report run returns to its caller
"""

from datetime import datetime
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Article(BaseModel):
    """
    A single news article.

    Articles are immutable: pipeline stages only filter and reorder
    collections of them. `summary` falls back to `title` when missing.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    summary: str = ""
    link: str = Field(min_length=1)
    time: str = ""  # Free text, format depends on the source
    source: str

    @model_validator(mode="before")
    @classmethod
    def default_summary_to_title(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("summary"):
            data = {**data, "summary": data.get("title", "")}
        return data


class CollectionError(TypedDict):
    """
    Non-fatal error during collection.

    We log these but don't fail the pipeline - partial results are better
    than no results.
    """

    source_type: str  # rss, html, browser or cricapi
    source_id: str  # Which source failed
    error_type: str  # Exception class name
    error_message: str  # Human-readable message
    timestamp: datetime


class ReportResult(BaseModel):
    """Outcome of one daily report run."""

    success: bool
    article_count: int
    sources: list[str] = Field(default_factory=list)
    message: str

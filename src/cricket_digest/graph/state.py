"""
LangGraph state schema for the cricket digest.

The record types themselves live in cricket_digest.models; they are
re-exported here so graph code can import everything from one place.
"""

import operator
from datetime import datetime
from typing import Annotated, TypedDict

from cricket_digest.models import Article, CollectionError, ReportResult


class DigestState(TypedDict, total=False):
    """
    Main state for the digest graph.

    START -> Collect -> Deduplicate -> Rank -> Summarize -> Notify -> END
    START -> Collect -> Notify empty (nothing collected) -> END

    `Annotated[list, operator.add]` lets the collector append to lists
    that may also be seeded by the caller.
    """

    # === Input (set at pipeline start) ===
    run_id: str
    run_date: datetime

    # === Collection ===
    articles: Annotated[list[Article], operator.add]
    collection_errors: Annotated[list[CollectionError], operator.add]

    # === Processing (sequential nodes) ===
    deduplicated_articles: list[Article]
    ranked_articles: list[Article]
    report: str

    # === Output ===
    message_id: str
    result: ReportResult


__all__ = ["Article", "CollectionError", "DigestState", "ReportResult"]

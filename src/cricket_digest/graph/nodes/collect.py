"""
Collect Node - Fetches articles from every configured source.

This node:
1. Opens one httpx client for the run (closed on every exit path)
2. Runs all source adapters concurrently using asyncio.gather()
3. Gives each source its own deadline (asyncio.wait_for)
4. Concatenates successful results in source order
5. Records failed sources as CollectionErrors (never fails the pipeline)

LangGraph Integration:
- Input: DigestState (nothing required)
- Output: {"articles": [...], "collection_errors": [...]}
"""

import asyncio
from collections.abc import Sequence

import httpx
import structlog

from cricket_digest.graph.state import Article, CollectionError, DigestState
from cricket_digest.sources.base import SourceAdapter, make_collection_error

logger = structlog.get_logger()

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


async def fetch_with_deadline(
    adapter: SourceAdapter,
    client: httpx.AsyncClient,
) -> tuple[list[Article], list[CollectionError]]:
    """
    Run one adapter under its own timeout.

    A timeout or an exception that slipped past the adapter counts as that
    source's failure only.
    """
    try:
        return await asyncio.wait_for(adapter.fetch_articles(client), timeout=adapter.timeout)

    except asyncio.TimeoutError as e:
        logger.error("Source timed out", source=adapter.name, timeout=adapter.timeout)
        return [], [
            make_collection_error(
                adapter.config,
                e,
                f"Timed out after {adapter.timeout:g}s",
            )
        ]

    except Exception as e:
        logger.exception("Source adapter raised", source=adapter.name)
        return [], [make_collection_error(adapter.config, e)]


async def collect_articles(
    adapters: Sequence[SourceAdapter],
) -> tuple[list[Article], list[CollectionError]]:
    """
    Fetch all sources concurrently and merge their results.

    Args:
        adapters: Source adapters, in the order their articles should appear

    Returns:
        Tuple of (articles, errors)
    """
    all_articles: list[Article] = []
    all_errors: list[CollectionError] = []

    # Use a shared client for connection pooling
    async with httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    ) as client:
        tasks = [fetch_with_deadline(adapter, client) for adapter in adapters]
        results = await asyncio.gather(*tasks)

    # gather() keeps task order, so source order is preserved
    for adapter, (articles, errors) in zip(adapters, results):
        logger.info(
            "Source result",
            source=adapter.name,
            article_count=len(articles),
            failed=bool(errors),
        )
        all_articles.extend(articles)
        all_errors.extend(errors)

    return all_articles, all_errors


async def collect(state: DigestState, adapters: Sequence[SourceAdapter]) -> dict:
    """
    LangGraph node: Collect articles from all sources.

    Args:
        state: Current graph state
        adapters: Source adapters built by the composition root

    Returns:
        Partial state update with articles and collection_errors
    """
    logger.info("Starting collection", source_count=len(adapters), run_id=state.get("run_id"))

    articles, errors = await collect_articles(adapters)

    logger.info(
        "Collection complete",
        total_articles=len(articles),
        total_errors=len(errors),
    )

    return {
        "articles": articles,
        "collection_errors": errors,
    }


def create_collect_node(adapters: Sequence[SourceAdapter]):
    """
    Factory function to create a collect node bound to specific adapters.

    Usage:
        builder.add_node("collect", create_collect_node(adapters))
    """

    async def node(state: DigestState) -> dict:
        return await collect(state, adapters)

    return node

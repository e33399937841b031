"""
Rank Node - Orders articles by a coarse recency heuristic and caps the list.

Source time fields are free text ("2 hours ago", "Jan 3", RFC 2822
dates...), so instead of parsing them we split articles into two
buckets: "recent" if the time text contains a recency keyword such as
"hour" or "min", and everything else. Recent articles come first.

LangGraph Integration:
- Input: DigestState with deduplicated_articles
- Output: {"ranked_articles": [...]}
"""

from collections.abc import Iterable, Sequence

import structlog

from cricket_digest.config import PipelineConfig
from cricket_digest.graph.state import Article, DigestState

logger = structlog.get_logger()

DEFAULT_RECENCY_KEYWORDS = ("hour", "min")


def is_recent(article: Article, keywords: Sequence[str] = DEFAULT_RECENCY_KEYWORDS) -> bool:
    """Case-sensitive substring check on the article's time text."""
    if not article.time:
        return False
    return any(keyword in article.time for keyword in keywords)


def rank_articles(
    articles: Iterable[Article],
    limit: int = 20,
    keywords: Sequence[str] = DEFAULT_RECENCY_KEYWORDS,
) -> list[Article]:
    """Put recent-looking articles first, then truncate to `limit`."""
    ranked = sorted(articles, key=lambda article: not is_recent(article, keywords))
    return ranked[:limit]


async def rank(state: DigestState, config: PipelineConfig | None = None) -> dict:
    """
    LangGraph node: Rank and truncate deduplicated articles.

    Returns:
        Partial state update with ranked_articles
    """
    config = config or PipelineConfig()
    articles = state.get("deduplicated_articles", [])

    ranked = rank_articles(
        articles,
        limit=config.max_articles,
        keywords=config.recency_keywords,
    )

    logger.info(
        "Ranking complete",
        input_count=len(articles),
        output_count=len(ranked),
        recent_count=sum(1 for article in ranked if is_recent(article, config.recency_keywords)),
    )

    return {"ranked_articles": ranked}


def create_rank_node(config: PipelineConfig | None = None):
    async def node(state: DigestState) -> dict:
        return await rank(state, config)

    return node

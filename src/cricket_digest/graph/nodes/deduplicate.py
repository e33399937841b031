"""
Deduplicate Node - Collapses near-duplicate articles.

Several sources often carry the same story under slightly different
headlines ("India wins thrilling final match" vs "india WINS thrilling
FINAL match!!"). Articles are keyed by a normalized title signature:

1. Lowercase, drop everything that is not a word character or whitespace
2. Split on whitespace, keep tokens of at least min_word_length characters
3. Join the first `significant_words` tokens with single spaces

The first article seen for each key is kept; later ones are dropped.
This is an approximation: titles with no significant words all share
the empty key.

LangGraph Integration:
- Input: DigestState with articles
- Output: {"deduplicated_articles": [...]}
"""

import re
from collections.abc import Iterable

import structlog

from cricket_digest.config import PipelineConfig
from cricket_digest.graph.state import Article, DigestState

logger = structlog.get_logger()

# ASCII word characters only, so accented letters are stripped like punctuation.
# \s stays Unicode: a non-breaking space still separates words.
_NON_WORD = re.compile(r"[^A-Za-z0-9_\s]")


def dedup_key(
    title: str,
    significant_words: int = 5,
    min_word_length: int = 4,
) -> str:
    """Build the normalized-title key used to detect duplicates."""
    normalized = _NON_WORD.sub("", title.lower())
    words = [word for word in normalized.split() if len(word) >= min_word_length]
    return " ".join(words[:significant_words])


def deduplicate_articles(
    articles: Iterable[Article],
    significant_words: int = 5,
    min_word_length: int = 4,
    min_key_length: int | None = None,
) -> list[Article]:
    """
    Keep the first article for each dedup key, preserving order.

    Args:
        articles: Candidate articles in collection order
        significant_words: Tokens that make up the key
        min_word_length: Shortest token counted as significant
        min_key_length: If set, articles whose key is not longer than this
            are dropped as too generic to keep

    Returns:
        Deduplicated list of articles
    """
    seen: set[str] = set()
    unique: list[Article] = []

    for article in articles:
        key = dedup_key(article.title, significant_words, min_word_length)

        if min_key_length is not None and len(key) <= min_key_length:
            logger.debug("Dropping article with short key", title=article.title, key=key)
            continue

        if key in seen:
            logger.debug("Dropping duplicate", title=article.title, source=article.source)
            continue

        seen.add(key)
        unique.append(article)

    return unique


async def deduplicate(state: DigestState, config: PipelineConfig | None = None) -> dict:
    """
    LangGraph node: Deduplicate collected articles.

    Args:
        state: Current graph state with articles
        config: Pipeline settings (defaults to PipelineConfig())

    Returns:
        Partial state update with deduplicated_articles
    """
    config = config or PipelineConfig()
    articles = state.get("articles", [])

    logger.info("Starting deduplication", article_count=len(articles))

    if not articles:
        logger.warning("No articles to deduplicate")
        return {"deduplicated_articles": []}

    deduplicated = deduplicate_articles(
        articles,
        significant_words=config.dedup_significant_words,
        min_word_length=config.dedup_min_word_length,
        min_key_length=config.dedup_min_key_length,
    )

    logger.info(
        "Deduplication complete",
        input_count=len(articles),
        output_count=len(deduplicated),
        reduction_pct=round((1 - len(deduplicated) / len(articles)) * 100, 1),
    )

    return {"deduplicated_articles": deduplicated}


def create_deduplicate_node(config: PipelineConfig | None = None):
    """Factory function to create a deduplicate node with custom settings."""

    async def node(state: DigestState) -> dict:
        return await deduplicate(state, config)

    return node

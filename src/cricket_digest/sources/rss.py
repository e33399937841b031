"""
RSS source - fetches a feed with httpx and parses it with feedparser.

Descriptions in cricket feeds usually carry HTML, so the summary is
reduced to plain text and cut to SUMMARY_MAX_CHARS.
"""

import feedparser
import httpx
import structlog
from bs4 import BeautifulSoup

from cricket_digest.models import Article
from cricket_digest.sources.base import SourceAdapter

logger = structlog.get_logger()

SUMMARY_MAX_CHARS = 300


def clean_summary(raw: str, max_chars: int = SUMMARY_MAX_CHARS) -> str:
    """Strip HTML tags and truncate, appending "..." when cut."""
    text = BeautifulSoup(raw, "html.parser").get_text(" ", strip=True) if raw else ""
    if len(text) > max_chars:
        return text[:max_chars] + "..."
    return text


def extract_summary(entry: dict) -> str:
    """Prefer summary (feedparser's name for description), then description."""
    for field in ["summary", "description"]:
        if value := entry.get(field):
            return value
    return ""


class RssSource(SourceAdapter):
    """Adapter for RSS/Atom feeds."""

    async def fetch(self, client: httpx.AsyncClient) -> list[Article]:
        response = await client.get(self.config.url, timeout=self.config.timeout)
        response.raise_for_status()

        feed = feedparser.parse(response.text)

        if feed.bozo and feed.bozo_exception:
            # feedparser sets 'bozo' flag for malformed feeds
            # We still try to use what we can parse
            logger.warning(
                "Feed has parse errors",
                source=self.name,
                error=str(feed.bozo_exception),
            )

        articles: list[Article] = []
        for entry in feed.entries[: self.config.max_items]:
            article = self.make_article(
                title=entry.get("title"),
                link=entry.get("link"),
                summary=clean_summary(extract_summary(entry)),
                time=entry.get("published") or entry.get("updated"),
            )
            if article is None:
                logger.debug("Skipping entry without title or link", source=self.name)
                continue
            articles.append(article)

        return articles

"""
Base class for source adapters.

An adapter turns one site, feed or API into a list of Articles. The
public entry point, fetch_articles(), never raises for ordinary fetch or
parse failures: it returns the articles it got (possibly none) together
with a CollectionError describing what went wrong.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from urllib.parse import urljoin

import httpx
import structlog

from cricket_digest.config import SourceConfig
from cricket_digest.models import Article, CollectionError

logger = structlog.get_logger()


def absolute_url(link: str, base_url: str | None) -> str:
    """Resolve a site-relative link (starting with "/") against base_url."""
    if base_url and link.startswith("/"):
        return urljoin(base_url, link)
    return link


def make_collection_error(config: SourceConfig, error: BaseException, message: str | None = None) -> CollectionError:
    return CollectionError(
        source_type=config.kind,
        source_id=config.name,
        error_type=type(error).__name__,
        error_message=message or str(error) or type(error).__name__,
        timestamp=datetime.now(UTC),
    )


class SourceAdapter(ABC):
    """Common fetch/error-handling logic shared by all source kinds."""

    def __init__(self, config: SourceConfig):
        self.config = config

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def timeout(self) -> float:
        return self.config.timeout

    def make_article(
        self,
        title: str | None,
        link: str | None,
        summary: str | None = None,
        time: str | None = None,
    ) -> Article | None:
        """Build an Article, or None if the title or link is missing."""
        title = (title or "").strip()
        link = (link or "").strip()
        if not title or not link:
            return None

        return Article(
            title=title,
            summary=(summary or "").strip(),
            link=absolute_url(link, self.config.base_url),
            time=(time or "").strip(),
            source=self.name,
        )

    @abstractmethod
    async def fetch(self, client: httpx.AsyncClient) -> list[Article]:
        """Fetch and parse the source. May raise; fetch_articles() catches."""

    async def fetch_articles(
        self, client: httpx.AsyncClient
    ) -> tuple[list[Article], list[CollectionError]]:
        """
        Fetch the source and convert failures into CollectionErrors.

        Args:
            client: Shared httpx client (for connection pooling)

        Returns:
            Tuple of (articles, errors) - errors are non-fatal
        """
        log = logger.bind(source=self.name, url=self.config.url)

        try:
            log.info("Fetching source")
            articles = await self.fetch(client)
            log.info("Source processed", article_count=len(articles))
            return articles, []

        except httpx.HTTPStatusError as e:
            log.error("HTTP error fetching source", status_code=e.response.status_code)
            return [], [
                make_collection_error(
                    self.config,
                    e,
                    f"HTTP {e.response.status_code}: {e.response.reason_phrase}",
                )
            ]

        except httpx.RequestError as e:
            log.error("Request error fetching source", error=str(e))
            return [], [make_collection_error(self.config, e)]

        except Exception as e:
            log.exception("Unexpected error processing source")
            return [], [make_collection_error(self.config, e)]

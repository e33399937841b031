"""
Source adapters for the cricket digest.

Each adapter wraps one site, feed or API:
- rss: RSS/Atom feeds (feedparser)
- html: news listing pages (BeautifulSoup selectors)
- browser: listing pages rendered in headless Chromium (Playwright)
- cricapi: the CricAPI current-matches endpoint

Usage:
    from cricket_digest.sources import build_adapters

    adapters = build_adapters(settings.sources, cricket_api_key="...")
"""

import structlog

from cricket_digest.config import SourceConfig
from cricket_digest.sources.base import SourceAdapter, absolute_url
from cricket_digest.sources.browser import BrowserSource
from cricket_digest.sources.cricapi import CricApiSource
from cricket_digest.sources.html import HtmlSource
from cricket_digest.sources.rss import RssSource

logger = structlog.get_logger()


def build_adapter(config: SourceConfig, cricket_api_key: str | None = None) -> SourceAdapter | None:
    """Create the adapter for one source, or None if it cannot run."""
    if config.kind == "rss":
        return RssSource(config)
    if config.kind == "html":
        return HtmlSource(config)
    if config.kind == "browser":
        return BrowserSource(config)
    if config.kind == "cricapi":
        if not cricket_api_key:
            logger.info("Skipping CricAPI source, no API key configured", source=config.name)
            return None
        return CricApiSource(config, api_key=cricket_api_key)
    raise ValueError(f"Unknown source kind: {config.kind}")


def build_adapters(
    configs: list[SourceConfig],
    cricket_api_key: str | None = None,
) -> list[SourceAdapter]:
    adapters = [build_adapter(config, cricket_api_key) for config in configs]
    return [adapter for adapter in adapters if adapter is not None]


__all__ = [
    "SourceAdapter",
    "RssSource",
    "HtmlSource",
    "BrowserSource",
    "CricApiSource",
    "absolute_url",
    "build_adapter",
    "build_adapters",
]

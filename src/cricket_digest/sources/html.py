"""
HTML source - scrapes a news listing page with BeautifulSoup.

Each source supplies CSS selectors for the article container and for the
title, summary, link and time inside it. Only the first max_items
containers are looked at.
"""

import httpx
from bs4 import BeautifulSoup, Tag

from cricket_digest.config import SourceConfig
from cricket_digest.models import Article
from cricket_digest.sources.base import SourceAdapter


def select_text(element: Tag, selector: str) -> str:
    found = element.select_one(selector)
    return found.get_text(strip=True) if found else ""


def select_href(element: Tag, selector: str) -> str:
    found = element.select_one(selector)
    if found is None:
        return ""
    href = found.get("href")
    return href if isinstance(href, str) else ""


class HtmlSource(SourceAdapter):
    """Adapter for plain HTML listing pages."""

    def __init__(self, config: SourceConfig):
        if config.selectors is None:
            raise ValueError(f"HTML source {config.name!r} needs selectors")
        super().__init__(config)
        self.selectors = config.selectors

    def parse(self, html: str) -> list[Article]:
        soup = BeautifulSoup(html, "html.parser")
        containers = soup.select(self.selectors.articles)[: self.config.max_items]

        articles: list[Article] = []
        for element in containers:
            article = self.make_article(
                title=select_text(element, self.selectors.title),
                link=select_href(element, self.selectors.link),
                summary=select_text(element, self.selectors.summary),
                time=select_text(element, self.selectors.time),
            )
            if article is not None:
                articles.append(article)

        return articles

    async def fetch(self, client: httpx.AsyncClient) -> list[Article]:
        response = await client.get(self.config.url, timeout=self.config.timeout)
        response.raise_for_status()
        return self.parse(response.text)

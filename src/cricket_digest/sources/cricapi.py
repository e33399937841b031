"""
CricAPI source - turns current matches into short news items.

The API returns {"data": [match, ...]}; each match becomes one Article
titled "<name> - <status>".
"""

from datetime import UTC, datetime

import httpx

from cricket_digest.config import SourceConfig
from cricket_digest.models import Article
from cricket_digest.sources.base import SourceAdapter

MATCH_URL = "https://cricapi.com/matches/{match_id}"


def match_to_fields(match: dict) -> dict:
    """Map one CricAPI match record to Article fields."""
    teams = [team for team in (match.get("teams") or [])[:2] if team]
    # Empty summary falls back to the title on the Article
    summary = ". ".join(part for part in [" vs ".join(teams), match.get("venue")] if part)

    return {
        "title": f"{match.get('name') or 'Cricket Match'} - {match.get('status') or 'Live'}",
        "summary": summary,
        "link": MATCH_URL.format(match_id=match.get("id", "")) if match.get("id") else "",
        "time": match.get("dateTimeGMT") or datetime.now(UTC).isoformat(),
    }


class CricApiSource(SourceAdapter):
    """Adapter for the CricAPI current-matches endpoint."""

    def __init__(self, config: SourceConfig, api_key: str):
        super().__init__(config)
        self.api_key = api_key

    async def fetch(self, client: httpx.AsyncClient) -> list[Article]:
        response = await client.get(
            self.config.url,
            params={"apikey": self.api_key, "offset": 0},
            timeout=self.config.timeout,
        )
        response.raise_for_status()

        matches = (response.json() or {}).get("data") or []

        articles: list[Article] = []
        for match in matches[: self.config.max_items]:
            article = self.make_article(**match_to_fields(match))
            if article is not None:
                articles.append(article)

        return articles

"""
Configuration management using pydantic-settings.

Environment variables are loaded from:
1. .env file (if present)
2. System environment variables (override .env)

Usage:
    from cricket_digest.config import get_settings
    settings = get_settings()
    print(settings.smtp_host)

Pipeline variants (different source sets, dedup thresholds, caps) are
expressed here as configuration rather than as separate code paths.
"""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

SourceKind = Literal["rss", "html", "browser", "cricapi"]


class HtmlSelectors(BaseModel):
    """CSS selectors used to pull articles out of a news listing page."""

    articles: str
    title: str
    summary: str
    link: str = "a"
    time: str


class SourceConfig(BaseModel):
    """Configuration for a single article source."""

    name: str
    kind: SourceKind
    url: str
    base_url: str | None = None  # For resolving site-relative links
    max_items: int = Field(default=15, ge=1)
    timeout: float = Field(default=15.0, gt=0)
    selectors: HtmlSelectors | None = None


class PipelineConfig(BaseModel):
    """Tunable knobs for deduplication, ranking and the fallback report."""

    dedup_significant_words: int = Field(
        default=5,
        ge=1,
        description="Number of significant title words that form the dedup key",
    )
    dedup_min_word_length: int = Field(
        default=4,
        ge=1,
        description="Shortest token counted as significant",
    )
    dedup_min_key_length: int | None = Field(
        default=None,
        description="If set, articles whose key is not longer than this are dropped",
    )
    recency_keywords: list[str] = Field(
        default_factory=lambda: ["hour", "min"],
        description="Substrings of the time text that mark an article as recent",
    )
    max_articles: int = Field(default=20, ge=1)
    fallback_article_count: int = Field(default=10, ge=1)


# Default sources (the union of the scraping and RSS variants)
DEFAULT_SOURCES: list[SourceConfig] = [
    SourceConfig(
        name="ESPNCricinfo",
        kind="browser",
        url="https://www.espncricinfo.com/cricket-news",
        base_url="https://www.espncricinfo.com",
        timeout=45.0,  # Page load plus selector wait
        selectors=HtmlSelectors(
            articles=".ds-p-0",
            title=".ds-text-title-s, .ds-text-title-xs",
            summary=".ds-text-compact-s, .ds-text-compact-xs",
            time=".ds-text-tight-xs",
        ),
    ),
    SourceConfig(
        name="Cricbuzz",
        kind="html",
        url="https://www.cricbuzz.com/cricket-news",
        base_url="https://www.cricbuzz.com",
        selectors=HtmlSelectors(
            articles=".cb-nws-lst-rt",
            title=".cb-nws-hdln",
            summary=".cb-nws-intr",
            time=".cb-font-12",
        ),
    ),
    SourceConfig(
        name="ESPNCricinfo RSS",
        kind="rss",
        url="https://www.espncricinfo.com/rss/content/story/feeds/0.xml",
        base_url="https://www.espncricinfo.com",
    ),
    SourceConfig(
        name="Cricbuzz RSS",
        kind="rss",
        url="https://cricbuzz.com/rss-feed/cricket-news",
        base_url="https://www.cricbuzz.com",
    ),
    SourceConfig(
        name="CricAPI",
        kind="cricapi",
        url="https://api.cricapi.com/v1/currentMatches",
        max_items=5,
        timeout=10.0,
    ),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    anthropic_api_key: SecretStr = Field(
        default=...,  # Required - no default
        description="Anthropic API key for Claude",
    )
    llm_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model used to write the daily report",
    )
    llm_max_tokens: int = Field(default=2048, ge=1)

    email_user: str = Field(
        default=...,
        description="SMTP login, also used as the From address",
    )
    email_password: SecretStr = Field(
        default=...,
        description="SMTP password (an app password for Gmail)",
    )
    report_recipient_email: str = Field(
        default=...,
        description="Where the daily report is sent",
    )
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=465, description="SMTP over SSL port")
    smtp_timeout: float = Field(default=30.0, gt=0)

    cricket_api_key: SecretStr | None = Field(
        default=None,
        description="CricAPI key; the CricAPI source is skipped without it",
    )

    report_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Overall budget for one report run triggered over HTTP",
    )

    sources: list[SourceConfig] = Field(default_factory=lambda: list(DEFAULT_SOURCES))
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )


def get_settings() -> Settings:
    """Get settings instance. Use this for lazy loading in tests."""
    return Settings()

"""
Tests for the summarize node.

Key testing strategies:
1. Use LangChain's fake chat model instead of calling Claude
2. Test prompt rendering of the article list
3. Test the deterministic fallback report
4. Test that model failures never fail the node
"""

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from pydantic import SecretStr

from cricket_digest.config import PipelineConfig, Settings
from cricket_digest.graph.nodes.summarize import (
    NO_NEWS_REPORT,
    ReportSummarizer,
    build_prompt,
    create_summarize_node,
    fallback_report,
    format_articles,
    summarize,
)
from cricket_digest.models import Article


def make_article(
    title: str = "India beat Australia in Perth",
    summary: str = "India won by five wickets.",
    link: str = "https://example.com/story/1",
    time: str = "2 hours ago",
    source: str = "Cricbuzz",
) -> Article:
    """Helper to create test Articles."""
    return Article(title=title, summary=summary, link=link, time=time, source=source)


def make_articles(count: int) -> list[Article]:
    return [
        make_article(title=f"Story number {i}", link=f"https://example.com/story/{i}")
        for i in range(1, count + 1)
    ]


class FailingSummarizer:
    """Stands in for a summarizer whose model call blows up."""

    def __init__(self, error: Exception | None = None):
        self.error = error or RuntimeError("API rate limit exceeded")
        self.calls = 0

    async def generate(self, articles):
        self.calls += 1
        raise self.error


class TestFormatArticles:
    def test_renders_numbered_blocks(self):
        text = format_articles([make_article()])

        assert text == (
            "1. **India beat Australia in Perth** (Cricbuzz)\n"
            "Summary: India won by five wickets.\n"
            "Link: https://example.com/story/1\n"
            "Time: 2 hours ago\n"
            "---"
        )

    def test_missing_time_shows_na(self):
        text = format_articles([make_article(time="")])
        assert "Time: N/A" in text

    def test_blocks_separated_by_blank_line(self):
        text = format_articles(make_articles(3))

        assert text.count("---") == 3
        assert text.startswith("1. **Story number 1**")
        assert "---\n\n2. **Story number 2**" in text

    def test_prompt_embeds_articles(self):
        prompt = build_prompt([make_article()])

        assert "TOP HEADLINES" in prompt
        assert "KEY TAKEAWAYS" in prompt
        assert "1. **India beat Australia in Perth** (Cricbuzz)" in prompt


class TestFallbackReport:
    def test_lists_top_ten(self):
        report = fallback_report(make_articles(12))

        assert report.startswith("# Daily Cricket News Report")
        assert "## Latest Cricket News" in report
        assert "**10. Story number 10**" in report
        assert "Story number 11" not in report

    def test_article_details(self):
        report = fallback_report([make_article()])

        assert "**1. India beat Australia in Perth**" in report
        assert "Source: Cricbuzz" in report
        assert "Time: 2 hours ago" in report
        assert "India won by five wickets." in report
        assert "[Read more](https://example.com/story/1)" in report

    def test_omits_empty_time(self):
        report = fallback_report([make_article(time="")])
        assert "Time:" not in report

    def test_custom_count(self):
        report = fallback_report(make_articles(5), count=2)
        assert "Story number 2" in report
        assert "Story number 3" not in report

    def test_is_deterministic(self):
        articles = make_articles(4)
        assert fallback_report(articles) == fallback_report(articles)


class TestReportSummarizer:
    async def test_returns_model_text(self):
        llm = FakeListChatModel(responses=["# Today's Cricket\n\nIndia won."])
        summarizer = ReportSummarizer(llm)

        report = await summarizer.generate([make_article()])

        assert report == "# Today's Cricket\n\nIndia won."

    async def test_empty_list_skips_model(self):
        # No responses configured, so any call would fail
        summarizer = ReportSummarizer(FakeListChatModel(responses=[]))

        assert await summarizer.generate([]) == NO_NEWS_REPORT

    async def test_blank_output_is_an_error(self):
        summarizer = ReportSummarizer(FakeListChatModel(responses=["   "]))

        with pytest.raises(ValueError):
            await summarizer.generate([make_article()])

    def test_from_settings_uses_configured_model(self):
        settings = Settings(
            anthropic_api_key=SecretStr("test-anthropic-key"),
            email_user="bot@example.com",
            email_password=SecretStr("secret"),
            report_recipient_email="fan@example.com",
            llm_model="claude-test-model",
            _env_file=None,
        )

        summarizer = ReportSummarizer.from_settings(settings)

        assert summarizer.llm.model == "claude-test-model"


class TestSummarizeNode:
    async def test_uses_model_report(self):
        summarizer = ReportSummarizer(FakeListChatModel(responses=["Great day for cricket."]))

        result = await summarize({"ranked_articles": [make_article()]}, summarizer)

        assert result == {"report": "Great day for cricket."}

    async def test_falls_back_on_model_error(self):
        summarizer = FailingSummarizer()
        articles = make_articles(12)

        result = await summarize({"ranked_articles": articles}, summarizer)

        assert summarizer.calls == 1
        assert result["report"] == fallback_report(articles, count=10)

    async def test_fallback_count_from_config(self):
        node = create_summarize_node(FailingSummarizer(), PipelineConfig(fallback_article_count=3))

        result = await node({"ranked_articles": make_articles(5)})

        assert "Story number 3" in result["report"]
        assert "Story number 4" not in result["report"]

    async def test_empty_state_reports_no_news(self):
        summarizer = ReportSummarizer(FakeListChatModel(responses=[]))

        result = await summarize({}, summarizer)

        assert result["report"] == NO_NEWS_REPORT

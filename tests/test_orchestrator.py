"""
Tests for the graph orchestrator.

Key testing strategies:
1. Run the real compiled graph with fake sources, summarizer and notifier
2. Test the no-news short-circuit
3. Test that summarizer failures degrade to the fallback report
4. Test that delivery failures send one failure notice and re-raise
"""

from unittest.mock import AsyncMock

import pytest
from pydantic import SecretStr

from cricket_digest.config import PipelineConfig, Settings, SourceConfig
from cricket_digest.graph.nodes.notify import NO_ARTICLES_MESSAGE, EmailNotifier, NotificationError
from cricket_digest.graph.nodes.summarize import ReportSummarizer, fallback_report
from cricket_digest.graph.orchestrator import (
    PipelineComponents,
    build_components,
    create_graph,
    route_after_collect,
    run_daily_report,
    run_pipeline,
)
from cricket_digest.models import Article
from cricket_digest.sources.base import SourceAdapter

TEAMS = [
    "India",
    "Australia",
    "England",
    "Pakistan",
    "Zealand",
    "Africa",
    "Lanka",
    "Indies",
    "Bangladesh",
    "Afghanistan",
    "Ireland",
    "Zimbabwe",
]


def make_article(title: str, source: str = "Cricbuzz", time: str = "") -> Article:
    slug = title.lower().replace(" ", "-")
    return Article(title=title, link=f"https://example.com/{slug}", time=time, source=source)


class FakeSource(SourceAdapter):
    def __init__(self, name: str, articles: list[Article], error: Exception | None = None):
        super().__init__(SourceConfig(name=name, kind="rss", url=f"https://{name.lower()}.example.com/"))
        self.articles = articles
        self.error = error

    async def fetch(self, client) -> list[Article]:
        if self.error:
            raise self.error
        return list(self.articles)


class FakeSummarizer:
    def __init__(self, report: str = "# Cricket Today\n\nBig day.", error: Exception | None = None):
        self.report = report
        self.error = error
        self.calls: list[list[Article]] = []

    async def generate(self, articles):
        self.calls.append(list(articles))
        if self.error:
            raise self.error
        return self.report


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, int]] = []

    async def send(self, report: str, article_count: int) -> str:
        self.sent.append((report, article_count))
        if self.fail:
            raise NotificationError("SMTP unavailable")
        return f"<msg-{len(self.sent)}@example.com>"


def make_settings(**overrides) -> Settings:
    values = {
        "anthropic_api_key": SecretStr("test-anthropic-key"),
        "email_user": "bot@example.com",
        "email_password": SecretStr("secret"),
        "report_recipient_email": "fan@example.com",
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


class TestRouteAfterCollect:
    def test_articles_go_to_deduplicate(self):
        assert route_after_collect({"articles": [make_article("Story")]}) == "deduplicate"

    def test_no_articles_go_to_notify_empty(self):
        assert route_after_collect({"articles": []}) == "notify_empty"
        assert route_after_collect({}) == "notify_empty"


class TestBuildComponents:
    def test_builds_from_settings(self):
        components = build_components(make_settings())

        # CricAPI is skipped without a key
        assert [adapter.name for adapter in components.adapters] == [
            "ESPNCricinfo",
            "Cricbuzz",
            "ESPNCricinfo RSS",
            "Cricbuzz RSS",
        ]
        assert isinstance(components.summarizer, ReportSummarizer)
        assert isinstance(components.notifier, EmailNotifier)
        assert components.notifier.recipient == "fan@example.com"
        assert components.config == PipelineConfig()

    def test_includes_cricapi_with_key(self):
        components = build_components(make_settings(cricket_api_key=SecretStr("cricapi-key")))
        assert components.adapters[-1].name == "CricAPI"


class TestRunPipeline:
    async def test_happy_path(self):
        adapters = [
            FakeSource(
                "Cricbuzz",
                [
                    make_article("India wins thrilling final match", "Cricbuzz", "2 hours ago"),
                    make_article("Rain washes out Brisbane Test", "Cricbuzz", "Jan 3"),
                ],
            ),
            FakeSource(
                "ESPNCricinfo",
                [
                    make_article("india WINS thrilling FINAL match!!", "ESPNCricinfo", "1 hour ago"),
                    make_article("Warner retires from Test cricket", "ESPNCricinfo", "30 mins ago"),
                ],
            ),
        ]
        summarizer = FakeSummarizer()
        notifier = RecordingNotifier()

        result = await run_pipeline(create_graph(adapters, summarizer, notifier), notifier, run_id="test-run")

        assert result.success is True
        assert result.article_count == 3
        assert result.sources == ["Cricbuzz", "ESPNCricinfo"]
        assert result.message == "Report sent successfully"

        # Recent articles first, duplicate dropped
        ranked_titles = [a.title for a in summarizer.calls[0]]
        assert ranked_titles == [
            "India wins thrilling final match",
            "Warner retires from Test cricket",
            "Rain washes out Brisbane Test",
        ]
        assert notifier.sent == [("# Cricket Today\n\nBig day.", 3)]

    async def test_partial_source_failure_still_reports(self):
        adapters = [
            FakeSource("Broken", [], error=RuntimeError("layout changed")),
            FakeSource("Cricbuzz", [make_article("Warner retires from Test cricket")]),
        ]
        notifier = RecordingNotifier()

        result = await run_pipeline(create_graph(adapters, FakeSummarizer(), notifier), notifier)

        assert result.success is True
        assert result.sources == ["Cricbuzz"]

    async def test_no_news_short_circuit(self):
        adapters = [
            FakeSource("Empty", []),
            FakeSource("Broken", [], error=RuntimeError("down")),
        ]
        summarizer = FakeSummarizer()
        notifier = RecordingNotifier()

        result = await run_pipeline(create_graph(adapters, summarizer, notifier), notifier)

        assert summarizer.calls == []
        assert notifier.sent == [(NO_ARTICLES_MESSAGE, 0)]
        assert result.success is True
        assert result.article_count == 0
        assert result.message == "No articles found"

    async def test_summarizer_failure_uses_fallback(self):
        articles = [make_article(f"{team} clinches thrilling series victory") for team in TEAMS]
        summarizer = FakeSummarizer(error=RuntimeError("model unavailable"))
        notifier = RecordingNotifier()
        graph = create_graph([FakeSource("Cricbuzz", articles)], summarizer, notifier)

        result = await run_pipeline(graph, notifier)

        assert result.success is True
        assert result.article_count == 12
        report, count = notifier.sent[0]
        assert report == fallback_report(articles, count=10)
        assert count == 12
        assert "Ireland" not in report

    async def test_delivery_failure_sends_notice_and_raises(self):
        notifier = RecordingNotifier(fail=True)
        graph = create_graph(
            [FakeSource("Cricbuzz", [make_article("Warner retires from Test cricket")])],
            FakeSummarizer(),
            notifier,
        )

        with pytest.raises(NotificationError):
            await run_pipeline(graph, notifier)

        # The report, then one failure notice
        assert len(notifier.sent) == 2
        notice, count = notifier.sent[1]
        assert notice.startswith("Error generating cricket report: SMTP unavailable")
        assert count == 0

    async def test_config_limits_ranked_articles(self):
        articles = [make_article(f"{team} clinches thrilling series victory") for team in TEAMS]
        summarizer = FakeSummarizer()
        notifier = RecordingNotifier()
        graph = create_graph([FakeSource("Cricbuzz", articles)], summarizer, notifier, PipelineConfig(max_articles=5))

        result = await run_pipeline(graph, notifier)

        assert result.article_count == 5
        assert len(summarizer.calls[0]) == 5


class TestRunDailyReport:
    async def test_wires_components(self, monkeypatch):
        notifier = RecordingNotifier()
        summarizer = FakeSummarizer()
        adapters = [FakeSource("Cricbuzz", [make_article("Warner retires from Test cricket")])]

        def fake_build_components(settings):
            return PipelineComponents(adapters, summarizer, notifier, settings.pipeline)

        monkeypatch.setattr("cricket_digest.graph.orchestrator.build_components", fake_build_components)

        result = await run_daily_report(make_settings())

        assert result.article_count == 1
        assert len(notifier.sent) == 1

    async def test_unexpected_graph_error_is_reraised(self):
        graph = AsyncMock()
        graph.ainvoke.side_effect = RuntimeError("boom")
        notifier = RecordingNotifier()

        with pytest.raises(RuntimeError, match="boom"):
            await run_pipeline(graph, notifier)

        assert notifier.sent[0][0].startswith("Error generating cricket report: boom")

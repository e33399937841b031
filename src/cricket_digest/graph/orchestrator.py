"""
LangGraph Orchestrator - Wires all nodes into a complete pipeline.

This module:
1. Builds the pipeline's collaborators from settings (composition root)
2. Creates the StateGraph with nodes bound to those collaborators
3. Runs the graph and turns its final state into a ReportResult

Pipeline Flow:
    START
      ↓
    Collect ──(no articles)──→ Notify empty ──→ END
      ↓
    Deduplicate
      ↓
    Rank
      ↓
    Summarize
      ↓
    Notify
      ↓
    END

Nothing here is cached at module level: every run gets its collaborators
passed in explicitly.

Usage:
    from cricket_digest.graph.orchestrator import run_daily_report

    result = await run_daily_report(get_settings())
"""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from langgraph.graph import END, START, StateGraph

from cricket_digest.config import PipelineConfig, Settings
from cricket_digest.graph.nodes import (
    create_collect_node,
    create_deduplicate_node,
    create_notify_empty_node,
    create_notify_node,
    create_rank_node,
    create_summarize_node,
)
from cricket_digest.graph.nodes.notify import EmailNotifier, Notifier
from cricket_digest.graph.nodes.summarize import ReportSummarizer
from cricket_digest.graph.state import DigestState, ReportResult
from cricket_digest.sources import SourceAdapter, build_adapters

logger = structlog.get_logger()


@dataclass
class PipelineComponents:
    """Everything a report run needs, built once per run."""

    adapters: list[SourceAdapter]
    summarizer: ReportSummarizer
    notifier: Notifier
    config: PipelineConfig


def build_components(settings: Settings) -> PipelineComponents:
    """Composition root: construct adapters, summarizer and notifier."""
    cricket_api_key = (
        settings.cricket_api_key.get_secret_value() if settings.cricket_api_key else None
    )
    return PipelineComponents(
        adapters=build_adapters(settings.sources, cricket_api_key=cricket_api_key),
        summarizer=ReportSummarizer.from_settings(settings),
        notifier=EmailNotifier.from_settings(settings),
        config=settings.pipeline,
    )


def route_after_collect(state: DigestState) -> str:
    """Skip summarization entirely when nothing was collected."""
    return "deduplicate" if state.get("articles") else "notify_empty"


def create_graph(
    adapters: Sequence[SourceAdapter],
    summarizer: ReportSummarizer,
    notifier: Notifier,
    config: PipelineConfig | None = None,
):
    """
    Create and compile the digest graph.

    Returns:
        Compiled StateGraph ready for execution
    """
    logger.info("Creating digest graph", source_count=len(adapters))

    builder = StateGraph(DigestState)

    builder.add_node("collect", create_collect_node(adapters))
    builder.add_node("deduplicate", create_deduplicate_node(config))
    builder.add_node("rank", create_rank_node(config))
    builder.add_node("summarize", create_summarize_node(summarizer, config))
    builder.add_node("notify", create_notify_node(notifier))
    builder.add_node("notify_empty", create_notify_empty_node(notifier))

    builder.add_edge(START, "collect")

    # Empty collection short-circuits to the "no news" email
    builder.add_conditional_edges(
        "collect",
        route_after_collect,
        {"deduplicate": "deduplicate", "notify_empty": "notify_empty"},
    )

    builder.add_edge("deduplicate", "rank")
    builder.add_edge("rank", "summarize")
    builder.add_edge("summarize", "notify")

    builder.add_edge("notify", END)
    builder.add_edge("notify_empty", END)

    return builder.compile()


async def send_failure_notice(notifier: Notifier, error: Exception) -> None:
    """Best effort: tell the recipient the run failed. Never raises."""
    try:
        await notifier.send(
            f"Error generating cricket report: {error}\n\nPlease check the system logs.",
            0,
        )
    except Exception as notify_error:
        logger.error("Failed to send error notification", error=str(notify_error))


async def run_pipeline(
    graph,
    notifier: Notifier,
    run_id: str | None = None,
) -> ReportResult:
    """
    Execute the digest pipeline once.

    Args:
        graph: Compiled graph from create_graph()
        notifier: Used for the failure notice if the run blows up
        run_id: Optional unique ID for this run (auto-generated if None)

    Returns:
        ReportResult for the run

    Raises:
        Whatever escaped the graph (delivery failures, bugs), after one
        attempt to email a failure notice.
    """
    if run_id is None:
        timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
        run_id = f"run_{timestamp}_{uuid.uuid4().hex[:8]}"

    run_date = datetime.now(UTC)
    log = logger.bind(run_id=run_id)
    log.info("Starting report run", run_date=run_date.isoformat())

    initial_state: DigestState = {
        "run_id": run_id,
        "run_date": run_date,
    }

    try:
        final_state = await graph.ainvoke(initial_state)
    except Exception as e:
        log.error("Report run failed", error=str(e), error_type=type(e).__name__)
        await send_failure_notice(notifier, e)
        raise

    result = final_state["result"]

    log.info(
        "Report run complete",
        article_count=result.article_count,
        sources=result.sources,
        collection_errors=len(final_state.get("collection_errors", [])),
    )

    return result


async def run_daily_report(settings: Settings) -> ReportResult:
    """
    High-level function: build everything from settings and run once.

    This is what both the CLI and the HTTP handler call.
    """
    components = build_components(settings)
    graph = create_graph(
        components.adapters,
        components.summarizer,
        components.notifier,
        components.config,
    )
    return await run_pipeline(graph, components.notifier)

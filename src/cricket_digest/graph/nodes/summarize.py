"""
Summarize Node - Uses Claude to write the daily cricket report.

This node:
1. Takes the ranked articles
2. Renders them into one text block inside a fixed report template
3. Asks Claude for a sectioned report (headlines, matches, players, ...)
4. Falls back to a plain listing of the top articles if the call fails

LangGraph Integration:
- Input: DigestState with ranked_articles
- Output: {"report": "..."}

The summarization service is treated as unreliable: any error from it
is logged and replaced by fallback_report(), so the run never fails
only because the model is unavailable.
"""

from collections.abc import Sequence

import structlog
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser

from cricket_digest.config import PipelineConfig, Settings
from cricket_digest.graph.state import Article, DigestState

logger = structlog.get_logger()

NO_NEWS_REPORT = "No cricket news found today. Please check the sources manually."


# === Prompt Template ===

REPORT_PROMPT = """You are a cricket expert analyzing today's cricket news. Please create a comprehensive daily cricket report based on the following news articles.

Structure your report with these sections:

1. **TOP HEADLINES** - Most important 3-4 stories
2. **MATCH UPDATES** - Live games, results, upcoming fixtures
3. **PLAYER NEWS** - Transfers, injuries, performances, records
4. **TEAM NEWS** - Squad selections, coaching changes, strategies
5. **TOURNAMENT NEWS** - League updates, points tables, qualifications
6. **OTHER CRICKET NEWS** - General cricket-related news
7. **KEY TAKEAWAYS** - 3-4 bullet points of what cricket fans should know today

Make it engaging and informative for cricket enthusiasts. Focus on the most newsworthy items and provide context where needed.

Here are today's cricket news articles:

{news_content}

Please provide a well-structured, comprehensive report that a cricket fan would find valuable and informative.
"""


def format_articles(articles: Sequence[Article]) -> str:
    """Render articles as the numbered text block embedded in the prompt."""
    blocks = [
        f"{index}. **{article.title}** ({article.source})\n"
        f"Summary: {article.summary}\n"
        f"Link: {article.link}\n"
        f"Time: {article.time or 'N/A'}\n"
        "---"
        for index, article in enumerate(articles, start=1)
    ]
    return "\n\n".join(blocks)


def build_prompt(articles: Sequence[Article]) -> str:
    return REPORT_PROMPT.format(news_content=format_articles(articles))


def fallback_report(articles: Sequence[Article], count: int = 10) -> str:
    """Deterministic report listing the top `count` articles, no model involved."""
    lines = ["# Daily Cricket News Report", "", "## Latest Cricket News", ""]

    for index, article in enumerate(articles[:count], start=1):
        lines.append(f"**{index}. {article.title}**")
        lines.append(f"Source: {article.source}")
        if article.time:
            lines.append(f"Time: {article.time}")
        lines.append(article.summary)
        lines.append(f"[Read more]({article.link})")
        lines.append("")

    return "\n".join(lines)


class ReportSummarizer:
    """
    Turns a list of articles into report text with a chat model.

    Any LangChain chat model works; production uses ChatAnthropic
    (see from_settings), tests use a fake model.
    """

    def __init__(self, llm: BaseChatModel):
        self.llm = llm
        self.chain = llm | StrOutputParser()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReportSummarizer":
        llm = ChatAnthropic(
            model=settings.llm_model,
            api_key=settings.anthropic_api_key.get_secret_value(),
            max_tokens=settings.llm_max_tokens,
        )
        return cls(llm)

    async def generate(self, articles: Sequence[Article]) -> str:
        if not articles:
            return NO_NEWS_REPORT

        report = await self.chain.ainvoke(build_prompt(articles))
        if not report.strip():
            raise ValueError("Model returned an empty report")
        return report


async def summarize(
    state: DigestState,
    summarizer: ReportSummarizer,
    config: PipelineConfig | None = None,
) -> dict:
    """
    LangGraph node: Write the report for the ranked articles.

    Args:
        state: Current graph state with ranked_articles
        summarizer: Report writer built by the composition root
        config: Pipeline settings (fallback article count)

    Returns:
        Partial state update with report
    """
    config = config or PipelineConfig()
    articles = state.get("ranked_articles", [])

    logger.info("Starting summarization", article_count=len(articles))

    try:
        report = await summarizer.generate(articles)
        logger.info("Summarization complete", report_chars=len(report))

    except Exception as e:
        logger.warning(
            "Summarization failed, using fallback report",
            error=str(e),
            error_type=type(e).__name__,
        )
        report = fallback_report(articles, count=config.fallback_article_count)

    return {"report": report}


def create_summarize_node(summarizer: ReportSummarizer, config: PipelineConfig | None = None):
    """
    Factory function to create a summarize node bound to a summarizer.

    Usage:
        builder.add_node("summarize", create_summarize_node(summarizer))
    """

    async def node(state: DigestState) -> dict:
        return await summarize(state, summarizer, config)

    return node

"""
Notify Node - Renders the report and emails it.

This node:
1. Converts the markdown-flavoured report into a simple HTML email
2. Sends it (plus a plain-text alternative) over SMTP
3. Builds the ReportResult returned to the caller

This is the final node before END in the LangGraph. Unlike collection
and summarization, delivery failures are fatal: EmailNotifier raises
NotificationError and the orchestrator reports the run as failed.

LangGraph Integration:
- Input: DigestState with ranked_articles and report
- Output: {"message_id": ..., "result": ReportResult}
"""

import asyncio
import html
import re
import smtplib
from datetime import datetime
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Protocol

import structlog

from cricket_digest.config import Settings
from cricket_digest.graph.state import DigestState, ReportResult

logger = structlog.get_logger()

NO_ARTICLES_MESSAGE = "No cricket news could be retrieved today. Please check the sources manually."


class NotificationError(Exception):
    """Raised when the report could not be delivered."""


class Notifier(Protocol):
    async def send(self, report: str, article_count: int) -> str:
        """Deliver the report and return a delivery id."""
        ...


# === HTML rendering ===

_LINK = re.compile(r"\[([^\]]+)\]\((https?://[^)\s\"'<>]+)\)")
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_BULLET = re.compile(r"^[*-] (.+)$", re.MULTILINE)
_ITALIC = re.compile(r"\*(.+?)\*")
_SUBHEADING = re.compile(r"^###? (.*)$", re.MULTILINE)
_HEADING = re.compile(r"^# (.*)$", re.MULTILINE)

HEADING_STYLE = "color: #1e3c72; margin-top: 25px; margin-bottom: 15px;"


def format_report_date(moment: datetime) -> str:
    """e.g. "Monday, January 5, 2026"."""
    return f"{moment:%A, %B} {moment.day}, {moment.year}"


def markdown_to_html(report: str) -> str:
    """Convert the small markdown subset the model produces into HTML."""
    # Quotes are escaped too, so a link URL cannot close its href attribute
    text = html.escape(report.strip())
    text = _LINK.sub(r'<a href="\2">\1</a>', text)
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    text = _BULLET.sub(r"&bull; \1", text)
    text = _ITALIC.sub(r"<em>\1</em>", text)
    text = _SUBHEADING.sub(rf'<h3 style="{HEADING_STYLE}">\1</h3>', text)
    text = _HEADING.sub(rf'<h2 style="{HEADING_STYLE}">\1</h2>', text)

    blocks = []
    for block in re.split(r"\n\s*\n", text):
        block = block.strip()
        if not block:
            continue
        if block.startswith("<h") and "\n" not in block:
            blocks.append(block)
        else:
            blocks.append('<p style="margin: 15px 0;">' + block.replace("\n", "<br>\n") + "</p>")

    return "\n".join(blocks)


def render_report_html(report: str, article_count: int, generated_at: datetime) -> str:
    today = format_report_date(generated_at)
    return f"""\
<div style="font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto;">
  <header style="background: linear-gradient(135deg, #1e3c72, #2a5298); color: white; padding: 20px; text-align: center;">
    <h1>&#127951; Daily Cricket News Report</h1>
    <p style="margin: 5px 0;">{today}</p>
    <p style="margin: 5px 0; opacity: 0.9;">Found {article_count} cricket stories today</p>
  </header>
  <div style="background-color: #f8f9fa; padding: 30px; line-height: 1.6;">
    <div style="background: white; padding: 25px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1);">
{markdown_to_html(report)}
    </div>
  </div>
  <footer style="background-color: #333; color: white; padding: 20px; text-align: center;">
    <p style="margin: 5px 0;"><small>Generated by Cricket Digest | {generated_at:%H:%M:%S}</small></p>
  </footer>
</div>
"""


# === Email delivery ===


class EmailNotifier:
    """Sends reports over SMTP-over-SSL (Gmail by default)."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        recipient: str,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.recipient = recipient
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailNotifier":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.email_user,
            password=settings.email_password.get_secret_value(),
            sender=settings.email_user,
            recipient=settings.report_recipient_email,
            timeout=settings.smtp_timeout,
        )

    def build_message(self, report: str, article_count: int, generated_at: datetime) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = f"\N{CRICKET BAT AND BALL} Daily Cricket News Report - {format_report_date(generated_at)}"
        message["From"] = self.sender
        message["To"] = self.recipient
        message["Message-ID"] = make_msgid(domain=self.sender.rpartition("@")[2] or None)
        message.set_content(report)
        message.add_alternative(render_report_html(report, article_count, generated_at), subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
            server.login(self.username, self.password)
            server.send_message(message)

    async def send(self, report: str, article_count: int) -> str:
        message = self.build_message(report, article_count, datetime.now())

        try:
            # smtplib blocks, keep it off the event loop
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email delivery failed", error=str(e), error_type=type(e).__name__)
            raise NotificationError(f"Failed to send report: {e}") from e

        logger.info("Report sent", message_id=message["Message-ID"], recipient=self.recipient)
        return message["Message-ID"]


# === Nodes ===


def distinct_sources(state: DigestState) -> list[str]:
    """Source names of the ranked articles, in first-seen order."""
    return list(dict.fromkeys(article.source for article in state.get("ranked_articles", [])))


async def notify(state: DigestState, notifier: Notifier) -> dict:
    """
    LangGraph node: Send the report.

    Args:
        state: Graph state with ranked_articles and report
        notifier: Delivery channel built by the composition root

    Returns:
        Partial state update with message_id and result

    Raises:
        NotificationError: If delivery fails (fatal)
    """
    articles = state.get("ranked_articles", [])
    report = state.get("report", "")

    logger.info("Sending report", article_count=len(articles), report_chars=len(report))
    message_id = await notifier.send(report, len(articles))

    result = ReportResult(
        success=True,
        article_count=len(articles),
        sources=distinct_sources(state),
        message="Report sent successfully",
    )
    return {"message_id": message_id, "result": result}


async def notify_empty(state: DigestState, notifier: Notifier) -> dict:
    """
    LangGraph node: Tell the recipient nothing could be collected.

    Runs instead of deduplicate/rank/summarize when collection produced
    zero articles.
    """
    logger.warning(
        "No articles found, sending notification",
        collection_errors=len(state.get("collection_errors", [])),
    )
    message_id = await notifier.send(NO_ARTICLES_MESSAGE, 0)

    result = ReportResult(
        success=True,
        article_count=0,
        sources=[],
        message="No articles found",
    )
    return {"message_id": message_id, "result": result}


def create_notify_node(notifier: Notifier):
    async def node(state: DigestState) -> dict:
        return await notify(state, notifier)

    return node


def create_notify_empty_node(notifier: Notifier):
    async def node(state: DigestState) -> dict:
        return await notify_empty(state, notifier)

    return node

"""
Browser source - renders a listing page in headless Chromium before parsing.

Some sites (ESPNCricinfo) build their news listing client-side, so the
raw HTML an httpx GET returns has no article cards. This adapter loads
the page with Playwright, waits for the card selector, and hands the
rendered HTML to the same selector parsing HtmlSource uses.

Needs a Chromium build: `playwright install chromium`. A missing browser
surfaces as an ordinary source failure.
"""

import httpx
import structlog
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from cricket_digest.models import Article
from cricket_digest.sources.html import HtmlSource

logger = structlog.get_logger()

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]

NAVIGATION_TIMEOUT_MS = 30_000
SELECTOR_TIMEOUT_MS = 10_000


class BrowserSource(HtmlSource):
    """HtmlSource for pages that only render their listing in a browser."""

    async def render(self) -> str:
        """Load the page in headless Chromium and return the rendered HTML."""
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=True, args=LAUNCH_ARGS)
            try:
                page = await browser.new_page(user_agent=USER_AGENT)
                await page.goto(
                    self.config.url,
                    wait_until="networkidle",
                    timeout=NAVIGATION_TIMEOUT_MS,
                )

                try:
                    await page.wait_for_selector(self.selectors.articles, timeout=SELECTOR_TIMEOUT_MS)
                except PlaywrightTimeoutError:
                    # Parse whatever rendered; no cards just means no articles
                    logger.warning(
                        "Article selector never appeared",
                        source=self.name,
                        selector=self.selectors.articles,
                    )

                return await page.content()
            finally:
                await browser.close()

    async def fetch(self, client: httpx.AsyncClient) -> list[Article]:
        return self.parse(await self.render())

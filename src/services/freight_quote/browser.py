from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from playwright.async_api import BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from common.config import Config, config
from common.logging import get_logger

logger = get_logger(__name__)


@dataclass
class BrowserSession:
    """The browser context and page owned by one quote run."""

    context: BrowserContext
    page: Page


class BrowserFactory:
    """
    Launches an isolated Chromium instance per quote run.

    Example:
        async with BrowserFactory().open() as session:
            await session.page.goto(url)
    """

    def __init__(self, settings: Config | None = None):
        self.settings = settings or config

    @asynccontextmanager
    async def open(self) -> AsyncIterator[BrowserSession]:
        settings = self.settings
        async with async_playwright() as p:
            browser = await p.chromium.launch(
                headless=settings.freight_headless,
                args=settings.freight_browser_args,
            )
            try:
                context = await browser.new_context(
                    user_agent=settings.freight_user_agent,
                    viewport={"width": settings.freight_viewport_width, "height": settings.freight_viewport_height},
                    locale="en-US",
                )
                page = await context.new_page()
                logger.debug(f"Browser launched (headless={settings.freight_headless})")
                try:
                    yield BrowserSession(context=context, page=page)
                finally:
                    await _close(page)
                    await _close(context)
            finally:
                await _close(browser)
                logger.debug("Browser closed")


async def _close(target) -> None:
    # A crashed browser takes its pages and contexts with it
    try:
        await target.close()
    except PlaywrightError as e:
        logger.warning(f"Closing {type(target).__name__} failed: {e}")

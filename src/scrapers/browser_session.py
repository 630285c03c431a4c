# src/scrapers/browser_session.py

"""Process-wide headless browser shared by rendered-fetch tasks."""

import asyncio
import importlib
import logging
from types import ModuleType
from typing import Any

from src.config.settings import Settings

logger = logging.getLogger("price_scout.browser")


def _get_async_playwright() -> ModuleType:
    """Import playwright's async API lazily."""
    return importlib.import_module("playwright.async_api")


class BrowserSession:
    """Lazily launched Chromium instance with explicit teardown.

    The first ``acquire()`` starts Playwright and launches the browser;
    later callers reuse it. Pages opened concurrently against the one
    browser are independent.
    """

    def __init__(self) -> None:
        self._playwright: Any = None
        self._browser: Any = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        """True once the browser has been launched and not yet closed."""
        return self._browser is not None

    async def acquire(self) -> Any:
        """Return the shared browser, launching it on first use."""
        if self._browser is not None:
            return self._browser
        async with self._lock:
            if self._browser is None:
                api = _get_async_playwright()
                self._playwright = await api.async_playwright().start()
                try:
                    self._browser = await self._playwright.chromium.launch(
                        headless=True,
                        args=Settings.BROWSER_ARGS,
                    )
                except Exception:
                    # The driver must not outlive a failed launch
                    logger.warning("Headless browser launch failed")
                    await self._playwright.stop()
                    self._playwright = None
                    raise
                logger.info("Headless browser launched")
        return self._browser

    async def new_page(self, user_agent: str) -> Any:
        """Open a page in a fresh context with the given user agent."""
        browser = await self.acquire()
        context = await browser.new_context(
            user_agent=user_agent,
            viewport=Settings.VIEWPORT,
        )
        return await context.new_page()

    async def close(self) -> None:
        """Close the browser and stop Playwright; safe to call twice."""
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                finally:
                    self._browser = None
                    logger.info("Headless browser closed")
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                finally:
                    self._playwright = None


_shared_session: BrowserSession | None = None


def get_browser_session() -> BrowserSession:
    """Return the process-wide browser session (created on first call)."""
    global _shared_session
    if _shared_session is None:
        _shared_session = BrowserSession()
    return _shared_session


async def close_browser_session() -> None:
    """Release the shared browser, if one was ever launched."""
    global _shared_session
    if _shared_session is None:
        return
    await _shared_session.close()
    _shared_session = None

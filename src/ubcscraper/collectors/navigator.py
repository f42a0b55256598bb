"""
Browser access for the scraper.

PageNavigator owns one Chromium context and hands out one tab per page fetch.
Every tab blocks images, stylesheets and fonts, since only the DOM is needed.
"""

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Iterator, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..core.config import Settings, get_settings
from ..core.exceptions import ExtractionMiss, NavigationFailure
from .locators import BLOCKED_RESOURCE_TYPES

logger = logging.getLogger(__name__)

# Reduce CPU load of headless Chromium
LAUNCH_ARGS = [
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--disable-gpu",
]


async def block_assets(route) -> None:
    """Route handler: abort asset sub-requests, let everything else through."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


@contextmanager
def dom_errors(scope: Any, url: Optional[str] = None) -> Iterator[None]:
    """Re-raise Playwright errors from DOM calls as NavigationFailure."""
    try:
        yield
    except PlaywrightError as e:
        raise NavigationFailure(url or getattr(scope, "url", None), str(e)) from e


class PageHandle:
    """An open tab and the URL it was opened for"""

    def __init__(self, page: Any, url: str):
        self.page = page
        self.url = url
        self.closed = False

    async def query_selector(self, selector: str):
        return await self.page.query_selector(selector)

    async def query_selector_all(self, selector: str):
        return await self.page.query_selector_all(selector)

    def __repr__(self):
        return f"<PageHandle(url='{self.url}', closed={self.closed})>"


class PageNavigator:
    """Opens tabs in a shared browser context and queries their DOM"""

    def __init__(self, settings: Optional[Settings] = None, context: Any = None):
        self.settings = settings or get_settings()
        self._context = context
        self._owns_context = context is None
        self._playwright = None
        self._browser = None
        self.open_pages = 0
        self.pages_opened = 0

    async def start(self) -> "PageNavigator":
        if self._context is not None:
            return self

        self._playwright = await async_playwright().start()
        chromium = self._playwright.chromium

        if self.settings.user_data_dir:
            # Persistent profile keeps the HTTP cache between runs
            self._context = await chromium.launch_persistent_context(
                str(self.settings.user_data_dir),
                headless=self.settings.headless,
                args=LAUNCH_ARGS,
            )
        else:
            self._browser = await chromium.launch(
                headless=self.settings.headless, args=LAUNCH_ARGS
            )
            self._context = await self._browser.new_context()

        logger.info(f"Browser started (headless={self.settings.headless})")
        return self

    async def stop(self) -> None:
        if self._owns_context and self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "PageNavigator":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    async def open(self, url: str) -> PageHandle:
        """Open a new tab on `url`. Raises NavigationFailure if it does not load."""
        if self._context is None:
            raise RuntimeError("PageNavigator.start() must be called before open()")

        try:
            page = await self._context.new_page()
        except PlaywrightError as e:
            raise NavigationFailure(url, str(e)) from e

        handle = PageHandle(page, url)
        self.open_pages += 1
        self.pages_opened += 1

        try:
            await page.route("**/*", block_assets)
            response = await page.goto(url, timeout=self.settings.navigation_timeout_ms)
        except PlaywrightError as e:
            await self.close(handle)
            raise NavigationFailure(url, str(e)) from e
        except BaseException:
            # cancelled mid-navigation
            await self.close(handle)
            raise

        if response is not None and not response.ok:
            await self.close(handle)
            raise NavigationFailure(url, f"HTTP {response.status}")

        logger.debug(f"Opened {url}")
        return handle

    async def close(self, handle: PageHandle) -> None:
        if handle.closed:
            return
        handle.closed = True
        self.open_pages -= 1
        await handle.page.close()

    @asynccontextmanager
    async def page(self, url: str) -> AsyncIterator[PageHandle]:
        """`async with navigator.page(url) as page:` closes the tab on every exit path."""
        handle = await self.open(url)
        try:
            yield handle
        finally:
            await self.close(handle)

    # ------------------------------------------------------------------
    # DOM queries (scope is a PageHandle or an element handle)
    # ------------------------------------------------------------------

    async def query_one(self, scope: Any, selector: str):
        with dom_errors(scope):
            return await scope.query_selector(selector)

    async def query_all(self, scope: Any, selector: str) -> List[Any]:
        with dom_errors(scope):
            return list(await scope.query_selector_all(selector))

    async def inner_text(
        self, scope: Any, selector: str, optional: bool = False
    ) -> Optional[str]:
        element = await self.query_one(scope, selector)
        if element is None:
            if optional:
                return None
            raise ExtractionMiss(selector, getattr(scope, "url", None))
        return await self.element_text(element, getattr(scope, "url", None))

    async def attribute(
        self, scope: Any, selector: str, name: str, optional: bool = False
    ) -> Optional[str]:
        element = await self.query_one(scope, selector)
        if element is None:
            if optional:
                return None
            raise ExtractionMiss(selector, getattr(scope, "url", None))
        return await self.element_attribute(element, name, getattr(scope, "url", None))

    async def element_text(self, element: Any, url: Optional[str] = None) -> str:
        with dom_errors(element, url):
            return (await element.inner_text()).strip()

    async def element_attribute(
        self, element: Any, name: str, url: Optional[str] = None
    ) -> Optional[str]:
        with dom_errors(element, url):
            return await element.get_attribute(name)

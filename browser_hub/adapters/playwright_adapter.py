"""
Multi-Browser Adapter

Drives Chromium, Firefox or WebKit through Playwright's async API. One
adapter owns one Playwright runtime, one browser, one context and one page.
"""

import logging
from typing import Any, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

from browser_hub.adapters.base import run_teardown
from browser_hub.errors import InitializationError, NotInitializedError
from browser_hub.types import (
    BackendKind,
    BrowserConfig,
    BrowserKind,
    NavigationOptions,
    ScreenshotOptions,
    WaitCondition,
)

logger = logging.getLogger(__name__)

# Playwright has a single network-idle state; both idle variants map onto it.
PLAYWRIGHT_WAIT_STATES = {
    WaitCondition.LOAD: "load",
    WaitCondition.DOM_CONTENT_LOADED: "domcontentloaded",
    WaitCondition.NETWORK_IDLE_0: "networkidle",
    WaitCondition.NETWORK_IDLE_2: "networkidle",
}

BROWSER_TYPES = {
    BrowserKind.CHROMIUM: "chromium",
    BrowserKind.CHROME: "chromium",
    BrowserKind.FIREFOX: "firefox",
    BrowserKind.WEBKIT: "webkit",
}


def goto_kwargs(options: Optional[NavigationOptions]) -> Dict[str, Any]:
    """Translate navigation options into ``page.goto`` keyword arguments."""
    if options is None:
        return {}
    kwargs: Dict[str, Any] = {}
    if options.wait_until is not None:
        kwargs["wait_until"] = PLAYWRIGHT_WAIT_STATES[options.wait_until]
    if options.timeout is not None:
        kwargs["timeout"] = options.timeout
    return kwargs


def screenshot_kwargs(options: Optional[ScreenshotOptions]) -> Dict[str, Any]:
    """Translate screenshot options into ``page.screenshot`` keyword arguments."""
    if options is None:
        return {}
    kwargs: Dict[str, Any] = {"full_page": options.full_page}
    if options.path:
        kwargs["path"] = options.path
    if options.clip is not None:
        kwargs["clip"] = options.clip.to_dict()
    return kwargs


class PlaywrightAdapter:
    """
    Multi-browser backend built on Playwright.

    ``chrome`` is served by Playwright's bundled Chromium; ``edge`` and
    ``safari`` are rejected.
    """

    kind = BackendKind.MULTI_BROWSER

    def __init__(self):
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.config: Optional[BrowserConfig] = None

    @property
    def is_initialized(self) -> bool:
        return self.page is not None

    async def initialize(self, config: BrowserConfig) -> None:
        """
        Launch the browser and open a context and page.

        Args:
            config: Browser launch configuration

        Raises:
            InitializationError: If the browser kind is unsupported, the
                adapter already has a session, or the launch fails
        """
        if self.is_initialized:
            raise InitializationError(f"{self.kind} adapter already has an active session")

        browser_type = BROWSER_TYPES.get(config.browser)
        if browser_type is None:
            raise InitializationError(f"Unsupported browser for {self.kind}: {config.browser}")

        self.config = config
        try:
            self.playwright = await async_playwright().start()
            self.browser = await getattr(self.playwright, browser_type).launch(
                headless=config.headless,
                slow_mo=config.slow_mo,
            )

            context_options: Dict[str, Any] = {}
            if config.viewport is not None:
                context_options["viewport"] = config.viewport.to_dict()
            if config.user_agent:
                context_options["user_agent"] = config.user_agent
            self.context = await self.browser.new_context(**context_options)
            if config.timeout is not None:
                self.context.set_default_timeout(config.timeout)

            self.page = await self.context.new_page()
        except Exception as e:
            await self._discard_partial_session()
            raise InitializationError(f"Failed to launch {config.browser} via Playwright: {e}") from e

        logger.info(f"Launched {browser_type} (headless={config.headless})")

    def _require_page(self) -> Page:
        if self.page is None:
            raise NotInitializedError(str(self.kind), "page not initialized")
        return self.page

    async def navigate(self, url: str, options: Optional[NavigationOptions] = None) -> None:
        page = self._require_page()
        await page.goto(url, **goto_kwargs(options))

    async def click(self, target: str) -> None:
        page = self._require_page()
        await page.click(target)

    async def type(self, target: str, text: str) -> None:
        page = self._require_page()
        await page.fill(target, text)

    async def screenshot(self, options: Optional[ScreenshotOptions] = None) -> bytes:
        page = self._require_page()
        return await page.screenshot(**screenshot_kwargs(options))

    async def get_title(self) -> str:
        page = self._require_page()
        return await page.title()

    async def evaluate(self, script: str) -> Any:
        page = self._require_page()
        return await page.evaluate(script)

    async def close(self) -> None:
        """Close page, context, browser and the Playwright runtime."""
        steps = [
            ("page", self.page.close if self.page else None),
            ("context", self.context.close if self.context else None),
            ("browser", self.browser.close if self.browser else None),
            ("playwright", self.playwright.stop if self.playwright else None),
        ]
        self.page = None
        self.context = None
        self.browser = None
        self.playwright = None
        await run_teardown(str(self.kind), steps)

    async def _discard_partial_session(self) -> None:
        try:
            await self.close()
        except Exception as e:
            logger.debug(f"Ignoring teardown error after failed launch: {e}")

    async def __aenter__(self) -> "PlaywrightAdapter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

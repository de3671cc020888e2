"""
Headless Chromium Adapter

Chromium-only backend tuned for unattended runs: container-friendly launch
flags, optional anti-fingerprinting via playwright-stealth, and request
interception on demand.
"""

import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Route,
    async_playwright,
)
from playwright_stealth import Stealth

from browser_hub.adapters.base import run_teardown
from browser_hub.adapters.playwright_adapter import goto_kwargs, screenshot_kwargs
from browser_hub.errors import InitializationError, NotInitializedError
from browser_hub.types import (
    BackendKind,
    BrowserConfig,
    BrowserKind,
    NavigationOptions,
    ScreenshotOptions,
)

logger = logging.getLogger(__name__)

SUPPORTED_BROWSERS = {BrowserKind.CHROMIUM, BrowserKind.CHROME}

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
]

INTERCEPT_PATTERN = "**/*"


async def _pass_through(route: Route) -> None:
    await route.continue_()


class ChromiumAdapter:
    """Headless Chromium backend."""

    kind = BackendKind.HEADLESS_CHROMIUM

    def __init__(self):
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.use_stealth = False
        self.intercepting = False

    @property
    def is_initialized(self) -> bool:
        return self.page is not None

    def _launch_args(self, config: BrowserConfig) -> List[str]:
        args = list(CHROMIUM_ARGS)
        if config.user_agent:
            args.append(f"--user-agent={config.user_agent}")
        return args

    async def initialize(self, config: BrowserConfig) -> None:
        """
        Launch Chromium and open a context and page.

        Without an explicit viewport the page follows the window size.
        """
        if self.is_initialized:
            raise InitializationError(f"{self.kind} adapter already has an active session")
        if config.browser not in SUPPORTED_BROWSERS:
            raise InitializationError(f"Unsupported browser for {self.kind}: {config.browser}")

        self.use_stealth = config.stealth
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=config.headless,
                slow_mo=config.slow_mo,
                args=self._launch_args(config),
            )

            context_options: Dict[str, Any] = {}
            if config.viewport is not None:
                context_options["viewport"] = config.viewport.to_dict()
            else:
                context_options["no_viewport"] = True
            if config.user_agent:
                context_options["user_agent"] = config.user_agent
            self.context = await self.browser.new_context(**context_options)
            if config.timeout is not None:
                self.context.set_default_timeout(config.timeout)

            self.page = await self.context.new_page()
            if self.use_stealth:
                await Stealth().apply_stealth_async(self.page)
        except Exception as e:
            await self._discard_partial_session()
            raise InitializationError(f"Failed to launch headless Chromium: {e}") from e

        logger.info(f"Launched headless Chromium (stealth={self.use_stealth})")

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
        # Key-by-key input, unlike fill(), so keyboard listeners fire.
        page = self._require_page()
        await page.type(target, text)

    async def screenshot(self, options: Optional[ScreenshotOptions] = None) -> bytes:
        page = self._require_page()
        return bytes(await page.screenshot(**screenshot_kwargs(options)))

    async def get_title(self) -> str:
        page = self._require_page()
        return await page.title()

    async def evaluate(self, script: str) -> Any:
        page = self._require_page()
        return await page.evaluate(script)

    async def wait_for_selector(self, selector: str, timeout: Optional[int] = None) -> None:
        page = self._require_page()
        await page.wait_for_selector(selector, timeout=timeout)

    async def intercept_network(self, enable: bool = True) -> None:
        """
        Turn request interception on or off.

        While enabled every request is routed through a handler that lets it
        continue unchanged.
        """
        page = self._require_page()
        if enable and not self.intercepting:
            await page.route(INTERCEPT_PATTERN, _pass_through)
        elif not enable and self.intercepting:
            await page.unroute(INTERCEPT_PATTERN, _pass_through)
        self.intercepting = enable

    async def close(self) -> None:
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
        self.intercepting = False
        await run_teardown(str(self.kind), steps)

    async def _discard_partial_session(self) -> None:
        try:
            await self.close()
        except Exception as e:
            logger.debug(f"Ignoring teardown error after failed launch: {e}")

    async def __aenter__(self) -> "ChromiumAdapter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

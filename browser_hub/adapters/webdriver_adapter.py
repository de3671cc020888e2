"""
W3C WebDriver Adapter

Protocol-driver backend built on Selenium. Selenium's client is blocking, so
every driver call runs in a worker thread via ``asyncio.to_thread``.
Elements are addressed with structured locators instead of selector strings.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from selenium import webdriver
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.common.by import By
from selenium.webdriver.edge.options import Options as EdgeOptions
from selenium.webdriver.firefox.options import Options as FirefoxOptions
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from browser_hub.adapters.base import run_teardown
from browser_hub.errors import (
    InitializationError,
    LocatorError,
    NotInitializedError,
    UnsupportedOptionError,
)
from browser_hub.types import (
    BackendKind,
    BrowserConfig,
    BrowserKind,
    ElementLocator,
    NavigationOptions,
    ScreenshotOptions,
    WaitCondition,
)

logger = logging.getLogger(__name__)

LocatorInput = Union[ElementLocator, dict, str]

# get() blocks until document.readyState is complete under the default
# page-load strategy, which also covers DOM-ready.
BLOCKING_WAIT_CONDITIONS = {WaitCondition.LOAD, WaitCondition.DOM_CONTENT_LOADED}


def resolve_locator(locator: LocatorInput) -> Tuple[str, str]:
    """
    Pick the Selenium strategy for a locator.

    Args:
        locator: ElementLocator, mapping or css string

    Returns:
        (By strategy, value) for the first non-empty field in the order
        css, xpath, id, name

    Raises:
        LocatorError: If every field is empty
    """
    locator = ElementLocator.from_value(locator)
    if locator.css:
        return By.CSS_SELECTOR, locator.css
    if locator.xpath:
        return By.XPATH, locator.xpath
    if locator.id:
        return By.ID, locator.id
    if locator.name:
        return By.NAME, locator.name
    raise LocatorError("No valid locator provided (expected css, xpath, id or name)")


def _build_chrome(config: BrowserConfig) -> WebDriver:
    options = ChromeOptions()
    if config.headless:
        options.add_argument("--headless=new")
    if config.user_agent:
        options.add_argument(f"user-agent={config.user_agent}")
    return webdriver.Chrome(options=options)


def _build_firefox(config: BrowserConfig) -> WebDriver:
    options = FirefoxOptions()
    if config.headless:
        options.add_argument("-headless")
    if config.user_agent:
        options.set_preference("general.useragent.override", config.user_agent)
    return webdriver.Firefox(options=options)


def _build_edge(config: BrowserConfig) -> WebDriver:
    options = EdgeOptions()
    if config.headless:
        options.add_argument("--headless=new")
    if config.user_agent:
        options.add_argument(f"user-agent={config.user_agent}")
    return webdriver.Edge(options=options)


DRIVER_BUILDERS = {
    BrowserKind.CHROME: _build_chrome,
    BrowserKind.CHROMIUM: _build_chrome,
    BrowserKind.FIREFOX: _build_firefox,
    BrowserKind.EDGE: _build_edge,
}


class WebDriverAdapter:
    """
    Selenium-backed protocol driver.

    The WebDriver session is the browser process, its window and its current
    document at once, so the session has a single teardown step.
    """

    kind = BackendKind.PROTOCOL_DRIVER

    def __init__(self):
        self.driver: Optional[WebDriver] = None

    @property
    def is_initialized(self) -> bool:
        return self.driver is not None

    async def initialize(self, config: BrowserConfig) -> None:
        if self.is_initialized:
            raise InitializationError(f"{self.kind} adapter already has an active session")

        builder = DRIVER_BUILDERS.get(config.browser)
        if builder is None:
            raise InitializationError(f"Unsupported browser for {self.kind}: {config.browser}")

        try:
            self.driver = await asyncio.to_thread(builder, config)
            if config.viewport is not None:
                await asyncio.to_thread(
                    self.driver.set_window_rect,
                    x=0,
                    y=0,
                    width=config.viewport.width,
                    height=config.viewport.height,
                )
            if config.timeout:
                await asyncio.to_thread(self.driver.implicitly_wait, config.timeout / 1000)
        except Exception as e:
            await self._discard_partial_session()
            raise InitializationError(f"Failed to start WebDriver for {config.browser}: {e}") from e

        logger.info(f"Started WebDriver session for {config.browser}")

    def _require_driver(self) -> WebDriver:
        if self.driver is None:
            raise NotInitializedError(str(self.kind), "driver not initialized")
        return self.driver

    async def navigate(self, url: str, options: Optional[NavigationOptions] = None) -> None:
        driver = self._require_driver()
        if options is not None and options.wait_until is not None:
            if options.wait_until not in BLOCKING_WAIT_CONDITIONS:
                raise UnsupportedOptionError(
                    f"{self.kind} cannot wait for '{options.wait_until.value}'; "
                    f"supported: load, domcontentloaded"
                )

        if options is None or options.timeout is None:
            await asyncio.to_thread(driver.get, url)
            return

        previous = await asyncio.to_thread(lambda: driver.timeouts.page_load)
        await asyncio.to_thread(driver.set_page_load_timeout, options.timeout / 1000)
        try:
            await asyncio.to_thread(driver.get, url)
        finally:
            await asyncio.to_thread(driver.set_page_load_timeout, previous)

    async def find_element(self, locator: LocatorInput) -> WebElement:
        driver = self._require_driver()
        by, value = resolve_locator(locator)
        return await asyncio.to_thread(driver.find_element, by, value)

    async def click(self, target: LocatorInput) -> None:
        element = await self.find_element(target)
        await asyncio.to_thread(element.click)

    async def type(self, target: LocatorInput, text: str) -> None:
        element = await self.find_element(target)
        await asyncio.to_thread(element.send_keys, text)

    async def get_text(self, locator: LocatorInput) -> str:
        element = await self.find_element(locator)
        return await asyncio.to_thread(lambda: element.text)

    async def describe_element(self, locator: LocatorInput) -> Dict[str, Any]:
        """
        Find an element and return a plain summary of it.

        Returns:
            Dictionary with the locator used, tag name, visible text and
            whether the element is displayed
        """
        element = await self.find_element(locator)

        def _read():
            return {
                "found": ElementLocator.from_value(locator).describe(),
                "tagName": element.tag_name,
                "text": element.text,
                "displayed": element.is_displayed(),
            }

        return await asyncio.to_thread(_read)

    async def wait_for_element(self, locator: LocatorInput, timeout: int = 10000) -> None:
        """
        Block until the element is present in the DOM.

        Args:
            locator: Element locator
            timeout: Milliseconds to wait before selenium raises TimeoutException
        """
        driver = self._require_driver()
        by, value = resolve_locator(locator)
        wait = WebDriverWait(driver, timeout / 1000)
        await asyncio.to_thread(wait.until, EC.presence_of_element_located((by, value)))

    async def evaluate(self, script: str, *args: Any) -> Any:
        driver = self._require_driver()
        return await asyncio.to_thread(driver.execute_script, script, *args)

    async def screenshot(self, options: Optional[ScreenshotOptions] = None) -> bytes:
        """
        Capture the viewport as PNG bytes.

        WebDriver only captures the visible viewport, so full-page and clip
        requests are rejected.
        """
        driver = self._require_driver()
        if options is not None and (options.full_page or options.clip is not None):
            raise UnsupportedOptionError(f"{self.kind} screenshots support neither full_page nor clip")

        image = await asyncio.to_thread(driver.get_screenshot_as_png)
        if options is not None and options.path:
            Path(options.path).write_bytes(image)
        return image

    async def get_title(self) -> str:
        driver = self._require_driver()
        return await asyncio.to_thread(lambda: driver.title)

    async def close(self) -> None:
        driver = self.driver
        self.driver = None
        await run_teardown(
            str(self.kind),
            [("driver", (lambda: asyncio.to_thread(driver.quit)) if driver else None)],
        )

    async def _discard_partial_session(self) -> None:
        try:
            await self.close()
        except Exception as e:
            logger.debug(f"Ignoring teardown error after failed start: {e}")

    async def __aenter__(self) -> "WebDriverAdapter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

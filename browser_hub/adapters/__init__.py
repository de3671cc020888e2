"""
Backend adapters.

This package contains one adapter per backend kind, all exposing the same
capability interface.
"""

from typing import Union

from browser_hub.types import BackendKind

from .base import BrowserAdapter
from .chromium_adapter import ChromiumAdapter
from .playwright_adapter import PlaywrightAdapter
from .webdriver_adapter import WebDriverAdapter

ADAPTER_CLASSES = {
    BackendKind.MULTI_BROWSER: PlaywrightAdapter,
    BackendKind.HEADLESS_CHROMIUM: ChromiumAdapter,
    BackendKind.PROTOCOL_DRIVER: WebDriverAdapter,
}


def create_adapter(kind: Union[BackendKind, str]) -> BrowserAdapter:
    """Build a fresh, uninitialized adapter for a backend kind."""
    return ADAPTER_CLASSES[BackendKind.parse(kind)]()


__all__ = [
    'BrowserAdapter',
    'PlaywrightAdapter',
    'ChromiumAdapter',
    'WebDriverAdapter',
    'ADAPTER_CLASSES',
    'create_adapter',
]

"""
Test configuration and fixtures

This module contains shared pytest fixtures and configuration
for all tests in the test suite.
"""

import asyncio
import os
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from browser_hub.errors import NotInitializedError  # noqa: E402
from browser_hub.utils.audit_recorder import AuditRecorder  # noqa: E402


@pytest.fixture(autouse=True)
def reset_environment():
    """
    Reset environment variables before each test to ensure isolation.
    This fixture runs automatically for all tests.
    """
    original_env = os.environ.copy()
    yield
    # Restore original environment after test
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_env_vars():
    """
    Provide standard environment variables for testing.
    """
    return {
        'BROWSER_BACKEND': 'multi-browser',
        'BROWSER_KIND': 'chromium',
        'BROWSER_HEADLESS': 'true',
        'BROWSER_SLOW_MO': '50',
        'BROWSER_TIMEOUT': '30000',
        'BROWSER_VIEWPORT': '1280x720',
        'BROWSER_USER_AGENT': 'browser-hub-test',
        'BROWSER_STEALTH': 'false',
        'MEMORY_CONTEXT_ID': 'ctx-1',
        'MEMORY_API_KEY': 'test_memory_key',
        'MEMORY_BASE_URL': 'https://memory.example.com/api/',
    }


@pytest.fixture
def audit():
    """In-memory audit recorder that writes no files and no console lines."""
    return AuditRecorder(log_dir=None, console=False)


class FakeAdapter:
    """
    Adapter double that records calls instead of driving a browser.

    Tracks how many actions run at once so tests can check serialization.
    """

    def __init__(self, kind, fail_init=None, fail_close=None, action_delay=0.0):
        self.kind = kind
        self.fail_init = fail_init
        self.fail_close = fail_close
        self.action_delay = action_delay
        self.config = None
        self.initialized = False
        self.calls = []
        self.close_calls = 0
        self.running = 0
        self.max_running = 0

    @property
    def is_initialized(self):
        return self.initialized

    async def initialize(self, config):
        if self.fail_init is not None:
            raise self.fail_init
        self.config = config
        self.initialized = True

    async def _act(self, name, *args):
        if not self.initialized:
            raise NotInitializedError(str(self.kind))
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            if self.action_delay:
                await asyncio.sleep(self.action_delay)
            self.calls.append((name,) + args)
        finally:
            self.running -= 1

    async def navigate(self, url, options=None):
        await self._act('navigate', url, options)

    async def click(self, target):
        await self._act('click', target)

    async def type(self, target, text):
        await self._act('type', target, text)

    async def screenshot(self, options=None):
        await self._act('screenshot', options)
        return b'\x89PNG fake'

    async def get_title(self):
        await self._act('get_title')
        return 'Fake Title'

    async def evaluate(self, script):
        await self._act('evaluate', script)
        return None

    async def describe_element(self, locator):
        await self._act('describe_element', locator)
        return {'found': locator.describe()}

    async def close(self):
        self.close_calls += 1
        self.initialized = False
        if self.fail_close is not None:
            raise self.fail_close


class FakeAdapterFactory:
    """Adapter factory handing out FakeAdapters, with per-kind failure switches."""

    def __init__(self):
        self.created = []
        self.fail_init = {}
        self.fail_close = {}
        self.action_delay = 0.0

    def __call__(self, kind):
        adapter = FakeAdapter(
            kind,
            fail_init=self.fail_init.get(kind),
            fail_close=self.fail_close.get(kind),
            action_delay=self.action_delay,
        )
        self.created.append(adapter)
        return adapter


@pytest.fixture
def fake_factory():
    return FakeAdapterFactory()


def _async_page():
    page = MagicMock()
    for name in ('goto', 'click', 'fill', 'type', 'screenshot', 'title', 'evaluate',
                 'close', 'wait_for_selector', 'route', 'unroute'):
        setattr(page, name, AsyncMock())
    page.screenshot.return_value = b'\x89PNG\r\n'
    page.title.return_value = 'Example Domain'
    page.evaluate.return_value = 42
    return page


@pytest.fixture
def playwright_stack():
    """
    Mocked Playwright object graph: runtime -> browser -> context -> page.

    ``manager`` stands in for the object returned by async_playwright().
    """
    page = _async_page()

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    runtime = MagicMock()
    for browser_type in ('chromium', 'firefox', 'webkit'):
        getattr(runtime, browser_type).launch = AsyncMock(return_value=browser)
    runtime.stop = AsyncMock()

    manager = MagicMock()
    manager.start = AsyncMock(return_value=runtime)

    return SimpleNamespace(manager=manager, runtime=runtime, browser=browser, context=context, page=page)


def pytest_configure(config):
    """
    Configure pytest with custom settings.
    """
    # Register custom markers
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )

"""
Adapter Capability Interface

Every backend implements the same flat set of async capabilities. The
orchestrator only ever talks to an adapter through this surface.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Tuple, runtime_checkable

from browser_hub.types import BrowserConfig, NavigationOptions, ScreenshotOptions

logger = logging.getLogger(__name__)

TeardownStep = Tuple[str, Optional[Callable[[], Awaitable[Any]]]]


@runtime_checkable
class BrowserAdapter(Protocol):
    """Capability set shared by the three backends."""

    @property
    def is_initialized(self) -> bool: ...

    async def initialize(self, config: BrowserConfig) -> None: ...

    async def navigate(self, url: str, options: Optional[NavigationOptions] = None) -> None: ...

    async def click(self, target: Any) -> None: ...

    async def type(self, target: Any, text: str) -> None: ...

    async def screenshot(self, options: Optional[ScreenshotOptions] = None) -> bytes: ...

    async def get_title(self) -> str: ...

    async def evaluate(self, script: str) -> Any: ...

    async def close(self) -> None: ...


async def run_teardown(backend: str, steps: List[TeardownStep]) -> None:
    """
    Run close steps in order, attempting every one.

    Steps whose callable is None were never created and are skipped.

    Args:
        backend: Backend name used in log messages
        steps: (label, close coroutine function) pairs, in teardown order

    Raises:
        Exception: The first failure, after every step has been attempted
    """
    first_error: Optional[BaseException] = None
    for label, step in steps:
        if step is None:
            continue
        try:
            await step()
        except Exception as e:
            logger.warning(f"{backend}: failed to close {label}: {e}")
            if first_error is None:
                first_error = e
    if first_error is not None:
        raise first_error

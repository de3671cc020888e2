"""
Dispatch Table

Maps (backend kind, method name) to the adapter call that serves it. Only the
methods listed here are reachable through the orchestrator; each backend
exposes its own subset on purpose, so adding a method is a table edit.
"""

from typing import Any, Awaitable, Callable, Dict, List, Mapping, Tuple

from browser_hub.errors import UnknownMethodError
from browser_hub.types import (
    BackendKind,
    ElementLocator,
    NavigationOptions,
    ScreenshotOptions,
)

Handler = Callable[[Any, Mapping[str, Any]], Awaitable[Any]]


def _require(params: Mapping[str, Any], name: str, method: str) -> Any:
    if params.get(name) is None:
        raise ValueError(f"Missing required parameter '{name}' for {method}")
    return params[name]


async def _navigate(adapter, params):
    url = _require(params, 'url', 'navigate')
    return await adapter.navigate(url, NavigationOptions.from_dict(params.get('options')))


async def _navigate_url_only(adapter, params):
    return await adapter.navigate(_require(params, 'url', 'navigate'))


async def _click_selector(adapter, params):
    return await adapter.click(_require(params, 'selector', 'click'))


async def _click_locator(adapter, params):
    return await adapter.click(ElementLocator.from_value(params.get('locator')))


async def _type_selector(adapter, params):
    selector = _require(params, 'selector', 'type')
    return await adapter.type(selector, _require(params, 'text', 'type'))


async def _screenshot(adapter, params):
    return await adapter.screenshot(ScreenshotOptions.from_dict(params.get('options')))


async def _find_element(adapter, params):
    return await adapter.describe_element(ElementLocator.from_value(params.get('locator')))


DISPATCH_TABLE: Dict[Tuple[BackendKind, str], Handler] = {
    (BackendKind.MULTI_BROWSER, 'navigate'): _navigate,
    (BackendKind.MULTI_BROWSER, 'click'): _click_selector,
    (BackendKind.MULTI_BROWSER, 'type'): _type_selector,
    (BackendKind.MULTI_BROWSER, 'screenshot'): _screenshot,

    (BackendKind.PROTOCOL_DRIVER, 'navigate'): _navigate_url_only,
    (BackendKind.PROTOCOL_DRIVER, 'findElement'): _find_element,
    (BackendKind.PROTOCOL_DRIVER, 'click'): _click_locator,

    (BackendKind.HEADLESS_CHROMIUM, 'navigate'): _navigate,
    (BackendKind.HEADLESS_CHROMIUM, 'click'): _click_selector,
    (BackendKind.HEADLESS_CHROMIUM, 'screenshot'): _screenshot,
}


def methods_for(kind: BackendKind) -> List[str]:
    """Method names wired for a backend, in table order."""
    return [method for (backend, method) in DISPATCH_TABLE if backend == kind]


def resolve(kind: BackendKind, method: str) -> Handler:
    """
    Look up the handler for a method on a backend.

    Raises:
        UnknownMethodError: If the method is not wired for the backend
    """
    handler = DISPATCH_TABLE.get((kind, method))
    if handler is None:
        raise UnknownMethodError(str(kind), method)
    return handler

"""
Shared Data Types

Value objects passed between callers, the orchestrator, the adapters and the
audit recorder. Mappings coming from an upstream tool protocol use camelCase
keys, so the ``from_dict`` constructors accept both camelCase and snake_case.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among ``keys``."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


class BackendKind(str, Enum):
    """The three supported automation engines."""

    MULTI_BROWSER = "multi-browser"
    HEADLESS_CHROMIUM = "headless-chromium"
    PROTOCOL_DRIVER = "protocol-driver"

    @classmethod
    def parse(cls, value: Union["BackendKind", str]) -> "BackendKind":
        """
        Resolve a backend kind from its value or a driver alias.

        Args:
            value: A BackendKind, its value, or one of 'playwright',
                'puppeteer', 'selenium'

        Returns:
            The matching BackendKind

        Raises:
            ValueError: If the value names no known backend
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        normalized = _BACKEND_ALIASES.get(normalized, normalized)
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"Unsupported backend kind: {value}")

    def __str__(self) -> str:
        return self.value


_BACKEND_ALIASES = {
    "playwright": "multi-browser",
    "puppeteer": "headless-chromium",
    "selenium": "protocol-driver",
    "webdriver": "protocol-driver",
}


class BrowserKind(str, Enum):
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"
    CHROME = "chrome"
    EDGE = "edge"
    SAFARI = "safari"

    @classmethod
    def parse(cls, value: Union["BrowserKind", str]) -> "BrowserKind":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"Unsupported browser: {value}")

    def __str__(self) -> str:
        return self.value


class WaitCondition(str, Enum):
    """When a navigation counts as finished."""

    LOAD = "load"
    DOM_CONTENT_LOADED = "domcontentloaded"
    NETWORK_IDLE_0 = "networkidle0"
    NETWORK_IDLE_2 = "networkidle2"


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int

    def to_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class ClipRect:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class BrowserConfig:
    """
    Launch configuration for one adapter session.

    ``timeout`` and ``slow_mo`` are in milliseconds.
    """

    browser: BrowserKind
    headless: bool = True
    slow_mo: int = 0
    timeout: Optional[int] = None
    viewport: Optional[Viewport] = None
    user_agent: Optional[str] = None
    stealth: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BrowserConfig":
        """
        Build a config from a camelCase or snake_case mapping.

        Raises:
            ValueError: If no browser kind is given or it is unknown
        """
        browser = _pick(data, "browser", "browserKind", "browser_kind")
        if browser is None:
            raise ValueError("Browser config requires a browser kind")

        viewport = data.get("viewport")
        if isinstance(viewport, Mapping):
            viewport = Viewport(int(viewport["width"]), int(viewport["height"]))

        timeout = data.get("timeout")
        return cls(
            browser=BrowserKind.parse(browser),
            headless=bool(_pick(data, "headless", default=True)),
            slow_mo=int(_pick(data, "slowMo", "slow_mo", default=0)),
            timeout=int(timeout) if timeout is not None else None,
            viewport=viewport,
            user_agent=_pick(data, "userAgent", "user_agent"),
            stealth=bool(_pick(data, "stealthMode", "stealth", "stealth_mode", default=False)),
        )


@dataclass(frozen=True)
class NavigationOptions:
    wait_until: Optional[WaitCondition] = None
    timeout: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["NavigationOptions"]:
        if not data:
            return None
        wait_until = _pick(data, "waitUntil", "wait_until")
        timeout = data.get("timeout")
        return cls(
            wait_until=WaitCondition(wait_until) if wait_until is not None else None,
            timeout=int(timeout) if timeout is not None else None,
        )


@dataclass(frozen=True)
class ElementLocator:
    """
    Structured locator for the protocol-driver backend.

    Strategies are tried in the order css, xpath, id, name; the first
    non-empty field wins.
    """

    css: Optional[str] = None
    xpath: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_value(cls, value: Union["ElementLocator", Mapping[str, Any], str, None]) -> "ElementLocator":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(css=value)
        if isinstance(value, Mapping):
            return cls(
                css=value.get("css"),
                xpath=value.get("xpath"),
                id=value.get("id"),
                name=value.get("name"),
            )
        return cls()

    def describe(self) -> str:
        for strategy in ("css", "xpath", "id", "name"):
            if getattr(self, strategy):
                return f"{strategy}={getattr(self, strategy)}"
        return "<empty locator>"


@dataclass(frozen=True)
class ScreenshotOptions:
    path: Optional[str] = None
    full_page: bool = False
    clip: Optional[ClipRect] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["ScreenshotOptions"]:
        if not data:
            return None
        clip = data.get("clip")
        if isinstance(clip, Mapping):
            clip = ClipRect(clip["x"], clip["y"], clip["width"], clip["height"])
        return cls(
            path=data.get("path"),
            full_page=bool(_pick(data, "fullPage", "full_page", default=False)),
            clip=clip,
        )


@dataclass
class ActionRequest:
    """A generic action addressed to the orchestrator."""

    id: str
    method: str
    params: Dict[str, Any] = field(default_factory=dict)
    backend: Optional[BackendKind] = None

    def __post_init__(self):
        self.params = dict(self.params or {})
        if self.backend is not None:
            self.backend = BackendKind.parse(self.backend)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActionRequest":
        if not isinstance(data, Mapping):
            raise TypeError(f"Action request must be a mapping, got {type(data).__name__}")
        return cls(
            id=str(data.get("id", "")),
            method=data["method"],
            params=dict(data.get("params") or {}),
            backend=_pick(data, "backend", "backendKind", "framework"),
        )


@dataclass
class ActionResult:
    """
    Normalized outcome of one dispatched action.

    ``data`` is meaningful when ``success`` is true, ``error`` otherwise.
    """

    success: bool
    duration_ms: float
    backend: BackendKind
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "success": self.success,
            "duration": self.duration_ms,
            "backendKind": self.backend.value,
        }
        if self.success:
            result["data"] = _encode_payload(self.data)
        else:
            result["error"] = self.error
        return result

    def to_response(self, request_id: str) -> Dict[str, Any]:
        """Shape the result as a tool-protocol response ``{id, result|error}``."""
        if self.success:
            return {"id": request_id, "result": _encode_payload(self.data)}
        return {"id": request_id, "error": self.error}


def _encode_payload(data: Any) -> Any:
    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(bytes(data)).decode("ascii")
    return data


@dataclass(frozen=True)
class AuditRecord:
    id: str
    timestamp: datetime
    action: str
    backend: str
    success: bool
    url: Optional[str] = None
    duration_ms: Optional[float] = None
    error: Optional[str] = None
    stack: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        record = {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action,
            "backend": self.backend,
            "success": self.success,
        }
        optional = {
            "url": self.url,
            "duration": self.duration_ms,
            "error": self.error,
            "stack": self.stack,
            "metadata": self.metadata,
        }
        record.update({key: value for key, value in optional.items() if value is not None})
        return record


@dataclass(frozen=True)
class MemoryContext:
    context_id: str
    api_key: str
    base_url: str

"""
browser_hub

One request/response contract over three browser-automation backends, with
every action timed and recorded to an audit trail.
"""

from .core import UnifiedOrchestrator
from .errors import (
    BrowserHubError,
    InitializationError,
    LocatorError,
    NotInitializedError,
    RemoteStoreError,
    UnknownMethodError,
    UnsupportedOptionError,
)
from .types import (
    ActionRequest,
    ActionResult,
    AuditRecord,
    BackendKind,
    BrowserConfig,
    BrowserKind,
    ElementLocator,
    MemoryContext,
    NavigationOptions,
    ScreenshotOptions,
    WaitCondition,
)
from .utils.audit_recorder import AuditRecorder
from .utils.memory_sync import MemorySync

__version__ = '0.1.0'

__all__ = [
    'UnifiedOrchestrator',
    'AuditRecorder',
    'MemorySync',
    'ActionRequest',
    'ActionResult',
    'AuditRecord',
    'BackendKind',
    'BrowserConfig',
    'BrowserKind',
    'ElementLocator',
    'MemoryContext',
    'NavigationOptions',
    'ScreenshotOptions',
    'WaitCondition',
    'BrowserHubError',
    'InitializationError',
    'LocatorError',
    'NotInitializedError',
    'RemoteStoreError',
    'UnknownMethodError',
    'UnsupportedOptionError',
]

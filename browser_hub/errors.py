"""
Error Types

Exceptions raised by the adapters, the dispatcher and the memory client.
"""


class BrowserHubError(Exception):
    """Base class for all browser hub errors."""


class NotInitializedError(BrowserHubError):
    """An action was attempted before the backend session existed."""

    def __init__(self, backend: str, detail: str = "not initialized"):
        self.backend = backend
        super().__init__(f"{backend} {detail}")


class InitializationError(BrowserHubError):
    """The backend or browser kind is unsupported, or the launch failed."""


class LocatorError(BrowserHubError):
    """No usable element locator was supplied."""


class UnknownMethodError(BrowserHubError):
    """The requested method is not wired for the backend."""

    def __init__(self, backend: str, method: str):
        self.backend = backend
        self.method = method
        super().__init__(f"Unknown {backend} method: {method}")


class UnsupportedOptionError(BrowserHubError):
    """A navigation or screenshot option has no equivalent on the backend."""


class RemoteStoreError(BrowserHubError):
    """A memory store call failed. Never leaves MemorySync."""

"""
Unified Orchestrator

Holds one adapter per backend kind, routes generic action requests to the
active backend through the dispatch table, and wraps every call with timing,
auditing and result normalization.

Example:
    async with UnifiedOrchestrator() as hub:
        await hub.initialize('multi-browser', {'browser': 'chromium'})
        result = await hub.execute({'id': '1', 'method': 'navigate',
                                    'params': {'url': 'https://example.com'}})
        if not result.success:
            print(result.error)
"""

import asyncio
import logging
import time
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from browser_hub.adapters import BrowserAdapter, create_adapter
from browser_hub.core import dispatch
from browser_hub.errors import InitializationError, NotInitializedError
from browser_hub.types import (
    ActionRequest,
    ActionResult,
    BackendKind,
    BrowserConfig,
    MemoryContext,
)
from browser_hub.utils.audit_recorder import AuditRecorder
from browser_hub.utils.config import get_audit_log_dir
from browser_hub.utils.memory_sync import MemorySync

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[BackendKind], BrowserAdapter]


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class UnifiedOrchestrator:
    """
    Single entry point for browser actions across backends.

    ``execute`` never raises for a failed action; the returned ActionResult
    is the only outcome callers need to inspect. ``initialize`` failures do
    propagate after they are audited.
    """

    def __init__(
        self,
        audit: Optional[AuditRecorder] = None,
        memory: Optional[MemorySync] = None,
        adapter_factory: AdapterFactory = create_adapter,
        default_backend: BackendKind = BackendKind.MULTI_BROWSER,
    ):
        """
        Initialize the orchestrator.

        Args:
            audit: Audit recorder owned by this orchestrator (a file-backed
                one under AUDIT_LOG_DIR is created if omitted)
            memory: Memory client (an unconfigured one is created if omitted)
            adapter_factory: Builds a fresh adapter for a backend kind
            default_backend: Backend used when neither the request nor a
                prior initialize names one
        """
        self.audit = audit if audit is not None else AuditRecorder(log_dir=get_audit_log_dir())
        self.memory = memory if memory is not None else MemorySync()
        self.adapter_factory = adapter_factory
        self.default_backend = default_backend

        self._adapters: Dict[BackendKind, BrowserAdapter] = {}
        self._constructed: List[BrowserAdapter] = []
        self._locks: Dict[BackendKind, asyncio.Lock] = {}
        self._active: Optional[BackendKind] = None

    @property
    def active_backend(self) -> Optional[BackendKind]:
        return self._active

    @property
    def adapters(self) -> Mapping[BackendKind, BrowserAdapter]:
        return MappingProxyType(self._adapters)

    def _lock_for(self, kind: BackendKind) -> asyncio.Lock:
        if kind not in self._locks:
            self._locks[kind] = asyncio.Lock()
        return self._locks[kind]

    async def initialize(
        self,
        backend: Union[BackendKind, str],
        config: Union[BrowserConfig, Mapping[str, Any]],
    ) -> None:
        """
        Start a session on a backend and make it the active one.

        A backend that already has a session is closed and replaced. Other
        backends keep their sessions.

        Args:
            backend: Backend kind (value or alias)
            config: BrowserConfig or an equivalent mapping

        Raises:
            InitializationError: If the backend or browser kind is unknown or
                the config is malformed
            Exception: Whatever the adapter raised, after it has been audited
        """
        start = time.perf_counter()
        kind: Union[BackendKind, str] = str(backend)
        metadata: Optional[Dict[str, Any]] = None

        try:
            try:
                kind = BackendKind.parse(backend)
                if not isinstance(config, BrowserConfig):
                    config = BrowserConfig.from_dict(config)
            except (KeyError, TypeError, ValueError) as e:
                raise InitializationError(f"Invalid configuration for {kind}: {e}") from e
            self._active = kind
            metadata = {
                'browser': config.browser.value,
                'headless': config.headless,
                'stealth': config.stealth,
            }

            async with self._lock_for(kind):
                previous = self._adapters.pop(kind, None)
                if previous is not None:
                    self._constructed.remove(previous)
                    await self._close_adapter(kind, previous)

                adapter = self.adapter_factory(kind)
                self._constructed.append(adapter)
                await adapter.initialize(config)
                self._adapters[kind] = adapter
        except Exception as e:
            self.audit.record(
                action='initialize',
                backend=kind,
                success=False,
                duration_ms=_elapsed_ms(start),
                error=str(e) or type(e).__name__,
                metadata=metadata,
            )
            self.audit.record_error('initialize', e, backend=kind, metadata=metadata)
            raise

        self.audit.record(
            action='initialize',
            backend=kind,
            success=True,
            duration_ms=_elapsed_ms(start),
            metadata=metadata,
        )

    def _resolve_backend(self, request: ActionRequest) -> BackendKind:
        return request.backend or self._active or self.default_backend

    async def execute(self, request: Union[ActionRequest, Mapping[str, Any]]) -> ActionResult:
        """
        Run one generic action and return its normalized result.

        The backend is the request's explicit kind, else the active backend,
        else the default. Exactly one audit record is written per call.

        Args:
            request: ActionRequest or an equivalent mapping

        Returns:
            ActionResult with data on success, or the error message on failure
        """
        if not isinstance(request, ActionRequest):
            try:
                request = ActionRequest.from_dict(request)
            except (KeyError, TypeError, ValueError) as e:
                return self._reject(request, e)

        kind = self._resolve_backend(request)
        start = time.perf_counter()
        try:
            async with self._lock_for(kind):
                start = time.perf_counter()
                adapter = self._adapters.get(kind)
                if adapter is None:
                    raise NotInitializedError(str(kind))
                handler = dispatch.resolve(kind, request.method)
                data = await handler(adapter, request.params)
            result = ActionResult(success=True, duration_ms=_elapsed_ms(start), backend=kind, data=data)
        except Exception as e:
            result = ActionResult(
                success=False,
                duration_ms=_elapsed_ms(start),
                backend=kind,
                error=str(e) or type(e).__name__,
            )

        url = request.params.get('url')
        self.audit.record(
            action=request.method,
            backend=kind,
            success=result.success,
            duration_ms=result.duration_ms,
            url=url if isinstance(url, str) else None,
            error=result.error,
            metadata=request.params,
        )
        return result

    def _reject(self, raw: Any, error: Exception) -> ActionResult:
        """Normalize a request that could not even be parsed."""
        kind = self._active or self.default_backend
        method = raw.get('method') if isinstance(raw, Mapping) else None
        message = f"Invalid request: {error}"
        self.audit.record(
            action=str(method or 'unknown'),
            backend=kind,
            success=False,
            duration_ms=0.0,
            error=message,
        )
        return ActionResult(success=False, duration_ms=0.0, backend=kind, error=message)

    async def _close_adapter(self, kind: BackendKind, adapter: BrowserAdapter) -> bool:
        try:
            await adapter.close()
            return True
        except Exception as e:
            logger.warning(f"Failed to close {kind} adapter: {e}")
            self.audit.record_error('close', e, backend=kind)
            return False

    async def close(self) -> None:
        """
        Close every adapter this orchestrator ever constructed.

        Each adapter gets a close attempt even if an earlier one failed.
        Failures are logged and audited, not raised. Calling close twice is
        harmless.
        """
        constructed = self._constructed
        kinds = {id(adapter): kind for kind, adapter in self._adapters.items()}
        self._constructed = []
        self._adapters = {}
        self._active = None

        for adapter in constructed:
            kind = kinds.get(id(adapter), getattr(adapter, 'kind', 'unknown'))
            await self._close_adapter(kind, adapter)

    # Memory helpers
    # ------------------------------------------------------------------------

    def configure_memory(self, context: MemoryContext) -> None:
        self.memory.configure(context)

    async def remember(self, key: str, value: Any, metadata: Optional[Dict[str, Any]] = None) -> bool:
        return await asyncio.to_thread(self.memory.store, key, value, metadata)

    async def recall(self, key: str) -> Optional[Any]:
        return await asyncio.to_thread(self.memory.retrieve, key)

    async def search_memory(self, query: str) -> List[Any]:
        return await asyncio.to_thread(self.memory.search, query)

    async def __aenter__(self) -> "UnifiedOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

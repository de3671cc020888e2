"""
Memory Sync

Best-effort key/value client for a remote context store, used to carry
context across automation runs. Every call degrades to an empty result
instead of raising.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from browser_hub.errors import RemoteStoreError
from browser_hub.types import MemoryContext

logger = logging.getLogger(__name__)


class MemorySync:
    """
    Client for the remote memory service.

    Until configure() is called every operation is a no-op. Once configured,
    remote failures are logged and swallowed: store() returns False,
    retrieve() returns None and search() returns an empty list.
    """

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        """
        Initialize the memory client.

        Args:
            timeout: Seconds to wait for each HTTP call
            session: Optional requests session (a new one is created otherwise)
        """
        self.context: Optional[MemoryContext] = None
        self.timeout = timeout
        self.session = session or requests.Session()

    def configure(self, context: MemoryContext) -> None:
        """Set the active context; a later call replaces it."""
        self.context = context

    @property
    def is_configured(self) -> bool:
        return self.context is not None

    def _headers(self, json_body: bool = False) -> Dict[str, str]:
        headers = {'Authorization': f"Bearer {self.context.api_key}"}
        if json_body:
            headers['Content-Type'] = 'application/json'
        return headers

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Perform one call against the store and decode its JSON body.

        Raises:
            RemoteStoreError: On connection errors, non-2xx responses or
                undecodable bodies
        """
        url = f"{self.context.base_url.rstrip('/')}{path}"
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers(json_body=payload is not None),
                timeout=self.timeout,
            )
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()
        except (requests.exceptions.RequestException, ValueError, TypeError) as e:
            raise RemoteStoreError(f"{method} {url} failed: {e}") from e

    def store(self, key: str, value: Any, metadata: Optional[Dict[str, Any]] = None) -> bool:
        """
        Store a value under a key in the active context.

        Args:
            key: Memory key
            value: JSON-serialisable value
            metadata: Optional extra fields stored with the value

        Returns:
            True if the store accepted the write, False otherwise
        """
        if not self.is_configured:
            logger.warning("MemorySync not configured, skipping store")
            return False

        try:
            self._request('POST', '/memory', {
                'contextId': self.context.context_id,
                'key': key,
                'value': value,
                'metadata': metadata,
                'timestamp': datetime.now(timezone.utc).isoformat(),
            })
            return True
        except RemoteStoreError as e:
            logger.warning(f"Failed to store memory '{key}': {e}")
            return False

    def retrieve(self, key: str) -> Optional[Any]:
        """
        Fetch the value stored under a key.

        Returns:
            The stored value, or None if absent, unconfigured or unreachable
        """
        if not self.is_configured:
            logger.warning("MemorySync not configured, skipping retrieve")
            return None

        path = f"/memory/{quote(self.context.context_id, safe='')}/{quote(str(key), safe='')}"
        try:
            body = self._request('GET', path)
        except RemoteStoreError as e:
            logger.warning(f"Failed to retrieve memory '{key}': {e}")
            return None

        if not isinstance(body, dict):
            return None
        return body.get('value')

    def search(self, query: str) -> List[Any]:
        """
        Search the active context.

        Returns:
            Matching entries, or an empty list
        """
        if not self.is_configured:
            logger.warning("MemorySync not configured, skipping search")
            return []

        try:
            body = self._request('POST', '/memory/search', {
                'contextId': self.context.context_id,
                'query': query,
            })
        except RemoteStoreError as e:
            logger.warning(f"Failed to search memory: {e}")
            return []

        if not isinstance(body, dict):
            return []
        results = body.get('results')
        return list(results) if isinstance(results, list) else []

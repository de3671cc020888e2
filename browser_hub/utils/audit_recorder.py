"""
Audit Recorder Module

This module records one structured entry per browser action attempt.
Records are kept in memory for the current run, appended as JSON lines to
disk, and mirrored as readable lines to the console logger.

Files written under the log directory:
    combined.jsonl  every record
    error.jsonl     failed records only
"""

import json
import logging
import os
import traceback
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from browser_hub.types import AuditRecord

logger = logging.getLogger(__name__)
console_logger = logging.getLogger('browser_hub.audit')

REDACTED = '[REDACTED]'

SENSITIVE_KEYS = ('password', 'passwd', 'secret', 'token', 'api_key', 'apikey', 'authorization', 'credential')
SENSITIVE_TARGET_WORDS = ('password', 'username', 'email', 'login')
SENSITIVE_ENV_SUFFIXES = ('_PASSWORD', '_USERNAME', '_API_KEY', '_TOKEN')
TARGET_KEYS = ('selector', 'locator', 'element', 'target')


class AuditRecorder:
    """
    Append-only audit trail for one orchestrator.

    Storage problems never reach the caller: they are reported once through
    the module logger and the record is still kept in memory.
    """

    def __init__(self, log_dir: Optional[str] = "logs", console: bool = True):
        """
        Initialize the audit recorder.

        Args:
            log_dir: Directory for the JSON-lines files, or None to keep
                records in memory only
            console: Whether to mirror each record to the console logger
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.console = console
        self.records: List[AuditRecord] = []
        self.sensitive_values = self._load_sensitive_values()
        self._storage_warned = False

        if self.log_dir is not None:
            try:
                self.log_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self._warn_storage(e)

    @property
    def combined_path(self) -> Optional[Path]:
        return self.log_dir / 'combined.jsonl' if self.log_dir else None

    @property
    def error_path(self) -> Optional[Path]:
        return self.log_dir / 'error.jsonl' if self.log_dir else None

    def _load_sensitive_values(self) -> Set[str]:
        """
        Collect credential values from the environment so they can be redacted
        wherever they show up in recorded parameters.
        """
        values = set()
        for name, value in os.environ.items():
            if value and name.upper().endswith(SENSITIVE_ENV_SUFFIXES):
                values.add(value)
        return values

    def _sanitize_metadata(self, metadata: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """
        Redact credentials and shrink binary payloads before a record is stored.

        A 'text' value is treated as sensitive when it is typed into a target
        that looks like a credential field.
        """
        if metadata is None:
            return None

        sensitive_target = any(
            word in str(metadata.get(key, '')).lower()
            for key in TARGET_KEYS
            for word in SENSITIVE_TARGET_WORDS
        )

        sanitized = {}
        for key, value in metadata.items():
            lowered = str(key).lower()
            if any(word in lowered for word in SENSITIVE_KEYS):
                sanitized[key] = REDACTED
            elif lowered == 'text' and sensitive_target:
                sanitized[key] = REDACTED
            elif isinstance(value, (bytes, bytearray)):
                sanitized[key] = f"<{len(value)} bytes>"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_metadata(value)
            elif isinstance(value, (list, tuple)):
                sanitized[key] = [self._sanitize_item(item) for item in value]
            elif isinstance(value, str) and value in self.sensitive_values:
                sanitized[key] = REDACTED
            else:
                sanitized[key] = value
        return sanitized

    def _sanitize_item(self, item: Any) -> Any:
        if isinstance(item, dict):
            return self._sanitize_metadata(item)
        if isinstance(item, (list, tuple)):
            return [self._sanitize_item(inner) for inner in item]
        if isinstance(item, (bytes, bytearray)):
            return f"<{len(item)} bytes>"
        if isinstance(item, str) and item in self.sensitive_values:
            return REDACTED
        return item

    def record(
        self,
        action: str,
        backend: str,
        success: bool,
        duration_ms: Optional[float] = None,
        url: Optional[str] = None,
        error: Optional[str] = None,
        stack: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        """
        Record one action attempt.

        Args:
            action: Action name (e.g. 'navigate', 'initialize')
            backend: Backend kind that handled the action
            success: Whether the action succeeded
            duration_ms: Wall-clock duration of the action
            url: Target URL, if any
            error: Error message for failed actions
            stack: Formatted traceback for failed actions
            metadata: Action parameters or other context

        Returns:
            The stored record, with generated id and timestamp
        """
        record = AuditRecord(
            id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc),
            action=action,
            backend=str(backend),
            success=success,
            url=url,
            duration_ms=duration_ms,
            error=error,
            stack=stack,
            metadata=self._sanitize_metadata(metadata),
        )
        self.records.append(record)
        self._persist(record)
        if self.console:
            self._mirror(record)
        return record

    def record_error(
        self,
        action: str,
        error: Union[BaseException, str],
        backend: str = 'unknown',
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        """
        Record a failure that happened outside a timed action.

        Exceptions contribute their message and traceback; anything else is
        stored in its string form.
        """
        if isinstance(error, BaseException):
            message = str(error) or type(error).__name__
            stack = ''.join(traceback.format_exception(type(error), error, error.__traceback__))
        else:
            message = str(error)
            stack = None

        return self.record(
            action=action,
            backend=backend,
            success=False,
            error=message,
            stack=stack,
            metadata=metadata,
        )

    def _persist(self, record: AuditRecord) -> None:
        if self.log_dir is None:
            return

        line = json.dumps(record.to_dict(), default=str) + '\n'
        targets = [self.combined_path]
        if not record.success:
            targets.append(self.error_path)

        try:
            for path in targets:
                with open(path, 'a', encoding='utf-8') as f:
                    f.write(line)
        except OSError as e:
            self._warn_storage(e)

    def _warn_storage(self, error: Exception) -> None:
        if not self._storage_warned:
            logger.warning(f"Could not write audit log to {self.log_dir}: {error}")
            self._storage_warned = True

    def _mirror(self, record: AuditRecord) -> None:
        duration = f" in {record.duration_ms:.0f}ms" if record.duration_ms is not None else ""
        target = f" {record.url}" if record.url else ""
        if record.success:
            console_logger.info(f"[{record.backend}] {record.action}{target} ok{duration}")
        else:
            console_logger.error(f"[{record.backend}] {record.action}{target} failed{duration}: {record.error}")

    def summary(self) -> Dict[str, Any]:
        """
        Summarize the records of this run.

        Returns:
            Dictionary with total, succeeded, failed and per-action counts
        """
        by_action: Dict[str, int] = {}
        for record in self.records:
            by_action[record.action] = by_action.get(record.action, 0) + 1

        succeeded = sum(1 for record in self.records if record.success)
        return {
            'total': len(self.records),
            'succeeded': succeeded,
            'failed': len(self.records) - succeeded,
            'by_action': by_action,
        }

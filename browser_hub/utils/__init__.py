"""
Utility modules.

This package contains configuration, audit recording, memory sync and
logging helpers.
"""

# Lazy imports to avoid circular dependencies
def __getattr__(name):
    if name == 'AuditRecorder':
        from .audit_recorder import AuditRecorder
        return AuditRecorder
    elif name == 'MemorySync':
        from .memory_sync import MemorySync
        return MemorySync
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = ['AuditRecorder', 'MemorySync']

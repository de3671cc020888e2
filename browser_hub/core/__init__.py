"""
Core orchestration modules.

This package contains the dispatch table and the orchestrator that routes
generic action requests to backend adapters.
"""

from . import dispatch
from .orchestrator import UnifiedOrchestrator

__all__ = ['dispatch', 'UnifiedOrchestrator']

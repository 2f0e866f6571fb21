"""
ledgermodel Persistence Module

The adapter contract plus reference adapters. Real storage backends
implement PersistenceAdapter (or AsyncioAdapter for coroutine code).
"""

from .base import PersistenceAdapter
from .deferred import AsyncioAdapter, AsyncMemoryAdapter
from .memory import MemoryAdapter, sequential_ids

__all__ = [
    "PersistenceAdapter",
    "MemoryAdapter",
    "AsyncioAdapter",
    "AsyncMemoryAdapter",
    "sequential_ids",
]

"""
ledgermodel - In-memory entity tracking

Entities separate confirmed attributes from pending changes and persist
through a pluggable adapter; entity sets keep them ordered and
deduplicated by identity, with querying, derivation and events.
"""

from .config import EntitySetConfig, LoggingConfig, configure_logging
from .core import (
    AdapterContractError,
    Entity,
    EntitySet,
    ErrorBag,
    EventHub,
    LedgerModelError,
)
from .persistence import (
    AsyncioAdapter,
    AsyncMemoryAdapter,
    MemoryAdapter,
    PersistenceAdapter,
    sequential_ids,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Entity",
    "EntitySet",
    "ErrorBag",
    "EventHub",
    "LedgerModelError",
    "AdapterContractError",

    # Configuration
    "EntitySetConfig",
    "LoggingConfig",
    "configure_logging",

    # Persistence
    "PersistenceAdapter",
    "MemoryAdapter",
    "AsyncioAdapter",
    "AsyncMemoryAdapter",
    "sequential_ids",
]

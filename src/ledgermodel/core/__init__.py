"""
ledgermodel core

Entities, entity sets, validation messages and event dispatch. Storage is
reached only through the persistence adapter contract.
"""

from .collection import EntitySet
from .entity import Entity
from .errors import ErrorBag
from .events import EventHub
from .exceptions import AdapterContractError, LedgerModelError

__all__ = [
    "Entity",
    "EntitySet",
    "ErrorBag",
    "EventHub",
    "LedgerModelError",
    "AdapterContractError",
]

"""
ledgermodel Persistence Layer - Base Classes

This module defines the contract entities and entity sets call through.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.collection import EntitySet
    from ..core.entity import Entity

Done = Callable[..., Any]
ReadDone = Callable[[List[Dict[str, Any]]], Any]


class PersistenceAdapter(ABC):
    """
    Abstract base class for persistence adapters.

    Every operation must eventually call its ``done`` callback exactly once,
    either before returning or on a later turn. ``create``, ``update`` and
    ``destroy`` report ``done(success, *extra)``; any extra arguments are
    forwarded untouched to the caller of save() or destroy(). The core owns
    committing, set membership and events, so adapters never touch them.
    """

    def __init__(self, entity_set: "EntitySet"):
        self.entity_set = entity_set

    @abstractmethod
    def create(self, entity: "Entity", done: Done) -> None:
        """
        Store a new entity.

        Args:
            entity: Entity whose merged attributes should be stored
            done: Completion callback, ``done(success, *extra)``
        """

    @abstractmethod
    def update(self, entity: "Entity", done: Done) -> None:
        """
        Store changes to an existing entity.

        Args:
            entity: Entity whose merged attributes should be stored
            done: Completion callback, ``done(success, *extra)``
        """

    @abstractmethod
    def destroy(self, entity: "Entity", done: Done) -> None:
        """
        Remove an entity from storage.

        Args:
            entity: Entity to remove
            done: Completion callback, ``done(success, *extra)``
        """

    @abstractmethod
    def read(self, done: ReadDone) -> None:
        """
        Read every stored record.

        Args:
            done: Completion callback receiving a list of attribute mappings
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.entity_set!r})"


__all__ = ["PersistenceAdapter", "Done", "ReadDone"]

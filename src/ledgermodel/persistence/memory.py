"""
ledgermodel Persistence Layer - Memory Backend

In-memory adapter for development and testing.
Data is lost when the process exits.
"""

import copy
import itertools
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING

from .base import Done, PersistenceAdapter, ReadDone

if TYPE_CHECKING:
    from ..core.collection import EntitySet
    from ..core.entity import Entity

logger = logging.getLogger(__name__)


def sequential_ids(start: int = 1) -> Callable[[], int]:
    """Identity factory yielding start, start + 1, ..."""
    return itertools.count(start).__next__


class MemoryAdapter(PersistenceAdapter):
    """
    Stores attribute snapshots keyed by identity.

    Completes every operation synchronously. When ``id_factory`` is given,
    new entities are assigned an identity on create.
    """

    def __init__(
        self,
        entity_set: "EntitySet",
        records: Optional[Iterable[Mapping[str, Any]]] = None,
        id_factory: Optional[Callable[[], Any]] = None,
    ):
        super().__init__(entity_set)
        self.id_factory = id_factory
        self._records: Dict[Any, Dict[str, Any]] = {}

        key = entity_set.identity_key
        for record in records or []:
            if record.get(key) is None:
                raise ValueError(f"Seed record has no '{key}': {record!r}")
            self._records[record[key]] = copy.deepcopy(dict(record))

    @property
    def records(self) -> Dict[Any, Dict[str, Any]]:
        """Copy of the stored records keyed by identity."""
        return copy.deepcopy(self._records)

    def create(self, entity: "Entity", done: Done) -> None:
        if entity.is_new() and self.id_factory is not None:
            entity.write(entity.key, self.id_factory())

        identity = entity.identity()
        if identity is None:
            done(False, f"Cannot create {entity!r} without '{entity.key}'")
            return
        if identity in self._records:
            done(False, f"Record {identity!r} already exists")
            return

        self._records[identity] = entity.read_all()
        logger.debug("Created record %r", identity)
        done(True)

    def update(self, entity: "Entity", done: Done) -> None:
        identity = entity.identity()
        if identity not in self._records:
            done(False, f"Record {identity!r} does not exist")
            return

        self._records[identity] = entity.read_all()
        logger.debug("Updated record %r", identity)
        done(True)

    def destroy(self, entity: "Entity", done: Done) -> None:
        identity = entity.identity()
        if self._records.pop(identity, None) is None:
            done(False, f"Record {identity!r} does not exist")
            return

        logger.debug("Destroyed record %r", identity)
        done(True)

    def read(self, done: ReadDone) -> None:
        records: List[Dict[str, Any]] = [copy.deepcopy(record) for record in self._records.values()]
        done(records)

    def count(self) -> int:
        return len(self._records)


__all__ = ["MemoryAdapter", "sequential_ids"]

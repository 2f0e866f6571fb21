"""
ledgermodel Persistence Layer - asyncio bridge

Adapters written as coroutines. Each operation is scheduled as a task on
the running event loop and reports through ``done`` when the task
finishes, i.e. on a later turn than the save() or destroy() call.
"""

import asyncio
import logging
from abc import abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple, TYPE_CHECKING

from .base import Done, PersistenceAdapter, ReadDone
from .memory import MemoryAdapter

if TYPE_CHECKING:
    from ..core.collection import EntitySet
    from ..core.entity import Entity

logger = logging.getLogger(__name__)


def _outcome_args(outcome: Any) -> Tuple[Any, ...]:
    if isinstance(outcome, tuple):
        return outcome
    return (outcome,)


class AsyncioAdapter(PersistenceAdapter):
    """
    Base class for coroutine adapters.

    Subclasses implement the ``*_async`` hooks. ``create_async``,
    ``update_async`` and ``destroy_async`` return ``success`` or a tuple
    ``(success, *extra)``; ``read_async`` returns the record list. A hook
    that raises is logged and reported as ``done(False, exc)`` (or an empty
    record list for reads).
    """

    def __init__(self, entity_set: "EntitySet"):
        super().__init__(entity_set)
        self._tasks: Set[asyncio.Task] = set()

    @abstractmethod
    async def create_async(self, entity: "Entity") -> Any:
        pass

    @abstractmethod
    async def update_async(self, entity: "Entity") -> Any:
        pass

    @abstractmethod
    async def destroy_async(self, entity: "Entity") -> Any:
        pass

    @abstractmethod
    async def read_async(self) -> List[Dict[str, Any]]:
        pass

    def create(self, entity: "Entity", done: Done) -> None:
        self._schedule("create", self.create_async(entity), done)

    def update(self, entity: "Entity", done: Done) -> None:
        self._schedule("update", self.update_async(entity), done)

    def destroy(self, entity: "Entity", done: Done) -> None:
        self._schedule("destroy", self.destroy_async(entity), done)

    def read(self, done: ReadDone) -> None:
        self._schedule("read", self.read_async(), done)

    @property
    def pending(self) -> int:
        """Number of operations still in flight."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every scheduled operation has reported."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _schedule(self, operation: str, coro: Awaitable[Any], done: Callable[..., Any]) -> None:
        async def run() -> None:
            try:
                outcome = await coro
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception("%s: %s failed", self.__class__.__name__, operation)
                args = ([],) if operation == "read" else (False, e)
            else:
                args = (outcome,) if operation == "read" else _outcome_args(outcome)
            try:
                done(*args)
            except Exception:
                # nothing awaits the task, so a raising callback is only logged
                logger.exception("%s: %s callback failed", self.__class__.__name__, operation)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop running - complete before returning
            asyncio.run(run())
            return

        task = loop.create_task(run())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


class AsyncMemoryAdapter(AsyncioAdapter):
    """MemoryAdapter behind the asyncio bridge, optionally delayed."""

    def __init__(
        self,
        entity_set: "EntitySet",
        records: Optional[Iterable[Mapping[str, Any]]] = None,
        id_factory: Optional[Callable[[], Any]] = None,
        delay: float = 0.0,
    ):
        super().__init__(entity_set)
        self.store = MemoryAdapter(entity_set, records=records, id_factory=id_factory)
        self.delay = delay

    async def create_async(self, entity: "Entity") -> Any:
        await asyncio.sleep(self.delay)
        return self._collect(self.store.create, entity)

    async def update_async(self, entity: "Entity") -> Any:
        await asyncio.sleep(self.delay)
        return self._collect(self.store.update, entity)

    async def destroy_async(self, entity: "Entity") -> Any:
        await asyncio.sleep(self.delay)
        return self._collect(self.store.destroy, entity)

    async def read_async(self) -> List[Dict[str, Any]]:
        await asyncio.sleep(self.delay)
        records: List[Dict[str, Any]] = []
        self.store.read(records.extend)
        return records

    @staticmethod
    def _collect(operation: Callable[..., None], entity: "Entity") -> Tuple[Any, ...]:
        reported: List[Any] = []
        operation(entity, lambda *args: reported.extend(args))
        return tuple(reported)


__all__ = ["AsyncioAdapter", "AsyncMemoryAdapter"]

"""
Entity: a single tracked record.

An entity keeps two attribute maps. Confirmed attributes are the last state
accepted by persistence; pending changes are writes that differ from it.
Reads prefer pending values. A successful save or destroy through the owning
set's adapter commits pending into confirmed and updates set membership.
"""

import asyncio
import copy
import logging
import uuid
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Tuple

from .errors import ErrorBag
from .events import EventHub, Listener
from .exceptions import AdapterContractError

logger = logging.getLogger(__name__)

PersistCallback = Callable[..., Any]


def _strictly_equal(left: Any, right: Any) -> bool:
    return left is right or (type(left) is type(right) and left == right)


class Entity:
    """Base class for all tracked records."""

    # Class-level configuration, overridden by subclasses
    defaults: ClassVar[Dict[str, Any]] = {}
    identity_key: ClassVar[str] = "id"

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None, owner=None):
        self._confirmed: Dict[str, Any] = copy.deepcopy(dict(type(self).defaults))
        self._confirmed.update(attributes or {})
        self._pending: Dict[str, Any] = {}
        self.uid = str(uuid.uuid4())
        self.owner = owner
        self.errors = ErrorBag(self)
        self.events = EventHub(self)
        self.initialize()

    def initialize(self) -> None:
        """Hook run at the end of construction."""

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, callback: Listener) -> "Entity":
        self.events.bind(event, callback)
        return self

    def off(self, event: str, callback: Optional[Listener] = None) -> "Entity":
        self.events.unbind(event, callback)
        return self

    def once(self, event: str, callback: Listener) -> "Entity":
        self.events.once(event, callback)
        return self

    def trigger(self, event: str, *args: Any) -> "Entity":
        self.events.trigger(event, *args)
        return self

    bind = on
    unbind = off

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    @property
    def attributes(self) -> Dict[str, Any]:
        """Copy of the confirmed attributes."""
        return dict(self._confirmed)

    @property
    def changes(self) -> Dict[str, Any]:
        """Copy of the pending changes."""
        return dict(self._pending)

    @property
    def key(self) -> str:
        """Attribute name holding this entity's identity."""
        if self.owner is not None:
            return self.owner.identity_key
        return type(self).identity_key

    def read_all(self) -> Dict[str, Any]:
        """Confirmed attributes overlaid with pending changes, as a fresh dict."""
        merged = dict(self._confirmed)
        merged.update(self._pending)
        return merged

    def read(self, name: str, default: Any = None) -> Any:
        if name in self._pending:
            return self._pending[name]
        return self._confirmed.get(name, default)

    def write(self, name: str, value: Any) -> "Entity":
        """Stage value for name; writing the confirmed value drops the change."""
        if name in self._confirmed and _strictly_equal(self._confirmed[name], value):
            self._pending.pop(name, None)
        else:
            self._pending[name] = value
        self.trigger(f"change:{name}", self)
        return self

    def write_many(self, attributes: Mapping[str, Any]) -> "Entity":
        for name, value in attributes.items():
            self.write(name, value)
        self.trigger("change", self)
        return self

    def merge(self, attributes: Mapping[str, Any]) -> "Entity":
        """Write attributes straight into the confirmed set."""
        self._confirmed.update(attributes)
        return self

    def has_changes(self) -> bool:
        return bool(self._pending)

    def identity(self) -> Any:
        return self.read(self.key)

    def is_new(self) -> bool:
        return self.identity() is None

    def has_confirmed_identity(self) -> bool:
        """True once an identity has been committed, i.e. the entity is stored."""
        return self._confirmed.get(self.key) is not None

    def commit_and_clear(self) -> "Entity":
        """Promote pending changes to confirmed and clear errors."""
        self._confirmed.update(self._pending)
        self._pending = {}
        self.errors.clear()
        return self

    def reset(self) -> "Entity":
        """Discard pending changes and clear errors."""
        self._pending = {}
        self.errors.clear()
        return self

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Populate self.errors for invalid attributes.

        No-op by default. Subclasses add messages with
        ``self.errors.add(attribute, message)``.
        """

    def is_valid(self) -> bool:
        self.errors.clear()
        self.validate()
        return self.errors.count() == 0

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @property
    def adapter(self):
        """Persistence adapter of the owning set, if any."""
        if self.owner is None:
            return None
        return self.owner.adapter

    def save(self, callback: Optional[PersistCallback] = None) -> "Entity":
        """
        Create or update this entity through the owning set's adapter.

        Invalid entities are never sent to the adapter; callback receives
        ``False`` instead. Otherwise callback receives whatever the adapter
        reports: ``(success, *extra)``.
        """
        if not self.is_valid():
            logger.debug("Validation failed for %r: %s", self, self.errors.to_dict())
            if callback is not None:
                callback(False)
            return self

        # an identity staged as a pending change has not been stored yet
        operation = "update" if self.has_confirmed_identity() else "create"
        self.run_persist_operation(operation, callback)
        return self

    def destroy(self, callback: Optional[PersistCallback] = None) -> "Entity":
        self.run_persist_operation("destroy", callback)
        return self

    def run_persist_operation(self, operation: str, callback: Optional[PersistCallback] = None) -> None:
        """
        Issue operation to the adapter and wrap its completion.

        Committing, set membership and the operation event are all driven
        from the wrapped callback, so adapters only report success.
        Raises AdapterContractError when the installed adapter has no
        method for operation.
        """
        completed = False

        def done(success: Any = False, *extra: Any) -> Any:
            nonlocal completed
            if completed:
                logger.warning("Adapter reported %r for %r more than once; ignoring", operation, self)
                return None
            completed = True

            if success:
                self.commit_and_clear()
                self._update_membership(operation)
                self.trigger(operation, self)
                logger.debug("%s succeeded for %r", operation, self)
            else:
                logger.debug("%s failed for %r: %r", operation, self, extra)

            if callback is not None:
                return callback(success, *extra)
            return None

        adapter = self.adapter
        if adapter is None:
            done(True)
            return

        method = getattr(adapter, operation, None)
        if not callable(method):
            raise AdapterContractError(adapter, operation)
        method(self, done)

    def _update_membership(self, operation: str) -> None:
        if self.owner is None:
            return
        if operation == "destroy":
            self.owner.evict(self)
        else:
            self.owner.admit(self)

    async def asave(self) -> Tuple[Any, ...]:
        """Await save(); returns the arguments the adapter reported."""
        return await self._await_operation(self.save)

    async def adestroy(self) -> Tuple[Any, ...]:
        return await self._await_operation(self.destroy)

    async def _await_operation(self, issue: Callable[[PersistCallback], Any]) -> Tuple[Any, ...]:
        future = asyncio.get_running_loop().create_future()

        def resolve(*args: Any) -> None:
            if not future.done():
                future.set_result(args)

        issue(resolve)
        return await future

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self) -> Dict[str, Any]:
        return self.read_all()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key}={self.identity()!r} uid={self.uid}>"


__all__ = ["Entity", "PersistCallback"]

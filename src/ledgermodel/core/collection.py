"""
EntitySet: an ordered, identity-deduplicated group of entities.

Query operations that return sets (select, sort, sorted_by, reversed)
build derivatives: new sets sharing configuration and adapter with their
source but holding their own item list, so mutating one never affects the
other.
"""

import asyncio
import copy
import functools
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Type, Union

from ..config import EntitySetConfig
from .entity import Entity
from .events import EventHub, Listener

logger = logging.getLogger(__name__)

AdapterFactory = Callable[..., Any]
Predicate = Callable[[Entity], Any]


def _with_overrides(config: EntitySetConfig, overrides: Mapping[str, Any]) -> EntitySetConfig:
    settings = config.model_dump()
    if "name" in overrides and "path" not in overrides:
        settings.pop("path")
    settings.update(overrides)
    return EntitySetConfig(**settings)


def _loose_equal(left: Any, right: Any) -> bool:
    if left == right:
        return True
    return left is not None and right is not None and str(left) == str(right)


class EntitySet:
    """
    Ordered set of entities of one entity class.

    Membership is driven by admit() and evict(); entities also admit or
    evict themselves after successful persistence operations.
    """

    def __init__(
        self,
        entity_class: Type[Entity] = Entity,
        *,
        config: Optional[EntitySetConfig] = None,
        adapter: Optional[AdapterFactory] = None,
        parent: Optional["EntitySet"] = None,
        **config_overrides: Any,
    ):
        if config is None:
            settings = {
                "identity_key": entity_class.identity_key,
                "name": entity_class.__name__.lower(),
            }
            settings.update(config_overrides)
            config = EntitySetConfig(**settings)
        elif config_overrides:
            config = _with_overrides(config, config_overrides)

        self.entity_class = entity_class
        self.config = config
        self.parent = parent
        self.events = EventHub(self)
        self._items: List[Entity] = []
        self._adapter = None

        if adapter is not None:
            self.install_adapter(adapter)

        self.initialize()

    def initialize(self) -> None:
        """Hook run at the end of construction."""

    @property
    def identity_key(self) -> str:
        return self.config.identity_key

    @property
    def name(self) -> Optional[str]:
        return self.config.name

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, callback: Listener) -> "EntitySet":
        self.events.bind(event, callback)
        return self

    def off(self, event: str, callback: Optional[Listener] = None) -> "EntitySet":
        self.events.unbind(event, callback)
        return self

    def once(self, event: str, callback: Listener) -> "EntitySet":
        self.events.once(event, callback)
        return self

    def trigger(self, event: str, *args: Any) -> "EntitySet":
        self.events.trigger(event, *args)
        return self

    bind = on
    unbind = off

    # ------------------------------------------------------------------
    # Adapter
    # ------------------------------------------------------------------

    @property
    def adapter(self):
        return self._adapter

    def install_adapter(self, factory: Optional[AdapterFactory] = None, *args: Any, **kwargs: Any):
        """
        Install an adapter built by factory(self, *args, **kwargs).

        Called without a factory, returns the installed adapter instead.
        """
        if factory is None:
            return self._adapter
        self._adapter = factory(self, *args, **kwargs)
        logger.debug("Installed adapter %r on %r", self._adapter, self)
        return self

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def build(self, attributes: Optional[Mapping[str, Any]] = None) -> Entity:
        """New entity owned by this set but not yet admitted."""
        return self.entity_class(attributes, owner=self)

    def admit(self, item: Union[Entity, Mapping[str, Any], List[Any], tuple]) -> "EntitySet":
        """
        Add an entity, a mapping of attributes, or a list of either.

        An entity sharing a defined identity with an existing item is merged
        into it instead of being added.
        """
        if isinstance(item, (list, tuple)):
            for element in item:
                self.admit(element)
            return self

        if isinstance(item, Mapping):
            existing = self._member_with_identity(item.get(self.identity_key))
            if existing is not None:
                logger.debug("Merging record into existing %r", existing)
                existing.merge(item)
                return self
            entity = self.build(item)
        elif isinstance(item, Entity):
            entity = item
            if entity in self:
                return self
            existing = self._member_with_identity(entity.identity())
            if existing is not None:
                logger.debug("Merging %r into existing %r", entity, existing)
                existing.merge(entity.attributes)
                for name, value in entity.changes.items():
                    existing.write(name, value)
                return self
        else:
            raise TypeError(f"Cannot admit {type(item).__name__} into {self!r}")

        if entity.owner is None:
            entity.owner = self
        self._items.append(entity)
        logger.debug("Admitted %r into %r", entity, self)
        self.trigger("add", entity)
        return self

    def _member_with_identity(self, identity: Any) -> Optional[Entity]:
        if identity is None:
            return None
        return self.lookup(identity)

    def evict(self, entity: Entity) -> bool:
        """Remove exactly this entity object; False when it is not a member."""
        for index, existing in enumerate(self._items):
            if existing is entity:
                del self._items[index]
                logger.debug("Evicted %r from %r", entity, self)
                self.trigger("remove", entity)
                return True
        return False

    def load(self, callback: Optional[Callable[[List[Dict[str, Any]]], Any]] = None) -> "EntitySet":
        """Admit every record the adapter reads; no-op without a reading adapter."""
        read = getattr(self._adapter, "read", None)
        if not callable(read):
            return self

        def done(records: List[Dict[str, Any]]) -> None:
            for record in records:
                self.admit(record)
            logger.debug("Loaded %d records into %r", len(records), self)
            if callback is not None:
                callback(records)

        read(done)
        return self

    async def aload(self) -> List[Dict[str, Any]]:
        """Await load(); returns the raw records read (empty without an adapter)."""
        if not callable(getattr(self._adapter, "read", None)):
            return []

        future = asyncio.get_running_loop().create_future()

        def resolve(records: List[Dict[str, Any]]) -> None:
            if not future.done():
                future.set_result(records)

        self.load(resolve)
        return await future

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def all(self) -> List[Entity]:
        return list(self._items)

    def count(self) -> int:
        return len(self._items)

    def first(self) -> Optional[Entity]:
        return self._items[0] if self._items else None

    def last(self) -> Optional[Entity]:
        return self._items[-1] if self._items else None

    def detect(self, predicate: Predicate) -> Optional[Entity]:
        for entity in self.all():
            if predicate(entity):
                return entity
        return None

    def lookup(self, identity: Any) -> Optional[Entity]:
        return self.detect(lambda entity: _loose_equal(entity.identity(), identity))

    def pluck(self, attribute: str) -> List[Any]:
        return [entity.read(attribute) for entity in self.all()]

    def map(self, func: Callable[[Entity], Any]) -> List[Any]:
        return [func(entity) for entity in self.all()]

    def each(self, func: Callable[[Entity], Any]) -> "EntitySet":
        for entity in self.all():
            func(entity)
        return self

    def filter(self, predicate: Predicate) -> List[Entity]:
        """Plain list of matching items; see select() for a derived set."""
        return [entity for entity in self._items if predicate(entity)]

    def select(self, predicate: Predicate) -> "EntitySet":
        return self._derive([entity for entity in self.all() if predicate(entity)])

    def sort(self, compare: Callable[[Entity, Entity], int]) -> "EntitySet":
        return self._derive(sorted(self.all(), key=functools.cmp_to_key(compare)))

    def sorted_by(self, attribute_or_func: Union[str, Callable[[Entity], Any]], descending: bool = False) -> "EntitySet":
        if callable(attribute_or_func):
            extract = attribute_or_func
        else:
            def extract(entity: Entity) -> Any:
                return entity.read(attribute_or_func)

        def compare(a: Entity, b: Entity) -> int:
            a_value, b_value = extract(a), extract(b)
            if descending:
                a_value, b_value = b_value, a_value
            try:
                if a_value < b_value:
                    return -1
                if a_value > b_value:
                    return 1
            except TypeError:
                # unorderable pair (e.g. a missing attribute) counts as a tie
                pass
            return 0

        return self.sort(compare)

    def reversed(self) -> "EntitySet":
        return self._derive(self.all()[::-1])

    def _derive(self, items: List[Entity]) -> "EntitySet":
        derived = copy.copy(self)
        derived._items = list(items)
        derived.events = EventHub(derived)
        return derived

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def use(self, plugin: Callable[..., Any], *args: Any, **kwargs: Any) -> "EntitySet":
        """Run plugin(self, *args, **kwargs) and return self."""
        plugin(self, *args, **kwargs)
        return self

    def extend(self, entity_class: Optional[Type[Entity]] = None, **config_overrides: Any) -> "EntitySet":
        """Empty nested set whose parent is this set, reusing this set's adapter."""
        child = type(self)(
            entity_class or self.entity_class,
            config=_with_overrides(self.config, config_overrides),
            parent=self,
        )
        child._adapter = self._adapter
        return child

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self) -> List[Dict[str, Any]]:
        """Confirmed attributes of every member, in order."""
        return self.map(lambda entity: entity.attributes)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.all())

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, entity: Any) -> bool:
        return any(existing is entity for existing in self._items)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r} count={self.count()}>"


__all__ = ["EntitySet", "AdapterFactory", "Predicate"]

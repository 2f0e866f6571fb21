"""
Shared fixtures for the ledgermodel test suite.
"""

from typing import Any, Callable, List, Tuple

import pytest

from ledgermodel import Entity, EntitySet, PersistenceAdapter


class Article(Entity):
    """Test entity with defaults and a validation rule"""
    defaults = {"title": "", "tags": [], "published": False}

    def validate(self):
        if not self.read("title"):
            self.errors.add("title", "can't be blank")


class ScriptedAdapter(PersistenceAdapter):
    """
    Adapter that records calls and replies with a fixed outcome.

    With deferred=True the replies are held until flush().
    """

    def __init__(self, entity_set, outcome: Tuple[Any, ...] = (True,), deferred: bool = False, records=None):
        super().__init__(entity_set)
        self.outcome = outcome
        self.deferred = deferred
        self.records = list(records or [])
        self.calls: List[Tuple[str, Any]] = []
        self.waiting: List[Callable[..., Any]] = []
        self.returned: List[Any] = []

    def _reply(self, operation, entity, done):
        self.calls.append((operation, entity))
        if self.deferred:
            self.waiting.append(done)
        else:
            self.returned.append(done(*self.outcome))

    def create(self, entity, done):
        self._reply("create", entity, done)

    def update(self, entity, done):
        self._reply("update", entity, done)

    def destroy(self, entity, done):
        self._reply("destroy", entity, done)

    def read(self, done):
        self.calls.append(("read", None))
        records = [dict(record) for record in self.records]
        if self.deferred:
            self.waiting.append(lambda *_: done(records))
        else:
            done(records)

    def flush(self):
        waiting, self.waiting = self.waiting, []
        for done in waiting:
            self.returned.append(done(*self.outcome))

    @property
    def operations(self) -> List[str]:
        return [operation for operation, _ in self.calls]


@pytest.fixture
def articles():
    """Empty article set without an adapter."""
    return EntitySet(Article)


@pytest.fixture
def scripted(articles):
    """ScriptedAdapter installed on the articles set."""
    articles.install_adapter(ScriptedAdapter)
    return articles.adapter


@pytest.fixture
def numbered():
    """Set of plain entities with ids 1, 2, 3."""
    entity_set = EntitySet(Entity)
    entity_set.admit([{"id": 1}, {"id": 2}, {"id": 3}])
    return entity_set


@pytest.fixture
def recorder():
    """Listener that records the arguments of every call."""
    calls = []

    def listener(*args):
        calls.append(args)

    listener.calls = calls
    return listener

"""
asyncio bridge tests: adapters completing on a later event-loop turn.
"""

import asyncio
import logging

import pytest

from conftest import Article
from ledgermodel import AsyncioAdapter, AsyncMemoryAdapter, EntitySet, sequential_ids


class ExplodingAdapter(AsyncioAdapter):
    """Every hook raises."""

    async def create_async(self, entity):
        raise RuntimeError("boom")

    async def update_async(self, entity):
        raise RuntimeError("boom")

    async def destroy_async(self, entity):
        raise RuntimeError("boom")

    async def read_async(self):
        raise RuntimeError("boom")


@pytest.fixture
def async_articles():
    entity_set = EntitySet(Article)
    entity_set.install_adapter(
        AsyncMemoryAdapter,
        records=[{"id": 1, "title": "Stored"}],
        id_factory=sequential_ids(10),
        delay=0.01,
    )
    return entity_set


class TestAsyncioAdapter:

    @pytest.mark.asyncio
    async def test_save_completes_on_later_turn(self, async_articles, recorder):
        article = async_articles.build({"title": "Later"})
        article.on("create", recorder)

        article.save()

        assert recorder.calls == []
        assert async_articles.adapter.pending == 1

        await async_articles.adapter.drain()

        assert recorder.calls == [(article,)]
        assert article.identity() == 10
        assert article.changes == {}
        assert async_articles.all() == [article]

    @pytest.mark.asyncio
    async def test_asave_awaits_completion(self, async_articles):
        article = async_articles.build({"title": "Awaited"})

        assert await article.asave() == (True,)
        assert article.attributes["id"] == 10

    @pytest.mark.asyncio
    async def test_failed_update_forwards_message(self, async_articles):
        article = async_articles.build({"id": 5, "title": "Missing"})

        success, message = await article.asave()

        assert success is False
        assert "does not exist" in message

    @pytest.mark.asyncio
    async def test_aload_and_adestroy(self, async_articles):
        records = await async_articles.aload()

        assert records == [{"id": 1, "title": "Stored"}]

        assert await async_articles.lookup(1).adestroy() == (True,)
        assert async_articles.count() == 0
        assert async_articles.adapter.store.count() == 0

    @pytest.mark.asyncio
    async def test_hook_exception_reported_as_failure(self, recorder):
        entity_set = EntitySet(Article, adapter=ExplodingAdapter)
        article = entity_set.build({"title": "Doomed"})
        article.on("create", recorder)

        success, error = await article.asave()

        assert success is False
        assert isinstance(error, RuntimeError)
        assert recorder.calls == []
        assert entity_set.count() == 0

    @pytest.mark.asyncio
    async def test_read_exception_loads_nothing(self):
        entity_set = EntitySet(Article, adapter=ExplodingAdapter)

        assert await entity_set.aload() == []

    @pytest.mark.asyncio
    async def test_concurrent_saves_on_different_entities(self, async_articles):
        first = async_articles.build({"title": "A"})
        second = async_articles.build({"title": "B"})

        results = await asyncio.gather(first.asave(), second.asave())

        assert results == [(True,), (True,)]
        assert sorted(async_articles.pluck("id")) == [10, 11]

    @pytest.mark.asyncio
    async def test_raising_callback_is_logged(self, async_articles, caplog):
        def explode(*args):
            raise RuntimeError("callback exploded")

        article = async_articles.build({"title": "Later"})

        with caplog.at_level(logging.ERROR, logger="ledgermodel.persistence.deferred"):
            article.save(explode)
            await async_articles.adapter.drain()

        assert async_articles.adapter.pending == 0
        assert async_articles.all() == [article]
        failures = [r for r in caplog.records if "callback failed" in r.getMessage()]
        assert len(failures) == 1
        assert failures[0].exc_info[0] is RuntimeError

    def test_without_running_loop_completes_synchronously(self, recorder):
        entity_set = EntitySet(Article, adapter=AsyncMemoryAdapter)
        article = entity_set.build({"id": 3, "title": "Sync"})
        article.on("destroy", recorder)
        results = []

        article.destroy(lambda *args: results.append(args))

        assert results[0][0] is False
        assert recorder.calls == []

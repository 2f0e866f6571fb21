"""
MemoryAdapter tests.
"""

import pytest

from conftest import Article
from ledgermodel import EntitySet, MemoryAdapter, sequential_ids


@pytest.fixture
def stored():
    """Article set backed by a MemoryAdapter with two seed records."""
    entity_set = EntitySet(Article)
    entity_set.install_adapter(
        MemoryAdapter,
        records=[{"id": 1, "title": "First"}, {"id": 2, "title": "Second"}],
        id_factory=sequential_ids(100),
    )
    return entity_set


def _report(results):
    return lambda *args: results.append(args)


class TestMemoryAdapter:

    def test_load_reads_seed_records_in_order(self, stored):
        stored.load()

        assert stored.pluck("id") == [1, 2]
        assert stored.pluck("title") == ["First", "Second"]

    def test_create_assigns_identity(self, stored):
        article = stored.build({"title": "Third"})
        results = []

        article.save(_report(results))

        assert results == [(True,)]
        assert article.identity() == 100
        assert article.attributes["id"] == 100
        assert stored.adapter.records[100]["title"] == "Third"
        assert stored.all() == [article]

    def test_create_without_identity_fails(self):
        entity_set = EntitySet(Article, adapter=MemoryAdapter)
        article = entity_set.build({"title": "Orphan"})
        results = []

        article.save(_report(results))

        assert results[0][0] is False
        assert "without 'id'" in results[0][1]
        assert entity_set.count() == 0
        assert entity_set.adapter.count() == 0

    def test_create_duplicate_fails(self, stored):
        article = stored.build({"title": "Clash"})
        article.write("id", 1)
        results = []

        article.save(_report(results))

        assert results[0][0] is False
        assert article.changes == {"id": 1}

    def test_update_known_record(self, stored):
        stored.load()
        article = stored.lookup(1)

        article.write("title", "Edited").save()

        assert stored.adapter.records[1]["title"] == "Edited"
        assert article.changes == {}

    def test_update_unknown_record_fails(self, stored):
        article = stored.build({"id": 9, "title": "Ghost"})
        article.write("title", "Still ghost")
        results = []

        article.save(_report(results))

        assert results == [(False, "Record 9 does not exist")]
        assert article.changes == {"title": "Still ghost"}

    def test_destroy(self, stored):
        stored.load()
        article = stored.lookup(2)

        article.destroy()

        assert stored.pluck("id") == [1]
        assert 2 not in stored.adapter.records

    def test_destroy_unknown_fails(self, stored):
        results = []
        stored.build({"id": 9}).destroy(_report(results))

        assert results[0][0] is False

    def test_records_are_copies(self, stored):
        stored.adapter.records[1]["title"] = "Tampered"
        stored.load()

        assert stored.lookup(1).read("title") == "First"

    def test_seed_record_without_identity_rejected(self):
        entity_set = EntitySet(Article)

        with pytest.raises(ValueError):
            entity_set.install_adapter(MemoryAdapter, records=[{"title": "no id"}])

    def test_sequential_ids(self):
        next_id = sequential_ids()
        assert [next_id(), next_id(), next_id()] == [1, 2, 3]

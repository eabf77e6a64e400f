"""
Behaviour both facades share, run against each of them.
"""

import pytest

from cosmos_table_wrapper import (
    ConflictError,
    EntityNotFoundError,
    NotFoundError,
    TableEntity,
    ValidationError,
)
from tests.helpers import TABLE


def seed(store, partitions, rows_per_partition):
    """Write entities directly into the store."""
    for p in range(partitions):
        for r in range(rows_per_partition):
            store.write(TABLE, {'PartitionKey': f"p{p}", 'RowKey': f"r{r:03d}", 'value': p * 100 + r})


class TestScans:
    """Test full-table and partition reads across pages."""

    @pytest.mark.parametrize("count", [0, 1, 3, 4, 10])
    def test_get_all_returns_every_entity_in_page_order(self, facade, store, count):
        for i in range(count):
            store.write(TABLE, {'PartitionKey': f"p{i % 2}", 'RowKey': f"r{i:03d}", 'value': i})

        entities = facade.get_all(TABLE)

        expected = sorted((f"p{i % 2}", f"r{i:03d}") for i in range(count))
        assert [e.key for e in entities] == expected

    @pytest.mark.parametrize("page_size", [1, 2, 5, 1000])
    def test_get_all_independent_of_page_size(self, facade, store, page_size):
        seed(store, partitions=2, rows_per_partition=4)
        facade.config.page_size = page_size

        entities = facade.get_all(TABLE)

        assert len(entities) == 8
        assert len({e.key for e in entities}) == 8

    def test_get_by_partition_key(self, facade, store):
        seed(store, partitions=3, rows_per_partition=5)

        entities = facade.get_by_partition_key(TABLE, "p1")

        assert [e.row_key for e in entities] == [f"r{r:03d}" for r in range(5)]
        assert all(e.partition_key == "p1" for e in entities)
        assert entities[0].properties == {'value': 100}
        assert entities[0].etag is not None
        assert entities[0].timestamp is not None

    def test_get_by_partition_key_with_projection(self, facade, store):
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1", 'total': 5, 'customer': "ACME"})

        [entity] = facade.get_by_partition_key(TABLE, "eu", columns=["total"])

        assert entity.key == ("eu", "1")
        assert entity.properties == {'total': 5}

    def test_get_by_partition_key_quotes_in_key(self, facade, store):
        store.write(TABLE, {'PartitionKey': "o'brien", 'RowKey': "1"})
        store.write(TABLE, {'PartitionKey': "other", 'RowKey': "1"})

        entities = facade.get_by_partition_key(TABLE, "o'brien")

        assert [e.key for e in entities] == [("o'brien", "1")]

    def test_empty_partition(self, facade, store):
        seed(store, partitions=1, rows_per_partition=2)

        assert facade.get_by_partition_key(TABLE, "nope") == []

    def test_scan_missing_table(self, facade):
        with pytest.raises(NotFoundError):
            facade.get_all("missing")

    def test_typed_entities(self, facade, store):
        class Reading(TableEntity):
            value: int

        seed(store, partitions=1, rows_per_partition=2)

        readings = facade.get_all(TABLE, entity_type=Reading)

        assert all(isinstance(r, Reading) for r in readings)
        assert [r.value for r in readings] == [0, 1]

    def test_entities_that_do_not_fit_the_model(self, facade, store):
        class Strict(TableEntity):
            required: str

        seed(store, partitions=1, rows_per_partition=1)

        with pytest.raises(ValidationError, match="Failed to convert entity to Strict"):
            facade.get_all(TABLE, entity_type=Strict)


class TestPointLookup:

    def test_get(self, facade, store):
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1", 'total': 5})

        entity = facade.get(TABLE, "eu", "1")

        assert entity.key == ("eu", "1")
        assert entity.properties == {'total': 5}

    def test_get_missing(self, facade):
        with pytest.raises(EntityNotFoundError) as exc_info:
            facade.get(TABLE, "eu", "404")

        assert exc_info.value.key == ("eu", "404")
        assert exc_info.value.table_name == TABLE

    def test_get_from_missing_table(self, facade):
        with pytest.raises(NotFoundError) as exc_info:
            facade.get("missing", "eu", "1")

        assert exc_info.value.resource_type == "table"


class TestWrites:

    def test_insert_or_merge_creates(self, facade, store):
        facade.insert_or_merge(TABLE, TableEntity(PartitionKey="eu", RowKey="1", total=5))

        assert facade.get(TABLE, "eu", "1").properties == {'total': 5}

    def test_insert_or_merge_unions_properties(self, facade, store):
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1", 'total': 5, 'customer': "ACME"})

        facade.insert_or_merge(TABLE, TableEntity(PartitionKey="eu", RowKey="1", total=7, note="rush"))

        assert facade.get(TABLE, "eu", "1").properties == {'total': 7, 'customer': "ACME", 'note': "rush"}

    def test_insert_or_replace_overwrites(self, facade, store):
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1", 'total': 5, 'customer': "ACME"})

        facade.insert_or_replace(TABLE, TableEntity(PartitionKey="eu", RowKey="1", total=7))

        assert facade.get(TABLE, "eu", "1").properties == {'total': 7}

    def test_insert_or_replace_creates(self, facade):
        facade.insert_or_replace(TABLE, TableEntity(PartitionKey="eu", RowKey="2", total=1))

        assert facade.get(TABLE, "eu", "2").properties == {'total': 1}

    def test_write_changes_etag(self, facade, store):
        facade.insert_or_merge(TABLE, TableEntity(PartitionKey="eu", RowKey="1", total=5))
        first = facade.get(TABLE, "eu", "1").etag

        facade.insert_or_merge(TABLE, TableEntity(PartitionKey="eu", RowKey="1", total=6))

        assert facade.get(TABLE, "eu", "1").etag != first


class TestDeletes:

    def test_delete_without_etag_matches_any_version(self, facade, store):
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1"})
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1", 'total': 2})

        facade.delete_entity(TABLE, TableEntity(PartitionKey="eu", RowKey="1"))

        assert store.entity_count(TABLE) == 0

    def test_delete_with_current_etag(self, facade, store):
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1"})
        entity = facade.get(TABLE, "eu", "1")

        facade.delete_entity(TABLE, entity)

        assert store.entity_count(TABLE) == 0

    def test_delete_with_stale_etag(self, facade, store):
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1"})
        entity = facade.get(TABLE, "eu", "1")
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1", 'total': 2})

        with pytest.raises(ConflictError):
            facade.delete_entity(TABLE, entity)

        assert store.entity_count(TABLE) == 1

    def test_batch_delete_partition(self, facade, store):
        seed(store, partitions=2, rows_per_partition=4)

        results = facade.delete_by_partition_key_batch(TABLE, "p0")

        assert len(results) == 4
        assert [e.partition_key for e in facade.get_all(TABLE)] == ["p1"] * 4

    def test_batch_delete_with_projection(self, facade, store):
        store.write(TABLE, {'PartitionKey': "eu", 'RowKey': "1", 'total': 5})

        facade.delete_by_partition_key_batch(TABLE, "eu", columns=["total"])

        assert store.entity_count(TABLE) == 0

    def test_batch_delete_chunks_large_partitions(self, facade, store):
        seed(store, partitions=1, rows_per_partition=250)

        results = facade.delete_by_partition_key_batch(TABLE, "p0")

        assert len(results) == 250
        assert store.entity_count(TABLE) == 0

    def test_clear_table(self, facade, store):
        seed(store, partitions=3, rows_per_partition=4)

        facade.clear_table(TABLE)

        assert store.entity_count(TABLE) == 0
        assert facade.get_all(TABLE) == []

    def test_clear_empty_table(self, facade, store):
        facade.clear_table(TABLE)

        assert store.entity_count(TABLE) == 0


class TestTableLifecycle:

    def test_create_then_delete(self, facade, store):
        facade.create_table_if_not_exists("invoices")
        facade.create_table_if_not_exists("invoices")

        assert store.has_table("invoices")

        facade.delete_table("invoices")

        assert not store.has_table("invoices")

    def test_delete_missing_table_is_not_an_error(self, facade, store):
        facade.delete_table("missing")

        assert not store.has_table("missing")

    def test_invalid_table_name(self, facade):
        with pytest.raises(ValidationError, match="Invalid table name"):
            facade.get_all("bad_name")

    def test_table_prefix(self, facade, store):
        facade.config.table_prefix = "app"
        store.tables["apporders"] = {}
        store.write("apporders", {'PartitionKey': "eu", 'RowKey': "1"})

        assert [e.key for e in facade.get_all("orders")] == [("eu", "1")]

"""
Legacy Table Facade

Facade over the legacy table client surface (`azure-cosmosdb-table`).
Reads are issued as segmented queries: each request returns at most one page
of entities and a continuation marker, and the next request passes that
marker back until the service stops returning one.
"""

import logging
from typing import Any, List, Optional, Sequence, Type, TypeVar

from azure.common import AzureException
from azure.cosmosdb.table.models import EntityProperty
from azure.cosmosdb.table.tablebatch import TableBatch
from azure.cosmosdb.table.tableservice import TableService

from ..core.base import BaseCosmosTable
from ..core.errors import map_legacy_error
from ..core.query import chunked, partition_filter, projection
from ..models import WILDCARD_ETAG, TableEntity

E = TypeVar('E', bound=TableEntity)

logger = logging.getLogger(__name__)


class LegacyCosmosTable(BaseCosmosTable):
    """Table facade written against the legacy `TableService` client.

    Example:
        table = LegacyCosmosTable(connection_string)
        table.insert_or_merge("orders", TableEntity(PartitionKey="eu", RowKey="42", total=9.5))
        orders = table.get_by_partition_key("orders", "eu", columns=["total"])
    """

    def _create_service(self) -> TableService:
        return TableService(
            connection_string=self.connection_string,
            socket_timeout=self.config.timeout_seconds
        )

    def _from_sdk(self, entity_type: Type[E], entity) -> E:
        properties = {}
        etag = None
        timestamp = None
        for name, value in entity.items():
            if name == 'etag':
                etag = value
            elif name == 'Timestamp':
                timestamp = value
            else:
                properties[name] = value.value if isinstance(value, EntityProperty) else value
        return self._to_model(entity_type, properties, etag, timestamp)

    def _query(
        self,
        table_name: str,
        entity_type: Type[E],
        filter: Optional[str] = None,
        columns: Optional[Sequence[str]] = None
    ) -> List[E]:
        select = projection(columns)
        results: List[E] = []
        marker = None
        pages = 0
        try:
            while True:
                segment = self.service.query_entities(
                    table_name,
                    filter=filter,
                    select=','.join(select) if select else None,
                    num_results=self.config.page_size,
                    marker=marker
                )
                results.extend(self._from_sdk(entity_type, entity) for entity in segment)
                pages += 1
                marker = segment.next_marker
                logger.debug(f"Read page {pages} from {table_name}, {len(results)} entities so far")
                if not marker:
                    break
        except AzureException as e:
            raise map_legacy_error(e, "QueryEntities", table_name) from e

        logger.info(f"Retrieved {len(results)} entities from {table_name} in {pages} page(s)")
        return results

    def create_table_if_not_exists(self, table_name: str) -> bool:
        """Create the table unless it already exists.

        Returns:
            True if the table was created, False if it already existed
        """
        table_name = self._resolve_table_name(table_name)
        try:
            created = self.service.create_table(table_name, fail_on_exist=False)
        except AzureException as e:
            raise map_legacy_error(e, "CreateTable", table_name) from e
        if created:
            logger.info(f"Created table {table_name}")
        return created

    def get_all(self, table_name: str, entity_type: Type[E] = TableEntity) -> List[E]:
        """Read every entity in the table.

        Args:
            table_name: Table to scan
            entity_type: Model class to build entities as

        Returns:
            All entities, in the order the service returned them
        """
        return self._query(self._resolve_table_name(table_name), entity_type)

    def get_by_partition_key(
        self,
        table_name: str,
        partition_key: str,
        columns: Optional[Sequence[str]] = None,
        entity_type: Type[E] = TableEntity
    ) -> List[E]:
        """Read every entity of one partition.

        Args:
            table_name: Table to query
            partition_key: Partition to read
            columns: Properties to return; all properties when None. The
                keys are always returned.
            entity_type: Model class to build entities as

        Returns:
            Entities of the partition
        """
        return self._query(
            self._resolve_table_name(table_name),
            entity_type,
            filter=partition_filter(partition_key),
            columns=columns
        )

    def get(self, table_name: str, partition_key: str, row_key: str, entity_type: Type[E] = TableEntity) -> E:
        """Get one entity by key.

        Raises:
            EntityNotFoundError: If no entity has this key
        """
        table_name = self._resolve_table_name(table_name)
        try:
            entity = self.service.get_entity(table_name, partition_key, row_key)
        except AzureException as e:
            raise map_legacy_error(e, "GetEntity", table_name, (partition_key, row_key)) from e
        return self._from_sdk(entity_type, entity)

    def insert_or_merge(self, table_name: str, entity: TableEntity) -> Optional[str]:
        """Merge the entity into the stored one, creating it if absent.

        Returns:
            The new etag
        """
        table_name = self._resolve_table_name(table_name)
        try:
            etag = self.service.insert_or_merge_entity(table_name, entity.to_properties())
        except AzureException as e:
            raise map_legacy_error(e, "InsertOrMergeEntity", table_name, entity.key) from e
        logger.info(f"Merged entity into {table_name}: {entity.key}")
        return etag

    def insert(self, table_name: str, entity: TableEntity) -> Optional[str]:
        """Insert a new entity.

        Returns:
            The new etag

        Raises:
            ConflictError: If an entity with the same key exists
        """
        table_name = self._resolve_table_name(table_name)
        try:
            etag = self.service.insert_entity(table_name, entity.to_properties())
        except AzureException as e:
            raise map_legacy_error(e, "InsertEntity", table_name, entity.key) from e
        logger.info(f"Inserted entity into {table_name}: {entity.key}")
        return etag

    def insert_or_replace(self, table_name: str, entity: TableEntity) -> Optional[str]:
        """Overwrite the stored entity, creating it if absent.

        Returns:
            The new etag
        """
        table_name = self._resolve_table_name(table_name)
        try:
            etag = self.service.insert_or_replace_entity(table_name, entity.to_properties())
        except AzureException as e:
            raise map_legacy_error(e, "InsertOrReplaceEntity", table_name, entity.key) from e
        logger.info(f"Replaced entity in {table_name}: {entity.key}")
        return etag

    def delete_by_partition_key_batch(
        self,
        table_name: str,
        partition_key: str,
        columns: Optional[Sequence[str]] = None,
        entity_type: Type[E] = TableEntity
    ) -> List[Any]:
        """Delete every entity of one partition with batch requests.

        Args:
            table_name: Table to delete from
            partition_key: Partition to empty
            columns: Projection used when reading the partition
            entity_type: Model class to read entities as

        Returns:
            Per-operation batch results; empty when the partition was empty
        """
        entities = self.get_by_partition_key(table_name, partition_key, columns, entity_type)
        if not entities:
            return []
        return self._delete_batch(self._resolve_table_name(table_name), entities)

    def delete_entity(self, table_name: str, entity: TableEntity) -> None:
        """Delete one entity.

        The entity's etag is set to the wildcard when it has none, so the
        delete matches any stored version.
        """
        table_name = self._resolve_table_name(table_name)
        entity.etag = entity.etag or WILDCARD_ETAG
        try:
            self.service.delete_entity(table_name, entity.partition_key, entity.row_key, if_match=entity.etag)
        except AzureException as e:
            raise map_legacy_error(e, "DeleteEntity", table_name, entity.key) from e
        logger.info(f"Deleted entity from {table_name}: {entity.key}")

    def clear_table(self, table_name: str) -> None:
        """Delete every entity in the table, one partition at a time."""
        entities = self.get_all(table_name)
        if not entities:
            return
        table_name = self._resolve_table_name(table_name)
        for partition in self._group_by_partition(entities).values():
            self._delete_batch(table_name, partition)
        logger.info(f"Cleared {len(entities)} entities from {table_name}")

    def delete_table(self, table_name: str) -> bool:
        """Delete the table.

        Returns:
            True if the table was deleted, False if it did not exist
        """
        table_name = self._resolve_table_name(table_name)
        try:
            deleted = self.service.delete_table(table_name, fail_not_exist=False)
        except AzureException as e:
            raise map_legacy_error(e, "DeleteTable", table_name) from e
        logger.info(f"Deleted table {table_name}" if deleted else f"Table {table_name} did not exist")
        return deleted

    def _delete_batch(self, table_name: str, entities: List[E]) -> List[Any]:
        # Entities share a partition; the service takes at most batch_size operations per batch
        results: List[Any] = []
        for chunk in chunked(entities, self.config.batch_size):
            batch = TableBatch()
            for entity in chunk:
                entity.etag = entity.etag or WILDCARD_ETAG
                batch.delete_entity(entity.partition_key, entity.row_key, if_match=entity.etag)
            try:
                results.extend(self.service.commit_batch(table_name, batch))
            except AzureException as e:
                raise map_legacy_error(e, "CommitBatch", table_name) from e
            logger.info(f"Deleted batch of {len(chunk)} entities from {table_name}")
        return results

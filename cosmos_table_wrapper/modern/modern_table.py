"""
Modern Table Facade

Facade over the modern table client surface (`azure-data-tables`). Reads go
through the SDK's paged iterators: pages are requested one at a time and the
SDK passes each page's continuation token to the next request until the
service returns none.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from azure.core import MatchConditions
from azure.core.exceptions import AzureError
from azure.data.tables import EntityProperty, TableClient, TableServiceClient, UpdateMode

from ..core.base import BaseCosmosTable
from ..core.errors import map_modern_error
from ..core.query import chunked, projection
from ..models import WILDCARD_ETAG, TableEntity

E = TypeVar('E', bound=TableEntity)

logger = logging.getLogger(__name__)


def match_condition(etag: Optional[str]) -> Dict[str, Any]:
    """Keyword arguments conditioning a write on `etag`.

    Without an etag (or with the wildcard) the operation matches any version.
    """
    if etag and etag != WILDCARD_ETAG:
        return {'etag': etag, 'match_condition': MatchConditions.IfNotModified}
    return {'match_condition': MatchConditions.Unconditionally}


class ModernCosmosTable(BaseCosmosTable):
    """Table facade written against the modern `TableServiceClient`.

    Example:
        table = ModernCosmosTable(connection_string)
        table.create_table_if_not_exists("orders")
        table.insert_or_replace("orders", TableEntity(PartitionKey="eu", RowKey="42", total=9.5))
        order = table.get("orders", "eu", "42")
    """

    def _create_service(self) -> TableServiceClient:
        return TableServiceClient.from_connection_string(
            self.connection_string,
            retry_total=self.config.retries,
            connection_timeout=self.config.timeout_seconds,
            read_timeout=self.config.timeout_seconds
        )

    def get_table_client(self, table_name: str) -> TableClient:
        """Client for one table; no request is made."""
        return self.service.get_table_client(self._resolve_table_name(table_name))

    def _from_sdk(self, entity_type: Type[E], entity: Mapping[str, Any]) -> E:
        metadata = getattr(entity, 'metadata', None) or {}
        properties = {
            name: value.value if isinstance(value, EntityProperty) else value
            for name, value in entity.items()
        }
        return self._to_model(entity_type, properties, metadata.get('etag'), metadata.get('timestamp'))

    def _read_pages(self, table_client: TableClient, pager, entity_type: Type[E]) -> List[E]:
        results: List[E] = []
        pages = 0
        try:
            for page in pager.by_page():
                results.extend(self._from_sdk(entity_type, entity) for entity in page)
                pages += 1
                logger.debug(f"Read page {pages} from {table_client.table_name}, {len(results)} entities so far")
        except AzureError as e:
            raise map_modern_error(e, "QueryEntities", table_client.table_name) from e

        logger.info(f"Retrieved {len(results)} entities from {table_client.table_name} in {pages} page(s)")
        return results

    def create_table_if_not_exists(self, table_name: str) -> TableClient:
        """Create the table unless it already exists.

        Returns:
            Client for the table
        """
        table_name = self._resolve_table_name(table_name)
        try:
            table_client = self.service.create_table_if_not_exists(table_name)
        except AzureError as e:
            raise map_modern_error(e, "CreateTable", table_name) from e
        logger.info(f"Ensured table {table_name} exists")
        return table_client

    def get_all(self, table_name: str, entity_type: Type[E] = TableEntity) -> List[E]:
        """Read every entity in the table.

        Args:
            table_name: Table to scan
            entity_type: Model class to build entities as

        Returns:
            All entities, in the order the service returned them
        """
        table_client = self.get_table_client(table_name)
        pager = table_client.list_entities(results_per_page=self.config.page_size)
        return self._read_pages(table_client, pager, entity_type)

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
        table_client = self.get_table_client(table_name)
        query_kwargs = {
            'query_filter': "PartitionKey eq @partition_key",
            'parameters': {'partition_key': partition_key},
            'results_per_page': self.config.page_size,
        }
        select = projection(columns)
        if select is not None:
            query_kwargs['select'] = select
        pager = table_client.query_entities(**query_kwargs)
        return self._read_pages(table_client, pager, entity_type)

    def get(self, table_name: str, partition_key: str, row_key: str, entity_type: Type[E] = TableEntity) -> E:
        """Get one entity by key.

        Raises:
            EntityNotFoundError: If no entity has this key
        """
        table_client = self.get_table_client(table_name)
        try:
            entity = table_client.get_entity(partition_key, row_key)
        except AzureError as e:
            raise map_modern_error(e, "GetEntity", table_client.table_name, (partition_key, row_key)) from e
        return self._from_sdk(entity_type, entity)

    def insert_or_merge(self, table_name: str, entity: TableEntity) -> Mapping[str, Any]:
        """Merge the entity into the stored one, creating it if absent.

        Returns:
            Response metadata (etag, timestamp)
        """
        table_client = self.get_table_client(table_name)
        try:
            metadata = table_client.upsert_entity(entity.to_properties(), mode=UpdateMode.MERGE)
        except AzureError as e:
            raise map_modern_error(e, "UpsertEntity", table_client.table_name, entity.key) from e
        logger.info(f"Merged entity into {table_client.table_name}: {entity.key}")
        return metadata

    def insert(self, table_name: str, entity: TableEntity) -> Mapping[str, Any]:
        """Write the entity over an existing one, bound to its version marker.

        With this client surface the entity must already exist: its
        properties are merged into the stored entity, conditioned on
        `entity.etag` (any version when the entity has none).

        Returns:
            Response metadata (etag, timestamp)

        Raises:
            EntityNotFoundError: If no entity has this key
            ConflictError: If the stored entity has a different etag
        """
        table_client = self.get_table_client(table_name)
        try:
            metadata = table_client.update_entity(
                entity.to_properties(),
                mode=UpdateMode.MERGE,
                **match_condition(entity.etag)
            )
        except AzureError as e:
            raise map_modern_error(e, "UpdateEntity", table_client.table_name, entity.key) from e
        logger.info(f"Updated entity in {table_client.table_name}: {entity.key}")
        return metadata

    def insert_or_replace(self, table_name: str, entity: TableEntity) -> Mapping[str, Any]:
        """Overwrite the stored entity, creating it if absent.

        Returns:
            Response metadata (etag, timestamp)
        """
        table_client = self.get_table_client(table_name)
        try:
            metadata = table_client.upsert_entity(entity.to_properties(), mode=UpdateMode.REPLACE)
        except AzureError as e:
            raise map_modern_error(e, "UpsertEntity", table_client.table_name, entity.key) from e
        logger.info(f"Replaced entity in {table_client.table_name}: {entity.key}")
        return metadata

    def delete_by_partition_key_batch(
        self,
        table_name: str,
        partition_key: str,
        columns: Optional[Sequence[str]] = None,
        entity_type: Type[E] = TableEntity
    ) -> Optional[List[Mapping[str, Any]]]:
        """Delete every entity of one partition with transactions.

        Args:
            table_name: Table to delete from
            partition_key: Partition to empty
            columns: Projection used when reading the partition
            entity_type: Model class to read entities as

        Returns:
            Per-operation transaction results, or None when the partition
            was empty
        """
        entities = self.get_by_partition_key(table_name, partition_key, columns, entity_type)
        if not entities:
            return None
        return self._delete_batch(self.get_table_client(table_name), entities)

    def delete_entity(self, table_name: str, entity: TableEntity) -> None:
        """Delete one entity, conditioned on its etag (any version when it has none)."""
        table_client = self.get_table_client(table_name)
        try:
            table_client.delete_entity(entity.partition_key, entity.row_key, **match_condition(entity.etag))
        except AzureError as e:
            raise map_modern_error(e, "DeleteEntity", table_client.table_name, entity.key) from e
        logger.info(f"Deleted entity from {table_client.table_name}: {entity.key}")

    def clear_table(self, table_name: str) -> None:
        """Delete every entity in the table, one partition at a time."""
        entities = self.get_all(table_name)
        if not entities:
            return
        table_client = self.get_table_client(table_name)
        for partition in self._group_by_partition(entities).values():
            self._delete_batch(table_client, partition)
        logger.info(f"Cleared {len(entities)} entities from {table_client.table_name}")

    def delete_table(self, table_name: str) -> None:
        """Delete the table. The service client does not fail on a missing table."""
        table_client = self.get_table_client(table_name)
        try:
            table_client.delete_table()
        except AzureError as e:
            raise map_modern_error(e, "DeleteTable", table_client.table_name) from e
        logger.info(f"Deleted table {table_client.table_name}")

    def _delete_batch(self, table_client: TableClient, entities: List[E]) -> List[Mapping[str, Any]]:
        # Entities share a partition; a transaction holds at most batch_size operations
        results: List[Mapping[str, Any]] = []
        for chunk in chunked(entities, self.config.batch_size):
            operations = [
                ('delete', {'PartitionKey': entity.partition_key, 'RowKey': entity.row_key}, match_condition(entity.etag))
                for entity in chunk
            ]
            try:
                results.extend(table_client.submit_transaction(operations))
            except AzureError as e:
                raise map_modern_error(e, "SubmitTransaction", table_client.table_name) from e
            logger.info(f"Deleted batch of {len(chunk)} entities from {table_client.table_name}")
        return results

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..config import TableStorageConfig
from ..exceptions import ConnectionError, ValidationError
from ..models import TableEntity

E = TypeVar('E', bound=TableEntity)

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = 'cosmos_table_wrapper'


class BaseCosmosTable(ABC):
    """Operations shared by the legacy and modern table facades.

    Subclasses own a lazily created SDK service client and implement every
    operation against their client surface. Table names are resolved through
    the configuration, which applies the table prefix.
    """

    def __init__(self, connection_string: Optional[str] = None, config: Optional[TableStorageConfig] = None):
        """Initialize the facade.

        Args:
            connection_string: Storage account connection string; takes
                precedence over the one in `config`
            config: Table storage configuration (defaults to the environment)
        """
        self.config = config or TableStorageConfig.from_env()
        self.connection_string = connection_string or self.config.connection_string
        self._service = None

        if self.config.enable_debug_logging:
            logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)

    @property
    def service(self):
        """Lazy initialization of the SDK service client."""
        if self._service is None:
            if not self.connection_string:
                raise ConnectionError(
                    "No connection string configured - pass one or set AZURE_STORAGE_CONNECTION_STRING"
                )
            try:
                self._service = self._create_service()
            except Exception as e:
                logger.error(f"Failed to create table service client: {e}")
                raise ConnectionError(f"Failed to connect to table service: {e}", e) from e
        return self._service

    @abstractmethod
    def _create_service(self):
        """Create the SDK service client from `self.connection_string`."""

    def _resolve_table_name(self, table_name: str) -> str:
        try:
            return self.config.get_table_name(table_name)
        except ValueError as e:
            raise ValidationError(str(e), {'table_name': table_name}, e) from e

    def _to_model(
        self,
        entity_type: Type[E],
        properties: Mapping[str, Any],
        etag: Optional[str],
        timestamp: Optional[datetime]
    ) -> E:
        """Convert a property mapping read from the service to a model."""
        try:
            return entity_type.from_properties(properties, etag=etag, timestamp=timestamp)
        except PydanticValidationError as e:
            logger.error(f"Failed to convert entity to {entity_type.__name__}: {e}")
            raise ValidationError(
                f"Failed to convert entity to {entity_type.__name__}: {e}",
                {'errors': e.errors()},
                e
            ) from e

    @staticmethod
    def _group_by_partition(entities: Iterable[E]) -> Dict[str, List[E]]:
        """Group entities by partition key, keeping first-seen order."""
        groups: Dict[str, List[E]] = OrderedDict()
        for entity in entities:
            groups.setdefault(entity.partition_key, []).append(entity)
        return groups

    # Operations every facade provides

    @abstractmethod
    def create_table_if_not_exists(self, table_name: str):
        """Create the table unless it already exists."""

    @abstractmethod
    def get_all(self, table_name: str, entity_type: Type[E] = TableEntity) -> List[E]:
        """Read every entity in the table, following continuation markers."""

    @abstractmethod
    def get_by_partition_key(
        self,
        table_name: str,
        partition_key: str,
        columns: Optional[Sequence[str]] = None,
        entity_type: Type[E] = TableEntity
    ) -> List[E]:
        """Read every entity of a partition, optionally projected to `columns`."""

    @abstractmethod
    def get(self, table_name: str, partition_key: str, row_key: str, entity_type: Type[E] = TableEntity) -> E:
        """Point lookup; raises EntityNotFoundError when absent."""

    @abstractmethod
    def insert_or_merge(self, table_name: str, entity: TableEntity):
        """Merge the entity's properties into the stored entity, creating it if absent."""

    @abstractmethod
    def insert(self, table_name: str, entity: TableEntity):
        """Write the entity with the client surface's insert semantics."""

    @abstractmethod
    def insert_or_replace(self, table_name: str, entity: TableEntity):
        """Overwrite the stored entity, creating it if absent."""

    @abstractmethod
    def delete_by_partition_key_batch(
        self,
        table_name: str,
        partition_key: str,
        columns: Optional[Sequence[str]] = None,
        entity_type: Type[E] = TableEntity
    ):
        """Delete every entity of a partition with grouped requests."""

    @abstractmethod
    def delete_entity(self, table_name: str, entity: TableEntity) -> None:
        """Delete one entity, matching any version when it has no etag."""

    @abstractmethod
    def clear_table(self, table_name: str) -> None:
        """Delete every entity in the table."""

    @abstractmethod
    def delete_table(self, table_name: str):
        """Delete the table; a missing table is not an error."""

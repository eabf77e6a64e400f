"""
Table Entity Model

Every stored record carries a partition key and a row key (together the
unique key), a version marker (etag) maintained by the service for optimistic
concurrency, a service timestamp and an open set of named, typed properties.

`TableEntity` accepts any extra property. Subclasses declare typed properties
the same way any pydantic model declares fields:

    class Order(TableEntity):
        customer: str
        total: float = 0.0

    order = Order(PartitionKey="eu", RowKey="42", customer="ACME")
"""

import re
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

# "Match any version" marker for conditional operations
WILDCARD_ETAG = "*"

# Fields maintained by the service or used for addressing, never user properties
SYSTEM_FIELDS = frozenset({'partition_key', 'row_key', 'etag', 'timestamp'})

MAX_KEY_LENGTH = 1024

_FORBIDDEN_KEY_CHARS = re.compile(r'[/\\#?\x00-\x1f\x7f-\x9f]')

E = TypeVar('E', bound='TableEntity')


class TableEntity(BaseModel):
    """An entity as stored in a table."""

    partition_key: str = Field(..., alias='PartitionKey', max_length=MAX_KEY_LENGTH,
                               description="Partition the entity belongs to")
    row_key: str = Field(..., alias='RowKey', max_length=MAX_KEY_LENGTH,
                         description="Identifier of the entity within its partition")
    etag: Optional[str] = Field(None, description="Version marker assigned by the service")
    timestamp: Optional[datetime] = Field(None, alias='Timestamp',
                                          description="Last modification time assigned by the service")

    @field_validator('partition_key', 'row_key')
    @classmethod
    def validate_key(cls, v):
        """Reject characters the service does not allow in keys."""
        if _FORBIDDEN_KEY_CHARS.search(v):
            raise ValueError("Keys cannot contain '/', '\\', '#', '?' or control characters")
        return v

    @property
    def key(self) -> Tuple[str, str]:
        return (self.partition_key, self.row_key)

    @property
    def properties(self) -> Dict[str, Any]:
        """User properties only, without keys or service fields."""
        return self.model_dump(exclude=set(SYSTEM_FIELDS), exclude_none=True)

    def to_properties(self) -> Dict[str, Any]:
        """Flat property mapping as sent to the service.

        Holds PartitionKey, RowKey and every user property. The etag and
        timestamp are not properties and are left out, as are None values.
        """
        return {
            'PartitionKey': self.partition_key,
            'RowKey': self.row_key,
            **self.properties,
        }

    @classmethod
    def from_properties(
        cls: Type[E],
        properties: Mapping[str, Any],
        etag: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> E:
        """Build an entity from a flat property mapping.

        Args:
            properties: Mapping holding PartitionKey, RowKey and user properties
            etag: Version marker returned by the service
            timestamp: Service timestamp

        Returns:
            Instance of the class this is called on

        Raises:
            pydantic.ValidationError: If the properties do not fit the model
        """
        data = dict(properties)
        if etag is not None:
            data['etag'] = etag
        if timestamp is not None:
            data['Timestamp'] = timestamp
        return cls.model_validate(data)

    model_config = ConfigDict(
        extra='allow',
        populate_by_name=True,
        validate_assignment=True
    )

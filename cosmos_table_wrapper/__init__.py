"""
Cosmos Table Wrapper

Two facades over Azure Table Storage / the Cosmos DB Table API exposing the
same operations: full-table scan, partition query with optional projection,
point lookup, insert-or-merge, insert-or-replace, insert, single and
partition-wide deletes, table clear and table delete.

- LegacyCosmosTable: written against `azure-cosmosdb-table`
- ModernCosmosTable: written against `azure-data-tables`
"""

from .config import TableStorageConfig
from .exceptions import (
    ConflictError,
    ConnectionError,
    EntityNotFoundError,
    NotFoundError,
    RetryableError,
    TableStorageWrapperError,
    ValidationError,
)
from .models import WILDCARD_ETAG, TableEntity
from .core import BaseCosmosTable
from .legacy import LegacyCosmosTable
from .modern import ModernCosmosTable

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "TableStorageConfig",

    # Exceptions
    "ConflictError",
    "ConnectionError",
    "EntityNotFoundError",
    "NotFoundError",
    "RetryableError",
    "TableStorageWrapperError",
    "ValidationError",

    # Models
    "TableEntity",
    "WILDCARD_ETAG",

    # Facades
    "BaseCosmosTable",
    "LegacyCosmosTable",
    "ModernCosmosTable",
]

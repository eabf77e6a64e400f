"""
Core building blocks shared by the legacy and modern facades.

- base: the operations both facades expose
- errors: translation of SDK exceptions into domain exceptions
- query: filter construction, projections and batch chunking
"""

from .base import BaseCosmosTable
from .errors import map_legacy_error, map_modern_error
from .query import chunked, partition_filter, projection

__all__ = [
    "BaseCosmosTable",
    "chunked",
    "map_legacy_error",
    "map_modern_error",
    "partition_filter",
    "projection",
]

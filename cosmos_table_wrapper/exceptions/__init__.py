# Base exception class
from .base import TableStorageWrapperError

from .domain_exceptions import (
    ValidationError,
    EntityNotFoundError,
    NotFoundError,
    ConflictError,
    ConnectionError,
    RetryableError,
)

__all__ = [
    # Base exception
    "TableStorageWrapperError",

    # Domain exceptions (alphabetically ordered)
    "ConflictError",
    "ConnectionError",
    "EntityNotFoundError",
    "NotFoundError",
    "RetryableError",
    "ValidationError",
]

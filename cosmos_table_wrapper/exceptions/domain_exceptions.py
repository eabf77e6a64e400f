"""
Domain exceptions for the table storage facades.

Both facades translate the errors of their SDK into this hierarchy, so
callers handle one set of exceptions whichever client surface they use.

Organized by category:
1. Validation errors
2. Not found errors
3. Conflict errors (existing keys, stale version markers)
4. Infrastructure and retry errors
"""

from typing import Any, Dict, Optional, Tuple

from .base import TableStorageWrapperError


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(TableStorageWrapperError):
    """Raised when the service or the wrapper rejects the shape of a request.

    Used for:
    - Invalid keys, property names or property values
    - Batches the service refuses (too many operations, mixed partitions)
    - Entities that cannot be converted to the requested model
    """

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Dictionary of field-level validation errors
            original_error: The SDK exception that caused this error
        """
        self.errors = errors or {}
        context = {
            'validation_errors': self.errors
        }
        super().__init__(message, original_error, context)


# =============================================================================
# Not Found Errors
# =============================================================================

class EntityNotFoundError(TableStorageWrapperError):
    """Raised when a point lookup finds no entity for the key."""

    def __init__(self, table_name: str, key: Tuple[str, str], original_error: Optional[Exception] = None):
        """Initialize entity not found error.

        Args:
            table_name: Name of the table
            key: The (partition_key, row_key) pair that was not found
            original_error: The SDK exception that caused this error
        """
        self.table_name = table_name
        self.key = key
        message = f"Entity not found in table '{table_name}' with key: {key}"
        context = {
            'table_name': table_name,
            'key': key
        }
        super().__init__(message, original_error, context)


class NotFoundError(TableStorageWrapperError):
    """Raised when a table (or another service resource) does not exist."""

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_name: Optional[str] = None, original_error: Optional[Exception] = None):
        """Initialize not found error.

        Args:
            message: Human-readable error message
            resource_type: Type of resource not found (e.g. 'table')
            resource_name: Name of the resource not found
            original_error: The SDK exception that caused this error
        """
        self.resource_type = resource_type
        self.resource_name = resource_name
        context = {}
        if resource_type:
            context['resource_type'] = resource_type
        if resource_name:
            context['resource_name'] = resource_name
        super().__init__(message, original_error, context)


# =============================================================================
# Conflict Errors
# =============================================================================

class ConflictError(TableStorageWrapperError):
    """Raised when a write collides with existing data.

    Used for:
    - Inserting a key that already exists
    - Replacing or deleting with a stale version marker (etag)
    - Creating a table that exists or is being deleted
    """

    def __init__(self, message: str, resource_id: Optional[str] = None, original_error: Optional[Exception] = None):
        """Initialize conflict error.

        Args:
            message: Human-readable error message
            resource_id: Identifier of the conflicting resource
            original_error: The SDK exception that caused this error
        """
        self.resource_id = resource_id
        context = {}
        if resource_id:
            context['resource_id'] = resource_id
        super().__init__(message, original_error, context)


# =============================================================================
# Infrastructure and Retry Errors
# =============================================================================

class ConnectionError(TableStorageWrapperError):
    """Raised when the storage account cannot be reached or used.

    Used for:
    - Missing or malformed connection strings
    - Authentication/authorization failures
    - Transport-level failures
    - Service errors with no more specific mapping
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)


class RetryableError(TableStorageWrapperError):
    """Raised when the service reports a temporary condition.

    Throttling, timeouts and 5xx responses end up here. The wrapper does not
    retry on its own; the caller decides.
    """

    def __init__(self, message: str, retry_after_seconds: Optional[int] = None, original_error: Optional[Exception] = None):
        """Initialize retryable error.

        Args:
            message: Human-readable error message
            retry_after_seconds: Suggested retry delay in seconds
            original_error: The SDK exception that caused this error
        """
        self.retry_after_seconds = retry_after_seconds
        context = {}
        if retry_after_seconds:
            context['retry_after_seconds'] = retry_after_seconds
        super().__init__(message, original_error, context)

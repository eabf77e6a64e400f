"""
SDK Error Mapping

Both client surfaces report failures through their own exception types:

- legacy (`azure-cosmosdb-table`): `azure.common.AzureHttpError` and its
  subclasses, carrying the HTTP status code
- modern (`azure-data-tables`): `azure.core.exceptions.HttpResponseError`
  and friends, carrying the status code and the service error code

Both are translated into the domain exceptions by HTTP status, refined by the
service error code where the status alone is ambiguous (a 404 can mean a
missing entity or a missing table).
"""

import logging
from typing import Optional, Tuple

from azure.common import AzureException, AzureHttpError
from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)
from azure.cosmosdb.table.models import AzureBatchValidationError

from ..exceptions import (
    ConflictError,
    ConnectionError,
    EntityNotFoundError,
    NotFoundError,
    RetryableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

# A keyed 404 means a missing entity unless the service says the table is gone
TABLE_NOT_FOUND_CODES = frozenset({'TableNotFound'})

# Status implied by the exception type when no response was attached
_MODERN_STATUS_BY_TYPE = (
    (ResourceNotFoundError, 404),
    (ResourceExistsError, 409),
    (ResourceModifiedError, 412),
    (ClientAuthenticationError, 401),
)


def _error_code_of(error: Exception) -> Optional[str]:
    code = getattr(error, 'error_code', None)
    if code is None:
        return None
    # azure-data-tables reports codes as a str enum
    return getattr(code, 'value', code)


def _map_status(
    status_code: Optional[int],
    error_code: Optional[str],
    full_message: str,
    table_name: str,
    key: Optional[Tuple[str, str]],
    error: Exception
) -> Exception:
    resource_id = f"{key[0]}/{key[1]}" if key else table_name

    if status_code == 404:
        if key and error_code not in TABLE_NOT_FOUND_CODES:
            return EntityNotFoundError(table_name, key, original_error=error)
        return NotFoundError(f"Table not found - {full_message}", 'table', table_name, original_error=error)

    elif status_code == 409:
        return ConflictError(f"Resource already exists - {full_message}", resource_id, original_error=error)

    elif status_code == 412:
        return ConflictError(f"Version marker mismatch - {full_message}", resource_id, original_error=error)

    elif status_code in (400, 413):
        return ValidationError(f"Request rejected - {full_message}", {'error_code': error_code}, original_error=error)

    elif status_code in (401, 403):
        return ConnectionError(f"Authentication/authorization failed - {full_message}", original_error=error)

    elif status_code in RETRYABLE_STATUS_CODES:
        return RetryableError(f"Service unavailable or throttling - {full_message}", original_error=error)

    logger.warning(f"Unknown table service error (status={status_code}, code={error_code}) mapped to ConnectionError")
    return ConnectionError(f"Table operation failed - {full_message}", original_error=error)


def _context(operation: str, table_name: str, key: Optional[Tuple[str, str]]) -> str:
    context = f"{operation} on {table_name}"
    if key:
        context += f" (entity: {key[0]}/{key[1]})"
    return context


def map_legacy_error(
    error: Exception,
    operation: str,
    table_name: str,
    key: Optional[Tuple[str, str]] = None
) -> Exception:
    """Map a legacy SDK exception to a domain exception.

    Args:
        error: Exception raised by `azure-cosmosdb-table`
        operation: The operation that failed (e.g. "InsertEntity")
        table_name: The table name
        key: (partition_key, row_key) of the entity involved, if any

    Returns:
        Appropriate domain exception
    """
    full_message = f"{_context(operation, table_name, key)}: {error}"

    if isinstance(error, AzureBatchValidationError):
        return ValidationError(f"Invalid batch - {full_message}", original_error=error)

    if isinstance(error, AzureHttpError):
        return _map_status(error.status_code, _error_code_of(error), full_message, table_name, key, error)

    if isinstance(error, AzureException):
        return ConnectionError(f"Request could not be sent - {full_message}", original_error=error)

    logger.warning(f"Unexpected {type(error).__name__} from legacy table client mapped to ConnectionError")
    return ConnectionError(f"Table operation failed - {full_message}", original_error=error)


def map_modern_error(
    error: Exception,
    operation: str,
    table_name: str,
    key: Optional[Tuple[str, str]] = None
) -> Exception:
    """Map a modern SDK exception to a domain exception.

    Args:
        error: Exception raised by `azure-data-tables` / `azure-core`
        operation: The operation that failed (e.g. "UpsertEntity")
        table_name: The table name
        key: (partition_key, row_key) of the entity involved, if any

    Returns:
        Appropriate domain exception
    """
    full_message = f"{_context(operation, table_name, key)}: {getattr(error, 'message', None) or error}"

    if isinstance(error, (ServiceRequestError, ServiceResponseError)):
        return ConnectionError(f"Transport failure - {full_message}", original_error=error)

    if isinstance(error, HttpResponseError):
        status_code = error.status_code
        if status_code is None:
            status_code = next((s for t, s in _MODERN_STATUS_BY_TYPE if isinstance(error, t)), None)
        return _map_status(status_code, _error_code_of(error), full_message, table_name, key, error)

    if isinstance(error, AzureError):
        return ConnectionError(f"Table operation failed - {full_message}", original_error=error)

    logger.warning(f"Unexpected {type(error).__name__} from table client mapped to ConnectionError")
    return ConnectionError(f"Table operation failed - {full_message}", original_error=error)

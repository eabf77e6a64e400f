"""Query and batching helpers shared by both facades."""

from typing import Iterable, Iterator, List, Optional, Sequence, TypeVar

T = TypeVar('T')

KEY_COLUMNS = ('PartitionKey', 'RowKey')


def quote(value: str) -> str:
    """Quote a string literal for an OData filter."""
    return "'" + value.replace("'", "''") + "'"


def partition_filter(partition_key: str) -> str:
    """Filter selecting every entity of one partition."""
    return f"PartitionKey eq {quote(partition_key)}"


def projection(columns: Optional[Sequence[str]]) -> Optional[List[str]]:
    """Column list to request, or None for every property.

    The key columns are always requested so projected entities stay
    addressable (batch deletes rely on it).
    """
    if columns is None:
        return None
    selected = list(KEY_COLUMNS)
    for column in columns:
        if column not in selected:
            selected.append(column)
    return selected


def chunked(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """Yield successive lists of at most `size` items."""
    if size < 1:
        raise ValueError("size must be positive")
    chunk: List[T] = []
    for item in items:
        chunk.append(item)
        if len(chunk) == size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk

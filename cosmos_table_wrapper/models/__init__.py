from .entity import SYSTEM_FIELDS, WILDCARD_ETAG, TableEntity

__all__ = [
    "SYSTEM_FIELDS",
    "TableEntity",
    "WILDCARD_ETAG",
]

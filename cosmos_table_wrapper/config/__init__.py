from .config import MAX_BATCH_SIZE, MAX_PAGE_SIZE, TableStorageConfig

__all__ = ["MAX_BATCH_SIZE", "MAX_PAGE_SIZE", "TableStorageConfig"]

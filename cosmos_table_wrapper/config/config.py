import os
import re
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file if it exists
load_dotenv()

# Service limits: at most 1000 entities per query page, 100 operations per batch
MAX_PAGE_SIZE = 1000
MAX_BATCH_SIZE = 100

TABLE_NAME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9]{2,62}$')

# Well-known account key of the Azurite/storage emulator
EMULATOR_CONNECTION_STRING = (
    "DefaultEndpointsProtocol=http;"
    "AccountName=devstoreaccount1;"
    "AccountKey=Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/K1SZFPTOtr/KBHBeksoGMGw==;"
    "TableEndpoint=http://127.0.0.1:10002/devstoreaccount1;"
)


class TableStorageConfig(BaseModel):
    """Configuration for table storage connections and operations."""

    connection_string: Optional[str] = Field(
        default_factory=lambda: os.getenv("AZURE_STORAGE_CONNECTION_STRING"),
        description="Storage account (or Cosmos DB Table API) connection string"
    )

    # Table configuration
    table_prefix: str = Field(
        default_factory=lambda: os.getenv("TABLE_STORAGE_TABLE_PREFIX", ""),
        description="Prefix to add to all table names"
    )

    # Paging and batching
    page_size: int = Field(
        default_factory=lambda: int(os.getenv("TABLE_STORAGE_PAGE_SIZE", str(MAX_PAGE_SIZE))),
        description="Maximum number of entities requested per query page"
    )

    batch_size: int = Field(
        default_factory=lambda: int(os.getenv("TABLE_STORAGE_BATCH_SIZE", str(MAX_BATCH_SIZE))),
        description="Maximum number of operations submitted per batch request"
    )

    # Connection settings, handed to the SDK pipeline
    retries: int = Field(
        default=3,
        description="Number of retry attempts the SDK makes for failed requests"
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Request timeout in seconds"
    )

    # Logging settings
    enable_debug_logging: bool = Field(
        default_factory=lambda: os.getenv("TABLE_STORAGE_DEBUG_LOGGING", "false").lower() == "true",
        description="Enable debug logging for table operations"
    )

    @field_validator('page_size')
    @classmethod
    def validate_page_size(cls, v):
        """Validate page size against the service's per-page limit."""
        if not 1 <= v <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        return v

    @field_validator('batch_size')
    @classmethod
    def validate_batch_size(cls, v):
        """Validate batch size against the service's per-batch limit."""
        if not 1 <= v <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")
        return v

    @field_validator('retries')
    @classmethod
    def validate_retries(cls, v):
        if v < 0:
            raise ValueError("retries cannot be negative")
        return v

    def get_table_name(self, base_name: str) -> str:
        """Get the full table name with prefix.

        Table names may only hold letters and digits, so the prefix is
        prepended without a separator.

        Args:
            base_name: Base table name

        Returns:
            Full table name

        Raises:
            ValueError: If the result is not a valid table name
        """
        table_name = f"{self.table_prefix}{base_name}"
        if not TABLE_NAME_PATTERN.match(table_name):
            raise ValueError(
                f"Invalid table name '{table_name}': must start with a letter, "
                "contain only letters and digits, and be 3-63 characters long"
            )
        return table_name

    @classmethod
    def from_env(cls) -> 'TableStorageConfig':
        """Create configuration from environment variables.

        Returns:
            TableStorageConfig instance
        """
        return cls()

    @classmethod
    def from_connection_string(cls, connection_string: str, **kwargs) -> 'TableStorageConfig':
        """Create configuration for an explicit connection string.

        Args:
            connection_string: Storage account connection string
            **kwargs: Additional configuration parameters

        Returns:
            TableStorageConfig instance
        """
        return cls(connection_string=connection_string, **kwargs)

    @classmethod
    def for_local_development(cls) -> 'TableStorageConfig':
        """Create configuration for the local storage emulator (Azurite).

        Returns:
            TableStorageConfig instance configured for local development
        """
        return cls(
            connection_string=EMULATOR_CONNECTION_STRING,
            enable_debug_logging=True
        )

    model_config = ConfigDict(
        validate_assignment=True
    )

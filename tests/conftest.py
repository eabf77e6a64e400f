"""
Test configuration and fixtures for the table facades.

Each facade gets an in-memory service client in place of the SDK client, so
every operation runs end to end without a storage account.
"""

from unittest.mock import patch

import pytest

from cosmos_table_wrapper import LegacyCosmosTable, ModernCosmosTable, TableStorageConfig
from tests.helpers import (
    TABLE,
    TEST_CONNECTION_STRING,
    FakeLegacyTableService,
    FakeTableBatch,
    FakeTableServiceClient,
    FakeTableStore,
)


@pytest.fixture
def table_config():
    """Configuration for testing."""
    return TableStorageConfig(
        connection_string=TEST_CONNECTION_STRING,
        table_prefix="",
        page_size=1000,
        batch_size=100,
        enable_debug_logging=False
    )


@pytest.fixture
def store():
    """Shared in-memory table store returning at most 3 entities per page."""
    store = FakeTableStore(max_page_size=3)
    store.tables[TABLE] = {}
    return store


@pytest.fixture
def legacy_service(store):
    return FakeLegacyTableService(store)


@pytest.fixture
def modern_service(store):
    return FakeTableServiceClient(store)


@pytest.fixture
def legacy_table(table_config, legacy_service):
    """Legacy facade backed by the in-memory service."""
    table = LegacyCosmosTable(config=table_config)
    table._service = legacy_service
    with patch('cosmos_table_wrapper.legacy.legacy_table.TableBatch', FakeTableBatch):
        yield table


@pytest.fixture
def modern_table(table_config, modern_service):
    """Modern facade backed by the in-memory service."""
    table = ModernCosmosTable(config=table_config)
    table._service = modern_service
    return table


@pytest.fixture(params=['legacy', 'modern'])
def facade(request, legacy_table, modern_table):
    """Each facade in turn, for behaviour both must share."""
    return legacy_table if request.param == 'legacy' else modern_table

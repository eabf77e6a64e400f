"""
Test helpers for the table facades.

In-memory versions of the legacy and modern table service clients.
"""

from .fakes import (
    FakeLegacyTableService,
    FakeTableBatch,
    FakeTableServiceClient,
    FakeTableStore,
)

TEST_CONNECTION_STRING = (
    "DefaultEndpointsProtocol=http;AccountName=devstoreaccount1;"
    "AccountKey=a2V5;TableEndpoint=http://127.0.0.1:10002/devstoreaccount1;"
)

TABLE = "orders"

__all__ = [
    'FakeLegacyTableService',
    'FakeTableBatch',
    'FakeTableServiceClient',
    'FakeTableStore',
    'TABLE',
    'TEST_CONNECTION_STRING',
]

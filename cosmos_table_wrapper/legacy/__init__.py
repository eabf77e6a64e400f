"""Facade over the legacy table client (`azure-cosmosdb-table`)."""

from .legacy_table import LegacyCosmosTable

__all__ = ["LegacyCosmosTable"]

"""Facade over the modern table client (`azure-data-tables`)."""

from .modern_table import ModernCosmosTable, match_condition

__all__ = ["ModernCosmosTable", "match_condition"]

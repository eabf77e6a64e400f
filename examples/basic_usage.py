#!/usr/bin/env python3
"""
Basic usage examples for the Cosmos table wrapper.

This example walks through both facades against the same table:
1. Setting up configuration
2. Writing entities with merge, replace and insert semantics
3. Reading a partition with a projection and typed models
4. Optimistic concurrency with version markers
5. Batch deletes and table cleanup

Run it against the local storage emulator (Azurite) or set
AZURE_STORAGE_CONNECTION_STRING to use a real account.
"""

from typing import Optional

from cosmos_table_wrapper import (
    ConflictError,
    EntityNotFoundError,
    LegacyCosmosTable,
    ModernCosmosTable,
    TableEntity,
    TableStorageConfig,
)


class Order(TableEntity):
    """An order; partitioned by region, keyed by order number."""

    customer: str
    total: float = 0.0
    note: Optional[str] = None


def legacy_example(config: TableStorageConfig):
    """Demonstrate the legacy facade."""
    table = LegacyCosmosTable(config=config)

    print("1. Creating table...")
    table.create_table_if_not_exists("orders")

    print("2. Writing orders...")
    table.insert(
        "orders",
        Order(PartitionKey="eu", RowKey="1001", customer="ACME", total=120.0)
    )
    table.insert_or_merge("orders", TableEntity(PartitionKey="eu", RowKey="1001", note="rush"))
    table.insert_or_replace(
        "orders",
        Order(PartitionKey="eu", RowKey="1002", customer="Globex", total=42.5)
    )

    print("3. Reading the eu partition (totals only)...")
    for order in table.get_by_partition_key("orders", "eu", columns=["total"]):
        print(f"   {order.row_key}: {order.properties}")

    print("4. Reading typed orders...")
    for order in table.get_all("orders", entity_type=Order):
        print(f"   {order.row_key}: {order.customer} {order.total} {order.note}")

    print("5. Deleting the eu partition in batches...")
    results = table.delete_by_partition_key_batch("orders", "eu")
    print(f"   Deleted {len(results)} orders")


def modern_example(config: TableStorageConfig):
    """Demonstrate the modern facade."""
    table = ModernCosmosTable(config=config)

    print("1. Creating table...")
    table.create_table_if_not_exists("orders")

    print("2. Writing an order...")
    table.insert_or_replace(
        "orders",
        Order(PartitionKey="us", RowKey="2001", customer="Initech", total=10.0)
    )

    print("3. Updating with the version marker just read...")
    order = table.get("orders", "us", "2001", entity_type=Order)
    stale = order.model_copy()
    order.total = 15.0
    table.insert("orders", order)

    try:
        stale.total = 99.0
        table.insert("orders", stale)
    except ConflictError as e:
        print(f"   Stale update rejected: {e}")

    print("4. Point lookup of a missing order...")
    try:
        table.get("orders", "us", "9999")
    except EntityNotFoundError as e:
        print(f"   {e}")

    print("5. Clearing and deleting the table...")
    table.clear_table("orders")
    table.delete_table("orders")


def main():
    """Run both examples."""
    config = TableStorageConfig.from_env()

    # For local development against Azurite:
    if not config.connection_string:
        config = TableStorageConfig.for_local_development()

    print("Legacy facade")
    legacy_example(config)

    print("\nModern facade")
    modern_example(config)


if __name__ == "__main__":
    main()

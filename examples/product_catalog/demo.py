"""
Product catalog example: load a product, rename it, and read it back.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, Tuple

from snaporm.adapters import ConnectionConfig, SQLiteAdapter, scoped_connection
from snaporm.persistence import SessionFactory

from .models import Product, catalog_metadata

SCHEMA_SQL = 'CREATE TABLE IF NOT EXISTS "PRODUCT" ("ID" INTEGER PRIMARY KEY, "NAME" TEXT NOT NULL, "PRICE" NUMERIC)'

SAMPLE_PRODUCTS: Tuple[Tuple[int, str, Decimal], ...] = (
    (1, "Espresso Machine", Decimal("249.99")),
    (2, "Coffee Grinder", Decimal("89.50")),
)


def bootstrap_factory(dsn: str = "sqlite:///:memory:") -> SessionFactory:
    adapter = SQLiteAdapter(ConnectionConfig.from_dsn(dsn))
    with scoped_connection(adapter) as connection:
        adapter.execute(connection, SCHEMA_SQL)
    return SessionFactory(adapter, metadata=catalog_metadata)


def seed_sample_data(
    factory: SessionFactory, products: Iterable[Tuple[int, str, Decimal]] = SAMPLE_PRODUCTS
) -> int:
    adapter = factory.adapter
    count = 0
    with scoped_connection(adapter) as connection:
        for product_id, name, price in products:
            adapter.execute(
                connection,
                'INSERT OR REPLACE INTO "PRODUCT" ("ID", "NAME", "PRICE") VALUES (?, ?, ?)',
                (product_id, name, str(price)),
            )
            count += 1
    return count


def rename_product(factory: SessionFactory, product_id: int, new_name: str) -> Product:
    with factory.create_session() as session:
        product = session.find(Product, product_id)
        product.name = new_name
    return product


def describe_product(factory: SessionFactory, product_id: int) -> Dict[str, Any]:
    session = factory.create_session()
    try:
        product = session.find(Product, product_id)
        return {"id": product.id, "name": product.name, "price": product.price}
    finally:
        session.close()


def run_demo(dsn: str = "sqlite:///:memory:", new_name: str = "newProductName") -> Dict[str, Any]:
    factory = bootstrap_factory(dsn)
    try:
        seed_sample_data(factory)
        rename_product(factory, 1, new_name)
        return describe_product(factory, 1)
    finally:
        factory.dispose()


if __name__ == "__main__":
    print(run_demo("sqlite:///product_catalog.db"))

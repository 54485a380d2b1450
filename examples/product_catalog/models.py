"""
Entities and metadata for the snaporm product catalog example.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from snaporm.core import DecimalField, IntegerField, MetadataResolver, StringField


@dataclass
class Product:
    id: Optional[int] = None
    name: Optional[str] = None
    price: Optional[Decimal] = None


catalog_metadata = MetadataResolver()
catalog_metadata.register(
    Product,
    [
        IntegerField("id", db_column="ID", primary_key=True),
        StringField("name", db_column="NAME", max_length=120),
        DecimalField("price", db_column="PRICE"),
    ],
    table="PRODUCT",
)

"""
Core building blocks for snaporm entity metadata and row mapping.
"""

from .fields import (
    BooleanField,
    DecimalField,
    Field,
    FloatField,
    IntegerField,
    StringField,
    UUIDField,
)
from .mapping import RowMapper
from .metadata import EntityDescriptor, MetadataResolver, metadata

__all__ = [
    "BooleanField",
    "DecimalField",
    "EntityDescriptor",
    "Field",
    "FloatField",
    "IntegerField",
    "MetadataResolver",
    "RowMapper",
    "StringField",
    "UUIDField",
    "metadata",
]

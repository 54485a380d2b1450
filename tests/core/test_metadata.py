from dataclasses import dataclass
from typing import Optional

import pytest

from snaporm.core import IntegerField, MetadataResolver, StringField
from snaporm.errors import MetadataError


@dataclass
class Book:
    id: Optional[int] = None
    title: Optional[str] = None


def test_table_defaults_to_type_name():
    registry = MetadataResolver()
    registry.register(Book, [IntegerField("id", primary_key=True), StringField("title")])
    assert registry.resolve_table(Book) == "Book"


def test_explicit_table_and_columns():
    registry = MetadataResolver()
    registry.register(
        Book,
        [IntegerField("id", db_column="BOOK_ID", primary_key=True), StringField("title")],
        table="BOOKS",
    )
    assert registry.resolve_table(Book) == "BOOKS"
    assert registry.resolve_columns(Book) == [("id", "BOOK_ID"), ("title", "title")]
    assert registry.resolve_id_field(Book).name == "id"


def test_resolution_is_cached_per_type():
    registry = MetadataResolver()
    registry.register(Book, [IntegerField("id", primary_key=True)])
    assert registry.resolve(Book) is registry.resolve(Book)


def test_missing_identifier_field_fails():
    registry = MetadataResolver()
    with pytest.raises(MetadataError, match="does not declare an identifier"):
        registry.register(Book, [IntegerField("id"), StringField("title")])
    assert not registry.is_registered(Book)


def test_multiple_identifier_fields_fail():
    registry = MetadataResolver()
    with pytest.raises(MetadataError, match="multiple identifier"):
        registry.register(
            Book,
            [IntegerField("id", primary_key=True), StringField("title", primary_key=True)],
        )


def test_duplicate_field_or_column_fails():
    registry = MetadataResolver()
    with pytest.raises(MetadataError, match="Duplicate field"):
        registry.register(Book, [IntegerField("id", primary_key=True), StringField("id")])
    with pytest.raises(MetadataError, match="Duplicate column"):
        registry.register(
            Book,
            [IntegerField("id", primary_key=True), StringField("title", db_column="id")],
        )


def test_no_fields_fails():
    with pytest.raises(MetadataError):
        MetadataResolver().register(Book, [])


def test_unregistered_type_fails():
    with pytest.raises(MetadataError, match="No metadata declared"):
        MetadataResolver().resolve(Book)


def test_descriptor_lookups():
    registry = MetadataResolver()
    descriptor = registry.register(
        Book, [IntegerField("id", primary_key=True), StringField("title", db_column="TITLE")]
    )
    assert descriptor.get_field("title").column_name() == "TITLE"
    assert descriptor.field_for_column("TITLE").name == "title"
    with pytest.raises(KeyError):
        descriptor.field_for_column("missing")
    assert descriptor.factory() == Book()


def test_reregistration_replaces_descriptor():
    registry = MetadataResolver()
    registry.register(Book, [IntegerField("id", primary_key=True)])
    registry.register(Book, [IntegerField("id", primary_key=True)], table="library_book")
    assert registry.resolve_table(Book) == "library_book"
    registry.unregister(Book)
    assert not registry.is_registered(Book)

"""
Entity metadata declarations and resolution.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type

from ..errors import MetadataError
from .fields import Field


@dataclass(frozen=True)
class EntityDescriptor:
    """
    Resolved metadata for one entity type.
    """

    entity_type: Type[Any]
    table: str
    fields: Tuple[Field, ...]
    id_field: Field
    factory: Callable[[], Any]

    @property
    def columns(self) -> List[Tuple[str, str]]:
        return [(field.name, field.column_name()) for field in self.fields]

    def get_field(self, name: str) -> Field:
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(f"Unknown field '{name}' on entity '{self.entity_type.__name__}'")

    def field_for_column(self, column: str) -> Field:
        for field in self.fields:
            if field.column_name() == column:
                return field
        raise KeyError(f"Unknown column '{column}' on entity '{self.entity_type.__name__}'")


class MetadataResolver:
    """
    Registry of explicitly declared entity metadata.

    Descriptors are validated and built once, at registration, and served
    from the cache afterwards.
    """

    def __init__(self) -> None:
        self._descriptors: Dict[Type[Any], EntityDescriptor] = {}

    def register(
        self,
        entity_type: Type[Any],
        fields: Iterable[Field],
        *,
        table: Optional[str] = None,
        factory: Optional[Callable[[], Any]] = None,
    ) -> EntityDescriptor:
        descriptor = self._build(entity_type, list(fields), table, factory)
        self._descriptors[entity_type] = descriptor
        return descriptor

    def unregister(self, entity_type: Type[Any]) -> None:
        self._descriptors.pop(entity_type, None)

    def clear(self) -> None:
        self._descriptors.clear()

    def is_registered(self, entity_type: Type[Any]) -> bool:
        return entity_type in self._descriptors

    # Resolution ----------------------------------------------------------
    def resolve(self, entity_type: Type[Any]) -> EntityDescriptor:
        try:
            return self._descriptors[entity_type]
        except KeyError:
            name = getattr(entity_type, "__name__", repr(entity_type))
            raise MetadataError(f"No metadata declared for entity type '{name}'.") from None

    def resolve_table(self, entity_type: Type[Any]) -> str:
        return self.resolve(entity_type).table

    def resolve_columns(self, entity_type: Type[Any]) -> List[Tuple[str, str]]:
        return self.resolve(entity_type).columns

    def resolve_id_field(self, entity_type: Type[Any]) -> Field:
        return self.resolve(entity_type).id_field

    # Validation ----------------------------------------------------------
    @staticmethod
    def _build(
        entity_type: Type[Any],
        fields: List[Field],
        table: Optional[str],
        factory: Optional[Callable[[], Any]],
    ) -> EntityDescriptor:
        type_name = entity_type.__name__
        if not fields:
            raise MetadataError(f"Entity '{type_name}' declares no persistent fields.")

        by_name: "OrderedDict[str, Field]" = OrderedDict()
        columns: set[str] = set()
        for field_obj in fields:
            if field_obj.name in by_name:
                raise MetadataError(f"Duplicate field name '{field_obj.name}' on entity '{type_name}'")
            column = field_obj.column_name()
            if column in columns:
                raise MetadataError(f"Duplicate column name '{column}' on entity '{type_name}'")
            by_name[field_obj.name] = field_obj
            columns.add(column)

        primary_keys = [field_obj for field_obj in by_name.values() if field_obj.primary_key]
        if not primary_keys:
            raise MetadataError(f"Entity '{type_name}' does not declare an identifier field.")
        if len(primary_keys) > 1:
            names = ", ".join(field_obj.name for field_obj in primary_keys)
            raise MetadataError(f"Entity '{type_name}' declares multiple identifier fields: {names}")

        return EntityDescriptor(
            entity_type=entity_type,
            table=table or type_name,
            fields=tuple(by_name.values()),
            id_field=primary_keys[0],
            factory=factory or entity_type,
        )


metadata = MetadataResolver()

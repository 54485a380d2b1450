"""
Row to entity mapping.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..errors import MappingError
from .fields import Field
from .metadata import EntityDescriptor

_MISSING = object()


class RowMapper:
    """
    Builds a fresh entity instance from a single result row.
    """

    def map_row(self, row: Mapping[str, Any], descriptor: EntityDescriptor) -> Any:
        type_name = descriptor.entity_type.__name__
        try:
            instance = descriptor.factory()
        except Exception as exc:
            raise MappingError(f"Could not construct a default '{type_name}' instance.") from exc

        for field in descriptor.fields:
            raw = self._lookup(row, field.column_name())
            if raw is _MISSING:
                raise MappingError(
                    f"Row for '{type_name}' lacks column '{field.column_name()}' (field '{field.name}')."
                )
            field.set_value(instance, self._coerce(field, raw, type_name))
        return instance

    @staticmethod
    def _lookup(row: Mapping[str, Any], column: str) -> Any:
        if column in row:
            return row[column]
        folded = column.casefold()
        for key in row.keys():
            if isinstance(key, str) and key.casefold() == folded:
                return row[key]
        return _MISSING

    @staticmethod
    def _coerce(field: Field, raw: Any, type_name: str) -> Any:
        if raw is None and not field.nullable:
            raise MappingError(f"Column '{field.column_name()}' of '{type_name}' is NULL but not nullable.")
        try:
            return field.to_python(raw)
        except (TypeError, ValueError) as exc:
            raise MappingError(
                f"Cannot coerce column '{field.column_name()}' of '{type_name}': {exc}"
            ) from exc

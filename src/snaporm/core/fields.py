"""
Field declarations used to describe how entity attributes map to columns.

Fields are plain metadata objects: they are passed explicitly to the metadata
resolver and never attached to entity classes. Each field carries its own
accessor and mutator so the rest of the library never inspects entity
classes to find attributes.
"""

from __future__ import annotations

import operator
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]


class Field:
    """
    Base class for persistent field declarations.

    ``name`` is the attribute name on the entity, ``db_column`` the storage
    column (defaults to ``name``). Exactly one field per entity type must set
    ``primary_key=True``.
    """

    def __init__(
        self,
        name: str,
        *,
        db_column: Optional[str] = None,
        primary_key: bool = False,
        nullable: bool = True,
        getter: Optional[Getter] = None,
        setter: Optional[Setter] = None,
    ) -> None:
        if not name:
            raise ValueError("Field name must be a non-empty string.")
        self.name = name
        self.db_column = db_column
        self.primary_key = primary_key
        self.nullable = nullable and not primary_key
        self._getter = getter or operator.attrgetter(name)
        self._setter = setter or self._default_setter

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name} -> {self.column_name()}>"

    # Metadata helpers ----------------------------------------------------
    def column_name(self) -> str:
        if self.db_column:
            return self.db_column
        return self.name

    # Accessors -----------------------------------------------------------
    def get_value(self, instance: Any) -> Any:
        return self._getter(instance)

    def set_value(self, instance: Any, value: Any) -> None:
        self._setter(instance, value)

    def _default_setter(self, instance: Any, value: Any) -> None:
        setattr(instance, self.name, value)

    # Conversion ----------------------------------------------------------
    def to_python(self, value: Any) -> Any:
        """
        Coerce a storage value into this field's Python type.

        Raises ``ValueError`` or ``TypeError`` when the value does not fit.
        """
        return value

    def to_db(self, value: Any) -> Any:
        """
        Convert a Python value into something every supported driver binds.
        """
        return value


class IntegerField(Field):
    def to_python(self, value: Any) -> int | None:
        if value is None:
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer value '{value}' for field '{self.name}'")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"Non-integral value '{value}' for integer field '{self.name}'")
        if isinstance(value, Decimal) and value != value.to_integral_value():
            raise ValueError(f"Non-integral value '{value}' for integer field '{self.name}'")
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValueError(f"Invalid integer value '{value}' for field '{self.name}'") from exc


class FloatField(Field):
    def to_python(self, value: Any) -> float | None:
        if value is None:
            return value
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid float value '{value}' for field '{self.name}'") from exc


class DecimalField(Field):
    """
    Exact numeric field. Floats coming back from the driver are converted via
    their shortest string form so ``9.99`` stays ``Decimal("9.99")``.
    """


    def to_python(self, value: Any) -> Decimal | None:
        if value is None:
            return value
        if isinstance(value, Decimal):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid decimal value '{value}' for field '{self.name}'")
        if isinstance(value, float):
            value = repr(value)
        try:
            return Decimal(value)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid decimal value '{value}' for field '{self.name}'") from exc

    def to_db(self, value: Any) -> Any:
        # sqlite3 cannot bind Decimal; the text form round-trips on every backend.
        if isinstance(value, Decimal):
            return str(value)
        return value


class StringField(Field):
    def __init__(self, name: str, *, max_length: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(name, **kwargs)
        self.max_length = max_length

    def to_python(self, value: Any) -> str | None:
        if value is None:
            return value
        if isinstance(value, (bytes, bytearray)):
            result = bytes(value).decode("utf-8")
        else:
            result = str(value)
        if self.max_length and len(result) > self.max_length:
            raise ValueError(f"Value for field '{self.name}' exceeds max_length {self.max_length}")
        return result


class BooleanField(Field):
    def to_python(self, value: Any) -> bool | None:
        if value is None:
            return value
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in {"true", "t", "1"}:
                return True
            if lowered in {"false", "f", "0"}:
                return False
        if isinstance(value, (int, float)):
            return bool(value)
        raise ValueError(f"Invalid boolean value '{value}' for field '{self.name}'")


class UUIDField(Field):
    def to_python(self, value: Any) -> uuid.UUID | None:
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return value
        try:
            if isinstance(value, (bytes, bytearray)) and len(value) == 16:
                return uuid.UUID(bytes=bytes(value))
            return uuid.UUID(str(value))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid UUID value '{value}' for field '{self.name}'") from exc

    def to_db(self, value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return str(value)
        return value

"""
Parameterized SELECT-by-id and UPDATE-by-id statement generation.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from ..core.metadata import EntityDescriptor
from ..dialects.base import Dialect
from ..errors import StatementError


class StatementBuilder:
    """
    Render statements for an entity descriptor through a dialect.

    Values never appear in the SQL text; every value is a bound parameter.
    """

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    def build_select_by_id(self, descriptor: EntityDescriptor) -> str:
        select_list = ", ".join(self._quote(field.column_name()) for field in descriptor.fields)
        table = self.dialect.format_table(descriptor.table)
        return f"SELECT {select_list} FROM {table} WHERE {self._id_predicate(descriptor)}"

    def build_update_by_id(self, descriptor: EntityDescriptor, changed_columns: Iterable[str]) -> str:
        columns = list(changed_columns)
        if not columns:
            raise StatementError(f"No changed columns to update for '{descriptor.table}'.")
        known = {field.column_name() for field in descriptor.fields}
        placeholder = self.dialect.parameter_placeholder()
        set_clauses = []
        for column in columns:
            if column not in known:
                raise StatementError(f"Unknown column '{column}' for table '{descriptor.table}'.")
            set_clauses.append(f"{self._quote(column)} = {placeholder}")
        table = self.dialect.format_table(descriptor.table)
        return f"UPDATE {table} SET {', '.join(set_clauses)} WHERE {self._id_predicate(descriptor)}"

    @staticmethod
    def update_parameters(
        descriptor: EntityDescriptor, changes: Mapping[str, Any], identifier: Any
    ) -> List[Any]:
        """
        Bind values for :meth:`build_update_by_id`: one per SET clause in
        ``changes`` order, then the identifier.
        """
        params = [descriptor.field_for_column(column).to_db(value) for column, value in changes.items()]
        params.append(descriptor.id_field.to_db(identifier))
        return params

    def _id_predicate(self, descriptor: EntityDescriptor) -> str:
        id_column = self._quote(descriptor.id_field.column_name())
        return f"{id_column} = {self.dialect.parameter_placeholder()}"

    def _quote(self, column: str) -> str:
        return self.dialect.quote_identifier(column)

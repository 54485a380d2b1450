"""
SQLite dialect implementation.
"""

from __future__ import annotations

from typing import Final


class SQLiteDialect:
    """
    SQLite dialect using qmark placeholders. Table names are never split
    on dots.
    """

    name: Final[str] = "sqlite"

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def format_table(self, table_name: str) -> str:
        return self.quote_identifier(table_name)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "?"

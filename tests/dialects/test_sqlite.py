from snaporm.dialects import SQLiteDialect


def test_sqlite_identifier_quoting():
    dialect = SQLiteDialect()
    assert dialect.quote_identifier("table") == '"table"'
    assert dialect.quote_identifier('bad"name') == '"bad""name"'


def test_sqlite_table_is_not_split_on_dots():
    dialect = SQLiteDialect()
    assert dialect.format_table("main.items") == '"main.items"'


def test_sqlite_placeholder():
    assert SQLiteDialect().parameter_placeholder() == "?"

from snaporm.dialects import MySQLDialect


def test_mysql_dialect_quotes_identifiers():
    dialect = MySQLDialect()
    assert dialect.quote_identifier("user`name") == "`user``name`"
    assert dialect.format_table("analytics.events") == "`analytics`.`events`"


def test_mysql_placeholder():
    dialect = MySQLDialect()
    assert dialect.parameter_placeholder() == "%s"

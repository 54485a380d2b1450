from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import pytest

from snaporm.core import DecimalField, IntegerField, MetadataResolver, StringField
from snaporm.dialects import MySQLDialect, PostgresDialect, SQLiteDialect
from snaporm.errors import FlushError, StatementError, StorageConnectionError
from snaporm.hooks import HookDispatcher
from snaporm.persistence import EntityKey, Session


@dataclass
class Product:
    id: Optional[int] = None
    name: Optional[str] = None
    price: Optional[Decimal] = None


registry = MetadataResolver()
registry.register(
    Product,
    [
        IntegerField("id", db_column="ID", primary_key=True),
        StringField("name", db_column="NAME"),
        DecimalField("price", db_column="PRICE"),
    ],
    table="PRODUCT",
)


class FakeCursor:
    def __init__(self, row=None, rowcount=1):
        self.row = row
        self.rowcount = rowcount


class FakeAdapter:
    slow_query_ms = 100

    def __init__(self, dialect=None, rows=None, fail_update_for=None, fail_acquire=False):
        self.dialect = dialect or SQLiteDialect()
        self.rows = rows if rows is not None else {
            1: {"ID": 1, "NAME": "A", "PRICE": "10.50"},
            2: {"ID": 2, "NAME": "Second", "PRICE": "3.00"},
            3: {"ID": 3, "NAME": "Third", "PRICE": "7"},
        }
        self.fail_update_for = fail_update_for
        self.fail_acquire = fail_acquire
        self.statements = []
        self.acquired = 0
        self.released = 0
        self.commits = 0
        self.rollbacks = 0

    def acquire(self):
        if self.fail_acquire:
            raise StorageConnectionError("database unreachable")
        self.acquired += 1
        return object()

    def release(self, connection):
        self.released += 1

    def execute(self, connection, sql, params=None):
        params = list(params or [])
        self.statements.append((sql, params))
        if sql.startswith("SELECT"):
            return FakeCursor(self.rows.get(params[-1]))
        if self.fail_update_for is not None and params[-1] == self.fail_update_for:
            raise StatementError("update rejected")
        return FakeCursor()

    def fetch_one(self, cursor):
        return cursor.row

    def commit(self, connection):
        self.commits += 1

    def rollback(self, connection):
        self.rollbacks += 1

    def close(self):
        return None


def make_session(adapter):
    return Session(adapter, metadata=registry, hooks=HookDispatcher())


def updates(adapter):
    return [(sql, params) for sql, params in adapter.statements if sql.startswith("UPDATE")]


def test_close_without_find_issues_no_statements():
    adapter = FakeAdapter()
    make_session(adapter).close()
    assert adapter.statements == []
    assert adapter.acquired == 0


def test_unmodified_entity_issues_no_update():
    adapter = FakeAdapter()
    session = make_session(adapter)
    session.find(Product, 1)
    session.close()
    assert updates(adapter) == []
    assert len(adapter.statements) == 1


def test_cache_hit_does_not_touch_storage():
    adapter = FakeAdapter()
    session = make_session(adapter)
    session.find(Product, 1)
    session.find(Product, 1)
    assert len(adapter.statements) == 1
    session.close()


def test_single_field_change_updates_only_that_column():
    adapter = FakeAdapter()
    session = make_session(adapter)
    session.find(Product, 1).name = "B"
    session.close()
    assert updates(adapter) == [('UPDATE "PRODUCT" SET "NAME" = ? WHERE "ID" = ?', ["B", 1])]


def test_two_field_changes_share_one_update():
    adapter = FakeAdapter()
    session = make_session(adapter)
    product = session.find(Product, 2)
    product.name = "Renamed"
    product.price = Decimal("4.25")
    session.close()

    [(sql, params)] = updates(adapter)
    assert sql == 'UPDATE "PRODUCT" SET "NAME" = ?, "PRICE" = ? WHERE "ID" = ?'
    assert params == ["Renamed", "4.25", 2]
    assert '"ID" = ?,' not in sql


def test_values_are_bound_never_inlined():
    adapter = FakeAdapter()
    session = make_session(adapter)
    session.find(Product, 1).name = "x'; DROP TABLE PRODUCT; --"
    session.close()
    [(sql, params)] = updates(adapter)
    assert "DROP" not in sql
    assert params[0] == "x'; DROP TABLE PRODUCT; --"


def test_equal_but_distinct_values_are_not_dirty():
    adapter = FakeAdapter()
    session = make_session(adapter)
    product = session.find(Product, 2)
    same_name = "".join(["Sec", "ond"])
    same_price = Decimal("3.000")
    assert same_name is not product.name
    assert same_price is not product.price

    product.name = same_name
    product.price = same_price
    session.close()
    assert updates(adapter) == []


def test_equal_but_distinct_large_integer_id_is_not_dirty():
    big = 10**20
    adapter = FakeAdapter(rows={big: {"ID": big, "NAME": "Big", "PRICE": "1"}})
    session = make_session(adapter)
    product = session.find(Product, big)
    replacement = int(str(big))
    assert replacement is not product.id
    product.id = replacement
    session.close()
    assert updates(adapter) == []


def test_reassigning_to_a_different_value_and_back_is_clean():
    adapter = FakeAdapter()
    session = make_session(adapter)
    product = session.find(Product, 1)
    product.name = "Temporary"
    product.name = "A"
    session.close()
    assert updates(adapter) == []


def test_updates_follow_load_order():
    adapter = FakeAdapter()
    session = make_session(adapter)
    session.find(Product, 2).name = "two"
    session.find(Product, 1).name = "one"
    session.close()
    assert [params[-1] for _, params in updates(adapter)] == [2, 1]


def test_each_statement_acquires_and_releases_a_connection():
    adapter = FakeAdapter()
    session = make_session(adapter)
    session.find(Product, 1).name = "B"
    session.find(Product, 2)
    session.close()
    assert adapter.acquired == 3
    assert adapter.released == 3
    assert adapter.commits == 3


def test_failed_update_aborts_and_reports_progress():
    adapter = FakeAdapter(fail_update_for=2)
    session = make_session(adapter)
    for identifier in (1, 2, 3):
        session.find(Product, identifier).name = f"changed-{identifier}"

    with pytest.raises(FlushError) as excinfo:
        session.close()

    error = excinfo.value
    assert error.key == EntityKey(2, Product)
    assert error.flushed == [EntityKey(1, Product)]
    assert error.pending == [EntityKey(3, Product)]
    assert isinstance(error.__cause__, StatementError)
    assert [params[-1] for _, params in updates(adapter)] == [1, 2]
    assert adapter.rollbacks == 1
    assert adapter.released == adapter.acquired
    assert session.closed


def test_connection_failure_surfaces_from_find():
    adapter = FakeAdapter(fail_acquire=True)
    session = make_session(adapter)
    with pytest.raises(StorageConnectionError):
        session.find(Product, 1)
    assert len(session.unit_of_work) == 0
    session.close()


def test_rowcount_zero_logs_warning(caplog):
    class VanishingAdapter(FakeAdapter):
        def execute(self, connection, sql, params=None):
            cursor = super().execute(connection, sql, params)
            if sql.startswith("UPDATE"):
                cursor.rowcount = 0
            return cursor

    adapter = VanishingAdapter()
    session = make_session(adapter)
    caplog.set_level("WARNING", logger="snaporm.persistence.session")
    session.find(Product, 1).name = "gone"
    session.close()
    assert any("matched no rows" in record.message for record in caplog.records)


@pytest.mark.parametrize("dialect", [PostgresDialect(), MySQLDialect()])
def test_statements_use_dialect_placeholders(dialect):
    adapter = FakeAdapter(dialect=dialect)
    session = make_session(adapter)
    session.find(Product, 1).name = "B"
    session.close()
    placeholder = dialect.parameter_placeholder()
    for sql, _ in adapter.statements:
        assert f"= {placeholder}" in sql
        assert "?" not in sql
    assert adapter.statements[0][1] == [1]


def test_performance_tracker_counts_session_statements():
    adapter = FakeAdapter()
    session = make_session(adapter)
    session.find(Product, 1)
    session.find(Product, 2)
    assert session.performance.total_statements == 2
    session.close()

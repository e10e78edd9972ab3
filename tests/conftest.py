"""
Shared pytest fixtures.

No live MySQL is needed: FakeServer stands in for an Engine. It answers the
information_schema columns query from a dict and applies CREATE TABLE / DROP TRIGGER /
CREATE TRIGGER statements to an in-memory catalogue, rejecting a duplicate trigger
name the way MySQL does.
"""

import re
from contextlib import nullcontext

import pytest
from sqlalchemy.exc import OperationalError

from audit_setup.schemas.table import ColumnDescriptor, TableDescriptor
from audit_setup.services.serialization import classify_type

_CREATE_TABLE = re.compile(r"^CREATE TABLE IF NOT EXISTS `([^`]+)`")
_DROP_TRIGGER = re.compile(r"^DROP TRIGGER IF EXISTS `([^`]+)`")
_CREATE_TRIGGER = re.compile(r"^CREATE TRIGGER `([^`]+)`")

ORDERS_COLUMNS = [
    ("id", "int", "PRI"),
    ("total", "decimal", ""),
    ("created_at", "datetime", ""),
    ("note", "varchar", ""),
]


def make_table(name: str, columns: list[tuple[str, str]], primary_key: str | None) -> TableDescriptor:
    return TableDescriptor(
        name=name,
        columns=tuple(
            ColumnDescriptor(name=col, data_type=data_type, category=classify_type(data_type))
            for col, data_type in columns
        ),
        primary_key=primary_key,
    )


class FakeResult:
    def __init__(self, rows):
        self._rows = rows

    def all(self):
        return list(self._rows)


class FakeConnection:
    def __init__(self, server: "FakeServer"):
        self.server = server

    def begin(self):
        return nullcontext()

    def close(self):
        pass

    def execute(self, query):
        params = query.compile().params
        table_name = next(v for k, v in params.items() if k.startswith("TABLE_NAME"))
        return FakeResult(self.server.columns.get(table_name, []))

    def exec_driver_sql(self, sql, execution_options=None):
        self.server.executed.append(sql)
        if self.server.fail_on and self.server.fail_on in sql:
            raise OperationalError(sql, {}, Exception("rejected by server"))
        statement = sql.strip()
        if m := _CREATE_TABLE.match(statement):
            self.server.tables.add(m.group(1))
        elif m := _DROP_TRIGGER.match(statement):
            self.server.triggers.pop(m.group(1), None)
        elif m := _CREATE_TRIGGER.match(statement):
            if m.group(1) in self.server.triggers:
                raise OperationalError(sql, {}, Exception("Trigger already exists"))
            self.server.triggers[m.group(1)] = sql


class FakeServer:
    def __init__(self, columns: dict[str, list[tuple[str, str, str]]]):
        self.columns = columns
        self.tables: set[str] = set(columns)
        self.triggers: dict[str, str] = {}
        self.executed: list[str] = []
        self.fail_on: str | None = None

    def connect(self):
        return FakeConnection(self)


@pytest.fixture
def orders_table() -> TableDescriptor:
    """orders(id PK, total DECIMAL, created_at DATETIME, note VARCHAR)."""
    return make_table("orders", [(name, data_type) for name, data_type, _ in ORDERS_COLUMNS], "id")


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer(
        {
            "orders": list(ORDERS_COLUMNS),
            "event_log": [("message", "text", ""), ("logged_at", "timestamp", "")],
        }
    )


@pytest.fixture
def table_factory():
    """make_table(name, [(column, data_type), ...], primary_key)."""
    return make_table

"""Read-only schema introspection (information_schema and the SQLAlchemy inspector)."""
import logging

from sqlalchemy import inspect, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.sql import column, table

from audit_setup.database import connection_lost, render_sql
from audit_setup.exceptions import DatabaseUnavailable, StatementFailed, TableNotFound
from audit_setup.schemas.table import AUDIT_TABLE_SUFFIX, ColumnDescriptor, TableDescriptor
from audit_setup.services.serialization import classify_type

logger = logging.getLogger(__name__)

# Values that fit audit_log.row_id (BIGINT)
INTEGER_TYPES = frozenset({"tinyint", "smallint", "mediumint", "int", "bigint"})

_columns = table(
    "COLUMNS",
    column("TABLE_SCHEMA"),
    column("TABLE_NAME"),
    column("COLUMN_NAME"),
    column("DATA_TYPE"),
    column("COLUMN_KEY"),
    column("ORDINAL_POSITION"),
    schema="information_schema",
)


def columns_query(schema: str, table_name: str):
    """Columns of one table in declared order. Names travel as bound parameters."""
    return (
        select(_columns.c.COLUMN_NAME, _columns.c.DATA_TYPE, _columns.c.COLUMN_KEY)
        .where(_columns.c.TABLE_SCHEMA == schema, _columns.c.TABLE_NAME == table_name)
        .order_by(_columns.c.ORDINAL_POSITION)
    )


def describe_table(conn: Connection, schema: str, table_name: str) -> TableDescriptor:
    """Columns (name + raw type) and the primary key column, or None if there is none."""
    query = columns_query(schema, table_name)
    try:
        rows = conn.execute(query).all()
    except SQLAlchemyError as e:
        if connection_lost(e):
            raise DatabaseUnavailable(f"Connection lost while reading columns of '{table_name}': {e.orig}") from e
        raise StatementFailed(
            f"Could not read columns of '{table_name}': {e}", table=table_name, statement=render_sql(query)
        ) from e
    if not rows:
        raise TableNotFound(f"Table '{table_name}' does not exist in database '{schema}'.", table=table_name)

    columns = tuple(
        ColumnDescriptor(name=name, data_type=data_type, category=classify_type(data_type))
        for name, data_type, _key in rows
    )
    pk_columns = [name for name, _type, key in rows if key == "PRI"]
    if len(pk_columns) > 1:
        logger.warning(
            "Table '%s' has a composite primary key (%s); using '%s' as row_id.",
            table_name, ", ".join(pk_columns), pk_columns[0],
        )
    primary_key = pk_columns[0] if pk_columns else None
    if primary_key:
        pk_type = next(c.data_type for c in columns if c.name == primary_key)
        if (pk_type or "").strip().lower() not in INTEGER_TYPES:
            logger.warning(
                "Primary key '%s' of table '%s' is %s, not an integer; row_id is BIGINT, so writes to "
                "'%s' may fail once the audit triggers are installed (strict SQL mode).",
                primary_key, table_name, pk_type, table_name,
            )
    return TableDescriptor(
        name=table_name,
        columns=columns,
        primary_key=primary_key,
    )


def auditable_tables(table_names: list[str]) -> list[str]:
    """Sorted table names, without the audit log tables this tool creates."""
    return sorted(t for t in table_names if not t.endswith(AUDIT_TABLE_SUFFIX))


def list_tables(engine: Engine) -> list[str]:
    try:
        names = inspect(engine).get_table_names()
    except OperationalError as e:
        raise DatabaseUnavailable(f"Cannot list tables: {e.orig}") from e
    except SQLAlchemyError as e:
        raise StatementFailed(f"Cannot list tables: {e}") from e
    return auditable_tables(names)

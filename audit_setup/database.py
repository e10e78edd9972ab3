"""
Database engine and statement execution.

Connection details come from a SessionContext built by the CLI; nothing here holds
module-level credentials. SQL is built from SQLAlchemy constructs, rendered once
against the MySQL dialect (render_sql) and sent to the driver as plain text.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.dialects import mysql
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from audit_setup.config import SessionContext
from audit_setup.exceptions import DatabaseUnavailable, StatementFailed

logger = logging.getLogger(__name__)

# "named" paramstyle so literal '%' is not doubled in rendered text
MYSQL_DIALECT = mysql.dialect(paramstyle="named")

# Rendered SQL carries no bind parameters; the driver must not %-format it
_RAW_EXECUTION = {"no_parameters": True}


def render_sql(clause) -> str:
    """Compile a Core construct (DDL or DML) to MySQL text with literal values inlined."""
    return str(clause.compile(dialect=MYSQL_DIALECT, compile_kwargs={"literal_binds": True}))


def build_url(ctx: SessionContext) -> URL:
    return URL.create(
        ctx.driver,
        username=ctx.user,
        password=ctx.password,
        host=ctx.host,
        port=ctx.port,
        database=ctx.database,
    )


def make_engine(ctx: SessionContext) -> Engine:
    return create_engine(
        build_url(ctx),
        pool_pre_ping=True,
        connect_args={"connect_timeout": ctx.connect_timeout},
    )


@contextmanager
def connect(engine: Engine):
    """Connection with an open transaction; connect failures become DatabaseUnavailable."""
    try:
        conn = engine.connect()
    except OperationalError as e:
        raise DatabaseUnavailable(f"Cannot connect to database: {e.orig}") from e
    try:
        with conn.begin():
            yield conn
    finally:
        conn.close()


def connection_lost(error: SQLAlchemyError) -> bool:
    """True when the dialect recognised the error as a disconnect.

    Ordinary server errors (duplicate trigger, denied privilege) also arrive as
    OperationalError from PyMySQL, so the exception class alone is not enough.
    """
    return isinstance(error, DBAPIError) and error.connection_invalidated


def check_connection(engine: Engine) -> None:
    """Fail fast if the schema is unreachable or the credentials are wrong."""
    with connect(engine) as conn:
        try:
            conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise DatabaseUnavailable(f"Database check failed: {e}") from e


def execute_statements(engine: Engine, statements: list[str], table: str | None = None) -> None:
    """Run statements in order. The first failure stops the rest."""
    with connect(engine) as conn:
        for sql in statements:
            _execute_one(conn, sql, table)


def _execute_one(conn: Connection, sql: str, table: str | None) -> None:
    logger.debug("Executing:\n%s", sql)
    try:
        conn.exec_driver_sql(sql, execution_options=_RAW_EXECUTION)
    except SQLAlchemyError as e:
        if connection_lost(e):
            raise DatabaseUnavailable(f"Connection lost while executing statement: {e.orig}", table=table) from e
        first_line = sql.strip().splitlines()[0] if sql.strip() else sql
        raise StatementFailed(f"Statement failed ({first_line}): {e}", table=table, statement=sql) from e

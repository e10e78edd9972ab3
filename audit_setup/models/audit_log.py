"""Append-only audit log table, one per audited source table.
The shape is fixed; only the JSON payloads in old_row_data/new_row_data vary per source table."""
from sqlalchemy import Column, MetaData, Table, text
from sqlalchemy.dialects.mysql import BIGINT, DATETIME, ENUM, JSON, TIMESTAMP, VARCHAR
from sqlalchemy.schema import CreateTable

from audit_setup.schemas.table import AUDIT_TABLE_SUFFIX
from audit_setup.schemas.trigger import DmlType


def audit_table_name(source_table: str) -> str:
    return f"{source_table}{AUDIT_TABLE_SUFFIX}"


def build_audit_table(source_table: str, metadata: MetaData | None = None) -> Table:
    """Table object for <source_table>_audit_log. Deterministic: same name, same DDL."""
    if metadata is None:
        metadata = MetaData()
    return Table(
        audit_table_name(source_table),
        metadata,
        Column("id", BIGINT, primary_key=True, autoincrement=True),
        # Source row's primary key value
        Column("row_id", BIGINT, nullable=False),
        Column("old_row_data", JSON, nullable=True),
        Column("new_row_data", JSON, nullable=True),
        Column("dml_type", ENUM(*[t.value for t in DmlType]), nullable=False),
        # When the triggering statement ran, and who ran it
        Column("dml_timestamp", DATETIME, nullable=False),
        Column("dml_created_by", VARCHAR(255), nullable=False),
        # When the audit row itself was written
        Column("trx_timestamp", TIMESTAMP, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
        mysql_engine="InnoDB",
        quote=True,
    )


def create_audit_table_ddl(source_table: str) -> CreateTable:
    """CREATE TABLE IF NOT EXISTS, so re-running setup on the same table is a no-op."""
    return CreateTable(build_audit_table(source_table), if_not_exists=True)

"""Audit triggers: AFTER INSERT/UPDATE/DELETE on the source table, each appending one
row to <table>_audit_log in the same transaction as the triggering statement."""
import textwrap

from sqlalchemy import insert, literal_column
from sqlalchemy.sql.dml import Insert

from audit_setup.database import MYSQL_DIALECT, render_sql
from audit_setup.exceptions import NoPrimaryKey
from audit_setup.models.audit_log import audit_table_name, build_audit_table
from audit_setup.schemas.table import TableDescriptor
from audit_setup.schemas.trigger import DmlType, RowRef, TriggerSpec
from audit_setup.services.serialization import json_object, plan_columns, row_column


def synthesize_triggers(table: TableDescriptor) -> list[TriggerSpec]:
    """One TriggerSpec per DML operation, in INSERT, UPDATE, DELETE order."""
    if not table.primary_key:
        raise NoPrimaryKey(f"Table '{table.name}' does not have a primary key.", table=table.name)

    # Both row images share one column order so audit JSON keys line up across operations
    old_columns = plan_columns(table.columns, RowRef.old)
    new_columns = plan_columns(table.columns, RowRef.new)
    common = {
        "source_table": table.name,
        "audit_table_name": audit_table_name(table.name),
        "primary_key": table.primary_key,
    }
    return [
        TriggerSpec(**common, operation=DmlType.insert, new_columns=new_columns),
        TriggerSpec(**common, operation=DmlType.update, old_columns=old_columns, new_columns=new_columns),
        TriggerSpec(**common, operation=DmlType.delete, old_columns=old_columns),
    ]


def audit_insert(spec: TriggerSpec) -> Insert:
    """INSERT INTO <table>_audit_log ... run by the trigger body."""
    audit = build_audit_table(spec.source_table)
    values = {"row_id": row_column(spec.row_id_source, spec.primary_key)}
    if spec.old_columns is not None:
        values["old_row_data"] = json_object(spec.old_columns)
    if spec.new_columns is not None:
        values["new_row_data"] = json_object(spec.new_columns)
    values["dml_type"] = spec.operation.value
    # Evaluated when the trigger fires, not when it is created
    values["dml_timestamp"] = literal_column("NOW()")
    values["dml_created_by"] = literal_column("USER()")
    return insert(audit).values(values)


def _quote(name: str) -> str:
    return MYSQL_DIALECT.identifier_preparer.quote_identifier(name)


def render_drop_trigger(spec: TriggerSpec) -> str:
    return f"DROP TRIGGER IF EXISTS {_quote(spec.name)}"


def render_create_trigger(spec: TriggerSpec) -> str:
    body = textwrap.indent(render_sql(audit_insert(spec)), "  ")
    return (
        f"CREATE TRIGGER {_quote(spec.name)}\n"
        f"AFTER {spec.operation.value} ON {_quote(spec.source_table)}\n"
        "FOR EACH ROW\n"
        "BEGIN\n"
        f"{body};\n"
        "END"
    )


def trigger_statements(specs: list[TriggerSpec]) -> list[str]:
    """Drop-then-create per trigger, so re-installation replaces instead of duplicating."""
    statements = []
    for spec in specs:
        statements.append(render_drop_trigger(spec))
        statements.append(render_create_trigger(spec))
    return statements

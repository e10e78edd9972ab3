"""Per-table audit setup: validate the name, introspect, build every statement, then run them.

All statements are built before the first one is executed, so a table that is rejected
(bad name, missing, no primary key) leaves the schema untouched.

Two sessions re-installing triggers on the same table at the same time can interleave their
DROP/CREATE pairs; MySQL commits each DDL statement on its own, so there is no lock to take.
The last CREATE wins and each trigger name still exists at most once.
"""
import logging

from pydantic import BaseModel, ConfigDict
from sqlalchemy.engine import Engine

from audit_setup.database import connect, execute_statements, render_sql
from audit_setup.exceptions import InvalidIdentifier, TableNotFound
from audit_setup.models.audit_log import audit_table_name, create_audit_table_ddl
from audit_setup.schemas.table import TableDescriptor, is_valid_identifier
from audit_setup.schemas.trigger import TriggerSpec
from audit_setup.services.introspection import describe_table
from audit_setup.services.triggers import synthesize_triggers, trigger_statements

logger = logging.getLogger(__name__)

MAX_IDENTIFIER_LENGTH = 64


class AuditPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    table: TableDescriptor
    audit_table: str
    create_table_sql: str
    triggers: tuple[TriggerSpec, ...]

    @property
    def trigger_sql(self) -> list[str]:
        return trigger_statements(list(self.triggers))

    @property
    def statements(self) -> list[str]:
        """Audit table first; triggers must never exist without their audit table."""
        return [self.create_table_sql, *self.trigger_sql]


def validate_table_name(name: str, available: list[str] | None = None) -> str:
    """Check the identifier pattern, then (if a table list is given) existence.

    Returns the name as spelled in the table list; matching is case-insensitive.
    """
    name = (name or "").strip()
    if not is_valid_identifier(name):
        raise InvalidIdentifier(
            f"Invalid table name '{name}'. Use only alphanumeric characters and underscores.", table=name
        )
    if available is None:
        return name
    by_lower = {t.lower(): t for t in available}
    if name.lower() not in by_lower:
        raise TableNotFound(f"Table '{name}' does not exist.", table=name)
    return by_lower[name.lower()]


def _check_identifier_lengths(table: str, names: list[str]) -> None:
    too_long = [n for n in names if len(n) > MAX_IDENTIFIER_LENGTH]
    if too_long:
        raise InvalidIdentifier(
            f"Table name '{table}' is too long: {', '.join(too_long)} would exceed "
            f"MySQL's {MAX_IDENTIFIER_LENGTH}-character identifier limit.",
            table=table,
        )


def build_plan(table: TableDescriptor) -> AuditPlan:
    triggers = synthesize_triggers(table)  # NoPrimaryKey before anything is rendered
    _check_identifier_lengths(table.name, [audit_table_name(table.name), *(t.name for t in triggers)])
    return AuditPlan(
        table=table,
        audit_table=audit_table_name(table.name),
        create_table_sql=render_sql(create_audit_table_ddl(table.name)),
        triggers=tuple(triggers),
    )


def plan_table(engine: Engine, schema: str, name: str, available: list[str] | None = None) -> AuditPlan:
    name = validate_table_name(name, available)
    with connect(engine) as conn:
        descriptor = describe_table(conn, schema, name)
    logger.info("Primary key for table '%s' is '%s'.", name, descriptor.primary_key or "(none)")
    return build_plan(descriptor)


def provision_table(
    engine: Engine,
    schema: str,
    name: str,
    available: list[str] | None = None,
    dry_run: bool = False,
) -> AuditPlan:
    """Create <name>_audit_log (if absent) and (re)install its three triggers."""
    plan = plan_table(engine, schema, name, available)
    if dry_run:
        logger.info("Dry run: %d statements for table '%s' not executed.", len(plan.statements), plan.table.name)
        return plan

    logger.info("Creating audit log table '%s'...", plan.audit_table)
    execute_statements(engine, [plan.create_table_sql], table=plan.table.name)
    logger.info("Audit log table '%s' created or already exists.", plan.audit_table)

    logger.info("Creating triggers for table '%s'...", plan.table.name)
    execute_statements(engine, plan.trigger_sql, table=plan.table.name)
    logger.info("Triggers for table '%s' created successfully.", plan.table.name)
    return plan


def render_script(plans: list[AuditPlan]) -> str:
    """SQL script for the mysql command-line client (trigger bodies need DELIMITER)."""
    parts = []
    for plan in plans:
        parts.append(f"-- Audit log setup for table {plan.table.name}")
        parts.append(f"{plan.create_table_sql.strip()};")
        parts.append("")
        parts.append("DELIMITER //")
        for sql in plan.trigger_sql:
            parts.append(f"{sql}//")
        parts.append("DELIMITER ;")
        parts.append("")
    return "\n".join(parts)

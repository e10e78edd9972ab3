"""
Audit log table definition. The source tables themselves are never modelled;
they are read from information_schema at setup time.
"""
from audit_setup.models.audit_log import audit_table_name, build_audit_table, create_audit_table_ddl

__all__ = [
    "audit_table_name",
    "build_audit_table",
    "create_audit_table_ddl",
]

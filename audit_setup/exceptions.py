"""
Exceptions for audit log provisioning.

Everything except DatabaseUnavailable is local to one table's setup; the
session reports it and moves on to the next table.
"""


class AuditSetupError(Exception):
    """Base exception for audit setup errors."""

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.table = table


class InvalidIdentifier(AuditSetupError):
    """Table name contains characters outside [A-Za-z0-9_]."""

    pass


class TableNotFound(AuditSetupError):
    """Table is not present in the target schema."""

    pass


class NoPrimaryKey(AuditSetupError):
    """Table has no primary key column; nothing is created for it."""

    pass


class StatementFailed(AuditSetupError):
    """A metadata query, DDL or trigger statement was rejected by the server."""

    def __init__(self, message: str, table: str | None = None, statement: str | None = None):
        super().__init__(message, table=table)
        self.statement = statement


class DatabaseUnavailable(AuditSetupError):
    """Cannot connect to the database. Fatal to the whole session."""

    pass

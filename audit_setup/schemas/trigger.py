"""Trigger definitions, before they are rendered to SQL."""
import enum

from pydantic import BaseModel, ConfigDict, model_validator

from audit_setup.schemas.table import TypeCategory


class DmlType(str, enum.Enum):
    """Value stored in <table>_audit_log.dml_type."""
    insert = "INSERT"
    update = "UPDATE"
    delete = "DELETE"


class RowRef(str, enum.Enum):
    """Row image visible inside a row-level trigger."""
    old = "OLD"
    new = "NEW"


class SerializedColumn(BaseModel):
    """One key/value pair of a JSON_OBJECT(...) payload."""
    model_config = ConfigDict(frozen=True)

    name: str
    category: TypeCategory
    row: RowRef


class TriggerSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_table: str
    audit_table_name: str
    primary_key: str
    operation: DmlType
    old_columns: tuple[SerializedColumn, ...] | None = None
    new_columns: tuple[SerializedColumn, ...] | None = None

    @model_validator(mode="after")
    def check_row_images(self) -> "TriggerSpec":
        # INSERT sees only NEW, DELETE only OLD, UPDATE both
        wants_old = self.operation in (DmlType.update, DmlType.delete)
        wants_new = self.operation in (DmlType.insert, DmlType.update)
        if wants_old != (self.old_columns is not None):
            raise ValueError(f"{self.operation.value} trigger: old_columns must be {'set' if wants_old else 'absent'}")
        if wants_new != (self.new_columns is not None):
            raise ValueError(f"{self.operation.value} trigger: new_columns must be {'set' if wants_new else 'absent'}")
        return self

    @property
    def name(self) -> str:
        return f"{self.source_table}_after_{self.operation.name}"

    @property
    def row_id_source(self) -> RowRef:
        """Row whose primary key becomes row_id (pre-update identity for UPDATE)."""
        return RowRef.new if self.operation == DmlType.insert else RowRef.old

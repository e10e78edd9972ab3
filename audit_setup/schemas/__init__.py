from audit_setup.schemas.table import ColumnDescriptor, TableDescriptor, TypeCategory
from audit_setup.schemas.trigger import DmlType, RowRef, SerializedColumn, TriggerSpec

"""Introspected table structure."""
import enum
import re

from pydantic import BaseModel, ConfigDict

IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_]+")

AUDIT_TABLE_SUFFIX = "_audit_log"


def is_valid_identifier(name: str | None) -> bool:
    return bool(name) and IDENTIFIER_RE.fullmatch(name) is not None


class TypeCategory(str, enum.Enum):
    """How a column's value is written into the audit JSON."""
    numeric = "numeric"    # cast to text
    temporal = "temporal"  # formatted as YYYY-MM-DD HH:MM:SS
    other = "other"        # passed through unchanged


class ColumnDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str  # raw information_schema DATA_TYPE, e.g. "decimal"
    category: TypeCategory


class TableDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    columns: tuple[ColumnDescriptor, ...]
    primary_key: str | None = None  # first PK column by ordinal position

"""Column serialization: how each source column is written into the audit JSON payload.

information_schema DATA_TYPE names fall into three categories:

    numeric  (tinyint ... decimal)     CAST(<row>.`col` AS CHAR)
    temporal (date, datetime, stamp)   date_format(<row>.`col`, '%Y-%m-%d %H:%i:%s')
    other    (anything else)           <row>.`col` unchanged

Casting numbers to text keeps JSON_OBJECT from re-encoding decimals and floats.
"""
from collections.abc import Iterable

from sqlalchemy import String, cast, func, literal
from sqlalchemy.sql import column, table
from sqlalchemy.sql.elements import ColumnElement, quoted_name

from audit_setup.schemas.table import ColumnDescriptor, TypeCategory
from audit_setup.schemas.trigger import RowRef, SerializedColumn

NUMERIC_TYPES = frozenset({
    "tinyint", "smallint", "mediumint", "int", "bigint", "float", "double", "decimal",
})
TEMPORAL_TYPES = frozenset({"date", "datetime", "timestamp"})

AUDIT_DATE_FORMAT = "%Y-%m-%d %H:%i:%s"


def classify_type(data_type: str | None) -> TypeCategory:
    """Total mapping from DATA_TYPE to category; unrecognised names are passed through."""
    name = (data_type or "").strip().lower()
    if name in NUMERIC_TYPES:
        return TypeCategory.numeric
    if name in TEMPORAL_TYPES:
        return TypeCategory.temporal
    return TypeCategory.other


def plan_columns(columns: Iterable[ColumnDescriptor], row: RowRef) -> tuple[SerializedColumn, ...]:
    """Serialization plan for one row image, in the table's declared column order."""
    return tuple(SerializedColumn(name=c.name, category=c.category, row=row) for c in columns)


def row_column(row: RowRef, name: str) -> ColumnElement:
    """NEW.`name` or OLD.`name`."""
    col = column(quoted_name(name, quote=True))
    # OLD/NEW are trigger pseudo-rows and must stay unquoted
    table(quoted_name(row.value, quote=False), col)
    return col


def column_expression(col: SerializedColumn) -> ColumnElement:
    ref = row_column(col.row, col.name)
    if col.category == TypeCategory.numeric:
        return cast(ref, String)
    if col.category == TypeCategory.temporal:
        return func.date_format(ref, AUDIT_DATE_FORMAT)
    return ref


def json_object(columns: Iterable[SerializedColumn]) -> ColumnElement:
    """JSON_OBJECT('col1', expr1, 'col2', expr2, ...)."""
    args = []
    for col in columns:
        args.append(literal(col.name))
        args.append(column_expression(col))
    return func.json_object(*args)

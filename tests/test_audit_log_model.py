"""
Tests for the audit log table definition.
"""

from audit_setup.database import render_sql
from audit_setup.models import audit_table_name, build_audit_table, create_audit_table_ddl

AUDIT_COLUMNS = [
    "id",
    "row_id",
    "old_row_data",
    "new_row_data",
    "dml_type",
    "dml_timestamp",
    "dml_created_by",
    "trx_timestamp",
]


class TestAuditTable:
    """Tests for build_audit_table / create_audit_table_ddl."""

    def test_name_derived_from_source_table(self):
        assert audit_table_name("orders") == "orders_audit_log"
        assert build_audit_table("orders").name == "orders_audit_log"

    def test_fixed_column_set(self):
        """Shape never depends on the source table's columns."""
        assert [c.name for c in build_audit_table("orders").columns] == AUDIT_COLUMNS
        assert [c.name for c in build_audit_table("customers").columns] == AUDIT_COLUMNS

    def test_nullability(self):
        table = build_audit_table("orders")

        assert table.c.old_row_data.nullable
        assert table.c.new_row_data.nullable
        for name in ("row_id", "dml_type", "dml_timestamp", "dml_created_by", "trx_timestamp"):
            assert not table.c[name].nullable, name
        assert [c.name for c in table.primary_key.columns] == ["id"]

    def test_ddl_is_create_if_not_exists(self):
        sql = render_sql(create_audit_table_ddl("orders"))

        assert sql.strip().startswith("CREATE TABLE IF NOT EXISTS `orders_audit_log` (")
        assert "id BIGINT NOT NULL AUTO_INCREMENT" in sql
        assert "row_id BIGINT NOT NULL" in sql
        assert "old_row_data JSON" in sql
        assert "new_row_data JSON" in sql
        assert "dml_type ENUM('INSERT','UPDATE','DELETE') NOT NULL" in sql
        assert "dml_timestamp DATETIME NOT NULL" in sql
        assert "dml_created_by VARCHAR(255) NOT NULL" in sql
        assert "trx_timestamp TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP" in sql
        assert "PRIMARY KEY (id)" in sql
        assert "ENGINE=InnoDB" in sql

    def test_ddl_is_byte_identical_across_calls(self):
        assert render_sql(create_audit_table_ddl("orders")) == render_sql(create_audit_table_ddl("orders"))

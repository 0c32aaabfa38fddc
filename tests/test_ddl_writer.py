# ============================================================================
# DDL SCRIPT WRITER TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Tests - DDL script output
# PURPOSE: Verify header, statement terminators, file replacement
# CREATED: 18 OCT 2026
# ============================================================================
"""
DDL Script Writer Tests

Run with:
    pytest tests/test_ddl_writer.py -v
"""

from datetime import datetime

import pytest

from infrastructure.ddl_writer import RULE, DdlScriptWriter


def fixed_clock():
    return datetime(2026, 10, 18, 9, 30, 0)


class TestDdlScriptWriter:
    """Script file contents."""

    def test_header_and_statements(self, tmp_path):
        path = tmp_path / "schema.cql"

        with DdlScriptWriter(str(path), tool_name="SchemaTool 1.0", clock=fixed_clock) as writer:
            writer.write("CREATE TABLE app.person (name varchar, PRIMARY KEY (name))")
            writer.write("CREATE INDEX person_name_idx ON app.person (name)")

        assert path.read_text().splitlines() == [
            RULE,
            "-- SchemaTool 1.0 (ran at 18/10/2026 09:30:00)",
            RULE,
            "CREATE TABLE app.person (name varchar, PRIMARY KEY (name));",
            "CREATE INDEX person_name_idx ON app.person (name);",
        ]
        assert writer.written == 2

    def test_existing_file_replaced(self, tmp_path):
        path = tmp_path / "schema.cql"
        path.write_text("DROP TABLE stale;\n")

        with DdlScriptWriter(str(path), clock=fixed_clock):
            pass

        assert "stale" not in path.read_text()

    def test_parent_directories_created(self, tmp_path):
        path = tmp_path / "out" / "ddl" / "schema.cql"

        with DdlScriptWriter(str(path), clock=fixed_clock) as writer:
            writer.write("DROP TABLE app.person")

        assert path.read_text().endswith("DROP TABLE app.person;\n")

    def test_default_tool_name_in_header(self, tmp_path):
        from __version__ import TOOL_NAME

        path = tmp_path / "schema.cql"
        with DdlScriptWriter(str(path), clock=fixed_clock):
            pass

        assert f"-- {TOOL_NAME} (ran at" in path.read_text()

    def test_write_requires_open(self, tmp_path):
        writer = DdlScriptWriter(str(tmp_path / "schema.cql"))

        with pytest.raises(RuntimeError, match="not open"):
            writer.write("DROP TABLE x")

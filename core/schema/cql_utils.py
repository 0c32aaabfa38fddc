# ============================================================================
# CQL UTILITIES
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Static type tables and CQL statement builders
# PURPOSE: Physical-type lookup tables; keyspace, table and index DDL text
# CREATED: 18 OCT 2026
# EXPORTS: PHYSICAL_TYPE_BY_DECLARED, DATASTORE_TYPE_BY_PHYSICAL, STORAGE_HINTS,
#          KeyspaceBuilder, TableBuilder, IndexBuilder, IntrospectionQueries
# DEPENDENCIES: none
# ============================================================================
"""
CQL Utilities - Shared statement text and type tables.

The type tables are immutable module constants, built once at import and
shared by every mapper instance.

All builders are static and return plain statement text without the
trailing semicolon; the script writer adds it.

Usage:
    from core.schema.cql_utils import TableBuilder, IndexBuilder

    stmt = TableBuilder.create("app", "person", [("name", "varchar")], ["name"])
    idx = IndexBuilder.create("app", "person", "name", "person_name_idx")
"""

import re
from datetime import date, datetime, time
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo


# ============================================================================
# TYPE TABLES
# ============================================================================

DEFAULT_TEXT_TYPE = "varchar"
BLOB_TYPE = "blob"

# Declared Python type -> physical column type (exact type lookup)
PHYSICAL_TYPE_BY_DECLARED = MappingProxyType({
    bool: "boolean",
    int: "int",
    float: "double",
    str: "varchar",
    Decimal: "double",
    datetime: "timestamp",
    date: "timestamp",
    time: "timestamp",
    ZoneInfo: "varchar",
    bytes: "blob",
})

# Physical column type -> Python type handed over by the driver
DATASTORE_TYPE_BY_PHYSICAL = MappingProxyType({
    "timestamp": datetime,
    "boolean": bool,
    "int": int,
    "double": float,
    "float": float,
    "bigint": int,
    "varchar": str,
    "blob": bytes,
})

# Storage-type hint (as written in metadata) -> physical column type
STORAGE_HINTS = MappingProxyType({
    "varchar": "varchar",
    "longvarchar": "varchar",
    "text": "varchar",
    "bigint": "bigint",
    "blob": "blob",
    "decimal": "double",
    "double": "double",
    "integer": "int",
    "int": "int",
})

_TEXT_ALIAS = re.compile(r"\btext\b")


def physical_type_for(declared_type: Any) -> Optional[str]:
    """Static-table lookup; exact on the declared type."""
    try:
        return PHYSICAL_TYPE_BY_DECLARED.get(declared_type)
    except TypeError:
        # Unhashable declared types never appear in the table
        return None


def resolve_storage_hint(hint: Optional[str]) -> Optional[str]:
    """Physical type selected by a storage hint, None for unknown hints."""
    if not hint:
        return None
    return STORAGE_HINTS.get(hint.strip().lower())


def list_type(element: str) -> str:
    return f"list<{element}>"


def set_type(element: str) -> str:
    return f"set<{element}>"


def map_type(key: str, value: str) -> str:
    return f"map<{key},{value}>"


def container_parts(type_name: str) -> Tuple[Optional[str], List[str]]:
    """
    Split a container type name.

    "list<int>" -> ("list", ["int"]); "map<varchar,int>" -> ("map", ["varchar", "int"]);
    "varchar" -> (None, []).
    """
    match = re.fullmatch(r"\s*(list|set|map)\s*<(.*)>\s*", type_name)
    if not match:
        return None, []
    return match.group(1), [part.strip() for part in match.group(2).split(",")]


def normalize_type_name(type_name: Optional[str]) -> Optional[str]:
    """
    Normalize a store-reported type name to the mapper's vocabulary.

    The store reports varchar columns as "text", also inside containers,
    and may add spaces after commas.
    """
    if type_name is None:
        return None
    normalized = _TEXT_ALIAS.sub(DEFAULT_TEXT_TYPE, type_name.strip().lower())
    return re.sub(r"\s*,\s*", ",", normalized)


# ============================================================================
# KEYSPACE BUILDER
# ============================================================================

class KeyspaceBuilder:
    """Builder for keyspace statements."""

    @staticmethod
    def create(keyspace: str, replication: str, durable_writes: Optional[bool] = None) -> str:
        """
        CREATE KEYSPACE statement.

        Args:
            keyspace: Keyspace name
            replication: Replication map, passed through as written
            durable_writes: Only an explicit False adds the durable_writes clause
        """
        stmt = f"CREATE KEYSPACE IF NOT EXISTS {keyspace} WITH replication = {replication}"
        if durable_writes is False:
            stmt += " AND durable_writes=false"
        return stmt

    @staticmethod
    def drop(keyspace: str) -> str:
        return f"DROP KEYSPACE IF EXISTS {keyspace}"


# ============================================================================
# TABLE BUILDER
# ============================================================================

class TableBuilder:
    """Builder for table statements."""

    @staticmethod
    def qualified(keyspace: Optional[str], table: str) -> str:
        return f"{keyspace}.{table}" if keyspace else table

    @staticmethod
    def create(
        keyspace: Optional[str],
        table: str,
        columns: Iterable[Tuple[str, str]],
        primary_key: Sequence[str] = ()
    ) -> str:
        """
        CREATE TABLE statement.

        Args:
            keyspace: Keyspace name (None for the session keyspace)
            table: Table name
            columns: Ordered (column name, physical type) pairs
            primary_key: Ordered key column names; empty for no key clause

        Returns:
            "CREATE TABLE ks.t (a varchar, b int, PRIMARY KEY (a))"
        """
        parts = [f"{name} {type_name}" for name, type_name in columns]
        if primary_key:
            parts.append(f"PRIMARY KEY ({', '.join(primary_key)})")
        return f"CREATE TABLE {TableBuilder.qualified(keyspace, table)} ({', '.join(parts)})"

    @staticmethod
    def add_column(keyspace: Optional[str], table: str, column: str, type_name: str) -> str:
        return f"ALTER TABLE {TableBuilder.qualified(keyspace, table)} ADD {column} {type_name}"

    @staticmethod
    def drop(keyspace: Optional[str], table: str) -> str:
        return f"DROP TABLE {TableBuilder.qualified(keyspace, table)}"


# ============================================================================
# INDEX BUILDER
# ============================================================================

class IndexBuilder:
    """Builder for secondary-index statements. Single column only."""

    @staticmethod
    def name_for_column(table: str, column: str, suffix: str = "_idx") -> str:
        return f"{table}_{column}{suffix}".lower()

    @staticmethod
    def name_for_position(table: str, position: int) -> str:
        return f"{table}_idx{position}".lower()

    @staticmethod
    def create(keyspace: Optional[str], table: str, column: str, name: str) -> str:
        return f"CREATE INDEX {name} ON {TableBuilder.qualified(keyspace, table)} ({column})"

    @staticmethod
    def drop(keyspace: Optional[str], name: str) -> str:
        return f"DROP INDEX {TableBuilder.qualified(keyspace, name)}"


# ============================================================================
# INTROSPECTION
# ============================================================================

class IntrospectionQueries:
    """Queries against the store's system_schema tables (driver %s placeholders)."""

    KEYSPACE_EXISTS = (
        "SELECT keyspace_name FROM system_schema.keyspaces "
        "WHERE keyspace_name = %s"
    )
    TABLE_EXISTS = (
        "SELECT table_name FROM system_schema.tables "
        "WHERE keyspace_name = %s AND table_name = %s"
    )
    TABLE_COLUMNS = (
        "SELECT column_name, type FROM system_schema.columns "
        "WHERE keyspace_name = %s AND table_name = %s"
    )
    TABLE_INDEXES = (
        "SELECT index_name, options FROM system_schema.indexes "
        "WHERE keyspace_name = %s AND table_name = %s"
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DEFAULT_TEXT_TYPE",
    "BLOB_TYPE",
    "PHYSICAL_TYPE_BY_DECLARED",
    "DATASTORE_TYPE_BY_PHYSICAL",
    "STORAGE_HINTS",
    "physical_type_for",
    "resolve_storage_hint",
    "list_type",
    "set_type",
    "map_type",
    "container_parts",
    "normalize_type_name",
    "KeyspaceBuilder",
    "TableBuilder",
    "IndexBuilder",
    "IntrospectionQueries",
]

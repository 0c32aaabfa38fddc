# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for schema sync, naming and store connection
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Defaults for the schema synchronizer, column naming and the store
connection. Each can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


DEFAULT_REPLICATION = "{'class': 'SimpleStrategy', 'replication_factor' : 3}"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_optional_flag(name: str) -> Optional[bool]:
    if os.getenv(name) is None:
        return None
    return _env_flag(name, True)


@dataclass(frozen=True)
class SchemaDefaults:
    """
    Defaults for schema synchronization.

    Controls which DDL the create operation is allowed to issue, and where
    a DDL script goes when the statements are not executed.
    """
    # Create operation switches
    auto_create_tables: bool = True
    auto_create_columns: bool = False
    auto_create_constraints: bool = True

    # Keyspace
    keyspace: str = "app"
    replication: str = DEFAULT_REPLICATION
    durable_writes: Optional[bool] = None  # None leaves the store default

    # Script mode: write statements here instead of executing them
    ddl_filename: Optional[str] = None

    # Multitenancy discriminator value; a tenant column is added when set
    tenant_id: Optional[str] = None

    # Separator between chain names in embedded column names
    column_separator: str = "_"

    @property
    def multitenancy_enabled(self) -> bool:
        return bool(self.tenant_id)

    @classmethod
    def from_env(cls) -> "SchemaDefaults":
        """Create from environment variables."""
        return cls(
            auto_create_tables=_env_flag("SCHEMA_AUTO_CREATE_TABLES", True),
            auto_create_columns=_env_flag("SCHEMA_AUTO_CREATE_COLUMNS", False),
            auto_create_constraints=_env_flag("SCHEMA_AUTO_CREATE_CONSTRAINTS", True),
            keyspace=os.getenv("CASSANDRA_KEYSPACE", "app"),
            replication=os.getenv("SCHEMA_REPLICATION", DEFAULT_REPLICATION),
            durable_writes=_env_optional_flag("SCHEMA_DURABLE_WRITES"),
            ddl_filename=os.getenv("SCHEMA_DDL_FILENAME") or None,
            tenant_id=os.getenv("SCHEMA_TENANT_ID") or None,
        )


@dataclass(frozen=True)
class NamingDefaults:
    """
    Names of the surrogate columns the mapper generates.

    The datastore identity column is the table name plus id_suffix.
    """
    id_suffix: str = "_id"
    version_column: str = "version"
    discriminator_column: str = "discriminator"
    tenant_column: str = "tenant_id"
    index_suffix: str = "_idx"

    def datastore_id_column(self, table: str) -> str:
        return f"{table}{self.id_suffix}".lower()


@dataclass(frozen=True)
class ConnectionDefaults:
    """Defaults for the store connection."""
    contact_points: Tuple[str, ...] = ("127.0.0.1",)
    port: int = 9042
    username: Optional[str] = None
    password: Optional[str] = None
    connect_timeout: int = 10  # seconds

    @property
    def has_credentials(self) -> bool:
        return bool(self.username)

    @classmethod
    def from_env(cls) -> "ConnectionDefaults":
        """Create from environment variables."""
        points = os.getenv("CASSANDRA_CONTACT_POINTS", "127.0.0.1")
        return cls(
            contact_points=tuple(p.strip() for p in points.split(",") if p.strip()),
            port=int(os.getenv("CASSANDRA_PORT", 9042)),
            username=os.getenv("CASSANDRA_USERNAME") or None,
            password=os.getenv("CASSANDRA_PASSWORD") or None,
            connect_timeout=int(os.getenv("CASSANDRA_CONNECT_TIMEOUT", 10)),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    schema: SchemaDefaults = field(default_factory=SchemaDefaults)
    naming: NamingDefaults = field(default_factory=NamingDefaults)
    connection: ConnectionDefaults = field(default_factory=ConnectionDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            schema=SchemaDefaults.from_env(),
            naming=NamingDefaults(),
            connection=ConnectionDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DEFAULT_REPLICATION",
    "SchemaDefaults",
    "NamingDefaults",
    "ConnectionDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]

# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Foundation - Core enums shared by mapper, synchronizer and codec
# PURPOSE: Classify fields, identities and schema operations once, up front
# CREATED: 18 OCT 2026
# EXPORTS: RelationKind, StorageShape, IdentityKind, VersionStrategy,
#          SchemaOperation, ColumnRole, IssueKind
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the wide-column schema mapper.

A field is classified along two axes when its descriptor is built:
- RelationKind: what the value IS (plain value, embedded composite, reference)
- StorageShape: how it is HELD (scalar, collection, map, array)

The type mapper, embedding resolver and codec dispatch on these tags instead
of inspecting declared types repeatedly.
"""

from enum import Enum


# ============================================================================
# FIELD CLASSIFICATION
# ============================================================================

class RelationKind(str, Enum):
    """
    Relation of a field to other persisted classes.

    NONE + COLLECTION/MAP is a collection/map of primitives.
    EMBEDDED + SCALAR is a single-valued composite (flattened into the row).
    EMBEDDED + COLLECTION/MAP is unsupported (warned and skipped).
    """
    NONE = "none"
    EMBEDDED = "embedded"
    REFERENCE = "reference"              # Single-valued reference to a persisted object
    MULTI_REFERENCE = "multi_reference"  # Collection/map/array of references

    def is_single_valued(self) -> bool:
        return self in (RelationKind.EMBEDDED, RelationKind.REFERENCE)


class StorageShape(str, Enum):
    """Container shape of a field value."""
    SCALAR = "scalar"
    COLLECTION = "collection"
    MAP = "map"
    ARRAY = "array"

    def is_container(self) -> bool:
        return self is not StorageShape.SCALAR


# ============================================================================
# CLASS-LEVEL CONTRACTS
# ============================================================================

class IdentityKind(str, Enum):
    """How objects of a class are identified in the table."""
    APPLICATION = "application"  # Key-marked fields form the primary key
    DATASTORE = "datastore"      # Surrogate bigint key column
    NONDURABLE = "nondurable"    # No identity (no primary key clause)


class VersionStrategy(str, Enum):
    """Optimistic-concurrency version strategy."""
    VERSION_NUMBER = "version_number"
    DATE_TIME = "date_time"


class ColumnRole(str, Enum):
    """Why a column exists in a table."""
    MEMBER = "member"
    DATASTORE_ID = "datastore_id"
    VERSION = "version"
    DISCRIMINATOR = "discriminator"
    MULTITENANCY = "multitenancy"

    def is_surrogate(self) -> bool:
        return self is not ColumnRole.MEMBER


# ============================================================================
# SCHEMA OPERATIONS
# ============================================================================

class SchemaOperation(str, Enum):
    """Operation selector for the schema handler."""
    CREATE = "create"
    VALIDATE = "validate"
    DELETE = "delete"


class IssueKind(str, Enum):
    """Structural validation failures."""
    MISSING_TABLE = "missing_table"
    MISSING_COLUMN = "missing_column"
    TYPE_MISMATCH = "type_mismatch"
    UNEXPECTED_COLUMN = "unexpected_column"
    MISSING_INDEX = "missing_index"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "RelationKind",
    "StorageShape",
    "IdentityKind",
    "VersionStrategy",
    "ColumnRole",
    "SchemaOperation",
    "IssueKind",
]

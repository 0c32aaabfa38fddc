# ============================================================================
# SCHEMA MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Type mapping, embedding, DDL planning, validation
# PURPOSE: Derive physical tables from class descriptors
# CREATED: 18 OCT 2026
# ============================================================================

from core.schema.cql_utils import (
    PHYSICAL_TYPE_BY_DECLARED,
    DATASTORE_TYPE_BY_PHYSICAL,
    STORAGE_HINTS,
    KeyspaceBuilder,
    TableBuilder,
    IndexBuilder,
    IntrospectionQueries,
)
from core.schema.type_mapper import TypeMapper, ColumnType, FallbackRule, DEFAULT_FALLBACK_RULES
from core.schema.embedding import EmbeddingResolver
from core.schema.table import TableMapping, IndexTarget, ColumnCollisionError
from core.schema.cql_generator import CqlGenerator, SchemaPlan
from core.schema.validator import SchemaValidator, ValidationIssue, SchemaValidationError

__all__ = [
    # Type mapping
    "TypeMapper",
    "ColumnType",
    "FallbackRule",
    "DEFAULT_FALLBACK_RULES",
    "PHYSICAL_TYPE_BY_DECLARED",
    "DATASTORE_TYPE_BY_PHYSICAL",
    "STORAGE_HINTS",
    # Embedding and tables
    "EmbeddingResolver",
    "TableMapping",
    "IndexTarget",
    "ColumnCollisionError",
    # DDL
    "CqlGenerator",
    "SchemaPlan",
    "KeyspaceBuilder",
    "TableBuilder",
    "IndexBuilder",
    "IntrospectionQueries",
    # Validation
    "SchemaValidator",
    "ValidationIssue",
    "SchemaValidationError",
]

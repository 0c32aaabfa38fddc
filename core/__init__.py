# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core module initialization
# PURPOSE: Export core contracts, descriptors, and schema components
# CREATED: 18 OCT 2026
# ============================================================================

from core.contracts import (
    RelationKind,
    StorageShape,
    IdentityKind,
    VersionStrategy,
    SchemaOperation,
)
from core.models import ClassDescriptor, FieldDescriptor, DescriptorLoader
from core.schema import TypeMapper, EmbeddingResolver, TableMapping, CqlGenerator, SchemaValidator

__all__ = [
    # Enums
    "RelationKind",
    "StorageShape",
    "IdentityKind",
    "VersionStrategy",
    "SchemaOperation",
    # Models
    "ClassDescriptor",
    "FieldDescriptor",
    "DescriptorLoader",
    # Schema
    "TypeMapper",
    "EmbeddingResolver",
    "TableMapping",
    "CqlGenerator",
    "SchemaValidator",
]

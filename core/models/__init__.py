# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Model exports
# PURPOSE: Central export point for descriptor and column models
# CREATED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Logical side (read-only, built by a metadata loader):
    - ClassDescriptor / FieldDescriptor and their parts

Physical side (rebuilt per operation):
    - ColumnSpec, EmbedChain, TableSnapshot
"""

from core.models.descriptors import (
    ClassDescriptor,
    FieldDescriptor,
    IndexSpec,
    EmbeddedSpec,
    CollectionSpec,
    MapSpec,
    VersionSpec,
    DiscriminatorSpec,
)
from core.models.columns import ColumnSpec, EmbedChain, ColumnDetails, TableSnapshot
from core.models.loader import DescriptorLoader, resolve_type

__all__ = [
    # Descriptors
    "ClassDescriptor",
    "FieldDescriptor",
    "IndexSpec",
    "EmbeddedSpec",
    "CollectionSpec",
    "MapSpec",
    "VersionSpec",
    "DiscriminatorSpec",
    # Columns
    "ColumnSpec",
    "EmbedChain",
    "ColumnDetails",
    "TableSnapshot",
    # Loading
    "DescriptorLoader",
    "resolve_type",
]

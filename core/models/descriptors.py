# ============================================================================
# CLASS & FIELD DESCRIPTORS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core model - Logical object model consumed by the mapper
# PURPOSE: Describe persisted classes, their fields, keys, versions, indexes
# CREATED: 18 OCT 2026
# EXPORTS: FieldDescriptor, ClassDescriptor, IndexSpec, EmbeddedSpec,
#          CollectionSpec, MapSpec, VersionSpec, DiscriminatorSpec
# DEPENDENCIES: pydantic
# ============================================================================
"""
Descriptor Models

A ClassDescriptor is the logical definition of one persisted class. It is
built by a metadata loader (see core.models.loader for the YAML one) and is
read-only afterwards: the type mapper, embedding resolver, synchronizer and
codec only ever read it.

Fields are classified once, when the descriptor is built:
- relation (RelationKind) and shape (StorageShape) are explicit
- serializable is derived from the declared type unless given

Embedded (composite) fields carry the ClassDescriptor of the embedded type,
so the embedding resolver can recurse without a metadata lookup.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.contracts import IdentityKind, RelationKind, StorageShape, VersionStrategy
from core.converters import is_serializable_type


# ============================================================================
# FIELD PARTS
# ============================================================================

class IndexSpec(BaseModel):
    """
    Index declaration.

    On a field the indexed column is the field's own column and `columns`
    stays empty. On a class, `columns` lists the indexed column names; the
    store only supports single-column indexes.
    """
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, max_length=128)
    columns: List[str] = Field(default_factory=list)
    unique: bool = False

    @field_validator("columns", mode="before")
    @classmethod
    def handle_string_input(cls, v):
        """Allow single string as shorthand for single-item list."""
        if isinstance(v, str):
            return [v]
        return v

    def is_composite(self) -> bool:
        return len(self.columns) > 1


class CollectionSpec(BaseModel):
    """Element details of a collection or array field."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    container: Any = list
    element_type: Any = str
    element_serialized: bool = False
    ordered: bool = False

    def requires_unique_elements(self) -> bool:
        """
        Whether the container enforces element uniqueness.

        list/tuple do not; set/frozenset do. Abstract containers that are
        neither a sequence nor a set are treated as unique.
        """
        if isinstance(self.container, type):
            if issubclass(self.container, (set, frozenset)):
                return True
            if issubclass(self.container, (list, tuple)):
                return False
        return True

    def cql_container(self) -> str:
        """list when ordering is requested or uniqueness is not required, else set."""
        if self.ordered or not self.requires_unique_elements():
            return "list"
        return "set"


class MapSpec(BaseModel):
    """Key/value details of a map field."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key_type: Any = str
    value_type: Any = str
    key_serialized: bool = False
    value_serialized: bool = False
    key_is_reference: bool = False
    value_is_reference: bool = False


class EmbeddedSpec(BaseModel):
    """
    Embedding declaration of a composite field.

    owner_field names the field of the embedded class that points back to
    the embedding object. That field is never stored.
    """
    model_config = ConfigDict(frozen=True)

    target: "ClassDescriptor"
    owner_field: Optional[str] = None


class VersionSpec(BaseModel):
    """
    Optimistic-concurrency versioning.

    With field_name set the version lives in a member field; otherwise a
    surrogate version column is generated.
    """
    model_config = ConfigDict(frozen=True)

    strategy: VersionStrategy = VersionStrategy.VERSION_NUMBER
    field_name: Optional[str] = None
    column: Optional[str] = None

    def is_surrogate(self) -> bool:
        return self.field_name is None


class DiscriminatorSpec(BaseModel):
    """Single-table inheritance discriminator."""
    model_config = ConfigDict(frozen=True)

    value: Optional[str] = None
    column: Optional[str] = None


# ============================================================================
# FIELD DESCRIPTOR
# ============================================================================

class FieldDescriptor(BaseModel):
    """
    One leaf or composite member of a class.

    Maps to: one column (leaf), several columns (embedded composite),
    or none (owner back-reference, embedded collection).
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, max_length=128)
    declared_type: Any = str

    # Classification
    relation: RelationKind = Field(default=RelationKind.NONE)
    shape: StorageShape = Field(default=StorageShape.SCALAR)
    collection: Optional[CollectionSpec] = None
    map: Optional[MapSpec] = None
    embedded: Optional[EmbeddedSpec] = None
    target_class: Optional[str] = Field(
        default=None,
        description="Name of the referenced class for REFERENCE/MULTI_REFERENCE"
    )

    # Storage hints
    converter: Optional[str] = Field(default=None, description="Explicit converter name")
    storage_type: Optional[str] = Field(default=None, description="Storage-type hint, e.g. varchar")
    serialized: bool = False
    serializable: Optional[bool] = None
    column: Optional[str] = Field(default=None, description="Explicit column name")

    # Keys and indexes
    primary_key: bool = False
    index: Optional[IndexSpec] = None

    @model_validator(mode="before")
    @classmethod
    def classify_serializable(cls, data: Any) -> Any:
        """Derive serializability from the declared type when not given."""
        if isinstance(data, dict) and data.get("serializable") is None:
            data = dict(data)
            data["serializable"] = is_serializable_type(data.get("declared_type", str))
        return data

    @model_validator(mode="after")
    def check_shape(self) -> "FieldDescriptor":
        if self.relation is RelationKind.EMBEDDED and self.embedded is None:
            raise ValueError(f"Embedded field '{self.name}' requires an embedded spec")
        if self.shape in (StorageShape.COLLECTION, StorageShape.ARRAY) and self.collection is None:
            raise ValueError(f"Field '{self.name}' with shape {self.shape.value} requires a collection spec")
        if self.shape is StorageShape.MAP and self.map is None:
            raise ValueError(f"Map field '{self.name}' requires a map spec")
        return self

    # =========================================================================
    # CLASSIFICATION HELPERS
    # =========================================================================

    def is_embedded_composite(self) -> bool:
        return self.relation is RelationKind.EMBEDDED and self.shape is StorageShape.SCALAR

    def is_embedded_container(self) -> bool:
        return self.relation is RelationKind.EMBEDDED and self.shape.is_container()

    def is_enum(self) -> bool:
        return isinstance(self.declared_type, type) and issubclass(self.declared_type, Enum)

    def type_name(self) -> str:
        declared = self.declared_type
        return getattr(declared, "__name__", str(declared))


# ============================================================================
# CLASS DESCRIPTOR
# ============================================================================

class ClassDescriptor(BaseModel):
    """
    A persisted class.

    Maps to: one table named `table` (default: lower-cased class name) in
    `keyspace` (default: the configured keyspace).
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, max_length=128)
    members: List[FieldDescriptor] = Field(default_factory=list)

    identity: IdentityKind = Field(default=IdentityKind.APPLICATION)
    version: Optional[VersionSpec] = None
    discriminator: Optional[DiscriminatorSpec] = None
    indexes: List[IndexSpec] = Field(default_factory=list)

    table: Optional[str] = Field(default=None, max_length=48)
    keyspace: Optional[str] = Field(default=None, max_length=48)
    multitenancy_disabled: bool = False
    python_class: Optional[Any] = Field(
        default=None,
        description="Class instantiated when rebuilding embedded objects"
    )

    @model_validator(mode="after")
    def check_members(self) -> "ClassDescriptor":
        seen = set()
        for member in self.members:
            if member.name in seen:
                raise ValueError(f"Class {self.name} declares field '{member.name}' twice")
            seen.add(member.name)

        if self.version and self.version.field_name and self.version.field_name not in seen:
            raise ValueError(
                f"Class {self.name} version field '{self.version.field_name}' is not a declared field"
            )
        return self

    @property
    def table_name(self) -> str:
        return (self.table or self.name).lower()

    def get_member(self, name: str) -> Optional[FieldDescriptor]:
        for member in self.members:
            if member.name == name:
                return member
        return None

    def primary_key_members(self) -> List[FieldDescriptor]:
        return [m for m in self.members if m.primary_key]

    def is_versioned(self) -> bool:
        return self.version is not None

    def uses_surrogate_version(self) -> bool:
        return self.version is not None and self.version.is_surrogate()

    def summary(self) -> Dict[str, Any]:
        """Short description for logs and results."""
        return {
            "class": self.name,
            "table": self.table_name,
            "identity": self.identity.value,
            "members": [m.name for m in self.members],
        }


EmbeddedSpec.model_rebuild()
FieldDescriptor.model_rebuild()
ClassDescriptor.model_rebuild()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "IndexSpec",
    "CollectionSpec",
    "MapSpec",
    "EmbeddedSpec",
    "VersionSpec",
    "DiscriminatorSpec",
    "FieldDescriptor",
    "ClassDescriptor",
]

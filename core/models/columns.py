# ============================================================================
# COLUMN MODELS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core model - Physical-side values built by the mapper
# PURPOSE: Column specs, embedding chains and table introspection snapshots
# CREATED: 18 OCT 2026
# EXPORTS: ColumnSpec, EmbedChain, ColumnDetails, TableSnapshot
# DEPENDENCIES: dataclasses
# ============================================================================
"""
Column Models.

Unlike the descriptors, these are rebuilt on demand by the synchronizer,
validator and codec and never outlive one operation.

EmbedChain holds the enclosing composite fields of the field being mapped,
outermost first. A top-level field has an empty chain.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from core.contracts import ColumnRole

if TYPE_CHECKING:
    from core.converters import TypeConverter
    from core.models.descriptors import FieldDescriptor


# ============================================================================
# EMBED CHAIN
# ============================================================================

@dataclass(frozen=True, eq=False)
class EmbedChain:
    """Ordered enclosing composite fields, outermost first."""

    fields: Tuple["FieldDescriptor", ...] = ()

    @classmethod
    def root(cls, composite: "FieldDescriptor") -> "EmbedChain":
        return cls((composite,))

    def extend(self, member: "FieldDescriptor") -> "EmbedChain":
        return EmbedChain(self.fields + (member,))

    @property
    def leaf(self) -> "FieldDescriptor":
        return self.fields[-1]

    def key(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def column_name(self, separator: str = "_") -> str:
        """Chain field names joined by the separator, lower-cased."""
        return separator.join(self.key()).lower()

    def is_owner_back_reference(self, member: "FieldDescriptor") -> bool:
        """
        True when `member` points back at the object embedding the composite.

        Only applies directly under a top-level composite (chain length 1).
        """
        if len(self.fields) != 1:
            return False
        embedded = self.fields[0].embedded
        return embedded is not None and embedded.owner_field == member.name

    def contains_class(self, class_name: str) -> bool:
        return any(
            f.embedded is not None and f.embedded.target.name == class_name
            for f in self.fields
        )

    def __len__(self) -> int:
        return len(self.fields)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EmbedChain) and self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())

    def __repr__(self) -> str:
        return f"EmbedChain({'.'.join(self.key())})"


# ============================================================================
# COLUMN SPEC
# ============================================================================

@dataclass(frozen=True)
class ColumnSpec:
    """
    One physical column of a table.

    name is stored lower-cased. chain_key is the EmbedChain key of the field
    the column was built from (empty for surrogate columns).
    """
    name: str
    type_name: str
    converter: Optional["TypeConverter"] = field(default=None, compare=False)
    index_name: Optional[str] = None
    role: ColumnRole = ColumnRole.MEMBER
    chain_key: Tuple[str, ...] = ()
    member: Optional["FieldDescriptor"] = field(default=None, compare=False, repr=False)

    # Element converters for list/set/map columns
    element_converter: Optional["TypeConverter"] = field(default=None, compare=False, repr=False)
    key_converter: Optional["TypeConverter"] = field(default=None, compare=False, repr=False)
    value_converter: Optional["TypeConverter"] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "name", self.name.lower())

    @property
    def is_indexed(self) -> bool:
        return self.index_name is not None

    def definition(self) -> Tuple[str, str]:
        return self.name, self.type_name


# ============================================================================
# INTROSPECTION SNAPSHOT
# ============================================================================

@dataclass(frozen=True)
class ColumnDetails:
    """Physical column as reported by the store."""
    type_name: Optional[str]
    index_name: Optional[str] = None


@dataclass
class TableSnapshot:
    """
    Physical state of one table, fetched fresh per operation.

    columns maps lower-cased column name to ColumnDetails.
    """
    keyspace: Optional[str]
    table: str
    exists: bool = True
    columns: Dict[str, ColumnDetails] = field(default_factory=dict)

    @classmethod
    def missing(cls, keyspace: Optional[str], table: str) -> "TableSnapshot":
        return cls(keyspace=keyspace, table=table, exists=False)

    @classmethod
    def from_rows(
        cls,
        keyspace: Optional[str],
        table: str,
        column_rows: Iterable[Mapping[str, Any]],
        index_rows: Iterable[Mapping[str, Any]] = ()
    ) -> "TableSnapshot":
        """
        Build from system_schema rows.

        Args:
            column_rows: Rows with column_name and type
            index_rows: Rows with index_name and options (options['target'] is the column)
        """
        from core.schema.cql_utils import normalize_type_name

        index_by_column: Dict[str, str] = {}
        for row in index_rows:
            options = row.get("options") or {}
            target = options.get("target")
            if target:
                index_by_column[target.strip('"').lower()] = row.get("index_name")

        columns: Dict[str, ColumnDetails] = {}
        for row in column_rows:
            name = row["column_name"].lower()
            columns[name] = ColumnDetails(
                type_name=normalize_type_name(row.get("type")),
                index_name=index_by_column.get(name),
            )
        return cls(keyspace=keyspace, table=table, exists=True, columns=columns)

    def get(self, column: str) -> Optional[ColumnDetails]:
        return self.columns.get(column.lower())

    def has_column(self, column: str) -> bool:
        return column.lower() in self.columns

    def is_indexed(self, column: str) -> bool:
        details = self.get(column)
        return details is not None and details.index_name is not None

    def column_names(self) -> Set[str]:
        return set(self.columns)

    def index_names(self) -> List[str]:
        return [d.index_name for d in self.columns.values() if d.index_name]


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "EmbedChain",
    "ColumnSpec",
    "ColumnDetails",
    "TableSnapshot",
]

# ============================================================================
# TABLE MAPPING
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Full column set of one persisted class
# PURPOSE: Ordered member and surrogate columns, key columns, index targets
# CREATED: 18 OCT 2026
# EXPORTS: TableMapping, IndexTarget, ColumnCollisionError
# DEPENDENCIES: none
# ============================================================================
"""
Table Mapping.

Builds every column a class needs, in declaration order:

    1. member columns (leaf fields via the type mapper, composites via the
       embedding resolver; embedded collections are skipped with a warning)
    2. surrogate version column (version without a version field)
    3. discriminator column
    4. multitenancy column (tenant configured, not disabled for the class)
    5. datastore identity column (surrogate key)

Column names must be unique within the table. A collision is a
configuration error and raises ColumnCollisionError while building.

Mappings are rebuilt per operation and are not cached.

Usage:
    mapping = TableMapping.build(descriptor, resolver, schema_defaults)
    mapping.columns          # ordered ColumnSpecs
    mapping.primary_key      # ["name"]
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from core.config.defaults import NamingDefaults, SchemaDefaults
from core.contracts import ColumnRole, IdentityKind, VersionStrategy
from core.models.columns import ColumnSpec, EmbedChain
from core.models.descriptors import ClassDescriptor
from core.schema.cql_utils import DEFAULT_TEXT_TYPE, IndexBuilder
from core.schema.embedding import EmbeddingResolver, build_column
from core.schema.type_mapper import ColumnType

logger = logging.getLogger(__name__)


class ColumnCollisionError(ValueError):
    """Two fields of one class map to the same column name."""

    def __init__(self, table: str, column: str, first: Tuple[str, ...], second: Tuple[str, ...]):
        self.table = table
        self.column = column
        super().__init__(
            f"Table {table}: column '{column}' of {'.'.join(second) or 'surrogate column'} "
            f"collides with {'.'.join(first) or 'surrogate column'}"
        )


@dataclass(frozen=True)
class IndexTarget:
    """A single-column index the class declares."""
    name: str
    column: str
    class_level: bool = False


class TableMapping:
    """Physical layout of one class."""

    def __init__(
        self,
        descriptor: ClassDescriptor,
        keyspace: Optional[str],
        columns: List[ColumnSpec],
        primary_key: List[str],
        class_indexes: List[IndexTarget],
        warnings: List[str],
    ):
        self.descriptor = descriptor
        self.keyspace = keyspace
        self.table = descriptor.table_name
        self.columns = columns
        self.primary_key = primary_key
        self.class_indexes = class_indexes
        self.warnings = warnings
        self._by_name: Dict[str, ColumnSpec] = {c.name: c for c in columns}
        self._by_chain: Dict[Tuple[str, ...], ColumnSpec] = {c.chain_key: c for c in columns if c.chain_key}

    # =========================================================================
    # BUILD
    # =========================================================================

    @classmethod
    def build(
        cls,
        descriptor: ClassDescriptor,
        resolver: Optional[EmbeddingResolver] = None,
        schema: Optional[SchemaDefaults] = None,
        naming: Optional[NamingDefaults] = None,
    ) -> "TableMapping":
        """
        Build the mapping of a class.

        Args:
            descriptor: Class to map
            resolver: Embedding resolver (carries the type mapper)
            schema: Schema defaults (keyspace, tenant, separator)
            naming: Surrogate column names

        Raises:
            ColumnCollisionError: Two columns share a name
        """
        schema = schema or SchemaDefaults()
        naming = naming or NamingDefaults()
        resolver = resolver or EmbeddingResolver(separator=schema.column_separator)
        table = descriptor.table_name
        keyspace = descriptor.keyspace or schema.keyspace
        warnings: List[str] = []
        columns: List[ColumnSpec] = []
        seen: Dict[str, Tuple[str, ...]] = {}

        def add(column: ColumnSpec) -> None:
            if column.name in seen:
                raise ColumnCollisionError(table, column.name, seen[column.name], column.chain_key)
            seen[column.name] = column.chain_key
            columns.append(column)

        # Member columns
        for member in descriptor.members:
            if member.is_embedded_container():
                message = f"Member {descriptor.name}.{member.name} is an embedded collection. Not supported so ignoring"
                logger.warning(message)
                warnings.append(message)
                continue

            if member.is_embedded_composite():
                for column in resolver.columns_for(EmbedChain.root(member)):
                    add(cls._with_index(column, table, naming))
                continue

            column = build_column(
                member.column or member.name,
                resolver.type_mapper.resolve(member, descriptor),
                member=member,
                chain_key=(member.name,),
            )
            add(cls._with_index(column, table, naming))

        # Surrogate columns
        if descriptor.uses_surrogate_version():
            version_type = "timestamp" if descriptor.version.strategy is VersionStrategy.DATE_TIME else "int"
            add(build_column(
                descriptor.version.column or naming.version_column,
                ColumnType(version_type),
                role=ColumnRole.VERSION,
            ))
        if descriptor.discriminator is not None:
            add(build_column(
                descriptor.discriminator.column or naming.discriminator_column,
                ColumnType(DEFAULT_TEXT_TYPE),
                role=ColumnRole.DISCRIMINATOR,
            ))
        if schema.multitenancy_enabled and not descriptor.multitenancy_disabled:
            add(build_column(naming.tenant_column, ColumnType(DEFAULT_TEXT_TYPE), role=ColumnRole.MULTITENANCY))

        primary_key: List[str] = []
        if descriptor.identity is IdentityKind.DATASTORE:
            id_column = naming.datastore_id_column(table)
            add(build_column(id_column, ColumnType("bigint"), role=ColumnRole.DATASTORE_ID))
            primary_key = [id_column]
        elif descriptor.identity is IdentityKind.APPLICATION:
            primary_key = [(m.column or m.name).lower() for m in descriptor.primary_key_members()]
            if not primary_key:
                message = f"Class {descriptor.name} uses application identity but declares no key fields"
                logger.warning(message)
                warnings.append(message)

        class_indexes = cls._class_indexes(descriptor, table, seen, warnings)

        return cls(descriptor, keyspace, columns, primary_key, class_indexes, warnings)

    @staticmethod
    def _with_index(column: ColumnSpec, table: str, naming: NamingDefaults) -> ColumnSpec:
        index = column.member.index if column.member is not None else None
        if index is None:
            return column
        name = index.name or IndexBuilder.name_for_column(table, column.name, naming.index_suffix)
        return replace(column, index_name=name.lower())

    @staticmethod
    def _class_indexes(
        descriptor: ClassDescriptor,
        table: str,
        seen: Dict[str, Tuple[str, ...]],
        warnings: List[str],
    ) -> List[IndexTarget]:
        """Single-column class-level indexes; composite ones are skipped with a warning."""
        targets: List[IndexTarget] = []
        for position, index in enumerate(descriptor.indexes):
            if index.is_composite():
                message = (
                    f"Class {descriptor.name} has an index defined with more than 1 column. "
                    f"Composite indexes are not supported so ignoring"
                )
                logger.warning(message)
                warnings.append(message)
                continue
            if not index.columns:
                continue

            column = index.columns[0]
            member = descriptor.get_member(column)
            if member is not None and not member.is_embedded_composite():
                column = member.column or member.name
            column = column.lower()
            if column not in seen:
                logger.warning(f"Class {descriptor.name} index on unknown column '{column}'")

            name = index.name or IndexBuilder.name_for_position(table, position)
            targets.append(IndexTarget(name=name.lower(), column=column, class_level=True))
        return targets

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def column(self, name: str) -> Optional[ColumnSpec]:
        return self._by_name.get(name.lower())

    def column_for_chain(self, chain_key: Tuple[str, ...]) -> Optional[ColumnSpec]:
        return self._by_chain.get(tuple(chain_key))

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def member_columns(self) -> List[ColumnSpec]:
        return [c for c in self.columns if c.role is ColumnRole.MEMBER]

    def surrogate_column(self, role: ColumnRole) -> Optional[ColumnSpec]:
        for column in self.columns:
            if column.role is role:
                return column
        return None

    def field_indexes(self) -> List[IndexTarget]:
        return [IndexTarget(c.index_name, c.name) for c in self.columns if c.index_name]

    def all_indexes(self) -> List[IndexTarget]:
        """Field-level indexes first, then class-level ones."""
        return self.field_indexes() + list(self.class_indexes)

    def definitions(self) -> List[Tuple[str, str]]:
        return [c.definition() for c in self.columns]


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "TableMapping",
    "IndexTarget",
    "ColumnCollisionError",
]

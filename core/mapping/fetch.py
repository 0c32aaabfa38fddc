# ============================================================================
# FETCH MAPPER
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Row to object reconstruction
# PURPOSE: Identity from key columns, field values from the row, version
# CREATED: 18 OCT 2026
# EXPORTS: FetchMapper
# DEPENDENCIES: none
# ============================================================================
"""
Fetch Mapper.

Rebuilds an object from a fetched row:

    1. identity from the application key columns (or the datastore id)
    2. runtime.find_object(...) with a loader that fills every field
    3. version from the version field or the surrogate version column,
       set on the object's state

Usage:
    mapper = FetchMapper(mapping, resolver, codec)
    person = mapper.fetch_object(row, runtime)
"""

import logging
from typing import Any, Optional, Tuple

from core.contracts import ColumnRole, IdentityKind
from core.mapping.row_codec import RowCodec
from core.mapping.state import ObjectRuntime, ObjectState
from core.models.columns import EmbedChain
from core.schema.embedding import EmbeddingResolver
from core.schema.table import TableMapping

logger = logging.getLogger(__name__)


class FetchMapper:
    """Row -> object for one table mapping."""

    def __init__(
        self,
        mapping: TableMapping,
        resolver: Optional[EmbeddingResolver] = None,
        codec: Optional[RowCodec] = None,
    ):
        self.mapping = mapping
        self.resolver = resolver or EmbeddingResolver()
        self.codec = codec or RowCodec(self.resolver.type_mapper.registry)

    def identity_of(self, row: Any) -> Tuple[Any, ...]:
        """Key values of a row, in key order."""
        identity = []
        for name in self.mapping.primary_key:
            column = self.mapping.column(name)
            identity.append(self.codec.decode(column, self.codec.read(row, column)))
        return tuple(identity)

    def load_fields(self, row: Any, state: ObjectState, runtime: Optional[ObjectRuntime] = None) -> None:
        """Replace every mapped field of the object with its row value."""
        for member in self.mapping.descriptor.members:
            if member.is_embedded_container():
                continue

            if member.is_embedded_composite():
                value = self.resolver.fetch_embedded(
                    EmbedChain.root(member), row, self.codec, state.object, runtime
                )
            else:
                column = self.mapping.column_for_chain((member.name,))
                value = self.codec.decode(column, self.codec.read(row, column), runtime)
            state.replace_field(member.name, value)

    def fetch_object(self, row: Any, runtime: ObjectRuntime) -> Any:
        """
        Find or reconstruct the object of a row and load its fields and version.

        Raises:
            ValueError: The class has no identity to look the object up by
        """
        descriptor = self.mapping.descriptor
        if descriptor.identity is IdentityKind.NONDURABLE or not self.mapping.primary_key:
            raise ValueError(f"Class {descriptor.name} has no identity columns to fetch by")

        identity = self.identity_of(row)
        obj = runtime.find_object(
            descriptor.name,
            identity,
            lambda state: self.load_fields(row, state, runtime),
        )

        if descriptor.is_versioned():
            version = self._version_of(row)
            runtime.state_for(obj).set_version(version)

        logger.debug(f"Fetched {descriptor.name} {identity}")
        return obj

    def _version_of(self, row: Any) -> Any:
        version_spec = self.mapping.descriptor.version
        if version_spec.field_name:
            column = self.mapping.column_for_chain((version_spec.field_name,))
        else:
            column = self.mapping.surrogate_column(ColumnRole.VERSION)
        if column is None:
            return None
        return self.codec.decode(column, self.codec.read(row, column))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["FetchMapper"]

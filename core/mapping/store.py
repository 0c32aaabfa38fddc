# ============================================================================
# STORE MAPPER
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Object to column-value map
# PURPOSE: Produce the stored value of every column of an object's row
# CREATED: 18 OCT 2026
# EXPORTS: StoreMapper
# DEPENDENCIES: none
# ============================================================================
"""
Store Mapper.

Turns a managed object into {column name: stored value} using the same
TableMapping the DDL was generated from. Embedded composites go through the
embedding resolver, which also nulls every column of an absent composite.

Usage:
    mapper = StoreMapper(mapping, resolver, codec)
    values = mapper.values_for(person, runtime)
"""

import logging
from typing import Any, Dict, Optional

from core.contracts import ColumnRole
from core.mapping.row_codec import RowCodec
from core.mapping.state import AttributeObjectState, ObjectRuntime
from core.models.columns import EmbedChain
from core.schema.embedding import EmbeddingResolver
from core.schema.table import TableMapping

logger = logging.getLogger(__name__)


class StoreMapper:
    """Object -> column values for one table mapping."""

    def __init__(
        self,
        mapping: TableMapping,
        resolver: Optional[EmbeddingResolver] = None,
        codec: Optional[RowCodec] = None,
        tenant_id: Optional[str] = None,
    ):
        self.mapping = mapping
        self.resolver = resolver or EmbeddingResolver()
        self.codec = codec or RowCodec(self.resolver.type_mapper.registry)
        self.tenant_id = tenant_id

    def values_for(
        self,
        obj: Any,
        runtime: Optional[ObjectRuntime] = None,
        datastore_id: Any = None,
    ) -> Dict[str, Any]:
        """
        Column values of an object.

        Args:
            obj: Object to store
            runtime: Object runtime (references, owners, version)
            datastore_id: Surrogate key value for datastore identity

        Returns:
            Column name -> stored value. Absent values are explicit None.
        """
        descriptor = self.mapping.descriptor
        state = runtime.state_for(obj) if runtime is not None else AttributeObjectState(obj)
        out: Dict[str, Any] = {}

        for member in descriptor.members:
            value = state.provide_field(member.name)

            if member.is_embedded_container():
                # Placeholder only; the table has no column for it
                out[member.name.lower()] = None
                continue

            if member.is_embedded_composite():
                self.resolver.store_embedded(EmbedChain.root(member), value, out, self.codec, obj, runtime)
                continue

            column = self.mapping.column_for_chain((member.name,))
            out[column.name] = self.codec.encode(column, value, runtime)

        for column in self.mapping.columns:
            if column.role is ColumnRole.VERSION:
                out[column.name] = state.get_version()
            elif column.role is ColumnRole.DISCRIMINATOR:
                discriminator = descriptor.discriminator
                out[column.name] = discriminator.value or descriptor.name
            elif column.role is ColumnRole.MULTITENANCY:
                out[column.name] = self.tenant_id
            elif column.role is ColumnRole.DATASTORE_ID:
                out[column.name] = datastore_id

        logger.debug(f"Prepared {len(out)} column values for {descriptor.name}")
        return out


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["StoreMapper"]

# ============================================================================
# MAPPING MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Row/object value transfer
# PURPOSE: Codec and object-runtime seams used when storing and fetching
# CREATED: 18 OCT 2026
# ============================================================================
"""
Mapping Module

Exports the codec and the object-runtime interfaces. The object/row
mappers build on core.schema and are imported from their own modules:

    from core.mapping.store import StoreMapper
    from core.mapping.fetch import FetchMapper
"""

from core.mapping.row_codec import RowCodec, log_cql_statement
from core.mapping.state import (
    ObjectState,
    ObjectRuntime,
    AttributeObjectState,
    InMemoryObjectRuntime,
    instantiate,
)

__all__ = [
    "RowCodec",
    "log_cql_statement",
    "ObjectState",
    "ObjectRuntime",
    "AttributeObjectState",
    "InMemoryObjectRuntime",
    "instantiate",
]

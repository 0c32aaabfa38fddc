# ============================================================================
# EMBEDDING RESOLVER
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Flattening of embedded composite fields into row columns
# PURPOSE: Expand embed chains into columns; store and fetch embedded values
# CREATED: 18 OCT 2026
# EXPORTS: EmbeddingResolver, build_column
# DEPENDENCIES: none
# ============================================================================
"""
Embedding Resolver.

An embedded (composite) field has no column of its own. Its fields are
flattened into the enclosing row, named by joining the chain of enclosing
field names with the configured separator:

    Person.address.street          -> address_street
    Person.address.geo.lat         -> address_geo_lat

Special cases:
- Owner back-reference: the field of a top-level composite that points
  back at the embedding object gets no column. On write it is repaired to
  reference the real owner when it points elsewhere.
- Embedded collections/maps of composites are not expanded. They produce
  no column and a warning; on write a null placeholder is emitted under the
  chain name.
- A composite whose class already encloses the chain is not expanded again.

The expansion threads the output list through the recursion; nothing is
accumulated on the resolver itself.

Usage:
    resolver = EmbeddingResolver(TypeMapper())
    columns = resolver.columns_for(EmbedChain.root(person.get_member("address")))
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from core.contracts import ColumnRole
from core.mapping.state import AttributeObjectState, instantiate
from core.models.columns import ColumnSpec, EmbedChain
from core.models.descriptors import ClassDescriptor, FieldDescriptor
from core.schema.type_mapper import ColumnType, TypeMapper

if TYPE_CHECKING:
    from core.mapping.row_codec import RowCodec
    from core.mapping.state import ObjectRuntime

logger = logging.getLogger(__name__)


def build_column(
    name: str,
    column_type: ColumnType,
    member: Optional[FieldDescriptor] = None,
    chain_key=(),
    role: ColumnRole = ColumnRole.MEMBER,
    index_name: Optional[str] = None
) -> ColumnSpec:
    """ColumnSpec from a resolved ColumnType."""
    return ColumnSpec(
        name=name,
        type_name=column_type.type_name,
        converter=column_type.converter,
        index_name=index_name,
        role=role,
        chain_key=tuple(chain_key),
        member=member,
        element_converter=column_type.element_converter,
        key_converter=column_type.key_converter,
        value_converter=column_type.value_converter,
    )


class EmbeddingResolver:
    """Column expansion and value transfer for embedded composites."""

    def __init__(self, type_mapper: Optional[TypeMapper] = None, separator: str = "_"):
        self.type_mapper = type_mapper or TypeMapper()
        self.separator = separator

    # =========================================================================
    # COLUMN EXPANSION
    # =========================================================================

    def columns_for(self, chain: EmbedChain) -> List[ColumnSpec]:
        """
        Ordered columns of the composite at the end of the chain.

        Args:
            chain: Enclosing composite fields, ending with the composite to expand

        Returns:
            Leaf columns in declaration order, nested composites inlined
        """
        columns: List[ColumnSpec] = []
        self._expand(chain, columns)
        return columns

    def _expand(self, chain: EmbedChain, columns: List[ColumnSpec]) -> None:
        target = chain.leaf.embedded.target
        for member in target.members:
            if chain.is_owner_back_reference(member):
                continue

            if member.is_embedded_container():
                logger.warning(
                    f"Field {target.name}.{member.name} is an embedded collection. "
                    f"Not supported so ignoring"
                )
                continue

            if member.is_embedded_composite():
                if self._is_cycle(chain, member):
                    continue
                self._expand(chain.extend(member), columns)
                continue

            columns.append(self.leaf_column(chain, member, target))

    def leaf_column(
        self,
        chain: EmbedChain,
        member: FieldDescriptor,
        owner: Optional[ClassDescriptor] = None
    ) -> ColumnSpec:
        """Column of one leaf field under the chain."""
        leaf_chain = chain.extend(member)
        return build_column(
            leaf_chain.column_name(self.separator),
            self.type_mapper.resolve(member, owner),
            member=member,
            chain_key=leaf_chain.key(),
        )

    def _is_cycle(self, chain: EmbedChain, member: FieldDescriptor) -> bool:
        target_name = member.embedded.target.name
        if chain.contains_class(target_name):
            logger.warning(
                f"Field {member.name} embeds {target_name}, which already encloses "
                f"{'.'.join(chain.key())}; not expanding it again"
            )
            return True
        return False

    # =========================================================================
    # STORE (object -> columns)
    # =========================================================================

    def store_embedded(
        self,
        chain: EmbedChain,
        value: Any,
        out: Dict[str, Any],
        codec: "RowCodec",
        owner: Any = None,
        runtime: Optional["ObjectRuntime"] = None
    ) -> None:
        """
        Write the columns of an embedded value into `out`.

        A None value writes an explicit None for every leaf column, nested
        composites included.

        Args:
            chain: Chain ending with the composite holding `value`
            value: Embedded object or None
            out: Column name -> stored value
            codec: Encodes leaf values
            owner: Object embedding `value` (used for back-reference repair)
            runtime: Object runtime, if any
        """
        target = chain.leaf.embedded.target
        for member in target.members:
            if chain.is_owner_back_reference(member):
                if value is not None:
                    self._repair_owner(member, value, owner, runtime)
                continue

            if member.is_embedded_container():
                out[chain.extend(member).column_name(self.separator)] = None
                continue

            member_value = None if value is None else self._value_of(value, member.name)

            if member.is_embedded_composite():
                if chain.contains_class(member.embedded.target.name):
                    continue
                self.store_embedded(chain.extend(member), member_value, out, codec, value, runtime)
                continue

            column = self.leaf_column(chain, member, target)
            out[column.name] = codec.encode(column, member_value, runtime)

    def _repair_owner(self, member: FieldDescriptor, value: Any, owner: Any, runtime: Any) -> None:
        state = runtime.state_for(value, owner) if runtime is not None else AttributeObjectState(value, (owner,))
        owners = state.embedded_owners()
        if len(owners) != 1:
            return
        if state.provide_field(member.name) is not owners[0]:
            logger.debug(f"Embedded field {member.name} does not point at its owner, correcting it")
            state.replace_field(member.name, owners[0])

    # =========================================================================
    # FETCH (row -> object)
    # =========================================================================

    def fetch_embedded(
        self,
        chain: EmbedChain,
        row: Any,
        codec: "RowCodec",
        owner: Any = None,
        runtime: Optional["ObjectRuntime"] = None
    ) -> Any:
        """
        Rebuild the embedded value at the end of the chain from a row.

        Returns None when every column of the composite is null.
        """
        target = chain.leaf.embedded.target
        values: Dict[str, Any] = {}
        owner_field: Optional[str] = None
        found = False

        for member in target.members:
            if chain.is_owner_back_reference(member):
                owner_field = member.name
                continue

            if member.is_embedded_container():
                values[member.name] = None
                continue

            if member.is_embedded_composite():
                if chain.contains_class(member.embedded.target.name):
                    continue
                nested = self.fetch_embedded(chain.extend(member), row, codec, None, runtime)
                values[member.name] = nested
                found = found or nested is not None
                continue

            column = self.leaf_column(chain, member, target)
            raw = codec.read(row, column)
            values[member.name] = codec.decode(column, raw, runtime)
            found = found or raw is not None

        if not found:
            return None

        if owner_field is not None:
            values[owner_field] = owner
        return instantiate(target.python_class, values)

    @staticmethod
    def _value_of(obj: Any, name: str) -> Any:
        if isinstance(obj, dict):
            return obj.get(name)
        return getattr(obj, name, None)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "EmbeddingResolver",
    "build_column",
]

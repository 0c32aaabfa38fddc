# ============================================================================
# TYPE MAPPER
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Field descriptor to physical column type
# PURPOSE: Resolve the column type and bound converter of a leaf field
# CREATED: 18 OCT 2026
# EXPORTS: TypeMapper, ColumnType, FallbackRule, DEFAULT_FALLBACK_RULES
# DEPENDENCIES: none
# ============================================================================
"""
Type Mapper.

Resolves a leaf field into (physical type, converter). Resolution never
fails: a field nothing else matches is stored as varchar with a warning.

Resolution order, first match wins:
    1. Explicit converter name on the field
    2. Auto-apply converter registered for the declared type
    3. RelationKind.NONE:
       a. serialized + serializable -> blob
       b. collection -> list<T> / set<T>
       c. map -> map<K,V>
       d. array -> list<T>
       e. storage hint, static table, enum ordinal, fallback rules, blob, varchar
    4. REFERENCE -> varchar (blob when serialized)
    5. MULTI_REFERENCE -> list/set/map of varchar or blob

Usage:
    mapper = TypeMapper(build_default_registry())
    column_type = mapper.resolve(field, class_descriptor)
    column_type.type_name    # "varchar"
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Tuple

from core.contracts import RelationKind, StorageShape
from core.converters import (
    EnumNameConverter,
    EnumOrdinalConverter,
    TypeConverter,
    TypeConverterRegistry,
    build_default_registry,
    is_serializable_type,
)
from core.models.descriptors import ClassDescriptor, CollectionSpec, FieldDescriptor
from core.schema.cql_utils import (
    BLOB_TYPE,
    DEFAULT_TEXT_TYPE,
    list_type,
    map_type,
    physical_type_for,
    resolve_storage_hint,
    set_type,
)

logger = logging.getLogger(__name__)


# ============================================================================
# RESULT
# ============================================================================

@dataclass(frozen=True)
class ColumnType:
    """
    Resolved column type.

    converter is bound to type_name for scalar columns. Container columns
    carry per-element converters instead.
    """
    type_name: str
    converter: Optional[TypeConverter] = None
    element_converter: Optional[TypeConverter] = None
    key_converter: Optional[TypeConverter] = None
    value_converter: Optional[TypeConverter] = None


# ============================================================================
# FALLBACK POLICY
# ============================================================================

def _always(declared_type: Any) -> bool:
    return True


@dataclass(frozen=True)
class FallbackRule:
    """
    One step of the converter fallback policy.

    A rule applies when its predicate accepts the declared type and a
    converter to its physical type exists. The blob rule uses the
    serialization converter.
    """
    physical_type: str
    applies: Callable[[Any], bool] = _always

    def select(self, declared_type: Any, registry: TypeConverterRegistry) -> Optional[TypeConverter]:
        if not self.applies(declared_type):
            return None
        converter = registry.get(declared_type, self.physical_type)
        if converter is None and self.physical_type == BLOB_TYPE:
            converter = registry.serialization_converter()
        return converter


DEFAULT_FALLBACK_RULES: Tuple[FallbackRule, ...] = (
    FallbackRule("varchar"),
    FallbackRule("bigint"),
    FallbackRule("int"),
    FallbackRule(BLOB_TYPE, is_serializable_type),
)


# ============================================================================
# TYPE MAPPER
# ============================================================================

class TypeMapper:
    """
    Maps leaf fields to column types.

    Deterministic and side-effect free apart from warning logs; one mapper
    can be shared across threads.
    """

    def __init__(
        self,
        registry: Optional[TypeConverterRegistry] = None,
        fallback_rules: Sequence[FallbackRule] = DEFAULT_FALLBACK_RULES
    ):
        self.registry = registry or build_default_registry()
        self.fallback_rules = tuple(fallback_rules)

    def resolve(self, field: FieldDescriptor, owner: Optional[ClassDescriptor] = None) -> ColumnType:
        """
        Resolve the column type of a leaf field.

        Args:
            field: Leaf field (not an embedded composite)
            owner: Class declaring the field, used for log messages

        Returns:
            ColumnType, never None
        """
        full_name = f"{owner.name}.{field.name}" if owner else field.name

        # 1. Explicit converter
        if field.converter:
            converter = self.registry.get_by_name(field.converter)
            if converter is not None:
                return ColumnType(converter.physical_type, converter)
            logger.warning(f"Field {full_name} names unknown converter '{field.converter}', ignoring it")

        # 2. Auto-apply converter for the declared type
        converter = self._auto_apply(field.declared_type)
        if converter is not None:
            return ColumnType(converter.physical_type, converter)

        if field.relation is RelationKind.NONE:
            return self._resolve_value(field, full_name)
        if field.relation is RelationKind.REFERENCE:
            if field.serialized:
                return ColumnType(BLOB_TYPE, self.registry.serialization_converter())
            return ColumnType(DEFAULT_TEXT_TYPE)
        if field.relation is RelationKind.MULTI_REFERENCE:
            return self._resolve_multi_reference(field, full_name)

        # Embedded composites are expanded by the embedding resolver
        logger.warning(f"Field {full_name} is embedded and has no single column, using {DEFAULT_TEXT_TYPE}")
        return ColumnType(DEFAULT_TEXT_TYPE)

    # =========================================================================
    # RELATION NONE
    # =========================================================================

    def _resolve_value(self, field: FieldDescriptor, full_name: str) -> ColumnType:
        if field.serialized and field.serializable:
            return ColumnType(BLOB_TYPE, self.registry.serialization_converter())

        if field.shape in (StorageShape.COLLECTION, StorageShape.ARRAY):
            spec = field.collection
            element, converter = self.resolve_element(spec.element_type, spec.element_serialized, full_name)
            container = list_type if field.shape is StorageShape.ARRAY else self._container_for(spec)
            return ColumnType(container(element), element_converter=converter)

        if field.shape is StorageShape.MAP:
            spec = field.map
            key, key_converter = self.resolve_element(spec.key_type, spec.key_serialized, full_name)
            value, value_converter = self.resolve_element(spec.value_type, spec.value_serialized, full_name)
            return ColumnType(map_type(key, value), key_converter=key_converter, value_converter=value_converter)

        return self._resolve_scalar(field, full_name)

    def _resolve_scalar(self, field: FieldDescriptor, full_name: str) -> ColumnType:
        declared = field.declared_type

        hinted = resolve_storage_hint(field.storage_type)
        if field.storage_type and hinted is None:
            logger.warning(f"Field {full_name} has unknown storage type '{field.storage_type}', ignoring it")
        if hinted is not None:
            return ColumnType(hinted, self._converter_for_hint(field, hinted))

        physical = physical_type_for(declared)
        if physical is not None:
            return ColumnType(physical, self.registry.get(declared, physical))

        if field.is_enum():
            return ColumnType("int", EnumOrdinalConverter(declared))

        for rule in self.fallback_rules:
            converter = rule.select(declared, self.registry)
            if converter is not None:
                return ColumnType(rule.physical_type, converter)

        logger.warning(
            f"Field {full_name} of type {field.type_name()} has no supported column type, "
            f"using {DEFAULT_TEXT_TYPE}"
        )
        return ColumnType(DEFAULT_TEXT_TYPE)

    def _converter_for_hint(self, field: FieldDescriptor, physical: str) -> Optional[TypeConverter]:
        declared = field.declared_type
        if field.is_enum():
            if physical == DEFAULT_TEXT_TYPE:
                return EnumNameConverter(declared)
            return EnumOrdinalConverter(declared, physical)
        converter = self.registry.get(declared, physical)
        if converter is None and physical == BLOB_TYPE and field.serializable:
            converter = self.registry.serialization_converter()
        return converter

    # =========================================================================
    # MULTI-VALUED REFERENCES
    # =========================================================================

    def _resolve_multi_reference(self, field: FieldDescriptor, full_name: str) -> ColumnType:
        if field.shape is StorageShape.MAP:
            spec = field.map
            if spec.key_is_reference:
                key, key_converter = self._reference_element(spec.key_serialized)
            else:
                key, key_converter = self.resolve_element(spec.key_type, spec.key_serialized, full_name)
            if spec.value_is_reference:
                value, value_converter = self._reference_element(spec.value_serialized)
            else:
                value, value_converter = self.resolve_element(spec.value_type, spec.value_serialized, full_name)
            return ColumnType(map_type(key, value), key_converter=key_converter, value_converter=value_converter)

        spec = field.collection or CollectionSpec()
        element, converter = self._reference_element(spec.element_serialized)
        container = list_type if field.shape is StorageShape.ARRAY else self._container_for(spec)
        return ColumnType(container(element), element_converter=converter)

    def _reference_element(self, serialized: bool) -> Tuple[str, Optional[TypeConverter]]:
        if serialized:
            return BLOB_TYPE, self.registry.serialization_converter()
        return DEFAULT_TEXT_TYPE, None

    # =========================================================================
    # ELEMENTS
    # =========================================================================

    def resolve_element(
        self,
        element_type: Any,
        serialized: bool = False,
        full_name: str = ""
    ) -> Tuple[str, Optional[TypeConverter]]:
        """
        Physical type and converter of a collection element, map key or map value.

        Unresolvable element types fall back to varchar with a warning.
        """
        if serialized and is_serializable_type(element_type):
            return BLOB_TYPE, self.registry.serialization_converter()

        converter = self._auto_apply(element_type)
        if converter is not None:
            return converter.physical_type, converter

        physical = physical_type_for(element_type)
        if physical is not None:
            return physical, self.registry.get(element_type, physical)

        if isinstance(element_type, type) and issubclass(element_type, Enum):
            return "int", EnumOrdinalConverter(element_type)

        for rule in self.fallback_rules:
            if rule.physical_type == BLOB_TYPE:
                continue
            converter = rule.select(element_type, self.registry)
            if converter is not None:
                return rule.physical_type, converter

        type_name = getattr(element_type, "__name__", str(element_type))
        logger.warning(
            f"Element type {type_name} of {full_name or 'field'} has no supported column type, "
            f"using {DEFAULT_TEXT_TYPE}"
        )
        return DEFAULT_TEXT_TYPE, None

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _auto_apply(self, declared_type: Any) -> Optional[TypeConverter]:
        try:
            return self.registry.get_auto_apply(declared_type)
        except TypeError:
            return None

    @staticmethod
    def _container_for(spec: CollectionSpec) -> Callable[[str], str]:
        return list_type if spec.cql_container() == "list" else set_type


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ColumnType",
    "FallbackRule",
    "DEFAULT_FALLBACK_RULES",
    "TypeMapper",
]

# ============================================================================
# TYPE MAPPER TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Tests - Field to column type resolution
# PURPOSE: Verify resolution order, containers, references and fallbacks
# CREATED: 18 OCT 2026
# ============================================================================
"""
Type Mapper Tests

Covers:
1. Static physical-type table
2. Storage-type hints (enum name/ordinal, bigint, unknown hints)
3. Explicit and auto-apply converters
4. Collections, arrays and maps
5. Serialized fields and references
6. Fallback policy and the varchar default

Run with:
    pytest tests/test_type_mapper.py -v
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from zoneinfo import ZoneInfo

import pytest

from core.contracts import RelationKind, StorageShape
from core.converters import (
    EnumNameConverter,
    EnumOrdinalConverter,
    IdentityConverter,
    SerializableBlobConverter,
    TypeConverter,
)
from core.models.descriptors import ClassDescriptor, CollectionSpec, FieldDescriptor, MapSpec
from core.schema.type_mapper import FallbackRule, TypeMapper


class Colour(Enum):
    RED = "r"
    GREEN = "g"
    BLUE = "b"


@dataclass
class Payload:
    body: str = ""


class Opaque:
    """Neither in the type table nor serializable."""


class Money:
    def __init__(self, cents: int):
        self.cents = cents


class MoneyConverter(TypeConverter):
    name = "money-bigint"
    member_type = Money
    datastore_type = int
    physical_type = "bigint"

    def to_datastore(self, value):
        return value.cents

    def to_member(self, value):
        return Money(value)


def scalar(name="f", declared_type=str, **kwargs) -> FieldDescriptor:
    return FieldDescriptor(name=name, declared_type=declared_type, **kwargs)


def collection(element_type, container=list, ordered=False, shape=StorageShape.COLLECTION, **kwargs):
    return FieldDescriptor(
        name="items",
        declared_type=container,
        shape=shape,
        collection=CollectionSpec(container=container, element_type=element_type, ordered=ordered),
        **kwargs,
    )


# ============================================================================
# STATIC TABLE
# ============================================================================

class TestStaticTable:
    """Declared Python types with a fixed physical type."""

    @pytest.mark.parametrize("declared, physical", [
        (str, "varchar"),
        (int, "int"),
        (bool, "boolean"),
        (float, "double"),
        (Decimal, "double"),
        (datetime, "timestamp"),
        (date, "timestamp"),
        (time, "timestamp"),
        (ZoneInfo, "varchar"),
        (bytes, "blob"),
    ])
    def test_physical_type(self, type_mapper, declared, physical):
        column_type = type_mapper.resolve(scalar(declared_type=declared))
        assert column_type.type_name == physical

    def test_table_types_bind_a_converter(self, type_mapper):
        assert type_mapper.resolve(scalar(declared_type=Decimal)).converter.name == "decimal-double"
        assert type_mapper.resolve(scalar(declared_type=date)).converter.name == "date-timestamp"
        assert type_mapper.resolve(scalar(declared_type=time)).converter.name == "time-timestamp"
        assert type_mapper.resolve(scalar(declared_type=str)).converter.name == "str-varchar"

    def test_enum_defaults_to_ordinal_int(self, type_mapper):
        column_type = type_mapper.resolve(scalar(declared_type=Colour))
        assert column_type.type_name == "int"
        assert isinstance(column_type.converter, EnumOrdinalConverter)
        assert column_type.converter.to_datastore(Colour.BLUE) == 2


# ============================================================================
# STORAGE HINTS
# ============================================================================

class TestStorageHints:
    """Storage-type hints override the static table."""

    def test_bigint_hint_on_int(self, type_mapper):
        column_type = type_mapper.resolve(scalar(declared_type=int, storage_type="bigint"))
        assert column_type.type_name == "bigint"
        assert column_type.converter.name == "int-bigint"

    @pytest.mark.parametrize("hint", ["varchar", "longvarchar", "text", "VARCHAR"])
    def test_text_hints_map_to_varchar(self, type_mapper, hint):
        assert type_mapper.resolve(scalar(storage_type=hint)).type_name == "varchar"

    def test_varchar_hint_on_enum_stores_name(self, type_mapper):
        column_type = type_mapper.resolve(scalar(declared_type=Colour, storage_type="varchar"))
        assert column_type.type_name == "varchar"
        assert isinstance(column_type.converter, EnumNameConverter)
        assert column_type.converter.to_datastore(Colour.GREEN) == "GREEN"

    def test_int_hint_on_enum_stores_ordinal(self, type_mapper):
        column_type = type_mapper.resolve(scalar(declared_type=Colour, storage_type="integer"))
        assert column_type.type_name == "int"
        assert column_type.converter.to_member(0) is Colour.RED

    def test_varchar_hint_on_int_uses_string_converter(self, type_mapper):
        column_type = type_mapper.resolve(scalar(declared_type=int, storage_type="varchar"))
        assert column_type.type_name == "varchar"
        assert column_type.converter.name == "int-string"

    def test_unknown_hint_is_ignored(self, type_mapper, caplog):
        with caplog.at_level(logging.WARNING):
            column_type = type_mapper.resolve(scalar(declared_type=int, storage_type="geometry"))
        assert column_type.type_name == "int"
        assert "unknown storage type" in caplog.text


# ============================================================================
# CONVERTERS
# ============================================================================

class TestConverters:
    """Explicit converter names and auto-apply converters."""

    def test_explicit_converter_wins(self, type_mapper):
        column_type = type_mapper.resolve(scalar(declared_type=Decimal, converter="decimal-string"))
        assert column_type.type_name == "varchar"
        assert column_type.converter.name == "decimal-string"

    def test_unknown_converter_falls_through(self, type_mapper, caplog):
        with caplog.at_level(logging.WARNING):
            column_type = type_mapper.resolve(scalar(declared_type=int, converter="nope"))
        assert column_type.type_name == "int"
        assert "unknown converter 'nope'" in caplog.text

    def test_auto_apply_converter(self, registry):
        registry.register(MoneyConverter(), auto_apply=True)
        mapper = TypeMapper(registry)

        column_type = mapper.resolve(scalar(declared_type=Money))

        assert column_type.type_name == "bigint"
        assert isinstance(column_type.converter, MoneyConverter)

    def test_duplicate_converter_name_rejected(self, registry):
        with pytest.raises(ValueError, match="already registered"):
            registry.register(IdentityConverter(str, "varchar"))


# ============================================================================
# CONTAINERS
# ============================================================================

class TestContainers:
    """Collections, arrays and maps of primitives."""

    def test_list_of_strings(self, type_mapper):
        column_type = type_mapper.resolve(collection(str))
        assert column_type.type_name == "list<varchar>"
        assert column_type.element_converter.name == "str-varchar"

    def test_set_of_ints(self, type_mapper):
        assert type_mapper.resolve(collection(int, container=set)).type_name == "set<int>"

    def test_ordered_set_becomes_list(self, type_mapper):
        assert type_mapper.resolve(collection(int, container=set, ordered=True)).type_name == "list<int>"

    def test_tuple_is_a_list(self, type_mapper):
        assert type_mapper.resolve(collection(float, container=tuple)).type_name == "list<double>"

    def test_array_is_always_a_list(self, type_mapper):
        field = collection(int, container=set, shape=StorageShape.ARRAY)
        assert type_mapper.resolve(field).type_name == "list<int>"

    def test_enum_elements(self, type_mapper):
        column_type = type_mapper.resolve(collection(Colour))
        assert column_type.type_name == "list<int>"
        assert isinstance(column_type.element_converter, EnumOrdinalConverter)

    def test_map_of_primitives(self, type_mapper):
        field = FieldDescriptor(
            name="scores",
            declared_type=dict,
            shape=StorageShape.MAP,
            map=MapSpec(key_type=str, value_type=int),
        )
        column_type = type_mapper.resolve(field)
        assert column_type.type_name == "map<varchar,int>"
        assert column_type.key_converter.name == "str-varchar"
        assert column_type.value_converter.name == "int-int"

    def test_serialized_map_values(self, type_mapper):
        field = FieldDescriptor(
            name="blobs",
            declared_type=dict,
            shape=StorageShape.MAP,
            map=MapSpec(key_type=str, value_type=Payload, value_serialized=True),
        )
        assert type_mapper.resolve(field).type_name == "map<varchar,blob>"

    def test_unknown_element_falls_back_to_varchar(self, type_mapper, caplog):
        with caplog.at_level(logging.WARNING):
            column_type = type_mapper.resolve(collection(Opaque))
        assert column_type.type_name == "list<varchar>"
        assert "Opaque" in caplog.text


# ============================================================================
# SERIALIZED AND REFERENCES
# ============================================================================

class TestSerializedAndReferences:
    """Blob storage and reference columns."""

    def test_serialized_field_is_blob(self, type_mapper):
        column_type = type_mapper.resolve(scalar(declared_type=Payload, serialized=True))
        assert column_type.type_name == "blob"
        assert isinstance(column_type.converter, SerializableBlobConverter)

    def test_serializable_field_falls_back_to_blob(self, type_mapper):
        assert type_mapper.resolve(scalar(declared_type=Payload)).type_name == "blob"

    def test_reference_is_varchar(self, type_mapper):
        field = scalar(declared_type=object, relation=RelationKind.REFERENCE, target_class="Person")
        column_type = type_mapper.resolve(field)
        assert column_type.type_name == "varchar"
        assert column_type.converter is None

    def test_serialized_reference_is_blob(self, type_mapper):
        field = scalar(declared_type=object, relation=RelationKind.REFERENCE, serialized=True)
        assert type_mapper.resolve(field).type_name == "blob"

    def test_reference_collection(self, type_mapper):
        field = collection(object, container=set, relation=RelationKind.MULTI_REFERENCE, target_class="Person")
        assert type_mapper.resolve(field).type_name == "set<varchar>"

    def test_reference_map_values(self, type_mapper):
        field = FieldDescriptor(
            name="friends",
            declared_type=dict,
            relation=RelationKind.MULTI_REFERENCE,
            shape=StorageShape.MAP,
            map=MapSpec(key_type=str, value_is_reference=True),
        )
        assert type_mapper.resolve(field).type_name == "map<varchar,varchar>"


# ============================================================================
# FALLBACKS
# ============================================================================

class TestFallbacks:
    """Fallback policy and the varchar default."""

    def test_uuid_uses_string_converter(self, type_mapper):
        column_type = type_mapper.resolve(scalar(declared_type=uuid.UUID))
        assert column_type.type_name == "varchar"
        assert column_type.converter.name == "uuid-string"

    def test_unresolvable_type_defaults_to_varchar(self, type_mapper, caplog):
        owner = ClassDescriptor(name="Holder")
        with caplog.at_level(logging.WARNING):
            column_type = type_mapper.resolve(scalar(name="thing", declared_type=Opaque), owner)
        assert column_type.type_name == "varchar"
        assert column_type.converter is None
        assert "Holder.thing" in caplog.text

    def test_custom_fallback_rules(self, registry):
        registry.register(MoneyConverter())
        mapper = TypeMapper(registry, fallback_rules=(FallbackRule("bigint"),))

        column_type = mapper.resolve(scalar(declared_type=Money))

        assert column_type.type_name == "bigint"
        assert column_type.converter.name == "money-bigint"

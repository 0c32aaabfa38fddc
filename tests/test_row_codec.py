# ============================================================================
# ROW CODEC TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Tests - Row value read/decode/encode
# PURPOSE: Verify accessors, converter use, fallbacks, containers, references
# CREATED: 18 OCT 2026
# ============================================================================
"""
Row Codec Tests

Run with:
    pytest tests/test_row_codec.py -v
"""

import logging
from collections import namedtuple
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum

import pytest

from core.contracts import RelationKind, StorageShape
from core.mapping.row_codec import log_cql_statement
from core.mapping.state import InMemoryObjectRuntime
from core.models.columns import ColumnSpec
from core.models.descriptors import CollectionSpec, FieldDescriptor, MapSpec
from core.schema.embedding import build_column

from tests.conftest import Person


class Status(Enum):
    ACTIVE = 1
    RETIRED = 2


def column_for(type_mapper, field: FieldDescriptor) -> ColumnSpec:
    return build_column(field.name, type_mapper.resolve(field), member=field)


# ============================================================================
# READ
# ============================================================================

class TestRead:
    """Raw values by physical type."""

    def test_mapping_row(self, codec):
        column = ColumnSpec("age", "int")
        assert codec.read({"age": 7}, column) == 7

    def test_attribute_row(self, codec):
        Row = namedtuple("Row", ["age"])
        assert codec.read(Row(age=7), ColumnSpec("age", "bigint")) == 7

    def test_missing_column_is_none(self, codec):
        assert codec.read({}, ColumnSpec("age", "int")) is None

    def test_timestamp_from_epoch_millis(self, codec):
        value = codec.read({"at": 86_400_000}, ColumnSpec("at", "timestamp"))
        assert value == datetime(1970, 1, 2)

    def test_blob_from_memoryview(self, codec):
        assert codec.read({"b": memoryview(b"xy")}, ColumnSpec("b", "blob")) == b"xy"


# ============================================================================
# SCALAR ROUND TRIPS THROUGH BOUND CONVERTERS
# ============================================================================

class TestBoundConverters:
    """Resolved columns carry the converter used in both directions."""

    @pytest.mark.parametrize("declared, value, stored", [
        (Decimal, Decimal("1.25"), 1.25),
        (date, date(2024, 3, 1), datetime(2024, 3, 1)),
        (time, time(13, 30), datetime(1970, 1, 1, 13, 30)),
        (Status, Status.RETIRED, 1),
    ])
    def test_encode_and_decode(self, codec, type_mapper, declared, value, stored):
        column = column_for(type_mapper, FieldDescriptor(name="v", declared_type=declared))

        assert codec.encode(column, value) == stored
        assert codec.decode(column, stored) == value

    def test_serialized_value(self, codec, type_mapper):
        column = column_for(type_mapper, FieldDescriptor(name="v", declared_type=dict, serialized=True))

        stored = codec.encode(column, {"a": 1})

        assert isinstance(stored, bytes)
        assert codec.decode(column, stored) == {"a": 1}

    def test_none_passes_through(self, codec, type_mapper):
        column = column_for(type_mapper, FieldDescriptor(name="v", declared_type=Decimal))
        assert codec.encode(column, None) is None
        assert codec.decode(column, None) is None


# ============================================================================
# FALLBACKS WITHOUT A CONVERTER
# ============================================================================

class TestFallbacks:
    """Special cases when no converter is bound."""

    def test_encode_enum_by_column_type(self, codec):
        assert codec.encode_value(Status.ACTIVE, None, "varchar") == "ACTIVE"
        assert codec.encode_value(Status.RETIRED, None, "int") == 1

    def test_encode_decimal_by_column_type(self, codec):
        assert codec.encode_value(Decimal("2.5"), None, "varchar") == "2.5"
        assert codec.encode_value(Decimal("2.5"), None, "double") == 2.5

    def test_encode_temporal(self, codec):
        assert codec.encode_value(date(2024, 1, 2), None, "timestamp") == datetime(2024, 1, 2)
        assert codec.encode_value(date(2024, 1, 2), None, "varchar") == "2024-01-02"
        assert codec.encode_value(time(8, 0), None, "timestamp") == datetime(1970, 1, 1, 8, 0)

    def test_encode_to_varchar_via_registry(self, codec):
        assert codec.encode_value(42, None, "varchar") == "42"

    def test_encode_blob_serializes(self, codec):
        assert isinstance(codec.encode_value([1, 2], None, "blob"), bytes)

    def test_decode_enum_by_name_or_ordinal(self, codec):
        assert codec.decode_value("RETIRED", None, Status) is Status.RETIRED
        assert codec.decode_value(0, None, Status) is Status.ACTIVE

    def test_decode_timestamp_to_date_and_time(self, codec):
        raw = datetime(2024, 5, 6, 7, 8)
        assert codec.decode_value(raw, None, date) == date(2024, 5, 6)
        assert codec.decode_value(raw, None, time) == time(7, 8)
        assert codec.decode_value(raw, None, datetime) == raw

    def test_decode_string_via_registry(self, codec):
        assert codec.decode_value("12.5", None, Decimal) == Decimal("12.5")

    def test_decode_unknown_is_raw(self, codec):
        assert codec.decode_value("x", None, None) == "x"


# ============================================================================
# CONTAINERS
# ============================================================================

class TestContainers:
    """Element-wise conversion of list/set/map columns."""

    def test_set_of_enums(self, codec, type_mapper):
        field = FieldDescriptor(
            name="history",
            declared_type=set,
            shape=StorageShape.COLLECTION,
            collection=CollectionSpec(container=set, element_type=Status),
        )
        column = column_for(type_mapper, field)

        stored = codec.encode(column, {Status.ACTIVE, Status.RETIRED})

        assert column.type_name == "set<int>"
        assert stored == {0, 1}
        assert codec.decode(column, [0, 1]) == {Status.ACTIVE, Status.RETIRED}

    def test_tuple_container_restored(self, codec, type_mapper):
        field = FieldDescriptor(
            name="points",
            declared_type=tuple,
            shape=StorageShape.COLLECTION,
            collection=CollectionSpec(container=tuple, element_type=Decimal),
        )
        column = column_for(type_mapper, field)

        assert codec.encode(column, (Decimal("1.5"),)) == [1.5]
        assert codec.decode(column, [1.5]) == (Decimal("1.5"),)

    def test_map_of_dates(self, codec, type_mapper):
        field = FieldDescriptor(
            name="milestones",
            declared_type=dict,
            shape=StorageShape.MAP,
            map=MapSpec(key_type=str, value_type=date),
        )
        column = column_for(type_mapper, field)

        stored = codec.encode(column, {"start": date(2024, 1, 1)})

        assert column.type_name == "map<varchar,timestamp>"
        assert stored == {"start": datetime(2024, 1, 1)}
        assert codec.decode(column, stored) == {"start": date(2024, 1, 1)}


# ============================================================================
# REFERENCES
# ============================================================================

class TestReferences:
    """References stored as identity strings."""

    @pytest.fixture
    def runtime(self):
        runtime = InMemoryObjectRuntime({"Person": Person}, {"Person": ["name"]})
        runtime.register("Person", Person(name="ann"))
        runtime.register("Person", Person(name="bob"))
        return runtime

    def test_single_reference(self, codec, type_mapper, runtime):
        field = FieldDescriptor(
            name="manager", declared_type=object, relation=RelationKind.REFERENCE, target_class="Person"
        )
        column = column_for(type_mapper, field)
        ann = runtime.object_for_identity_string("Person", "ann")

        assert codec.encode(column, ann, runtime) == "ann"
        assert codec.decode(column, "ann", runtime) is ann

    def test_reference_without_runtime(self, codec, type_mapper):
        field = FieldDescriptor(name="manager", declared_type=object, relation=RelationKind.REFERENCE)
        column = column_for(type_mapper, field)

        assert codec.decode(column, "ann") == "ann"

    def test_reference_list(self, codec, type_mapper, runtime):
        field = FieldDescriptor(
            name="team",
            declared_type=list,
            relation=RelationKind.MULTI_REFERENCE,
            target_class="Person",
            shape=StorageShape.COLLECTION,
            collection=CollectionSpec(container=list, element_type=object, ordered=True),
        )
        column = column_for(type_mapper, field)
        team = [runtime.object_for_identity_string("Person", n) for n in ("bob", "ann")]

        assert codec.encode(column, team, runtime) == ["bob", "ann"]
        assert codec.decode(column, ["bob", "ann"], runtime) == team

    def test_reference_map_values(self, codec, type_mapper, runtime):
        field = FieldDescriptor(
            name="roles",
            declared_type=dict,
            relation=RelationKind.MULTI_REFERENCE,
            target_class="Person",
            shape=StorageShape.MAP,
            map=MapSpec(key_type=str, value_is_reference=True),
        )
        column = column_for(type_mapper, field)
        bob = runtime.object_for_identity_string("Person", "bob")

        assert codec.encode(column, {"lead": bob}, runtime) == {"lead": "bob"}
        assert codec.decode(column, {"lead": "bob"}, runtime) == {"lead": bob}


# ============================================================================
# STATEMENT LOGGING
# ============================================================================

class TestLogStatement:
    """Placeholder substitution in debug output."""

    def test_substitutes_placeholders(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="core.mapping.row_codec"):
            rendered = log_cql_statement("INSERT INTO t (a, b) VALUES (?, %s)", ["x", 3])

        assert rendered == "INSERT INTO t (a, b) VALUES (<x>, <3>)"
        assert rendered in caplog.text

    def test_extra_placeholders_left_alone(self):
        assert log_cql_statement("SELECT * FROM t WHERE a = ? AND b = ?", [1]) == (
            "SELECT * FROM t WHERE a = <1> AND b = ?"
        )

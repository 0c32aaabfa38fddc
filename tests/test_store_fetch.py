# ============================================================================
# STORE / FETCH MAPPER TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Tests - Object <-> row value maps
# PURPOSE: Verify column values on write and object rebuild on read
# CREATED: 18 OCT 2026
# ============================================================================
"""
Store / Fetch Mapper Tests

Run with:
    pytest tests/test_store_fetch.py -v
"""

from dataclasses import dataclass
from typing import Optional

import pytest

from core.config.defaults import SchemaDefaults
from core.contracts import IdentityKind
from core.mapping.fetch import FetchMapper
from core.mapping.state import InMemoryObjectRuntime
from core.mapping.store import StoreMapper
from core.models.descriptors import ClassDescriptor, DiscriminatorSpec, FieldDescriptor, VersionSpec
from core.schema.table import TableMapping

from tests.conftest import Address, Person


@dataclass
class Vehicle:
    make: Optional[str] = None
    wheels: Optional[int] = None


@pytest.fixture
def vehicle_descriptor():
    return ClassDescriptor(
        name="Vehicle",
        python_class=Vehicle,
        identity=IdentityKind.DATASTORE,
        version=VersionSpec(),
        discriminator=DiscriminatorSpec(),
        members=[
            FieldDescriptor(name="make", declared_type=str),
            FieldDescriptor(name="wheels", declared_type=int),
        ],
    )


@pytest.fixture
def runtime():
    return InMemoryObjectRuntime(
        classes={"Person": Person, "Vehicle": Vehicle},
        key_fields={"Person": ["name"]},
    )


@pytest.fixture
def person_mapping(person_descriptor, resolver, schema_defaults):
    return TableMapping.build(person_descriptor, resolver, schema_defaults)


# ============================================================================
# STORE
# ============================================================================

class TestStoreMapper:
    """Object -> column values."""

    def test_member_and_embedded_values(self, person_mapping, resolver, codec):
        person = Person(name="ann", age=40, address=Address(street="Main"))

        values = StoreMapper(person_mapping, resolver, codec).values_for(person)

        assert values == {"name": "ann", "age": 40, "address_street": "Main"}
        assert person.address.owner is person

    def test_moved_embedded_value_follows_new_owner(self, person_mapping, resolver, codec, runtime):
        address = Address(street="Main")
        ann = Person(name="ann", address=address)
        bob = Person(name="bob", address=address)
        mapper = StoreMapper(person_mapping, resolver, codec)

        mapper.values_for(ann, runtime)
        assert address.owner is ann

        mapper.values_for(bob, runtime)
        assert address.owner is bob

    def test_absent_composite_nulls_its_columns(self, person_mapping, resolver, codec):
        values = StoreMapper(person_mapping, resolver, codec).values_for(Person(name="ann"))

        assert values == {"name": "ann", "age": None, "address_street": None}

    def test_surrogate_values(self, vehicle_descriptor, resolver, codec, runtime):
        schema = SchemaDefaults(tenant_id="acme")
        mapping = TableMapping.build(vehicle_descriptor, resolver, schema)
        car = Vehicle(make="vw", wheels=4)
        runtime.state_for(car).set_version(3)

        values = StoreMapper(mapping, resolver, codec, tenant_id="acme").values_for(car, runtime, datastore_id=17)

        assert values == {
            "make": "vw",
            "wheels": 4,
            "version": 3,
            "discriminator": "Vehicle",
            "tenant_id": "acme",
            "vehicle_id": 17,
        }

    def test_dict_objects(self, person_mapping, resolver, codec):
        values = StoreMapper(person_mapping, resolver, codec).values_for(
            {"name": "ann", "age": 3, "address": {"street": "Elm"}}
        )

        assert values["address_street"] == "Elm"


# ============================================================================
# FETCH
# ============================================================================

class TestFetchMapper:
    """Row -> object."""

    def test_rebuilds_object_with_embedded_owner(self, person_mapping, resolver, codec, runtime):
        row = {"name": "ann", "age": 40, "address_street": "Main"}

        person = FetchMapper(person_mapping, resolver, codec).fetch_object(row, runtime)

        assert isinstance(person, Person)
        assert (person.name, person.age) == ("ann", 40)
        assert person.address.street == "Main"
        assert person.address.owner is person

    def test_same_identity_same_object(self, person_mapping, resolver, codec, runtime):
        mapper = FetchMapper(person_mapping, resolver, codec)

        first = mapper.fetch_object({"name": "ann", "age": 40, "address_street": None}, runtime)
        second = mapper.fetch_object({"name": "ann", "age": 41, "address_street": None}, runtime)

        assert first is second
        assert second.age == 41
        assert second.address is None

    def test_identity_of_datastore_class(self, vehicle_descriptor, resolver, codec, schema_defaults):
        mapping = TableMapping.build(vehicle_descriptor, resolver, schema_defaults)

        assert FetchMapper(mapping, resolver, codec).identity_of({"vehicle_id": 17}) == (17,)

    def test_surrogate_version_set_on_state(self, vehicle_descriptor, resolver, codec, schema_defaults, runtime):
        mapping = TableMapping.build(vehicle_descriptor, resolver, schema_defaults)
        row = {"make": "vw", "wheels": 4, "version": 5, "discriminator": "Vehicle", "vehicle_id": 17}

        car = FetchMapper(mapping, resolver, codec).fetch_object(row, runtime)

        assert car.make == "vw"
        assert runtime.state_for(car).get_version() == 5

    def test_nondurable_class_cannot_be_fetched(self, resolver, codec, schema_defaults, runtime):
        descriptor = ClassDescriptor(
            name="Event",
            identity=IdentityKind.NONDURABLE,
            members=[FieldDescriptor(name="kind", declared_type=str)],
        )
        mapping = TableMapping.build(descriptor, resolver, schema_defaults)

        with pytest.raises(ValueError, match="no identity columns"):
            FetchMapper(mapping, resolver, codec).fetch_object({"kind": "x"}, runtime)

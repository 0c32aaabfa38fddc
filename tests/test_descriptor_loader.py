# ============================================================================
# DESCRIPTOR LOADER TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Tests - YAML class declarations
# PURPOSE: Verify parsing of fields, embedding, references, class options
# CREATED: 18 OCT 2026
# ============================================================================
"""
Descriptor Loader Tests

Run with:
    pytest tests/test_descriptor_loader.py -v
"""

from datetime import date
from decimal import Decimal

import pytest

from core.contracts import IdentityKind, RelationKind, StorageShape, VersionStrategy
from core.models.loader import DescriptorLoader, resolve_type


PEOPLE_YAML = """
classes:
  Person:
    identity: application
    python_class: python:tests.conftest.Person
    fields:
      name: {type: str, primary_key: true}
      age: int
      born: {type: date, index: true}
      address: {embedded: Address, owner_field: owner}
      tags: {type: set, element: str}
      scores: {type: dict, key: str, value: decimal}
      friends: {reference: Person, container: list, ordered: true}
      manager: {reference: Person}
  Address:
    python_class: python:tests.conftest.Address
    fields:
      street: str
      owner: {reference: Person}
"""


@pytest.fixture
def loader():
    return DescriptorLoader()


class TestLoadString:
    """Parsing one document."""

    def test_classes_loaded_and_cached(self, loader):
        loaded = loader.load_string(PEOPLE_YAML)

        assert set(loaded) == {"Person", "Address"}
        assert loader.get("Person") is loaded["Person"]
        assert {d.name for d in loader.list_all()} == {"Person", "Address"}

    def test_scalar_fields(self, loader):
        person = loader.load_string(PEOPLE_YAML)["Person"]

        assert person.get_member("name").primary_key
        assert person.get_member("age").declared_type is int
        assert person.get_member("born").declared_type is date
        assert person.get_member("born").index is not None

    def test_embedded_field_shares_target(self, loader):
        loaded = loader.load_string(PEOPLE_YAML)
        address = loaded["Person"].get_member("address")

        assert address.relation is RelationKind.EMBEDDED
        assert address.embedded.target is loaded["Address"]
        assert address.embedded.owner_field == "owner"

    def test_collections_and_maps(self, loader):
        person = loader.load_string(PEOPLE_YAML)["Person"]

        tags = person.get_member("tags")
        assert tags.shape is StorageShape.COLLECTION
        assert tags.collection.container is set
        assert tags.collection.element_type is str

        scores = person.get_member("scores")
        assert scores.shape is StorageShape.MAP
        assert scores.map.value_type is Decimal

    def test_references(self, loader):
        person = loader.load_string(PEOPLE_YAML)["Person"]

        friends = person.get_member("friends")
        assert friends.relation is RelationKind.MULTI_REFERENCE
        assert friends.collection.ordered
        assert friends.target_class == "Person"

        manager = person.get_member("manager")
        assert manager.relation is RelationKind.REFERENCE

    def test_class_options(self, loader):
        loaded = loader.load_string("""
classes:
  Car:
    identity: datastore
    table: cars
    version: date_time
    discriminator: CAR
    multitenancy_disabled: true
    indexes:
      - {columns: make}
    fields:
      make: str
""")
        car = loaded["Car"]

        assert car.identity is IdentityKind.DATASTORE
        assert car.table_name == "cars"
        assert car.version.strategy is VersionStrategy.DATE_TIME
        assert car.discriminator.value == "CAR"
        assert car.multitenancy_disabled
        assert car.indexes[0].columns == ["make"]

    def test_embedding_cycle_rejected(self, loader):
        with pytest.raises(ValueError, match="embeds itself"):
            loader.load_string("""
classes:
  A:
    fields:
      b: {embedded: B}
  B:
    fields:
      a: {embedded: A}
""")

    def test_unknown_embedded_class_rejected(self, loader):
        with pytest.raises(ValueError, match="Unknown class: Ghost"):
            loader.load_string("classes: {A: {fields: {g: {embedded: Ghost}}}}")


class TestLoadDirectory:
    """Loading every YAML file of a directory."""

    def test_load_all(self, tmp_path):
        (tmp_path / "people.yaml").write_text(PEOPLE_YAML)
        (tmp_path / "broken.yml").write_text("classes: {X: {fields: {y: {type: nope}}}}")

        loader = DescriptorLoader(str(tmp_path))

        assert loader.load_all() == 2
        assert loader.get("Person") is not None
        assert loader.get("X") is None

    def test_missing_directory(self, tmp_path):
        assert DescriptorLoader(str(tmp_path / "none")).load_all() == 0

    def test_get_or_raise(self, loader):
        with pytest.raises(KeyError):
            loader.get_or_raise("Nobody")


class TestResolveType:
    """Type names."""

    def test_builtin_names(self):
        assert resolve_type("Decimal") is Decimal
        assert resolve_type("long") is int

    def test_python_path(self):
        assert resolve_type("python:decimal.Decimal") is Decimal

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown type name"):
            resolve_type("geometry")

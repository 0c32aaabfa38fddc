# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Tests - Shared descriptors and collaborators
# PURPOSE: Person / Address model used across the mapping suites
# CREATED: 18 OCT 2026
# ============================================================================
"""
Shared fixtures.

    Person (application identity, key: name)
      name: str            -> name varchar
      age: int             -> age int
      address: Address     -> address_street varchar   (owner field skipped)

    Address
      street: str
      owner: -> Person     (owner back-reference)
"""

from dataclasses import dataclass
from typing import Any, Optional

import pytest

from core.config.defaults import NamingDefaults, SchemaDefaults, reset_defaults
from core.contracts import RelationKind
from core.converters import build_default_registry
from core.mapping.row_codec import RowCodec
from core.models.descriptors import ClassDescriptor, EmbeddedSpec, FieldDescriptor
from core.schema.embedding import EmbeddingResolver
from core.schema.type_mapper import TypeMapper


@dataclass
class Address:
    street: Optional[str] = None
    owner: Any = None


@dataclass
class Person:
    name: Optional[str] = None
    age: Optional[int] = None
    address: Optional[Address] = None


@pytest.fixture(autouse=True)
def _clean_defaults(monkeypatch):
    """Keep environment-derived defaults from leaking between tests."""
    for var in (
        "CASSANDRA_KEYSPACE",
        "SCHEMA_TENANT_ID",
        "SCHEMA_DDL_FILENAME",
        "SCHEMA_AUTO_CREATE_COLUMNS",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture
def address_descriptor():
    return ClassDescriptor(
        name="Address",
        python_class=Address,
        members=[
            FieldDescriptor(name="street", declared_type=str),
            FieldDescriptor(
                name="owner",
                declared_type=object,
                relation=RelationKind.REFERENCE,
                target_class="Person",
            ),
        ],
    )


@pytest.fixture
def person_descriptor(address_descriptor):
    return ClassDescriptor(
        name="Person",
        python_class=Person,
        members=[
            FieldDescriptor(name="name", declared_type=str, primary_key=True),
            FieldDescriptor(name="age", declared_type=int),
            FieldDescriptor(
                name="address",
                declared_type=Address,
                relation=RelationKind.EMBEDDED,
                embedded=EmbeddedSpec(target=address_descriptor, owner_field="owner"),
            ),
        ],
    )


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def type_mapper(registry):
    return TypeMapper(registry)


@pytest.fixture
def resolver(type_mapper):
    return EmbeddingResolver(type_mapper)


@pytest.fixture
def codec(registry):
    return RowCodec(registry)


@pytest.fixture
def schema_defaults():
    return SchemaDefaults(keyspace="app")


@pytest.fixture
def naming():
    return NamingDefaults()

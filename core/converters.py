# ============================================================================
# TYPE CONVERTERS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Bidirectional value converters and their registry
# PURPOSE: Convert logical field values to one physical representation and back
# CREATED: 18 OCT 2026
# EXPORTS: TypeConverter, IdentityConverter, TypeConverterRegistry,
#          build_default_registry, is_serializable_type
# DEPENDENCIES: pydantic
# ============================================================================
"""
Type Converters.

A converter moves a value between a logical member type (what the object
holds) and one physical representation (what the column stores). Each
converter declares the physical column type it produces, so the type mapper
can choose a column type by asking the registry for "a converter from X to
varchar", "from X to bigint", and so on.

Lookups are exact on the member type. bool is a subclass of int and IntEnum
members are ints, so walking the MRO would hand enums and booleans to the
integer converters.

Usage:
    registry = build_default_registry()
    conv = registry.get(Decimal, "varchar")
    conv.to_datastore(Decimal("1.50"))    # "1.50"
"""

import dataclasses
import pickle
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type
from zoneinfo import ZoneInfo

from pydantic import BaseModel

# Epoch day used to carry a time-of-day in a timestamp column
EPOCH_DATE = date(1970, 1, 1)


# ============================================================================
# SERIALIZABILITY
# ============================================================================

_PICKLABLE_BUILTINS: Tuple[type, ...] = (
    str, bytes, int, float, complex, bool, tuple, list, dict, set, frozenset,
)


def is_serializable_type(declared_type: Any) -> bool:
    """
    Whether values of a declared type can be stored as a serialized blob.

    True for dataclasses, pydantic models, picklable builtins and classes
    that define their own pickling hooks.
    """
    if not isinstance(declared_type, type):
        return False
    if dataclasses.is_dataclass(declared_type):
        return True
    if issubclass(declared_type, BaseModel):
        return True
    if issubclass(declared_type, _PICKLABLE_BUILTINS):
        return True
    for hook in ("__getstate__", "__reduce__", "__reduce_ex__"):
        if getattr(declared_type, hook, None) is not getattr(object, hook, None):
            return True
    return False


# ============================================================================
# CONVERTER BASE
# ============================================================================

class TypeConverter(ABC):
    """
    Bidirectional conversion between a member type and a physical type.

    Subclasses declare:
        name: Registry name (used by explicit converter declarations)
        member_type: Logical Python type
        datastore_type: Python type of the stored value
        physical_type: CQL column type the stored value belongs to
    """

    name: ClassVar[str] = ""
    member_type: ClassVar[type] = object
    datastore_type: ClassVar[type] = object
    physical_type: ClassVar[str] = "varchar"

    @abstractmethod
    def to_datastore(self, value: Any) -> Any:
        """Convert a member value to its stored form."""

    @abstractmethod
    def to_member(self, value: Any) -> Any:
        """Convert a stored value back to the member type."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name}: {self.member_type.__name__} -> {self.physical_type})"


class IdentityConverter(TypeConverter):
    """Pass-through converter for types the driver handles natively."""

    def __init__(self, member_type: type, physical_type: str, name: Optional[str] = None):
        # Instance attributes shadow the ClassVar defaults
        self.member_type = member_type
        self.datastore_type = member_type
        self.physical_type = physical_type
        self.name = name or f"{member_type.__name__.lower()}-{physical_type}"

    def to_datastore(self, value: Any) -> Any:
        return value

    def to_member(self, value: Any) -> Any:
        return value


# ============================================================================
# BUILT-IN CONVERTERS
# ============================================================================

class DecimalDoubleConverter(TypeConverter):
    name = "decimal-double"
    member_type = Decimal
    datastore_type = float
    physical_type = "double"

    def to_datastore(self, value):
        return None if value is None else float(value)

    def to_member(self, value):
        return None if value is None else Decimal(str(value))


class DecimalStringConverter(TypeConverter):
    name = "decimal-string"
    member_type = Decimal
    datastore_type = str
    physical_type = "varchar"

    def to_datastore(self, value):
        return None if value is None else str(value)

    def to_member(self, value):
        return None if value is None else Decimal(value)


class IntStringConverter(TypeConverter):
    name = "int-string"
    member_type = int
    datastore_type = str
    physical_type = "varchar"

    def to_datastore(self, value):
        return None if value is None else str(value)

    def to_member(self, value):
        return None if value is None else int(value)


class DateTimeStringConverter(TypeConverter):
    name = "datetime-string"
    member_type = datetime
    datastore_type = str
    physical_type = "varchar"

    def to_datastore(self, value):
        return None if value is None else value.isoformat()

    def to_member(self, value):
        return None if value is None else datetime.fromisoformat(value)


class DateTimestampConverter(TypeConverter):
    name = "date-timestamp"
    member_type = date
    datastore_type = datetime
    physical_type = "timestamp"

    def to_datastore(self, value):
        return None if value is None else datetime.combine(value, time.min)

    def to_member(self, value):
        if value is None:
            return None
        return value.date() if isinstance(value, datetime) else value


class DateStringConverter(TypeConverter):
    name = "date-string"
    member_type = date
    datastore_type = str
    physical_type = "varchar"

    def to_datastore(self, value):
        return None if value is None else value.isoformat()

    def to_member(self, value):
        return None if value is None else date.fromisoformat(value)


class TimeTimestampConverter(TypeConverter):
    """Stores a time of day as a timestamp on the epoch day."""
    name = "time-timestamp"
    member_type = time
    datastore_type = datetime
    physical_type = "timestamp"

    def to_datastore(self, value):
        return None if value is None else datetime.combine(EPOCH_DATE, value)

    def to_member(self, value):
        if value is None:
            return None
        return value.time() if isinstance(value, datetime) else value


class TimeStringConverter(TypeConverter):
    name = "time-string"
    member_type = time
    datastore_type = str
    physical_type = "varchar"

    def to_datastore(self, value):
        return None if value is None else value.isoformat()

    def to_member(self, value):
        return None if value is None else time.fromisoformat(value)


class ZoneInfoStringConverter(TypeConverter):
    name = "zoneinfo-string"
    member_type = ZoneInfo
    datastore_type = str
    physical_type = "varchar"

    def to_datastore(self, value):
        return None if value is None else value.key

    def to_member(self, value):
        return None if value is None else ZoneInfo(value)


class UUIDStringConverter(TypeConverter):
    name = "uuid-string"
    member_type = uuid.UUID
    datastore_type = str
    physical_type = "varchar"

    def to_datastore(self, value):
        return None if value is None else str(value)

    def to_member(self, value):
        return None if value is None else uuid.UUID(value)


class EnumOrdinalConverter(TypeConverter):
    """Stores an enum member as its declaration position."""
    datastore_type = int
    physical_type = "int"

    def __init__(self, enum_type: Type[Enum], physical_type: str = "int"):
        self.member_type = enum_type
        self.physical_type = physical_type
        self.name = f"{enum_type.__name__.lower()}-ordinal"

    def to_datastore(self, value):
        return None if value is None else list(self.member_type).index(value)

    def to_member(self, value):
        return None if value is None else list(self.member_type)[int(value)]


class EnumNameConverter(TypeConverter):
    """Stores an enum member as its name."""
    datastore_type = str
    physical_type = "varchar"

    def __init__(self, enum_type: Type[Enum]):
        self.member_type = enum_type
        self.name = f"{enum_type.__name__.lower()}-name"

    def to_datastore(self, value):
        return None if value is None else value.name

    def to_member(self, value):
        return None if value is None else self.member_type[value]


class SerializableBlobConverter(TypeConverter):
    """Serializes any picklable value into a blob column."""
    name = "serializable-blob"
    member_type = object
    datastore_type = bytes
    physical_type = "blob"

    def to_datastore(self, value):
        return None if value is None else pickle.dumps(value)

    def to_member(self, value):
        if value is None:
            return None
        # The driver hands blobs back as bytes (or a memoryview for some protocols)
        return pickle.loads(bytes(value))


# ============================================================================
# REGISTRY
# ============================================================================

class TypeConverterRegistry:
    """
    Lookup of converters by name, by member type (auto-apply) and by
    (member type, physical type).

    Registries are populated once and then read; one registry is safe to
    share between threads after setup.
    """

    def __init__(self, converters: Optional[List[TypeConverter]] = None):
        self._by_name: Dict[str, TypeConverter] = {}
        self._by_type: Dict[Tuple[type, str], TypeConverter] = {}
        self._auto_apply: Dict[type, TypeConverter] = {}
        self._serialization = SerializableBlobConverter()
        self._lock = threading.Lock()

        for converter in converters or []:
            self.register(converter)

    def register(self, converter: TypeConverter, auto_apply: bool = False) -> None:
        """
        Register a converter.

        Args:
            converter: Converter instance
            auto_apply: If True, the converter is selected for every field of
                        its member type that has no explicit converter

        Raises:
            ValueError: If another converter already uses the same name
        """
        with self._lock:
            existing = self._by_name.get(converter.name)
            if existing is not None and existing is not converter:
                raise ValueError(f"Converter name already registered: {converter.name}")

            self._by_name[converter.name] = converter
            self._by_type.setdefault((converter.member_type, converter.physical_type), converter)
            if auto_apply:
                self._auto_apply[converter.member_type] = converter

    def get_by_name(self, name: str) -> Optional[TypeConverter]:
        return self._by_name.get(name)

    def get_auto_apply(self, member_type: Any) -> Optional[TypeConverter]:
        return self._auto_apply.get(member_type)

    def get(self, member_type: Any, physical_type: str) -> Optional[TypeConverter]:
        """Converter from member_type to the given physical type, if any."""
        return self._by_type.get((member_type, physical_type))

    def serialization_converter(self) -> TypeConverter:
        return self._serialization

    def names(self) -> List[str]:
        return sorted(self._by_name)


def build_default_registry() -> TypeConverterRegistry:
    """
    Create a registry holding the built-in converters.

    Every declared type in the static physical-type table has a converter to
    its table type, so column resolution always binds one.
    """
    return TypeConverterRegistry([
        IdentityConverter(str, "varchar"),
        IdentityConverter(int, "int"),
        IdentityConverter(int, "bigint"),
        IdentityConverter(float, "double"),
        IdentityConverter(float, "float"),
        IdentityConverter(bool, "boolean"),
        IdentityConverter(bytes, "blob"),
        IdentityConverter(datetime, "timestamp"),
        DecimalDoubleConverter(),
        DecimalStringConverter(),
        IntStringConverter(),
        DateTimeStringConverter(),
        DateTimestampConverter(),
        DateStringConverter(),
        TimeTimestampConverter(),
        TimeStringConverter(),
        ZoneInfoStringConverter(),
        UUIDStringConverter(),
    ])


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "EPOCH_DATE",
    "TypeConverter",
    "IdentityConverter",
    "DecimalDoubleConverter",
    "DecimalStringConverter",
    "IntStringConverter",
    "DateTimeStringConverter",
    "DateTimestampConverter",
    "DateStringConverter",
    "TimeTimestampConverter",
    "TimeStringConverter",
    "ZoneInfoStringConverter",
    "UUIDStringConverter",
    "EnumOrdinalConverter",
    "EnumNameConverter",
    "SerializableBlobConverter",
    "TypeConverterRegistry",
    "build_default_registry",
    "is_serializable_type",
]

# ============================================================================
# ROW / FIELD CODEC
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Value conversion between fetched rows and object fields
# PURPOSE: Read column values by physical type, convert to and from members
# CREATED: 18 OCT 2026
# EXPORTS: RowCodec, log_cql_statement
# DEPENDENCIES: none
# ============================================================================
"""
Row/Field Codec.

Reads: the raw value is pulled out of the row with the accessor of the
column's physical type, then run through the column's bound converter. With
no converter a fallback chain looks at the raw value's kind.

Writes: the bound converter when present, otherwise a fixed set of special
cases (enums, decimals, the date/time family, zones), then a generic
varchar/bigint converter lookup, then the value unchanged.

Container columns are converted element by element with the column's
element, key and value converters.

Usage:
    codec = RowCodec(registry)
    raw = codec.read(row, column)
    value = codec.decode(column, raw)
    stored = codec.encode(column, value)
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from core.contracts import RelationKind
from core.converters import EPOCH_DATE, TypeConverter, TypeConverterRegistry, build_default_registry
from core.models.columns import ColumnSpec
from core.schema.cql_utils import BLOB_TYPE, DEFAULT_TEXT_TYPE, container_parts

logger = logging.getLogger(__name__)


# ============================================================================
# ACCESSORS
# ============================================================================

def _as_text(raw: Any) -> str:
    return raw if isinstance(raw, str) else str(raw)


def _as_int(raw: Any) -> int:
    return raw if isinstance(raw, int) and not isinstance(raw, bool) else int(raw)


def _as_float(raw: Any) -> float:
    return raw if isinstance(raw, float) else float(raw)


def _as_bool(raw: Any) -> bool:
    return raw if isinstance(raw, bool) else bool(raw)


def _as_timestamp(raw: Any) -> Any:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, (int, float)):
        # Milliseconds since the epoch
        return datetime(1970, 1, 1) + timedelta(milliseconds=raw)
    return raw


def _as_bytes(raw: Any) -> bytes:
    return raw if isinstance(raw, bytes) else bytes(raw)


# Physical type -> accessor applied to the raw driver value
ACCESSORS: Mapping[str, Callable[[Any], Any]] = MappingProxyType({
    "varchar": _as_text,
    "int": _as_int,
    "bigint": _as_int,
    "double": _as_float,
    "float": _as_float,
    "boolean": _as_bool,
    "timestamp": _as_timestamp,
    "blob": _as_bytes,
})


# ============================================================================
# STATEMENT LOGGING
# ============================================================================

_PLACEHOLDER = re.compile(r"\?|%s")


def log_cql_statement(statement: str, values: Sequence[Any] = (), log: Optional[logging.Logger] = None) -> str:
    """
    Log a statement at debug level with its placeholders shown as <value>.

    Returns the rendered text.
    """
    remaining = iter(values)

    def _substitute(match):
        try:
            return f"<{next(remaining)}>"
        except StopIteration:
            return match.group(0)

    rendered = _PLACEHOLDER.sub(_substitute, statement)
    (log or logger).debug(rendered)
    return rendered


# ============================================================================
# CODEC
# ============================================================================

class RowCodec:
    """
    Converts values between rows and object fields for one registry.

    Holds no per-call state; safe to share.
    """

    def __init__(self, registry: Optional[TypeConverterRegistry] = None):
        self.registry = registry or build_default_registry()

    # =========================================================================
    # READ
    # =========================================================================

    def read(self, row: Any, column: ColumnSpec) -> Any:
        """Raw value of a column in a row (mapping or attribute-style)."""
        if isinstance(row, Mapping):
            raw = row.get(column.name)
        else:
            raw = getattr(row, column.name, None)
        if raw is None:
            return None
        accessor = ACCESSORS.get(column.type_name)
        return accessor(raw) if accessor else raw

    def decode(self, column: ColumnSpec, raw: Any, runtime: Any = None) -> Any:
        """Convert a raw column value to the member value."""
        if raw is None:
            return None

        member = column.member
        kind, _ = container_parts(column.type_name)
        if kind is not None:
            return self._decode_container(column, kind, raw, runtime)

        if member is not None and member.relation is RelationKind.REFERENCE and column.converter is None:
            return self._find_reference(member.target_class, raw, runtime)

        declared = member.declared_type if member is not None else None
        return self.decode_value(raw, column.converter, declared)

    def decode_value(self, raw: Any, converter: Optional[TypeConverter], declared_type: Any = None) -> Any:
        """
        Scalar decode.

        Without a converter: blob -> deserialize, enum by ordinal or name,
        timestamp -> date/time, str -> string converter, int -> bigint then
        int converter, else the raw value.
        """
        if raw is None:
            return None
        if converter is not None:
            return converter.to_member(raw)

        if isinstance(raw, (bytes, bytearray, memoryview)) and declared_type not in (None, bytes):
            return self.registry.serialization_converter().to_member(raw)

        if isinstance(declared_type, type) and issubclass(declared_type, Enum):
            if isinstance(raw, str):
                return declared_type[raw]
            return list(declared_type)[int(raw)]

        if isinstance(raw, datetime):
            if declared_type is date:
                return raw.date()
            if declared_type is time:
                return raw.time()
            return raw

        if declared_type is not None and declared_type is not type(raw):
            if isinstance(raw, str):
                converter = self.registry.get(declared_type, DEFAULT_TEXT_TYPE)
            elif isinstance(raw, int) and not isinstance(raw, bool):
                converter = self.registry.get(declared_type, "bigint") or self.registry.get(declared_type, "int")
            if converter is not None:
                return converter.to_member(raw)
        return raw

    def _decode_container(self, column: ColumnSpec, kind: str, raw: Any, runtime: Any) -> Any:
        member = column.member
        is_multi_reference = member is not None and member.relation is RelationKind.MULTI_REFERENCE

        if kind == "map":
            spec = member.map if member is not None else None
            result = {}
            for key, value in dict(raw).items():
                if is_multi_reference and spec.key_is_reference and column.key_converter is None:
                    key = self._find_reference(None, key, runtime)
                else:
                    key = self.decode_value(key, column.key_converter, spec.key_type if spec else None)
                if is_multi_reference and spec.value_is_reference and column.value_converter is None:
                    value = self._find_reference(None, value, runtime)
                else:
                    value = self.decode_value(value, column.value_converter, spec.value_type if spec else None)
                result[key] = value
            return result

        spec = member.collection if member is not None else None
        if is_multi_reference and column.element_converter is None:
            target = member.target_class
            elements = [self._find_reference(target, element, runtime) for element in raw]
        else:
            element_type = spec.element_type if spec else None
            elements = [self.decode_value(element, column.element_converter, element_type) for element in raw]

        container = spec.container if spec is not None else None
        if isinstance(container, type) and issubclass(container, (list, tuple, set, frozenset)):
            return container(elements)
        return set(elements) if kind == "set" else list(elements)

    def _find_reference(self, class_name: Optional[str], raw: Any, runtime: Any) -> Any:
        if runtime is None:
            return raw
        return runtime.object_for_identity_string(class_name, raw)

    # =========================================================================
    # WRITE
    # =========================================================================

    def encode(self, column: ColumnSpec, value: Any, runtime: Any = None) -> Any:
        """Convert a member value to the value stored in the column."""
        if value is None:
            return None

        member = column.member
        kind, _ = container_parts(column.type_name)
        if kind is not None:
            return self._encode_container(column, kind, value, runtime)

        if member is not None and member.relation is RelationKind.REFERENCE and column.converter is None:
            return self._reference_string(value, runtime)

        return self.encode_value(value, column.converter, column.type_name)

    def encode_value(self, value: Any, converter: Optional[TypeConverter], type_name: str) -> Any:
        """
        Scalar encode.

        Special cases apply in order when no converter is bound; enums come
        first since IntEnum members are also ints.
        """
        if value is None:
            return None
        if converter is not None:
            return converter.to_datastore(value)

        if type_name == BLOB_TYPE and not isinstance(value, (bytes, bytearray)):
            return self.registry.serialization_converter().to_datastore(value)

        if isinstance(value, Enum):
            if type_name == DEFAULT_TEXT_TYPE:
                return value.name
            return list(type(value)).index(value)

        if isinstance(value, Decimal):
            return str(value) if type_name == DEFAULT_TEXT_TYPE else float(value)

        if isinstance(value, (datetime, date, time)):
            return self._encode_temporal(value, type_name)

        if isinstance(value, ZoneInfo):
            return value.key

        if type_name == DEFAULT_TEXT_TYPE and not isinstance(value, str):
            converter = self.registry.get(type(value), DEFAULT_TEXT_TYPE)
        elif type_name == "bigint" and not isinstance(value, int):
            converter = self.registry.get(type(value), "bigint")
        if converter is not None:
            return converter.to_datastore(value)

        return value

    def _encode_temporal(self, value: Any, type_name: str) -> Any:
        if type_name == DEFAULT_TEXT_TYPE:
            converter = self.registry.get(type(value), DEFAULT_TEXT_TYPE)
            return converter.to_datastore(value) if converter else value.isoformat()
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time.min)
        return datetime.combine(EPOCH_DATE, value)

    def _encode_container(self, column: ColumnSpec, kind: str, value: Any, runtime: Any) -> Any:
        member = column.member
        is_multi_reference = member is not None and member.relation is RelationKind.MULTI_REFERENCE
        _, parts = container_parts(column.type_name)

        if kind == "map":
            spec = member.map if member is not None else None
            key_type, value_type = parts
            result = {}
            for key, item in value.items():
                if is_multi_reference and spec.key_is_reference and column.key_converter is None:
                    key = self._reference_string(key, runtime)
                else:
                    key = self.encode_value(key, column.key_converter, key_type)
                if is_multi_reference and spec.value_is_reference and column.value_converter is None:
                    item = self._reference_string(item, runtime)
                else:
                    item = self.encode_value(item, column.value_converter, value_type)
                result[key] = item
            return result

        element_type = parts[0]
        if is_multi_reference and column.element_converter is None:
            elements = [self._reference_string(element, runtime) for element in value]
        else:
            elements = [self.encode_value(element, column.element_converter, element_type) for element in value]
        return set(elements) if kind == "set" else elements

    def _reference_string(self, value: Any, runtime: Any) -> Optional[str]:
        if value is None:
            return None
        if runtime is None:
            return str(value)
        return runtime.identity_string(value)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ACCESSORS",
    "RowCodec",
    "log_cql_statement",
]

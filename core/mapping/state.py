# ============================================================================
# OBJECT RUNTIME INTERFACES
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Seams to the persistence runtime that manages objects
# PURPOSE: Field access, version access, owner discovery and identity lookups
# CREATED: 18 OCT 2026
# EXPORTS: ObjectState, ObjectRuntime, AttributeObjectState, InMemoryObjectRuntime,
#          instantiate
# DEPENDENCIES: pydantic
# ============================================================================
"""
Object Runtime Interfaces.

The mapper does not track object identity, dirty state or lifecycle. It
talks to whatever runtime does through two protocols:

- ObjectState: one managed object (read/replace a field, version, owners)
- ObjectRuntime: the identity map (state lookup, find-or-reconstruct by
  identity, string form of a referenced object's identity)

AttributeObjectState and InMemoryObjectRuntime are plain-attribute
implementations used by scripts and tests.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from pydantic import BaseModel


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class ObjectState(Protocol):
    """State of one managed object."""

    @property
    def object(self) -> Any: ...

    def provide_field(self, name: str) -> Any: ...

    def replace_field(self, name: str, value: Any) -> None: ...

    def embedded_owners(self) -> Sequence[Any]: ...

    def get_version(self) -> Any: ...

    def set_version(self, version: Any) -> None: ...


@runtime_checkable
class ObjectRuntime(Protocol):
    """Identity management offered by the persistence runtime."""

    def state_for(self, obj: Any, owner: Any = None) -> ObjectState: ...

    def find_object(
        self,
        class_name: str,
        identity: Tuple[Any, ...],
        loader: Callable[[ObjectState], None]
    ) -> Any: ...

    def identity_string(self, obj: Any) -> Optional[str]: ...

    def object_for_identity_string(self, class_name: Optional[str], value: str) -> Any: ...


# ============================================================================
# INSTANTIATION
# ============================================================================

def instantiate(cls: Optional[type], values: Dict[str, Any]) -> Any:
    """
    Create an object from field values without running validation.

    pydantic models use model_construct; other classes are created without
    calling __init__. With no class the values dict itself is returned.
    """
    if cls is None:
        return dict(values)
    if issubclass(cls, BaseModel):
        return cls.model_construct(**values)
    obj = cls.__new__(cls)
    for name, value in values.items():
        object.__setattr__(obj, name, value)
    return obj


# ============================================================================
# PLAIN-ATTRIBUTE IMPLEMENTATIONS
# ============================================================================

class AttributeObjectState:
    """
    ObjectState over plain attributes (or dict keys).

    Version is kept in a named field when version_field is given, otherwise
    on the state itself.
    """

    def __init__(self, obj: Any, owners: Sequence[Any] = (), version_field: Optional[str] = None):
        self._object = obj
        self._owners = [o for o in owners if o is not None]
        self._version_field = version_field
        self._version: Any = None

    @property
    def object(self) -> Any:
        return self._object

    def provide_field(self, name: str) -> Any:
        if isinstance(self._object, dict):
            return self._object.get(name)
        return getattr(self._object, name, None)

    def replace_field(self, name: str, value: Any) -> None:
        if isinstance(self._object, dict):
            self._object[name] = value
        else:
            # Works for frozen dataclasses and pydantic models too
            object.__setattr__(self._object, name, value)

    def embedded_owners(self) -> List[Any]:
        return list(self._owners)

    def get_version(self) -> Any:
        if self._version_field:
            return self.provide_field(self._version_field)
        return self._version

    def set_version(self, version: Any) -> None:
        if self._version_field:
            self.replace_field(self._version_field, version)
        self._version = version


class InMemoryObjectRuntime:
    """
    Identity map keyed by (class name, identity tuple).

    Identity strings are the key values joined by ':'. Objects are
    registered by find_object or explicitly with register().
    """

    SEPARATOR = ":"

    def __init__(
        self,
        classes: Optional[Dict[str, type]] = None,
        key_fields: Optional[Dict[str, Sequence[str]]] = None
    ):
        self._classes = dict(classes or {})
        self._key_fields = {name: tuple(fields) for name, fields in (key_fields or {}).items()}
        self._objects: Dict[Tuple[str, Tuple[Any, ...]], Any] = {}
        self._states: Dict[int, AttributeObjectState] = {}

    def register(self, class_name: str, obj: Any) -> None:
        self._objects[(class_name, self._identity_of(class_name, obj))] = obj

    def state_for(self, obj: Any, owner: Any = None) -> AttributeObjectState:
        if owner is not None:
            # Embedded values are not tracked; their owner is the one being stored or fetched
            return AttributeObjectState(obj, owners=(owner,))
        state = self._states.get(id(obj))
        if state is None or state.object is not obj:
            state = AttributeObjectState(obj)
            self._states[id(obj)] = state
        return state

    def find_object(
        self,
        class_name: str,
        identity: Tuple[Any, ...],
        loader: Callable[[ObjectState], None]
    ) -> Any:
        key = (class_name, tuple(identity))
        obj = self._objects.get(key)
        if obj is None:
            obj = instantiate(self._classes.get(class_name), {})
            self._objects[key] = obj
        loader(self.state_for(obj))
        return obj

    def identity_string(self, obj: Any) -> Optional[str]:
        if obj is None:
            return None
        for (class_name, identity), known in self._objects.items():
            if known is obj:
                return self.SEPARATOR.join(str(part) for part in identity)
        class_name = type(obj).__name__
        if class_name in self._key_fields:
            return self.SEPARATOR.join(str(part) for part in self._identity_of(class_name, obj))
        return str(obj)

    def object_for_identity_string(self, class_name: Optional[str], value: str) -> Any:
        for (known_class, identity), obj in self._objects.items():
            if class_name and known_class != class_name:
                continue
            if self.SEPARATOR.join(str(part) for part in identity) == value:
                return obj
        return None

    def _identity_of(self, class_name: str, obj: Any) -> Tuple[Any, ...]:
        fields = self._key_fields.get(class_name, ())
        return tuple(getattr(obj, name, None) for name in fields)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ObjectState",
    "ObjectRuntime",
    "AttributeObjectState",
    "InMemoryObjectRuntime",
    "instantiate",
]

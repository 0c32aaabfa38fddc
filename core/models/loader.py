# ============================================================================
# DESCRIPTOR LOADER
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Core - Class descriptors from YAML files
# PURPOSE: Parse class/field declarations and cache the resulting descriptors
# CREATED: 18 OCT 2026
# DEPENDENCIES: pyyaml, pydantic
# ============================================================================
"""
Descriptor Loader

Loads ClassDescriptors from YAML files. Each file holds a `classes`
mapping; embedded and referenced classes are named, and resolved once the
whole document is parsed.

    classes:
      Person:
        identity: application
        fields:
          name: {type: str, primary_key: true}
          age: int
          address: {embedded: Address, owner_field: owner}
          tags: {type: list, element: str}
          friends: {reference: Person, container: set}
      Address:
        fields:
          street: str
          owner: {reference: Person}

Type names are the builtins below or "python:package.module.Name" for any
importable class (enums, user types).
"""

import importlib
import logging
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Set
from zoneinfo import ZoneInfo

import yaml

from core.contracts import IdentityKind, RelationKind, StorageShape, VersionStrategy
from core.models.descriptors import (
    ClassDescriptor,
    CollectionSpec,
    DiscriminatorSpec,
    EmbeddedSpec,
    FieldDescriptor,
    IndexSpec,
    MapSpec,
    VersionSpec,
)

logger = logging.getLogger(__name__)


TYPE_NAMES: Dict[str, Any] = {
    "str": str,
    "string": str,
    "int": int,
    "integer": int,
    "long": int,
    "float": float,
    "double": float,
    "bool": bool,
    "boolean": bool,
    "bytes": bytes,
    "decimal": Decimal,
    "datetime": datetime,
    "date": date,
    "time": time,
    "zoneinfo": ZoneInfo,
    "uuid": uuid.UUID,
    "list": list,
    "tuple": tuple,
    "set": set,
    "frozenset": frozenset,
    "dict": dict,
    "object": object,
}

CONTAINER_TYPES = {list, tuple, set, frozenset}


def resolve_type(name: Any) -> Any:
    """
    Type for a YAML type name.

    Raises:
        ValueError: Unknown builtin name or unimportable python: path
    """
    if not isinstance(name, str):
        return name
    if name.startswith("python:"):
        path = name[len("python:"):]
        module_name, _, attr = path.rpartition(".")
        if not module_name:
            raise ValueError(f"Invalid python type path: {name}")
        try:
            return getattr(importlib.import_module(module_name), attr)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Cannot import type {path}: {e}") from e
    try:
        return TYPE_NAMES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown type name: {name}") from None


class DescriptorLoader:
    """Loader and cache for class descriptors."""

    def __init__(self, descriptors_dir: Optional[str] = None):
        """
        Initialize the loader.

        Args:
            descriptors_dir: Directory containing descriptor YAML files
        """
        self.descriptors_dir = Path(descriptors_dir) if descriptors_dir else None
        self._cache: Dict[str, ClassDescriptor] = {}
        self._loaded = False

    def load_all(self) -> int:
        """
        Load every *.yaml / *.yml file of the descriptors directory.

        Returns:
            Number of classes loaded
        """
        if self.descriptors_dir is None or not self.descriptors_dir.exists():
            logger.warning(f"Descriptors directory not found: {self.descriptors_dir}")
            return 0

        count = 0
        files = sorted(self.descriptors_dir.glob("*.yaml")) + sorted(self.descriptors_dir.glob("*.yml"))
        for yaml_file in files:
            try:
                loaded = self.load_file(yaml_file)
                count += len(loaded)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.error(f"Failed to load {yaml_file}: {e}")

        self._loaded = True
        logger.info(f"Loaded {count} class descriptors from {self.descriptors_dir}")
        return count

    def load_file(self, path) -> Dict[str, ClassDescriptor]:
        """Load one YAML file and cache its classes."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        loaded = self.load_dict(data)
        logger.info(f"Loaded {len(loaded)} classes from {path}")
        return loaded

    def load_string(self, text: str) -> Dict[str, ClassDescriptor]:
        return self.load_dict(yaml.safe_load(text) or {})

    def load_dict(self, data: Dict[str, Any]) -> Dict[str, ClassDescriptor]:
        """
        Build descriptors from a parsed document.

        Raises:
            ValueError: Invalid declarations or an embedding cycle
        """
        raw_classes = data.get("classes") or {}
        built: Dict[str, ClassDescriptor] = {}
        for class_name in raw_classes:
            self._build_class(class_name, raw_classes, built, set())
        self._cache.update(built)
        return built

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get(self, class_name: str) -> Optional[ClassDescriptor]:
        if not self._loaded and self.descriptors_dir is not None:
            self.load_all()
        return self._cache.get(class_name)

    def get_or_raise(self, class_name: str) -> ClassDescriptor:
        """
        Raises:
            KeyError if the class is not known
        """
        descriptor = self.get(class_name)
        if descriptor is None:
            raise KeyError(f"Class descriptor not found: {class_name}")
        return descriptor

    def list_all(self) -> List[ClassDescriptor]:
        if not self._loaded and self.descriptors_dir is not None:
            self.load_all()
        return list(self._cache.values())

    def register(self, descriptor: ClassDescriptor) -> None:
        """Register a descriptor built in code (for testing or programmatic use)."""
        self._cache[descriptor.name] = descriptor

    # =========================================================================
    # PARSING
    # =========================================================================

    def _build_class(
        self,
        class_name: str,
        raw_classes: Dict[str, Any],
        built: Dict[str, ClassDescriptor],
        in_progress: Set[str],
    ) -> ClassDescriptor:
        if class_name in built:
            return built[class_name]
        if class_name in self._cache and class_name not in raw_classes:
            return self._cache[class_name]
        if class_name not in raw_classes:
            raise ValueError(f"Unknown class: {class_name}")
        if class_name in in_progress:
            raise ValueError(f"Class {class_name} embeds itself through {sorted(in_progress)}")

        in_progress.add(class_name)
        raw = raw_classes[class_name] or {}

        members = [
            self._build_field(name, spec, raw_classes, built, in_progress)
            for name, spec in (raw.get("fields") or {}).items()
        ]

        version = raw.get("version")
        if isinstance(version, str):
            version = {"strategy": version}
        discriminator = raw.get("discriminator")
        if isinstance(discriminator, str):
            discriminator = {"value": discriminator}

        descriptor = ClassDescriptor(
            name=class_name,
            members=members,
            identity=IdentityKind(raw.get("identity", IdentityKind.APPLICATION.value)),
            version=VersionSpec(
                strategy=VersionStrategy(version.get("strategy", VersionStrategy.VERSION_NUMBER.value)),
                field_name=version.get("field"),
                column=version.get("column"),
            ) if version else None,
            discriminator=DiscriminatorSpec(**discriminator) if discriminator else None,
            indexes=[IndexSpec(**index) for index in raw.get("indexes") or []],
            table=raw.get("table"),
            keyspace=raw.get("keyspace"),
            multitenancy_disabled=bool(raw.get("multitenancy_disabled", False)),
            python_class=resolve_type(raw["python_class"]) if raw.get("python_class") else None,
        )

        in_progress.discard(class_name)
        built[class_name] = descriptor
        return descriptor

    def _build_field(
        self,
        name: str,
        spec: Any,
        raw_classes: Dict[str, Any],
        built: Dict[str, ClassDescriptor],
        in_progress: Set[str],
    ) -> FieldDescriptor:
        if spec is None or isinstance(spec, str):
            spec = {"type": spec or "str"}

        kwargs: Dict[str, Any] = {
            "name": name,
            "converter": spec.get("converter"),
            "storage_type": spec.get("storage_type"),
            "serialized": bool(spec.get("serialized", False)),
            "primary_key": bool(spec.get("primary_key", False)),
            "column": spec.get("column"),
        }
        if "serializable" in spec:
            kwargs["serializable"] = bool(spec["serializable"])
        index = spec.get("index")
        if index:
            kwargs["index"] = IndexSpec() if index is True else IndexSpec(**index)

        # Embedded composite (or unsupported embedded container)
        if spec.get("embedded"):
            target = self._build_class(spec["embedded"], raw_classes, built, in_progress)
            shape = StorageShape(spec.get("shape", StorageShape.SCALAR.value))
            kwargs.update(
                declared_type=target.python_class or object,
                relation=RelationKind.EMBEDDED,
                shape=shape,
                embedded=EmbeddedSpec(target=target, owner_field=spec.get("owner_field")),
            )
            if shape in (StorageShape.COLLECTION, StorageShape.ARRAY):
                kwargs["collection"] = CollectionSpec(container=resolve_type(spec.get("container", "list")))
            elif shape is StorageShape.MAP:
                kwargs["map"] = MapSpec()
            return FieldDescriptor(**kwargs)

        # References
        if spec.get("reference"):
            target_class = spec["reference"]
            container = spec.get("container")
            kwargs["target_class"] = target_class
            if container in ("map", "dict"):
                kwargs.update(
                    relation=RelationKind.MULTI_REFERENCE,
                    shape=StorageShape.MAP,
                    declared_type=dict,
                    map=MapSpec(
                        key_type=resolve_type(spec.get("key", "str")),
                        value_type=resolve_type(spec.get("value", "str")),
                        key_is_reference=bool(spec.get("key_is_reference", False)),
                        value_is_reference=bool(spec.get("value_is_reference", True)),
                        key_serialized=bool(spec.get("key_serialized", False)),
                        value_serialized=bool(spec.get("value_serialized", False)),
                    ),
                )
            elif container:
                container_type = resolve_type(container)
                kwargs.update(
                    relation=RelationKind.MULTI_REFERENCE,
                    shape=StorageShape.ARRAY if spec.get("array") else StorageShape.COLLECTION,
                    declared_type=container_type,
                    collection=CollectionSpec(
                        container=container_type,
                        element_type=object,
                        element_serialized=bool(spec.get("element_serialized", False)),
                        ordered=bool(spec.get("ordered", False)),
                    ),
                )
            else:
                kwargs.update(relation=RelationKind.REFERENCE, declared_type=object)
            return FieldDescriptor(**kwargs)

        declared = resolve_type(spec.get("type", "str"))
        kwargs["declared_type"] = declared

        if declared is dict or "key" in spec or "value" in spec:
            kwargs.update(
                shape=StorageShape.MAP,
                map=MapSpec(
                    key_type=resolve_type(spec.get("key", "str")),
                    value_type=resolve_type(spec.get("value", "str")),
                    key_serialized=bool(spec.get("key_serialized", False)),
                    value_serialized=bool(spec.get("value_serialized", False)),
                ),
            )
        elif declared in CONTAINER_TYPES or "element" in spec:
            kwargs.update(
                shape=StorageShape.ARRAY if spec.get("array") else StorageShape.COLLECTION,
                collection=CollectionSpec(
                    container=declared if declared in CONTAINER_TYPES else list,
                    element_type=resolve_type(spec.get("element", "str")),
                    element_serialized=bool(spec.get("element_serialized", False)),
                    ordered=bool(spec.get("ordered", False)),
                ),
            )
        return FieldDescriptor(**kwargs)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "TYPE_NAMES",
    "resolve_type",
    "DescriptorLoader",
]

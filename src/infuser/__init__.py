"""Hierarchical dependency injection by name.

This package maps names to values, classes or factory functions and builds
object graphs from those mappings: constructor parameters and declared
instance fields are filled in by matching their names.

Exports:
- `Container`: the registry and resolver. `create_child()` returns a container
  that sees its ancestors' mappings and may shadow them.
- `get_dependencies`: the dependency names a class or function would receive,
  honoring an explicit `__inject__` list.
- `MappingStore`, `Binding`: the per-container mapping table.
- The error hierarchy rooted at `InjectorError`.
"""

from ._container import INJECTABLE_ATTRIBUTE, POST_CONSTRUCT, Container
from ._dependencies import INJECT_ATTRIBUTE, get_dependencies
from ._errors import (
    CircularDependency,
    DuplicateMapping,
    InjectorError,
    InvalidConstructibleKind,
    InvalidCreateInstanceTarget,
    InvalidName,
    InvalidSingletonFlag,
    InvalidValue,
    MappingError,
    MissingMapping,
    ResolutionError,
    SelfInjectionViaConstructor,
    SelfInjectionViaProperty,
    StrictConstructorViolation,
    StrictModeViolation,
)
from ._store import Binding, MappingStore


__all__ = [
    "INJECTABLE_ATTRIBUTE",
    "INJECT_ATTRIBUTE",
    "POST_CONSTRUCT",
    "Binding",
    "CircularDependency",
    "Container",
    "DuplicateMapping",
    "InjectorError",
    "InvalidConstructibleKind",
    "InvalidCreateInstanceTarget",
    "InvalidName",
    "InvalidSingletonFlag",
    "InvalidValue",
    "MappingError",
    "MappingStore",
    "MissingMapping",
    "ResolutionError",
    "SelfInjectionViaConstructor",
    "SelfInjectionViaProperty",
    "StrictConstructorViolation",
    "StrictModeViolation",
    "get_dependencies",
]

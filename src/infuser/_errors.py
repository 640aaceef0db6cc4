from __future__ import annotations

from typing import Any


class InjectorError(Exception):
    """Base class for every error raised by the container.

    `name` is the offending mapping name (if any) and `target` the class or
    function being bound or built (if any).
    """

    def __init__(self, message: str, *, name: str | None = None, target: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name
        self.target = target

    def __str__(self) -> str:
        # KeyError would otherwise quote the message
        return self.message


class MappingError(InjectorError):
    """Raised when a mapping is rejected at bind time."""


class InvalidName(MappingError, TypeError):
    pass


class InvalidValue(MappingError, ValueError):
    pass


class InvalidSingletonFlag(MappingError, TypeError):
    pass


class DuplicateMapping(MappingError, KeyError):
    pass


class InvalidConstructibleKind(InjectorError, TypeError):
    """Raised for objects that are neither a class nor a plain function."""


class InvalidCreateInstanceTarget(InvalidConstructibleKind):
    """Raised when `instantiate`/`create_instance` receive a non-callable."""


class ResolutionError(InjectorError, RuntimeError):
    pass


class MissingMapping(ResolutionError, LookupError):
    pass


class StrictModeViolation(ResolutionError):
    pass


class StrictConstructorViolation(ResolutionError):
    pass


class CircularDependency(ResolutionError):
    """Raised when resolving a mapping would require the mapping itself."""


class SelfInjectionViaConstructor(CircularDependency):
    pass


class SelfInjectionViaProperty(CircularDependency):
    pass


def describe(target: Any) -> str:
    return getattr(target, "__name__", None) or type(target).__name__

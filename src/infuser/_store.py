from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._errors import DuplicateMapping, InvalidConstructibleKind, InvalidName, InvalidSingletonFlag, InvalidValue


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


logger = logging.getLogger(__name__)

_SCALARS = (str, bytes, int, float, complex, bool)


@dataclass
class Binding:
    name: str
    value: Any = None  # mapped value, or the cached instance of a singleton class
    constructible: Callable[..., Any] | None = None
    singleton: bool = False
    resolving: bool = False  # set while the instance is being produced

    @property
    def is_class(self) -> bool:
        return self.constructible is not None

    def matches(self, candidate: object) -> bool:
        if candidate is None:
            return False
        if candidate is self.constructible or candidate is self.value:
            return True
        # equal builtin scalars are interchangeable, `1` must not match `True`
        return isinstance(candidate, _SCALARS) and type(candidate) is type(self.value) and candidate == self.value


class MappingStore:
    """Name -> Binding table of one container.

    Reads may walk up to the parent store; writes never leave this store.
    """

    def __init__(self, parent: MappingStore | None = None) -> None:
        self._bindings: dict[str, Binding] = {}
        self._parent = parent
        self._lock = threading.RLock()

    def bind(self, name: str, value: object) -> Binding:
        _validate_name(name)
        if value is None:
            msg = f'The value mapped to "{name}" is invalid, it can\'t be None.'
            raise InvalidValue(msg, name=name)

        return self._add(Binding(name=name, value=value))

    def bind_class(self, name: str, constructible: Callable[..., Any], singleton: bool = False) -> Binding:  # noqa: FBT001, FBT002
        _validate_name(name)
        if not callable(constructible):
            msg = f'The class mapped to "{name}" is invalid, a class or a function is expected.'
            raise InvalidConstructibleKind(msg, name=name, target=constructible)

        if not isinstance(singleton, bool):
            msg = f'The singleton flag of "{name}" is invalid, a boolean is expected (got {singleton!r}).'
            raise InvalidSingletonFlag(msg, name=name, target=constructible)

        return self._add(Binding(name=name, constructible=constructible, singleton=singleton))

    def unbind(self, name: str) -> None:
        with self._lock:
            if self._bindings.pop(name, None) is not None:
                logger.debug("Removed mapping %r", name)

    def lookup_local(self, name: str) -> Binding | None:
        return self._bindings.get(name)

    def lookup_chain(self, name: str) -> Binding | None:
        binding = self._bindings.get(name)
        if binding is None and self._parent is not None:
            return self._parent.lookup_chain(name)
        return binding

    def find_name_by_value(self, candidate: object) -> str | None:
        """Return the first local name (in binding order) holding `candidate`."""
        for binding in self.items():
            if binding.matches(candidate):
                return binding.name
        return None

    def clear(self) -> None:
        with self._lock:
            count = len(self._bindings)
            self._bindings.clear()
        logger.debug("Cleared %d mapping(s)", count)

    def items(self) -> list[Binding]:
        """Snapshot of the local bindings, safe to iterate while resolving."""
        with self._lock:
            return list(self._bindings.values())

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._bindings))

    def __len__(self) -> int:
        return len(self._bindings)

    def _add(self, binding: Binding) -> Binding:
        with self._lock:
            if binding.name in self._bindings:
                msg = f'A mapping already exists for "{binding.name}", remove it before mapping it again.'
                raise DuplicateMapping(msg, name=binding.name, target=binding.constructible)
            self._bindings[binding.name] = binding

        logger.debug(
            "Mapped %r to %s%s",
            binding.name,
            "class" if binding.is_class else "value",
            " (singleton)" if binding.singleton else "",
        )
        return binding


def _validate_name(name: object) -> None:
    if not isinstance(name, str):
        msg = f"The mapping name {name!r} is invalid, a string is expected."
        raise InvalidName(msg, target=name)

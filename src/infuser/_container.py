from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from ._dependencies import Dependency, dependency_plan, has_declared_dependencies
from ._errors import (
    CircularDependency,
    InvalidCreateInstanceTarget,
    MissingMapping,
    SelfInjectionViaConstructor,
    SelfInjectionViaProperty,
    StrictConstructorViolation,
    StrictModeViolation,
    describe,
)
from ._store import Binding, MappingStore


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    T = TypeVar("T")

INJECTABLE_ATTRIBUTE = "__injectable__"
POST_CONSTRUCT = "post_construct"


class Container:
    """Hierarchical DI container.

    - map names to values or to classes/functions (optionally singletons)
    - constructor injection by parameter name
    - property injection into already declared fields
    - child containers that read their ancestors' mappings and may shadow them.

    Example:
      container = Container()
      container.map_value("host", "localhost").map_class("db", Database, singleton=True)
      repo = container.create_instance(Repository)

    """

    def __init__(
        self,
        *,
        strict_mode: bool = False,
        strict_mode_constructor_injection: bool = False,
        throw_on_missing: bool = True,
    ) -> None:
        self.strict_mode = strict_mode
        self.strict_mode_constructor_injection = strict_mode_constructor_injection
        self.throw_on_missing = throw_on_missing
        self._parent: Container | None = None
        self._store = MappingStore()

    @property
    def parent(self) -> Container | None:
        return self._parent

    def create_child(self) -> Container:
        """Create a container that falls back to this one for unknown names.

        The policy flags are copied and may diverge afterwards.
        """
        child = Container(
            strict_mode=self.strict_mode,
            strict_mode_constructor_injection=self.strict_mode_constructor_injection,
            throw_on_missing=self.throw_on_missing,
        )
        child._parent = self  # noqa: SLF001
        child._store = MappingStore(parent=self._store)  # noqa: SLF001
        logger.debug("Created child container %#x of %#x", id(child), id(self))
        return child

    # mappings

    def map_value(self, name: str, value: object) -> Container:
        self._store.bind(name, value)
        return self

    def map_class(self, name: str, target: Callable[..., Any], singleton: bool = False) -> Container:  # noqa: FBT001, FBT002
        """Map a name to a class (or factory function) built on demand.

        Example:
          container.map_class("mailer", SmtpMailer, singleton=True)

        """
        self._store.bind_class(name, target, singleton)
        return self

    def remove_mapping(self, name: str) -> Container:
        self._store.unbind(name)
        return self

    def has_mapping(self, name: str) -> bool:
        """Whether `name` is mapped in this container, ignoring ancestors."""
        return name in self._store

    def has_inherited_mapping(self, name: str) -> bool:
        return self._store.lookup_chain(name) is not None

    def get_mapping(self, value: object) -> str | None:
        """Reverse lookup of a local mapping name by value, instance or class."""
        return self._store.find_name_by_value(value)

    def get_class(self, name: str) -> Callable[..., Any] | None:
        binding = self._store.lookup_chain(name)
        if binding is None:
            return None
        return binding.constructible

    # resolution

    def get_value(self, name: str, *args: Any, **overrides: Any) -> Any:
        """Resolve a name through this container and its ancestors.

        Class mappings are built here, `args`/`overrides` are passed to their
        constructor. Value mappings are returned as they were mapped.
        """
        binding = self._store.lookup_chain(name)
        if binding is None:
            return self._missing(name=name)

        return self._resolve(binding, args, overrides)

    def get_value_from_class(self, target: Callable[..., T], *args: Any, **overrides: Any) -> T | None:
        """Resolve the mapping whose class is `target`, looking up ancestors if needed."""
        for binding in self._store.items():
            if binding.constructible is target:
                return self._resolve(binding, args, overrides)

        if self._parent is not None:
            return self._parent.get_value_from_class(target, *args, **overrides)

        return self._missing(target=target)

    def instantiate(self, target: Callable[..., T], *args: Any, **overrides: Any) -> T:
        """Build `target`, resolving its parameters by name.

        Resolution precedence, per parameter:
        1. explicit positional argument (None counts as not given)
        2. explicit keyword override by parameter name
        3. mapping found in this container or an ancestor
        4. error, or the parameter default when `throw_on_missing` is off.
        """
        return Constructor(self).construct(target, args, overrides)

    def create_instance(self, target: Callable[..., T], *args: Any, **overrides: Any) -> T:
        """Build `target` and inject its declared fields."""
        instance = self.instantiate(target, *args, **overrides)
        self._inject(instance, own_call=True)
        return instance

    def inject(self, target: object) -> Container:
        """Assign mapped values to the fields `target` already declares.

        Ancestor mappings are applied first so local ones win. The target's
        `post_construct()` runs once afterwards, if defined.
        """
        self._inject(target, own_call=True)
        return self

    def dispose(self) -> None:
        """Drop every local mapping. Parent and children are left untouched."""
        self._store.clear()

    def resolve_dependency(self, target: Callable[..., Any], dep: Dependency) -> Any:
        """Resolve a single constructor dependency for `target`.

        Returns `inspect.Parameter.empty` when nothing is mapped and missing
        mappings are tolerated.
        """
        binding = self._store.lookup_chain(dep.name)
        if binding is not None:
            return self._resolve(binding)

        self._missing(name=dep.name, target=target)
        return inspect.Parameter.empty

    def _resolve(
        self,
        binding: Binding,
        args: Sequence[Any] = (),
        overrides: Mapping[str, Any] | None = None,
    ) -> Any:
        if not binding.is_class:
            return binding.value

        if binding.singleton and binding.value is not None:
            return binding.value

        if binding.resolving:
            msg = f'Circular dependency detected while resolving "{binding.name}".'
            raise CircularDependency(msg, name=binding.name, target=binding.constructible)

        _guard_constructor_injection(binding)

        binding.resolving = True
        try:
            instance = self.instantiate(binding.constructible, *args, **(overrides or {}))
            _guard_property_injection(binding, instance)
            if binding.singleton:
                binding.value = instance
                logger.debug("Cached singleton %r", binding.name)
            self._inject(instance, own_call=True)
        finally:
            binding.resolving = False

        return instance

    def _inject(self, target: object, *, own_call: bool) -> object:
        if self._parent is not None:
            self._parent._inject(target, own_call=False)  # noqa: SLF001

        for binding in self._store.items():
            if _accepts_injection(target, binding.name):
                setattr(target, binding.name, self._resolve(binding))

        if own_call:
            hook = getattr(target, POST_CONSTRUCT, None)
            if callable(hook):
                hook()

        return target

    def _missing(self, *, name: str | None = None, target: object = None) -> None:
        name_info = f' for the injection name: "{name}"' if name is not None else ""
        target_info = f' when instantiating: "{describe(target)}"' if target is not None else ""
        msg = f"No mapping found{name_info}{target_info}."

        if self.throw_on_missing:
            raise MissingMapping(msg, name=name, target=target)

        logger.debug(msg)
        return None


class Constructor:
    def __init__(self, resolver: Container) -> None:
        self._resolver = resolver

    def construct(self, target: Callable[..., T], args: Sequence[Any], overrides: Mapping[str, Any]) -> T:
        if not callable(target):
            msg = f"Invalid target {target!r}: a class or a function is expected."
            raise InvalidCreateInstanceTarget(msg, target=target)

        plan = dependency_plan(target)
        self._check_strict_mode(target, plan)
        extra_args, extra_kwargs = self._extras(target, plan, args, overrides)

        call_args: list[Any] = []
        call_kwargs: dict[str, Any] = {}
        for i, dep in enumerate(plan):
            value = self._argument(target, dep, args[i] if i < len(args) else None, overrides)
            if dep.parameter is not None and dep.parameter.kind is inspect.Parameter.KEYWORD_ONLY:
                call_kwargs[dep.parameter.name] = value
            else:
                call_args.append(value)

        call_args.extend(extra_args)
        call_kwargs.update(extra_kwargs)

        logger.debug("Instantiating %s with %d dependencies", describe(target), len(plan))
        return target(*call_args, **call_kwargs)

    def _check_strict_mode(self, target: Callable[..., Any], plan: list[Dependency]) -> None:
        if has_declared_dependencies(target):
            return

        if self._resolver.strict_mode:
            msg = (
                f'An "__inject__" list describing the dependencies of "{describe(target)}" '
                "is missing in strict mode."
            )
            raise StrictModeViolation(msg, target=target)

        if self._resolver.strict_mode_constructor_injection and plan:
            msg = (
                f'An "__inject__" list describing the constructor dependencies of "{describe(target)}" '
                "is missing in strict mode."
            )
            raise StrictConstructorViolation(msg, target=target)

    def _argument(
        self,
        target: Callable[..., Any],
        dep: Dependency,
        explicit: Any,
        overrides: Mapping[str, Any],
    ) -> Any:
        if explicit is not None:
            return explicit

        p = dep.parameter
        if p is not None and overrides.get(p.name) is not None:
            return overrides[p.name]

        value = self._resolver.resolve_dependency(target, dep)
        if value is not inspect.Parameter.empty:
            return value

        # missing mappings tolerated: keep the declared default
        if p is not None and p.default is not inspect.Parameter.empty:
            return p.default
        return None

    def _extras(
        self,
        target: Callable[..., Any],
        plan: list[Dependency],
        args: Sequence[Any],
        overrides: Mapping[str, Any],
    ) -> tuple[list[Any], dict[str, Any]]:
        params = _parameters(target)
        named = {dep.parameter.name for dep in plan if dep.parameter is not None}

        extra_args: list[Any] = []
        if any(p.kind is p.VAR_POSITIONAL for p in params):
            extra_args = list(args[len(plan) :])

        unmatched = {k: v for k, v in overrides.items() if k not in named}
        if unmatched and not any(p.kind is p.VAR_KEYWORD for p in params):
            msg = f"Overrides don't match {describe(target)} signature: unexpected {', '.join(sorted(unmatched))}"
            raise TypeError(msg)

        return extra_args, unmatched


def _parameters(target: Callable[..., Any]) -> list[inspect.Parameter]:
    try:
        return list(inspect.signature(target).parameters.values())
    except (TypeError, ValueError):
        return []


def _accepts_injection(target: object, name: str) -> bool:
    """Whether `target` declares a field called `name`.

    A class level `__injectable__` manifest is authoritative; without one, any
    instance attribute or class attribute (inherited ones included) counts.
    """
    cls = type(target)
    manifest = _manifest(cls)
    if manifest is not None:
        return name in manifest

    if name in getattr(target, "__dict__", {}):
        return True

    return any(name in vars(klass) for klass in cls.__mro__ if klass is not object)


def _manifest(cls: type) -> frozenset[str] | None:
    names = getattr(cls, INJECTABLE_ATTRIBUTE, None)
    if names is None:
        return None
    if isinstance(names, str):
        return frozenset((names,))
    return frozenset(names)


def _slots(cls: type) -> tuple[str, ...]:
    names = vars(cls).get("__slots__", ())
    if isinstance(names, str):
        return (names,)
    return tuple(names)


def _has_own_field(instance: object, name: str) -> bool:
    if name in getattr(instance, "__dict__", {}):
        return True

    # a filled slot is an instance field too
    return any(name in _slots(klass) for klass in type(instance).__mro__) and hasattr(instance, name)


def _guard_constructor_injection(binding: Binding) -> None:
    deps = dependency_plan(binding.constructible)
    if any(dep.name == binding.name for dep in deps):
        msg = (
            f'"{describe(binding.constructible)}" has a constructor parameter matching its own mapping '
            f'"{binding.name}", an instance can\'t be injected in itself.'
        )
        raise SelfInjectionViaConstructor(msg, name=binding.name, target=binding.constructible)


def _guard_property_injection(binding: Binding, instance: object) -> None:
    manifest = _manifest(type(instance)) or frozenset()
    if _has_own_field(instance, binding.name) or binding.name in manifest:
        msg = (
            f'"{describe(binding.constructible)}" declares a field matching its own mapping '
            f'"{binding.name}", an instance can\'t be injected in itself.'
        )
        raise SelfInjectionViaProperty(msg, name=binding.name, target=binding.constructible)

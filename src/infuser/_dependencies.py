"""Dependency name extraction.

A constructible is a class or a plain function. Its dependencies are the names
of its parameters, in declaration order, unless it declares them explicitly
through an own ``__inject__`` list:

    class Mailer:
        __inject__ = ["smtp_host", None]

        def __init__(self, host, port=25): ...

    get_dependencies(Mailer)  # ['smtp_host', 'port']
"""

from __future__ import annotations

import inspect
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._errors import InvalidConstructibleKind, describe


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


logger = logging.getLogger(__name__)

INJECT_ATTRIBUTE = "__inject__"

# underscores are only stripped as a surrounding pair, e.g. `_db_`
_MARKERS = re.compile(r"^(_?)(.+?)\1$")

_NAMED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


@dataclass(frozen=True)
class Dependency:
    """A dependency name and the parameter that receives it.

    `parameter` is None for declared names that spill into ``*args``.
    """

    name: str
    parameter: inspect.Parameter | None


def get_dependencies(target: Callable[..., Any]) -> list[str]:
    """Return the ordered dependency names of a class or function."""
    return [dep.name for dep in dependency_plan(target)]


def has_declared_dependencies(target: Callable[..., Any]) -> bool:
    return INJECT_ATTRIBUTE in getattr(target, "__dict__", {})


def dependency_plan(target: Callable[..., Any]) -> list[Dependency]:
    validate_constructible(target)

    params = _read_parameters(target)
    declared = _declared_names(target)

    named = [p for p in params if p.kind in _NAMED_KINDS]

    plan = []
    for i, p in enumerate(named):
        override = declared[i] if i < len(declared) else None
        plan.append(Dependency(strip_markers(override or p.name), p))

    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        # extra declared names are fed to *args
        plan.extend(Dependency(strip_markers(name), None) for name in declared[len(named) :] if name)

    return plan


def validate_constructible(target: object) -> None:
    if inspect.isclass(target):
        return

    if not inspect.isfunction(target):
        msg = (
            f"Invalid target {describe(target)!r}: a class or a function is expected "
            "(bound methods, partials and other callables cannot be instantiated)."
        )
        raise InvalidConstructibleKind(msg, target=target)

    if target.__name__ == "<lambda>":
        msg = "Invalid target: a lambda cannot be used as a constructible, define a function or a class."
        raise InvalidConstructibleKind(msg, target=target)

    if inspect.iscoroutinefunction(target) or inspect.isasyncgenfunction(target):
        msg = f"Invalid target {describe(target)!r}: asynchronous functions are not supported."
        raise InvalidConstructibleKind(msg, target=target)


def strip_markers(name: str) -> str:
    match = _MARKERS.match(name)
    return match.group(2) if match else name


def _read_parameters(target: Callable[..., Any]) -> list[inspect.Parameter]:
    try:
        sig = inspect.signature(target)
    except (TypeError, ValueError) as exc:
        # builtin types such as `dict` expose no signature
        logger.warning("Cannot read the signature of %s (%s), assuming no dependencies", describe(target), exc)
        return []

    return list(sig.parameters.values())


def _declared_names(target: Callable[..., Any]) -> Sequence[str | None]:
    declared = getattr(target, "__dict__", {}).get(INJECT_ATTRIBUTE)
    if isinstance(declared, (list, tuple)) and declared:
        return declared
    return ()

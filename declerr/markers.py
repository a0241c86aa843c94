"""Markers that declare how an error class is displayed and chained.

A class or variant carries its markers as decorators::

    @error("the data for key `{0}` is not available")
    class Redaction: ...

A field carries them in ``typing.Annotated`` metadata::

    cause: Annotated[OSError, Marker.FROM]

Markers only record what was written. They are checked when an error
class is derived, so a malformed marker is reported there.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, TypeVar

_SLOT = "__declerr_attrs__"

T = TypeVar("T")


def _attach(target: T, item: object) -> T:
    """Record *item* on *target*, keeping the top-to-bottom order of decorators."""
    try:
        existing = vars(target).get(_SLOT, ())
    except TypeError:
        raise TypeError(f"cannot attach a marker to {target!r}") from None
    # Decorators run bottom-up; prepending keeps the order they were written in.
    setattr(target, _SLOT, (item, *existing))
    return target


def _attached(target: object) -> tuple[object, ...]:
    """Return the markers recorded directly on *target*, not inherited ones."""
    try:
        return tuple(vars(target).get(_SLOT, ()))
    except TypeError:
        return ()


class Marker(enum.Enum):
    """A marker without arguments: ``source``, ``from`` or ``backtrace``."""

    SOURCE = "source"
    FROM = "from"
    BACKTRACE = "backtrace"

    def __call__(self, target: T) -> T:
        """Attach this marker to a class, as a decorator."""
        return _attach(target, self)

    def __str__(self) -> str:
        return f"#[{self.value}]"


@dataclass
class ErrorAttr:
    """The raw arguments of one ``error(...)`` marker.

    A message is written as ``error("text {field}", *args, **named)``;
    ``error(transparent=True)`` forwards display and source to the only
    field; ``error(fmt=function)`` hands the fields to a formatting function.
    """

    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __call__(self, target: T) -> T:
        """Attach this marker to a class, as a decorator."""
        return _attach(target, self)

    def __str__(self) -> str:
        parts = [repr(arg) for arg in self.args]
        parts.extend(f"{name}={value!r}" for name, value in self.kwargs.items())
        return f"#[error({', '.join(parts)})]"


def error(*args: Any, **kwargs: Any) -> ErrorAttr:
    """Create an ``error(...)`` marker from its arguments."""
    return ErrorAttr(tuple(args), dict(kwargs))


def as_display(value: Any) -> Any:
    """Return what a bare ``{field}`` placeholder shows for *value*.

    Paths are shown as their plain file-system string; everything else is
    shown as itself.
    """
    if isinstance(value, PurePath):
        return str(value)
    return value


def as_dyn_error(value: Any) -> BaseException:
    """Return *value* as an exception, or raise ``TypeError`` if it is none."""
    if isinstance(value, BaseException):
        return value
    raise TypeError(
        f"{type(value).__name__} is not an exception and cannot be an error source"
    )
"""Parsed ``error(...)``, ``source``, ``from`` and ``backtrace`` markers."""

from __future__ import annotations

import enum
import itertools
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from .markers import ErrorAttr, Marker, as_display
from .members import Member, unraw


class Trait(enum.Enum):
    """A formatting trait, keyed by the type character of a format spec."""

    DEBUG = "?"
    DISPLAY = ""
    OCTAL = "o"
    LOWER_HEX = "x"
    UPPER_HEX = "X"
    POINTER = "p"
    BINARY = "b"
    LOWER_EXP = "e"
    UPPER_EXP = "E"

    @classmethod
    def _for_char(cls, char: str) -> Trait:
        try:
            return cls(char)
        except ValueError:
            return cls.DISPLAY


class DeriveError(Exception):
    """An error class was declared with markers that do not fit together."""

    def __init__(self, message: str, origin: object = None) -> None:
        super().__init__(message)
        self.message = message
        self.origin = origin


@dataclass
class _Fmt:
    original: ErrorAttr
    function: Callable[..., Any]


class _FieldView:
    """Gives callable format arguments access to fields as ``f.name`` or ``f[0]``."""

    def __init__(self, values: Mapping[Any, Any]) -> None:
        self._values = values

    def __getattr__(self, name: str) -> Any:
        try:
            return self._values[Member(name)]
        except (KeyError, ValueError, TypeError):
            raise AttributeError(name) from None

    def __getitem__(self, index: int) -> Any:
        return self._values[Member(index)]


@dataclass
class DisplaySpec:
    """A display message with its arguments and what expanding it found."""

    original: ErrorAttr
    fmt: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    requires_fmt_machinery: bool = False
    has_bonus_display: bool = False
    infinite_recursive: bool = False
    implied_bounds: set[tuple[int, Trait]] = field(default_factory=set)
    bindings: list[tuple[str, Member, str]] = field(default_factory=list)

    def render(self, values: Mapping[Any, Any]) -> str:
        """Render the message.

        *values* maps each field's ``Member`` to its value; string keys name
        further values in scope, such as ``"self"``. Callable arguments are
        called with a view of the fields.
        """
        if not self.requires_fmt_machinery:
            return self.fmt
        from .template import format_value

        view = _FieldView(values)
        named: dict[str, Any] = {k: v for k, v in values.items() if isinstance(k, str)}
        named.update((name, _evaluate(v, view)) for name, v in self.kwargs.items())
        for name, member, wrap in self.bindings:
            try:
                value = values[member]
            except KeyError:
                raise DeriveError(f"no value for field `{member}`") from None
            named[name] = as_display(value) if wrap == "display" else value
        positional = [_evaluate(arg, view) for arg in self.args]
        return _render(self.fmt, positional, named, format_value)


def _evaluate(value: Any, view: _FieldView) -> Any:
    return value(view) if callable(value) else value


_PIECE = re.compile(r"\{\{|\}\}|\{([^{}]*)\}|[{}]")


def _split_spec(spec: str) -> tuple[Trait, str]:
    if spec.endswith("?"):
        rest = spec[:-1]
        if rest.endswith(("x", "X")):
            rest = rest[:-1]
        return Trait.DEBUG, rest
    if spec and spec[-1] in "oxXpbeE":
        return Trait(spec[-1]), spec[:-1]
    return Trait.DISPLAY, spec


def _render(fmt: str, positional: list[Any], named: dict[str, Any], format_value) -> str:
    implicit = itertools.count()

    def lookup(arg: str) -> Any:
        if not arg or (arg.isascii() and arg.isdigit()):
            index = next(implicit) if not arg else int(arg)
            if index >= len(positional):
                raise DeriveError(f"invalid reference to positional argument {index}")
            return positional[index]
        if arg in named:
            return named[arg]
        if unraw(arg) in named:
            return named[unraw(arg)]
        raise DeriveError(f"there is no argument named `{arg}`")

    def replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "{{":
            return "{"
        if token == "}}":
            return "}"
        inner = match.group(1)
        if inner is None:
            if token == "{":
                raise DeriveError(
                    "invalid format string: expected `}` but string was not terminated"
                )
            raise DeriveError("invalid format string: unmatched `}` found")
        arg, _, spec = inner.partition(":")
        value = lookup(arg)
        trait, rest = _split_spec(spec)
        return format_value(value, trait, rest)

    return _PIECE.sub(replace, fmt)


@dataclass
class Attrs:
    """The markers found on one class, variant or field."""

    display: DisplaySpec | None = None
    source: Marker | None = None
    backtrace: Marker | None = None
    from_: Marker | None = None
    transparent: ErrorAttr | None = None
    fmt: _Fmt | None = None


_EXPECTED = "expected one of: string literal, `transparent`, `fmt`"


def _parse_error_attribute(attrs: Attrs, attr: ErrorAttr) -> None:
    args, kwargs = attr.args, attr.kwargs
    if args and isinstance(args[0], str):
        extra = tuple(args[1:])
        display = DisplaySpec(
            original=attr,
            fmt=args[0],
            args=extra,
            kwargs=dict(kwargs),
            requires_fmt_machinery=bool(extra or kwargs),
        )
        if attrs.display is not None:
            raise DeriveError("only one #[error(...)] attribute is allowed", attr)
        attrs.display = display
        return
    if not args and not kwargs:
        raise DeriveError("expected attribute arguments in parentheses: #[error(...)]", attr)
    if not args and set(kwargs) == {"transparent"}:
        if kwargs["transparent"] is not True:
            raise DeriveError(_EXPECTED, attr)
        if attrs.transparent is not None:
            raise DeriveError("duplicate #[error(transparent)] attribute", attr)
        attrs.transparent = attr
        return
    if not args and set(kwargs) == {"fmt"}:
        function = kwargs["fmt"]
        if not callable(function):
            raise DeriveError("expected a formatting function in #[error(fmt = ...)]", attr)
        if attrs.fmt is not None:
            raise DeriveError("duplicate #[error(fmt = ...)] attribute", attr)
        attrs.fmt = _Fmt(attr, function)
        return
    raise DeriveError(_EXPECTED, attr)


def parse_attrs(items: Iterable[object]) -> Attrs:
    """Collect the markers among *items*; anything else is ignored."""
    attrs = Attrs()
    for item in items:
        if isinstance(item, ErrorAttr):
            _parse_error_attribute(attrs, item)
        elif item is Marker.SOURCE:
            if attrs.source is not None:
                raise DeriveError("duplicate #[source] attribute", item)
            attrs.source = item
        elif item is Marker.BACKTRACE:
            if attrs.backtrace is not None:
                raise DeriveError("duplicate #[backtrace] attribute", item)
            attrs.backtrace = item
        elif item is Marker.FROM:
            if attrs.from_ is not None:
                raise DeriveError("duplicate #[from] attribute", item)
            attrs.from_ = item
    return attrs
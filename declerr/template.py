"""Expanding field shorthands in messages, and formatting single values."""

from __future__ import annotations

import math
import operator
import re
import string
from decimal import Decimal
from pathlib import PurePath
from typing import Any, Sequence

from .attrs import DeriveError, DisplaySpec, Trait
from .members import ContainerKind, Member, unraw

_DIGITS = string.digits
_IDENT_START = string.ascii_letters + "_"
_IDENT_CHARS = _IDENT_START + string.digits
_U32_MAX = 2**32 - 1


def _take(read: str, allowed: str) -> tuple[str, str]:
    rest = read.lstrip(allowed)
    return read[: len(read) - len(rest)], rest


def expand_shorthand(
    display: DisplaySpec, fields: Sequence[Any], container: ContainerKind
) -> DisplaySpec:
    """Rewrite ``{field}`` placeholders into bindings of the fields' values.

    *fields* are objects with a ``member`` attribute. The spec is updated in
    place and returned.
    """
    user_named = {unraw(name) for name in display.kwargs}
    member_index = {f.member: i for i, f in enumerate(fields)}
    extra_positional_allowed = all(f.member.named for f in fields)

    read = display.fmt
    out: list[str] = []
    has_bonus_display = False
    infinite_recursive = False
    implied_bounds: set[tuple[int, Trait]] = set()
    bindings: list[tuple[str, Member, str]] = []
    seen: set[str] = set()

    if "}" in read:
        display.requires_fmt_machinery = True

    while (brace := read.find("{")) != -1:
        display.requires_fmt_machinery = True
        out.append(read[: brace + 1])
        read = read[brace + 1 :]
        if read.startswith("{"):
            out.append("{")
            read = read[1:]
            continue
        if not read:
            return display
        first = read[0]
        if first in _DIGITS:
            digits, read = _take(read, _DIGITS)
            if not extra_positional_allowed and display.args:
                raise DeriveError(
                    "ambiguous reference to positional arguments by number in a "
                    f"{container}; change this to a named argument",
                    display.original,
                )
            index = int(digits)
            if index > _U32_MAX:
                return display
            member = Member(index)
        elif first in _IDENT_START:
            name, read = _take(read, _IDENT_CHARS)
            if name == "_" or unraw(name) in user_named:
                out.append(name)
                continue
            member = Member(name)
        else:
            continue
        end = read.find("}")
        if end == -1:
            return display
        spec = read[:end]
        bonus = not spec
        if bonus:
            bound = Trait.DISPLAY
            has_bonus_display = True
        else:
            bound = Trait._for_char(spec[-1])
        infinite_recursive |= member.key == "self" and bound is Trait.DISPLAY
        position = member_index.get(member)
        if position is None:
            out.append(str(member))
            continue
        implied_bounds.add((position, bound))
        if bonus:
            prefix, wrap = "__display", "display"
        elif bound is Trait.POINTER:
            prefix, wrap = "__pointer", "pointer"
        else:
            prefix, wrap = "__field", "field"
        var = f"{prefix}_{member}" if member.named else f"{prefix}{member.key}"
        while unraw(var) in user_named:
            var = "_" + var
        out.append(var)
        if var in seen:
            continue
        seen.add(var)
        bindings.append((var, fields[position].member, wrap))

    out.append(read)
    display.fmt = "".join(out)
    display.has_bonus_display = has_bonus_display
    display.infinite_recursive = infinite_recursive
    display.implied_bounds = implied_bounds
    display.bindings = bindings
    return display


_SPEC = re.compile(
    r"(?:(?P<fill>.)?(?P<align>[<^>]))?(?P<sign>[+-])?(?P<alt>\#)?"
    r"(?P<zero>0)?(?P<width>\d+)?(?:\.(?P<prec>\d+))?",
    re.DOTALL,
)

_RADIX = {
    Trait.OCTAL: ("o", "0o"),
    Trait.LOWER_HEX: ("x", "0x"),
    Trait.UPPER_HEX: ("X", "0x"),
    Trait.BINARY: ("b", "0b"),
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _display(value: Any, precision: int | None) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        if precision is not None:
            return f"{value:.{precision}f}"
        return format(Decimal(repr(value)).normalize(), "f")
    if isinstance(value, PurePath):
        value = str(value)
    text = str(value)
    if precision is not None and isinstance(value, str):
        return text[:precision]
    return text


def _debug_str(text: str) -> str:
    escapes = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}
    parts = []
    for ch in text:
        if ch in escapes:
            parts.append(escapes[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)
    return '"' + "".join(parts) + '"'


def _debug(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return _display(value, None) if value is not None else "None"
    if isinstance(value, (str, PurePath)):
        return _debug_str(str(value))
    if isinstance(value, float):
        text = _display(value, None)
        if math.isfinite(value) and "." not in text:
            text += ".0"
        return text
    if isinstance(value, int):
        return str(value)
    if isinstance(value, list):
        return "[" + ", ".join(_debug(v) for v in value) + "]"
    if isinstance(value, tuple):
        inner = ", ".join(_debug(v) for v in value)
        return f"({inner},)" if len(value) == 1 else f"({inner})"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{_debug(k)}: {_debug(v)}" for k, v in value.items()) + "}"
    if isinstance(value, (set, frozenset)):
        return "{" + ", ".join(_debug(v) for v in value) + "}"
    return repr(value)


def _as_int(value: Any, trait: Trait) -> int:
    if isinstance(value, bool):
        raise TypeError(f"bool cannot be formatted as {trait.name}")
    try:
        return operator.index(value)
    except TypeError:
        raise TypeError(
            f"{type(value).__name__} cannot be formatted as {trait.name}"
        ) from None


def _exp(value: Any, precision: int | None, upper: bool) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            return _display(value, None)
        number = Decimal(repr(value))
    else:
        number = Decimal(_as_int(value, Trait.LOWER_EXP))
    if precision is not None:
        mantissa, _, exponent = format(number, f".{precision}e").lower().partition("e")
        power = int(exponent)
    else:
        sign, digits, exponent = number.normalize().as_tuple()
        text = "".join(map(str, digits))
        power = len(text) - 1 + int(exponent)
        mantissa = ("-" if sign else "") + text[0] + ("." + text[1:] if len(text) > 1 else "")
    return f"{mantissa}{'E' if upper else 'e'}{power}"


def format_value(value: Any, trait: Trait, spec: str = "") -> str:
    """Format *value* with *trait*; *spec* is fill, align, sign, ``#``, ``0``,
    width and precision, without the type character."""
    match = _SPEC.fullmatch(spec)
    if match is None:
        raise DeriveError(f"invalid format spec `{spec}`")
    precision = int(match["prec"]) if match["prec"] is not None else None
    prefix = ""
    if trait is Trait.DISPLAY:
        body, numeric = _display(value, precision), _is_number(value)
    elif trait is Trait.DEBUG:
        body, numeric = _debug(value), _is_number(value)
    elif trait in _RADIX:
        code, marker = _RADIX[trait]
        number = _as_int(value, trait)
        body = ("-" if number < 0 else "") + format(abs(number), code)
        prefix = marker if match["alt"] else ""
        numeric = True
    elif trait is Trait.POINTER:
        body, prefix, numeric = format(id(value), "x"), "0x", True
    else:
        body, numeric = _exp(value, precision, trait is Trait.UPPER_EXP), True

    negative = numeric and body.startswith("-")
    if negative:
        body = body[1:]
    sign = "-" if negative else ("+" if numeric and match["sign"] == "+" else "")
    head = sign + prefix
    width = int(match["width"] or 0)
    if match["zero"] and numeric:
        return head + body.rjust(width - len(head), "0")
    text = head + body
    pad = width - len(text)
    if pad <= 0:
        return text
    fill = match["fill"] or " "
    align = match["align"] or (">" if numeric else "<")
    if align == "<":
        return text + fill * pad
    if align == ">":
        return fill * pad + text
    left = pad // 2
    return fill * left + text + fill * (pad - left)
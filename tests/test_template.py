from dataclasses import dataclass
from pathlib import PurePosixPath

import pytest

from declerr.attrs import DeriveError, Trait, parse_attrs
from declerr.markers import error
from declerr.members import ContainerKind, Member
from declerr.template import expand_shorthand, format_value


@dataclass
class _Field:
    member: Member


def _expand(marker, keys, container=ContainerKind.STRUCT):
    display = parse_attrs([marker]).display
    expand_shorthand(display, [_Field(Member(k)) for k in keys], container)
    return display


def show(marker, values, container=ContainerKind.STRUCT):
    display = _expand(marker, list(values), container)
    return display.render({Member(k): v for k, v in values.items()})


def test_braced():
    assert show(error("braced error: {msg}"), {"msg": "T"}) == "braced error: T"


def test_tuple():
    assert show(error("tuple error: {0}"), {0: 0}, ContainerKind.TUPLE_STRUCT) == "tuple error: 0"


def test_constants_as_named_arguments():
    marker = error("{MSG}: {id:?} (code {CODE:?})", MSG="failed to do", CODE=9)
    assert show(marker, {"id": ""}) == 'failed to do: "" (code 9)'


def test_mixed():
    marker = error("a={a} :: b={} :: c={c} :: d={d}", 1, c=2, d=3)
    assert show(marker, {"a": 0, "d": 0}) == "a=0 :: b=1 :: c=2 :: d=3"


def test_ints():
    assert show(error("error {0}"), {0: 9, 1: 0}, ContainerKind.TUPLE_VARIANT) == "error 9"
    assert show(error("error {0}", "?"), {"v": 0}, ContainerKind.STRUCT_VARIANT) == "error ?"


def test_multiple_bound():
    assert show(error("0x{thing:x} 0x{thing:X}"), {"thing": 0xFF}) == "0xff 0xFF"


def test_escaped_field_name():
    assert show(error("braced raw error: {class}"), {"class_": "T"}) == "braced raw error: T"


def test_brace_escape():
    assert show(error("fn main() {{}}"), {}, ContainerKind.UNIT_STRUCT) == "fn main() {}"


def test_match_like_named_argument():
    def intro(f):
        return "there was an empty error" if f[1] is None else f"error occurred with {f[1]}"

    marker = error("{intro}: {0}", intro=intro)
    kind = ContainerKind.TUPLE_STRUCT
    assert show(marker, {0: "...", 1: 1}, kind) == "error occurred with 1: ..."
    assert show(marker, {0: "...", 1: None}, kind) == "there was an empty error: ..."


def test_rcc_shift():
    marker = error(
        "cannot shift {} by {maximum} or more bits (got {current})",
        lambda f: "left" if f.is_left else "right",
    )
    values = {"is_left": True, "maximum": 32, "current": 50}
    assert show(marker, values) == "cannot shift left by 32 or more bits (got 50)"


def test_paths():
    assert show(error("failed to read '{file}'"), {"file": PurePosixPath("/thiserror")}) == (
        "failed to read '/thiserror'"
    )
    marker = error("display:{0} debug:{0:?}")
    result = show(marker, {0: PurePosixPath("/thiserror")}, ContainerKind.TUPLE_VARIANT)
    assert result == 'display:/thiserror debug:"/thiserror"'


def test_self_debug():
    class Named:
        def __repr__(self):
            return "Error"

    display = _expand(error("error: {self:?}"), [], ContainerKind.UNIT_STRUCT)
    assert display.infinite_recursive is False
    assert display.render({"self": Named()}) == "error: Error"


def test_self_display_is_recursive():
    assert _expand(error("{self}"), [], ContainerKind.UNIT_STRUCT).infinite_recursive is True


def test_implied_bounds_and_bonus_display():
    display = _expand(error("{0} {1:?}"), [0, 1], ContainerKind.TUPLE_VARIANT)
    assert display.implied_bounds == {(0, Trait.DISPLAY), (1, Trait.DEBUG)}
    assert display.has_bonus_display is True


def test_repeated_field_binds_once_per_form():
    display = _expand(error("{0} {0:?} {0}"), [0], ContainerKind.TUPLE_STRUCT)
    assert len(display.bindings) == 2
    assert {member for _, member, _ in display.bindings} == {Member(0)}


def test_ambiguous_positional_reference():
    marker = error("invalid rdo_lookahead_frames {0} (expected < {})", 2**31 - 1)
    with pytest.raises(DeriveError, match="ambiguous reference to positional arguments") as info:
        _expand(marker, [0], ContainerKind.TUPLE_STRUCT)
    assert "tuple struct" in info.value.message


def test_underscore_placeholder_is_left_alone():
    display = _expand(error("{_}"), [], ContainerKind.UNIT_STRUCT)
    assert display.fmt == "{_}"
    with pytest.raises(DeriveError):
        display.render({})


def test_unterminated_placeholder_keeps_message():
    display = _expand(error("oops {"), [], ContainerKind.UNIT_STRUCT)
    assert display.fmt == "oops {"
    assert display.requires_fmt_machinery is True


def test_format_value_fixed_forms():
    assert format_value(255, Trait.LOWER_HEX, "#") == "0xff"
    assert format_value(1234.5, Trait.LOWER_EXP, "") == "1.2345e3"
    assert format_value("", Trait.DEBUG, "") == '""'
    assert format_value(False, Trait.DISPLAY, "") == "false"


def test_format_value_pointer_and_padding():
    thing = object()
    assert format_value(thing, Trait.POINTER, "") == hex(id(thing))
    centred = format_value("ab", Trait.DISPLAY, "^6")
    assert len(centred) == 6 and centred.strip() == "ab"
    padded = format_value(-5, Trait.DISPLAY, "05")
    assert len(padded) == 5 and int(padded) == -5


def test_format_value_errors():
    with pytest.raises(TypeError):
        format_value("abc", Trait.LOWER_HEX, "")
    with pytest.raises(DeriveError):
        format_value(1, Trait.DISPLAY, "??")
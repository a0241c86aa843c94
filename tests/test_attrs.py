import re

import pytest

from declerr.attrs import Attrs, DeriveError, parse_attrs
from declerr.markers import Marker, error
from declerr.members import Member


def test_plain_message_is_verbatim():
    display = parse_attrs([error("unit error")]).display
    assert display.fmt == "unit error"
    assert display.requires_fmt_machinery is False
    assert display.render({}) == "unit error"


def test_positional_argument():
    display = parse_attrs([error("1 + 1 = {}", 2)]).display
    assert display.requires_fmt_machinery is True
    assert display.render({}) == "1 + 1 = 2"


def test_callable_argument_reads_tuple_field():
    display = parse_attrs([error("!bool = {}", lambda f: not f[0])]).display
    assert display.render({Member(0): True}) == "!bool = false"


def test_callable_argument_reads_nested_attribute():
    class Inner:
        data = 0

    display = parse_attrs([error("{}", lambda f: f[0].data)]).display
    assert display.render({Member(0): Inner()}) == "0"


def test_named_keyword_argument():
    display = parse_attrs([error("error: {type}", type=1)]).display
    assert display.render({}) == "error: 1"


def test_transparent_and_fmt_and_field_markers():
    transparent = error(transparent=True)
    assert parse_attrs([transparent]).transparent is transparent

    def unit(formatter):
        return "unit="

    assert parse_attrs([error(fmt=unit)]).fmt.function is unit

    attrs = parse_attrs([Marker.SOURCE, Marker.FROM, Marker.BACKTRACE])
    assert (attrs.source, attrs.from_, attrs.backtrace) == (
        Marker.SOURCE,
        Marker.FROM,
        Marker.BACKTRACE,
    )


def test_other_items_are_ignored():
    assert parse_attrs(["doc", 3]) == Attrs()


@pytest.mark.parametrize(
    "items, message",
    [
        ([error("..."), error("...")], "only one #[error(...)] attribute is allowed"),
        ([error(transparent=True), error(transparent=True)], "duplicate #[error(transparent)] attribute"),
        ([error(fmt=oct), error(fmt=hex)], "duplicate #[error(fmt = ...)] attribute"),
        ([Marker.SOURCE, Marker.SOURCE], "duplicate #[source] attribute"),
        ([Marker.BACKTRACE, Marker.BACKTRACE], "duplicate #[backtrace] attribute"),
        ([Marker.FROM, Marker.FROM], "duplicate #[from] attribute"),
    ],
)
def test_duplicates(items, message):
    with pytest.raises(DeriveError, match=re.escape(message)) as info:
        parse_attrs(items)
    assert info.value.origin is items[1]


@pytest.mark.parametrize("marker", [error(), error(42), error(transparent=False), error(fmt=3)])
def test_malformed_error_marker(marker):
    with pytest.raises(DeriveError) as info:
        parse_attrs([marker])
    assert info.value.origin is marker


@pytest.mark.parametrize("marker", [error("a } b", 1), error("a { b", 1), error("{} {}", 1)])
def test_bad_templates_fail_to_render(marker):
    with pytest.raises(DeriveError):
        parse_attrs([marker]).display.render({})
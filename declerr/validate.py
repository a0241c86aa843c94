"""Checks that the markers of an error class fit together."""

from __future__ import annotations

from typing import Sequence

from .attrs import Attrs, DeriveError
from .model import EnumInput, Field, StructInput, Variant


def validate(input: StructInput | EnumInput) -> None:
    """Raise ``DeriveError`` if the declaration's markers are inconsistent."""
    if isinstance(input, StructInput):
        _validate_struct(input)
    elif isinstance(input, EnumInput):
        _validate_enum(input)
    else:
        raise TypeError(f"cannot validate {input!r}")


def _first_source(fields: Sequence[Field]):
    return next((f.attrs.source for f in fields if f.attrs.source is not None), None)


def _validate_struct(input: StructInput) -> None:
    check_non_field_attrs(input.attrs)
    transparent = input.attrs.transparent
    if transparent is not None:
        if len(input.fields) != 1:
            raise DeriveError("#[error(transparent)] requires exactly one field", transparent)
        source = _first_source(input.fields)
        if source is not None:
            raise DeriveError("transparent error struct can't contain #[source]", source)
    if input.attrs.fmt is not None:
        raise DeriveError(
            "#[error(fmt = ...)] is only supported in enums; "
            "for a struct, handwrite your own Display impl",
            input.attrs.fmt.original,
        )
    check_field_attrs(input.fields)
    for field in input.fields:
        _validate_field(field)


def _validate_enum(input: EnumInput) -> None:
    check_non_field_attrs(input.attrs)
    has_display = input.has_display()
    for variant in input.variants:
        _validate_variant(variant)
        if (
            has_display
            and variant.attrs.display is None
            and variant.attrs.transparent is None
            and variant.attrs.fmt is None
        ):
            raise DeriveError(
                'missing #[error("...")] display attribute', variant.original
            )


def _validate_variant(variant: Variant) -> None:
    check_non_field_attrs(variant.attrs)
    if variant.attrs.transparent is not None:
        if len(variant.fields) != 1:
            raise DeriveError(
                "#[error(transparent)] requires exactly one field", variant.original
            )
        source = _first_source(variant.fields)
        if source is not None:
            raise DeriveError("transparent variant can't contain #[source]", source)
    check_field_attrs(variant.fields)
    for field in variant.fields:
        _validate_field(field)


def _validate_field(field: Field) -> None:
    unexpected = None
    if field.attrs.display is not None:
        unexpected = field.attrs.display.original
    elif field.attrs.fmt is not None:
        unexpected = field.attrs.fmt.original
    if unexpected is not None:
        raise DeriveError(
            "not expected here; the #[error(...)] attribute belongs on top of "
            "a struct or an enum variant",
            unexpected,
        )


def check_non_field_attrs(attrs: Attrs) -> None:
    """Reject markers that belong on fields, and conflicting display markers."""
    if attrs.from_ is not None:
        raise DeriveError(
            "not expected here; the #[from] attribute belongs on a specific field",
            attrs.from_,
        )
    if attrs.source is not None:
        raise DeriveError(
            "not expected here; the #[source] attribute belongs on a specific field",
            attrs.source,
        )
    if attrs.backtrace is not None:
        raise DeriveError(
            "not expected here; the #[backtrace] attribute belongs on a specific field",
            attrs.backtrace,
        )
    if attrs.transparent is not None:
        if attrs.display is not None:
            raise DeriveError(
                "cannot have both #[error(transparent)] and a display attribute",
                attrs.display.original,
            )
        if attrs.fmt is not None:
            raise DeriveError(
                "cannot have both #[error(transparent)] and #[error(fmt = ...)]",
                attrs.fmt.original,
            )
    elif attrs.display is not None and attrs.fmt is not None:
        raise DeriveError(
            "cannot have both #[error(fmt = ...)] and a format arguments attribute",
            attrs.display.original,
        )


def check_field_attrs(fields: Sequence[Field]) -> None:
    """Check the ``from``, ``source`` and ``backtrace`` markers across fields."""
    from_field: Field | None = None
    source_field: Field | None = None
    backtrace_field: Field | None = None
    has_backtrace = False
    for field in fields:
        if field.attrs.from_ is not None:
            if from_field is not None:
                raise DeriveError("duplicate #[from] attribute", field.attrs.from_)
            from_field = field
        if field.attrs.source is not None:
            if source_field is not None:
                raise DeriveError("duplicate #[source] attribute", field.attrs.source)
            source_field = field
        if field.attrs.backtrace is not None:
            if backtrace_field is not None:
                raise DeriveError("duplicate #[backtrace] attribute", field.attrs.backtrace)
            backtrace_field = field
            has_backtrace = True
        if field.attrs.transparent is not None:
            raise DeriveError(
                "#[error(transparent)] needs to go outside the enum or struct, "
                "not on an individual field",
                field.attrs.transparent,
            )
        has_backtrace |= field.is_backtrace()
    if from_field is not None and source_field is not None:
        if from_field.member != source_field.member:
            raise DeriveError(
                "#[from] is only supported on the source field, not any other field",
                from_field.attrs.from_,
            )
    if from_field is not None:
        if backtrace_field is not None:
            max_expected = 1 + int(from_field.member != backtrace_field.member)
        else:
            max_expected = 1 + int(has_backtrace)
        if len(fields) > max_expected:
            raise DeriveError(
                "deriving From requires no fields other than source and backtrace",
                from_field.attrs.from_,
            )
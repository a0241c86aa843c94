"""The shape of an error class: its fields, variants and their markers.

A class with annotated fields is a struct. Fields named ``_0``, ``_1``, ...
in order make it a tuple struct, and a class without fields is a unit
struct. A class whose body holds nested classes and no fields of its own
is an enum, each nested class being one variant in the order written. An
enum without variants sets ``__enum__ = True``.

Markers on a class or variant are attached with decorators; markers on a
field go in its ``typing.Annotated`` metadata. Annotations written as
strings are taken as they are written.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass, replace
from typing import Annotated, Any, ClassVar, Sequence

from .attrs import Attrs, DisplaySpec, parse_attrs
from .markers import _attached
from .members import ContainerKind, Member
from .template import expand_shorthand


@dataclass(eq=False)
class Field:
    """One field: its markers, how it is referred to, and its type."""

    original: Any
    attrs: Attrs
    member: Member
    ty: Any
    contains_generic: bool = False

    def is_backtrace(self) -> bool:
        """Whether the field's type is a plain type named ``Backtrace``."""
        return _type_is_backtrace(self.ty)


@dataclass(eq=False)
class Variant:
    """One variant of an enum-shaped error class."""

    original: type
    attrs: Attrs
    ident: str
    fields: list[Field]
    kind: ContainerKind

    def from_field(self) -> Field | None:
        return from_field(self.fields)

    def source_field(self) -> Field | None:
        return source_field(self.fields)

    def backtrace_field(self) -> Field | None:
        return backtrace_field(self.fields)

    def distinct_backtrace_field(self) -> Field | None:
        backtrace = self.backtrace_field()
        if backtrace is None:
            return None
        return distinct_backtrace_field(backtrace, self.from_field())


@dataclass(eq=False)
class StructInput:
    """A struct-shaped error class."""

    original: type
    attrs: Attrs
    ident: str
    generics: tuple[Any, ...]
    fields: list[Field]
    kind: ContainerKind

    def from_field(self) -> Field | None:
        return from_field(self.fields)

    def source_field(self) -> Field | None:
        return source_field(self.fields)

    def backtrace_field(self) -> Field | None:
        return backtrace_field(self.fields)

    def distinct_backtrace_field(self) -> Field | None:
        backtrace = self.backtrace_field()
        if backtrace is None:
            return None
        return distinct_backtrace_field(backtrace, self.from_field())


@dataclass(eq=False)
class EnumInput:
    """An enum-shaped error class."""

    original: type
    attrs: Attrs
    ident: str
    generics: tuple[Any, ...]
    variants: list[Variant]

    def has_source(self) -> bool:
        """Whether any variant has a source or is transparent."""
        return any(
            v.source_field() is not None or v.attrs.transparent is not None
            for v in self.variants
        )

    def has_backtrace(self) -> bool:
        """Whether any variant has a backtrace field."""
        return any(v.backtrace_field() is not None for v in self.variants)

    def has_display(self) -> bool:
        """Whether a display is declared anywhere in the enum."""
        return (
            self.attrs.display is not None
            or self.attrs.transparent is not None
            or self.attrs.fmt is not None
            or any(
                v.attrs.display is not None or v.attrs.fmt is not None
                for v in self.variants
            )
            or all(v.attrs.transparent is not None for v in self.variants)
        )


def from_field(fields: Sequence[Field]) -> Field | None:
    """Return the first field marked ``from``."""
    return next((f for f in fields if f.attrs.from_ is not None), None)


def source_field(fields: Sequence[Field]) -> Field | None:
    """Return the field marked ``from`` or ``source``, else one named ``source``."""
    marked = next(
        (f for f in fields if f.attrs.from_ is not None or f.attrs.source is not None),
        None,
    )
    if marked is not None:
        return marked
    # An escaped name such as ``source_`` deliberately does not count.
    return next((f for f in fields if f.member.key == "source"), None)


def backtrace_field(fields: Sequence[Field]) -> Field | None:
    """Return the field marked ``backtrace``, else the first of a Backtrace type."""
    marked = next((f for f in fields if f.attrs.backtrace is not None), None)
    if marked is not None:
        return marked
    return next((f for f in fields if f.is_backtrace()), None)


def distinct_backtrace_field(
    backtrace: Field, from_field: Field | None
) -> Field | None:
    """Return *backtrace* unless it is the same field as *from_field*."""
    if from_field is not None and from_field.member == backtrace.member:
        return None
    return backtrace


def _type_is_backtrace(ty: Any) -> bool:
    if isinstance(ty, str):
        return ty.rsplit(".", 1)[-1] == "Backtrace"
    if typing.get_origin(ty) is not None or typing.get_args(ty):
        return False
    return isinstance(ty, type) and ty.__name__ == "Backtrace"


def _intersects(scope: tuple[Any, ...], ty: Any) -> bool:
    if not scope:
        return False
    if isinstance(ty, typing.TypeVar):
        return ty in scope
    if isinstance(ty, (list, tuple)):
        return any(_intersects(scope, item) for item in ty)
    return any(_intersects(scope, arg) for arg in typing.get_args(ty))


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or typing.get_origin(annotation) is ClassVar


def _own_annotations(cls: type) -> dict[str, Any]:
    hints = getattr(cls, "__annotations__", None) or {}
    return {name: hint for name, hint in hints.items() if not _is_classvar(hint)}


def _variant_classes(cls: type) -> list[type]:
    prefix = cls.__qualname__ + "."
    return [
        value
        for value in vars(cls).values()
        if isinstance(value, type) and value.__qualname__ == prefix + value.__name__
    ]


def _is_enum(cls: type) -> bool:
    if vars(cls).get("__enum__") is True:
        return True
    return bool(_variant_classes(cls)) and not _own_annotations(cls)


def _split_annotation(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    if typing.get_origin(annotation) is Annotated:
        inner, *metadata = typing.get_args(annotation)
        return inner, tuple(metadata)
    return annotation, ()


def _fields_of(cls: type, scope: tuple[Any, ...]) -> tuple[list[Field], str]:
    annotations = _own_annotations(cls)
    names = list(annotations)
    if not names:
        shape = "unit"
    elif names == [f"_{i}" for i in range(len(names))]:
        shape = "tuple"
    else:
        shape = "named"
    fields = []
    for i, (name, annotation) in enumerate(annotations.items()):
        ty, metadata = _split_annotation(annotation)
        fields.append(
            Field(
                original=annotation,
                attrs=parse_attrs(metadata),
                member=Member(i) if shape == "tuple" else Member(name),
                ty=ty,
                contains_generic=_intersects(scope, ty),
            )
        )
    return fields, shape


_STRUCT_KINDS = {
    "named": ContainerKind.STRUCT,
    "tuple": ContainerKind.TUPLE_STRUCT,
    "unit": ContainerKind.UNIT_STRUCT,
}
_VARIANT_KINDS = {
    "named": ContainerKind.STRUCT_VARIANT,
    "tuple": ContainerKind.TUPLE_VARIANT,
    "unit": ContainerKind.UNIT_VARIANT,
}


def _copy_display(display: DisplaySpec | None) -> DisplaySpec | None:
    if display is None:
        return None
    return replace(
        display,
        kwargs=dict(display.kwargs),
        implied_bounds=set(display.implied_bounds),
        bindings=list(display.bindings),
    )


def _struct_from_class(cls: type, generics: tuple[Any, ...]) -> StructInput:
    attrs = parse_attrs(_attached(cls))
    fields, shape = _fields_of(cls, generics)
    kind = _STRUCT_KINDS[shape]
    if attrs.display is not None:
        expand_shorthand(attrs.display, fields, kind)
    return StructInput(cls, attrs, cls.__name__, generics, fields, kind)


def _enum_from_class(cls: type, generics: tuple[Any, ...]) -> EnumInput:
    attrs = parse_attrs(_attached(cls))
    variants = []
    for variant_cls in _variant_classes(cls):
        variant_attrs = parse_attrs(_attached(variant_cls))
        fields, shape = _fields_of(variant_cls, generics)
        kind = _VARIANT_KINDS[shape]
        if (
            variant_attrs.display is None
            and variant_attrs.transparent is None
            and variant_attrs.fmt is None
        ):
            variant_attrs.display = _copy_display(attrs.display)
            variant_attrs.transparent = attrs.transparent
            variant_attrs.fmt = attrs.fmt
        if variant_attrs.display is not None:
            expand_shorthand(variant_attrs.display, fields, kind)
        variants.append(
            Variant(variant_cls, variant_attrs, variant_cls.__name__, fields, kind)
        )
    return EnumInput(cls, attrs, cls.__name__, generics, variants)


def input_from_class(cls: type) -> StructInput | EnumInput:
    """Read the markers and fields of an error class declaration."""
    if not isinstance(cls, type):
        raise TypeError(f"{cls!r} is not a class")
    generics = tuple(getattr(cls, "__parameters__", ()) or ())
    if _is_enum(cls):
        return _enum_from_class(cls, generics)
    return _struct_from_class(cls, generics)
"""Names of the fields of an error class and the kinds of containers."""

from __future__ import annotations

import enum
import keyword
from dataclasses import dataclass


def unraw(name: str) -> str:
    """Strip the single trailing underscore that escapes a field name.

    ``class_`` becomes ``class`` and ``source_`` becomes ``source``; names
    without an escape, and names ending in more than one underscore, are
    returned unchanged.
    """
    if len(name) > 1 and name.endswith("_") and not name.endswith("__"):
        return name[:-1]
    return name


class ContainerKind(enum.Enum):
    """The shape of the class or variant that holds a set of fields."""

    STRUCT = "struct"
    TUPLE_STRUCT = "tuple struct"
    UNIT_STRUCT = "unit struct"
    STRUCT_VARIANT = "struct variant"
    TUPLE_VARIANT = "tuple variant"
    UNIT_VARIANT = "unit variant"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, eq=False)
class Member:
    """A field reference: a name for named fields, an index for positional ones.

    Named members compare equal when their unescaped names match, so
    ``Member("class_") == Member("class")``. The ``key`` attribute keeps the
    name exactly as written.
    """

    key: str | int

    def __post_init__(self) -> None:
        if isinstance(self.key, bool):
            raise TypeError("a member is a field name or a non-negative index")
        if isinstance(self.key, int):
            if self.key < 0:
                raise ValueError(f"negative field index {self.key}")
        elif isinstance(self.key, str):
            if not self.key.isidentifier():
                raise ValueError(f"{self.key!r} is not a field name")
        else:
            raise TypeError("a member is a field name or a non-negative index")

    @property
    def named(self) -> bool:
        """Whether this member refers to a named field."""
        return isinstance(self.key, str)

    def __str__(self) -> str:
        if isinstance(self.key, str):
            return unraw(self.key)
        return str(self.key)

    def local_name(self) -> str:
        """Return a name under which the field's value can be bound locally."""
        if isinstance(self.key, int):
            return f"_{self.key}"
        name = unraw(self.key)
        if keyword.iskeyword(name):
            return f"{name}_"
        return name

    def _identity(self) -> tuple[bool, str | int]:
        if isinstance(self.key, str):
            return (True, unraw(self.key))
        return (False, self.key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Member):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __repr__(self) -> str:
        return f"Member({self.key!r})"
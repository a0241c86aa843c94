# declerr

`declerr` reads error types that are declared with markers, checks that the
markers fit together, and renders their display messages.

You declare an error as a plain class. You attach an `error(...)` marker to the
class, or to a variant, as a decorator. Field markers go in
`typing.Annotated` metadata. You then:

1. read the declaration with `declerr.model.input_from_class`;
2. check it with `declerr.validate.validate`, which raises
   `declerr.attrs.DeriveError` for inconsistent markers;
3. render a message with `DisplaySpec.render`, passing the field values.

The package uses only the standard library. It needs Python 3.10 or later.

## Installing

```
pip install declerr
```

## Declaring errors

### Struct-shaped errors

A class with annotated fields is a struct. If its fields are named `_0`, `_1`,
... in order, it is a tuple struct. A class without fields is a unit struct.

```python
from typing import Annotated

from declerr.markers import Marker, error


@error("failed to read {path}: {code:?}")
class ReadError:
    path: str
    code: int


@error("data store disconnected")
class Disconnect:
    _0: Annotated[OSError, Marker.FROM]
```

### Enum-shaped errors

A class whose body holds nested classes, and no fields of its own, is an enum.
Each nested class is one variant, in the order it is written. If a variant has
no `error(...)`, `transparent` or `fmt` marker of its own, it takes the enum's
marker. An enum with no variants sets `__enum__ = True`.

```python
@error("{0}")
class StoreError:
    class Redaction:
        _0: str

    @error("unknown data store error")
    class Unknown:
        pass
```

Markers are read from the evaluated annotations. When annotations are kept as
strings, for example under `from __future__ import annotations`, they are taken
exactly as written, and field markers inside `Annotated[...]` are not seen.

### Markers

- `error("template", *args, **named)`: a display message. Extra positional
  arguments fill `{}` placeholders. Named arguments fill `{name}` placeholders
  and take precedence over fields of the same name. A callable argument is
  called with a view of the fields, so it can read `f.name` or `f[0]`.
- `error(transparent=True)`: marks the error as a pass-through to its only
  field.
- `error(fmt=function)`: names a formatting function for the variant.
- `Marker.SOURCE`, `Marker.FROM`, `Marker.BACKTRACE`: field markers.
  `Marker.FROM` also makes the field the source. A field named `source` is the
  source even without a marker. A field whose type is a class named `Backtrace`
  counts as a backtrace field.

A trailing underscore escapes a field name: `class_` is referred to as
`{class}` in a template (see `declerr.members.unraw`).

## Reading, checking and rendering

```python
from declerr.members import Member
from declerr.model import input_from_class
from declerr.validate import validate

decl = input_from_class(ReadError)
validate(decl)
values = {field.member: value for field, value in zip(decl.fields, ["a.txt", 2])}
print(decl.attrs.display.render(values))   # failed to read a.txt: 2

store = input_from_class(StoreError)
validate(store)
redaction = store.variants[0]
print(redaction.attrs.display.render({Member(0): "key"}))   # key
```

Single values can be formatted with `declerr.template.format_value`:

```python
from declerr.attrs import Trait
from declerr.template import format_value

format_value(255, Trait.LOWER_HEX, "#06")   # '0x00ff'
format_value("", Trait.DEBUG)               # '""'
format_value(True, Trait.DISPLAY)           # 'true'
```

The format spec supports fill and alignment (`<`, `^`, `>`), `+`, `#`, `0`,
width and precision. The type character chooses the `Trait`: `?` debug,
`o` octal, `x`/`X` hex, `b` binary, `e`/`E` exponent, `p` pointer, and none
for display.

## Modules

| Module | Contents |
| --- | --- |
| `declerr.markers` | `error`, `ErrorAttr`, `Marker`, `as_display`, `as_dyn_error` |
| `declerr.members` | `Member`, `ContainerKind`, `unraw` |
| `declerr.attrs` | `parse_attrs`, `Attrs`, `DisplaySpec`, `Trait`, `DeriveError` |
| `declerr.template` | `expand_shorthand`, `format_value` |
| `declerr.model` | `input_from_class`, `StructInput`, `EnumInput`, `Variant`, `Field`, `from_field`, `source_field`, `backtrace_field`, `distinct_backtrace_field` |
| `declerr.validate` | `validate`, `check_non_field_attrs`, `check_field_attrs` |

## What `validate` rejects

`DeriveError` is raised when, for example:

- a container has two `error(...)` messages, two `transparent` markers or two
  `fmt` markers (this is reported when the markers are read);
- `transparent` is combined with a message or with `fmt`, or `fmt` is combined
  with a message;
- a transparent struct or variant does not have exactly one field, or marks a
  field as `SOURCE`;
- `fmt` is used on a struct-shaped error;
- a `FROM` field is not the source field;
- a container with a `FROM` field has fields other than the source and a
  backtrace;
- two fields are both marked `SOURCE`, `FROM` or `BACKTRACE`;
- an `error(...)` marker is placed on a field, or `SOURCE`, `FROM` or
  `BACKTRACE` is placed on a class or variant;
- an enum declares a message somewhere, but a variant has none.

## What the package does not do

`declerr` stops at reading, checking and rendering declarations. It does not
turn a declared class into a working exception type. No `__str__` is added, no
source is linked as `__cause__`, no constructor from a wrapped error is
generated, and there is no backtrace lookup. Transparent errors and `fmt`
functions are recorded and checked, but `DisplaySpec.render` does not forward
to the inner error or call the function.

## Running the tests

```
pip install -e ".[test]"
pytest
```
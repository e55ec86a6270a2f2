# properties.py
# Property descriptors and the record capability check.
#
# A record type declares its JSON shape through a zero-argument callable
# named `json_properties` that returns an ordered sequence of Property
# descriptors:
#
#     class Seed:
#         def __init__(self):
#             self.radius = 0.0
#
#         @staticmethod
#         def json_properties():
#             return (property_("radius", Float32),)
#
# Declaration order drives serialization order. Parsing looks keys up by
# name only, so keys may arrive in any order.

import struct
import typing
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

PROPERTIES_HOOK = "json_properties"


# ---------------------------------------------------------------------------
# FIELD KIND MARKERS
# ---------------------------------------------------------------------------
class Unsigned:
    """Field kind for a non-negative integer. Values are plain ints."""


class Float32:
    """Field kind for a single-precision float. Values are plain floats."""


SCALAR_KINDS = (str, int, Unsigned, float, Float32)


def to_float32(value: float) -> float:
    """Round a Python float through IEEE-754 binary32."""
    return struct.unpack("<f", struct.pack("<f", value))[0]


def sequence_item_kind(kind) -> Optional[Any]:
    """Element kind of `List[T]` / `list[T]`, or None when `kind` is not a sequence."""
    if typing.get_origin(kind) is list:
        args = typing.get_args(kind)
        if len(args) == 1:
            return args[0]
    return None


# ---------------------------------------------------------------------------
# PROPERTY DESCRIPTOR
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Property:
    """Immutable binding between a JSON key and a record attribute."""

    name: str
    kind: Any
    attr: str

    def get(self, record):
        return getattr(record, self.attr)

    def set(self, record, value) -> None:
        setattr(record, self.attr, value)


def property_(name: str, kind, attr: Optional[str] = None) -> Property:
    """Declare a property. `attr` defaults to the JSON name."""
    return Property(name=name, kind=kind, attr=attr if attr is not None else name)


# ---------------------------------------------------------------------------
# REFLECTION PREDICATE
# ---------------------------------------------------------------------------
def is_record(cls) -> bool:
    return isinstance(cls, type) and callable(getattr(cls, PROPERTIES_HOOK, None))


def properties_of(cls) -> Tuple[Property, ...]:
    return tuple(getattr(cls, PROPERTIES_HOOK)())


def property_index(cls) -> Dict[str, Property]:
    """Name lookup for the parser. The first descriptor declared under a name wins."""
    index: Dict[str, Property] = {}
    for prop in properties_of(cls):
        index.setdefault(prop.name, prop)
    return index


def check_record_type(cls) -> None:
    """
    Validate a record type and every type reachable from it.

    Runs once per top-level call, before any input is consumed. Raises
    TypeError on a missing `json_properties`, a non-Property entry, an
    unsupported field kind, a name that needs JSON escaping or a duplicate
    property name.
    """
    pending = [cls]
    seen = set()
    while pending:
        current = pending.pop()
        if not is_record(current):
            raise TypeError(
                f"{current!r} must define a '{PROPERTIES_HOOK}' static method "
                f"to be parsed or serialized"
            )
        if current in seen:
            continue
        seen.add(current)
        names = set()
        for prop in properties_of(current):
            if not isinstance(prop, Property):
                raise TypeError(f"{current.__name__}.{PROPERTIES_HOOK} returned {prop!r}, not a Property")
            if any(c in '"\\' or c < " " for c in prop.name):
                # keys are matched raw, so a name must read back unescaped
                raise TypeError(f"property name {prop.name!r} in {current.__name__} needs JSON escaping")
            if prop.name in names:
                raise TypeError(f"duplicate property name {prop.name!r} in {current.__name__}")
            names.add(prop.name)
            pending.extend(_nested_records(current, prop))


def _nested_records(owner, prop: Property):
    kind = prop.kind
    while True:
        item = sequence_item_kind(kind)
        if item is None:
            break
        kind = item
    if kind in SCALAR_KINDS:
        return []
    if is_record(kind):
        return [kind]
    raise TypeError(f"unsupported kind {kind!r} for property {prop.name!r} of {owner.__name__}")

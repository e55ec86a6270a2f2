# serializer.py
# Compact JSON writer for declared record types.
#
# Mirrors the parser: the same kind dispatch, members written in declaration
# order, no inserted whitespace. Output always parses back into an equal
# record when the property list has no duplicate names.

import io
import logging
import math

from .properties import (
    Float32,
    Unsigned,
    check_record_type,
    properties_of,
    sequence_item_kind,
    to_float32,
)

log = logging.getLogger(__name__)

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def encode_string(text: str) -> str:
    """Quoted JSON form of `text`. Non-ASCII characters are written verbatim."""
    out = ['"']
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch < " ":
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


# ---------------------------------------------------------------------------
# NUMBERS
# ---------------------------------------------------------------------------
def _check_int(value, kind) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an int, got {type(value).__name__}")
    if kind is Unsigned and value < 0:
        raise ValueError(f"negative value {value} for an Unsigned field")
    return value


def _check_float(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a float, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{value!r} cannot be represented in JSON")
    return value


def format_double(value) -> str:
    return repr(_check_float(value))


def format_float32(value) -> str:
    """Shortest %g text that reads back as the same single-precision value."""
    value = to_float32(_check_float(value))
    for precision in range(6, 10):
        text = "%.*g" % (precision, value)
        if to_float32(float(text)) == value:
            return text
    return repr(value)


_SCALAR_WRITERS = {
    int: lambda v: str(_check_int(v, int)),
    Unsigned: lambda v: str(_check_int(v, Unsigned)),
    float: format_double,
    Float32: format_float32,
}


# ---------------------------------------------------------------------------
# VALUE DISPATCH
# ---------------------------------------------------------------------------
def _write_value(sink, value, kind) -> None:
    if kind is str:
        if not isinstance(value, str):
            raise TypeError(f"expected a str, got {type(value).__name__}")
        sink.write(encode_string(value))
        return
    writer = _SCALAR_WRITERS.get(kind)
    if writer is not None:
        sink.write(writer(value))
        return
    item_kind = sequence_item_kind(kind)
    if item_kind is not None:
        _write_sequence(sink, value, item_kind)
        return
    _write_record(sink, value, kind)


def _write_sequence(sink, items, item_kind) -> None:
    if not isinstance(items, (list, tuple)):
        raise TypeError(f"expected a list, got {type(items).__name__}")
    sink.write("[")
    separator = ""
    for item in items:
        sink.write(separator)
        separator = ","
        _write_value(sink, item, item_kind)
    sink.write("]")


def _write_record(sink, record, cls) -> None:
    if not isinstance(record, cls):
        raise TypeError(f"expected a {cls.__name__}, got {type(record).__name__}")
    sink.write("{")
    separator = ""
    for prop in properties_of(cls):
        sink.write(separator)
        separator = ","
        sink.write(encode_string(prop.name))
        sink.write(":")
        _write_value(sink, prop.get(record), prop.kind)
    sink.write("}")


# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def serialize(record, sink) -> None:
    """Write `record` as compact JSON to anything with a `write(str)` method."""
    cls = type(record)
    check_record_type(cls)
    log.debug("serializing %s", cls.__name__)
    _write_record(sink, record, cls)


def dumps(record) -> str:
    buf = io.StringIO()
    serialize(record, buf)
    return buf.getvalue()

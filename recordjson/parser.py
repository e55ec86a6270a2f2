# parser.py
# Recursive-descent parser from JSON text into declared record types.
#
# =============================================================================
#  PARSER IMPLEMENTATION: TYPE-DIRECTED RECURSIVE DESCENT
# =============================================================================
#
# The parser never builds a generic JSON tree. The static kind of the value
# it is about to read (record, List[T], str, int, Unsigned, float, Float32)
# picks the grammar, and for records the object keys are resolved against
# the type's property list to pick the kind of each member value.
#
# Records are read by a three-state machine:
#
#   DEFAULT   skip whitespace; '"' starts a key, '}' ends the object
#   KEY_NAME  read the raw key up to its closing quote, then require ':'
#   VALUE     resolve the key, parse the member value into the record, then
#             require ',' (consumed) or '}' (left for DEFAULT to consume)
#
# Because ',' is accepted right before the closing delimiter, a trailing
# comma is tolerated in both objects and arrays.
#
# The record under construction is never handed out half-built: any error
# propagates straight up through every level and the top-level call raises.
# =============================================================================

import enum
import logging
import math
from typing import Optional

from .errors import ParseError, UnexpectedCharacter, UnexpectedPropertyName
from .lexer import (
    Cursor,
    decode_string,
    is_element_separator,
    is_whitespace,
    scan_float,
    scan_signed,
    scan_string_body,
    scan_unsigned,
    skip_whitespace,
)
from .properties import (
    Float32,
    Unsigned,
    check_record_type,
    property_index,
    sequence_item_kind,
    to_float32,
)

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = 32  # records and arrays count one level each


class _State(enum.Enum):
    DEFAULT = enum.auto()
    KEY_NAME = enum.auto()
    VALUE = enum.auto()


# ---------------------------------------------------------------------------
# SCALARS
# ---------------------------------------------------------------------------
def _parse_string(cursor: Cursor) -> str:
    if skip_whitespace(cursor) != '"':
        _unexpected(cursor)
    cursor.advance()
    body_start = cursor.pos
    return decode_string(scan_string_body(cursor), body_start)


def _to_int(text: str, start: int) -> int:
    try:
        return int(text)
    except ValueError:
        raise ParseError(f"invalid number {text[:32]!r}", start) from None


def _parse_int(cursor: Cursor) -> int:
    skip_whitespace(cursor)
    start = cursor.pos
    return _to_int(scan_signed(cursor), start)


def _parse_unsigned(cursor: Cursor) -> int:
    skip_whitespace(cursor)
    start = cursor.pos
    return _to_int(scan_unsigned(cursor), start)


def _parse_double(cursor: Cursor) -> float:
    skip_whitespace(cursor)
    start = cursor.pos
    text = scan_float(cursor)
    try:
        value = float(text)
    except ValueError:
        raise ParseError(f"invalid number {text!r}", start) from None
    if math.isinf(value):
        raise ParseError(f"number {text!r} out of range", start)
    return value


def _parse_float32(cursor: Cursor) -> float:
    skip_whitespace(cursor)
    start = cursor.pos
    value = _parse_double(cursor)
    try:
        return to_float32(value)
    except OverflowError:
        raise ParseError(f"number {value!r} out of range for single precision", start) from None


_SCALAR_PARSERS = {
    str: _parse_string,
    int: _parse_int,
    Unsigned: _parse_unsigned,
    float: _parse_double,
    Float32: _parse_float32,
}


def _unexpected(cursor: Cursor):
    raise UnexpectedCharacter(cursor.peek(), cursor.pos)


def _expect_value_end(cursor: Cursor, closing: str) -> None:
    """After a member or element: consume ',' or stop in front of `closing`."""
    ch = skip_whitespace(cursor)
    if is_element_separator(ch):
        cursor.advance()
    elif ch != closing:
        _unexpected(cursor)


# ---------------------------------------------------------------------------
# VALUE DISPATCH
# ---------------------------------------------------------------------------
def _parse_value(cursor: Cursor, kind, depth: int, max_depth: int):
    scalar = _SCALAR_PARSERS.get(kind)
    if scalar is not None:
        return scalar(cursor)
    item_kind = sequence_item_kind(kind)
    if item_kind is not None:
        return _parse_sequence(cursor, item_kind, depth + 1, max_depth)
    return _parse_record(cursor, kind, depth + 1, max_depth)


def _check_depth(cursor: Cursor, depth: int, max_depth: int) -> None:
    if depth > max_depth:
        raise ParseError(f"depth limit {max_depth} exceeded", cursor.pos)


# ---------------------------------------------------------------------------
# SEQUENCE PARSER
# ---------------------------------------------------------------------------
def _parse_sequence(cursor: Cursor, item_kind, depth: int, max_depth: int) -> list:
    _check_depth(cursor, depth, max_depth)
    if skip_whitespace(cursor) != "[":
        _unexpected(cursor)
    cursor.advance()
    items = []
    while skip_whitespace(cursor) != "]":
        items.append(_parse_value(cursor, item_kind, depth, max_depth))
        _expect_value_end(cursor, "]")
    cursor.advance()
    return items


# ---------------------------------------------------------------------------
# RECORD PARSER
# ---------------------------------------------------------------------------
def _parse_record(cursor: Cursor, cls, depth: int, max_depth: int):
    _check_depth(cursor, depth, max_depth)
    if skip_whitespace(cursor) != "{":
        _unexpected(cursor)
    cursor.advance()

    index = property_index(cls)
    record = cls()
    state = _State.DEFAULT
    key = ""
    key_start = cursor.pos
    while True:
        if state is _State.DEFAULT:
            ch = skip_whitespace(cursor)
            if ch == '"':
                cursor.advance()
                state = _State.KEY_NAME
            elif ch == "}":
                cursor.advance()
                return record
            else:
                _unexpected(cursor)
        elif state is _State.KEY_NAME:
            key_start = cursor.pos
            key = scan_string_body(cursor)
            if skip_whitespace(cursor) != ":":
                _unexpected(cursor)
            cursor.advance()
            state = _State.VALUE
        else:
            prop = index.get(key)
            if prop is None:
                raise UnexpectedPropertyName(key, cls, key_start)
            prop.set(record, _parse_value(cursor, prop.kind, depth, max_depth))
            _expect_value_end(cursor, "}")
            state = _State.DEFAULT


# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def parse(cls, text: str, begin: int = 0, end: Optional[int] = None, *,
          max_depth: int = DEPTH_LIMIT_DEFAULT):
    """
    Parse the JSON object in text[begin:end] into a new `cls` instance.

    `cls` and every record type it references are validated before any
    character is read. Only whitespace may follow the root object.
    """
    check_record_type(cls)
    cursor = Cursor(text, begin, end)
    log.debug("parsing %s from offsets %d..%d", cls.__name__, cursor.pos, cursor.end)
    try:
        record = _parse_record(cursor, cls, 1, max_depth)
        while not cursor.at_end():
            if not is_whitespace(cursor.current()):
                raise ParseError("extra data after root value", cursor.pos)
            cursor.advance()
    except ParseError as exc:
        log.debug("parse of %s failed: %s", cls.__name__, exc)
        raise
    return record


def parse_stream(cls, stream, *, max_depth: int = DEPTH_LIMIT_DEFAULT):
    """Read a text stream to its end and parse it with `parse`."""
    return parse(cls, stream.read(), max_depth=max_depth)

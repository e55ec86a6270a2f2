# lexer.py
# Character-level scanner for the recordjson parser.
#
# =============================================================================
#  SCANNING MODEL
# =============================================================================
#
# There is no token stream. The parser knows the static type it expects at
# every point, so it asks the scanner for exactly that token kind and the
# scanner advances one shared Cursor in place. The cursor is never copied
# and never rewound: every consumer must know exactly how far to advance.
#
# Every loop treats cursor exhaustion as a terminating condition, so
# truncated input fails with UnexpectedEndOfInput instead of hanging.
# =============================================================================

from typing import Callable, Optional

from .errors import ParseError, UnexpectedCharacter, UnexpectedEndOfInput

_WHITESPACE = " \t\n\r"
_DIGITS = "0123456789"
_HEX = "0123456789abcdefABCDEF"
_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


# ---------------------------------------------------------------------------
# CHARACTER CLASSES
# ---------------------------------------------------------------------------
def is_digit(c: str) -> bool:
    return c != "" and c in _DIGITS


def is_whitespace(c: str) -> bool:
    return c != "" and c in _WHITESPACE


def is_element_separator(c: str) -> bool:
    return c == ","


# ---------------------------------------------------------------------------
# CURSOR
# ---------------------------------------------------------------------------
class Cursor:
    """Forward-only position into an immutable string, bounded by [begin, end)."""

    def __init__(self, text: str, begin: int = 0, end: Optional[int] = None):
        self.text = text
        self.pos = begin
        self.end = len(text) if end is None else min(end, len(text))

    def at_end(self) -> bool:
        return self.pos >= self.end

    def current(self) -> str:
        """Character under the cursor, or '' at end of input."""
        return self.text[self.pos] if self.pos < self.end else ""

    def peek(self) -> str:
        if self.pos >= self.end:
            raise UnexpectedEndOfInput(self.pos)
        return self.text[self.pos]

    def advance(self) -> str:
        """Consume and return the character under the cursor."""
        ch = self.peek()
        self.pos += 1
        return ch


def skip_until(cursor: Cursor, stop: Callable[[str], bool]) -> str:
    """
    Advance past characters until `stop` holds for the current one and return it.

    Reaching end of input first is an UnexpectedEndOfInput.
    """
    while not cursor.at_end():
        ch = cursor.text[cursor.pos]
        if stop(ch):
            return ch
        cursor.advance()
    raise UnexpectedEndOfInput(cursor.pos)


def skip_whitespace(cursor: Cursor) -> str:
    return skip_until(cursor, lambda c: not is_whitespace(c))


# ---------------------------------------------------------------------------
# NUMBER TOKENS
# ---------------------------------------------------------------------------
def _take_digits(cursor: Cursor) -> str:
    start = cursor.pos
    while is_digit(cursor.current()):
        cursor.advance()
    return cursor.text[start:cursor.pos]


def scan_unsigned(cursor: Cursor) -> str:
    """Digits of an unsigned integer. At least one digit is required."""
    skip_whitespace(cursor)
    start = cursor.pos
    digits = _take_digits(cursor)
    if not digits:
        raise UnexpectedCharacter(cursor.peek(), start)
    return digits


def scan_signed(cursor: Cursor) -> str:
    """Optional '-' followed by at least one digit."""
    ch = skip_whitespace(cursor)
    sign = ""
    if ch == "-":
        sign = ch
        cursor.advance()
        if not is_digit(cursor.peek()):
            raise UnexpectedCharacter(cursor.current(), cursor.pos)
    return sign + scan_unsigned(cursor)


def scan_float(cursor: Cursor) -> str:
    """
    Optional '-', a run of digits and '.', then an optional exponent.

    The run is not validated here; "1.2.3" is handed back as-is and rejected
    by the conversion step.
    """
    ch = skip_whitespace(cursor)
    start = cursor.pos
    if ch == "-":
        cursor.advance()
    body_start = cursor.pos
    while is_digit(cursor.current()) or cursor.current() == ".":
        cursor.advance()
    body = cursor.text[body_start:cursor.pos]
    if not any(is_digit(c) for c in body):
        raise UnexpectedCharacter(cursor.peek(), cursor.pos)
    if cursor.current() in ("e", "E"):
        cursor.advance()
        if cursor.current() in ("+", "-"):
            cursor.advance()
        if not _take_digits(cursor):
            raise UnexpectedCharacter(cursor.peek(), cursor.pos)
    return cursor.text[start:cursor.pos]


# ---------------------------------------------------------------------------
# STRING TOKENS
# ---------------------------------------------------------------------------
def scan_string_body(cursor: Cursor) -> str:
    """
    Raw characters between an already-consumed opening quote and its closing quote.

    Consumes the closing quote. A quote ends the span unless it is escaped by
    an odd run of backslashes. Raw control characters are rejected.
    """
    start = cursor.pos
    escaped = False
    while True:
        if cursor.at_end():
            raise UnexpectedEndOfInput(cursor.pos)
        ch = cursor.text[cursor.pos]
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            raw = cursor.text[start:cursor.pos]
            cursor.advance()
            return raw
        elif ch < " ":
            raise ParseError(f"control character {ch!r} in string", cursor.pos)
        cursor.advance()


def decode_string(raw: str, token_start: int = 0) -> str:
    """
    Unescape the body of a JSON string.

    Rejects unknown escapes, short or non-hex unicode escapes and unpaired
    surrogates. `token_start` is the offset of the body, used in messages.
    """
    if "\\" not in raw:
        return raw
    out = []
    i = 0
    n = len(raw)
    while i < n:
        ch = raw[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= n:
            raise ParseError("trailing backslash in string", token_start + i)
        esc = raw[i + 1]
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
            continue
        if esc != "u":
            raise ParseError(f"invalid escape \\{esc}", token_start + i)
        code = _read_hex4(raw, i, token_start)
        i += 6
        if 0xD800 <= code <= 0xDBFF and raw[i:i + 2] == "\\u":
            low = _read_hex4(raw, i, token_start)
            if 0xDC00 <= low <= 0xDFFF:
                code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                i += 6
        if 0xD800 <= code <= 0xDFFF:
            raise ParseError("unpaired surrogate in string", token_start + i - 6)
        out.append(chr(code))
    return "".join(out)


def _read_hex4(raw: str, i: int, token_start: int) -> int:
    hexpart = raw[i + 2:i + 6]
    if len(hexpart) < 4:
        raise ParseError("short unicode escape", token_start + i)
    if not all(c in _HEX for c in hexpart):
        raise ParseError(f"invalid hex escape \\u{hexpart}", token_start + i)
    return int(hexpart, 16)

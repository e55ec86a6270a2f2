# errors.py
# Failure kinds raised by the recordjson parser.
#
# Malformed input is reported as a SyntaxError subclass. Every error carries
# the absolute offset where parsing stopped.

from typing import Optional


class ParseError(SyntaxError):
    """Malformed input: bad syntax, truncated input or a failed number conversion."""

    def __init__(self, message: str, position: Optional[int] = None):
        if position is not None:
            message = f"{message} at offset {position}"
        super().__init__(message)
        self.position = position


class UnexpectedCharacter(ParseError):
    def __init__(self, char: str, position: int):
        super().__init__(f"unexpected character {char!r}", position)
        self.char = char


class UnexpectedEndOfInput(ParseError):
    def __init__(self, position: Optional[int] = None):
        super().__init__("unexpected end of input", position)


class UnexpectedPropertyName(ParseError):
    """
    An object key that the target record type does not declare.

    Unknown keys are always fatal; there is no skip-unknown mode.
    """

    def __init__(self, name: str, record_type: type, position: Optional[int] = None):
        super().__init__(
            f"unexpected property name {name!r} for {record_type.__name__}", position
        )
        self.name = name
        self.record_type = record_type

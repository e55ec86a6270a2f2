"""recordjson - structural JSON codec for declared record types."""

from .errors import (
    ParseError,
    UnexpectedCharacter,
    UnexpectedEndOfInput,
    UnexpectedPropertyName,
)
from .parser import DEPTH_LIMIT_DEFAULT, parse, parse_stream
from .properties import (
    Float32,
    Property,
    Unsigned,
    check_record_type,
    is_record,
    properties_of,
    property_,
)
from .serializer import dumps, serialize

__all__ = [
    "DEPTH_LIMIT_DEFAULT",
    "Float32",
    "ParseError",
    "Property",
    "UnexpectedCharacter",
    "UnexpectedEndOfInput",
    "UnexpectedPropertyName",
    "Unsigned",
    "check_record_type",
    "dumps",
    "is_record",
    "parse",
    "parse_stream",
    "properties_of",
    "property_",
    "serialize",
]

"""
Type codes for D-Bus signature strings.

Every character that may appear in a signature maps to exactly one
``TypeCode`` member, and the member's value is that character. Both the
parser and the encoder go through this table.

Type code categories:
- Fixed length: y b n q i u x t d h
- String-like:  s o g
- Containers:   a v ( ) { }
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class TypeCode(Enum):
    """All type codes recognized in a D-Bus signature."""

    # --- Fixed length types ---
    BYTE = "y"                      # 8-bit unsigned integer
    BOOLEAN = "b"                   # 0 is false, 1 is true
    INT16 = "n"                     # 16-bit signed integer
    UINT16 = "q"                    # 16-bit unsigned integer
    INT32 = "i"                     # 32-bit signed integer
    UINT32 = "u"                    # 32-bit unsigned integer
    INT64 = "x"                     # 64-bit signed integer
    UINT64 = "t"                    # 64-bit unsigned integer
    DOUBLE = "d"                    # IEEE 754 double
    UNIX_FD = "h"                   # index into out-of-band fd array

    # --- String-like types ---
    STRING = "s"
    OBJECT_PATH = "o"
    SIGNATURE = "g"

    # --- Container types ---
    ARRAY = "a"
    VARIANT = "v"

    # STRUCT has type code 'r', which never appears in signatures.
    STRUCT_START = "("
    STRUCT_END = ")"

    # DICT_ENTRY has type code 'e', which never appears in signatures.
    DICT_ENTRY_START = "{"
    DICT_ENTRY_END = "}"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SourceLocation:
    """A position inside a signature string."""
    offset: int         # 0-indexed character offset

    @property
    def column(self) -> int:
        """1-indexed column, for display."""
        return self.offset + 1

    def __str__(self) -> str:
        return f"{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """A range of characters inside a signature string."""
    start: SourceLocation
    end: SourceLocation

    @classmethod
    def at(cls, offset: int, length: int = 1) -> "SourceSpan":
        return cls(SourceLocation(offset), SourceLocation(offset + length))

    def __str__(self) -> str:
        return f"{self.start.column}-{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single type code read from a signature."""
    type: TypeCode
    lexeme: str
    span: SourceSpan

    @property
    def offset(self) -> int:
        return self.span.start.offset

    def __str__(self) -> str:
        return self.type.name


# Character to type code mapping
CHARACTERS: dict[str, TypeCode] = {code.value: code for code in TypeCode}

FIXED_TYPES: frozenset = frozenset({
    TypeCode.BYTE, TypeCode.BOOLEAN,
    TypeCode.INT16, TypeCode.UINT16,
    TypeCode.INT32, TypeCode.UINT32,
    TypeCode.INT64, TypeCode.UINT64,
    TypeCode.DOUBLE, TypeCode.UNIX_FD,
})

STRING_LIKE_TYPES: frozenset = frozenset({
    TypeCode.STRING, TypeCode.OBJECT_PATH, TypeCode.SIGNATURE,
})

CONTAINER_MARKERS: frozenset = frozenset({
    TypeCode.ARRAY, TypeCode.VARIANT,
    TypeCode.STRUCT_START, TypeCode.STRUCT_END,
    TypeCode.DICT_ENTRY_START, TypeCode.DICT_ENTRY_END,
})

CLOSING_DELIMITERS: frozenset = frozenset({
    TypeCode.STRUCT_END, TypeCode.DICT_ENTRY_END,
})


def token_for(char: str, offset: int = 0, source: Optional[str] = None) -> TypeCode:
    """
    Map a single signature character to its type code.

    Raises:
        LexicalError: If the character is not part of the alphabet
    """
    code = CHARACTERS.get(char)
    if code is None:
        from .errors import error_unexpected_character
        raise error_unexpected_character(char, SourceSpan.at(offset), source)
    return code


def byte_for(code: TypeCode) -> str:
    """Map a type code back to its signature character."""
    return code.value


def is_fixed_type(code: TypeCode) -> bool:
    return code in FIXED_TYPES


def is_string_like(code: TypeCode) -> bool:
    return code in STRING_LIKE_TYPES


def is_basic_type(code: TypeCode) -> bool:
    """Basic types are the ones allowed as dictionary keys."""
    return code in FIXED_TYPES or code in STRING_LIKE_TYPES


def is_container_marker(code: TypeCode) -> bool:
    return code in CONTAINER_MARKERS


def is_closing_delimiter(code: TypeCode) -> bool:
    return code in CLOSING_DELIMITERS

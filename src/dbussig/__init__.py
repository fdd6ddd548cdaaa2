"""
D-Bus type signature engine.

This package provides:
- Tokens: The type code alphabet
- Lexer: Splits a signature string into tokens
- Parser: Builds complete types from tokens
- Encoder: Turns complete types back into a signature string
- Signature: The mutable, indexable signature value
- Validation: Protocol length and nesting checks

Usage:
    from dbussig import Signature, ArrayType, INT32

    sig = Signature.from_string("a(sv)")
    sig.append(ArrayType(INT32))
    print(sig)              # a(sv)ai

    for value in sig:
        print(value.name)
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dbussig")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from .tokens import (
    TypeCode,
    Token,
    SourceLocation,
    SourceSpan,
    CHARACTERS,
    token_for,
    byte_for,
    is_fixed_type,
    is_string_like,
    is_basic_type,
    is_container_marker,
    is_closing_delimiter,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .types import (
    ValueType,
    PrimitiveType,
    ArrayType,
    StructType,
    DictionaryType,
    TypeSequence,
    StructureType,
    primitive_for,
    make_array,
    make_struct,
    make_dictionary,
    is_basic,
    is_container,
    # Built-in type instances
    BYTE, BOOLEAN, INT16, UINT16, INT32, UINT32, INT64, UINT64,
    DOUBLE, UNIX_FD, STRING, OBJECT_PATH, SIGNATURE, VARIANT,
)

from .parser import (
    Parser,
    parse,
    parse_tokens,
)

from .encoder import (
    encode,
    encode_bytes,
    encode_characters,
)

from .errors import (
    SignatureError,
    LexicalError,
    ParserError,
    UnexpectedToken,
    UnexpectedEndOfInput,
    UnterminatedStructure,
    EmptyStructure,
    TrailingData,
    LengthOutOfBounds,
    NestingTooDeep,
    ValidationError,
    DBusError,
    DBusErrorName,
    Diagnostic,
    DiagnosticCollector,
    ErrorSeverity,
)

from .config import (
    SignatureLimits,
    DEFAULT_LIMITS,
    load_limits,
    limits_from_env,
)

from .validation import (
    check,
    validate,
)

from .signature import (
    Signature,
    parse_signature,
)

__all__ = [
    '__version__',

    # Tokens
    'TypeCode',
    'Token',
    'SourceLocation',
    'SourceSpan',
    'CHARACTERS',
    'token_for',
    'byte_for',
    'is_fixed_type',
    'is_string_like',
    'is_basic_type',
    'is_container_marker',
    'is_closing_delimiter',

    # Lexer
    'Lexer',
    'tokenize',

    # Types
    'ValueType',
    'PrimitiveType',
    'ArrayType',
    'StructType',
    'DictionaryType',
    'TypeSequence',
    'StructureType',
    'primitive_for',
    'make_array',
    'make_struct',
    'make_dictionary',
    'is_basic',
    'is_container',
    'BYTE', 'BOOLEAN', 'INT16', 'UINT16', 'INT32', 'UINT32', 'INT64', 'UINT64',
    'DOUBLE', 'UNIX_FD', 'STRING', 'OBJECT_PATH', 'SIGNATURE', 'VARIANT',

    # Parser
    'Parser',
    'parse',
    'parse_tokens',

    # Encoder
    'encode',
    'encode_bytes',
    'encode_characters',

    # Errors
    'SignatureError',
    'LexicalError',
    'ParserError',
    'UnexpectedToken',
    'UnexpectedEndOfInput',
    'UnterminatedStructure',
    'EmptyStructure',
    'TrailingData',
    'LengthOutOfBounds',
    'NestingTooDeep',
    'ValidationError',
    'DBusError',
    'DBusErrorName',
    'Diagnostic',
    'DiagnosticCollector',
    'ErrorSeverity',

    # Config
    'SignatureLimits',
    'DEFAULT_LIMITS',
    'load_limits',
    'limits_from_env',

    # Validation
    'check',
    'validate',

    # Signature
    'Signature',
    'parse_signature',
]

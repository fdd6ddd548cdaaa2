"""
Recursive descent parser for D-Bus signatures.

Converts a token list into a list of complete types. One forward cursor,
no backtracking; each token is visited once and recursion depth equals
container nesting depth. Nesting deeper than the total depth limit is
rejected before it can exhaust the interpreter stack.

Grammar:
    signature     := complete_type*
    complete_type := primitive
                   | 'a' complete_type
                   | '(' complete_type+ ')'
"""

import logging
from typing import List, Optional, Union

from .tokens import Token, TypeCode, SourceLocation, SourceSpan, is_closing_delimiter
from .types import ValueType, ArrayType, StructType, StructureType, primitive_for
from .lexer import tokenize
from .config import SignatureLimits, DEFAULT_LIMITS
from .errors import (
    error_unexpected_token,
    error_unexpected_end,
    error_unterminated_structure,
    error_empty_structure,
    error_trailing_data,
    error_length_out_of_bounds,
    error_nesting_too_deep,
)

logger = logging.getLogger(__name__)


class Parser:
    """
    Recursive descent parser for D-Bus signatures.

    Usage:
        parser = Parser(tokenize("a(sv)"))
        types = parser.parse_types()

    Errors are raised, never recovered from; a partially parsed list is
    never returned. Arrays and structs nested more than
    ``limits.max_total_depth`` deep raise ``NestingTooDeep``.
    """

    def __init__(self, tokens: List[Token], source: Optional[str] = None,
                 limits: Optional[SignatureLimits] = None):
        self.tokens = tokens
        self.source = source if source is not None else "".join(t.lexeme for t in tokens)
        self.limits = limits or DEFAULT_LIMITS
        self.pos = 0
        self.depth = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def _check(self, code: TypeCode) -> bool:
        return not self._is_at_end() and self._current().type == code

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _end_location(self) -> SourceLocation:
        if not self.tokens:
            return SourceLocation(0)
        return self.tokens[-1].span.end

    def _span_to_end(self, start: Token) -> SourceSpan:
        return SourceSpan(start.span.start, self._end_location())

    # =========================================================================
    # Complete Types
    # =========================================================================

    def _parse_one(self) -> ValueType:
        """Parse one complete type starting at the cursor."""
        token = self._advance()

        primitive = primitive_for(token.type)
        if primitive is not None:
            return primitive

        if token.type == TypeCode.ARRAY:
            self._enter(token)
            value = self._parse_array(token)
        elif token.type == TypeCode.STRUCT_START:
            self._enter(token)
            value = self._parse_struct(token)
        else:
            # Closing delimiters and dict entries cannot start a complete type
            raise error_unexpected_token(token.lexeme, token.span, self.source)

        self.depth -= 1
        return value

    def _enter(self, marker: Token) -> None:
        self.depth += 1
        if self.depth > self.limits.max_total_depth:
            raise error_nesting_too_deep(
                self.depth, self.limits.max_total_depth, marker.span, self.source
            )

    def _parse_array(self, marker: Token) -> ArrayType:
        if self._is_at_end():
            raise error_unexpected_end("array element type", marker.span, self.source)
        return ArrayType(self._parse_one())

    def _parse_struct(self, start: Token) -> StructType:
        if self._is_at_end():
            raise error_unexpected_end("struct fields", start.span, self.source)

        fields: List[ValueType] = []
        while not self._is_at_end() and not self._check(TypeCode.STRUCT_END):
            fields.append(self._parse_one())

        if self._is_at_end():
            raise error_unterminated_structure(self._span_to_end(start), self.source)

        end = self._advance()
        if not fields:
            raise error_empty_structure(
                SourceSpan(start.span.start, end.span.end), self.source
            )
        return StructType(StructureType(fields))

    def parse_types(self) -> List[ValueType]:
        """
        Parse the whole token list into complete types.

        Raises:
            ParserError: If the tokens are not a sequence of complete types
        """
        types: List[ValueType] = []
        while not self._is_at_end() and not is_closing_delimiter(self._current().type):
            types.append(self._parse_one())

        if not self._is_at_end():
            raise error_trailing_data(self._span_to_end(self._current()), self.source)

        return types


def parse_tokens(tokens: List[Token], source: Optional[str] = None,
                 limits: Optional[SignatureLimits] = None) -> List[ValueType]:
    """
    Parse tokens without the length policy.

    An empty token list is the zero-argument signature. The nesting
    ceiling from ``limits`` still applies.
    """
    if not tokens:
        return []
    parser = Parser(tokens, source, limits)
    return parser.parse_types()


def parse(signature: Union[str, bytes], limits: Optional[SignatureLimits] = None) -> List[ValueType]:
    """
    Parse a signature string into complete types.

    The length is checked against ``limits`` (1..255 by default) before
    any grammar work, so an empty string is rejected here; use
    ``Signature([])`` for a signature with no arguments.

    Args:
        signature: Signature as text or ASCII bytes
        limits: Optional length and nesting limits

    Returns:
        Complete types in argument order

    Raises:
        LengthOutOfBounds: If the length is outside the limits
        LexicalError: If an unrecognized character is present
        NestingTooDeep: If containers nest deeper than the total depth limit
        ParserError: If the grammar is violated
    """
    limits = limits or DEFAULT_LIMITS
    length = len(signature)
    if not limits.length_ok(length):
        text = signature if isinstance(signature, str) else None
        raise error_length_out_of_bounds(length, limits.min_length, limits.max_length, text)

    tokens = tokenize(signature)
    types = parse_tokens(tokens, limits=limits)
    logger.debug("parsed %r into %d complete type(s)", signature, len(types))
    return types

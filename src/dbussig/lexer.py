"""
Lexer for D-Bus signature strings.

Converts a signature into a list of ``Token``s, one per character.
Accepts ``str`` or ASCII ``bytes``; anything outside the type code
alphabet is a lexical error.
"""

from typing import List, Iterator, Union
from .tokens import Token, SourceLocation, SourceSpan, token_for
from .errors import error_unexpected_character


class Lexer:
    """
    Tokenizer for D-Bus signatures.

    Usage:
        lexer = Lexer("a(sv)")
        tokens = lexer.tokenize()

    Or for streaming:
        for token in Lexer("a(sv)"):
            process(token)
    """

    def __init__(self, source: Union[str, bytes]):
        if isinstance(source, (bytes, bytearray)):
            source = self._decode(bytes(source))
        self.source = source
        self.pos = 0            # Current position in source

    @staticmethod
    def _decode(data: bytes) -> str:
        for offset, value in enumerate(data):
            if value > 0x7F:
                raise error_unexpected_character(
                    chr(value), SourceSpan.at(offset),
                    data.decode("ascii", errors="replace"),
                )
        return data.decode("ascii")

    def _location(self) -> SourceLocation:
        return SourceLocation(self.pos)

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _scan_token(self) -> Token:
        """Consume one character and return its token."""
        start = self._location()
        ch = self.source[self.pos]
        code = token_for(ch, self.pos, self.source)
        self.pos += 1
        return Token(code, ch, SourceSpan(start, self._location()))

    def tokenize(self) -> List[Token]:
        """Tokenize the entire signature, returning a list of tokens."""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        while not self._is_at_end():
            yield self._scan_token()


def tokenize(source: Union[str, bytes]) -> List[Token]:
    """
    Convenience function to tokenize a signature.

    Args:
        source: The signature to tokenize

    Returns:
        List of tokens

    Raises:
        LexicalError: If the signature contains an unrecognized character
    """
    lexer = Lexer(source)
    return lexer.tokenize()

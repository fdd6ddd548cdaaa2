"""
The public signature value.

A ``Signature`` is the ordered list of complete types describing a
message's arguments. It can be built from types directly or parsed from
its string form, and behaves as a mutable, indexable sequence.
"""

from typing import List, Optional, Union

from .types import ValueType, TypeSequence
from .parser import parse
from .encoder import encode, encode_bytes
from .config import SignatureLimits
from .errors import DiagnosticCollector
from . import validation


class Signature(TypeSequence):
    """
    D-Bus signature.

    Usage:
        sig = Signature.from_string("a(sv)")
        sig.append(BOOLEAN)
        str(sig)            # 'a(sv)b'

    ``Signature([])`` is the signature of a message with no arguments.
    The string entry point applies the 1..255 length check and so
    rejects ``""``.
    """

    @classmethod
    def from_string(cls, signature: Union[str, bytes],
                    limits: Optional[SignatureLimits] = None) -> "Signature":
        """
        Parse a signature string.

        Raises:
            LengthOutOfBounds, LexicalError, NestingTooDeep, ParserError
        """
        return cls(parse(signature, limits))

    @classmethod
    def from_bytes(cls, data: bytes, limits: Optional[SignatureLimits] = None) -> "Signature":
        return cls.from_string(bytes(data), limits)

    @property
    def elements(self) -> List[ValueType]:
        """A copy of the complete types, in order."""
        return list(self._elements)

    @property
    def string_value(self) -> str:
        return encode(self._elements)

    raw_value = string_value

    def to_bytes(self) -> bytes:
        return encode_bytes(self._elements)

    def copy(self) -> "Signature":
        return Signature(self._elements)

    def check(self, limits: Optional[SignatureLimits] = None) -> DiagnosticCollector:
        """Collect protocol diagnostics without raising."""
        return validation.check(self._elements, limits)

    def validate(self, limits: Optional[SignatureLimits] = None) -> None:
        """
        Check the signature against the protocol rules.

        Raises:
            ValidationError: If any rule is broken
        """
        validation.validate(self._elements, limits)

    def __add__(self, other: "Signature") -> "Signature":
        if not isinstance(other, Signature):
            return NotImplemented
        return Signature(self._elements + other._elements)

    def __str__(self) -> str:
        return self.string_value

    def __repr__(self) -> str:
        return f"Signature({self.string_value!r})"


def parse_signature(signature: Union[str, bytes],
                    limits: Optional[SignatureLimits] = None) -> Signature:
    """Parse a signature string into a ``Signature``."""
    return Signature.from_string(signature, limits)

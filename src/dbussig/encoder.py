"""
Encoder for D-Bus signatures.

Flattens a list of complete types back into type codes and then into the
signature string. Encoding never fails: the tree invariants (non-empty
structs, payload present for arrays and dictionaries) are enforced when
the tree is built. The walk uses an explicit stack, so hand-built trees
of any depth encode.
"""

from typing import Iterable, List, Union

from .tokens import TypeCode, byte_for
from .types import ValueType, PrimitiveType, ArrayType, StructType, DictionaryType


def encode_characters(types: Iterable[ValueType]) -> List[TypeCode]:
    """Flatten complete types into type codes, in order."""
    out: List[TypeCode] = []
    # Pending work, last item first: a type to expand or a code to emit
    stack: List[Union[ValueType, TypeCode]] = list(types)[::-1]

    while stack:
        item = stack.pop()
        if isinstance(item, TypeCode):
            out.append(item)
        elif isinstance(item, PrimitiveType):
            out.append(item.code)
        elif isinstance(item, ArrayType):
            out.append(TypeCode.ARRAY)
            stack.append(item.element)
        elif isinstance(item, StructType):
            out.append(TypeCode.STRUCT_START)
            stack.append(TypeCode.STRUCT_END)
            stack.extend(item.fields[::-1])
        elif isinstance(item, DictionaryType):
            out.append(TypeCode.DICT_ENTRY_START)
            stack.append(TypeCode.DICT_ENTRY_END)
            stack.append(item.value)
        else:
            raise TypeError(f"cannot encode {type(item).__name__}")

    return out


def encode(types: Iterable[ValueType]) -> str:
    """
    Encode complete types as a signature string.

    Args:
        types: Complete types in argument order

    Returns:
        The signature string; empty for an empty list
    """
    return "".join(byte_for(code) for code in encode_characters(types))


def encode_bytes(types: Iterable[ValueType]) -> bytes:
    """Encode complete types as the ASCII bytes sent on the wire."""
    return encode(types).encode("ascii")

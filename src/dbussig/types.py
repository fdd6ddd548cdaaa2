"""
Type tree for D-Bus signatures.

A signature is a list of complete types. Each complete type is one of:
    Primitive: byte, boolean, int16, uint16, int32, uint32, int64,
               uint64, double, unix_fd, string, object_path, signature,
               variant
    Array:     exactly one element type
    Struct:    one or more field types
    Dict:      a single payload type between '{' and '}'

Complete types are immutable and every container owns its children, so
trees are finite and acyclic and can be shared between sequences safely.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple
from abc import ABC, abstractmethod

from .tokens import TypeCode, is_basic_type
from .errors import error_empty_structure


# =============================================================================
# Type Classes
# =============================================================================

@dataclass(frozen=True)
class ValueType(ABC):
    """Base class for all complete types."""

    @property
    @abstractmethod
    def code(self) -> TypeCode:
        """The leading type code of this type."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """The type name for display/errors."""
        pass

    @property
    def is_basic(self) -> bool:
        """Basic types are fixed length or string-like primitives."""
        return False

    @property
    def is_container(self) -> bool:
        return True

    @property
    def characters(self) -> List[TypeCode]:
        """Type codes of this type, in signature order."""
        from .encoder import encode_characters
        return encode_characters([self])

    @property
    def signature(self) -> str:
        """This type as a signature string."""
        from .encoder import encode
        return encode([self])

    def __str__(self) -> str:
        return self.signature


@dataclass(frozen=True)
class PrimitiveType(ValueType):
    """A single-character type with no payload."""
    _code: TypeCode

    def __post_init__(self):
        if self._code not in _PRIMITIVE_NAMES:
            raise ValueError(f"{self._code!r} is not a primitive type code")

    @property
    def code(self) -> TypeCode:
        return self._code

    @property
    def name(self) -> str:
        return _PRIMITIVE_NAMES[self._code]

    @property
    def is_basic(self) -> bool:
        return is_basic_type(self._code)

    @property
    def is_container(self) -> bool:
        # variant carries its type with the value
        return self._code == TypeCode.VARIANT

    def __repr__(self) -> str:
        return self.name.upper()


@dataclass(frozen=True)
class ArrayType(ValueType):
    """Array of a single element type: a<T>."""
    element: ValueType

    def __post_init__(self):
        _require_value_type(self.element, "array element")

    @property
    def code(self) -> TypeCode:
        return TypeCode.ARRAY

    @property
    def name(self) -> str:
        return f"array<{self.element.name}>"

    def __repr__(self) -> str:
        return f"ArrayType({self.element!r})"


@dataclass(frozen=True, init=False)
class StructType(ValueType):
    """
    Struct of one or more field types: (T...).

    The fields are stored as a tuple. ``structure`` returns a new
    ``StructureType`` on every access; editing it leaves this struct
    unchanged. Build a new ``StructType`` from the edited fields instead.
    """
    _fields: Tuple[ValueType, ...]

    def __init__(self, structure: Iterable[ValueType]):
        # StructureType checks element types and the non-empty invariant
        object.__setattr__(self, "_fields", tuple(StructureType(structure)))

    @property
    def code(self) -> TypeCode:
        return TypeCode.STRUCT_START

    @property
    def name(self) -> str:
        fields = ", ".join(f.name for f in self._fields)
        return f"struct<{fields}>"

    @property
    def structure(self) -> "StructureType":
        return StructureType(self._fields)

    @property
    def fields(self) -> List[ValueType]:
        return list(self._fields)

    def __repr__(self) -> str:
        return f"StructType({list(self._fields)!r})"


@dataclass(frozen=True)
class DictionaryType(ValueType):
    """
    Dictionary entry wrapping a single payload type: {T}.

    Only one nested type is held. The wire protocol's dict entry has a
    basic key type followed by a value type; code that needs that shape
    should use a struct payload or check with ``validation.check``.
    """
    value: ValueType

    def __post_init__(self):
        _require_value_type(self.value, "dictionary payload")

    @property
    def code(self) -> TypeCode:
        return TypeCode.DICT_ENTRY_START

    @property
    def name(self) -> str:
        return f"dict<{self.value.name}>"

    def __repr__(self) -> str:
        return f"DictionaryType({self.value!r})"


def _require_value_type(value, what: str) -> None:
    if not isinstance(value, ValueType):
        raise TypeError(f"{what} must be a ValueType, got {type(value).__name__}")


# =============================================================================
# Sequences of complete types
# =============================================================================

class TypeSequence:
    """
    Ordered, mutable, indexable list of complete types.

    Removals compact the list; elements after the removal point shift
    down by one. Equality and hashing are structural over the elements,
    so an instance must not be mutated while it is used as a dict key.
    """

    def __init__(self, elements: Iterable[ValueType] = ()):
        self._elements: List[ValueType] = []
        for element in elements:
            _require_value_type(element, "element")
            self._elements.append(element)

    def __getitem__(self, index: int) -> ValueType:
        return self._elements[index]

    def __setitem__(self, index: int, value: ValueType) -> None:
        _require_value_type(value, "element")
        self._elements[index] = value

    def __delitem__(self, index: int) -> None:
        self.remove_at(index)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[ValueType]:
        return iter(list(self._elements))

    def __contains__(self, value) -> bool:
        return value in self._elements

    @property
    def count(self) -> int:
        return len(self._elements)

    @property
    def is_empty(self) -> bool:
        return not self._elements

    def index(self, value: ValueType) -> int:
        return self._elements.index(value)

    def append(self, element: ValueType) -> None:
        _require_value_type(element, "element")
        self._elements.append(element)

    def insert(self, index: int, element: ValueType) -> None:
        _require_value_type(element, "element")
        self._elements.insert(index, element)

    def extend(self, elements: Iterable[ValueType]) -> None:
        for element in elements:
            self.append(element)

    def remove_first(self) -> ValueType:
        return self.remove_at(0)

    def remove_last(self) -> ValueType:
        return self.remove_at(-1)

    def remove_at(self, index: int) -> ValueType:
        if not self._elements:
            raise IndexError(f"remove from empty {type(self).__name__}")
        return self._elements.pop(index)

    def remove_all(self) -> None:
        self._elements.clear()

    @property
    def characters(self) -> List[TypeCode]:
        from .encoder import encode_characters
        return encode_characters(self._elements)

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._elements == other._elements

    def __hash__(self) -> int:
        return hash((type(self).__name__, tuple(self._elements)))


class StructureType(TypeSequence):
    """
    The fields of a struct.

    Empty structures are not allowed; there must be at least one type
    code between the parentheses. Construction with no fields, and any
    removal that would leave no fields, raises ``EmptyStructure``.
    """

    def __init__(self, elements: Iterable[ValueType]):
        super().__init__(elements)
        if not self._elements:
            raise error_empty_structure()

    def remove_at(self, index: int) -> ValueType:
        if len(self._elements) == 1 and index in (0, -1):
            raise error_empty_structure()
        return super().remove_at(index)

    def remove_all(self) -> None:
        raise error_empty_structure()

    def __repr__(self) -> str:
        return f"StructureType({self._elements!r})"


# =============================================================================
# Predefined Types
# =============================================================================

_PRIMITIVE_NAMES = {
    TypeCode.BYTE: "byte",
    TypeCode.BOOLEAN: "boolean",
    TypeCode.INT16: "int16",
    TypeCode.UINT16: "uint16",
    TypeCode.INT32: "int32",
    TypeCode.UINT32: "uint32",
    TypeCode.INT64: "int64",
    TypeCode.UINT64: "uint64",
    TypeCode.DOUBLE: "double",
    TypeCode.UNIX_FD: "unix_fd",
    TypeCode.STRING: "string",
    TypeCode.OBJECT_PATH: "object_path",
    TypeCode.SIGNATURE: "signature",
    TypeCode.VARIANT: "variant",
}

# Fixed length
BYTE = PrimitiveType(TypeCode.BYTE)
BOOLEAN = PrimitiveType(TypeCode.BOOLEAN)
INT16 = PrimitiveType(TypeCode.INT16)
UINT16 = PrimitiveType(TypeCode.UINT16)
INT32 = PrimitiveType(TypeCode.INT32)
UINT32 = PrimitiveType(TypeCode.UINT32)
INT64 = PrimitiveType(TypeCode.INT64)
UINT64 = PrimitiveType(TypeCode.UINT64)
DOUBLE = PrimitiveType(TypeCode.DOUBLE)
UNIX_FD = PrimitiveType(TypeCode.UNIX_FD)

# String-like
STRING = PrimitiveType(TypeCode.STRING)
OBJECT_PATH = PrimitiveType(TypeCode.OBJECT_PATH)
SIGNATURE = PrimitiveType(TypeCode.SIGNATURE)

VARIANT = PrimitiveType(TypeCode.VARIANT)

PRIMITIVE_TYPES = {
    t.code: t for t in (
        BYTE, BOOLEAN, INT16, UINT16, INT32, UINT32, INT64, UINT64,
        DOUBLE, UNIX_FD, STRING, OBJECT_PATH, SIGNATURE, VARIANT,
    )
}


# =============================================================================
# Type Utilities
# =============================================================================

def primitive_for(code: TypeCode) -> Optional[PrimitiveType]:
    """Return the primitive type for a type code, or None for containers."""
    return PRIMITIVE_TYPES.get(code)


def make_array(element: ValueType) -> ArrayType:
    """Create an array type."""
    return ArrayType(element)


def make_struct(*fields: ValueType) -> StructType:
    """Create a struct type from its fields."""
    return StructType(StructureType(fields))


def make_dictionary(value: ValueType) -> DictionaryType:
    """Create a dictionary type."""
    return DictionaryType(value)


def is_basic(t: ValueType) -> bool:
    return t.is_basic


def is_container(t: ValueType) -> bool:
    return t.is_container

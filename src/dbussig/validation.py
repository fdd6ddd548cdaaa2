"""
Protocol checks for type trees.

The parser only enforces the grammar. A tree built by hand, or a parsed
one under stricter limits, can still break rules a D-Bus peer enforces:
maximum length, nesting depth, and where dict entries may appear. This
module reports those as diagnostics.
"""

import logging
from typing import Iterable, Optional

from .tokens import SourceSpan
from .types import ValueType, PrimitiveType, ArrayType, StructType, DictionaryType
from .encoder import encode
from .config import SignatureLimits, DEFAULT_LIMITS
from .errors import (
    DiagnosticCollector,
    error_signature_too_long,
    error_array_too_deep,
    error_struct_too_deep,
    error_total_too_deep,
    error_dict_entry_outside_array,
    warning_dict_entry_payload,
)

logger = logging.getLogger(__name__)


# Marks the closing character of a struct or dict entry on the walk stack
_CLOSE = object()


class SignatureChecker:
    """
    Walks complete types, tracking the character offset of each node so
    diagnostics point at the offending part of the encoded signature.

    Dict entries count toward struct depth. The walk uses an explicit
    stack, so hand-built trees of any depth can be checked.
    """

    def __init__(self, limits: SignatureLimits, collector: DiagnosticCollector):
        self.limits = limits
        self.collector = collector
        self.offset = 0

    def check(self, types: Iterable[ValueType]) -> None:
        for value in types:
            if self.collector.should_stop:
                break
            self._walk(value)

    def _walk(self, root: ValueType) -> None:
        stack = [(root, 0, 0, False)]

        while stack:
            item = stack.pop()
            if item is _CLOSE:
                self.offset += 1
                continue

            value, array_depth, struct_depth, in_array = item
            start = self.offset
            self.offset += 1

            if isinstance(value, PrimitiveType):
                continue

            if isinstance(value, ArrayType):
                array_depth += 1
                self._check_depth(array_depth, struct_depth, start, value)
                stack.append((value.element, array_depth, struct_depth, True))
            elif isinstance(value, StructType):
                struct_depth += 1
                self._check_depth(array_depth, struct_depth, start, value)
                stack.append(_CLOSE)
                stack.extend((f, array_depth, struct_depth, False) for f in value.fields[::-1])
            elif isinstance(value, DictionaryType):
                struct_depth += 1
                self._check_depth(array_depth, struct_depth, start, value)
                if not in_array:
                    self.collector.add(error_dict_entry_outside_array(_span(start, value)))
                if not value.value.is_basic:
                    self.collector.add(
                        warning_dict_entry_payload(value.value.signature, _span(start, value))
                    )
                stack.append(_CLOSE)
                stack.append((value.value, array_depth, struct_depth, False))
            else:
                raise TypeError(f"cannot check {type(value).__name__}")

    def _check_depth(self, array_depth: int, struct_depth: int, start: int, value: ValueType) -> None:
        # Report only when a limit is first crossed, not at every deeper level
        limits = self.limits
        if array_depth == limits.max_array_depth + 1 and isinstance(value, ArrayType):
            self.collector.add(error_array_too_deep(
                array_depth, limits.max_array_depth, _span(start, value)))
        if struct_depth == limits.max_struct_depth + 1 and not isinstance(value, ArrayType):
            self.collector.add(error_struct_too_deep(
                struct_depth, limits.max_struct_depth, _span(start, value)))
        total = array_depth + struct_depth
        if total == limits.max_total_depth + 1:
            self.collector.add(error_total_too_deep(
                total, limits.max_total_depth, _span(start, value)))


def _span(start: int, value: ValueType) -> SourceSpan:
    return SourceSpan.at(start, len(value.characters))


def check(types: Iterable[ValueType], limits: Optional[SignatureLimits] = None,
          collector: Optional[DiagnosticCollector] = None) -> DiagnosticCollector:
    """
    Check complete types against the protocol rules.

    Returns:
        DiagnosticCollector with every error and warning found
    """
    limits = limits or DEFAULT_LIMITS
    collector = collector if collector is not None else DiagnosticCollector()
    types = list(types)

    length = len(encode(types))
    if length > limits.max_length:
        collector.add(error_signature_too_long(length, limits.max_length))

    SignatureChecker(limits, collector).check(types)
    logger.debug("checked %d complete type(s): %d error(s), %d warning(s)",
                 len(types), collector.error_count, collector.warning_count)
    return collector


def validate(types: Iterable[ValueType], limits: Optional[SignatureLimits] = None) -> None:
    """
    Raise if the types break any protocol rule.

    Raises:
        ValidationError: Carrying every error found
    """
    check(types, limits).raise_if_errors()

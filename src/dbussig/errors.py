"""
Signature-specific exceptions and error handling.

Error code ranges:
- E0xx: Lexical errors
- E1xx: Parser errors
- E2xx: Protocol validation errors
- W2xx: Protocol validation warnings
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: Optional[SourceSpan] = None   # None for construction-time errors
    source: Optional[str] = None        # The signature being read
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: column: severity[code]: message
        if self.span is not None:
            parts.append(f"{self.span.start}: {self.severity.value}[{self.code}]: {self.message}")
        else:
            parts.append(f"{self.severity.value}[{self.code}]: {self.message}")

        # Signature with caret
        if show_source and self.source is not None and self.span is not None:
            parts.append(f"  | {self.source}")
            col = self.span.start.column
            underline_len = max(1, self.span.end.offset - self.span.start.offset)
            parts.append(f"  | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        data = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "hints": self.hints,
        }
        if self.span is not None:
            data["range"] = {
                "start": self.span.start.offset,
                "end": self.span.end.offset,
            }
        return data


class DBusErrorName(str):
    """A D-Bus error name such as ``org.freedesktop.DBus.Error.Failed``."""

    # A generic error; "something went wrong" - see the error message for more.
    FAILED: "DBusErrorName"
    # Existing file and the operation does not silently overwrite.
    FILE_EXISTS: "DBusErrorName"
    # Missing file.
    FILE_NOT_FOUND: "DBusErrorName"
    # A type signature is not valid.
    INVALID_SIGNATURE: "DBusErrorName"


DBusErrorName.FAILED = DBusErrorName("org.freedesktop.DBus.Error.Failed")
DBusErrorName.FILE_EXISTS = DBusErrorName("org.freedesktop.DBus.Error.FileExists")
DBusErrorName.FILE_NOT_FOUND = DBusErrorName("org.freedesktop.DBus.Error.FileNotFound")
DBusErrorName.INVALID_SIGNATURE = DBusErrorName("org.freedesktop.DBus.Error.InvalidSignature")


class DBusError(Exception):
    """D-Bus error as carried in an ERROR message: a name and a message."""

    def __init__(self, name: str, message: str):
        self.name = DBusErrorName(name)
        self.message = message
        super().__init__(message)

    def __eq__(self, other) -> bool:
        if not isinstance(other, DBusError):
            return NotImplemented
        return self.name == other.name and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.name, self.message))

    def __str__(self) -> str:
        return f"{self.name}: {self.message}"


class SignatureError(Exception):
    """Base exception for signature errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    @property
    def offset(self) -> Optional[int]:
        if self.diagnostic.span is None:
            return None
        return self.diagnostic.span.start.offset

    def to_dbus_error(self) -> DBusError:
        """Convert to the error a D-Bus peer would report."""
        return DBusError(DBusErrorName.INVALID_SIGNATURE, self.diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class LexicalError(SignatureError):
    """Unrecognized character (E0xx)."""
    pass


class ParserError(SignatureError):
    """Error during parsing (E1xx)."""
    pass


class UnexpectedToken(ParserError):
    """A type code that cannot start a complete type here."""
    pass


class UnexpectedEndOfInput(ParserError):
    """An array or struct marker with nothing following it."""
    pass


class UnterminatedStructure(ParserError):
    """A '(' without its matching ')'."""
    pass


class EmptyStructure(ParserError):
    """A struct with no fields."""
    pass


class TrailingData(ParserError):
    """Complete types followed by leftover characters."""
    pass


class LengthOutOfBounds(ParserError):
    """Signature string length outside the allowed range."""
    pass


class NestingTooDeep(ParserError):
    """Arrays and structs nested deeper than the total depth limit."""
    pass


class ValidationError(SignatureError):
    """Protocol rule violation (E2xx)."""

    def __init__(self, diagnostic: Diagnostic, diagnostics: Optional[List[Diagnostic]] = None):
        super().__init__(diagnostic)
        self.diagnostics = diagnostics if diagnostics is not None else [diagnostic]

    def __str__(self) -> str:
        return "\n\n".join(d.format() for d in self.diagnostics)


# --- Lexical error codes ---

def error_unexpected_character(char: str, span: SourceSpan, source: str = None) -> LexicalError:
    """E001: Unexpected character."""
    diag = Diagnostic(
        code="E001",
        message=f"unexpected character {char!r}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source=source,
        hints=["valid type codes: y b n q i u x t d h s o g a v ( ) { }"],
    )
    return LexicalError(diag)


# --- Parser error codes ---

def error_unexpected_token(found: str, span: SourceSpan, source: str = None) -> UnexpectedToken:
    """E101: Unexpected type code."""
    diag = Diagnostic(
        code="E101",
        message=f"expected a complete type, found {found!r}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source=source,
    )
    return UnexpectedToken(diag)


def error_unexpected_end(expected: str, span: SourceSpan, source: str = None) -> UnexpectedEndOfInput:
    """E102: Unexpected end of input."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of signature, expected {expected}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source=source,
    )
    return UnexpectedEndOfInput(diag)


def error_unterminated_structure(span: SourceSpan, source: str = None) -> UnterminatedStructure:
    """E103: Struct without closing parenthesis."""
    diag = Diagnostic(
        code="E103",
        message="unterminated struct (expected closing ')')",
        severity=ErrorSeverity.ERROR,
        span=span,
        source=source,
    )
    return UnterminatedStructure(diag)


def error_empty_structure(span: SourceSpan = None, source: str = None) -> EmptyStructure:
    """E104: Struct with no fields."""
    diag = Diagnostic(
        code="E104",
        message="empty struct",
        severity=ErrorSeverity.ERROR,
        span=span,
        source=source,
        hints=["there must be at least one type code between the parentheses"],
    )
    return EmptyStructure(diag)


def error_trailing_data(span: SourceSpan, source: str = None) -> TrailingData:
    """E105: Characters left after the last complete type."""
    diag = Diagnostic(
        code="E105",
        message="unexpected trailing characters after last complete type",
        severity=ErrorSeverity.ERROR,
        span=span,
        source=source,
    )
    return TrailingData(diag)


def error_length_out_of_bounds(length: int, minimum: int, maximum: int,
                               source: str = None) -> LengthOutOfBounds:
    """E106: Signature length outside the allowed range."""
    diag = Diagnostic(
        code="E106",
        message=f"signature length {length} is outside {minimum}..{maximum}",
        severity=ErrorSeverity.ERROR,
        source=source,
    )
    if length == 0:
        diag.hints.append("construct Signature([]) for a signature with no arguments")
    return LengthOutOfBounds(diag)


def error_nesting_too_deep(depth: int, maximum: int, span: SourceSpan,
                           source: str = None) -> NestingTooDeep:
    """E107: Containers nested deeper than the parser accepts."""
    diag = Diagnostic(
        code="E107",
        message=f"container nesting depth {depth} exceeds {maximum}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source=source,
        hints=["raise max_total_depth in the limits config to accept deeper signatures"],
    )
    return NestingTooDeep(diag)


# --- Validation codes ---

def error_signature_too_long(length: int, maximum: int) -> Diagnostic:
    """E201: Encoded signature is too long."""
    return Diagnostic(
        code="E201",
        message=f"signature is {length} characters long, maximum is {maximum}",
        severity=ErrorSeverity.ERROR,
    )


def error_array_too_deep(depth: int, maximum: int, span: SourceSpan = None) -> Diagnostic:
    """E202: Arrays nested too deeply."""
    return Diagnostic(
        code="E202",
        message=f"array nesting depth {depth} exceeds {maximum}",
        severity=ErrorSeverity.ERROR,
        span=span,
    )


def error_struct_too_deep(depth: int, maximum: int, span: SourceSpan = None) -> Diagnostic:
    """E203: Structs nested too deeply."""
    return Diagnostic(
        code="E203",
        message=f"struct nesting depth {depth} exceeds {maximum}",
        severity=ErrorSeverity.ERROR,
        span=span,
    )


def error_total_too_deep(depth: int, maximum: int, span: SourceSpan = None) -> Diagnostic:
    """E204: Containers nested too deeply."""
    return Diagnostic(
        code="E204",
        message=f"total container nesting depth {depth} exceeds {maximum}",
        severity=ErrorSeverity.ERROR,
        span=span,
    )


def error_dict_entry_outside_array(span: SourceSpan = None) -> Diagnostic:
    """E205: Dict entry that is not an array element."""
    return Diagnostic(
        code="E205",
        message="dict entry is only allowed as the element type of an array",
        severity=ErrorSeverity.ERROR,
        span=span,
        hints=["use 'a{...}' to describe a dictionary"],
    )


def warning_dict_entry_payload(found: str, span: SourceSpan = None) -> Diagnostic:
    """W201: Dict entry payload does not start with a basic type."""
    return Diagnostic(
        code="W201",
        message=f"dict entry payload '{found}' is not a basic type",
        severity=ErrorSeverity.WARNING,
        span=span,
        hints=["dictionary types carry a single payload type, not a key/value pair"],
    )


class DiagnosticCollector:
    """Collects diagnostics during validation."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == ErrorSeverity.ERROR]

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return self._error_count >= self.max_errors

    def raise_if_errors(self) -> None:
        """Raise a ValidationError carrying every error collected."""
        errors = self.errors
        if errors:
            raise ValidationError(errors[0], errors)

    def format_all(self, show_source: bool = True) -> str:
        """Format all diagnostics for display."""
        parts = [d.format(show_source) for d in self.diagnostics]
        if self._error_count > 0:
            parts.append(f"\n{self._error_count} error(s), {self.warning_count} warning(s)")
        elif self.warning_count > 0:
            parts.append(f"\n{self.warning_count} warning(s)")
        return "\n\n".join(parts)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self._error_count,
            "warning_count": self.warning_count,
        }

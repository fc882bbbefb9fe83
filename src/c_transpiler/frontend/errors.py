"""
C Front End Error Hierarchy
===========================

This module defines the exception hierarchy for the C front end.
All exceptions inherit from FrontendError, which itself inherits from
the base TranspilerError for consistent error handling across the package.

Exception Hierarchy
-------------------
FrontendError (base for all front-end errors)
├── LexError - the character stream cannot be tokenized
│   ├── UnterminatedLiteralError - missing closing quote
│   ├── InvalidEscapeError - unknown backslash escape
│   ├── MalformedLiteralError - bad numeric literal
│   └── InvalidCharacterError - unexpected character
├── ParseError - the token stream does not match the grammar
│   ├── PrematureEndError - input ended inside a construct
│   └── TypeNameAmbiguityError - undeclared name used where a type is needed
└── TranslationUnitError - aggregate report from batch parsing

Error Message Format
--------------------
All errors include source location information and follow this format:

    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing

Example:
    main.c:3:13: error: unexpected ';'
            int x = ;
                    ^
    hint: expected expression
"""

from typing import Optional, List, Sequence, TYPE_CHECKING

from c_transpiler.errors import TranspilerError, SourceLocation

if TYPE_CHECKING:
    from c_transpiler.frontend.lexer import CToken


# =============================================================================
# Base Front End Exception
# =============================================================================

class FrontendError(TranspilerError):
    """
    Base exception for all C front-end errors.

    This class provides common functionality for error messages including
    source location tracking, source line context, and helpful hints.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example:

            main.c:5:12: error: unexpected identifier 'y'
                int x y;
                      ^
            hint: expected ';'
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class TranslationUnitError(FrontendError):
    """
    Aggregate error containing every error collected for one file.

    Raised by the batch driver after it has resynchronized past each
    failure. The message is already a formatted report from
    ErrorCollector and is passed through without another prefix.

    Attributes:
        errors: The individual errors, in source order
    """

    def __init__(self, report: str, errors: Sequence[FrontendError] = ()):
        self.errors = list(errors)
        super().__init__(report)

    def _format_message(self) -> str:
        """Return message as-is - it's already a formatted aggregate report."""
        return self.message


# =============================================================================
# Lexical Errors
# =============================================================================

class LexError(FrontendError):
    """
    The character stream could not be converted into tokens.

    Examples:
        - Unterminated string or character literal
        - Unknown escape sequence
        - Malformed numeric literal
        - Unterminated block comment
    """
    pass


class UnterminatedLiteralError(LexError):
    """
    String or character literal without its closing quote.

    Example:
        char *s = "hello;    // Missing closing quote
    """

    def __init__(
        self,
        kind: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.kind = kind
        quote = '"' if kind == "string" else "'"
        super().__init__(
            f"unterminated {kind} literal",
            location=location,
            hint=f"add closing {quote} to complete the {kind}",
            source_line=source_line,
        )


class InvalidEscapeError(LexError):
    """Backslash escape that C does not define, such as '\\q'."""

    def __init__(
        self,
        sequence: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: str = "use \\\\ for a literal backslash",
    ):
        self.sequence = sequence
        super().__init__(
            f"invalid escape sequence '\\{sequence}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MalformedLiteralError(LexError):
    """Numeric literal that is not a valid C integer or floating constant."""

    def __init__(
        self,
        text: str,
        reason: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        self.reason = reason
        super().__init__(
            f"malformed numeric literal '{text}': {reason}",
            location=location,
            source_line=source_line,
        )


class InvalidCharacterError(LexError):
    """
    Invalid character in source code.

    Raised when the lexer encounters a character that cannot start
    any C token.
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Parse Errors
# =============================================================================

def describe_token(token: "CToken") -> str:
    """Human-readable description of a token for error messages."""
    from c_transpiler.frontend.lexer import CTokenType

    if token.type == CTokenType.EOF:
        return "end of input"
    if token.type == CTokenType.IDENTIFIER:
        return f"identifier '{token.lexeme}'"
    return f"'{token.lexeme}'"


class ParseError(FrontendError):
    """
    The token stream does not match the C grammar.

    Carries the offending token and the set of tokens or grammar
    categories that would have been accepted at that point.

    Attributes:
        token: The token that could not be parsed (None if unknown)
        expected: Expected tokens/categories, e.g. ("';'",) or ("expression",)
    """

    def __init__(
        self,
        message: str,
        token: Optional["CToken"] = None,
        expected: Sequence[str] = (),
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.token = token
        self.expected = tuple(expected)
        if location is None and token is not None:
            location = token.location
        if hint is None and self.expected:
            hint = f"expected {' or '.join(self.expected)}"
        super().__init__(message, location=location, hint=hint, source_line=source_line)

    @classmethod
    def unexpected(
        cls,
        token: "CToken",
        expected: Sequence[str],
        source_line: Optional[str] = None,
    ) -> "ParseError":
        """Build the right error for an unexpected token (EOF gets its own class)."""
        from c_transpiler.frontend.lexer import CTokenType

        if token.type == CTokenType.EOF:
            return PrematureEndError(token, expected, source_line=source_line)
        return cls(
            f"unexpected {describe_token(token)}",
            token=token,
            expected=expected,
            source_line=source_line,
        )


class PrematureEndError(ParseError):
    """Input ended while a construct was still open."""

    def __init__(
        self,
        token: "CToken",
        expected: Sequence[str] = (),
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "unexpected end of input",
            token=token,
            expected=expected,
            source_line=source_line,
        )


class TypeNameAmbiguityError(ParseError):
    """
    A parenthesized name is used as a type but is not a known type.

    The parser does not guess between a cast and a parenthesized
    expression when the surrounding tokens only make sense for a cast
    to a name the Type Registry has never seen:

        (foo *)p     // 'foo' was never typedef'd
        (foo) x      // operand follows a parenthesized identifier

    Attributes:
        name: The unresolved name
    """

    def __init__(
        self,
        name: str,
        token: Optional["CToken"] = None,
        source_line: Optional[str] = None,
    ):
        self.name = name
        super().__init__(
            f"'{name}' is used as a type name but has not been declared",
            token=token,
            expected=("type name",),
            source_line=source_line,
            hint=f"declare 'typedef ... {name};' before this use",
        )


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The driver uses this to continue parsing after an error, resynchronizing
    at the next statement boundary and reporting all errors together.

    Example:
        collector = ErrorCollector(max_errors=100)

        while not parser.at_end():
            try:
                items.append(parser.parse_external_declaration())
            except ParseError as e:
                collector.add(e)
                if collector.should_stop():
                    break
                parser.synchronize()

        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before stopping
        """
        self.errors: List[FrontendError] = []
        self.warnings: List[str] = []
        self.max_errors = max_errors

    def add(self, error: FrontendError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        return len(self.errors)

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        for warning in self.warnings:
            lines.append(warning)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()

    def raise_if_errors(self) -> None:
        """Raise a TranslationUnitError if any errors were collected."""
        if self.has_errors():
            raise TranslationUnitError(self.report(), self.errors)

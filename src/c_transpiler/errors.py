"""
C Transpiler Error Hierarchy
============================

This module defines the root of the exception hierarchy for the whole
transpiler. All exceptions inherit from TranspilerError, allowing callers
to catch every transpiler-related error with a single except clause.

Exception Hierarchy
-------------------
TranspilerError (base)
└── FrontendError (lexer, parser, driver; see c_transpiler.frontend.errors)

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable. This allows for detailed error messages that help users
quickly locate the offending construct in their C source.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class TranspilerError(Exception):
    """
    Base exception for all transpiler errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch every transpiler error with a single except clause:

        try:
            unit = parse_source(text, "main.c")
        except TranspilerError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    This class is used throughout the front end to track where tokens,
    AST nodes, and errors occur in the source file. The immutable
    (frozen) design ensures locations cannot be accidentally modified.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"

"""
C Transpiler
============

Source-to-source tooling for C. The front end reads preprocessed C into
an immutable, typed syntax tree and renders trees back to C, so that
later passes can analyse or rewrite programs and emit compilable code.

Main Components
---------------
- **frontend**: lexer, Type Registry, parser, AST and renderer
- **cli**: the cfront command-line tool

Quick Start
-----------
Parse and regenerate a file:
    >>> from c_transpiler import CFrontend
    >>> result = CFrontend().round_trip("int x=1,*p=&x;")
    >>> print(result.rendered, end="")
    int x = 1, *p = &x;

Or use the command-line tool:
    $ cfront main.i -o main.out.c
    $ cfront --ast main.i
"""

__version__ = "1.0.0"
__author__ = "C Transpiler Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from c_transpiler.errors import TranspilerError, SourceLocation
from c_transpiler.frontend import (
    CFrontend,
    FrontendOptions,
    FrontendResult,
    FrontendError,
    LexError,
    ParseError,
    TranslationUnitError,
    parse_source,
    parse_expression,
    parse_statement,
    render,
)

__all__ = [
    "__version__",
    # Errors
    "TranspilerError",
    "SourceLocation",
    "FrontendError",
    "LexError",
    "ParseError",
    "TranslationUnitError",
    # Front end
    "CFrontend",
    "FrontendOptions",
    "FrontendResult",
    "parse_source",
    "parse_expression",
    "parse_statement",
    "render",
]

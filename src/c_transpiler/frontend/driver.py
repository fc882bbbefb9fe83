"""
C Front End Driver
==================

This module provides the main interface to the C front end.
It orchestrates the pipeline for one translation unit:

    Source → Lex → Parse (+ Type Registry) → AST → Render

Usage
-----
Command line:
    $ cfront main.i -o main.out.c

Programmatic:
    >>> from c_transpiler.frontend import CFrontend
    >>> result = CFrontend().round_trip('int main(void) { return 0; }')
    >>> print(result.rendered)
    int main(void) {
        return 0;
    }

Input is expected to be preprocessed already; leftover line markers are
ignored by the lexer.

Error Handling
--------------
By default the first lex or parse error is raised. With keep_going the
driver collects parse errors, resynchronizes at the next file-scope ';'
or '}', and raises one TranslationUnitError listing all of them. A lex
error always aborts the file, since the token stream ends there.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Iterable

from c_transpiler.frontend.lexer import CLexer, CToken
from c_transpiler.frontend.parser import CParser
from c_transpiler.frontend.registry import TypeRegistry, RegistrySnapshot
from c_transpiler.frontend.renderer import CRenderer, render
from c_transpiler.frontend.ast import ASTNode, TranslationUnit, Expression, Statement
from c_transpiler.errors import SourceLocation
from c_transpiler.frontend.errors import ParseError, ErrorCollector

logger = logging.getLogger(__name__)


@dataclass
class FrontendOptions:
    """
    Front end configuration options.

    Attributes:
        filename: Name used in locations when parsing a string
        predefined_types: Names treated as typedefs from the start, for
                          types declared in headers outside the input
                          (size_t, FILE, ...)
        indent: Spaces per indentation level in rendered output
        max_errors: Stop collecting after this many errors (keep_going)
        keep_going: Collect parse errors across the file instead of
                    stopping at the first one
    """
    filename: str = "<input>"
    predefined_types: list[str] = None
    indent: int = 4
    max_errors: int = 100
    keep_going: bool = False

    def __post_init__(self):
        if self.predefined_types is None:
            self.predefined_types = []
        else:
            self.predefined_types = list(dict.fromkeys(self.predefined_types))
        if self.indent < 0:
            raise ValueError(f"indent must be non-negative, got {self.indent}")
        if self.max_errors < 1:
            raise ValueError(f"max_errors must be at least 1, got {self.max_errors}")


@dataclass
class FrontendResult:
    """
    Result of running the front end on one translation unit.

    Attributes:
        filename: Source filename
        ast: The parsed translation unit
        rendered: Regenerated C source (round_trip only)
        token_count: Number of tokens lexed, EOF included
        registry: Type names known at the end of the parse
        warnings: Warning messages
    """
    filename: str = ""
    ast: Optional[TranslationUnit] = None
    rendered: str = ""
    token_count: int = 0
    registry: Optional[RegistrySnapshot] = None
    warnings: list = None

    def __post_init__(self):
        if self.warnings is None:
            self.warnings = []


class CFrontend:
    """
    C front end: lexer, parser and renderer for one file at a time.

    Each call gets a fresh Type Registry, so instances can be reused and
    separate instances can run in parallel.

    Example:
        frontend = CFrontend(FrontendOptions(predefined_types=["size_t"]))
        result = frontend.parse_file("main.i")
        for decl in result.ast.declarations:
            print(type(decl).__name__)

    Attributes:
        options: Front end configuration options
    """

    def __init__(self, options: Optional[FrontendOptions] = None):
        """
        Initialize the front end.

        Args:
            options: Configuration (uses defaults if None)
        """
        self.options = options or FrontendOptions()
        self._errors = ErrorCollector(self.options.max_errors)

    def tokenize(self, source: str, filename: Optional[str] = None) -> list[CToken]:
        """Lex source into a token list ending with EOF."""
        return self._lex(source, filename or self.options.filename)

    def parse_source(self, source: str, filename: Optional[str] = None) -> FrontendResult:
        """
        Parse C source text into an AST.

        Args:
            source: Preprocessed C source
            filename: Source filename for error messages

        Returns:
            FrontendResult with ast, token_count and registry

        Raises:
            LexError: If the source cannot be tokenized
            ParseError: On the first syntax error (default mode)
            TranslationUnitError: If any errors were collected (keep_going)
        """
        filename = filename or self.options.filename
        self._errors.clear()
        result = FrontendResult(filename=filename)

        tokens = self._lex(source, filename)
        result.token_count = len(tokens)

        registry = TypeRegistry(self.options.predefined_types)
        result.ast = self._parse(tokens, filename, source.splitlines(), registry)
        result.registry = registry.snapshot()
        result.warnings = list(self._errors.warnings)

        logger.debug(
            f"{filename}: {result.token_count} tokens, "
            f"{len(result.ast.declarations)} declarations, "
            f"{len(result.registry.typedefs)} typedefs"
        )
        return result

    def parse_file(self, filepath: str | Path) -> FrontendResult:
        """
        Parse a C source file.

        Raises:
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.parse_source(source, str(filepath))

    def render(self, node: ASTNode) -> str:
        """Render a node using the configured indentation."""
        return CRenderer(" " * self.options.indent).render(node)

    def round_trip(self, source: str, filename: Optional[str] = None) -> FrontendResult:
        """Parse source and render it back to C."""
        result = self.parse_source(source, filename)
        result.rendered = self.render(result.ast)
        return result

    def _lex(self, source: str, filename: str) -> list[CToken]:
        """Tokenize source."""
        lexer = CLexer(source, filename)
        return list(lexer.tokenize())

    def _parse(
        self,
        tokens: list[CToken],
        filename: str,
        source_lines: list[str],
        registry: TypeRegistry,
    ) -> TranslationUnit:
        """Parse tokens into a translation unit, collecting errors in keep_going mode."""
        parser = CParser(tokens, filename, source_lines, registry)
        if not self.options.keep_going:
            return parser.parse()

        declarations = []
        while not parser.at_end():
            try:
                declarations.append(parser.parse_external_declaration())
            except ParseError as e:
                self._errors.add(e)
                if self._errors.should_stop():
                    self._errors.add_warning(
                        f"stopped after {self._errors.error_count()} errors"
                    )
                    break
                parser.synchronize()

        self._errors.raise_if_errors()

        return TranslationUnit(
            location=SourceLocation(filename, 1, 1),
            declarations=tuple(declarations),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def _parser_for(
    source: str,
    filename: str,
    predefined_types: Optional[Iterable[str]],
) -> CParser:
    tokens = list(CLexer(source, filename).tokenize())
    registry = TypeRegistry(predefined_types or ())
    return CParser(tokens, filename, source.splitlines(), registry)


def parse_source(
    source: str,
    filename: str = "<input>",
    predefined_types: Optional[Iterable[str]] = None,
) -> TranslationUnit:
    """
    Parse C source code into an AST.

    This is a convenience function that combines lexing and parsing.

    Args:
        source: Preprocessed C source code
        filename: Source filename for error messages
        predefined_types: Extra names to treat as typedefs

    Returns:
        The root TranslationUnit of the AST

    Raises:
        FrontendError: If lexing or parsing fails
    """
    return _parser_for(source, filename, predefined_types).parse()


def parse_expression(
    source: str,
    filename: str = "<input>",
    predefined_types: Optional[Iterable[str]] = None,
) -> Expression:
    """
    Parse a single C expression. The whole input must be consumed.

    >>> from c_transpiler.frontend import ASTPrinter
    >>> ASTPrinter().print(parse_expression("a + b * c"))
    '(a + (b * c))'
    """
    parser = _parser_for(source, filename, predefined_types)
    expr = parser.parse_expression()
    parser.expect_end()
    return expr


def parse_statement(
    source: str,
    filename: str = "<input>",
    predefined_types: Optional[Iterable[str]] = None,
) -> Statement:
    """Parse a single C statement. The whole input must be consumed."""
    parser = _parser_for(source, filename, predefined_types)
    statement = parser.parse_statement()
    parser.expect_end()
    return statement


__all__ = [
    "FrontendOptions",
    "FrontendResult",
    "CFrontend",
    "parse_source",
    "parse_expression",
    "parse_statement",
    "render",
]

"""
C Front End
===========

This package implements the front end of a C-to-C transpiler: it reads
one preprocessed C translation unit, builds a typed abstract syntax tree,
and renders any tree back to compilable C.

- A lexer (tokenizer) for preprocessed C source
- A Type Registry tracking typedef names and aggregate tags
- A recursive descent parser producing an immutable AST
- A renderer emitting C with minimal parentheses

Pipeline
--------
    C Source → Lexer → Parser (+ Type Registry) → AST → Renderer → C Source

The rendered source re-parses to an AST equal to the original, so the
tree can be rewritten in between and turned back into C.

Usage
-----
>>> from c_transpiler.frontend import parse_source, render
>>> unit = parse_source("typedef int T; T f(T x) { return (T)x * 2; }")
>>> print(render(unit))
typedef int T;
<BLANKLINE>
T f(T x) {
    return (T)x * 2;
}
<BLANKLINE>

Language Coverage
-----------------
Supported:
- All C89 declarators: pointers, arrays, functions, function pointers
- struct, union and enum, with bit-fields
- typedef, storage classes, const/volatile/restrict
- All C operators except the comma operator
- All statements, including switch, goto and labels

Not supported:
- Preprocessing (input must already be preprocessed)
- K&R style parameter lists, compound literals, designated initializers
- Semantic analysis (no type checking or scope resolution)
"""

from c_transpiler.frontend.driver import (
    CFrontend,
    FrontendOptions,
    FrontendResult,
    parse_source,
    parse_expression,
    parse_statement,
)
from c_transpiler.frontend.errors import (
    FrontendError,
    TranslationUnitError,
    LexError,
    UnterminatedLiteralError,
    InvalidEscapeError,
    MalformedLiteralError,
    InvalidCharacterError,
    ParseError,
    PrematureEndError,
    TypeNameAmbiguityError,
    ErrorCollector,
)
from c_transpiler.frontend.lexer import CLexer, CTokenType, CToken, tokenize
from c_transpiler.frontend.parser import CParser
from c_transpiler.frontend.registry import TypeRegistry, RegistrySnapshot
from c_transpiler.frontend.renderer import CRenderer, render
from c_transpiler.frontend.types import (
    Qualifier,
    NamedType,
    PointerType,
    ArrayType,
    FunctionType,
    CType,
    type_name,
)
from c_transpiler.frontend.ast import (
    ASTNode,
    Expression,
    Statement,
    Declaration,
    TranslationUnit,
    FunctionDefinition,
    VariableDeclaration,
    TypedefDeclaration,
    DeclarationList,
    AggregateDeclaration,
    AggregateDefinition,
    ASTVisitor,
    ASTPrinter,
)

__all__ = [
    # Driver
    "CFrontend",
    "FrontendOptions",
    "FrontendResult",
    "parse_source",
    "parse_expression",
    "parse_statement",
    "render",
    # Errors
    "FrontendError",
    "TranslationUnitError",
    "LexError",
    "UnterminatedLiteralError",
    "InvalidEscapeError",
    "MalformedLiteralError",
    "InvalidCharacterError",
    "ParseError",
    "PrematureEndError",
    "TypeNameAmbiguityError",
    "ErrorCollector",
    # Pipeline stages
    "CLexer",
    "CTokenType",
    "CToken",
    "tokenize",
    "CParser",
    "TypeRegistry",
    "RegistrySnapshot",
    "CRenderer",
    # Types
    "Qualifier",
    "NamedType",
    "PointerType",
    "ArrayType",
    "FunctionType",
    "CType",
    "type_name",
    # AST
    "ASTNode",
    "Expression",
    "Statement",
    "Declaration",
    "TranslationUnit",
    "FunctionDefinition",
    "VariableDeclaration",
    "TypedefDeclaration",
    "DeclarationList",
    "AggregateDeclaration",
    "AggregateDefinition",
    "ASTVisitor",
    "ASTPrinter",
]

"""
C Recursive Descent Parser
==========================

This module implements a recursive descent parser for preprocessed C.
It takes a stream of tokens from the lexer and builds an Abstract
Syntax Tree (AST), consulting a Type Registry to tell type names from
ordinary identifiers.

Grammar (Simplified EBNF)
-------------------------
translation_unit ::= external_decl*
external_decl   ::= specifiers declarator block                 (function)
                  | specifiers (init_declarator (',' init_declarator)*)? ';'
specifiers      ::= (storage | qualifier | type_keyword | aggregate | TYPEDEF_NAME)+
aggregate       ::= ('struct' | 'union') IDENTIFIER? ('{' member_decl* '}')?
                  | 'enum' IDENTIFIER? ('{' enumerator (',' enumerator)* ','? '}')?
declarator      ::= ('*' qualifier*)* direct_declarator
direct_declarator ::= (IDENTIFIER | '(' declarator ')')? suffix*
suffix          ::= '[' expr? ']' | '(' parameter_list? ')'
init_declarator ::= declarator ('=' initializer)?

statement       ::= block | if_stmt | while_stmt | do_stmt | for_stmt
                  | switch_stmt | return_stmt | break_stmt | continue_stmt
                  | goto_stmt | label_stmt | declaration | expr_stmt | ';'

Expression Precedence (lowest to highest)
-----------------------------------------
1.  assignment     =, +=, -=, etc.        (right-assoc)
2.  ternary        ?:                     (right-assoc)
3.  logical_or     ||
4.  logical_and    &&
5.  bitwise_or     |
6.  bitwise_xor    ^
7.  bitwise_and    &
8.  equality       == !=
9.  relational     < > <= >=
10. shift          << >>
11. additive       + -
12. multiplicative * / %
13. unary          - + ! ~ & * ++ -- sizeof (cast)
14. postfix        () [] . -> ++ --
15. primary        IDENTIFIER, literals, '(' expr ')'

Ambiguous Symbols
-----------------
'&', '*', '-' and '+' are unary when they appear where an operand is
expected (the unary level is entered) and binary when a binary loop finds
them after a complete left operand. '++'/'--' before an operand are
prefix, after a postfix chain they are postfix. No symbol is re-examined
once a level has classified it.

A '(' starts a cast only when the next token names a type: a builtin
keyword, struct/union/enum, a qualifier, or an identifier registered as a
typedef. A parenthesized unregistered identifier that can only be a type
('(foo *)p', '(foo) x') raises TypeNameAmbiguityError.

Example Usage
-------------
>>> from c_transpiler.frontend.lexer import CLexer
>>> from c_transpiler.frontend.parser import CParser
>>> source = 'int main(void) { return 42; }'
>>> tokens = list(CLexer(source, "test.c").tokenize())
>>> unit = CParser(tokens, "test.c").parse()
>>> unit.declarations[0].name
'main'
"""

import logging
from dataclasses import dataclass
from typing import Optional, Callable

from c_transpiler.errors import SourceLocation
from c_transpiler.frontend.lexer import (
    CToken,
    CTokenType,
    TYPE_KEYWORDS,
    AGGREGATE_KEYWORDS,
    QUALIFIER_KEYWORDS,
    STORAGE_KEYWORDS,
)
from c_transpiler.frontend.registry import TypeRegistry
from c_transpiler.frontend.types import (
    CType,
    NamedType,
    PointerType,
    ArrayType,
    FunctionType,
    Qualifier,
    canonical_builtin,
)
from c_transpiler.frontend.ast import (
    TranslationUnit,
    FunctionDefinition,
    VariableDeclaration,
    TypedefDeclaration,
    DeclarationList,
    AggregateDeclaration,
    AggregateDefinition,
    Enumerator,
    Declaration,
    Statement,
    BlockStatement,
    ExpressionStatement,
    EmptyStatement,
    IfStatement,
    WhileStatement,
    DoWhileStatement,
    ForStatement,
    SwitchStatement,
    CaseClause,
    ReturnStatement,
    BreakStatement,
    ContinueStatement,
    GotoStatement,
    LabelStatement,
    Expression,
    IntegerLiteral,
    FloatLiteral,
    CharLiteral,
    StringLiteral,
    IdentifierExpression,
    UnaryExpression,
    PrefixExpression,
    PostfixExpression,
    BinaryExpression,
    AssignmentExpression,
    TernaryExpression,
    CastExpression,
    SizeofTypeExpression,
    SizeofExpression,
    CallExpression,
    ArraySubscript,
    MemberAccessExpression,
    PointerMemberExpression,
    InitializerList,
    BinaryOperator,
    UnaryOperator,
    IncrementOperator,
    AssignmentOperator,
)
from c_transpiler.frontend.errors import ParseError, TypeNameAmbiguityError

logger = logging.getLogger(__name__)


# Token -> operator tables
ASSIGNMENT_OPERATORS = {
    CTokenType.ASSIGN: AssignmentOperator.ASSIGN,
    CTokenType.PLUS_ASSIGN: AssignmentOperator.ADD_ASSIGN,
    CTokenType.MINUS_ASSIGN: AssignmentOperator.SUB_ASSIGN,
    CTokenType.STAR_ASSIGN: AssignmentOperator.MUL_ASSIGN,
    CTokenType.SLASH_ASSIGN: AssignmentOperator.DIV_ASSIGN,
    CTokenType.PERCENT_ASSIGN: AssignmentOperator.MOD_ASSIGN,
    CTokenType.AND_ASSIGN: AssignmentOperator.AND_ASSIGN,
    CTokenType.OR_ASSIGN: AssignmentOperator.OR_ASSIGN,
    CTokenType.XOR_ASSIGN: AssignmentOperator.XOR_ASSIGN,
    CTokenType.LSHIFT_ASSIGN: AssignmentOperator.LSHIFT_ASSIGN,
    CTokenType.RSHIFT_ASSIGN: AssignmentOperator.RSHIFT_ASSIGN,
}

UNARY_OPERATORS = {
    CTokenType.MINUS: UnaryOperator.NEGATE,
    CTokenType.PLUS: UnaryOperator.POSITIVE,
    CTokenType.NOT: UnaryOperator.LOGICAL_NOT,
    CTokenType.TILDE: UnaryOperator.BITWISE_NOT,
    CTokenType.AMPERSAND: UnaryOperator.ADDRESS_OF,
    CTokenType.STAR: UnaryOperator.DEREFERENCE,
}

INCREMENT_OPERATORS = {
    CTokenType.INCREMENT: IncrementOperator.INCREMENT,
    CTokenType.DECREMENT: IncrementOperator.DECREMENT,
}

QUALIFIERS = {
    CTokenType.CONST: Qualifier.CONST,
    CTokenType.VOLATILE: Qualifier.VOLATILE,
    CTokenType.RESTRICT: Qualifier.RESTRICT,
}

# Tokens that can begin an operand directly
OPERAND_START = frozenset({
    CTokenType.IDENTIFIER,
    CTokenType.INT_LITERAL,
    CTokenType.FLOAT_LITERAL,
    CTokenType.CHAR_LITERAL,
    CTokenType.STRING,
    CTokenType.SIZEOF,
})


@dataclass(frozen=True)
class DeclSpecifiers:
    """
    Parsed declaration specifiers, shared by every declarator that follows.

    Attributes:
        base: The specified type, qualifiers included
        storage: Storage-class keywords other than typedef, in source order
        is_typedef: True if 'typedef' appeared
        aggregate: Aggregate body defined in these specifiers, if any
    """
    base: NamedType
    storage: tuple[str, ...] = ()
    is_typedef: bool = False
    aggregate: Optional[AggregateDefinition] = None


# A declarator is parsed into a function that applies it to a base type
TypeBuilder = Callable[[CType], CType]


class CParser:
    """
    Recursive descent parser for C.

    Parses a stream of tokens into an Abstract Syntax Tree (AST).
    Expressions use one method per precedence level; declarations use
    full C declarator syntax.

    The parser stops at the first error. Callers that want to report
    several errors per file call parse_external_declaration() in a loop
    and synchronize() after each ParseError (see CFrontend).

    Attributes:
        tokens: List of tokens to parse
        filename: Source filename for error reporting
        registry: Type names known so far; grows as typedefs and
                  aggregates are parsed
    """

    def __init__(
        self,
        tokens: list[CToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        registry: Optional[TypeRegistry] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer, ending with EOF
            filename: Source filename for error messages
            source_lines: Original source lines for error context
            registry: Type Registry to consult and extend (a fresh one
                      with only builtins if omitted)
        """
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []
        self.registry = registry if registry is not None else TypeRegistry()

        # Current position in token stream
        self._pos = 0

    # =========================================================================
    # Public Entry Points
    # =========================================================================

    def parse(self) -> TranslationUnit:
        """
        Parse the whole token stream as a translation unit.

        Returns:
            TranslationUnit containing all external declarations

        Raises:
            ParseError: On the first syntax error
        """
        declarations = []
        while not self.at_end():
            declarations.append(self.parse_external_declaration())

        logger.debug(f"{self.filename}: parsed {len(declarations)} external declarations")
        return TranslationUnit(
            location=SourceLocation(self.filename, 1, 1),
            declarations=tuple(declarations),
        )

    def parse_external_declaration(self) -> Declaration | Statement:
        """
        Parse one file-scope item: a function definition, declaration, or
        a stray ';' (returned as EmptyStatement).
        """
        if self._check(CTokenType.SEMICOLON):
            token = self._advance()
            return EmptyStatement(location=token.location)

        if not self._starts_declaration():
            raise self._unexpected("declaration")

        return self._parse_declaration(allow_function_body=True)

    def parse_statement(self) -> Statement:
        """Parse a single statement (declarations included)."""
        return self._parse_statement()

    def parse_expression(self) -> Expression:
        """Parse a single expression at assignment level."""
        return self._parse_expression()

    def at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self._peek().type == CTokenType.EOF

    def expect_end(self) -> None:
        """Raise ParseError unless all input has been consumed."""
        if not self.at_end():
            raise self._unexpected("end of input")

    def synchronize(self) -> None:
        """
        Skip ahead after a ParseError so file-scope parsing can continue.

        Tokens are discarded up to and including the next ';' or '}' that
        leaves the parser at file scope. Always consumes at least one token
        unless already at end of input.
        """
        depth = self._brace_depth()
        skipped = 0

        while not self.at_end():
            token = self._advance()
            skipped += 1
            if token.type == CTokenType.LBRACE:
                depth += 1
            elif token.type == CTokenType.RBRACE:
                depth -= 1
                if depth <= 0:
                    break
            elif token.type == CTokenType.SEMICOLON and depth <= 0:
                break

        logger.debug(f"{self.filename}: resynchronized after skipping {skipped} tokens")

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _peek(self, offset: int = 0) -> CToken:
        """Look at token at current position + offset."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def _advance(self) -> CToken:
        """Consume and return the current token."""
        if not self.at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]  # Return EOF

    def _check(self, *types: CTokenType) -> bool:
        """Check if current token is one of the given types."""
        return self._peek().type in types

    def _match(self, *types: CTokenType) -> Optional[CToken]:
        """
        Consume current token if it matches one of the types.

        Returns:
            The consumed token, or None if no match
        """
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: CTokenType, expected: str) -> CToken:
        """
        Expect and consume a specific token type.

        Args:
            token_type: The expected token type
            expected: Description for the error message, e.g. "';'"

        Raises:
            ParseError: If the expected token is not found
        """
        if self._check(token_type):
            return self._advance()
        raise self._unexpected(expected)

    def _unexpected(self, *expected: str) -> ParseError:
        """Build a ParseError for the current token."""
        token = self._peek()
        return ParseError.unexpected(token, expected, self._get_source_line(token.line))

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    def _brace_depth(self) -> int:
        """Brace nesting of the tokens consumed so far."""
        depth = 0
        for token in self.tokens[:self._pos]:
            if token.type == CTokenType.LBRACE:
                depth += 1
            elif token.type == CTokenType.RBRACE:
                depth -= 1
        return depth

    # =========================================================================
    # Type Name Recognition
    # =========================================================================

    def _is_type_at_offset(self, offset: int) -> bool:
        """Check if token at offset can start a type name (for casts and sizeof)."""
        token = self._peek(offset)
        if token.type in TYPE_KEYWORDS or token.type in AGGREGATE_KEYWORDS:
            return True
        if token.type in QUALIFIER_KEYWORDS:
            return True
        if token.type == CTokenType.IDENTIFIER:
            return self.registry.is_type_name(token.value)
        return False

    def _starts_declaration(self) -> bool:
        """Check if the current token starts declaration specifiers."""
        token = self._peek()
        if token.type in STORAGE_KEYWORDS:
            return True
        return self._is_type_at_offset(0)

    def _check_type_name_ambiguity(self) -> None:
        """
        Reject '(' IDENT ... ')' forms that only make sense as a cast when
        IDENT is not a known type. The current token is '('.

            (foo *)p    (foo **)p    (foo) x
        """
        name_token = self._peek(1)
        if name_token.type != CTokenType.IDENTIFIER:
            return
        if self.registry.is_type_name(name_token.value):
            return

        offset = 2
        while self._peek(offset).type == CTokenType.STAR:
            offset += 1
        if offset > 2 and self._peek(offset).type == CTokenType.RPAREN:
            raise TypeNameAmbiguityError(
                name_token.value, name_token, self._get_source_line(name_token.line)
            )

        if (self._peek(2).type == CTokenType.RPAREN
                and self._peek(3).type in OPERAND_START):
            raise TypeNameAmbiguityError(
                name_token.value, name_token, self._get_source_line(name_token.line)
            )

    # =========================================================================
    # Declaration Specifiers
    # =========================================================================

    def _parse_declaration_specifiers(self) -> DeclSpecifiers:
        """
        Parse storage classes, qualifiers and one type specifier.

        Builtin keywords may combine ("unsigned long long int") and appear
        in any order. A typedef name or aggregate stands alone.
        """
        storage = []
        qualifiers = set()
        words = []
        named: Optional[NamedType] = None
        aggregate: Optional[AggregateDefinition] = None
        is_typedef = False

        while True:
            token = self._peek()

            if token.type == CTokenType.TYPEDEF:
                self._advance()
                is_typedef = True
            elif token.type in STORAGE_KEYWORDS:
                self._advance()
                storage.append(token.lexeme)
            elif token.type in QUALIFIERS:
                self._advance()
                qualifiers.add(QUALIFIERS[token.type])
            elif token.type in TYPE_KEYWORDS:
                if named is not None:
                    raise ParseError(
                        "two or more data types in declaration specifiers",
                        token=token,
                        source_line=self._get_source_line(token.line),
                    )
                self._advance()
                if token.lexeme == "long" and words.count("long") == 2:
                    raise ParseError(
                        "'long long long' is too long",
                        token=token,
                        source_line=self._get_source_line(token.line),
                    )
                if token.lexeme in words and token.lexeme != "long":
                    raise ParseError(
                        f"duplicate '{token.lexeme}'",
                        token=token,
                        source_line=self._get_source_line(token.line),
                    )
                words.append(token.lexeme)
            elif token.type in AGGREGATE_KEYWORDS:
                if named is not None or words:
                    raise ParseError(
                        "two or more data types in declaration specifiers",
                        token=token,
                        source_line=self._get_source_line(token.line),
                    )
                named, aggregate = self._parse_aggregate_specifier()
            elif (token.type == CTokenType.IDENTIFIER
                    and named is None and not words
                    and self.registry.is_type_name(token.value)):
                self._advance()
                named = NamedType(token.value)
            else:
                break

        if named is None:
            if not words:
                raise self._unexpected("type specifier")
            named = NamedType(canonical_builtin(words))

        if qualifiers:
            named = NamedType(named.name, named.tag, frozenset(qualifiers))

        return DeclSpecifiers(
            base=named,
            storage=tuple(storage),
            is_typedef=is_typedef,
            aggregate=aggregate,
        )

    def _parse_aggregate_specifier(self) -> tuple[NamedType, Optional[AggregateDefinition]]:
        """
        Parse a struct/union/enum specifier.

        Handles:
            struct Point               - reference (or forward declaration)
            struct Point { ... }       - definition
            struct { ... }             - anonymous definition
            enum Color { RED, GREEN = 2 }

        The tag is registered once the specifier is complete.

        Returns:
            (NamedType for the aggregate, AggregateDefinition if a body was given)
        """
        kind_token = self._advance()
        kind = kind_token.lexeme

        tag = None
        if self._check(CTokenType.IDENTIFIER):
            tag = self._advance().value

        if not self._check(CTokenType.LBRACE):
            if tag is None:
                raise self._unexpected("identifier", "'{'")
            self.registry.register_tag(kind, tag)
            return NamedType(tag, kind), None

        self._advance()  # consume '{'
        members: list[Declaration] = []
        enumerators: list[Enumerator] = []

        if kind == "enum":
            while not self._check(CTokenType.RBRACE):
                enumerators.append(self._parse_enumerator())
                if not self._match(CTokenType.COMMA):
                    break
        else:
            while not self._check(CTokenType.RBRACE):
                if self.at_end():
                    raise self._unexpected("'}'")
                members.append(self._parse_member_declaration())

        self._expect(CTokenType.RBRACE, "'}'")

        if tag is not None:
            self.registry.register_tag(kind, tag)

        definition = AggregateDefinition(
            location=kind_token.location,
            kind=kind,
            tag=tag,
            members=tuple(members),
            enumerators=tuple(enumerators),
            has_body=True,
        )
        return NamedType(tag or "", kind), definition

    def _parse_enumerator(self) -> Enumerator:
        """Parse NAME or NAME = constant-expression."""
        name_token = self._expect(CTokenType.IDENTIFIER, "enumerator name")
        value = None
        if self._match(CTokenType.ASSIGN):
            value = self._parse_ternary()
        return Enumerator(location=name_token.location, name=name_token.value, value=value)

    def _parse_member_declaration(self) -> Declaration:
        """
        Parse one struct/union member declaration.

        Supports several declarators, bit-fields and unnamed bit-fields:
            int x, y;
            unsigned ready : 1;
            unsigned : 4;
            struct { int a; } inner;
        """
        location = self._peek().location
        specs = self._parse_declaration_specifiers()

        if self._check(CTokenType.SEMICOLON):
            # Anonymous struct/union member, or a nested aggregate definition
            self._advance()
            return VariableDeclaration(
                location=location,
                var_type=specs.base,
                aggregate=specs.aggregate,
            )

        members = []
        while True:
            name = ""
            member_type: CType = specs.base
            if not self._check(CTokenType.COLON):
                declared_name, _, build = self._parse_declarator(allow_name=True, require_name=True)
                name = declared_name
                member_type = build(specs.base)

            bit_width = None
            if self._match(CTokenType.COLON):
                bit_width = self._parse_ternary()

            members.append(VariableDeclaration(
                location=location,
                var_type=member_type,
                name=name,
                storage=specs.storage,
                aggregate=specs.aggregate if not members else None,
                bit_width=bit_width,
            ))

            if not self._match(CTokenType.COMMA):
                break

        self._expect(CTokenType.SEMICOLON, "';'")

        if len(members) == 1:
            return members[0]
        return DeclarationList(location=location, declarations=tuple(members))

    # =========================================================================
    # Declarators
    # =========================================================================

    def _parse_qualifiers(self) -> frozenset[Qualifier]:
        qualifiers = set()
        while self._peek().type in QUALIFIERS:
            qualifiers.add(QUALIFIERS[self._advance().type])
        return frozenset(qualifiers)

    def _parse_declarator(
        self,
        allow_name: bool,
        require_name: bool,
    ) -> tuple[Optional[str], Optional[SourceLocation], TypeBuilder]:
        """
        Parse a (possibly abstract) declarator.

        The declarator is returned as a builder function that wraps a base
        type, because the declarator's structure is read outside-in while
        the type is built inside-out:

            int *arr[10]      array of 10 pointers to int
            int (*p)[10]      pointer to array of 10 int
            int (*fp)(int)    pointer to function(int) returning int

        Args:
            allow_name: An identifier may appear (False in type names)
            require_name: An identifier must appear

        Returns:
            (name or None, name location or None, builder)
        """
        pointers: list[frozenset[Qualifier]] = []
        while self._match(CTokenType.STAR):
            pointers.append(self._parse_qualifiers())

        name = None
        name_location = None
        inner: TypeBuilder = lambda t: t

        if allow_name and self._check(CTokenType.IDENTIFIER):
            name_token = self._advance()
            name = name_token.value
            name_location = name_token.location
        elif self._check(CTokenType.LPAREN) and self._is_nested_declarator(allow_name):
            self._advance()
            name, name_location, inner = self._parse_declarator(allow_name, require_name)
            self._expect(CTokenType.RPAREN, "')'")

        if require_name and name is None:
            raise self._unexpected("identifier")

        suffixes: list[TypeBuilder] = []
        while True:
            if self._match(CTokenType.LBRACKET):
                size = None
                if not self._check(CTokenType.RBRACKET):
                    size = self._parse_assignment()
                self._expect(CTokenType.RBRACKET, "']'")
                suffixes.append(lambda t, size=size: ArrayType(t, size))
            elif self._match(CTokenType.LPAREN):
                parameters, names, variadic = self._parse_parameter_list()
                suffixes.append(
                    lambda t, p=parameters, n=names, v=variadic: FunctionType(t, p, v, n)
                )
            else:
                break

        def build(base: CType) -> CType:
            result = base
            for qualifiers in pointers:
                result = PointerType(result, qualifiers)
            for suffix in reversed(suffixes):
                result = suffix(result)
            return inner(result)

        return name, name_location, build

    def _is_nested_declarator(self, allow_name: bool) -> bool:
        """
        Decide whether '(' opens a nested declarator or a parameter list.

            int (*p)[3]     nested: '(' followed by '*'
            int (p)         nested: '(' followed by a non-type identifier
            int (int)       parameter list (abstract function type)
        """
        following = self._peek(1)
        if following.type == CTokenType.STAR:
            return True
        if allow_name and following.type == CTokenType.IDENTIFIER:
            return not self.registry.is_type_name(following.value)
        return False

    def _parse_parameter_list(self) -> tuple[tuple[CType, ...], tuple[Optional[str], ...], bool]:
        """
        Parse a parameter list after '('.

        Handles:
            ()                      - unspecified parameters
            (void)                  - no parameters
            (int x, char *)         - named and unnamed parameters
            (const char *fmt, ...)  - variadic
        """
        parameters: list[CType] = []
        names: list[Optional[str]] = []
        variadic = False

        if self._match(CTokenType.RPAREN):
            return (), (), False

        if self._check(CTokenType.VOID) and self._peek(1).type == CTokenType.RPAREN:
            self._advance()
            self._advance()
            return (NamedType("void"),), (None,), False

        while True:
            if self._match(CTokenType.ELLIPSIS):
                variadic = True
                break

            specs = self._parse_declaration_specifiers()
            name, _, build = self._parse_declarator(allow_name=True, require_name=False)
            parameters.append(build(specs.base))
            names.append(name)

            if not self._match(CTokenType.COMMA):
                break

        self._expect(CTokenType.RPAREN, "')'")
        return tuple(parameters), tuple(names), variadic

    def _parse_type_name(self) -> CType:
        """Parse a type name for a cast or sizeof: specifiers plus abstract declarator."""
        start = self._peek()
        specs = self._parse_declaration_specifiers()
        if specs.storage or specs.is_typedef:
            raise ParseError(
                "storage class in type name",
                token=start,
                source_line=self._get_source_line(start.line),
            )
        if specs.aggregate is not None:
            raise ParseError(
                "aggregate definition in type name",
                token=start,
                source_line=self._get_source_line(start.line),
                hint="define the struct separately and refer to it by tag",
            )
        _, _, build = self._parse_declarator(allow_name=False, require_name=False)
        return build(specs.base)

    # =========================================================================
    # Declarations
    # =========================================================================

    def _parse_declaration(self, allow_function_body: bool = False) -> Declaration:
        """
        Parse a declaration or (at file scope) a function definition.

        Handles:
            int x;  int a = 1, *b;          - variables
            int max(int a, int b);          - prototype
            int max(int a, int b) { ... }   - definition
            typedef unsigned long size_t;   - typedef
            struct Point { int x, y; };     - standalone aggregate
            struct Point origin = {0, 0};   - aggregate used as a type

        Typedef names are registered after the terminating ';'.
        """
        location = self._peek().location
        specs = self._parse_declaration_specifiers()

        if self._check(CTokenType.SEMICOLON):
            self._advance()
            if specs.base.tag is not None and not specs.storage and not specs.is_typedef:
                definition = specs.aggregate or AggregateDefinition(
                    location=location,
                    kind=specs.base.tag,
                    tag=specs.base.name,
                    has_body=False,
                )
                return AggregateDeclaration(location=location, definition=definition)
            raise ParseError(
                "declaration does not declare anything",
                token=self._peek(-1),
                expected=("identifier",),
                source_line=self._get_source_line(self._peek(-1).line),
            )

        declarations: list[Declaration] = []
        while True:
            name, name_location, build = self._parse_declarator(allow_name=True, require_name=True)
            declared_type = build(specs.base)
            aggregate = specs.aggregate if not declarations else None

            if (allow_function_body and not declarations and not specs.is_typedef
                    and isinstance(declared_type, FunctionType)
                    and self._check(CTokenType.LBRACE)):
                body = self._parse_block()
                logger.debug(f"{self.filename}:{location.line}: function '{name}'")
                return FunctionDefinition(
                    location=location,
                    name=name,
                    function_type=declared_type,
                    body=body,
                    storage=specs.storage,
                )

            if specs.is_typedef:
                declarations.append(TypedefDeclaration(
                    location=location,
                    name=name,
                    target_type=declared_type,
                    aggregate=aggregate,
                ))
            else:
                initializer = None
                if self._match(CTokenType.ASSIGN):
                    initializer = self._parse_initializer()
                declarations.append(VariableDeclaration(
                    location=location,
                    var_type=declared_type,
                    name=name,
                    initializer=initializer,
                    storage=specs.storage,
                    aggregate=aggregate,
                ))

            if not self._match(CTokenType.COMMA):
                break

        self._expect(CTokenType.SEMICOLON, "';'")

        # Names become visible only once the declaration is complete
        if specs.is_typedef:
            for declaration in declarations:
                self.registry.register_typedef(declaration.name)

        if len(declarations) == 1:
            return declarations[0]
        return DeclarationList(location=location, declarations=tuple(declarations))

    def _parse_initializer(self) -> Expression:
        """Parse an initializer: an expression or a brace-enclosed list."""
        if not self._check(CTokenType.LBRACE):
            return self._parse_assignment()

        open_brace = self._advance()
        elements = []
        while not self._check(CTokenType.RBRACE):
            elements.append(self._parse_initializer())
            if not self._match(CTokenType.COMMA):
                break
        self._expect(CTokenType.RBRACE, "'}'")
        return InitializerList(location=open_brace.location, elements=tuple(elements))

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_block(self) -> BlockStatement:
        """Parse a block statement { ... }."""
        location = self._peek().location
        self._expect(CTokenType.LBRACE, "'{'")

        statements = []
        while not self._check(CTokenType.RBRACE):
            if self.at_end():
                raise self._unexpected("'}'")
            statements.append(self._parse_statement())

        self._expect(CTokenType.RBRACE, "'}'")

        return BlockStatement(location=location, statements=tuple(statements))

    def _parse_statement(self) -> Statement:
        """Parse any statement."""
        token = self._peek()

        if token.type == CTokenType.LBRACE:
            return self._parse_block()
        if token.type == CTokenType.IF:
            return self._parse_if_statement()
        if token.type == CTokenType.WHILE:
            return self._parse_while_statement()
        if token.type == CTokenType.FOR:
            return self._parse_for_statement()
        if token.type == CTokenType.DO:
            return self._parse_do_while_statement()
        if token.type == CTokenType.SWITCH:
            return self._parse_switch_statement()
        if token.type == CTokenType.RETURN:
            return self._parse_return_statement()
        if token.type == CTokenType.BREAK:
            return self._parse_break_statement()
        if token.type == CTokenType.CONTINUE:
            return self._parse_continue_statement()
        if token.type == CTokenType.GOTO:
            return self._parse_goto_statement()
        if token.type == CTokenType.SEMICOLON:
            self._advance()
            return EmptyStatement(location=token.location)

        # Check for label
        if (token.type == CTokenType.IDENTIFIER and
            self._peek(1).type == CTokenType.COLON):
            return self._parse_label_statement()

        if self._starts_declaration():
            return self._parse_declaration()

        return self._parse_expression_statement()

    def _parse_if_statement(self) -> IfStatement:
        """Parse if statement."""
        location = self._peek().location
        self._expect(CTokenType.IF, "'if'")
        self._expect(CTokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._expect(CTokenType.RPAREN, "')'")

        then_branch = self._parse_statement()

        else_branch = None
        if self._match(CTokenType.ELSE):
            else_branch = self._parse_statement()

        return IfStatement(
            location=location,
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch,
        )

    def _parse_while_statement(self) -> WhileStatement:
        """Parse while statement."""
        location = self._peek().location
        self._expect(CTokenType.WHILE, "'while'")
        self._expect(CTokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._expect(CTokenType.RPAREN, "')'")

        body = self._parse_statement()

        return WhileStatement(location=location, condition=condition, body=body)

    def _parse_for_statement(self) -> ForStatement:
        """
        Parse for statement.

        The initializer may be a declaration (C99): for (int i = 0; ...)
        """
        location = self._peek().location
        self._expect(CTokenType.FOR, "'for'")
        self._expect(CTokenType.LPAREN, "'('")

        # Initializer (optional); a declaration consumes its own ';'
        initializer = None
        if self._starts_declaration():
            initializer = self._parse_declaration()
        else:
            if not self._check(CTokenType.SEMICOLON):
                initializer = self._parse_expression()
            self._expect(CTokenType.SEMICOLON, "';'")

        # Condition (optional)
        condition = None
        if not self._check(CTokenType.SEMICOLON):
            condition = self._parse_expression()
        self._expect(CTokenType.SEMICOLON, "';'")

        # Update (optional)
        update = None
        if not self._check(CTokenType.RPAREN):
            update = self._parse_expression()
        self._expect(CTokenType.RPAREN, "')'")

        body = self._parse_statement()

        return ForStatement(
            location=location,
            initializer=initializer,
            condition=condition,
            update=update,
            body=body,
        )

    def _parse_do_while_statement(self) -> DoWhileStatement:
        """Parse do-while statement."""
        location = self._peek().location
        self._expect(CTokenType.DO, "'do'")

        body = self._parse_statement()

        self._expect(CTokenType.WHILE, "'while'")
        self._expect(CTokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._expect(CTokenType.RPAREN, "')'")
        self._expect(CTokenType.SEMICOLON, "';'")

        return DoWhileStatement(location=location, body=body, condition=condition)

    def _parse_switch_statement(self) -> SwitchStatement:
        """
        Parse switch statement.

        The body must be a block whose statements are grouped under
        case/default labels.
        """
        location = self._peek().location
        self._expect(CTokenType.SWITCH, "'switch'")
        self._expect(CTokenType.LPAREN, "'('")
        expression = self._parse_expression()
        self._expect(CTokenType.RPAREN, "')'")
        self._expect(CTokenType.LBRACE, "'{'")

        cases = []
        while not self._check(CTokenType.RBRACE) and not self.at_end():
            cases.append(self._parse_case_clause())

        self._expect(CTokenType.RBRACE, "'}'")

        return SwitchStatement(location=location, expression=expression, cases=tuple(cases))

    def _parse_case_clause(self) -> CaseClause:
        """Parse case or default clause."""
        location = self._peek().location
        is_default = False
        value = None

        if self._match(CTokenType.CASE):
            value = self._parse_ternary()
            self._expect(CTokenType.COLON, "':'")
        elif self._match(CTokenType.DEFAULT):
            is_default = True
            self._expect(CTokenType.COLON, "':'")
        else:
            raise self._unexpected("'case'", "'default'")

        # Parse statements until next case/default or end of switch
        statements = []
        while not self._check(CTokenType.CASE, CTokenType.DEFAULT, CTokenType.RBRACE):
            if self.at_end():
                raise self._unexpected("'}'")
            statements.append(self._parse_statement())

        return CaseClause(
            location=location,
            value=value,
            statements=tuple(statements),
            is_default=is_default,
        )

    def _parse_return_statement(self) -> ReturnStatement:
        """Parse return statement."""
        location = self._peek().location
        self._expect(CTokenType.RETURN, "'return'")

        value = None
        if not self._check(CTokenType.SEMICOLON):
            value = self._parse_expression()

        self._expect(CTokenType.SEMICOLON, "';'")

        return ReturnStatement(location=location, value=value)

    def _parse_break_statement(self) -> BreakStatement:
        """Parse break statement."""
        location = self._peek().location
        self._expect(CTokenType.BREAK, "'break'")
        self._expect(CTokenType.SEMICOLON, "';'")
        return BreakStatement(location=location)

    def _parse_continue_statement(self) -> ContinueStatement:
        """Parse continue statement."""
        location = self._peek().location
        self._expect(CTokenType.CONTINUE, "'continue'")
        self._expect(CTokenType.SEMICOLON, "';'")
        return ContinueStatement(location=location)

    def _parse_goto_statement(self) -> GotoStatement:
        """Parse goto statement."""
        location = self._peek().location
        self._expect(CTokenType.GOTO, "'goto'")
        label_token = self._expect(CTokenType.IDENTIFIER, "label")
        self._expect(CTokenType.SEMICOLON, "';'")
        return GotoStatement(location=location, label=label_token.value)

    def _parse_label_statement(self) -> LabelStatement:
        """Parse labeled statement."""
        location = self._peek().location
        name_token = self._expect(CTokenType.IDENTIFIER, "label")
        self._expect(CTokenType.COLON, "':'")
        statement = self._parse_statement()
        return LabelStatement(location=location, name=name_token.value, statement=statement)

    def _parse_expression_statement(self) -> ExpressionStatement:
        """Parse expression statement."""
        location = self._peek().location
        expression = self._parse_expression()
        self._expect(CTokenType.SEMICOLON, "';'")
        return ExpressionStatement(location=location, expression=expression)

    # =========================================================================
    # Expression Parsing (Operator Precedence)
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse expression (top-level, handles assignment)."""
        return self._parse_assignment()

    def _parse_assignment(self) -> Expression:
        """Parse assignment expression (right-associative)."""
        expr = self._parse_ternary()

        if self._peek().type in ASSIGNMENT_OPERATORS:
            op_token = self._advance()
            # Right-associative: parse value as assignment
            value = self._parse_assignment()
            return AssignmentExpression(
                location=expr.location,
                operator=ASSIGNMENT_OPERATORS[op_token.type],
                target=expr,
                value=value,
            )

        return expr

    def _parse_ternary(self) -> Expression:
        """Parse ternary conditional expression (? :)."""
        expr = self._parse_logical_or()

        if self._match(CTokenType.QUESTION):
            then_expr = self._parse_expression()
            self._expect(CTokenType.COLON, "':'")
            else_expr = self._parse_ternary()
            return TernaryExpression(
                location=expr.location,
                condition=expr,
                then_expr=then_expr,
                else_expr=else_expr,
            )

        return expr

    def _parse_logical_or(self) -> Expression:
        """Parse logical OR expression (||)."""
        return self._parse_binary(
            self._parse_logical_and,
            {CTokenType.OR: BinaryOperator.LOGICAL_OR},
        )

    def _parse_logical_and(self) -> Expression:
        """Parse logical AND expression (&&)."""
        return self._parse_binary(
            self._parse_bitwise_or,
            {CTokenType.AND: BinaryOperator.LOGICAL_AND},
        )

    def _parse_bitwise_or(self) -> Expression:
        """Parse bitwise OR expression (|)."""
        return self._parse_binary(
            self._parse_bitwise_xor,
            {CTokenType.PIPE: BinaryOperator.BITWISE_OR},
        )

    def _parse_bitwise_xor(self) -> Expression:
        """Parse bitwise XOR expression (^)."""
        return self._parse_binary(
            self._parse_bitwise_and,
            {CTokenType.CARET: BinaryOperator.BITWISE_XOR},
        )

    def _parse_bitwise_and(self) -> Expression:
        """Parse bitwise AND expression (&)."""
        return self._parse_binary(
            self._parse_equality,
            {CTokenType.AMPERSAND: BinaryOperator.BITWISE_AND},
        )

    def _parse_equality(self) -> Expression:
        """Parse equality expression (== !=)."""
        return self._parse_binary(
            self._parse_relational,
            {
                CTokenType.EQ: BinaryOperator.EQUAL,
                CTokenType.NE: BinaryOperator.NOT_EQUAL,
            },
        )

    def _parse_relational(self) -> Expression:
        """Parse relational expression (< > <= >=)."""
        return self._parse_binary(
            self._parse_shift,
            {
                CTokenType.LT: BinaryOperator.LESS,
                CTokenType.GT: BinaryOperator.GREATER,
                CTokenType.LE: BinaryOperator.LESS_EQ,
                CTokenType.GE: BinaryOperator.GREATER_EQ,
            },
        )

    def _parse_shift(self) -> Expression:
        """Parse shift expression (<< >>)."""
        return self._parse_binary(
            self._parse_additive,
            {
                CTokenType.LSHIFT: BinaryOperator.LEFT_SHIFT,
                CTokenType.RSHIFT: BinaryOperator.RIGHT_SHIFT,
            },
        )

    def _parse_additive(self) -> Expression:
        """Parse additive expression (+ -)."""
        return self._parse_binary(
            self._parse_multiplicative,
            {
                CTokenType.PLUS: BinaryOperator.ADD,
                CTokenType.MINUS: BinaryOperator.SUBTRACT,
            },
        )

    def _parse_multiplicative(self) -> Expression:
        """Parse multiplicative expression (* / %)."""
        return self._parse_binary(
            self._parse_unary,
            {
                CTokenType.STAR: BinaryOperator.MULTIPLY,
                CTokenType.SLASH: BinaryOperator.DIVIDE,
                CTokenType.PERCENT: BinaryOperator.MODULO,
            },
        )

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: dict[CTokenType, BinaryOperator],
    ) -> Expression:
        """
        Generic left-associative binary expression parser.

        Both operands come from operand_parser, so an operator token seen
        here always follows a complete left operand and is binary.

        Args:
            operand_parser: Function to parse operands (next tighter level)
            operators: Map of token types to binary operators
        """
        expr = operand_parser()

        while self._peek().type in operators:
            op_token = self._advance()
            right = operand_parser()
            expr = BinaryExpression(
                location=expr.location,
                operator=operators[op_token.type],
                left=expr,
                right=right,
            )

        return expr

    def _parse_unary(self) -> Expression:
        """Parse unary expression (- + ! ~ & * ++ -- sizeof, casts)."""
        token = self._peek()

        if token.type in INCREMENT_OPERATORS:
            self._advance()
            operand = self._parse_unary()
            return PrefixExpression(
                location=token.location,
                operator=INCREMENT_OPERATORS[token.type],
                operand=operand,
            )

        if token.type in UNARY_OPERATORS:
            self._advance()
            operand = self._parse_unary()  # Right-associative
            return UnaryExpression(
                location=token.location,
                operator=UNARY_OPERATORS[token.type],
                operand=operand,
            )

        if token.type == CTokenType.SIZEOF:
            return self._parse_sizeof()

        if token.type == CTokenType.LPAREN:
            if self._is_type_at_offset(1):
                return self._parse_cast()
            self._check_type_name_ambiguity()

        return self._parse_postfix()

    def _parse_sizeof(self) -> Expression:
        """
        Parse sizeof expression.

            sizeof(int)     -> SizeofTypeExpression
            sizeof(x + 1)   -> SizeofExpression (parenthesized operand)
            sizeof x        -> SizeofExpression
        """
        location = self._peek().location
        self._expect(CTokenType.SIZEOF, "'sizeof'")

        if self._check(CTokenType.LPAREN) and self._is_type_at_offset(1):
            self._advance()
            target_type = self._parse_type_name()
            self._expect(CTokenType.RPAREN, "')'")
            return SizeofTypeExpression(location=location, target_type=target_type)

        operand = self._parse_unary()
        return SizeofExpression(location=location, operand=operand)

    def _parse_cast(self) -> Expression:
        """Parse cast expression (type)expr."""
        location = self._peek().location
        self._expect(CTokenType.LPAREN, "'('")
        target_type = self._parse_type_name()
        self._expect(CTokenType.RPAREN, "')'")

        operand = self._parse_unary()

        return CastExpression(location=location, target_type=target_type, operand=operand)

    def _parse_postfix(self) -> Expression:
        """Parse postfix expression (calls, subscripts, member access, ++, --)."""
        expr = self._parse_primary()

        while True:
            # Function call
            if self._match(CTokenType.LPAREN):
                expr = self._parse_call(expr)

            # Array subscript
            elif self._match(CTokenType.LBRACKET):
                subscript = self._parse_expression()
                self._expect(CTokenType.RBRACKET, "']'")
                expr = ArraySubscript(location=expr.location, base=expr, subscript=subscript)

            # Member access: struct.field
            elif self._match(CTokenType.DOT):
                member_token = self._expect(CTokenType.IDENTIFIER, "member name")
                expr = MemberAccessExpression(
                    location=expr.location,
                    base=expr,
                    member=member_token.value,
                )

            # Pointer member access: ptr->field
            elif self._match(CTokenType.ARROW):
                member_token = self._expect(CTokenType.IDENTIFIER, "member name")
                expr = PointerMemberExpression(
                    location=expr.location,
                    base=expr,
                    member=member_token.value,
                )

            # Post-increment / post-decrement
            elif self._check(CTokenType.INCREMENT, CTokenType.DECREMENT):
                op_token = self._advance()
                expr = PostfixExpression(
                    location=expr.location,
                    operator=INCREMENT_OPERATORS[op_token.type],
                    operand=expr,
                )

            else:
                break

        return expr

    def _parse_call(self, callee: Expression) -> CallExpression:
        """Parse function call arguments after '('."""
        arguments = []
        if not self._check(CTokenType.RPAREN):
            while True:
                arguments.append(self._parse_assignment())
                if not self._match(CTokenType.COMMA):
                    break

        self._expect(CTokenType.RPAREN, "')'")

        return CallExpression(location=callee.location, callee=callee, arguments=tuple(arguments))

    def _parse_primary(self) -> Expression:
        """Parse primary expression (literals, identifiers, parenthesized)."""
        token = self._peek()

        if token.type == CTokenType.INT_LITERAL:
            self._advance()
            return IntegerLiteral(location=token.location, value=token.value, text=token.lexeme)

        if token.type == CTokenType.FLOAT_LITERAL:
            self._advance()
            return FloatLiteral(location=token.location, value=token.value, text=token.lexeme)

        if token.type == CTokenType.CHAR_LITERAL:
            self._advance()
            return CharLiteral(location=token.location, value=token.value, text=token.lexeme)

        # String literal; adjacent literals are concatenated
        if token.type == CTokenType.STRING:
            pieces = [self._advance()]
            while self._check(CTokenType.STRING):
                pieces.append(self._advance())
            return StringLiteral(
                location=token.location,
                value="".join(piece.value for piece in pieces),
                text=" ".join(piece.lexeme for piece in pieces),
            )

        if token.type == CTokenType.IDENTIFIER:
            self._advance()
            return IdentifierExpression(location=token.location, name=token.value)

        # Parenthesized expression
        if token.type == CTokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(CTokenType.RPAREN, "')'")
            return expr

        raise self._unexpected("expression")

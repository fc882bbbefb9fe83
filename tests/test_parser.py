"""
C Parser Test Suite
===================

Tests for the recursive descent parser: expression precedence and
associativity, the ambiguous operator symbols, cast and sizeof
disambiguation, declarators, declarations, statements and parse errors.

Expression shapes are checked through ASTPrinter, which writes every
operator application fully parenthesized.
"""

import pytest

from c_transpiler.frontend import parse_source, parse_expression, parse_statement
from c_transpiler.frontend.ast import (
    ASTPrinter,
    TranslationUnit,
    FunctionDefinition,
    VariableDeclaration,
    TypedefDeclaration,
    DeclarationList,
    AggregateDeclaration,
    BlockStatement,
    ExpressionStatement,
    EmptyStatement,
    IfStatement,
    WhileStatement,
    DoWhileStatement,
    ForStatement,
    SwitchStatement,
    ReturnStatement,
    BreakStatement,
    GotoStatement,
    LabelStatement,
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
    InitializerList,
    BinaryOperator,
    UnaryOperator,
    IncrementOperator,
    AssignmentOperator,
)
from c_transpiler.frontend.types import (
    NamedType,
    PointerType,
    ArrayType,
    FunctionType,
    Qualifier,
)
from c_transpiler.frontend.errors import (
    ParseError,
    PrematureEndError,
    TypeNameAmbiguityError,
)
from c_transpiler.frontend.lexer import CTokenType

INT = NamedType("int")
CHAR = NamedType("char")


def shape(source: str, **kwargs) -> str:
    """Fully parenthesized form of a parsed expression."""
    return ASTPrinter().print(parse_expression(source, **kwargs))


def declaration(source: str, **kwargs):
    """The single external declaration in source."""
    unit = parse_source(source, **kwargs)
    assert len(unit.declarations) == 1
    return unit.declarations[0]


# =============================================================================
# Precedence and Associativity
# =============================================================================

class TestPrecedence:
    """Each level nests inside the next looser one."""

    @pytest.mark.parametrize("source,expected", [
        ("a + b * c", "(a + (b * c))"),
        ("a * b + c", "((a * b) + c)"),
        ("a << b + c", "(a << (b + c))"),
        ("a < b == c > d", "((a < b) == (c > d))"),
        ("a == b & c", "((a == b) & c)"),
        ("a | b ^ c & d", "(a | (b ^ (c & d)))"),
        ("a || b && c", "(a || (b && c))"),
        ("a && b | c", "(a && (b | c))"),
        ("a || b ? c : d", "((a || b) ? c : d)"),
        ("x = a ? b : c", "(x = (a ? b : c))"),
        ("a % b / c", "((a % b) / c)"),
    ])
    def test_nesting(self, source, expected):
        assert shape(source) == expected

    def test_parentheses_override(self):
        assert shape("(a + b) * c") == "((a + b) * c)"

    def test_operators_carry_their_level(self):
        expr = parse_expression("a + b * c")
        assert isinstance(expr, BinaryExpression)
        assert expr.operator == BinaryOperator.ADD
        assert expr.right.operator == BinaryOperator.MULTIPLY


class TestAssociativity:
    """Binary operators are left-associative; ternary and assignment are not."""

    @pytest.mark.parametrize("source,expected", [
        ("a - b - c", "((a - b) - c)"),
        ("a / b / c", "((a / b) / c)"),
        ("a << b >> c", "((a << b) >> c)"),
        ("a && b && c", "((a && b) && c)"),
    ])
    def test_left_associative(self, source, expected):
        assert shape(source) == expected

    def test_ternary_right_associative(self):
        assert shape("a ? b : c ? d : e") == "(a ? b : (c ? d : e))"

    def test_ternary_then_is_full_expression(self):
        assert shape("a ? b = c : d") == "(a ? (b = c) : d)"

    def test_assignment_right_associative(self):
        assert shape("a = b = c") == "(a = (b = c))"

    def test_compound_assignment(self):
        expr = parse_expression("x <<= 2")
        assert isinstance(expr, AssignmentExpression)
        assert expr.operator == AssignmentOperator.LSHIFT_ASSIGN
        assert expr.target == IdentifierExpression(name="x")


# =============================================================================
# Ambiguous Symbols
# =============================================================================

class TestAmbiguousSymbols:
    """'&', '*', '-', '+', '++' and '--' are classified by position."""

    def test_binary_and(self):
        expr = parse_expression("a & b")
        assert isinstance(expr, BinaryExpression)
        assert expr.operator == BinaryOperator.BITWISE_AND

    def test_address_of(self):
        expr = parse_expression("&a")
        assert isinstance(expr, UnaryExpression)
        assert expr.operator == UnaryOperator.ADDRESS_OF
        assert expr.operand == IdentifierExpression(name="a")

    def test_and_of_address(self):
        assert shape("a & &b") == "(a & (&b))"

    def test_logical_and_is_one_token(self):
        assert parse_expression("a && b").operator == BinaryOperator.LOGICAL_AND

    def test_dereference_and_multiply(self):
        assert shape("*p * *q") == "((*p) * (*q))"

    def test_negate_and_subtract(self):
        assert shape("-a - -b") == "((-a) - (-b))"

    def test_prefix_increment(self):
        expr = parse_expression("++i + 1")
        assert shape("++i + 1") == "((++i) + 1)"
        assert isinstance(expr.left, PrefixExpression)
        assert expr.left.operator == IncrementOperator.INCREMENT

    def test_postfix_increment(self):
        expr = parse_expression("i++ + 1")
        assert shape("i++ + 1") == "((i++) + 1)"
        assert isinstance(expr.left, PostfixExpression)

    def test_maximal_munch_increment(self):
        assert shape("i+++j") == "((i++) + j)"

    def test_postfix_decrement_on_member(self):
        expr = parse_expression("p->count--")
        assert isinstance(expr, PostfixExpression)
        assert expr.operator == IncrementOperator.DECREMENT

    def test_nested_unary(self):
        assert shape("!~-x") == "(!(~(-x)))"

    def test_prefix_of_dereference(self):
        assert shape("++*p") == "(++(*p))"


# =============================================================================
# Casts and sizeof
# =============================================================================

class TestCasts:
    """A '(' is a cast only when the next token names a type."""

    def test_builtin_cast(self):
        expr = parse_expression("(int)x + 1")
        assert shape("(int)x + 1") == "(((int)x) + 1)"
        assert isinstance(expr.left, CastExpression)
        assert expr.left.target_type == INT

    def test_unregistered_name_is_parenthesized_expression(self):
        expr = parse_expression("(foo)+1")
        assert isinstance(expr, BinaryExpression)
        assert expr.left == IdentifierExpression(name="foo")
        assert expr.right == IntegerLiteral(value=1)

    def test_registered_name_is_cast(self):
        expr = parse_expression("(T)+1", predefined_types=["T"])
        assert isinstance(expr, CastExpression)
        assert expr.target_type == NamedType("T")
        assert isinstance(expr.operand, UnaryExpression)

    def test_pointer_cast(self):
        expr = parse_expression("(char *)p")
        assert expr.target_type == PointerType(CHAR)

    def test_qualified_cast(self):
        expr = parse_expression("(const char *)s")
        assert expr.target_type == PointerType(NamedType("char", qualifiers=frozenset({Qualifier.CONST})))

    def test_struct_cast(self):
        expr = parse_expression("(struct Point *)p")
        assert expr.target_type == PointerType(NamedType("Point", "struct"))

    def test_function_pointer_cast(self):
        expr = parse_expression("(int (*)(void))f")
        assert expr.target_type == PointerType(FunctionType(INT, (NamedType("void"),)))

    def test_cast_binds_tighter_than_binary(self):
        assert shape("(long)a * b") == "(((long)a) * b)"

    def test_cast_of_cast(self):
        assert shape("(char)(int)x") == "((char)((int)x))"

    def test_parenthesized_call(self):
        expr = parse_expression("(f)(x)")
        assert isinstance(expr, CallExpression)
        assert expr.callee == IdentifierExpression(name="f")

    @pytest.mark.parametrize("source", ["(foo *)p", "(foo **)p", "(foo) x", "(foo) 1", "(foo) sizeof x"])
    def test_undeclared_type_name(self, source):
        with pytest.raises(TypeNameAmbiguityError) as exc_info:
            parse_expression(source)
        assert exc_info.value.name == "foo"
        assert exc_info.value.expected == ("type name",)

    def test_ambiguity_error_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_expression("(foo) x")

    def test_product_in_parentheses_is_not_ambiguous(self):
        assert shape("(a * b)") == "(a * b)"


class TestSizeof:
    """sizeof takes a parenthesized type name or a unary expression."""

    def test_sizeof_type(self):
        expr = parse_expression("sizeof(int)")
        assert isinstance(expr, SizeofTypeExpression)
        assert expr.target_type == INT

    def test_sizeof_parenthesized_expression(self):
        expr = parse_expression("sizeof(x+1)")
        assert isinstance(expr, SizeofExpression)
        assert isinstance(expr.operand, BinaryExpression)

    def test_sizeof_bare_expression(self):
        expr = parse_expression("sizeof x")
        assert isinstance(expr, SizeofExpression)
        assert expr.operand == IdentifierExpression(name="x")

    def test_sizeof_pointer_type(self):
        assert parse_expression("sizeof(char *)").target_type == PointerType(CHAR)

    def test_sizeof_array_type(self):
        expr = parse_expression("sizeof(int[4])")
        assert expr.target_type == ArrayType(INT, IntegerLiteral(value=4))

    def test_sizeof_typedef(self):
        expr = parse_expression("sizeof(size_t)", predefined_types=["size_t"])
        assert isinstance(expr, SizeofTypeExpression)

    def test_sizeof_binds_tighter_than_binary(self):
        assert shape("sizeof x + 1") == "((sizeof x) + 1)"

    def test_sizeof_of_dereference(self):
        assert shape("sizeof *p") == "(sizeof (*p))"


# =============================================================================
# Primary and Postfix Expressions
# =============================================================================

class TestPrimary:
    """Literals, identifiers and postfix chains."""

    def test_integer_literal_keeps_spelling(self):
        expr = parse_expression("0x10")
        assert expr == IntegerLiteral(value=16)
        assert expr.text == "0x10"

    def test_float_literal(self):
        expr = parse_expression("2.5f")
        assert isinstance(expr, FloatLiteral)
        assert expr.value == 2.5

    def test_char_literal(self):
        assert parse_expression("'a'") == CharLiteral(value=97)

    def test_adjacent_strings_concatenate(self):
        expr = parse_expression('"ab" "cd"')
        assert isinstance(expr, StringLiteral)
        assert expr.value == "abcd"
        assert expr.text == '"ab" "cd"'

    def test_postfix_chain(self):
        assert shape("a.b->c[i](x, y)") == "a.b->c[i](x, y)"
        assert isinstance(parse_expression("a.b->c[i](x, y)"), CallExpression)

    def test_call_without_arguments(self):
        expr = parse_expression("f()")
        assert expr.arguments == ()

    def test_call_arguments_are_assignments(self):
        expr = parse_expression("f(a = 1, b ? c : d)")
        assert isinstance(expr.arguments[0], AssignmentExpression)
        assert isinstance(expr.arguments[1], TernaryExpression)

    def test_equality_ignores_location(self):
        assert parse_expression("a+b") == parse_expression("a  +\n  b")

    def test_locations(self):
        expr = parse_expression("x + y")
        assert expr.location.line == 1
        assert expr.location.column == 1
        assert expr.right.location.column == 5

    def test_trailing_tokens_rejected(self):
        with pytest.raises(ParseError) as exc_info:
            parse_expression("a b")
        assert exc_info.value.expected == ("end of input",)


# =============================================================================
# Declarators
# =============================================================================

class TestDeclarators:
    """Declarators are read outside-in and built inside-out."""

    def test_array(self):
        decl = declaration("int arr[10];")
        assert decl.name == "arr"
        assert decl.var_type == ArrayType(INT, IntegerLiteral(value=10))

    def test_array_of_pointers(self):
        decl = declaration("int *arr[10];")
        assert decl.var_type == ArrayType(PointerType(INT), IntegerLiteral(value=10))

    def test_pointer_to_array(self):
        decl = declaration("int (*p)[10];")
        assert decl.var_type == PointerType(ArrayType(INT, IntegerLiteral(value=10)))

    def test_multidimensional_array(self):
        decl = declaration("char grid[2][3];")
        assert decl.var_type == ArrayType(
            ArrayType(CHAR, IntegerLiteral(value=3)),
            IntegerLiteral(value=2),
        )

    def test_unsized_array(self):
        assert declaration("extern int table[];").var_type == ArrayType(INT)

    def test_function_pointer(self):
        decl = declaration("int (*fp)(int, char *);")
        assert decl.var_type == PointerType(FunctionType(INT, (INT, PointerType(CHAR))))

    def test_const_pointer(self):
        decl = declaration("char *const s;")
        assert decl.var_type == PointerType(CHAR, frozenset({Qualifier.CONST}))

    def test_pointer_to_const(self):
        decl = declaration("const char *s;")
        assert decl.var_type == PointerType(NamedType("char", qualifiers=frozenset({Qualifier.CONST})))

    def test_function_returning_function_pointer(self):
        decl = declaration("int (*signal(int sig, void (*func)(int)))(int);")
        assert decl.name == "signal"
        handler = PointerType(FunctionType(INT, (INT,)))
        assert decl.var_type.returns == handler
        assert decl.var_type.parameters[1] == PointerType(FunctionType(NamedType("void"), (INT,)))
        assert decl.var_type.parameter_names == ("sig", "func")

    def test_prototype_void(self):
        decl = declaration("int f(void);")
        assert decl.var_type == FunctionType(INT, (NamedType("void"),))

    def test_variadic(self):
        decl = declaration("int printf(const char *fmt, ...);")
        assert decl.var_type.variadic
        assert decl.var_type.parameter_names == ("fmt",)

    def test_unnamed_parameters(self):
        decl = declaration("void qsort(void *, int (*)(const void *, const void *));")
        assert decl.var_type.parameter_names == (None, None)
        assert isinstance(decl.var_type.parameters[1], PointerType)

    def test_parenthesized_name(self):
        assert declaration("int (x);").var_type == INT


# =============================================================================
# Declarations
# =============================================================================

class TestDeclarations:
    """Variables, typedefs, aggregates and function definitions."""

    def test_builtin_words_any_order(self):
        assert declaration("long unsigned n;").var_type == NamedType("unsigned long")
        assert declaration("unsigned long long int n;").var_type == NamedType("unsigned long long int")

    def test_multiple_declarators(self):
        decl = declaration("int a = 1, *b;")
        assert isinstance(decl, DeclarationList)
        first, second = decl.declarations
        assert first.initializer == IntegerLiteral(value=1)
        assert second.var_type == PointerType(INT)

    def test_storage_class(self):
        decl = declaration("static int count = 0;")
        assert decl.storage == ("static",)

    def test_brace_initializer(self):
        decl = declaration("int v[] = {1, {2, 3}, };")
        assert isinstance(decl.initializer, InitializerList)
        assert len(decl.initializer.elements) == 2
        assert isinstance(decl.initializer.elements[1], InitializerList)

    def test_typedef(self):
        decl = declaration("typedef unsigned long size_t;")
        assert isinstance(decl, TypedefDeclaration)
        assert decl.name == "size_t"
        assert decl.target_type == NamedType("unsigned long")

    def test_typedef_used_later(self):
        unit = parse_source("typedef int T; T *p;")
        assert unit.declarations[1].var_type == PointerType(NamedType("T"))

    def test_standalone_struct(self):
        decl = declaration("struct Point { int x, y; };")
        assert isinstance(decl, AggregateDeclaration)
        definition = decl.definition
        assert (definition.kind, definition.tag, definition.has_body) == ("struct", "Point", True)
        assert isinstance(definition.members[0], DeclarationList)

    def test_struct_used_as_type(self):
        decl = declaration("struct Point origin = {0, 0};")
        assert isinstance(decl, VariableDeclaration)
        assert decl.var_type == NamedType("Point", "struct")
        assert decl.aggregate is None

    def test_struct_defined_with_variable(self):
        decl = declaration("struct { int a; } s;")
        assert decl.name == "s"
        assert decl.aggregate.tag is None
        assert decl.var_type == NamedType("", "struct")

    def test_forward_declaration(self):
        decl = declaration("struct Node;")
        assert decl.definition.has_body is False

    def test_typedef_struct(self):
        decl = declaration("typedef struct Node { int v; struct Node *next; } Node;")
        assert isinstance(decl, TypedefDeclaration)
        assert decl.name == "Node"
        assert decl.target_type == NamedType("Node", "struct")
        assert len(decl.aggregate.members) == 2

    def test_enum(self):
        decl = declaration("enum Color { RED, GREEN = 2, BLUE, };")
        enumerators = decl.definition.enumerators
        assert [e.name for e in enumerators] == ["RED", "GREEN", "BLUE"]
        assert enumerators[1].value == IntegerLiteral(value=2)

    def test_bit_fields(self):
        decl = declaration("struct Flags { unsigned ready : 1; unsigned : 3; };")
        ready, padding = decl.definition.members
        assert ready.name == "ready"
        assert ready.bit_width == IntegerLiteral(value=1)
        assert padding.name == ""
        assert padding.bit_width == IntegerLiteral(value=3)

    def test_function_definition(self):
        decl = declaration("int add(int a, int b) { return a + b; }")
        assert isinstance(decl, FunctionDefinition)
        assert decl.name == "add"
        assert decl.function_type == FunctionType(INT, (INT, INT))
        assert decl.function_type.parameter_names == ("a", "b")
        assert isinstance(decl.body.statements[0], ReturnStatement)

    def test_static_function(self):
        decl = declaration("static void helper(void) { }")
        assert decl.storage == ("static",)
        assert decl.body.statements == ()

    def test_stray_semicolon(self):
        unit = parse_source("int x;;")
        assert isinstance(unit.declarations[1], EmptyStatement)

    def test_translation_unit(self):
        unit = parse_source("int x; int main(void) { return x; }", filename="main.c")
        assert isinstance(unit, TranslationUnit)
        assert len(unit.declarations) == 2
        assert unit.location.filename == "main.c"

    def test_line_markers_ignored(self):
        unit = parse_source('# 1 "a.c"\nint x;\n# 5 "a.c"\nint y;')
        assert [d.name for d in unit.declarations] == ["x", "y"]


# =============================================================================
# Statements
# =============================================================================

class TestStatements:
    """Statement productions."""

    def test_if_else(self):
        stmt = parse_statement("if (a) b; else c;")
        assert isinstance(stmt, IfStatement)
        assert isinstance(stmt.else_branch, ExpressionStatement)

    def test_dangling_else_binds_to_nearest_if(self):
        stmt = parse_statement("if (a) if (b) x; else y;")
        assert stmt.else_branch is None
        assert stmt.then_branch.else_branch is not None

    def test_while(self):
        stmt = parse_statement("while (i < n) i++;")
        assert isinstance(stmt, WhileStatement)
        assert isinstance(stmt.body.expression, PostfixExpression)

    def test_do_while(self):
        stmt = parse_statement("do { x--; } while (x);")
        assert isinstance(stmt, DoWhileStatement)
        assert isinstance(stmt.body, BlockStatement)

    def test_for_with_declaration(self):
        stmt = parse_statement("for (int i = 0; i < n; i++) sum += i;")
        assert isinstance(stmt, ForStatement)
        assert isinstance(stmt.initializer, VariableDeclaration)
        assert stmt.initializer.name == "i"

    def test_for_empty_clauses(self):
        stmt = parse_statement("for (;;) ;")
        assert stmt.initializer is None
        assert stmt.condition is None
        assert stmt.update is None
        assert isinstance(stmt.body, EmptyStatement)

    def test_switch(self):
        stmt = parse_statement(
            "switch (c) { case 1: case 2: x = 1; break; default: x = 0; }"
        )
        assert isinstance(stmt, SwitchStatement)
        first, second, default = stmt.cases
        assert first.statements == ()
        assert first.value == IntegerLiteral(value=1)
        assert isinstance(second.statements[1], BreakStatement)
        assert default.is_default

    def test_goto_and_label(self):
        body = declaration("void f(void) { goto done; done: return; }").body
        assert body.statements[0] == GotoStatement(label="done")
        label = body.statements[1]
        assert isinstance(label, LabelStatement)
        assert label.statement == ReturnStatement()

    def test_block_with_declaration(self):
        stmt = parse_statement("{ int x = 1; x++; }")
        assert isinstance(stmt.statements[0], VariableDeclaration)
        assert isinstance(stmt.statements[1], ExpressionStatement)

    def test_typedef_star_is_declaration(self):
        stmt = parse_statement("T * p;", predefined_types=["T"])
        assert isinstance(stmt, VariableDeclaration)
        assert stmt.var_type == PointerType(NamedType("T"))

    def test_variable_star_is_multiplication(self):
        stmt = parse_statement("a * b;")
        assert isinstance(stmt, ExpressionStatement)
        assert stmt.expression.operator == BinaryOperator.MULTIPLY

    def test_struct_variable_in_block(self):
        stmt = parse_statement("struct Point p;")
        assert isinstance(stmt, VariableDeclaration)

    def test_return_without_value(self):
        assert parse_statement("return;") == ReturnStatement()


# =============================================================================
# Errors
# =============================================================================

class TestParseErrors:
    """Errors carry the offending token, what was expected and the position."""

    def test_missing_initializer_expression(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source("int x = ;", filename="test.c")
        error = exc_info.value
        assert error.token.type == CTokenType.SEMICOLON
        assert error.expected == ("expression",)
        assert (error.location.line, error.location.column) == (1, 9)
        assert "test.c:1:9: error: unexpected ';'" in str(error)

    def test_missing_semicolon_at_end(self):
        with pytest.raises(PrematureEndError) as exc_info:
            parse_source("int x")
        assert exc_info.value.expected == ("';'",)

    def test_unclosed_block(self):
        with pytest.raises(PrematureEndError):
            parse_source("int main(void) { return 0;")

    def test_statement_at_file_scope(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source("x = 1;")
        assert exc_info.value.expected == ("declaration",)

    def test_declaration_without_declarator(self):
        with pytest.raises(ParseError, match="does not declare anything"):
            parse_source("int;")

    def test_duplicate_specifier(self):
        with pytest.raises(ParseError, match="duplicate 'int'"):
            parse_source("int int x;")

    def test_three_longs(self):
        with pytest.raises(ParseError, match="'long long long' is too long") as exc_info:
            parse_source("long long long x;")
        assert exc_info.value.location.column == 11
        assert declaration("long long x;").var_type == NamedType("long long")

    def test_typedef_with_builtin(self):
        with pytest.raises(ParseError, match="two or more data types"):
            parse_source("T int x;", predefined_types=["T"])

    def test_missing_paren(self):
        with pytest.raises(ParseError) as exc_info:
            parse_statement("if (a b;")
        assert exc_info.value.expected == ("')'",)

    def test_case_outside_clause(self):
        with pytest.raises(ParseError) as exc_info:
            parse_statement("switch (x) { y = 1; }")
        assert exc_info.value.expected == ("'case'", "'default'")

    def test_source_line_in_message(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source("int a;\nint b = );\n")
        message = str(exc_info.value)
        assert "<input>:2:9" in message
        assert "    int b = );" in message
        assert "hint: expected expression" in message

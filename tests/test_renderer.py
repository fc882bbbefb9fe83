"""
C Renderer Test Suite
=====================

Tests for regenerating C from the AST: minimal parenthesization,
declarator composition, statement layout, literal escaping, and the
round-trip properties

    parse(render(tree)) == tree
    render(parse(render(parse(src)))) == render(parse(src))
"""

import pytest

from c_transpiler.frontend import parse_source, parse_expression, parse_statement, render
from c_transpiler.frontend.renderer import CRenderer, escape_c_text
from c_transpiler.frontend.ast import (
    IdentifierExpression,
    IntegerLiteral,
    StringLiteral,
    UnaryExpression,
    PrefixExpression,
    PostfixExpression,
    BinaryExpression,
    AssignmentExpression,
    TernaryExpression,
    CastExpression,
    SizeofExpression,
    ExpressionStatement,
    IfStatement,
    BinaryOperator,
    UnaryOperator,
    IncrementOperator,
    AssignmentOperator,
)
from c_transpiler.frontend.types import NamedType, PointerType, ArrayType, FunctionType, type_name

INT = NamedType("int")


def ident(name: str) -> IdentifierExpression:
    return IdentifierExpression(name=name)


def rerender(source: str) -> str:
    """Parse an expression and render it back."""
    return render(parse_expression(source))


def round_trip(source: str) -> str:
    return render(parse_source(source))


SAMPLE_PROGRAM = r"""
typedef unsigned long size_t;
typedef struct Node {
    int value;
    struct Node *next;
} Node;
enum Color { RED, GREEN = 2, BLUE };
static const char *names[3] = {"red", "green", "blue"};
int (*handlers[4])(int, char **);
extern int printf(const char *fmt, ...);
struct Flags { unsigned ready : 1; unsigned : 3; union { int i; float f; } u; };

static size_t length(const Node *head) {
    size_t n = 0;
    while (head != 0) {
        n++;
        head = head->next;
    }
    return n;
}

int main(int argc, char **argv) {
    int i, total = 0;
    unsigned flags = 0x0F;
    for (i = 0; i < argc; i++) {
        if (argv[i][0] == '-' && argv[i][1] != '\0')
            flags &= ~(1u << (i % 8));
        else if (i > 2) {
            total += (int)sizeof(Node) * -i;
        } else
            continue;
    }
    switch (flags & 3) {
    case 0:
    case 1:
        total = total > 0 ? total : -total;
        break;
    default:
        goto done;
    }
    do {
        total--;
    } while (total > 100);
    if (total)
        if (flags)
            total = 1;
        else
            total = 2;
done:
    printf("total=%d\n", total);
    return total ? 1 : 0;
}
"""


# =============================================================================
# Expressions
# =============================================================================

class TestParenthesization:
    """Parentheses appear exactly where the tree needs them."""

    @pytest.mark.parametrize("source", [
        "a + b * c",
        "(a + b) * c",
        "a - (b - c)",
        "a - b - c",
        "a ? b : c ? d : e",
        "(a ? b : c) ? d : e",
        "a = b = c",
        "x = a || b && c",
        "(a | b) & c",
        "*p++",
        "(*p)++",
        "&a & b",
        "f(a, b)[0].x->y",
        "-(a + b)",
        "!(a == b)",
        "(int)(a + b)",
        "(int)x + 1",
        "(char *)p",
        "sizeof(int)",
        "sizeof x",
        "sizeof(x + 1)",
        "sizeof((int)x)",
        "a ? b = 1 : c",
    ])
    def test_stable_spelling(self, source):
        assert rerender(source) == source

    def test_redundant_parentheses_dropped(self):
        assert rerender("(a - b) - c") == "a - b - c"
        assert rerender("((a))") == "a"
        assert rerender("a + (b * c)") == "a + b * c"

    def test_spacing_normalized(self):
        assert rerender("a+b*c") == "a + b * c"
        assert rerender("x<<=1") == "x <<= 1"

    def test_right_nested_subtraction(self):
        expr = BinaryExpression(
            operator=BinaryOperator.SUBTRACT,
            left=ident("a"),
            right=BinaryExpression(operator=BinaryOperator.SUBTRACT, left=ident("b"), right=ident("c")),
        )
        assert render(expr) == "a - (b - c)"

    def test_assignment_inside_binary(self):
        expr = BinaryExpression(
            operator=BinaryOperator.ADD,
            left=AssignmentExpression(
                operator=AssignmentOperator.ASSIGN, target=ident("x"), value=IntegerLiteral(value=1)
            ),
            right=ident("y"),
        )
        assert render(expr) == "(x = 1) + y"

    def test_ternary_condition_wrapped(self):
        expr = TernaryExpression(
            condition=AssignmentExpression(
                operator=AssignmentOperator.ASSIGN, target=ident("a"), value=ident("b")
            ),
            then_expr=ident("c"),
            else_expr=ident("d"),
        )
        assert render(expr) == "(a = b) ? c : d"

    def test_cast_operand_wrapped(self):
        expr = CastExpression(
            target_type=INT,
            operand=BinaryExpression(operator=BinaryOperator.MULTIPLY, left=ident("a"), right=ident("b")),
        )
        assert render(expr) == "(int)(a * b)"


class TestIncrementRendering:
    """Prefix and postfix forms keep their literal spelling."""

    @pytest.mark.parametrize("source", ["++i + 1", "i++ + 1", "--p->n", "a[i]--", "-i++"])
    def test_original_form(self, source):
        assert rerender(source) == source

    def test_postfix_of_prefix(self):
        expr = PostfixExpression(
            operator=IncrementOperator.INCREMENT,
            operand=PrefixExpression(operator=IncrementOperator.INCREMENT, operand=ident("i")),
        )
        assert render(expr) == "(++i)++"

    @pytest.mark.parametrize("source,expected", [
        ("- -x", "- -x"),
        ("-(-x)", "- -x"),
        ("-(--x)", "- --x"),
        ("+(+x)", "+ +x"),
        ("a - -b", "a - -b"),
        ("a + +b", "a + +b"),
        ("&*p", "&*p"),
    ])
    def test_adjacent_signs_separated(self, source, expected):
        assert rerender(source) == expected

    def test_nested_address_of(self):
        expr = UnaryExpression(
            operator=UnaryOperator.ADDRESS_OF,
            operand=UnaryExpression(operator=UnaryOperator.ADDRESS_OF, operand=ident("x")),
        )
        assert render(expr) == "& &x"

    def test_sizeof_of_cast_keeps_parentheses(self):
        expr = SizeofExpression(operand=CastExpression(target_type=INT, operand=ident("x")))
        assert render(expr) == "sizeof((int)x)"


class TestLiterals:
    """Numbers keep their spelling; text literals are re-escaped."""

    def test_number_spelling(self):
        assert rerender("0x1F + 017 + 10UL + 2.5f") == "0x1F + 017 + 10UL + 2.5f"

    def test_string_escapes(self):
        assert rerender(r'"a\nb\t\"q\""') == r'"a\nb\t\"q\""'

    def test_string_concatenation_renders_as_one(self):
        assert rerender('"ab" "cd"') == '"abcd"'

    def test_char_literals(self):
        assert rerender(r"'\n'") == r"'\n'"
        assert rerender(r"'\''") == r"'\''"
        assert rerender("'\"'") == "'\"'"
        assert rerender(r"'\0'") == r"'\0'"

    def test_hex_escape_rendered_plainly(self):
        assert rerender(r'"\x41"') == '"A"'

    @pytest.mark.parametrize("source,expected", [
        (r'"\xff"', r'"\377"'),
        (r'"\x7f"', r'"\177"'),
        (r'"\x80\x81"', r'"\200\201"'),
        (r"'\x80'", r"'\200'"),
        (r"'\377'", r"'\377'"),
    ])
    def test_high_bytes_render_as_octal(self, source, expected):
        assert rerender(source) == expected

    def test_non_ascii_text_keeps_its_bytes(self):
        assert rerender('"é"') == r'"\303\251"'

    def test_escape_c_text(self):
        assert escape_c_text("\x01", '"') == "\\001"
        assert escape_c_text("\x7f", '"') == "\\177"
        assert escape_c_text("\xff", '"') == "\\377"
        assert escape_c_text("\x80", "'") == "\\200"
        assert escape_c_text("€", '"') == "\\342\\202\\254"
        assert escape_c_text("\x001", '"') == "\\0001"
        assert escape_c_text("\x00a", '"') == "\\0a"
        assert escape_c_text("'", '"') == "'"
        assert escape_c_text("'", "'") == "\\'"

    def test_constructed_string_without_text(self):
        assert render(StringLiteral(value="hi\n")) == '"hi\\n"'


# =============================================================================
# Types and Declarators
# =============================================================================

class TestDeclarators:
    """Declarators render in C composition order."""

    @pytest.mark.parametrize("source", [
        "int arr[10];",
        "int *arr[10];",
        "int (*p)[10];",
        "char grid[2][3];",
        "int (*fp)(int, char *);",
        "char *const s;",
        "const char *s;",
        "const volatile int *const *p;",
        "int f(void);",
        "int g();",
        "int printf(const char *fmt, ...);",
        "int (*signal(int sig, void (*func)(int)))(int);",
        "int (*handlers[4])(int, char **);",
        "extern int table[];",
        "unsigned long long int n;",
        "int a = 1, *b, c[2];",
        "static int count = 0;",
        "typedef int (*handler)(int);",
        "typedef int A, *B;",
        "struct Point p = {1, 2};",
        "struct Node;",
    ])
    def test_stable_spelling(self, source):
        assert round_trip(source) == source + "\n"

    def test_qualifiers_move_to_front(self):
        assert round_trip("int const x;") == "const int x;\n"

    def test_builtin_words_canonical(self):
        assert round_trip("long unsigned n;") == "unsigned long n;\n"

    def test_abstract_types(self):
        assert type_name(PointerType(ArrayType(INT, IntegerLiteral(value=10)))) == "int (*)[10]"
        assert type_name(PointerType(NamedType("char"))) == "char *"
        assert type_name(FunctionType(INT, ())) == "int ()"
        assert str(PointerType(FunctionType(INT, (INT,)))) == "int (*)(int)"

    def test_render_type_directly(self):
        assert render(ArrayType(PointerType(INT), IntegerLiteral(value=3))) == "int *[3]"


class TestAggregates:
    """struct, union and enum bodies."""

    def test_struct(self):
        assert round_trip("struct Point { int x, y; };") == (
            "struct Point {\n"
            "    int x, y;\n"
            "};\n"
        )

    def test_enum(self):
        assert round_trip("enum Color { RED, GREEN = 2, BLUE, };") == (
            "enum Color {\n"
            "    RED,\n"
            "    GREEN = 2,\n"
            "    BLUE\n"
            "};\n"
        )

    def test_typedef_anonymous_enum(self):
        assert round_trip("typedef enum { A, B } E;") == (
            "typedef enum {\n"
            "    A,\n"
            "    B\n"
            "} E;\n"
        )

    def test_bit_fields_and_nested_union(self):
        source = "struct F { unsigned ready : 1; unsigned : 3; union { int i; float f; } u; };"
        assert round_trip(source) == (
            "struct F {\n"
            "    unsigned ready : 1;\n"
            "    unsigned : 3;\n"
            "    union {\n"
            "        int i;\n"
            "        float f;\n"
            "    } u;\n"
            "};\n"
        )

    def test_struct_inside_function(self):
        source = "void f(void) { struct P { int x; } p; }"
        assert round_trip(source) == (
            "void f(void) {\n"
            "    struct P {\n"
            "        int x;\n"
            "    } p;\n"
            "}\n"
        )


# =============================================================================
# Statements
# =============================================================================

class TestStatementLayout:
    """Statement layout with four-space indentation."""

    def test_function(self):
        assert round_trip("int main(void){return 0;}") == (
            "int main(void) {\n"
            "    return 0;\n"
            "}\n"
        )

    def test_blank_lines_around_functions(self):
        assert round_trip("int x; int f(void) { return x; } int y;") == (
            "int x;\n"
            "\n"
            "int f(void) {\n"
            "    return x;\n"
            "}\n"
            "\n"
            "int y;\n"
        )

    def test_if_else_without_braces(self):
        assert render(parse_statement("if (a) b; else c;")) == (
            "if (a)\n"
            "    b;\n"
            "else\n"
            "    c;"
        )

    def test_else_if_chain(self):
        source = "if (a) { x; } else if (b) { y; } else { z; }"
        assert render(parse_statement(source)) == (
            "if (a) {\n"
            "    x;\n"
            "} else if (b) {\n"
            "    y;\n"
            "} else {\n"
            "    z;\n"
            "}"
        )

    def test_open_if_in_then_branch_gets_braces(self):
        tree = IfStatement(
            condition=ident("a"),
            then_branch=IfStatement(condition=ident("b"), then_branch=ExpressionStatement(expression=ident("x"))),
            else_branch=ExpressionStatement(expression=ident("y")),
        )
        text = render(tree)
        assert text == (
            "if (a) {\n"
            "    if (b)\n"
            "        x;\n"
            "} else\n"
            "    y;"
        )
        reparsed = parse_statement(text)
        assert reparsed.else_branch == tree.else_branch
        assert reparsed.then_branch.statements == (tree.then_branch,)

    def test_loops(self):
        assert render(parse_statement("while (x) x--;")) == "while (x)\n    x--;"
        assert render(parse_statement("do { x--; } while (x);")) == (
            "do {\n"
            "    x--;\n"
            "} while (x);"
        )
        assert render(parse_statement("do x--; while (x);")) == "do\n    x--;\nwhile (x);"
        assert render(parse_statement("for (int i = 0; i < n; i++) { s += i; }")) == (
            "for (int i = 0; i < n; i++) {\n"
            "    s += i;\n"
            "}"
        )
        assert render(parse_statement("for (;;) ;")) == "for (;;)\n    ;"

    def test_switch(self):
        source = "switch (c) { case 1: x = 1; break; default: x = 0; }"
        assert render(parse_statement(source)) == (
            "switch (c) {\n"
            "    case 1:\n"
            "        x = 1;\n"
            "        break;\n"
            "    default:\n"
            "        x = 0;\n"
            "}"
        )

    def test_goto_and_label(self):
        assert round_trip("void f(void) { goto done; done: return; }") == (
            "void f(void) {\n"
            "    goto done;\n"
            "    done:\n"
            "    return;\n"
            "}\n"
        )

    def test_custom_indent(self):
        unit = parse_source("int f(void) { if (x) { return 1; } return 0; }")
        assert CRenderer(indent="\t").render(unit) == (
            "int f(void) {\n"
            "\tif (x) {\n"
            "\t\treturn 1;\n"
            "\t}\n"
            "\treturn 0;\n"
            "}\n"
        )


# =============================================================================
# Round Trip
# =============================================================================

class TestRoundTrip:
    """Rendering is a fixed point after one normalization."""

    def test_reparse_gives_equal_tree(self):
        tree = parse_source(SAMPLE_PROGRAM)
        assert parse_source(render(tree)) == tree

    def test_render_is_idempotent(self):
        first = render(parse_source(SAMPLE_PROGRAM))
        second = render(parse_source(first))
        assert second == first

    @pytest.mark.parametrize("source", [
        "int x = a+b*c;",
        "int y = (a+b)*c - (d-e);",
        "int z = x ? y ? 1 : 2 : 3;",
        "char *p = (char *)&buf[i+1];",
        "long n = sizeof(struct Node *) + sizeof *p;",
        "int w = -(-x) - - -y;",
        "int q = a & &b[0] && !c;",
    ])
    def test_expression_initializers(self, source):
        tree = parse_source(source)
        assert parse_source(render(tree)) == tree

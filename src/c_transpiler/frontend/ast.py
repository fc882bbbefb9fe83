"""
C Abstract Syntax Tree (AST) Definitions
========================================

This module defines the AST node types produced by the C parser.
The AST represents the structure of a translation unit precisely enough
to regenerate equivalent C source and to drive later analysis passes.

Node Hierarchy
--------------
ASTNode (base)
├── TranslationUnit - root node containing all external declarations
├── Declarations
│   ├── FunctionDefinition - function with body
│   ├── VariableDeclaration - variable, prototype, struct member
│   ├── DeclarationList - several declarators sharing one specifier
│   ├── TypedefDeclaration - typedef name
│   └── AggregateDeclaration - struct/union/enum definition or forward decl
├── AggregateDefinition / Enumerator - aggregate bodies
├── Statements
│   ├── BlockStatement - compound statement { ... }
│   ├── ExpressionStatement - expression followed by ';'
│   ├── IfStatement, WhileStatement, DoWhileStatement, ForStatement
│   ├── SwitchStatement, CaseClause
│   ├── BreakStatement, ContinueStatement, ReturnStatement
│   ├── GotoStatement, LabelStatement
│   └── EmptyStatement - lone ';'
└── Expressions
    ├── IntegerLiteral, FloatLiteral, CharLiteral, StringLiteral
    ├── IdentifierExpression
    ├── UnaryExpression - - + ! ~ * &
    ├── PrefixExpression / PostfixExpression - ++ and --
    ├── BinaryExpression - arithmetic, comparison, logical, bitwise
    ├── AssignmentExpression - = += -= ...
    ├── TernaryExpression - cond ? a : b
    ├── CastExpression, SizeofTypeExpression, SizeofExpression
    ├── CallExpression, ArraySubscript
    ├── MemberAccessExpression (a.b), PointerMemberExpression (a->b)
    └── InitializerList - { 1, 2, 3 } in initializers

Design Notes
------------
- All nodes are frozen dataclasses; child sequences are tuples
- Each node stores its source location, excluded from equality, so two
  trees parsed from differently formatted text compare equal
- Literals keep their source spelling (also excluded from equality)
- Every expression has exactly one precedence level (precedence_of)
"""

from dataclasses import dataclass, field, fields
from enum import Enum, IntEnum
from typing import Optional, Union, Any

from c_transpiler.errors import SourceLocation
from c_transpiler.frontend.types import CType, FunctionType, type_name


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node starts. Keyword-only
                  and not part of equality or repr.
    """
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True
    )


@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for all expression nodes."""
    pass


@dataclass(frozen=True)
class Statement(ASTNode):
    """Base class for all statement nodes."""
    pass


@dataclass(frozen=True)
class Declaration(Statement):
    """
    Base class for declarations.

    Declarations are statements too: C99 blocks mix them freely.
    """
    pass


# =============================================================================
# Operators and Precedence
# =============================================================================

class Precedence(IntEnum):
    """
    Binding strength of expression forms, weakest first.

    A parent requires a minimum precedence of each operand. An operand
    whose level is lower than that must be parenthesized.
    """
    ASSIGNMENT = 1      # = += -= ...   (right-assoc)
    TERNARY = 2         # ?:            (right-assoc)
    LOGICAL_OR = 3      # ||
    LOGICAL_AND = 4     # &&
    BITWISE_OR = 5      # |
    BITWISE_XOR = 6     # ^
    BITWISE_AND = 7     # &
    EQUALITY = 8        # == !=
    RELATIONAL = 9      # < > <= >=
    SHIFT = 10          # << >>
    ADDITIVE = 11       # + -
    MULTIPLICATIVE = 12 # * / %
    UNARY = 13          # prefix ops, casts, sizeof
    POSTFIX = 14        # calls, subscripts, member access, x++
    PRIMARY = 15        # literals, identifiers


class BinaryOperator(Enum):
    """Binary operators. The value is the C spelling."""
    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"

    # Comparison
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS = "<"
    GREATER = ">"
    LESS_EQ = "<="
    GREATER_EQ = ">="

    # Logical
    LOGICAL_AND = "&&"
    LOGICAL_OR = "||"

    # Bitwise
    BITWISE_AND = "&"
    BITWISE_OR = "|"
    BITWISE_XOR = "^"
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"

    @property
    def precedence(self) -> Precedence:
        return BINARY_PRECEDENCE[self]


BINARY_PRECEDENCE: dict[BinaryOperator, Precedence] = {
    BinaryOperator.LOGICAL_OR: Precedence.LOGICAL_OR,
    BinaryOperator.LOGICAL_AND: Precedence.LOGICAL_AND,
    BinaryOperator.BITWISE_OR: Precedence.BITWISE_OR,
    BinaryOperator.BITWISE_XOR: Precedence.BITWISE_XOR,
    BinaryOperator.BITWISE_AND: Precedence.BITWISE_AND,
    BinaryOperator.EQUAL: Precedence.EQUALITY,
    BinaryOperator.NOT_EQUAL: Precedence.EQUALITY,
    BinaryOperator.LESS: Precedence.RELATIONAL,
    BinaryOperator.GREATER: Precedence.RELATIONAL,
    BinaryOperator.LESS_EQ: Precedence.RELATIONAL,
    BinaryOperator.GREATER_EQ: Precedence.RELATIONAL,
    BinaryOperator.LEFT_SHIFT: Precedence.SHIFT,
    BinaryOperator.RIGHT_SHIFT: Precedence.SHIFT,
    BinaryOperator.ADD: Precedence.ADDITIVE,
    BinaryOperator.SUBTRACT: Precedence.ADDITIVE,
    BinaryOperator.MULTIPLY: Precedence.MULTIPLICATIVE,
    BinaryOperator.DIVIDE: Precedence.MULTIPLICATIVE,
    BinaryOperator.MODULO: Precedence.MULTIPLICATIVE,
}


class UnaryOperator(Enum):
    """Prefix unary operators other than ++ and --."""
    NEGATE = "-"         # -x
    POSITIVE = "+"       # +x
    LOGICAL_NOT = "!"    # !x
    BITWISE_NOT = "~"    # ~x
    DEREFERENCE = "*"    # *ptr
    ADDRESS_OF = "&"     # &var


class IncrementOperator(Enum):
    """Increment/decrement, used by both prefix and postfix forms."""
    INCREMENT = "++"
    DECREMENT = "--"


class AssignmentOperator(Enum):
    """Assignment operators."""
    ASSIGN = "="
    ADD_ASSIGN = "+="
    SUB_ASSIGN = "-="
    MUL_ASSIGN = "*="
    DIV_ASSIGN = "/="
    MOD_ASSIGN = "%="
    AND_ASSIGN = "&="
    OR_ASSIGN = "|="
    XOR_ASSIGN = "^="
    LSHIFT_ASSIGN = "<<="
    RSHIFT_ASSIGN = ">>="


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class IntegerLiteral(Expression):
    """
    Integer constant.

    Attributes:
        value: The integer value
        text: Source spelling, e.g. "0xFF" or "10UL"
    """
    value: int = 0
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class FloatLiteral(Expression):
    """
    Floating constant.

    Attributes:
        value: The numeric value
        text: Source spelling, e.g. "1.5f"
    """
    value: float = 0.0
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class CharLiteral(Expression):
    """
    Character constant.

    Attributes:
        value: The character code
        text: Source spelling including quotes
    """
    value: int = 0
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class StringLiteral(Expression):
    """
    String literal. Adjacent literals ("a" "b") are joined by the parser.

    Attributes:
        value: The decoded string contents
        text: Source spellings of all the adjacent pieces, joined by spaces
    """
    value: str = ""
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class IdentifierExpression(Expression):
    """Reference to a variable, function or enumerator."""
    name: str = ""


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """Prefix unary operation (-x, !x, ~x, *p, &v, +x)."""
    operator: UnaryOperator = None
    operand: Expression = None


@dataclass(frozen=True)
class PrefixExpression(Expression):
    """Pre-increment or pre-decrement (++i, --i)."""
    operator: IncrementOperator = None
    operand: Expression = None


@dataclass(frozen=True)
class PostfixExpression(Expression):
    """Post-increment or post-decrement (i++, i--)."""
    operator: IncrementOperator = None
    operand: Expression = None


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Binary operation expression (a op b).

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass(frozen=True)
class AssignmentExpression(Expression):
    """
    Assignment expression (lvalue = rvalue).

    Attributes:
        operator: The assignment operator (=, +=, etc.)
        target: The assignment target (lvalue)
        value: The value to assign
    """
    operator: AssignmentOperator = None
    target: Expression = None
    value: Expression = None


@dataclass(frozen=True)
class TernaryExpression(Expression):
    """
    Ternary conditional expression (cond ? then : else).

    Attributes:
        condition: The condition expression
        then_expr: Expression if condition is true
        else_expr: Expression if condition is false
    """
    condition: Expression = None
    then_expr: Expression = None
    else_expr: Expression = None


@dataclass(frozen=True)
class CastExpression(Expression):
    """
    Type cast expression (type)expr.

    Attributes:
        target_type: The type to cast to
        operand: The expression to cast
    """
    target_type: CType = None
    operand: Expression = None


@dataclass(frozen=True)
class SizeofTypeExpression(Expression):
    """sizeof applied to a parenthesized type name: sizeof(int)."""
    target_type: CType = None


@dataclass(frozen=True)
class SizeofExpression(Expression):
    """sizeof applied to an expression: sizeof x, sizeof(x + 1)."""
    operand: Expression = None


@dataclass(frozen=True)
class CallExpression(Expression):
    """
    Function call expression.

    Attributes:
        callee: Expression yielding the function (usually an identifier)
        arguments: Argument expressions in order
    """
    callee: Expression = None
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ArraySubscript(Expression):
    """Array subscript expression (base[subscript])."""
    base: Expression = None
    subscript: Expression = None


@dataclass(frozen=True)
class MemberAccessExpression(Expression):
    """Member access through a value (base.member)."""
    base: Expression = None
    member: str = ""


@dataclass(frozen=True)
class PointerMemberExpression(Expression):
    """Member access through a pointer (base->member)."""
    base: Expression = None
    member: str = ""


@dataclass(frozen=True)
class InitializerList(Expression):
    """Brace-enclosed initializer ({1, 2, 3}). Only valid as an initializer."""
    elements: tuple[Expression, ...] = ()


def precedence_of(expr: Expression) -> Precedence:
    """Return the precedence level of the production that built expr."""
    if isinstance(expr, BinaryExpression):
        return BINARY_PRECEDENCE[expr.operator]
    if isinstance(expr, AssignmentExpression):
        return Precedence.ASSIGNMENT
    if isinstance(expr, TernaryExpression):
        return Precedence.TERNARY
    if isinstance(expr, (UnaryExpression, PrefixExpression, CastExpression,
                         SizeofExpression, SizeofTypeExpression)):
        return Precedence.UNARY
    if isinstance(expr, (PostfixExpression, CallExpression, ArraySubscript,
                         MemberAccessExpression, PointerMemberExpression)):
        return Precedence.POSTFIX
    return Precedence.PRIMARY


# =============================================================================
# Declaration Nodes
# =============================================================================

@dataclass(frozen=True)
class Enumerator(ASTNode):
    """
    One enumeration constant.

    Attributes:
        name: Constant name
        value: Explicit value expression, or None
    """
    name: str = ""
    value: Optional[Expression] = None


@dataclass(frozen=True)
class AggregateDefinition(ASTNode):
    """
    A struct, union or enum specifier.

    Attributes:
        kind: "struct", "union" or "enum"
        tag: Tag name, or None for an anonymous aggregate
        members: Member declarations (struct/union)
        enumerators: Constants (enum)
        has_body: False for a reference or forward declaration (struct S;)
    """
    kind: str = "struct"
    tag: Optional[str] = None
    members: tuple["Declaration", ...] = ()
    enumerators: tuple[Enumerator, ...] = ()
    has_body: bool = False


@dataclass(frozen=True)
class VariableDeclaration(Declaration):
    """
    Declaration of one name: variable, function prototype, parameter-free
    global, or struct/union member.

    Represents declarations like:
        int x;
        static const char *name = "x";
        int (*handler)(int);
        unsigned flags : 3;          (member with bit width)
        struct P { int x; } origin;  (aggregate defined inline)

    Attributes:
        var_type: The full declared type (declarator applied)
        name: Declared name ("" for an unnamed bit-field)
        initializer: Optional initializer expression
        storage: Storage-class keywords in source order (extern, static, ...)
        aggregate: Body of a struct/union/enum defined in this declaration
        bit_width: Bit-field width for struct members
    """
    var_type: CType = None
    name: str = ""
    initializer: Optional[Expression] = None
    storage: tuple[str, ...] = ()
    aggregate: Optional[AggregateDefinition] = None
    bit_width: Optional[Expression] = None


@dataclass(frozen=True)
class TypedefDeclaration(Declaration):
    """
    typedef introducing one name.

    Attributes:
        name: The new type name
        target_type: The aliased type
        aggregate: Body of a struct/union/enum defined in this typedef
    """
    name: str = ""
    target_type: CType = None
    aggregate: Optional[AggregateDefinition] = None


@dataclass(frozen=True)
class DeclarationList(Declaration):
    """
    Several declarators sharing one specifier: int a = 1, *b;

    Every entry is a VariableDeclaration, or every entry a
    TypedefDeclaration. Only the first entry carries the aggregate body.
    """
    declarations: tuple[Declaration, ...] = ()


@dataclass(frozen=True)
class AggregateDeclaration(Declaration):
    """Standalone struct/union/enum definition or forward declaration."""
    definition: AggregateDefinition = None


@dataclass(frozen=True)
class FunctionDefinition(Declaration):
    """
    Function definition.

    Attributes:
        name: Function name
        function_type: Return type, parameter types and names
        body: The function body
        storage: Storage-class keywords (static, inline, extern)
    """
    name: str = ""
    function_type: FunctionType = None
    body: "BlockStatement" = None
    storage: tuple[str, ...] = ()


@dataclass(frozen=True)
class TranslationUnit(ASTNode):
    """Root node: one preprocessed source file."""
    declarations: tuple[Declaration, ...] = ()


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class BlockStatement(Statement):
    """Compound statement: declarations and statements in source order."""
    statements: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """Expression used as a statement (followed by semicolon)."""
    expression: Expression = None


@dataclass(frozen=True)
class EmptyStatement(Statement):
    """Lone semicolon."""
    pass


@dataclass(frozen=True)
class IfStatement(Statement):
    """
    If statement with optional else clause.

    Attributes:
        condition: The condition expression
        then_branch: Statement executed if condition is true
        else_branch: Optional statement executed if condition is false
    """
    condition: Expression = None
    then_branch: Statement = None
    else_branch: Optional[Statement] = None


@dataclass(frozen=True)
class WhileStatement(Statement):
    condition: Expression = None
    body: Statement = None


@dataclass(frozen=True)
class DoWhileStatement(Statement):
    body: Statement = None
    condition: Expression = None


@dataclass(frozen=True)
class ForStatement(Statement):
    """
    For loop statement.

    Attributes:
        initializer: Expression, declaration, or None
        condition: Optional loop condition
        update: Optional update expression
        body: Loop body statement
    """
    initializer: Optional[Union[Expression, Declaration]] = None
    condition: Optional[Expression] = None
    update: Optional[Expression] = None
    body: Statement = None


@dataclass(frozen=True)
class CaseClause(Statement):
    """
    Case or default clause in a switch statement.

    Attributes:
        value: Case value expression (None for default)
        statements: Statements up to the next label
        is_default: True if this is the default case
    """
    value: Optional[Expression] = None
    statements: tuple[Statement, ...] = ()
    is_default: bool = False


@dataclass(frozen=True)
class SwitchStatement(Statement):
    expression: Expression = None
    cases: tuple[CaseClause, ...] = ()


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Optional[Expression] = None


@dataclass(frozen=True)
class BreakStatement(Statement):
    """Break statement for exiting loops and switches."""
    pass


@dataclass(frozen=True)
class ContinueStatement(Statement):
    """Continue statement for skipping to next loop iteration."""
    pass


@dataclass(frozen=True)
class GotoStatement(Statement):
    label: str = ""


@dataclass(frozen=True)
class LabelStatement(Statement):
    """
    Label for goto targets.

    Attributes:
        name: Label name
        statement: The labeled statement
    """
    name: str = ""
    statement: Statement = None


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Provides a visitor pattern for traversing the AST. Subclasses
    override visit_* methods for specific node types they care about.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_CallExpression(self, node):
                self.calls += 1
                self.generic_visit(node)

        counter = CallCounter()
        counter.visit(unit)
    """

    def visit(self, node: ASTNode) -> Any:
        """
        Visit a node by dispatching to the appropriate method.

        Args:
            node: The AST node to visit

        Returns:
            The result of the visit method (varies by node type)
        """
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """
        Default visit method for unhandled node types.

        Visits all child nodes in field order.
        """
        for node_field in fields(node):
            value = getattr(node, node_field.name)
            if isinstance(value, ASTNode):
                self.visit(value)
            elif isinstance(value, (list, tuple)):
                for item in value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces an indented outline of the tree. Expressions are written on
    one line, fully parenthesized, so the parsed nesting is explicit:

        Expr: (a + (b * c))

    Usage:
        printer = ASTPrinter()
        output = printer.print(unit)
        print(output)
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        if isinstance(node, Expression):
            return self.expression(node)
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        """Emit a line with current indentation."""
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _nested(self, label: str, node: Optional[ASTNode]) -> None:
        self._emit(label)
        self.indent_level += 1
        if node is not None:
            self.visit(node)
        self.indent_level -= 1

    def visit_TranslationUnit(self, node: TranslationUnit):
        self._emit("TranslationUnit")
        self.indent_level += 1
        for decl in node.declarations:
            self.visit(decl)
        self.indent_level -= 1

    def visit_FunctionDefinition(self, node: FunctionDefinition):
        storage = " ".join(node.storage) + " " if node.storage else ""
        self._emit(f"Function: {storage}{node.name}: {type_name(node.function_type)}")
        self.indent_level += 1
        self.visit(node.body)
        self.indent_level -= 1

    def visit_VariableDeclaration(self, node: VariableDeclaration):
        storage = " ".join(node.storage) + " " if node.storage else ""
        init = f" = {self.expression(node.initializer)}" if node.initializer else ""
        width = f" : {self.expression(node.bit_width)}" if node.bit_width else ""
        self._emit(f"Variable: {storage}{node.name}: {type_name(node.var_type)}{width}{init}")
        if node.aggregate is not None:
            self.indent_level += 1
            self.visit(node.aggregate)
            self.indent_level -= 1

    def visit_TypedefDeclaration(self, node: TypedefDeclaration):
        self._emit(f"Typedef: {node.name} = {type_name(node.target_type)}")
        if node.aggregate is not None:
            self.indent_level += 1
            self.visit(node.aggregate)
            self.indent_level -= 1

    def visit_DeclarationList(self, node: DeclarationList):
        for decl in node.declarations:
            self.visit(decl)

    def visit_AggregateDeclaration(self, node: AggregateDeclaration):
        self.visit(node.definition)

    def visit_AggregateDefinition(self, node: AggregateDefinition):
        body = "" if node.has_body else " (no body)"
        self._emit(f"{node.kind.capitalize()}: {node.tag or '<anonymous>'}{body}")
        self.indent_level += 1
        for member in node.members:
            self.visit(member)
        for enumerator in node.enumerators:
            value = f" = {self.expression(enumerator.value)}" if enumerator.value else ""
            self._emit(f"Enumerator: {enumerator.name}{value}")
        self.indent_level -= 1

    def visit_BlockStatement(self, node: BlockStatement):
        self._emit("Block")
        self.indent_level += 1
        for stmt in node.statements:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_IfStatement(self, node: IfStatement):
        self._emit(f"If ({self.expression(node.condition)})")
        self.indent_level += 1
        self._nested("Then:", node.then_branch)
        if node.else_branch is not None:
            self._nested("Else:", node.else_branch)
        self.indent_level -= 1

    def visit_WhileStatement(self, node: WhileStatement):
        self._nested(f"While ({self.expression(node.condition)})", node.body)

    def visit_DoWhileStatement(self, node: DoWhileStatement):
        self._nested(f"DoWhile ({self.expression(node.condition)})", node.body)

    def visit_ForStatement(self, node: ForStatement):
        if isinstance(node.initializer, Expression):
            init = self.expression(node.initializer)
        elif node.initializer is not None:
            init = "<declaration>"
        else:
            init = ""
        cond = self.expression(node.condition) if node.condition else ""
        update = self.expression(node.update) if node.update else ""
        self._emit(f"For ({init}; {cond}; {update})")
        self.indent_level += 1
        if isinstance(node.initializer, Declaration):
            self.visit(node.initializer)
        self.visit(node.body)
        self.indent_level -= 1

    def visit_SwitchStatement(self, node: SwitchStatement):
        self._emit(f"Switch ({self.expression(node.expression)})")
        self.indent_level += 1
        for case in node.cases:
            self.visit(case)
        self.indent_level -= 1

    def visit_CaseClause(self, node: CaseClause):
        self._emit("Default:" if node.is_default else f"Case {self.expression(node.value)}:")
        self.indent_level += 1
        for stmt in node.statements:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_LabelStatement(self, node: LabelStatement):
        self._nested(f"Label {node.name}:", node.statement)

    def visit_GotoStatement(self, node: GotoStatement):
        self._emit(f"Goto {node.label}")

    def visit_ReturnStatement(self, node: ReturnStatement):
        if node.value is not None:
            self._emit(f"Return {self.expression(node.value)}")
        else:
            self._emit("Return")

    def visit_BreakStatement(self, node: BreakStatement):
        self._emit("Break")

    def visit_ContinueStatement(self, node: ContinueStatement):
        self._emit("Continue")

    def visit_EmptyStatement(self, node: EmptyStatement):
        self._emit("Empty")

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit(f"Expr: {self.expression(node.expression)}")

    def expression(self, expr: Optional[Expression]) -> str:
        """Convert expression to a fully parenthesized string."""
        if expr is None:
            return ""
        if isinstance(expr, (IntegerLiteral, FloatLiteral)):
            return expr.text or str(expr.value)
        if isinstance(expr, CharLiteral):
            return expr.text or repr(chr(expr.value))
        if isinstance(expr, StringLiteral):
            return expr.text or f'"{expr.value}"'
        if isinstance(expr, IdentifierExpression):
            return expr.name
        if isinstance(expr, BinaryExpression):
            return f"({self.expression(expr.left)} {expr.operator.value} {self.expression(expr.right)})"
        if isinstance(expr, UnaryExpression):
            return f"({expr.operator.value}{self.expression(expr.operand)})"
        if isinstance(expr, PrefixExpression):
            return f"({expr.operator.value}{self.expression(expr.operand)})"
        if isinstance(expr, PostfixExpression):
            return f"({self.expression(expr.operand)}{expr.operator.value})"
        if isinstance(expr, AssignmentExpression):
            return f"({self.expression(expr.target)} {expr.operator.value} {self.expression(expr.value)})"
        if isinstance(expr, TernaryExpression):
            return (
                f"({self.expression(expr.condition)} ? {self.expression(expr.then_expr)}"
                f" : {self.expression(expr.else_expr)})"
            )
        if isinstance(expr, CastExpression):
            return f"(({type_name(expr.target_type)}){self.expression(expr.operand)})"
        if isinstance(expr, SizeofTypeExpression):
            return f"sizeof({type_name(expr.target_type)})"
        if isinstance(expr, SizeofExpression):
            return f"(sizeof {self.expression(expr.operand)})"
        if isinstance(expr, CallExpression):
            args = ", ".join(self.expression(a) for a in expr.arguments)
            return f"{self.expression(expr.callee)}({args})"
        if isinstance(expr, ArraySubscript):
            return f"{self.expression(expr.base)}[{self.expression(expr.subscript)}]"
        if isinstance(expr, MemberAccessExpression):
            return f"{self.expression(expr.base)}.{expr.member}"
        if isinstance(expr, PointerMemberExpression):
            return f"{self.expression(expr.base)}->{expr.member}"
        if isinstance(expr, InitializerList):
            return "{" + ", ".join(self.expression(e) for e in expr.elements) + "}"
        return f"<{type(expr).__name__}>"

"""
C Source Renderer
=================

This module turns an AST back into C source text. It is used to check
round-trip fidelity (parse, render, parse again) and defines the output
contract a target-language backend implements against the same AST.

Parenthesization
----------------
Parentheses are emitted only where the tree requires them. Each parent
asks for a minimum precedence of each operand; an operand whose own
level (precedence_of) is lower than that gets wrapped:

    binary          left operand: own level, right operand: one tighter
    assignment      target: unary, value: assignment (right-assoc)
    ternary         condition: logical-or, then: assignment, else: ternary
    unary / cast    operand: unary
    postfix         base: postfix; arguments and subscripts: assignment

So (a - b) - c renders as "a - b - c" and a - (b - c) as "a - (b - c)".

Declarators
-----------
Types are rendered with C declarator syntax, inside-out:

    int arr[10]         int *p          int (*p)[10]
    int (*fp)(int, char *)              char *const s

Layout
------
Statements are indented with four spaces (configurable). Blocks keep
their braces; non-block bodies are put on their own indented line.
Braces are added only around an if-without-else that would otherwise
capture a following else.
"""

from typing import Optional

from c_transpiler.frontend.types import (
    CType,
    NamedType,
    PointerType,
    ArrayType,
    FunctionType,
    qualifier_keywords,
)
from c_transpiler.frontend.ast import (
    ASTNode,
    ASTVisitor,
    Precedence,
    precedence_of,
    TranslationUnit,
    FunctionDefinition,
    VariableDeclaration,
    TypedefDeclaration,
    DeclarationList,
    AggregateDeclaration,
    AggregateDefinition,
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
)


# =============================================================================
# Literal Escaping
# =============================================================================

_SIMPLE_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
    "\a": "\\a",
    "\\": "\\\\",
}


def escape_c_text(text: str, quote: str) -> str:
    """
    Escape decoded literal contents for a C string or character literal.

    Args:
        text: The decoded characters
        quote: The delimiting quote (" or '), which gets a backslash

    Other control characters, DEL and bytes from 0x80 up become three
    digit octal escapes, so the output stays ASCII and each escape is one
    char. A NUL followed by an octal digit is written as \\000 so the
    digit is not absorbed. Characters above 0xFF only occur in trees built
    by hand; they are written as the octal escapes of their UTF-8 bytes.
    """
    out = []
    for i, char in enumerate(text):
        if char in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[char])
        elif char == quote:
            out.append("\\" + char)
        elif char == "\0":
            following = text[i + 1:i + 2]
            out.append("\\000" if following and following in "01234567" else "\\0")
        elif ord(char) < 0x20 or 0x7F <= ord(char) <= 0xFF:
            out.append(f"\\{ord(char):03o}")
        elif ord(char) > 0xFF:
            out.extend(f"\\{byte:03o}" for byte in char.encode("utf-8", "surrogatepass"))
        else:
            out.append(char)
    return "".join(out)


# =============================================================================
# Renderer
# =============================================================================

class CRenderer(ASTVisitor):
    """
    Renders AST nodes as C source.

    Statement and declaration visitors emit lines; expressions and types
    are rendered to strings.

    Usage:
        renderer = CRenderer()
        text = renderer.render(unit)

    Attributes:
        indent_unit: Text used for one level of indentation
    """

    def __init__(self, indent: str = "    "):
        self.indent_unit = indent
        self.lines: list[str] = []
        self.indent_level = 0

    def render(self, node: ASTNode | CType) -> str:
        """
        Render any node.

        Expressions and types render to a single line. A translation
        unit ends with a newline; other statements do not.
        """
        if isinstance(node, Expression):
            return self.expression(node)
        if isinstance(node, (NamedType, PointerType, ArrayType, FunctionType)):
            return self.render_type(node)

        self.lines = []
        self.indent_level = 0
        self.visit(node)
        text = "\n".join(self.lines)
        if isinstance(node, TranslationUnit):
            text += "\n"
        return text

    def _emit(self, text: str) -> None:
        """Emit a line with current indentation."""
        self.lines.append(self.indent_unit * self.indent_level + text)

    # =========================================================================
    # Expressions
    # =========================================================================

    def expression(self, expr: Expression, context: Precedence = Precedence.ASSIGNMENT) -> str:
        """
        Render an expression, parenthesized if it binds more weakly than
        the context requires.
        """
        method = getattr(self, f"_expr_{type(expr).__name__}")
        text = method(expr)
        if precedence_of(expr) < context:
            return f"({text})"
        return text

    def _expr_IntegerLiteral(self, expr: IntegerLiteral) -> str:
        return expr.text or str(expr.value)

    def _expr_FloatLiteral(self, expr: FloatLiteral) -> str:
        return expr.text or repr(expr.value)

    def _expr_CharLiteral(self, expr: CharLiteral) -> str:
        return "'" + escape_c_text(chr(expr.value), "'") + "'"

    def _expr_StringLiteral(self, expr: StringLiteral) -> str:
        return '"' + escape_c_text(expr.value, '"') + '"'

    def _expr_IdentifierExpression(self, expr: IdentifierExpression) -> str:
        return expr.name

    def _prefix(self, symbol: str, operand: Expression) -> str:
        text = self.expression(operand, Precedence.UNARY)
        # "- -x" must not become "--x"
        if text[:1] == symbol[-1] and symbol[-1] in "+-&":
            return f"{symbol} {text}"
        return symbol + text

    def _expr_UnaryExpression(self, expr: UnaryExpression) -> str:
        return self._prefix(expr.operator.value, expr.operand)

    def _expr_PrefixExpression(self, expr: PrefixExpression) -> str:
        return self._prefix(expr.operator.value, expr.operand)

    def _expr_PostfixExpression(self, expr: PostfixExpression) -> str:
        return self.expression(expr.operand, Precedence.POSTFIX) + expr.operator.value

    def _expr_BinaryExpression(self, expr: BinaryExpression) -> str:
        level = expr.operator.precedence
        left = self.expression(expr.left, level)
        right = self.expression(expr.right, Precedence(level + 1))
        return f"{left} {expr.operator.value} {right}"

    def _expr_AssignmentExpression(self, expr: AssignmentExpression) -> str:
        target = self.expression(expr.target, Precedence.UNARY)
        value = self.expression(expr.value, Precedence.ASSIGNMENT)
        return f"{target} {expr.operator.value} {value}"

    def _expr_TernaryExpression(self, expr: TernaryExpression) -> str:
        condition = self.expression(expr.condition, Precedence.LOGICAL_OR)
        then_expr = self.expression(expr.then_expr, Precedence.ASSIGNMENT)
        else_expr = self.expression(expr.else_expr, Precedence.TERNARY)
        return f"{condition} ? {then_expr} : {else_expr}"

    def _expr_CastExpression(self, expr: CastExpression) -> str:
        operand = self.expression(expr.operand, Precedence.UNARY)
        return f"({self.render_type(expr.target_type)}){operand}"

    def _expr_SizeofTypeExpression(self, expr: SizeofTypeExpression) -> str:
        return f"sizeof({self.render_type(expr.target_type)})"

    def _expr_SizeofExpression(self, expr: SizeofExpression) -> str:
        # sizeof (T)x would re-parse as sizeof(T) followed by x
        if isinstance(expr.operand, CastExpression):
            return f"sizeof({self.expression(expr.operand)})"
        operand = self.expression(expr.operand, Precedence.UNARY)
        if operand.startswith("("):
            return f"sizeof{operand}"
        return f"sizeof {operand}"

    def _expr_CallExpression(self, expr: CallExpression) -> str:
        callee = self.expression(expr.callee, Precedence.POSTFIX)
        arguments = ", ".join(self.expression(arg) for arg in expr.arguments)
        return f"{callee}({arguments})"

    def _expr_ArraySubscript(self, expr: ArraySubscript) -> str:
        return f"{self.expression(expr.base, Precedence.POSTFIX)}[{self.expression(expr.subscript)}]"

    def _expr_MemberAccessExpression(self, expr: MemberAccessExpression) -> str:
        return f"{self.expression(expr.base, Precedence.POSTFIX)}.{expr.member}"

    def _expr_PointerMemberExpression(self, expr: PointerMemberExpression) -> str:
        return f"{self.expression(expr.base, Precedence.POSTFIX)}->{expr.member}"

    def _expr_InitializerList(self, expr: InitializerList) -> str:
        return "{" + ", ".join(self.expression(e) for e in expr.elements) + "}"

    # =========================================================================
    # Types and Declarators
    # =========================================================================

    def render_type(self, ctype: CType) -> str:
        """Render a type name (abstract declarator), e.g. 'int (*)[10]'."""
        return self.render_declaration(ctype, "")

    def render_declaration(
        self,
        ctype: CType,
        name: str,
        aggregate: Optional[AggregateDefinition] = None,
    ) -> str:
        """
        Render 'specifier declarator', e.g. 'int (*fp)(int, char *)'.

        Args:
            ctype: The declared type
            name: The declared name ("" for an abstract declarator)
            aggregate: Aggregate body to render in place of the tag
        """
        base, declarator = self._declarator(ctype, name)
        specifier = self._specifier(base, aggregate)
        if declarator:
            return f"{specifier} {declarator}"
        return specifier

    def _declarator(self, ctype: CType, inner: str) -> tuple[NamedType, str]:
        """
        Wrap inner (the name, or what has been built so far) in the
        declarator syntax for ctype, working outward to the base type.
        """
        if isinstance(ctype, NamedType):
            return ctype, inner

        if isinstance(ctype, PointerType):
            qualifiers = " ".join(qualifier_keywords(ctype.qualifiers))
            if qualifiers and inner:
                text = f"*{qualifiers} {inner}"
            else:
                text = f"*{qualifiers}{inner}"
            # Pointer to array or function binds looser than the suffix
            if isinstance(ctype.to, (ArrayType, FunctionType)):
                text = f"({text})"
            return self._declarator(ctype.to, text)

        if isinstance(ctype, ArrayType):
            size = self.expression(ctype.size) if ctype.size is not None else ""
            return self._declarator(ctype.of, f"{inner}[{size}]")

        return self._declarator(ctype.returns, f"{inner}({self._parameters(ctype)})")

    def _parameters(self, ftype: FunctionType) -> str:
        rendered = []
        for index, parameter in enumerate(ftype.parameters):
            name = None
            if index < len(ftype.parameter_names):
                name = ftype.parameter_names[index]
            rendered.append(self.render_declaration(parameter, name or ""))
        if ftype.variadic:
            rendered.append("...")
        return ", ".join(rendered)

    def _specifier(self, named: NamedType, aggregate: Optional[AggregateDefinition] = None) -> str:
        words = qualifier_keywords(named.qualifiers)
        if aggregate is not None:
            words.append(self._aggregate_text(aggregate))
        elif named.tag is not None:
            words.append(f"{named.tag} {named.name}" if named.name else named.tag)
        else:
            words.append(named.name)
        return " ".join(words)

    def _aggregate_text(self, definition: AggregateDefinition) -> str:
        """
        Render a struct/union/enum specifier. A body spans several lines;
        lines after the first carry their own indentation.
        """
        head = definition.kind
        if definition.tag:
            head = f"{head} {definition.tag}"
        if not definition.has_body:
            return head

        saved = self.lines
        self.lines = []
        self.indent_level += 1
        for member in definition.members:
            self.visit(member)
        for index, enumerator in enumerate(definition.enumerators):
            text = enumerator.name
            if enumerator.value is not None:
                text += f" = {self.expression(enumerator.value, Precedence.TERNARY)}"
            if index < len(definition.enumerators) - 1:
                text += ","
            self._emit(text)
        self.indent_level -= 1
        body, self.lines = self.lines, saved

        closing = self.indent_unit * self.indent_level + "}"
        return "\n".join([f"{head} {{", *body, closing])

    # =========================================================================
    # Declarations
    # =========================================================================

    def _declaration_text(self, node: Declaration) -> str:
        """Render a declaration as text ending in ';'."""
        if isinstance(node, DeclarationList):
            return self._declaration_list_text(node)
        if isinstance(node, TypedefDeclaration):
            return f"typedef {self.render_declaration(node.target_type, node.name, node.aggregate)};"
        if isinstance(node, AggregateDeclaration):
            return self._aggregate_text(node.definition) + ";"

        text = self.render_declaration(node.var_type, node.name, node.aggregate)
        if node.storage:
            text = " ".join(node.storage) + " " + text
        return text + self._declarator_tail(node) + ";"

    def _declarator_tail(self, node: VariableDeclaration) -> str:
        text = ""
        if node.bit_width is not None:
            text += f" : {self.expression(node.bit_width, Precedence.TERNARY)}"
        if node.initializer is not None:
            text += f" = {self.expression(node.initializer)}"
        return text

    def _declaration_list_text(self, node: DeclarationList) -> str:
        """Render 'int a = 1, *b;' with the specifier written once."""
        first = node.declarations[0]
        parts = []
        shared_base = None
        for declaration in node.declarations:
            if isinstance(declaration, TypedefDeclaration):
                base, declarator = self._declarator(declaration.target_type, declaration.name)
                parts.append(declarator)
            else:
                base, declarator = self._declarator(declaration.var_type, declaration.name)
                parts.append(declarator + self._declarator_tail(declaration))
            if shared_base is None:
                shared_base = base

        specifier = self._specifier(shared_base, first.aggregate)

        if isinstance(first, TypedefDeclaration):
            prefix = "typedef "
        elif first.storage:
            prefix = " ".join(first.storage) + " "
        else:
            prefix = ""
        return f"{prefix}{specifier} {', '.join(parts)};"

    def visit_TranslationUnit(self, node: TranslationUnit):
        previous = None
        for declaration in node.declarations:
            if previous is not None and (
                isinstance(previous, FunctionDefinition) or isinstance(declaration, FunctionDefinition)
            ):
                self.lines.append("")
            self.visit(declaration)
            previous = declaration

    def visit_FunctionDefinition(self, node: FunctionDefinition):
        header = self.render_declaration(node.function_type, node.name)
        if node.storage:
            header = " ".join(node.storage) + " " + header
        self._emit(f"{header} {{")
        self._emit_statements(node.body.statements)
        self._emit("}")

    def visit_VariableDeclaration(self, node: VariableDeclaration):
        self._emit(self._declaration_text(node))

    def visit_TypedefDeclaration(self, node: TypedefDeclaration):
        self._emit(self._declaration_text(node))

    def visit_DeclarationList(self, node: DeclarationList):
        self._emit(self._declaration_text(node))

    def visit_AggregateDeclaration(self, node: AggregateDeclaration):
        self._emit(self._declaration_text(node))

    # =========================================================================
    # Statements
    # =========================================================================

    def _emit_statements(self, statements: tuple[Statement, ...]) -> None:
        self.indent_level += 1
        for statement in statements:
            self.visit(statement)
        self.indent_level -= 1

    def _emit_clause(self, header: str, body: Statement) -> bool:
        """
        Emit a statement header with its body.

        Returns:
            True if the body was a block (the last line is its '}')
        """
        if isinstance(body, BlockStatement):
            self._emit(f"{header} {{")
            self._emit_statements(body.statements)
            self._emit("}")
            return True

        self._emit(header)
        self._emit_statements((body,))
        return False

    @staticmethod
    def _ends_with_open_if(statement: Statement) -> bool:
        """True if a following 'else' would attach to an if inside statement."""
        while True:
            if isinstance(statement, IfStatement):
                if statement.else_branch is None:
                    return True
                statement = statement.else_branch
            elif isinstance(statement, (WhileStatement, ForStatement)):
                statement = statement.body
            elif isinstance(statement, LabelStatement):
                statement = statement.statement
            else:
                return False

    def visit_BlockStatement(self, node: BlockStatement):
        self._emit("{")
        self._emit_statements(node.statements)
        self._emit("}")

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit(f"{self.expression(node.expression)};")

    def visit_EmptyStatement(self, node: EmptyStatement):
        self._emit(";")

    def visit_IfStatement(self, node: IfStatement):
        self._emit_if(node, "")

    def _emit_if(self, node: IfStatement, prefix: str) -> None:
        then_branch = node.then_branch
        if node.else_branch is not None and self._ends_with_open_if(then_branch):
            then_branch = BlockStatement(statements=(then_branch,))

        braced = self._emit_clause(f"{prefix}if ({self.expression(node.condition)})", then_branch)
        if node.else_branch is None:
            return

        if braced:
            self.lines.pop()
            else_prefix = "} else"
        else:
            else_prefix = "else"

        if isinstance(node.else_branch, IfStatement):
            self._emit_if(node.else_branch, else_prefix + " ")
        else:
            self._emit_clause(else_prefix, node.else_branch)

    def visit_WhileStatement(self, node: WhileStatement):
        self._emit_clause(f"while ({self.expression(node.condition)})", node.body)

    def visit_DoWhileStatement(self, node: DoWhileStatement):
        condition = self.expression(node.condition)
        if self._emit_clause("do", node.body):
            self.lines.pop()
            self._emit(f"}} while ({condition});")
        else:
            self._emit(f"while ({condition});")

    def visit_ForStatement(self, node: ForStatement):
        if node.initializer is None:
            init = ";"
        elif isinstance(node.initializer, Declaration):
            init = self._declaration_text(node.initializer)
        else:
            init = f"{self.expression(node.initializer)};"
        condition = f" {self.expression(node.condition)};" if node.condition is not None else ";"
        update = f" {self.expression(node.update)}" if node.update is not None else ""
        self._emit_clause(f"for ({init}{condition}{update})", node.body)

    def visit_SwitchStatement(self, node: SwitchStatement):
        self._emit(f"switch ({self.expression(node.expression)}) {{")
        self.indent_level += 1
        for case in node.cases:
            self.visit(case)
        self.indent_level -= 1
        self._emit("}")

    def visit_CaseClause(self, node: CaseClause):
        if node.is_default:
            self._emit("default:")
        else:
            self._emit(f"case {self.expression(node.value, Precedence.TERNARY)}:")
        self._emit_statements(node.statements)

    def visit_ReturnStatement(self, node: ReturnStatement):
        if node.value is not None:
            self._emit(f"return {self.expression(node.value)};")
        else:
            self._emit("return;")

    def visit_BreakStatement(self, node: BreakStatement):
        self._emit("break;")

    def visit_ContinueStatement(self, node: ContinueStatement):
        self._emit("continue;")

    def visit_GotoStatement(self, node: GotoStatement):
        self._emit(f"goto {node.label};")

    def visit_LabelStatement(self, node: LabelStatement):
        self._emit(f"{node.name}:")
        self.visit(node.statement)


def render(node: ASTNode | CType, indent: str = "    ") -> str:
    """Render an AST node, expression or type as C source text."""
    return CRenderer(indent).render(node)

# CUI // SP-CTI
"""Render a JavaScript syntax tree to source text.

Two-space indentation, semicolon-terminated statements, single-quoted
strings. Parentheses are inserted from an operator precedence table, so the
printed code re-parses to the same tree.
"""

import json

from php2node.conversion import target_ast as js

INDENT = "  "

# Higher binds tighter (ECMAScript operator precedence).
BINARY_PRECEDENCE = {
    "||": 4,
    "&&": 5,
    "|": 6,
    "^": 7,
    "&": 8,
    "==": 9, "!=": 9, "===": 9, "!==": 9,
    "<": 10, ">": 10, "<=": 10, ">=": 10, "in": 10, "instanceof": 10,
    "<<": 11, ">>": 11, ">>>": 11,
    "+": 13, "-": 13,
    "*": 14, "/": 14, "%": 14,
}

PREC_SEQUENCE = 1
PREC_ASSIGN = 2
PREC_CONDITIONAL = 3
PREC_UNARY = 15
PREC_POSTFIX = 16
PREC_MEMBER = 18
PREC_PRIMARY = 20


def _quote(value):
    """Single-quoted JavaScript string literal."""
    body = json.dumps(value, ensure_ascii=False)[1:-1]
    body = body.replace('\\"', '"').replace("'", "\\'")
    return f"'{body}'"


def _number(value):
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)
    return str(value)


class CodePrinter:
    """Walks a target tree and emits JavaScript text."""

    def __init__(self, indent=INDENT):
        self.indent = indent

    def print(self, node):
        if node is None:
            return ""
        if isinstance(node, js.Program):
            return self._statements(node.body, 0) + ("\n" if node.body else "")
        if js.is_statement(node):
            return self._statement(node, 0) + "\n"
        return self._expr(node)

    # -------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------
    def _statements(self, body, level):
        lines = []
        previous = None
        for stmt in body:
            text = self._statement(stmt, level)
            if previous is not None and (
                isinstance(stmt, js.FunctionDeclaration)
                or isinstance(previous, js.FunctionDeclaration)
            ):
                lines.append("")
            lines.append(text)
            previous = stmt
        return "\n".join(lines)

    def _block(self, block, level):
        if not block.body:
            return "{}"
        pad = self.indent * level
        return "{\n" + self._statements(block.body, level + 1) + "\n" + pad + "}"

    def _statement(self, node, level):
        pad = self.indent * level

        if isinstance(node, js.ExpressionStatement):
            text = self._expr(node.expression)
            if text.startswith(("{", "function")):
                text = f"({text})"
            return f"{pad}{text};"

        if isinstance(node, js.BlockStatement):
            return pad + self._block(node, level)

        if isinstance(node, js.ReturnStatement):
            if node.argument is None:
                return f"{pad}return;"
            return f"{pad}return {self._expr(node.argument)};"

        if isinstance(node, js.VariableDeclaration):
            return f"{pad}{self._declaration(node)};"

        if isinstance(node, js.FunctionDeclaration):
            name = node.id.name if node.id else ""
            params = ", ".join(self._expr(p, PREC_ASSIGN) for p in node.params)
            return f"{pad}function {name}({params}) {self._block(node.body, level)}"

        if isinstance(node, js.IfStatement):
            return pad + self._if(node, level)

        if isinstance(node, js.WhileStatement):
            return f"{pad}while ({self._expr(node.test)}) {self._block(node.body, level)}"

        if isinstance(node, js.ForStatement):
            header = self._expr(node.init) if node.init is not None else ""
            header += ";"
            if node.test is not None:
                header += " " + self._expr(node.test)
            header += ";"
            if node.update is not None:
                header += " " + self._expr(node.update)
            return f"{pad}for ({header}) {self._block(node.body, level)}"

        if isinstance(node, js.ForOfStatement):
            return (
                f"{pad}for ({self._declaration(node.left)} of {self._expr(node.right)}) "
                f"{self._block(node.body, level)}"
            )

        # An expression in statement position.
        return f"{pad}{self._expr(node)};"

    def _if(self, node, level):
        text = f"if ({self._expr(node.test)}) {self._block(node.consequent, level)}"
        alternate = node.alternate
        if alternate is None:
            return text
        if len(alternate.body) == 1 and isinstance(alternate.body[0], js.IfStatement):
            return text + " else " + self._if(alternate.body[0], level)
        return text + " else " + self._block(alternate, level)

    def _declaration(self, node):
        parts = []
        for decl in node.declarations:
            text = self._expr(decl.id)
            if decl.init is not None:
                text += " = " + self._expr(decl.init, PREC_ASSIGN)
            parts.append(text)
        return f"{node.kind} " + ", ".join(parts)

    # -------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------
    def _expr(self, node, min_prec=PREC_SEQUENCE):
        text, prec = self._expr_with_prec(node)
        if prec < min_prec:
            return f"({text})"
        return text

    def _expr_with_prec(self, node):
        if node is None:
            return "undefined", PREC_PRIMARY

        if isinstance(node, js.ExpressionStatement):
            # Placeholder statements can surface in expression position.
            return self._expr_with_prec(node.expression)

        if isinstance(node, js.Identifier):
            return node.name, PREC_PRIMARY
        if isinstance(node, js.StringLiteral):
            return _quote(node.value), PREC_PRIMARY
        if isinstance(node, js.NumericLiteral):
            text = _number(node.value)
            return text, (PREC_UNARY if text.startswith("-") else PREC_PRIMARY)
        if isinstance(node, js.BooleanLiteral):
            return ("true" if node.value else "false"), PREC_PRIMARY
        if isinstance(node, js.NullLiteral):
            return "null", PREC_PRIMARY

        if isinstance(node, js.ArrayExpression):
            items = ", ".join(self._expr(e, PREC_ASSIGN) for e in node.elements)
            return f"[{items}]", PREC_PRIMARY

        if isinstance(node, js.ArrayPattern):
            return "[" + ", ".join(self._expr(e) for e in node.elements) + "]", PREC_PRIMARY

        if isinstance(node, js.AssignmentPattern):
            return f"{self._expr(node.left)} = {self._expr(node.right, PREC_ASSIGN)}", PREC_ASSIGN

        if isinstance(node, js.ObjectExpression):
            if not node.properties:
                return "{}", PREC_PRIMARY
            props = []
            for prop in node.properties:
                key = self._expr(prop.key, PREC_ASSIGN)
                if prop.computed:
                    key = f"[{key}]"
                props.append(f"{key}: {self._expr(prop.value, PREC_ASSIGN)}")
            return "{ " + ", ".join(props) + " }", PREC_PRIMARY

        if isinstance(node, js.MemberExpression):
            obj = self._expr(node.object, PREC_MEMBER)
            if node.computed:
                return f"{obj}[{self._expr(node.property)}]", PREC_MEMBER
            return f"{obj}.{self._expr(node.property)}", PREC_MEMBER

        if isinstance(node, js.CallExpression):
            callee = self._expr(node.callee, PREC_MEMBER)
            args = ", ".join(self._expr(a, PREC_ASSIGN) for a in node.arguments)
            return f"{callee}({args})", PREC_MEMBER

        if isinstance(node, js.UpdateExpression):
            if node.prefix:
                return node.operator + self._expr(node.argument, PREC_UNARY), PREC_UNARY
            return self._expr(node.argument, PREC_MEMBER) + node.operator, PREC_POSTFIX

        if isinstance(node, js.UnaryExpression):
            argument = self._expr(node.argument, PREC_UNARY)
            separator = " " if node.operator.isalpha() else ""
            # Keep "- -x" from collapsing into "--x".
            if node.operator in ("-", "+") and argument.startswith(node.operator):
                separator = " "
            return f"{node.operator}{separator}{argument}", PREC_UNARY

        if isinstance(node, (js.BinaryExpression, js.LogicalExpression)):
            prec = BINARY_PRECEDENCE.get(node.operator, 13)
            left = self._expr(node.left, prec)
            right = self._expr(node.right, prec + 1)
            return f"{left} {node.operator} {right}", prec

        if isinstance(node, js.ConditionalExpression):
            test = self._expr(node.test, PREC_CONDITIONAL + 1)
            consequent = self._expr(node.consequent, PREC_ASSIGN)
            alternate = self._expr(node.alternate, PREC_ASSIGN)
            return f"{test} ? {consequent} : {alternate}", PREC_CONDITIONAL

        if isinstance(node, js.AssignmentExpression):
            left = self._expr(node.left, PREC_MEMBER)
            right = self._expr(node.right, PREC_ASSIGN)
            return f"{left} {node.operator} {right}", PREC_ASSIGN

        if isinstance(node, js.SequenceExpression):
            return ", ".join(self._expr(e, PREC_ASSIGN) for e in node.expressions), PREC_SEQUENCE

        raise TypeError(f"Cannot print {type(node).__name__} as an expression")


_default_printer = CodePrinter()


def print_code(node):
    """Render a target syntax tree to JavaScript source text."""
    return _default_printer.print(node)

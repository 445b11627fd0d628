# CUI // SP-CTI
"""Structural PHP AST -> JavaScript AST rewrite.

``transform(source_root)`` is total and side-effect free: every call builds
a fresh target tree from the mapped children and never mutates its input.
Dispatch is a closed table keyed on ``SourceNode.kind``; any kind missing
from the table yields a placeholder expression statement naming the kind,
so one unsupported construct never sinks the whole file.
"""

import logging

from php2node.conversion import source_ast as src
from php2node.conversion import target_ast as js
from php2node.conversion.operator_map import (
    is_logical,
    map_binary_operator,
    map_logical_operator,
)

logger = logging.getLogger("php2node.conversion.ast_transformer")

PLACEHOLDER_PREFIX = "TODO: Handle "
FOREACH_PLACEHOLDER = "item"


def strip_sigil(name):
    """Drop the leading ``$`` of a PHP variable name."""
    return name.replace("$", "", 1) if name else name


def placeholder(kind):
    """Expression statement marking an unhandled node kind."""
    return js.ExpressionStatement(js.StringLiteral(f"{PLACEHOLDER_PREFIX}{kind}"))


def is_placeholder(node):
    """True if ``node`` is the unknown-kind placeholder statement."""
    return (
        isinstance(node, js.ExpressionStatement)
        and isinstance(node.expression, js.StringLiteral)
        and node.expression.value.startswith(PLACEHOLDER_PREFIX)
    )


class AstTransformer:
    """Maps each PHP node kind onto its JavaScript counterpart."""

    def __init__(self):
        self._handlers = {
            "program": self._program,
            "echo": self._echo,
            "print": self._print,
            "string": self._string,
            "number": self._number,
            "boolean": self._boolean,
            "null": self._null,
            "variable": self._variable,
            "name": self._name,
            "assign": self._assign,
            "function": self._function,
            "parameter": self._parameter,
            "if": self._if,
            "while": self._while,
            "for": self._for,
            "foreach": self._foreach,
            "array": self._array,
            "entry": self._entry,
            "call": self._call,
            "methodcall": self._methodcall,
            "propertylookup": self._propertylookup,
            "offsetlookup": self._offsetlookup,
            "bin": self._bin,
            "unary": self._unary,
            "pre": self._pre,
            "post": self._post,
            "retif": self._retif,
            "return": self._return,
            "expressionstatement": self._expressionstatement,
        }

    @property
    def handled_kinds(self):
        return frozenset(self._handlers)

    def transform(self, node):
        """Transform one PHP node (and its subtree) into a JavaScript node."""
        if node is None:
            return None
        handler = self._handlers.get(node.kind)
        if handler is None:
            logger.warning("Unhandled PHP AST node kind: %s", node.kind)
            return placeholder(node.kind)
        return handler(node)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _statement(self, node):
        """Transform ``node`` for statement position."""
        result = self.transform(node)
        if result is None or js.is_statement(result):
            return result
        return js.ExpressionStatement(result)

    def _block(self, statements):
        body = tuple(
            stmt for stmt in (self._statement(s) for s in statements or ())
            if stmt is not None
        )
        return js.BlockStatement(body)

    def _expressions(self, nodes):
        """Collapse a PHP expression list into one JS expression (or None)."""
        mapped = tuple(self.transform(n) for n in nodes or ())
        if not mapped:
            return None
        if len(mapped) == 1:
            return mapped[0]
        return js.SequenceExpression(mapped)

    # -------------------------------------------------------------------
    # Program / statements
    # -------------------------------------------------------------------
    def _program(self, node):
        return js.Program(self._block(node.children).body)

    def _log_call(self, argument):
        callee = js.MemberExpression(js.Identifier("console"), js.Identifier("log"), False)
        args = (argument,) if argument is not None else ()
        return js.ExpressionStatement(js.CallExpression(callee, args))

    def _echo(self, node):
        value = None
        for expr in node.expressions:
            mapped = self.transform(expr)
            value = mapped if value is None else js.BinaryExpression("+", value, mapped)
        return self._log_call(value)

    def _print(self, node):
        return self._log_call(self.transform(node.expression))

    def _expressionstatement(self, node):
        return self._statement(node.expression)

    def _return(self, node):
        return js.ReturnStatement(self.transform(node.expr))

    def _function(self, node):
        return js.FunctionDeclaration(
            js.Identifier(node.name),
            tuple(self._parameter(p) for p in node.arguments),
            self._block(node.body),
        )

    def _parameter(self, node):
        name = js.Identifier(strip_sigil(node.name))
        if node.default is None:
            return name
        return js.AssignmentPattern(name, self.transform(node.default))

    def _if(self, node):
        alternate = None
        if node.alternate is not None:
            alternate = self._block(node.alternate)
        return js.IfStatement(self.transform(node.test), self._block(node.body), alternate)

    def _while(self, node):
        return js.WhileStatement(self.transform(node.test), self._block(node.body))

    def _for(self, node):
        return js.ForStatement(
            self._expressions(node.init),
            self._expressions(node.test),
            self._expressions(node.update),
            self._block(node.body),
        )

    def _foreach(self, node):
        for binding in (node.key, node.value):
            if binding is not None and binding.kind != "variable":
                # Destructuring bindings (list(...)) have no safe mapping.
                logger.warning("Unhandled foreach binding: %s", binding.kind)
                return placeholder(f"foreach {binding.kind}")
        source = self.transform(node.source)
        if node.key is not None and node.value is not None:
            binding = js.ArrayPattern((
                js.Identifier(strip_sigil(node.key.name)),
                js.Identifier(strip_sigil(node.value.name)),
            ))
            entries = js.MemberExpression(js.Identifier("Object"), js.Identifier("entries"), False)
            source = js.CallExpression(entries, (source,))
        elif node.key is not None:
            binding = js.Identifier(strip_sigil(node.key.name))
        elif node.value is not None:
            binding = js.Identifier(strip_sigil(node.value.name))
        else:
            binding = js.Identifier(FOREACH_PLACEHOLDER)
        left = js.VariableDeclaration("const", (js.VariableDeclarator(binding, None),))
        return js.ForOfStatement(left, source, self._block(node.body))

    # -------------------------------------------------------------------
    # Literals / names
    # -------------------------------------------------------------------
    def _string(self, node):
        return js.StringLiteral(node.value)

    def _number(self, node):
        return js.NumericLiteral(node.value)

    def _boolean(self, node):
        return js.BooleanLiteral(node.value)

    def _null(self, node):
        return js.NullLiteral()

    def _variable(self, node):
        return js.Identifier(strip_sigil(node.name))

    def _name(self, node):
        return js.Identifier(node.name)

    # -------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------
    def _assign(self, node):
        operator = node.operator or "="
        if operator != "=":
            operator = map_binary_operator(operator[:-1]) + "="
        return js.AssignmentExpression(
            operator, self.transform(node.left), self.transform(node.right)
        )

    def _array(self, node):
        if not any(item.kind == "entry" for item in node.items):
            return js.ArrayExpression(tuple(self.transform(item) for item in node.items))
        properties = []
        index = 0
        for item in node.items:
            if item.kind == "entry" and item.key is not None:
                properties.append(self._entry(item))
                continue
            value = item.value if item.kind == "entry" else item
            properties.append(js.ObjectProperty(
                js.NumericLiteral(index), self.transform(value), False
            ))
            index += 1
        return js.ObjectExpression(tuple(properties))

    def _entry(self, node):
        key = self.transform(node.key)
        computed = not isinstance(key, (js.StringLiteral, js.NumericLiteral))
        return js.ObjectProperty(key, self.transform(node.value), computed)

    def _call(self, node):
        return js.CallExpression(
            self.transform(node.what),
            tuple(self.transform(arg) for arg in node.arguments),
        )

    def _methodcall(self, node):
        return js.MemberExpression(self.transform(node.what), js.Identifier(node.name), False)

    def _propertylookup(self, node):
        return js.MemberExpression(self.transform(node.what), js.Identifier(node.offset), False)

    def _offsetlookup(self, node):
        return js.MemberExpression(self.transform(node.what), self.transform(node.offset), True)

    def _bin(self, node):
        left = self.transform(node.left)
        right = self.transform(node.right)
        if is_logical(node.type):
            return js.LogicalExpression(map_logical_operator(node.type), left, right)
        return js.BinaryExpression(map_binary_operator(node.type), left, right)

    def _unary(self, node):
        return js.UnaryExpression(node.type, self.transform(node.what))

    def _pre(self, node):
        return js.UpdateExpression(node.type * 2, self.transform(node.what), True)

    def _post(self, node):
        return js.UpdateExpression(node.type * 2, self.transform(node.what), False)

    def _retif(self, node):
        return js.ConditionalExpression(
            self.transform(node.test),
            self.transform(node.true_expr),
            self.transform(node.false_expr),
        )


_default_transformer = AstTransformer()


def transform(source_root):
    """Transform a PHP syntax tree into a JavaScript syntax tree."""
    return _default_transformer.transform(source_root)

# CUI // SP-CTI
"""PHP parser adapter.

Wraps the ``phply`` parser and maps its node classes onto the closed set of
source node kinds in source_ast.py. PHP method calls become ``call`` over
``propertylookup`` so their arguments survive; constructs without a
dedicated node type become ``OpaqueNode`` named after the construct.

Usage:
    from php2node.conversion.php_parser import PhpParser

    program = PhpParser().parse("<?php echo 'hi';", file_name="hello.php")
"""

import logging
import threading

from phply import phpast as php
from phply.phplex import lexer as php_lexer
from phply.phpparse import make_parser

from php2node.conversion import source_ast as src
from php2node.resilience.errors import PhpParseError

logger = logging.getLogger("php2node.conversion.php_parser")

# PHP keyword operators with a symbolic twin.
OPERATOR_ALIASES = {
    "and": "&&",
    "or": "||",
    "<>": "!=",
}


class PhpParser:
    """Thread-safe facade over a single phply parser instance."""

    def __init__(self):
        self._parser = make_parser()
        # ply parsers keep per-parse state on the instance.
        self._lock = threading.Lock()

    def parse(self, code, file_name=""):
        """Parse PHP source into a ``src.Program``.

        Raises:
            PhpParseError: The source is not valid PHP.
        """
        with self._lock:
            try:
                nodes = self._parser.parse(code, lexer=php_lexer.clone(), tracking=True)
            except SyntaxError as exc:
                line = exc.lineno or 0
                raise PhpParseError(
                    f"{exc.msg} at line {line}" if line else str(exc.msg),
                    file_name=file_name,
                    line=line,
                ) from exc
            except Exception as exc:
                raise PhpParseError(str(exc) or type(exc).__name__, file_name=file_name) from exc
        return src.Program(self._statements(nodes or []))

    # -------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------
    def _convert(self, node):
        if node is None:
            return None
        if isinstance(node, bool):
            return src.Boolean(node)
        if isinstance(node, str):
            return src.String(node)
        if isinstance(node, (int, float)):
            return src.Number(node)
        if isinstance(node, list):
            return src.OpaqueNode("list")
        name = type(node).__name__
        converter = getattr(self, f"_convert_{name.lower()}", None)
        if converter is None:
            return src.OpaqueNode(name.lower(), detail=name)
        return converter(node)

    def _statements(self, nodes):
        result = []
        for node in nodes:
            if isinstance(node, php.Block):
                result.extend(self._statements(node.nodes))
                continue
            if isinstance(node, php.InlineHTML) and not node.data.strip():
                continue
            converted = self._convert(node)
            if converted is not None:
                result.append(converted)
        return tuple(result)

    def _body(self, node):
        if node is None:
            return ()
        if isinstance(node, php.Block):
            return self._statements(node.nodes)
        if isinstance(node, list):
            return self._statements(node)
        return self._statements([node])

    def _arguments(self, params):
        args = []
        for param in params or []:
            args.append(self._convert(param.node if isinstance(param, php.Parameter) else param))
        return tuple(args)

    # -------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------
    def _convert_inlinehtml(self, node):
        return src.OpaqueNode("inline", detail=node.data[:40])

    def _convert_echo(self, node):
        return src.Echo(tuple(self._convert(n) for n in node.nodes))

    def _convert_print(self, node):
        return src.Print(self._convert(node.node))

    def _convert_return(self, node):
        return src.Return(self._convert(node.node))

    def _convert_function(self, node):
        params = tuple(
            src.Parameter(p.name, self._convert(p.default)) for p in node.params or []
        )
        return src.Function(node.name, params, self._body(node.nodes))

    def _convert_if(self, node):
        alternate = None
        if node.else_ is not None:
            alternate = self._body(node.else_.node)
        for elseif in reversed(node.elseifs or []):
            alternate = (src.If(self._convert(elseif.expr), self._body(elseif.node), alternate),)
        return src.If(self._convert(node.expr), self._body(node.node), alternate)

    def _convert_while(self, node):
        return src.While(self._convert(node.expr), self._body(node.node))

    def _convert_for(self, node):
        return src.For(
            tuple(self._convert(n) for n in node.start or []),
            tuple(self._convert(n) for n in node.test or []),
            tuple(self._convert(n) for n in node.count or []),
            self._body(node.node),
        )

    def _convert_foreach(self, node):
        return src.Foreach(
            self._convert(node.expr),
            self._foreach_binding(node.keyvar),
            self._foreach_binding(node.valvar),
            self._body(node.node),
        )

    def _foreach_binding(self, node):
        """phply hands the key over as a bare Variable and the value wrapped
        in a ForeachVariable; ``list(...)`` targets arrive as a Python list."""
        if isinstance(node, php.ForeachVariable):
            node = node.name
        if node is None:
            return None
        if isinstance(node, str):
            return src.Variable(node)
        if isinstance(node, php.Variable) and isinstance(node.name, str):
            return src.Variable(node.name)
        if isinstance(node, list):
            return src.OpaqueNode("list")
        return src.OpaqueNode(type(node).__name__.lower())

    # -------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------
    def _convert_variable(self, node):
        if not isinstance(node.name, str):
            return src.OpaqueNode("variablevariable")
        return src.Variable(node.name)

    def _convert_constant(self, node):
        lowered = node.name.lower()
        if lowered in ("true", "false"):
            return src.Boolean(lowered == "true")
        if lowered == "null":
            return src.Null()
        return src.Name(node.name)

    def _convert_assignment(self, node):
        return src.Assign(self._convert(node.node), self._convert(node.expr), "=")

    def _convert_assignop(self, node):
        return src.Assign(self._convert(node.left), self._convert(node.right), node.op)

    def _convert_array(self, node):
        items = []
        for element in node.nodes or []:
            if isinstance(element, php.ArrayElement):
                value = self._convert(element.value)
                if element.key is None:
                    items.append(value)
                else:
                    items.append(src.Entry(self._convert(element.key), value))
            else:
                items.append(self._convert(element))
        return src.Array(tuple(items))

    def _convert_functioncall(self, node):
        callee = src.Name(node.name) if isinstance(node.name, str) else self._convert(node.name)
        return src.Call(callee, self._arguments(node.params))

    def _convert_methodcall(self, node):
        if not isinstance(node.name, str):
            return src.OpaqueNode("methodcall")
        member = src.PropertyLookup(self._convert(node.node), node.name)
        return src.Call(member, self._arguments(node.params))

    def _convert_staticmethodcall(self, node):
        if not isinstance(node.class_, str) or not isinstance(node.name, str):
            return src.OpaqueNode("staticcall")
        member = src.PropertyLookup(src.Name(node.class_), node.name)
        return src.Call(member, self._arguments(node.params))

    def _convert_objectproperty(self, node):
        if isinstance(node.name, str):
            return src.PropertyLookup(self._convert(node.node), node.name)
        return src.OffsetLookup(self._convert(node.node), self._convert(node.name))

    def _convert_arrayoffset(self, node):
        return src.OffsetLookup(self._convert(node.node), self._convert(node.expr))

    def _convert_binaryop(self, node):
        operator = OPERATOR_ALIASES.get(node.op.lower(), node.op)
        return src.Bin(operator, self._convert(node.left), self._convert(node.right))

    def _convert_unaryop(self, node):
        return src.Unary(node.op, self._convert(node.expr))

    def _convert_preincdecop(self, node):
        return src.Pre(node.op[0], self._convert(node.expr))

    def _convert_postincdecop(self, node):
        return src.Post(node.op[0], self._convert(node.expr))

    def _convert_ternaryop(self, node):
        return src.RetIf(
            self._convert(node.expr),
            self._convert(node.iftrue),
            self._convert(node.iffalse),
        )

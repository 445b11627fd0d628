# CUI // SP-CTI
"""Tests for php2node.conversion.ast_transformer.

Covers every supported node kind, the unknown-kind placeholder and the
purity of the transformation.
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from php2node.conversion import source_ast as src
from php2node.conversion import target_ast as js
from php2node.conversion.ast_transformer import (
    AstTransformer,
    is_placeholder,
    placeholder,
    strip_sigil,
    transform,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _var(name):
    return src.Variable(f"${name}")


def _sample(kind):
    """A minimal well-formed source node for each supported kind."""
    samples = {
        "program": src.Program((src.Echo((src.String("x"),)),)),
        "echo": src.Echo((src.String("x"),)),
        "string": src.String("x"),
        "number": src.Number(1),
        "boolean": src.Boolean(True),
        "null": src.Null(),
        "variable": _var("a"),
        "assign": src.Assign(_var("a"), src.Number(1)),
        "function": src.Function("f", (src.Parameter("$x"),), (src.Return(_var("x")),)),
        "if": src.If(_var("a"), (src.Echo((src.String("y"),)),)),
        "while": src.While(_var("a"), ()),
        "for": src.For((), (), (), ()),
        "foreach": src.Foreach(_var("xs"), None, _var("x"), ()),
        "array": src.Array((src.Number(1),)),
        "call": src.Call(src.Name("f"), (src.Number(1),)),
        "methodcall": src.MethodCall(_var("o"), "m", ()),
        "propertylookup": src.PropertyLookup(_var("o"), "p"),
        "bin": src.Bin("+", src.Number(1), src.Number(2)),
        "print": src.Print(src.String("x")),
        "expressionstatement": src.ExpressionStatement(src.Call(src.Name("f"))),
        "return": src.Return(src.Number(1)),
        "parameter": src.Parameter("$x"),
        "name": src.Name("PHP_EOL"),
        "entry": src.Entry(src.String("k"), src.Number(1)),
        "offsetlookup": src.OffsetLookup(_var("a"), src.Number(0)),
        "unary": src.Unary("!", _var("a")),
        "pre": src.Pre("+", _var("i")),
        "post": src.Post("-", _var("i")),
        "retif": src.RetIf(_var("a"), src.Number(1), src.Number(2)),
    }
    return samples[kind]


def _contains_placeholder(node):
    if is_placeholder(node):
        return True
    if isinstance(node, js.TargetNode):
        return any(_contains_placeholder(v) for v in vars(node).values())
    if isinstance(node, tuple):
        return any(_contains_placeholder(v) for v in node)
    return False


def _log_argument(stmt):
    assert isinstance(stmt, js.ExpressionStatement)
    call = stmt.expression
    assert isinstance(call, js.CallExpression)
    assert call.callee == js.MemberExpression(js.Identifier("console"), js.Identifier("log"), False)
    return call.arguments


# ---------------------------------------------------------------------------
# Coverage
# ---------------------------------------------------------------------------
class TestCoverage:

    def test_handler_table_covers_known_kinds(self):
        assert AstTransformer().handled_kinds == frozenset(src.KNOWN_KINDS)

    @pytest.mark.parametrize("kind", src.KNOWN_KINDS)
    def test_known_kind_never_yields_placeholder(self, kind):
        assert not _contains_placeholder(transform(_sample(kind)))

    @pytest.mark.parametrize("kind", ["class", "switch", "try", "zz_fabricated"])
    def test_unknown_kind_yields_placeholder(self, kind):
        result = transform(src.OpaqueNode(kind))
        assert result == placeholder(kind)
        assert result.expression.value == f"TODO: Handle {kind}"

    def test_unknown_kind_inside_program_does_not_abort(self):
        program = src.Program((src.OpaqueNode("class"), src.Echo((src.String("ok"),))))
        result = transform(program)
        assert is_placeholder(result.body[0])
        assert _log_argument(result.body[1]) == (js.StringLiteral("ok"),)

    def test_none_maps_to_none(self):
        assert transform(None) is None


# ---------------------------------------------------------------------------
# Purity
# ---------------------------------------------------------------------------
class TestDeterminism:

    def test_same_input_same_output(self):
        tree = src.Program((
            src.Function("greet", (src.Parameter("$name"),), (
                src.Echo((src.Bin(".", src.String("Hi "), _var("name")),)),
            )),
            src.Foreach(_var("xs"), _var("k"), _var("v"), (src.Echo((_var("v"),)),)),
        ))
        first = transform(tree)
        second = transform(tree)
        assert first == second
        assert first is not second

    def test_input_is_not_mutated(self):
        tree = src.Program((src.Assign(_var("a"), src.Number(1)),))
        snapshot = repr(tree)
        transform(tree)
        assert repr(tree) == snapshot


# ---------------------------------------------------------------------------
# Individual kinds
# ---------------------------------------------------------------------------
class TestStatements:

    def test_program_preserves_order(self):
        result = transform(src.Program((
            src.Echo((src.String("a"),)),
            src.Echo((src.String("b"),)),
        )))
        assert isinstance(result, js.Program)
        assert [_log_argument(s)[0].value for s in result.body] == ["a", "b"]

    def test_echo_single_value(self):
        assert _log_argument(transform(_sample("echo"))) == (js.StringLiteral("x"),)

    def test_echo_several_values_joined_with_plus(self):
        result = transform(src.Echo((src.String("a"), _var("b"))))
        assert _log_argument(result) == (
            js.BinaryExpression("+", js.StringLiteral("a"), js.Identifier("b")),
        )

    def test_print_is_console_log(self):
        assert _log_argument(transform(_sample("print"))) == (js.StringLiteral("x"),)

    def test_function(self):
        result = transform(_sample("function"))
        assert result == js.FunctionDeclaration(
            js.Identifier("f"),
            (js.Identifier("x"),),
            js.BlockStatement((js.ReturnStatement(js.Identifier("x")),)),
        )

    def test_parameter_default_becomes_assignment_pattern(self):
        node = src.Function("f", (src.Parameter("$a"), src.Parameter("$b", src.Number(2))), ())
        result = transform(node)
        assert result.params == (
            js.Identifier("a"),
            js.AssignmentPattern(js.Identifier("b"), js.NumericLiteral(2)),
        )

    def test_if_without_alternate(self):
        result = transform(_sample("if"))
        assert isinstance(result, js.IfStatement)
        assert result.alternate is None

    def test_if_with_alternate(self):
        node = src.If(_var("a"), (), (src.Echo((src.String("no"),)),))
        result = transform(node)
        assert isinstance(result.alternate, js.BlockStatement)
        assert len(result.alternate.body) == 1

    def test_while(self):
        result = transform(src.While(_var("go"), (src.Post("+", _var("i")),)))
        assert result.test == js.Identifier("go")
        assert result.body.body == (
            js.ExpressionStatement(js.UpdateExpression("++", js.Identifier("i"), False)),
        )

    def test_for(self):
        node = src.For(
            (src.Assign(_var("i"), src.Number(0)),),
            (src.Bin("<", _var("i"), src.Number(3)),),
            (src.Post("+", _var("i")),),
            (),
        )
        result = transform(node)
        assert result.init == js.AssignmentExpression("=", js.Identifier("i"), js.NumericLiteral(0))
        assert result.test == js.BinaryExpression("<", js.Identifier("i"), js.NumericLiteral(3))
        assert result.update == js.UpdateExpression("++", js.Identifier("i"), False)

    def test_for_with_empty_clauses(self):
        result = transform(_sample("for"))
        assert result.init is None and result.test is None and result.update is None

    def test_expression_statement_unwraps(self):
        result = transform(_sample("expressionstatement"))
        assert result == js.ExpressionStatement(js.CallExpression(js.Identifier("f"), ()))


class TestForeach:

    def _binding(self, result):
        return result.left.declarations[0].id

    def test_value_only(self):
        result = transform(src.Foreach(_var("xs"), None, _var("x"), ()))
        assert self._binding(result) == js.Identifier("x")
        assert result.right == js.Identifier("xs")

    def test_key_and_value_use_object_entries(self):
        result = transform(src.Foreach(_var("xs"), _var("k"), _var("v"), ()))
        assert self._binding(result) == js.ArrayPattern((js.Identifier("k"), js.Identifier("v")))
        assert result.right == js.CallExpression(
            js.MemberExpression(js.Identifier("Object"), js.Identifier("entries"), False),
            (js.Identifier("xs"),),
        )

    def test_no_binding_uses_item(self):
        result = transform(src.Foreach(_var("xs"), None, None, ()))
        assert self._binding(result) == js.Identifier("item")

    def test_declared_const(self):
        result = transform(_sample("foreach"))
        assert result.left.kind == "const"

    def test_list_binding_degrades_to_placeholder(self):
        node = src.Foreach(_var("rows"), None, src.OpaqueNode("list"), (src.Echo((_var("a"),)),))
        result = transform(node)
        assert is_placeholder(result)
        assert result == placeholder("foreach list")


class TestExpressions:

    @pytest.mark.parametrize("node,expected", [
        (src.String("hi"), js.StringLiteral("hi")),
        (src.Number(4.5), js.NumericLiteral(4.5)),
        (src.Boolean(False), js.BooleanLiteral(False)),
        (src.Null(), js.NullLiteral()),
    ])
    def test_literals_copied_verbatim(self, node, expected):
        assert transform(node) == expected

    def test_variable_sigil_stripped(self):
        assert transform(_var("user")) == js.Identifier("user")

    def test_strip_sigil_only_first(self):
        assert strip_sigil("$a") == "a"
        assert strip_sigil("") == ""

    def test_assign(self):
        assert transform(_sample("assign")) == js.AssignmentExpression(
            "=", js.Identifier("a"), js.NumericLiteral(1),
        )

    def test_concat_assign_becomes_plus_assign(self):
        result = transform(src.Assign(_var("s"), src.String("x"), ".="))
        assert result.operator == "+="

    def test_concatenation_becomes_plus(self):
        result = transform(src.Bin(".", src.String("a"), src.String("b")))
        assert result == js.BinaryExpression("+", js.StringLiteral("a"), js.StringLiteral("b"))

    def test_logical_operator(self):
        result = transform(src.Bin("||", _var("a"), _var("b")))
        assert result == js.LogicalExpression("||", js.Identifier("a"), js.Identifier("b"))

    def test_unknown_operator_defaults_to_plus(self):
        result = transform(src.Bin("<=>", _var("a"), _var("b")))
        assert isinstance(result, js.BinaryExpression)
        assert result.operator == "+"

    def test_operand_order_preserved(self):
        result = transform(src.Bin("-", _var("a"), _var("b")))
        assert (result.left.name, result.right.name) == ("a", "b")

    def test_plain_array(self):
        result = transform(src.Array((src.Number(1), src.String("two"))))
        assert result == js.ArrayExpression((js.NumericLiteral(1), js.StringLiteral("two")))

    def test_keyed_array_becomes_object(self):
        result = transform(src.Array((
            src.Entry(src.String("name"), src.String("bob")),
            src.Number(7),
        )))
        assert result == js.ObjectExpression((
            js.ObjectProperty(js.StringLiteral("name"), js.StringLiteral("bob"), False),
            js.ObjectProperty(js.NumericLiteral(0), js.NumericLiteral(7), False),
        ))

    def test_entry_with_variable_key_is_computed(self):
        result = transform(src.Entry(_var("k"), src.Number(1)))
        assert result.computed is True

    def test_call_preserves_argument_order(self):
        result = transform(src.Call(src.Name("f"), (_var("a"), _var("b"), _var("c"))))
        assert [a.name for a in result.arguments] == ["a", "b", "c"]

    def test_methodcall_is_non_computed_member(self):
        assert transform(_sample("methodcall")) == js.MemberExpression(
            js.Identifier("o"), js.Identifier("m"), False,
        )

    def test_propertylookup_is_non_computed_member(self):
        assert transform(_sample("propertylookup")) == js.MemberExpression(
            js.Identifier("o"), js.Identifier("p"), False,
        )

    def test_offsetlookup_is_computed_member(self):
        assert transform(_sample("offsetlookup")) == js.MemberExpression(
            js.Identifier("a"), js.NumericLiteral(0), True,
        )

    def test_unary(self):
        assert transform(_sample("unary")) == js.UnaryExpression("!", js.Identifier("a"))

    def test_pre_and_post(self):
        assert transform(_sample("pre")) == js.UpdateExpression("++", js.Identifier("i"), True)
        assert transform(_sample("post")) == js.UpdateExpression("--", js.Identifier("i"), False)

    def test_retif(self):
        assert transform(_sample("retif")) == js.ConditionalExpression(
            js.Identifier("a"), js.NumericLiteral(1), js.NumericLiteral(2),
        )

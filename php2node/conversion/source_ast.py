# CUI // SP-CTI
"""Source (PHP) syntax tree.

A closed set of immutable node types, each tagged with the ``kind`` string
the transformer dispatches on. Nodes are produced by the parser adapter
(php_parser.py) and never mutated afterwards.

PHP constructs outside this set arrive as ``OpaqueNode`` carrying the
construct name as its kind, which the transformer turns into a visible
placeholder.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union


@dataclass(frozen=True)
class SourceNode:
    """Base class for every PHP syntax node."""
    kind: ClassVar[str] = ""


# ---------------------------------------------------------------------------
# Program / statements
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Program(SourceNode):
    kind: ClassVar[str] = "program"
    children: Tuple[SourceNode, ...] = ()


@dataclass(frozen=True)
class Echo(SourceNode):
    kind: ClassVar[str] = "echo"
    expressions: Tuple[SourceNode, ...] = ()


@dataclass(frozen=True)
class Print(SourceNode):
    kind: ClassVar[str] = "print"
    expression: Optional[SourceNode] = None


@dataclass(frozen=True)
class ExpressionStatement(SourceNode):
    kind: ClassVar[str] = "expressionstatement"
    expression: Optional[SourceNode] = None


@dataclass(frozen=True)
class Return(SourceNode):
    kind: ClassVar[str] = "return"
    expr: Optional[SourceNode] = None


@dataclass(frozen=True)
class Parameter(SourceNode):
    kind: ClassVar[str] = "parameter"
    name: str = ""
    default: Optional[SourceNode] = None


@dataclass(frozen=True)
class Function(SourceNode):
    kind: ClassVar[str] = "function"
    name: str = ""
    arguments: Tuple[Parameter, ...] = ()
    body: Tuple[SourceNode, ...] = ()


@dataclass(frozen=True)
class If(SourceNode):
    kind: ClassVar[str] = "if"
    test: Optional[SourceNode] = None
    body: Tuple[SourceNode, ...] = ()
    alternate: Optional[Tuple[SourceNode, ...]] = None


@dataclass(frozen=True)
class While(SourceNode):
    kind: ClassVar[str] = "while"
    test: Optional[SourceNode] = None
    body: Tuple[SourceNode, ...] = ()


@dataclass(frozen=True)
class For(SourceNode):
    kind: ClassVar[str] = "for"
    init: Tuple[SourceNode, ...] = ()
    test: Tuple[SourceNode, ...] = ()
    update: Tuple[SourceNode, ...] = ()
    body: Tuple[SourceNode, ...] = ()


@dataclass(frozen=True)
class Variable(SourceNode):
    kind: ClassVar[str] = "variable"
    name: str = ""


@dataclass(frozen=True)
class Foreach(SourceNode):
    kind: ClassVar[str] = "foreach"
    source: Optional[SourceNode] = None
    key: Optional[SourceNode] = None        # Variable, or an opaque destructuring
    value: Optional[SourceNode] = None
    body: Tuple[SourceNode, ...] = ()


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class String(SourceNode):
    kind: ClassVar[str] = "string"
    value: str = ""


@dataclass(frozen=True)
class Number(SourceNode):
    kind: ClassVar[str] = "number"
    value: Union[int, float] = 0


@dataclass(frozen=True)
class Boolean(SourceNode):
    kind: ClassVar[str] = "boolean"
    value: bool = False


@dataclass(frozen=True)
class Null(SourceNode):
    kind: ClassVar[str] = "null"


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Name(SourceNode):
    """Bare identifier: function names, constants."""
    kind: ClassVar[str] = "name"
    name: str = ""


@dataclass(frozen=True)
class Assign(SourceNode):
    kind: ClassVar[str] = "assign"
    left: Optional[SourceNode] = None
    right: Optional[SourceNode] = None
    operator: str = "="


@dataclass(frozen=True)
class Entry(SourceNode):
    """Keyed array element (``'a' => 1``)."""
    kind: ClassVar[str] = "entry"
    key: Optional[SourceNode] = None
    value: Optional[SourceNode] = None


@dataclass(frozen=True)
class Array(SourceNode):
    kind: ClassVar[str] = "array"
    items: Tuple[SourceNode, ...] = ()


@dataclass(frozen=True)
class Call(SourceNode):
    kind: ClassVar[str] = "call"
    what: Optional[SourceNode] = None
    arguments: Tuple[SourceNode, ...] = ()


@dataclass(frozen=True)
class MethodCall(SourceNode):
    kind: ClassVar[str] = "methodcall"
    what: Optional[SourceNode] = None
    name: str = ""
    arguments: Tuple[SourceNode, ...] = ()


@dataclass(frozen=True)
class PropertyLookup(SourceNode):
    kind: ClassVar[str] = "propertylookup"
    what: Optional[SourceNode] = None
    offset: str = ""


@dataclass(frozen=True)
class OffsetLookup(SourceNode):
    kind: ClassVar[str] = "offsetlookup"
    what: Optional[SourceNode] = None
    offset: Optional[SourceNode] = None


@dataclass(frozen=True)
class Bin(SourceNode):
    kind: ClassVar[str] = "bin"
    type: str = ""
    left: Optional[SourceNode] = None
    right: Optional[SourceNode] = None


@dataclass(frozen=True)
class Unary(SourceNode):
    kind: ClassVar[str] = "unary"
    type: str = ""
    what: Optional[SourceNode] = None


@dataclass(frozen=True)
class Pre(SourceNode):
    kind: ClassVar[str] = "pre"
    type: str = "+"
    what: Optional[SourceNode] = None


@dataclass(frozen=True)
class Post(SourceNode):
    kind: ClassVar[str] = "post"
    type: str = "+"
    what: Optional[SourceNode] = None


@dataclass(frozen=True)
class RetIf(SourceNode):
    """Ternary ``test ? trueExpr : falseExpr``."""
    kind: ClassVar[str] = "retif"
    test: Optional[SourceNode] = None
    true_expr: Optional[SourceNode] = None
    false_expr: Optional[SourceNode] = None


@dataclass(frozen=True)
class OpaqueNode(SourceNode):
    """Any PHP construct without a dedicated node type.

    Unlike the other nodes, ``kind`` is an instance field: it carries the
    construct name (``class``, ``switch``, ...).
    """
    kind: str = "unknown"
    detail: str = ""


# Node kinds explicitly supported by the transformer, in declaration order.
CORE_KINDS = (
    "program", "echo", "string", "number", "boolean", "null", "variable",
    "assign", "function", "if", "while", "for", "foreach", "array", "call",
    "methodcall", "propertylookup", "bin",
)
EXTENDED_KINDS = (
    "print", "expressionstatement", "return", "parameter", "name", "entry",
    "offsetlookup", "unary", "pre", "post", "retif",
)
KNOWN_KINDS = CORE_KINDS + EXTENDED_KINDS

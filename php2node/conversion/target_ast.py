# CUI // SP-CTI
"""Target (JavaScript/TypeScript) syntax tree.

ESTree-shaped immutable nodes built only by the AST transformer and
consumed only by the code printer. Field names follow the Babel/ESTree
conventions so the printer reads like any other JS code generator.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union


@dataclass(frozen=True)
class TargetNode:
    """Base class for every JavaScript syntax node."""
    type: ClassVar[str] = ""


# ---------------------------------------------------------------------------
# Literals / identifiers
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Identifier(TargetNode):
    type: ClassVar[str] = "Identifier"
    name: str = ""


@dataclass(frozen=True)
class StringLiteral(TargetNode):
    type: ClassVar[str] = "StringLiteral"
    value: str = ""


@dataclass(frozen=True)
class NumericLiteral(TargetNode):
    type: ClassVar[str] = "NumericLiteral"
    value: Union[int, float] = 0


@dataclass(frozen=True)
class BooleanLiteral(TargetNode):
    type: ClassVar[str] = "BooleanLiteral"
    value: bool = False


@dataclass(frozen=True)
class NullLiteral(TargetNode):
    type: ClassVar[str] = "NullLiteral"


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ArrayExpression(TargetNode):
    type: ClassVar[str] = "ArrayExpression"
    elements: Tuple[TargetNode, ...] = ()


@dataclass(frozen=True)
class ObjectProperty(TargetNode):
    type: ClassVar[str] = "ObjectProperty"
    key: Optional[TargetNode] = None
    value: Optional[TargetNode] = None
    computed: bool = False


@dataclass(frozen=True)
class ObjectExpression(TargetNode):
    type: ClassVar[str] = "ObjectExpression"
    properties: Tuple[ObjectProperty, ...] = ()


@dataclass(frozen=True)
class AssignmentExpression(TargetNode):
    type: ClassVar[str] = "AssignmentExpression"
    operator: str = "="
    left: Optional[TargetNode] = None
    right: Optional[TargetNode] = None


@dataclass(frozen=True)
class BinaryExpression(TargetNode):
    type: ClassVar[str] = "BinaryExpression"
    operator: str = "+"
    left: Optional[TargetNode] = None
    right: Optional[TargetNode] = None


@dataclass(frozen=True)
class LogicalExpression(TargetNode):
    type: ClassVar[str] = "LogicalExpression"
    operator: str = "&&"
    left: Optional[TargetNode] = None
    right: Optional[TargetNode] = None


@dataclass(frozen=True)
class UnaryExpression(TargetNode):
    type: ClassVar[str] = "UnaryExpression"
    operator: str = "!"
    argument: Optional[TargetNode] = None


@dataclass(frozen=True)
class UpdateExpression(TargetNode):
    type: ClassVar[str] = "UpdateExpression"
    operator: str = "++"
    argument: Optional[TargetNode] = None
    prefix: bool = False


@dataclass(frozen=True)
class ConditionalExpression(TargetNode):
    type: ClassVar[str] = "ConditionalExpression"
    test: Optional[TargetNode] = None
    consequent: Optional[TargetNode] = None
    alternate: Optional[TargetNode] = None


@dataclass(frozen=True)
class SequenceExpression(TargetNode):
    type: ClassVar[str] = "SequenceExpression"
    expressions: Tuple[TargetNode, ...] = ()


@dataclass(frozen=True)
class CallExpression(TargetNode):
    type: ClassVar[str] = "CallExpression"
    callee: Optional[TargetNode] = None
    arguments: Tuple[TargetNode, ...] = ()


@dataclass(frozen=True)
class MemberExpression(TargetNode):
    type: ClassVar[str] = "MemberExpression"
    object: Optional[TargetNode] = None
    property: Optional[TargetNode] = None
    computed: bool = False


# ---------------------------------------------------------------------------
# Statements / declarations
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ExpressionStatement(TargetNode):
    type: ClassVar[str] = "ExpressionStatement"
    expression: Optional[TargetNode] = None


@dataclass(frozen=True)
class BlockStatement(TargetNode):
    type: ClassVar[str] = "BlockStatement"
    body: Tuple[TargetNode, ...] = ()


@dataclass(frozen=True)
class ReturnStatement(TargetNode):
    type: ClassVar[str] = "ReturnStatement"
    argument: Optional[TargetNode] = None


@dataclass(frozen=True)
class FunctionDeclaration(TargetNode):
    type: ClassVar[str] = "FunctionDeclaration"
    id: Optional[Identifier] = None
    params: Tuple[Union[Identifier, "AssignmentPattern"], ...] = ()
    body: BlockStatement = BlockStatement()


@dataclass(frozen=True)
class IfStatement(TargetNode):
    type: ClassVar[str] = "IfStatement"
    test: Optional[TargetNode] = None
    consequent: BlockStatement = BlockStatement()
    alternate: Optional[BlockStatement] = None


@dataclass(frozen=True)
class WhileStatement(TargetNode):
    type: ClassVar[str] = "WhileStatement"
    test: Optional[TargetNode] = None
    body: BlockStatement = BlockStatement()


@dataclass(frozen=True)
class ForStatement(TargetNode):
    type: ClassVar[str] = "ForStatement"
    init: Optional[TargetNode] = None
    test: Optional[TargetNode] = None
    update: Optional[TargetNode] = None
    body: BlockStatement = BlockStatement()


@dataclass(frozen=True)
class ArrayPattern(TargetNode):
    type: ClassVar[str] = "ArrayPattern"
    elements: Tuple[Identifier, ...] = ()


@dataclass(frozen=True)
class AssignmentPattern(TargetNode):
    """Parameter with a default value: ``left = right``."""
    type: ClassVar[str] = "AssignmentPattern"
    left: Optional[Identifier] = None
    right: Optional[TargetNode] = None


@dataclass(frozen=True)
class VariableDeclarator(TargetNode):
    type: ClassVar[str] = "VariableDeclarator"
    id: Optional[TargetNode] = None
    init: Optional[TargetNode] = None


@dataclass(frozen=True)
class VariableDeclaration(TargetNode):
    type: ClassVar[str] = "VariableDeclaration"
    kind: str = "const"
    declarations: Tuple[VariableDeclarator, ...] = ()


@dataclass(frozen=True)
class ForOfStatement(TargetNode):
    type: ClassVar[str] = "ForOfStatement"
    left: Optional[VariableDeclaration] = None
    right: Optional[TargetNode] = None
    body: BlockStatement = BlockStatement()


@dataclass(frozen=True)
class Program(TargetNode):
    type: ClassVar[str] = "Program"
    body: Tuple[TargetNode, ...] = ()


STATEMENT_TYPES = frozenset({
    "ExpressionStatement", "BlockStatement", "ReturnStatement",
    "FunctionDeclaration", "IfStatement", "WhileStatement", "ForStatement",
    "ForOfStatement", "VariableDeclaration",
})


def is_statement(node):
    """True for nodes that may stand alone in a statement list."""
    return node is not None and node.type in STATEMENT_TYPES

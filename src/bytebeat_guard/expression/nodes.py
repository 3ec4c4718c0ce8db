"""Closed node representation for parsed bytebeat expressions.

The parser hands back ESTree dictionaries. ``from_estree`` converts them into
``Node`` values whose ``kind`` is a member of ``NodeKind``; any node type not
listed here is rejected with ``UnsupportedSyntaxError`` rather than walked
blindly. ``CHILD_SLOTS`` lists each kind's child fields in source order, so
a pre-order walk over the slots visits siblings left to right.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias


class NodeKind(str, Enum):
    PROGRAM = "Program"
    # Statements
    EXPRESSION_STATEMENT = "ExpressionStatement"
    BLOCK_STATEMENT = "BlockStatement"
    EMPTY_STATEMENT = "EmptyStatement"
    RETURN_STATEMENT = "ReturnStatement"
    IF_STATEMENT = "IfStatement"
    SWITCH_STATEMENT = "SwitchStatement"
    SWITCH_CASE = "SwitchCase"
    FOR_STATEMENT = "ForStatement"
    FOR_IN_STATEMENT = "ForInStatement"
    FOR_OF_STATEMENT = "ForOfStatement"
    WHILE_STATEMENT = "WhileStatement"
    DO_WHILE_STATEMENT = "DoWhileStatement"
    BREAK_STATEMENT = "BreakStatement"
    CONTINUE_STATEMENT = "ContinueStatement"
    LABELED_STATEMENT = "LabeledStatement"
    THROW_STATEMENT = "ThrowStatement"
    TRY_STATEMENT = "TryStatement"
    CATCH_CLAUSE = "CatchClause"
    DEBUGGER_STATEMENT = "DebuggerStatement"
    WITH_STATEMENT = "WithStatement"
    # Declarations
    VARIABLE_DECLARATION = "VariableDeclaration"
    VARIABLE_DECLARATOR = "VariableDeclarator"
    FUNCTION_DECLARATION = "FunctionDeclaration"
    CLASS_DECLARATION = "ClassDeclaration"
    # Expressions
    IDENTIFIER = "Identifier"
    LITERAL = "Literal"
    TEMPLATE_LITERAL = "TemplateLiteral"
    TEMPLATE_ELEMENT = "TemplateElement"
    TAGGED_TEMPLATE_EXPRESSION = "TaggedTemplateExpression"
    THIS_EXPRESSION = "ThisExpression"
    SUPER = "Super"
    ARRAY_EXPRESSION = "ArrayExpression"
    OBJECT_EXPRESSION = "ObjectExpression"
    PROPERTY = "Property"
    SPREAD_ELEMENT = "SpreadElement"
    FUNCTION_EXPRESSION = "FunctionExpression"
    ARROW_FUNCTION_EXPRESSION = "ArrowFunctionExpression"
    CLASS_EXPRESSION = "ClassExpression"
    CLASS_BODY = "ClassBody"
    METHOD_DEFINITION = "MethodDefinition"
    UNARY_EXPRESSION = "UnaryExpression"
    UPDATE_EXPRESSION = "UpdateExpression"
    BINARY_EXPRESSION = "BinaryExpression"
    LOGICAL_EXPRESSION = "LogicalExpression"
    ASSIGNMENT_EXPRESSION = "AssignmentExpression"
    CONDITIONAL_EXPRESSION = "ConditionalExpression"
    CALL_EXPRESSION = "CallExpression"
    NEW_EXPRESSION = "NewExpression"
    MEMBER_EXPRESSION = "MemberExpression"
    SEQUENCE_EXPRESSION = "SequenceExpression"
    YIELD_EXPRESSION = "YieldExpression"
    AWAIT_EXPRESSION = "AwaitExpression"
    META_PROPERTY = "MetaProperty"
    # Patterns
    ARRAY_PATTERN = "ArrayPattern"
    OBJECT_PATTERN = "ObjectPattern"
    ASSIGNMENT_PATTERN = "AssignmentPattern"
    REST_ELEMENT = "RestElement"


CHILD_SLOTS: dict[NodeKind, tuple[str, ...]] = {
    NodeKind.PROGRAM: ("body",),
    NodeKind.EXPRESSION_STATEMENT: ("expression",),
    NodeKind.BLOCK_STATEMENT: ("body",),
    NodeKind.EMPTY_STATEMENT: (),
    NodeKind.RETURN_STATEMENT: ("argument",),
    NodeKind.IF_STATEMENT: ("test", "consequent", "alternate"),
    NodeKind.SWITCH_STATEMENT: ("discriminant", "cases"),
    NodeKind.SWITCH_CASE: ("test", "consequent"),
    NodeKind.FOR_STATEMENT: ("init", "test", "update", "body"),
    NodeKind.FOR_IN_STATEMENT: ("left", "right", "body"),
    NodeKind.FOR_OF_STATEMENT: ("left", "right", "body"),
    NodeKind.WHILE_STATEMENT: ("test", "body"),
    NodeKind.DO_WHILE_STATEMENT: ("body", "test"),
    NodeKind.BREAK_STATEMENT: ("label",),
    NodeKind.CONTINUE_STATEMENT: ("label",),
    NodeKind.LABELED_STATEMENT: ("label", "body"),
    NodeKind.THROW_STATEMENT: ("argument",),
    NodeKind.TRY_STATEMENT: ("block", "handler", "finalizer"),
    NodeKind.CATCH_CLAUSE: ("param", "body"),
    NodeKind.DEBUGGER_STATEMENT: (),
    NodeKind.WITH_STATEMENT: ("object", "body"),
    NodeKind.VARIABLE_DECLARATION: ("declarations",),
    NodeKind.VARIABLE_DECLARATOR: ("id", "init"),
    NodeKind.FUNCTION_DECLARATION: ("id", "params", "body"),
    NodeKind.CLASS_DECLARATION: ("id", "superClass", "body"),
    NodeKind.IDENTIFIER: (),
    NodeKind.LITERAL: (),
    NodeKind.TEMPLATE_LITERAL: ("quasis", "expressions"),
    NodeKind.TEMPLATE_ELEMENT: (),
    NodeKind.TAGGED_TEMPLATE_EXPRESSION: ("tag", "quasi"),
    NodeKind.THIS_EXPRESSION: (),
    NodeKind.SUPER: (),
    NodeKind.ARRAY_EXPRESSION: ("elements",),
    NodeKind.OBJECT_EXPRESSION: ("properties",),
    NodeKind.PROPERTY: ("key", "value"),
    NodeKind.SPREAD_ELEMENT: ("argument",),
    NodeKind.FUNCTION_EXPRESSION: ("id", "params", "body"),
    NodeKind.ARROW_FUNCTION_EXPRESSION: ("id", "params", "body"),
    NodeKind.CLASS_EXPRESSION: ("id", "superClass", "body"),
    NodeKind.CLASS_BODY: ("body",),
    NodeKind.METHOD_DEFINITION: ("key", "value"),
    NodeKind.UNARY_EXPRESSION: ("argument",),
    NodeKind.UPDATE_EXPRESSION: ("argument",),
    NodeKind.BINARY_EXPRESSION: ("left", "right"),
    NodeKind.LOGICAL_EXPRESSION: ("left", "right"),
    NodeKind.ASSIGNMENT_EXPRESSION: ("left", "right"),
    NodeKind.CONDITIONAL_EXPRESSION: ("test", "consequent", "alternate"),
    NodeKind.CALL_EXPRESSION: ("callee", "arguments"),
    NodeKind.NEW_EXPRESSION: ("callee", "arguments"),
    NodeKind.MEMBER_EXPRESSION: ("object", "property"),
    NodeKind.SEQUENCE_EXPRESSION: ("expressions",),
    NodeKind.YIELD_EXPRESSION: ("argument",),
    NodeKind.AWAIT_EXPRESSION: ("argument",),
    NodeKind.META_PROPERTY: ("meta", "property"),
    NodeKind.ARRAY_PATTERN: ("elements",),
    NodeKind.OBJECT_PATTERN: ("properties",),
    NodeKind.ASSIGNMENT_PATTERN: ("left", "right"),
    NodeKind.REST_ELEMENT: ("argument",),
}

FUNCTION_KINDS: frozenset[NodeKind] = frozenset(
    {
        NodeKind.FUNCTION_DECLARATION,
        NodeKind.FUNCTION_EXPRESSION,
        NodeKind.ARROW_FUNCTION_EXPRESSION,
    }
)

# Source-position metadata is never a child
_METADATA_KEYS = frozenset({"type", "range", "loc"})
_SCALAR_TYPES = (str, int, float, bool)


class UnsupportedSyntaxError(ValueError):
    """Raised when the parser emits a node kind outside ``NodeKind``."""

    def __init__(self, node_type: str, start: int | None = None) -> None:
        super().__init__(f"Unsupported syntax: {node_type}")
        self.node_type = node_type
        self.start = start


@dataclass(frozen=True, eq=False)
class Node:
    kind: NodeKind
    slots: tuple[tuple[str, "Slot"], ...] = ()
    attrs: Mapping[str, Any] = field(default_factory=dict)
    start: int = 0
    end: int = 0

    def child(self, slot: str) -> "Node | None":
        for name, value in self.slots:
            if name == slot:
                return value if isinstance(value, Node) else None
        return None

    def children(self, slot: str) -> tuple["Node | None", ...]:
        for name, value in self.slots:
            if name == slot:
                if isinstance(value, tuple):
                    return value
                return () if value is None else (value,)
        return ()

    @property
    def name(self) -> str | None:
        name = self.attrs.get("name")
        return name if isinstance(name, str) else None

    @property
    def computed(self) -> bool:
        return bool(self.attrs.get("computed", False))


Slot: TypeAlias = Node | tuple[Node | None, ...] | None


def _range_of(raw: Mapping[str, Any]) -> tuple[int, int]:
    span = raw.get("range")
    if isinstance(span, (list, tuple)) and len(span) == 2:
        return int(span[0]), int(span[1])
    return 0, 0


def from_estree(raw: Mapping[str, Any]) -> Node:
    """Convert an ESTree dictionary (with ``range`` offsets) into a ``Node``."""
    node_type = raw.get("type")
    start, end = _range_of(raw)
    try:
        kind = NodeKind(node_type)
    except ValueError as err:
        raise UnsupportedSyntaxError(str(node_type), start) from err

    slot_names = CHILD_SLOTS[kind]
    slots: list[tuple[str, Slot]] = []
    for slot in slot_names:
        value = raw.get(slot)
        if isinstance(value, list):
            slots.append(
                (
                    slot,
                    tuple(
                        from_estree(item) if isinstance(item, Mapping) else None
                        for item in value
                    ),
                )
            )
        elif isinstance(value, Mapping):
            slots.append((slot, from_estree(value)))
        else:
            slots.append((slot, None))

    attrs = {
        key: value
        for key, value in raw.items()
        if key not in _METADATA_KEYS
        and key not in slot_names
        and (value is None or isinstance(value, _SCALAR_TYPES))
    }
    return Node(kind=kind, slots=tuple(slots), attrs=attrs, start=start, end=end)

"""Static validation of bytebeat expressions.

``validate`` wraps the expression in its function envelope, parses it with
esprima and walks the tree once, collecting every problem instead of
stopping at the first. A parse failure is the only fatal outcome.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import esprima
from esprima.error_handler import Error as EsprimaError

from bytebeat_guard.core.validate import Issue, Severity, ValidationResult
from bytebeat_guard.expression.envelope import (
    Envelope,
    EnvelopeMode,
    wrap_expression,
    wrap_statements,
)
from bytebeat_guard.expression.models import DEFAULT_POLICY, ValidationPolicy
from bytebeat_guard.expression.nodes import (
    FUNCTION_KINDS,
    Node,
    NodeKind,
    UnsupportedSyntaxError,
    from_estree,
)
from bytebeat_guard.expression.scope import ScopeStack

_LOGGER = logging.getLogger(__name__)

CODE_SYNTAX_ERROR = "SYNTAX_ERROR"
CODE_DISALLOWED_CONSTRUCT = "DISALLOWED_CONSTRUCT"
CODE_UNDEFINED_VARIABLE = "UNDEFINED_VARIABLE"
CODE_DANGEROUS_CALL = "DANGEROUS_CALL"
CODE_DANGEROUS_PROPERTY = "DANGEROUS_PROPERTY"
CODE_UNSUPPORTED_SYNTAX = "UNSUPPORTED_SYNTAX"
CODE_EXPRESSION_TOO_LONG = "EXPRESSION_TOO_LONG"
CODE_EMPTY_EXPRESSION = "EMPTY_EXPRESSION"

_ENVELOPE_PATH = "<envelope>"
_ROOT_PATHS = {
    EnvelopeMode.EXPRESSION: "expression",
    EnvelopeMode.STATEMENTS: "body",
}


class Position(str, Enum):
    """How an identifier in a given slot is read."""

    REFERENCE = "reference"
    BINDING = "binding"
    NAME = "name"


# Slots whose identifier is a property or label name when not computed
_NAME_SLOTS: frozenset[tuple[NodeKind, str]] = frozenset(
    {
        (NodeKind.MEMBER_EXPRESSION, "property"),
        (NodeKind.PROPERTY, "key"),
        (NodeKind.METHOD_DEFINITION, "key"),
        (NodeKind.LABELED_STATEMENT, "label"),
        (NodeKind.BREAK_STATEMENT, "label"),
        (NodeKind.CONTINUE_STATEMENT, "label"),
        (NodeKind.META_PROPERTY, "meta"),
        (NodeKind.META_PROPERTY, "property"),
    }
)

_NAMED_DECLARATION_KINDS = frozenset(
    {NodeKind.FUNCTION_DECLARATION, NodeKind.CLASS_DECLARATION}
)

# Slots that introduce new names
_BINDING_SLOTS: frozenset[tuple[NodeKind, str]] = frozenset(
    {
        (NodeKind.VARIABLE_DECLARATOR, "id"),
        (NodeKind.CATCH_CLAUSE, "param"),
        (NodeKind.CLASS_DECLARATION, "id"),
        (NodeKind.CLASS_EXPRESSION, "id"),
    }
)

# Pattern slots that keep binding their identifiers
_PATTERN_BINDING_SLOTS: frozenset[tuple[NodeKind, str]] = frozenset(
    {
        (NodeKind.ARRAY_PATTERN, "elements"),
        (NodeKind.OBJECT_PATTERN, "properties"),
        (NodeKind.PROPERTY, "value"),
        (NodeKind.ASSIGNMENT_PATTERN, "left"),
        (NodeKind.REST_ELEMENT, "argument"),
    }
)


def binding_names(pattern: Node | None) -> list[str]:
    """Names bound by a declaration target or parameter, in source order."""
    if pattern is None:
        return []
    match pattern.kind:
        case NodeKind.IDENTIFIER:
            return [pattern.name] if pattern.name else []
        case NodeKind.ARRAY_PATTERN:
            names: list[str] = []
            for element in pattern.children("elements"):
                names.extend(binding_names(element))
            return names
        case NodeKind.OBJECT_PATTERN:
            names = []
            for prop in pattern.children("properties"):
                if prop is None:
                    continue
                if prop.kind is NodeKind.REST_ELEMENT:
                    names.extend(binding_names(prop.child("argument")))
                else:
                    names.extend(binding_names(prop.child("value")))
            return names
        case NodeKind.ASSIGNMENT_PATTERN:
            return binding_names(pattern.child("left"))
        case NodeKind.REST_ELEMENT:
            return binding_names(pattern.child("argument"))
        case _:
            return []


def fold_string_key(node: Node | None) -> str | None:
    """Constant-fold a computed member key built from string literals."""
    if node is None:
        return None
    if node.kind is NodeKind.LITERAL:
        value = node.attrs.get("value")
        return value if isinstance(value, str) else None
    if (
        node.kind is NodeKind.BINARY_EXPRESSION
        and node.attrs.get("operator") == "+"
    ):
        left = fold_string_key(node.child("left"))
        right = fold_string_key(node.child("right"))
        if left is not None and right is not None:
            return left + right
    return None


@dataclass
class ValidationContext:
    policy: ValidationPolicy
    envelope: Envelope
    scope: ScopeStack
    issues: list[Issue] = field(default_factory=list)
    declared_vars: set[str] = field(default_factory=set)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    def declare(self, name: str) -> None:
        self.scope.declare(name)
        self.declared_vars.add(name)

    def report(
        self,
        code: str,
        severity: Severity,
        message: str,
        node: Node,
        path: str,
    ) -> None:
        self.issues.append(
            Issue(
                code=code,
                severity=severity,
                message=message,
                location=path,
                start=self.envelope.to_expression_offset(node.start),
                end=self.envelope.to_expression_offset(node.end),
            )
        )


# A pending visit, or None to leave the function frame entered below it
_Task = tuple[Node, str, Position] | None


class _Walker:
    """Pre-order walk over an explicit stack.

    Children are pushed in reverse so they pop in source order. Entering a
    function pushes a None marker beneath its parameters and body; popping
    the marker leaves the function's frame.
    """

    def __init__(self, context: ValidationContext, root: Node) -> None:
        self.context = context
        self.root = root

    def run(self, tree: Node) -> None:
        stack: list[_Task] = [(tree, _ENVELOPE_PATH, Position.REFERENCE)]
        while stack:
            task = stack.pop()
            if task is None:
                self.context.scope.leave_function()
                continue
            node, path, position = task
            stack.extend(reversed(self.visit(node, path, position)))

    def visit(self, node: Node, path: str, position: Position) -> list[_Task]:
        """Check one node and return the visits it schedules, in order."""
        ctx = self.context
        policy = ctx.policy
        if node is self.root:
            path = _ROOT_PATHS[ctx.envelope.mode]
        kind = node.kind

        if (
            path != _ENVELOPE_PATH
            and kind.value in policy.disallowed_statement_kinds
        ):
            ctx.report(
                CODE_DISALLOWED_CONSTRUCT,
                Severity.ERROR,
                f"{kind.value} is not allowed in bytebeat expressions",
                node,
                path,
            )

        if kind is NodeKind.VARIABLE_DECLARATION:
            for declarator in node.children("declarations"):
                if declarator is not None:
                    for name in binding_names(declarator.child("id")):
                        ctx.declare(name)
        elif kind in _NAMED_DECLARATION_KINDS:
            func_id = node.child("id")
            if func_id is not None and func_id.name:
                ctx.declare(func_id.name)
        elif kind is NodeKind.CATCH_CLAUSE:
            for name in binding_names(node.child("param")):
                ctx.declare(name)

        if kind in FUNCTION_KINDS:
            return self._enter_function(node, path)

        if kind is NodeKind.IDENTIFIER:
            name = node.name or ""
            if position is Position.REFERENCE and not ctx.scope.resolves(name):
                ctx.report(
                    CODE_UNDEFINED_VARIABLE,
                    Severity.ERROR,
                    f"Undefined variable: '{name}'",
                    node,
                    path,
                )
            return []

        if kind in (NodeKind.CALL_EXPRESSION, NodeKind.NEW_EXPRESSION):
            callee = node.child("callee")
            if (
                callee is not None
                and callee.kind is NodeKind.IDENTIFIER
                and callee.name in policy.dangerous_call_names
            ):
                ctx.report(
                    CODE_DANGEROUS_CALL,
                    Severity.ERROR,
                    f"Dangerous function call: {callee.name}",
                    node,
                    path,
                )

        if kind is NodeKind.MEMBER_EXPRESSION:
            self._check_member(node, path)

        return self._children(node, path, position)

    def _check_member(self, node: Node, path: str) -> None:
        policy = self.context.policy
        prop = node.child("property")
        prop_name: str | None = None
        if not node.computed:
            if prop is not None and prop.kind is NodeKind.IDENTIFIER:
                prop_name = prop.name
        elif policy.inspect_computed_members:
            prop_name = fold_string_key(prop)
        if prop_name in policy.dangerous_property_names:
            self.context.report(
                CODE_DANGEROUS_PROPERTY,
                Severity.WARNING,
                f"Potentially dangerous property access: {prop_name}",
                node,
                path,
            )

    def _enter_function(self, node: Node, path: str) -> list[_Task]:
        bindings: list[str] = []
        func_id = node.child("id")
        # A named function expression sees its own name
        if (
            node.kind is NodeKind.FUNCTION_EXPRESSION
            and func_id is not None
            and func_id.name
        ):
            bindings.append(func_id.name)
        params = node.children("params")
        for param in params:
            bindings.extend(binding_names(param))
        self.context.scope.enter_function(bindings)

        tasks: list[_Task] = [
            (param, self._child_path(path, "params", i), Position.BINDING)
            for i, param in enumerate(params)
            if param is not None
        ]
        body = node.child("body")
        if body is not None:
            tasks.append(
                (body, self._child_path(path, "body"), Position.REFERENCE)
            )
        tasks.append(None)
        return tasks

    def _children(
        self, node: Node, path: str, position: Position
    ) -> list[_Task]:
        tasks: list[_Task] = []
        for slot, value in node.slots:
            slot_position = self._slot_position(node, slot, position)
            if isinstance(value, Node):
                tasks.append(
                    (value, self._child_path(path, slot), slot_position)
                )
            elif isinstance(value, tuple):
                tasks.extend(
                    (item, self._child_path(path, slot, i), slot_position)
                    for i, item in enumerate(value)
                    if item is not None
                )
        return tasks

    @staticmethod
    def _slot_position(node: Node, slot: str, inherited: Position) -> Position:
        key = (node.kind, slot)
        if key in _NAME_SLOTS and not node.computed:
            return Position.NAME
        if key in _BINDING_SLOTS:
            return Position.BINDING
        if inherited is Position.BINDING and key in _PATTERN_BINDING_SLOTS:
            return Position.BINDING
        return Position.REFERENCE

    @staticmethod
    def _child_path(path: str, slot: str, index: int | None = None) -> str:
        if path == _ENVELOPE_PATH:
            return path
        if index is None:
            return f"{path}.{slot}"
        return f"{path}.{slot}[{index}]"


def _single_issue(code: str, message: str) -> ValidationResult:
    return ValidationResult(
        issues=[
            Issue(
                code=code,
                severity=Severity.ERROR,
                message=message,
                location="expression",
            )
        ]
    )


def _parse(envelope: Envelope) -> tuple[Node | None, Issue | None]:
    """Parse the envelope source; return (tree, None) or (None, issue)."""
    try:
        program = esprima.parseScript(envelope.source, {"range": True})
        tree = from_estree(program.toDict())
    except EsprimaError as e:
        description = getattr(e, "description", None) or str(e)
        index = getattr(e, "index", None)
        start = (
            envelope.to_expression_offset(index)
            if isinstance(index, int)
            else None
        )
        return None, Issue(
            code=CODE_SYNTAX_ERROR,
            severity=Severity.ERROR,
            message=f"SyntaxError: {description}",
            location="expression",
            start=start,
            end=start,
        )
    except UnsupportedSyntaxError as e:
        start = (
            envelope.to_expression_offset(e.start)
            if e.start is not None
            else None
        )
        return None, Issue(
            code=CODE_UNSUPPORTED_SYNTAX,
            severity=Severity.ERROR,
            message=str(e),
            location="expression",
            start=start,
            end=start,
        )
    except RecursionError:
        return None, Issue(
            code=CODE_SYNTAX_ERROR,
            severity=Severity.ERROR,
            message="SyntaxError: Expression is nested too deeply",
            location="expression",
        )

    if envelope.locate_root(tree) is None:
        return None, Issue(
            code=CODE_SYNTAX_ERROR,
            severity=Severity.ERROR,
            message="SyntaxError: Expression must be a single expression",
            location="expression",
        )
    return tree, None


def _walk(
    tree: Node, envelope: Envelope, policy: ValidationPolicy
) -> ValidationContext:
    root = envelope.locate_root(tree)
    context = ValidationContext(
        policy=policy,
        envelope=envelope,
        scope=ScopeStack(policy.allowed_globals),
    )
    _Walker(context, root if root is not None else tree).run(tree)
    return context


def _recover_statements(
    expression: str, policy: ValidationPolicy
) -> list[Issue]:
    """Name the banned statements in text that is not an expression.

    The text is walked as a function body and only the disallowed-construct
    issues are kept; an empty list means the syntax error stands.
    """
    envelope = wrap_statements(expression)
    tree, issue = _parse(envelope)
    if tree is None or issue is not None:
        return []
    context = _walk(tree, envelope, policy)
    return [i for i in context.issues if i.code == CODE_DISALLOWED_CONSTRUCT]


def validate(
    expression: str, policy: ValidationPolicy = DEFAULT_POLICY
) -> ValidationResult:
    """Check an untrusted bytebeat expression before it is compiled.

    Never raises for bad expression text: every failure is an issue in the
    returned result. Parse failures produce exactly one error and no
    warnings; all other checks run to completion.
    """
    if not isinstance(expression, str):
        raise TypeError(
            f"expression must be a str, got {type(expression).__name__}"
        )

    if not expression.strip():
        return _single_issue(CODE_EMPTY_EXPRESSION, "Expression is empty")

    if policy.max_length is not None and len(expression) > policy.max_length:
        return _single_issue(
            CODE_EXPRESSION_TOO_LONG,
            (
                f"Expression is {len(expression)} characters long; "
                f"the limit is {policy.max_length}"
            ),
        )

    envelope = wrap_expression(expression)
    tree, parse_issue = _parse(envelope)
    if tree is None:
        banned = _recover_statements(expression, policy)
        if banned:
            _LOGGER.debug(
                "expression failed to parse; statement form has %d banned "
                "constructs",
                len(banned),
            )
            return ValidationResult(issues=banned)
        _LOGGER.debug("expression failed to parse: %s", parse_issue)
        return ValidationResult(issues=[parse_issue] if parse_issue else [])

    try:
        context = _walk(tree, envelope, policy)
    except RecursionError:
        # binding_names and fold_string_key still recurse on nested patterns
        return _single_issue(
            CODE_SYNTAX_ERROR, "SyntaxError: Expression is nested too deeply"
        )

    _LOGGER.debug(
        "validated expression (%d chars): %d errors, %d warnings, "
        "declared %s",
        len(expression),
        len(context.errors),
        len(context.warnings),
        context.declared_vars,
    )
    return ValidationResult(issues=context.issues)


validate_expression = validate

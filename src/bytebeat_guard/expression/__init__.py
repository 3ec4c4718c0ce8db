"""expression: static safety checks for bytebeat expressions."""

from bytebeat_guard.expression.envelope import (
    Envelope,
    EnvelopeMode,
    wrap_expression,
    wrap_statements,
)
from bytebeat_guard.expression.minimize import minimize_expression
from bytebeat_guard.expression.models import DEFAULT_POLICY, ValidationPolicy
from bytebeat_guard.expression.nodes import Node, NodeKind, from_estree
from bytebeat_guard.expression.scope import ScopeStack
from bytebeat_guard.expression.validate import validate_expression

__all__ = [
    "DEFAULT_POLICY",
    "Envelope",
    "EnvelopeMode",
    "Node",
    "NodeKind",
    "ScopeStack",
    "ValidationPolicy",
    "from_estree",
    "minimize_expression",
    "validate_expression",
    "wrap_expression",
    "wrap_statements",
]

"""Static safety validator for user-authored bytebeat expressions."""

from bytebeat_guard.core.validate import Issue, Severity, ValidationResult
from bytebeat_guard.expression import (
    DEFAULT_POLICY,
    ValidationPolicy,
    minimize_expression,
    validate_expression,
)
from bytebeat_guard.expression.validate import validate

__all__ = [
    "DEFAULT_POLICY",
    "Issue",
    "Severity",
    "ValidationPolicy",
    "ValidationResult",
    "minimize_expression",
    "validate",
    "validate_expression",
]

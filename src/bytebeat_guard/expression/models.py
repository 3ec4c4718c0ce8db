from pydantic import BaseModel, ConfigDict, Field, field_validator

from bytebeat_guard.expression.ast_safety import (
    ALLOWED_GLOBALS,
    DANGEROUS_CALL_NAMES,
    DANGEROUS_PROPERTY_NAMES,
    DISALLOWED_STATEMENT_KINDS,
    EXPRESSION_MAX_LENGTH,
)
from bytebeat_guard.expression.nodes import NodeKind


class ValidationPolicy(BaseModel):
    """Tables and limits applied by ``validate``.

    Instances are immutable and safe to share between concurrent calls.
    """

    model_config = ConfigDict(frozen=True)

    allowed_globals: frozenset[str] = Field(
        default=ALLOWED_GLOBALS,
        description="Identifiers usable without a local declaration",
    )
    disallowed_statement_kinds: frozenset[str] = Field(
        default=DISALLOWED_STATEMENT_KINDS,
        description="Node kinds reported wherever they appear",
    )
    dangerous_call_names: frozenset[str] = Field(
        default=DANGEROUS_CALL_NAMES,
        description="Bare callee names rejected in call/new expressions",
    )
    dangerous_property_names: frozenset[str] = Field(
        default=DANGEROUS_PROPERTY_NAMES,
        description="Property names that trigger an access warning",
    )
    max_length: int | None = Field(
        default=EXPRESSION_MAX_LENGTH,
        ge=1,
        description="Maximum expression length in characters (None: no cap)",
    )
    inspect_computed_members: bool = Field(
        default=False,
        description=(
            "Constant-fold bracket-access keys and warn on dangerous "
            "property names reached that way"
        ),
    )

    @field_validator("disallowed_statement_kinds")
    @classmethod
    def _known_statement_kinds(cls, value: frozenset[str]) -> frozenset[str]:
        known = {kind.value for kind in NodeKind}
        unknown = sorted(value - known)
        if unknown:
            raise ValueError(f"Unknown node kinds: {', '.join(unknown)}")
        return value


DEFAULT_POLICY = ValidationPolicy()

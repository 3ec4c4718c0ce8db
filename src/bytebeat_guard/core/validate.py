from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str = Field(description="Issue code, e.g. UNDEFINED_VARIABLE")
    severity: Severity = Field(description="Error or warning")
    message: str = Field(description="Human-readable description")
    location: str = Field(
        description="Path to issue, e.g. expression.left.arguments[0]"
    )
    start: int | None = Field(
        default=None, description="Start offset into the expression text"
    )
    end: int | None = Field(
        default=None, description="End offset into the expression text"
    )


class ValidationResult(BaseModel):
    """Outcome of one validation call.

    ``errors`` and ``warnings`` are the messages of ``issues`` split by
    severity, each in discovery order. ``valid`` holds iff there are no
    errors; warnings never affect validity.
    """

    model_config = ConfigDict(frozen=True)

    issues: list[Issue] = Field(
        default_factory=list, description="Diagnostics in discovery order"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid(self) -> bool:
        return not any(i.severity == Severity.ERROR for i in self.issues)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def errors(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == Severity.ERROR]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def warnings(self) -> list[str]:
        return [
            i.message for i in self.issues if i.severity == Severity.WARNING
        ]

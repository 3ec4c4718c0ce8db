import json
from collections.abc import Iterator
from pathlib import Path
from typing import Annotated, Any

import srsly
import typer

from bytebeat_guard.core.engine import (
    decode_mode,
    decode_sample_rate,
    encode_mode,
    encode_sample_rate,
    get_sample_rate_value,
)
from bytebeat_guard.core.snippet import render_issue_snippet
from bytebeat_guard.core.validate import Severity, ValidationResult
from bytebeat_guard.expression.ast_safety import EXPRESSION_MAX_LENGTH
from bytebeat_guard.expression.minimize import minimize_expression
from bytebeat_guard.expression.models import ValidationPolicy
from bytebeat_guard.expression.validate import validate

app = typer.Typer(help="Validate bytebeat expressions before playback.")


class _RowError(Exception):
    def __init__(self, *, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(reason)


def _build_policy(max_length: int, inspect_computed: bool) -> ValidationPolicy:
    if max_length < 0:
        raise typer.BadParameter(
            f"Invalid max length {max_length}: expected 0 (no cap) or more"
        )
    return ValidationPolicy(
        max_length=max_length or None,
        inspect_computed_members=inspect_computed,
    )


def _render_result(expression: str, result: ValidationResult) -> str:
    if not result.issues:
        return "valid"
    lines = ["valid" if result.valid else "invalid"]
    for issue in result.issues:
        label = "error" if issue.severity == Severity.ERROR else "warning"
        lines.append(f"{label} [{issue.code}] {issue.message}")
        snippet = render_issue_snippet(expression, issue)
        if snippet:
            lines.extend(f"    {line}" for line in snippet.splitlines())
    return "\n".join(lines)


def _iter_rows(input_file: Path) -> Iterator[tuple[int, dict[str, Any]]]:
    with input_file.open("r", encoding="utf-8") as input_handle:
        for line_number, line in enumerate(input_handle, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            try:
                raw = json.loads(stripped)
            except json.JSONDecodeError as err:
                raise _RowError(
                    line_number=line_number,
                    reason=f"malformed JSON ({err.msg})",
                ) from err
            if not isinstance(raw, dict):
                raise _RowError(
                    line_number=line_number,
                    reason="expected a JSON object",
                )
            yield line_number, raw


def _check_row(
    row: dict[str, Any],
    *,
    line_number: int,
    field: str,
    policy: ValidationPolicy,
) -> dict[str, Any]:
    expression = row.get(field)
    if not isinstance(expression, str):
        raise _RowError(
            line_number=line_number,
            reason=f"field '{field}' must be a string",
        )
    mode = decode_mode(row.get("mode"))
    sample_rate = decode_sample_rate(row.get("sampleRate"))
    result = validate(expression, policy)
    return {
        **row,
        "mode": encode_mode(mode),
        "sampleRate": encode_sample_rate(sample_rate),
        "sample_rate_hz": get_sample_rate_value(sample_rate),
        "validation": result.model_dump(mode="json"),
    }


@app.command("validate")
def validate_command(
    expression: Annotated[
        str, typer.Argument(help="Bytebeat expression of the time index t")
    ],
    max_length: Annotated[
        int,
        typer.Option(
            "--max-length", help="Maximum expression length (0 disables)"
        ),
    ] = EXPRESSION_MAX_LENGTH,
    inspect_computed: Annotated[
        bool,
        typer.Option(
            "--inspect-computed",
            help="Also warn on dangerous names reached via bracket access",
        ),
    ] = False,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the result as JSON")
    ] = False,
) -> None:
    """Validate one expression; exit code 1 when it is not valid."""
    policy = _build_policy(max_length, inspect_computed)
    result = validate(expression, policy)
    if as_json:
        typer.echo(srsly.json_dumps(result.model_dump(mode="json")))
    else:
        typer.echo(_render_result(expression, result))
    if not result.valid:
        raise typer.Exit(1)


@app.command("check-file")
def check_file(
    input_file: Annotated[Path, typer.Argument(help="Input JSONL file")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write checked rows as JSONL"),
    ] = None,
    field: Annotated[
        str,
        typer.Option("--field", help="Row field holding the expression"),
    ] = "expression",
    max_length: Annotated[
        int,
        typer.Option(
            "--max-length", help="Maximum expression length (0 disables)"
        ),
    ] = EXPRESSION_MAX_LENGTH,
    inspect_computed: Annotated[
        bool,
        typer.Option(
            "--inspect-computed",
            help="Also warn on dangerous names reached via bracket access",
        ),
    ] = False,
) -> None:
    """Validate the expression in every row of a JSONL file."""
    policy = _build_policy(max_length, inspect_computed)
    checked: list[dict[str, Any]] = []
    try:
        for line_number, row in _iter_rows(input_file):
            checked.append(
                _check_row(
                    row, line_number=line_number, field=field, policy=policy
                )
            )
    except _RowError as err:
        typer.echo(
            f"Error: invalid JSONL row in {input_file} at line "
            f"{err.line_number}: {err.reason}",
            err=True,
        )
        raise typer.Exit(1) from err

    if output is not None:
        srsly.write_jsonl(output, checked)

    invalid = sum(1 for row in checked if not row["validation"]["valid"])
    warned = sum(1 for row in checked if row["validation"]["warnings"])
    typer.echo(
        f"{input_file}: {len(checked)} expressions, {invalid} invalid, "
        f"{warned} with warnings"
    )
    if invalid:
        raise typer.Exit(1)


@app.command()
def minimize(
    expression: Annotated[str, typer.Argument(help="Expression to minimize")],
) -> None:
    """Print the expression without redundant whitespace and comments."""
    typer.echo(minimize_expression(expression))


if __name__ == "__main__":
    app()

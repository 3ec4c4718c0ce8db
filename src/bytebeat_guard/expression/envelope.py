"""Wrap expression text into the function source the parser sees.

The expression envelope is the shape the audio engine compiles: a function
of the time index ``t`` returning the expression's value. The statements
envelope is only used to name banned statement kinds in text that is not a
single expression. Newlines keep a trailing line comment in the expression
from swallowing the envelope's closing tokens.
"""

from dataclasses import dataclass
from enum import Enum

from bytebeat_guard.expression.nodes import Node, NodeKind

TIME_PARAM = "t"

_EXPRESSION_PREFIX = f"(function ({TIME_PARAM}) {{\nreturn (\n"
_EXPRESSION_SUFFIX = "\n);\n})"
_STATEMENTS_PREFIX = f"(function ({TIME_PARAM}) {{\n"
_STATEMENTS_SUFFIX = "\n})"


class EnvelopeMode(str, Enum):
    EXPRESSION = "expression"
    STATEMENTS = "statements"


@dataclass(frozen=True)
class Envelope:
    mode: EnvelopeMode
    source: str
    offset: int
    length: int

    def to_expression_offset(self, source_offset: int) -> int:
        """Map an offset in ``source`` to an offset in the expression text."""
        return min(max(source_offset - self.offset, 0), self.length)

    def locate_root(self, program: Node) -> Node | None:
        """Return the node holding the user's text, or None if the parsed
        program is not exactly the envelope (e.g. the text closed it early).
        """
        statements = program.children("body")
        if len(statements) != 1 or statements[0] is None:
            return None
        statement = statements[0]
        if statement.kind is not NodeKind.EXPRESSION_STATEMENT:
            return None
        function = statement.child("expression")
        if (
            function is None
            or function.kind is not NodeKind.FUNCTION_EXPRESSION
        ):
            return None
        params = function.children("params")
        if (
            len(params) != 1
            or params[0] is None
            or params[0].kind is not NodeKind.IDENTIFIER
            or params[0].name != TIME_PARAM
            or params[0].start >= self.offset
        ):
            return None
        body = function.child("body")
        if body is None or body.kind is not NodeKind.BLOCK_STATEMENT:
            return None
        if body.start >= self.offset or body.end <= self.offset + self.length:
            return None

        if self.mode is EnvelopeMode.STATEMENTS:
            return body

        returns = body.children("body")
        if (
            len(returns) != 1
            or returns[0] is None
            or returns[0].kind is not NodeKind.RETURN_STATEMENT
        ):
            return None
        argument = returns[0].child("argument")
        if argument is None:
            return None
        end = self.offset + self.length
        if argument.start < self.offset or argument.end > end:
            return None
        return argument


def wrap_expression(expression: str) -> Envelope:
    return Envelope(
        mode=EnvelopeMode.EXPRESSION,
        source=f"{_EXPRESSION_PREFIX}{expression}{_EXPRESSION_SUFFIX}",
        offset=len(_EXPRESSION_PREFIX),
        length=len(expression),
    )


def wrap_statements(expression: str) -> Envelope:
    return Envelope(
        mode=EnvelopeMode.STATEMENTS,
        source=f"{_STATEMENTS_PREFIX}{expression}{_STATEMENTS_SUFFIX}",
        offset=len(_STATEMENTS_PREFIX),
        length=len(expression),
    )

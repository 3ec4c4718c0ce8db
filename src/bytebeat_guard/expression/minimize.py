import logging
import re

import esprima
from esprima.error_handler import Error as EsprimaError

_LOGGER = logging.getLogger(__name__)

_WORD_CHAR_RE = re.compile(r"[A-Za-z0-9_$\\]")


def _needs_space(previous: str, following: str) -> bool:
    """Whether two tokens would merge into a different token if adjacent."""
    left, right = previous[-1], following[0]
    if _WORD_CHAR_RE.match(left) and _WORD_CHAR_RE.match(right):
        return True
    if left in "+-" and right == left:
        return True
    if left == "/" and right in "/*":
        return True
    # "1 .toString()" must not become the float literal "1."
    if right == "." and previous.isdigit():
        return True
    # "-->" would close an HTML-like comment
    if previous.endswith("--") and right == ">":
        return True
    return False


def minimize_expression(expression: str) -> str:
    """Drop whitespace and comments that do not change how text tokenizes.

    Text that does not tokenize is returned unchanged.
    """
    try:
        tokens = esprima.tokenize(expression)
    except EsprimaError as e:
        _LOGGER.debug("not minimizing untokenizable expression: %s", e)
        return expression

    pieces: list[str] = []
    for token in tokens:
        value = str(token.value)
        if pieces and _needs_space(pieces[-1], value):
            pieces.append(" ")
        elif (
            value.startswith("--")
            and len(pieces) >= 2
            and pieces[-2].endswith("<")
            and pieces[-1] == "!"
        ):
            # "<!--" would open an HTML-like comment
            pieces.append(" ")
        pieces.append(value)
    return "".join(pieces)

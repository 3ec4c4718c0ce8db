from bytebeat_guard.core.validate import Issue


def render_issue_snippet(expression: str, issue: Issue) -> str:
    """Render the expression line an issue points at, with a caret marker.

    Returns an empty string when the issue carries no source offsets.
    """
    if issue.start is None:
        return ""

    start = min(max(issue.start, 0), len(expression))
    end = issue.end if issue.end is not None else start
    end = min(max(end, start), len(expression))

    line_start = expression.rfind("\n", 0, start) + 1
    line_end = expression.find("\n", start)
    if line_end == -1:
        line_end = len(expression)
    line = expression[line_start:line_end]

    column = start - line_start
    width = max(1, min(end, line_end) - start)
    marker = " " * column + "^" + "~" * (width - 1)
    return f"{line}\n{marker}"

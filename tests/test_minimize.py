import pytest

from bytebeat_guard.expression.minimize import minimize_expression
from bytebeat_guard.expression.validate import validate


class TestMinimizeExpression:
    def test_removes_whitespace_around_operators(self) -> None:
        assert minimize_expression("t * ( 42 & t >> 10 )") == "t*(42&t>>10)"

    def test_collapses_newlines_and_trims(self) -> None:
        assert minimize_expression("  t\n  >> 4\n") == "t>>4"

    def test_keeps_space_between_words(self) -> None:
        assert minimize_expression("typeof  t") == "typeof t"

    def test_keeps_space_between_same_sign_operators(self) -> None:
        assert minimize_expression("t - -1") == "t- -1"
        assert minimize_expression("t + +1") == "t+ +1"

    def test_keeps_number_apart_from_member_dot(self) -> None:
        assert minimize_expression("1 .toString()") == "1 .toString()"

    def test_drops_comments(self) -> None:
        assert minimize_expression("t /* c */ + 1 // x") == "t+1"

    def test_keeps_string_contents(self) -> None:
        assert minimize_expression("t ['a b']") == "t['a b']"

    def test_untokenizable_text_is_unchanged(self) -> None:
        assert minimize_expression("t + 'abc") == "t + 'abc"

    def test_empty(self) -> None:
        assert minimize_expression("") == ""

    @pytest.mark.parametrize(
        "expression",
        [
            "(t * 5 & t >> 7) | (t * 3 & t >> 10)",
            "t >> 4 ? t & 255 : t >> 2",
            "(x => x + t)( 5 )",
        ],
    )
    def test_minimized_expression_still_valid(self, expression: str) -> None:
        assert validate(minimize_expression(expression)).valid

    def test_does_not_open_html_comment(self) -> None:
        minimized = minimize_expression("t < !--x")
        assert "<!--" not in minimized
        assert minimized == "t<! --x"
        assert validate(minimized).errors == ["Undefined variable: 'x'"]

    def test_does_not_open_html_comment_after_shift(self) -> None:
        assert minimize_expression("t << !--x") == "t<<! --x"

    def test_does_not_close_html_comment(self) -> None:
        minimized = minimize_expression("x-- > t")
        assert "-->" not in minimized
        assert minimized == "x-- >t"

import random

from bytebeat_guard.core.validate import Severity, ValidationResult
from bytebeat_guard.expression.ast_safety import ALLOWED_GLOBALS

_MATH_FUNCS = ("sin", "cos", "tan", "abs", "floor", "ceil", "sqrt", "round")
_BINARY_OPS = ("+", "-", "*", "/", "%", "&", "|", "^", ">>", "<<", ">>>")
_COMPARE_OPS = ("<", "<=", ">", ">=", "==", "!=")


def issue_codes(result: ValidationResult) -> list[str]:
    return [i.code for i in result.issues]


def error_codes(result: ValidationResult) -> list[str]:
    return [i.code for i in result.issues if i.severity == Severity.ERROR]


def random_bytebeat_expression(
    rng: random.Random,
    depth: int = 4,
    locals_: tuple[str, ...] = (),
) -> str:
    """Build an expression from allowed names, operators and local params."""
    if depth <= 0 or rng.random() < 0.2:
        leaf = rng.choice(("t", "t", "number", "local"))
        if leaf == "number":
            return str(rng.randint(0, 255))
        if leaf == "local" and locals_:
            return rng.choice(locals_)
        return "t"

    choice = rng.randint(0, 5)
    sub = depth - 1
    if choice == 0:
        op = rng.choice(_BINARY_OPS)
        left = random_bytebeat_expression(rng, sub, locals_)
        right = random_bytebeat_expression(rng, sub, locals_)
        return f"({left} {op} {right})"
    if choice == 1:
        test = (
            f"{random_bytebeat_expression(rng, sub, locals_)} "
            f"{rng.choice(_COMPARE_OPS)} "
            f"{random_bytebeat_expression(rng, sub, locals_)}"
        )
        return (
            f"({test} ? {random_bytebeat_expression(rng, sub, locals_)} "
            f": {random_bytebeat_expression(rng, sub, locals_)})"
        )
    if choice == 2:
        func = rng.choice(_MATH_FUNCS)
        return f"Math.{func}({random_bytebeat_expression(rng, sub, locals_)})"
    if choice == 3:
        a = random_bytebeat_expression(rng, sub, locals_)
        b = random_bytebeat_expression(rng, sub, locals_)
        return f"{rng.choice(('min', 'max', 'pow'))}({a}, {b})"
    if choice == 4:
        param = f"p{depth}"
        body = random_bytebeat_expression(rng, sub, (*locals_, param))
        arg = random_bytebeat_expression(rng, sub, locals_)
        return f"(({param}) => {body})({arg})"
    return f"(-{random_bytebeat_expression(rng, sub, locals_)})"


def allowed_global_names() -> list[str]:
    return sorted(ALLOWED_GLOBALS)

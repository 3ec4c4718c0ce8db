"""Policy tables for bytebeat expression validation.

These are the capability allowlist and the denylists the walker enforces.
They are process-wide constants; build a ``ValidationPolicy`` to use
different tables instead of mutating these.

NOTE: This is a static pre-execution check. It does not isolate or limit
the expression once the audio engine evaluates it.
"""

# Identifiers an expression may reference without declaring them
ALLOWED_GLOBALS: frozenset[str] = frozenset(
    {
        "t",
        "Math",
        "sin",
        "cos",
        "tan",
        "abs",
        "floor",
        "ceil",
        "sqrt",
        "pow",
        "min",
        "max",
        "round",
        "random",
    }
)

# Statement kinds rejected wherever they appear
DISALLOWED_STATEMENT_KINDS: frozenset[str] = frozenset(
    {
        "ForStatement",
        "WhileStatement",
        "DoWhileStatement",
        "SwitchStatement",
        "IfStatement",
    }
)

# Bare callee names that compile strings into code
DANGEROUS_CALL_NAMES: frozenset[str] = frozenset({"eval", "Function"})

# Property names that reach the prototype chain
DANGEROUS_PROPERTY_NAMES: frozenset[str] = frozenset(
    {"constructor", "prototype", "__proto__"}
)

# Editor cap on expression length
EXPRESSION_MAX_LENGTH = 1024

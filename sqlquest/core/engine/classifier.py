import re

# Statements the console knows how to grade
SUPPORTED_OPERATIONS = ("CREATE", "INSERT", "UPDATE", "DELETE", "ALTER", "DROP")

_WHITESPACE = re.compile(r"\s+")
_QUALIFIED_DOT = re.compile(r"\s*\.\s*")
_LEADING_WORD = re.compile(r"^\s*(\w+)")


def normalize(sql: str) -> str:
    """Single-space the statement and glue qualified names (`a . b` -> `a.b`)."""
    collapsed = _WHITESPACE.sub(" ", sql or "").strip()
    return _QUALIFIED_DOT.sub(".", collapsed)


def classify(sql: str) -> str:
    """Return the upper-cased leading keyword, or "" for blank input."""
    match = _LEADING_WORD.match(normalize(sql))
    if not match:
        return ""
    return match.group(1).upper()


def is_supported(operation: str) -> bool:
    return operation in SUPPORTED_OPERATIONS

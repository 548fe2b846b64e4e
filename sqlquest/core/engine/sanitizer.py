import re

from sqlquest.core.errors import InvalidIdentifier

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


# PRAGMA commands cannot take bound parameters for object names,
# so this check is the only thing standing between a name and the query text
def safe_identifier(identifier: str) -> str:
    if not identifier or not isinstance(identifier, str):
        raise InvalidIdentifier(identifier)
    if not IDENTIFIER_PATTERN.fullmatch(identifier):
        raise InvalidIdentifier(identifier)
    return identifier

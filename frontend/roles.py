"""
The closed set of roles a session can carry.

Role claims arrive as loose strings from user metadata or the local cache;
`parse_role` is the only way in and maps anything unrecognised to VISITOR.
"""

from enum import Enum


class Role(str, Enum):
    VISITOR = "visitor"
    STAND = "stand"      # dealer
    ADMIN = "admin"


def parse_role(value) -> Role:
    """Total parse of an untrusted role claim. Unknown / missing → VISITOR."""
    if isinstance(value, Role):
        return value
    if isinstance(value, str):
        try:
            return Role(value.strip().lower())
        except ValueError:
            return Role.VISITOR
    return Role.VISITOR

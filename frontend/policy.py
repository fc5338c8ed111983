"""
Administrator identity policy.

Two security-sensitive rules live here and nowhere else:
  - the administrator email always resolves to ADMIN, whatever role claim
    the metadata store or the local cache holds;
  - the bypass credential pair, which grants ADMIN without contacting the
    auth service. It is off unless FC_ADMIN_BYPASS_PASSWORD is set.
"""

import hmac
import os

from dotenv import load_dotenv

from frontend.roles import Role, parse_role

load_dotenv()

ADMIN_EMAIL = os.getenv("FC_ADMIN_EMAIL", "admin@facilitadorcar.pt").strip().lower()
ADMIN_BYPASS_PASSWORD = os.getenv("FC_ADMIN_BYPASS_PASSWORD", "")


def _normalize(email: str | None) -> str:
    return (email or "").strip().lower()


def is_admin_email(email: str | None) -> bool:
    return bool(email) and _normalize(email) == ADMIN_EMAIL


def resolve_role(claim, email: str | None) -> Role:
    """Parse the claim, then apply the administrator-email override."""
    if is_admin_email(email):
        return Role.ADMIN
    return parse_role(claim)


def bypass_enabled() -> bool:
    return bool(ADMIN_BYPASS_PASSWORD)


def check_bypass_credentials(email: str | None, password: str | None) -> bool:
    """True when (email, password) is the configured bypass pair."""
    if not bypass_enabled() or not is_admin_email(email):
        return False
    return hmac.compare_digest((password or "").encode("utf-8"), ADMIN_BYPASS_PASSWORD.encode("utf-8"))

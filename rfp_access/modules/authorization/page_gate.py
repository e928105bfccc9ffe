"""
Page-level gating for the admin area.

A denied page check is a routine outcome: the caller gets a safe redirect target,
never an error.
"""

from rfp_access.modules.authorization.schemas import PageAccessResponse
from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from typing import Dict, Optional, Tuple

LOGIN_REDIRECT = "/login"

SUPER_ADMIN = "super_admin"
ADMIN = "admin"

# path prefix -> (required check, redirect on denial); longest prefix wins
PAGE_RULES: Dict[str, Tuple[str, str]] = {
    "/admin": (ADMIN, "/dashboard?error=unauthorized"),
    "/admin/system": (SUPER_ADMIN, "/admin?error=insufficient_permissions"),
    "/admin/logs": (SUPER_ADMIN, "/admin?error=insufficient_permissions"),
}


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def find_rule(path: str) -> Optional[Tuple[str, str]]:
    matches = [prefix for prefix in PAGE_RULES if _matches(path, prefix)]
    if not matches:
        return None
    return PAGE_RULES[max(matches, key=len)]


class PageGate:
    def __init__(self, engine: AuthorizationDecisionEngine):
        self.engine = engine

    def check(self, user_id: Optional[str], path: str) -> PageAccessResponse:
        path = "/" + path.split("?", 1)[0].strip("/")
        rule = find_rule(path)
        if rule is None:
            return PageAccessResponse(path=path, allowed=True)
        if not user_id:
            return PageAccessResponse(path=path, allowed=False, redirect_to=LOGIN_REDIRECT)
        required, redirect_to = rule
        if required == SUPER_ADMIN:
            allowed = self.engine.is_super_admin(user_id)
        else:
            allowed = self.engine.has_admin_access(user_id)
        return PageAccessResponse(
            path=path,
            allowed=allowed,
            redirect_to=None if allowed else redirect_to
        )

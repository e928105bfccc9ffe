"""
Authorization decision engine.

Read-only answers to "who is this user allowed to be". Every check takes the user id
explicitly and answers False for an unresolved identity without touching the store.
A "no" is always False, never an exception; store failures propagate as StoreError.

Create one engine per request: role and permission lookups are memoized on the
instance, mirroring the request-scoped access cache used by the route dependencies.
"""

from rfp_access.config import settings
from rfp_access.config.roles_config import ROLE_DISPLAY_RANK, UNRANKED_ROLE, PRIMARY_ROLE_PRECEDENCE
from rfp_access.modules.authorization.schemas import RoleSummary
from rfp_access.modules.roles.schemas import Role, Permission
from rfp_access.modules.roles.service import RolePermissionStore
from typing import Dict, List, Optional, Sequence


class AuthorizationDecisionEngine:
    def __init__(
        self,
        store: RolePermissionStore,
        super_admin_role: Optional[str] = None,
        admin_role: Optional[str] = None,
        display_rank: Optional[Dict[str, int]] = None,
        primary_precedence: Optional[Sequence[str]] = None,
    ):
        self.store = store
        self.super_admin_role = super_admin_role or settings.super_admin_role
        self.admin_role = admin_role or settings.admin_role
        self.display_rank = display_rank if display_rank is not None else ROLE_DISPLAY_RANK
        self.primary_precedence = tuple(
            primary_precedence if primary_precedence is not None else PRIMARY_ROLE_PRECEDENCE
        )
        self._roles: Dict[str, List[Role]] = {}
        self._permissions: Dict[str, List[Permission]] = {}

    def roles_for(self, user_id: Optional[str]) -> List[Role]:
        if not user_id:
            return []
        if user_id not in self._roles:
            self._roles[user_id] = self.store.get_roles_for_user(user_id)
        return self._roles[user_id]

    def role_names(self, user_id: Optional[str]) -> List[str]:
        return [role.name for role in self.roles_for(user_id)]

    def effective_permissions(self, user_id: Optional[str]) -> List[Permission]:
        """Union of the permissions granted through every role the user holds"""
        if not user_id:
            return []
        if user_id not in self._permissions:
            role_ids = [role.id for role in self.roles_for(user_id)]
            self._permissions[user_id] = self.store.get_permissions_for_roles(role_ids)
        return self._permissions[user_id]

    def invalidate(self, user_id: Optional[str] = None):
        """Drop memoized lookups, e.g. after this request changed assignments"""
        if user_id is None:
            self._roles.clear()
            self._permissions.clear()
        else:
            self._roles.pop(user_id, None)
            self._permissions.pop(user_id, None)

    def is_super_admin(self, user_id: Optional[str]) -> bool:
        return self.super_admin_role in self.role_names(user_id)

    def has_admin_access(self, user_id: Optional[str]) -> bool:
        if self.is_super_admin(user_id):
            return True
        return self.admin_role in self.role_names(user_id)

    def has_capability(self, user_id: Optional[str], resource: str, action: str) -> bool:
        if not user_id:
            return False
        # Super admins pass every check, even one naming no capability.
        if self.is_super_admin(user_id):
            return True
        if not resource or not action:
            return False
        return any(
            permission.resource == resource and permission.action == action
            for permission in self.effective_permissions(user_id)
        )

    def primary_role(self, roles: List[Role]) -> Optional[str]:
        """Display-only default role: configured precedence first, else store order"""
        names = [role.name for role in roles]
        for name in self.primary_precedence:
            if name in names:
                return name
        return names[0] if names else None

    def sort_for_display(self, roles: List[Role]) -> List[Role]:
        return sorted(roles, key=lambda role: self.display_rank.get(role.name, UNRANKED_ROLE))

    def get_effective_role_summary(self, user_id: Optional[str]) -> RoleSummary:
        roles = self.roles_for(user_id)
        return RoleSummary(
            roles=self.sort_for_display(roles),
            is_super_admin=self.is_super_admin(user_id),
            is_admin=self.has_admin_access(user_id),
            primary_role=self.primary_role(roles)
        )

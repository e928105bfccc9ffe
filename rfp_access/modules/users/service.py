from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from rfp_access.modules.roles.service import RolePermissionStore
from rfp_access.modules.users.schemas import UserWithRoles
from typing import List


class UserDirectory:
    """Read model for the admin users screen: every profile with its role assignments."""

    def __init__(self, store: RolePermissionStore, engine: AuthorizationDecisionEngine):
        self.store = store
        self.engine = engine

    def list_users_with_roles(self) -> List[UserWithRoles]:
        users = self.store.list_users()
        roles_by_id = {role.id: role for role in self.store.list_roles()}
        role_map = self.store.get_user_role_map()

        result = []
        for user in users:
            role_ids = role_map.get(user.id, [])
            roles = [roles_by_id[role_id] for role_id in role_ids if role_id in roles_by_id]
            result.append(UserWithRoles(
                **user.model_dump(),
                role_ids=role_ids,
                primary_role=self.engine.primary_role(roles),
                is_super_admin=any(role.name == self.engine.super_admin_role for role in roles)
            ))
        return result

from rfp_access.config import settings
from rfp_access.modules.admin.schemas import AdminStats
from rfp_access.modules.roles.service import RolePermissionStore


class AdminService:
    def __init__(self, store: RolePermissionStore):
        self.store = store

    def get_stats(self) -> AdminStats:
        """Dashboard counters"""
        names_by_id = {role.id: role.name for role in self.store.list_roles()}
        admin_names = {settings.super_admin_role, settings.admin_role}
        admins = 0
        super_admins = 0
        for role_ids in self.store.get_user_role_map().values():
            names = {names_by_id.get(role_id) for role_id in role_ids}
            if names & admin_names:
                admins += 1
            if settings.super_admin_role in names:
                super_admins += 1
        return AdminStats(
            users=self.store.count("profiles"),
            roles=len(names_by_id),
            permissions=self.store.count("permissions"),
            admins=admins,
            super_admins=super_admins
        )

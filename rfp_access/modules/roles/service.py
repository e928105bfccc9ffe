"""
Role/permission store.

RolePermissionStore is the only sanctioned way to read or mutate roles, permissions
and their assignment edges. Mutations take role and permission *names* and user *ids*
(the Supabase auth uuid); returned records carry the database ids.
"""

from abc import ABC, abstractmethod
from supabase import Client
from postgrest.exceptions import APIError
from rfp_access.core.errors import DuplicateNameError, NotFoundError, StoreError, ValidationError
from rfp_access.modules.roles.schemas import Role, Permission
from rfp_access.modules.users.schemas import UserProfile
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", target=field)
    return value.strip()


class RolePermissionStore(ABC):
    @abstractmethod
    def list_roles(self) -> List[Role]: ...

    @abstractmethod
    def list_permissions(self, resource: Optional[str] = None) -> List[Permission]: ...

    @abstractmethod
    def list_resources(self) -> List[str]: ...

    @abstractmethod
    def list_users(self) -> List[UserProfile]: ...

    @abstractmethod
    def get_user_role_map(self) -> Dict[str, List[str]]: ...

    @abstractmethod
    def count(self, table: str) -> int: ...

    @abstractmethod
    def get_role(self, name: str) -> Role: ...

    @abstractmethod
    def get_permission(self, name: str) -> Permission: ...

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserProfile]: ...

    @abstractmethod
    def get_roles_for_user(self, user_id: str) -> List[Role]: ...

    @abstractmethod
    def get_permissions_for_role(self, role_id: str) -> List[Permission]: ...

    @abstractmethod
    def create_role(self, name: str, description: Optional[str] = None) -> Role: ...

    @abstractmethod
    def create_permission(
        self, name: str, resource: str, action: str, description: Optional[str] = None
    ) -> Permission: ...

    @abstractmethod
    def assign_role(self, user_id: str, role_name: str) -> None: ...

    @abstractmethod
    def revoke_role(self, user_id: str, role_name: str) -> None: ...

    @abstractmethod
    def assign_permission_to_role(self, role_name: str, permission_name: str) -> None: ...

    @abstractmethod
    def revoke_permission_from_role(self, role_name: str, permission_name: str) -> None: ...

    def get_permissions_for_roles(self, role_ids: List[str]) -> List[Permission]:
        """Union of the permissions granted to any of the given roles, without duplicates."""
        seen = {}
        for role_id in role_ids:
            for permission in self.get_permissions_for_role(role_id):
                seen.setdefault(permission.id, permission)
        return list(seen.values())


class SupabaseRolePermissionStore(RolePermissionStore):
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _execute(self, query, operation: str, duplicate_name: Optional[str] = None):
        try:
            return query.execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION and duplicate_name is not None:
                raise DuplicateNameError(f"'{duplicate_name}' already exists", target=duplicate_name)
            logger.error(f"Store error during {operation}: {e}")
            raise StoreError(f"{operation} failed") from e
        except Exception as e:
            logger.error(f"Store error during {operation}: {e}")
            raise StoreError(f"{operation} failed") from e

    # Reads

    def list_roles(self) -> List[Role]:
        """List all roles, oldest first"""
        result = self._execute(
            self.supabase.table("roles").select("*").order("created_at"),
            "list roles"
        )
        return [Role(**role) for role in result.data]

    def list_permissions(self, resource: Optional[str] = None) -> List[Permission]:
        """List permissions, optionally filtered by resource"""
        query = self.supabase.table("permissions").select("*")
        if resource:
            query = query.eq("resource", resource)
        result = self._execute(query.order("resource").order("name"), "list permissions")
        return [Permission(**permission) for permission in result.data]

    def list_resources(self) -> List[str]:
        result = self._execute(
            self.supabase.table("permissions").select("resource"),
            "list resources"
        )
        return sorted({p["resource"] for p in result.data})

    def get_role(self, name: str) -> Role:
        result = self._execute(
            self.supabase.table("roles").select("*").eq("name", name).limit(1),
            "get role"
        )
        if not result.data:
            raise NotFoundError(f"Role '{name}' not found", target=name)
        return Role(**result.data[0])

    def get_permission(self, name: str) -> Permission:
        result = self._execute(
            self.supabase.table("permissions").select("*").eq("name", name).limit(1),
            "get permission"
        )
        if not result.data:
            raise NotFoundError(f"Permission '{name}' not found", target=name)
        return Permission(**result.data[0])

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        result = self._execute(
            self.supabase.table("profiles").select("*").eq("id", user_id).limit(1),
            "get user"
        )
        if not result.data:
            return None
        return UserProfile(**result.data[0])

    def _require_user(self, user_id: str) -> UserProfile:
        user = self.get_user(_require_text(user_id, "user_id"))
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found", target=user_id)
        return user

    def get_roles_for_user(self, user_id: str) -> List[Role]:
        """Roles held by a user, in assignment order. Empty list if none."""
        edges = self._execute(
            self.supabase.table("user_roles")
                .select("role_id")
                .eq("user_id", user_id)
                .order("created_at"),
            "get user roles"
        )
        role_ids = [edge["role_id"] for edge in edges.data]
        if not role_ids:
            return []
        result = self._execute(
            self.supabase.table("roles").select("*").in_("id", role_ids),
            "get user roles"
        )
        by_id = {role["id"]: Role(**role) for role in result.data}
        return [by_id[role_id] for role_id in role_ids if role_id in by_id]

    def get_permissions_for_role(self, role_id: str) -> List[Permission]:
        return self.get_permissions_for_roles([role_id])

    def get_permissions_for_roles(self, role_ids: List[str]) -> List[Permission]:
        if not role_ids:
            return []
        edges = self._execute(
            self.supabase.table("role_permissions")
                .select("permission_id")
                .in_("role_id", role_ids),
            "get role permissions"
        )
        permission_ids = list(dict.fromkeys(edge["permission_id"] for edge in edges.data))
        if not permission_ids:
            return []
        result = self._execute(
            self.supabase.table("permissions")
                .select("*")
                .in_("id", permission_ids)
                .order("resource")
                .order("name"),
            "get role permissions"
        )
        return [Permission(**permission) for permission in result.data]

    def list_users(self) -> List[UserProfile]:
        """All user profiles, newest first"""
        result = self._execute(
            self.supabase.table("profiles").select("*").order("created_at", desc=True),
            "list users"
        )
        return [UserProfile(**user) for user in result.data]

    def get_user_role_map(self) -> Dict[str, List[str]]:
        """user_id -> role ids, in assignment order"""
        result = self._execute(
            self.supabase.table("user_roles").select("user_id, role_id").order("created_at"),
            "list role assignments"
        )
        role_map: Dict[str, List[str]] = {}
        for edge in result.data:
            role_map.setdefault(edge["user_id"], []).append(edge["role_id"])
        return role_map

    def count(self, table: str) -> int:
        result = self._execute(
            self.supabase.table(table).select("id", count="exact"),
            f"count {table}"
        )
        return result.count or 0

    # Mutations

    def create_role(self, name: str, description: Optional[str] = None) -> Role:
        """Create a new role"""
        name = _require_text(name, "name")
        result = self._execute(
            self.supabase.table("roles").insert({
                "name": name,
                "description": description
            }),
            "create role",
            duplicate_name=name
        )
        if not result.data:
            raise StoreError("create role returned no row")
        return Role(**result.data[0])

    def create_permission(
        self, name: str, resource: str, action: str, description: Optional[str] = None
    ) -> Permission:
        """Create a new permission"""
        name = _require_text(name, "name")
        resource = _require_text(resource, "resource")
        action = _require_text(action, "action")
        result = self._execute(
            self.supabase.table("permissions").insert({
                "name": name,
                "resource": resource,
                "action": action,
                "description": description
            }),
            "create permission",
            duplicate_name=name
        )
        if not result.data:
            raise StoreError("create permission returned no row")
        return Permission(**result.data[0])

    def assign_role(self, user_id: str, role_name: str) -> None:
        """Grant a role to a user; a no-op if already held"""
        self._require_user(user_id)
        role = self.get_role(_require_text(role_name, "role_name"))
        self._execute(
            self.supabase.table("user_roles").upsert(
                {"user_id": user_id, "role_id": role.id},
                on_conflict="user_id,role_id",
                ignore_duplicates=True
            ),
            "assign role"
        )

    def revoke_role(self, user_id: str, role_name: str) -> None:
        """Remove a role from a user; a no-op if not held"""
        self._require_user(user_id)
        role = self.get_role(_require_text(role_name, "role_name"))
        self._execute(
            self.supabase.table("user_roles")
                .delete()
                .eq("user_id", user_id)
                .eq("role_id", role.id),
            "revoke role"
        )

    def assign_permission_to_role(self, role_name: str, permission_name: str) -> None:
        """Grant a permission to a role; a no-op if already granted"""
        role = self.get_role(_require_text(role_name, "role_name"))
        permission = self.get_permission(_require_text(permission_name, "permission_name"))
        self._execute(
            self.supabase.table("role_permissions").upsert(
                {"role_id": role.id, "permission_id": permission.id},
                on_conflict="role_id,permission_id",
                ignore_duplicates=True
            ),
            "assign permission"
        )

    def revoke_permission_from_role(self, role_name: str, permission_name: str) -> None:
        """Remove a permission from a role; a no-op if not granted"""
        role = self.get_role(_require_text(role_name, "role_name"))
        permission = self.get_permission(_require_text(permission_name, "permission_name"))
        self._execute(
            self.supabase.table("role_permissions")
                .delete()
                .eq("role_id", role.id)
                .eq("permission_id", permission.id),
            "revoke permission"
        )

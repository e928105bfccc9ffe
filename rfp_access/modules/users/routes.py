from fastapi import APIRouter, Depends
from rfp_access.core.errors import NotFoundError
from rfp_access.modules.auth.schemas import Identity
from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from rfp_access.modules.privileges.schemas import AssignRole, RevokeRole, PromoteToSuperAdmin, WorkflowResult
from rfp_access.modules.privileges.service import PrivilegeChangeWorkflow
from rfp_access.modules.roles.schemas import Role
from rfp_access.modules.roles.service import RolePermissionStore
from rfp_access.modules.users.schemas import UserWithRoles, PromoteRequest
from rfp_access.modules.users.service import UserDirectory
from rfp_access.core.dependencies import (
    get_current_user, get_engine, get_store, get_workflow, require_admin_access
)
from typing import List

router = APIRouter(prefix="/users", tags=["users"])


def get_user_directory(
    store: RolePermissionStore = Depends(get_store),
    engine: AuthorizationDecisionEngine = Depends(get_engine)
) -> UserDirectory:
    return UserDirectory(store, engine)


@router.get("", response_model=List[UserWithRoles])
async def list_users(
    current_user: Identity = Depends(require_admin_access),
    directory: UserDirectory = Depends(get_user_directory)
):
    """List users with their role ids and primary role (admin only)"""
    return directory.list_users_with_roles()


@router.get("/{user_id}/roles", response_model=List[Role])
async def get_user_roles(
    user_id: str,
    current_user: Identity = Depends(require_admin_access),
    store: RolePermissionStore = Depends(get_store),
    engine: AuthorizationDecisionEngine = Depends(get_engine)
):
    """Roles held by a user, in display order (admin only)"""
    if store.get_user(user_id) is None:
        raise NotFoundError(f"User '{user_id}' not found", target=user_id)
    return engine.sort_for_display(engine.roles_for(user_id))


@router.post("/{user_id}/roles/{role_name}", response_model=WorkflowResult)
async def assign_role(
    user_id: str,
    role_name: str,
    current_user: Identity = Depends(get_current_user),
    workflow: PrivilegeChangeWorkflow = Depends(get_workflow)
):
    """Assign a role to a user"""
    return workflow.execute(current_user.id, AssignRole(user_id=user_id, role_name=role_name))


@router.delete("/{user_id}/roles/{role_name}", response_model=WorkflowResult)
async def revoke_role(
    user_id: str,
    role_name: str,
    current_user: Identity = Depends(get_current_user),
    workflow: PrivilegeChangeWorkflow = Depends(get_workflow)
):
    """Remove a role from a user"""
    return workflow.execute(current_user.id, RevokeRole(user_id=user_id, role_name=role_name))


@router.post("/{user_id}/promote", response_model=WorkflowResult)
async def promote_to_super_admin(
    user_id: str,
    request: PromoteRequest,
    current_user: Identity = Depends(get_current_user),
    workflow: PrivilegeChangeWorkflow = Depends(get_workflow)
):
    """Promote a user to developer (super admin). Requires the caller to be a super admin."""
    return workflow.execute(current_user.id, PromoteToSuperAdmin(user_id=user_id))

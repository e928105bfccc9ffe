from fastapi import APIRouter, Depends
from rfp_access.modules.auth.schemas import Identity
from rfp_access.modules.privileges.schemas import (
    CreateRole, CreatePermission, AssignPermission, RevokePermission, WorkflowResult
)
from rfp_access.modules.privileges.service import PrivilegeChangeWorkflow
from rfp_access.modules.roles.schemas import (
    Role, Permission, RoleCreate, PermissionCreate, RoleWithPermissions
)
from rfp_access.modules.roles.service import RolePermissionStore
from rfp_access.core.dependencies import (
    get_current_user, get_store, get_workflow, require_capability
)
from typing import List, Optional

router = APIRouter(prefix="/roles", tags=["roles"])


# Permission endpoints
@router.get("/permissions", response_model=List[Permission])
async def list_permissions(
    resource: Optional[str] = None,
    current_user: Identity = Depends(require_capability("permissions", "read")),
    store: RolePermissionStore = Depends(get_store)
):
    """List permissions, optionally filtered by resource"""
    return store.list_permissions(resource)


@router.get("/resources", response_model=List[str])
async def list_resources(
    current_user: Identity = Depends(require_capability("permissions", "read")),
    store: RolePermissionStore = Depends(get_store)
):
    """Distinct resources that permissions refer to"""
    return store.list_resources()


@router.post("/permissions", response_model=WorkflowResult, status_code=201)
async def create_permission(
    permission_data: PermissionCreate,
    current_user: Identity = Depends(get_current_user),
    workflow: PrivilegeChangeWorkflow = Depends(get_workflow)
):
    """Create a new permission"""
    return workflow.execute(current_user.id, CreatePermission(**permission_data.model_dump()))


# Role endpoints
@router.get("", response_model=List[Role])
async def list_roles(
    current_user: Identity = Depends(require_capability("roles", "read")),
    store: RolePermissionStore = Depends(get_store)
):
    """List all roles"""
    return store.list_roles()


@router.post("", response_model=WorkflowResult, status_code=201)
async def create_role(
    role_data: RoleCreate,
    current_user: Identity = Depends(get_current_user),
    workflow: PrivilegeChangeWorkflow = Depends(get_workflow)
):
    """Create a new role"""
    return workflow.execute(current_user.id, CreateRole(**role_data.model_dump()))


@router.get("/{role_name}/permissions", response_model=RoleWithPermissions)
async def get_role_permissions(
    role_name: str,
    current_user: Identity = Depends(require_capability("roles", "read")),
    store: RolePermissionStore = Depends(get_store)
):
    """Get role with all associated permissions"""
    role = store.get_role(role_name)
    return RoleWithPermissions(
        **role.model_dump(),
        permissions=store.get_permissions_for_role(role.id)
    )


# Role-Permission association endpoints
@router.post("/{role_name}/permissions/{permission_name}", response_model=WorkflowResult)
async def assign_permission_to_role(
    role_name: str,
    permission_name: str,
    current_user: Identity = Depends(get_current_user),
    workflow: PrivilegeChangeWorkflow = Depends(get_workflow)
):
    """Grant a permission to a role"""
    return workflow.execute(
        current_user.id,
        AssignPermission(role_name=role_name, permission_name=permission_name)
    )


@router.delete("/{role_name}/permissions/{permission_name}", response_model=WorkflowResult)
async def revoke_permission_from_role(
    role_name: str,
    permission_name: str,
    current_user: Identity = Depends(get_current_user),
    workflow: PrivilegeChangeWorkflow = Depends(get_workflow)
):
    """Remove a permission from a role"""
    return workflow.execute(
        current_user.id,
        RevokePermission(role_name=role_name, permission_name=permission_name)
    )

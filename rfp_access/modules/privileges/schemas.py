from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, Union, Literal, Any, Dict, Annotated


class WorkflowState(str, Enum):
    REQUESTED = "requested"
    AUTHORIZING = "authorizing"
    DENIED = "denied"
    EXECUTING = "executing"
    COMMITTED = "committed"
    FAILED = "failed"
    LOGGED = "logged"


class CreateRole(BaseModel):
    kind: Literal["create_role"] = "create_role"
    name: str
    description: Optional[str] = None

    @property
    def target(self) -> str:
        return self.name


class CreatePermission(BaseModel):
    kind: Literal["create_permission"] = "create_permission"
    name: str
    resource: str
    action: str
    description: Optional[str] = None

    @property
    def target(self) -> str:
        return self.name


class AssignRole(BaseModel):
    kind: Literal["assign_role"] = "assign_role"
    user_id: str
    role_name: str

    @property
    def target(self) -> str:
        return f"{self.user_id}:{self.role_name}"


class RevokeRole(BaseModel):
    kind: Literal["revoke_role"] = "revoke_role"
    user_id: str
    role_name: str

    @property
    def target(self) -> str:
        return f"{self.user_id}:{self.role_name}"


class AssignPermission(BaseModel):
    kind: Literal["assign_permission"] = "assign_permission"
    role_name: str
    permission_name: str

    @property
    def target(self) -> str:
        return f"{self.role_name}:{self.permission_name}"


class RevokePermission(BaseModel):
    kind: Literal["revoke_permission"] = "revoke_permission"
    role_name: str
    permission_name: str

    @property
    def target(self) -> str:
        return f"{self.role_name}:{self.permission_name}"


class PromoteToSuperAdmin(BaseModel):
    kind: Literal["promote_to_super_admin"] = "promote_to_super_admin"
    user_id: str

    @property
    def target(self) -> str:
        return self.user_id


PrivilegeOperation = Annotated[
    Union[
        CreateRole,
        CreatePermission,
        AssignRole,
        RevokeRole,
        AssignPermission,
        RevokePermission,
        PromoteToSuperAdmin,
    ],
    Field(discriminator="kind"),
]

# Audit event type per operation
EVENT_TYPES = {
    "create_role": "role_created",
    "create_permission": "permission_created",
    "assign_role": "role_assigned",
    "revoke_role": "role_revoked",
    "assign_permission": "permission_assigned",
    "revoke_permission": "permission_revoked",
    "promote_to_super_admin": "admin_promote",
}


class WorkflowResult(BaseModel):
    operation: str
    target: str
    state: WorkflowState
    outcome: WorkflowState
    audit_entry_id: Optional[str] = None
    result: Optional[Dict[str, Any]] = None

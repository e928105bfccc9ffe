"""
Privilege-change workflow.

Every role/permission mutation goes through PrivilegeChangeWorkflow.execute:

    requested -> authorizing -> denied | executing -> committed | failed -> logged

Authorization always finishes before the store is touched, the store call is made at
most once (no silent retries, promotion included), and exactly one audit entry is
written whatever the outcome. An audit write failure never rolls back or masks the
mutation result.
"""

from rfp_access.core.errors import AccessControlError, AuthorizationError
from rfp_access.modules.audit.service import AuditLog
from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from rfp_access.modules.privileges.schemas import (
    CreateRole, CreatePermission, AssignRole, RevokeRole,
    AssignPermission, RevokePermission, PromoteToSuperAdmin,
    PrivilegeOperation, WorkflowState, WorkflowResult, EVENT_TYPES
)
from rfp_access.modules.roles.service import RolePermissionStore
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class PrivilegeChangeWorkflow:
    def __init__(
        self,
        store: RolePermissionStore,
        engine: AuthorizationDecisionEngine,
        audit_log: AuditLog
    ):
        self.store = store
        self.engine = engine
        self.audit_log = audit_log

    def execute(self, caller_id: Optional[str], operation: PrivilegeOperation) -> WorkflowResult:
        event_type = EVENT_TYPES[operation.kind]

        try:
            authorized = self._authorize(caller_id, operation)
        except Exception as e:
            self._log(event_type, caller_id, operation, WorkflowState.FAILED, e)
            raise

        if not authorized:
            logger.warning(
                f"Denied {operation.kind} on {operation.target} for caller {caller_id or 'anonymous'}"
            )
            error = AuthorizationError(self._denial_message(operation), target=operation.target)
            self._log(event_type, caller_id, operation, WorkflowState.DENIED, error)
            raise error

        try:
            result = self._apply(operation)
        except Exception as e:
            if not isinstance(e, AccessControlError):
                logger.exception(f"Unexpected error during {operation.kind} on {operation.target}")
            self._log(event_type, caller_id, operation, WorkflowState.FAILED, e)
            raise

        logger.info(f"{operation.kind} on {operation.target} committed by {caller_id}")
        entry = self._log(event_type, caller_id, operation, WorkflowState.COMMITTED)
        return WorkflowResult(
            operation=operation.kind,
            target=operation.target,
            state=WorkflowState.LOGGED,
            outcome=WorkflowState.COMMITTED,
            audit_entry_id=entry.id if entry else None,
            result=result
        )

    def _requires_super_admin(self, operation: PrivilegeOperation) -> bool:
        if isinstance(operation, PromoteToSuperAdmin):
            return True
        # Granting or stripping the super-admin role by any route needs a super-admin
        if isinstance(operation, (AssignRole, RevokeRole)):
            return operation.role_name.strip() == self.engine.super_admin_role
        return False

    def _authorize(self, caller_id: Optional[str], operation: PrivilegeOperation) -> bool:
        if self._requires_super_admin(operation):
            return self.engine.is_super_admin(caller_id)
        return self.engine.has_admin_access(caller_id)

    def _denial_message(self, operation: PrivilegeOperation) -> str:
        if self._requires_super_admin(operation):
            return "Only super admins can grant or revoke super admin privileges"
        return "Admin access is required to change roles and permissions"

    def _apply(self, operation: PrivilegeOperation) -> Optional[Dict[str, Any]]:
        if isinstance(operation, CreateRole):
            role = self.store.create_role(operation.name, operation.description)
            return role.model_dump(mode="json")
        if isinstance(operation, CreatePermission):
            permission = self.store.create_permission(
                operation.name, operation.resource, operation.action, operation.description
            )
            return permission.model_dump(mode="json")
        if isinstance(operation, AssignRole):
            self.store.assign_role(operation.user_id, operation.role_name)
            self.engine.invalidate(operation.user_id)
            return None
        if isinstance(operation, RevokeRole):
            self.store.revoke_role(operation.user_id, operation.role_name)
            self.engine.invalidate(operation.user_id)
            return None
        if isinstance(operation, AssignPermission):
            self.store.assign_permission_to_role(operation.role_name, operation.permission_name)
            self.engine.invalidate()
            return None
        if isinstance(operation, RevokePermission):
            self.store.revoke_permission_from_role(operation.role_name, operation.permission_name)
            self.engine.invalidate()
            return None
        if isinstance(operation, PromoteToSuperAdmin):
            self.store.assign_role(operation.user_id, self.engine.super_admin_role)
            self.engine.invalidate(operation.user_id)
            return None
        raise TypeError(f"Unsupported privilege operation: {operation!r}")

    def _log(
        self,
        event_type: str,
        caller_id: Optional[str],
        operation: PrivilegeOperation,
        outcome: WorkflowState,
        error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {
            "operation": operation.kind,
            "target": operation.target,
            "outcome": outcome.value,
        }
        if error is not None:
            if isinstance(error, AccessControlError):
                details["error"] = {"reason": error.reason, "message": error.message}
            else:
                details["error"] = {"reason": "unexpected", "message": type(error).__name__}
        return self.audit_log.record(event_type, caller_id, details)

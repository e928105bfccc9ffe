"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from rfp_access.database.supabase_client import get_supabase, get_service_supabase
from rfp_access.modules.audit.service import AuditLog
from rfp_access.modules.auth.schemas import Identity
from rfp_access.modules.auth.service import AuthService
from rfp_access.modules.authorization.page_gate import PageGate
from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from rfp_access.modules.privileges.service import PrivilegeChangeWorkflow
from rfp_access.modules.roles.service import RolePermissionStore, SupabaseRolePermissionStore
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_store(supabase: Client = Depends(get_supabase)) -> RolePermissionStore:
    return SupabaseRolePermissionStore(supabase)


def get_audit_log(supabase: Client = Depends(get_service_supabase)) -> AuditLog:
    return AuditLog(supabase)


def get_engine(store: RolePermissionStore = Depends(get_store)) -> AuthorizationDecisionEngine:
    """One engine per request; FastAPI caches the dependency, so its lookups are request-scoped."""
    return AuthorizationDecisionEngine(store)


def get_page_gate(engine: AuthorizationDecisionEngine = Depends(get_engine)) -> PageGate:
    return PageGate(engine)


def get_workflow(
    store: RolePermissionStore = Depends(get_store),
    engine: AuthorizationDecisionEngine = Depends(get_engine),
    audit_log: AuditLog = Depends(get_audit_log)
) -> PrivilegeChangeWorkflow:
    return PrivilegeChangeWorkflow(store, engine, audit_log)


def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    """Extract JWT token from Authorization header"""
    return credentials.credentials if credentials else None


def get_optional_user(
    token: Optional[str] = Depends(get_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Identity]:
    """Identity from the bearer token, or None when it is missing or cannot be resolved"""
    if not token:
        return None
    try:
        return auth_service.get_current_user(token)
    except HTTPException:
        return None


def get_current_user(user: Optional[Identity] = Depends(get_optional_user)) -> Identity:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return user


def require_admin_access(
    user: Identity = Depends(get_current_user),
    engine: AuthorizationDecisionEngine = Depends(get_engine)
) -> Identity:
    """Dependency allowing super admins and admins"""
    if not engine.has_admin_access(user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user


def require_super_admin(
    user: Identity = Depends(get_current_user),
    engine: AuthorizationDecisionEngine = Depends(get_engine)
) -> Identity:
    """Dependency allowing super admins (developer role) only"""
    if not engine.is_super_admin(user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required"
        )
    return user


def require_capability(resource: str, action: str):
    """Factory function to create capability check dependency"""
    def check_capability(
        user: Identity = Depends(get_current_user),
        engine: AuthorizationDecisionEngine = Depends(get_engine)
    ) -> Identity:
        if not engine.has_capability(user.id, resource, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {resource}:{action}"
            )
        return user
    return check_capability

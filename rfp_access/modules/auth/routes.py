from fastapi import APIRouter, Depends, Request
from rfp_access.modules.auth.schemas import Identity, SessionResponse, MeResponse
from rfp_access.modules.auth.service import AuthService
from rfp_access.modules.audit.service import AuditLog
from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from rfp_access.core.dependencies import (
    get_auth_service, get_audit_log, get_current_user, get_engine, get_token
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/session", response_model=SessionResponse, status_code=201)
async def register_session(
    request: Request,
    current_user: Identity = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
    audit_log: AuditLog = Depends(get_audit_log)
):
    """Record a login once the front end has exchanged the OAuth code for a session"""
    client_host = request.client.host if request.client else None
    service.record_login(current_user, audit_log, client_host)
    return SessionResponse(user_id=current_user.id, email=current_user.email, message="Session registered")


@router.post("/logout", status_code=200)
async def logout(
    current_user: Identity = Depends(get_current_user),
    token: str = Depends(get_token),
    service: AuthService = Depends(get_auth_service),
    audit_log: AuditLog = Depends(get_audit_log)
):
    """Logout and invalidate token"""
    service.logout(current_user, token, audit_log)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(
    current_user: Identity = Depends(get_current_user),
    engine: AuthorizationDecisionEngine = Depends(get_engine)
):
    """Get current authenticated user, their roles and effective permissions (for frontend UI)."""
    return MeResponse(
        id=current_user.id,
        email=current_user.email,
        display_name=current_user.display_name,
        roles=engine.get_effective_role_summary(current_user.id),
        permissions=sorted({p.name for p in engine.effective_permissions(current_user.id)})
    )

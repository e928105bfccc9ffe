from fastapi import APIRouter, Depends
from rfp_access.modules.auth.schemas import Identity
from rfp_access.modules.authorization.page_gate import PageGate
from rfp_access.modules.authorization.schemas import RoleSummary, CapabilityCheckResponse, PageAccessResponse
from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from rfp_access.core.dependencies import (
    get_current_user, get_optional_user, get_engine, get_page_gate, require_admin_access
)
from typing import Optional

router = APIRouter(prefix="/authz", tags=["authorization"])


@router.get("/check", response_model=CapabilityCheckResponse)
async def check_capability(
    resource: str,
    action: str,
    current_user: Identity = Depends(get_current_user),
    engine: AuthorizationDecisionEngine = Depends(get_engine)
):
    """Whether the caller may perform action on resource"""
    return CapabilityCheckResponse(
        resource=resource,
        action=action,
        allowed=engine.has_capability(current_user.id, resource, action)
    )


@router.get("/page-access", response_model=PageAccessResponse)
async def page_access(
    path: str,
    current_user: Optional[Identity] = Depends(get_optional_user),
    gate: PageGate = Depends(get_page_gate)
):
    """Page gate for the web front end: allowed, or where to redirect"""
    return gate.check(current_user.id if current_user else None, path)


@router.get("/users/{user_id}/summary", response_model=RoleSummary)
async def get_user_summary(
    user_id: str,
    current_user: Identity = Depends(require_admin_access),
    engine: AuthorizationDecisionEngine = Depends(get_engine)
):
    """Role summary for any user (admin only)"""
    return engine.get_effective_role_summary(user_id)

from pydantic import BaseModel
from typing import Optional, List
from rfp_access.modules.roles.schemas import Role


class RoleSummary(BaseModel):
    roles: List[Role]
    is_super_admin: bool
    is_admin: bool
    primary_role: Optional[str] = None


class CapabilityCheckResponse(BaseModel):
    resource: str
    action: str
    allowed: bool


class PageAccessResponse(BaseModel):
    path: str
    allowed: bool
    redirect_to: Optional[str] = None

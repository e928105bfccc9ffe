from pydantic import BaseModel
from typing import Optional, List
from rfp_access.modules.authorization.schemas import RoleSummary


class Identity(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class SessionResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    message: str


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    roles: RoleSummary
    permissions: List[str]

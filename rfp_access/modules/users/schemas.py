from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime


class UserProfile(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.email or self.id


class UserWithRoles(UserProfile):
    role_ids: List[str] = []
    primary_role: Optional[str] = None
    is_super_admin: bool = False


class PromoteRequest(BaseModel):
    # Set by the admin UI once the operator has confirmed the promotion dialog
    confirm: Literal[True]

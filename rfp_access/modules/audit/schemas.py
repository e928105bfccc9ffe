from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime, date


class AuditLogEntry(BaseModel):
    id: str
    event_type: str
    user_id: Optional[str] = None
    created_at: datetime
    details: Dict[str, Any] = {}

    class Config:
        from_attributes = True


# Event types are snake_case identifiers. PostgREST reads "*" in a like filter as "%",
# so wildcard characters are rejected here rather than escaped.
EVENT_TYPE_PREFIX_PATTERN = r"^[A-Za-z0-9_.:-]*$"


class AuditQuery(BaseModel):
    event_type_prefix: Optional[str] = Field(None, pattern=EVENT_TYPE_PREFIX_PATTERN)
    user_id: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None


class AuditSummary(BaseModel):
    total: int
    event_types: List[str]
    days_with_logs: int
    admin_actions: int


class AuditDay(BaseModel):
    day: date
    entries: List[AuditLogEntry]

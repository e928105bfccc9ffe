from pydantic import BaseModel
from typing import List
from rfp_access.modules.audit.schemas import AuditSummary, AuditDay


class AdminStats(BaseModel):
    users: int
    roles: int
    permissions: int
    admins: int
    super_admins: int


class AuditReport(BaseModel):
    summary: AuditSummary
    days: List[AuditDay]

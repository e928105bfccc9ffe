from fastapi import APIRouter, Depends, Query
from rfp_access.modules.admin.schemas import AdminStats, AuditReport
from rfp_access.modules.admin.service import AdminService
from rfp_access.modules.audit.schemas import AuditLogEntry, AuditQuery, EVENT_TYPE_PREFIX_PATTERN
from rfp_access.modules.audit.service import AuditLog, summarize, group_by_day
from rfp_access.modules.auth.schemas import Identity
from rfp_access.modules.roles.service import RolePermissionStore
from rfp_access.core.dependencies import (
    get_audit_log, get_store, require_admin_access, require_super_admin
)
from datetime import datetime
from typing import List, Optional

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(store: RolePermissionStore = Depends(get_store)) -> AdminService:
    return AdminService(store)


@router.get("/stats", response_model=AdminStats)
async def get_stats(
    current_user: Identity = Depends(require_admin_access),
    service: AdminService = Depends(get_admin_service)
):
    """Admin dashboard counters"""
    return service.get_stats()


@router.get("/logs", response_model=List[AuditLogEntry])
async def list_logs(
    event_type_prefix: Optional[str] = Query(None, pattern=EVENT_TYPE_PREFIX_PATTERN),
    user_id: Optional[str] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = Query(100, ge=1),
    current_user: Identity = Depends(require_super_admin),
    audit_log: AuditLog = Depends(get_audit_log)
):
    """Audit log entries, newest first (super admin only)"""
    filters = AuditQuery(event_type_prefix=event_type_prefix, user_id=user_id, since=since, until=until)
    return audit_log.query(filters, limit)


@router.get("/logs/summary", response_model=AuditReport)
async def logs_summary(
    limit: int = Query(100, ge=1),
    current_user: Identity = Depends(require_super_admin),
    audit_log: AuditLog = Depends(get_audit_log)
):
    """Statistics and per-day grouping of the most recent entries (super admin only)"""
    entries = audit_log.query(AuditQuery(), limit)
    return AuditReport(summary=summarize(entries), days=group_by_day(entries))

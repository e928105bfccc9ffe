from supabase import Client
from rfp_access.config import settings
from rfp_access.core.errors import StoreError
from rfp_access.modules.audit.schemas import AuditLogEntry, AuditQuery, AuditSummary, AuditDay
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class AuditLog:
    """Append-only ledger of security-relevant events, backed by the auth_logs table."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record(
        self,
        event_type: str,
        user_id: Optional[str],
        details: Optional[Dict[str, Any]] = None
    ) -> Optional[AuditLogEntry]:
        """Append an entry. Never raises: a failed write is logged and None is returned."""
        try:
            result = self.supabase.table("auth_logs").insert({
                "event_type": event_type,
                "user_id": user_id,
                "details": details or {}
            }).execute()
            if not result.data:
                logger.error(f"Audit write returned no row: event_type={event_type} user_id={user_id}")
                return None
            return AuditLogEntry(**result.data[0])
        except Exception:
            logger.exception(
                "Audit write failed: event_type=%s user_id=%s details=%s",
                event_type, user_id, details
            )
            return None

    def query(self, filters: Optional[AuditQuery] = None, limit: int = 100) -> List[AuditLogEntry]:
        """Entries matching the filters, newest first"""
        filters = filters or AuditQuery()
        limit = max(1, min(limit, settings.audit_query_max_limit))
        query = self.supabase.table("auth_logs").select("*")
        if filters.event_type_prefix:
            query = query.like("event_type", f"{escape_like(filters.event_type_prefix)}%")
        if filters.user_id:
            query = query.eq("user_id", filters.user_id)
        if filters.since:
            query = query.gte("created_at", filters.since.isoformat())
        if filters.until:
            query = query.lte("created_at", filters.until.isoformat())
        try:
            result = query.order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            logger.error(f"Error querying audit log: {e}")
            raise StoreError("audit query failed") from e
        return [AuditLogEntry(**entry) for entry in result.data]


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value only matches itself"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def is_admin_action(entry: AuditLogEntry) -> bool:
    return "admin" in entry.event_type or "role" in entry.event_type


def summarize(entries: List[AuditLogEntry]) -> AuditSummary:
    return AuditSummary(
        total=len(entries),
        event_types=sorted({entry.event_type for entry in entries}),
        days_with_logs=len({entry.created_at.date() for entry in entries}),
        admin_actions=sum(1 for entry in entries if is_admin_action(entry))
    )


def group_by_day(entries: List[AuditLogEntry]) -> List[AuditDay]:
    """Group entries by calendar day, newest day first; entry order is kept within a day."""
    days: Dict[Any, List[AuditLogEntry]] = {}
    for entry in entries:
        days.setdefault(entry.created_at.date(), []).append(entry)
    return [AuditDay(day=day, entries=days[day]) for day in sorted(days, reverse=True)]

"""Small helpers shared by the API and workflow tests."""

from __future__ import annotations

from typing import Optional

from tests.fake_supabase import FakeSupabase


def auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}"}


def audit_entries(supabase: FakeSupabase, event_type: Optional[str] = None) -> list[dict]:
    rows = supabase.tables["auth_logs"]
    if event_type is None:
        return list(rows)
    return [row for row in rows if row["event_type"] == event_type]

# Supabase tables: auth_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

auth_logs:
- id: uuid (primary key)
- event_type: text (not null) - e.g. "login", "role_assigned", "admin_promote"
- user_id: uuid (nullable) - acting user; null for system-initiated events
- details: jsonb (nullable) - structured payload
- created_at: timestamp (default: now())

Append-only: the application only ever inserts and selects. No UPDATE or DELETE
grants should exist for the authenticated role.
"""

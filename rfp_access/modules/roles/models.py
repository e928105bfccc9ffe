# Supabase tables: roles, permissions, user_roles, role_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

roles:
- id: uuid (primary key)
- name: text (not null, unique) - e.g., "developer", "admin", "manager", "user"
- description: text (nullable)
- created_at: timestamp (default: now())

permissions:
- id: uuid (primary key)
- name: text (not null, unique) - e.g., "rfps:read"
- resource: text (not null) - free-form, e.g. "rfps", "users"
- action: text (not null) - free-form, e.g. "read", "delete"
- description: text (nullable)
- created_at: timestamp (default: now())
- no unique constraint on (resource, action)

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- role_id: uuid (foreign key to roles.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (user_id, role_id)

role_permissions:
- id: uuid (primary key)
- role_id: uuid (foreign key to roles.id, not null)
- permission_id: uuid (foreign key to permissions.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (role_id, permission_id)
"""

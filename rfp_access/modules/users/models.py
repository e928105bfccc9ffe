# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Profiles are written by the identity layer; this package only reads them
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (nullable) - synced from auth.users
- first_name: text (nullable)
- last_name: text (nullable)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())

Note: a profile row is created on first successful authentication and is never
deleted here. Role assignments reference it through user_roles.user_id.
"""

# Supabase Auth
# Identity is owned by Supabase Auth; the OAuth handshake happens in the web front end.
# This package only resolves a bearer token to a user and records session events.

"""
Supabase Auth provides:
- auth.get_user(jwt) - Resolve the current user from a JWT access token
- auth.sign_out() - Invalidate the server-side session

Session events ("login", "logout") are written to the auth_logs table
(see rfp_access/modules/audit/models.py).
"""

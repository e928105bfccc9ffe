import hashlib
import time
from supabase import Client
from rfp_access.config.settings import settings
from rfp_access.modules.auth.schemas import Identity
from rfp_access.modules.audit.service import AuditLog
from fastapi import HTTPException
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


def _cache_identity(cache_key: str, identity: Identity, now: float):
    """Insert an entry; when full, drop expired entries first, then the oldest ones"""
    if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
        for key in [k for k, (_, expiry) in _AUTH_USER_CACHE.items() if expiry <= now]:
            del _AUTH_USER_CACHE[key]
    while len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
        del _AUTH_USER_CACHE[next(iter(_AUTH_USER_CACHE))]
    _AUTH_USER_CACHE[cache_key] = (identity, now + settings.auth_cache_ttl_sec)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_user(self, token: str) -> Identity:
        """Resolve a Supabase access token to an identity. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                identity, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return identity
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            metadata = user.user_metadata or {}
            identity = Identity(
                id=user.id,
                email=user.email,
                display_name=metadata.get("full_name") or metadata.get("name") or user.email
            )
            _cache_identity(cache_key, identity, now)
            return identity
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            logger.error(f"Authentication failed: {e}")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def record_login(self, identity: Identity, audit_log: AuditLog, client_host: Optional[str] = None):
        """Audit a session registered by the front end after the OAuth code exchange"""
        audit_log.record("login", identity.id, {"email": identity.email, "client_host": client_host})

    def logout(self, identity: Identity, token: str, audit_log: AuditLog) -> bool:
        """Sign out with Supabase Auth and audit it"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        audit_log.record("logout", identity.id, {"email": identity.email})
        try:
            # Supabase Auth tokens are stateless JWTs, so logout is mainly client-side
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False

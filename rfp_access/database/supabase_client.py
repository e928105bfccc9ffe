from supabase import create_client, Client
from rfp_access.config import settings
from typing import Dict
import logging

logger = logging.getLogger(__name__)

ANON = "anon"
SERVICE = "service"


class SupabaseClients:
    """Process-wide Supabase clients, created on first use.

    The anon client runs under the caller's row-level security policies. The service
    client uses the service_role key and is reserved for audit writes and seeding, so
    that the append-only auth_logs table can stay closed to end users.
    """
    _clients: Dict[str, Client] = {}

    @classmethod
    def get(cls, kind: str = ANON) -> Client:
        if kind not in cls._clients:
            cls._clients[kind] = cls._create(kind)
        return cls._clients[kind]

    @classmethod
    def _create(cls, kind: str) -> Client:
        if kind == SERVICE:
            if settings.supabase_service_role_key:
                return create_client(settings.supabase_url, settings.supabase_service_role_key)
            logger.warning("SUPABASE_SERVICE_ROLE_KEY is not set; audit writes use the anon key")
            return cls.get(ANON)
        return create_client(settings.supabase_url, settings.supabase_key)

    @classmethod
    def reset(cls):
        cls._clients.clear()


def get_supabase() -> Client:
    return SupabaseClients.get(ANON)


def get_service_supabase() -> Client:
    return SupabaseClients.get(SERVICE)

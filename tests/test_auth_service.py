"""Tests for Supabase token resolution and session auditing."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException

from rfp_access.config.settings import settings
from rfp_access.modules.audit.service import AuditLog
from rfp_access.modules.auth.schemas import Identity
from rfp_access.modules.auth.service import AuthService, clear_auth_cache
from tests.fake_supabase import FakeSupabase
from tests.helpers import audit_entries


def auth_user(user_id: str = "user-1", email: str = "ada@example.com", **metadata: str) -> SimpleNamespace:
    return SimpleNamespace(user=SimpleNamespace(id=user_id, email=email, user_metadata=metadata))


@pytest.fixture(autouse=True)
def empty_cache() -> Iterator[None]:
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def supabase_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(supabase_client: MagicMock) -> AuthService:
    return AuthService(supabase_client)


class TestGetCurrentUser:
    def test_resolves_identity(self, service: AuthService, supabase_client: MagicMock) -> None:
        supabase_client.auth.get_user.return_value = auth_user(full_name="Ada Lovelace")

        identity = service.get_current_user("token-1")

        assert identity == Identity(id="user-1", email="ada@example.com", display_name="Ada Lovelace")
        supabase_client.auth.get_user.assert_called_once_with(jwt="token-1")

    def test_display_name_falls_back_to_email(self, service: AuthService, supabase_client: MagicMock) -> None:
        supabase_client.auth.get_user.return_value = auth_user()
        assert service.get_current_user("token-1").display_name == "ada@example.com"

    def test_identity_is_cached_per_token(self, service: AuthService, supabase_client: MagicMock) -> None:
        supabase_client.auth.get_user.return_value = auth_user()

        service.get_current_user("token-1")
        service.get_current_user("token-1")
        service.get_current_user("token-2")

        assert supabase_client.auth.get_user.call_count == 2

    def test_missing_user_is_unauthorized(self, service: AuthService, supabase_client: MagicMock) -> None:
        supabase_client.auth.get_user.return_value = SimpleNamespace(user=None)
        with pytest.raises(HTTPException) as exc_info:
            service.get_current_user("token-1")
        assert exc_info.value.status_code == 401

    def test_expired_token(self, service: AuthService, supabase_client: MagicMock) -> None:
        supabase_client.auth.get_user.side_effect = Exception("JWT expired")
        with pytest.raises(HTTPException) as exc_info:
            service.get_current_user("token-1")
        assert exc_info.value.detail == "Invalid or expired token"

    def test_auth_outage_is_unauthorized(self, service: AuthService, supabase_client: MagicMock) -> None:
        supabase_client.auth.get_user.side_effect = ConnectionError("refused")
        with pytest.raises(HTTPException) as exc_info:
            service.get_current_user("token-1")
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Authentication failed"


class TestIdentityCache:
    @pytest.fixture(autouse=True)
    def small_cache(self) -> Iterator[None]:
        with patch("rfp_access.modules.auth.service._AUTH_CACHE_MAX_SIZE", 2):
            yield

    def test_full_cache_drops_oldest_entry(self, service: AuthService, supabase_client: MagicMock) -> None:
        supabase_client.auth.get_user.return_value = auth_user()

        for token in ("token-1", "token-2", "token-3"):
            service.get_current_user(token)
        service.get_current_user("token-2")
        service.get_current_user("token-3")
        assert supabase_client.auth.get_user.call_count == 3

        service.get_current_user("token-1")
        assert supabase_client.auth.get_user.call_count == 4

    def test_full_cache_drops_expired_entries_first(
        self, service: AuthService, supabase_client: MagicMock
    ) -> None:
        supabase_client.auth.get_user.return_value = auth_user()

        with patch("rfp_access.modules.auth.service.time.monotonic", return_value=0.0):
            with patch.object(settings, "auth_cache_ttl_sec", 100):
                service.get_current_user("token-1")
            with patch.object(settings, "auth_cache_ttl_sec", 10):
                service.get_current_user("token-2")
        with patch("rfp_access.modules.auth.service.time.monotonic", return_value=20.0):
            service.get_current_user("token-3")
            service.get_current_user("token-1")
            assert supabase_client.auth.get_user.call_count == 3

            service.get_current_user("token-2")
            assert supabase_client.auth.get_user.call_count == 4


class TestSessionAudit:
    @pytest.fixture
    def audit_log(self) -> AuditLog:
        return AuditLog(FakeSupabase())

    def test_record_login(self, service: AuthService, audit_log: AuditLog) -> None:
        service.record_login(Identity(id="user-1", email="ada@example.com"), audit_log, "10.0.0.1")

        entries = audit_entries(audit_log.supabase, "login")
        assert entries[0]["user_id"] == "user-1"
        assert entries[0]["details"] == {"email": "ada@example.com", "client_host": "10.0.0.1"}

    def test_logout_drops_cached_identity(
        self, service: AuthService, supabase_client: MagicMock, audit_log: AuditLog
    ) -> None:
        supabase_client.auth.get_user.return_value = auth_user()
        identity = service.get_current_user("token-1")

        assert service.logout(identity, "token-1", audit_log) is True
        service.get_current_user("token-1")

        assert supabase_client.auth.get_user.call_count == 2
        supabase_client.auth.sign_out.assert_called_once()
        assert len(audit_entries(audit_log.supabase, "logout")) == 1

    def test_logout_survives_sign_out_failure(
        self, service: AuthService, supabase_client: MagicMock, audit_log: AuditLog
    ) -> None:
        supabase_client.auth.sign_out.side_effect = RuntimeError("network down")
        assert service.logout(Identity(id="user-1"), "token-1", audit_log) is False
        assert len(audit_entries(audit_log.supabase, "logout")) == 1

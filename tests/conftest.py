"""Shared pytest fixtures: an in-memory Supabase seeded with the default roles and a few users."""

from __future__ import annotations

from typing import Iterator, Optional

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from rfp_access.core.dependencies import get_optional_user, get_token
from rfp_access.database.supabase_client import get_service_supabase, get_supabase
from rfp_access.main import app
from rfp_access.modules.audit.service import AuditLog
from rfp_access.modules.auth.schemas import Identity
from rfp_access.modules.auth.service import clear_auth_cache
from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from rfp_access.modules.privileges.service import PrivilegeChangeWorkflow
from rfp_access.modules.roles.service import SupabaseRolePermissionStore
from rfp_access.scripts.seed_roles import seed_permissions, seed_roles
from tests.fake_supabase import FakeSupabase

# user id -> roles held after seeding
USERS = {
    "dev-1": ["developer"],
    "admin-1": ["admin"],
    "manager-1": ["manager"],
    "user-1": ["user"],
    "nobody": [],
}


@pytest.fixture
def supabase() -> FakeSupabase:
    """Fake Supabase with the default permission matrix and one user per role."""
    fake = FakeSupabase()
    seed_permissions(fake)
    seed_roles(fake)
    store = SupabaseRolePermissionStore(fake)
    for user_id, role_names in USERS.items():
        fake.add_profile(user_id, first_name=user_id.split("-")[0].capitalize())
        for role_name in role_names:
            store.assign_role(user_id, role_name)
    # seeding is audited; tests start from an empty trail
    fake.tables["auth_logs"].clear()
    return fake


@pytest.fixture
def store(supabase: FakeSupabase) -> SupabaseRolePermissionStore:
    return SupabaseRolePermissionStore(supabase)


@pytest.fixture
def audit_log(supabase: FakeSupabase) -> AuditLog:
    return AuditLog(supabase)


@pytest.fixture
def engine(store: SupabaseRolePermissionStore) -> AuthorizationDecisionEngine:
    return AuthorizationDecisionEngine(store)


@pytest.fixture
def workflow(
    store: SupabaseRolePermissionStore,
    engine: AuthorizationDecisionEngine,
    audit_log: AuditLog,
) -> PrivilegeChangeWorkflow:
    return PrivilegeChangeWorkflow(store, engine, audit_log)


@pytest.fixture
def client(supabase: FakeSupabase) -> Iterator[TestClient]:
    """TestClient where the bearer token is taken as the user id of an existing profile."""

    def identity_from_token(token: Optional[str] = Depends(get_token)) -> Optional[Identity]:
        for profile in supabase.tables["profiles"]:
            if profile["id"] == token:
                return Identity(id=token, email=profile["email"], display_name=profile["email"])
        return None

    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_service_supabase] = lambda: supabase
    app.dependency_overrides[get_optional_user] = identity_from_token
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()

"""Tests for the roles and permissions seed script."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from rfp_access.config.roles_config import PERMISSION_MATRIX, get_permission_matrix
from rfp_access.core.errors import NotFoundError, StoreError
from rfp_access.modules.audit.service import AuditLog
from rfp_access.modules.authorization.service import AuthorizationDecisionEngine
from rfp_access.modules.privileges.schemas import AssignPermission, RevokePermission
from rfp_access.modules.privileges.service import PrivilegeChangeWorkflow
from rfp_access.modules.roles.service import SupabaseRolePermissionStore
from rfp_access.scripts import seed_roles as seed
from tests.fake_supabase import FakeSupabase
from tests.helpers import audit_entries


def grants(store: SupabaseRolePermissionStore, role_name: str) -> set[str]:
    return {p.name for p in store.get_permissions_for_role(store.get_role(role_name).id)}


class TestPermissionMatrix:
    def test_every_resource_action_is_a_permission(self) -> None:
        names = {p["name"] for p in PERMISSION_MATRIX["permissions"]}
        assert len(names) == 28
        assert "rfps:read" in names

    def test_developer_has_no_explicit_grants(self) -> None:
        roles = {r["name"]: r for r in get_permission_matrix()["roles"]}
        assert roles["developer"]["permissions"] == []
        assert "users:delete" in roles["admin"]["permissions"]
        assert "users:delete" not in roles["manager"]["permissions"]


class TestSeed:
    def test_seed_empty_database(self) -> None:
        fake = FakeSupabase()
        assert seed.seed_permissions(fake) == 28
        assert seed.seed_roles(fake) == 4

        store = SupabaseRolePermissionStore(fake)
        assert [r.name for r in store.list_roles()] == ["developer", "admin", "manager", "user"]
        assert grants(store, "developer") == set()
        assert "currencies:read" in grants(store, "user")

    def test_every_seed_change_is_audited_as_system(self) -> None:
        fake = FakeSupabase()
        seed.seed_permissions(fake)
        seed.seed_roles(fake)

        entries = audit_entries(fake)
        assert len(audit_entries(fake, "permission_created")) == 28
        assert len(audit_entries(fake, "role_created")) == 4
        assert len(audit_entries(fake, "permission_assigned")) == len(fake.tables["role_permissions"])
        assert len(entries) == 28 + 4 + len(fake.tables["role_permissions"])
        assert all(e["user_id"] is None for e in entries)
        assert all(e["details"]["outcome"] == "committed" for e in entries)
        assert audit_entries(fake, "role_created")[0]["details"] == {
            "operation": "create_role", "target": "developer", "outcome": "committed"
        }

    def test_reseed_is_idempotent(self) -> None:
        fake = FakeSupabase()
        seed.seed_permissions(fake)
        seed.seed_roles(fake)
        edges = len(fake.tables["role_permissions"])
        entries = len(audit_entries(fake))

        assert seed.seed_permissions(fake) == 0
        assert seed.seed_roles(fake) == 0

        assert len(fake.tables["permissions"]) == 28
        assert len(fake.tables["roles"]) == 4
        assert len(fake.tables["role_permissions"]) == edges
        assert len(audit_entries(fake)) == entries

    def test_reseed_keeps_grants_made_by_admins(
        self, supabase: FakeSupabase, workflow: PrivilegeChangeWorkflow
    ) -> None:
        workflow.execute("admin-1", AssignPermission(role_name="user", permission_name="users:read"))
        entries = len(audit_entries(supabase))

        seed.seed_permissions(supabase)
        seed.seed_roles(supabase)

        engine = AuthorizationDecisionEngine(SupabaseRolePermissionStore(supabase))
        assert engine.has_capability("user-1", "users", "read") is True
        assert len(audit_entries(supabase)) == entries

    def test_prune_revokes_and_audits_unconfigured_grants(
        self, supabase: FakeSupabase, workflow: PrivilegeChangeWorkflow
    ) -> None:
        workflow.execute("admin-1", AssignPermission(role_name="user", permission_name="users:read"))

        seed.seed_roles(supabase, prune=True)

        engine = AuthorizationDecisionEngine(SupabaseRolePermissionStore(supabase))
        assert engine.has_capability("user-1", "users", "read") is False
        revoked = audit_entries(supabase, "permission_revoked")
        assert len(revoked) == 1
        assert revoked[0]["user_id"] is None
        assert revoked[0]["details"] == {
            "operation": "revoke_permission", "target": "user:users:read", "outcome": "committed"
        }

    def test_reseed_restores_missing_grants_with_audit(
        self, supabase: FakeSupabase, workflow: PrivilegeChangeWorkflow
    ) -> None:
        workflow.execute("admin-1", RevokePermission(role_name="user", permission_name="rfps:read"))

        seed.seed_roles(supabase)

        restored = audit_entries(supabase, "permission_assigned")
        assert [e["details"]["target"] for e in restored] == ["user:rfps:read"]
        assert restored[0]["user_id"] is None

    def test_reseed_keeps_user_assignments(self, supabase: FakeSupabase, store: SupabaseRolePermissionStore) -> None:
        seed.seed_roles(supabase)
        assert [r.name for r in store.get_roles_for_user("admin-1")] == ["admin"]

    def test_failed_change_is_audited_and_raised(self, supabase: FakeSupabase) -> None:
        def apply() -> None:
            raise StoreError("assign permission")

        with pytest.raises(StoreError):
            seed.record_system_change(
                AuditLog(supabase), "permission_assigned", "assign_permission", "user:rfps:read", apply
            )

        entries = audit_entries(supabase, "permission_assigned")
        assert len(entries) == 1
        assert entries[0]["user_id"] is None
        assert entries[0]["details"]["outcome"] == "failed"
        assert entries[0]["details"]["error"]["reason"] == "store_unavailable"


class TestBootstrapDeveloper:
    def test_grants_developer_and_audits_as_system(
        self, supabase: FakeSupabase, store: SupabaseRolePermissionStore
    ) -> None:
        seed.bootstrap_developer(supabase, "nobody")

        assert [r.name for r in store.get_roles_for_user("nobody")] == ["developer"]
        entries = audit_entries(supabase, "bootstrap_developer")
        assert len(entries) == 1
        assert entries[0]["user_id"] is None
        assert entries[0]["details"] == {
            "operation": "bootstrap_developer", "target": "nobody", "outcome": "committed"
        }

    def test_unknown_user_fails_and_is_audited(self, supabase: FakeSupabase) -> None:
        with pytest.raises(NotFoundError):
            seed.bootstrap_developer(supabase, "ghost")
        entries = audit_entries(supabase, "bootstrap_developer")
        assert entries[0]["details"]["outcome"] == "failed"
        assert entries[0]["details"]["error"]["reason"] == "not_found"


class TestMain:
    def test_main_seeds_and_bootstraps(self) -> None:
        fake = FakeSupabase()
        fake.add_profile("first-dev")
        with patch("rfp_access.scripts.seed_roles.get_service_supabase", return_value=fake):
            seed.main(["--bootstrap-developer", "first-dev"])

        store = SupabaseRolePermissionStore(fake)
        assert [r.name for r in store.get_roles_for_user("first-dev")] == ["developer"]

    def test_main_exits_on_failure(self) -> None:
        fake = FakeSupabase()
        fake.fail("permissions")
        with patch("rfp_access.scripts.seed_roles.get_service_supabase", return_value=fake):
            with pytest.raises(SystemExit) as exc_info:
                seed.main([])
        assert exc_info.value.code == 1

    def test_main_prune_flag(self, supabase: FakeSupabase, store: SupabaseRolePermissionStore) -> None:
        store.assign_permission_to_role("user", "users:read")
        with patch("rfp_access.scripts.seed_roles.get_service_supabase", return_value=supabase):
            seed.main(["--prune"])

        assert "users:read" not in grants(store, "user")
        assert len(audit_entries(supabase, "permission_revoked")) == 1

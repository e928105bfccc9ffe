"""
Seed Roles and Permissions Script
Creates the roles and permissions from the config and grants each role its configured
permissions. Every change goes through the role/permission store and is audited as a
system action (user_id null), the same way the privilege-change workflow audits.

Re-seeding is additive: grants added by admins are kept. Pass --prune to also revoke
grants that are not in the config; each revocation is audited.

It can also bootstrap the first developer (super admin), which is the only way to
obtain that role without an existing super admin granting it.

    python -m rfp_access.scripts.seed_roles [--prune] [--bootstrap-developer USER_ID]
"""

import argparse
import sys

from rfp_access.config import settings
from rfp_access.config.roles_config import PERMISSION_MATRIX
from rfp_access.database.supabase_client import get_service_supabase
from rfp_access.modules.audit.service import AuditLog
from rfp_access.modules.privileges.schemas import (
    CreateRole, CreatePermission, AssignPermission, RevokePermission, EVENT_TYPES
)
from rfp_access.modules.roles.service import RolePermissionStore, SupabaseRolePermissionStore
from rfp_access.core.errors import AccessControlError
from supabase import Client
from typing import Callable, List
import logging

logger = logging.getLogger(__name__)


def record_system_change(
    audit_log: AuditLog,
    event_type: str,
    operation: str,
    target: str,
    apply: Callable
):
    """Run one store mutation and write exactly one system audit entry for it"""
    details = {"operation": operation, "target": target}
    try:
        result = apply()
    except AccessControlError as e:
        audit_log.record(event_type, None, {
            **details, "outcome": "failed", "error": {"reason": e.reason, "message": e.message}
        })
        raise
    audit_log.record(event_type, None, {**details, "outcome": "committed"})
    return result


def _apply_operation(audit_log: AuditLog, operation, apply: Callable):
    return record_system_change(
        audit_log, EVENT_TYPES[operation.kind], operation.kind, operation.target, apply
    )


def seed_permissions(supabase: Client, matrix=PERMISSION_MATRIX) -> int:
    """Create the permissions from config that do not exist yet"""
    logger.info("Seeding permissions...")
    store = SupabaseRolePermissionStore(supabase)
    audit_log = AuditLog(supabase)

    existing = {permission.name for permission in store.list_permissions()}
    created_count = 0
    for perm in matrix["permissions"]:
        if perm["name"] in existing:
            continue
        operation = CreatePermission(
            name=perm["name"],
            resource=perm["resource"],
            action=perm["action"],
            description=perm["description"]
        )
        _apply_operation(audit_log, operation, lambda: store.create_permission(
            operation.name, operation.resource, operation.action, operation.description
        ))
        created_count += 1
        logger.debug(f"Created permission: {perm['name']}")

    logger.info(f"Permissions seeded: {created_count} created, {len(existing)} already present")
    return created_count


def seed_roles(supabase: Client, matrix=PERMISSION_MATRIX, prune: bool = False) -> int:
    """Create the roles from config that do not exist yet and add their configured grants"""
    logger.info("Seeding roles...")
    store = SupabaseRolePermissionStore(supabase)
    audit_log = AuditLog(supabase)

    existing = {role.name: role for role in store.list_roles()}
    available = {permission.name for permission in store.list_permissions()}
    created_count = 0
    for role_config in matrix["roles"]:
        role = existing.get(role_config["name"])
        if role is None:
            operation = CreateRole(name=role_config["name"], description=role_config["description"])
            role = _apply_operation(audit_log, operation, lambda: store.create_role(
                operation.name, operation.description
            ))
            created_count += 1
            logger.debug(f"Created role: {role.name}")

        wanted = [name for name in role_config["permissions"] if name in available]
        if len(wanted) < len(role_config["permissions"]):
            logger.warning(f"Some permissions for role {role.name} are missing from the permissions table")
        sync_role_permissions(store, audit_log, role.id, role.name, wanted, prune)

    logger.info(f"Roles seeded: {created_count} created, {len(existing)} already present")
    return created_count


def sync_role_permissions(
    store: RolePermissionStore,
    audit_log: AuditLog,
    role_id: str,
    role_name: str,
    permission_names: List[str],
    prune: bool = False
):
    """Grant the configured permissions; with prune, also revoke the ones not configured"""
    current = {permission.name for permission in store.get_permissions_for_role(role_id)}

    added = [name for name in permission_names if name not in current]
    for name in added:
        operation = AssignPermission(role_name=role_name, permission_name=name)
        _apply_operation(audit_log, operation, lambda: store.assign_permission_to_role(
            operation.role_name, operation.permission_name
        ))
    if added:
        logger.debug(f"Assigned {len(added)} permissions to role {role_name}")

    extra = sorted(current - set(permission_names))
    if not extra:
        return
    if not prune:
        logger.info(f"Keeping {len(extra)} grants on role {role_name} that are not in the config")
        return
    for name in extra:
        operation = RevokePermission(role_name=role_name, permission_name=name)
        _apply_operation(audit_log, operation, lambda: store.revoke_permission_from_role(
            operation.role_name, operation.permission_name
        ))
    logger.info(f"Pruned {len(extra)} permissions from role {role_name}")


def bootstrap_developer(supabase: Client, user_id: str):
    """Grant the super admin role as the system; audited with a null user_id"""
    store = SupabaseRolePermissionStore(supabase)
    record_system_change(
        AuditLog(supabase), "bootstrap_developer", "bootstrap_developer", user_id,
        lambda: store.assign_role(user_id, settings.super_admin_role)
    )
    logger.info(f"Granted {settings.super_admin_role} to {user_id}")


def main(argv=None):
    """Main function to seed roles and permissions"""
    parser = argparse.ArgumentParser(description="Seed roles and permissions")
    parser.add_argument("--prune", action="store_true", help="revoke grants that are not in the config")
    parser.add_argument("--bootstrap-developer", metavar="USER_ID", help="grant the super admin role to this user")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    try:
        supabase = get_service_supabase()

        logger.info("Starting roles and permissions seeding...")

        # Permissions first; roles reference them
        perm_count = seed_permissions(supabase)
        role_count = seed_roles(supabase, prune=args.prune)

        if args.bootstrap_developer:
            bootstrap_developer(supabase, args.bootstrap_developer)

        logger.info(f"Total: {perm_count} permissions, {role_count} roles created")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

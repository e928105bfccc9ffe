"""
Roles and Permissions Configuration
Defines the default permission matrix for the RFP tracker, the roles that ship with it,
and the display conventions used when a user's roles are shown in the UI.
Used by the seed script and by the authorization engine for display ordering only.
"""

# Resources and the actions each one supports
RESOURCES = {
    "rfps": {
        "actions": ["create", "read", "update", "delete"],
        "description": "Requests for proposal"
    },
    "contacts": {
        "actions": ["create", "read", "update", "delete"],
        "description": "Client contacts"
    },
    "companies": {
        "actions": ["create", "read", "update", "delete"],
        "description": "Client companies"
    },
    "currencies": {
        "actions": ["create", "read", "update", "delete"],
        "description": "Currency reference data"
    },
    "users": {
        "actions": ["create", "read", "update", "delete"],
        "description": "User profiles"
    },
    "roles": {
        "actions": ["create", "read", "update", "delete"],
        "description": "Roles and role assignments"
    },
    "permissions": {
        "actions": ["create", "read", "update", "delete"],
        "description": "Permissions and role grants"
    },
}

# Default roles; "developer" carries no explicit grants because super-admins bypass
# permission checks entirely.
DEFAULT_ROLES = {
    "developer": {
        "description": "Super admin with unrestricted access, including system settings and logs",
        "grants": {}
    },
    "admin": {
        "description": "Administrator who manages users, roles and permissions",
        "grants": {resource: "*" for resource in RESOURCES}
    },
    "manager": {
        "description": "Manages RFPs and the client book",
        "grants": {
            "rfps": "*",
            "contacts": "*",
            "companies": "*",
            "currencies": ["read"],
            "users": ["read"],
        }
    },
    "user": {
        "description": "Standard user with read access and RFP editing",
        "grants": {
            "rfps": ["create", "read", "update"],
            "contacts": ["read"],
            "companies": ["read"],
            "currencies": ["read"],
        }
    },
}

# Display only: lower rank is shown first; unknown roles sort last.
ROLE_DISPLAY_RANK = {
    "developer": 1,
    "admin": 2,
    "manager": 3,
    "user": 4,
}
UNRANKED_ROLE = 99

# Display only: the first of these a user holds becomes their primary role; otherwise
# the first role the store returns is used.
PRIMARY_ROLE_PRECEDENCE = ("developer", "admin")


def permission_name(resource: str, action: str) -> str:
    return f"{resource}:{action}"


def get_permission_matrix():
    """
    Returns the seed matrix
    Format: {
        "permissions": [
            {"name": "rfps:read", "resource": "rfps", "action": "read", "description": "..."},
            ...
        ],
        "roles": [
            {"name": "manager", "description": "...", "permissions": ["contacts:create", ...]},
            ...
        ]
    }
    """
    permissions = []
    roles = []

    for resource, config in RESOURCES.items():
        for action in config["actions"]:
            permissions.append({
                "name": permission_name(resource, action),
                "resource": resource,
                "action": action,
                "description": f"{action.capitalize()} {config['description'].lower()}"
            })

    for role_name, role_config in DEFAULT_ROLES.items():
        role_permissions = []
        for resource, actions in role_config["grants"].items():
            if actions == "*":
                actions = RESOURCES[resource]["actions"]
            for action in actions:
                if action in RESOURCES[resource]["actions"]:
                    role_permissions.append(permission_name(resource, action))

        roles.append({
            "name": role_name,
            "description": role_config["description"],
            "permissions": sorted(role_permissions)
        })

    return {
        "permissions": permissions,
        "roles": roles
    }


PERMISSION_MATRIX = get_permission_matrix()

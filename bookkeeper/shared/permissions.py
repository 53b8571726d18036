"""
Role → capability table.
Each route declares the capability it needs; the check happens once in
auth.require_capability instead of per-handler role comparisons.
"""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class Capability(str, Enum):
    VIEW_RECORDS = "view_records"
    CREATE_RECORDS = "create_records"
    COMPLETE_RECORDS = "complete_records"
    EDIT_RECORDS = "edit_records"
    DELETE_RECORDS = "delete_records"
    VIEW_EMPLOYEE_RECORDS = "view_employee_records"
    VIEW_CATALOG = "view_catalog"
    CREATE_CLIENTS = "create_clients"
    EDIT_CLIENTS = "edit_clients"
    DELETE_CLIENTS = "delete_clients"
    MANAGE_SERVICES = "manage_services"
    VIEW_USERS = "view_users"
    MANAGE_USERS = "manage_users"
    MANAGE_LEDGER = "manage_ledger"
    VIEW_ANALYTICS = "view_analytics"
    EXPORT_REPORTS = "export_reports"
    MANAGE_INVENTORY = "manage_inventory"
    MANAGE_PUSH = "manage_push"


_EVERYONE = {
    Capability.VIEW_RECORDS,
    Capability.CREATE_RECORDS,
    Capability.COMPLETE_RECORDS,
    Capability.VIEW_CATALOG,
    Capability.CREATE_CLIENTS,
    Capability.MANAGE_PUSH,
}

_STAFF_LEADS = _EVERYONE | {
    Capability.EDIT_RECORDS,
    Capability.DELETE_RECORDS,
    Capability.VIEW_EMPLOYEE_RECORDS,
    Capability.EDIT_CLIENTS,
    Capability.VIEW_USERS,
}

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.EMPLOYEE: frozenset(_EVERYONE),
    Role.MANAGER: frozenset(_STAFF_LEADS),
    Role.ADMIN: frozenset(Capability),
}


def has_capability(role: str, capability: Capability) -> bool:
    """Check whether a role string grants a capability (unknown roles grant nothing)"""
    try:
        return capability in ROLE_CAPABILITIES[Role(role)]
    except ValueError:
        return False

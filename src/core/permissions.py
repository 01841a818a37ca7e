"""
Permission catalog and default role mappings.

The catalog is the closed set of capability names the authorization guard
understands. Roles are persisted (see PermissionService); the mappings below
are only the defaults used when seeding a database or resetting a role.
"""

import enum
from typing import Iterable


class PermissionName(str, enum.Enum):
    """Every capability a role can grant."""

    # Tickets
    VIEW_ALL_TICKETS = "view_all_tickets"
    VIEW_TICKETS = "view_tickets"
    CREATE_TICKETS = "create_tickets"
    EDIT_TICKETS = "edit_tickets"
    DELETE_TICKETS = "delete_tickets"
    ASSIGN_TICKETS = "assign_tickets"
    CLAIM_TICKETS = "claim_tickets"
    COMPLETE_TICKETS = "complete_tickets"
    VERIFY_TICKETS = "verify_tickets"
    EXPORT_TICKETS = "export_tickets"

    # Reports
    VIEW_ALL_REPORTS = "view_all_reports"
    VIEW_REPORTS = "view_reports"
    CREATE_REPORTS = "create_reports"
    EDIT_REPORTS = "edit_reports"
    DELETE_REPORTS = "delete_reports"
    PROCESS_REPORTS = "process_reports"
    REVIEW_REPORTS = "review_reports"
    EXPORT_REPORTS = "export_reports"

    # Users and administration
    VIEW_USERS = "view_users"
    CREATE_USERS = "create_users"
    EDIT_USERS = "edit_users"
    DELETE_USERS = "delete_users"
    MANAGE_ROLES = "manage_roles"
    ASSIGN_PERMISSIONS = "assign_permissions"
    MANAGE_SETTINGS = "manage_settings"
    MANAGE_CATEGORIES = "manage_categories"
    MANAGE_LOCATIONS = "manage_locations"


class RoleName(str, enum.Enum):
    """Roles that ship with a default permission set."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"
    USER = "USER"
    REPORT_PROCESSOR = "REPORT_PROCESSOR"
    REPORT_REVIEWER = "REPORT_REVIEWER"
    CUSTOMER_SERVICE = "CUSTOMER_SERVICE"
    MAINTENANCE_WORKER = "MAINTENANCE_WORKER"


P = PermissionName

ALL_PERMISSIONS: frozenset[str] = frozenset(p.value for p in PermissionName)


def _names(*permissions: PermissionName) -> frozenset[str]:
    return frozenset(p.value for p in permissions)


PERMISSION_DESCRIPTIONS: dict[str, str] = {
    P.VIEW_ALL_TICKETS.value: "View every ticket regardless of assignment",
    P.VIEW_TICKETS.value: "View tickets assigned to you or your roles",
    P.CREATE_TICKETS.value: "Create tickets",
    P.EDIT_TICKETS.value: "Edit tickets",
    P.DELETE_TICKETS.value: "Delete tickets",
    P.ASSIGN_TICKETS.value: "Assign tickets to users",
    P.CLAIM_TICKETS.value: "Claim pending tickets dispatched to your roles",
    P.COMPLETE_TICKETS.value: "Mark tickets completed or failed",
    P.VERIFY_TICKETS.value: "Verify completed tickets",
    P.EXPORT_TICKETS.value: "Export ticket lists",
    P.VIEW_ALL_REPORTS.value: "View every report",
    P.VIEW_REPORTS.value: "View reports",
    P.CREATE_REPORTS.value: "Create reports",
    P.EDIT_REPORTS.value: "Edit reports",
    P.DELETE_REPORTS.value: "Delete reports",
    P.PROCESS_REPORTS.value: "Process reports",
    P.REVIEW_REPORTS.value: "Review processed reports",
    P.EXPORT_REPORTS.value: "Export report lists",
    P.VIEW_USERS.value: "View users",
    P.CREATE_USERS.value: "Create users",
    P.EDIT_USERS.value: "Edit users",
    P.DELETE_USERS.value: "Delete users",
    P.MANAGE_ROLES.value: "Create, edit and delete roles",
    P.ASSIGN_PERMISSIONS.value: "Change the permissions granted by a role",
    P.MANAGE_SETTINGS.value: "Change system settings",
    P.MANAGE_CATEGORIES.value: "Maintain the category tree",
    P.MANAGE_LOCATIONS.value: "Maintain locations",
}

DEFAULT_ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    RoleName.ADMIN.value: ALL_PERMISSIONS,
    RoleName.MANAGER.value: _names(
        P.VIEW_TICKETS, P.CREATE_TICKETS, P.EDIT_TICKETS, P.ASSIGN_TICKETS,
        P.VERIFY_TICKETS, P.VIEW_REPORTS, P.PROCESS_REPORTS, P.REVIEW_REPORTS,
        P.VIEW_USERS,
    ),
    RoleName.STAFF.value: _names(
        P.VIEW_TICKETS, P.CLAIM_TICKETS, P.COMPLETE_TICKETS,
    ),
    RoleName.USER.value: _names(
        P.VIEW_TICKETS, P.CREATE_REPORTS,
    ),
    RoleName.REPORT_PROCESSOR.value: _names(
        P.VIEW_TICKETS, P.CREATE_TICKETS, P.EDIT_TICKETS, P.ASSIGN_TICKETS,
        P.VIEW_REPORTS, P.CREATE_REPORTS, P.PROCESS_REPORTS,
    ),
    RoleName.REPORT_REVIEWER.value: _names(
        P.VIEW_TICKETS, P.VIEW_REPORTS, P.REVIEW_REPORTS, P.VERIFY_TICKETS,
    ),
    RoleName.CUSTOMER_SERVICE.value: _names(
        P.VIEW_TICKETS, P.CREATE_TICKETS, P.VIEW_REPORTS, P.CREATE_REPORTS,
    ),
    RoleName.MAINTENANCE_WORKER.value: _names(
        P.VIEW_TICKETS, P.CLAIM_TICKETS, P.COMPLETE_TICKETS,
    ),
}

ROLE_DESCRIPTIONS: dict[str, str] = {
    RoleName.ADMIN.value: "Full system access",
    RoleName.MANAGER.value: "Dispatches tickets and supervises report handling",
    RoleName.STAFF.value: "Works on tickets",
    RoleName.USER.value: "Files reports",
    RoleName.REPORT_PROCESSOR.value: "Triages reports into tickets",
    RoleName.REPORT_REVIEWER.value: "Reviews processed reports and verifies tickets",
    RoleName.CUSTOMER_SERVICE.value: "Files reports and tickets on behalf of customers",
    RoleName.MAINTENANCE_WORKER.value: "Claims and completes maintenance tickets",
}


def normalize_permission(name: str | PermissionName) -> str:
    """Return the catalog spelling of a permission (enum member or any case)."""
    if isinstance(name, PermissionName):
        return name.value
    return name.strip().lower()


def unknown_permissions(names: Iterable[str | PermissionName]) -> set[str]:
    """Names not present in the catalog, in catalog spelling."""
    return {normalize_permission(n) for n in names} - ALL_PERMISSIONS


def default_permissions_for(role_name: str) -> frozenset[str]:
    """
    Default permission set of a role.

    Roles created at runtime have no default and reset to the empty set.
    """
    return frozenset(
        normalize_permission(p) for p in DEFAULT_ROLE_PERMISSIONS.get(role_name.upper(), ())
    )

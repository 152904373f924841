# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import SAFE_METHODS, BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
ROLE_ADMIN = "admin"
ROLE_CASHIER = "cashier"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_CASHIER,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views and services protect capabilities, not raw roles.
CAP_POS_SELL = "pos.sell"
CAP_POS_EDIT_ANY = "pos.edit_any"  # edit sales owned by someone else
CAP_POS_VOID = "pos.void"

CAP_CATALOG_MANAGE = "catalog.manage"
CAP_REPORTS_VIEW = "reports.view"
CAP_USERS_MANAGE = "users.manage"
CAP_SETTINGS_MANAGE = "settings.manage"

ALL_CAPABILITIES = {
    CAP_POS_SELL,
    CAP_POS_EDIT_ANY,
    CAP_POS_VOID,
    CAP_CATALOG_MANAGE,
    CAP_REPORTS_VIEW,
    CAP_USERS_MANAGE,
    CAP_SETTINGS_MANAGE,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_CASHIER: {
        CAP_POS_SELL,
        # own sales are editable through ownership, not through pos.edit_any
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    if user is None or not getattr(user, "is_authenticated", False):
        return set()
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    return capability in capabilities_for(user)


# =========================================================
# Base Role Permission (Internal Use)
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_REPORTS_VIEW
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        return user_has_capability(request.user, required)


class CapabilityForWrites(BasePermission):
    """
    Reads for any authenticated user, writes require view.required_capability.

    Catalog screens need the dropdown data for every cashier, while only
    managers of the catalog may change it.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if request.method in SAFE_METHODS:
            return True

        required = getattr(view, "required_capability", None)
        if not required:
            return False

        return user_has_capability(user, required)


class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsCashier(BaseRolePermission):
    allowed_roles = {ROLE_CASHIER}


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES

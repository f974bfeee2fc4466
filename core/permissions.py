# ============================================
# CENTRALIZED OPERATION → REQUIRED ROLES MAP
# ============================================
from typing import FrozenSet

from core.logging_config import logger
from models.enums import RoleName

SUPER_ADMIN = RoleName.SUPER_ADMIN
BUILDING_ADMIN = RoleName.BUILDING_ADMIN
READ_ONLY = RoleName.READ_ONLY

ADMINS = frozenset({SUPER_ADMIN, BUILDING_ADMIN})
EVERYONE = frozenset({SUPER_ADMIN, BUILDING_ADMIN, READ_ONLY})


OPERATION_ROLES = {

    # =====================================================
    # BUILDINGS: only SUPER_ADMIN creates/removes
    # =====================================================
    "buildings.create": frozenset({SUPER_ADMIN}),
    "buildings.read": EVERYONE,
    "buildings.update": ADMINS,
    "buildings.delete": frozenset({SUPER_ADMIN}),
    "buildings.restore": frozenset({SUPER_ADMIN}),

    # =====================================================
    # APARTMENTS
    # =====================================================
    "apartments.create": ADMINS,
    "apartments.read": EVERYONE,
    "apartments.update": ADMINS,
    "apartments.delete": ADMINS,

    # =====================================================
    # EXPENSES
    # =====================================================
    "expenses.create": ADMINS,
    "expenses.read": EVERYONE,
    "expenses.update": ADMINS,
    "expenses.delete": ADMINS,

    # =====================================================
    # PAYMENTS
    # =====================================================
    "payments.create": ADMINS,
    "payments.read": EVERYONE,
    "payments.update": ADMINS,
    "payments.delete": ADMINS,

    # =====================================================
    # EXPENSE CATEGORIES: global, SUPER_ADMIN maintains them
    # =====================================================
    "expense_categories.create": frozenset({SUPER_ADMIN}),
    "expense_categories.read": EVERYONE,
    "expense_categories.update": frozenset({SUPER_ADMIN}),
    "expense_categories.delete": frozenset({SUPER_ADMIN}),

    # =====================================================
    # ANNOUNCEMENTS
    # =====================================================
    "announcements.create": ADMINS,
    "announcements.read": EVERYONE,
    "announcements.update": ADMINS,
    "announcements.delete": ADMINS,

    # =====================================================
    # USERS & ROLE BINDINGS
    # =====================================================
    "users.create": frozenset({SUPER_ADMIN}),
    "users.read": ADMINS,
    "users.update": frozenset({SUPER_ADMIN}),
    "users.delete": frozenset({SUPER_ADMIN}),
    "users.assign_role": frozenset({SUPER_ADMIN}),
    "users.revoke_role": frozenset({SUPER_ADMIN}),

    # =====================================================
    # AUDIT LEDGER (read-only inspection)
    # =====================================================
    "audit.read": frozenset({SUPER_ADMIN}),

    # =====================================================
    # OPEN: any authenticated caller
    # =====================================================
    "auth.me": frozenset(),
}


def required_roles_for(operation: str) -> FrozenSet[RoleName]:
    """
    Roles an operation declares. An operation missing from the map
    declares none, which leaves it open to every authenticated caller.
    """
    roles = OPERATION_ROLES.get(operation)
    if roles is None:
        logger.warning(f"Operation '{operation}' declares no required roles; access is unrestricted")
        return frozenset()
    return roles

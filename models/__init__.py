# -------------------------
# Building Models
# -------------------------
from .building import (
    BuildingBase,
    BuildingCreate,
    BuildingRead,
    BuildingUpdate,
)

# -------------------------
# Apartment Models
# -------------------------
from .apartment import (
    ApartmentCreate,
    ApartmentUpdate,
    ShareTotals,
)

# -------------------------
# Expense / Payment Models
# -------------------------
from .expense import ExpenseCreate, ExpenseUpdate
from .payment import PaymentCreate, PaymentUpdate
from .expense_category import ExpenseCategoryCreate, ExpenseCategoryUpdate

# -------------------------
# Announcement Models
# -------------------------
from .announcement import AnnouncementCreate, AnnouncementUpdate

# -------------------------
# Enums
# -------------------------
from .enums import (
    AnnouncementPriority,
    AuditAction,
    PaymentMethod,
    RoleName,
    ShareType,
)

# -------------------------
# User Models (Supabase Auth)
# -------------------------
from .user import (
    MeRead,
    RoleAssignment,
    RoleBindingRead,
    UserCreate,
    UserUpdate,
)

# -------------------------
# Auth Models
# -------------------------
from .auth import LoginRequest, TokenResponse

# -------------------------
# Audit Models
# -------------------------
from .audit import AuditLogPage, AuditLogRead

__all__ = [
    # buildings
    "BuildingBase",
    "BuildingCreate",
    "BuildingRead",
    "BuildingUpdate",

    # apartments
    "ApartmentCreate",
    "ApartmentUpdate",
    "ShareTotals",

    # expenses / payments
    "ExpenseCreate",
    "ExpenseUpdate",
    "PaymentCreate",
    "PaymentUpdate",
    "ExpenseCategoryCreate",
    "ExpenseCategoryUpdate",

    # announcements
    "AnnouncementCreate",
    "AnnouncementUpdate",

    # enums
    "AnnouncementPriority",
    "AuditAction",
    "PaymentMethod",
    "RoleName",
    "ShareType",

    # users
    "MeRead",
    "RoleAssignment",
    "RoleBindingRead",
    "UserCreate",
    "UserUpdate",

    # auth
    "LoginRequest",
    "TokenResponse",

    # audit
    "AuditLogPage",
    "AuditLogRead",
]

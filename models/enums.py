from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE NAME (closed set: adding a role is a schema change)
# -----------------------------------------------------
class RoleName(BaseStrEnum):
    SUPER_ADMIN = "SUPER_ADMIN"        # Full system access across all buildings
    BUILDING_ADMIN = "BUILDING_ADMIN"  # Full access to assigned building
    READ_ONLY = "READ_ONLY"            # Read-only access to assigned building


# -----------------------------------------------------
# AUDIT ACTION
# -----------------------------------------------------
class AuditAction(BaseStrEnum):
    """Well-known audit actions. The ledger also accepts custom strings."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    RESTORE = "RESTORE"
    PURGE = "PURGE"


# -----------------------------------------------------
# PAYMENT METHOD
# -----------------------------------------------------
class PaymentMethod(BaseStrEnum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CARD = "CARD"
    CHECK = "CHECK"
    OTHER = "OTHER"


# -----------------------------------------------------
# EXPENSE SHARE TYPE
# -----------------------------------------------------
class ShareType(BaseStrEnum):
    """Which apartment share column an expense is split by."""

    COMMON = "COMMON"
    ELEVATOR = "ELEVATOR"
    HEATING = "HEATING"
    SPECIAL = "SPECIAL"
    OWNER = "OWNER"
    OTHER = "OTHER"


# -----------------------------------------------------
# ANNOUNCEMENT PRIORITY (listed highest first)
# -----------------------------------------------------
class AnnouncementPriority(BaseStrEnum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        return list(AnnouncementPriority).index(self)

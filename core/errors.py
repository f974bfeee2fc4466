# core/errors.py

from enum import Enum
from typing import Optional


# ============================================================
# Application error taxonomy
# ============================================================
class AppError(Exception):
    """
    Base class for errors surfaced to API callers.
    `status_code` is the HTTP status main.py maps the error to.
    """

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthenticated(AppError):
    """No valid actor identity. Never reaches the decision engine."""

    status_code = 401


class DenyReason(str, Enum):
    NO_BINDINGS = "NoBindings"
    INSUFFICIENT_ROLE = "InsufficientRole"
    OUT_OF_SCOPE = "OutOfScope"


_DENY_MESSAGES = {
    DenyReason.NO_BINDINGS: "No roles assigned to user",
    DenyReason.INSUFFICIENT_ROLE: "Insufficient permissions",
    DenyReason.OUT_OF_SCOPE: "Role not granted for this building",
}


class Unauthorized(AppError):
    status_code = 403

    def __init__(self, reason: DenyReason, operation: Optional[str] = None):
        super().__init__(_DENY_MESSAGES[reason])
        self.reason = reason
        self.operation = operation


class InvalidRequest(AppError):
    status_code = 400


class ResourceNotFound(AppError):
    status_code = 404


class TenantNotFound(ResourceNotFound):
    def __init__(self, building_id: str):
        super().__init__(f"Building {building_id} not found")
        self.building_id = building_id


class ConflictingState(AppError):
    status_code = 409


class StoreFailure(AppError):
    status_code = 500


class AuditWriteFailure(Exception):
    """
    Raised only inside the audit ledger while writing an entry.
    Converted to an AuditFailure result and logged; never reaches callers.
    """


# ============================================================
# Supabase error helpers
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: PostgREST APIError / GoTrue errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if error.args:
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or error.__class__.__name__


def classify_store_error(error: Exception, operation: str = "Database operation") -> AppError:
    """
    Map a raw store exception to the error taxonomy.
    Returns the error (doesn't raise) so the caller can re-raise with `from`.
    """
    from core.logging_config import logger

    if isinstance(error, AppError):
        return error

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return ConflictingState(f"{operation}: Record already exists")
    if "foreign key" in error_lower:
        return ConflictingState(f"{operation}: Invalid reference")
    if "not found" in error_lower or "does not exist" in error_lower:
        return ResourceNotFound(f"{operation}: Resource not found")
    return StoreFailure(f"{operation} failed")

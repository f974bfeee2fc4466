# jobs/seed.py

from typing import Optional

from supabase import Client

from core.audit import AuditEntry, AuditLedger
from core.binding_store import RoleBindingStore
from core.config import settings
from core.errors import classify_store_error
from core.logging_config import logger
from core.roles import RoleBinding
from core.store import TableStore
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, RoleName

EXPENSE_CATEGORIES = [
    ("MAINTENANCE", "Building maintenance"),
    ("CLEANING", "Cleaning"),
    ("ELECTRICITY", "Common area electricity"),
    ("WATER", "Water supply"),
    ("ELEVATOR", "Elevator"),
    ("INSURANCE", "Insurance premiums"),
    ("OIL", "Heating oil"),
    ("SECURITY", "Security"),
    ("GARDENING", "Gardening"),
    ("OTHER", "Other expenses"),
]


# ============================================================
# Super admin
# ============================================================
def ensure_admin_user(client: Client, email: str, password: Optional[str]) -> Optional[dict]:
    users = TableStore(client, "users", "User")
    existing = users.find({"email": email}, include_deleted=True)
    if existing:
        return existing

    if not password:
        logger.warning(f"Seed: {email} does not exist and SEED_ADMIN_PASSWORD is not set")
        return None

    try:
        created = client.auth.admin.create_user({
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {"first_name": "Super", "last_name": "Admin"},
        })
    except Exception as e:
        raise classify_store_error(e, "Failed to create seed admin") from e

    return users.insert({
        "id": created.user.id,
        "email": email,
        "first_name": "Super",
        "last_name": "Admin",
        "is_active": True,
    })


def seed_admin(client: Client, ledger: AuditLedger, email: str, password: Optional[str]) -> bool:
    """Ensure the super admin holds a global SUPER_ADMIN binding. Returns True if created."""
    user = ensure_admin_user(client, email, password)
    if not user:
        return False

    row, created = RoleBindingStore(client).ensure(
        user["id"], RoleBinding(role=RoleName.SUPER_ADMIN, building_id=None)
    )
    if created:
        ledger.record(AuditEntry(
            user_id=None,
            action=AuditAction.CREATE,
            entity="UserRole",
            entity_id=str(row.get("id", user["id"])),
            new_value=row,
            metadata={"event": "seed"},
        ))
        logger.info(f"Seed: granted SUPER_ADMIN to {email}")
    return created


# ============================================================
# Expense categories
# ============================================================
def seed_categories(client: Client) -> int:
    created = 0
    categories = TableStore(client, "expense_categories", "Category")
    for name, description in EXPENSE_CATEGORIES:
        if categories.find({"name": name}, include_deleted=True):
            continue
        categories.insert({"name": name, "description": description})
        created += 1
    logger.info(f"Seed: {created} expense categories created")
    return created


def run():
    """
    CLI entry point: python -m jobs.seed
    Safe to run repeatedly.
    """
    client = get_supabase_client()
    if not client:
        raise RuntimeError("Supabase not configured")

    ledger = AuditLedger(client, timeout_seconds=settings.AUDIT_WRITE_TIMEOUT_SECONDS)
    seed_admin(client, ledger, settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD)
    seed_categories(client)


if __name__ == "__main__":
    run()

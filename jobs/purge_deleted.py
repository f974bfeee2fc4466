# jobs/purge_deleted.py

from datetime import datetime
from typing import Dict, Optional

from supabase import Client

from core.audit import AuditEntry, AuditLedger
from core.config import settings
from core.logging_config import logger
from core.soft_delete import SOFT_DELETE_TABLES, retention_cutoff
from core.store import TableStore
from core.supabase_client import get_supabase_client
from models.enums import AuditAction

# Children before parents so building purges don't trip foreign keys
PURGE_ORDER = [
    "payments", "expenses", "expense_categories", "announcements",
    "apartments", "buildings", "users",
]


def purge(
    client: Client,
    ledger: AuditLedger,
    days_old: int,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Permanently delete rows soft-deleted more than `days_old` days ago.
    Each purged row gets a PURGE entry with no actor.
    """
    cutoff = retention_cutoff(days_old, now)
    counts = {}

    for table in PURGE_ORDER:
        if table not in SOFT_DELETE_TABLES:
            continue
        store = TableStore(client, table)
        purged = store.purge_deleted(cutoff)
        for row in purged:
            ledger.record(AuditEntry(
                user_id=None,
                action=AuditAction.PURGE,
                entity=store.label,
                entity_id=str(row.get("id")),
                old_value=row,
                metadata={"retention_days": days_old},
            ))
        counts[table] = len(purged)

    logger.info(f"Purged soft-deleted rows older than {cutoff.isoformat()}: {counts}")
    return counts


def run():
    """CLI entry point for the retention cron job."""
    client = get_supabase_client()
    if not client:
        raise RuntimeError("Supabase not configured")

    ledger = AuditLedger(client, timeout_seconds=settings.AUDIT_WRITE_TIMEOUT_SECONDS)
    purge(client, ledger, settings.SOFT_DELETE_RETENTION_DAYS)


if __name__ == "__main__":
    run()

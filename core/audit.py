# core/audit.py

"""
Audit ledger.

Append-only record of accepted mutations: who did what to which entity, with
the entity's state before and after. The ledger is observational. By the
time `record` runs the mutation has already been applied, so a failed write
is reported (AuditFailure + an ERROR log line) and never raised.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from supabase import Client

from core.errors import AuditWriteFailure, classify_store_error, extract_supabase_error
from core.logging_config import logger
from core.soft_delete import utcnow
from models.enums import AuditAction

TABLE = "audit_logs"

# Keys dropped from snapshots before they reach the ledger
REDACTED_FIELDS = frozenset({
    "password",
    "password_hash",
    "hashed_password",
    "access_token",
    "refresh_token",
})

# Shared by all ledgers: at most four writes run at once, the rest queue
_writer = ThreadPoolExecutor(max_workers=4, thread_name_prefix="audit-writer")


# ============================================================
# Entry + results
# ============================================================
class AuditEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None          # None for seed / internal jobs
    action: Union[AuditAction, str]
    entity: str
    entity_id: str
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

    def to_row(self) -> dict:
        row = self.model_dump(mode="json")
        row["action"] = str(self.action)
        return row


class AuditAck(BaseModel):
    ok: bool = True
    entry_id: Optional[str] = None


class AuditFailure(BaseModel):
    ok: bool = False
    error: str


AuditResult = Union[AuditAck, AuditFailure]


# ============================================================
# Snapshots
# ============================================================
def snapshot(entity: Optional[dict], redact: Iterable[str] = REDACTED_FIELDS) -> Optional[Dict[str, Any]]:
    """Shallow structural copy of an entity with redacted keys removed."""
    if entity is None:
        return None
    hidden = set(redact)
    return {k: v for k, v in dict(entity).items() if k not in hidden}


# ============================================================
# Ledger
# ============================================================
class AuditLedger:
    def __init__(self, client: Client, timeout_seconds: float = 5.0):
        self.client = client
        self.timeout_seconds = timeout_seconds

    def _write(self, row: dict) -> dict:
        try:
            result = self.client.table(TABLE).insert(row).execute()
        except Exception as e:
            raise AuditWriteFailure(extract_supabase_error(e)) from e
        if not result.data:
            raise AuditWriteFailure("Insert returned no data")
        return result.data[0]

    def record(self, entry: AuditEntry) -> AuditResult:
        """
        Durably append one entry, waiting at most `timeout_seconds`.
        A timed-out write may still land later.
        """
        future = _writer.submit(self._write, entry.to_row())
        try:
            written = future.result(timeout=self.timeout_seconds)
        except FutureTimeout:
            error = f"timed out after {self.timeout_seconds}s"
        except AuditWriteFailure as e:
            error = str(e)
        else:
            return AuditAck(entry_id=written.get("id"))

        logger.error(
            f"AuditWriteFailure: {entry.action} {entry.entity} {entry.entity_id} "
            f"by {entry.user_id or 'system'} not recorded ({error})"
        )
        return AuditFailure(error=error)

    # -------------------------------------------------------------
    # Read-only inspection (administrative tooling)
    # -------------------------------------------------------------
    def list(
        self,
        *,
        entity: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[dict], int]:
        filters = {
            "entity": entity,
            "entity_id": entity_id,
            "user_id": user_id,
            "action": action,
        }
        try:
            query = self.client.table(TABLE).select("*", count="exact")
            for key, val in filters.items():
                if val is not None:
                    query = query.eq(key, val)
            result = (
                query.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            raise classify_store_error(e, "Failed to fetch audit logs") from e

        rows = result.data or []
        total = result.count if result.count is not None else len(rows)
        return rows, total

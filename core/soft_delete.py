# core/soft_delete.py

"""
Soft delete as an explicit record status.

Rows of soft-deletable tables are either Active or Deleted(at). Storage keeps
a nullable `deleted_at` column; everything above the store reads the status
through `record_status` instead of testing the column directly.
"""

from datetime import datetime, timedelta, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

DELETED_AT = "deleted_at"

# Tables whose rows are soft-deleted (delete → deleted_at timestamp)
SOFT_DELETE_TABLES = frozenset({
    "buildings",
    "apartments",
    "expenses",
    "payments",
    "users",
    "expense_categories",
    "announcements",
})


class Active(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["active"] = "active"


class Deleted(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["deleted"] = "deleted"
    at: datetime


RecordStatus = Union[Active, Deleted]


def supports_soft_delete(table: str) -> bool:
    return table in SOFT_DELETE_TABLES


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def record_status(row: dict) -> RecordStatus:
    raw = row.get(DELETED_AT)
    if raw is None:
        return Active()
    if isinstance(raw, str):
        raw = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    return Deleted(at=raw)


def is_deleted(row: dict) -> bool:
    return isinstance(record_status(row), Deleted)


def deletion_marker(at: Optional[datetime] = None) -> dict:
    """Column update that moves a row to Deleted(at)."""
    return {DELETED_AT: (at or utcnow()).isoformat()}


def restore_marker() -> dict:
    """Column update that moves a row back to Active."""
    return {DELETED_AT: None}


def retention_cutoff(days_old: int, now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) - timedelta(days=days_old)

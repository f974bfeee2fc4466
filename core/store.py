# core/store.py

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type

from supabase import Client

from core.errors import AppError, ResourceNotFound, classify_store_error
from core.soft_delete import (
    DELETED_AT,
    deletion_marker,
    restore_marker,
    supports_soft_delete,
    utcnow,
)
from core.utils import sanitize


# =================================================================
#  TABLE STORE: one PostgREST table behind an explicit client handle
# =================================================================
# Every call is a single PostgREST request, so each write is atomic on
# its own. Soft-deletable tables hide Deleted rows from reads and updates
# unless `include_deleted=True` is passed.
# =================================================================

class TableStore:
    def __init__(self, client: Client, table: str, label: Optional[str] = None):
        self.client = client
        self.table = table
        self.label = label or table.rstrip("s").capitalize()
        self.soft_deletes = supports_soft_delete(table)

    # -------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------
    def _active_only(self, query, include_deleted: bool):
        if self.soft_deletes and not include_deleted:
            query = query.is_(DELETED_AT, "null")
        return query

    def _fail(self, error: Exception, operation: str) -> AppError:
        return classify_store_error(error, f"{operation} {self.table}")

    # -------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------
    def get(self, row_id: str, *, include_deleted: bool = False) -> Optional[dict]:
        try:
            query = self.client.table(self.table).select("*").eq("id", row_id)
            result = self._active_only(query, include_deleted).limit(1).execute()
        except Exception as e:
            raise self._fail(e, "Failed to fetch from") from e
        return result.data[0] if result.data else None

    def require(
        self,
        row_id: str,
        *,
        include_deleted: bool = False,
        error: Type[ResourceNotFound] = ResourceNotFound,
    ) -> dict:
        row = self.get(row_id, include_deleted=include_deleted)
        if row is None:
            if error is ResourceNotFound:
                raise ResourceNotFound(f"{self.label} not found")
            raise error(row_id)
        return row

    def find(self, filters: Dict[str, Any], *, include_deleted: bool = False) -> Optional[dict]:
        rows, _ = self.list(filters, limit=1, include_deleted=include_deleted)
        return rows[0] if rows else None

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        *,
        in_filters: Optional[Dict[str, List[str]]] = None,
        order: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
        include_deleted: bool = False,
    ) -> Tuple[List[dict], int]:
        try:
            query = self.client.table(self.table).select("*", count="exact")
            for key, val in (filters or {}).items():
                query = query.is_(key, "null") if val is None else query.eq(key, val)
            for key, values in (in_filters or {}).items():
                query = query.in_(key, list(values))
            query = self._active_only(query, include_deleted)
            if order:
                query = query.order(order, desc=desc)
            if limit is not None:
                query = query.range(offset, offset + limit - 1)
            result = query.execute()
        except Exception as e:
            raise self._fail(e, "Failed to fetch from") from e

        rows = result.data or []
        total = result.count if result.count is not None else len(rows)
        return rows, total

    # -------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------
    def insert(self, data: dict) -> dict:
        cleaned = sanitize(data)
        try:
            result = self.client.table(self.table).insert(cleaned).execute()
        except Exception as e:
            raise self._fail(e, "Failed to insert into") from e
        if not result.data:
            raise self._fail(RuntimeError("Insert returned no data"), "Failed to insert into")
        return result.data[0]

    def update(
        self,
        row_id: str,
        data: dict,
        *,
        expected_updated_at: Optional[str] = None,
        include_deleted: bool = False,
    ) -> Optional[dict]:
        """
        Update one row. With `expected_updated_at` the write only lands if the
        row still carries that version; None is returned when nothing matched.
        """
        cleaned = sanitize(data)
        cleaned["updated_at"] = utcnow().isoformat()
        try:
            query = self.client.table(self.table).update(cleaned).eq("id", row_id)
            if expected_updated_at is not None:
                query = query.eq("updated_at", expected_updated_at)
            result = self._active_only(query, include_deleted).execute()
        except Exception as e:
            raise self._fail(e, "Failed to update") from e
        return result.data[0] if result.data else None

    def soft_delete(self, row_id: str, at: Optional[datetime] = None) -> dict:
        if not self.soft_deletes:
            return self.hard_delete(row_id)
        row = self.update(row_id, deletion_marker(at))
        if row is None:
            raise ResourceNotFound(f"{self.label} not found")
        return row

    def restore(self, row_id: str) -> dict:
        try:
            result = (
                self.client.table(self.table)
                .update(restore_marker())
                .eq("id", row_id)
                .execute()
            )
        except Exception as e:
            raise self._fail(e, "Failed to restore") from e
        if not result.data:
            raise ResourceNotFound(f"{self.label} not found")
        return result.data[0]

    def hard_delete(self, row_id: str) -> dict:
        try:
            result = self.client.table(self.table).delete().eq("id", row_id).execute()
        except Exception as e:
            raise self._fail(e, "Failed to delete from") from e
        if not result.data:
            raise ResourceNotFound(f"{self.label} not found")
        return result.data[0]

    def purge_deleted(self, older_than: datetime) -> List[dict]:
        """Permanently remove rows soft-deleted before `older_than`."""
        if not self.soft_deletes:
            return []
        try:
            result = (
                self.client.table(self.table)
                .delete()
                .lt(DELETED_AT, older_than.isoformat())
                .execute()
            )
        except Exception as e:
            raise self._fail(e, "Failed to purge") from e
        return result.data or []

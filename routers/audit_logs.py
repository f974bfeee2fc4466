# routers/audit_logs.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.audit import AuditLedger
from core.permission_helpers import requires
from core.utils import paginate
from dependencies.stores import get_audit_ledger
from models.audit import AuditLogPage


router = APIRouter(
    prefix="/audit-logs",
    tags=["Audit"],
)


# -----------------------------------------------------
# GET /audit-logs
# Read-only inspection of the ledger (SUPER_ADMIN only)
# -----------------------------------------------------
@router.get(
    "",
    response_model=AuditLogPage,
    summary="List audit log entries",
    dependencies=[Depends(requires("audit.read"))],
)
def list_audit_logs(
    entity: Optional[str] = None,
    entity_id: Optional[str] = None,
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    ledger: AuditLedger = Depends(get_audit_ledger),
):
    rows, total = ledger.list(
        entity=entity,
        entity_id=entity_id,
        user_id=user_id,
        action=action,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return paginate(rows, total, page, limit)

from fastapi import Depends
from supabase import Client

from core.audit import AuditLedger
from core.binding_store import RoleBindingStore
from core.config import settings
from core.mutations import MutationWrapper
from core.supabase_client import get_store_client


# ============================================================
# Request-scoped stores, all built on the same client handle
# ============================================================
def get_binding_store(client: Client = Depends(get_store_client)) -> RoleBindingStore:
    return RoleBindingStore(client)


def get_audit_ledger(client: Client = Depends(get_store_client)) -> AuditLedger:
    return AuditLedger(client, timeout_seconds=settings.AUDIT_WRITE_TIMEOUT_SECONDS)


def get_mutation_wrapper(ledger: AuditLedger = Depends(get_audit_ledger)) -> MutationWrapper:
    return MutationWrapper(
        ledger,
        enforce_scope=settings.ENFORCE_TENANT_SCOPE,
        conflict_retries=settings.UPDATE_CONFLICT_RETRIES,
    )

# core/mutations.py

"""
Mutation wrapper: authorize → apply → audit.

Every state-changing handler goes through `MutationWrapper.mutate` (or one of
the create/update/delete shorthands):

    REQUESTED ─► AUTHORIZED ─► APPLIED ─► AUDITED ─► COMPLETED
        │             │            │
        └─► DENIED ◄──┘            └─► FAILED (store error, raised unchanged)

A denied request leaves no audit entry. A store error leaves no audit entry.
An audit write failure is logged by the ledger and the mutation result is
still returned.
"""

from typing import Any, Callable, Dict, Iterable, Optional, Type

from pydantic import BaseModel, ConfigDict

from core.audit import REDACTED_FIELDS, AuditEntry, AuditLedger, AuditResult, snapshot
from core.authorization import Allow, decide
from core.errors import ConflictingState, ResourceNotFound, Unauthorized
from core.logging_config import logger
from core.permissions import required_roles_for
from core.roles import Actor
from core.store import TableStore
from models.enums import AuditAction, BaseStrEnum


class MutationState(BaseStrEnum):
    REQUESTED = "REQUESTED"
    AUTHORIZED = "AUTHORIZED"
    APPLIED = "APPLIED"
    AUDITED = "AUDITED"
    COMPLETED = "COMPLETED"
    DENIED = "DENIED"
    FAILED = "FAILED"


class Mutation(BaseModel):
    """What a mutation did: its result plus the entity before and after."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    result: Any
    entity_id: str
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None


class MutationWrapper:
    def __init__(
        self,
        ledger: AuditLedger,
        *,
        enforce_scope: bool = False,
        redact: Iterable[str] = REDACTED_FIELDS,
        conflict_retries: int = 3,
    ):
        self.ledger = ledger
        self.enforce_scope = enforce_scope
        self.redact = frozenset(redact)
        self.conflict_retries = conflict_retries

    # -------------------------------------------------------------
    # Authorization
    # -------------------------------------------------------------
    def authorize(self, actor: Actor, operation: str, target_tenant: Optional[str] = None) -> Allow:
        decision = decide(
            actor.bindings,
            required_roles_for(operation),
            target_tenant,
            enforce_scope=self.enforce_scope,
        )
        if not decision.allowed:
            logger.warning(
                f"Denied {operation} for user {actor.id} "
                f"(building={target_tenant}): {decision.reason.value}"
            )
            raise Unauthorized(decision.reason, operation)
        return decision

    # -------------------------------------------------------------
    # Orchestration
    # -------------------------------------------------------------
    def _transition(self, operation: str, state: MutationState):
        logger.debug(f"{operation}: {state}")

    def mutate(
        self,
        actor: Actor,
        operation: str,
        action: str,
        entity: str,
        apply: Callable[[], Mutation],
        *,
        target_tenant: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Any:
        self._transition(operation, MutationState.REQUESTED)
        try:
            self.authorize(actor, operation, target_tenant)
        except Unauthorized:
            self._transition(operation, MutationState.DENIED)
            raise
        self._transition(operation, MutationState.AUTHORIZED)

        try:
            applied = apply()
        except Exception:
            self._transition(operation, MutationState.FAILED)
            raise
        self._transition(operation, MutationState.APPLIED)

        self.audit(actor.id, action, entity, applied, metadata)
        self._transition(operation, MutationState.AUDITED)
        self._transition(operation, MutationState.COMPLETED)
        return applied.result

    def audit(
        self,
        user_id: Optional[str],
        action: str,
        entity: str,
        applied: Mutation,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditResult:
        before = None if action == AuditAction.CREATE else snapshot(applied.before, self.redact)
        after = None if action == AuditAction.DELETE else snapshot(applied.after, self.redact)
        entry = AuditEntry(
            user_id=user_id,
            action=action,
            entity=entity,
            entity_id=applied.entity_id,
            old_value=before,
            new_value=after,
            metadata=metadata or {},
        )
        return self.ledger.record(entry)

    def compare_and_set(
        self,
        store: TableStore,
        entity_id: str,
        changes: dict,
        *,
        precheck: Optional[Callable[[dict], None]] = None,
        not_found: Type[ResourceNotFound] = ResourceNotFound,
    ) -> Mutation:
        """
        Write `changes` only if the row still carries the `updated_at` it was
        read with, so `before` is exactly the state this write replaced.
        Retries a lost race `conflict_retries` times, then ConflictingState.
        """
        for _ in range(self.conflict_retries + 1):
            before = store.require(entity_id, error=not_found)
            if precheck:
                precheck(before)
            after = store.update(
                entity_id, changes, expected_updated_at=before.get("updated_at")
            )
            if after is not None:
                return Mutation(result=after, entity_id=entity_id, before=before, after=after)
            logger.info(f"Concurrent update on {store.table} {entity_id}, retrying")
        raise ConflictingState(f"{store.label} {entity_id} was modified concurrently")

    # -------------------------------------------------------------
    # Store shorthands
    # -------------------------------------------------------------
    def create(
        self,
        actor: Actor,
        operation: str,
        store: TableStore,
        data: dict,
        *,
        entity: Optional[str] = None,
        target_tenant: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        precheck: Optional[Callable[[], None]] = None,
    ) -> dict:
        def apply() -> Mutation:
            if precheck:
                precheck()
            row = store.insert(data)
            return Mutation(result=row, entity_id=str(row["id"]), after=row)

        return self.mutate(
            actor, operation, AuditAction.CREATE, entity or store.label, apply,
            target_tenant=target_tenant, metadata=metadata,
        )

    def update(
        self,
        actor: Actor,
        operation: str,
        store: TableStore,
        entity_id: str,
        changes: dict,
        *,
        entity: Optional[str] = None,
        target_tenant: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        precheck: Optional[Callable[[dict], None]] = None,
        not_found: Type[ResourceNotFound] = ResourceNotFound,
    ) -> dict:
        def apply() -> Mutation:
            return self.compare_and_set(
                store, entity_id, changes, precheck=precheck, not_found=not_found
            )

        return self.mutate(
            actor, operation, AuditAction.UPDATE, entity or store.label, apply,
            target_tenant=target_tenant, metadata=metadata,
        )

    def delete(
        self,
        actor: Actor,
        operation: str,
        store: TableStore,
        entity_id: str,
        *,
        entity: Optional[str] = None,
        target_tenant: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        precheck: Optional[Callable[[dict], None]] = None,
    ) -> dict:
        def apply() -> Mutation:
            before = store.require(entity_id)
            if precheck:
                precheck(before)
            marked = store.soft_delete(entity_id)
            return Mutation(result=marked, entity_id=entity_id, before=before)

        return self.mutate(
            actor, operation, AuditAction.DELETE, entity or store.label, apply,
            target_tenant=target_tenant, metadata=metadata,
        )

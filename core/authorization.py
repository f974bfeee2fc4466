# core/authorization.py

"""
Authorization decision engine.

`decide` answers one question: may a holder of these role bindings run an
operation that requires one of these roles, against this building?

It is a pure function over its inputs: no I/O, no hidden state, safe to call
from any number of request threads at once.

By default matching is by role name only. A BUILDING_ADMIN scoped to building
A passes the role check for an operation on building B; narrowing results to
the caller's own buildings is left to the caller (see `Allow.building_ids`).
Pass `enforce_scope=True` (setting ENFORCE_TENANT_SCOPE) to also require that
a matching binding is global or scoped to the target building.
"""

from typing import AbstractSet, FrozenSet, Iterable, Optional, Set, Union

from pydantic import BaseModel, ConfigDict

from core.errors import DenyReason
from core.roles import RoleBinding
from models.enums import RoleName


class Allow(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched: FrozenSet[RoleBinding] = frozenset()

    @property
    def allowed(self) -> bool:
        return True

    def building_ids(self) -> Optional[Set[str]]:
        """
        Buildings the matched bindings are scoped to.
        None means unrestricted (a global binding matched, or the
        operation declared no required roles).
        """
        if not self.matched or any(b.is_global for b in self.matched):
            return None
        return {b.building_id for b in self.matched}


class Deny(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: DenyReason

    @property
    def allowed(self) -> bool:
        return False


Decision = Union[Allow, Deny]


def decide(
    bindings: Iterable[RoleBinding],
    required_roles: AbstractSet[RoleName],
    target_tenant: Optional[str] = None,
    enforce_scope: bool = False,
) -> Decision:
    # No declared restriction: the operation is open to any caller
    if not required_roles:
        return Allow()

    held = frozenset(bindings)
    if not held:
        return Deny(reason=DenyReason.NO_BINDINGS)

    matched = frozenset(b for b in held if b.role in required_roles)
    if not matched:
        return Deny(reason=DenyReason.INSUFFICIENT_ROLE)

    if enforce_scope and target_tenant is not None:
        matched = frozenset(b for b in matched if b.covers(target_tenant))
        if not matched:
            return Deny(reason=DenyReason.OUT_OF_SCOPE)

    return Allow(matched=matched)

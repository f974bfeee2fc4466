from typing import List, Optional

from fastapi import Depends, Request

from core.authorization import Allow
from core.mutations import MutationWrapper
from core.roles import Actor
from dependencies.auth import get_current_user
from dependencies.stores import get_mutation_wrapper


# -----------------------------------------------------
# FastAPI dependency wrapper (read operations)
# -----------------------------------------------------
def requires(operation: str, tenant_param: str = "building_id"):
    """
    Usage:
        @router.get("/{building_id}")
        def read(decision: Allow = Depends(requires("buildings.read"))): ...

    The target building comes from the `tenant_param` path parameter
    when the route has one.
    """

    def dependency(
        request: Request,
        actor: Actor = Depends(get_current_user),
        mutations: MutationWrapper = Depends(get_mutation_wrapper),
    ) -> Allow:
        return mutations.authorize(actor, operation, request.path_params.get(tenant_param))

    return dependency


# ============================================================
# SCOPE HELPERS: narrowing list results to a caller's buildings
# ============================================================

def accessible_building_ids(decision: Allow) -> Optional[List[str]]:
    """
    Building ids the caller's matching bindings are scoped to.
    None means all buildings.
    """
    scoped = decision.building_ids()
    return None if scoped is None else sorted(scoped)

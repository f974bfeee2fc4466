# core/binding_store.py

from typing import FrozenSet, Optional, Tuple

from supabase import Client

from core.errors import ResourceNotFound, classify_store_error
from core.roles import RoleBinding

TABLE = "user_roles"


# ============================================================
# ROLE BINDING STORE: (user, role, building scope) tuples
# ============================================================
class RoleBindingStore:
    """
    Read-heavy store of role bindings.

    Uniqueness is not enforced beyond the natural key
    (user_id, role, building_id); callers that need "ensure exists"
    semantics use `ensure`, which checks then creates.
    """

    def __init__(self, client: Client):
        self.client = client

    def bindings_for(self, user_id: str) -> FrozenSet[RoleBinding]:
        try:
            result = (
                self.client.table(TABLE)
                .select("role, building_id")
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            raise classify_store_error(e, "Failed to load role bindings") from e
        return frozenset(RoleBinding.from_row(row) for row in (result.data or []))

    def find_existing(self, user_id: str, binding: RoleBinding) -> Optional[dict]:
        try:
            query = (
                self.client.table(TABLE)
                .select("*")
                .eq("user_id", user_id)
                .eq("role", binding.role.value)
            )
            if binding.building_id is None:
                query = query.is_("building_id", "null")
            else:
                query = query.eq("building_id", binding.building_id)
            result = query.limit(1).execute()
        except Exception as e:
            raise classify_store_error(e, "Failed to look up role binding") from e
        return result.data[0] if result.data else None

    def create(self, user_id: str, binding: RoleBinding) -> dict:
        row = {
            "user_id": user_id,
            "role": binding.role.value,
            "building_id": binding.building_id,
        }
        try:
            result = self.client.table(TABLE).insert(row).execute()
        except Exception as e:
            raise classify_store_error(e, "Failed to create role binding") from e
        return result.data[0] if result.data else row

    def ensure(self, user_id: str, binding: RoleBinding) -> Tuple[dict, bool]:
        """
        Check-then-create. Two concurrent first runs can both create;
        the duplicate is harmless to authorization.
        """
        existing = self.find_existing(user_id, binding)
        if existing:
            return existing, False
        return self.create(user_id, binding), True

    def revoke(self, user_id: str, binding: RoleBinding) -> dict:
        existing = self.find_existing(user_id, binding)
        if not existing:
            raise ResourceNotFound("User role assignment not found")
        try:
            self.client.table(TABLE).delete().eq("id", existing["id"]).execute()
        except Exception as e:
            raise classify_store_error(e, "Failed to revoke role binding") from e
        return existing

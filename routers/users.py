# routers/users.py

from typing import Optional

from fastapi import APIRouter, Depends
from supabase import Client

from core.authorization import Allow
from core.binding_store import RoleBindingStore
from core.errors import AppError, ConflictingState, InvalidRequest, TenantNotFound, classify_store_error
from core.logging_config import logger
from core.mutations import Mutation, MutationWrapper
from core.permission_helpers import requires
from core.roles import Actor, RoleBinding
from core.store import TableStore
from core.supabase_client import get_store_client
from dependencies.auth import get_current_user
from dependencies.stores import get_binding_store, get_mutation_wrapper
from models.enums import AuditAction, RoleName
from models.user import RoleAssignment, UserCreate, UserUpdate


router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


def user_store(client: Client) -> TableStore:
    return TableStore(client, "users", "User")


# ============================================================
# Role assignment rules (provisioning only; the decision engine
# honors whatever scope is stored)
# ============================================================
def validate_assignment(client: Client, assignment: RoleAssignment) -> RoleBinding:
    if assignment.building_id:
        if assignment.role == RoleName.SUPER_ADMIN:
            raise InvalidRequest("SUPER_ADMIN role cannot be assigned to a specific building")
        TableStore(client, "buildings", "Building").require(assignment.building_id, error=TenantNotFound)
    elif assignment.role != RoleName.SUPER_ADMIN:
        raise InvalidRequest("Only SUPER_ADMIN role can be assigned globally")

    return RoleBinding(role=assignment.role, building_id=assignment.building_id)


def with_roles(user: dict, bindings: RoleBindingStore) -> dict:
    roles = bindings.bindings_for(user["id"])
    return {
        **user,
        "roles": [b.model_dump(mode="json") for b in sorted(roles, key=lambda b: (b.role, b.building_id or ""))],
    }


# ============================================================
# LIST / GET
# ============================================================
@router.get("", summary="List Users")
def list_users(
    decision: Allow = Depends(requires("users.read")),
    client: Client = Depends(get_store_client),
):
    rows, _ = user_store(client).list(order="email")
    return rows


@router.get("/{user_id}", summary="Get User")
def get_user(
    user_id: str,
    decision: Allow = Depends(requires("users.read")),
    client: Client = Depends(get_store_client),
    bindings: RoleBindingStore = Depends(get_binding_store),
):
    return with_roles(user_store(client).require(user_id), bindings)


# ============================================================
# CREATE (Supabase Auth account + profile row + first binding)
# ============================================================
def discard_account(client: Client, users: TableStore, user_id: str, profile: Optional[dict]):
    """Undo a half-finished provisioning so a retry starts clean."""
    if profile is not None:
        try:
            users.hard_delete(user_id)
        except AppError as e:
            logger.error(f"Could not remove profile {user_id}: {e.detail}")
    try:
        client.auth.admin.delete_user(user_id)
    except Exception as e:
        logger.error(f"Could not remove auth account {user_id}: {type(e).__name__}")


@router.post("", status_code=201, summary="Create User")
def create_user(
    payload: UserCreate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
    bindings: RoleBindingStore = Depends(get_binding_store),
):
    users = user_store(client)

    def apply() -> Mutation:
        email = payload.email.strip().lower()
        if users.find({"email": email}, include_deleted=True):
            raise ConflictingState("Email already exists")

        binding = None
        if payload.role:
            binding = validate_assignment(
                client, RoleAssignment(role=payload.role, building_id=payload.building_id)
            )

        try:
            created = client.auth.admin.create_user({
                "email": email,
                "password": payload.password,
                "email_confirm": True,
                "user_metadata": {
                    "first_name": payload.first_name,
                    "last_name": payload.last_name,
                },
            })
        except Exception as e:
            raise classify_store_error(e, "Failed to create Supabase Auth user") from e

        profile = None
        try:
            profile = users.insert({
                "id": created.user.id,
                "email": email,
                "first_name": payload.first_name,
                "last_name": payload.last_name,
                "phone": payload.phone,
                "is_active": payload.is_active,
            })
            if binding:
                bindings.create(profile["id"], binding)
        except Exception:
            logger.warning(f"Provisioning {email} failed; removing auth account {created.user.id}")
            discard_account(client, users, created.user.id, profile)
            raise

        return Mutation(result=profile, entity_id=profile["id"], after=profile)

    return mutations.mutate(
        actor, "users.create", AuditAction.CREATE, "User", apply,
        metadata={"role": payload.role.value if payload.role else None,
                  "building_id": payload.building_id},
    )


# ============================================================
# UPDATE (profile first, then the Supabase Auth password)
# ============================================================
@router.patch("/{user_id}", summary="Update User")
def update_user(
    user_id: str,
    payload: UserUpdate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    users = user_store(client)
    changes = payload.model_dump(exclude_unset=True)
    password = changes.pop("password", None)

    def apply() -> Mutation:
        applied = mutations.compare_and_set(users, user_id, changes)
        if not password:
            return applied

        try:
            client.auth.admin.update_user_by_id(user_id, {"password": password})
        except Exception as e:
            # Put the profile back so a failed request changes nothing
            users.update(user_id, {key: applied.before.get(key) for key in changes})
            raise classify_store_error(e, "Failed to update password") from e
        return applied

    return mutations.mutate(
        actor, "users.update", AuditAction.UPDATE, "User", apply,
        metadata={"password_changed": bool(password)},
    )


# ============================================================
# DELETE (soft)
# ============================================================
@router.delete("/{user_id}", summary="Delete User")
def delete_user(
    user_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    mutations.delete(actor, "users.delete", user_store(client), user_id)
    return {"message": "User deleted successfully"}


# ============================================================
# ROLE BINDINGS
# ============================================================
@router.post("/{user_id}/roles", status_code=201, summary="Assign role")
def assign_role(
    user_id: str,
    payload: RoleAssignment,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
    bindings: RoleBindingStore = Depends(get_binding_store),
):
    def apply() -> Mutation:
        user_store(client).require(user_id)
        binding = validate_assignment(client, payload)
        if bindings.find_existing(user_id, binding):
            raise ConflictingState("User already holds this role")
        row = bindings.create(user_id, binding)
        return Mutation(result=row, entity_id=str(row.get("id", user_id)), after=row)

    return mutations.mutate(
        actor, "users.assign_role", AuditAction.CREATE, "UserRole", apply,
        target_tenant=payload.building_id,
    )


@router.delete("/{user_id}/roles/{role}", summary="Revoke role")
def revoke_role(
    user_id: str,
    role: RoleName,
    building_id: Optional[str] = None,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    bindings: RoleBindingStore = Depends(get_binding_store),
):
    def apply() -> Mutation:
        row = bindings.revoke(user_id, RoleBinding(role=role, building_id=building_id))
        logger.info(f"Revoked {role} (building={building_id}) from user {user_id}")
        return Mutation(result=row, entity_id=str(row.get("id", user_id)), before=row)

    mutations.mutate(
        actor, "users.revoke_role", AuditAction.DELETE, "UserRole", apply,
        target_tenant=building_id,
    )
    return {"message": "Role removed successfully"}

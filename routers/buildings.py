# routers/buildings.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from core.authorization import Allow
from core.errors import ConflictingState, ResourceNotFound, TenantNotFound
from core.mutations import Mutation, MutationWrapper
from core.permission_helpers import accessible_building_ids, requires
from core.roles import Actor
from core.soft_delete import is_deleted
from core.store import TableStore
from core.supabase_client import get_store_client
from dependencies.auth import get_current_user
from dependencies.stores import get_mutation_wrapper
from models.apartment import ApartmentCreate, ApartmentUpdate, ShareTotals, share_totals
from models.building import BuildingCreate, BuildingRead, BuildingUpdate
from models.enums import AuditAction


router = APIRouter(
    prefix="/buildings",
    tags=["Buildings"]
)


def building_store(client: Client) -> TableStore:
    return TableStore(client, "buildings", "Building")


def apartment_store(client: Client) -> TableStore:
    return TableStore(client, "apartments", "Apartment")


# ============================================================
# APARTMENTS
# (declared before /{building_id} so the literal path wins)
# ============================================================
@router.get(
    "/apartments",
    summary="List Apartments",
    description="""
    List apartments, optionally for one building.

    **Permissions:** SUPER_ADMIN, BUILDING_ADMIN or READ_ONLY.
    **Filtering:** Building-scoped callers only see their own buildings.
    """,
)
def list_apartments(
    building_id: Optional[str] = None,
    decision: Allow = Depends(requires("apartments.read")),
    client: Client = Depends(get_store_client),
):
    in_filters = {}
    scoped = accessible_building_ids(decision)
    if scoped is not None:
        in_filters["building_id"] = scoped

    rows, _ = apartment_store(client).list(
        {"building_id": building_id} if building_id else None,
        in_filters=in_filters,
        order="number",
    )
    return rows


@router.get("/apartments/{apartment_id}", summary="Get Apartment")
def get_apartment(
    apartment_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    # The tenant is only known once the row is loaded
    mutations.authorize(actor, "apartments.read")
    row = apartment_store(client).require(apartment_id)
    mutations.authorize(actor, "apartments.read", row["building_id"])
    return row


@router.post("/apartments", status_code=201, summary="Create Apartment")
def create_apartment(
    payload: ApartmentCreate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    apartments = apartment_store(client)

    def precheck():
        building_store(client).require(payload.building_id, error=TenantNotFound)

        if apartments.find({"building_id": payload.building_id, "number": payload.number}):
            raise ConflictingState("Apartment number already exists in this building")

        if payload.owner_id and not TableStore(client, "users", "Owner").get(payload.owner_id):
            raise ResourceNotFound("Owner not found")

    return mutations.create(
        actor,
        "apartments.create",
        apartments,
        payload.model_dump(mode="json"),
        target_tenant=payload.building_id,
        precheck=precheck,
    )


@router.patch("/apartments/{apartment_id}", summary="Update Apartment")
def update_apartment(
    apartment_id: str,
    payload: ApartmentUpdate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    mutations.authorize(actor, "apartments.update")
    apartments = apartment_store(client)
    current = apartments.require(apartment_id)

    return mutations.update(
        actor,
        "apartments.update",
        apartments,
        apartment_id,
        payload.model_dump(mode="json", exclude_unset=True),
        target_tenant=current["building_id"],
    )


@router.delete("/apartments/{apartment_id}", summary="Delete Apartment")
def delete_apartment(
    apartment_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    mutations.authorize(actor, "apartments.delete")
    apartments = apartment_store(client)
    current = apartments.require(apartment_id)

    mutations.delete(
        actor,
        "apartments.delete",
        apartments,
        apartment_id,
        target_tenant=current["building_id"],
    )
    return {"message": "Apartment deleted successfully"}


# ============================================================
# LIST BUILDINGS
# ============================================================
@router.get(
    "",
    summary="List Buildings",
    description="""
    **Permissions:** SUPER_ADMIN, BUILDING_ADMIN or READ_ONLY.
    **Filtering:** Building-scoped callers only see buildings they are bound to.
    """,
)
def list_buildings(
    name: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    decision: Allow = Depends(requires("buildings.read")),
    client: Client = Depends(get_store_client),
):
    in_filters = {}
    scoped = accessible_building_ids(decision)
    if scoped is not None:
        in_filters["id"] = scoped

    rows, _ = building_store(client).list(
        {"name": name} if name else None,
        in_filters=in_filters,
        order="name",
        limit=limit,
    )
    return {"success": True, "data": rows}


# ============================================================
# CREATE BUILDING
# ============================================================
@router.post("", status_code=201, response_model=BuildingRead, summary="Create Building")
def create_building(
    payload: BuildingCreate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    return mutations.create(
        actor,
        "buildings.create",
        building_store(client),
        payload.model_dump(mode="json"),
    )


# ============================================================
# GET BUILDING
# ============================================================
@router.get("/{building_id}", response_model=BuildingRead, summary="Get Building")
def get_building(
    building_id: str,
    decision: Allow = Depends(requires("buildings.read")),
    client: Client = Depends(get_store_client),
):
    return building_store(client).require(building_id, error=TenantNotFound)


# ============================================================
# SHARE TOTALS (per-category sums across apartments)
# ============================================================
@router.get("/{building_id}/shares", response_model=ShareTotals, summary="Apartment share totals")
def get_share_totals(
    building_id: str,
    decision: Allow = Depends(requires("apartments.read")),
    client: Client = Depends(get_store_client),
):
    building_store(client).require(building_id, error=TenantNotFound)
    apartments, _ = apartment_store(client).list({"building_id": building_id})
    return share_totals(building_id, apartments)


# ============================================================
# UPDATE BUILDING
# ============================================================
@router.patch("/{building_id}", response_model=BuildingRead, summary="Update Building")
def update_building(
    building_id: str,
    payload: BuildingUpdate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    return mutations.update(
        actor,
        "buildings.update",
        building_store(client),
        building_id,
        payload.model_dump(mode="json", exclude_unset=True),
        target_tenant=building_id,
        not_found=TenantNotFound,
    )


# ============================================================
# DELETE BUILDING (soft)
# ============================================================
@router.delete("/{building_id}", summary="Delete Building")
def delete_building(
    building_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    mutations.delete(
        actor,
        "buildings.delete",
        building_store(client),
        building_id,
        target_tenant=building_id,
    )
    return {"message": "Building deleted successfully"}


# ============================================================
# RESTORE BUILDING (undo soft delete)
# ============================================================
@router.post("/{building_id}/restore", response_model=BuildingRead, summary="Restore Building")
def restore_building(
    building_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    buildings = building_store(client)

    def apply() -> Mutation:
        before = buildings.require(building_id, include_deleted=True, error=TenantNotFound)
        if not is_deleted(before):
            raise ConflictingState("Building is not deleted")
        after = buildings.restore(building_id)
        return Mutation(result=after, entity_id=building_id, before=before, after=after)

    return mutations.mutate(
        actor,
        "buildings.restore",
        AuditAction.RESTORE,
        "Building",
        apply,
        target_tenant=building_id,
    )

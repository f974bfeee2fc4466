# routers/announcements.py

from fastapi import APIRouter, Depends
from supabase import Client

from core.authorization import Allow
from core.errors import ResourceNotFound, TenantNotFound
from core.mutations import MutationWrapper
from core.permission_helpers import requires
from core.roles import Actor
from core.store import TableStore
from core.supabase_client import get_store_client
from dependencies.auth import get_current_user
from dependencies.stores import get_mutation_wrapper
from models.announcement import AnnouncementCreate, AnnouncementUpdate
from models.enums import AnnouncementPriority


router = APIRouter(
    prefix="/buildings/{building_id}/announcements",
    tags=["Announcements"],
)


def announcement_store(client: Client) -> TableStore:
    return TableStore(client, "announcements", "Announcement")


def belongs_to(building_id: str):
    def check(row: dict):
        if row.get("building_id") != building_id:
            raise ResourceNotFound("Announcement not found")

    return check


def priority_rank(row: dict) -> int:
    try:
        return AnnouncementPriority(row.get("priority")).rank
    except ValueError:
        return AnnouncementPriority.NORMAL.rank


# -------------------------------------------------------------
# LIST Announcements (highest priority first, newest first)
# -------------------------------------------------------------
@router.get("", summary="List Announcements")
def list_announcements(
    building_id: str,
    decision: Allow = Depends(requires("announcements.read")),
    client: Client = Depends(get_store_client),
):
    rows, _ = announcement_store(client).list(
        {"building_id": building_id},
        order="created_at",
        desc=True,
    )
    return sorted(rows, key=priority_rank, reverse=True)


@router.get("/{announcement_id}", summary="Get Announcement")
def get_announcement(
    building_id: str,
    announcement_id: str,
    decision: Allow = Depends(requires("announcements.read")),
    client: Client = Depends(get_store_client),
):
    row = announcement_store(client).require(announcement_id)
    belongs_to(building_id)(row)
    return row


# -------------------------------------------------------------
# CREATE
# -------------------------------------------------------------
@router.post("", status_code=201, summary="Create Announcement")
def create_announcement(
    building_id: str,
    payload: AnnouncementCreate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    data = payload.model_dump(mode="json")
    data["building_id"] = building_id
    data["created_by"] = actor.id

    def precheck():
        TableStore(client, "buildings", "Building").require(building_id, error=TenantNotFound)

    return mutations.create(
        actor,
        "announcements.create",
        announcement_store(client),
        data,
        target_tenant=building_id,
        precheck=precheck,
    )


# -------------------------------------------------------------
# UPDATE
# -------------------------------------------------------------
@router.patch("/{announcement_id}", summary="Update Announcement")
def update_announcement(
    building_id: str,
    announcement_id: str,
    payload: AnnouncementUpdate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    return mutations.update(
        actor,
        "announcements.update",
        announcement_store(client),
        announcement_id,
        payload.model_dump(mode="json", exclude_unset=True),
        target_tenant=building_id,
        precheck=belongs_to(building_id),
    )


# -------------------------------------------------------------
# DELETE (soft)
# -------------------------------------------------------------
@router.delete("/{announcement_id}", summary="Delete Announcement")
def delete_announcement(
    building_id: str,
    announcement_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    mutations.delete(
        actor,
        "announcements.delete",
        announcement_store(client),
        announcement_id,
        target_tenant=building_id,
        precheck=belongs_to(building_id),
    )
    return {"message": "Announcement deleted successfully"}

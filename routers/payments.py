# routers/payments.py

from fastapi import APIRouter, Depends, Query
from supabase import Client

from core.authorization import Allow
from core.errors import ResourceNotFound
from core.mutations import MutationWrapper
from core.permission_helpers import requires
from core.roles import Actor
from core.store import TableStore
from core.supabase_client import get_store_client
from core.utils import paginate
from dependencies.auth import get_current_user
from dependencies.stores import get_mutation_wrapper
from models.payment import PaymentCreate, PaymentUpdate


router = APIRouter(
    prefix="/buildings/{building_id}/payments",
    tags=["Payments"],
)


def payment_store(client: Client) -> TableStore:
    return TableStore(client, "payments", "Payment")


def belongs_to(building_id: str):
    def check(row: dict):
        if row.get("building_id") != building_id:
            raise ResourceNotFound("Payment not found")

    return check


@router.get("", summary="List Payments")
def list_payments(
    building_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    decision: Allow = Depends(requires("payments.read")),
    client: Client = Depends(get_store_client),
):
    rows, total = payment_store(client).list(
        {"building_id": building_id},
        order="payment_date",
        desc=True,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return paginate(rows, total, page, limit)


@router.get("/{payment_id}", summary="Get Payment")
def get_payment(
    building_id: str,
    payment_id: str,
    decision: Allow = Depends(requires("payments.read")),
    client: Client = Depends(get_store_client),
):
    row = payment_store(client).require(payment_id)
    belongs_to(building_id)(row)
    return row


@router.post("", status_code=201, summary="Record Payment")
def create_payment(
    building_id: str,
    payload: PaymentCreate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    data = payload.model_dump(mode="json")
    data["building_id"] = building_id
    data["user_id"] = actor.id

    def precheck():
        apartment = TableStore(client, "apartments", "Apartment").get(payload.apartment_id)
        if not apartment or apartment.get("building_id") != building_id:
            raise ResourceNotFound("Apartment not found in this building")

    return mutations.create(
        actor,
        "payments.create",
        payment_store(client),
        data,
        target_tenant=building_id,
        precheck=precheck,
    )


@router.patch("/{payment_id}", summary="Update Payment")
def update_payment(
    building_id: str,
    payment_id: str,
    payload: PaymentUpdate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    return mutations.update(
        actor,
        "payments.update",
        payment_store(client),
        payment_id,
        payload.model_dump(mode="json", exclude_unset=True),
        target_tenant=building_id,
        precheck=belongs_to(building_id),
    )


@router.delete("/{payment_id}", summary="Delete Payment")
def delete_payment(
    building_id: str,
    payment_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    mutations.delete(
        actor,
        "payments.delete",
        payment_store(client),
        payment_id,
        target_tenant=building_id,
        precheck=belongs_to(building_id),
    )
    return {"message": "Payment deleted successfully"}

# routers/expenses.py

from fastapi import APIRouter, Depends, Query
from supabase import Client

from core.authorization import Allow
from core.errors import InvalidRequest, ResourceNotFound, TenantNotFound
from core.mutations import MutationWrapper
from core.permission_helpers import requires
from core.roles import Actor
from core.store import TableStore
from core.supabase_client import get_store_client
from core.utils import paginate
from dependencies.auth import get_current_user
from dependencies.stores import get_mutation_wrapper
from models.expense import ExpenseCreate, ExpenseUpdate


router = APIRouter(
    prefix="/buildings/{building_id}/expenses",
    tags=["Expenses"],
)


def expense_store(client: Client) -> TableStore:
    return TableStore(client, "expenses", "Expense")


def belongs_to(building_id: str):
    """Precheck: the expense row must be in the building from the path."""

    def check(row: dict):
        if row.get("building_id") != building_id:
            raise ResourceNotFound("Expense not found")

    return check


# -------------------------------------------------------------
# LIST Expenses for a Building
# -------------------------------------------------------------
@router.get("", summary="List Expenses")
def list_expenses(
    building_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    decision: Allow = Depends(requires("expenses.read")),
    client: Client = Depends(get_store_client),
):
    rows, total = expense_store(client).list(
        {"building_id": building_id},
        order="expense_date",
        desc=True,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return paginate(rows, total, page, limit)


# -------------------------------------------------------------
# GET Single Expense
# -------------------------------------------------------------
@router.get("/{expense_id}", summary="Get Expense")
def get_expense(
    building_id: str,
    expense_id: str,
    decision: Allow = Depends(requires("expenses.read")),
    client: Client = Depends(get_store_client),
):
    row = expense_store(client).require(expense_id)
    belongs_to(building_id)(row)
    return row


# -------------------------------------------------------------
# CREATE Expense
# -------------------------------------------------------------
@router.post("", status_code=201, summary="Create Expense")
def create_expense(
    building_id: str,
    payload: ExpenseCreate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    if payload.is_direct_charge and not payload.charged_apartment_id:
        raise InvalidRequest("charged_apartment_id is required for a direct charge")

    data = payload.model_dump(mode="json")
    data["building_id"] = building_id
    if not payload.is_direct_charge:
        data["charged_apartment_id"] = None

    def precheck():
        TableStore(client, "buildings", "Building").require(building_id, error=TenantNotFound)
        TableStore(client, "expense_categories", "Expense category").require(payload.category_id)
        if payload.is_direct_charge:
            apartment = TableStore(client, "apartments", "Apartment").get(payload.charged_apartment_id)
            if not apartment or apartment.get("building_id") != building_id:
                raise ResourceNotFound("Apartment not found in this building")

    return mutations.create(
        actor,
        "expenses.create",
        expense_store(client),
        data,
        target_tenant=building_id,
        precheck=precheck,
    )


# -------------------------------------------------------------
# UPDATE Expense
# -------------------------------------------------------------
@router.patch("/{expense_id}", summary="Update Expense")
def update_expense(
    building_id: str,
    expense_id: str,
    payload: ExpenseUpdate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    return mutations.update(
        actor,
        "expenses.update",
        expense_store(client),
        expense_id,
        payload.model_dump(mode="json", exclude_unset=True),
        target_tenant=building_id,
        precheck=belongs_to(building_id),
    )


# -------------------------------------------------------------
# DELETE Expense (soft)
# -------------------------------------------------------------
@router.delete("/{expense_id}", summary="Delete Expense")
def delete_expense(
    building_id: str,
    expense_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    mutations.delete(
        actor,
        "expenses.delete",
        expense_store(client),
        expense_id,
        target_tenant=building_id,
        precheck=belongs_to(building_id),
    )
    return {"message": "Expense deleted successfully"}

# routers/expense_categories.py

from fastapi import APIRouter, Depends
from supabase import Client

from core.authorization import Allow
from core.errors import ConflictingState
from core.mutations import MutationWrapper
from core.permission_helpers import requires
from core.roles import Actor
from core.store import TableStore
from core.supabase_client import get_store_client
from dependencies.auth import get_current_user
from dependencies.stores import get_mutation_wrapper
from models.expense_category import ExpenseCategoryCreate, ExpenseCategoryUpdate


router = APIRouter(
    prefix="/expense-categories",
    tags=["Expense Categories"],
)

DUPLICATE_NAME = "Category with this name already exists"


def category_store(client: Client) -> TableStore:
    return TableStore(client, "expense_categories", "Expense category")


# -------------------------------------------------------------
# LIST / GET (categories are global, shared by every building)
# -------------------------------------------------------------
@router.get("", summary="List Expense Categories")
def list_categories(
    decision: Allow = Depends(requires("expense_categories.read")),
    client: Client = Depends(get_store_client),
):
    rows, _ = category_store(client).list(order="name")
    return rows


@router.get("/{category_id}", summary="Get Expense Category")
def get_category(
    category_id: str,
    decision: Allow = Depends(requires("expense_categories.read")),
    client: Client = Depends(get_store_client),
):
    return category_store(client).require(category_id)


# -------------------------------------------------------------
# CREATE
# -------------------------------------------------------------
@router.post("", status_code=201, summary="Create Expense Category")
def create_category(
    payload: ExpenseCategoryCreate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    categories = category_store(client)

    def precheck():
        # Names stay unique even across deleted rows
        if categories.find({"name": payload.name}, include_deleted=True):
            raise ConflictingState(DUPLICATE_NAME)

    return mutations.create(
        actor,
        "expense_categories.create",
        categories,
        {**payload.model_dump(), "is_active": True},
        precheck=precheck,
    )


# -------------------------------------------------------------
# UPDATE
# -------------------------------------------------------------
@router.patch("/{category_id}", summary="Update Expense Category")
def update_category(
    category_id: str,
    payload: ExpenseCategoryUpdate,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    categories = category_store(client)
    changes = payload.model_dump(exclude_unset=True)

    def precheck(current: dict):
        name = changes.get("name")
        if name and name != current.get("name"):
            if categories.find({"name": name}, include_deleted=True):
                raise ConflictingState(DUPLICATE_NAME)

    return mutations.update(
        actor,
        "expense_categories.update",
        categories,
        category_id,
        changes,
        precheck=precheck,
    )


# -------------------------------------------------------------
# DELETE (soft)
# -------------------------------------------------------------
@router.delete("/{category_id}", summary="Delete Expense Category")
def delete_category(
    category_id: str,
    actor: Actor = Depends(get_current_user),
    mutations: MutationWrapper = Depends(get_mutation_wrapper),
    client: Client = Depends(get_store_client),
):
    mutations.delete(actor, "expense_categories.delete", category_store(client), category_id)
    return {"message": "Expense category deleted successfully"}

# tests/test_expense_categories.py

"""
Tests for the global expense category catalog.
"""

from fastapi.testclient import TestClient


def test_list_categories_sorted(client: TestClient, act_as, read_only_user, fake_db):
    act_as(read_only_user)
    fake_db.seed("expense_categories", {"id": "c-2", "name": "WATER"})
    fake_db.seed("expense_categories", {"id": "c-1", "name": "ELEVATOR"})
    fake_db.seed("expense_categories", {"id": "c-3", "name": "OIL", "deleted_at": "2024-01-01T00:00:00+00:00"})

    response = client.get("/expense-categories")

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["ELEVATOR", "WATER"]


def test_create_category(client: TestClient, act_as, super_admin, fake_db):
    act_as(super_admin)

    response = client.post("/expense-categories", json={"name": "GARDEN", "description": "Gardening"})

    assert response.status_code == 201
    category = response.json()
    assert category["is_active"] is True
    entry = fake_db.rows("audit_logs")[0]
    assert (entry["action"], entry["entity"], entry["entity_id"]) == ("CREATE", "Expense category", category["id"])


def test_create_category_duplicate_name(client: TestClient, act_as, super_admin, fake_db):
    act_as(super_admin)
    fake_db.seed("expense_categories", {"name": "WATER", "deleted_at": "2024-01-01T00:00:00+00:00"})

    response = client.post("/expense-categories", json={"name": "WATER"})

    assert response.status_code == 409
    assert response.json()["detail"] == "Category with this name already exists"
    assert fake_db.rows("audit_logs") == []


def test_building_admin_cannot_create_category(client: TestClient, act_as, building_admin, fake_db):
    act_as(building_admin)

    response = client.post("/expense-categories", json={"name": "GARDEN"})

    assert response.status_code == 403
    assert fake_db.rows("expense_categories") == []


def test_rename_category_to_taken_name(client: TestClient, act_as, super_admin, fake_db):
    act_as(super_admin)
    fake_db.seed("expense_categories", {"id": "c-1", "name": "WATER"})
    fake_db.seed("expense_categories", {"id": "c-2", "name": "OIL"})

    assert client.patch("/expense-categories/c-2", json={"name": "WATER"}).status_code == 409

    response = client.patch("/expense-categories/c-2", json={"description": "Heating oil"})
    assert response.status_code == 200
    assert response.json()["description"] == "Heating oil"


def test_delete_category_is_soft(client: TestClient, act_as, super_admin, fake_db):
    act_as(super_admin)
    fake_db.seed("expense_categories", {"id": "c-1", "name": "WATER"})

    response = client.delete("/expense-categories/c-1")

    assert response.json() == {"message": "Expense category deleted successfully"}
    assert fake_db.rows("expense_categories")[0]["deleted_at"] is not None
    assert client.get("/expense-categories/c-1").status_code == 404
    assert fake_db.rows("audit_logs")[0]["action"] == "DELETE"

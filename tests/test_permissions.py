# tests/test_permissions.py

"""
Tests for permission checks and access control.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from core.config import settings


def seed_building(fake_db, building_id):
    return fake_db.seed("buildings", {
        "id": building_id,
        "name": f"Building {building_id}",
        "address": "Main St 1",
        "city": "Athens",
        "postal_code": "10431",
        "apartment_count": 4,
        "is_active": True,
    })


def test_user_without_roles_forbidden(client: TestClient, act_as, no_role_user, fake_db):
    act_as(no_role_user)
    seed_building(fake_db, "b-1")

    response = client.get("/buildings")

    assert response.status_code == 403
    assert response.json()["detail"] == "No roles assigned to user"


def test_read_only_cannot_write(client: TestClient, act_as, read_only_user, fake_db):
    act_as(read_only_user)
    seed_building(fake_db, "b-1")

    response = client.patch("/buildings/b-1", json={"city": "Patras"})

    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions"
    assert fake_db.rows("buildings")[0]["city"] == "Athens"
    assert fake_db.rows("audit_logs") == []


def test_building_admin_cannot_delete_building(client: TestClient, act_as, building_admin, fake_db):
    act_as(building_admin)
    seed_building(fake_db, "b-1")

    response = client.delete("/buildings/b-1")

    assert response.status_code == 403
    assert fake_db.rows("buildings")[0].get("deleted_at") is None


def test_building_admin_role_is_not_scope_checked(client: TestClient, act_as, building_admin, fake_db):
    """Role match alone admits a BUILDING_ADMIN of b-1 to building b-2."""
    act_as(building_admin)
    seed_building(fake_db, "b-2")

    response = client.patch("/buildings/b-2", json={"city": "Patras"})

    assert response.status_code == 200


def test_enforced_scope_rejects_other_building(client: TestClient, act_as, building_admin, fake_db):
    act_as(building_admin)
    seed_building(fake_db, "b-2")

    with patch.object(settings, "ENFORCE_TENANT_SCOPE", True):
        response = client.patch("/buildings/b-2", json={"city": "Patras"})

    assert response.status_code == 403
    assert response.json()["detail"] == "Role not granted for this building"


def test_admin_access_all_data(client: TestClient, act_as, super_admin, fake_db):
    act_as(super_admin)
    seed_building(fake_db, "1")
    seed_building(fake_db, "2")

    response = client.get("/buildings")

    assert response.status_code == 200
    assert len(response.json()["data"]) == 2


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/audit-logs"),
        ("post", "/users/u-1/roles"),
        ("delete", "/users/u-1"),
    ],
)
def test_super_admin_only_routes(client: TestClient, act_as, building_admin, method, path):
    act_as(building_admin)

    kwargs = {"json": {"role": "READ_ONLY", "building_id": "b-1"}} if method == "post" else {}
    response = getattr(client, method)(path, **kwargs)

    assert response.status_code == 403


def test_unauthenticated_request_rejected(client: TestClient):
    response = client.get("/buildings")
    assert response.status_code == 401

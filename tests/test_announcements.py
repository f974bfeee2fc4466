# tests/test_announcements.py

"""
Tests for building announcements.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def setup(fake_db):
    fake_db.seed("buildings", {"id": "b-1", "name": "Alpha"})
    fake_db.seed("buildings", {"id": "b-2", "name": "Beta"})


NOTICE = {
    "title": "Water outage",
    "content": "No water on Monday 09:00-12:00.",
}


def test_create_announcement(client: TestClient, act_as, building_admin, fake_db, setup):
    act_as(building_admin)

    response = client.post("/buildings/b-1/announcements", json=NOTICE)

    assert response.status_code == 201
    notice = response.json()
    assert notice["building_id"] == "b-1"
    assert notice["priority"] == "NORMAL"
    assert notice["created_by"] == building_admin.id
    entry = fake_db.rows("audit_logs")[0]
    assert (entry["action"], entry["entity"]) == ("CREATE", "Announcement")


def test_create_announcement_unknown_building(client: TestClient, act_as, super_admin, fake_db):
    act_as(super_admin)

    response = client.post("/buildings/b-9/announcements", json=NOTICE)

    assert response.status_code == 404
    assert response.json()["detail"] == "Building b-9 not found"


def test_read_only_cannot_post(client: TestClient, act_as, read_only_user, fake_db, setup):
    act_as(read_only_user)

    response = client.post("/buildings/b-1/announcements", json=NOTICE)

    assert response.status_code == 403
    assert fake_db.rows("announcements") == []


def test_list_orders_by_priority_then_newest(client: TestClient, act_as, read_only_user, fake_db, setup):
    act_as(read_only_user)
    fake_db.seed("announcements", {"id": "n-1", "building_id": "b-1", "priority": "NORMAL"})
    fake_db.seed("announcements", {"id": "n-2", "building_id": "b-1", "priority": "URGENT"})
    fake_db.seed("announcements", {"id": "n-3", "building_id": "b-1", "priority": "NORMAL"})
    fake_db.seed("announcements", {"id": "n-4", "building_id": "b-1", "priority": "LOW"})
    fake_db.seed("announcements", {"id": "n-5", "building_id": "b-2", "priority": "HIGH"})

    response = client.get("/buildings/b-1/announcements")

    assert [n["id"] for n in response.json()] == ["n-2", "n-3", "n-1", "n-4"]


def test_announcement_from_other_building_hidden(client: TestClient, act_as, super_admin, fake_db, setup):
    act_as(super_admin)
    fake_db.seed("announcements", {"id": "n-1", "building_id": "b-2", "title": "Beta only"})

    assert client.get("/buildings/b-1/announcements/n-1").status_code == 404
    assert client.patch("/buildings/b-1/announcements/n-1", json={"title": "x"}).status_code == 404
    assert fake_db.rows("announcements")[0]["title"] == "Beta only"


def test_update_and_delete_announcement(client: TestClient, act_as, building_admin, fake_db, setup):
    act_as(building_admin)
    fake_db.seed("announcements", {"id": "n-1", "building_id": "b-1", "title": "Old", "priority": "NORMAL"})

    response = client.patch("/buildings/b-1/announcements/n-1", json={"priority": "HIGH"})
    assert response.status_code == 200
    assert response.json()["priority"] == "HIGH"

    response = client.delete("/buildings/b-1/announcements/n-1")
    assert response.json() == {"message": "Announcement deleted successfully"}
    assert fake_db.rows("announcements")[0]["deleted_at"] is not None

    actions = [e["action"] for e in fake_db.rows("audit_logs")]
    assert actions == ["UPDATE", "DELETE"]

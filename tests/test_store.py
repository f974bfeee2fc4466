# tests/test_store.py

"""
Tests for the table store, record status and the role binding store.
"""

from datetime import datetime, timezone

import pytest

from core.binding_store import RoleBindingStore
from core.errors import ConflictingState, ResourceNotFound, StoreFailure, TenantNotFound
from core.roles import RoleBinding
from core.soft_delete import Active, Deleted, record_status, retention_cutoff
from core.store import TableStore
from models.enums import RoleName


# ============================================================
# Record status
# ============================================================
def test_record_status_active():
    assert record_status({"id": "1", "deleted_at": None}) == Active()


def test_record_status_parses_timestamp():
    status = record_status({"deleted_at": "2024-03-01T10:00:00Z"})
    assert isinstance(status, Deleted)
    assert status.at == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)


def test_retention_cutoff():
    now = datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert retention_cutoff(31, now) == datetime(2024, 3, 1, tzinfo=timezone.utc)


# ============================================================
# Table store
# ============================================================
@pytest.fixture
def buildings(fake_db):
    return TableStore(fake_db, "buildings", "Building")


def test_require_missing_uses_label(buildings):
    with pytest.raises(ResourceNotFound) as exc:
        buildings.require("nope")
    assert exc.value.detail == "Building not found"


def test_require_missing_tenant(buildings):
    with pytest.raises(TenantNotFound) as exc:
        buildings.require("b-9", error=TenantNotFound)
    assert exc.value.detail == "Building b-9 not found"
    assert exc.value.status_code == 404


def test_insert_sanitizes_strings(fake_db, buildings):
    row = buildings.insert({"name": "  Alpha  ", "tax_id": "", "postal_code": "01234"})
    assert row["name"] == "Alpha"
    assert row["tax_id"] is None
    assert row["postal_code"] == "01234"


def test_list_hides_deleted_and_counts(fake_db, buildings):
    fake_db.seed("buildings", {"id": "b-1", "name": "A"})
    fake_db.seed("buildings", {"id": "b-2", "name": "B", "deleted_at": "2024-01-01T00:00:00+00:00"})
    fake_db.seed("buildings", {"id": "b-3", "name": "C"})

    rows, total = buildings.list(order="name", limit=1)
    assert total == 2
    assert [r["id"] for r in rows] == ["b-1"]

    rows, total = buildings.list(include_deleted=True)
    assert total == 3


def test_list_in_filter(fake_db, buildings):
    for i in range(3):
        fake_db.seed("buildings", {"id": f"b-{i}", "name": str(i)})
    rows, _ = buildings.list(in_filters={"id": ["b-0", "b-2"]})
    assert {r["id"] for r in rows} == {"b-0", "b-2"}


def test_soft_delete_and_restore(fake_db, buildings):
    fake_db.seed("buildings", {"id": "b-1", "name": "A"})

    buildings.soft_delete("b-1")
    assert buildings.get("b-1") is None

    restored = buildings.restore("b-1")
    assert restored["deleted_at"] is None
    assert buildings.get("b-1")["name"] == "A"


def test_update_skips_deleted_rows(fake_db, buildings):
    fake_db.seed("buildings", {"id": "b-1", "name": "A", "deleted_at": "2024-01-01T00:00:00+00:00"})
    assert buildings.update("b-1", {"name": "B"}) is None


def test_hard_delete_for_tables_without_soft_delete(fake_db):
    roles = TableStore(fake_db, "user_roles", "Role binding")
    fake_db.seed("user_roles", {"id": "r-1", "user_id": "u-1", "role": "READ_ONLY"})

    roles.soft_delete("r-1")

    assert fake_db.rows("user_roles") == []


def test_purge_removes_only_old_deleted_rows(fake_db, buildings):
    fake_db.seed("buildings", {"id": "old", "deleted_at": "2024-01-01T00:00:00+00:00"})
    fake_db.seed("buildings", {"id": "recent", "deleted_at": "2024-06-01T00:00:00+00:00"})
    fake_db.seed("buildings", {"id": "live", "deleted_at": None})

    purged = buildings.purge_deleted(datetime(2024, 3, 1, tzinfo=timezone.utc))

    assert [r["id"] for r in purged] == ["old"]
    assert {r["id"] for r in fake_db.rows("buildings")} == {"recent", "live"}


@pytest.mark.parametrize(
    "message, expected",
    [
        ("duplicate key value violates unique constraint", ConflictingState),
        ("insert violates foreign key constraint", ConflictingState),
        ("relation does not exist", ResourceNotFound),
        ("connection reset by peer", StoreFailure),
    ],
)
def test_store_errors_are_classified(fake_db, buildings, message, expected):
    fake_db.fail("buildings", "insert", Exception(message))
    with pytest.raises(expected):
        buildings.insert({"name": "A"})


# ============================================================
# Role binding store
# ============================================================
@pytest.fixture
def bindings(fake_db):
    return RoleBindingStore(fake_db)


def test_bindings_for_user(fake_db, bindings):
    fake_db.seed("user_roles", {"user_id": "u-1", "role": "SUPER_ADMIN", "building_id": None})
    fake_db.seed("user_roles", {"user_id": "u-1", "role": "READ_ONLY", "building_id": "b-1"})
    fake_db.seed("user_roles", {"user_id": "u-2", "role": "BUILDING_ADMIN", "building_id": "b-1"})

    assert bindings.bindings_for("u-1") == frozenset({
        RoleBinding(role=RoleName.SUPER_ADMIN),
        RoleBinding(role=RoleName.READ_ONLY, building_id="b-1"),
    })


def test_bindings_for_unknown_user_is_empty(bindings):
    assert bindings.bindings_for("ghost") == frozenset()


def test_ensure_is_idempotent(fake_db, bindings):
    grant = RoleBinding(role=RoleName.SUPER_ADMIN)

    _, first = bindings.ensure("u-1", grant)
    _, second = bindings.ensure("u-1", grant)

    assert (first, second) == (True, False)
    assert len(fake_db.rows("user_roles")) == 1


def test_global_and_scoped_bindings_are_distinct(bindings):
    bindings.create("u-1", RoleBinding(role=RoleName.BUILDING_ADMIN, building_id="b-1"))
    assert bindings.find_existing("u-1", RoleBinding(role=RoleName.BUILDING_ADMIN)) is None


def test_revoke(fake_db, bindings):
    grant = RoleBinding(role=RoleName.READ_ONLY, building_id="b-1")
    bindings.create("u-1", grant)

    removed = bindings.revoke("u-1", grant)

    assert removed["role"] == "READ_ONLY"
    assert fake_db.rows("user_roles") == []
    with pytest.raises(ResourceNotFound):
        bindings.revoke("u-1", grant)

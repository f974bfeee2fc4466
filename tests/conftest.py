# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

`FakeSupabase` is a small in-memory stand-in for the supabase-py client:
enough of the PostgREST query builder (select/insert/update/delete with
eq/is_/in_/lt/order/range/limit) and of GoTrue to drive the stores and
routers end to end.
"""

import copy
import threading
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from core.audit import AuditLedger
from core.mutations import MutationWrapper
from core.roles import Actor, RoleBinding
from core.supabase_client import get_store_client
from dependencies.auth import get_current_user
from main import create_app
from models.enums import RoleName


# ============================================================
# In-memory PostgREST
# ============================================================
class FakeResult:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.want_count = False
        self.payload = None
        self.filters = []
        self.ordering = None
        self.bounds = None
        self.max_rows = None

    # ---- verbs ----
    def select(self, columns="*", count=None):
        self.op = "select"
        self.columns = columns
        self.want_count = count is not None
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # ---- filters ----
    def eq(self, key, value):
        self.filters.append(lambda row: row.get(key) == value)
        return self

    def is_(self, key, value):
        assert value == "null"
        self.filters.append(lambda row: row.get(key) is None)
        return self

    def in_(self, key, values):
        allowed = set(values)
        self.filters.append(lambda row: row.get(key) in allowed)
        return self

    def lt(self, key, value):
        self.filters.append(lambda row: row.get(key) is not None and row.get(key) < value)
        return self

    # ---- modifiers ----
    def order(self, key, desc=False):
        self.ordering = (key, desc)
        return self

    def range(self, start, end):
        self.bounds = (start, end)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    # ---- execution ----
    def _matching(self):
        rows = self.db.tables.setdefault(self.table, [])
        return [row for row in rows if all(f(row) for f in self.filters)]

    def _project(self, row):
        if self.columns == "*":
            return dict(row)
        keys = [c.strip() for c in self.columns.split(",")]
        return {k: row.get(k) for k in keys}

    def execute(self):
        self.db.calls.append((self.table, self.op))
        failure = self.db.failures.get((self.table, self.op))
        if failure is not None:
            raise failure

        with self.db.lock:
            if self.op == "insert":
                return FakeResult(self._insert())
            if self.op == "update":
                return FakeResult(self._update())
            if self.op == "delete":
                return FakeResult(self._delete())
            return self._select()

    def _insert(self):
        payloads = self.payload if isinstance(self.payload, list) else [self.payload]
        inserted = []
        for payload in payloads:
            now = self.db.now()
            row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
            row.update(copy.deepcopy(payload))
            self.db.tables.setdefault(self.table, []).append(row)
            inserted.append(dict(row))
        return inserted

    def _update(self):
        updated = []
        for row in self._matching():
            row.update(copy.deepcopy(self.payload))
            updated.append(dict(row))
        return updated

    def _delete(self):
        doomed = self._matching()
        self.db.tables[self.table] = [
            row for row in self.db.tables.get(self.table, []) if row not in doomed
        ]
        return [dict(row) for row in doomed]

    def _select(self):
        rows = self._matching()
        total = len(rows)
        if self.ordering:
            key, desc = self.ordering
            rows = sorted(rows, key=lambda r: (r.get(key) is None, r.get(key) or ""), reverse=desc)
        if self.bounds:
            start, end = self.bounds
            rows = rows[start:end + 1]
        if self.max_rows is not None:
            rows = rows[:self.max_rows]
        return FakeResult(
            [self._project(row) for row in rows],
            count=total if self.want_count else None,
        )


# ============================================================
# In-memory GoTrue
# ============================================================
class FakeAdminAuth:
    def __init__(self, auth: "FakeAuth"):
        self.auth = auth

    def create_user(self, attributes):
        user = SimpleNamespace(id=str(uuid.uuid4()), email=attributes["email"])
        self.auth.users[user.email] = (user, attributes["password"])
        return SimpleNamespace(user=user)

    def update_user_by_id(self, user_id, attributes):
        for email, (user, _) in list(self.auth.users.items()):
            if user.id == user_id:
                self.auth.users[email] = (user, attributes.get("password"))
                return SimpleNamespace(user=user)
        raise Exception("User not found")

    def delete_user(self, user_id, should_soft_delete=False):
        for email, (user, _) in list(self.auth.users.items()):
            if user.id == user_id:
                del self.auth.users[email]
                return
        raise Exception("User not found")


class FakeAuth:
    def __init__(self):
        self.users = {}
        self.tokens = {}
        self.admin = FakeAdminAuth(self)

    def register(self, user_id, email, password="secret123", token=None):
        user = SimpleNamespace(id=user_id, email=email)
        self.users[email] = (user, password)
        if token:
            self.tokens[token] = user
        return user

    def sign_in_with_password(self, credentials):
        entry = self.users.get(credentials["email"])
        if not entry or entry[1] != credentials["password"]:
            raise Exception("Invalid login credentials")
        user = entry[0]
        token = f"token-{user.id}"
        self.tokens[token] = user
        session = SimpleNamespace(access_token=token, refresh_token="refresh", expires_in=3600)
        return SimpleNamespace(user=user, session=session)

    def get_user(self, token):
        user = self.tokens.get(token)
        if user is None:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=user)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failures = {}
        self.lock = threading.RLock()
        self.auth = FakeAuth()
        self._tick = 0

    def now(self) -> str:
        # Strictly increasing so compare-and-set versions never collide
        self._tick += 1
        base = datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp() + self._tick
        return datetime.fromtimestamp(base, tz=timezone.utc).isoformat()

    def table(self, name):
        return FakeQuery(self, name)

    def seed(self, table, row):
        now = self.now()
        full = {"created_at": now, "updated_at": now}
        full.update(row)
        full.setdefault("id", str(uuid.uuid4()))
        self.tables.setdefault(table, []).append(full)
        return full

    def rows(self, table):
        return self.tables.get(table, [])

    def fail(self, table, op, error=None):
        self.failures[(table, op)] = error or Exception("connection reset by peer")


# ============================================================
# Actors
# ============================================================
def make_actor(user_id, *bindings):
    return Actor(
        id=user_id,
        email=f"{user_id}@example.com",
        bindings=frozenset(RoleBinding(role=r, building_id=b) for r, b in bindings),
    )


@pytest.fixture
def super_admin():
    return make_actor("admin-1", (RoleName.SUPER_ADMIN, None))


@pytest.fixture
def building_admin():
    return make_actor("badmin-1", (RoleName.BUILDING_ADMIN, "b-1"))


@pytest.fixture
def read_only_user():
    return make_actor("reader-1", (RoleName.READ_ONLY, "b-1"))


@pytest.fixture
def no_role_user():
    return make_actor("nobody-1")


# ============================================================
# Stores
# ============================================================
@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def ledger(fake_db):
    return AuditLedger(fake_db, timeout_seconds=2.0)


@pytest.fixture
def mutations(ledger):
    return MutationWrapper(ledger)


# ============================================================
# App
# ============================================================
@pytest.fixture(scope="function")
def app(fake_db):
    """Create a test FastAPI application wired to the in-memory store."""
    application = create_app()
    application.dependency_overrides[get_store_client] = lambda: fake_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def act_as(app):
    """Authenticate every request as the given actor."""

    def use(actor):
        app.dependency_overrides[get_current_user] = lambda: actor
        return actor

    return use

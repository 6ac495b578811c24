# backend/tests/conftest.py

import os
import uuid
from datetime import datetime, timezone

import pytest

os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

from app.main import app  # noqa: E402
from app.api import deps  # noqa: E402
from app.api.v1.endpoints import surveys  # noqa: E402
from app.schemas.user import User  # noqa: E402


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Just enough of the postgrest query builder for the survey endpoints."""

    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.rows = client.tables.setdefault(name, [])
        self.operation = "select"
        self.filters = []
        self.payload = None
        self.count = None
        self.orderings = []
        self.window = None

    def select(self, *columns, count=None):
        self.count = count
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.orderings.append((column, desc))
        return self

    def range(self, start, end):
        self.window = (start, end)
        return self

    def matches(self, row):
        return all(row.get(c) == v for c, v in self.filters)

    def execute(self):
        self.client.requests.append((self.name, self.operation))
        failure = self.client.failures.get((self.name, self.operation))
        if failure is not None:
            if isinstance(failure, Exception):
                raise failure
            return FakeResponse([])

        if self.operation == "insert":
            now = datetime.now(timezone.utc).isoformat()
            row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, "submitted_at": now, **self.payload}
            self.rows.append(row)
            return FakeResponse([row])

        if self.operation == "update":
            updated = [r for r in self.rows if self.matches(r)]
            for row in updated:
                row.update(self.payload)
            return FakeResponse(updated)

        if self.operation == "delete":
            deleted = [r for r in self.rows if self.matches(r)]
            self.rows[:] = [r for r in self.rows if not self.matches(r)]
            return FakeResponse(deleted)

        result = [r for r in self.rows if self.matches(r)]
        for column, desc in reversed(self.orderings):
            result.sort(key=lambda r: r.get(column) or "", reverse=desc)
        total = len(result)
        if self.window:
            start, end = self.window
            result = result[start:end + 1]
        if self.client.max_rows is not None:
            result = result[:self.client.max_rows]
        return FakeResponse(result, total if self.count else None)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.requests = []
        self.failures = {}
        # PostgREST max-rows: never more than this many rows per request
        self.max_rows = None

    def table(self, name):
        return FakeQuery(self, name)

    def fail(self, table, operation, error=None):
        """Make `operation` on `table` raise `error`, or return no rows when None."""
        self.failures[(table, operation)] = error if error is not None else "empty"


OWNER = User(id="admin-1", email="owner@example.com", role="admin")


def make_survey_row(**overrides):
    row = {
        "id": "survey-1",
        "title": "Customer feedback",
        "description": "Quarterly feedback form",
        "structure": [
            {"id": "q1", "type": "radio", "label": "Would you recommend us?", "required": True,
             "options": [{"id": "opt1", "label": "Yes"}, {"id": "opt2", "label": "No"}]},
            {"id": "q2", "type": "scale", "label": "Rate the service", "required": False},
            {"id": "q3", "type": "text", "label": "Comments", "required": False},
        ],
        "expires_at": None,
        "is_active": True,
        "is_anonymous": False,
        "qr_code": None,
        "created_by": OWNER.id,
        "created_at": "2024-01-01T10:00:00+00:00",
        "updated_at": "2024-01-01T10:00:00+00:00",
    }
    row.update(overrides)
    return row


@pytest.fixture
def fake_supabase(monkeypatch):
    fake = FakeSupabase()
    monkeypatch.setattr(surveys, "get_supabase", lambda: fake)
    return fake


@pytest.fixture
def login():
    def _login(user=OWNER):
        app.dependency_overrides[deps.get_current_user] = lambda: user
        return user

    yield _login
    app.dependency_overrides.clear()

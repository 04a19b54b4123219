"""Shared fixtures for HabitFlow tests.

The API tests run against an in-memory stand-in for the Supabase query
builder, covering just the calls the services make:
table().select().eq().execute(), insert(), update() and delete().
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from habitflow.core.database import get_database
from habitflow.core.security import verify_token
from habitflow.main import app

TEST_USER_ID = "user-123"


@dataclass
class FakeResponse:
    data: List[Dict[str, Any]]


class FakeQuery:
    """Chainable query over one in-memory table."""

    def __init__(self, rows: List[Dict[str, Any]]):
        self._rows = rows
        self._action = "select"
        self._payload: Optional[Any] = None
        self._filters: List[tuple] = []

    def select(self, *_columns: str) -> "FakeQuery":
        self._action = "select"
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._action = "insert"
        self._payload = payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self._action = "update"
        self._payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self._action = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in self._filters)

    def execute(self) -> FakeResponse:
        if self._action == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = [copy.deepcopy(row) for row in payload]
            self._rows.extend(inserted)
            return FakeResponse(data=copy.deepcopy(inserted))

        matched = [row for row in self._rows if self._matches(row)]

        if self._action == "update":
            for row in matched:
                row.update(copy.deepcopy(self._payload))
        elif self._action == "delete":
            self._rows[:] = [row for row in self._rows if not self._matches(row)]

        return FakeResponse(data=copy.deepcopy(matched))


class FakeSupabase:
    """Minimal in-memory Supabase client."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.tables.setdefault(name, []))

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(name, [])


@pytest.fixture
def fake_db() -> FakeSupabase:
    """Empty fake database."""
    return FakeSupabase()


@pytest.fixture
def client(fake_db: FakeSupabase):
    """TestClient authenticated as TEST_USER_ID and backed by fake_db."""

    async def override_database():
        return fake_db

    async def override_user():
        return TEST_USER_ID

    app.dependency_overrides[get_database] = override_database
    app.dependency_overrides[verify_token] = override_user
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(fake_db: FakeSupabase):
    """TestClient with the real token check and the fake database."""

    async def override_database():
        return fake_db

    app.dependency_overrides[get_database] = override_database
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

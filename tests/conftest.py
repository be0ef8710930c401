# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - An in-memory stand-in for the Supabase client (tables + storage) so
#   services can be tested without a database
# - Service fixtures wired to that client
# =============================================================================

import os
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123")
os.environ.setdefault("APP_URL", "http://localhost:3000")
os.environ.setdefault("ALLOWED_EMAIL_DOMAINS", "acme.com")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from postgrest.exceptions import APIError

from core.services.access_control import AccessConfig, AccessPolicy
from core.services.user_service import UserService
from core.services.whitelist_service import WhitelistService


# =============================================================================
# In-memory Supabase
# =============================================================================

class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]):
        self.data = data


class FakeQuery:
    """
    Records one query builder chain and runs it on execute().

    Supports the subset the services use: select/insert/update/delete,
    eq, order and limit.
    """

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.columns = "*"
        self.payload: dict[str, Any] | None = None
        self.filters: list[tuple[str, Any]] = []
        self.order_by: tuple[str, bool] | None = None
        self.row_limit: int | None = None

    def select(self, columns: str = "*"):
        self.columns = columns
        return self

    def insert(self, data: dict[str, Any]):
        self.operation = "insert"
        self.payload = data
        return self

    def update(self, data: dict[str, Any]):
        self.operation = "update"
        self.payload = data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def limit(self, count: int):
        self.row_limit = count
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in self.filters)

    def _project(self, row: dict[str, Any]) -> dict[str, Any]:
        if self.columns.strip() == "*":
            return dict(row)
        return {c.strip(): row.get(c.strip()) for c in self.columns.split(",")}

    def execute(self) -> FakeResponse:
        self.db.queries.append((self.table, self.operation))
        if self.db.fail_with is not None:
            raise self.db.fail_with

        rows = self.db.tables.setdefault(self.table, [])

        if self.operation == "insert":
            row = dict(self.payload)
            for column in self.db.unique.get(self.table, []):
                if any(existing.get(column) == row.get(column) for existing in rows):
                    raise APIError({
                        "code": "23505",
                        "message": f'duplicate key value violates unique constraint "{self.table}_{column}_key"',
                        "hint": None,
                        "details": None,
                    })
            rows.append(row)
            return FakeResponse([dict(row)])

        matched = [row for row in rows if self._matches(row)]

        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.operation == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([dict(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda r: r.get(column) or "", reverse=desc)
        if self.row_limit is not None:
            matched = matched[: self.row_limit]
        return FakeResponse([self._project(row) for row in matched])


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path: str, file: bytes, file_options: dict[str, str] | None = None):
        if self.storage.fail_with is not None:
            raise self.storage.fail_with
        self.storage.objects[(self.name, path)] = {
            "content": file,
            "content_type": (file_options or {}).get("content-type"),
        }
        return {"Key": f"{self.name}/{path}"}

    def get_public_url(self, path: str) -> str:
        return f"https://test-project.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths: list[str]):
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return []


class FakeStorage:
    def __init__(self):
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}
        self.fail_with: Exception | None = None

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)

    def get_bucket(self, name: str) -> dict[str, str]:
        return {"id": name, "name": name}


class FakeSupabase:
    """
    In-memory replacement for supabase.Client.

    Attributes:
        tables: Rows per table name
        unique: Columns with a unique constraint, per table
        queries: (table, operation) for every executed query
        fail_with: If set, every query raises this exception
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.unique = {"users": ["email"], "email_whitelist": ["email"]}
        self.queries: list[tuple[str, str]] = []
        self.fail_with: Exception | None = None
        self.storage = FakeStorage()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def queries_on(self, table: str) -> list[str]:
        return [operation for name, operation in self.queries if name == table]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    """Empty in-memory Supabase client."""
    return FakeSupabase()


@pytest.fixture
def whitelist_service(fake_db):
    return WhitelistService(fake_db)


@pytest.fixture
def user_service(fake_db):
    return UserService(fake_db)


@pytest.fixture
def access_config():
    return AccessConfig(allowed_domains=("acme.com",))


@pytest.fixture
def access_policy(access_config, whitelist_service):
    return AccessPolicy(access_config, whitelist_service)


def make_user(fake_db: FakeSupabase, email: str, is_admin: bool = False, **extra) -> dict[str, Any]:
    """Insert a user row directly and return it."""
    user = {
        "id": str(uuid4()),
        "name": None,
        "email": email,
        "image": None,
        "is_admin": is_admin,
        "email_verified": None,
        "created_at": datetime.now(timezone.utc).isoformat(),
        **extra,
    }
    fake_db.tables.setdefault("users", []).append(user)
    return dict(user)


def make_whitelist_entry(fake_db: FakeSupabase, email: str, **extra) -> dict[str, Any]:
    """Insert a whitelist row directly and return it."""
    entry = {
        "id": str(uuid4()),
        "email": email,
        "notes": None,
        "created_by": None,
        "created_at": datetime.now(timezone.utc).isoformat(),
        **extra,
    }
    fake_db.tables.setdefault("email_whitelist", []).append(entry)
    return dict(entry)

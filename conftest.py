"""
Shared fixtures for JobPortal tests
In-memory stand-ins for the Supabase query builder and auth client
"""

import copy
import uuid
from datetime import datetime, timedelta, timezone
from itertools import count
from types import SimpleNamespace

import jwt
import pytest

from jobportal.services.application_service import ApplicationService
from jobportal.services.job_service import JobService
from jobportal.services.notification_service import NotificationService
from jobportal.services.profile_service import ProfileService
from jobportal.services.supabase_service import SupabaseService

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

# Columns the backend fills in on insert
DEFAULTS = {
    "jobs": {"is_active": True},
    "job_applications": {"status": "pending", "reviewed_at": None, "employer_message": None},
    "notifications": {"is_read": False},
    "user_profiles": {"is_public": False},
}
TIMESTAMPS = {
    "jobs": ("created_at", "updated_at"),
    "job_applications": ("applied_at",),
    "notifications": ("created_at",),
    "user_profiles": ("created_at", "updated_at"),
}


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.ordering = None
        self.max_rows = None

    def select(self, *columns):
        self.action = "select"
        return self

    def insert(self, payload):
        self.action, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.action, self.payload = "update", payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self.filters.append(lambda row: needle in (row.get(column) or "").lower())
        return self

    def ov(self, column, values):
        self.filters.append(lambda row: bool(set(row.get(column) or []) & set(values)))
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    def execute(self):
        if self.table in self.db.failing_tables:
            raise Exception(f"{self.table} is unavailable")
        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in items:
                row = {"id": str(uuid.uuid4()), **DEFAULTS.get(self.table, {})}
                stamp = self.db.now()
                for column in TIMESTAMPS.get(self.table, ()):
                    row[column] = stamp
                row.update(copy.deepcopy(item))
                rows.append(row)
                created.append(copy.deepcopy(row))
            return SimpleNamespace(data=created)

        matched = [row for row in rows if all(f(row) for f in self.filters)]

        if self.action == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self.action == "delete":
            self.db.tables[self.table] = [row for row in rows if row not in matched]
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self.ordering:
            column, desc = self.ordering
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        if self.max_rows is not None:
            matched = matched[:self.max_rows]
        return SimpleNamespace(data=copy.deepcopy(matched))


class FakeAuthAdmin:
    def __init__(self, auth):
        self.auth = auth

    def sign_out(self, jwt, scope="global"):
        if self.auth.fail_sign_out:
            raise Exception("network down")
        self.auth.revoked_tokens.append(jwt)


class FakeAuth:
    def __init__(self):
        self.accounts = {}
        self.fail_sign_out = False
        self.sign_out_calls = 0
        self.revoked_tokens = []
        self.admin = FakeAuthAdmin(self)

    def _response(self, account):
        user = SimpleNamespace(id=account["id"], email=account["email"], user_metadata=account["metadata"])
        token = make_token(
            sub=account["id"],
            email=account["email"],
            user_metadata=account["metadata"],
            exp=int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
        )
        return SimpleNamespace(user=user, session=SimpleNamespace(access_token=token))

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.accounts:
            raise Exception("User already registered")
        account = {
            "id": str(uuid.uuid4()),
            "email": email,
            "password": credentials["password"],
            "metadata": dict(credentials.get("options", {}).get("data", {})),
        }
        self.accounts[email] = account
        return self._response(account)

    def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials["email"])
        if not account or account["password"] != credentials["password"]:
            raise Exception("Invalid login credentials")
        return self._response(account)

    def sign_out(self):
        self.sign_out_calls += 1
        if self.fail_sign_out:
            raise Exception("network down")


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failing_tables = set()
        self.auth = FakeAuth()
        self._ticks = count()

    def now(self):
        # Strictly increasing so newest-first ordering is deterministic
        return (EPOCH + timedelta(seconds=next(self._ticks))).isoformat()

    def table(self, name):
        return FakeQuery(self, name)


def make_token(**claims):
    return jwt.encode(claims, "test-secret", algorithm="HS256")


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def supabase_service(fake_db):
    return SupabaseService(client=fake_db)


@pytest.fixture
def job_service(supabase_service):
    return JobService(supabase_service)


@pytest.fixture
def application_service(supabase_service):
    return ApplicationService(supabase_service)


@pytest.fixture
def notification_service(supabase_service):
    return NotificationService(supabase_service)


@pytest.fixture
def profile_service(supabase_service):
    return ProfileService(supabase_service)

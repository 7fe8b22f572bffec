"""
Tests for the session store and token handling
"""

import asyncio
import json

import pytest

from conftest import make_token
from jobportal.models.user import UserRole
from jobportal.services.session_service import (
    AuthError,
    FileTokenStorage,
    MemoryTokenStorage,
    SessionStore,
    decode_token,
    local_session,
)

EXPIRY = 1_700_000_000


def claims_token(**overrides):
    claims = {"id": "42", "email": "ada@example.com", "name": "Ada", "role": "employer", "exp": EXPIRY}
    claims.update(overrides)
    return make_token(**claims)


class TestDecodeToken:
    def test_valid_until_expiry_inclusive(self):
        user = decode_token(claims_token(), now=EXPIRY)
        assert user.id == "42"
        assert user.email == "ada@example.com"
        assert user.name == "Ada"
        assert user.role == UserRole.EMPLOYER

    def test_expired_token_is_rejected(self):
        assert decode_token(claims_token(), now=EXPIRY + 1) is None

    def test_missing_expiry_is_rejected(self):
        token = make_token(id="42", email="ada@example.com")
        assert decode_token(token, now=0) is None

    def test_malformed_token_is_rejected(self):
        assert decode_token("not-a-token", now=0) is None

    def test_supabase_style_claims(self):
        token = make_token(
            sub="uuid-1",
            email="bob@example.com",
            role="authenticated",
            user_metadata={"name": "Bob", "role": "jobseeker"},
            exp=EXPIRY,
        )
        user = decode_token(token, now=EXPIRY - 10)
        assert user.id == "uuid-1"
        assert user.name == "Bob"
        assert user.role == UserRole.JOBSEEKER


class TestSessionStore:
    def test_restore_valid_token(self):
        storage = MemoryTokenStorage(claims_token())
        session = SessionStore(None, storage, clock=lambda: EXPIRY - 1)

        user = session.restore()

        assert user.id == "42"
        assert session.is_authenticated
        assert session.token == storage.get()

    def test_restore_expired_token_clears_storage(self):
        storage = MemoryTokenStorage(claims_token())
        session = SessionStore(None, storage, clock=lambda: EXPIRY + 1)

        assert session.restore() is None
        assert storage.get() is None
        assert not session.is_authenticated

    def test_restore_without_token(self):
        assert SessionStore(None).restore() is None

    def test_register_then_login(self, fake_db):
        session = SessionStore(fake_db)
        user = asyncio.run(session.register("emp@example.com", "s3cret", "Emp", UserRole.EMPLOYER))
        assert user.role == UserRole.EMPLOYER
        assert user.name == "Emp"
        assert session.token

        fresh = SessionStore(fake_db)
        logged_in = asyncio.run(fresh.login("emp@example.com", "s3cret"))
        assert logged_in.id == user.id
        assert fresh.storage.get() == fresh.token

    def test_login_failure_raises_backend_message(self, fake_db):
        session = SessionStore(fake_db)
        with pytest.raises(AuthError, match="Invalid login credentials"):
            asyncio.run(session.login("nobody@example.com", "wrong"))
        assert session.user is None

    def test_duplicate_registration_fails(self, fake_db):
        session = SessionStore(fake_db)
        asyncio.run(session.register("a@example.com", "pw", "A", "jobseeker"))
        with pytest.raises(AuthError):
            asyncio.run(session.register("a@example.com", "pw", "A", "jobseeker"))

    def test_logout_revokes_the_session_token(self, fake_db):
        session = SessionStore(fake_db)
        asyncio.run(session.register("a@example.com", "pw", "A", "jobseeker"))
        token = session.token

        asyncio.run(session.logout())

        assert fake_db.auth.revoked_tokens == [token]
        assert fake_db.auth.sign_out_calls == 1
        assert not session.is_authenticated

    def test_logout_clears_state_even_if_backend_fails(self, fake_db):
        session = SessionStore(fake_db)
        asyncio.run(session.register("a@example.com", "pw", "A", "jobseeker"))
        fake_db.auth.fail_sign_out = True

        asyncio.run(session.logout())

        assert fake_db.auth.revoked_tokens == []
        assert session.user is None
        assert session.token is None
        assert session.storage.get() is None


class TestFileTokenStorage:
    def test_token_survives_between_sessions(self, fake_db, tmp_path):
        path = str(tmp_path / "nested" / "session.json")
        first = local_session(fake_db, path)
        assert first.user is None
        asyncio.run(first.register("a@example.com", "pw", "A", "jobseeker"))

        with open(path) as f:
            assert json.load(f) == {"token": first.token}

        second = local_session(fake_db, path)
        assert second.user.email == "a@example.com"

        asyncio.run(second.logout())
        assert FileTokenStorage(path).get() is None

    def test_corrupt_file_reads_as_logged_out(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        assert FileTokenStorage(str(path)).get() is None

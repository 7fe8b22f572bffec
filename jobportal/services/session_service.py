"""
Session service for JobPortal
Tracks who is logged in and keeps the bearer credential between runs.

Decoded token claims are only ever used to show who is signed in. Every
request that matters is authorized by the backend itself.
"""

import json
import logging
import os
import time
from typing import Any, Callable, Dict, Optional

import jwt
from supabase import Client

from jobportal.config import settings
from jobportal.models.user import User, UserRole

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"


class AuthError(Exception):
    """Login/registration rejected; message is the backend's"""


class MemoryTokenStorage:
    """Process-local credential storage"""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStorage:
    """Single-key JSON file, the local analogue of browser storage"""

    def __init__(self, path: str):
        self.path = path

    def get(self) -> Optional[str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f).get(TOKEN_KEY)
        except FileNotFoundError:
            return None
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Unreadable session file {self.path}: {e}")
            return None

    def set(self, token: str) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({TOKEN_KEY: token}, f)

    def clear(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass


def decode_token(token: str, now: Optional[float] = None) -> Optional[User]:
    """
    Read identity claims from a bearer token without verifying it.

    Returns None when the token is malformed, carries no expiry, or has
    expired (now > exp).
    """
    now = time.time() if now is None else now
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.InvalidTokenError as e:
        logger.info(f"Discarding undecodable token: {e}")
        return None

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or now > exp:
        logger.info("Discarding expired token")
        return None

    try:
        return _user_from_claims(claims)
    except (KeyError, ValueError) as e:
        logger.info(f"Discarding token with incomplete claims: {e}")
        return None


def _role(value: Any) -> Optional[UserRole]:
    try:
        return UserRole(value)
    except ValueError:
        return None


def _user_from_claims(claims: Dict[str, Any]) -> User:
    # Supabase puts profile data under user_metadata and uses "role" for its own DB role
    metadata = claims.get("user_metadata") or {}
    return User(
        id=str(claims.get("id") or claims["sub"]),
        email=claims.get("email") or metadata["email"],
        name=claims.get("name") or metadata.get("name"),
        role=_role(claims.get("role")) or _role(metadata.get("role")) or UserRole.JOBSEEKER,
    )


def _user_from_auth(auth_user: Any) -> User:
    metadata = getattr(auth_user, "user_metadata", None) or {}
    return User(
        id=str(auth_user.id),
        email=auth_user.email,
        name=metadata.get("name"),
        role=_role(metadata.get("role")) or UserRole.JOBSEEKER,
    )


class SessionStore:
    """
    Current user and credential.

    Construct once per client, call restore() at start-up and logout() at
    teardown.
    """

    def __init__(self, client: Client, storage=None, clock: Callable[[], float] = time.time):
        self.client = client
        self.storage = storage or MemoryTokenStorage()
        self.clock = clock
        self.user: Optional[User] = None
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def restore(self) -> Optional[User]:
        """Pick up a stored credential; expired or malformed ones are dropped."""
        token = self.storage.get()
        if not token:
            return None
        user = decode_token(token, now=self.clock())
        if user is None:
            self.storage.clear()
            self.token = None
            self.user = None
            return None
        self.token = token
        self.user = user
        return user

    async def login(self, email: str, password: str) -> User:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.error(f"Login failed for {email}: {e}")
            raise AuthError(str(e)) from e
        user = self._start_session(response)
        logger.info(f"Login successful: welcome back, {user.name or user.email}")
        return user

    async def register(self, email: str, password: str, name: str, role: UserRole) -> User:
        role = UserRole(role)
        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"name": name, "role": role.value}},
            })
        except Exception as e:
            logger.error(f"Registration failed for {email}: {e}")
            raise AuthError(str(e)) from e
        user = self._start_session(response)
        logger.info(f"Registration successful: welcome to JobPortal, {name}")
        return user

    async def logout(self) -> None:
        token = self.token or self.storage.get()
        try:
            # a per-request client holds no session, so the token is revoked directly
            if token:
                self.client.auth.admin.sign_out(token)
            self.client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Backend sign-out failed, clearing local session anyway: {e}")
        self.storage.clear()
        self.token = None
        self.user = None
        logger.info("Logged out")

    def _start_session(self, response: Any) -> User:
        auth_user = getattr(response, "user", None)
        if auth_user is None:
            raise AuthError("No user returned by the auth service")
        session = getattr(response, "session", None)
        # sign_up returns no session while the email is awaiting confirmation
        token = getattr(session, "access_token", None) if session else None
        if token:
            self.storage.set(token)
        else:
            self.storage.clear()
        self.token = token
        self.user = _user_from_auth(auth_user)
        return self.user


def local_session(client: Client, path: Optional[str] = None) -> SessionStore:
    """Session persisted to SESSION_FILE, restored immediately"""
    store = SessionStore(client, FileTokenStorage(path or settings.SESSION_FILE))
    store.restore()
    return store

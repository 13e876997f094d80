"""
CredentialStore: in-process user records keyed by email.

One lock guards both indexes (email -> User, id -> email). Password hashing
runs before the lock is taken so a slow hash never holds it; the duplicate
check and the insert happen together under the lock. Callers receive copies
of the stored records, mutation only happens here.
"""
from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import replace
from typing import Dict, List, Optional

from models.exceptions import ConflictError, NotFoundError
from models.role import Role
from models.schemas.user import CredentialsSchema
from models.user import User
from utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

credentials_schema = CredentialsSchema()


def _norm_email(email) -> str:
    return email.strip().lower() if isinstance(email, str) else email


class CredentialStore:

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}
        self._emails_by_id: Dict[int, str] = {}
        self._last_id = 0
        # verified against when the email is unknown so login timing does not
        # reveal which emails are registered
        self._dummy_hash = hash_password(secrets.token_urlsafe(16))

    def _next_id(self) -> int:
        # caller holds the lock
        now_ms = time.time_ns() // 1_000_000
        self._last_id = max(now_ms, self._last_id + 1)
        return self._last_id

    def create_user(self, email: str, password: str) -> User:
        """
        Register a new user with role USER.
        Raises marshmallow.ValidationError on bad email/password and
        ConflictError if the email is taken.
        """
        data = credentials_schema.load({"email": email, "password": password})
        email = data["email"]
        if self.find_user_by_email(email) is not None:
            raise ConflictError("Email already registered")

        pw_hash = hash_password(data["password"])

        with self._lock:
            # re-check: another request may have registered while we hashed
            if email in self._users:
                raise ConflictError("Email already registered")
            user = User(id=self._next_id(), email=email, password_hash=pw_hash, role=Role.USER)
            self._users[email] = user
            self._emails_by_id[user.id] = email
            logger.info("Registered user id=%s", user.id)
            return replace(user)

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(_norm_email(email))
            return replace(user) if user else None

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            email = self._emails_by_id.get(user_id)
            if email is None:
                return None
            return replace(self._users[email])

    def list_users(self) -> List[User]:
        with self._lock:
            return [replace(u) for u in sorted(self._users.values(), key=lambda u: u.id)]

    def validate_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.password_hash)

    def check_credentials(self, email: str, password: str) -> Optional[User]:
        """The matching user, or None. Always runs one argon2 verification."""
        user = self.find_user_by_email(email)
        if user is None:
            verify_password(password, self._dummy_hash)
            return None
        return user if self.validate_password(user, password) else None

    def set_refresh_token(self, email: str, token: Optional[str]) -> bool:
        with self._lock:
            user = self._users.get(_norm_email(email))
            if user is None:
                return False
            user.refresh_token = token
            return True

    def revoke_user_session(self, email: str) -> bool:
        """Clear the stored refresh token; False if the user is unknown."""
        return self.set_refresh_token(email, None)

    def rotate_refresh_token(self, user_id: int, expected: str, new: str) -> bool:
        """
        Replace the stored refresh token with new only if it still equals
        expected. False when the user is unknown, logged out, or another
        rotation got there first.
        """
        with self._lock:
            email = self._emails_by_id.get(user_id)
            if email is None:
                return False
            user = self._users[email]
            if user.refresh_token is None or user.refresh_token != expected:
                return False
            user.refresh_token = new
            return True

    def set_role(self, user_id: int, role: Role) -> User:
        with self._lock:
            email = self._emails_by_id.get(user_id)
            if email is None:
                raise NotFoundError("User not found")
            user = self._users[email]
            user.role = role
            logger.info("User id=%s role set to %s", user_id, role.value)
            return replace(user)

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

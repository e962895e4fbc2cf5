"""
Local Identity Service

A process-local stand-in for a hosted identity provider, used for
development and for tests. Accounts live as long as the process.
Passwords are stored as salted PBKDF2 hashes; tokens are random.
"""

import hashlib
import re
import secrets
from typing import Callable, Optional
from uuid import uuid4

from pydantic import BaseModel

from src.services.auth.interface import (
    AuthError,
    AuthServiceInterface,
    AuthSession,
    AuthStateCallback,
    AuthUser,
)


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
PBKDF2_ITERATIONS = 100_000


class _Account(BaseModel):
    user: AuthUser
    salt: str
    password_hash: str


def _hash_password(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        bytes.fromhex(salt),
        PBKDF2_ITERATIONS,
    ).hex()


class LocalAccountRegistry:
    """
    Accounts and issued tokens, shared by every session of the process.

    Holds no notion of a current user; that belongs to each LocalAuthService.
    """

    def __init__(self):
        self.accounts: dict[str, _Account] = {}
        self.tokens: dict[str, str] = {}


class LocalAuthService(AuthServiceInterface):
    """One browser session's view of the local accounts, with state notifications."""

    def __init__(self, registry: Optional[LocalAccountRegistry] = None):
        self._registry = registry or LocalAccountRegistry()
        self._accounts = self._registry.accounts
        self._current_user: Optional[AuthUser] = None
        self._token: Optional[str] = None
        self._subscribers: list[AuthStateCallback] = []

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current_user

    async def _set_current_user(self, user: Optional[AuthUser]) -> None:
        self._current_user = user
        # Copy so a callback may unsubscribe while we iterate
        for callback in list(self._subscribers):
            await callback(user)

    def _issue_token(self, user: AuthUser) -> str:
        token = secrets.token_urlsafe(32)
        self._registry.tokens[token] = user.uid
        self._token = token
        return token

    async def sign_up(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> AuthSession:
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise AuthError("invalid-email", "Please enter a valid email address")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(
                "weak-password",
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters",
            )
        if email in self._accounts:
            raise AuthError("email-already-in-use", "An account with this email already exists")

        salt = secrets.token_hex(16)
        user = AuthUser(uid=uuid4().hex, email=email)
        self._accounts[email] = _Account(
            user=user,
            salt=salt,
            password_hash=_hash_password(password, salt),
        )
        if display_name:
            user = await self.update_profile(user, display_name=display_name)

        session = AuthSession(user=user, token=self._issue_token(user))
        await self._set_current_user(user)
        return session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        account = self._accounts.get((email or "").strip().lower())
        if account is None or not secrets.compare_digest(
            account.password_hash,
            _hash_password(password or "", account.salt),
        ):
            raise AuthError("invalid-credential", "Invalid email or password")

        session = AuthSession(user=account.user, token=self._issue_token(account.user))
        await self._set_current_user(account.user)
        return session

    async def sign_out(self) -> None:
        if self._current_user is None:
            return
        # Other sessions of the same user stay signed in
        self._registry.tokens.pop(self._token, None)
        self._token = None
        await self._set_current_user(None)

    async def subscribe_auth_state(
        self,
        callback: AuthStateCallback,
    ) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        await callback(self._current_user)
        return unsubscribe

    async def update_profile(self, user: AuthUser, **fields: str) -> AuthUser:
        account = self._accounts.get(user.email)
        if account is None or account.user.uid != user.uid:
            raise AuthError("user-not-found", "No such user")

        allowed = {k: v for k, v in fields.items() if k in ("display_name",)}
        updated = account.user.model_copy(update=allowed)
        account.user = updated
        if self._current_user is not None and self._current_user.uid == updated.uid:
            self._current_user = updated
        return updated


"""
Abstract Authentication Interface

DESIGN DECISION: Identity is owned by an external service.
The ledger depends on exactly two things from it:
1. A notification whenever the signed-in user changes
2. The signed-in user's opaque id

Everything else (sign-up, sign-in, tokens, profiles) is exposed here
so the presentation layer can drive it, but the ledger never looks at it.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """The authenticated user as reported by the identity service."""
    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1, description="Opaque user id")
    email: str
    display_name: Optional[str] = None


class AuthSession(BaseModel):
    """Result of a successful sign-in or sign-up."""

    user: AuthUser
    token: str = Field(..., description="Opaque session token")


# Called with the new user on sign-in, None on sign-out
AuthStateCallback = Callable[[Optional[AuthUser]], Awaitable[None]]


class AuthServiceInterface(ABC):
    """
    Abstract interface for the identity service.

    State callbacks are awaited one at a time, in subscription order.
    """

    @property
    @abstractmethod
    def current_user(self) -> Optional[AuthUser]:
        """The signed-in user, or None."""
        pass

    @abstractmethod
    async def sign_up(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> AuthSession:
        """
        Create an account and sign it in.

        Raises:
            AuthError: If the email is taken or the input is rejected
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Sign in with email and password.

        Raises:
            AuthError: If the credentials are rejected
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Sign out the current user (no-op when nobody is signed in)."""
        pass

    @abstractmethod
    async def subscribe_auth_state(
        self,
        callback: AuthStateCallback,
    ) -> Callable[[], None]:
        """
        Register for sign-in/sign-out notifications.

        The callback is invoked once immediately with the current user.

        Returns:
            A function that removes the subscription
        """
        pass

    @abstractmethod
    async def update_profile(self, user: AuthUser, **fields: str) -> AuthUser:
        """
        Update profile fields (e.g. display_name) for a user.

        Raises:
            AuthError: If the user is unknown
        """
        pass


class AuthError(Exception):
    """Identity service rejected a request."""

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)

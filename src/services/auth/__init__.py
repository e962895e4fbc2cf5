"""
Authentication Services Package

Abstract identity service interface plus a local implementation.
"""

from src.services.auth.interface import (
    AuthError,
    AuthServiceInterface,
    AuthSession,
    AuthStateCallback,
    AuthUser,
)
from src.services.auth.local import LocalAccountRegistry, LocalAuthService

__all__ = [
    "AuthError",
    "AuthServiceInterface",
    "AuthSession",
    "AuthStateCallback",
    "AuthUser",
    "LocalAccountRegistry",
    "LocalAuthService",
]

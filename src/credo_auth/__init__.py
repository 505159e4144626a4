"""Credo Auth - credential and token lifecycle engine.

This package provides the authentication core of an application,
independent of any web framework. It handles:
- Input validation (email, username, name, phone, URL, date)
- Password policy and hashing (bcrypt)
- Signed token issuance, verification and revocation (JWT)
- User credential storage (with pluggable persistence)
- Registration, login, refresh, logout, password reset, email
  verification, password change and profile flows
- Request authentication from an ``Authorization`` header

Architecture:
    credo_auth/
    ├── services/           # Pure logic (password hashing, tokens)
    ├── repositories/       # Abstract credential store
    ├── persistence/        # Implementations by technology
    │   ├── memory/         # In-process dicts
    │   ├── sqlalchemy/     # SQLAlchemy implementation
    │   └── supabase/       # PostgREST over httpx
    ├── application/        # Orchestrator and request authenticator
    ├── infrastructure/     # Email templates and SMTP sender
    ├── integrations/       # FastAPI dependency
    ├── validation.py       # Field validators
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions

Usage:
    from credo_auth import create_auth_service
    from credo_config import get_settings

    auth = create_auth_service(get_settings())
    result = await auth.register("user@example.com", "Passw0rdOK")
"""

from credo_auth.application import (
    AuthenticationService,
    EmailOptions,
    RequestAuthenticator,
    create_auth_service,
)
from credo_auth.exceptions import (
    AuthError,
    ConcurrencyError,
    EmailAlreadyExistsError,
    EmailDeliveryError,
    EmailNotVerifiedError,
    ErrorCode,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidResetTokenError,
    InvalidTokenError,
    InvalidVerificationTokenError,
    StoreError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
    WeakPasswordError,
)
from credo_auth.persistence import InMemoryCredentialStore
from credo_auth.repositories import CredentialStore
from credo_auth.schemas import (
    AuthResult,
    EmailMessage,
    Principal,
    PublicUser,
    TokenKind,
    TokenPair,
    TokenPayload,
    UserData,
    ValidationResult,
)
from credo_auth.services import PasswordHashingService, PasswordPolicy, TokenService

__all__ = [
    # Application
    "AuthenticationService",
    "EmailOptions",
    "RequestAuthenticator",
    "create_auth_service",
    # Services
    "PasswordHashingService",
    "PasswordPolicy",
    "TokenService",
    # Stores
    "CredentialStore",
    "InMemoryCredentialStore",
    # Schemas
    "AuthResult",
    "EmailMessage",
    "Principal",
    "PublicUser",
    "TokenKind",
    "TokenPair",
    "TokenPayload",
    "UserData",
    "ValidationResult",
    # Exceptions
    "AuthError",
    "ConcurrencyError",
    "EmailAlreadyExistsError",
    "EmailDeliveryError",
    "EmailNotVerifiedError",
    "ErrorCode",
    "InvalidCredentialsError",
    "InvalidRefreshTokenError",
    "InvalidResetTokenError",
    "InvalidTokenError",
    "InvalidVerificationTokenError",
    "StoreError",
    "UnauthorizedError",
    "UserNotFoundError",
    "ValidationError",
    "WeakPasswordError",
]

"""Auth schemas and data structures.

These are simple data classes used for transferring user, token and
result data between the engine's components and its callers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class TokenKind(str, Enum):
    """Token kind discriminator carried in every token's ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"
    PASSWORD_RESET = "password_reset"
    EMAIL_VERIFICATION = "email_verification"


@dataclass(frozen=True)
class UserData:
    """Immutable user record returned by a credential store.

    Carries the password digest, so it must never leave the engine;
    convert it with ``PublicUser.from_user`` first.
    """

    id: str
    email: str
    password_hash: str
    profile: dict[str, Any] = field(default_factory=dict)
    email_verified: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login_at: datetime | None = None


@dataclass(frozen=True)
class PublicUser:
    """Sanitized user: a ``UserData`` without its password digest."""

    id: str
    email: str
    profile: dict[str, Any]
    email_verified: bool
    created_at: datetime | None
    updated_at: datetime | None
    last_login_at: datetime | None

    @classmethod
    def from_user(cls, user: UserData) -> "PublicUser":
        return cls(
            id=user.id,
            email=user.email,
            profile=dict(user.profile),
            email_verified=user.email_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_login_at=user.last_login_at,
        )


@dataclass(frozen=True)
class TokenPayload:
    """Decoded token payload.

    Attributes
    ----------
    user_id
        The subject of the token
    token_type
        Which of the four token kinds this is
    token_id
        Unique token identifier (``jti``), used as the revocation key
    issued_at
        Issue timestamp (whole seconds)
    expires_at
        Expiry timestamp (whole seconds)
    """

    user_id: str
    token_type: TokenKind
    token_id: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """The expiry instant itself is still valid."""
        return now > self.expires_at

    def is_access_token(self) -> bool:
        return self.token_type is TokenKind.ACCESS

    def is_refresh_token(self) -> bool:
        return self.token_type is TokenKind.REFRESH


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together on login or refresh."""

    access_token: str
    refresh_token: str
    expires_in: int


@dataclass(frozen=True)
class Principal:
    """Authenticated caller attached to a request by the authenticator."""

    user_id: str
    email: str
    profile: dict[str, Any]
    email_verified: bool


@dataclass(frozen=True)
class AuthResult:
    """Success payload returned by every orchestrator flow."""

    message: str
    user: PublicUser | None = None
    tokens: TokenPair | None = None
    success: bool = True


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a field validator; ``message`` explains failures."""

    valid: bool
    message: str

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class EmailMessage:
    """Outbound message handed to the injected send capability."""

    to: str
    subject: str
    text: str
    html: str
    from_email: str | None = None

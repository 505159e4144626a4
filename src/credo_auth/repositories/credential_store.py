"""Abstract credential store interface.

This interface defines the contract for user and token-revocation
persistence. The authentication service depends only on this type;
implementations can keep state in memory, in a SQL database, or in a
remote table API.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from credo_auth.schemas import UserData


def canonical_email(email: str) -> str:
    """Lookup form of an email: stripped and lower-cased."""
    return email.strip().lower()


class CredentialStore(ABC):
    """
    Abstract store for user records and the token denylist.

    Implementations must guarantee:
    - exactly one user per canonical (lower-cased) email
    - the email index always points at the primary record, including
      after an email change
    - lookups return None for unknown users instead of raising

    Example implementation:
        class CredentialStoreRedis(CredentialStore):
            def __init__(self, client: Redis):
                self._client = client

            async def get_user_by_id(self, user_id: str) -> UserData | None:
                # Redis-specific implementation
                ...
    """

    @abstractmethod
    async def create_user(  # noqa: PLR0913
        self,
        email: str,
        password_hash: str,
        *,
        user_id: str | None = None,
        profile: dict[str, Any] | None = None,
        email_verified: bool = False,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> UserData:
        """
        Create a user, or overwrite the record with the same id.

        Parameters
        ----------
        email
            Email as entered; stored as-is, indexed case-insensitively
        password_hash
            Digest produced by the password service
        user_id
            Identifier to use; generated when omitted
        profile
            Initial profile attributes (defaults to empty)
        email_verified
            Initial verification state
        created_at, updated_at
            Timestamps; default to now

        Returns
        -------
        The stored user

        Raises
        ------
        EmailAlreadyExistsError
            If the email already belongs to a different user
        """

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> UserData | None:
        """Find a user by id. Return None if not found."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> UserData | None:
        """Find a user by email, case-insensitively. Return None if not found."""

    @abstractmethod
    async def update_user(  # noqa: PLR0913
        self,
        user_id: str,
        *,
        email: str | None = None,
        password_hash: str | None = None,
        profile: dict[str, Any] | None = None,
        email_verified: bool | None = None,
        last_login_at: datetime | None = None,
        expected_updated_at: datetime | None = None,
    ) -> UserData:
        """
        Apply updates to a user and refresh ``updated_at``.

        ``profile`` is shallow-merged into the stored profile. Fields left
        as None are unchanged.

        Parameters
        ----------
        expected_updated_at
            Optional compare-and-swap guard: the update is rejected when the
            stored ``updated_at`` differs

        Raises
        ------
        UserNotFoundError
            If the id is unknown
        EmailAlreadyExistsError
            If the new email belongs to another user
        ConcurrencyError
            If ``expected_updated_at`` does not match
        """

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool:
        """Delete a user. Return False if it did not exist."""

    @abstractmethod
    async def invalidate_token(
        self,
        token_id: str,
        expires_at: datetime | None = None,
        *,
        now: datetime | None = None,
    ) -> None:
        """
        Add a token identifier to the denylist.

        Parameters
        ----------
        token_id
            Revocation key for the token
        expires_at
            When the token expires naturally; used for cleanup only
        now
            The caller's current time. Stores that prune on write compare
            expiries against it and skip pruning when it is None.
        """

    @abstractmethod
    async def is_token_invalidated(self, token_id: str) -> bool:
        """Return True if the token identifier is on the denylist."""

    @abstractmethod
    async def cleanup_expired_tokens(self, now: datetime) -> int:
        """Drop denylist entries whose token expired before ``now``.

        Returns the number of removed entries.
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove all users and denylist entries (test setup only)."""

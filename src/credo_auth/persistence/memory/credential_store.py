"""In-memory implementation of CredentialStore.

Suitable for tests and ephemeral deployments; all state is lost with the
process.
"""

import copy
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any

from credo_auth.clock import utc_now
from credo_auth.exceptions import (
    ConcurrencyError,
    EmailAlreadyExistsError,
    UserNotFoundError,
)
from credo_auth.repositories import CredentialStore, canonical_email
from credo_auth.schemas import UserData

logger = logging.getLogger(__name__)


class InMemoryCredentialStore(CredentialStore):
    """Credential store backed by two dicts (by id, by email) and a denylist.

    Every method mutates state without awaiting in between, so concurrent
    calls on the event loop cannot interleave inside one operation.
    """

    DEFAULT_PRUNE_THRESHOLD = 10_000

    def __init__(self, prune_threshold: int = DEFAULT_PRUNE_THRESHOLD):
        self._users: dict[str, UserData] = {}
        self._ids_by_email: dict[str, str] = {}
        # token id -> natural expiry (None when unknown)
        self._invalidated: dict[str, datetime | None] = {}
        self._prune_threshold = prune_threshold

    @staticmethod
    def _copy(user: UserData) -> UserData:
        # records are frozen but the profile, including nested values, is not
        return replace(user, profile=copy.deepcopy(user.profile))

    # ── users ─────────────────────────────────────────────────

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
        user_id = user_id or uuid.uuid4().hex
        key = canonical_email(email)

        owner = self._ids_by_email.get(key)
        if owner is not None and owner != user_id:
            raise EmailAlreadyExistsError

        now = utc_now()
        user = UserData(
            id=user_id,
            email=email.strip(),
            password_hash=password_hash,
            profile=copy.deepcopy(profile or {}),
            email_verified=email_verified,
            created_at=created_at or now,
            updated_at=updated_at or now,
            last_login_at=None,
        )

        previous = self._users.get(user_id)
        if previous is not None:
            # upsert: the id keeps one index entry
            self._ids_by_email.pop(canonical_email(previous.email), None)
            logger.debug("Overwriting user with existing id: %s", user_id)

        self._users[user_id] = user
        self._ids_by_email[key] = user_id
        return self._copy(user)

    async def get_user_by_id(self, user_id: str) -> UserData | None:
        user = self._users.get(user_id)
        return self._copy(user) if user else None

    async def get_user_by_email(self, email: str) -> UserData | None:
        user_id = self._ids_by_email.get(canonical_email(email))
        if user_id is None:
            return None
        return await self.get_user_by_id(user_id)

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
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError

        if expected_updated_at is not None and user.updated_at != expected_updated_at:
            raise ConcurrencyError

        changes: dict[str, Any] = {"updated_at": utc_now()}
        if password_hash is not None:
            changes["password_hash"] = password_hash
        if profile is not None:
            changes["profile"] = {**user.profile, **copy.deepcopy(profile)}
        if email_verified is not None:
            changes["email_verified"] = email_verified
        if last_login_at is not None:
            changes["last_login_at"] = last_login_at

        old_key = canonical_email(user.email)
        new_key = old_key
        if email is not None:
            new_key = canonical_email(email)
            owner = self._ids_by_email.get(new_key)
            if owner is not None and owner != user_id:
                raise EmailAlreadyExistsError
            changes["email"] = email.strip()

        updated = replace(user, **changes)
        self._users[user_id] = updated
        if new_key != old_key:
            self._ids_by_email.pop(old_key, None)
            self._ids_by_email[new_key] = user_id
        return self._copy(updated)

    async def delete_user(self, user_id: str) -> bool:
        user = self._users.pop(user_id, None)
        if user is None:
            return False
        self._ids_by_email.pop(canonical_email(user.email), None)
        return True

    # ── denylist ──────────────────────────────────────────────

    async def invalidate_token(
        self,
        token_id: str,
        expires_at: datetime | None = None,
        *,
        now: datetime | None = None,
    ) -> None:
        self._invalidated[token_id] = expires_at
        # pruning follows the caller's clock, never the wall clock
        if now is not None and len(self._invalidated) > self._prune_threshold:
            removed = await self.cleanup_expired_tokens(now)
            logger.debug("Pruned %d expired denylist entries", removed)

    async def is_token_invalidated(self, token_id: str) -> bool:
        return token_id in self._invalidated

    async def cleanup_expired_tokens(self, now: datetime) -> int:
        expired = [
            token_id
            for token_id, expires_at in self._invalidated.items()
            if expires_at is not None and expires_at < now
        ]
        for token_id in expired:
            del self._invalidated[token_id]
        return len(expired)

    async def clear(self) -> None:
        self._users.clear()
        self._ids_by_email.clear()
        self._invalidated.clear()

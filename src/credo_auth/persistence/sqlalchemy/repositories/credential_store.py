"""SQLAlchemy implementation of CredentialStore.

Each call runs in its own transaction, so the store can be shared by a
stateless authentication service across requests.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from credo_auth.clock import ensure_tz_aware, utc_now
from credo_auth.exceptions import (
    ConcurrencyError,
    EmailAlreadyExistsError,
    StoreError,
    UserNotFoundError,
)
from credo_auth.persistence.sqlalchemy.models import InvalidatedTokenModel, UserModel
from credo_auth.repositories import CredentialStore, canonical_email
from credo_auth.schemas import UserData

logger = logging.getLogger(__name__)


class SQLAlchemyCredentialStore(CredentialStore):
    """
    SQLAlchemy implementation of CredentialStore.

    Works against any async engine (PostgreSQL via asyncpg in production,
    SQLite via aiosqlite in tests).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize the store.

        Parameters
        ----------
        session_factory
            Factory producing async sessions bound to the credential database
        """
        self._session_factory = session_factory

    def _to_data(self, model: UserModel) -> UserData:
        """Map SQLAlchemy model to the store's data transfer object."""
        return UserData(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            profile=dict(model.profile or {}),
            email_verified=model.email_verified,
            created_at=ensure_tz_aware(model.created_at) if model.created_at else None,
            updated_at=ensure_tz_aware(model.updated_at) if model.updated_at else None,
            last_login_at=(
                ensure_tz_aware(model.last_login_at) if model.last_login_at else None
            ),
        )

    async def _find_by_canonical_email(
        self,
        session: AsyncSession,
        email: str,
    ) -> UserModel | None:
        stmt = select(UserModel).where(
            UserModel.email_canonical == canonical_email(email),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

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
        now = utc_now()

        try:
            async with self._session_factory.begin() as session:
                owner = await self._find_by_canonical_email(session, email)
                if owner is not None and owner.id != user_id:
                    raise EmailAlreadyExistsError

                model = await session.get(UserModel, user_id)
                if model is None:
                    model = UserModel(id=user_id)
                    session.add(model)
                else:
                    logger.debug("Overwriting user with existing id: %s", user_id)

                model.email = email.strip()
                model.email_canonical = canonical_email(email)
                model.password_hash = password_hash
                model.profile = dict(profile or {})
                model.email_verified = email_verified
                model.created_at = created_at or now
                model.updated_at = updated_at or now
                model.last_login_at = None

                await session.flush()
                logger.info("Created user: %s", user_id)
                return self._to_data(model)
        except IntegrityError as e:
            # lost a race on the unique email index
            raise EmailAlreadyExistsError from e
        except SQLAlchemyError as e:
            logger.error("Failed to create user: %s", e)
            raise StoreError(f"Failed to create user: {e}") from e

    async def get_user_by_id(self, user_id: str) -> UserData | None:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user_id)
            return self._to_data(model) if model else None

    async def get_user_by_email(self, email: str) -> UserData | None:
        async with self._session_factory() as session:
            model = await self._find_by_canonical_email(session, email)
            return self._to_data(model) if model else None

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
        try:
            async with self._session_factory.begin() as session:
                stmt = select(UserModel).where(UserModel.id == user_id).with_for_update()
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
                if model is None:
                    raise UserNotFoundError

                if expected_updated_at is not None and ensure_tz_aware(
                    model.updated_at
                ) != ensure_tz_aware(expected_updated_at):
                    raise ConcurrencyError

                if email is not None and canonical_email(email) != model.email_canonical:
                    owner = await self._find_by_canonical_email(session, email)
                    if owner is not None and owner.id != user_id:
                        raise EmailAlreadyExistsError
                    model.email_canonical = canonical_email(email)
                if email is not None:
                    model.email = email.strip()
                if password_hash is not None:
                    model.password_hash = password_hash
                if profile is not None:
                    # new dict so the JSON column registers the change
                    model.profile = {**(model.profile or {}), **profile}
                if email_verified is not None:
                    model.email_verified = email_verified
                if last_login_at is not None:
                    model.last_login_at = last_login_at
                model.updated_at = utc_now()

                await session.flush()
                return self._to_data(model)
        except IntegrityError as e:
            raise EmailAlreadyExistsError from e
        except SQLAlchemyError as e:
            logger.error("Failed to update user %s: %s", user_id, e)
            raise StoreError(f"Failed to update user: {e}") from e

    async def delete_user(self, user_id: str) -> bool:
        async with self._session_factory.begin() as session:
            model = await session.get(UserModel, user_id)
            if model is None:
                return False
            await session.delete(model)
            logger.info("Deleted user: %s", user_id)
            return True

    async def invalidate_token(
        self,
        token_id: str,
        expires_at: datetime | None = None,
        *,
        now: datetime | None = None,  # noqa: ARG002
    ) -> None:
        async with self._session_factory.begin() as session:
            await session.merge(
                InvalidatedTokenModel(
                    token_id=token_id,
                    invalidated_at=utc_now(),
                    expires_at=expires_at,
                )
            )

    async def is_token_invalidated(self, token_id: str) -> bool:
        async with self._session_factory() as session:
            model = await session.get(InvalidatedTokenModel, token_id)
            return model is not None

    async def cleanup_expired_tokens(self, now: datetime) -> int:
        async with self._session_factory.begin() as session:
            result = await session.execute(
                delete(InvalidatedTokenModel).where(
                    InvalidatedTokenModel.expires_at < now,
                )
            )
            removed = result.rowcount or 0
        if removed:
            logger.info("Removed %d expired denylist entries", removed)
        return removed

    async def clear(self) -> None:
        async with self._session_factory.begin() as session:
            await session.execute(delete(InvalidatedTokenModel))
            await session.execute(delete(UserModel))

"""Create or drop the credential tables on an async engine."""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from credo_auth.persistence.sqlalchemy.base import CredentialBase

# register the mapped tables on CredentialBase.metadata
from credo_auth.persistence.sqlalchemy.models import (  # noqa: F401
    InvalidatedTokenModel,
    UserModel,
)

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing credential tables. Existing tables are left untouched."""
    async with engine.begin() as conn:
        await conn.run_sync(CredentialBase.metadata.create_all)
    logger.info("Credential tables are up to date")


async def drop_tables(engine: AsyncEngine) -> None:
    """Drop all credential tables (tests and dev resets only)."""
    logger.warning("Dropping credential tables...")
    async with engine.begin() as conn:
        await conn.run_sync(CredentialBase.metadata.drop_all)

"""Wire an AuthenticationService from Settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from credo_auth.application.authentication_service import (
    AuthenticationService,
    EmailOptions,
    SendEmail,
)
from credo_auth.infrastructure.email import SMTPEmailSender
from credo_auth.persistence import InMemoryCredentialStore
from credo_auth.services import PasswordHashingService, PasswordPolicy, TokenService

if TYPE_CHECKING:
    from credo_auth.repositories import CredentialStore
    from credo_config.settings import Settings

logger = logging.getLogger(__name__)


def build_credential_store(settings: Settings) -> CredentialStore:
    """Pick a store from settings: SQL database, Supabase, or in-memory.

    The SQL tables must exist; see ``persistence.sqlalchemy.create_tables``.
    """
    if settings.database_url:
        from sqlalchemy.ext.asyncio import (
            AsyncSession,
            async_sessionmaker,
            create_async_engine,
        )

        from credo_auth.persistence.sqlalchemy import SQLAlchemyCredentialStore

        engine = create_async_engine(
            settings.database_url,
            echo=False,
            pool_pre_ping=True,
        )
        session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Using SQL credential store")
        return SQLAlchemyCredentialStore(session_factory)

    if settings.supabase_url and settings.supabase_key:
        from credo_auth.persistence.supabase import SupabaseCredentialStore

        logger.info("Using Supabase credential store at %s", settings.supabase_url)
        return SupabaseCredentialStore(
            settings.supabase_url,
            settings.supabase_key.get_secret_value(),
            users_table=settings.supabase_users_table,
            tokens_table=settings.supabase_tokens_table,
            timeout=settings.supabase_timeout,
        )

    logger.info("Using in-memory credential store")
    return InMemoryCredentialStore(prune_threshold=settings.revocation_prune_threshold)


def create_auth_service(
    settings: Settings,
    credential_store: CredentialStore | None = None,
    send_email: SendEmail | None = None,
) -> AuthenticationService:
    """
    Build a fully wired authentication service.

    Parameters
    ----------
    settings
        Engine settings
    credential_store
        Store to use; chosen from settings when omitted
    send_email
        Send-email capability; defaults to SMTP when ``smtp_enabled`` is set

    Returns
    -------
    The authentication service
    """
    store = credential_store or build_credential_store(settings)

    password_service = PasswordHashingService(
        rounds=settings.bcrypt_rounds,
        policy=PasswordPolicy(**settings.password_policy),
    )
    token_service = TokenService(
        secret_key=settings.jwt_secret_key.get_secret_value(),
        credential_store=store,
        access_token_expire_seconds=settings.jwt_access_token_expire_seconds,
        refresh_token_expire_seconds=settings.jwt_refresh_token_expire_seconds,
    )

    if send_email is None and settings.smtp_enabled:
        send_email = SMTPEmailSender(settings)

    return AuthenticationService(
        credential_store=store,
        password_service=password_service,
        token_service=token_service,
        email_options=EmailOptions(
            send_email=send_email,
            from_email=settings.email_from_address,
        ),
    )

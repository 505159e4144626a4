"""Authentication service orchestrating registration, login and token flows."""

from __future__ import annotations

import asyncio
import inspect
import logging
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from credo_auth.clock import utc_now
from credo_auth.exceptions import (
    EmailAlreadyExistsError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidResetTokenError,
    InvalidVerificationTokenError,
    UserNotFoundError,
    ValidationError,
)
from credo_auth.infrastructure.email import (
    PASSWORD_RESET_TEMPLATE,
    VERIFICATION_TEMPLATE,
    EmailTemplate,
)
from credo_auth.schemas import (
    AuthResult,
    EmailMessage,
    Principal,
    PublicUser,
    UserData,
)
from credo_auth.validation import is_valid_email

if TYPE_CHECKING:
    from credo_auth.repositories import CredentialStore
    from credo_auth.services import PasswordHashingService, TokenService

logger = logging.getLogger(__name__)

SendEmail = Callable[[EmailMessage], Awaitable[bool | None] | bool | None]

RESET_REQUESTED_MESSAGE = (
    "If your email is registered, you will receive a password reset link."
)


@dataclass(frozen=True)
class EmailOptions:
    """Outbound email configuration for verification and reset messages."""

    send_email: SendEmail | None = None
    from_email: str = "noreply@example.com"
    reset_password_template: EmailTemplate = field(default=PASSWORD_RESET_TEMPLATE)
    verification_template: EmailTemplate = field(default=VERIFICATION_TEMPLATE)


class AuthenticationService:
    """
    Application service for user authentication.

    Orchestrates the credential store, password hashing and token services
    to provide:
    - Registration with email verification
    - Login with password
    - Token refresh with rotation, and logout
    - Password reset, password change
    - Profile read/update
    - Access token validation for request authentication

    The service keeps no state between calls; everything lives in the
    credential store. bcrypt work runs in a worker thread so the event loop
    is never blocked by hashing.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        password_service: PasswordHashingService,
        token_service: TokenService,
        email_options: EmailOptions | None = None,
    ):
        self._store = credential_store
        self._password_service = password_service
        self._token_service = token_service
        self._email = email_options or EmailOptions()
        self._dummy_hash: str | None = None

    # ── helpers ───────────────────────────────────────────────

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(self._password_service.hash, password)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(
            self._password_service.verify,
            password,
            password_hash,
        )

    async def _burn_verify(self, password: str) -> None:
        """Spend one verification on a throwaway digest for unknown emails."""
        if self._dummy_hash is None:
            self._dummy_hash = await self._hash(secrets.token_urlsafe(16))
        await self._verify(password, self._dummy_hash)

    @staticmethod
    def _require_valid_email(email: str | None) -> str:
        if not is_valid_email(email):
            msg = "Invalid email address"
            raise ValidationError(msg)
        return email  # type: ignore[return-value]

    async def _send_email(
        self,
        to_email: str,
        token: str,
        template: EmailTemplate,
    ) -> bool:
        """Render and send a message. Delivery problems are logged, never raised."""
        if self._email.send_email is None:
            logger.debug("No email sender configured, skipping mail to %s", to_email)
            return False

        subject, text, html = template.render(token)
        message = EmailMessage(
            to=to_email,
            subject=subject,
            text=text,
            html=html,
            from_email=self._email.from_email,
        )
        try:
            result = self._email.send_email(message)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error("Failed to send '%s' email to %s: %s", subject, to_email, e)
            return False

        if result is False:
            logger.warning("Email sender reported failure for %s", to_email)
            return False
        return True

    # ── registration & login ──────────────────────────────────

    async def register(
        self,
        email: str,
        password: str,
        profile: dict[str, Any] | None = None,
        auto_verify: bool = False,
    ) -> AuthResult:
        email = self._require_valid_email(email)
        self._password_service.validate_strength(password)

        if await self._store.get_user_by_email(email) is not None:
            raise EmailAlreadyExistsError

        password_hash = await self._hash(password)
        user = await self._store.create_user(
            email,
            password_hash,
            profile=profile or {},
            email_verified=auto_verify,
        )
        logger.info("User registered: %s", user.id)

        if auto_verify:
            return AuthResult(
                message="User registered successfully",
                user=PublicUser.from_user(user),
                tokens=self._token_service.generate_tokens(user.id),
            )

        verification_token = self._token_service.generate_email_verification_token(
            user.id,
        )
        await self._send_email(
            user.email,
            verification_token,
            self._email.verification_template,
        )
        return AuthResult(
            message="User registered successfully. Please verify your email.",
            user=PublicUser.from_user(user),
        )

    async def login(self, email: str, password: str) -> AuthResult:
        email = self._require_valid_email(email)

        user = await self._store.get_user_by_email(email)
        if user is None:
            await self._burn_verify(password or "")
            raise InvalidCredentialsError

        if not await self._verify(password or "", user.password_hash):
            raise InvalidCredentialsError

        # only reachable with the right password
        if not user.email_verified:
            raise EmailNotVerifiedError

        new_hash = None
        if self._password_service.needs_rehash(user.password_hash):
            new_hash = await self._hash(password)
            logger.info("Upgrading password digest for user: %s", user.id)

        user = await self._store.update_user(
            user.id,
            last_login_at=utc_now(),
            password_hash=new_hash,
        )
        tokens = self._token_service.generate_tokens(user.id)

        logger.info("User logged in: %s", user.id)
        return AuthResult(
            message="Login successful",
            user=PublicUser.from_user(user),
            tokens=tokens,
        )

    # ── session tokens ────────────────────────────────────────

    async def refresh_token(self, refresh_token: str) -> AuthResult:
        payload = await self._token_service.verify_refresh_token(refresh_token)
        if payload is None:
            raise InvalidRefreshTokenError

        user = await self._store.get_user_by_id(payload.user_id)
        if user is None:
            logger.warning("Refresh token for unknown user: %s", payload.user_id)
            raise InvalidRefreshTokenError

        # rotation: the presented refresh token is single use
        await self._token_service.invalidate_refresh_token(refresh_token)
        tokens = self._token_service.generate_tokens(user.id)

        logger.debug("Tokens refreshed for user: %s", user.id)
        return AuthResult(message="Token refreshed successfully", tokens=tokens)

    async def logout(
        self,
        refresh_token: str,
        access_token: str | None = None,
    ) -> AuthResult:
        await self._token_service.invalidate_refresh_token(refresh_token)
        if access_token:
            await self._token_service.invalidate_token(access_token)
        logger.info("User logged out")
        return AuthResult(message="Logout successful")

    async def validate_token(self, access_token: str) -> Principal | None:
        payload = await self._token_service.verify_access_token(access_token)
        if payload is None:
            return None

        user = await self._store.get_user_by_id(payload.user_id)
        if user is None:
            return None

        return Principal(
            user_id=user.id,
            email=user.email,
            profile=dict(user.profile),
            email_verified=user.email_verified,
        )

    # ── password reset & verification ─────────────────────────

    async def reset_password(self, email: str) -> AuthResult:
        """Start a password reset.

        The response is identical whether or not the email is registered.
        """
        email = self._require_valid_email(email)

        user = await self._store.get_user_by_email(email)
        if user is None:
            # Silent to prevent email enumeration
            logger.debug("Password reset requested for unknown email")
            return AuthResult(message=RESET_REQUESTED_MESSAGE)

        reset_token = self._token_service.generate_password_reset_token(user.id)
        await self._send_email(
            user.email,
            reset_token,
            self._email.reset_password_template,
        )
        logger.info("Password reset requested for user: %s", user.id)
        return AuthResult(message=RESET_REQUESTED_MESSAGE)

    async def reset_password_confirm(self, token: str, new_password: str) -> AuthResult:
        payload = await self._token_service.verify_password_reset_token(token)
        if payload is None:
            raise InvalidResetTokenError

        self._password_service.validate_strength(new_password)

        user = await self._store.get_user_by_id(payload.user_id)
        if user is None:
            raise InvalidResetTokenError

        password_hash = await self._hash(new_password)
        await self._store.update_user(user.id, password_hash=password_hash)
        await self._token_service.invalidate_token(token)

        logger.info("Password reset completed for user: %s", user.id)
        return AuthResult(message="Password reset successfully")

    async def verify_email(self, token: str) -> AuthResult:
        payload = await self._token_service.verify_email_verification_token(token)
        if payload is None:
            raise InvalidVerificationTokenError

        user = await self._store.get_user_by_id(payload.user_id)
        if user is None:
            raise InvalidVerificationTokenError

        user = await self._store.update_user(user.id, email_verified=True)
        await self._token_service.invalidate_token(token)
        tokens = self._token_service.generate_tokens(user.id)

        logger.info("Email verified for user: %s", user.id)
        return AuthResult(
            message="Email verified successfully",
            user=PublicUser.from_user(user),
            tokens=tokens,
        )

    # ── account management ────────────────────────────────────

    async def _get_user(self, user_id: str) -> UserData:
        user = await self._store.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError
        return user

    async def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> AuthResult:
        user = await self._get_user(user_id)

        if not await self._verify(current_password or "", user.password_hash):
            msg = "Current password is incorrect"
            raise InvalidCredentialsError(msg)

        self._password_service.validate_strength(new_password)

        password_hash = await self._hash(new_password)
        await self._store.update_user(user.id, password_hash=password_hash)

        logger.info("Password changed for user: %s", user.id)
        return AuthResult(message="Password changed successfully")

    async def update_profile(self, user_id: str, profile: dict[str, Any]) -> AuthResult:
        user = await self._store.update_user(user_id, profile=profile)
        return AuthResult(
            message="Profile updated successfully",
            user=PublicUser.from_user(user),
        )

    async def get_profile(self, user_id: str) -> AuthResult:
        user = await self._get_user(user_id)
        return AuthResult(message="Profile retrieved", user=PublicUser.from_user(user))

    async def delete_account(self, user_id: str) -> AuthResult:
        if not await self._store.delete_user(user_id):
            raise UserNotFoundError
        logger.info("User deleted: %s", user_id)
        return AuthResult(message="Account deleted successfully")

"""JWT token service.

Issues and verifies the four token kinds (access, refresh, password reset,
email verification) and maintains the revocation denylist through the
credential store.
"""

import hashlib
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

import jwt

from credo_auth.clock import Clock, from_timestamp, utc_now
from credo_auth.repositories import CredentialStore
from credo_auth.schemas import TokenKind, TokenPair, TokenPayload

logger = logging.getLogger(__name__)


class TokenService:
    """Service for signed token creation, verification and revocation.

    Every verify method returns the decoded payload or None. The caller
    never learns *why* a token was refused; the reason is logged at DEBUG.

    Examples
    --------
    >>> service = TokenService("your-secret-key", credential_store=store)
    >>> token = service.generate_access_token(user_id)
    >>> payload = await service.verify_access_token(token)
    >>> print(payload.user_id)
    """

    DEFAULT_ACCESS_EXPIRE_SECONDS = 3600
    DEFAULT_REFRESH_EXPIRE_SECONDS = 604800
    # Fixed windows, not configurable
    PASSWORD_RESET_EXPIRE_SECONDS = 3600
    EMAIL_VERIFICATION_EXPIRE_SECONDS = 86400
    ALGORITHM = "HS256"

    _REQUIRED_CLAIMS = ["sub", "type", "jti", "iat", "exp"]

    def __init__(
        self,
        secret_key: str,
        credential_store: CredentialStore,
        access_token_expire_seconds: int = DEFAULT_ACCESS_EXPIRE_SECONDS,
        refresh_token_expire_seconds: int = DEFAULT_REFRESH_EXPIRE_SECONDS,
        clock: Clock = utc_now,
    ):
        """Initialize the token service.

        Parameters
        ----------
        secret_key
            Secret key for signing tokens. Must be kept secure.
        credential_store
            Store holding the revocation denylist
        access_token_expire_seconds
            Seconds until access tokens expire (default 1 hour)
        refresh_token_expire_seconds
            Seconds until refresh tokens expire (default 7 days)
        clock
            Source of the current time, replaceable in tests
        """
        if not secret_key:
            msg = "JWT secret key cannot be empty"
            raise ValueError(msg)

        self._secret_key = secret_key
        self._store = credential_store
        self._clock = clock
        self._expiry_seconds = {
            TokenKind.ACCESS: access_token_expire_seconds,
            TokenKind.REFRESH: refresh_token_expire_seconds,
            TokenKind.PASSWORD_RESET: self.PASSWORD_RESET_EXPIRE_SECONDS,
            TokenKind.EMAIL_VERIFICATION: self.EMAIL_VERIFICATION_EXPIRE_SECONDS,
        }

    @property
    def access_token_expiry(self) -> int:
        return self._expiry_seconds[TokenKind.ACCESS]

    # ── issuance ──────────────────────────────────────────────

    def generate_access_token(self, user_id: str) -> str:
        return self._create_token(user_id, TokenKind.ACCESS)

    def generate_refresh_token(self, user_id: str) -> str:
        """Create a long-lived refresh token.

        Refresh tokens are exchanged for a new token pair without requiring
        the user to log in again; each one is meant to be used once.
        """
        return self._create_token(user_id, TokenKind.REFRESH)

    def generate_password_reset_token(self, user_id: str) -> str:
        return self._create_token(user_id, TokenKind.PASSWORD_RESET)

    def generate_email_verification_token(self, user_id: str) -> str:
        return self._create_token(user_id, TokenKind.EMAIL_VERIFICATION)

    def generate_tokens(self, user_id: str) -> TokenPair:
        """Create the access/refresh pair returned by login and refresh."""
        return TokenPair(
            access_token=self.generate_access_token(user_id),
            refresh_token=self.generate_refresh_token(user_id),
            expires_in=self.access_token_expiry,
        )

    def _create_token(self, user_id: str, kind: TokenKind) -> str:
        issued_at = int(self._clock().timestamp())
        payload = {
            "sub": str(user_id),
            "type": kind.value,
            "jti": uuid.uuid4().hex,
            "iat": issued_at,
            "exp": issued_at + self._expiry_seconds[kind],
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    # ── verification ──────────────────────────────────────────

    async def verify_access_token(self, token: str) -> TokenPayload | None:
        return await self._verify(token, TokenKind.ACCESS)

    async def verify_refresh_token(self, token: str) -> TokenPayload | None:
        return await self._verify(token, TokenKind.REFRESH)

    async def verify_password_reset_token(self, token: str) -> TokenPayload | None:
        return await self._verify(token, TokenKind.PASSWORD_RESET)

    async def verify_email_verification_token(
        self,
        token: str,
    ) -> TokenPayload | None:
        return await self._verify(token, TokenKind.EMAIL_VERIFICATION)

    async def _verify(self, token: str, kind: TokenKind) -> TokenPayload | None:
        """Return the payload only if signature, kind, expiry and denylist all pass."""
        if not token:
            return None

        try:
            # expiry is checked below against the injected clock
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": self._REQUIRED_CLAIMS,
                },
            )
            payload = TokenPayload(
                user_id=str(claims["sub"]),
                token_type=TokenKind(claims["type"]),
                token_id=str(claims["jti"]),
                issued_at=from_timestamp(claims["iat"]),
                expires_at=from_timestamp(claims["exp"]),
            )
        except jwt.InvalidTokenError as e:
            logger.debug("Token rejected, invalid token: %s", e)
            return None
        except (KeyError, ValueError, TypeError, OverflowError, OSError) as e:
            logger.debug("Token rejected, malformed payload: %s", e)
            return None

        if payload.token_type is not kind:
            logger.debug(
                "Token rejected, expected %s but got %s",
                kind.value,
                payload.token_type.value,
            )
            return None

        if payload.is_expired(self._clock()):
            logger.debug("Token rejected, expired at %s", payload.expires_at)
            return None

        if await self._store.is_token_invalidated(payload.token_id):
            logger.debug("Token rejected, revoked: %s", payload.token_id)
            return None

        return payload

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Decode a token WITHOUT verifying signature or expiry.

        For diagnostics only; the result proves nothing about authenticity.
        """
        if not token or not isinstance(token, str):
            return None
        try:
            return jwt.decode(
                token,
                options={"verify_signature": False, "verify_exp": False},
            )
        except jwt.InvalidTokenError:
            return None

    # ── revocation ────────────────────────────────────────────

    def _revocation_entry(self, token: str) -> tuple[str, datetime | None]:
        """Denylist key and natural expiry for a raw token.

        The key is the token's ``jti``; tokens that cannot be decoded are
        keyed by the SHA-256 of the raw string. Non-string input is keyed by
        its ``str()`` form.
        """
        if not isinstance(token, str):
            token = str(token)
        claims = self.decode_token(token) or {}
        token_id = claims.get("jti")
        expires_at = claims.get("exp")
        if not isinstance(token_id, str) or not token_id:
            return hashlib.sha256(token.encode("utf-8")).hexdigest(), None
        if not isinstance(expires_at, (int, float)):
            return token_id, None
        try:
            return token_id, from_timestamp(expires_at)
        except (OverflowError, ValueError, OSError):
            return token_id, None

    async def invalidate_token(self, token: str) -> None:
        """Revoke a token; later verification fails even before expiry."""
        token_id, expires_at = self._revocation_entry(token)
        await self._store.invalidate_token(token_id, expires_at, now=self._clock())
        logger.debug("Token revoked: %s", token_id)

    async def invalidate_refresh_token(self, token: str) -> None:
        await self.invalidate_token(token)

    async def is_token_invalidated(self, token: str) -> bool:
        token_id, _ = self._revocation_entry(token)
        return await self._store.is_token_invalidated(token_id)

    async def cleanup_revoked_tokens(self, grace: timedelta = timedelta(0)) -> int:
        """Remove denylist entries for tokens that have expired anyway."""
        return await self._store.cleanup_expired_tokens(self._clock() - grace)

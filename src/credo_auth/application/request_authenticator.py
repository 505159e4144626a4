"""Framework-neutral request authentication.

Turns an ``Authorization`` header into a ``Principal`` or refuses the
request. Web integrations (see ``credo_auth.integrations``) wrap this.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from credo_auth.exceptions import UnauthorizedError
from credo_auth.schemas import Principal

if TYPE_CHECKING:
    from credo_auth.application.authentication_service import AuthenticationService

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"

T = TypeVar("T")


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """Return the token from ``Bearer <token>``, or None if absent/malformed."""
    if not authorization_header:
        return None
    scheme, _, token = authorization_header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token or " " in token:
        return None
    return token


class RequestAuthenticator:
    """Authenticate requests carrying an access token.

    Examples
    --------
    >>> authenticator = RequestAuthenticator(auth_service)
    >>> principal = await authenticator.authenticate("Bearer eyJ...")
    >>> principal.user_id
    """

    def __init__(self, auth_service: AuthenticationService):
        self._auth_service = auth_service

    async def authenticate(self, authorization_header: str | None) -> Principal:
        """
        Resolve the caller behind an ``Authorization`` header.

        Raises
        ------
        UnauthorizedError
            If the header is missing or malformed, or the token is not a
            valid, unrevoked access token for an existing user
        """
        token = extract_bearer_token(authorization_header)
        if token is None:
            logger.debug("Request rejected, missing or malformed bearer header")
            raise UnauthorizedError

        principal = await self._auth_service.validate_token(token)
        if principal is None:
            logger.debug("Request rejected, access token not accepted")
            raise UnauthorizedError
        return principal

    def protect(
        self,
        handler: Callable[..., Awaitable[T]],
    ) -> Callable[..., Awaitable[T]]:
        """Wrap an async handler so it only runs for authenticated callers.

        The wrapped callable takes the ``Authorization`` header as its first
        argument; the handler receives the ``Principal`` in its place.
        """

        @functools.wraps(handler)
        async def wrapper(
            authorization_header: str | None,
            *args: Any,
            **kwargs: Any,
        ) -> T:
            principal = await self.authenticate(authorization_header)
            return await handler(principal, *args, **kwargs)

        return wrapper

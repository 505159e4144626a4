"""FastAPI dependency for authenticated routes.

Usage:
    service = create_auth_service(get_settings())
    get_current_principal = build_current_principal_dependency(service)

    @app.get("/me")
    async def me(principal: Principal = Depends(get_current_principal)):
        return {"user_id": principal.user_id}
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from credo_auth.application import AuthenticationService, RequestAuthenticator
from credo_auth.exceptions import HTTP_STATUS_BY_CODE, AuthError, UnauthorizedError
from credo_auth.schemas import Principal

logger = logging.getLogger(__name__)

# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def build_current_principal_dependency(
    service: AuthenticationService,
) -> Callable[..., Awaitable[Principal]]:
    """
    Build a dependency resolving the current caller from a Bearer token.

    Parameters
    ----------
    service
        Authentication service used to validate access tokens

    Returns
    -------
    An async dependency returning the ``Principal``; it raises a 401
    ``HTTPException`` when the token is missing or not accepted
    """
    authenticator = RequestAuthenticator(service)

    async def get_current_principal(
        credentials: HTTPAuthorizationCredentials | None = Depends(security),
    ) -> Principal:
        if credentials is None:
            raise _unauthorized("Authentication required")

        try:
            return await authenticator.authenticate(
                f"{credentials.scheme} {credentials.credentials}",
            )
        except UnauthorizedError as e:
            logger.debug("Rejected request: %s", e.message)
            raise _unauthorized("Invalid or expired token") from e

    return get_current_principal


def to_http_exception(error: AuthError) -> HTTPException:
    """Map an engine error to an HTTPException with its default status."""
    status_code = HTTP_STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST)
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if status_code == status.HTTP_401_UNAUTHORIZED
        else None
    )
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code.value, "message": error.message},
        headers=headers,
    )

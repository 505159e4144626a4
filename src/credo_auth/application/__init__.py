"""Application layer: the auth orchestrator and request authenticator."""

from credo_auth.application.authentication_service import (
    RESET_REQUESTED_MESSAGE,
    AuthenticationService,
    EmailOptions,
    SendEmail,
)
from credo_auth.application.factory import build_credential_store, create_auth_service
from credo_auth.application.request_authenticator import (
    RequestAuthenticator,
    extract_bearer_token,
)

__all__ = [
    "RESET_REQUESTED_MESSAGE",
    "AuthenticationService",
    "EmailOptions",
    "RequestAuthenticator",
    "SendEmail",
    "build_credential_store",
    "create_auth_service",
    "extract_bearer_token",
]

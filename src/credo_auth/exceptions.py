"""Authentication exceptions.

These exceptions are raised by the credo_auth package. Callers (for example
an HTTP layer) map them to status codes; ``HTTP_STATUS_BY_CODE`` offers the
default mapping.

Messages on authentication failures are deliberately generic where a more
specific message would let a caller probe for account existence or token
state.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes for API clients."""

    # Validation (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    WEAK_PASSWORD = "WEAK_PASSWORD"

    # Authentication (401 / 403)
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    INVALID_TOKEN = "INVALID_TOKEN"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Not found (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Conflict (409)
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"

    # Infrastructure (502 / 503)
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"
    STORE_ERROR = "STORE_ERROR"


HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.WEAK_PASSWORD: 400,
    ErrorCode.INVALID_CREDENTIALS: 401,
    ErrorCode.INVALID_TOKEN: 401,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.EMAIL_NOT_VERIFIED: 403,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.EMAIL_ALREADY_EXISTS: 409,
    ErrorCode.CONCURRENCY_CONFLICT: 409,
    ErrorCode.EMAIL_DELIVERY_FAILED: 502,
    ErrorCode.STORE_ERROR: 503,
}


class AuthError(Exception):
    """Base exception for all authentication errors."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r})"
        )


class ValidationError(AuthError):
    """Raised when an input field fails validation."""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class WeakPasswordError(ValidationError):
    """Raised when a password doesn't meet the password policy."""

    code = ErrorCode.WEAK_PASSWORD

    def __init__(self, message: str = "Password does not meet requirements"):
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Raised when email or password is incorrect during login."""

    code = ErrorCode.INVALID_CREDENTIALS

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class EmailNotVerifiedError(AuthError):
    """Raised on login, after the password matched, for unverified accounts."""

    code = ErrorCode.EMAIL_NOT_VERIFIED

    def __init__(
        self,
        message: str = "Email not verified. Please verify your email before logging in.",
    ):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Raised when a token is invalid, expired, revoked or of the wrong kind."""

    code = ErrorCode.INVALID_TOKEN

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class InvalidRefreshTokenError(InvalidTokenError):
    """Raised when a refresh token cannot be used."""

    def __init__(self, message: str = "Invalid refresh token"):
        super().__init__(message)


class InvalidResetTokenError(InvalidTokenError):
    """Raised when a password reset token is invalid or expired."""

    def __init__(self, message: str = "Invalid or expired password reset token"):
        super().__init__(message)


class InvalidVerificationTokenError(InvalidTokenError):
    """Raised when an email verification token is invalid or expired."""

    def __init__(
        self,
        message: str = "Invalid or expired email verification token",
    ):
        super().__init__(message)


class UnauthorizedError(AuthError):
    """Raised by the request authenticator when no valid principal exists."""

    code = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class UserNotFoundError(AuthError):
    """Raised when an operation targets an unknown user id."""

    code = ErrorCode.USER_NOT_FOUND

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class EmailAlreadyExistsError(AuthError):
    """Raised when an email is already registered to another user."""

    code = ErrorCode.EMAIL_ALREADY_EXISTS

    def __init__(self, message: str = "User with this email already exists"):
        super().__init__(message)


class ConcurrencyError(AuthError):
    """Raised when an optimistic ``updated_at`` check fails."""

    code = ErrorCode.CONCURRENCY_CONFLICT

    def __init__(
        self,
        message: str = "User was modified concurrently, reload and retry",
    ):
        super().__init__(message)


class EmailDeliveryError(AuthError):
    """Raised by an email sender when a message could not be delivered."""

    code = ErrorCode.EMAIL_DELIVERY_FAILED

    def __init__(self, message: str = "Failed to deliver email"):
        super().__init__(message)


class StoreError(AuthError):
    """Raised when the credential store backend fails unexpectedly."""

    code = ErrorCode.STORE_ERROR

    def __init__(self, message: str = "Credential store error"):
        super().__init__(message)

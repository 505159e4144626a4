"""Pure services: password hashing/policy and token handling."""

from credo_auth.services.password_service import PasswordHashingService, PasswordPolicy
from credo_auth.services.token_service import TokenService

__all__ = [
    "PasswordHashingService",
    "PasswordPolicy",
    "TokenService",
]

from credo_auth.infrastructure.email.smtp_sender import SMTPEmailSender
from credo_auth.infrastructure.email.templates import (
    PASSWORD_RESET_TEMPLATE,
    TOKEN_PLACEHOLDER,
    VERIFICATION_TEMPLATE,
    EmailTemplate,
)

__all__ = [
    "PASSWORD_RESET_TEMPLATE",
    "SMTPEmailSender",
    "TOKEN_PLACEHOLDER",
    "VERIFICATION_TEMPLATE",
    "EmailTemplate",
]

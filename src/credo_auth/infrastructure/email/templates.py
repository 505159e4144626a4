"""Email templates for verification and password reset messages.

Templates use a ``{{token}}`` placeholder that is replaced with the issued
token when the message is rendered.
"""

from dataclasses import dataclass

TOKEN_PLACEHOLDER = "{{token}}"


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    text: str
    html: str

    def render(self, token: str) -> tuple[str, str, str]:
        """Return (subject, text, html) with every placeholder replaced."""
        return (
            self.subject.replace(TOKEN_PLACEHOLDER, token),
            self.text.replace(TOKEN_PLACEHOLDER, token),
            self.html.replace(TOKEN_PLACEHOLDER, token),
        )


VERIFICATION_TEMPLATE = EmailTemplate(
    subject="Verify your email address",
    text="""Hello,

Thanks for signing up. Use the code below to verify your email address
(valid for 24 hours):

{{token}}

If you didn't create an account, you can safely ignore this email.
""",
    html="""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #f9fafb; margin: 0; padding: 20px;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 8px; padding: 40px;">
        <h2 style="color: #111827; margin-top: 0;">Verify your email address</h2>
        <p style="color: #374151; line-height: 1.6;">Thanks for signing up. Use the code below to verify your email address. It is valid for 24 hours.</p>
        <p style="word-break: break-all; color: #2563eb; font-size: 14px;">{{token}}</p>
        <p style="color: #9ca3af; font-size: 13px;">If you didn't create an account, you can safely ignore this email.</p>
    </div>
</body>
</html>
""",
)

PASSWORD_RESET_TEMPLATE = EmailTemplate(
    subject="Reset your password",
    text="""Hello,

You requested a password reset. Use the code below to choose a new
password (valid for 1 hour):

{{token}}

If you didn't request this, you can safely ignore this email.
""",
    html="""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #f9fafb; margin: 0; padding: 20px;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 8px; padding: 40px;">
        <h2 style="color: #111827; margin-top: 0;">Password Reset Request</h2>
        <p style="color: #374151; line-height: 1.6;">You requested a password reset. Use the code below to choose a new password. It is valid for 1 hour.</p>
        <p style="word-break: break-all; color: #2563eb; font-size: 14px;">{{token}}</p>
        <p style="color: #9ca3af; font-size: 13px;">If you didn't request this, you can safely ignore this email.</p>
    </div>
</body>
</html>
""",
)

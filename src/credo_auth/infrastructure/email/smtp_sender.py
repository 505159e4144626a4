"""SMTP implementation of the send-email capability."""

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from credo_auth.exceptions import EmailDeliveryError
from credo_auth.schemas import EmailMessage
from credo_config.settings import Settings

logger = logging.getLogger(__name__)


class SMTPEmailSender:
    """Callable send-email capability backed by smtplib.

    The blocking SMTP conversation runs in a worker thread. Returns False
    when SMTP is disabled, raises ``EmailDeliveryError`` when sending fails.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    def _create_message(self, message: EmailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.from_email or self._settings.email_from_address
        msg["To"] = message.to

        msg.attach(MIMEText(message.text, "plain"))
        if message.html:
            msg.attach(MIMEText(message.html, "html"))

        return msg

    def _send(self, to_email: str, message: MIMEMultipart) -> None:
        settings = self._settings
        smtp_password = (
            settings.smtp_password.get_secret_value() if settings.smtp_password else ""
        )

        if settings.smtp_use_tls and not settings.smtp_starttls:
            # Implicit TLS (port 465)
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(
                settings.smtp_host,
                settings.smtp_port,
                context=context,
            ) as server:
                if settings.smtp_user:
                    server.login(settings.smtp_user, smtp_password)
                server.send_message(message)
        else:
            # STARTTLS (port 587) or plain
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                if settings.smtp_starttls:
                    context = ssl.create_default_context()
                    server.starttls(context=context)
                if settings.smtp_user:
                    server.login(settings.smtp_user, smtp_password)
                server.send_message(message)

        logger.info("Email sent to %s", to_email)

    async def __call__(self, message: EmailMessage) -> bool:
        if not self._settings.smtp_enabled:
            logger.warning("SMTP disabled, email not sent to %s", message.to)
            return False

        if not self._settings.smtp_host:
            logger.error("SMTP host not configured")
            return False

        try:
            await asyncio.to_thread(self._send, message.to, self._create_message(message))
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", message.to, e)
            raise EmailDeliveryError(f"Failed to send email to {message.to}") from e
        return True

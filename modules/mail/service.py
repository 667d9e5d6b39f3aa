"""
SMTP mailer.

Builds plain-text transactional emails and hands them to an SMTP server.
smtplib is blocking, so each send runs in a worker thread to keep the event
loop free.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from shared.config import Settings, get_settings

from .exceptions import MailDeliveryError
from .interfaces import IMailer

logger = logging.getLogger(__name__)


VERIFICATION_SUBJECT = "[Hackboard] Verify your email"
VERIFICATION_BODY = """Hi!

Thanks for signing up. Please confirm your email address by following the
link below:

{link}

If you did not create an account, you can ignore this email.
"""

RESET_SUBJECT = "[Hackboard] Password reset requested"
RESET_BODY = """Hi!

Somebody (hopefully you) asked to reset the password for this account.
Follow the link below to choose a new password. The link expires soon and
can only be used once.

{link}

If you did not ask for this, you can ignore this email.
"""

PASSWORD_CHANGED_SUBJECT = "[Hackboard] Your password was changed"
PASSWORD_CHANGED_BODY = """Hi!

The password for your account was just changed. If this was not you,
reset your password right away and get in touch with the organizers.
"""


class SmtpMailer(IMailer):
    """
    IMailer implementation that talks to an SMTP server.

    Connection details come from settings (SMTP_HOST, SMTP_PORT, ...).
    Login is skipped when no SMTP username is configured, which suits
    local relays such as MailHog.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()

    async def send_verification_email(self, email: str, token: str) -> None:
        link = self._link("verify", token)
        await self._send(email, VERIFICATION_SUBJECT, VERIFICATION_BODY.format(link=link))

    async def send_password_reset_email(self, email: str, token: str) -> None:
        link = self._link("reset", token)
        await self._send(email, RESET_SUBJECT, RESET_BODY.format(link=link))

    async def send_password_changed_email(self, email: str) -> None:
        await self._send(email, PASSWORD_CHANGED_SUBJECT, PASSWORD_CHANGED_BODY)

    def _link(self, path: str, token: str) -> str:
        return f"{self._settings.frontend_url.rstrip('/')}/{path}/{token}"

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._settings.email_from
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    async def _send(self, to: str, subject: str, body: str) -> None:
        msg = self.build_message(to, subject, body)
        await asyncio.to_thread(self._deliver, msg)
        logger.info("Sent '%s' email to %s", subject, to)

    def _deliver(self, msg: EmailMessage) -> None:
        settings = self._settings
        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
                if settings.smtp_use_tls:
                    server.starttls()
                if settings.smtp_username:
                    server.login(settings.smtp_username, settings.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", msg["To"], e)
            raise MailDeliveryError(str(msg["To"]), str(e)) from e

"""
SMTP email sender adapter - Implements EmailSender protocol.

Sends plain-text mail through an authenticated SMTP relay using
aiosmtplib, so delivery suspends the calling task instead of blocking
the event loop. Failures are reported once as DeliveryError; there is
no retry.
"""

import logging
from email.message import EmailMessage

import aiosmtplib

from fmdb_keys.domain.exceptions import DeliveryError

logger = logging.getLogger(__name__)

SENDER_NAME = "The FMDb API"


class SmtpEmailSender:
    """Implements EmailSender protocol via aiosmtplib."""

    def __init__(
        self,
        hostname: str,
        port: int,
        username: str,
        password: str,
        start_tls: bool = True,
    ) -> None:
        self._hostname = hostname
        self._port = port
        self._username = username
        self._password = password
        self._start_tls = start_tls

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = f"{SENDER_NAME} <{self._username}>"
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    async def send(self, to: str, subject: str, body: str) -> None:
        """
        Deliver a plain-text email.

        Raises:
            DeliveryError: Connection, authentication or relay failure, or
                an address that cannot be put in a header
        """
        try:
            message = self.build_message(to, subject, body)
            await aiosmtplib.send(
                message,
                hostname=self._hostname,
                port=self._port,
                username=self._username or None,
                password=self._password or None,
                start_tls=self._start_tls,
            )
        except (aiosmtplib.SMTPException, OSError, ValueError) as e:
            raise DeliveryError(f"Mail to {to} failed: {e}") from e
        logger.debug("Mail sent to %s via %s", to, self._hostname)

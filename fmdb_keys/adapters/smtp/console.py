"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outgoing mail to stdout for development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development purposes - prints the message instead of sending it.
    """

    async def send(self, to: str, subject: str, body: str) -> None:
        """
        Log the email to console (simulates email delivery).

        The message is logged at INFO level as a single record.

        Args:
            to: Recipient email address
            subject: Subject line
            body: Plain-text body
        """
        logger.info("[EMAIL] To: %s Subject: %s\n%s", to, subject, body)

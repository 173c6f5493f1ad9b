"""Email sender adapters."""

from .console import ConsoleEmailSender
from .relay import SmtpEmailSender

__all__ = ["ConsoleEmailSender", "SmtpEmailSender"]

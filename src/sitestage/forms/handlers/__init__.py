"""Built-in form handlers."""

from .mailgun import MailgunHandler
from .smtp import SmtpHandler

__all__ = ["MailgunHandler", "SmtpHandler"]

"""Mailgun form handler."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sitestage.errors import FormHandlerError
from sitestage.forms.message import format_html, format_text, normalize_recipients
from sitestage.forms.types import Attachment, FormValues
from sitestage.mailgun import MailgunClient

logger = logging.getLogger(__name__)


class MailgunHandler:
    """Sends form submissions via Mailgun API."""

    name = "mailgun"
    description = "Sends form submissions via Mailgun API."

    def __init__(self, client: MailgunClient | None = None) -> None:
        self.client = client

    async def handle(
        self,
        form_name: str,
        data: FormValues,
        attachments: Sequence[Attachment],
        config: Mapping[str, Any] | None = None,
    ) -> None:
        """Email a submission to the form's recipients.

        Does nothing (besides a warning) when the form has no recipients.

        Raises:
            FormHandlerError: If Mailgun is not configured or sending fails
        """
        recipients = normalize_recipients((config or {}).get("recipients"))
        if not recipients:
            logger.warning(
                f"MailgunHandler: No recipients configured for form '{form_name}'. "
                "Skipping.",
            )
            return

        if self.client is None:
            raise FormHandlerError("MailgunHandler failed: Mailgun is not configured")

        text = format_text(data)
        try:
            await self.client.send_email(
                to=recipients,
                subject=f"New Form Submission: {form_name}",
                text=text,
                html=format_html(text),
                attachments=attachments,
            )
        except Exception as e:
            raise FormHandlerError(f"MailgunHandler failed: {e}") from e

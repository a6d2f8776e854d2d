"""Mailgun API client.

Async HTTP client for sending email through the Mailgun messages API.
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from sitestage.config import MailgunConfig
from sitestage.errors import MailgunError
from sitestage.forms.types import Attachment

logger = logging.getLogger(__name__)


class MailgunClient:
    """Async HTTP client for the Mailgun messages API."""

    def __init__(self, client: httpx.AsyncClient, config: MailgunConfig):
        """Initialize Mailgun client.

        Args:
            client: httpx AsyncClient used for all requests
            config: Mailgun endpoint, domain and credentials
        """
        self.client = client
        self.config = config
        self.messages_url = f"{config.url.rstrip('/')}/v3/{config.domain}/messages"

    async def send_email(
        self,
        to: str | Sequence[str],
        subject: str,
        text: str,
        html: str,
        attachments: Sequence[Attachment] = (),
    ) -> dict[str, Any]:
        """Send an email.

        Args:
            to: Recipient address or list of addresses
            subject: Message subject
            text: Plain-text body
            html: HTML body
            attachments: Files to attach

        Returns:
            Parsed Mailgun response (message id and status text)

        Raises:
            MailgunError: If the request fails or Mailgun rejects it
        """
        recipients = [to] if isinstance(to, str) else list(to)

        data: dict[str, Any] = {
            "from": self.config.sender_email,
            "to": recipients,
            "subject": subject,
            "text": text,
            "html": html,
        }
        files = [
            (
                "attachment",
                (attachment.filename, attachment.data, attachment.content_type),
            )
            for attachment in attachments
        ]

        logger.info(f"Sending email to {', '.join(recipients)} via Mailgun")
        logger.debug(f"Subject: {subject}, attachments: {len(files)}")

        try:
            response = await self.client.post(
                self.messages_url,
                data=data,
                files=files or None,
                auth=("api", self.config.api_key),
                timeout=30.0,
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email: {e}")
            raise MailgunError(f"Failed to send email: {e}") from e

        if response.status_code >= 400:
            logger.error(
                f"Failed to send email: {response.status_code} "
                f"{response.reason_phrase} {response.text}",
            )
            raise MailgunError(
                f"Failed to send email: {response.status_code} {response.reason_phrase}",
            )

        result: dict[str, Any] = response.json()
        logger.info(f"Email sent successfully: {result.get('id', '')}")
        return result

"""SMTP form handler."""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import replace
from email.message import EmailMessage
from typing import Any

import aiosmtplib

from sitestage.config import SmtpConfig
from sitestage.errors import FormHandlerError
from sitestage.forms.message import format_html, format_text, normalize_recipients
from sitestage.forms.types import Attachment, FormValues

logger = logging.getLogger(__name__)

SendMessage = Callable[..., Awaitable[Any]]

# Handler options that map onto SmtpConfig fields
_OPTION_FIELDS = {
    "host": "host",
    "port": "port",
    "secure": "secure",
    "user": "user",
    "password": "password",
    "from": "sender_email",
    "sender_email": "sender_email",
}


class SmtpHandler:
    """Sends form submissions by email over SMTP."""

    name = "smtp"
    description = "Sends form submissions via SMTP."

    def __init__(
        self,
        config: SmtpConfig | None = None,
        *,
        send: SendMessage | None = None,
    ) -> None:
        """Initialize handler.

        Args:
            config: Default SMTP settings; handler options override them
            send: Coroutine function delivering a message (default: aiosmtplib.send)
        """
        self.config = config if config is not None else SmtpConfig()
        self._send = send or aiosmtplib.send

    async def handle(
        self,
        form_name: str,
        data: FormValues,
        attachments: Sequence[Attachment],
        config: Mapping[str, Any] | None = None,
    ) -> None:
        """Email a submission to the form's recipients.

        Raises:
            FormHandlerError: If the SMTP exchange fails
        """
        options = dict(config or {})
        recipients = normalize_recipients(options.get("recipients"))
        if not recipients:
            logger.warning(f"SmtpHandler: No recipients configured for form '{form_name}'.")
            return

        smtp_config = self._effective_config(options)
        message = self._build_message(form_name, data, attachments, smtp_config, recipients)

        logger.info(
            f"Sending email to {message['To']} via {smtp_config.host}:{smtp_config.port}",
        )
        try:
            await self._send(
                message,
                hostname=smtp_config.host,
                port=smtp_config.port,
                username=smtp_config.user or None,
                password=smtp_config.password or None,
                use_tls=smtp_config.secure,
                timeout=30,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"SmtpHandler failed: {e}")
            raise FormHandlerError(f"SMTP error: {e}") from e

    def _effective_config(self, options: Mapping[str, Any]) -> SmtpConfig:
        overrides: dict[str, Any] = {}
        for option, field_name in _OPTION_FIELDS.items():
            if options.get(option) is not None:
                overrides[field_name] = options[option]
        if "port" in overrides:
            try:
                overrides["port"] = int(overrides["port"])
            except (TypeError, ValueError) as e:
                raise FormHandlerError(
                    f"SMTP error: invalid port {options['port']!r}",
                ) from e
        return replace(self.config, **overrides)

    def _build_message(
        self,
        form_name: str,
        data: FormValues,
        attachments: Sequence[Attachment],
        smtp_config: SmtpConfig,
        recipients: list[str],
    ) -> EmailMessage:
        text = format_text(data)

        message = EmailMessage()
        message["From"] = smtp_config.sender_email
        message["To"] = ", ".join(recipients)
        message["Subject"] = f"New Submission: {form_name}"
        message.set_content(text)
        message.add_alternative(format_html(text), subtype="html")
        for attachment in attachments:
            maintype, _, subtype = attachment.content_type.partition("/")
            message.add_attachment(
                attachment.data,
                maintype=maintype or "application",
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return message

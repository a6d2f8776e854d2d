"""Tests for built-in form handlers."""

import logging
from email.message import EmailMessage
from typing import Any

import aiosmtplib
import pytest
from sitestage.config import SmtpConfig
from sitestage.errors import FormHandlerError, MailgunError
from sitestage.forms.handlers import MailgunHandler, SmtpHandler
from sitestage.forms.message import format_html, format_text, normalize_recipients
from sitestage.forms.types import Attachment, FormHandler


class FakeMailgunClient:
    """Stands in for MailgunClient; records send_email calls."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def send_email(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"id": "123", "message": "OK"}


class FakeSend:
    """Stands in for aiosmtplib.send; records messages."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[EmailMessage, dict[str, Any]]] = []

    async def __call__(self, message: EmailMessage, **kwargs: Any) -> None:
        self.calls.append((message, kwargs))
        if self.error is not None:
            raise self.error


class TestMessageFormatting:
    """Tests for submission body formatting."""

    def test__fields__one_line_each(self) -> None:
        assert format_text({"name": "John", "email": "j@x.org"}) == (
            "name: John\nemail: j@x.org"
        )

    def test__list_values__comma_joined(self) -> None:
        assert format_text({"skills": ["Node", "Astro"]}) == "skills: Node, Astro"

    def test__html__escaped_with_line_breaks(self) -> None:
        assert format_html("a: <b>\nc: d") == "<p>a: &lt;b&gt;<br>c: d</p>"

    def test__recipients_string__wrapped_in_list(self) -> None:
        assert normalize_recipients("a@x.org") == ["a@x.org"]

    def test__recipients_missing__empty(self) -> None:
        assert normalize_recipients(None) == []


class TestMailgunHandler:
    """Tests for MailgunHandler."""

    def test__identity__matches_protocol(self) -> None:
        handler = MailgunHandler()

        assert handler.name == "mailgun"
        assert handler.description == "Sends form submissions via Mailgun API."
        assert isinstance(handler, FormHandler)

    @pytest.mark.asyncio
    async def test__no_recipients__warns_and_skips(
        self,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        client = FakeMailgunClient()
        handler = MailgunHandler(client)  # type: ignore[arg-type]

        with caplog.at_level(logging.WARNING):
            await handler.handle("contact", {}, [])

        assert (
            "MailgunHandler: No recipients configured for form 'contact'. Skipping."
            in caplog.text
        )
        assert client.calls == []

    @pytest.mark.asyncio
    async def test__empty_recipients__skips(self) -> None:
        client = FakeMailgunClient()
        handler = MailgunHandler(client)  # type: ignore[arg-type]

        await handler.handle("contact", {"name": "John"}, [], {"recipients": []})

        assert client.calls == []

    @pytest.mark.asyncio
    async def test__recipients__sends_email(self) -> None:
        client = FakeMailgunClient()
        handler = MailgunHandler(client)  # type: ignore[arg-type]
        attachments = [Attachment(filename="a.txt", data=b"x")]

        await handler.handle(
            "contact",
            {"name": "John", "skills": ["Node", "Astro"]},
            attachments,
            {"recipients": "admin@example.com"},
        )

        assert len(client.calls) == 1
        call = client.calls[0]
        assert call["to"] == ["admin@example.com"]
        assert call["subject"] == "New Form Submission: contact"
        assert "name: John" in call["text"]
        assert "skills: Node, Astro" in call["text"]
        assert "name: John" in call["html"]
        assert call["attachments"] == attachments

    @pytest.mark.asyncio
    async def test__send_failure__wrapped(self) -> None:
        client = FakeMailgunClient(error=MailgunError("API Error"))
        handler = MailgunHandler(client)  # type: ignore[arg-type]

        with pytest.raises(FormHandlerError, match="MailgunHandler failed: API Error"):
            await handler.handle("contact", {}, [], {"recipients": ["a@x.org"]})

    @pytest.mark.asyncio
    async def test__not_configured__raises(self) -> None:
        handler = MailgunHandler()

        with pytest.raises(FormHandlerError, match="Mailgun is not configured"):
            await handler.handle("contact", {}, [], {"recipients": ["a@x.org"]})


class TestSmtpHandler:
    """Tests for SmtpHandler."""

    def _handler(self, send: FakeSend, **config: Any) -> SmtpHandler:
        return SmtpHandler(SmtpConfig(host="smtp.example.com", **config), send=send)

    @pytest.mark.asyncio
    async def test__no_recipients__skips(self) -> None:
        send = FakeSend()

        await self._handler(send).handle("contact", {"name": "John"}, [], {})

        assert send.calls == []

    @pytest.mark.asyncio
    async def test__recipients__sends_message(self) -> None:
        send = FakeSend()
        handler = self._handler(send, user="u", password="p")

        await handler.handle(
            "contact",
            {"name": "John"},
            [Attachment(filename="a.pdf", data=b"%PDF", content_type="application/pdf")],
            {"recipients": ["a@x.org", "b@x.org"]},
        )

        assert len(send.calls) == 1
        message, kwargs = send.calls[0]
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["port"] == 587
        assert kwargs["username"] == "u"
        assert kwargs["password"] == "p"
        assert kwargs["use_tls"] is False
        assert message["To"] == "a@x.org, b@x.org"
        assert message["Subject"] == "New Submission: contact"
        assert message["From"] == "noreply@example.com"
        filenames = [part.get_filename() for part in message.iter_attachments()]
        assert filenames == ["a.pdf"]

    @pytest.mark.asyncio
    async def test__handler_options__override_config(self) -> None:
        send = FakeSend()

        await self._handler(send).handle(
            "contact",
            {},
            [],
            {
                "recipients": "a@x.org",
                "host": "other.example.com",
                "port": "2525",
                "secure": True,
                "from": "site@x.org",
            },
        )

        message, kwargs = send.calls[0]
        assert kwargs["hostname"] == "other.example.com"
        assert kwargs["port"] == 2525
        assert kwargs["use_tls"] is True
        assert message["From"] == "site@x.org"

    @pytest.mark.asyncio
    async def test__no_user__sends_without_credentials(self) -> None:
        send = FakeSend()

        await self._handler(send).handle("contact", {}, [], {"recipients": "a@x.org"})

        _, kwargs = send.calls[0]
        assert kwargs["username"] is None
        assert kwargs["password"] is None

    @pytest.mark.asyncio
    async def test__smtp_failure__wrapped(self) -> None:
        send = FakeSend(error=aiosmtplib.SMTPConnectError("Connection refused"))

        with pytest.raises(FormHandlerError, match="SMTP error"):
            await self._handler(send).handle(
                "contact",
                {},
                [],
                {"recipients": "a@x.org"},
            )

    @pytest.mark.asyncio
    async def test__non_numeric_port_option__wrapped(self) -> None:
        send = FakeSend()

        with pytest.raises(FormHandlerError, match="SMTP error: invalid port 'smtp'"):
            await self._handler(send).handle(
                "contact",
                {},
                [],
                {"recipients": "a@x.org", "port": "smtp"},
            )

        assert send.calls == []

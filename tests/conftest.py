"""Shared test fixtures."""

from collections.abc import Mapping, Sequence
from typing import Any

import pytest
from sitestage.config import (
    Config,
    FormHandlersConfig,
    FormSpec,
    I18nConfig,
    MailgunConfig,
    SiteConfig,
)
from sitestage.forms.registry import FormHandlerRegistry
from sitestage.forms.types import Attachment, FormValues


class RecordingHandler:
    """Form handler that records calls and optionally fails."""

    description = "Records submissions for assertions."

    def __init__(self, name: str = "recording", error: Exception | None = None) -> None:
        self.name = name
        self.error = error
        self.calls: list[tuple[str, FormValues, list[Attachment], dict[str, Any]]] = []

    async def handle(
        self,
        form_name: str,
        data: FormValues,
        attachments: Sequence[Attachment],
        config: Mapping[str, Any] | None = None,
    ) -> None:
        self.calls.append((form_name, data, list(attachments), dict(config or {})))
        if self.error is not None:
            raise self.error


@pytest.fixture
def site_config() -> SiteConfig:
    return SiteConfig(site="https://example.com", base="/", trailing_slash=False)


@pytest.fixture
def test_config(site_config: SiteConfig) -> Config:
    """Create a test configuration with a contact form and one recording handler.

    Configuration is injected directly; nothing is read from disk or the
    environment.
    """
    return Config(
        site=site_config,
        i18n=I18nConfig(language="en", text_direction="ltr"),
        form_handlers=FormHandlersConfig(defaults=["recording"]),
        forms={"contact": FormSpec(name="contact", recipients=["admin@example.com"])},
        mailgun=MailgunConfig(api_key="key-123", domain="mg.example.com"),
    )


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def registry(recording_handler: RecordingHandler) -> FormHandlerRegistry:
    registry = FormHandlerRegistry()
    registry.register(recording_handler)
    return registry

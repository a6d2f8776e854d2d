"""Configuration management for Sitestage.

Supports TOML configuration format with auto-discovery. Transport secrets
may also be supplied through environment variables.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "sitestage.toml"

DEFAULT_SITE_NAME = "Website"
DEFAULT_MAILGUN_URL = "https://api.mailgun.net"
DEFAULT_SENDER_EMAIL = "noreply@example.com"
DEFAULT_MAX_BODY_SIZE = 25 * 1024 * 1024


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    max_body_size: int = DEFAULT_MAX_BODY_SIZE


@dataclass(frozen=True)
class SiteConfig:
    """Site identity and URL policy."""

    name: str = DEFAULT_SITE_NAME
    site: str | None = None
    base: str | None = "/"
    trailing_slash: bool = False


@dataclass(frozen=True)
class I18nConfig:
    """Internationalization configuration."""

    language: str = "en"
    text_direction: str = "ltr"
    routing: bool = False
    locales: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class HandlerConfig:
    """Per-handler settings from [form_handlers.handlers.<name>]."""

    enabled: bool = True
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FormHandlersConfig:
    """Which form handlers run, and how each one is configured."""

    defaults: list[str] = field(default_factory=lambda: ["mailgun"])
    handlers: dict[str, HandlerConfig] = field(default_factory=dict)

    def get_handler_config(self, name: str) -> HandlerConfig:
        return self.handlers.get(name, HandlerConfig())


@dataclass(frozen=True)
class FormSpec:
    """Form definition."""

    name: str
    recipients: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MailgunConfig:
    """Mailgun API configuration."""

    api_key: str
    domain: str
    url: str = DEFAULT_MAILGUN_URL
    sender_email: str = DEFAULT_SENDER_EMAIL


@dataclass(frozen=True)
class SmtpConfig:
    """SMTP transport configuration."""

    host: str = ""
    port: int = 587
    secure: bool = False
    user: str = ""
    password: str = ""
    sender_email: str = DEFAULT_SENDER_EMAIL


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    i18n: I18nConfig = field(default_factory=I18nConfig)
    form_handlers: FormHandlersConfig = field(default_factory=FormHandlersConfig)
    forms: dict[str, FormSpec] = field(default_factory=dict)
    mailgun: MailgunConfig | None = None
    smtp: SmtpConfig = field(default_factory=SmtpConfig)
    config_path: Path | None = None

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for sitestage.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file
            env: Environment used for secret overrides (default: os.environ)

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if env is None:
            env = os.environ

        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path, env)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls.from_dict({}, env)

        return cls._load_from_file(discovered_path, env)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path, env: Mapping[str, str]) -> Config:
        with path.open("rb") as f:
            data = tomllib.load(f)

        return replace(cls.from_dict(data, env), config_path=path)

    @classmethod
    def from_dict(cls, data: object, env: Mapping[str, str] | None = None) -> Config:
        """Build configuration from already-parsed TOML data.

        Args:
            data: Parsed configuration document
            env: Environment used for secret overrides (default: empty)

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        if env is None:
            env = {}

        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        return cls(
            server=cls._parse_server(data.get("server")),
            site=cls._parse_site(data.get("site")),
            i18n=cls._parse_i18n(data.get("i18n")),
            form_handlers=cls._parse_form_handlers(data.get("form_handlers")),
            forms=cls._parse_forms(data.get("forms")),
            mailgun=cls._parse_mailgun(data.get("mailgun"), env),
            smtp=cls._parse_smtp(data.get("smtp"), env),
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        section = _require_section(data, "server")
        return ServerConfig(
            host=_get_str(section, "server", "host", "127.0.0.1"),
            port=_get_int(section, "server", "port", 8080),
            max_body_size=_get_positive_int(
                section, "server", "max_body_size", DEFAULT_MAX_BODY_SIZE
            ),
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        """Parse site configuration section.

        An empty base is kept as-is; permalink building treats it as "/".
        """
        if data is None:
            return SiteConfig()

        section = _require_section(data, "site")

        site = section.get("site")
        if site is not None and not isinstance(site, str):
            raise ValueError("site.site must be a string")

        base = section.get("base", "/")
        if not isinstance(base, str):
            raise ValueError("site.base must be a string")

        trailing_slash = section.get("trailing_slash", False)
        if not isinstance(trailing_slash, bool):
            raise ValueError("site.trailing_slash must be a boolean")

        return SiteConfig(
            name=_get_str(section, "site", "name", DEFAULT_SITE_NAME),
            site=site,
            base=base,
            trailing_slash=trailing_slash,
        )

    @classmethod
    def _parse_i18n(cls, data: object) -> I18nConfig:
        if data is None:
            return I18nConfig()

        section = _require_section(data, "i18n")

        text_direction = _get_str(section, "i18n", "text_direction", "ltr")
        if text_direction not in ("ltr", "rtl"):
            raise ValueError('i18n.text_direction must be "ltr" or "rtl"')

        routing = section.get("routing", False)
        if not isinstance(routing, bool):
            raise ValueError("i18n.routing must be a boolean")

        return I18nConfig(
            language=_get_str(section, "i18n", "language", "en"),
            text_direction=text_direction,
            routing=routing,
            locales=_get_str_list(section, "i18n", "locales"),
        )

    @classmethod
    def _parse_form_handlers(cls, data: object) -> FormHandlersConfig:
        """Parse form_handlers configuration section.

        Every key of a handler table other than "enabled" is passed to the
        handler as an option.
        """
        if data is None:
            return FormHandlersConfig()

        section = _require_section(data, "form_handlers")

        defaults = ["mailgun"]
        if "defaults" in section:
            defaults = _get_str_list(section, "form_handlers", "defaults")

        handlers_raw = section.get("handlers", {})
        if not isinstance(handlers_raw, dict):
            raise ValueError("form_handlers.handlers must be a dictionary")

        handlers: dict[str, HandlerConfig] = {}
        for name, raw in handlers_raw.items():
            if not isinstance(raw, dict):
                raise ValueError(f"form_handlers.handlers.{name} must be a dictionary")
            options = dict(raw)
            enabled = options.pop("enabled", True)
            if not isinstance(enabled, bool):
                raise ValueError(
                    f"form_handlers.handlers.{name}.enabled must be a boolean",
                )
            handlers[name] = HandlerConfig(enabled=enabled, options=options)

        return FormHandlersConfig(defaults=defaults, handlers=handlers)

    @classmethod
    def _parse_forms(cls, data: object) -> dict[str, FormSpec]:
        if data is None:
            return {}

        section = _require_section(data, "forms")

        forms: dict[str, FormSpec] = {}
        for name, raw in section.items():
            if not isinstance(raw, dict):
                raise ValueError(f"forms.{name} must be a dictionary")
            recipients = raw.get("recipients", [])
            if isinstance(recipients, str):
                recipients = [recipients]
            if not isinstance(recipients, list) or not all(
                isinstance(item, str) for item in recipients
            ):
                raise ValueError(
                    f"forms.{name}.recipients must be a string or a list of strings",
                )
            forms[name] = FormSpec(name=name, recipients=recipients)
        return forms

    @classmethod
    def _parse_mailgun(
        cls,
        data: object,
        env: Mapping[str, str],
    ) -> MailgunConfig | None:
        """Parse mailgun configuration section.

        Environment variables take precedence over file values. Returns None
        unless both an API key and a domain are available.
        """
        section = _require_section(data, "mailgun") if data is not None else {}

        url = env.get("MAILGUN_URL") or _get_str(
            section, "mailgun", "url", DEFAULT_MAILGUN_URL
        )
        api_key = env.get("MAILGUN_API_KEY") or _get_str(
            section, "mailgun", "api_key", ""
        )
        domain = env.get("MAILGUN_DOMAIN") or _get_str(section, "mailgun", "domain", "")
        sender_email = env.get("MAILGUN_SENDER_EMAIL") or _get_str(
            section, "mailgun", "sender_email", DEFAULT_SENDER_EMAIL
        )

        if not api_key or not domain:
            return None

        return MailgunConfig(
            api_key=api_key,
            domain=domain,
            url=url,
            sender_email=sender_email,
        )

    @classmethod
    def _parse_smtp(cls, data: object, env: Mapping[str, str]) -> SmtpConfig:
        section = _require_section(data, "smtp") if data is not None else {}

        port_raw: object = env.get("SMTP_PORT") or section.get("port", 587)
        try:
            port = int(port_raw)  # type: ignore[call-overload]
        except (TypeError, ValueError):
            raise ValueError("smtp.port must be an integer") from None

        secure = section.get("secure", False)
        if not isinstance(secure, bool):
            raise ValueError("smtp.secure must be a boolean")

        return SmtpConfig(
            host=env.get("SMTP_HOST") or _get_str(section, "smtp", "host", ""),
            port=port,
            secure=secure,
            user=env.get("SMTP_USER") or _get_str(section, "smtp", "user", ""),
            password=env.get("SMTP_PASS") or _get_str(section, "smtp", "password", ""),
            sender_email=env.get("SMTP_FROM")
            or _get_str(section, "smtp", "sender_email", DEFAULT_SENDER_EMAIL),
        )

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )
        return replace(self, server=server)


def _require_section(data: object, name: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{name} section must be a dictionary")
    return data


def _get_str(section: dict[str, Any], name: str, key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str):
        raise ValueError(f"{name}.{key} must be a string")
    return value


def _get_int(section: dict[str, Any], name: str, key: str, default: int) -> int:
    value = section.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name}.{key} must be an integer")
    return value


def _get_positive_int(
    section: dict[str, Any], name: str, key: str, default: int
) -> int:
    value = _get_int(section, name, key, default)
    if value <= 0:
        raise ValueError(f"{name}.{key} must be positive")
    return value


def _get_str_list(section: dict[str, Any], name: str, key: str) -> list[str]:
    raw = section.get(key, [])
    if not isinstance(raw, list):
        raise ValueError(f"{name}.{key} must be a list")
    items: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise ValueError(f"{name}.{key} items must be strings")
        items.append(item)
    return items

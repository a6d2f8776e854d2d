"""Permalink construction.

Turns logical page paths into canonical site-relative paths and absolute
URLs, honoring the site's base path, locale routing and trailing-slash
policy. Everything here is a pure function of configuration and input.
"""

import logging
from typing import Literal
from urllib.parse import urljoin

from sitestage.config import I18nConfig, SiteConfig
from sitestage.core.types import URLPath

logger = logging.getLogger(__name__)

PermalinkKind = Literal["page", "home", "asset"]

EXTERNAL_PREFIXES = ("https://", "http://", "://", "#", "javascript:", "mailto:")


def _split(value: str | None) -> list[str]:
    """Split a path into its non-empty, whitespace-trimmed segments."""
    if not value:
        return []
    return [part.strip() for part in value.split("/") if part.strip()]


def trim_slash(value: str | None) -> str:
    """Remove surrounding slashes and whitespace from a path.

    Repeated inner slashes are collapsed as well, so the result never
    contains an empty segment.
    """
    return "/".join(_split(value))


def is_external(url: str) -> bool:
    """Return True for URLs that must be passed through untouched."""
    return url.startswith(EXTERNAL_PREFIXES)


def build_path(
    base: str | None,
    *segments: str | None,
    trailing_slash: bool = False,
) -> URLPath:
    """Join a base path and segments into a rooted URL path.

    Exactly one slash separates each part, whatever slashes the inputs
    carried. Missing or empty parts are skipped.

    Args:
        base: Mount path; None or "" means "/"
        segments: Path segments appended after the base
        trailing_slash: Append "/" to non-root results

    Returns:
        Path starting with "/"; "/" itself when every part is empty
    """
    parts = _split(base)
    for segment in segments:
        parts.extend(_split(segment))

    if not parts:
        return URLPath("/")

    path = "/" + "/".join(parts)
    if trailing_slash:
        path += "/"
    return URLPath(path)


class PermalinkBuilder:
    """Builds permalinks for one site configuration.

    Configuration is passed in explicitly and never modified, so a single
    builder can be shared by any number of callers.
    """

    def __init__(self, site: SiteConfig, i18n: I18nConfig | None = None) -> None:
        """Initialize builder.

        Args:
            site: Site base path, origin and trailing-slash policy
            i18n: Locale settings (default: routing disabled)
        """
        self.site = site
        self.i18n = i18n if i18n is not None else I18nConfig()

    @property
    def base_pathname(self) -> str:
        return self.site.base or "/"

    def get_permalink(
        self,
        slug: str = "",
        locale: str | None = None,
        kind: PermalinkKind = "page",
    ) -> str:
        """Build the permalink for a logical page path.

        A rooted slug that already carries the base path (and locale prefix)
        is recognized as a permalink and not prefixed twice, so feeding the
        output back in returns it unchanged.

        Args:
            slug: Page path, "" for the site root
            locale: Locale override; ignored unless locale routing is enabled
            kind: "page", "home" or "asset"

        Returns:
            Site-relative path, or the slug itself for external URLs
        """
        if is_external(slug):
            return slug

        if kind == "asset":
            return self.get_asset(slug)

        parts = [] if kind == "home" else _split(slug)
        base_parts = _split(self.base_pathname)
        locale_parts = self._locale_parts(locale)

        if slug.startswith("/"):
            parts = _strip_prefix(parts, base_parts)
            parts = _strip_prefix(parts, locale_parts)

        return build_path(
            self.base_pathname,
            *locale_parts,
            *parts,
            trailing_slash=self.site.trailing_slash,
        )

    def get_home_permalink(self, locale: str | None = None) -> str:
        return self.get_permalink("/", locale, kind="home")

    def get_asset(self, path: str) -> str:
        """Resolve an asset path under the base path.

        Assets never get a locale prefix or a trailing slash. A rooted path
        already under the base path is returned normalized.
        """
        parts = _split(path)
        if path.startswith("/"):
            parts = _strip_prefix(parts, _split(self.base_pathname))
        return build_path(self.base_pathname, *parts)

    def get_canonical(
        self,
        path: str = "",
        locale: str | None = None,
        kind: PermalinkKind = "page",
    ) -> str:
        """Build the absolute canonical URL for a page.

        Falls back to the site-relative permalink when no site origin is
        configured.

        Args:
            path: Page path or an existing permalink
            locale: Locale override
            kind: "page", "home" or "asset"

        Returns:
            Absolute URL such as "https://example.com/about"
        """
        if is_external(path):
            return path

        permalink = self.get_permalink(path, locale, kind)
        if not self.site.site:
            return permalink
        return urljoin(self.site.site, permalink)

    def _locale_parts(self, locale: str | None) -> list[str]:
        if not self.i18n.routing or not locale or locale == self.i18n.language:
            return []
        if self.i18n.locales and locale not in self.i18n.locales:
            logger.warning(f"Unknown locale '{locale}', building unprefixed path")
            return []
        return _split(locale)


def _strip_prefix(parts: list[str], prefix: list[str]) -> list[str]:
    if prefix and parts[: len(prefix)] == prefix:
        return parts[len(prefix) :]
    return parts

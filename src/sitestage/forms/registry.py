"""Form handler registry and discovery."""

import inspect
import logging
from collections.abc import Iterable, Iterator
from importlib.metadata import entry_points
from types import ModuleType

import httpx

from sitestage.config import Config
from sitestage.forms.handlers import MailgunHandler, SmtpHandler
from sitestage.forms.types import FormHandler
from sitestage.mailgun import MailgunClient

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "sitestage.form_handlers"


class FormHandlerRegistry:
    """Form handlers keyed by name."""

    def __init__(self) -> None:
        self._handlers: dict[str, FormHandler] = {}

    def register(self, handler: FormHandler) -> None:
        if handler.name in self._handlers:
            logger.warning(
                f"FormHandlerRegistry: Overwriting existing handler for '{handler.name}'",
            )
        self._handlers[handler.name] = handler

    def get(self, name: str) -> FormHandler | None:
        return self._handlers.get(name)

    def get_all(self) -> list[FormHandler]:
        return list(self._handlers.values())

    def clear(self) -> None:
        self._handlers.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[FormHandler]:
        return iter(self._handlers.values())


def discover_handlers(
    registry: FormHandlerRegistry,
    modules: Iterable[ModuleType],
) -> None:
    """Register every handler class exported by the given modules.

    Exports are the names in ``__all__`` when the module defines it, and
    otherwise the classes defined in the module itself; imported classes
    are never instantiated. A class qualifies when it can be instantiated
    without arguments and the instance has a string ``name`` and a
    callable ``handle``. Handlers whose name is already registered are
    left alone.

    Args:
        registry: Registry to populate
        modules: Modules to scan
    """
    for module in modules:
        for export_name, exported in _module_exports(module):
            if not inspect.isclass(exported):
                continue

            try:
                instance = exported()
            except Exception as e:
                logger.debug(f"Skipping {module.__name__}.{export_name}: {e}")
                continue

            name = getattr(instance, "name", None)
            if not isinstance(name, str) or not callable(getattr(instance, "handle", None)):
                continue

            if name not in registry:
                registry.register(instance)
                logger.debug(f"Discovered form handler '{name}' in {module.__name__}")


def _module_exports(module: ModuleType) -> list[tuple[str, object]]:
    public = getattr(module, "__all__", None)
    if public is not None:
        return [
            (name, getattr(module, name)) for name in public if hasattr(module, name)
        ]

    return [
        (name, value)
        for name, value in vars(module).items()
        if not name.startswith("_")
        and getattr(value, "__module__", None) == module.__name__
    ]


def load_plugin_modules() -> list[ModuleType]:
    """Load modules advertised under the sitestage.form_handlers entry point group."""
    modules = []
    for entry_point in entry_points(group=ENTRY_POINT_GROUP):
        try:
            loaded = entry_point.load()
        except ImportError as e:
            logger.warning(f"Failed to load form handler plugin '{entry_point.name}': {e}")
            continue
        module = loaded if isinstance(loaded, ModuleType) else inspect.getmodule(loaded)
        if module is None:
            logger.warning(f"Form handler plugin '{entry_point.name}' is not a module")
            continue
        modules.append(module)
    return modules


def create_default_registry(
    config: Config,
    http_client: httpx.AsyncClient | None = None,
    *,
    plugin_modules: Iterable[ModuleType] = (),
) -> FormHandlerRegistry:
    """Create a registry with the built-in Mailgun and SMTP handlers.

    Args:
        config: Application configuration (Mailgun and SMTP settings)
        http_client: Client for Mailgun requests; without it, or without
            Mailgun settings, the Mailgun handler fails on delivery
        plugin_modules: Extra modules scanned for handlers

    Returns:
        Populated registry
    """
    mailgun_client = None
    if http_client is not None and config.mailgun is not None:
        mailgun_client = MailgunClient(http_client, config.mailgun)

    registry = FormHandlerRegistry()
    registry.register(MailgunHandler(mailgun_client))
    registry.register(SmtpHandler(config.smtp))
    discover_handlers(registry, plugin_modules)
    return registry

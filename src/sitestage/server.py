"""aiohttp server for Sitestage.

Application factory and route registration for the form and permalink API.
"""

import httpx
from aiohttp import web

from sitestage.api.config import create_config_routes
from sitestage.api.forms import create_forms_routes
from sitestage.api.permalinks import create_permalink_routes
from sitestage.app_keys import (
    config_key,
    form_processor_key,
    http_client_key,
    permalinks_key,
)
from sitestage.config import Config
from sitestage.core.permalinks import PermalinkBuilder
from sitestage.forms.processor import FormProcessor
from sitestage.forms.registry import (
    FormHandlerRegistry,
    create_default_registry,
    load_plugin_modules,
)


def create_app(
    config: Config,
    *,
    registry: FormHandlerRegistry | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        registry: Form handlers to use (default: built-in handlers plus plugins)
        http_client: Client for outgoing API calls; one is created and closed
            with the app when omitted

    Returns:
        Configured aiohttp application
    """
    app = web.Application(client_max_size=config.server.max_body_size)

    if http_client is None:
        http_client = httpx.AsyncClient()
        app.on_cleanup.append(_close_http_client)

    if registry is None:
        registry = create_default_registry(
            config,
            http_client,
            plugin_modules=load_plugin_modules(),
        )

    app[config_key] = config
    app[http_client_key] = http_client
    app[permalinks_key] = PermalinkBuilder(config.site, config.i18n)
    app[form_processor_key] = FormProcessor(config.form_handlers, config.forms, registry)

    app.router.add_routes(create_forms_routes())
    app.router.add_routes(create_permalink_routes())
    app.router.add_routes(create_config_routes())

    return app


async def _close_http_client(app: web.Application) -> None:
    """Close the owned HTTP client on application cleanup."""
    await app[http_client_key].aclose()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)

"""CLI interface for Sitestage.

Command-line tool for serving the form API and resolving permalinks.
"""

import logging
import sys
from pathlib import Path

import click

from sitestage.config import Config

CONFIG_OPTION_HELP = "Path to configuration file (default: auto-discover sitestage.toml)"


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)
def cli(verbose: bool) -> None:
    """Sitestage - permalinks and form delivery for static sites."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_OPTION_HELP,
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
def serve(config_path: Path | None, host: str | None, port: int | None) -> None:
    """Start the form submission server."""
    from sitestage.server import run_server

    config = _load_config(config_path).with_overrides(host=host, port=port)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Site base: {config.site.base or '/'}")
    click.echo(f"Form handlers: {', '.join(config.form_handlers.defaults) or 'none'}")
    if config.mailgun is None:
        click.echo("Mailgun: not configured")
    else:
        click.echo(f"Mailgun domain: {config.mailgun.domain}")

    run_server(config)


@cli.command()
@click.argument("path", default="")
@click.option("--locale", "-l", default=None, help="Locale to prefix (needs i18n routing)")
@click.option(
    "--type",
    "kind",
    type=click.Choice(["page", "home", "asset"]),
    default="page",
    help="Kind of link to build (default: page)",
)
@click.option(
    "--canonical",
    is_flag=True,
    help="Print the absolute canonical URL instead of the site path",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_OPTION_HELP,
)
def permalink(
    path: str,
    locale: str | None,
    kind: str,
    canonical: bool,
    config_path: Path | None,
) -> None:
    """Print the permalink for PATH."""
    from sitestage.core.permalinks import PermalinkBuilder

    config = _load_config(config_path)
    builder = PermalinkBuilder(config.site, config.i18n)

    if canonical:
        click.echo(builder.get_canonical(path, locale, kind=kind))  # type: ignore[arg-type]
    else:
        click.echo(builder.get_permalink(path, locale, kind=kind))  # type: ignore[arg-type]


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_OPTION_HELP,
)
def handlers(config_path: Path | None) -> None:
    """List available form handlers and whether they run."""
    from sitestage.forms.registry import create_default_registry, load_plugin_modules

    config = _load_config(config_path)
    registry = create_default_registry(config, plugin_modules=load_plugin_modules())

    for handler in registry.get_all():
        handler_config = config.form_handlers.get_handler_config(handler.name)
        if handler.name not in config.form_handlers.defaults:
            status = "inactive"
        elif not handler_config.enabled:
            status = "disabled"
        else:
            status = click.style("active", fg="green")
        click.echo(f"{handler.name} [{status}] {handler.description}")

    for name in config.form_handlers.defaults:
        if name not in registry:
            click.echo(
                click.style(f"Warning: handler '{name}' is not registered", fg="yellow"),
                err=True,
            )


def _load_config(config_path: Path | None) -> Config:
    """Load configuration, exiting with an error message when it is invalid."""
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

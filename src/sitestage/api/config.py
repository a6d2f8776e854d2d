"""Config API endpoint."""

from aiohttp import web

from sitestage.app_keys import config_key


def create_config_routes() -> list[web.RouteDef]:
    return [web.get("/api/config", get_config)]


async def get_config(request: web.Request) -> web.Response:
    config = request.app[config_key]
    return web.json_response(
        {
            "name": config.site.name,
            "site": config.site.site,
            "base": config.site.base or "/",
            "trailingSlash": config.site.trailing_slash,
            "language": config.i18n.language,
            "textDirection": config.i18n.text_direction,
        },
    )

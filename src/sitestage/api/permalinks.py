"""Permalink API endpoint.

Resolves a page path into its permalink and canonical URL.
"""

from typing import get_args

from aiohttp import web

from sitestage.app_keys import permalinks_key
from sitestage.core.permalinks import PermalinkKind

PERMALINK_KINDS: tuple[str, ...] = get_args(PermalinkKind)


def create_permalink_routes() -> list[web.RouteDef]:
    return [web.get("/api/permalink", get_permalink)]


async def get_permalink(request: web.Request) -> web.Response:
    builder = request.app[permalinks_key]
    path = request.query.get("path", "")
    locale = request.query.get("locale") or None
    kind = request.query.get("type", "page")

    if kind not in PERMALINK_KINDS:
        return web.json_response(
            {"error": "Unknown permalink type", "type": kind},
            status=400,
        )

    permalink = builder.get_permalink(path, locale, kind=kind)  # type: ignore[arg-type]
    return web.json_response(
        {
            "permalink": permalink,
            "canonical": builder.get_canonical(path, locale, kind=kind),  # type: ignore[arg-type]
        },
    )

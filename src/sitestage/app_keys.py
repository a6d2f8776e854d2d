"""Application keys for type-safe app configuration access."""

import httpx
from aiohttp import web

from sitestage.config import Config
from sitestage.core.permalinks import PermalinkBuilder
from sitestage.forms.processor import FormProcessor

config_key = web.AppKey("config", Config)
permalinks_key = web.AppKey("permalinks", PermalinkBuilder)
form_processor_key = web.AppKey("form_processor", FormProcessor)
http_client_key = web.AppKey("http_client", httpx.AsyncClient)

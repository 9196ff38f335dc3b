"""Application keys for type-safe app configuration access."""

from aiohttp import web

from catalog_admin.config import Config
from catalog_admin.core.console import CatalogConsole

console_key = web.AppKey("console", CatalogConsole)
config_key = web.AppKey("config", Config)

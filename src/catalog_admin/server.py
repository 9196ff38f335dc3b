"""aiohttp server for catalog-admin.

Application factory and route registration for the console API.
"""

import logging

from aiohttp import web

from catalog_admin.api.deletion import create_deletion_routes
from catalog_admin.api.drafts import create_draft_routes
from catalog_admin.api.navigation import create_navigation_routes
from catalog_admin.api.responses import error_middleware
from catalog_admin.app_keys import config_key, console_key
from catalog_admin.catalog import CatalogClient, create_http_client
from catalog_admin.config import Config
from catalog_admin.core.console import CatalogConsole

logger = logging.getLogger(__name__)


def create_app(config: Config, *, console: CatalogConsole | None = None) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        console: Console to serve; built from config.catalog when omitted

    Returns:
        Configured aiohttp application

    Raises:
        ValueError: If no console is given and catalog.base_url is not configured
    """
    if console is None:
        if not config.catalog.base_url:
            raise ValueError("catalog.base_url is required to serve the console")
        gateway = CatalogClient(
            create_http_client(config.catalog.timeout),
            config.catalog.base_url,
            config.catalog.token,
        )
        console = CatalogConsole(gateway)

    app = web.Application(middlewares=[error_middleware])
    app[config_key] = config
    app[console_key] = console

    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_deletion_routes())
    app.router.add_routes(create_draft_routes())

    app.on_startup.append(_load_console)
    app.on_cleanup.append(_close_gateway)

    return app


async def _load_console(app: web.Application) -> None:
    """Load the top-level list on application startup."""
    result = await app[console_key].load()
    if not result.ok:
        logger.warning(f"Initial catalog load failed: {result.message}")


async def _close_gateway(app: web.Application) -> None:
    """Close the catalog HTTP client on application cleanup."""
    await app[console_key].gateway.client.aclose()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)

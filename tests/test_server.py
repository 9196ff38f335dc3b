"""Tests for the aiohttp application factory."""

import pytest
from catalog_admin.app_keys import config_key, console_key
from catalog_admin.catalog import CatalogClient
from catalog_admin.config import CatalogConfig, Config, ServerConfig
from catalog_admin.core.console import CatalogConsole
from catalog_admin.server import create_app

from tests.conftest import FakeCatalog


class TestCreateApp:
    """Tests for create_app()."""

    def test__no_base_url__raises(self) -> None:
        """Serving requires a catalog base URL."""
        config = Config(server=ServerConfig(), catalog=CatalogConfig())

        with pytest.raises(ValueError, match="base_url"):
            create_app(config)

    @pytest.mark.asyncio
    async def test__from_config__builds_console(self, test_config: Config) -> None:
        """Build a console from the catalog section when none is given."""
        app = create_app(test_config)

        assert app[config_key] is test_config
        assert app[console_key].gateway.base_url == test_config.catalog.base_url
        await app[console_key].gateway.client.aclose()

    @pytest.mark.asyncio
    async def test__startup__loads_top_level(
        self,
        aiohttp_client,
        gateway: CatalogClient,
        test_config: Config,
        science_tree: dict[str, str],
    ) -> None:
        """The top-level list is loaded when the app starts."""
        console = CatalogConsole(gateway)
        client = await aiohttp_client(create_app(test_config, console=console))

        response = await client.get("/api/console")

        assert response.status == 200
        data = await response.json()
        assert [row["name"] for row in data["tree"]] == ["Science", "History"]

    @pytest.mark.asyncio
    async def test__startup_failure__still_serves(
        self,
        aiohttp_client,
        gateway: CatalogClient,
        catalog: FakeCatalog,
        test_config: Config,
    ) -> None:
        """A failed initial load is reported in the console error."""
        catalog.fail("GET", "/categories/parents", status=None)
        console = CatalogConsole(gateway)
        client = await aiohttp_client(create_app(test_config, console=console))

        response = await client.get("/api/console")

        assert response.status == 200
        data = await response.json()
        assert data["tree"] == []
        assert "unreachable" in data["error"]

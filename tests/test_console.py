"""Tests for the console session."""

import asyncio

import pytest
from catalog_admin.catalog import CatalogClient
from catalog_admin.core.console import CatalogConsole
from catalog_admin.core.types import CategoryId, ContentKind

from tests.conftest import FakeCatalog


@pytest.fixture
async def console(gateway: CatalogClient, science_tree: dict[str, str]) -> CatalogConsole:
    console = CatalogConsole(gateway)
    await console.load()
    return console


class TestSubmitDraft:
    """Tests for CatalogConsole.submit_draft()."""

    @pytest.mark.asyncio
    async def test__nested_leaf__merges_content_and_refreshes_siblings(
        self,
        console: CatalogConsole,
        catalog: FakeCatalog,
        science_tree: dict[str, str],
    ) -> None:
        """The selected leaf shows its new content after a submit."""
        await console.navigation.enter(
            await console.gateway.get_category(CategoryId(science_tree["Dynamics"]))
        )
        leaf = console.navigation.selected
        assert leaf is not None
        console.drafts.open_draft(leaf, ContentKind.VIDEO)
        console.drafts.set_video_url("https://youtu.be/abc123")

        result = await console.submit_draft()

        assert result.ok
        selected = console.navigation.selected
        assert selected is not None
        assert selected.content is not None
        assert selected.content.video_url == "https://youtu.be/abc123"
        assert selected.content.text == "Forces and motion"
        assert catalog.count("GET", f"/categories/subcategories/{science_tree['Mechanics']}") == 1

    @pytest.mark.asyncio
    async def test__top_level_leaf__refreshes_top_level(
        self,
        console: CatalogConsole,
    ) -> None:
        """A top-level leaf's badge comes from the top-level list."""
        await console.navigation.add_category("Quick Notes", as_leaf=True)
        leaf = console.navigation.selected
        assert leaf is not None
        console.drafts.open_draft(leaf, ContentKind.TEXT)
        console.drafts.set_text("Remember this")

        await console.submit_draft()

        row = next(r for r in console.view().tree if r.name == "Quick Notes")
        assert [b.label for b in row.badges] == ["Text"]

    @pytest.mark.asyncio
    async def test__failure__leaves_navigation_alone(
        self,
        console: CatalogConsole,
        catalog: FakeCatalog,
        science_tree: dict[str, str],
    ) -> None:
        """A failed submit does not refresh or modify the selection."""
        await console.navigation.enter(
            await console.gateway.get_category(CategoryId(science_tree["Kinematics"]))
        )
        leaf = console.navigation.selected
        assert leaf is not None
        console.drafts.open_draft(leaf, ContentKind.TEXT)
        console.drafts.set_text("x")
        catalog.fail("POST", "/categories/content", status=500, message="Storage full")
        sent = len(catalog.requests)

        result = await console.submit_draft()

        assert not result.ok
        assert console.view().error == "Storage full"
        assert console.navigation.selected == leaf
        assert len(catalog.requests) == sent + 1

    @pytest.mark.asyncio
    async def test__view_changed_during_submit__keeps_new_children(
        self,
        console: CatalogConsole,
        catalog: FakeCatalog,
        science_tree: dict[str, str],
    ) -> None:
        """Moving elsewhere while content uploads keeps the new view."""
        await console.navigation.enter(
            await console.gateway.get_category(CategoryId(science_tree["Kinematics"]))
        )
        leaf = console.navigation.selected
        assert leaf is not None
        console.drafts.open_draft(leaf, ContentKind.TEXT)
        console.drafts.set_text("Velocity and acceleration")
        release = catalog.hold("POST", "/categories/content")
        history = await console.gateway.get_category(CategoryId(science_tree["History"]))

        task = asyncio.create_task(console.submit_draft())
        await catalog.wait_for_request("POST", "/categories/content")
        await console.navigation.enter(history)
        release.set()
        result = await task

        assert result.ok
        assert console.navigation.selected == history
        assert console.navigation.children == []
        assert catalog.count("GET", f"/categories/subcategories/{science_tree['Mechanics']}") == 0
        assert catalog.records[science_tree["Kinematics"]]["content"]["text"] == (
            "Velocity and acceleration"
        )

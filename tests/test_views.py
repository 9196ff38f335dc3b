"""Tests for console view models."""

import pytest
from catalog_admin.catalog import CatalogClient
from catalog_admin.core.console import CatalogConsole
from catalog_admin.core.models import Category, CategoryContent
from catalog_admin.core.types import CategoryId, CategoryType, ContentKind
from catalog_admin.core.views import breadcrumb, build_preview, build_tree_rows, content_badges


def _leaf(content: CategoryContent | None = None, path: list[str] | None = None) -> Category:
    return Category(
        id=CategoryId("leaf"),
        name="Kinematics",
        type=CategoryType.LEAF,
        parent_id=CategoryId("p"),
        path=path or [],
        content=content,
    )


class TestContentBadges:
    """Tests for content_badges()."""

    def test__all_kinds__labelled_in_order(self) -> None:
        """Show one badge per populated kind."""
        leaf = _leaf(
            CategoryContent(
                text="t",
                image_urls=["a", "b", "c"],
                pdf_url="p",
                video_url="https://youtu.be/x",
            )
        )

        badges = content_badges(leaf)

        assert [b.label for b in badges] == ["Text", "Images (3)", "PDF", "Video"]
        assert badges[1].kind is ContentKind.IMAGE

    def test__no_content__no_badges(self) -> None:
        """Leaves without content and structural nodes have no badges."""
        structural = Category(id=CategoryId("s"), name="Science", type=CategoryType.STRUCTURAL)

        assert content_badges(_leaf()) == []
        assert content_badges(structural) == []


class TestBreadcrumb:
    """Tests for breadcrumb()."""

    def test__path__joined(self) -> None:
        """Join path segments with the separator."""
        assert breadcrumb(_leaf(path=["Science", "Physics", "Kinematics"])) == (
            "Science > Physics > Kinematics"
        )

    def test__no_path__falls_back_to_name(self) -> None:
        """Use the name when the store sent no path."""
        assert breadcrumb(_leaf()) == "Kinematics"


class TestBuildPreview:
    """Tests for build_preview()."""

    def test__video__includes_embed_url(self) -> None:
        """Convert the video link for embedding."""
        preview = build_preview(
            _leaf(CategoryContent(video_url="https://www.youtube.com/watch?v=abc123"))
        )

        assert preview is not None
        assert preview.video_embed_url == "https://www.youtube.com/embed/abc123"
        assert preview.to_dict()["video_url"] == "https://www.youtube.com/watch?v=abc123"

    def test__no_content__returns_none(self) -> None:
        """Nothing to preview without content."""
        assert build_preview(_leaf(CategoryContent())) is None


class TestBuildTreeRows:
    """Tests for build_tree_rows()."""

    @pytest.mark.asyncio
    async def test__nested_selection__children_under_root(
        self,
        gateway: CatalogClient,
        science_tree: dict[str, str],
    ) -> None:
        """Nest the visible children under the selection's top-level ancestor."""
        console = CatalogConsole(gateway)
        await console.load()
        await console.navigation.enter(
            await gateway.get_category(CategoryId(science_tree["Science"]))
        )
        await console.navigation.enter(
            await gateway.get_category(CategoryId(science_tree["Physics"]))
        )

        rows = build_tree_rows(console.navigation)

        assert [r.name for r in rows] == ["Science", "History"]
        assert [r.name for r in rows[0].children] == ["Mechanics", "Optics"]
        assert rows[1].children == []

    @pytest.mark.asyncio
    async def test__nothing_selected__flat(
        self,
        gateway: CatalogClient,
        science_tree: dict[str, str],
    ) -> None:
        """Without a selection only the top level is shown."""
        console = CatalogConsole(gateway)
        await console.load()

        rows = build_tree_rows(console.navigation)

        assert all(not r.children for r in rows)
        assert not any(r.selected for r in rows)


class TestConsoleView:
    """Tests for the console snapshot."""

    @pytest.mark.asyncio
    async def test__leaf_selected__can_add_content(
        self,
        gateway: CatalogClient,
        science_tree: dict[str, str],
    ) -> None:
        """Selecting a leaf enables content actions."""
        console = CatalogConsole(gateway)
        await console.load()
        await console.navigation.enter(
            await gateway.get_category(CategoryId(science_tree["Dynamics"]))
        )
        console.drafts.open_draft(console.navigation.selected, ContentKind.TEXT)  # type: ignore[arg-type]

        data = console.view().to_dict()

        assert data["can_add_content"] is True
        assert data["can_go_back"] is True
        assert data["breadcrumb"] == "Science > Physics > Mechanics > Dynamics"
        assert data["selected"]["content"]["text"] == "Forces and motion"
        assert data["draft"]["kind"] == "text"
        assert data["draft"]["state"] == "composing"
        assert data["deletion"] == {"state": "idle", "target_id": None, "prompt": None}
        assert data["busy"] is False
        assert data["error"] is None

    @pytest.mark.asyncio
    async def test__fresh_console__nothing_selected(
        self,
        gateway: CatalogClient,
        science_tree: dict[str, str],
    ) -> None:
        """A fresh console shows only the top-level tree."""
        console = CatalogConsole(gateway)
        await console.load()

        data = console.view().to_dict()

        assert data["selected"] is None
        assert data["can_go_back"] is False
        assert data["can_add_content"] is False
        assert [row["name"] for row in data["tree"]] == ["Science", "History"]

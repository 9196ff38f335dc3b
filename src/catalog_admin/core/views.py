"""View models for the console UI.

Translates navigation, draft and deletion state into JSON-ready structures.
Views are a presentation layer over the stores and never mutate them.
"""

from dataclasses import dataclass, field
from typing import Any, TypedDict

from catalog_admin.core.deletion import DeletionCoordinator
from catalog_admin.core.drafts import DraftController
from catalog_admin.core.models import Category
from catalog_admin.core.navigation import NavigationStore
from catalog_admin.core.types import CategoryId, ContentKind
from catalog_admin.core.video import embed_url

BREADCRUMB_SEPARATOR = " > "


class ContentBadgeDict(TypedDict):
    kind: str
    label: str


class TreeRowDict(TypedDict, total=False):
    """Dictionary representation of a tree row."""

    id: str
    name: str
    type: str
    has_content: bool
    selected: bool
    badges: list[ContentBadgeDict]
    children: list["TreeRowDict"]


@dataclass
class ContentBadge:
    """Indicator for one populated content kind."""

    kind: ContentKind
    label: str

    def to_dict(self) -> ContentBadgeDict:
        return {"kind": self.kind.value, "label": self.label}


def content_badges(category: Category) -> list[ContentBadge]:
    """Build badges for the content kinds populated on a leaf."""
    if not category.is_leaf or category.content is None:
        return []
    content = category.content
    badges = []
    for kind in content.kinds():
        if kind is ContentKind.TEXT:
            badges.append(ContentBadge(kind, "Text"))
        elif kind is ContentKind.IMAGE:
            badges.append(ContentBadge(kind, f"Images ({len(content.image_urls)})"))
        elif kind is ContentKind.PDF:
            badges.append(ContentBadge(kind, "PDF"))
        else:
            badges.append(ContentBadge(kind, "Video"))
    return badges


@dataclass
class TreeRow:
    """Category row with nested rows for the tree sidebar."""

    id: CategoryId
    name: str
    type: str
    has_content: bool
    selected: bool
    badges: list[ContentBadge] = field(default_factory=list)
    children: list["TreeRow"] = field(default_factory=list)

    @classmethod
    def from_category(cls, category: Category, selected_id: CategoryId | None) -> "TreeRow":
        return cls(
            id=category.id,
            name=category.name,
            type=category.type.value,
            has_content=category.has_content(),
            selected=category.id == selected_id,
            badges=content_badges(category),
        )

    def to_dict(self) -> TreeRowDict:
        """Convert to dictionary for JSON serialization."""
        result: TreeRowDict = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "has_content": self.has_content,
            "selected": self.selected,
        }
        if self.badges:
            result["badges"] = [badge.to_dict() for badge in self.badges]
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


def build_tree_rows(navigation: NavigationStore) -> list[TreeRow]:
    """Build sidebar rows from the top-level list.

    The visible children are nested under the top-level category the
    current selection belongs to.
    """
    selected_id = navigation.selected_id
    expanded_id = _active_root_id(navigation)
    rows = []
    for category in navigation.top_level:
        row = TreeRow.from_category(category, selected_id)
        if category.id == expanded_id:
            row.children = [
                TreeRow.from_category(child, selected_id) for child in navigation.children
            ]
        rows.append(row)
    return rows


def _active_root_id(navigation: NavigationStore) -> CategoryId | None:
    selected = navigation.selected
    if selected is None:
        return None
    if selected.is_top_level:
        return selected.id
    for visited in navigation.stack:
        if visited.is_top_level:
            return visited.id
    if selected.path:
        for category in navigation.top_level:
            if category.name == selected.path[0]:
                return category.id
    return None


def breadcrumb(category: Category) -> str:
    """Join the category path for display (e.g., "Science > Physics")."""
    return BREADCRUMB_SEPARATOR.join(category.path or [category.name])


@dataclass
class ContentPreview:
    """Everything attached to a leaf, ready for display."""

    id: CategoryId
    name: str
    breadcrumb: str
    text: str | None = None
    image_urls: list[str] = field(default_factory=list)
    pdf_url: str | None = None
    video_url: str | None = None
    video_embed_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "breadcrumb": self.breadcrumb,
            "text": self.text,
            "image_urls": list(self.image_urls),
            "pdf_url": self.pdf_url,
            "video_url": self.video_url,
            "video_embed_url": self.video_embed_url,
        }


def build_preview(category: Category) -> ContentPreview | None:
    """Build a preview for a leaf with content, or None if nothing to show."""
    if not category.has_content() or category.content is None:
        return None
    content = category.content
    return ContentPreview(
        id=category.id,
        name=category.name,
        breadcrumb=breadcrumb(category),
        text=content.text,
        image_urls=list(content.image_urls),
        pdf_url=content.pdf_url,
        video_url=content.video_url,
        video_embed_url=embed_url(content.video_url) if content.video_url else None,
    )


@dataclass
class ConsoleView:
    """Snapshot of the whole console state."""

    tree: list[TreeRow]
    selected: Category | None
    breadcrumb: str | None
    children: list[TreeRow]
    can_go_back: bool
    can_add_content: bool
    busy: bool
    error: str | None
    draft: dict[str, Any] | None
    deletion: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tree": [row.to_dict() for row in self.tree],
            "selected": self.selected.to_dict() if self.selected else None,
            "breadcrumb": self.breadcrumb,
            "children": [row.to_dict() for row in self.children],
            "can_go_back": self.can_go_back,
            "can_add_content": self.can_add_content,
            "busy": self.busy,
            "error": self.error,
            "draft": self.draft,
            "deletion": self.deletion,
        }


def build_console_view(
    navigation: NavigationStore,
    drafts: DraftController,
    deletion: DeletionCoordinator,
) -> ConsoleView:
    """Assemble the console snapshot from the three stores."""
    selected = navigation.selected
    selected_id = navigation.selected_id

    draft = drafts.draft
    draft_view = None
    if draft is not None:
        draft_view = {
            "state": drafts.state.value,
            "target_id": draft.target.id,
            "kind": draft.kind.value,
            "text": draft.text,
            "video_url": draft.video_url,
            "files": [
                {"filename": f.filename, "content_type": f.content_type, "size": f.size}
                for f in draft.files
            ],
        }

    target = deletion.target
    deletion_view = {
        "state": deletion.state.value,
        "target_id": target.id if target else None,
        "prompt": deletion.confirmation_prompt() or None,
    }

    return ConsoleView(
        tree=build_tree_rows(navigation),
        selected=selected,
        breadcrumb=breadcrumb(selected) if selected else None,
        children=[TreeRow.from_category(c, selected_id) for c in navigation.children],
        can_go_back=selected is not None,
        can_add_content=selected is not None and selected.is_leaf,
        busy=navigation.busy or drafts.busy or deletion.busy,
        error=navigation.error or drafts.error or deletion.error,
        draft=draft_view,
        deletion=deletion_view,
    )

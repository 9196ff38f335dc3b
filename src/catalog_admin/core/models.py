"""Catalog data model.

Categories as returned by the catalog store, and the content attached to
leaf categories. Wire dictionaries use the store's camelCase keys; the
dataclasses expose snake_case attributes.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict

from catalog_admin.core.types import CategoryId, CategoryType, ContentKind

logger = logging.getLogger(__name__)

MAX_IMAGES = 5


class CategoryContentDict(TypedDict, total=False):
    """Wire representation of leaf content."""

    imageUrls: list[str]
    pdfUrl: str
    text: str
    videoUrl: str


class CategoryDict(TypedDict):
    """Wire representation of a category."""

    _id: str
    name: str
    type: str
    path: NotRequired[list[str]]
    parentId: NotRequired[str | None]
    content: NotRequired[CategoryContentDict | None]


class ContentAttachDict(TypedDict):
    """Wire response of a content attach."""

    message: str
    content: CategoryContentDict


@dataclass(frozen=True)
class CategoryContent:
    """Material attached to a leaf category."""

    text: str | None = None
    image_urls: list[str] = field(default_factory=list)
    pdf_url: str | None = None
    video_url: str | None = None

    def has_content(self) -> bool:
        """Check whether any of the four content kinds is populated."""
        return bool(self.text or self.image_urls or self.pdf_url or self.video_url)

    def kinds(self) -> list[ContentKind]:
        """Return populated content kinds in display order."""
        populated = []
        if self.text:
            populated.append(ContentKind.TEXT)
        if self.image_urls:
            populated.append(ContentKind.IMAGE)
        if self.pdf_url:
            populated.append(ContentKind.PDF)
        if self.video_url:
            populated.append(ContentKind.VIDEO)
        return populated

    def merge(self, other: "CategoryContent") -> "CategoryContent":
        """Overlay populated kinds of other onto this content.

        Each kind is replaced only when other carries it, so attaching one
        kind never drops another.
        """
        return CategoryContent(
            text=other.text if other.text else self.text,
            image_urls=list(other.image_urls) if other.image_urls else list(self.image_urls),
            pdf_url=other.pdf_url if other.pdf_url else self.pdf_url,
            video_url=other.video_url if other.video_url else self.video_url,
        )

    @classmethod
    def from_dict(cls, data: CategoryContentDict | dict[str, Any]) -> "CategoryContent":
        image_urls = data.get("imageUrls") or []
        if not isinstance(image_urls, list):
            raise ValueError("content.imageUrls must be a list")
        return cls(
            text=data.get("text") or None,
            image_urls=[str(url) for url in image_urls],
            pdf_url=data.get("pdfUrl") or None,
            video_url=data.get("videoUrl") or None,
        )

    def to_dict(self) -> CategoryContentDict:
        """Convert to wire dictionary."""
        result: CategoryContentDict = {"imageUrls": list(self.image_urls)}
        if self.text:
            result["text"] = self.text
        if self.pdf_url:
            result["pdfUrl"] = self.pdf_url
        if self.video_url:
            result["videoUrl"] = self.video_url
        return result


@dataclass(frozen=True)
class Category:
    """A node in the catalog tree."""

    id: CategoryId
    name: str
    type: CategoryType
    parent_id: CategoryId | None = None
    path: list[str] = field(default_factory=list)
    content: CategoryContent | None = None

    def __post_init__(self) -> None:
        if self.type is CategoryType.STRUCTURAL and self.content is not None:
            raise ValueError(f"Structural category {self.id} cannot hold content")

    @property
    def is_leaf(self) -> bool:
        return self.type is CategoryType.LEAF

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    def has_content(self) -> bool:
        return self.content is not None and self.content.has_content()

    def with_content(self, content: CategoryContent) -> "Category":
        """Return a copy with content merged in (leaf categories only)."""
        if not self.is_leaf:
            raise ValueError(f"Structural category {self.id} cannot hold content")
        merged = self.content.merge(content) if self.content else content
        return Category(
            id=self.id,
            name=self.name,
            type=self.type,
            parent_id=self.parent_id,
            path=list(self.path),
            content=merged,
        )

    @classmethod
    def from_dict(cls, data: CategoryDict | dict[str, Any]) -> "Category":
        """Parse a category record from the catalog store.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        category_id = data.get("_id")
        if not isinstance(category_id, str) or not category_id:
            raise ValueError("category._id must be a non-empty string")

        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError(f"category {category_id}: name must be a string")

        try:
            category_type = CategoryType(data.get("type"))
        except ValueError:
            raise ValueError(
                f"category {category_id}: unknown type {data.get('type')!r}"
            ) from None

        parent_id = data.get("parentId") or None
        path = data.get("path") or []
        if not isinstance(path, list):
            raise ValueError(f"category {category_id}: path must be a list")

        content = None
        content_data = data.get("content")
        if content_data:
            if category_type is CategoryType.STRUCTURAL:
                logger.warning(f"Ignoring content on structural category {category_id}")
            else:
                content = CategoryContent.from_dict(content_data)

        return cls(
            id=CategoryId(category_id),
            name=name,
            type=category_type,
            parent_id=CategoryId(parent_id) if parent_id else None,
            path=[str(part) for part in path],
            content=content,
        )

    def to_dict(self) -> CategoryDict:
        """Convert to wire dictionary."""
        result: CategoryDict = {
            "_id": self.id,
            "name": self.name,
            "type": self.type.value,
            "path": list(self.path),
        }
        if self.parent_id:
            result["parentId"] = self.parent_id
        if self.content is not None:
            result["content"] = self.content.to_dict()
        return result


@dataclass(frozen=True)
class StagedFile:
    """File picked for upload, held in memory until submitted."""

    filename: str
    data: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ContentAttachResult:
    """Outcome of attaching content to a leaf."""

    message: str
    content: CategoryContent

    @classmethod
    def from_dict(cls, data: ContentAttachDict | dict[str, Any]) -> "ContentAttachResult":
        content_data = data.get("content") or {}
        if not isinstance(content_data, dict):
            raise ValueError("content must be an object")
        return cls(
            message=str(data.get("message") or ""),
            content=CategoryContent.from_dict(content_data),
        )

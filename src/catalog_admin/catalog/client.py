"""Catalog store API client for catalog-admin.

This module provides async HTTP client for the catalog store REST API.
Supports listing, creating and deleting categories and attaching content to
leaf categories.
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from catalog_admin.core.models import (
    MAX_IMAGES,
    Category,
    ContentAttachResult,
    StagedFile,
)
from catalog_admin.core.types import CategoryId, CategoryType, ContentKind
from catalog_admin.errors import RemoteError, TransportError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

ContentPayload = str | Sequence[StagedFile]


def create_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create the HTTP client used to talk to the catalog store.

    Args:
        timeout: Request timeout in seconds

    Returns:
        httpx AsyncClient (caller owns and closes it)
    """
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout))


class CatalogClient:
    """Async HTTP client for the catalog store REST API."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, token: str):
        """Initialize catalog client.

        Args:
            client: httpx AsyncClient used for all requests
            base_url: Catalog API base URL (e.g., https://api.example.com/api)
            token: Bearer credential issued by the session service
        """
        self.client = client
        self.base_url = base_url.rstrip("/")
        self._token = token

    def update_token(self, token: str) -> None:
        """Replace the bearer credential for subsequent requests."""
        self._token = token

    async def list_top_level(self) -> list[Category]:
        """List categories without a parent.

        Returns:
            Top-level categories in store order

        Raises:
            TransportError: If the store is unreachable
            RemoteError: If the store rejects the request
        """
        logger.info("Listing top-level categories")
        data = await self._get_json("/categories/parents")
        return _parse_categories(_unwrap_listing(data, "parents"))

    async def list_children(self, parent_id: CategoryId) -> list[Category]:
        """List immediate children of a category.

        Args:
            parent_id: Parent category ID

        Returns:
            Child categories; empty when the category has none

        Raises:
            TransportError: If the store is unreachable
            RemoteError: If the store rejects the request
        """
        logger.info(f"Listing children of {parent_id}")
        data = await self._get_json(f"/categories/subcategories/{parent_id}")
        return _parse_categories(_unwrap_listing(data, "subcategories"))

    async def list_all(self) -> list[Category]:
        """List every category regardless of position in the tree.

        Raises:
            TransportError: If the store is unreachable
            RemoteError: If the store rejects the request
        """
        logger.info("Listing all categories")
        data = await self._get_json("/categories")
        if not isinstance(data, list):
            raise RemoteError("Unexpected category listing shape")
        return _parse_categories(data)

    async def get_category(self, category_id: CategoryId) -> Category:
        """Get a single category by ID.

        Raises:
            TransportError: If the store is unreachable
            RemoteError: If the store rejects the request or the ID is unknown
        """
        logger.info(f"Getting category {category_id}")
        data = await self._get_json(f"/categories/{category_id}")
        if not isinstance(data, dict):
            raise RemoteError(f"Unexpected response for category {category_id}")
        return _parse_category(data)

    async def create_category(
        self,
        name: str,
        is_leaf: bool,
        parent_id: CategoryId | None = None,
    ) -> Category:
        """Create a new category.

        Args:
            name: Display name
            is_leaf: Create a content (leaf) category instead of a structural one
            parent_id: Optional parent category ID; omitted for top-level nodes

        Returns:
            Created category as stored

        Raises:
            ValidationError: If name is blank
            TransportError: If the store is unreachable
            RemoteError: If the store rejects the request
        """
        if not name.strip():
            raise ValidationError("Category name must not be empty")

        category_type = CategoryType.LEAF if is_leaf else CategoryType.STRUCTURAL
        payload: dict[str, Any] = {"name": name, "type": category_type.value}
        if parent_id:
            payload["parentId"] = parent_id

        logger.info(f'Creating {category_type.value} "{name}" under {parent_id or "root"}')
        logger.debug(f"Payload: {payload}")
        response = await self._request("POST", "/categories", json=payload)
        data = _decode_json(response)
        if not isinstance(data, dict):
            raise RemoteError("Unexpected response for created category")

        category = _parse_category(data)
        logger.info(f"Created category with ID: {category.id}")
        return category

    async def delete_category(self, category_id: CategoryId) -> None:
        """Delete a category and its subtree.

        Deleting an ID the store no longer knows is a no-op.

        Raises:
            TransportError: If the store is unreachable
            RemoteError: If the store rejects the request
        """
        logger.info(f"Deleting category {category_id}")
        try:
            await self._request("DELETE", f"/categories/{category_id}")
        except RemoteError as e:
            if e.status != 404:
                raise
            logger.info(f"Category {category_id} already gone")

    async def attach_content(
        self,
        leaf_id: CategoryId,
        kind: ContentKind,
        payload: ContentPayload,
    ) -> ContentAttachResult:
        """Attach content of one kind to a leaf category.

        Video URLs are sent as given; callers validate them beforehand.

        Args:
            leaf_id: Leaf category ID
            kind: Content kind being attached
            payload: Text or video URL string, or staged files for image/pdf

        Returns:
            Store message and the leaf's content after the attach

        Raises:
            ValidationError: If payload does not match the kind
            TransportError: If the store is unreachable
            RemoteError: If the store rejects the content (e.g., oversized PDF)
        """
        files = _content_parts(kind, payload)

        logger.info(f"Attaching {kind.value} content to {leaf_id}")
        response = await self._request(
            "POST",
            "/categories/content",
            data={"categoryid": leaf_id},
            files=files,
        )
        data = _decode_json(response)
        if not isinstance(data, dict):
            raise RemoteError("Unexpected response for content attach")

        try:
            result = ContentAttachResult.from_dict(data)
        except ValueError as e:
            raise RemoteError(f"Malformed content response: {e}") from e
        logger.info(f"Attached {kind.value} content to {leaf_id}: {result.message}")
        return result

    async def _get_json(self, path: str) -> Any:
        response = await self._request("GET", path)
        return _decode_json(response)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and map failures onto the catalog error taxonomy."""
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }
        try:
            response = await self.client.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                **kwargs,
            )
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransportError(f"Catalog store unreachable: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Error response: {response.status_code} {response.text}")
            raise RemoteError(_error_message(response), status=response.status_code)
        return response


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise RemoteError(f"Invalid JSON from catalog store: {e}") from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Catalog store returned HTTP {response.status_code}"


def _unwrap_listing(data: Any, key: str) -> list[Any]:
    """Extract the category list from a ``[{key: [...]}]`` envelope.

    A bare category array is accepted as well. An envelope without the key
    is an empty listing.
    """
    if not isinstance(data, list):
        raise RemoteError(f"Unexpected listing shape for {key!r}")
    if not data:
        return []
    first = data[0]
    if isinstance(first, dict) and key in first:
        items = first[key] or []
        if not isinstance(items, list):
            raise RemoteError(f"Unexpected listing shape for {key!r}")
        return items
    if isinstance(first, dict) and "_id" not in first:
        return []
    return data


def _parse_categories(items: list[Any]) -> list[Category]:
    return [_parse_category(item) for item in items]


def _parse_category(item: Any) -> Category:
    if not isinstance(item, dict):
        raise RemoteError("Category record must be an object")
    try:
        return Category.from_dict(item)
    except ValueError as e:
        raise RemoteError(f"Malformed category record: {e}") from e


def _content_parts(kind: ContentKind, payload: ContentPayload) -> list[tuple[str, Any]]:
    """Build multipart parts for a content attach.

    Plain fields use a None filename so every attach is sent as multipart.
    """
    if kind in (ContentKind.TEXT, ContentKind.VIDEO):
        if not isinstance(payload, str) or not payload.strip():
            raise ValidationError(f"{kind.value} content requires a non-empty string")
        field_name = "text" if kind is ContentKind.TEXT else "videoUrl"
        return [(field_name, (None, payload))]

    if isinstance(payload, str) or not all(isinstance(f, StagedFile) for f in payload):
        raise ValidationError(f"{kind.value} content requires staged files")

    if kind is ContentKind.IMAGE:
        if not 1 <= len(payload) <= MAX_IMAGES:
            raise ValidationError(f"image content requires 1 to {MAX_IMAGES} files")
        return [
            ("images", (f.filename, f.data, f.content_type)) for f in payload
        ]

    if len(payload) != 1:
        raise ValidationError("pdf content requires exactly one file")
    pdf = payload[0]
    return [("pdf", (pdf.filename, pdf.data, pdf.content_type))]

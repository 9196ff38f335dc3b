"""Shared test fixtures.

FakeCatalog is an in-memory catalog store speaking the store's REST
protocol through httpx.MockTransport.
"""

import asyncio
import json
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from email.parser import BytesParser
from typing import Any

import httpx
import pytest
from catalog_admin.catalog import CatalogClient
from catalog_admin.config import CatalogConfig, Config, ServerConfig

BASE_URL = "https://catalog.test/api"
TOKEN = "test-token"
MAX_PDF_BYTES = 1024


@dataclass
class _Failure:
    status: int | None
    message: str


@dataclass
class FakeCatalog:
    """In-memory catalog store."""

    records: dict[str, dict[str, Any]] = field(default_factory=dict)
    requests: list[tuple[str, str]] = field(default_factory=list)
    _next_id: int = 1
    _failures: dict[tuple[str, str], _Failure] = field(default_factory=dict)
    _holds: dict[tuple[str, str], asyncio.Event] = field(default_factory=dict)

    def add(
        self,
        name: str,
        leaf: bool = False,
        parent: str | None = None,
        content: dict[str, Any] | None = None,
    ) -> str:
        """Insert a category directly and return its ID."""
        category_id = f"cat-{self._next_id}"
        self._next_id += 1
        parent_path = self.records[parent]["path"] if parent else []
        record: dict[str, Any] = {
            "_id": category_id,
            "name": name,
            "type": "content" if leaf else "category",
            "path": [*parent_path, name],
        }
        if parent:
            record["parentId"] = parent
        if content is not None:
            record["content"] = content
        self.records[category_id] = record
        return category_id

    def fail(self, method: str, path: str, status: int | None = 500, message: str = "Boom") -> None:
        """Make the next request to path fail; status None simulates a dropped connection."""
        self._failures[(method, path)] = _Failure(status, message)

    def hold(self, method: str, path: str) -> asyncio.Event:
        """Delay the next response to path until the returned event is set."""
        event = asyncio.Event()
        self._holds[(method, path)] = event
        return event

    def children_of(self, parent: str | None) -> list[dict[str, Any]]:
        return [r for r in self.records.values() if r.get("parentId") == parent]

    def count(self, method: str, path: str) -> int:
        return self.requests.count((method, path))

    async def wait_for_request(self, method: str, path: str) -> None:
        """Yield to the event loop until a request to path has arrived."""
        while self.count(method, path) == 0:
            await asyncio.sleep(0)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path.removeprefix("/api")
        self.requests.append((method, path))

        event = self._holds.pop((method, path), None)
        if event is not None:
            await event.wait()

        failure = self._failures.pop((method, path), None)
        if failure is not None:
            if failure.status is None:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(failure.status, json={"message": failure.message})

        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"message": "Unauthorized"})

        return self._route(method, path, request)

    def _route(self, method: str, path: str, request: httpx.Request) -> httpx.Response:
        parts = [p for p in path.split("/") if p]
        if method == "GET" and parts == ["categories", "parents"]:
            return httpx.Response(200, json=[{"parents": self.children_of(None)}])
        if method == "GET" and parts[:2] == ["categories", "subcategories"] and len(parts) == 3:
            return httpx.Response(200, json=[{"subcategories": self.children_of(parts[2])}])
        if method == "GET" and parts == ["categories"]:
            return httpx.Response(200, json=list(self.records.values()))
        if method == "POST" and parts == ["categories", "content"]:
            return self._attach(request)
        if method == "GET" and len(parts) == 2:
            record = self.records.get(parts[1])
            if record is None:
                return httpx.Response(404, json={"message": "Category not found"})
            return httpx.Response(200, json=record)
        if method == "POST" and parts == ["categories"]:
            body = json.loads(request.content)
            category_id = self.add(
                body["name"],
                leaf=body["type"] == "content",
                parent=body.get("parentId"),
            )
            return httpx.Response(201, json=self.records[category_id])
        if method == "DELETE" and len(parts) == 2:
            if parts[1] not in self.records:
                return httpx.Response(404, json={"message": "Category not found"})
            self._delete_subtree(parts[1])
            return httpx.Response(200, json={"message": "Category deleted"})
        return httpx.Response(405, json={"message": "Not allowed"})

    def _delete_subtree(self, category_id: str) -> None:
        for child in self.children_of(category_id):
            self._delete_subtree(child["_id"])
        del self.records[category_id]

    def _attach(self, request: httpx.Request) -> httpx.Response:
        fields = _parse_multipart(request)
        category_id = fields.get("categoryid", [(None, b"")])[0][1].decode()
        record = self.records.get(category_id)
        if record is None:
            return httpx.Response(404, json={"message": "Category not found"})
        if record["type"] != "content":
            return httpx.Response(400, json={"message": "Not a content category"})

        content = record.setdefault("content", {"imageUrls": []})
        if "text" in fields:
            content["text"] = fields["text"][0][1].decode()
        if "videoUrl" in fields:
            content["videoUrl"] = fields["videoUrl"][0][1].decode()
        if "images" in fields:
            content["imageUrls"] = [
                f"https://cdn.test/{category_id}/{filename}" for filename, _ in fields["images"]
            ]
        if "pdf" in fields:
            filename, data = fields["pdf"][0]
            if len(data) > MAX_PDF_BYTES:
                return httpx.Response(413, json={"message": "PDF exceeds size limit"})
            content["pdfUrl"] = f"https://cdn.test/{category_id}/{filename}"
        return httpx.Response(200, json={"message": "Content added successfully", "content": content})


def _parse_multipart(request: httpx.Request) -> dict[str, list[tuple[str | None, bytes]]]:
    """Split a multipart body into {field: [(filename, data), ...]}."""
    content_type = request.headers["Content-Type"].encode()
    message = BytesParser().parsebytes(
        b"Content-Type: " + content_type + b"\r\n\r\n" + request.read()
    )
    fields: dict[str, list[tuple[str | None, bytes]]] = {}
    for part in message.get_payload():
        name = part.get_param("name", header="content-disposition")
        data = part.get_payload(decode=True) or b""
        fields.setdefault(name, []).append((part.get_filename(), data))
    return fields


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def science_tree(catalog: FakeCatalog) -> dict[str, str]:
    """Seed a small tree and return name -> ID.

    Science > Physics > Mechanics > {Kinematics, Dynamics}
    Science > Physics > Optics
    Science > Chemistry
    History
    """
    ids: dict[str, str] = {}
    ids["Science"] = catalog.add("Science")
    ids["History"] = catalog.add("History")
    ids["Physics"] = catalog.add("Physics", parent=ids["Science"])
    ids["Chemistry"] = catalog.add("Chemistry", parent=ids["Science"])
    ids["Mechanics"] = catalog.add("Mechanics", parent=ids["Physics"])
    ids["Optics"] = catalog.add("Optics", parent=ids["Physics"])
    ids["Kinematics"] = catalog.add("Kinematics", leaf=True, parent=ids["Mechanics"])
    ids["Dynamics"] = catalog.add(
        "Dynamics",
        leaf=True,
        parent=ids["Mechanics"],
        content={"imageUrls": [], "text": "Forces and motion"},
    )
    return ids


@pytest.fixture
async def gateway(catalog: FakeCatalog) -> AsyncIterator[CatalogClient]:
    """Catalog client wired to the fake catalog."""
    transport = httpx.MockTransport(catalog.handle)
    async with httpx.AsyncClient(transport=transport) as client:
        yield CatalogClient(client, BASE_URL, TOKEN)


@pytest.fixture
def test_config() -> Config:
    return Config(
        server=ServerConfig(),
        catalog=CatalogConfig(base_url=BASE_URL, token=TOKEN),
    )

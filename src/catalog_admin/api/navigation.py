"""Navigation API endpoints.

Provides the console snapshot, tree navigation, category creation and
content previews.
"""

from aiohttp import web

from catalog_admin.api.responses import action_response, error_response, read_json
from catalog_admin.app_keys import console_key
from catalog_admin.core.models import Category
from catalog_admin.core.types import CategoryId
from catalog_admin.core.views import build_preview
from catalog_admin.errors import ValidationError


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/console", get_console),
        web.post("/api/navigation/enter/{id}", enter_category),
        web.post("/api/navigation/back", go_back),
        web.post("/api/navigation/refresh", refresh),
        web.post("/api/categories", add_category),
        web.get("/api/preview/{id}", get_preview),
    ]


async def get_console(request: web.Request) -> web.Response:
    console = request.app[console_key]
    return web.json_response(console.view().to_dict())


async def enter_category(request: web.Request) -> web.Response:
    console = request.app[console_key]
    category = await _resolve_category(request, CategoryId(request.match_info["id"]))
    result = await console.navigation.enter(category)
    return action_response(request, result)


async def go_back(request: web.Request) -> web.Response:
    console = request.app[console_key]
    result = await console.navigation.go_back()
    return action_response(request, result)


async def refresh(request: web.Request) -> web.Response:
    console = request.app[console_key]
    navigation = console.navigation
    result = await navigation.refresh_top_level()
    if result.ok and navigation.selected is not None:
        result = await navigation.show_children_of(navigation.selected.id)
    return action_response(request, result)


async def add_category(request: web.Request) -> web.Response:
    console = request.app[console_key]
    data = await read_json(request)

    name = data.get("name")
    if not isinstance(name, str):
        raise ValidationError("name must be a string")
    leaf = data.get("leaf", False)
    if not isinstance(leaf, bool):
        raise ValidationError("leaf must be a boolean")

    result = await console.navigation.add_category(name, leaf)
    return action_response(request, result)


async def get_preview(request: web.Request) -> web.Response:
    console = request.app[console_key]
    category_id = request.match_info["id"]
    category = console.navigation.find_visible(CategoryId(category_id))
    if category is None:
        return error_response("Category not found", 404, id=category_id)

    preview = build_preview(category)
    if preview is None:
        return error_response("Category has no content", 404, id=category_id)
    return web.json_response(preview.to_dict())


async def _resolve_category(request: web.Request, category_id: CategoryId) -> Category:
    """Find a category on screen, or fetch it from the catalog store."""
    console = request.app[console_key]
    category = console.navigation.find_visible(category_id)
    if category is not None:
        return category
    return await console.gateway.get_category(category_id)

"""Deletion API endpoints.

Two-step delete: request a target, then confirm or cancel.
"""

from aiohttp import web

from catalog_admin.api.responses import action_response, error_response
from catalog_admin.app_keys import console_key
from catalog_admin.core.results import ActionResult
from catalog_admin.core.types import CategoryId


def create_deletion_routes() -> list[web.RouteDef]:
    return [
        web.post("/api/deletion/confirm", confirm_delete),
        web.post("/api/deletion/cancel", cancel_delete),
        web.post("/api/deletion/{id}", request_delete),
    ]


async def request_delete(request: web.Request) -> web.Response:
    console = request.app[console_key]
    category_id = request.match_info["id"]
    target = console.navigation.find_visible(CategoryId(category_id))
    if target is None:
        return error_response("Category not found", 404, id=category_id)

    console.deletion.request_delete(target)
    return action_response(request, ActionResult.success(target, console.deletion.confirmation_prompt()))


async def confirm_delete(request: web.Request) -> web.Response:
    console = request.app[console_key]
    result = await console.deletion.confirm()
    return action_response(request, result)


async def cancel_delete(request: web.Request) -> web.Response:
    console = request.app[console_key]
    console.deletion.cancel()
    return action_response(request, ActionResult.success())

"""Shared JSON response helpers for the console API."""

import logging
from typing import Any

from aiohttp import web

from catalog_admin.app_keys import console_key
from catalog_admin.core.results import ActionResult
from catalog_admin.errors import (
    InvalidTargetError,
    RemoteError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def error_response(message: str, status: int, **extra: Any) -> web.Response:
    return web.json_response({"error": message, **extra}, status=status)


def action_response(request: web.Request, result: ActionResult) -> web.Response:
    """Render an action result together with the refreshed console view."""
    console = request.app[console_key]
    body = {
        "ok": result.ok,
        "message": result.message,
        "console": console.view().to_dict(),
    }
    return web.json_response(body, status=200 if result.ok else 502)


@web.middleware
async def error_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    """Map locally raised catalog errors to JSON error responses."""
    try:
        return await handler(request)
    except ValidationError as e:
        return error_response(e.message, 400)
    except InvalidTargetError as e:
        return error_response(e.message, 409)
    except RemoteError as e:
        if e.status == 404:
            return error_response(e.message, 404)
        logger.warning(f"{request.method} {request.path} failed: {e.message}")
        return error_response(e.message, 502)
    except TransportError as e:
        logger.warning(f"{request.method} {request.path} failed: {e.message}")
        return error_response(e.message, 502)


async def read_json(request: web.Request) -> dict[str, Any]:
    """Read a JSON object body.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("Request body must be JSON") from None
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data

"""Content draft API endpoints.

Drafts always target the selected leaf category. Files are uploaded as
multipart form data under the "files" field.
"""

from aiohttp import web

from catalog_admin.api.responses import action_response, read_json
from catalog_admin.app_keys import console_key
from catalog_admin.core.models import StagedFile
from catalog_admin.core.results import ActionResult
from catalog_admin.core.types import ContentKind
from catalog_admin.errors import InvalidTargetError, ValidationError


def create_draft_routes() -> list[web.RouteDef]:
    return [
        web.post("/api/drafts", open_draft),
        web.delete("/api/drafts", cancel_draft),
        web.put("/api/drafts/text", set_text),
        web.put("/api/drafts/video", set_video_url),
        web.put("/api/drafts/files", stage_files),
        web.delete("/api/drafts/files/{index}", remove_file),
        web.post("/api/drafts/submit", submit_draft),
    ]


async def open_draft(request: web.Request) -> web.Response:
    console = request.app[console_key]
    data = await read_json(request)

    try:
        kind = ContentKind(data.get("kind"))
    except ValueError:
        raise ValidationError(f"Unknown content kind: {data.get('kind')!r}") from None

    target = console.navigation.selected
    if target is None:
        raise InvalidTargetError("Select a content category first")

    console.drafts.open_draft(target, kind)
    return action_response(request, ActionResult.success())


async def set_text(request: web.Request) -> web.Response:
    console = request.app[console_key]
    data = await read_json(request)
    console.drafts.set_text(_string_field(data, "text"))
    return action_response(request, ActionResult.success())


async def set_video_url(request: web.Request) -> web.Response:
    console = request.app[console_key]
    data = await read_json(request)
    console.drafts.set_video_url(_string_field(data, "url"))
    return action_response(request, ActionResult.success())


async def stage_files(request: web.Request) -> web.Response:
    console = request.app[console_key]
    form = await request.post()

    files = []
    for value in form.getall("files", []):
        if isinstance(value, web.FileField):
            files.append(
                StagedFile(
                    filename=value.filename,
                    data=value.file.read(),
                    content_type=value.content_type,
                )
            )

    staged = console.drafts.stage_files(files)
    return action_response(
        request,
        ActionResult.success(staged, f"{len(staged)} file(s) selected"),
    )


async def remove_file(request: web.Request) -> web.Response:
    console = request.app[console_key]
    try:
        index = int(request.match_info["index"])
    except ValueError:
        raise ValidationError("File index must be an integer") from None
    console.drafts.remove_file(index)
    return action_response(request, ActionResult.success())


async def submit_draft(request: web.Request) -> web.Response:
    console = request.app[console_key]
    result = await console.submit_draft()
    return action_response(request, result)


async def cancel_draft(request: web.Request) -> web.Response:
    console = request.app[console_key]
    console.drafts.cancel()
    return action_response(request, ActionResult.success())


def _string_field(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value

"""CLI interface for catalog-admin.

Command-line tool for serving the catalog console and running one-off
catalog operations.
"""

import asyncio
import logging
import mimetypes
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import NoReturn, cast

import click

from catalog_admin.catalog import CatalogClient, create_http_client
from catalog_admin.config import Config
from catalog_admin.core.console import CatalogConsole
from catalog_admin.core.models import Category, StagedFile
from catalog_admin.core.types import CategoryId, ContentKind
from catalog_admin.core.views import breadcrumb, content_badges
from catalog_admin.errors import CatalogError, RemoteError

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover catalog-admin.toml)",
)


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (log catalog requests)",
)
def cli(verbose: bool) -> None:
    """Catalog admin - manage the content category tree."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.group()
@config_option
@click.option(
    "--base-url",
    "-u",
    default=None,
    help="Catalog API base URL (overrides config)",
)
@click.option(
    "--token",
    envvar="CATALOG_ADMIN_TOKEN",
    default=None,
    help="Bearer token for the catalog API (overrides config)",
)
@click.pass_context
def categories(
    ctx: click.Context,
    config_path: Path | None,
    base_url: str | None,
    token: str | None,
) -> None:
    """Category tree commands."""
    try:
        config = Config.load(config_path).with_overrides(base_url=base_url, token=token)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)
    ctx.obj = config


cli.add_command(categories)


@cli.command()
@config_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--base-url",
    "-u",
    default=None,
    help="Catalog API base URL (overrides config)",
)
@click.option(
    "--token",
    envvar="CATALOG_ADMIN_TOKEN",
    default=None,
    help="Bearer token for the catalog API (overrides config)",
)
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    base_url: str | None,
    token: str | None,
) -> None:
    """Start the console API server."""
    from catalog_admin.server import run_server

    try:
        config = Config.load(config_path).with_overrides(
            host=host,
            port=port,
            base_url=base_url,
            token=token,
        )
    except (FileNotFoundError, ValueError) as e:
        _fail(e)
    _require_base_url(config)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Catalog API: {config.catalog.base_url}")
    if not config.catalog.token:
        click.echo(click.style("Warning: no catalog token configured", fg="yellow"))

    run_server(config)


@categories.command("list")
@click.option("--parent", "parent_id", default=None, help="List children of this category")
@click.option("--all", "list_all", is_flag=True, help="List every category")
@click.pass_obj
def list_categories(config: Config, parent_id: str | None, list_all: bool) -> None:
    """List top-level categories, or the children of --parent."""
    asyncio.run(_list(config, parent_id, list_all))


@categories.command()
@click.pass_obj
def tree(config: Config) -> None:
    """Print the whole category tree."""
    asyncio.run(_tree(config))


@categories.command()
@click.argument("category_id")
@click.pass_obj
def show(config: Config, category_id: str) -> None:
    """Show a category and its content."""
    asyncio.run(_show(config, category_id))


@categories.command()
@click.argument("name")
@click.option("--parent", "parent_id", default=None, help="Parent category ID")
@click.option("--leaf", is_flag=True, help="Create a content category")
@click.pass_obj
def create(config: Config, name: str, parent_id: str | None, leaf: bool) -> None:
    """Create a category."""
    asyncio.run(_create(config, name, parent_id, leaf))


@categories.command()
@click.argument("category_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def delete(config: Config, category_id: str, yes: bool) -> None:
    """Delete a category with all its subcategories and content."""
    asyncio.run(_delete(config, category_id, yes))


@categories.command()
@click.argument("category_id")
@click.option("--text", default=None, help="Text content")
@click.option(
    "--image",
    "images",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Image file (repeat for up to 5 images)",
)
@click.option(
    "--pdf",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="PDF document",
)
@click.option("--video", default=None, help="YouTube video URL")
@click.pass_obj
def attach(
    config: Config,
    category_id: str,
    text: str | None,
    images: tuple[Path, ...],
    pdf: Path | None,
    video: str | None,
) -> None:
    """Attach content to a content category."""
    selected = [
        kind
        for kind, value in (
            (ContentKind.TEXT, text),
            (ContentKind.IMAGE, images),
            (ContentKind.PDF, pdf),
            (ContentKind.VIDEO, video),
        )
        if value
    ]
    if len(selected) != 1:
        _fail("exactly one of --text, --image, --pdf or --video is required")

    kind = selected[0]
    files = [_read_staged_file(path) for path in images] if images else []
    if pdf is not None:
        files = [_read_staged_file(pdf)]
    asyncio.run(_attach(config, category_id, kind, text or video or "", files))


@asynccontextmanager
async def _open_console(config: Config) -> AsyncIterator[CatalogConsole]:
    """Open a catalog console for the duration of one command."""
    base_url = _require_base_url(config)
    async with create_http_client(config.catalog.timeout) as http_client:
        yield CatalogConsole(CatalogClient(http_client, base_url, config.catalog.token))


async def _list(config: Config, parent_id: str | None, list_all: bool) -> None:
    try:
        async with _open_console(config) as console:
            if list_all:
                items = await console.gateway.list_all()
            elif parent_id:
                items = await console.gateway.list_children(CategoryId(parent_id))
            else:
                items = await console.gateway.list_top_level()
    except CatalogError as e:
        _fail(e)

    if not items:
        click.echo("No categories found.")
        return
    for category in items:
        click.echo(_format_row(category))


async def _tree(config: Config) -> None:
    try:
        async with _open_console(config) as console:
            roots = await console.gateway.list_top_level()
            if not roots:
                click.echo("No categories found.")
                return
            for root in roots:
                await _print_subtree(console.gateway, root, depth=0)
    except CatalogError as e:
        _fail(e)


async def _print_subtree(gateway: CatalogClient, category: Category, depth: int) -> None:
    click.echo(f"{'  ' * depth}{_format_row(category)}")
    if category.is_leaf:
        return
    for child in await gateway.list_children(category.id):
        await _print_subtree(gateway, child, depth + 1)


async def _show(config: Config, category_id: str) -> None:
    try:
        async with _open_console(config) as console:
            category = await console.gateway.get_category(CategoryId(category_id))
    except CatalogError as e:
        _fail(e)

    click.echo(click.style(f"\n{category.name}", fg="green", bold=True))
    click.echo(f"ID: {category.id}")
    click.echo(f"Type: {category.type.value}")
    click.echo(f"Path: {breadcrumb(category)}")
    if category.parent_id:
        click.echo(f"Parent: {category.parent_id}")

    content = category.content
    if content is None or not content.has_content():
        if category.is_leaf:
            click.echo("\nNo content attached.")
        return

    click.echo(click.style("\nContent:", fg="cyan", bold=True))
    if content.text:
        click.echo(f"Text: {content.text}")
    for index, url in enumerate(content.image_urls, start=1):
        click.echo(f"Image {index}: {url}")
    if content.pdf_url:
        click.echo(f"PDF: {content.pdf_url}")
    if content.video_url:
        click.echo(f"Video: {content.video_url}")


async def _create(config: Config, name: str, parent_id: str | None, leaf: bool) -> None:
    try:
        async with _open_console(config) as console:
            category = await console.gateway.create_category(
                name,
                leaf,
                CategoryId(parent_id) if parent_id else None,
            )
    except CatalogError as e:
        _fail(e)

    click.echo(click.style(f"{category.name} added successfully", fg="green"))
    click.echo(f"ID: {category.id}")


async def _delete(config: Config, category_id: str, yes: bool) -> None:
    try:
        async with _open_console(config) as console:
            try:
                target = await console.gateway.get_category(CategoryId(category_id))
            except RemoteError as e:
                if e.status != 404:
                    raise
                click.echo(f"Category {category_id} is already deleted.")
                return
            console.deletion.request_delete(target)
            if not yes and not click.confirm(console.deletion.confirmation_prompt()):
                console.deletion.cancel()
                click.echo("Cancelled.")
                return
            result = await console.deletion.confirm()
    except CatalogError as e:
        _fail(e)

    if not result.ok:
        _fail(f"Failed to delete: {result.message}")
    click.echo(click.style(result.message or "Deleted", fg="green"))


async def _attach(
    config: Config,
    category_id: str,
    kind: ContentKind,
    value: str,
    files: list[StagedFile],
) -> None:
    try:
        async with _open_console(config) as console:
            target = await console.gateway.get_category(CategoryId(category_id))
            drafts = console.drafts
            drafts.open_draft(target, kind)
            if kind is ContentKind.TEXT:
                drafts.set_text(value)
            elif kind is ContentKind.VIDEO:
                drafts.set_video_url(value)
            else:
                staged = drafts.stage_files(files)
                if len(staged) < len(files):
                    click.echo(
                        click.style(
                            f"Skipping {len(files) - len(staged)} file(s) of the wrong type",
                            fg="yellow",
                        )
                    )
            result = await drafts.submit()
    except CatalogError as e:
        _fail(e)

    if not result.ok:
        _fail(f"Failed to add content: {result.message}")
    click.echo(click.style(result.message or "Content added", fg="green"))


def _read_staged_file(path: Path) -> StagedFile:
    content_type, _ = mimetypes.guess_type(path.name)
    return StagedFile(
        filename=path.name,
        data=path.read_bytes(),
        content_type=content_type or "application/octet-stream",
    )


def _format_row(category: Category) -> str:
    """Format a category as a one-line listing entry."""
    marker = "[content]" if category.is_leaf else "[category]"
    line = f"{category.name} {marker} ({category.id})"
    badges = content_badges(category)
    if badges:
        line += " - " + ", ".join(badge.label for badge in badges)
    return line


def _require_base_url(config: Config) -> str:
    """Get the catalog base URL or exit with error.

    Raises:
        SystemExit: If base_url is not configured
    """
    if not config.catalog.base_url:
        click.echo(
            click.style(
                "Error: catalog base_url required (via --base-url or config)",
                fg="red",
            ),
            err=True,
        )
        click.echo("\nAdd the following to your catalog-admin.toml:")
        click.echo("\n[catalog]")
        click.echo('base_url = "https://api.example.com/api"')
        click.echo('token = "your-token"')
        sys.exit(1)
    return cast(str, config.catalog.base_url)  # narrowing after sys.exit


def _fail(error: Exception | str) -> NoReturn:
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()

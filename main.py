"""
main.py

Command line entry point for mediaview.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Annotated

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import MofNCompleteColumn, Progress, TimeElapsedColumn
from rich.table import Table
from typer import Argument, Context, Exit, Option, Typer

from browse.errors import BrowseError
from browse.services import Browser
from common.utils import parent_path

app = Typer()
console = Console()
logger = logging.getLogger(__name__)


def _browser(ctx: Context) -> Browser:
    return Browser(ctx.obj['media'], ctx.obj['thumbnails'])


def _run(coro):
    try:
        return asyncio.run(coro)
    except BrowseError as e:
        logger.error("%s: %s", e.code, e.detail or e)
        raise Exit(1) from e


@app.callback()
def callback(
        ctx: Context,
        verbose: bool = Option(False, "-v", "--verbose", help='Show verbose output.'),
        media: Annotated[Path, Option("-m", "--media", help='Media root to browse.', envvar='MEDIA_DIR')] = Path('media'),
        thumbnails: Annotated[Path, Option("-t", "--thumbnails", help='Where thumbnails are stored.', envvar='THUMBNAIL_DIR')] = Path('thumbnails'),
):
    logging.basicConfig(
        level="DEBUG" if verbose else "INFO", format="%(message)s", datefmt="[%X]", handlers=[RichHandler()]
    )
    ctx.obj = {'media': media.resolve(), 'thumbnails': thumbnails.resolve()}


@app.command(name='ls')
def list_directory(
        ctx: Context,
        directory: str = Argument('/', help='Directory to list, relative to the media root.'),
):
    """List the visible entries of a directory."""
    entries = _run(_browser(ctx).lister.list(directory))

    table = Table(title=directory)
    table.add_column('Name')
    table.add_column('Type')
    table.add_column('Thumbnail')
    for entry in entries:
        table.add_row(entry.name, 'dir' if entry.is_dir else 'file', 'yes' if entry.thumbnail else '')
    console.print(table)


@app.command()
def locate(
        ctx: Context,
        file: str = Argument(..., help='File to locate, relative to the media root.'),
):
    """Show the position of a file and its previous / next siblings."""
    result = _run(_browser(ctx).navigator.locate(parent_path(file), file))
    console.print(f"{result.position + 1} of {result.count} in {result.base}")
    console.print(f"previous: {result.previous or '-'}")
    console.print(f"next:     {result.next or '-'}")


@app.command()
def thumbs(
        ctx: Context,
        directory: str = Argument('/', help='Directory whose thumbnails should be rendered.'),
        size: Annotated[int, Option("-s", "--size", help='Maximum thumbnail width and height.')] = 320,
        jobs: Annotated[int, Option("-j", "--jobs", help='Thumbnails rendered at once.')] = 8,
):
    """Render missing thumbnails for the visible images of a directory."""
    browser = Browser(ctx.obj['media'], ctx.obj['thumbnails'], thumbnail_size=size, concurrency=jobs)

    async def render():
        entries = await browser.lister.list(directory)
        sources = [e.thumbnail for e in entries if e.thumbnail]
        with Progress(*Progress.get_default_columns(), MofNCompleteColumn(), TimeElapsedColumn()) as progress:
            task = progress.add_task("Rendering thumbnails", total=len(sources))
            return await browser.thumbnails.ensure_all(
                sources,
                on_progress=lambda done, total: progress.update(task, completed=done),
            )

    results = _run(render())
    failed = [r for r in results if not r.ok]
    for result in failed:
        logger.warning("Failed: %s (%s)", result.source, result.error)
    logger.info("%d thumbnails ready, %d failed", len(results) - len(failed), len(failed))
    if failed:
        raise Exit(1)


@app.command()
def serve(
        ctx: Context,
        address: str = Argument('127.0.0.1:8000', help='Address and port to listen on.'),
):
    """Run the development web server."""
    from django.core.management import execute_from_command_line

    os.environ['MEDIA_DIR'] = str(ctx.obj['media'])
    os.environ['THUMBNAIL_DIR'] = str(ctx.obj['thumbnails'])
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'mediaview.settings')
    execute_from_command_line(['mediaview', 'runserver', address])


if __name__ == '__main__':
    app()

"""Browse app views.

Thin async glue: each view awaits the core and translates its errors into
status codes without exposing filesystem details.
"""
from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from pathlib import Path

from django.conf import settings
from django.http import FileResponse, HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_GET

from .errors import BrowseError
from .services import Browser

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _browser_for(media_root: str, thumbnail_root: str, thumbnail_size: int, concurrency: int) -> Browser:
    logger.info("Serving media from %s (thumbnails in %s)", media_root, thumbnail_root)
    return Browser(
        Path(media_root),
        Path(thumbnail_root),
        thumbnail_size=thumbnail_size,
        concurrency=concurrency,
    )


def get_browser() -> Browser:
    """Return the single Browser, and so the config caches, for the configured roots."""
    return _browser_for(
        str(settings.MEDIA_FOLDER),
        str(settings.THUMBNAIL_FOLDER),
        int(getattr(settings, 'THUMBNAIL_SIZE', 320)),
        int(getattr(settings, 'THUMBNAIL_CONCURRENCY', 8)),
    )


def _error_response(exc: BrowseError) -> JsonResponse:
    return JsonResponse({'error': exc.code}, status=exc.status)


@require_GET
async def browse(request: HttpRequest, path: str = '') -> HttpResponse:
    """Filtered listing of a directory."""
    layout = request.GET.get('layout', 'default')
    try:
        context = await get_browser().browse(path, layout=layout)
    except ValueError as e:
        logger.debug("Bad browse request for %r: %s", path, e)
        return JsonResponse({'error': 'invalid_query'}, status=400)
    except BrowseError as e:
        return _error_response(e)
    return JsonResponse(context.to_dict())


@require_GET
async def view(request: HttpRequest, path: str) -> HttpResponse:
    """Single file with previous / next navigation."""
    style = request.GET.get('style', 'default')
    fit = request.GET.get('fit', 'default')
    try:
        context = await get_browser().view(path, style=style, fit=fit)
    except ValueError as e:
        logger.debug("Bad view request for %r: %s", path, e)
        return JsonResponse({'error': 'invalid_query'}, status=400)
    except BrowseError as e:
        return _error_response(e)
    return JsonResponse(context.to_dict())


@require_GET
async def media(request: HttpRequest, path: str) -> HttpResponse:
    """Serve an original file after the direct access check."""
    try:
        source = await get_browser().check_direct_access(path)
    except BrowseError as e:
        return _error_response(e)
    return FileResponse(await asyncio.to_thread(source.open, 'rb'))


@require_GET
async def thumbnail(request: HttpRequest, path: str) -> HttpResponse:
    """Serve a derivative, rendering it on first request."""
    try:
        derivative = await get_browser().thumbnail(path)
    except BrowseError as e:
        return _error_response(e)
    response = FileResponse(await asyncio.to_thread(derivative.open, 'rb'))
    response['Cache-Control'] = 'public, max-age=86400'
    return response

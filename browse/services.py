"""Browse and view service functions built on the access-control core."""
from __future__ import annotations

import asyncio
import logging
import posixpath
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

from common.metadata import read_exif, summarize_exif
from common.models import Entry, FileType, NavigationResult, PathSection, RawFile
from common.thumbnails import THUMB_MAX_DIMENSION, resize_image
from common.utils import extension, file_type, parent_path, path_sections

from .conf import (
    DEFAULT_VALUE,
    FITS,
    LAYOUTS,
    STYLES,
    ConfigStore,
    DirConfigStore,
    monotonic_ms,
    resolve_default,
)
from .errors import ForbiddenError, NotFoundError
from .lister import Lister
from .navigator import Navigator
from .policy import AccessPolicy
from .storage import Storage, logical_path
from .thumbcache import DEFAULT_CONCURRENCY, Resizer, ThumbnailCache

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BrowseContext:
    """Context data for rendering a directory."""

    title: str
    path: str
    layout: str
    items: list[Entry]
    paths: list[PathSection]
    failed_thumbnails: list[str]

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class ViewContext:
    """Context data for rendering a single file."""

    title: str
    path: str
    name: str
    type: FileType
    style: str
    fit: str
    navigation: NavigationResult
    exif: dict[str, Any] | None
    raws: list[RawFile]

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def _validate(value: str, allowed: tuple[str, ...], label: str) -> str:
    if value not in (*allowed, DEFAULT_VALUE):
        raise ValueError(f"Invalid {label}: {value!r}")
    return value


class Browser:
    """Composition root for one media root.

    Owns the global and per-directory config caches for the lifetime of the
    instance; there is no invalidation API, entries simply expire.
    """

    def __init__(
            self,
            media_root: Path,
            thumbnail_root: Path,
            *,
            thumbnail_size: int = THUMB_MAX_DIMENSION,
            concurrency: int = DEFAULT_CONCURRENCY,
            resizer: Resizer = resize_image,
            clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self.storage = Storage(media_root)
        self.config = ConfigStore(self.storage, clock=clock)
        self.dir_configs = DirConfigStore(self.config)
        self.policy = AccessPolicy()
        self.lister = Lister(self.storage, self.config, self.dir_configs, self.policy)
        self.navigator = Navigator(self.lister)
        self.thumbnails = ThumbnailCache(
            self.storage,
            thumbnail_root,
            resizer=resizer,
            max_dimension=thumbnail_size,
            concurrency=concurrency,
        )

    async def browse(self, dir_path: str, layout: str = DEFAULT_VALUE) -> BrowseContext:
        """List a directory and make sure its thumbnails exist.

        Thumbnail failures are logged and reported, never raised.
        """
        _validate(layout, LAYOUTS, "layout")
        path = logical_path(dir_path)
        items = await self.lister.list(path, with_parent=True)

        conf = await self.config.get()
        dir_conf = await self.dir_configs.get(path)

        results = await self.thumbnails.ensure_all(e.thumbnail for e in items if e.thumbnail)
        failed = [r.source for r in results if not r.ok]

        return BrowseContext(
            title=path,
            path=path,
            layout=resolve_default(layout, dir_conf.default_layout, conf.default_layout),
            items=items,
            paths=path_sections(path),
            failed_thumbnails=failed,
        )

    async def view(self, file_path: str, style: str = DEFAULT_VALUE, fit: str = DEFAULT_VALUE) -> ViewContext:
        """Describe a single file with its position among visible siblings."""
        _validate(style, STYLES, "style")
        _validate(fit, FITS, "fit")
        path = logical_path(file_path)
        if not await self.storage.exists(path) or await self.storage.is_directory(path):
            raise NotFoundError(path)

        base = parent_path(path)
        navigation = await self.navigator.locate(base, path)

        conf = await self.config.get()
        dir_conf = await self.dir_configs.get(base)
        name = posixpath.basename(path)

        exif = None
        if conf.shows_exif(name):
            exif = await self._exif(path)

        return ViewContext(
            title=path,
            path=path,
            name=name,
            type=file_type(name),
            style=resolve_default(style, dir_conf.default_style, conf.default_style),
            fit=resolve_default(fit, dir_conf.default_fit, conf.default_fit),
            navigation=navigation,
            exif=exif,
            raws=await self.find_raws(path),
        )

    async def find_raws(self, file_path: str) -> list[RawFile]:
        """Raw siblings of an image, in configured extension order.

        With the ``replace`` strategy ``a.jpg`` pairs with ``a.raw``; with
        ``append`` it pairs with ``a.jpg.raw``.
        """
        conf = await self.config.get()
        if not conf.hide_raws:
            return []

        path = logical_path(file_path)
        stem = path
        suffix = extension(path)
        if conf.raw_strategy == "replace" and suffix:
            stem = path[: -len(suffix)]

        candidates = [stem + ext for ext in conf.hide_raws]
        found = await asyncio.gather(*(self.storage.exists(c) for c in candidates))
        return [
            RawFile(name=posixpath.basename(c), path=c)
            for c, exists in zip(candidates, found)
            if exists and c != path
        ]

    async def check_direct_access(self, file_path: str) -> Path:
        """Filesystem path of a file the policy lets clients fetch directly.

        Raises:
            NotFoundError: Missing file, directory, or path outside the root
            ForbiddenError: The containing directory's rules deny the file
        """
        path = logical_path(file_path)
        if not await self.storage.exists(path) or await self.storage.is_directory(path):
            raise NotFoundError(path)

        conf = await self.config.get()
        dir_conf = await self.dir_configs.get(parent_path(path))
        if not self.policy.is_direct_access_allowed(path, conf, dir_conf):
            logger.info("Direct access denied: %s", path)
            raise ForbiddenError(path)
        return await self.storage.locate(path)

    async def thumbnail(self, file_path: str) -> Path:
        """Derivative for a directly accessible, thumbnail eligible file."""
        await self.check_direct_access(file_path)
        path = logical_path(file_path)
        conf = await self.config.get()
        if not conf.renders_thumbnail(path):
            raise NotFoundError(path)
        return await self.thumbnails.ensure(path)

    async def _exif(self, path: str) -> dict[str, Any] | None:
        source = await self.storage.locate(path)
        tags = await asyncio.to_thread(read_exif, source)
        if not tags:
            return None
        return {"tags": tags, "summary": summarize_exif(tags)}

"""Awaitable storage collaborator over a local media tree."""
from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Callable

from common.utils import normalize_path, resolve_under

from .errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

__all__ = ["Storage", "logical_path"]


def logical_path(path: str) -> str:
    """Normalise *path*, reporting invalid paths as not found."""
    try:
        return normalize_path(path)
    except ValueError as exc:
        raise NotFoundError(str(exc)) from exc


class Storage:
    """Read-only view of the media root addressed by logical paths.

    Every method that touches the filesystem, symlink resolution included,
    runs in a worker thread so the event loop is only suspended, never blocked.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def resolve(self, path: str) -> Path:
        """Filesystem path for a logical path; ``NotFoundError`` outside the root.

        Blocking: resolving follows symlinks on disk. Call it from a worker
        thread or use :meth:`locate`.
        """
        try:
            return resolve_under(self.root, path)
        except ValueError as exc:
            raise NotFoundError(str(exc)) from exc

    async def locate(self, path: str) -> Path:
        return await asyncio.to_thread(self.resolve, path)

    def _check(self, path: str, predicate: Callable[[Path], bool]) -> bool:
        try:
            target = self.resolve(path)
        except NotFoundError:
            return False
        return predicate(target)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._check, path, Path.exists)

    async def is_directory(self, path: str) -> bool:
        return await asyncio.to_thread(self._check, path, Path.is_dir)

    def _scan(self, path: str) -> list[tuple[str, bool]]:
        with os.scandir(self.resolve(path)) as it:
            return [(e.name, e.is_dir()) for e in it]

    async def list_children(self, path: str) -> list[tuple[str, bool]]:
        """Immediate children of a directory as ``(name, is_directory)`` pairs."""
        try:
            return await asyncio.to_thread(self._scan, path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise NotFoundError(logical_path(path)) from exc
        except PermissionError as exc:
            logger.warning("Permission denied listing %s: %s", path, exc)
            raise ForbiddenError(logical_path(path)) from exc

    def _read(self, path: str) -> bytes:
        return self.resolve(path).read_bytes()

    async def read_file(self, path: str) -> bytes:
        try:
            return await asyncio.to_thread(self._read, path)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise NotFoundError(logical_path(path)) from exc

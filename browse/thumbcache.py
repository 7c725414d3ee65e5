"""On-demand thumbnail derivatives.

Derivatives live under their own root and mirror the logical path of their
source image, so ``/trips/a.jpg`` becomes ``<root>/trips/a.jpg``. A derivative
that already exists is never regenerated.

Two requests for the same missing derivative may both render it. Each writes a
private temporary file and renames it into place, so readers only ever see a
complete image and either writer's result is kept.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Iterable

from common.models import DerivativeResult
from common.thumbnails import THUMB_MAX_DIMENSION, resize_image
from common.utils import resolve_under
from mediaview.utils.files import staged_file

from .errors import DerivativeGenerationError, NotFoundError
from .storage import Storage

logger = logging.getLogger(__name__)

Resizer = Callable[[Path, Path, int, int], None]

DEFAULT_CONCURRENCY = 8


class ThumbnailCache:
    def __init__(
            self,
            storage: Storage,
            root: Path,
            *,
            resizer: Resizer = resize_image,
            max_dimension: int = THUMB_MAX_DIMENSION,
            concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.storage = storage
        self.root = Path(root)
        self.resizer = resizer
        self.max_dimension = max_dimension
        self.concurrency = max(1, concurrency)

    def derivative_path(self, source_path: str) -> Path:
        """Where the derivative of *source_path* lives. Blocking: follows symlinks."""
        try:
            return resolve_under(self.root, source_path)
        except ValueError as exc:
            raise NotFoundError(str(exc)) from exc

    async def ensure(self, source_path: str) -> Path:
        """Return the derivative for *source_path*, rendering it if missing.

        Raises:
            DerivativeGenerationError: The source could not be read or resized
        """
        destination = await asyncio.to_thread(self.derivative_path, source_path)
        if await asyncio.to_thread(destination.is_file):
            logger.debug("Thumbnail cache hit: %s", source_path)
            return destination

        try:
            await asyncio.to_thread(self._render, source_path, destination)
        except Exception as exc:
            raise DerivativeGenerationError(source_path, f"{source_path}: {exc}") from exc

        logger.debug("Rendered thumbnail %s -> %s", source_path, destination)
        return destination

    async def ensure_all(
            self,
            source_paths: Iterable[str],
            on_progress: Callable[[int, int], None] | None = None,
    ) -> list[DerivativeResult]:
        """Ensure derivatives for many sources with bounded concurrency.

        Waits for every item. Failures are captured per item and never cancel
        the others; results come back in input order.
        """
        sources = list(source_paths)
        total = len(sources)
        semaphore = asyncio.Semaphore(self.concurrency)
        done = 0

        async def run(source: str) -> DerivativeResult:
            nonlocal done
            async with semaphore:
                try:
                    result = DerivativeResult(source=source, path=await self.ensure(source))
                except (DerivativeGenerationError, NotFoundError) as exc:
                    logger.warning("Thumbnail failed for %s: %s", source, exc)
                    result = DerivativeResult(source=source, error=exc)
            done += 1
            if on_progress is not None:
                on_progress(done, total)
            return result

        return list(await asyncio.gather(*(run(source) for source in sources)))

    def _render(self, source_path: str, destination: Path) -> None:
        source = self.storage.resolve(source_path)
        if not source.is_file():
            raise FileNotFoundError(f"Source image not found: {source}")
        with staged_file(destination) as partial:
            self.resizer(source, partial, self.max_dimension, self.max_dimension)

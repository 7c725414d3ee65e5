"""Previous / next navigation among the visible files of a directory."""
from __future__ import annotations

from common.models import NavigationResult

from .errors import NotFoundError
from .lister import Lister
from .storage import logical_path


class Navigator:
    def __init__(self, lister: Lister) -> None:
        self.lister = lister

    async def locate(self, dir_path: str, target_path: str) -> NavigationResult:
        """Find *target_path* among the files listed for *dir_path*.

        The listing is rebuilt for every call, so neighbours always reflect the
        current directory contents and configuration.
        """
        base = logical_path(dir_path)
        target = logical_path(target_path)
        files = [e for e in await self.lister.list(base) if not e.is_dir]

        for position, entry in enumerate(files):
            if entry.path == target:
                break
        else:
            raise NotFoundError(target)

        return NavigationResult(
            base=base,
            previous=files[position - 1].path if position > 0 else None,
            next=files[position + 1].path if position < len(files) - 1 else None,
            position=position,
            count=len(files),
        )

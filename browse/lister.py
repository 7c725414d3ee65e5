"""Filtered, deterministically ordered directory listings."""
from __future__ import annotations

import logging

from common.models import Entry
from common.utils import join_path, parent_path

from .conf import ConfigStore, DirConfigStore, GlobalConfig
from .errors import ForbiddenError, NotFoundError
from .policy import AccessPolicy
from .storage import Storage, logical_path

logger = logging.getLogger(__name__)

PARENT_NAME = ".."


def sort_key(entry: Entry) -> tuple[bool, str, str]:
    """Directories first, then names ignoring case, then the raw name as tie-break."""
    return (not entry.is_dir, entry.name.casefold(), entry.name)


def _make_entry(dir_path: str, name: str, is_dir: bool, conf: GlobalConfig) -> Entry:
    path = join_path(dir_path, name)
    thumbnail = path if not is_dir and conf.renders_thumbnail(name) else None
    return Entry(name=name, path=path, is_dir=is_dir, thumbnail=thumbnail)


class Lister:
    """Lists the visible immediate children of a directory.

    Listings are rebuilt on every call so they always reflect the directory as
    it is now and the configuration currently in force.
    """

    def __init__(
            self,
            storage: Storage,
            config: ConfigStore,
            dir_configs: DirConfigStore,
            policy: AccessPolicy | None = None,
    ) -> None:
        self.storage = storage
        self.config = config
        self.dir_configs = dir_configs
        self.policy = policy or AccessPolicy()

    async def list(self, dir_path: str, *, with_parent: bool = False) -> list[Entry]:
        """Return the visible children of *dir_path*.

        Args:
            dir_path: Logical directory path
            with_parent: Prepend a ``..`` entry pointing at the parent directory,
                except at the media root

        Raises:
            NotFoundError: The path is missing, not a directory, or outside the root
            ForbiddenError: The directory itself is not visible
        """
        path = logical_path(dir_path)
        if not await self.storage.is_directory(path):
            raise NotFoundError(path)

        conf = await self.config.get()
        dir_conf = await self.dir_configs.get(path)

        if not self.policy.is_directory_visible(path, conf):
            logger.info("Directory not whitelisted: %s", path)
            raise ForbiddenError(path)

        children = await self.storage.list_children(path)
        entries = [
            entry
            for entry in (_make_entry(path, name, is_dir, conf) for name, is_dir in children)
            if self.policy.is_entry_visible(entry, dir_conf, conf)
        ]
        entries.sort(key=sort_key)

        if with_parent and path != "/":
            entries.insert(0, Entry(name=PARENT_NAME, path=parent_path(path), is_dir=True))
        return entries

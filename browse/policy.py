"""Path based visibility rules for listings and direct file access."""
from __future__ import annotations

import posixpath

from common.models import Entry
from common.utils import parent_path

from .conf import DirConfig, GlobalConfig


def is_whitelisted(path: str, conf: GlobalConfig) -> bool:
    """True if some whitelist entry is a string prefix of *path*.

    Matching is on raw strings, not path segments: ``/foo`` also admits
    ``/foobar``.
    """
    return any(path.startswith(prefix) for prefix in conf.whitelist)


class AccessPolicy:
    """Decides what a listing shows and which files may be fetched directly.

    Rules, first match wins:

    1. global whitelist mode denies directories no whitelist entry prefixes
    2. names starting with the hide prefix are left out of listings
    3. names with a raw extension are left out of listings
    4. in whitelist mode, subdirectories no whitelist entry prefixes are left out
    5. a directory marked ``hide`` denies everything inside it
    6. a whitelisting directory admits only the names it lists
    7. a blacklisting directory admits everything but the names it lists
    """

    def is_directory_visible(self, dir_path: str, conf: GlobalConfig) -> bool:
        if conf.mode == "whitelist" and not is_whitelisted(dir_path, conf):
            return False
        return True

    def is_entry_visible(self, entry: Entry, dir_conf: DirConfig, conf: GlobalConfig) -> bool:
        if conf.hide_prefix and entry.name.startswith(conf.hide_prefix):
            return False
        if conf.hides_raw(entry.name):
            return False
        if entry.is_dir and conf.mode == "whitelist" and not is_whitelisted(entry.path, conf):
            return False
        return self._admitted_by_directory(entry.name, dir_conf)

    def is_direct_access_allowed(self, full_path: str, conf: GlobalConfig, dir_conf: DirConfig) -> bool:
        """Check a fetch of *full_path* against its containing directory.

        Hidden names and raw files stay reachable by exact path.
        """
        if not self.is_directory_visible(parent_path(full_path), conf):
            return False
        return self._admitted_by_directory(posixpath.basename(full_path), dir_conf)

    @staticmethod
    def _admitted_by_directory(name: str, dir_conf: DirConfig) -> bool:
        if dir_conf.hide:
            return False
        if dir_conf.mode == "whitelist":
            return name in dir_conf.list
        return name not in dir_conf.list

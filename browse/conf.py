"""Global and per-directory configuration with time-based caching.

Two cache layers exist. :class:`ConfigStore` holds the global document found at
the media root; :class:`DirConfigStore` holds one override document per
directory. Both reload on first use or once their entry has expired, and both
take the expiry time from the *global* configuration, so a directory lookup
always consults the global store first.

Missing or malformed documents never fail a request: they are treated as an
empty document and every field falls back to its default.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar

from common.utils import extension, join_path

from .errors import ConfigParseError, NotFoundError
from .storage import Storage, logical_path

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAIN_CONFIG_PATH = "/.~main-conf.json"
DEFAULT_VALUE = "default"

MODES = ("allow-all", "whitelist")
DIR_MODES = ("blacklist", "whitelist")
RAW_STRATEGIES = ("append", "replace")
LAYOUTS = ("list", "grid", "grid-small")
STYLES = ("ltr", "rtl", "bi")
FITS = ("h", "v")

DEFAULT_THUMBNAIL_EXTENSIONS = (".png", ".jpg", ".jpeg")
DEFAULT_EXIF_EXTENSIONS = (".jpg", ".jpeg", ".tif", ".tiff")


def _matches_extension(extensions: tuple[str, ...] | None, name: str) -> bool:
    if not extensions:
        return False
    return extension(name) in {e.lower() for e in extensions}


@dataclass(slots=True, frozen=True)
class GlobalConfig:
    """Settings read from ``.~main-conf.json`` at the media root.

    Extension tuples set to ``None`` mean the feature is disabled.
    """

    mode: str = "allow-all"
    render_thumbnails: tuple[str, ...] | None = DEFAULT_THUMBNAIL_EXTENSIONS
    hide_raws: tuple[str, ...] | None = None
    raw_strategy: str = "replace"
    show_exif: tuple[str, ...] | None = DEFAULT_EXIF_EXTENSIONS
    whitelist: tuple[str, ...] = ()
    directory_config_name: str = ".~conf.json"
    hide_prefix: str = "."
    conf_expire_ms: int = 10_000
    default_layout: str = "grid-small"
    default_style: str = "ltr"
    default_fit: str = "h"

    def renders_thumbnail(self, name: str) -> bool:
        return _matches_extension(self.render_thumbnails, name)

    def hides_raw(self, name: str) -> bool:
        return _matches_extension(self.hide_raws, name)

    def shows_exif(self, name: str) -> bool:
        return _matches_extension(self.show_exif, name)


@dataclass(slots=True, frozen=True)
class DirConfig:
    """Overrides read from a directory's own config document."""

    mode: str = "blacklist"
    hide: bool = False
    list: tuple[str, ...] = ()
    default_layout: str = DEFAULT_VALUE
    default_style: str = DEFAULT_VALUE
    default_fit: str = DEFAULT_VALUE


DEFAULT_CONFIG = GlobalConfig()
DEFAULT_DIR_CONFIG = DirConfig()


@dataclass(slots=True)
class CachedValue(Generic[T]):
    value: T
    expires: float


def monotonic_ms() -> float:
    return time.monotonic() * 1000


def resolve_default(requested: str, directory_value: str, global_value: str) -> str:
    """Pick the first concrete value of request, directory and global settings."""
    if requested != DEFAULT_VALUE:
        return requested
    if directory_value != DEFAULT_VALUE:
        return directory_value
    return global_value


class _Merger:
    """Field-by-field reader over a loaded document.

    Each accessor returns the document's value when present and well formed,
    otherwise the default. Malformed values are logged and ignored.
    """

    def __init__(self, document: dict[str, Any], source: str) -> None:
        self.document = document
        self.source = source

    def _invalid(self, key: str, default: Any) -> Any:
        logger.warning("Ignoring invalid %r in %s: %r", key, self.source, self.document[key])
        return default

    def choice(self, key: str, allowed: Iterable[str], default: str) -> str:
        if key not in self.document:
            return default
        value = self.document[key]
        if isinstance(value, str) and value in allowed:
            return value
        return self._invalid(key, default)

    def flag(self, key: str, default: bool) -> bool:
        if key not in self.document:
            return default
        value = self.document[key]
        if isinstance(value, bool):
            return value
        return self._invalid(key, default)

    def text(self, key: str, default: str) -> str:
        if key not in self.document:
            return default
        value = self.document[key]
        if isinstance(value, str):
            return value
        return self._invalid(key, default)

    def strings(self, key: str, default: tuple[str, ...]) -> tuple[str, ...]:
        if key not in self.document:
            return default
        value = self.document[key]
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return tuple(value)
        return self._invalid(key, default)

    def extensions(
            self,
            key: str,
            default: tuple[str, ...] | None,
            enabled: tuple[str, ...],
    ) -> tuple[str, ...] | None:
        """Extension list, ``false`` to disable, or ``true`` for *enabled*."""
        if key not in self.document:
            return default
        value = self.document[key]
        if value is False:
            return None
        if value is True:
            return enabled
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return tuple(value)
        return self._invalid(key, default)

    def milliseconds(self, key: str, default: int) -> int:
        if key not in self.document:
            return default
        value = self.document[key]
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
            return int(value)
        return self._invalid(key, default)


def merge_global_config(document: dict[str, Any], source: str = MAIN_CONFIG_PATH) -> GlobalConfig:
    """Overlay a global document on the defaults, one recognised key at a time."""
    d = DEFAULT_CONFIG
    m = _Merger(document, source)
    return GlobalConfig(
        mode=m.choice("mode", MODES, d.mode),
        render_thumbnails=m.extensions("renderThumbnails", d.render_thumbnails, DEFAULT_THUMBNAIL_EXTENSIONS),
        hide_raws=m.extensions("hideRaws", d.hide_raws, ()),
        raw_strategy=m.choice("rawStrategy", RAW_STRATEGIES, d.raw_strategy),
        show_exif=m.extensions("showExif", d.show_exif, DEFAULT_EXIF_EXTENSIONS),
        whitelist=m.strings("whitelist", d.whitelist),
        directory_config_name=m.text("directoryConfigName", d.directory_config_name),
        hide_prefix=m.text("hidePrefix", d.hide_prefix),
        conf_expire_ms=m.milliseconds("confExpireMs", d.conf_expire_ms),
        default_layout=m.choice("defaultLayout", LAYOUTS, d.default_layout),
        default_style=m.choice("defaultStyle", STYLES, d.default_style),
        default_fit=m.choice("defaultFit", FITS, d.default_fit),
    )


def merge_dir_config(document: dict[str, Any], source: str) -> DirConfig:
    """Overlay a directory document on the directory defaults."""
    d = DEFAULT_DIR_CONFIG
    m = _Merger(document, source)
    return DirConfig(
        mode=m.choice("mode", DIR_MODES, d.mode),
        hide=m.flag("hide", d.hide),
        list=m.strings("list", d.list),
        default_layout=m.choice("defaultLayout", (*LAYOUTS, DEFAULT_VALUE), d.default_layout),
        default_style=m.choice("defaultStyle", (*STYLES, DEFAULT_VALUE), d.default_style),
        default_fit=m.choice("defaultFit", (*FITS, DEFAULT_VALUE), d.default_fit),
    )


def parse_document(raw: bytes, source: str) -> dict[str, Any]:
    """Decode a JSON config document that must hold an object."""
    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigParseError(f"{source}: {exc}") from exc
    if not isinstance(document, dict):
        raise ConfigParseError(f"{source}: expected a JSON object")
    return document


async def read_document(storage: Storage, path: str) -> dict[str, Any]:
    """Load a config document, substituting ``{}`` for anything unusable."""
    try:
        raw = await storage.read_file(path)
    except NotFoundError:
        logger.debug("No config document at %s", path)
        return {}
    except OSError as exc:
        logger.warning("Cannot read config document %s: %s", path, exc)
        return {}

    try:
        return parse_document(raw, path)
    except ConfigParseError as exc:
        logger.warning("Falling back to defaults, malformed config: %s", exc)
        return {}


class ConfigStore:
    """Cached access to the global configuration.

    Concurrent callers that miss at the same time may each reload; the last one
    to finish wins the cache slot. Every reload is a pure function of the file
    contents, so any of those values is acceptable.
    """

    def __init__(
            self,
            storage: Storage,
            *,
            clock: Callable[[], float] = monotonic_ms,
            path: str = MAIN_CONFIG_PATH,
    ) -> None:
        self.storage = storage
        self.path = path
        self._clock = clock
        self._cached: CachedValue[GlobalConfig] | None = None

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    async def get(self) -> GlobalConfig:
        cached = self._cached
        if cached is not None and self._clock() < cached.expires:
            return cached.value

        document = await read_document(self.storage, self.path)
        value = merge_global_config(document, self.path)
        self._cached = CachedValue(value=value, expires=self._clock() + value.conf_expire_ms)
        logger.debug("Loaded global config from %s", self.path)
        return value


class DirConfigStore:
    """Cached per-directory configuration, one slot per directory path.

    Slots are never evicted: a long running process keeps one small entry for
    every distinct directory it has been asked about.
    """

    def __init__(self, config: ConfigStore, *, clock: Callable[[], float] | None = None) -> None:
        self.config = config
        self._clock = clock or config.clock
        self._cache: dict[str, CachedValue[DirConfig]] = {}

    async def get(self, dir_path: str) -> DirConfig:
        key = logical_path(dir_path)
        cached = self._cache.get(key)
        if cached is not None and self._clock() < cached.expires:
            return cached.value

        conf = await self.config.get()
        path = join_path(key, conf.directory_config_name)
        document = await read_document(self.config.storage, path)
        value = merge_dir_config(document, path)
        self._cache[key] = CachedValue(value=value, expires=self._clock() + conf.conf_expire_ms)
        logger.debug("Loaded directory config for %s", key)
        return value

    def __len__(self) -> int:
        return len(self._cache)

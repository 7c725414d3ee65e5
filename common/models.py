"""Shared data models for the browse core and its collaborators."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class FileType(str, Enum):
    """Broad media category used to pick a viewer."""
    IMAGE = "image"
    IMAGE_RAW = "image-raw"
    VIDEO = "video"
    TEXT = "text"
    AUDIO = "audio"
    UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class Entry:
    """A single child of a listed directory.

    ``path`` is the logical path relative to the media root and always starts
    with ``/``. ``thumbnail`` holds the logical source path of the image a
    derivative can be made from, or ``None`` when the entry is not eligible.
    """

    name: str
    path: str
    is_dir: bool
    thumbnail: str | None = None


@dataclass(slots=True, frozen=True)
class NavigationResult:
    """Position of a file among its visible siblings."""

    base: str
    previous: str | None
    next: str | None
    position: int
    count: int


@dataclass(slots=True, frozen=True)
class PathSection:
    """One breadcrumb element of a logical path."""

    name: str
    path: str


@dataclass(slots=True, frozen=True)
class RawFile:
    """A raw sibling associated with a displayed image."""

    name: str
    path: str


@dataclass(slots=True, frozen=True)
class DerivativeResult:
    """Outcome of materialising one thumbnail derivative."""

    source: str
    path: Path | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

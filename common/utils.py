"""Shared helpers for logical media paths and file types."""
from __future__ import annotations

import logging
import mimetypes
import os
import posixpath
from pathlib import Path

from common.models import FileType, PathSection

logger = logging.getLogger(__name__)

SEP = "/"

RECOGNISED_MIME_TYPES: dict[str, FileType] = {
    "image/png": FileType.IMAGE,
    "image/svg+xml": FileType.IMAGE,
    "image/jpeg": FileType.IMAGE,
    "image/gif": FileType.IMAGE,
    "image/webp": FileType.IMAGE,
    "image/tiff": FileType.IMAGE_RAW,
    "video/mp4": FileType.VIDEO,
    "video/x-matroska": FileType.VIDEO,
    "video/webm": FileType.VIDEO,
    "video/quicktime": FileType.VIDEO,
}

# Not every platform ships these in its mime.types
mimetypes.add_type("video/x-matroska", ".mkv")
mimetypes.add_type("image/webp", ".webp")


def normalize_path(path: str) -> str:
    """Normalise a logical path to ``/a/b`` form.

    The empty string, ``.`` and ``/`` all mean the media root. Any ``..``
    segment is rejected rather than collapsed.
    """
    if "\x00" in path:
        raise ValueError("Invalid path: contains NUL byte")
    parts = [p for p in path.replace("\\", SEP).split(SEP) if p and p != "."]
    if ".." in parts:
        raise ValueError("Invalid path: parent references are not allowed")
    return SEP + SEP.join(parts)


def parent_path(path: str) -> str:
    """Return the logical parent of *path*; the root is its own parent."""
    return posixpath.dirname(normalize_path(path))


def join_path(directory: str, name: str) -> str:
    return posixpath.join(normalize_path(directory), name)


def extension(name: str) -> str:
    """Lowercased extension of *name* including the dot, or ``""``."""
    return os.path.splitext(name)[1].lower()


def resolve_under(root: Path, path: str) -> Path:
    """Map a logical path to a filesystem path that must stay inside *root*."""
    logical = normalize_path(path)
    base = root.resolve()
    target = (base / logical.lstrip(SEP)).resolve()
    if not target.is_relative_to(base):
        raise ValueError(f"Path escapes the media root: {logical}")
    return target


def path_sections(path: str) -> list[PathSection]:
    """Breadcrumb sections for *path*, starting with the root."""
    sections = [PathSection(name="", path=SEP)]
    current = ""
    for part in normalize_path(path).split(SEP):
        if not part:
            continue
        current = f"{current}{SEP}{part}"
        sections.append(PathSection(name=part, path=current))
    return sections


def file_type(name: str) -> FileType:
    """Guess the media category of a file from its name."""
    mime, _ = mimetypes.guess_type(name, strict=False)
    if not mime:
        return FileType.UNKNOWN
    if mime.startswith("text/"):
        return FileType.TEXT
    if mime.startswith("audio/"):
        return FileType.AUDIO
    kind = RECOGNISED_MIME_TYPES.get(mime, FileType.UNKNOWN)
    if kind is FileType.UNKNOWN:
        logger.debug("Unrecognised mime type %s for %s", mime, name)
    return kind

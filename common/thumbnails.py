"""Shared thumbnail generation utilities."""
from __future__ import annotations

from pathlib import Path

from PIL import Image, ImageOps

# Thumbnail configuration
THUMB_MAX_DIMENSION = 320
THUMB_JPEG_QUALITY = 82


def _output_format(destination: Path) -> str:
    """Pick the Pillow save format from the destination suffix."""
    fmt = Image.registered_extensions().get(destination.suffix.lower())
    if fmt is None:
        raise ValueError(f"Unsupported thumbnail format: {destination.suffix}")
    return fmt


def resize_image(
        source: Path,
        destination: Path,
        max_width: int = THUMB_MAX_DIMENSION,
        max_height: int = THUMB_MAX_DIMENSION,
        *,
        fmt: str | None = None,
) -> None:
    """Write a copy of *source* that fits inside ``max_width`` x ``max_height``.

    Orientation is normalised from the EXIF tag before resizing and the aspect
    ratio is preserved. The save format comes from *fmt* or, when omitted, from
    the destination suffix.

    Args:
        source: Path to the source image
        destination: Where the derivative is written
        max_width: Maximum width of the derivative
        max_height: Maximum height of the derivative
        fmt: Pillow format name, e.g. ``"JPEG"``
    """
    fmt = fmt or _output_format(destination)
    with Image.open(source) as img:
        img = ImageOps.exif_transpose(img)
        img.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)

        if fmt == "JPEG":
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            img.save(destination, fmt, quality=THUMB_JPEG_QUALITY, optimize=True, progressive=True)
        else:
            img.save(destination, fmt)

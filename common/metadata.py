"""EXIF metadata extraction backed by Pillow."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PIL import ExifTags, Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

_EXIF_IFD = 0x8769


def _plain(value: Any) -> Any:
    """Convert Pillow EXIF values into JSON friendly types."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").rstrip("\x00")
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    try:
        if hasattr(value, "numerator") and not isinstance(value, int):
            return float(value)
    except ZeroDivisionError:
        return None
    return value


def read_exif(path: Path) -> dict[str, Any] | None:
    """Return the image's EXIF tags keyed by name, or ``None`` when absent.

    Tags from the main IFD and the Exif sub-IFD are merged into one mapping.
    """
    try:
        with Image.open(path) as img:
            exif = img.getexif()
    except (OSError, UnidentifiedImageError) as exc:
        logger.debug("Cannot read EXIF from %s: %s", path, exc)
        return None

    if not exif:
        return None

    tags: dict[str, Any] = {}
    for ifd in (dict(exif), dict(exif.get_ifd(_EXIF_IFD))):
        for tag_id, value in ifd.items():
            if tag_id == _EXIF_IFD:
                continue
            name = ExifTags.TAGS.get(tag_id, str(tag_id))
            tags[name] = _plain(value)
    return tags or None


def summarize_exif(tags: dict[str, Any]) -> dict[str, str]:
    """Human readable camera settings from raw EXIF tags.

    Empty unless aperture, exposure time and focal length are all present.
    """
    f_number = tags.get("FNumber")
    exposure = tags.get("ExposureTime")
    focal_length = tags.get("FocalLength")
    if not f_number or not exposure or not focal_length:
        return {}

    if exposure >= 1:
        exposure_text = f"{exposure:.2g}s"
    else:
        inverse = 1 / exposure
        exposure_text = f"1/{inverse:.0f}s" if inverse > 100 else f"1/{inverse:.2g}s"

    iso = tags.get("ISOSpeedRatings")
    if isinstance(iso, list):
        iso = iso[0] if iso else None

    return {
        "FNumber": f"f/{f_number:.2g}",
        "Exposure": exposure_text,
        "FocalLength": f"{focal_length:.0f}mm",
        "ISO": str(iso) if iso is not None else "??",
    }

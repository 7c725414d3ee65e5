from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

__all__ = ["PARTIAL_PREFIX", "discard_partial", "publish", "staged_file"]

PARTIAL_PREFIX = ".~"


def discard_partial(path: Path) -> None:
    """Remove an unfinished file; one that is already gone is not an error."""

    target = Path(path)
    if target.is_dir():
        message = f"Refusing to discard a directory: {target}"
        logger.error(message)
        raise IsADirectoryError(message)

    try:
        target.unlink()
    except FileNotFoundError:
        logger.debug("Partial file already gone: %s", target)
    except OSError as exc:  # pragma: no cover - exercised in failure cases
        message = f"Unable to discard {target}: {exc}"
        logger.error(message)
        raise OSError(message) from exc
    else:
        logger.debug("Discarded partial file: %s", target)


def publish(partial: Path, destination: Path) -> None:
    """Move a finished *partial* over *destination* in a single rename.

    Readers see either no file or the complete one.
    """

    origin = Path(partial)
    target = Path(destination)

    if not origin.is_file():
        message = f"Nothing was written to {origin}"
        logger.error(message)
        raise FileNotFoundError(message)

    try:
        origin.replace(target)
    except OSError as exc:  # pragma: no cover - exercised in failure cases
        message = f"Unable to publish {origin} -> {target}: {exc}"
        logger.error(message)
        raise OSError(message) from exc
    else:
        logger.debug("Published %s", target)


@contextmanager
def staged_file(destination: Path) -> Iterator[Path]:
    """Yield a private sibling of *destination* and publish it when the block succeeds.

    The sibling keeps the destination suffix so writers can infer the format
    from it. It is discarded when the block raises.
    """

    target = Path(destination)
    target.parent.mkdir(parents=True, exist_ok=True)
    partial = target.with_name(f"{PARTIAL_PREFIX}{uuid.uuid4().hex}{target.suffix}")
    try:
        yield partial
        publish(partial, target)
    finally:
        if partial.exists():
            discard_partial(partial)

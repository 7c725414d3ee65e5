"""Shared fixtures for browse tests."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
from PIL import Image

from browse.services import Browser


class FakeClock:
	"""Millisecond clock that only moves when told to."""

	def __init__(self, now: float = 1_000.0) -> None:
		self.now = now

	def __call__(self) -> float:
		return self.now

	def advance(self, ms: float) -> None:
		self.now += ms


class CountingResizer:
	"""Resizer double that records calls and writes a small marker file."""

	def __init__(self, fail_on: set[str] | None = None) -> None:
		self.calls: list[Path] = []
		self.fail_on = fail_on or set()

	def __call__(self, source: Path, destination: Path, max_width: int, max_height: int) -> None:
		self.calls.append(source)
		if source.name in self.fail_on:
			raise OSError(f"cannot identify image file {source.name}")
		destination.write_bytes(b"thumb:" + source.name.encode())


def write_json(path: Path, document: object) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(json.dumps(document), encoding="utf-8")
	return path


def write_image(path: Path, size: tuple[int, int] = (640, 360), color: tuple[int, int, int] = (80, 80, 80)) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	Image.new("RGB", size, color).save(path, format="JPEG", quality=90)
	return path


def make_tree(root: Path, files: dict[str, bytes | None]) -> Path:
	"""Create files (bytes) and directories (``None``) below *root*."""
	for rel, data in files.items():
		target = root / rel
		if data is None:
			target.mkdir(parents=True, exist_ok=True)
		else:
			target.parent.mkdir(parents=True, exist_ok=True)
			target.write_bytes(data)
	return root


@pytest.fixture()
def media_root(tmp_path: Path) -> Path:
	root = tmp_path / "media"
	root.mkdir()
	return root


@pytest.fixture()
def thumb_root(tmp_path: Path) -> Path:
	return tmp_path / "thumbs"


@pytest.fixture()
def clock() -> FakeClock:
	return FakeClock()


@pytest.fixture()
def resizer() -> CountingResizer:
	return CountingResizer()


@pytest.fixture()
def browser(media_root: Path, thumb_root: Path, clock: FakeClock, resizer: CountingResizer) -> Browser:
	return Browser(media_root, thumb_root, resizer=resizer, clock=clock)

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from browse.errors import ForbiddenError, NotFoundError
from browse.services import Browser

from .conftest import make_tree, write_json


def _names(entries) -> list[str]:
	return [e.name for e in entries]


def test_directories_sorted_before_files(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {
		"b.png": b"x",
		"zeta": None,
		"a.png": b"x",
		"alpha": None,
		"c.txt": b"x",
	})

	entries = asyncio.run(browser.lister.list("/"))

	assert _names(entries) == ["alpha", "zeta", "a.png", "b.png", "c.txt"]
	assert [e.is_dir for e in entries] == [True, True, False, False, False]


def test_listing_is_idempotent(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {f"img{i:02d}.jpg": b"x" for i in range(20)})
	make_tree(media_root, {"sub": None, "other": None})

	first = asyncio.run(browser.lister.list("/"))
	second = asyncio.run(browser.lister.list("/"))

	assert first == second


def test_entries_carry_logical_paths(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"trips/2024/a.jpg": b"x", "trips/2024/day1": None})

	entries = asyncio.run(browser.lister.list("trips/2024/"))

	assert [e.path for e in entries] == ["/trips/2024/day1", "/trips/2024/a.jpg"]


def test_thumbnail_annotation_is_case_insensitive(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"A.JPG": b"x", "b.png": b"x", "c.gif": b"x", "d.jpg": None})

	by_name = {e.name: e for e in asyncio.run(browser.lister.list("/"))}

	assert by_name["A.JPG"].thumbnail == "/A.JPG"
	assert by_name["b.png"].thumbnail == "/b.png"
	assert by_name["c.gif"].thumbnail is None
	assert by_name["d.jpg"].thumbnail is None


def test_thumbnail_annotation_follows_current_config(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"a.jpg": b"x"})
	write_json(media_root / ".~main-conf.json", {"renderThumbnails": False})

	entries = asyncio.run(browser.lister.list("/"))

	assert entries[0].thumbnail is None


def test_config_documents_and_hidden_names_are_not_listed(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {".hidden": None, ".cover.jpg": b"x", "a.jpg": b"x"})
	write_json(media_root / ".~main-conf.json", {})
	write_json(media_root / ".~conf.json", {})

	assert _names(asyncio.run(browser.lister.list("/"))) == ["a.jpg"]


def test_missing_directory_not_found(browser: Browser) -> None:
	with pytest.raises(NotFoundError):
		asyncio.run(browser.lister.list("/nope"))


def test_file_path_not_found(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"a.jpg": b"x"})
	with pytest.raises(NotFoundError):
		asyncio.run(browser.lister.list("/a.jpg"))


def test_parent_traversal_not_found(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"sub": None})
	with pytest.raises(NotFoundError):
		asyncio.run(browser.lister.list("/sub/../.."))


def test_symlink_escaping_root_not_found(browser: Browser, media_root: Path, tmp_path: Path) -> None:
	outside = tmp_path / "outside"
	outside.mkdir()
	(media_root / "link").symlink_to(outside, target_is_directory=True)
	with pytest.raises(NotFoundError):
		asyncio.run(browser.lister.list("/link"))


def test_whitelist_scenario(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"pub/a/one.jpg": b"x", "pub/a/two.jpg": b"x", "priv/secret.jpg": b"x"})
	write_json(media_root / ".~main-conf.json", {"mode": "whitelist", "whitelist": ["/pub"]})

	assert _names(asyncio.run(browser.lister.list("/pub/a"))) == ["one.jpg", "two.jpg"]
	with pytest.raises(ForbiddenError):
		asyncio.run(browser.lister.list("/priv"))


def test_whitelist_denies_ancestors_of_whitelisted_directory(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"pub/a": None, "pub/b": None})
	write_json(media_root / ".~main-conf.json", {"mode": "whitelist", "whitelist": ["/pub/a"]})

	with pytest.raises(ForbiddenError):
		asyncio.run(browser.lister.list("/pub"))
	assert asyncio.run(browser.lister.list("/pub/a")) == []


def test_blacklist_scenario(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"x/a.png": b"x", "x/secret.png": b"x", "x/b.png": b"x"})
	write_json(media_root / "x" / ".~conf.json", {"mode": "blacklist", "list": ["secret.png"]})

	assert _names(asyncio.run(browser.lister.list("/x"))) == ["a.png", "b.png"]


def test_directory_whitelist(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"x/a.png": b"x", "x/b.png": b"x", "x/sub": None})
	write_json(media_root / "x" / ".~conf.json", {"mode": "whitelist", "list": ["b.png", "sub"]})

	assert _names(asyncio.run(browser.lister.list("/x"))) == ["sub", "b.png"]


def test_hidden_directory_lists_nothing(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"x/a.png": b"x", "x/sub": None})
	write_json(media_root / "x" / ".~conf.json", {"hide": True})

	assert asyncio.run(browser.lister.list("/x")) == []


def test_raw_files_hidden_from_listing(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"img.jpg": b"x", "img.raw": b"x", "IMG2.RAW": b"x"})
	write_json(media_root / ".~main-conf.json", {"hideRaws": [".raw"], "rawStrategy": "replace"})

	assert _names(asyncio.run(browser.lister.list("/"))) == ["img.jpg"]


def test_parent_entry_added_below_root(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"a/b/c.jpg": b"x"})

	entries = asyncio.run(browser.lister.list("/a/b", with_parent=True))

	assert entries[0].name == ".."
	assert entries[0].path == "/a"
	assert entries[0].is_dir
	assert _names(entries[1:]) == ["c.jpg"]


def test_parent_entry_of_top_level_directory_is_root(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"a": None})
	entries = asyncio.run(browser.lister.list("/a", with_parent=True))
	assert entries[0].path == "/"


def test_no_parent_entry_at_root(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"a.jpg": b"x"})
	entries = asyncio.run(browser.lister.list("/", with_parent=True))
	assert _names(entries) == ["a.jpg"]


def test_listing_reflects_directory_changes(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"a.jpg": b"x"})
	assert _names(asyncio.run(browser.lister.list("/"))) == ["a.jpg"]

	(media_root / "b.jpg").write_bytes(b"x")
	assert _names(asyncio.run(browser.lister.list("/"))) == ["a.jpg", "b.jpg"]


def test_names_sorted_ignoring_case(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"Zeta.jpg": b"x", "alpha.jpg": b"x", "Beta": None, "apple": None})

	assert _names(asyncio.run(browser.lister.list("/"))) == ["apple", "Beta", "alpha.jpg", "Zeta.jpg"]


def test_names_differing_only_in_case_keep_a_stable_order(browser: Browser, media_root: Path) -> None:
	make_tree(media_root, {"b.jpg": b"x", "B.jpg": b"x", "a.jpg": b"x"})

	assert _names(asyncio.run(browser.lister.list("/"))) == ["a.jpg", "B.jpg", "b.jpg"]

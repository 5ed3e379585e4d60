"""
Tests for the usage index and the Textual browser.
"""

import os

import pytest

from core import compute_size
from inode_tracker import InodeTracker
import tui_browser
from tui_browser import UsageIndex, UsageTUI, scan_usage


def build_tree(root):
    """root/big/data (64 KiB), root/small (1 byte), root/link -> hard link of small."""
    big = os.path.join(root, "big")
    os.mkdir(big)
    with open(os.path.join(big, "data"), "wb") as f:
        f.write(b"x" * 65536)
    with open(os.path.join(root, "small"), "wb") as f:
        f.write(b"x")
    os.link(os.path.join(root, "small"), os.path.join(root, "link"))
    return big


def test_scan_usage_matches_walker_total(tmp_path):
    root = str(tmp_path)
    build_tree(root)

    index = scan_usage(root)

    assert index.total(root) == compute_size(root, InodeTracker(), False, report=lambda *_: None)
    assert index.errors == []


def test_children_sorted_largest_first(tmp_path):
    root = str(tmp_path)
    big = build_tree(root)

    rows = scan_usage(root).children(root)

    assert [row.entry.name for row in rows][0] == "big"
    assert sorted(row.entry.name for row in rows) == ["big", "link", "small"]
    assert rows[0].is_dir
    linked = [row for row in rows if row.entry.name in ("link", "small")]
    assert all(row.entry.is_hardlink for row in linked)
    assert sorted(row.units for row in linked)[0] == 0
    assert [row.entry.name for row in scan_usage(root).children(big)] == ["data"]


def test_index_ignores_root_as_child():
    index = UsageIndex("d")
    index(3, "d/f")
    index(7, "d")

    assert index.total("d") == 7
    assert "d" in index
    assert "missing" not in index
    assert index._children == {"d": ["d/f"]}


@pytest.mark.asyncio
async def test_browser_navigation(tmp_path):
    root = str(tmp_path)
    big = build_tree(root)
    app = UsageTUI(start_dir=root)

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.current_dir == root
        assert app.rows[0].entry.path == big

        await pilot.press("l")
        await pilot.pause()
        assert app.current_dir == big
        assert [row.entry.name for row in app.rows] == ["data"]

        await pilot.press("h")
        await pilot.pause()
        assert app.current_dir == root
        assert app.cursor_index == 0

        # never above the scanned root
        await pilot.press("h")
        await pilot.pause()
        assert app.current_dir == root

        await pilot.press("j")
        await pilot.pause()
        assert app.cursor_index == 1

        await pilot.press("l")
        await pilot.pause()
        assert app.current_dir == root


@pytest.mark.asyncio
async def test_browser_trims_trailing_slash(tmp_path):
    root = str(tmp_path)
    big = build_tree(root)
    app = UsageTUI(start_dir=root + "//")

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.scan_root == root
        assert app.rows[0].entry.path == big
        assert sorted(row.entry.name for row in app.rows) == ["big", "link", "small"]


def test_vanished_entry_is_dropped_quietly(tmp_path, monkeypatch):
    root = str(tmp_path)
    build_tree(root)
    index = scan_usage(root)
    os.remove(os.path.join(root, "small"))
    logged = []
    monkeypatch.setattr(tui_browser.logger, "error", lambda message: logged.append(message))

    names = [row.entry.name for row in index.children(root)]

    assert names == ["big", "link"]
    assert logged == []

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TUI browser for du using Textual, providing nnn-like navigation of a usage tree.

The tree is measured once with the same walker as the plain report (all files
included), then browsed directory by directory, largest entries first. Navigation
never leaves the scanned root.
"""

import os
import sys
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional
from textual.app import App, ComposeResult
from textual.widgets import Header, Footer, DataTable
from rich.text import Text
from logger_utils import get_logger
from config import TUI_KEYBINDS
from core import DirEntry, EntryKind, compute_size
from inode_tracker import InodeTracker
from du import trim_path

logger = get_logger("du.tui")


@dataclass
class UsageRow:
    entry: DirEntry
    units: int  # units contributed to the parent total (0 for an already counted hard link)

    @property
    def is_dir(self) -> bool:
        return self.entry.kind is EntryKind.DIRECTORY


class UsageIndex:
    """
    Reporter that keeps every (units, path) pair of a walk, grouped by parent directory.

    Pass an instance as the report callback of compute_size, then report the root.
    """

    def __init__(self, root: str):
        self.scan_root = root
        self.sizes: Dict[str, int] = {}
        self.errors: List[str] = []
        self._children: Dict[str, List[str]] = defaultdict(list)

    def __call__(self, units: int, path: str) -> None:
        self.sizes[path] = units
        if path != self.scan_root:
            self._children[os.path.dirname(path)].append(path)

    def record_error(self, path: str, error: OSError) -> None:
        self.errors.append(path)

    def total(self, path: str) -> int:
        return self.sizes.get(path, 0)

    def __contains__(self, path) -> bool:
        return path in self.sizes

    def children(self, dir_path: str) -> List[UsageRow]:
        """Entries reported directly under dir_path, largest first."""
        rows = []
        for path in self._children.get(dir_path, []):
            try:
                entry = DirEntry.from_stat(path, os.lstat(path))
            except OSError as e:
                logger.debug(f"Entry vanished since scan: {path}: {e}")
                continue
            rows.append(UsageRow(entry=entry, units=self.sizes[path]))
        rows.sort(key=lambda row: (-row.units, row.entry.name))
        return rows


def scan_usage(path: str) -> UsageIndex:
    """Measure path with every regular file reported and return the collected index."""
    index = UsageIndex(path)
    total = compute_size(path, InodeTracker(), True, report=index, on_error=index.record_error)
    index(total, path)
    logger.info(f"Scanned '{path}': {total} units, {len(index.sizes)} entries, {len(index.errors)} errors")
    return index


class UsageTUI(App):
    CSS_PATH = None
    BINDINGS = TUI_KEYBINDS

    def __init__(self, start_dir: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Children are keyed by os.path.dirname, which never ends in a slash
        start_dir, _ = trim_path(start_dir)
        self.scan_root = start_dir
        self.current_dir = start_dir
        self.usage: Optional[UsageIndex] = None
        self.rows: List[UsageRow] = []
        self.cursor_index = 0

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield DataTable(id="usagetable")
        yield Footer()

    async def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.add_columns("#", "Name", "Type", "Size", "Links")
        self.rescan()
        table.focus()

    def rescan(self) -> None:
        self.usage = scan_usage(self.scan_root)
        if self.current_dir not in self.usage:
            self.current_dir = self.scan_root
        self.load_directory(self.current_dir, preserve_cursor_index=self.cursor_index)

    def load_directory(self, path: str, preserve_cursor_index: Optional[int] = None) -> None:
        """Loads a directory's usage rows into the DataTable, optionally preserving cursor position."""
        self.current_dir = path
        logger.debug(f"[load_directory] Loading directory: {path}")
        self.rows = self.usage.children(path)

        table = self.query_one(DataTable)
        table.clear()
        for idx, row in enumerate(self.rows):
            name_text = Text(row.entry.name)
            if row.is_dir:
                name_text.stylize("bold blue")
                kind = "Dir"
            elif row.entry.is_hardlink:
                name_text.stylize("magenta")
                kind = "Hardlink"
            else:
                kind = "File"
            table.add_row(
                str(idx + 1),
                name_text,
                kind,
                str(row.units),
                Text(str(row.entry.nlink), style="magenta") if row.entry.is_hardlink and not row.is_dir else "",
            )

        if preserve_cursor_index is not None and 0 <= preserve_cursor_index < len(self.rows):
            self.cursor_index = preserve_cursor_index
        else:
            self.cursor_index = 0
        if self.rows:
            table.move_cursor(row=self.cursor_index)

        self.sub_title = f"{path}  ({self.usage.total(path)} units)"

    def action_move_up(self):
        if self.cursor_index > 0:
            self.cursor_index -= 1
            self.query_one(DataTable).move_cursor(row=self.cursor_index)

    def action_move_down(self):
        if self.cursor_index < len(self.rows) - 1:
            self.cursor_index += 1
            self.query_one(DataTable).move_cursor(row=self.cursor_index)

    def action_go_up(self):
        if self.current_dir == self.scan_root:
            self.bell()
            return
        child = self.current_dir
        parent = os.path.dirname(child)
        logger.debug(f"[go_up] Current: {child}, Parent: {parent}")
        siblings = [row.entry.path for row in self.usage.children(parent)]
        self.load_directory(parent, preserve_cursor_index=siblings.index(child) if child in siblings else 0)

    def action_enter_dir(self):
        if not self.rows or self.cursor_index >= len(self.rows):
            logger.debug("[enter_dir] No items to enter.")
            return
        row = self.rows[self.cursor_index]
        if not row.is_dir:
            self.bell()
            return
        logger.debug(f"[enter_dir] Entering: {row.entry.path}")
        self.load_directory(row.entry.path, preserve_cursor_index=0)

    def action_rescan(self):
        self.rescan()

    def action_quit(self):
        self.exit()

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self.cursor_index = event.cursor_row

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.cursor_index = event.cursor_row
        self.action_enter_dir()

    def on_unmount(self) -> None:
        logger.info("du TUI session ended.")


if __name__ == "__main__":
    start_dir = sys.argv[1] if len(sys.argv) > 1 else "."
    UsageTUI(start_dir=start_dir).run()

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Core disk usage logic: recursive directory sizing with hard link deduplication."""

import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple
from logger_utils import get_logger
from config import BLOCKS_PER_UNIT
from inode_tracker import InodeTracker

logger = get_logger("du.core")

Reporter = Callable[[int, str], None]
ErrorHandler = Callable[[str, OSError], None]


class EntryKind(Enum):
    """Classification of a directory entry."""

    DIRECTORY = "dir"
    REGULAR = "file"
    OTHER = "other"


def classify(mode: int) -> EntryKind:
    """Classify an lstat mode. Symlinks, devices, sockets and fifos are OTHER."""
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntryKind.REGULAR
    return EntryKind.OTHER


def units_from_stat(st: os.stat_result) -> int:
    """Convert the allocated block count of a stat result into reporting units."""
    return st.st_blocks // BLOCKS_PER_UNIT


@dataclass
class DirEntry:
    path: str
    name: str
    kind: EntryKind
    nlink: int
    inode: Tuple[int, int]
    units: int

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "DirEntry":
        return cls(
            path=path,
            name=os.path.basename(path),
            kind=classify(st.st_mode),
            nlink=st.st_nlink,
            inode=(st.st_dev, st.st_ino),
            units=units_from_stat(st),
        )

    @property
    def is_hardlink(self) -> bool:
        return self.nlink > 1


def file_units(entry: DirEntry, tracker: InodeTracker) -> int:
    """
    Units a regular file contributes to its directory total.

    A multiply-linked file contributes its allocation the first time any of its
    links is seen and zero afterwards.
    """
    if entry.is_hardlink and not tracker.record_if_new(entry.inode):
        return 0
    return entry.units


def print_size(units: int, path: str) -> None:
    print(f"{units}\t{path}")


def _entry_failed(path: str, error: OSError, on_error: Optional[ErrorHandler]) -> None:
    logger.warning(f"cannot access '{path}': {error.strerror or error}")
    if on_error is not None:
        on_error(path, error)


def compute_size(path: str, tracker: InodeTracker, report_all_files: bool = False,
                 report: Reporter = print_size, on_error: Optional[ErrorHandler] = None) -> int:
    """
    Recursively compute the disk usage of a directory.

    Every subdirectory is reported as (units, path) once its own total is known, so
    the output runs depth-first with children before their parent. Regular files are
    reported only when report_all_files is set, including hard links that were
    deduplicated to zero. Symlinks and other non-regular entries are neither counted,
    reported nor followed. The caller reports the root path itself.

    Args:
        path: Directory to measure.
        tracker: Inode tracker shared across the whole walk.
        report_all_files: Also report individual regular files.
        report: Callback receiving (units, path) pairs.
        on_error: Optional callback invoked with (path, error) for each entry that
                  could not be read. The entry contributes zero and the scan goes on.

    Returns:
        Total units used by the directory and everything beneath it, including
        the directory's own allocation.
    """
    total = 0

    # The "." entry: the directory's own allocation, never reported on its own
    try:
        total += units_from_stat(os.lstat(os.path.join(path, os.curdir)))
    except OSError as e:
        _entry_failed(path, e, on_error)

    try:
        scanner = os.scandir(path)
    except OSError as e:
        _entry_failed(path, e, on_error)
        return total

    logger.debug(f"Scanning directory: {path}")
    # os.scandir never yields "." or "..", so the walk cannot climb back up
    with scanner:
        while True:
            try:
                dir_entry = next(scanner)
            except StopIteration:
                break
            except OSError as e:
                _entry_failed(path, e, on_error)
                break

            try:
                st = dir_entry.stat(follow_symlinks=False)
            except OSError as e:
                _entry_failed(dir_entry.path, e, on_error)
                continue
            entry = DirEntry.from_stat(dir_entry.path, st)

            if entry.kind is EntryKind.DIRECTORY:
                size = compute_size(entry.path, tracker, report_all_files, report, on_error)
                report(size, entry.path)
                total += size
            elif entry.kind is EntryKind.REGULAR:
                size = file_units(entry, tracker)
                if report_all_files:
                    report(size, entry.path)
                total += size

    return total


def stat_path(path: str) -> DirEntry:
    """Describe a command-line path, following a symlink given there."""
    return DirEntry.from_stat(path, os.stat(path))

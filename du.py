#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
du - summarize disk usage of a directory, recursively.

Usage: du [-a | --all] [-i | --interactive] [DIRECTORY]

Prints "<units>\t<path>" for every directory below DIRECTORY (and for every file
with -a), children before their parent, and the total for DIRECTORY last. Units
are 1024 bytes. Files with several hard links are counted once.
"""

import argparse
import os
import sys
from typing import List, Optional, Tuple
from logger_utils import get_logger
from config import DEFAULT_PATH
from core import EntryKind, compute_size, print_size, stat_path
from inode_tracker import InodeTracker

logger = get_logger("du.cli")


class UsageParser(argparse.ArgumentParser):
    """Argument parser that treats bad arguments as a request for usage text."""

    def error(self, message):
        logger.debug(f"Argument error: {message}")
        self.print_help()
        self.exit(0)


def build_parser() -> UsageParser:
    parser = UsageParser(
        prog="du",
        description="Recursively summarize disk usage for directories.",
    )
    parser.add_argument("-a", "--all", action="store_true",
                        help="write counts for all files, not just directories")
    parser.add_argument("-i", "--interactive", action="store_true",
                        help="browse the usage tree instead of printing it")
    parser.add_argument("path", nargs="?", default=DEFAULT_PATH,
                        help="directory to summarize (default: current directory)")
    return parser


def trim_path(path: str) -> Tuple[str, bool]:
    """
    Strip trailing slashes from path, never removing its first character.

    Returns:
        The trimmed path and whether anything was stripped.
    """
    trimmed = path
    while len(trimmed) > 1 and trimmed.endswith("/"):
        trimmed = trimmed[:-1]
    return trimmed, trimmed != path


def report_usage(path: str, all_files: bool = False, had_slash: bool = False,
                 report=print_size) -> int:
    """
    Walk path, report every entry and finally the root total.

    Returns:
        Process exit status: 0 on success, 1 if any entry could not be read
        or the walk had to be abandoned.
    """
    failed: List[str] = []

    def on_error(entry_path, error):
        failed.append(entry_path)

    try:
        root = stat_path(path)
    except OSError as e:
        logger.error(f"cannot access '{path}': {e.strerror or e}")
        return 1

    tracker = InodeTracker()
    if root.kind is EntryKind.DIRECTORY:
        try:
            total = compute_size(path, tracker, all_files, report, on_error)
        except MemoryError:
            logger.critical(f"out of memory while tracking inodes ({len(tracker)} recorded)")
            return 1
    else:
        total = root.units

    report(total, path + "/" if had_slash else path)
    if failed:
        logger.info(f"Finished '{path}' with {len(failed)} unreadable entries")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parses arguments and starts the disk usage walk."""
    args = build_parser().parse_args(argv)
    path, had_slash = trim_path(args.path)

    if not os.path.exists(path):
        logger.error(f"cannot access '{args.path}': No such file or directory")
        return 1

    logger.info(f"du started on '{path}' (all files: {args.all})")
    if args.interactive:
        if not os.path.isdir(path):
            logger.error(f"cannot browse '{path}': Not a directory")
            return 1
        from tui_browser import UsageTUI
        UsageTUI(start_dir=path).run()
        return 0
    return report_usage(path, args.all, had_slash)


if __name__ == "__main__":
    sys.exit(main())

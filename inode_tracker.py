#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Visited-inode bookkeeping so hard-linked files are only counted once."""

from typing import Hashable, Set
from logger_utils import get_logger

logger = get_logger("du.inodes")


class InodeTracker:
    """
    Set of inode identities whose allocation has already been added to a total.

    One tracker is shared by every directory of a single walk. Entries are never
    removed. Only files with a link count above one are ever recorded, since a
    file with a single link cannot be reached twice.
    """

    def __init__(self):
        self._seen: Set[Hashable] = set()

    def record_if_new(self, inode: Hashable) -> bool:
        """
        Record inode if it has not been seen yet.

        Args:
            inode: The inode identity, usually a (st_dev, st_ino) pair.

        Returns:
            True if the inode was new and its size should be counted,
            False if it was already counted elsewhere in the walk.
        """
        if inode in self._seen:
            logger.debug(f"Inode {inode} already counted, skipping")
            return False
        self._seen.add(inode)
        return True

    def __contains__(self, inode) -> bool:
        return inode in self._seen

    def __len__(self) -> int:
        return len(self._seen)

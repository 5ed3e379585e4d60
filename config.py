# -*- coding: utf-8 -*-
"""
Central configuration for du.
Contains accounting constants, keybinds, and the log location.
"""
import os
import getpass

# Native 512-byte blocks per reported unit (1 KiB units)
BLOCKS_PER_UNIT = 2

# Starting path when none is given on the command line
DEFAULT_PATH = "."

# Keybinds for the usage browser
TUI_KEYBINDS = [
    ("h", "go_up", "Go up dir"),
    ("j", "move_down", "Move down"),
    ("k", "move_up", "Move up"),
    ("l", "enter_dir", "Enter dir"),
    ("r", "rescan", "Rescan"),
    ("q", "quit", "Quit"),
]

# Log file path
LOG_PATH = os.environ.get("DU_LOG_PATH", f"/tmp/du_{getpass.getuser()}.log")

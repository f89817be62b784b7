"""CLI command implementations for plansync.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .history import history_app
from .init import init
from .modify import cascade, detect, modifications
from .snapshot import snapshot_app
from .sync import sync

__all__ = [
    "cascade",
    "detect",
    "history_app",
    "init",
    "modifications",
    "snapshot_app",
    "sync",
]

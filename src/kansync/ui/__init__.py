"""Textual UI for kansync."""

from kansync.ui.app import KansyncApp
from kansync.ui.board import BoardScreen

__all__ = [
    "BoardScreen",
    "KansyncApp",
]

"""
Terminal selection engine.

Decodes raw keystrokes, keeps selection state, renders the list and holds
the terminal in raw mode for the duration of a session.
"""

from .keys import Key, KeyEvent, decode
from .selection import (
    SelectableItem,
    SelectionList,
    SelectionMode,
    SessionState,
    filter_items,
    make_items,
)
from .render import render
from .terminal import RawTerminal
from .session import run_selection

__all__ = [
    "Key",
    "KeyEvent",
    "decode",
    "SelectableItem",
    "SelectionList",
    "SelectionMode",
    "SessionState",
    "filter_items",
    "make_items",
    "render",
    "RawTerminal",
    "run_selection",
]

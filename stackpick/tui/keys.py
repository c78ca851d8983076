"""
Decoding of raw terminal input into logical key events.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

ESC = "\x1b"


class Key(Enum):
    """Logical keys understood by the selection engine."""
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    TOGGLE_SELECT = "toggle_select"
    CONFIRM = "confirm"
    BACKSPACE = "backspace"
    PRINTABLE = "printable"
    ESCAPE = "escape"
    INTERRUPT = "interrupt"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class KeyEvent:
    """One decoded unit of input."""
    key: Key
    char: Optional[str] = None
    raw: str = ""


# Arrow keys arrive in several shapes depending on terminal and modifier:
# CSI (normal mode), SS3 (application mode) and CSI with modifier parameters.
ESCAPE_SEQUENCES: Dict[str, Key] = {
    "\x1b[A": Key.MOVE_UP,
    "\x1bOA": Key.MOVE_UP,
    "\x1b[1;2A": Key.MOVE_UP,
    "\x1b[1;3A": Key.MOVE_UP,
    "\x1b[1;5A": Key.MOVE_UP,
    "\x1b[1;9A": Key.MOVE_UP,
    "\x1b[B": Key.MOVE_DOWN,
    "\x1bOB": Key.MOVE_DOWN,
    "\x1b[1;2B": Key.MOVE_DOWN,
    "\x1b[1;3B": Key.MOVE_DOWN,
    "\x1b[1;5B": Key.MOVE_DOWN,
    "\x1b[1;9B": Key.MOVE_DOWN,
    "\x1bOM": Key.CONFIRM,  # keypad Enter in application mode
}

CONTROL_KEYS: Dict[str, Key] = {
    "\r": Key.CONFIRM,
    "\n": Key.CONFIRM,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
    "\x03": Key.INTERRUPT,
    " ": Key.TOGGLE_SELECT,
}

# Longest first so "\x1b[1;2A" wins over any shorter prefix
_SEQUENCES_BY_LENGTH = sorted(ESCAPE_SEQUENCES, key=len, reverse=True)


def is_printable(ch: str) -> bool:
    """Printable ASCII, excluding space (space is the toggle key)."""
    return len(ch) == 1 and "!" <= ch <= "~"


def _skip_unknown_escape(text: str, start: int) -> int:
    """
    Return the index just past an unrecognized escape sequence.

    CSI/SS3 sequences run until a final byte in 0x40-0x7E; anything else
    is treated as ESC plus one character (e.g. Alt+key).
    """
    if start + 1 >= len(text):
        return len(text)

    introducer = text[start + 1]
    if introducer == "O":
        return min(start + 3, len(text))
    if introducer != "[":
        return start + 2

    index = start + 2
    while index < len(text):
        if "\x40" <= text[index] <= "\x7e":
            return index + 1
        index += 1
    return len(text)


def decode(chunk: Union[bytes, str]) -> List[KeyEvent]:
    """
    Decode one chunk of raw terminal input.

    Every recognized unit produces one event. Unknown escape sequences and
    control bytes become Key.UNRECOGNIZED events instead of errors.

    Args:
        chunk: Bytes (or already decoded text) read from the terminal in one go

    Returns:
        List of key events in input order
    """
    if isinstance(chunk, bytes):
        text = chunk.decode("utf-8", errors="replace")
    else:
        text = chunk

    events = []
    index = 0

    while index < len(text):
        ch = text[index]

        if ch == ESC:
            for sequence in _SEQUENCES_BY_LENGTH:
                if text.startswith(sequence, index):
                    events.append(KeyEvent(ESCAPE_SEQUENCES[sequence], raw=sequence))
                    index += len(sequence)
                    break
            else:
                if index + 1 == len(text):
                    # A lone ESC at the end of a chunk is the Escape key itself
                    events.append(KeyEvent(Key.ESCAPE, raw=ch))
                    index += 1
                else:
                    end = _skip_unknown_escape(text, index)
                    events.append(KeyEvent(Key.UNRECOGNIZED, raw=text[index:end]))
                    index = end
            continue

        if ch in CONTROL_KEYS:
            key = CONTROL_KEYS[ch]
            events.append(KeyEvent(key, char=ch if key is Key.TOGGLE_SELECT else None, raw=ch))
        elif is_printable(ch):
            events.append(KeyEvent(Key.PRINTABLE, char=ch, raw=ch))
        else:
            events.append(KeyEvent(Key.UNRECOGNIZED, raw=ch))
        index += 1

    return events

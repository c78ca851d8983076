"""
Scoped raw-mode access to the controlling terminal.
"""

import logging
import os
import shutil
import sys
import termios
from typing import Optional, TextIO

from ..errors import TerminalUnavailableError

logger = logging.getLogger(__name__)

HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
CLEAR_SCREEN = "\033[H\033[2J\033[3J"

READ_SIZE = 1024


class RawTerminal:
    """
    Holds the terminal in raw mode for the lifetime of a `with` block.

    The previous terminal attributes are restored and the cursor made
    visible again on every exit path: normal return, KeyboardInterrupt
    and any other exception.
    """

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._fd: Optional[int] = None
        self._saved = None

    @property
    def active(self) -> bool:
        return self._saved is not None

    def __enter__(self) -> "RawTerminal":
        try:
            fd = self.stdin.fileno()
        except (AttributeError, ValueError, OSError) as e:
            raise TerminalUnavailableError("Interactive selection needs a terminal on stdin") from e
        if not os.isatty(fd):
            raise TerminalUnavailableError("Interactive selection needs a terminal on stdin")

        self._fd = fd
        self._saved = termios.tcgetattr(fd)

        raw = termios.tcgetattr(fd)
        # lflags: no line buffering, no echo, Ctrl-C arrives as a byte
        raw[3] &= ~(termios.ICANON | termios.ECHO | termios.IEXTEN | termios.ISIG)
        # iflags: no flow control, keep CR as CR
        raw[0] &= ~(termios.IXON | termios.ICRNL)
        # oflags: keep "\n" -> "\r\n" translation for rendering
        raw[1] |= termios.OPOST
        raw[2] &= ~(termios.CSIZE | termios.PARENB)
        raw[2] |= termios.CS8
        raw[6][termios.VMIN] = 1
        raw[6][termios.VTIME] = 0

        termios.tcsetattr(fd, termios.TCSADRAIN, raw)
        self.write(HIDE_CURSOR)
        logger.debug("Terminal switched to raw mode")
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.restore()
        return False

    def restore(self) -> None:
        """Put the terminal back the way it was found. Safe to call twice."""
        if self._saved is None:
            return
        saved, self._saved = self._saved, None
        try:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, saved)
        finally:
            self.write(SHOW_CURSOR)
            logger.debug("Terminal restored from raw mode")

    def read(self) -> bytes:
        """Block until input arrives and return whatever is available."""
        return os.read(self._fd, READ_SIZE)

    def write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def size(self) -> os.terminal_size:
        return shutil.get_terminal_size()

"""
Interactive selection session: terminal input -> model -> screen.
"""

import logging
from typing import List, Optional, Sequence, Union

from .keys import Key, decode
from .render import paint, render
from .selection import SelectableItem, SelectionList, SelectionMode
from .terminal import CLEAR_SCREEN, RawTerminal

logger = logging.getLogger(__name__)


def run_selection(
    items: Sequence[SelectableItem],
    message: str,
    mode: SelectionMode = SelectionMode.SINGLE,
    terminal: Optional[RawTerminal] = None,
    initial_cursor: int = 0,
    noun: str = "item",
) -> Union[None, str, List[str]]:
    """
    Run one selection session to completion.

    Raw mode is held only while the session runs. Ctrl-C restores the
    terminal first and then raises KeyboardInterrupt.

    Args:
        items: Items to choose from
        message: Prompt shown above the list
        mode: Single- or multi-select
        terminal: Terminal to use (a fresh RawTerminal on stdin by default)
        initial_cursor: Starting cursor position
        noun: Footer wording for multi-select

    Returns:
        Single-select: chosen value or None. Multi-select: list of values.
    """
    selection = SelectionList(items, mode=mode, initial_cursor=initial_cursor)
    terminal = terminal or RawTerminal()

    with terminal:
        while not selection.done:
            height = terminal.size().lines
            terminal.write(paint(render(selection, message, height=height, noun=noun)))

            chunk = terminal.read()
            if not chunk:
                # stdin closed underneath us
                selection.cancel()
                break

            for event in decode(chunk):
                if event.key is Key.INTERRUPT:
                    raise KeyboardInterrupt
                if event.key is Key.UNRECOGNIZED:
                    logger.debug(f"Ignoring unrecognized input {event.raw!r}")
                    continue
                selection.handle(event)
                if selection.done:
                    break

        terminal.write(CLEAR_SCREEN)

    return selection.result()

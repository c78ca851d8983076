"""
Full-screen rendering of a selection session.
"""

from typing import List, Tuple

import click

from .selection import SelectionList, SelectionMode, SessionState

CURSOR_MARK = "❯"
CHECKED = "◉"
UNCHECKED = "◯"

# Title, hint, search line, blank, blank, footer lines
CHROME_LINES = 7
MIN_VISIBLE_ROWS = 3


def hint_text(mode: SelectionMode) -> str:
    toggle = "spacebar to select/deselect, " if mode is SelectionMode.MULTI else ""
    return f"Use ↑↓ arrows to navigate, {toggle}type to search, Enter to confirm, Esc to go back"


def visible_window(cursor: int, total: int, rows: int) -> Tuple[int, int]:
    """
    Return the [start, end) slice of the list to draw.

    The window keeps the cursor roughly centered and never runs past
    either end of the list.
    """
    if total <= rows:
        return 0, total
    start = max(0, min(cursor - rows // 2, total - rows))
    return start, start + rows


def render(selection: SelectionList, message: str, height: int = 24, noun: str = "item") -> List[str]:
    """
    Build the screen for the current state.

    Args:
        selection: Session state
        message: Prompt shown at the top
        height: Terminal height in lines
        noun: What the items are called in the footer ("stack", "item")

    Returns:
        Lines to print, top to bottom
    """
    lines = [
        click.style(message, fg="blue"),
        click.style(hint_text(selection.mode), fg="bright_black"),
    ]

    if selection.state is SessionState.SEARCHING:
        lines.append(click.style(
            f"🔍 Search: {selection.query} ({len(selection.filtered)} results)", fg="green"
        ))
    lines.append("")

    if not selection.filtered:
        lines.append(click.style("  No matches", fg="yellow"))

    rows = max(MIN_VISIBLE_ROWS, height - CHROME_LINES)
    start, end = visible_window(selection.cursor, len(selection.filtered), rows)

    if start > 0:
        lines.append(click.style(f"  ↑ {start} more", fg="bright_black"))

    for position in range(start, end):
        item = selection.filtered[position]
        is_current = position == selection.cursor
        marker = CURSOR_MARK if is_current else " "
        checkbox = ""
        if selection.mode is SelectionMode.MULTI:
            checkbox = CHECKED if selection.is_selected(item) else UNCHECKED
        label = click.style(item.label, fg="cyan") if is_current else item.label
        lines.append(f"{marker}{checkbox} {label}")

    remaining = len(selection.filtered) - end
    if remaining > 0:
        lines.append(click.style(f"  ↓ {remaining} more", fg="bright_black"))

    lines.append("")
    if selection.mode is SelectionMode.MULTI:
        lines.append(click.style(f"Selected: {len(selection.selected_indices)} {noun}(s)", fg="bright_black"))
        if len(selection.filtered) != len(selection.items):
            lines.append(click.style(
                f"Showing {len(selection.filtered)} of {len(selection.items)} {noun}s", fg="bright_black"
            ))

    return lines


def paint(lines: List[str]) -> str:
    """Turn rendered lines into one terminal write that redraws the screen."""
    return "\033[H\033[2J" + "\n".join(lines) + "\n"

"""
Selection list model: cursor, search query, filtered view and selection set.

Pure state transitions driven by key events. One component serves both
single-select menus and multi-select stack pickers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional, Sequence, Set, Union

from .keys import Key, KeyEvent


class SelectionMode(Enum):
    """Capability set of a selection session."""
    SINGLE = "single"
    MULTI = "multi"


class SessionState(Enum):
    """Lifecycle of a selection session."""
    BROWSING = "browsing"
    SEARCHING = "searching"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SelectableItem:
    """An entry in the selection list."""
    label: str
    value: str
    original_index: int


def make_items(choices: Sequence[tuple]) -> List[SelectableItem]:
    """Build items from (label, value) pairs, numbering them in order."""
    return [SelectableItem(label=label, value=value, original_index=index)
            for index, (label, value) in enumerate(choices)]


def matches(item: SelectableItem, query: str) -> bool:
    """Case-insensitive substring match on label or value."""
    if not query:
        return True
    needle = query.lower()
    return needle in item.label.lower() or needle in item.value.lower()


def filter_items(items: Sequence[SelectableItem], query: str) -> List[SelectableItem]:
    """Recompute the filtered view from the full list."""
    return [item for item in items if matches(item, query)]


class SelectionList:
    """State of one selection session."""

    def __init__(
        self,
        items: Sequence[SelectableItem],
        mode: SelectionMode = SelectionMode.SINGLE,
        initial_cursor: int = 0,
    ):
        self.items: List[SelectableItem] = list(items)
        self.mode = mode
        self.query = ""
        self.filtered: List[SelectableItem] = list(self.items)
        self.cursor = 0
        self._selected: Set[int] = set()
        self.state = SessionState.BROWSING
        if self.filtered:
            self.cursor = max(0, min(initial_cursor, len(self.filtered) - 1))

    @property
    def selected_indices(self) -> FrozenSet[int]:
        """Original indices of the selected items, independent of the filter."""
        return frozenset(self._selected)

    @property
    def done(self) -> bool:
        return self.state in (SessionState.CONFIRMED, SessionState.CANCELLED)

    @property
    def current(self) -> Optional[SelectableItem]:
        """Item under the cursor, or None when nothing matches."""
        if not self.filtered:
            return None
        return self.filtered[self.cursor]

    def is_selected(self, item: SelectableItem) -> bool:
        return item.original_index in self._selected

    def handle(self, event: KeyEvent) -> None:
        """Apply one key event. Events after confirm/cancel are ignored."""
        if self.done:
            return

        if event.key is Key.MOVE_UP:
            self.move(-1)
        elif event.key is Key.MOVE_DOWN:
            self.move(1)
        elif event.key is Key.TOGGLE_SELECT:
            if self.mode is SelectionMode.MULTI:
                self.toggle()
            else:
                self.type_char(event.char or " ")
        elif event.key is Key.PRINTABLE and event.char:
            self.type_char(event.char)
        elif event.key is Key.BACKSPACE:
            self.backspace()
        elif event.key is Key.CONFIRM:
            self.confirm()
        elif event.key is Key.ESCAPE:
            self.escape()
        # Key.INTERRUPT is handled by the session loop; UNRECOGNIZED is noise

    def move(self, delta: int) -> None:
        if not self.filtered:
            self.cursor = 0
            return
        self.cursor = max(0, min(self.cursor + delta, len(self.filtered) - 1))

    def toggle(self) -> None:
        """Toggle the item under the cursor, keyed by its original index."""
        item = self.current
        if item is None:
            return
        if item.original_index in self._selected:
            self._selected.discard(item.original_index)
        else:
            self._selected.add(item.original_index)

    def type_char(self, ch: str) -> None:
        self.set_query(self.query + ch)

    def backspace(self) -> None:
        if self.query:
            self.set_query(self.query[:-1])

    def set_query(self, query: str) -> None:
        """Change the query and refilter; the selection set is untouched."""
        self.query = query
        self.filtered = filter_items(self.items, query)
        self.state = SessionState.SEARCHING if query else SessionState.BROWSING
        if self.cursor >= len(self.filtered):
            self.cursor = max(0, len(self.filtered) - 1)

    def escape(self) -> None:
        """Clear an active search, otherwise cancel the session."""
        if self.query:
            self.set_query("")
        else:
            self.cancel()

    def confirm(self) -> None:
        self.state = SessionState.CONFIRMED

    def cancel(self) -> None:
        self.state = SessionState.CANCELLED

    def selected_values(self) -> List[str]:
        """Values of the selected items, in original-list order."""
        return [item.value for item in self.items if item.original_index in self._selected]

    def result(self) -> Union[None, str, List[str]]:
        """
        Outcome of the session.

        Single-select: the value under the cursor, or None when the
        filtered view is empty or the session was cancelled.
        Multi-select: selected values in original order ([] when cancelled).
        """
        if self.mode is SelectionMode.MULTI:
            if self.state is not SessionState.CONFIRMED:
                return []
            return self.selected_values()

        if self.state is not SessionState.CONFIRMED:
            return None
        item = self.current
        return item.value if item else None

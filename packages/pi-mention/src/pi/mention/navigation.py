"""Navigation controller: the mention dropdown's visible list and highlight."""

from __future__ import annotations

from typing import Callable, Protocol

from pi.mention.types import Candidate
from pi.mention.utils import normalize_to_single_line, truncate_to_width

NO_MATCH_TEXT = "  No users found"


class DropdownTheme(Protocol):
    selected_text: Callable[[str], str]
    scroll_info: Callable[[str], str]
    no_match: Callable[[str], str]


class NavigationController:
    """Holds the filtered candidate list and the highlighted index.

    Every open or refresh resets the highlight to the first entry.
    ``move_highlight`` wraps around in both directions.
    """

    def __init__(self, max_visible: int = 5) -> None:
        self._items: list[Candidate] = []
        self._highlight_index = 0
        self._is_open = False
        self._max_visible = max(1, max_visible)

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def items(self) -> list[Candidate]:
        return list(self._items)

    @property
    def highlight_index(self) -> int:
        return self._highlight_index

    def open(self, items: list[Candidate]) -> None:
        self._items = list(items)
        self._highlight_index = 0
        self._is_open = True

    def refresh(self, items: list[Candidate]) -> None:
        """Replace the visible list while open."""
        self.open(items)

    def close(self) -> None:
        self._items = []
        self._highlight_index = 0
        self._is_open = False

    def move_highlight(self, delta: int) -> None:
        n = len(self._items)
        if n == 0:
            return
        self._highlight_index = (self._highlight_index + delta + n) % n

    def set_highlight(self, index: int) -> None:
        self._highlight_index = max(0, min(index, len(self._items) - 1))

    def highlighted(self) -> Candidate | None:
        if self._is_open and self._highlight_index < len(self._items):
            return self._items[self._highlight_index]
        return None

    def item_at(self, index: int) -> Candidate | None:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def render(self, width: int, theme: DropdownTheme) -> list[str]:
        if not self._is_open:
            return []
        if not self._items:
            return [theme.no_match(NO_MATCH_TEXT)]

        # Keep the highlight roughly centred in the visible window
        start_index = max(
            0,
            min(
                self._highlight_index - self._max_visible // 2,
                len(self._items) - self._max_visible,
            ),
        )
        end_index = min(start_index + self._max_visible, len(self._items))

        lines: list[str] = []
        for i in range(start_index, end_index):
            name = normalize_to_single_line(self._items[i].display_name)
            max_w = width - 4
            if i == self._highlight_index:
                lines.append(theme.selected_text(f"→ {truncate_to_width(name, max_w, '')}"))
            else:
                lines.append(f"  {truncate_to_width(name, max_w, '')}")

        if start_index > 0 or end_index < len(self._items):
            scroll_text = f"  ({self._highlight_index + 1}/{len(self._items)})"
            lines.append(theme.scroll_info(truncate_to_width(scroll_text, width - 2, "")))

        return lines

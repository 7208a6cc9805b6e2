from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rich.text import Text
from textual.binding import Binding
from textual.message import Message
from textual.widget import Widget

from sprintboard.models import WorkItem
from sprintboard.tui.theme import ACCENT, MUTED, state_badge, type_badge
from sprintboard.worklist import SortDirection, SortField, WorkItemList

# (title, width, sort field); TITLE takes the remaining width
COLUMNS = [
    ("ID", 7, SortField.ID),
    ("TYPE", 8, SortField.TYPE),
    ("STATE", 12, SortField.STATE),
    ("ASSIGNED", 14, None),
]
MIN_TITLE_WIDTH = 20
HEADER_ROWS = 2


def _fit(value: str, width: int) -> str:
    """Truncate with an ellipsis and pad to exactly ``width`` cells."""
    if len(value) > width:
        value = value[: max(0, width - 1)] + "…"
    return value.ljust(width)


class WorkItemsPanel(Widget, can_focus=True):
    """Sortable table of the current query's work items."""

    DEFAULT_CSS = """
    WorkItemsPanel {
        height: 1fr;
        padding: 0 1;
        border: solid $secondary;
    }

    WorkItemsPanel:focus {
        border: heavy $accent;
    }
    """

    BINDINGS = [
        Binding("j,down", "cursor_down", "Down", show=False),
        Binding("k,up", "cursor_up", "Up", show=False),
        Binding("g", "cursor_top", "Top", show=False),
        Binding("G", "cursor_bottom", "Bottom", show=False),
        Binding("enter", "open", "Open", show=True),
    ]

    @dataclass
    class Highlighted(Message):
        """The item under the cursor changed."""

        item: WorkItem | None

    class OpenRequested(Message):
        """User pressed enter on an item."""

    def __init__(self, worklist: WorkItemList | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.worklist = worklist if worklist is not None else WorkItemList()
        self.empty_message = "No work items found"

    @property
    def visible_rows(self) -> int:
        return max(1, self.content_size.height - HEADER_ROWS)

    def render(self) -> Text:
        width = max(self.content_size.width, 1)
        title_width = max(MIN_TITLE_WIDTH, width - sum(w + 1 for _, w, _ in COLUMNS) - 2)

        text = Text()
        text.append("  ")
        for title, col_width, field in COLUMNS:
            if field is not None and field is self.worklist.sort_field:
                arrow = "↓" if self.worklist.sort_direction is SortDirection.DESC else "↑"
                text.append(_fit(f"{title} {arrow}", col_width), style=f"bold {ACCENT}")
            else:
                text.append(_fit(title, col_width), style="bold")
            text.append(" ")
        text.append("TITLE\n", style="bold")
        text.append("─" * width + "\n", style=MUTED)

        if not len(self.worklist):
            text.append(f"  {self.empty_message}", style=MUTED)
            return text

        for index, item in self.worklist.visible_slice(self.visible_rows):
            is_cursor = index == self.worklist.cursor
            row = Text()
            row.append("▸ " if is_cursor else "  ", style=ACCENT)
            row.append(_fit(f"#{item.id}", COLUMNS[0][1]) + " ")
            badge = type_badge(_fit(item.short_type, COLUMNS[1][1]), item.type)
            row.append_text(badge)
            row.append(" ")
            row.append_text(state_badge(_fit(item.state, COLUMNS[2][1]), item.state))
            row.append(" ")
            row.append(_fit(item.assigned_to or "-", COLUMNS[3][1]) + " ", style=MUTED)
            row.append(_fit(item.title, title_width).rstrip())
            if is_cursor:
                row.stylize("on #1E3A5F")
            text.append_text(row)
            text.append("\n")
        text.rstrip()
        return text

    def on_resize(self) -> None:
        self.worklist.adjust_viewport(self.visible_rows)

    def _moved(self) -> None:
        self.refresh()
        self.post_message(self.Highlighted(self.worklist.selected()))

    def action_cursor_down(self) -> None:
        self.worklist.move_cursor(1)
        self._moved()

    def action_cursor_up(self) -> None:
        self.worklist.move_cursor(-1)
        self._moved()

    def action_cursor_top(self) -> None:
        self.worklist.move_to_top()
        self._moved()

    def action_cursor_bottom(self) -> None:
        self.worklist.move_to_bottom()
        self._moved()

    def sort_by(self, field: SortField) -> None:
        self.worklist.toggle_sort(field)
        self._moved()

    def action_open(self) -> None:
        if self.worklist.selected() is not None:
            self.post_message(self.OpenRequested())

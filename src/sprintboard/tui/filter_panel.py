from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.binding import Binding
from textual.message import Message
from textual.widget import Widget

from sprintboard.filters import MAX_VISIBLE_OPTIONS, FilterState, build_filter_state
from sprintboard.tui.theme import ACCENT, MUTED, SUCCESS


class FilterPanel(Widget, can_focus=True):
    """Sprint / State / Assigned / Area option lists stacked vertically."""

    DEFAULT_CSS = """
    FilterPanel {
        width: 32;
        height: 100%;
        padding: 0 1;
        border: solid $secondary;
    }

    FilterPanel:focus {
        border: heavy $accent;
    }
    """

    BINDINGS = [
        Binding("j,down", "cursor_down", "Down", show=False),
        Binding("k,up", "cursor_up", "Up", show=False),
        Binding("g", "cursor_top", "Top", show=False),
        Binding("G", "cursor_bottom", "Bottom", show=False),
        Binding("enter,space", "select", "Select", show=True),
    ]

    class Selected(Message):
        """The option under the cursor in the active group was chosen."""

    def __init__(self, filters: FilterState | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.filters = filters or build_filter_state()

    def set_filters(self, filters: FilterState) -> None:
        self.filters = filters
        self.refresh()

    def render(self) -> Text:
        text = Text()
        groups = self.filters.groups
        for i, group in enumerate(groups):
            is_active = i == self.filters.active and self.has_focus
            title = Text(group.title, style=f"bold {ACCENT}" if is_active else "bold")
            if len(group.options) > MAX_VISIBLE_OPTIONS:
                title.append(f" ({len(group.options)})", style=MUTED)
            text.append_text(title)
            text.append("\n")
            text.append("─" * 15 + "\n", style=MUTED)

            if group.offset > 0:
                text.append("  ▲ more\n", style=MUTED)
            visible = group.visible_options(MAX_VISIBLE_OPTIONS)
            for index, option in visible:
                is_cursor = is_active and index == group.cursor
                style = SUCCESS if option.selected else ""
                if is_cursor:
                    style = f"bold {ACCENT}"
                marker = "▸" if is_cursor else " "
                indicator = "●" if option.selected else "○"
                text.append(f"{marker} {indicator} {option.label}\n", style=style)
            if visible and visible[-1][0] < len(group.options) - 1:
                text.append("  ▼ more\n", style=MUTED)
            if i < len(groups) - 1:
                text.append("\n")
        return text

    def action_cursor_down(self) -> None:
        self.filters.active_group().move_cursor(1)
        self.refresh()

    def action_cursor_up(self) -> None:
        self.filters.active_group().move_cursor(-1)
        self.refresh()

    def action_cursor_top(self) -> None:
        self.filters.active_group().move_to_top()
        self.refresh()

    def action_cursor_bottom(self) -> None:
        self.filters.active_group().move_to_bottom()
        self.refresh()

    def action_select(self) -> None:
        self.post_message(self.Selected())

    def on_focus(self) -> None:
        self.refresh()

    def on_blur(self) -> None:
        self.refresh()

from __future__ import annotations

from collections.abc import Mapping, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, Static

from sprintboard.controller import StateChangeConfirmed
from sprintboard.modals import StateChangeModal
from sprintboard.models import StateInfo, WorkItem
from sprintboard.tui.theme import ACCENT, SUCCESS, TEXT_MUTED


class StateDialog(ModalScreen[StateChangeConfirmed | None]):
    """Pick a new state for a work item."""

    BINDINGS = [
        Binding("k,up", "cursor_up", "Up", show=False),
        Binding("j,down", "cursor_down", "Down", show=False),
        Binding("enter", "confirm", "Confirm", show=False),
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    DEFAULT_CSS = """
    StateDialog {
        align: center middle;
    }

    StateDialog #dialog {
        width: 44;
        height: auto;
        padding: 1 2;
        border: thick $accent;
        background: $surface;
    }

    StateDialog #state-list {
        margin: 1 0;
    }

    StateDialog .hint {
        color: $text-muted;
    }
    """

    def __init__(
        self,
        item: WorkItem,
        states_by_type: Mapping[str, Sequence[StateInfo]],
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.item = item
        self.modal = StateChangeModal()
        self.modal.open(item, states_by_type)

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("[bold]Change State[/bold]")
            yield Static(Text(f"#{self.item.id} {self.item.title}", style=TEXT_MUTED))
            yield Static(Text(f"Current: {self.item.state}", style="#60A5FA"))
            yield Static(self._render_states(), id="state-list")
            yield Label("Enter: confirm  Esc: cancel", classes="hint")

    def _render_states(self) -> Text:
        text = Text()
        for i, state in enumerate(self.modal.states):
            is_cursor = i == self.modal.cursor
            style = ""
            if is_cursor:
                style = f"bold {ACCENT}"
            if state == self.item.state:
                style = SUCCESS
            text.append("▸ " if is_cursor else "  ")
            text.append(state + "\n", style=style)
        text.rstrip()
        return text

    def _refresh_list(self) -> None:
        self.query_one("#state-list", Static).update(self._render_states())

    def action_cursor_up(self) -> None:
        self.modal.move(-1)
        self._refresh_list()

    def action_cursor_down(self) -> None:
        self.modal.move(1)
        self._refresh_list()

    def action_confirm(self) -> None:
        result = self.modal.confirm()
        if result is not None:
            self.dismiss(result)

    def action_cancel(self) -> None:
        self.modal.cancel()
        self.dismiss(None)

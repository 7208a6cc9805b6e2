from __future__ import annotations

from collections.abc import Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, Static

from sprintboard.controller import AssignConfirmed
from sprintboard.modals import UNASSIGNED, AssignModal
from sprintboard.models import TeamMember, WorkItem
from sprintboard.tui.theme import ACCENT, MUTED, TEXT_MUTED


class AssignDialog(ModalScreen[AssignConfirmed | None]):
    """Assign a work item to a team member, with ``/`` to filter."""

    BINDINGS = [
        Binding("k,up", "cursor_up", "Up", show=False),
        Binding("j,down", "cursor_down", "Down", show=False),
        Binding("enter", "confirm", "Confirm", show=False),
        Binding("escape", "escape", "Cancel", show=False),
        Binding("slash", "start_filter", "Filter", show=False),
        Binding("u", "unassign", "Unassign", show=False),
    ]

    DEFAULT_CSS = """
    AssignDialog {
        align: center middle;
    }

    AssignDialog #dialog {
        width: 54;
        height: auto;
        padding: 1 2;
        border: thick $accent;
        background: $surface;
    }

    AssignDialog #filter-input {
        display: none;
    }

    AssignDialog #filter-input.active {
        display: block;
    }

    AssignDialog #member-list {
        margin: 1 0;
    }

    AssignDialog .hint {
        color: $text-muted;
    }
    """

    def __init__(self, item: WorkItem, members: Sequence[TeamMember], **kwargs) -> None:
        super().__init__(**kwargs)
        self.item = item
        self.modal = AssignModal()
        self.modal.open(item, members)

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("[bold]Assign To[/bold]")
            yield Static(Text(f"#{self.item.id} {self.item.title}", style=TEXT_MUTED))
            current = self.item.assigned_to or UNASSIGNED
            yield Static(Text(f"Current: {current}", style="#60A5FA"))
            yield Input(placeholder="Type to filter...", max_length=50, id="filter-input")
            yield Static(self._render_members(), id="member-list")
            yield Label(
                "Enter: assign  /: filter  u: unassign  Esc: cancel", classes="hint"
            )

    def _render_members(self) -> Text:
        if not self.modal.filtered:
            return Text("  No members found", style=MUTED)
        text = Text()
        for i, member in self.modal.visible_members():
            is_cursor = i == self.modal.cursor
            text.append("▸ " if is_cursor else "  ")
            style = f"bold {ACCENT}" if is_cursor else ""
            text.append(member.display_name, style=style)
            text.append(f"  {member.unique_name}\n", style=MUTED)
        text.rstrip()
        return text

    def _refresh_list(self) -> None:
        self.query_one("#member-list", Static).update(self._render_members())

    def action_cursor_up(self) -> None:
        self.modal.move(-1)
        self._refresh_list()

    def action_cursor_down(self) -> None:
        self.modal.move(1)
        self._refresh_list()

    def action_start_filter(self) -> None:
        self.modal.start_filter()
        filter_input = self.query_one("#filter-input", Input)
        filter_input.add_class("active")
        filter_input.focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        self.modal.set_filter(event.value)
        self._refresh_list()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_confirm()

    def action_confirm(self) -> None:
        result = self.modal.confirm()
        if result is not None:
            self.dismiss(result)

    def action_unassign(self) -> None:
        result = self.modal.unassign()
        if result is not None:
            self.dismiss(result)

    def action_escape(self) -> None:
        if self.modal.escape():
            self.dismiss(None)
            return
        self.query_one("#filter-input", Input).value = ""
        self._refresh_list()

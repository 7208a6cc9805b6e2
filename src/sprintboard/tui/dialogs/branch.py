from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Grid, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static

from sprintboard.controller import BranchConfirmed
from sprintboard.modals import BranchModal
from sprintboard.models import WorkItem
from sprintboard.tui.theme import TEXT_MUTED


class BranchDialog(ModalScreen[BranchConfirmed | None]):
    """Create a git branch named after a work item."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    DEFAULT_CSS = """
    BranchDialog {
        align: center middle;
    }

    BranchDialog #dialog {
        width: 64;
        height: auto;
        padding: 1 2;
        border: thick $accent;
        background: $surface;
    }

    BranchDialog #dialog Input {
        margin: 1 0 0 0;
    }

    BranchDialog #branch-error {
        color: $error;
        height: auto;
    }

    BranchDialog .buttons {
        height: auto;
        margin: 1 0 0 0;
        align: center middle;
    }

    BranchDialog .buttons Button {
        margin: 0 1;
    }
    """

    def __init__(self, item: WorkItem, **kwargs) -> None:
        super().__init__(**kwargs)
        self.item = item
        self.modal = BranchModal()
        self.modal.open(item)

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("[bold]Create Branch[/bold]")
            yield Static(Text(f"#{self.item.id} {self.item.title}", style=TEXT_MUTED))
            yield Input(value=self.modal.value, id="branch-input")
            yield Static("", id="branch-error")
            with Grid(classes="buttons"):
                yield Button("Create", variant="primary", id="submit")
                yield Button("Cancel", id="cancel")

    def action_submit(self) -> None:
        value = self.query_one("#branch-input", Input).value
        result = self.modal.confirm(value)
        if result is None:
            self.query_one("#branch-error", Static).update(
                Text(self.modal.error or "")
            )
            self.query_one("#branch-input", Input).focus()
            return
        self.dismiss(result)

    def action_cancel(self) -> None:
        self.modal.cancel()
        self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "submit":
            self.action_submit()
        elif event.button.id == "cancel":
            self.action_cancel()

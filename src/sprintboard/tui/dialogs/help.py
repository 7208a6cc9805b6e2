from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label

KEYS = [
    ("Navigation", None),
    ("j/k ↑/↓", "Move up / down"),
    ("h/l ←/→", "Previous / next filter group"),
    ("g/G", "Top / bottom"),
    ("Tab", "Switch panel"),
    ("Actions", None),
    ("Enter/Space", "Select filter"),
    ("Enter", "Open work item in browser"),
    ("v", "Detail view"),
    ("s", "Change state"),
    ("a", "Assign (/ to filter, u to unassign)"),
    ("b", "Create git branch"),
    ("1/2/3", "Sort by ID / Type / State"),
    ("Ctrl+R", "Refresh"),
    ("General", None),
    ("?", "Help"),
    ("Esc", "Back"),
    ("q", "Quit"),
]


class HelpDialog(ModalScreen[None]):
    """Help overlay showing keybindings."""

    BINDINGS = [("escape", "dismiss", "Close"), ("question_mark", "dismiss", "Close")]

    DEFAULT_CSS = """
    HelpDialog {
        align: center middle;
    }

    HelpDialog #dialog {
        width: 56;
        height: auto;
        padding: 1 2;
        border: thick $accent;
        background: $surface;
    }

    HelpDialog .section {
        margin: 1 0 0 0;
        text-style: bold;
        color: $accent;
    }

    HelpDialog Button {
        margin: 1 0 0 0;
        width: 100%;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("[bold]Keybindings[/bold]")
            for key, description in KEYS:
                if description is None:
                    yield Label(key, classes="section")
                else:
                    yield Label(f"{key:<13}{description}", markup=False)
            yield Button("Close", id="close")

    def on_button_pressed(self, _event: Button.Pressed) -> None:
        self.dismiss(None)

from __future__ import annotations

from typing import Any

from rich.console import Group, RenderableType
from rich.markdown import Markdown
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Static

from sprintboard.models import WorkItem
from sprintboard.tui.theme import ACCENT, MUTED, TEXT_MUTED, state_badge, type_badge

LABEL_WIDTH = 11
UNASSIGNED = "Unassigned"


def _label(text: Text, name: str) -> None:
    text.append(name.ljust(LABEL_WIDTH), style=TEXT_MUTED)


def _date(value) -> str:
    return value.strftime("%Y-%m-%d") if value else "-"


def summary_text(item: WorkItem | None) -> Text:
    """Compact summary shown under the work item list."""
    if item is None:
        return Text("Select a work item to view details", style=MUTED)

    text = Text()
    text.append(f"#{item.id} {item.title}\n\n", style="bold")
    _label(text, "Type:")
    text.append_text(type_badge(item.short_type.ljust(14), item.type))
    _label(text, "State:")
    text.append_text(state_badge(item.state))
    text.append("\n")
    _label(text, "Assigned:")
    text.append((item.assigned_to or UNASSIGNED).ljust(14))
    _label(text, "Sprint:")
    text.append(item.sprint_name + "\n")
    _label(text, "Area:")
    text.append(item.area_name + "\n")

    if item.parent_id is not None:
        parent = f"Parent: #{item.parent_id}"
        if item.parent_title:
            parent += f" {item.parent_title}"
        text.append("\n" + parent + "\n", style=MUTED)

    if item.description:
        text.append("\n─── Description ───\n", style=f"bold {ACCENT}")
        text.append(item.description + "\n")

    if item.tags:
        text.append("\n─── Tags ───\n", style=f"bold {ACCENT}")
        for tag in item.tags:
            text.append(f" {tag} ", style="on #374151")
            text.append(" ")
    text.rstrip()
    return text


class DetailsPanel(Static):
    DEFAULT_CSS = """
    DetailsPanel {
        height: 14;
        padding: 0 1;
        border: solid $secondary;
        overflow-y: auto;
    }
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(summary_text(None), **kwargs)
        self.item: WorkItem | None = None

    def show_item(self, item: WorkItem | None) -> None:
        self.item = item
        self.update(summary_text(item))


def detail_renderable(item: WorkItem) -> RenderableType:
    """Full-page view: metadata, parent, description and tags sections."""
    meta = Text()
    meta.append("METADATA\n", style=f"bold {ACCENT}")
    _label(meta, "Type:")
    meta.append_text(type_badge(item.short_type.ljust(20), item.type))
    _label(meta, "ID:")
    meta.append(f"#{item.id}\n")
    _label(meta, "State:")
    meta.append_text(state_badge(item.state.ljust(20), item.state))
    _label(meta, "Created:")
    meta.append(_date(item.created_date) + "\n")
    _label(meta, "Assigned:")
    meta.append((item.assigned_to or UNASSIGNED).ljust(20))
    _label(meta, "Updated:")
    meta.append(_date(item.changed_date) + "\n")
    _label(meta, "Sprint:")
    meta.append(item.sprint_name.ljust(20))
    _label(meta, "Priority:")
    meta.append(f"{item.priority}\n")
    _label(meta, "Area:")
    meta.append(item.area_name)

    parts: list[RenderableType] = [meta]
    if item.parent_id is not None:
        parent = Text("\nPARENT\n", style=f"bold {ACCENT}")
        parent.append(f"#{item.parent_id}", style="")
        if item.parent_title:
            parent.append(f" {item.parent_title}", style="")
        parts.append(parent)
    if item.description:
        parts.append(Text("\nDESCRIPTION", style=f"bold {ACCENT}"))
        parts.append(Markdown(item.description))
    if item.tags:
        tags = Text("\nTAGS\n", style=f"bold {ACCENT}")
        for tag in item.tags:
            tags.append(f" {tag} ", style="on #374151")
            tags.append(" ")
        parts.append(tags)
    return Group(*parts)


class DetailScreen(Screen[None]):
    """Full-screen view of one work item."""

    BINDINGS = [
        Binding("escape,q", "close", "Back", show=True),
        Binding("enter", "open_browser", "Open in browser", show=True),
        Binding("j,down", "scroll_down", "Scroll", show=False),
        Binding("k,up", "scroll_up", "Scroll", show=False),
    ]

    DEFAULT_CSS = """
    DetailScreen #detail-title {
        width: 100%;
        padding: 0 1;
        text-style: bold;
        background: #7C3AED;
        color: #F9FAFB;
    }

    DetailScreen #detail-body {
        padding: 1 2;
        border: heavy $accent;
    }
    """

    def __init__(self, item: WorkItem, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.item = item

    def compose(self) -> ComposeResult:
        yield Static(f"#{self.item.id} {self.item.title}", id="detail-title", markup=False)
        with VerticalScroll(id="detail-body"):
            yield Static(detail_renderable(self.item), id="detail-content")
        yield Footer()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_open_browser(self) -> None:
        self.app.action_open_browser()

    def action_scroll_down(self) -> None:
        self.query_one("#detail-body", VerticalScroll).scroll_down()

    def action_scroll_up(self) -> None:
        self.query_one("#detail-body", VerticalScroll).scroll_up()

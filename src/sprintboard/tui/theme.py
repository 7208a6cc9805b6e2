from __future__ import annotations

from rich.text import Text

ACCENT = "#7C3AED"
MUTED = "#6B7280"
TEXT_MUTED = "#9CA3AF"
SUCCESS = "#10B981"
ERROR = "#EF4444"

# Unknown types and states fall back to DEFAULT_BADGE_COLOR.
DEFAULT_BADGE_COLOR = TEXT_MUTED

TYPE_COLORS = {
    "User Story": "#3B82F6",
    "Story": "#3B82F6",
    "Task": "#F59E0B",
    "Bug": "#EF4444",
    "Feature": "#8B5CF6",
    "Epic": "#EC4899",
}

STATE_COLORS = {
    "New": "#6B7280",
    "Active": "#3B82F6",
    "Resolved": "#10B981",
    "Closed": "#6B7280",
    "To Do": "#F97316",
    "In Progress": "#8B5CF6",
    "Done": "#10B981",
    "Testing": "#FBBF24",
    "Removed": "#6B7280",
    "Approved": "#10B981",
}


def type_color(work_item_type: str) -> str:
    return TYPE_COLORS.get(work_item_type, DEFAULT_BADGE_COLOR)


def state_color(state: str) -> str:
    return STATE_COLORS.get(state, DEFAULT_BADGE_COLOR)


def type_badge(label: str, work_item_type: str | None = None) -> Text:
    return Text(label, style=f"bold {type_color(work_item_type or label)}")


def state_badge(label: str, state: str | None = None) -> Text:
    return Text(label, style=f"bold {state_color(state or label)}")

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import NewType

# Service-configurable values: new types and states can appear at any time.
WorkItemType = NewType("WorkItemType", str)
WorkItemState = NewType("WorkItemState", str)

PATH_SEPARATOR = "\\"

SHORT_TYPES = {
    "User Story": "Story",
    "Task": "Task",
    "Bug": "Bug",
    "Feature": "Feature",
    "Epic": "Epic",
}


def last_segment(path: str) -> str:
    """Return the last backslash-separated segment of a classification path."""
    return path.rsplit(PATH_SEPARATOR, 1)[-1]


def normalize_area_path(path: str) -> str:
    """Trim separators and drop the root ``Area`` segment.

    ``\\Project\\Area\\Team`` becomes ``Project\\Team`` so area paths match the
    form used on work items.
    """
    path = path.strip(PATH_SEPARATOR)
    parts = path.split(PATH_SEPARATOR)
    if len(parts) >= 2 and parts[1] == "Area":
        parts = [parts[0], *parts[2:]]
    return PATH_SEPARATOR.join(parts)


@dataclass(frozen=True)
class WorkItem:
    id: int
    rev: int
    title: str
    state: WorkItemState
    type: WorkItemType
    assigned_to: str | None = None
    iteration_path: str = ""
    area_path: str = ""
    description: str = ""
    tags: tuple[str, ...] = ()
    parent_id: int | None = None
    parent_title: str | None = None  # best effort, may stay None
    priority: int = 0
    created_date: datetime | None = None
    changed_date: datetime | None = None
    url: str = ""
    web_url: str = ""

    @property
    def short_type(self) -> str:
        return SHORT_TYPES.get(self.type, self.type)

    @property
    def sprint_name(self) -> str:
        return last_segment(self.iteration_path)

    @property
    def area_name(self) -> str:
        return last_segment(self.area_path)


@dataclass(frozen=True)
class Iteration:
    id: str
    name: str
    path: str
    start_date: datetime | None = None
    finish_date: datetime | None = None
    time_frame: str | None = None  # past, current, future
    url: str = ""

    @property
    def is_current(self) -> bool:
        return self.time_frame == "current"

    @property
    def is_past(self) -> bool:
        return self.time_frame == "past"

    @property
    def is_future(self) -> bool:
        return self.time_frame == "future"

    @property
    def display_name(self) -> str:
        if self.is_current:
            return f"{self.name} (current)"
        return self.name


@dataclass(frozen=True)
class Area:
    id: int
    name: str
    path: str

    @property
    def display_name(self) -> str:
        if PATH_SEPARATOR in self.path:
            return last_segment(self.path)
        return self.name


@dataclass(frozen=True)
class TeamMember:
    id: str
    display_name: str
    unique_name: str


@dataclass(frozen=True)
class StateInfo:
    name: str
    color: str = ""
    category: str = ""  # Proposed, InProgress, Resolved, Completed, Removed

"""Cursor, scroll and sort bookkeeping for the work item list."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from sprintboard.models import WorkItem


class SortField(Enum):
    ID = "id"
    STATE = "state"
    TYPE = "type"


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


def _sort_key(field: SortField):
    if field is SortField.STATE:
        return lambda item: str(item.state)
    if field is SortField.TYPE:
        return lambda item: str(item.type)
    return lambda item: item.id


class WorkItemList:
    """The fetched work items in display order, plus cursor and viewport.

    ``replace`` is the only way items change. The cursor always indexes the
    sorted collection and is 0 when the list is empty.
    """

    def __init__(self) -> None:
        self._items: list[WorkItem] = []
        self.cursor = 0
        self.offset = 0
        self.sort_field = SortField.ID
        self.sort_direction = SortDirection.ASC
        self._visible_rows = 1

    @property
    def items(self) -> tuple[WorkItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def selected(self) -> WorkItem | None:
        if 0 <= self.cursor < len(self._items):
            return self._items[self.cursor]
        return None

    def replace(self, items: Iterable[WorkItem]) -> None:
        selected = self.selected()
        self._items = list(items)
        self._sort()
        self._relocate(selected.id if selected else None)

    def toggle_sort(self, field: SortField) -> None:
        if field is self.sort_field:
            self.sort_direction = (
                SortDirection.DESC
                if self.sort_direction is SortDirection.ASC
                else SortDirection.ASC
            )
        else:
            self.sort_field = field
            self.sort_direction = SortDirection.ASC
        selected = self.selected()
        self._sort()
        self._relocate(selected.id if selected else None)

    def move_cursor(self, delta: int) -> None:
        if not self._items:
            return
        self.cursor = max(0, min(len(self._items) - 1, self.cursor + delta))
        self.adjust_viewport()

    def move_to_top(self) -> None:
        self.cursor = 0
        self.offset = 0

    def move_to_bottom(self) -> None:
        if self._items:
            self.cursor = len(self._items) - 1
        self.adjust_viewport()

    def adjust_viewport(self, visible_rows: int | None = None) -> None:
        """Scroll so the cursor stays inside a window of ``visible_rows``."""
        if visible_rows is not None:
            self._visible_rows = max(1, visible_rows)
        rows = self._visible_rows
        if self.cursor < self.offset:
            self.offset = self.cursor
        if self.cursor > self.offset + rows - 1:
            self.offset = self.cursor - rows + 1
        self.offset = max(0, self.offset)

    def visible_slice(self, visible_rows: int | None = None) -> list[tuple[int, WorkItem]]:
        self.adjust_viewport(visible_rows)
        end = min(len(self._items), self.offset + self._visible_rows)
        return [(i, self._items[i]) for i in range(self.offset, end)]

    def _sort(self) -> None:
        self._items = sorted(
            self._items,
            key=_sort_key(self.sort_field),
            reverse=self.sort_direction is SortDirection.DESC,
        )

    def _relocate(self, selected_id: int | None) -> None:
        if selected_id is not None:
            for i, item in enumerate(self._items):
                if item.id == selected_id:
                    self.cursor = i
                    break
        if self.cursor >= len(self._items):
            self.cursor = len(self._items) - 1
        if self.cursor < 0:
            self.cursor = 0
        self.adjust_viewport()

from __future__ import annotations

import pytest

from sprintboard.models import WorkItem, WorkItemState, WorkItemType
from sprintboard.worklist import SortDirection, SortField, WorkItemList


def _make_item(id: int, state: str = "Active", type: str = "Task") -> WorkItem:
    return WorkItem(
        id=id,
        rev=1,
        title=f"Item {id}",
        state=WorkItemState(state),
        type=WorkItemType(type),
    )


def _ids(worklist: WorkItemList) -> list[int]:
    return [item.id for item in worklist.items]


def test_empty_list() -> None:
    worklist = WorkItemList()
    worklist.replace([])
    assert worklist.cursor == 0
    assert worklist.selected() is None
    worklist.move_cursor(1)
    worklist.move_to_bottom()
    assert worklist.cursor == 0


def test_replace_sorts_by_id_ascending() -> None:
    worklist = WorkItemList()
    worklist.replace([_make_item(3), _make_item(1), _make_item(2)])
    assert _ids(worklist) == [1, 2, 3]
    assert worklist.sort_field is SortField.ID
    assert worklist.sort_direction is SortDirection.ASC


def test_replace_is_idempotent() -> None:
    items = [_make_item(i) for i in range(20)]
    worklist = WorkItemList()
    worklist.replace(items)
    worklist.adjust_viewport(5)
    worklist.move_cursor(12)
    before = (worklist.cursor, worklist.offset, _ids(worklist))
    worklist.replace(items)
    assert (worklist.cursor, worklist.offset, _ids(worklist)) == before


def test_replace_preserves_selection_across_reorder() -> None:
    worklist = WorkItemList()
    worklist.replace([_make_item(i) for i in (1, 2, 3, 4)])
    worklist.move_cursor(2)
    assert worklist.selected().id == 3
    worklist.replace([_make_item(i) for i in (0, 3, -5, 9, 4)])
    assert worklist.selected().id == 3
    assert worklist.cursor == 2  # sorted: -5, 0, 3, 4, 9


def test_replace_clamps_when_selection_disappears() -> None:
    worklist = WorkItemList()
    worklist.replace([_make_item(i) for i in range(10)])
    worklist.move_to_bottom()
    worklist.replace([_make_item(i) for i in range(3)])
    assert worklist.cursor == 2
    worklist.replace([])
    assert worklist.cursor == 0
    assert worklist.offset == 0


@pytest.mark.parametrize("field", list(SortField))
def test_toggle_same_field_flips_direction(field: SortField) -> None:
    worklist = WorkItemList()
    worklist.toggle_sort(field)
    if field is SortField.ID:
        assert worklist.sort_direction is SortDirection.DESC
    else:
        assert worklist.sort_direction is SortDirection.ASC
    direction = worklist.sort_direction
    worklist.toggle_sort(field)
    assert worklist.sort_direction is not direction


def test_toggle_different_field_resets_to_ascending() -> None:
    worklist = WorkItemList()
    worklist.toggle_sort(SortField.ID)
    assert worklist.sort_direction is SortDirection.DESC
    worklist.toggle_sort(SortField.STATE)
    assert worklist.sort_field is SortField.STATE
    assert worklist.sort_direction is SortDirection.ASC


def test_sort_by_state_is_stable_and_follows_cursor() -> None:
    worklist = WorkItemList()
    worklist.replace(
        [
            _make_item(1, state="New"),
            _make_item(2, state="Active"),
            _make_item(3, state="New"),
            _make_item(4, state="Active"),
        ]
    )
    worklist.move_cursor(2)  # item 3
    worklist.toggle_sort(SortField.STATE)
    assert _ids(worklist) == [2, 4, 1, 3]
    assert worklist.selected().id == 3
    worklist.toggle_sort(SortField.STATE)
    assert _ids(worklist) == [1, 3, 2, 4]
    assert worklist.selected().id == 3


def test_sort_by_type() -> None:
    worklist = WorkItemList()
    worklist.replace([_make_item(1, type="Task"), _make_item(2, type="Bug")])
    worklist.toggle_sort(SortField.TYPE)
    assert _ids(worklist) == [2, 1]


def test_viewport_follows_cursor() -> None:
    worklist = WorkItemList()
    worklist.replace([_make_item(i) for i in range(30)])
    worklist.adjust_viewport(10)
    worklist.move_cursor(15)
    assert worklist.offset == 6
    assert worklist.offset <= worklist.cursor <= worklist.offset + 9
    worklist.move_cursor(-12)
    assert worklist.offset == worklist.cursor == 3
    visible = worklist.visible_slice(10)
    assert [i for i, _ in visible] == list(range(3, 13))
    worklist.move_to_top()
    assert (worklist.cursor, worklist.offset) == (0, 0)


def test_items_is_read_only_view() -> None:
    worklist = WorkItemList()
    worklist.replace([_make_item(1)])
    assert isinstance(worklist.items, tuple)
    assert len(worklist) == 1

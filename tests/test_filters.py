from __future__ import annotations

import pytest

from sprintboard.filters import (
    ALL,
    DEFAULT_STATES,
    MAX_VISIBLE_OPTIONS,
    FilterGroup,
    FilterKind,
    FilterOption,
    FilterQuery,
    build_filter_state,
)
from sprintboard.models import Area, Iteration, StateInfo
from sprintboard.prefs import SavedFilters


def _iterations() -> list[Iteration]:
    return [
        Iteration(id="1", name="Sprint 4", path="Proj\\Sprint 4", time_frame="past"),
        Iteration(id="2", name="Sprint 5", path="Proj\\Sprint 5", time_frame="current"),
        Iteration(id="3", name="Sprint 6", path="Proj\\Sprint 6", time_frame="future"),
    ]


def _group(n: int) -> FilterGroup:
    options = [FilterOption(f"Option {i}", f"v{i}") for i in range(n)]
    group = FilterGroup(FilterKind.STATE, "State", options)
    group.select(0)
    return group


def _selected(group: FilterGroup) -> list[str]:
    return [o.value for o in group.options if o.selected]


# -- FilterGroup.select --


@pytest.mark.parametrize("index", [0, 3, 9])
def test_select_leaves_exactly_one_selected(index: int) -> None:
    group = _group(10)
    group.options[5].selected = True  # stray selection gets cleared
    group.select(index)
    assert _selected(group) == [f"v{index}"]


@pytest.mark.parametrize("index", [-1, 10, 99])
def test_select_out_of_range_is_noop(index: int) -> None:
    group = _group(10)
    group.select(4)
    group.select(index)
    assert _selected(group) == ["v4"]


def test_select_value() -> None:
    group = _group(3)
    assert group.select_value("v2") is True
    assert _selected(group) == ["v2"]
    assert group.select_value("missing") is False
    assert _selected(group) == ["v2"]


def test_selected_option_falls_back_to_first() -> None:
    group = _group(3)
    for option in group.options:
        option.selected = False
    assert group.selected_option().value == "v0"


def test_effective_value_of_empty_group_is_default() -> None:
    group = FilterGroup(FilterKind.AREA, "Area")
    assert group.selected_option() is None
    assert group.effective_value() == ALL


# -- FilterGroup cursor and scrolling --


def test_cursor_clamps_and_scrolls() -> None:
    group = _group(10)
    group.move_cursor(-1)
    assert group.cursor == 0
    for _ in range(7):
        group.move_cursor(1)
    assert group.cursor == 7
    assert group.offset <= group.cursor < group.offset + MAX_VISIBLE_OPTIONS
    group.move_cursor(100)
    assert group.cursor == 9
    assert group.offset == 10 - MAX_VISIBLE_OPTIONS


def test_move_to_top_and_bottom() -> None:
    group = _group(10)
    group.move_to_bottom()
    assert group.cursor == 9
    assert [i for i, _ in group.visible_options()] == [4, 5, 6, 7, 8, 9]
    group.move_to_top()
    assert (group.cursor, group.offset) == (0, 0)


def test_select_current_uses_cursor() -> None:
    group = _group(4)
    group.move_cursor(2)
    group.select_current()
    assert _selected(group) == ["v2"]


# -- build_filter_state --


def test_build_with_no_data() -> None:
    state = build_filter_state([], [], {})
    sprint = state.group(FilterKind.SPRINT)
    area = state.group(FilterKind.AREA)
    assert [(o.label, o.selected) for o in sprint.options] == [("All", True)]
    assert [(o.label, o.selected) for o in area.options] == [("All", True)]
    states = [o.value for o in state.group(FilterKind.STATE).options]
    assert states == [ALL, *DEFAULT_STATES]
    assert state.effective_query() == FilterQuery(
        sprint_path="all", state="all", assigned="me", area_path="all"
    )


def test_build_selects_current_sprint() -> None:
    state = build_filter_state(_iterations(), [], {})
    sprint = state.group(FilterKind.SPRINT)
    assert [o.label for o in sprint.options] == [
        "All",
        "Sprint 4",
        "Sprint 5 (current)",
        "Sprint 6",
    ]
    assert _selected(sprint) == ["Proj\\Sprint 5"]


def test_build_without_current_sprint_selects_all() -> None:
    iterations = [it for it in _iterations() if not it.is_current]
    state = build_filter_state(iterations, [], {})
    assert _selected(state.group(FilterKind.SPRINT)) == [ALL]


def test_state_options_merge_in_category_order() -> None:
    states_by_type = {
        "A": [StateInfo("New", category="Proposed"), StateInfo("Active", category="InProgress")],
        "B": [StateInfo("Active", category="InProgress"), StateInfo("Done", category="Completed")],
    }
    state = build_filter_state([], [], states_by_type)
    names = [o.value for o in state.group(FilterKind.STATE).options[1:]]
    assert names == ["New", "Active", "Done"]


def test_state_options_unknown_category_last() -> None:
    states_by_type = {
        "A": [StateInfo("Odd", category="Custom"), StateInfo("Done", category="Completed")],
    }
    state = build_filter_state([], [], states_by_type)
    names = [o.value for o in state.group(FilterKind.STATE).options[1:]]
    assert names == ["Done", "Odd"]


def test_area_options_use_display_name_and_path() -> None:
    areas = [Area(1, "Proj", "Proj"), Area(2, "Team A", "Proj\\Team A")]
    state = build_filter_state([], areas, {})
    options = state.group(FilterKind.AREA).options
    assert [(o.label, o.value) for o in options] == [
        ("All", ALL),
        ("Proj", "Proj"),
        ("Team A", "Proj\\Team A"),
    ]


def test_assigned_defaults_to_me() -> None:
    state = build_filter_state()
    assert _selected(state.group(FilterKind.ASSIGNED)) == ["me"]


# -- FilterState --


def test_group_navigation_clamps() -> None:
    state = build_filter_state()
    state.prev_group()
    assert state.active == 0
    for _ in range(10):
        state.next_group()
    assert state.active == len(state.groups) - 1
    assert state.active_group().kind is FilterKind.AREA


def test_apply_saved_selections_restores_sprint() -> None:
    iterations = [
        Iteration(id="1", name="Sprint 5", path="Sprint 5", time_frame="past"),
        Iteration(id="2", name="Sprint 6", path="Sprint 6", time_frame="current"),
    ]
    state = build_filter_state(iterations, [], {"Task": [StateInfo("Active", category="InProgress")]})
    state.apply_saved_selections(sprint="Sprint 5", state="Active", assigned="all", area="all")
    assert _selected(state.group(FilterKind.SPRINT)) == ["Sprint 5"]
    assert _selected(state.group(FilterKind.STATE)) == ["Active"]
    assert _selected(state.group(FilterKind.ASSIGNED)) == ["all"]


def test_apply_saved_current_keeps_computed_sprint() -> None:
    state = build_filter_state(_iterations(), [], {})
    state.apply_saved_selections(sprint="current", state=None, assigned=None, area=None)
    assert _selected(state.group(FilterKind.SPRINT)) == ["Proj\\Sprint 5"]


def test_apply_saved_unknown_value_is_ignored() -> None:
    state = build_filter_state(_iterations(), [], {})
    state.apply_saved_selections(sprint="Proj\\Gone", state="Nope", assigned="", area="x")
    assert _selected(state.group(FilterKind.SPRINT)) == ["Proj\\Sprint 5"]
    assert _selected(state.group(FilterKind.STATE)) == [ALL]
    assert _selected(state.group(FilterKind.ASSIGNED)) == ["me"]


def test_to_saved_and_selections() -> None:
    state = build_filter_state(_iterations(), [], {})
    assert state.to_saved() == SavedFilters(
        sprint="Proj\\Sprint 5", state="all", assigned="me", area="all"
    )
    assert state.selections() == state.effective_query()


def test_apply_query_round_trips_selections() -> None:
    state = build_filter_state(_iterations(), [], {})
    state.group(FilterKind.SPRINT).select_value("Proj\\Sprint 4")
    rebuilt = build_filter_state(_iterations(), [], {})
    rebuilt.apply_query(state.selections())
    assert rebuilt.effective_query().sprint_path == "Proj\\Sprint 4"

from __future__ import annotations

from sprintboard.models import (
    Area,
    Iteration,
    WorkItem,
    WorkItemState,
    WorkItemType,
    last_segment,
    normalize_area_path,
)


def _make_item(**overrides) -> WorkItem:
    fields = dict(
        id=1,
        rev=1,
        title="Fix login",
        state=WorkItemState("Active"),
        type=WorkItemType("User Story"),
    )
    fields.update(overrides)
    return WorkItem(**fields)


# -- Area paths --


def test_normalize_drops_area_segment() -> None:
    assert normalize_area_path("\\ProjectX\\Area\\TeamA") == "ProjectX\\TeamA"


def test_normalize_without_area_segment_only_trims() -> None:
    assert normalize_area_path("\\ProjectX\\TeamA\\") == "ProjectX\\TeamA"


def test_normalize_root_area() -> None:
    assert normalize_area_path("\\ProjectX\\Area") == "ProjectX"


def test_normalize_area_only_removed_in_second_position() -> None:
    assert normalize_area_path("ProjectX\\TeamA\\Area") == "ProjectX\\TeamA\\Area"


def test_last_segment() -> None:
    assert last_segment("Project\\Sprint 5") == "Sprint 5"
    assert last_segment("Project") == "Project"


# -- WorkItem --


def test_short_type_known_and_unknown() -> None:
    assert _make_item(type=WorkItemType("User Story")).short_type == "Story"
    assert _make_item(type=WorkItemType("Bug")).short_type == "Bug"
    assert _make_item(type=WorkItemType("Impediment")).short_type == "Impediment"


def test_sprint_and_area_names() -> None:
    item = _make_item(iteration_path="Proj\\Sprint 5", area_path="Proj\\Team A")
    assert item.sprint_name == "Sprint 5"
    assert item.area_name == "Team A"


def test_optional_associations_default_to_none() -> None:
    item = _make_item()
    assert item.assigned_to is None
    assert item.parent_id is None
    assert item.parent_title is None


def test_work_item_is_hashable() -> None:
    item = _make_item(tags=("a", "b"))
    assert {item: 1}[item] == 1


# -- Iteration / Area --


def test_iteration_flags_and_display_name() -> None:
    current = Iteration(id="1", name="Sprint 5", path="P\\Sprint 5", time_frame="current")
    past = Iteration(id="2", name="Sprint 4", path="P\\Sprint 4", time_frame="past")
    assert current.is_current and not current.is_past
    assert current.display_name == "Sprint 5 (current)"
    assert past.is_past
    assert past.display_name == "Sprint 4"
    assert Iteration(id="3", name="S6", path="P\\S6", time_frame="future").is_future


def test_area_display_name() -> None:
    assert Area(id=1, name="TeamA", path="ProjectX\\TeamA").display_name == "TeamA"
    assert Area(id=2, name="ProjectX", path="ProjectX").display_name == "ProjectX"

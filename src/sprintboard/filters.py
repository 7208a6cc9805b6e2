"""Filter panel state: four single-select groups composed into one query."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from sprintboard.models import Area, Iteration, StateInfo
from sprintboard.prefs import SavedFilters

ALL = "all"
ME = "me"
CURRENT_SPRINT = "current"

MAX_VISIBLE_OPTIONS = 6

STATE_CATEGORY_ORDER = ["Proposed", "InProgress", "Resolved", "Completed", "Removed"]
DEFAULT_STATES = ["New", "Active", "Resolved", "Closed"]


class FilterKind(Enum):
    SPRINT = "sprint"
    STATE = "state"
    ASSIGNED = "assigned"
    AREA = "area"


@dataclass(frozen=True)
class FilterQuery:
    """Inputs for a work item query. ``"all"`` means no filter on that dimension."""

    sprint_path: str = ALL
    state: str = ALL
    assigned: str = ALL
    area_path: str = ALL


@dataclass
class FilterOption:
    label: str
    value: str
    selected: bool = False


@dataclass
class FilterGroup:
    kind: FilterKind
    title: str
    options: list[FilterOption] = field(default_factory=list)
    cursor: int = 0
    offset: int = 0
    default_value: str = ALL

    def select(self, index: int) -> None:
        """Select the option at ``index`` and clear every other option.

        After the call exactly one option is selected. An out-of-range index
        leaves the group untouched.
        """
        if index < 0 or index >= len(self.options):
            return
        for i, option in enumerate(self.options):
            option.selected = i == index

    def select_current(self) -> None:
        self.select(self.cursor)

    def select_value(self, value: str) -> bool:
        """Select the first option whose value matches. Returns False if none does."""
        for i, option in enumerate(self.options):
            if option.value == value:
                self.select(i)
                return True
        return False

    def selected_option(self) -> FilterOption | None:
        for option in self.options:
            if option.selected:
                return option
        if self.options:
            return self.options[0]
        return None

    def effective_value(self) -> str:
        option = self.selected_option()
        return option.value if option is not None else self.default_value

    def move_cursor(self, delta: int, visible: int = MAX_VISIBLE_OPTIONS) -> None:
        if not self.options:
            self.cursor = 0
        else:
            self.cursor = max(0, min(len(self.options) - 1, self.cursor + delta))
        self._follow_cursor(visible)

    def move_to_top(self) -> None:
        self.cursor = 0
        self.offset = 0

    def move_to_bottom(self, visible: int = MAX_VISIBLE_OPTIONS) -> None:
        if self.options:
            self.cursor = len(self.options) - 1
        self._follow_cursor(visible)

    def visible_options(
        self, visible: int = MAX_VISIBLE_OPTIONS
    ) -> list[tuple[int, FilterOption]]:
        end = min(len(self.options), self.offset + visible)
        return [(i, self.options[i]) for i in range(self.offset, end)]

    def _follow_cursor(self, visible: int) -> None:
        if self.cursor < self.offset:
            self.offset = self.cursor
        if self.cursor >= self.offset + visible:
            self.offset = self.cursor - visible + 1
        self.offset = max(0, self.offset)


@dataclass
class FilterState:
    groups: list[FilterGroup]
    active: int = 0

    def active_group(self) -> FilterGroup:
        return self.groups[self.active]

    def group(self, kind: FilterKind) -> FilterGroup:
        for g in self.groups:
            if g.kind is kind:
                return g
        raise KeyError(kind)

    def next_group(self) -> None:
        if self.active < len(self.groups) - 1:
            self.active += 1

    def prev_group(self) -> None:
        if self.active > 0:
            self.active -= 1

    def effective_query(self) -> FilterQuery:
        return FilterQuery(
            sprint_path=self.group(FilterKind.SPRINT).effective_value(),
            state=self.group(FilterKind.STATE).effective_value(),
            assigned=self.group(FilterKind.ASSIGNED).effective_value(),
            area_path=self.group(FilterKind.AREA).effective_value(),
        )

    def apply_saved_selections(
        self,
        sprint: str | None,
        state: str | None,
        assigned: str | None,
        area: str | None,
    ) -> None:
        """Select saved values by value match; unknown values are ignored.

        A saved sprint of ``"current"`` leaves the computed current-sprint
        selection alone.
        """
        targets = {
            FilterKind.SPRINT: sprint,
            FilterKind.STATE: state,
            FilterKind.ASSIGNED: assigned,
            FilterKind.AREA: area,
        }
        for kind, value in targets.items():
            if not value:
                continue
            if kind is FilterKind.SPRINT and value == CURRENT_SPRINT:
                continue
            self.group(kind).select_value(value)

    def selections(self) -> FilterQuery:
        """Current selections, for carrying over to a rebuilt FilterState."""
        return self.effective_query()

    def apply_query(self, query: FilterQuery) -> None:
        self.apply_saved_selections(
            query.sprint_path, query.state, query.assigned, query.area_path
        )

    def to_saved(self) -> SavedFilters:
        query = self.effective_query()
        return SavedFilters(
            sprint=query.sprint_path,
            state=query.state,
            assigned=query.assigned,
            area=query.area_path,
        )


def _state_names(states_by_type: Mapping[str, Sequence[StateInfo]]) -> list[str]:
    seen: set[str] = set()
    names: list[str] = []
    for category in STATE_CATEGORY_ORDER:
        for states in states_by_type.values():
            for state in states:
                if state.category == category and state.name not in seen:
                    seen.add(state.name)
                    names.append(state.name)
    for states in states_by_type.values():
        for state in states:
            if state.name not in seen:
                seen.add(state.name)
                names.append(state.name)
    return names or list(DEFAULT_STATES)


def build_filter_state(
    iterations: Sequence[Iteration] = (),
    areas: Sequence[Area] = (),
    states_by_type: Mapping[str, Sequence[StateInfo]] | None = None,
) -> FilterState:
    """Build a fresh FilterState from domain data.

    The first iteration with time frame ``current`` is pre-selected, falling
    back to ``All``. State options merge every type's states in category
    order, deduplicated by first sighting.
    """
    sprint = FilterGroup(FilterKind.SPRINT, "Sprint", [FilterOption("All", ALL)])
    for iteration in iterations:
        sprint.options.append(FilterOption(iteration.display_name, iteration.path))
    current = next((i for i, it in enumerate(iterations) if it.is_current), None)
    sprint.select(0 if current is None else current + 1)

    state = FilterGroup(FilterKind.STATE, "State", [FilterOption("All", ALL, True)])
    for name in _state_names(states_by_type or {}):
        state.options.append(FilterOption(name, name))

    assigned = FilterGroup(
        FilterKind.ASSIGNED,
        "Assigned",
        [FilterOption("All", ALL), FilterOption("Me", ME, True)],
    )

    area = FilterGroup(FilterKind.AREA, "Area", [FilterOption("All", ALL, True)])
    for a in areas:
        area.options.append(FilterOption(a.display_name, a.path))

    return FilterState(groups=[sprint, state, assigned, area])

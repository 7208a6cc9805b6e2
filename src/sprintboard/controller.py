"""Application state and the single message -> effects update function.

The controller never performs I/O. ``handle`` mutates ``AppState`` and
returns effects for the UI layer to run; their results come back as new
messages. Every query carries a token and only the newest token's response
is applied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sprintboard.filters import FilterQuery, FilterState, build_filter_state
from sprintboard.models import Area, Iteration, StateInfo, TeamMember, WorkItem
from sprintboard.prefs import SavedFilters
from sprintboard.worklist import WorkItemList

logger = logging.getLogger(__name__)


class Mode(Enum):
    INITIALIZING = "initializing"
    READY = "ready"
    LOADING = "loading"
    MODAL = "modal"
    DETAIL = "detail"


class ModalKind(Enum):
    STATE = "state"
    ASSIGN = "assign"
    BRANCH = "branch"


# Messages


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class DataLoaded:
    iterations: Sequence[Iteration]
    areas: Sequence[Area]
    states_by_type: dict[str, list[StateInfo]]
    team_members: Sequence[TeamMember]


@dataclass(frozen=True)
class DataLoadFailed:
    error: str


@dataclass(frozen=True)
class ItemsLoaded:
    token: int
    items: Sequence[WorkItem]


@dataclass(frozen=True)
class QueryFailed:
    token: int
    error: str


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class FilterSelected:
    pass


@dataclass(frozen=True)
class OpenModal:
    kind: ModalKind


@dataclass(frozen=True)
class ModalCancelled:
    pass


@dataclass(frozen=True)
class StateChangeConfirmed:
    item_id: int
    new_state: str


@dataclass(frozen=True)
class AssignConfirmed:
    item_id: int
    unique_name: str
    display_name: str


@dataclass(frozen=True)
class BranchConfirmed:
    name: str


@dataclass(frozen=True)
class StateChanged:
    new_state: str


@dataclass(frozen=True)
class Assigned:
    display_name: str


@dataclass(frozen=True)
class MutationFailed:
    error: str


@dataclass(frozen=True)
class BranchCreated:
    name: str


@dataclass(frozen=True)
class BranchFailed:
    error: str


@dataclass(frozen=True)
class OpenDetail:
    pass


@dataclass(frozen=True)
class CloseDetail:
    pass


@dataclass(frozen=True)
class OpenInBrowser:
    pass


@dataclass(frozen=True)
class BrowserFailed:
    error: str


# Effects


@dataclass(frozen=True)
class LoadData:
    pass


@dataclass(frozen=True)
class QueryItems:
    token: int
    query: FilterQuery


@dataclass(frozen=True)
class UpdateState:
    item_id: int
    new_state: str


@dataclass(frozen=True)
class AssignItem:
    item_id: int
    unique_name: str
    display_name: str


@dataclass(frozen=True)
class CreateBranch:
    name: str


@dataclass(frozen=True)
class OpenUrl:
    url: str


@dataclass(frozen=True)
class SaveFilters:
    saved: SavedFilters


Effect = LoadData | QueryItems | UpdateState | AssignItem | CreateBranch | OpenUrl | SaveFilters


@dataclass
class AppState:
    mode: Mode = Mode.INITIALIZING
    modal_kind: ModalKind | None = None
    loading: bool = False
    error: str | None = None
    fatal: bool = False
    status: str | None = None
    filters: FilterState = field(default_factory=build_filter_state)
    items: WorkItemList = field(default_factory=WorkItemList)
    states_by_type: dict[str, list[StateInfo]] = field(default_factory=dict)
    team_members: list[TeamMember] = field(default_factory=list)
    saved: SavedFilters = field(default_factory=SavedFilters)
    query_token: int = 0
    detail_item: WorkItem | None = None
    data_loaded: bool = False


class Controller:
    def __init__(self, saved: SavedFilters | None = None) -> None:
        self.state = AppState(saved=saved or SavedFilters())
        self._handlers: dict[type, Callable[[Any], list[Effect]]] = {
            Start: self._start,
            DataLoaded: self._data_loaded,
            DataLoadFailed: self._data_load_failed,
            ItemsLoaded: self._items_loaded,
            QueryFailed: self._query_failed,
            Refresh: self._refresh,
            FilterSelected: self._filter_selected,
            OpenModal: self._open_modal,
            ModalCancelled: self._modal_cancelled,
            StateChangeConfirmed: self._state_change_confirmed,
            AssignConfirmed: self._assign_confirmed,
            BranchConfirmed: self._branch_confirmed,
            StateChanged: self._state_changed,
            Assigned: self._assigned,
            MutationFailed: self._mutation_failed,
            BranchCreated: self._branch_created,
            BranchFailed: self._branch_failed,
            OpenDetail: self._open_detail,
            CloseDetail: self._close_detail,
            OpenInBrowser: self._open_in_browser,
            BrowserFailed: self._browser_failed,
        }

    def handle(self, message: object) -> list[Effect]:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise TypeError(f"Unhandled message: {message!r}")
        return handler(message)

    # -- helpers --

    def _issue_query(self) -> list[Effect]:
        s = self.state
        s.query_token += 1
        s.loading = True
        if s.mode in (Mode.READY, Mode.INITIALIZING):
            s.mode = Mode.LOADING
        return [QueryItems(token=s.query_token, query=s.filters.effective_query())]

    def _idle_mode(self) -> Mode:
        return Mode.READY if self.state.data_loaded else Mode.INITIALIZING

    def _is_stale(self, token: int) -> bool:
        if token != self.state.query_token:
            logger.debug(
                "Dropping stale query response (token %d, latest %d)",
                token,
                self.state.query_token,
            )
            return True
        return False

    # -- loading --

    def _start(self, msg: Start) -> list[Effect]:
        self.state.mode = Mode.LOADING
        self.state.loading = True
        return [LoadData()]

    def _data_loaded(self, msg: DataLoaded) -> list[Effect]:
        s = self.state
        previous = s.filters.selections() if s.data_loaded else None
        active = s.filters.active
        s.filters = build_filter_state(msg.iterations, msg.areas, msg.states_by_type)
        if previous is None:
            s.filters.apply_saved_selections(
                s.saved.sprint, s.saved.state, s.saved.assigned, s.saved.area
            )
        else:
            s.filters.apply_query(previous)
            s.filters.active = min(active, len(s.filters.groups) - 1)
        s.states_by_type = dict(msg.states_by_type)
        s.team_members = list(msg.team_members)
        s.data_loaded = True
        s.fatal = False
        s.error = None
        s.mode = Mode.LOADING
        logger.info(
            "Loaded %d iterations, %d areas, %d work item types, %d team members",
            len(msg.iterations),
            len(msg.areas),
            len(msg.states_by_type),
            len(msg.team_members),
        )
        return self._issue_query()

    def _data_load_failed(self, msg: DataLoadFailed) -> list[Effect]:
        s = self.state
        s.error = msg.error
        s.fatal = True
        s.loading = False
        s.mode = self._idle_mode()
        return []

    def _items_loaded(self, msg: ItemsLoaded) -> list[Effect]:
        if self._is_stale(msg.token):
            return []
        s = self.state
        s.items.replace(msg.items)
        s.loading = False
        s.error = None
        if s.mode in (Mode.LOADING, Mode.INITIALIZING):
            s.mode = Mode.READY
        return []

    def _query_failed(self, msg: QueryFailed) -> list[Effect]:
        if self._is_stale(msg.token):
            return []
        s = self.state
        s.error = msg.error
        s.loading = False
        if s.mode in (Mode.LOADING, Mode.INITIALIZING):
            s.mode = self._idle_mode()
        return []

    def _refresh(self, msg: Refresh) -> list[Effect]:
        s = self.state
        if s.mode is Mode.MODAL:
            return []
        s.error = None
        s.status = None
        if not s.data_loaded:
            s.fatal = False
            return self._start(Start())
        return self._issue_query()

    def _filter_selected(self, msg: FilterSelected) -> list[Effect]:
        s = self.state
        if not s.data_loaded:
            return []
        s.filters.active_group().select_current()
        effects = self._issue_query()
        effects.append(SaveFilters(saved=s.filters.to_saved()))
        return effects

    # -- modals --

    def _open_modal(self, msg: OpenModal) -> list[Effect]:
        s = self.state
        if s.mode is not Mode.READY or s.items.selected() is None:
            return []
        s.mode = Mode.MODAL
        s.modal_kind = msg.kind
        return []

    def _close_modal(self, mode: Mode) -> None:
        self.state.modal_kind = None
        self.state.mode = mode

    def _modal_cancelled(self, msg: ModalCancelled) -> list[Effect]:
        self._close_modal(Mode.READY)
        return []

    def _state_change_confirmed(self, msg: StateChangeConfirmed) -> list[Effect]:
        self._close_modal(Mode.LOADING)
        self.state.loading = True
        return [UpdateState(item_id=msg.item_id, new_state=msg.new_state)]

    def _assign_confirmed(self, msg: AssignConfirmed) -> list[Effect]:
        self._close_modal(Mode.LOADING)
        self.state.loading = True
        return [
            AssignItem(
                item_id=msg.item_id,
                unique_name=msg.unique_name,
                display_name=msg.display_name,
            )
        ]

    def _branch_confirmed(self, msg: BranchConfirmed) -> list[Effect]:
        self._close_modal(Mode.READY)
        return [CreateBranch(name=msg.name)]

    # -- mutation results --

    def _state_changed(self, msg: StateChanged) -> list[Effect]:
        self.state.status = f"State changed to {msg.new_state}"
        self.state.error = None
        return self._issue_query()

    def _assigned(self, msg: Assigned) -> list[Effect]:
        self.state.status = f"Assigned to {msg.display_name}"
        self.state.error = None
        return self._issue_query()

    def _mutation_failed(self, msg: MutationFailed) -> list[Effect]:
        s = self.state
        s.error = msg.error
        s.loading = False
        s.mode = Mode.READY
        return []

    def _branch_created(self, msg: BranchCreated) -> list[Effect]:
        self.state.status = f"Branch created: {msg.name}"
        self.state.error = None
        return []

    def _branch_failed(self, msg: BranchFailed) -> list[Effect]:
        self.state.error = msg.error
        return []

    # -- detail / browser --

    def _open_detail(self, msg: OpenDetail) -> list[Effect]:
        s = self.state
        item = s.items.selected()
        if s.mode is not Mode.READY or item is None:
            return []
        s.mode = Mode.DETAIL
        s.detail_item = item
        return []

    def _close_detail(self, msg: CloseDetail) -> list[Effect]:
        s = self.state
        if s.mode is Mode.DETAIL:
            s.mode = Mode.LOADING if s.loading else Mode.READY
        s.detail_item = None
        return []

    def _open_in_browser(self, msg: OpenInBrowser) -> list[Effect]:
        s = self.state
        item = s.detail_item if s.mode is Mode.DETAIL else s.items.selected()
        if item is None or not item.web_url:
            return []
        return [OpenUrl(url=item.web_url)]

    def _browser_failed(self, msg: BrowserFailed) -> list[Effect]:
        self.state.error = msg.error
        return []

from __future__ import annotations

import logging
from functools import partial

import click
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Static

from sprintboard.client import ApiError, AzureDevOpsClient
from sprintboard.config import Config
from sprintboard.controller import (
    AssignItem,
    Assigned,
    BranchCreated,
    BranchFailed,
    BrowserFailed,
    CloseDetail,
    Controller,
    CreateBranch,
    DataLoaded,
    DataLoadFailed,
    FilterSelected,
    ItemsLoaded,
    LoadData,
    ModalCancelled,
    ModalKind,
    Mode,
    MutationFailed,
    OpenDetail,
    OpenInBrowser,
    OpenModal,
    OpenUrl,
    QueryFailed,
    QueryItems,
    Refresh,
    SaveFilters,
    Start,
    StateChanged,
    UpdateState,
)
from sprintboard.git import GitBranches, GitError
from sprintboard.prefs import SavedFilters, load_saved_filters, save_saved_filters
from sprintboard.tui.details import DetailScreen, DetailsPanel
from sprintboard.tui.dialogs import AssignDialog, BranchDialog, HelpDialog, StateDialog
from sprintboard.tui.filter_panel import FilterPanel
from sprintboard.tui.theme import ERROR, SUCCESS
from sprintboard.tui.work_items import WorkItemsPanel
from sprintboard.worklist import SortField

logger = logging.getLogger(__name__)

# Actions that only make sense on the main board, not over a dialog or detail page.
MAIN_ONLY_ACTIONS = {
    "prev_group",
    "next_group",
    "sort",
    "refresh",
    "detail",
    "change_state",
    "assign",
    "branch",
    "back",
    "help",
}


def saved_from_config(config: Config) -> SavedFilters:
    defaults = config.defaults
    if defaults is None:
        return SavedFilters()
    return SavedFilters(
        sprint=defaults.sprint,
        state=defaults.state,
        assigned=defaults.assigned,
        area=defaults.area,
    )


class SprintboardApp(App):
    """Sprint work item board for an Azure DevOps team."""

    TITLE = "sprintboard"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main {
        height: 1fr;
    }

    #right {
        width: 1fr;
    }

    #status-bar {
        dock: bottom;
        height: 2;
        padding: 0 1;
        background: $boost;
    }

    #status-message {
        width: 100%;
    }

    #status-keys {
        width: 100%;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("question_mark", "help", "Help", show=True),
        Binding("h,left", "prev_group", "Prev filter", show=False),
        Binding("l,right", "next_group", "Next filter", show=False),
        Binding("v", "detail", "Detail", show=True),
        Binding("s", "change_state", "State", show=True),
        Binding("a", "assign", "Assign", show=True),
        Binding("b", "branch", "Branch", show=True),
        Binding("1", "sort('id')", "Sort ID", show=False),
        Binding("2", "sort('type')", "Sort type", show=False),
        Binding("3", "sort('state')", "Sort state", show=False),
        Binding("ctrl+r", "refresh", "Refresh", show=True),
        Binding("escape", "back", "Back", show=False),
    ]

    def __init__(
        self,
        config: Config,
        client: AzureDevOpsClient | None = None,
        git: GitBranches | None = None,
        saved: SavedFilters | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config
        self.client = client if client is not None else AzureDevOpsClient(config)
        self.git = git if git is not None else GitBranches()
        if saved is None:
            saved = load_saved_filters(saved_from_config(config))
        self.controller = Controller(saved=saved)
        self.sub_title = f"{config.organization}/{config.project} · {config.team}"

    def compose(self) -> ComposeResult:
        state = self.controller.state
        yield Header()
        with Horizontal(id="main"):
            yield FilterPanel(state.filters, id="filters")
            with Vertical(id="right"):
                yield WorkItemsPanel(state.items, id="work-items")
                yield DetailsPanel(id="details")
        with Vertical(id="status-bar"):
            yield Static("", id="status-message")
            yield Static(
                "[s]tate [a]ssign [b]ranch [v]iew [1/2/3]sort [^R]efresh [?]help [q]uit",
                id="status-keys",
                markup=False,
            )
        yield Footer()

    def on_mount(self) -> None:
        if self.config.theme != "default" and self.config.theme in self.available_themes:
            self.theme = self.config.theme
        self.query_one(WorkItemsPanel).focus()
        self.dispatch(Start())

    # -- update loop --

    def dispatch(self, message: object) -> None:
        """Feed a message to the controller, redraw, then run its effects."""
        effects = self.controller.handle(message)
        self._sync()
        for effect in effects:
            self._run_effect(effect)

    def _post(self, message: object) -> None:
        self.call_from_thread(self.dispatch, message)

    def _sync(self) -> None:
        state = self.controller.state

        filter_panel = self.query_one(FilterPanel)
        if filter_panel.filters is not state.filters:
            filter_panel.set_filters(state.filters)
        else:
            filter_panel.refresh()

        items_panel = self.query_one(WorkItemsPanel)
        if state.fatal:
            items_panel.empty_message = "Could not load data. Press Ctrl+R to retry."
        elif state.loading and not len(state.items):
            items_panel.empty_message = "Loading work items..."
        else:
            items_panel.empty_message = "No work items found"
        items_panel.refresh()

        self.query_one(DetailsPanel).show_item(state.items.selected())
        self.query_one("#status-message", Static).update(self._status_text())

    def _status_text(self) -> Text:
        state = self.controller.state
        text = Text()
        if state.loading:
            text.append("Loading... ")
        if state.error:
            text.append(f"Error: {state.error}", style=f"bold {ERROR}")
        elif state.status:
            text.append(state.status, style=SUCCESS)
        if state.data_loaded:
            text.append(f"  {len(state.items)} items", style="dim")
        return text

    def _run_effect(self, effect: object) -> None:
        if isinstance(effect, LoadData):
            work = self._load_data
        elif isinstance(effect, QueryItems):
            work = partial(self._query_items, effect)
        elif isinstance(effect, UpdateState):
            work = partial(self._update_state, effect)
        elif isinstance(effect, AssignItem):
            work = partial(self._assign_item, effect)
        elif isinstance(effect, CreateBranch):
            work = partial(self._create_branch, effect)
        elif isinstance(effect, OpenUrl):
            work = partial(self._open_url, effect)
        elif isinstance(effect, SaveFilters):
            work = partial(save_saved_filters, effect.saved)
        else:
            raise TypeError(f"Unknown effect: {effect!r}")
        self.run_worker(
            work,
            thread=True,
            group=type(effect).__name__,
            exit_on_error=False,
        )

    # -- workers (run in threads) --

    def _load_data(self) -> None:
        try:
            iterations = self.client.fetch_iterations()
            areas = self.client.fetch_areas()
        except ApiError as e:
            self._post(DataLoadFailed(error=str(e)))
            return

        try:
            states_by_type = self.client.fetch_work_item_type_states()
        except ApiError as e:
            logger.warning("Continuing without work item states: %s", e)
            states_by_type = {}

        try:
            members = self.client.fetch_team_members()
        except ApiError as e:
            logger.warning("Continuing without team members: %s", e)
            members = []

        self._post(
            DataLoaded(
                iterations=iterations,
                areas=areas,
                states_by_type=states_by_type,
                team_members=members,
            )
        )

    def _query_items(self, effect: QueryItems) -> None:
        try:
            items = self.client.query_work_items(effect.query)
        except ApiError as e:
            self._post(QueryFailed(token=effect.token, error=str(e)))
            return
        self._post(ItemsLoaded(token=effect.token, items=items))

    def _update_state(self, effect: UpdateState) -> None:
        try:
            self.client.update_work_item_state(effect.item_id, effect.new_state)
        except ApiError as e:
            self._post(MutationFailed(error=str(e)))
            return
        self._post(StateChanged(new_state=effect.new_state))

    def _assign_item(self, effect: AssignItem) -> None:
        try:
            self.client.assign_work_item(effect.item_id, effect.unique_name)
        except ApiError as e:
            self._post(MutationFailed(error=str(e)))
            return
        self._post(Assigned(display_name=effect.display_name))

    def _create_branch(self, effect: CreateBranch) -> None:
        try:
            self.git.create_checked_branch(effect.name)
        except GitError as e:
            self._post(BranchFailed(error=str(e)))
            return
        self._post(BranchCreated(name=effect.name))

    def _open_url(self, effect: OpenUrl) -> None:
        try:
            click.launch(effect.url)
        except OSError as e:
            logger.warning("Could not open %s: %s", effect.url, e)
            self._post(BrowserFailed(error=f"Could not open browser: {e}"))

    # -- widget messages --

    def on_filter_panel_selected(self, _event: FilterPanel.Selected) -> None:
        self.dispatch(FilterSelected())

    def on_work_items_panel_highlighted(self, event: WorkItemsPanel.Highlighted) -> None:
        self.query_one(DetailsPanel).show_item(event.item)

    def on_work_items_panel_open_requested(
        self, _event: WorkItemsPanel.OpenRequested
    ) -> None:
        self.dispatch(OpenInBrowser())

    # -- actions --

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action in MAIN_ONLY_ACTIONS and len(self.screen_stack) > 1:
            return False
        return True

    def action_help(self) -> None:
        self.push_screen(HelpDialog())

    def action_refresh(self) -> None:
        self.dispatch(Refresh())

    def action_prev_group(self) -> None:
        self.controller.state.filters.prev_group()
        self.query_one(FilterPanel).refresh()

    def action_next_group(self) -> None:
        self.controller.state.filters.next_group()
        self.query_one(FilterPanel).refresh()

    def action_sort(self, field: str) -> None:
        self.query_one(WorkItemsPanel).sort_by(SortField(field))

    def action_back(self) -> None:
        if isinstance(self.focused, WorkItemsPanel):
            self.query_one(FilterPanel).focus()

    def action_open_browser(self) -> None:
        self.dispatch(OpenInBrowser())

    def action_detail(self) -> None:
        self.dispatch(OpenDetail())
        item = self.controller.state.detail_item
        if self.controller.state.mode is Mode.DETAIL and item is not None:
            self.push_screen(DetailScreen(item), self._on_detail_closed)

    def _on_detail_closed(self, _result: None) -> None:
        self.dispatch(CloseDetail())

    def action_change_state(self) -> None:
        self._open_modal(ModalKind.STATE)

    def action_assign(self) -> None:
        self._open_modal(ModalKind.ASSIGN)

    def action_branch(self) -> None:
        self._open_modal(ModalKind.BRANCH)

    def _open_modal(self, kind: ModalKind) -> None:
        state = self.controller.state
        self.dispatch(OpenModal(kind=kind))
        item = state.items.selected()
        if state.mode is not Mode.MODAL or item is None:
            return
        if kind is ModalKind.STATE:
            screen = StateDialog(item, state.states_by_type)
        elif kind is ModalKind.ASSIGN:
            screen = AssignDialog(item, state.team_members)
        else:
            screen = BranchDialog(item)
        self.push_screen(screen, self._on_modal_result)

    def _on_modal_result(self, result: object | None) -> None:
        if result is None:
            self.dispatch(ModalCancelled())
        else:
            self.dispatch(result)

"""Input models behind the state, assign and branch dialogs.

Each modal is Hidden until ``open`` and returns to Hidden on confirm or
cancel. They hold no widgets so the dialogs stay thin.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from sprintboard.controller import AssignConfirmed, BranchConfirmed, StateChangeConfirmed
from sprintboard.filters import DEFAULT_STATES
from sprintboard.git import generate_branch_name, is_valid_branch_name
from sprintboard.models import StateInfo, TeamMember, WorkItem

UNASSIGNED = "Unassigned"
ASSIGN_VISIBLE_ROWS = 8


class StateChangeModal:
    def __init__(self) -> None:
        self.visible = False
        self.item: WorkItem | None = None
        self.states: list[str] = list(DEFAULT_STATES)
        self.cursor = 0

    def open(
        self, item: WorkItem, states_by_type: Mapping[str, Sequence[StateInfo]]
    ) -> None:
        self.item = item
        infos = states_by_type.get(item.type)
        self.states = [s.name for s in infos] if infos else list(DEFAULT_STATES)
        self.cursor = self.states.index(item.state) if item.state in self.states else 0
        self.visible = True

    def move(self, delta: int) -> None:
        self.cursor = max(0, min(len(self.states) - 1, self.cursor + delta))

    def selected_state(self) -> str | None:
        if 0 <= self.cursor < len(self.states):
            return self.states[self.cursor]
        return None

    def confirm(self) -> StateChangeConfirmed | None:
        state = self.selected_state()
        if not self.visible or self.item is None or state is None:
            return None
        self.visible = False
        return StateChangeConfirmed(item_id=self.item.id, new_state=state)

    def cancel(self) -> None:
        self.visible = False


class AssignModal:
    """Team member picker with an optional substring filter.

    ``/`` enters filter mode. In filter mode ``escape`` first clears the
    typed text and only cancels once it is empty.
    """

    def __init__(self) -> None:
        self.visible = False
        self.item: WorkItem | None = None
        self.members: list[TeamMember] = []
        self.filtered: list[TeamMember] = []
        self.cursor = 0
        self.filter_enabled = False
        self.filter_text = ""

    def open(self, item: WorkItem, members: Sequence[TeamMember]) -> None:
        self.item = item
        self.members = list(members)
        self.filter_enabled = False
        self.filter_text = ""
        self.filtered = list(self.members)
        self.cursor = 0
        for i, member in enumerate(self.filtered):
            if member.display_name == item.assigned_to:
                self.cursor = i
                break
        self.visible = True

    def move(self, delta: int) -> None:
        if not self.filtered:
            self.cursor = 0
            return
        self.cursor = max(0, min(len(self.filtered) - 1, self.cursor + delta))

    def start_filter(self) -> None:
        self.filter_enabled = True

    def set_filter(self, text: str) -> None:
        self.filter_text = text
        needle = text.lower()
        if not needle:
            self.filtered = list(self.members)
        else:
            self.filtered = [
                m
                for m in self.members
                if needle in m.display_name.lower() or needle in m.unique_name.lower()
            ]
        if self.cursor >= len(self.filtered):
            self.cursor = 0

    def escape(self) -> bool:
        """Returns True when the modal closed."""
        if self.filter_enabled and self.filter_text:
            self.set_filter("")
            return False
        self.cancel()
        return True

    def selected_member(self) -> TeamMember | None:
        if 0 <= self.cursor < len(self.filtered):
            return self.filtered[self.cursor]
        return None

    def visible_members(self) -> list[tuple[int, TeamMember]]:
        offset = 0
        if self.cursor >= ASSIGN_VISIBLE_ROWS:
            offset = self.cursor - ASSIGN_VISIBLE_ROWS + 1
        end = min(len(self.filtered), offset + ASSIGN_VISIBLE_ROWS)
        return [(i, self.filtered[i]) for i in range(offset, end)]

    def confirm(self) -> AssignConfirmed | None:
        member = self.selected_member()
        if not self.visible or self.item is None or member is None:
            return None
        self.visible = False
        return AssignConfirmed(
            item_id=self.item.id,
            unique_name=member.unique_name,
            display_name=member.display_name,
        )

    def unassign(self) -> AssignConfirmed | None:
        if not self.visible or self.item is None:
            return None
        self.visible = False
        return AssignConfirmed(item_id=self.item.id, unique_name="", display_name=UNASSIGNED)

    def cancel(self) -> None:
        self.visible = False
        self.filter_enabled = False


class BranchModal:
    def __init__(self) -> None:
        self.visible = False
        self.item: WorkItem | None = None
        self.value = ""
        self.error: str | None = None

    def open(self, item: WorkItem) -> None:
        self.item = item
        self.value = generate_branch_name(item)
        self.error = None
        self.visible = True

    def confirm(self, text: str) -> BranchConfirmed | None:
        """Validate ``text``; on failure keep it and set ``error``."""
        self.value = text
        name = text.strip()
        if not name:
            self.error = "branch name cannot be empty"
            return None
        if not is_valid_branch_name(name):
            self.error = "invalid branch name"
            return None
        self.error = None
        self.visible = False
        return BranchConfirmed(name=name)

    def cancel(self) -> None:
        self.visible = False
        self.error = None

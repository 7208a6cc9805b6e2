"""Modal dialogs for work item actions, one per submodule."""

from sprintboard.tui.dialogs.assign import AssignDialog
from sprintboard.tui.dialogs.branch import BranchDialog
from sprintboard.tui.dialogs.help import HelpDialog
from sprintboard.tui.dialogs.state import StateDialog

__all__ = [
    "AssignDialog",
    "BranchDialog",
    "HelpDialog",
    "StateDialog",
]

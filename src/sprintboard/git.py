from __future__ import annotations

import logging
import re
import subprocess

from sprintboard.models import WorkItem

logger = logging.getLogger(__name__)

BRANCH_PREFIXES = {
    "Bug": "bugfix",
    "Task": "task",
    "User Story": "feature",
    "Epic": "epic",
}

_INVALID_BRANCH_CHARS = re.compile(r"[\s~^:?*\[\]\\]")


class GitError(Exception):
    """Raised when a branch cannot be created."""


def _slugify(text: str) -> str:
    """Convert text to a branch-safe slug (lowercase, dashes, no special chars)."""
    text = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return text.strip("-")


def generate_branch_name(item: WorkItem) -> str:
    """Suggest ``<prefix>/<id>-<slug>`` for a work item."""
    prefix = BRANCH_PREFIXES.get(item.type, "feature")
    slug = _slugify(item.title)
    if len(slug) > 40:
        slug = slug[:40]
        # Prefer cutting at a word boundary
        last_hyphen = slug.rfind("-")
        if last_hyphen > 20:
            slug = slug[:last_hyphen]
    if not slug:
        return f"{prefix}/{item.id}"
    return f"{prefix}/{item.id}-{slug}"


def is_valid_branch_name(name: str) -> bool:
    if not name:
        return False
    if _INVALID_BRANCH_CHARS.search(name):
        return False
    if name.startswith("/") or name.endswith("/"):
        return False
    if ".." in name:
        return False
    return True


class GitBranches:
    """Branch operations on the repository at ``cwd`` (default: process cwd)."""

    def __init__(self, cwd: str | None = None) -> None:
        self.cwd = cwd

    def _git(self, *args: str) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            ["git", *args],
            cwd=self.cwd,
            capture_output=True,
            text=True,
        )

    def is_repository(self) -> bool:
        try:
            return self._git("rev-parse", "--git-dir").returncode == 0
        except FileNotFoundError:
            return False

    def has_uncommitted_changes(self) -> bool:
        try:
            result = self._git("status", "--porcelain")
        except FileNotFoundError:
            return False
        if result.returncode != 0:
            return False
        return bool(result.stdout.strip())

    def current_branch(self) -> str | None:
        result = self._git("branch", "--show-current")
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def branch_exists(self, name: str) -> bool:
        result = self._git("show-ref", "--verify", "--quiet", f"refs/heads/{name}")
        return result.returncode == 0

    def create_branch(self, name: str, checkout: bool = True) -> None:
        if self.branch_exists(name):
            raise GitError(f"branch '{name}' already exists")
        if checkout:
            result = self._git("checkout", "-b", name)
        else:
            result = self._git("branch", name)
        if result.returncode != 0:
            output = (result.stderr or result.stdout).strip()
            raise GitError(f"creating branch: {output}")
        logger.info("Created branch %s (checkout=%s)", name, checkout)

    def create_checked_branch(self, name: str) -> None:
        """Create and check out ``name`` in a clean repository."""
        if not self.is_repository():
            raise GitError("not a git repository")
        if self.has_uncommitted_changes():
            raise GitError("uncommitted changes exist")
        self.create_branch(name, checkout=True)

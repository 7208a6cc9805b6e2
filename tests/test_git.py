from __future__ import annotations

import subprocess

import pytest

from sprintboard.git import (
    GitBranches,
    GitError,
    generate_branch_name,
    is_valid_branch_name,
)
from sprintboard.models import WorkItem

GIT_IDENTITY = ["-c", "user.name=Test", "-c", "user.email=test@example.com"]


def _make_item(id: int = 123, title: str = "Fix login bug", type: str = "Bug") -> WorkItem:
    return WorkItem(id=id, rev=1, title=title, state="Active", type=type)


@pytest.fixture
def git_repo(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init", str(repo)], check=True, capture_output=True)
    subprocess.run(
        ["git", *GIT_IDENTITY, "-C", str(repo), "commit", "--allow-empty", "-m", "init"],
        check=True,
        capture_output=True,
    )
    return repo


# -- Branch names --


@pytest.mark.parametrize(
    "type, prefix",
    [
        ("Bug", "bugfix"),
        ("Task", "task"),
        ("User Story", "feature"),
        ("Epic", "epic"),
        ("Feature", "feature"),
        ("Impediment", "feature"),
    ],
)
def test_branch_prefix_by_type(type, prefix) -> None:
    assert generate_branch_name(_make_item(type=type)) == f"{prefix}/123-fix-login-bug"


def test_slug_strips_punctuation() -> None:
    item = _make_item(title="  [UI] Can't save -- settings!! ")
    assert generate_branch_name(item) == "bugfix/123-ui-can-t-save-settings"


def test_long_title_cut_at_word_boundary() -> None:
    item = _make_item(title="Refactor the authentication middleware to support tokens")
    name = generate_branch_name(item)
    slug = name.split("/", 1)[1].split("-", 1)[1]
    assert len(slug) <= 40
    assert slug == "refactor-the-authentication-middleware"


def test_empty_slug() -> None:
    assert generate_branch_name(_make_item(title="!!!", type="Task")) == "task/123"


@pytest.mark.parametrize(
    "name, valid",
    [
        ("feature/123-fix-bug", True),
        ("feature/123-fix bug", False),
        ("/leading-slash", False),
        ("trailing/", False),
        ("a..b", False),
        ("", False),
        ("what?", False),
        ("tilde~1", False),
        ("back\\slash", False),
    ],
)
def test_is_valid_branch_name(name, valid) -> None:
    assert is_valid_branch_name(name) is valid


# -- GitBranches --


def test_not_a_repository(tmp_path) -> None:
    git = GitBranches(cwd=str(tmp_path))
    assert git.is_repository() is False
    with pytest.raises(GitError, match="not a git repository"):
        git.create_checked_branch("task/1")


def test_create_branch_checks_out(git_repo) -> None:
    git = GitBranches(cwd=str(git_repo))
    assert git.is_repository()
    assert not git.has_uncommitted_changes()
    git.create_checked_branch("task/1-thing")
    assert git.current_branch() == "task/1-thing"
    assert git.branch_exists("task/1-thing")


def test_existing_branch_rejected(git_repo) -> None:
    git = GitBranches(cwd=str(git_repo))
    git.create_branch("task/1", checkout=False)
    with pytest.raises(GitError, match="branch 'task/1' already exists"):
        git.create_checked_branch("task/1")


def test_dirty_tree_rejected(git_repo) -> None:
    (git_repo / "notes.txt").write_text("wip")
    git = GitBranches(cwd=str(git_repo))
    assert git.has_uncommitted_changes()
    with pytest.raises(GitError, match="uncommitted changes exist"):
        git.create_checked_branch("task/2")

"""Git repository operations."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from git import Git, GitCommandError, GitCommandNotFound

logger = logging.getLogger(__name__)

MAIN = "main"
# Never pruned, whatever the detected main branch is
MASTER = "master"

CURRENT_MARKER = "*"
WORKTREE_MARKER = "+"


class GitError(Exception):
    """Git operation error."""

    def __init__(self, message: str, stderr: str = "") -> None:
        """Initialize error.

        Args:
            message: Error message
            stderr: Error text captured from the failed git command
        """
        super().__init__(message)
        self.stderr = stderr


class Runner(Protocol):
    """Anything that can run a git command and return its output."""

    def run(self, *args: str) -> str: ...


class GitRunner:
    """Run git commands in a working directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.git = Git(str(path))

    def run(self, *args: str) -> str:
        """Run ``git <args>`` and return its stripped standard output.

        Raises:
            GitError: If git exits non-zero or cannot be started
        """
        command = ["git", *args]
        logger.debug("Running %s in %s", " ".join(command), self.path)
        try:
            output = self.git.execute(command)
        except GitCommandNotFound as err:
            raise GitError(f"Git command failed: {' '.join(command)}", stderr=str(err)) from err
        except GitCommandError as err:
            raise GitError(f"Git command failed: {' '.join(command)}", stderr=_stderr_text(err)) from err
        return str(output).strip()


def _stderr_text(err: GitCommandError) -> str:
    """Unwrap the ``stderr: '...'`` formatting GitPython puts around git's error output."""
    text = str(err.stderr or "").strip()
    if text.startswith("stderr:"):
        text = text[len("stderr:") :].strip()
        if len(text) >= 2 and text[0] == text[-1] == "'":
            text = text[1:-1]
    return text.strip()


def parse_branch_list(output: str) -> list[str]:
    """Parse ``git branch`` output into bare branch names."""
    branches = []
    for line in output.splitlines():
        name = line.strip()
        if name.startswith((CURRENT_MARKER, WORKTREE_MARKER)):
            name = name[1:].strip()
        if name:
            branches.append(name)
    return branches


def parse_merged_branches(output: str, main_branch: str) -> list[str]:
    """Parse ``git branch --merged`` output into deletable candidates.

    Drops the current branch, branches checked out in other worktrees,
    the main branch and ``master``.
    """
    branches = []
    for line in output.splitlines():
        name = line.strip()
        if not name or name.startswith((CURRENT_MARKER, WORKTREE_MARKER)):
            continue
        if name in (main_branch, MASTER):
            continue
        branches.append(name)
    return branches


def parse_remote_branches(output: str) -> list[str]:
    """Parse ``git branch -r`` output into names without the remote prefix."""
    branches = []
    for line in output.splitlines():
        ref = line.strip()
        # Symbolic ref such as "origin/HEAD -> origin/main"
        if not ref or "->" in ref:
            continue
        name = ref.split("/", 1)[1] if "/" in ref else ref
        if name:
            branches.append(name)
    return branches


def compute_stale_branches(merged: list[str], remote: list[str]) -> list[str]:
    """Return merged branches that have no remote counterpart, in merged order."""
    still_remote = set(remote)
    return [branch for branch in merged if branch not in still_remote]


@dataclass
class DeletionReport:
    """Outcome of a delete pass."""

    deleted: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return len(self.deleted)

    @property
    def failures(self) -> int:
        return len(self.failed)


class BranchPruner:
    """Find and remove merged local branches whose remote branch is gone."""

    def __init__(self, runner: Runner) -> None:
        self.runner = runner

    def sync(self) -> None:
        """Fetch from the remote and prune remote-tracking refs that are gone."""
        self.runner.run("fetch", "--prune")

    def detect_main_branch(self) -> str:
        """Detect the main integration branch.

        Uses ``init.defaultBranch`` when set, otherwise ``main`` if such a
        local branch exists, otherwise ``master``.
        """
        try:
            configured = self.runner.run("config", "--get", "init.defaultBranch")
        except GitError:
            # Exit status 1 when the key is unset
            logger.debug("init.defaultBranch is not set, inspecting local branches")
        else:
            if configured:
                return configured

        local = parse_branch_list(self.runner.run("branch"))
        return MAIN if MAIN in local else MASTER

    def find_stale_branches(self, main_branch: str) -> list[str]:
        """List local branches merged into ``main_branch`` that are gone from the remote."""
        merged = parse_merged_branches(self.runner.run("branch", "--merged", main_branch), main_branch)
        remote = parse_remote_branches(self.runner.run("branch", "-r"))
        logger.debug("Merged into %s: %s", main_branch, merged)
        logger.debug("Still on remote: %s", remote)
        return compute_stale_branches(merged, remote)

    def delete_branch(self, branch_name: str) -> None:
        """Safely delete a local branch; git refuses if it is not fully merged."""
        self.runner.run("branch", "-d", branch_name)

    def delete_branches(self, branches: list[str]) -> DeletionReport:
        """Delete each branch in turn, recording failures without stopping."""
        report = DeletionReport()
        for branch_name in branches:
            try:
                self.delete_branch(branch_name)
            except GitError as err:
                logger.debug("Failed to delete %s: %s", branch_name, err.stderr)
                report.failed[branch_name] = err.stderr or str(err)
            else:
                report.deleted.append(branch_name)
        return report

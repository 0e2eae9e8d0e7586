"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Actor, Repo

from fakes import FakeRunner


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A repository with main, two stale branches and one still on the remote."""
    return FakeRunner(
        {
            ("config", "--get", "init.defaultBranch"): "main",
            ("branch",): "* main\n  feature-a\n  feature-b\n  feature-c",
            ("branch", "--merged", "main"): "  feature-a\n  feature-b\n  feature-c\n* main",
            ("branch", "-r"): "  origin/HEAD -> origin/main\n  origin/main\n  origin/feature-b",
        }
    )


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    Local branches:
        feature/merged: merged into main, deleted on the remote (stale)
        feature/live: merged into main, still on the remote
        feature/unmerged: not merged, deleted on the remote
        feature/current: merged, deleted on the remote, checked out

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True, initial_branch="main")
    local_repo = Repo.init(local_path, initial_branch="main")

    # Repository-level config wins over whatever the machine has globally
    author = Actor("Test User", "test@example.com")
    with local_repo.config_writer() as config:
        config.set_value("user", "name", author.name)
        config.set_value("user", "email", author.email)
        config.set_value("init", "defaultBranch", "main")

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    local_repo.index.commit("Initial commit", author=author)
    main_branch = local_repo.heads.main

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    main_branch.set_tracking_branch(origin.refs.main)

    def create_branch(name: str, merge: bool = False, gone: bool = False) -> None:
        """Create a pushed branch with one commit."""
        main_branch.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()

        file_name = name.replace("/", "_") + ".txt"
        (local_path / file_name).write_text(f"{name} content")
        local_repo.index.add([file_name])
        local_repo.index.commit(f"Add {name}", author=author)
        origin.push(name)

        if merge:
            main_branch.checkout()
            local_repo.git.merge(name, "--no-ff")
            origin.push("main")
        if gone:
            origin.push(f":{name}")

    create_branch("feature/merged", merge=True, gone=True)
    create_branch("feature/live", merge=True)
    create_branch("feature/unmerged", gone=True)
    create_branch("feature/current", merge=True, gone=True)

    local_repo.heads["feature/current"].checkout()

    yield local_path, remote_path

"""
Pytest configuration and shared fixtures for bash-worktree-fix tests.
"""

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Generator, Optional

import pytest

from worktree_fix.models.worktree_info import EntryKind

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="sh not installed")


def run_sh(script: str, cwd: Path) -> subprocess.CompletedProcess:
    """Run a script with /bin/sh -c and capture its output."""
    return subprocess.run(
        ["sh", "-c", script],
        cwd=cwd,
        capture_output=True,
        text=True,
    )


class FakeFilesystem:
    """In-memory FilesystemProvider.

    ``dirs`` is a set of directory paths, ``files`` maps file paths to their
    content, and ``errors`` maps paths to the exception raised when probed.
    """

    def __init__(
        self,
        dirs: set[str],
        files: Optional[dict[str, str]] = None,
        errors: Optional[dict[str, Exception]] = None,
    ) -> None:
        self.dirs = set(dirs)
        self.files = files or {}
        self.errors = errors or {}
        self.probed: list[str] = []

    def kind(self, path: Path) -> EntryKind:
        key = str(path)
        self.probed.append(key)
        if key in self.errors:
            raise self.errors[key]
        if key in self.dirs:
            return EntryKind.DIRECTORY
        if key in self.files:
            return EntryKind.FILE
        return EntryKind.MISSING

    def read_first_line(self, path: Path) -> str:
        content = self.files[str(path)]
        if isinstance(content, Exception):
            raise content
        return content.split("\n", 1)[0]


def worktree_tree() -> FakeFilesystem:
    """The concrete layout: /proj-wt is a worktree of /proj."""
    return FakeFilesystem(
        dirs={
            "/",
            "/proj",
            "/proj/.git",
            "/proj/.git/worktrees",
            "/proj/.git/worktrees/feature-x",
            "/proj-wt",
            "/proj-wt/src",
            "/proj-wt/src/pkg",
        },
        files={"/proj-wt/.git": "gitdir: /proj/.git/worktrees/feature-x\n"},
    )


@pytest.fixture
def temp_directory() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def plain_directory(temp_directory: Path) -> Path:
    """A directory with no git repository anywhere below the temp root."""
    path = temp_directory / "plain" / "nested"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def normal_repo(temp_directory: Path) -> Path:
    """A directory tree with a .git directory at its root and a subdirectory."""
    repo_path = temp_directory / "repo"
    (repo_path / ".git").mkdir(parents=True)
    (repo_path / "sub").mkdir()
    return repo_path


@pytest.fixture
def synthetic_worktree(temp_directory: Path) -> Path:
    """
    Lay out a linked worktree by hand.

    ``proj/.git/worktrees/feature-x`` is the metadata directory and
    ``proj-wt/.git`` is a file pointing at it.
    """
    main_repo = temp_directory / "proj"
    metadata = main_repo / ".git" / "worktrees" / "feature-x"
    metadata.mkdir(parents=True)

    worktree_path = temp_directory / "proj-wt"
    (worktree_path / "src" / "pkg").mkdir(parents=True)
    (worktree_path / ".git").write_text(f"gitdir: {metadata}\n")

    return worktree_path


@pytest.fixture
def synthetic_submodule(temp_directory: Path) -> Path:
    """A submodule checkout whose .git file points into .git/modules/."""
    main_repo = temp_directory / "super"
    module_gitdir = main_repo / ".git" / "modules" / "lib"
    module_gitdir.mkdir(parents=True)

    submodule_path = main_repo / "lib"
    submodule_path.mkdir()
    (submodule_path / ".git").write_text("gitdir: ../.git/modules/lib\n")

    return submodule_path


@pytest.fixture
def git_repo(temp_directory: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository for tests."""
    repo_path = temp_directory / "test-repo"
    repo_path.mkdir()

    subprocess.run(
        ["git", "init"],
        cwd=repo_path,
        capture_output=True
    )

    subprocess.run(
        ["git", "config", "user.email", "test@example.com"],
        cwd=repo_path,
        capture_output=True
    )

    subprocess.run(
        ["git", "config", "user.name", "Test User"],
        cwd=repo_path,
        capture_output=True
    )

    readme = repo_path / "README.md"
    readme.write_text("# Test Repository\n")

    subprocess.run(
        ["git", "add", "."],
        cwd=repo_path,
        capture_output=True
    )

    subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "commit", "-m", "Initial commit"],
        cwd=repo_path,
        capture_output=True
    )

    yield repo_path


@pytest.fixture
def git_worktree(git_repo: Path, temp_directory: Path) -> Generator[Path, None, None]:
    """Create a real linked worktree with git worktree add."""
    worktree_path = temp_directory / "test-worktree"

    subprocess.run(
        ["git", "worktree", "add", "-b", "test-branch", str(worktree_path)],
        cwd=git_repo,
        capture_output=True
    )

    yield worktree_path

    subprocess.run(
        ["git", "worktree", "remove", "--force", str(worktree_path)],
        cwd=git_repo,
        capture_output=True
    )


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo handlers and propagation changes made by configure_logging()."""
    yield

    package_logger = logging.getLogger("worktree_fix")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True

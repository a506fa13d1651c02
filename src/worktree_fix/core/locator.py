"""Linked worktree detection.

This module walks from a directory towards the filesystem root looking for
the first ``.git`` entry, the same boundary git itself uses. A ``.git``
directory marks an ordinary repository; a ``.git`` file whose ``gitdir:``
target lives under ``.../worktrees/<name>`` marks a linked worktree.
"""

import os
import stat
from pathlib import Path
from typing import Optional, Protocol

from ..models.worktree_info import EntryKind, LocateResult, StepKind, WalkStep

GIT_ENTRY = ".git"
GITDIR_PREFIX = "gitdir:"
WORKTREES_SEGMENT = "/worktrees/"


class GitLinkError(Exception):
    """Raised when a .git link file cannot be read or parsed."""


class FilesystemProvider(Protocol):
    """Read-only filesystem access used by the locator."""

    def kind(self, path: Path) -> EntryKind:
        """Classify ``path``. May raise OSError for anything but a missing path."""
        ...

    def read_first_line(self, path: Path) -> str:
        """Return the first line of a text file without its line terminator."""
        ...


class OsFilesystem:
    """FilesystemProvider backed by the real filesystem.

    Symlinks are followed, matching ``test -d`` and ``test -f``.
    """

    def kind(self, path: Path) -> EntryKind:
        try:
            mode = os.stat(path).st_mode
        except (FileNotFoundError, NotADirectoryError):
            return EntryKind.MISSING

        if stat.S_ISDIR(mode):
            return EntryKind.DIRECTORY
        if stat.S_ISREG(mode):
            return EntryKind.FILE
        return EntryKind.OTHER

    def read_first_line(self, path: Path) -> str:
        with open(path, encoding="utf-8", newline="") as f:
            line = f.readline()
        return line.rstrip("\n")


def parse_gitdir_line(line: str) -> str:
    """
    Extract the target path from a ``gitdir: <path>`` line.

    Carriage returns are dropped and spaces after the colon are skipped.

    Args:
        line: First line of a .git file.

    Returns:
        The target path exactly as written (absolute or relative).

    Raises:
        GitLinkError: If the line is not a gitdir pointer or names no path.
    """
    line = line.replace("\r", "")

    if not line.startswith(GITDIR_PREFIX):
        raise GitLinkError(f"Unknown .git file format: {line!r}")

    target = line[len(GITDIR_PREFIX):].lstrip(" ")
    if not target:
        raise GitLinkError("gitdir pointer names no path")

    return target


def resolve_gitdir(directory: Path, target: str) -> str:
    """Resolve a gitdir target against the directory holding the .git file."""
    if target.startswith("/"):
        return target
    return os.path.join(str(directory), target)


def is_worktree_gitdir(gitdir: str) -> bool:
    """Whether a resolved gitdir belongs to a linked worktree (not a submodule)."""
    return WORKTREES_SEGMENT in gitdir


class WorktreeLocator:
    """Finds the root of the linked worktree containing a directory.

    Example:
        >>> locator = WorktreeLocator()
        >>> result = locator.locate(Path("/proj-wt/src"))
        >>> result.worktree_root
        PosixPath('/proj-wt')
    """

    def __init__(self, filesystem: Optional[FilesystemProvider] = None) -> None:
        """
        Initialize the locator.

        Args:
            filesystem: Filesystem access. Defaults to the real filesystem.
        """
        self.filesystem = filesystem or OsFilesystem()

    def read_gitdir(self, git_file: Path) -> str:
        """
        Read and parse the gitdir pointer in a .git file.

        Raises:
            GitLinkError: If the file is unreadable or malformed.
        """
        try:
            line = self.filesystem.read_first_line(git_file)
        except (OSError, UnicodeDecodeError) as e:
            raise GitLinkError(f"Unreadable .git file at: {git_file.parent}") from e

        return parse_gitdir_line(line)

    def step(self, directory: Path) -> WalkStep:
        """
        Examine one candidate directory.

        Args:
            directory: Candidate directory.

        Returns:
            WalkStep saying whether to continue to the parent, that a worktree
            root was found, or that the walk is over without a match.

        Raises:
            OSError: If the candidate or its .git entry cannot be inspected.
        """
        if self.filesystem.kind(directory) != EntryKind.DIRECTORY:
            return WalkStep(
                kind=StepKind.NOT_A_WORKTREE,
                directory=directory,
                reason=f"Not a directory: {directory}",
            )

        git_entry = directory / GIT_ENTRY
        entry_kind = self.filesystem.kind(git_entry)

        if entry_kind == EntryKind.DIRECTORY:
            return WalkStep(
                kind=StepKind.NOT_A_WORKTREE,
                directory=directory,
                reason=f"Found regular git repo at: {directory}",
            )

        if entry_kind == EntryKind.FILE:
            return self._examine_git_file(directory, git_entry)

        parent = directory.parent
        if parent == directory:
            return WalkStep(
                kind=StepKind.NOT_A_WORKTREE,
                directory=directory,
                reason="No git repository found",
            )

        return WalkStep(
            kind=StepKind.CONTINUE,
            directory=directory,
            reason=f"No .git at: {directory}",
            next_directory=parent,
        )

    def _examine_git_file(self, directory: Path, git_file: Path) -> WalkStep:
        try:
            target = self.read_gitdir(git_file)
        except GitLinkError as e:
            return WalkStep(
                kind=StepKind.NOT_A_WORKTREE,
                directory=directory,
                reason=str(e),
            )

        gitdir = resolve_gitdir(directory, target)

        try:
            gitdir_kind = self.filesystem.kind(Path(gitdir))
        except OSError:
            gitdir_kind = EntryKind.OTHER

        if gitdir_kind != EntryKind.DIRECTORY:
            return WalkStep(
                kind=StepKind.NOT_A_WORKTREE,
                directory=directory,
                reason=f"gitdir path does not exist: {gitdir}",
                gitdir=gitdir,
            )

        if not is_worktree_gitdir(gitdir):
            return WalkStep(
                kind=StepKind.NOT_A_WORKTREE,
                directory=directory,
                reason=f"Non-worktree .git indirection at: {directory}",
                gitdir=gitdir,
            )

        return WalkStep(
            kind=StepKind.FOUND,
            directory=directory,
            reason=f"Detected worktree root: {directory} (gitdir: {gitdir})",
            gitdir=gitdir,
        )

    def locate(self, start: str | Path) -> LocateResult:
        """
        Walk from ``start`` up to the filesystem root.

        The first .git entry of either kind ends the walk. An unreadable
        starting directory is skipped in favour of its parent; an unreadable
        ancestor ends the walk. Never raises.

        Args:
            start: Absolute directory to start from.

        Returns:
            LocateResult with ``worktree_root`` set when inside a linked worktree.
        """
        start = Path(start)
        steps: list[WalkStep] = []
        directory = start

        while True:
            try:
                walk_step = self.step(directory)
            except OSError as e:
                parent = directory.parent
                if directory == start and parent != directory:
                    walk_step = WalkStep(
                        kind=StepKind.CONTINUE,
                        directory=directory,
                        reason=f"Cannot inspect starting directory ({e}), trying parent",
                        next_directory=parent,
                    )
                else:
                    walk_step = WalkStep(
                        kind=StepKind.NOT_A_WORKTREE,
                        directory=directory,
                        reason=f"Cannot inspect: {directory} ({e})",
                    )

            steps.append(walk_step)

            if walk_step.kind == StepKind.CONTINUE and walk_step.next_directory is not None:
                directory = walk_step.next_directory
                continue

            if walk_step.kind == StepKind.FOUND:
                return LocateResult(
                    start=start,
                    worktree_root=walk_step.directory,
                    gitdir=walk_step.gitdir,
                    reason=walk_step.reason,
                    steps=steps,
                )

            return LocateResult(start=start, reason=walk_step.reason, steps=steps)


def locate_worktree_root(
    start: str | Path,
    filesystem: Optional[FilesystemProvider] = None,
) -> Optional[Path]:
    """Return the linked worktree root containing ``start``, or None."""
    return WorktreeLocator(filesystem).locate(start).worktree_root

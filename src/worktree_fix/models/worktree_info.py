"""Pydantic models for worktree detection results."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class StepKind(str, Enum):
    """Outcome of examining one candidate directory during the ancestor walk."""

    CONTINUE = "continue"
    FOUND = "found"
    NOT_A_WORKTREE = "not_a_worktree"


class EntryKind(str, Enum):
    """What a filesystem path turned out to be."""

    DIRECTORY = "directory"
    FILE = "file"
    MISSING = "missing"
    OTHER = "other"


class WalkStep(BaseModel):
    """Result of examining a single candidate directory."""

    kind: StepKind = Field(description="Whether the walk continues, found a worktree, or stops")
    directory: Path = Field(description="The candidate directory that was examined")
    reason: str = Field(description="Human-readable explanation of the decision")
    gitdir: Optional[str] = Field(
        default=None, description="Resolved gitdir target, when a .git file was read"
    )
    next_directory: Optional[Path] = Field(
        default=None, description="Parent directory to examine next (CONTINUE only)"
    )


class LocateResult(BaseModel):
    """Result of walking from a starting directory towards the filesystem root."""

    start: Path = Field(description="Directory the walk started from")
    worktree_root: Optional[Path] = Field(
        default=None, description="Directory holding the worktree's .git file"
    )
    gitdir: Optional[str] = Field(
        default=None, description="Worktree metadata directory the .git file points at"
    )
    reason: str = Field(default="", description="Why the walk ended")
    steps: list[WalkStep] = Field(default_factory=list)

    @property
    def is_worktree(self) -> bool:
        """Whether the start directory lies inside a linked worktree."""
        return self.worktree_root is not None

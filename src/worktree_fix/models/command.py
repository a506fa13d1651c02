"""
Pydantic models for command classification and rewriting.

This module provides data models for:
- The classifier's skip/rewrite decision
- The full outcome of one rewrite, for diagnostics
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class CommandAction(str, Enum):
    """What the rewriter should do with a command."""

    SKIP = "skip"
    REWRITE = "rewrite"


class Classification(BaseModel):
    """Decision made by the command classifier."""

    action: CommandAction = Field(..., description="Skip the command or rewrite it")
    reason: str = Field(..., description="Which rule produced the decision")

    @property
    def should_skip(self) -> bool:
        """Whether the command passes through unchanged."""
        return self.action == CommandAction.SKIP


class RewriteResult(BaseModel):
    """Outcome of running one command through the rewriter."""

    original: str = Field(..., description="Command as supplied by the host")
    command: str = Field(..., description="Command the host should execute")
    cwd: Path = Field(..., description="Working directory the command was issued from")
    worktree_root: Optional[Path] = Field(
        default=None, description="Worktree root injected into the command, if any"
    )
    classification: Optional[Classification] = Field(
        default=None,
        description="Classifier decision (None when not inside a worktree)",
    )
    backgrounded: bool = Field(
        default=False, description="Whether a trailing & was moved onto the compound command"
    )

    @property
    def changed(self) -> bool:
        """Whether the command was rewritten."""
        return self.command != self.original

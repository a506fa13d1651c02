"""
Pydantic models for bash-worktree-fix.

This package contains data models for:
- Worktree detection (ancestor walk steps and results)
- Command classification and rewrite results
"""

from worktree_fix.models.command import (
    Classification,
    CommandAction,
    RewriteResult,
)
from worktree_fix.models.worktree_info import (
    EntryKind,
    LocateResult,
    StepKind,
    WalkStep,
)

__all__ = [
    "Classification",
    "CommandAction",
    "RewriteResult",
    "EntryKind",
    "LocateResult",
    "StepKind",
    "WalkStep",
]

"""
Core modules for bash-worktree-fix.

This package contains the core logic for:
- Linked worktree detection
- Command classification
- Shell quoting
- Command rewriting
"""

from worktree_fix.core.classifier import CommandClassifier
from worktree_fix.core.locator import (
    FilesystemProvider,
    GitLinkError,
    OsFilesystem,
    WorktreeLocator,
    locate_worktree_root,
)
from worktree_fix.core.quoting import shell_quote, single_quoted
from worktree_fix.core.rewriter import Rewriter, inject_prefix, split_background

__all__ = [
    "CommandClassifier",
    "FilesystemProvider",
    "GitLinkError",
    "OsFilesystem",
    "WorktreeLocator",
    "locate_worktree_root",
    "shell_quote",
    "single_quoted",
    "Rewriter",
    "inject_prefix",
    "split_background",
]

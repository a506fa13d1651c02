"""
bash-worktree-fix - run shell commands from the enclosing git worktree.

This package provides a pre-execution filter that detects whether a command
is issued from inside a linked git worktree and, if so, rewrites it to
``cd '<worktree root>' && <command>``.
"""

__version__ = "0.1.0"

from worktree_fix.config import HookConfig, load_config
from worktree_fix.core.rewriter import Rewriter

__all__ = [
    "__version__",
    "HookConfig",
    "load_config",
    "Rewriter",
]

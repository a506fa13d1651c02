"""Command rewriting for linked worktrees.

Prefixes a command with ``cd '<worktree root>' &&`` when it is issued from
inside a linked worktree. The rewrite never tokenizes the command and never
fails: on any problem the command is returned unchanged.
"""

import logging
from pathlib import Path
from typing import Optional

from ..config import HookConfig
from ..models.command import RewriteResult
from .classifier import CommandClassifier
from .locator import WorktreeLocator
from .quoting import single_quoted

logger = logging.getLogger(__name__)


def split_background(command: str) -> Optional[str]:
    """
    Detect a trailing background operator.

    Args:
        command: Raw command.

    Returns:
        The command without its trailing ``&`` (and the whitespace before it),
        or None if the command does not end in a lone ``&``. An ``&`` escaped
        by an odd number of backslashes is a literal word, not an operator.
    """
    trimmed = command.rstrip()
    if not trimmed.endswith("&") or trimmed.endswith("&&"):
        return None

    rest = trimmed[:-1]
    backslashes = len(rest) - len(rest.rstrip("\\"))
    if backslashes % 2:
        return None

    return rest.rstrip()


def inject_prefix(worktree_root: str | Path, command: str) -> str:
    """
    Build ``cd '<root>' && <command>``.

    A trailing ``&`` is moved to the end of the compound command so the
    original command, not only the ``cd``, runs in the background.

    Args:
        worktree_root: Directory to change into.
        command: Raw command.

    Returns:
        The rewritten command.
    """
    quoted_root = single_quoted(str(worktree_root))

    foreground = split_background(command)
    if foreground:
        return f"cd {quoted_root} && {foreground} &"

    return f"cd {quoted_root} && {command}"


class Rewriter:
    """Rewrites commands so they run from the enclosing worktree root."""

    def __init__(
        self,
        config: Optional[HookConfig] = None,
        locator: Optional[WorktreeLocator] = None,
        classifier: Optional[CommandClassifier] = None,
    ) -> None:
        """
        Initialize the rewriter.

        Args:
            config: Hook configuration. Defaults to HookConfig() (no tracing).
            locator: Worktree locator. Defaults to one over the real filesystem.
            classifier: Command classifier.
        """
        self.config = config or HookConfig()
        self.locator = locator or WorktreeLocator()
        self.classifier = classifier or CommandClassifier()

    def _trace(self, message: str) -> None:
        if self.config.debug:
            logger.debug(message)

    def rewrite_detailed(self, cwd: str | Path, command: str) -> RewriteResult:
        """
        Rewrite a command and report how the decision was reached.

        Args:
            cwd: Directory the command is issued from.
            command: Raw command.

        Returns:
            RewriteResult; ``result.command`` is what the host should run.
        """
        cwd = Path(cwd)
        self._trace(f"Processing command: {command}")

        try:
            located = self.locator.locate(cwd)
            for walk_step in located.steps:
                self._trace(walk_step.reason)

            if not located.is_worktree:
                self._trace("Not in worktree, passing through unchanged")
                return RewriteResult(original=command, command=command, cwd=cwd)

            classification = self.classifier.classify(command)
            if classification.should_skip:
                self._trace(f"Skipping: {classification.reason}")
                self._trace("Passing through unchanged")
                return RewriteResult(
                    original=command,
                    command=command,
                    cwd=cwd,
                    worktree_root=located.worktree_root,
                    classification=classification,
                )

            foreground = split_background(command)
            if foreground == "":
                self._trace("Nothing to run before the trailing &, passing through unchanged")
                return RewriteResult(
                    original=command,
                    command=command,
                    cwd=cwd,
                    worktree_root=located.worktree_root,
                    classification=classification,
                )

            modified = inject_prefix(located.worktree_root, command)
            self._trace(f"Modified command: {modified}")

            return RewriteResult(
                original=command,
                command=modified,
                cwd=cwd,
                worktree_root=located.worktree_root,
                classification=classification,
                backgrounded=foreground is not None,
            )

        except Exception as e:
            self._trace(f"Rewrite failed ({e}), passing through unchanged")
            return RewriteResult(original=command, command=command, cwd=cwd)

    def rewrite(self, cwd: str | Path, command: str) -> str:
        """Return the command the host should execute from ``cwd``."""
        return self.rewrite_detailed(cwd, command).command

"""Command classification for the worktree rewriter.

Decides whether a command can pass through unchanged. The rules are an
ordered list of predicates over the stripped command string; the first
predicate that matches decides. Anything no predicate matches is rewritten.
"""

import re
from typing import Callable, Optional

from ..models.command import Classification, CommandAction

# Builtins that neither read nor depend on the working directory.
TRIVIAL_BUILTINS = frozenset(
    {
        ":",
        "true",
        "false",
        "pwd",
        "echo",
        "export",
        "alias",
        "unalias",
        "set",
        "unset",
        "readonly",
        "umask",
        "times",
    }
)

# Control operators, redirections, grouping and substitution. A command
# containing any of these is more than one simple command.
_COMPOUND_CHARS = re.compile(r"[;&|<>()`\n]")
_CD_PATTERN = re.compile(r"cd(\s|$)")

Rule = Callable[[str], Optional[str]]


def _is_blank(stripped: str) -> Optional[str]:
    if not stripped:
        return "empty/whitespace-only command"
    return None


def _starts_with_cd(stripped: str) -> Optional[str]:
    if _CD_PATTERN.match(stripped):
        return "command already begins with cd"
    return None


def _is_trivial_builtin(stripped: str) -> Optional[str]:
    if _COMPOUND_CHARS.search(stripped):
        return None

    first_word = stripped.split(None, 1)[0]

    if first_word == "." and stripped == ".":
        return "trivial/builtin command: ."
    if first_word in TRIVIAL_BUILTINS:
        return f"trivial/builtin command: {first_word}"
    return None


class CommandClassifier:
    """Classifies commands as SKIP or REWRITE.

    Example:
        >>> CommandClassifier().should_skip("echo hi")
        True
        >>> CommandClassifier().should_skip("echo hi; rm -rf build")
        False
    """

    RULES: tuple[Rule, ...] = (
        _is_blank,
        _starts_with_cd,
        _is_trivial_builtin,
    )

    def classify(self, command: str) -> Classification:
        """
        Classify a raw command.

        Args:
            command: The command exactly as the host supplied it.

        Returns:
            Classification with the action and the rule that decided it.
        """
        stripped = command.strip()

        for rule in self.RULES:
            reason = rule(stripped)
            if reason:
                return Classification(action=CommandAction.SKIP, reason=reason)

        return Classification(
            action=CommandAction.REWRITE,
            reason="command may depend on the working directory",
        )

    def should_skip(self, command: str) -> bool:
        """Whether ``command`` should pass through unchanged."""
        return self.classify(command).should_skip

"""
Configuration management for bash-worktree-fix.

Settings are resolved in the following priority:
1. CLAUDE_HOOK_DEBUG environment variable (when set)
2. Path specified via --config flag
3. ~/.config/bash-worktree-fix/config.toml

Keys live under a ``[hook]`` table:

    [hook]
    debug = true
"""

import os
from pathlib import Path
from typing import Mapping, Optional

import toml
from pydantic import BaseModel, Field

DEBUG_ENV_VAR = "CLAUDE_HOOK_DEBUG"
TRUTHY_VALUES = frozenset({"true", "TRUE", "1", "yes", "YES"})


def parse_debug_flag(value: Optional[str]) -> bool:
    """Interpret an environment-style debug flag. Unset means off."""
    return value in TRUTHY_VALUES


class HookConfig(BaseModel):
    """Configuration for the command-rewriting hook."""

    debug: bool = Field(
        default=False,
        description="Write diagnostic trace lines to stderr",
    )


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "bash-worktree-fix" / "config.toml"


def _load_file_config(config_path: Optional[str]) -> HookConfig:
    search_paths = [
        Path(config_path) if config_path else None,
        get_default_config_path(),
    ]

    for path in search_paths:
        if path and path.exists():
            try:
                data = toml.load(path)
                return HookConfig(**data.get("hook", {}))
            except Exception:
                # If config file is invalid, continue to next
                continue

    return HookConfig()


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> HookConfig:
    """
    Load configuration from file and environment.

    Args:
        config_path: Optional explicit path to a config file.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        HookConfig with loaded or default values.
    """
    environ = os.environ if environ is None else environ
    config = _load_file_config(config_path)

    if DEBUG_ENV_VAR in environ:
        config = config.model_copy(update={"debug": parse_debug_flag(environ[DEBUG_ENV_VAR])})

    return config

"""Configuration for claw-hooks.

Settings live in a TOML file (default ~/.config/claw-hooks/config.toml) which
is created with commented defaults on first use. Values in the file take
precedence; anything not set there can come from the environment:

    - CLAW_HOOKS_RM_BLOCK / CLAW_HOOKS_KILL_BLOCK / CLAW_HOOKS_DD_BLOCK
    - CLAW_HOOKS_DEBUG: Enable debug logging to file
    - CLAW_HOOKS_LOG_PATH: Log directory (default: <config dir>/logs)
    - CLAW_HOOKS_PARSER: "builtin" or "bashlex"
"""

from __future__ import annotations

import logging
import re
import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from claw_hooks.errors import ConfigError

logger = logging.getLogger(__name__)

FILE_PLACEHOLDER = "{file}"


class CustomFilterConfig(BaseModel):
    """One [[custom_filters]] entry."""

    command: str = Field(description="Regex matched against the command")
    args: list[str] | None = Field(
        default=None,
        description="First-argument values to match; omit for pattern mode",
    )
    message: str = Field(description="Message shown when the filter blocks")

    @field_validator("command")
    @classmethod
    def _valid_pattern(cls, value: str) -> str:
        if not value:
            raise ValueError("command must not be empty")
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regex {value!r}: {e}") from e
        return value

    @field_validator("message")
    @classmethod
    def _non_empty_message(cls, value: str) -> str:
        if not value:
            raise ValueError("message must not be empty")
        return value


class StopHookConfig(BaseModel):
    """One [[stop_hooks]] entry."""

    command: str

    @field_validator("command")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("stop hook command must not be empty")
        return value


class HooksConfig(BaseSettings):
    """claw-hooks configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CLAW_HOOKS_",
        extra="ignore",
    )

    # =========================================================================
    # Built-in filters
    # =========================================================================
    rm_block: bool = Field(default=True, description="Block rm/rmdir/del/erase")
    rm_block_message: str | None = Field(default=None, description="Custom rm block message")
    kill_block: bool = Field(default=True, description="Block kill/pkill/killall/taskkill")
    kill_block_message: str | None = Field(default=None, description="Custom kill block message")
    dd_block: bool = Field(default=True, description="Block dd")
    dd_block_message: str | None = Field(default=None, description="Custom dd block message")

    # =========================================================================
    # Logging and parsing
    # =========================================================================
    debug: bool = Field(default=False, description="Write debug logs to log_path")
    log_path: Path | None = Field(
        default=None,
        description="Log directory (resolved to <config dir>/logs when unset)",
    )
    parser: Literal["builtin", "bashlex"] = Field(
        default="builtin",
        description="Command extraction strategy",
    )

    # =========================================================================
    # User hooks
    # =========================================================================
    custom_filters: list[CustomFilterConfig] = Field(default_factory=list)
    extension_hooks: dict[str, list[str]] = Field(default_factory=dict)
    stop_hooks: list[StopHookConfig] = Field(default_factory=list)

    @field_validator("log_path", mode="before")
    @classmethod
    def _valid_log_path(cls, value):
        if value is None:
            return None
        if "\0" in str(value):
            raise ValueError("log_path must not contain NUL characters")
        return Path(value).expanduser()

    @field_validator("extension_hooks")
    @classmethod
    def _valid_extension_hooks(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        for ext, commands in value.items():
            if not ext.startswith("."):
                raise ValueError(f"extension {ext!r} must start with '.'")
            if not commands:
                raise ValueError(f"extension {ext!r} has no commands")
            for command in commands:
                if not command.strip():
                    raise ValueError(f"extension {ext!r} has an empty command")
                if FILE_PLACEHOLDER not in command:
                    raise ValueError(f"command {command!r} for {ext!r} must contain {FILE_PLACEHOLDER}")
        return value


DEFAULT_CONFIG_TOML = """\
# claw-hooks configuration file

# Enable blocking of rm/rmdir/del/erase commands (default: true)
rm_block = true
# Custom message for rm blocking
# rm_block_message = "🚫 Use safe-rm instead: safe-rm <file>"

# Enable blocking of kill/pkill/killall/taskkill commands (default: true)
kill_block = true
# Custom message for kill blocking
# kill_block_message = "🚫 Use safe-kill instead: safe-kill <PID>"

# Enable blocking of dd command (default: true)
dd_block = true
# Custom message for dd blocking
# dd_block_message = "🚫 dd command blocked for safety."

# Enable debug logging to file (default: false)
debug = false

# Path to log directory (default: same directory as config.toml/logs)
# log_path = "~/.config/claw-hooks/logs"

# Command extraction strategy: "builtin" (default) or "bashlex"
# parser = "builtin"

# Custom command filters
# Without args, command is a regex matched at the start of each command.
# With args, command must match the program name and the first argument
# must be one of args.
# [[custom_filters]]
# command = "yarn"
# message = "⚠️ Use `pnpm` instead of `yarn`"

# [[custom_filters]]
# command = "npm"
# args = ["install", "i", "add"]
# message = "⚠️ Use `pnpm add` instead of `npm install`"

# Extension-based hooks
# Run tools when files with these extensions are written or edited
# [extension_hooks]
# ".py" = ["ruff format {file}", "ruff check --fix {file}"]
# ".go" = ["gofmt -w {file}"]
# ".ts" = ["biome format --write {file}"]

# Stop hooks
# Run commands when the agent loop ends (notifications, sounds, cleanup)
# [[stop_hooks]]
# command = "afplay /System/Library/Sounds/Glass.aiff"

# [[stop_hooks]]
# command = "notify-send claw-hooks done"
"""


def default_config_path() -> Path:
    """Get the default config file path (~/.config/claw-hooks/config.toml)."""
    return Path.home() / ".config" / "claw-hooks" / "config.toml"


def generate_config(path: Path) -> None:
    """Write the commented default configuration, creating parent directories.

    Raises:
        ConfigError: if the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to write config file {path}: {e}", path) from e
    logger.info(f"Generated default config at {path}")


def load_config(path: Path | str | None = None) -> HooksConfig:
    """Load and validate configuration.

    Args:
        path: Config file to read. Defaults to default_config_path(). A
            missing file is created with the default contents first.

    Returns:
        Validated HooksConfig with log_path resolved.

    Raises:
        ConfigError: if the file cannot be read, parsed or validated.
    """
    path = Path(path).expanduser() if path else default_config_path()
    if not path.exists():
        generate_config(path)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}", path) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}", path) from e

    try:
        config = HooksConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}", path) from e

    if config.log_path is None:
        config = config.model_copy(update={"log_path": path.parent / "logs"})
    return config

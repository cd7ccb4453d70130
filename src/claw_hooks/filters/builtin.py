"""Built-in denylist filters: process kill, disk dump, destructive delete."""

from __future__ import annotations

import logging

from claw_hooks.filters.base import DEPTH_EXCEEDED_MESSAGE, PRIORITY_DD, PRIORITY_KILL, PRIORITY_RM
from claw_hooks.models import Allow, Block, Decision, Event, EventKind, SubjectKind
from claw_hooks.parser import (
    XARGS_FLAGS_WITH_ARGS,
    CommandParser,
    ShellParser,
    depth_exceeded,
    split_segments,
    tokenize,
)

logger = logging.getLogger(__name__)

KILL_COMMANDS = frozenset({"kill", "pkill", "killall", "taskkill"})
DD_COMMANDS = frozenset({"dd"})
RM_COMMANDS = frozenset({"rm", "rmdir", "del", "erase"})

DEFAULT_KILL_MESSAGE = (
    "🚫 kill/pkill/killall command blocked for safety. "
    "Use safe-kill: safe-kill <PID>, safe-kill -N <name>, or safe-kill -p <port>."
)
DEFAULT_DD_MESSAGE = (
    "🚫 dd command is blocked for safety. Use cp or rsync for file operations. "
    "If you need dd specifically, use safe-dd or request explicit permission."
)
DEFAULT_RM_MESSAGE = (
    "🚫 rm/rmdir command blocked for safety. "
    "Configure rm_block_message in config.toml to customize this message."
)


class DenylistFilter:
    """Blocks shell commands that invoke any denylisted program."""

    name = "denylist"
    priority = 0
    commands: frozenset[str] = frozenset()
    default_message = ""

    def __init__(
        self,
        enabled: bool = True,
        message: str | None = None,
        parser: CommandParser | None = None,
    ):
        self.enabled = enabled
        self.message = message or self.default_message
        self.parser = parser or ShellParser()

    def applies_to(self, event: Event) -> bool:
        return (
            self.enabled
            and event.event_kind == EventKind.PRE_TOOL_USE
            and event.subject_kind == SubjectKind.SHELL
            and event.command is not None
        )

    def matches(self, command_line: str) -> bool:
        """True if the command line would run a denylisted program."""
        return any(name in self.commands for name in self.parser.extract_commands(command_line))

    def decide(self, event: Event) -> Decision:
        command_line = event.command or ""
        if depth_exceeded(self.parser.parse(command_line)):
            logger.info(f"{self.name} filter blocked over-nested command: {command_line[:200]}")
            return Block(DEPTH_EXCEEDED_MESSAGE)
        if self.matches(command_line):
            logger.info(f"{self.name} filter blocked: {command_line}")
            return Block(self.message)
        return Allow()


class KillFilter(DenylistFilter):
    name = "kill"
    priority = PRIORITY_KILL
    commands = KILL_COMMANDS
    default_message = DEFAULT_KILL_MESSAGE

    def matches(self, command_line: str) -> bool:
        return super().matches(command_line) or self._xargs_kill(command_line)

    def _xargs_kill(self, command_line: str) -> bool:
        """Catch `... | xargs [flags] kill` even if extraction missed it."""
        for segment in split_segments(command_line):
            tokens = tokenize(segment)
            if not tokens or tokens[0] != "xargs":
                continue
            skip_next = False
            for token in tokens[1:]:
                if skip_next:
                    skip_next = False
                    continue
                if token.startswith("-"):
                    skip_next = token in XARGS_FLAGS_WITH_ARGS
                    continue
                if token in KILL_COMMANDS:
                    return True
                break
        return False


class DdFilter(DenylistFilter):
    name = "dd"
    priority = PRIORITY_DD
    commands = DD_COMMANDS
    default_message = DEFAULT_DD_MESSAGE


class RmFilter(DenylistFilter):
    name = "rm"
    priority = PRIORITY_RM
    commands = RM_COMMANDS
    default_message = DEFAULT_RM_MESSAGE

"""User-configured command filters."""

from __future__ import annotations

import logging
import re

from claw_hooks.filters.base import DEPTH_EXCEEDED_MESSAGE, PRIORITY_CUSTOM
from claw_hooks.models import Allow, Block, Decision, Event, EventKind, SubjectKind
from claw_hooks.parser import CommandParser, Invocation, ShellParser, depth_exceeded, strip_quoted

logger = logging.getLogger(__name__)


class CustomCommandFilter:
    """Blocks invocations matching a configured command regex.

    Pattern mode (args is None): the regex must match at the start of the
    command name (unquoted, so `'yarn'` is yarn) followed by its arguments
    with quoted strings removed. `yarn` never matches `grep yarn` or
    `echo "yarn"`.

    Argument mode (args is a list): the regex must fully match the command
    name, and the first argument must be one of args. An empty list matches
    on the name alone.

    Raises:
        re.error: if the command regex does not compile.
    """

    name = "custom"
    priority = PRIORITY_CUSTOM

    def __init__(
        self,
        command: str,
        message: str,
        args: list[str] | None = None,
        parser: CommandParser | None = None,
    ):
        self.command = command
        self.message = message
        self.args = list(args) if args is not None else None
        self.pattern = re.compile(command)
        self.parser = parser or ShellParser()

    def applies_to(self, event: Event) -> bool:
        return (
            event.event_kind == EventKind.PRE_TOOL_USE
            and event.subject_kind == SubjectKind.SHELL
            and event.command is not None
        )

    def matches(self, invocation: Invocation) -> bool:
        if self.args is None:
            text = f"{invocation.name} {strip_quoted(invocation.arg_text)}".strip()
            return self.pattern.match(text) is not None

        if self.pattern.fullmatch(invocation.name) is None:
            return False
        if not self.args:
            return True
        return len(invocation.tokens) > 1 and invocation.tokens[1] in self.args

    def decide(self, event: Event) -> Decision:
        command_line = event.command or ""
        invocations = self.parser.parse(command_line)
        if depth_exceeded(invocations):
            logger.info(f"Custom filter {self.command!r} blocked over-nested command: {command_line[:200]}")
            return Block(DEPTH_EXCEEDED_MESSAGE)
        for invocation in invocations:
            if self.matches(invocation):
                logger.info(f"Custom filter {self.command!r} blocked: {command_line}")
                return Block(self.message)
        return Allow()

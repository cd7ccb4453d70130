"""Run notification commands when the agent session ends."""

from __future__ import annotations

import logging
import subprocess

from claw_hooks.filters.base import PRIORITY_SIDE_EFFECT
from claw_hooks.models import Allow, Decision, Event, EventKind

logger = logging.getLogger(__name__)


class StopHookFilter:
    """Best-effort side effects on Stop events. Never blocks."""

    name = "stop"
    priority = PRIORITY_SIDE_EFFECT

    def __init__(self, commands: list[str]):
        self.commands = list(commands)

    def applies_to(self, event: Event) -> bool:
        return event.event_kind == EventKind.STOP

    def run_command(self, command: str) -> bool:
        """Run one hook command. Returns True if it exited successfully."""
        argv = command.split()
        if not argv:
            logger.warning("Stop hook failed: empty command")
            return False

        logger.debug(f"Executing stop hook: {argv}")
        try:
            result = subprocess.run(argv, capture_output=True, text=True)
        except OSError as e:
            logger.warning(f"Stop hook failed: could not execute {argv[0]!r}: {e}")
            return False

        if result.returncode != 0:
            logger.warning(f"Stop hook command {argv[0]!r} failed: {result.stderr.strip()}")
            return False
        return True

    def decide(self, event: Event) -> Decision:
        for command in self.commands:
            self.run_command(command)
        return Allow()

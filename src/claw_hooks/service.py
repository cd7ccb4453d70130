"""Hook service: one raw payload in, one response and exit code out."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from claw_hooks.adapters import Format, FormatAdapter
from claw_hooks.config import HooksConfig
from claw_hooks.errors import InputError
from claw_hooks.filters.chain import FilterChain
from claw_hooks.models import FILE_SUBJECTS, Allow, Decision, Event, EventKind
from claw_hooks.parser import CommandParser

logger = logging.getLogger(__name__)


@dataclass
class HookResult:
    """Serialized response for stdout plus the process exit code."""

    output: str
    exit_code: int


class HookService:
    """Routes decoded events through the filter chain."""

    def __init__(
        self,
        config: HooksConfig,
        fmt: Format | str = Format.CLAUDE,
        parser: CommandParser | None = None,
    ):
        self.config = config
        self.adapter = FormatAdapter(fmt)
        self.chain = FilterChain(config, parser)

    def process(self, event: Event) -> Decision:
        logger.debug(f"Processing hook: event={event.event_kind.value}, tool_name={event.tool_name}")

        if event.event_kind == EventKind.PRE_TOOL_USE:
            return self.chain.execute(event)

        if event.event_kind == EventKind.POST_TOOL_USE:
            if event.subject_kind in FILE_SUBJECTS:
                return self.chain.execute(event)
            logger.debug(f"PostToolUse for {event.tool_name} ignored")
            return Allow()

        if event.event_kind == EventKind.STOP:
            logger.info(f"Stop event received: session_id={event.session_id}")
            return self.chain.execute(event)

        logger.debug(f"Unhandled event for tool {event.tool_name!r}, allowing")
        return Allow()

    def run(self, raw_input: str) -> HookResult:
        """Decode, decide and encode. Bad input fails closed."""
        if not raw_input.strip():
            logger.error("No input received from stdin")
            return HookResult(
                self.adapter.format_error("No input received from stdin"),
                self.adapter.error_exit_code(),
            )

        logger.debug(f"Received input: {raw_input}")
        try:
            event = self.adapter.parse_input(raw_input)
        except InputError as e:
            message = f"Failed to parse input: {e}"
            logger.error(message)
            return HookResult(self.adapter.format_error(message), self.adapter.error_exit_code())

        decision = self.process(event)
        output = self.adapter.format_output(decision)
        logger.info(f"Output: {output}")
        return HookResult(output, self.adapter.exit_code(decision))

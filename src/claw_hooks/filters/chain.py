"""Priority-ordered filter chain."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from claw_hooks.filters.base import Filter
from claw_hooks.filters.builtin import DdFilter, KillFilter, RmFilter
from claw_hooks.filters.custom import CustomCommandFilter
from claw_hooks.filters.extension import ExtensionHookFilter
from claw_hooks.filters.stop import StopHookFilter
from claw_hooks.models import Allow, Block, Decision, Event
from claw_hooks.parser import CommandParser, get_parser

if TYPE_CHECKING:
    from claw_hooks.config import HooksConfig

logger = logging.getLogger(__name__)


class FilterChain:
    """Builds filters from configuration and evaluates them in priority order.

    Example:
        chain = FilterChain(load_config())
        decision = chain.execute(Event.shell("sudo rm -rf /"))
    """

    def __init__(self, config: HooksConfig, parser: CommandParser | None = None):
        parser = parser or get_parser(config.parser)
        filters: list[Filter] = [
            KillFilter(config.kill_block, config.kill_block_message, parser),
            DdFilter(config.dd_block, config.dd_block_message, parser),
            RmFilter(config.rm_block, config.rm_block_message, parser),
        ]

        for custom in config.custom_filters:
            try:
                filters.append(
                    CustomCommandFilter(custom.command, custom.message, custom.args, parser)
                )
            except re.error as e:
                logger.warning(f"Skipping custom filter {custom.command!r}: invalid pattern ({e})")

        if config.extension_hooks:
            filters.append(ExtensionHookFilter(config.extension_hooks))

        if config.stop_hooks:
            filters.append(StopHookFilter([hook.command for hook in config.stop_hooks]))

        # sorted() is stable, so equal priorities keep construction order
        self.filters: list[Filter] = sorted(filters, key=lambda f: f.priority)

    def execute(self, event: Event) -> Decision:
        """Return the first block, else the first advisory allow, else a plain allow."""
        advisory: Allow | None = None
        for f in self.filters:
            if not f.applies_to(event):
                continue
            decision = f.decide(event)
            logger.debug(f"Filter {f.name} (priority {f.priority}) -> {decision}")
            if isinstance(decision, Block):
                return decision
            if advisory is None and decision.advisory_context:
                advisory = decision
        return advisory or Allow()

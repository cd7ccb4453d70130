"""Filters that turn hook events into decisions."""

from claw_hooks.filters.base import Filter
from claw_hooks.filters.builtin import DdFilter, KillFilter, RmFilter
from claw_hooks.filters.chain import FilterChain
from claw_hooks.filters.custom import CustomCommandFilter
from claw_hooks.filters.extension import ExtensionHookFilter
from claw_hooks.filters.stop import StopHookFilter

__all__ = [
    "CustomCommandFilter",
    "DdFilter",
    "ExtensionHookFilter",
    "Filter",
    "FilterChain",
    "KillFilter",
    "RmFilter",
    "StopHookFilter",
]

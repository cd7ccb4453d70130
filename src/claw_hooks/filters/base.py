"""Filter protocol.

A filter is a named policy with a static priority. The chain asks each filter
whether it applies to an event and, if so, what it decides. Lower priorities
run first: safety filters sit below 50, side-effect filters at 100.
"""

from __future__ import annotations

from typing import Protocol

from claw_hooks.models import Decision, Event

PRIORITY_KILL = 10
PRIORITY_DD = 15
PRIORITY_RM = 20
PRIORITY_CUSTOM = 50
PRIORITY_SIDE_EFFECT = 100

DEPTH_EXCEEDED_MESSAGE = (
    "🚫 Command blocked: it is nested too deeply to inspect. "
    "Split it into simpler commands."
)


class Filter(Protocol):
    """Interface each filter implements."""

    name: str
    priority: int

    def applies_to(self, event: Event) -> bool:
        """Whether this filter has an opinion on the event."""
        ...

    def decide(self, event: Event) -> Decision:
        """Compute the decision. Only called when applies_to() is True."""
        ...

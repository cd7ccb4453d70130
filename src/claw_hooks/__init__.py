"""claw-hooks - policy gate for AI coding agent hooks.

Parses shell command lines into the programs they would run and evaluates a
priority-ordered chain of filters to allow or block each agent tool call.
"""

from importlib.metadata import version

from claw_hooks.config import HooksConfig, load_config
from claw_hooks.filters.chain import FilterChain
from claw_hooks.models import Allow, Block, Event
from claw_hooks.parser import extract_command_strings, extract_commands, tokenize

__version__ = version("claw-hooks")
__all__ = [
    "Allow",
    "Block",
    "Event",
    "FilterChain",
    "HooksConfig",
    "extract_command_strings",
    "extract_commands",
    "load_config",
    "tokenize",
    "__version__",
]

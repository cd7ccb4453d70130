"""Event and decision types shared by adapters, filters and the service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class EventKind(str, Enum):
    """Lifecycle point at which the agent fired the hook."""

    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    STOP = "Stop"
    OTHER = "Other"


class SubjectKind(str, Enum):
    """Tool the event is about."""

    SHELL = "Bash"
    WRITE = "Write"
    EDIT = "Edit"
    MULTI_EDIT = "MultiEdit"
    STOP = "Stop"
    OTHER = "Other"


FILE_SUBJECTS = frozenset({SubjectKind.WRITE, SubjectKind.EDIT, SubjectKind.MULTI_EDIT})


@dataclass(frozen=True)
class CommandInput:
    command: str
    timeout: int | None = None  # milliseconds


@dataclass(frozen=True)
class FileInput:
    file_path: str
    content: str | None = None


@dataclass(frozen=True)
class StopInput:
    status: str | None = None
    loop_count: int | None = None
    response: str | None = None


Payload = Union[CommandInput, FileInput, StopInput, dict[str, Any]]


@dataclass(frozen=True)
class Event:
    """One hook invocation, decoded from an agent's wire format."""

    event_kind: EventKind
    subject_kind: SubjectKind
    payload: Payload = field(default_factory=dict)
    session_id: str | None = None
    tool_name: str = ""

    @property
    def command(self) -> str | None:
        if isinstance(self.payload, CommandInput):
            return self.payload.command
        return None

    @property
    def file_path(self) -> str | None:
        if isinstance(self.payload, FileInput):
            return self.payload.file_path
        return None

    @classmethod
    def shell(cls, command: str, event_kind: EventKind = EventKind.PRE_TOOL_USE) -> Event:
        """Build a shell-command event (used by `explain` and tests)."""
        return cls(event_kind, SubjectKind.SHELL, CommandInput(command), tool_name="Bash")


@dataclass(frozen=True)
class Allow:
    advisory_context: str | None = None


@dataclass(frozen=True)
class Block:
    message: str

    def __post_init__(self):
        if not self.message:
            raise ValueError("Block decision requires a non-empty message")


Decision = Union[Allow, Block]

EXIT_ALLOW = 0
EXIT_BLOCK = 2


def exit_code(decision: Decision) -> int:
    """Process exit status for a decision."""
    return EXIT_BLOCK if isinstance(decision, Block) else EXIT_ALLOW

"""Wire formats for the agents claw-hooks can sit behind.

Each agent sends a JSON object on stdin and expects a JSON object on stdout.
FormatAdapter converts between those payloads and the Event/Decision types:

    - claude: Claude Code hooks (PreToolUse, PostToolUse, Stop, ...)
    - cursor: Cursor hooks (beforeShellExecution, afterFileEdit, stop)
    - windsurf: Windsurf Cascade hooks (pre_run_command, post_write_code, ...)
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from claw_hooks.errors import InputError
from claw_hooks.models import (
    EXIT_BLOCK,
    Allow,
    CommandInput,
    Decision,
    Event,
    EventKind,
    FileInput,
    StopInput,
    SubjectKind,
    exit_code,
)

logger = logging.getLogger(__name__)

ERROR_PREFIX = "🚫 Hook error (fail-closed): "
CURSOR_BLOCK_AGENT_MESSAGE = "Command blocked by claw-hooks"
CURSOR_ERROR_AGENT_MESSAGE = "Hook system encountered an error and blocked for safety"


class Format(str, Enum):
    CLAUDE = "claude"
    CURSOR = "cursor"
    WINDSURF = "windsurf"


# =============================================================================
# Input models
# =============================================================================


class ClaudeInput(BaseModel):
    hook_event_name: str
    tool_name: str | None = None
    tool_input: dict[str, Any] | None = None
    session_id: str | None = None
    stop_hook_active: bool | None = None


class ClaudeCommandInput(BaseModel):
    command: str
    timeout: int | None = None


class ClaudeFileInput(BaseModel):
    file_path: str
    content: str | None = None


class CursorStopInput(BaseModel):
    status: str
    loop_count: int | None = None


class CursorShellInput(BaseModel):
    command: str
    cwd: str | None = None


class CursorFileEditInput(BaseModel):
    file_path: str = Field(validation_alias=AliasChoices("file_path", "filePath"))


class WindsurfToolInfo(BaseModel):
    command_line: str | None = None
    cwd: str | None = None
    file_path: str | None = None
    response: str | None = None


class WindsurfInput(BaseModel):
    agent_action_name: str
    tool_info: WindsurfToolInfo | None = None


_CLAUDE_SUBJECTS = {
    "Bash": SubjectKind.SHELL,
    "Write": SubjectKind.WRITE,
    "Edit": SubjectKind.EDIT,
    "MultiEdit": SubjectKind.MULTI_EDIT,
}

_CLAUDE_EVENTS = {
    "PreToolUse": EventKind.PRE_TOOL_USE,
    "PostToolUse": EventKind.POST_TOOL_USE,
    "Stop": EventKind.STOP,
    "SubagentStop": EventKind.STOP,
}


def _dumps(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _load_object(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON input: {e}") from e
    if not isinstance(data, dict):
        raise InputError("Hook input must be a JSON object")
    return data


class FormatAdapter:
    """Translate one agent's wire format to and from Event/Decision."""

    def __init__(self, fmt: Format | str = Format.CLAUDE):
        self.format = Format(fmt)

    def parse_input(self, text: str) -> Event:
        """Decode raw stdin into an Event.

        Raises:
            InputError: on invalid JSON, missing fields or unknown shapes.
        """
        logger.debug(f"{self.format.value} raw input: {text}")
        data = _load_object(text)
        try:
            if self.format == Format.CURSOR:
                event = self._parse_cursor(data)
            elif self.format == Format.WINDSURF:
                event = self._parse_windsurf(data)
            else:
                event = self._parse_claude(data)
        except ValidationError as e:
            raise InputError(f"Failed to parse {self.format.value} input: {e}") from e

        logger.debug(
            f"Parsed {self.format.value} input: event={event.event_kind.value} tool={event.tool_name}"
        )
        return event

    def _parse_claude(self, data: dict[str, Any]) -> Event:
        raw = ClaudeInput.model_validate(data)
        event_kind = _CLAUDE_EVENTS.get(raw.hook_event_name, EventKind.OTHER)

        if event_kind == EventKind.STOP:
            return Event(EventKind.STOP, SubjectKind.STOP, StopInput(), raw.session_id, "Stop")

        if event_kind == EventKind.OTHER:
            return Event(
                EventKind.OTHER,
                SubjectKind.OTHER,
                raw.tool_input or {},
                raw.session_id,
                raw.tool_name or "",
            )

        if raw.tool_name is None:
            raise InputError("Missing tool_name field")
        if raw.tool_input is None:
            raise InputError("Missing tool_input field")

        subject = _CLAUDE_SUBJECTS.get(raw.tool_name, SubjectKind.OTHER)
        if subject == SubjectKind.SHELL:
            command = ClaudeCommandInput.model_validate(raw.tool_input)
            payload = CommandInput(command.command, command.timeout)
        elif subject == SubjectKind.OTHER:
            payload = raw.tool_input
        else:
            file_input = ClaudeFileInput.model_validate(raw.tool_input)
            payload = FileInput(file_input.file_path, file_input.content)

        return Event(event_kind, subject, payload, raw.session_id, raw.tool_name)

    def _parse_cursor(self, data: dict[str, Any]) -> Event:
        # Cursor payloads carry no event name; the shape decides
        try:
            stop = CursorStopInput.model_validate(data)
        except ValidationError:
            pass
        else:
            return Event(
                EventKind.STOP,
                SubjectKind.STOP,
                StopInput(status=stop.status, loop_count=stop.loop_count),
                tool_name="Stop",
            )

        try:
            shell = CursorShellInput.model_validate(data)
        except ValidationError:
            pass
        else:
            return Event(EventKind.PRE_TOOL_USE, SubjectKind.SHELL, CommandInput(shell.command), tool_name="Bash")

        try:
            edit = CursorFileEditInput.model_validate(data)
        except ValidationError:
            raise InputError(
                "Unrecognized Cursor input: expected status, command or file_path"
            ) from None
        return Event(EventKind.POST_TOOL_USE, SubjectKind.WRITE, FileInput(edit.file_path), tool_name="Write")

    def _parse_windsurf(self, data: dict[str, Any]) -> Event:
        raw = WindsurfInput.model_validate(data)
        info = raw.tool_info or WindsurfToolInfo()
        action = raw.agent_action_name

        if action == "pre_run_command":
            return Event(
                EventKind.PRE_TOOL_USE, SubjectKind.SHELL, CommandInput(info.command_line or ""), tool_name="Bash"
            )
        if action == "post_write_code":
            return Event(
                EventKind.POST_TOOL_USE, SubjectKind.WRITE, FileInput(info.file_path or ""), tool_name="Write"
            )
        if action == "post_cascade_response":
            return Event(EventKind.STOP, SubjectKind.STOP, StopInput(response=info.response), tool_name="Stop")
        return Event(EventKind.OTHER, SubjectKind.OTHER, {}, tool_name=action)

    def format_output(self, decision: Decision) -> str:
        """Serialize a decision for the agent."""
        if self.format == Format.CURSOR:
            if isinstance(decision, Allow):
                return _dumps({"permission": "allow"})
            return _dumps({
                "permission": "deny",
                "user_message": decision.message,
                "agent_message": CURSOR_BLOCK_AGENT_MESSAGE,
            })

        if isinstance(decision, Allow):
            payload: dict[str, Any] = {"decision": "approve"}
            if decision.advisory_context:
                payload["hookSpecificOutput"] = {
                    "hookEventName": EventKind.POST_TOOL_USE.value,
                    "additionalContext": decision.advisory_context,
                }
            return _dumps(payload)
        return _dumps({"decision": "block", "message": decision.message})

    def format_error(self, message: str) -> str:
        """Fail-closed response for input that could not be processed."""
        error_message = f"{ERROR_PREFIX}{message}"
        if self.format == Format.CURSOR:
            return _dumps({
                "permission": "deny",
                "user_message": error_message,
                "agent_message": CURSOR_ERROR_AGENT_MESSAGE,
            })
        return _dumps({"decision": "block", "message": error_message})

    def exit_code(self, decision: Decision) -> int:
        return exit_code(decision)

    def error_exit_code(self) -> int:
        return EXIT_BLOCK

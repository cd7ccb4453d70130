"""Run formatter/linter commands after files with configured extensions change."""

from __future__ import annotations

import logging
import subprocess
from pathlib import PurePath

from claw_hooks.filters.base import PRIORITY_SIDE_EFFECT
from claw_hooks.models import FILE_SUBJECTS, Allow, Decision, Event, EventKind

logger = logging.getLogger(__name__)

FILE_PLACEHOLDER = "{file}"
DANGEROUS_PATH_CHARS = ("`", "$", "|", "&", ";", "\n", "\r", "\0")


class UnsafePathError(ValueError):
    pass


class TemplateError(ValueError):
    pass


def validate_file_path(file_path: str) -> None:
    """Reject paths that could escape the project or inject flags/shell syntax.

    Raises:
        UnsafePathError: describing the first problem found.
    """
    if ".." in file_path:
        raise UnsafePathError("Path traversal detected")
    if file_path.startswith("-"):
        raise UnsafePathError("Path starting with '-' could be interpreted as flag")
    for char in DANGEROUS_PATH_CHARS:
        if char in file_path:
            raise UnsafePathError(f"Path contains dangerous character: {char!r}")


def build_argv(template: str, file_path: str) -> list[str]:
    """Expand a command template into an argv list.

    `{file}` as a whole token becomes its own argument; inside a token
    (`--file={file}`) it is replaced in place. The path is never joined into
    a shell string.

    Raises:
        TemplateError: if the template is empty or has no placeholder.
    """
    parts = template.split()
    if not parts:
        raise TemplateError("Empty command template")
    if not any(FILE_PLACEHOLDER in part for part in parts):
        raise TemplateError("Command template must contain {file} placeholder")

    safe_path = f"./{file_path}" if file_path.startswith("-") else file_path
    return [
        safe_path if part == FILE_PLACEHOLDER else part.replace(FILE_PLACEHOLDER, safe_path)
        for part in parts
    ]


class ExtensionHookFilter:
    """Side-effect filter keyed on file extension. Never blocks."""

    name = "extension"
    priority = PRIORITY_SIDE_EFFECT

    def __init__(self, hooks: dict[str, list[str]]):
        self.hooks = dict(hooks)

    def commands_for(self, file_path: str) -> list[str] | None:
        suffix = PurePath(file_path).suffix
        if not suffix:
            return None
        return self.hooks.get(suffix)

    def applies_to(self, event: Event) -> bool:
        if event.event_kind not in (EventKind.PRE_TOOL_USE, EventKind.POST_TOOL_USE):
            return False
        if event.subject_kind not in FILE_SUBJECTS or event.file_path is None:
            return False
        return self.commands_for(event.file_path) is not None

    def run_commands(self, file_path: str) -> list[str]:
        """Run every template for the file's extension and collect output."""
        commands = self.commands_for(file_path) or []
        outputs: list[str] = []

        try:
            validate_file_path(file_path)
        except UnsafePathError as e:
            logger.warning(f"Skipping extension hooks for {file_path!r}: {e}")
            return [f"Error: {e}"]

        for template in commands:
            try:
                argv = build_argv(template, file_path)
            except TemplateError as e:
                logger.warning(f"Invalid extension hook {template!r}: {e}")
                outputs.append(f"Error: {e}")
                continue

            logger.debug(f"Executing extension hook: {argv}")
            try:
                result = subprocess.run(argv, capture_output=True, text=True)
            except OSError as e:
                logger.warning(f"Failed to execute hook {argv[0]!r}: {e}")
                outputs.append(f"Error: Failed to execute hook {argv[0]}: {e}")
                continue

            if result.returncode != 0:
                logger.warning(f"Hook command {argv[0]!r} exited {result.returncode}: {result.stderr.strip()}")
            for stream in (result.stdout, result.stderr):
                if stream and stream.strip():
                    outputs.append(stream.strip())

        return outputs

    def decide(self, event: Event) -> Decision:
        file_path = event.file_path or ""
        outputs = self.run_commands(file_path)
        if outputs and event.event_kind == EventKind.POST_TOOL_USE:
            return Allow("\n".join(outputs))
        return Allow()

"""Shell command parsing.

Turns a raw command line into the program invocations it would run, without
executing or expanding anything. The builtin parser is a quote-aware
segmenter that handles:

- Pipelines (|, |&) and background jobs (&)
- Logical operators (&&, ||)
- Separators (; and newlines)
- Command wrappers (sudo, env, nohup, ...)
- Shell interpreters running a script string (bash -c, sh -c, ...)
- xargs with a command
- Command substitution ($(...), backticks, <(...)) and ( ... ) groups

The grammar-driven strategy lives in claw_hooks.parser_ast and reuses the
unwinding logic defined here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

# Wrappers that execute another command
COMMAND_WRAPPERS = frozenset({
    "sudo", "env", "nohup", "nice", "ionice", "time", "timeout", "strace", "ltrace", "doas",
})

# Shells that can execute command strings via -c
SHELL_COMMANDS = frozenset({"bash", "sh", "zsh", "ksh", "csh", "tcsh", "fish", "dash"})

# Wrapper flags that consume the following token
WRAPPER_FLAGS_WITH_ARGS: dict[str, frozenset[str]] = {
    "sudo": frozenset({
        "-u", "-g", "-C", "-D", "-R", "-T", "-h", "-p", "-r", "-t", "-U",
        "--user", "--group", "--close-from", "--chdir", "--chroot",
        "--command-timeout", "--host", "--prompt", "--role", "--type", "--other-user",
    }),
    "doas": frozenset({"-u", "-C"}),
    "env": frozenset({"-u", "-C", "--unset", "--chdir"}),
    "nice": frozenset({"-n", "--adjustment"}),
    "ionice": frozenset({"-c", "-n", "-p", "-P", "-u", "--class", "--classdata", "--pid", "--pgid", "--uid"}),
    "time": frozenset({"-f", "-o", "--format", "--output"}),
    "timeout": frozenset({"-k", "-s", "--kill-after", "--signal"}),
    "strace": frozenset({"-a", "-b", "-e", "-E", "-I", "-o", "-O", "-p", "-P", "-s", "-S", "-u", "-X"}),
    "ltrace": frozenset({"-a", "-A", "-D", "-e", "-F", "-l", "-n", "-o", "-p", "-s", "-u", "-w", "--library"}),
    "nohup": frozenset(),
}

# env flags whose value is itself a command line
ENV_SPLIT_STRING_FLAGS = frozenset({"-S", "--split-string"})

XARGS_FLAGS_WITH_ARGS = frozenset({
    "-a", "-d", "-E", "-I", "-L", "-n", "-P", "-s",
    "--arg-file", "--delimiter", "--max-args", "--max-chars", "--max-lines",
    "--max-procs", "--process-slot-var",
})

# Reserved words that may precede the command of a segment
RESERVED_PREFIXES = frozenset({
    "if", "then", "else", "elif", "do", "while", "until", "!", "{", "}", "fi", "done", "esac",
})

# Reserved words that open a header rather than a command
HEADER_WORDS = frozenset({"for", "case", "select", "function"})

MAX_DEPTH = 32

_WHITESPACE = " \t\n"


@dataclass(frozen=True)
class Invocation:
    """One simple command: its tokens and the raw text it starts at.

    A truncated invocation has no tokens. It marks text that was not analysed
    because it is nested deeper than the parser's depth cap.
    """

    tokens: tuple[str, ...]
    text: str
    truncated: bool = False

    @property
    def name(self) -> str:
        return self.tokens[0] if self.tokens else ""

    @property
    def args(self) -> tuple[str, ...]:
        return self.tokens[1:]

    @property
    def arg_text(self) -> str:
        """Raw text after the command word, quotes and escapes intact."""
        scanned = _scan_tokens(self.text)
        return self.text[scanned[1][1]:] if len(scanned) > 1 else ""


class CommandParser(Protocol):
    """Interface shared by the builtin and bashlex parsing strategies."""

    def parse(self, command_line: str) -> list[Invocation]:
        ...

    def extract_commands(self, command_line: str) -> list[str]:
        ...


# =============================================================================
# Lexing helpers
# =============================================================================


def _scan_tokens(text: str) -> list[tuple[str, int]]:
    """Tokenize text and keep the start offset of every token."""
    tokens: list[tuple[str, int]] = []
    current: list[str] = []
    start = -1
    quote: str | None = None
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if quote == "'":
            if ch == "'":
                quote = None
            else:
                current.append(ch)
        elif quote == '"':
            if ch == "\\" and i + 1 < n:
                i += 1
                current.append(text[i])
            elif ch == '"':
                quote = None
            else:
                current.append(ch)
        elif ch == "\\":
            if start < 0:
                start = i
            if i + 1 < n:
                i += 1
                current.append(text[i])
        elif ch in ("'", '"'):
            if start < 0:
                start = i
            quote = ch
        elif ch in _WHITESPACE:
            if start >= 0:
                tokens.append(("".join(current), start))
                current = []
                start = -1
        else:
            if start < 0:
                start = i
            current.append(ch)
        i += 1

    if start >= 0:
        tokens.append(("".join(current), start))
    return tokens


def tokenize(text: str) -> list[str]:
    """Split text into shell words, respecting quotes and backslash escapes.

    Unterminated quotes swallow the rest of the string into the open token.

    Examples:
        >>> tokenize("git commit -m \\"Hello world\\"")
        ['git', 'commit', '-m', 'Hello world']
    """
    return [value for value, _ in _scan_tokens(text)]


def _skip_escape_or_quote(text: str, i: int, quote: str | None) -> tuple[int, str | None, bool]:
    """Advance over escapes and quoted text.

    Returns (next index, quote state, consumed). When consumed is False the
    character at i is unquoted and must be handled by the caller.
    """
    ch = text[i]
    if ch == "\\" and quote != "'":
        return i + 2, quote, True
    if quote:
        if ch == quote:
            quote = None
        return i + 1, quote, True
    if ch in ("'", '"'):
        return i + 1, ch, True
    return i, quote, False


def match_close(text: str, open_index: int) -> int:
    """Return the index of the ')' matching the '(' at open_index.

    Quotes and escapes inside the group are honoured. An unterminated group
    runs to the end of the text.
    """
    depth = 0
    quote: str | None = None
    i = open_index
    n = len(text)
    while i < n:
        i, quote, consumed = _skip_escape_or_quote(text, i, quote)
        if consumed:
            continue
        ch = text[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return n


def _match_backtick(text: str, open_index: int) -> int:
    i = open_index + 1
    n = len(text)
    while i < n:
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == "`":
            return i
        i += 1
    return n


def split_segments(text: str) -> list[str]:
    """Split a command line into atomic segments.

    Cuts at unquoted ;, newlines, &&, ||, |, |& and a lone &. Nothing inside
    quotes, backticks or parentheses is split.
    """
    segments: list[str] = []
    start = 0
    depth = 0
    in_backtick = False
    quote: str | None = None
    i = 0
    n = len(text)

    while i < n:
        i, quote, consumed = _skip_escape_or_quote(text, i, quote)
        if consumed:
            continue
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if ch == "`":
            in_backtick = not in_backtick
            i += 1
            continue
        if ch == "(":
            depth += 1
            i += 1
            continue
        if ch == ")":
            depth = max(0, depth - 1)
            i += 1
            continue
        if depth or in_backtick:
            i += 1
            continue

        width = 0
        if ch in ";\n":
            width = 1
        elif ch == "|":
            width = 2 if nxt in ("|", "&") else 1
        elif ch == "&":
            if nxt == "&":
                width = 2
            elif nxt != ">" and (i == 0 or text[i - 1] not in "<>"):
                width = 1

        if width:
            segments.append(text[start:i])
            i += width
            start = i
        else:
            i += 1

    segments.append(text[start:])
    return [segment.strip() for segment in segments if segment.strip()]


def find_substitutions(text: str) -> list[str]:
    """Return the bodies of $(...), `...`, <(...) and >(...) found in text.

    Quoting is deliberately ignored, so a substitution inside a quoted
    argument is still reported. Arithmetic $((...)) is skipped.
    """
    bodies: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "$<>" and text.startswith("(", i + 1):
            end = match_close(text, i + 1)
            if ch == "$" and text.startswith("((", i + 1):
                i = end + 1
                continue
            bodies.append(text[i + 2:end])
            i = end + 1
            continue
        if ch == "`":
            end = _match_backtick(text, i)
            bodies.append(text[i + 1:end])
            i = end + 1
            continue
        i += 1
    return bodies


def strip_quoted(text: str) -> str:
    """Remove quoted substrings (quotes included), honouring escapes."""
    out: list[str] = []
    quote: str | None = None
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if quote:
            if ch == "\\" and quote == '"':
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue
        if ch == "\\":
            out.append(text[i:i + 2])
            i += 2
            continue
        if ch in ("'", '"'):
            quote = ch
            i += 1
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def is_assignment(token: str) -> bool:
    """True for NAME=value prefix tokens (not --flag=value)."""
    return "=" in token and not token.startswith("-")


def _is_short_flag_cluster(token: str) -> bool:
    return len(token) > 1 and token[0] == "-" and token[1] != "-" and token[1:].isalpha()


# =============================================================================
# Builtin parser
# =============================================================================


class ShellParser:
    """Hand-rolled, quote-aware command extractor.

    Example:
        parser = ShellParser()
        parser.extract_commands("sudo bash -c 'rm -rf /tmp/x' | tee log")
        # ['sudo', 'bash', 'rm', 'tee']
    """

    def __init__(self, max_depth: int = MAX_DEPTH):
        self.max_depth = max_depth

    def parse(self, command_line: str) -> list[Invocation]:
        """Return every invocation in script order, nested ones included."""
        invocations: list[Invocation] = []
        self._walk(command_line, 0, invocations)
        return invocations

    def extract_commands(self, command_line: str) -> list[str]:
        """Return distinct program names in first-seen order."""
        return unique_names(self.parse(command_line))

    def extract_command_strings(self, command_line: str) -> list[list[str]]:
        """Return the token list (command plus arguments) of every invocation."""
        return [list(invocation.tokens) for invocation in self.parse(command_line) if not invocation.truncated]

    def _walk(self, text: str, depth: int, out: list[Invocation]) -> None:
        for segment in split_segments(text):
            self._segment(segment, depth, out)

    def _truncate(self, text: str, out: list[Invocation]) -> None:
        logger.warning(f"Nesting deeper than {self.max_depth}, not analysed: {text[:80]}")
        out.append(Invocation((), text, truncated=True))

    def _segment(
        self,
        segment: str,
        depth: int,
        out: list[Invocation],
        scan_substitutions: bool = True,
    ) -> None:
        if depth > self.max_depth:
            self._truncate(segment, out)
            return

        if segment.startswith("("):
            close = match_close(segment, 0)
            self._walk(segment[1:close], depth + 1, out)
            if scan_substitutions:
                for body in find_substitutions(segment[close + 1:]):
                    self._walk(body, depth + 1, out)
            return

        tokens = _scan_tokens(segment)
        head = _command_index(tokens)
        if head is not None:
            self._invocation(segment, tokens[head:], depth, out)

        if scan_substitutions:
            for body in find_substitutions(segment):
                self._walk(body, depth + 1, out)

    def _invocation(
        self,
        segment: str,
        tokens: list[tuple[str, int]],
        depth: int,
        out: list[Invocation],
    ) -> None:
        name, offset = tokens[0]
        out.append(Invocation(tuple(value for value, _ in tokens), segment[offset:]))
        args = tokens[1:]

        if name in COMMAND_WRAPPERS:
            self._unwrap(name, segment, args, depth, out)

        if name in SHELL_COMMANDS:
            script = _shell_script([value for value, _ in args])
            if script is not None:
                self._walk(script, depth + 1, out)

        if name == "xargs":
            index = _xargs_command_index([value for value, _ in args])
            if index is not None:
                rest = args[index:]
                out.append(Invocation(tuple(value for value, _ in rest), segment[rest[0][1]:]))

    def _unwrap(
        self,
        wrapper: str,
        segment: str,
        args: list[tuple[str, int]],
        depth: int,
        out: list[Invocation],
    ) -> None:
        """Find the command a wrapper runs and process it like a segment."""
        takes_value = WRAPPER_FLAGS_WITH_ARGS.get(wrapper, frozenset())
        operand_pending = wrapper == "timeout"  # timeout DURATION COMMAND
        skip_next = False

        for index, (value, offset) in enumerate(args):
            if skip_next:
                skip_next = False
                continue
            if value.startswith("-") and value != "-":
                if wrapper == "env" and value in ENV_SPLIT_STRING_FLAGS:
                    if index + 1 < len(args):
                        self._walk(args[index + 1][0], depth + 1, out)
                    return
                if value in takes_value:
                    skip_next = True
                continue
            if is_assignment(value):
                continue
            if operand_pending:
                operand_pending = False
                continue
            self._segment(segment[offset:], depth + 1, out, scan_substitutions=False)
            return


def _command_index(tokens: list[tuple[str, int]]) -> int | None:
    """Index of the token naming the command, or None if there is none."""
    for index, (value, _) in enumerate(tokens):
        if value in HEADER_WORDS:
            return None
        if value in RESERVED_PREFIXES or is_assignment(value):
            continue
        if not value or value.startswith(("$(", "`")):
            return None
        return index
    return None


def _shell_script(args: list[str]) -> str | None:
    """Return the script passed to a shell via -c (or -lc, -ec, ...)."""
    for index, arg in enumerate(args):
        if arg == "-c" or (_is_short_flag_cluster(arg) and "c" in arg[1:]):
            if index + 1 < len(args):
                return args[index + 1]
            return None
    return None


def _xargs_command_index(args: list[str]) -> int | None:
    skip_next = False
    for index, arg in enumerate(args):
        if skip_next:
            skip_next = False
            continue
        if arg.startswith("-"):
            if arg in XARGS_FLAGS_WITH_ARGS:
                skip_next = True
            continue
        return index
    return None


def depth_exceeded(invocations: list[Invocation]) -> bool:
    """True if part of the command line was nested too deeply to analyse."""
    return any(invocation.truncated for invocation in invocations)


def unique_names(invocations: list[Invocation]) -> list[str]:
    """Distinct invocation names, first occurrence wins."""
    seen: set[str] = set()
    names: list[str] = []
    for invocation in invocations:
        name = invocation.name
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return names


# =============================================================================
# Module-level API
# =============================================================================


def get_parser(strategy: str = "builtin") -> CommandParser:
    """Return a parser for the configured strategy ("builtin" or "bashlex")."""
    if strategy == "bashlex":
        from claw_hooks.parser_ast import BashlexParser

        return BashlexParser()
    return ShellParser()


_default_parser = ShellParser()


def extract_commands(command_line: str) -> list[str]:
    """Distinct program names the command line would invoke."""
    return _default_parser.extract_commands(command_line)


def extract_command_strings(command_line: str) -> list[list[str]]:
    """Token lists of every invocation in the command line."""
    return _default_parser.extract_command_strings(command_line)


def extract_invocations(command_line: str) -> list[Invocation]:
    return _default_parser.parse(command_line)

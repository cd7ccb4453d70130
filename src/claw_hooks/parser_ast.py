"""Grammar-driven command extraction on top of bashlex.

bashlex builds a real parse tree, so nested substitutions, process
substitutions, compound commands and redirects are located by the grammar
instead of by string scanning. Wrapper, shell and xargs unwinding is shared
with the builtin ShellParser. Lines bashlex cannot parse fall back to the
builtin segmenter.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import bashlex
import bashlex.ast

from claw_hooks.parser import Invocation, ShellParser

logger = logging.getLogger(__name__)

_SUBSTITUTION_KINDS = frozenset({"commandsubstitution", "processsubstitution"})


def _children(node: bashlex.ast.node) -> Iterator[bashlex.ast.node]:
    for attr in ("parts", "list", "redirects"):
        for child in getattr(node, attr, None) or ():
            if isinstance(child, bashlex.ast.node):
                yield child
    for attr in ("command", "output"):
        child = getattr(node, attr, None)
        if isinstance(child, bashlex.ast.node):
            yield child


class BashlexParser(ShellParser):
    """ShellParser variant that walks a bashlex AST."""

    def _walk(self, text: str, depth: int, out: list[Invocation]) -> None:
        if not text.strip():
            return
        if depth > self.max_depth:
            self._truncate(text, out)
            return
        try:
            trees = bashlex.parse(text)
        except Exception as e:
            logger.debug(f"bashlex could not parse {text[:80]!r} ({e}), using builtin segmenter")
            super()._walk(text, depth, out)
            return

        for tree in trees:
            self._visit(text, tree, depth, out)

    def _visit(self, source: str, node: bashlex.ast.node, depth: int, out: list[Invocation]) -> None:
        if depth > self.max_depth:
            self._truncate(source[node.pos[0]:node.pos[1]], out)
            return
        if node.kind == "command":
            self._command(source, node, depth, out)
            return
        if node.kind in _SUBSTITUTION_KINDS:
            self._visit(source, node.command, depth + 1, out)
            return
        # Groups count toward depth the same way the builtin segmenter counts them
        if node.kind == "compound":
            depth += 1
        for child in _children(node):
            self._visit(source, child, depth, out)

    def _command(self, source: str, node: bashlex.ast.node, depth: int, out: list[Invocation]) -> None:
        words = [part for part in node.parts if part.kind == "word"]
        if words:
            head = words[0]
            raw_head = source[head.pos[0]:head.pos[1]]
            if not raw_head.startswith(("$(", "`")):
                # Wrapper/shell/xargs handling works on the raw text from the head on
                self._segment(source[head.pos[0]:node.pos[1]], depth, out, scan_substitutions=False)

        for part in node.parts:
            for child in _children(part):
                self._visit(source, child, depth, out)

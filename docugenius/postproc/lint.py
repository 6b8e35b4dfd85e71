"""Normalisation of rendered markdown."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Tuple

_HEADING_RE = re.compile(r"^(#{1,6})(\s+.*)$")
# Synthesized prose sometimes drops the space after the hashes.
_TIGHT_HEADING_RE = re.compile(r"^(#{1,6})([^#\s].*)$")
_FENCE = "```"


def fenced_lines(lines: Iterable[str]) -> Iterator[Tuple[str, bool, bool]]:
    """Yield ``(line, is_fence, inside_code)`` for each line."""
    in_code = False
    for line in lines:
        if line.lstrip().startswith(_FENCE):
            in_code = not in_code
            yield line, True, in_code
        else:
            yield line, False, in_code


class MarkdownLinter:
    """Normalises whitespace and headings outside code fences.

    Line endings become ``\\n``. Trailing whitespace is stripped, and runs of
    blank lines collapse to one. Headings get a blank line on both sides and
    a space after the hashes. A code fence left open, as happens when a
    completion hits its token limit, is closed at the end of the document.
    """

    def lint(self, markdown: str) -> str:
        normalized = markdown.replace("\r\n", "\n").replace("\r", "\n")
        out: List[str] = []
        open_fence = False

        for raw, is_fence, in_code in fenced_lines(normalized.split("\n")):
            line = raw.rstrip()
            if is_fence or in_code:
                out.append(line)
                open_fence = in_code
                continue
            if not line:
                if out and out[-1] != "":
                    out.append("")
                continue
            tight = _TIGHT_HEADING_RE.match(line)
            if tight:
                line = f"{tight.group(1)} {tight.group(2)}"
            is_heading = _HEADING_RE.match(line) is not None
            if is_heading and out and out[-1] != "":
                out.append("")
            if out and _HEADING_RE.match(out[-1]):
                out.append("")
            out.append(line)

        if open_fence:
            out.append(_FENCE)
        while out and out[-1] == "":
            out.pop()
        return "\n".join(out) + "\n"


def demote_headings(markdown: str, levels: int = 1) -> str:
    """Push every heading outside code fences ``levels`` deeper, capped at six."""
    lines: List[str] = []
    for line, is_fence, in_code in fenced_lines(markdown.splitlines()):
        match = None if is_fence or in_code else _HEADING_RE.match(line)
        if match:
            line = "#" * min(6, len(match.group(1)) + levels) + match.group(2)
        lines.append(line)
    return "\n".join(lines)


__all__ = ["MarkdownLinter", "demote_headings", "fenced_lines"]

"""Table-of-contents generation for rendered documentation."""

from __future__ import annotations

import re
from typing import Dict, List, NamedTuple

from .lint import fenced_lines

_HEADING_RE = re.compile(r"^(#{2,6})\s+(.*?)(?:\s+#+)?\s*$")
_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_INLINE_MARKUP_RE = re.compile(r"[`*]")


class TocEntry(NamedTuple):
    level: int
    title: str
    anchor: str


class TableOfContentsBuilder:
    """Replaces the placeholder with links to headings down to ``max_level``.

    Anchors follow GitHub's rules: lowercase, punctuation other than ``-`` and
    ``_`` dropped, spaces to dashes, repeats suffixed ``-1``, ``-2``. A block
    produced by an earlier run is replaced in place.
    """

    PLACEHOLDER = "<!-- docugenius:toc -->"
    BEGIN = "<!-- docugenius:begin:toc -->"
    END = "<!-- docugenius:end:toc -->"
    TITLE = "## Table of Contents"

    def __init__(self, max_level: int = 3) -> None:
        self.max_level = max_level

    def build(self, markdown: str) -> str:
        entries = self.entries(markdown)
        block = self._render(entries) if entries else ""
        if self.BEGIN in markdown and self.END in markdown:
            pre, rest = markdown.split(self.BEGIN, 1)
            _, post = rest.split(self.END, 1)
            return f"{pre}{block}{post}"
        return markdown.replace(self.PLACEHOLDER, block, 1)

    def entries(self, markdown: str) -> List[TocEntry]:
        found: List[TocEntry] = []
        seen: Dict[str, int] = {}
        in_toc = False
        for line, is_fence, in_code in fenced_lines(markdown.splitlines()):
            stripped = line.strip()
            if stripped in (self.BEGIN, self.END):
                in_toc = stripped == self.BEGIN
                continue
            if in_toc or is_fence or in_code:
                continue
            match = _HEADING_RE.match(stripped)
            if not match or len(match.group(1)) > self.max_level:
                continue
            title = _plain_title(match.group(2))
            anchor = self.slugify(title)
            count = seen.get(anchor, 0)
            seen[anchor] = count + 1
            if count:
                anchor = f"{anchor}-{count}"
            found.append(TocEntry(len(match.group(1)), title, anchor))
        return found

    def _render(self, entries: List[TocEntry]) -> str:
        lines = [self.BEGIN, self.TITLE]
        lines.extend(f"{'  ' * (entry.level - 2)}- [{entry.title}](#{entry.anchor})" for entry in entries)
        lines.append(self.END)
        return "\n".join(lines)

    @staticmethod
    def slugify(title: str) -> str:
        slug = re.sub(r"[^\w\s-]", "", title.lower())
        return re.sub(r"\s", "-", slug.strip())


def _plain_title(raw: str) -> str:
    return _INLINE_MARKUP_RE.sub("", _LINK_RE.sub(r"\1", raw)).strip()


__all__ = ["TableOfContentsBuilder", "TocEntry"]

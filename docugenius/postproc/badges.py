"""Badge block placed under the document title."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List
from urllib.parse import quote

from ..models import RepositoryInfo


@dataclass
class BadgeManager:
    """Inserts or refreshes the repository badge block after the main title."""

    BEGIN = "<!-- docugenius:begin:badges -->"
    END = "<!-- docugenius:end:badges -->"

    def block(self, repository: RepositoryInfo, files_analyzed: int) -> str:
        badges: List[str] = [self.BEGIN]
        if not repository.full_name.startswith("local/"):
            badges.append(
                "[![GitHub](https://img.shields.io/badge/GitHub-Repository-blue?logo=github)]"
                f"(https://github.com/{repository.full_name})"
            )
        if repository.language:
            badges.append(
                f"![Language](https://img.shields.io/badge/language-{_badge_text(repository.language)}-informational)"
            )
        badges.append(
            f"[![Files Analyzed](https://img.shields.io/badge/files%20analyzed-{files_analyzed}-orange)]"
            "(#file-documentation)"
        )
        badges.append(self.END)
        return "\n".join(badges)

    def apply(self, markdown: str, repository: RepositoryInfo, files_analyzed: int) -> str:
        if not markdown.strip():
            return markdown
        block = self.block(repository, files_analyzed)

        if self.BEGIN in markdown and self.END in markdown:
            before, rest = markdown.split(self.BEGIN, 1)
            _, after = rest.split(self.END, 1)
            return f"{before}{block}{after}"

        lines = markdown.splitlines()
        insert_index = 0
        for index, line in enumerate(lines):
            if line.startswith("# "):
                insert_index = index + 1
                break

        insert_block = ["", *block.splitlines(), ""]
        lines = lines[:insert_index] + insert_block + lines[insert_index:]
        return "\n".join(lines).rstrip() + "\n"


def _badge_text(value: str) -> str:
    # shields.io uses "-" as a separator; literal dashes are doubled.
    return quote(value.replace("-", "--"), safe="")


__all__ = ["BadgeManager"]

"""Renders a ProjectDocumentation into a markdown document."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from ..logging import get_logger
from ..models import ProjectDocumentation, RepositoryInfo
from ..prompting.constants import SECTION_TITLES
from .badges import BadgeManager
from .lint import MarkdownLinter, demote_headings
from .toc import TableOfContentsBuilder

TEMPLATE_NAME = "documentation.md.j2"


class MarkdownRenderer:
    """Template render, then badges, table of contents and lint passes."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        badge_manager: BadgeManager | None = None,
        toc_builder: TableOfContentsBuilder | None = None,
        linter: MarkdownLinter | None = None,
    ) -> None:
        self.badge_manager = badge_manager if badge_manager is not None else BadgeManager()
        self.toc_builder = toc_builder if toc_builder is not None else TableOfContentsBuilder()
        self.linter = linter if linter is not None else MarkdownLinter()
        self._env = self._create_env(templates_dir)
        self.logger = get_logger("postproc.renderer")

    def render(
        self,
        doc: ProjectDocumentation,
        repository: RepositoryInfo,
        files_analyzed: int,
        *,
        generated_at: datetime | None = None,
    ) -> str:
        moment = generated_at or datetime.now(UTC)
        template = self._env.get_template(TEMPLATE_NAME)
        markdown = template.render(
            doc=doc,
            repository=repository,
            files_analyzed=files_analyzed,
            generated_on=moment.strftime("%B %d, %Y"),
            titles=SECTION_TITLES,
        )
        markdown = self.badge_manager.apply(markdown, repository, files_analyzed)
        markdown = self.toc_builder.build(markdown)
        markdown = self.linter.lint(markdown)
        self.logger.debug("Rendered %d characters for %s", len(markdown), repository.full_name)
        return markdown

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.filters["demote"] = demote_headings
        return env


__all__ = ["MarkdownRenderer", "TEMPLATE_NAME"]

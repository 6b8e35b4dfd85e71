"""Tests for markdown rendering and post-processing helpers."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from docugenius.compiler import DocumentationCompiler
from docugenius.models import FunctionInfo, ProjectContext, RepositoryInfo
from docugenius.postproc.badges import BadgeManager
from docugenius.postproc.lint import MarkdownLinter, demote_headings
from docugenius.postproc.renderer import MarkdownRenderer
from docugenius.postproc.toc import TableOfContentsBuilder
from tests._fixtures.fakes import FakeCompletionService, make_analysis

REPO = RepositoryInfo(name="shop", full_name="acme/shop", description="Storefront", language="TypeScript")


def _document():
    analyses = [
        make_analysis(
            "src/index.ts",
            "critical",
            3,
            functions=[FunctionInfo(name="boot", description="Starts the app", complexity="simple")],
            dependencies=["react"],
        ),
        make_analysis("src/api/users.ts", "high", 5),
    ]
    context = ProjectContext(name="shop", framework="Next.js", language="TypeScript")
    compiler = DocumentationCompiler(FakeCompletionService(prose="## Layers\nThe app has layers."))
    return asyncio.run(compiler.compile(analyses, context))


def test_markdown_linter_normalises_whitespace() -> None:
    markdown = "\n\n# Title\r\n\r\nText\r\n\r\n\r\n## Section\r\nContent  \r\n"
    linted = MarkdownLinter().lint(markdown)
    assert linted.startswith("# Title")
    assert linted.endswith("\n")
    assert "\r" not in linted
    assert "  \n" not in linted
    assert "\n\n\n" not in linted
    assert "Text\n\n## Section" in linted


def test_demote_headings_skips_code_fences() -> None:
    markdown = "## Getting Started\n```bash\n# not a heading\n```\n###### Deep"
    assert demote_headings(markdown) == "### Getting Started\n```bash\n# not a heading\n```\n###### Deep"


def test_table_of_contents_builder_inserts_placeholder() -> None:
    md = "# Project\n\n<!-- docugenius:toc -->\n\n## Alpha\n\n### Beta\n\n## Alpha\n"
    result = TableOfContentsBuilder().build(md)
    assert "## Table of Contents" in result
    assert "- [Alpha](#alpha)" in result
    assert "  - [Beta](#beta)" in result
    assert "- [Alpha](#alpha-1)" in result
    assert "<!-- docugenius:end:toc -->" in result
    assert "<!-- docugenius:toc -->" not in result


def test_table_of_contents_refreshes_existing_block() -> None:
    builder = TableOfContentsBuilder()
    first = builder.build("# P\n\n<!-- docugenius:toc -->\n\n## One\n")
    second = builder.build(first.replace("## One", "## Two"))
    assert "- [Two](#two)" in second
    assert "- [One](#one)" not in second


def test_badge_manager_inserts_after_title_and_refreshes() -> None:
    manager = BadgeManager()
    rendered = manager.apply("# Title\nBody\n", REPO, 4)

    lines = rendered.splitlines()
    assert lines[0] == "# Title"
    assert lines[2] == BadgeManager.BEGIN
    assert "https://github.com/acme/shop" in rendered
    assert "files%20analyzed-4-orange" in rendered

    refreshed = manager.apply(rendered, REPO, 9)
    assert refreshed.count(BadgeManager.BEGIN) == 1
    assert "files%20analyzed-9-orange" in refreshed


def test_badges_for_local_checkouts_skip_github_link() -> None:
    local = RepositoryInfo(name="repo", full_name="local/repo", language="python")
    block = BadgeManager().block(local, 2)
    assert "github.com" not in block
    assert "language-python" in block


def test_renderer_produces_complete_document() -> None:
    markdown = MarkdownRenderer().render(
        _document(), REPO, 2, generated_at=datetime(2024, 3, 5, tzinfo=timezone.utc)
    )

    assert markdown.startswith("# shop Documentation\n")
    assert "> Storefront" in markdown
    assert "_Generated on March 05, 2024 from 2 analyzed files._" in markdown
    assert BadgeManager.BEGIN in markdown
    assert "- [Overview](#overview)" in markdown
    assert "- [Quick Start](#quick-start)" in markdown
    assert "### Getting Started" in markdown
    assert "### Layers" in markdown
    assert "#### `src/index.ts`" in markdown
    assert "- `boot` (simple): Starts the app" in markdown
    assert "- **Dependencies**: react" in markdown
    assert "| Complexity | Low |" in markdown
    assert "\n\n\n" not in markdown
    assert markdown.endswith("\n")


def test_markdown_linter_repairs_synthesized_prose() -> None:
    markdown = "##Layers\nThe app has layers.\n```python\ndef run():\n\n\n    pass"

    linted = MarkdownLinter().lint(markdown)

    assert linted.startswith("## Layers\n\nThe app has layers.\n")
    assert "def run():\n\n\n    pass" in linted
    assert linted.endswith("    pass\n```\n")


def test_table_of_contents_respects_depth_and_inline_markup() -> None:
    md = "<!-- docugenius:toc -->\n\n## Using `snake_case` [names](http://x)\n\n#### `src/index.ts`\n"

    shallow = TableOfContentsBuilder().build(md)
    deep = TableOfContentsBuilder(max_level=4).build(md)

    assert "- [Using snake_case names](#using-snake_case-names)" in shallow
    assert "src/index.ts](" not in shallow
    assert "    - [src/index.ts](#srcindexts)" in deep


def test_slugify_matches_github_anchors() -> None:
    assert TableOfContentsBuilder.slugify("API & Usage") == "api--usage"
    assert TableOfContentsBuilder.slugify("Quick Start") == "quick-start"

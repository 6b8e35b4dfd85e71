"""Tests for the prompt builder."""

from __future__ import annotations

import json

from docugenius.models import ProjectContext
from docugenius.prompting.builder import PromptBuilder, truncate_content
from docugenius.prompting.constants import TRUNCATION_MARKER
from tests._fixtures.fakes import make_analysis, make_file, prompt_file_path

CONTEXT = ProjectContext(name="acme-app", framework="Next.js", language="typescript", description="Storefront")


def test_truncate_content_appends_marker_only_when_clipped() -> None:
    assert truncate_content("short", 10) == "short"
    assert truncate_content("x" * 12, 10) == "x" * 10 + TRUNCATION_MARKER


def test_file_analysis_prompt_embeds_path_and_expected_shape() -> None:
    builder = PromptBuilder(content_char_limit=20)
    prompt = builder.file_analysis(make_file("src/index.ts", "y" * 40), CONTEXT)

    assert prompt_file_path(prompt) == "src/index.ts"
    assert "Framework: Next.js" in prompt
    assert "y" * 21 not in prompt
    assert TRUNCATION_MARKER in prompt
    shape_start = prompt.index("{")
    shape_end = prompt.rindex("}") + 1
    shape = json.loads(prompt[shape_start:shape_end])
    assert shape["filePath"] == "src/index.ts"
    assert {"summary", "functions", "classes", "importance"} <= set(shape)


def test_overview_prompt_lists_at_most_five_files() -> None:
    analyses = [make_analysis(f"src/core_{i}.ts", "critical") for i in range(7)]

    prompt = PromptBuilder().overview(analyses, CONTEXT)

    assert "- src/core_4.ts: Summary of src/core_4.ts" in prompt
    assert "src/core_5.ts" not in prompt
    assert "Description: Storefront" in prompt


def test_architecture_prompt_lists_at_most_eight_files() -> None:
    analyses = [make_analysis(f"src/lib/m_{i}.ts", "high") for i in range(10)]

    prompt = PromptBuilder().architecture(analyses, CONTEXT)

    assert "src/lib/m_7.ts" in prompt
    assert "src/lib/m_8.ts" not in prompt
    assert prompt.startswith("Describe the architecture of acme-app (Next.js).")

"""Builds prompts for per-file analysis and section synthesis."""

from __future__ import annotations

import json
from typing import Sequence

from ..models import FileAnalysis, ProjectContext, SourceFile
from .constants import ARCHITECTURE_FILE_LIMIT, OVERVIEW_FILE_LIMIT, TRUNCATION_MARKER

_ANALYSIS_SHAPE = {
    "filePath": "<path>",
    "summary": "Brief 2-3 sentence summary of what this file does",
    "importance": "critical|high|medium|low",
    "complexity": "integer 1-10",
    "functions": [
        {
            "name": "functionName",
            "description": "What this function does",
            "parameters": [{"name": "param", "type": "string", "description": "param description"}],
            "complexity": "simple|moderate|complex",
            "returns": {"type": "string", "description": "return description"},
        }
    ],
    "classes": [
        {
            "name": "ClassName",
            "description": "What this class does",
            "methods": [
                {
                    "name": "method",
                    "description": "method description",
                    "parameters": [],
                    "returns": {"type": "void", "description": ""},
                }
            ],
        }
    ],
    "dependencies": ["array", "of", "imported", "modules"],
}


def truncate_content(content: str, limit: int) -> str:
    """Clip ``content`` to ``limit`` characters, appending the truncation marker."""
    if len(content) <= limit:
        return content
    return content[:limit] + TRUNCATION_MARKER


class PromptBuilder:
    """Assembles the bounded prompts sent to the completion service."""

    SYSTEM_PROMPT = (
        "You are a senior software engineer documenting a codebase. Stay grounded in the code you are shown "
        "and never invent files, functions, or commands."
    )

    def __init__(self, *, content_char_limit: int = 8000) -> None:
        self.content_char_limit = content_char_limit

    def file_analysis(self, file: SourceFile, context: ProjectContext) -> str:
        shape = dict(_ANALYSIS_SHAPE, filePath=file.path)
        content = truncate_content(file.content, self.content_char_limit)
        return "\n".join(
            [
                f"Analyze this {file.language} file from the {context.name} project.",
                "",
                f"File: {file.path}",
                f"Framework: {context.framework}",
                "Content:",
                content,
                "",
                "Respond with a single JSON object using exactly this structure:",
                json.dumps(shape, indent=2),
                "",
                "Focus on practical value for developers. Be concise but accurate.",
            ]
        )

    def overview(self, critical: Sequence[FileAnalysis], context: ProjectContext) -> str:
        lines = [
            f"Create a compelling project overview for {context.name}, a {context.framework} application.",
            "",
            "Key files:",
            *_summary_lines(critical[:OVERVIEW_FILE_LIMIT]),
            "",
            f"Framework: {context.framework}",
            f"Language: {context.language}",
        ]
        if context.description:
            lines.append(f"Description: {context.description}")
        lines.extend(
            [
                "",
                "Write 2-3 paragraphs explaining:",
                "1. What this project does and its main purpose",
                "2. Key benefits and why developers would use it",
                "3. What makes it special or unique",
                "",
                "Be engaging but professional. Focus on practical value.",
            ]
        )
        return "\n".join(lines)

    def architecture(self, high: Sequence[FileAnalysis], context: ProjectContext) -> str:
        return "\n".join(
            [
                f"Describe the architecture of {context.name} ({context.framework}).",
                "",
                "Key components:",
                *_summary_lines(high[:ARCHITECTURE_FILE_LIMIT]),
                "",
                "Explain:",
                "1. Overall architecture pattern",
                "2. How components interact",
                "3. Data flow",
                "4. Key design decisions",
                "",
                "Keep it concise and developer-focused.",
            ]
        )


def _summary_lines(analyses: Sequence[FileAnalysis]) -> list[str]:
    return [f"- {analysis.file_path}: {analysis.summary}" for analysis in analyses]


__all__ = ["PromptBuilder", "truncate_content"]

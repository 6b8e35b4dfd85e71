"""Fail-safe content used when analysis or synthesis calls fail."""

from __future__ import annotations

from .models import FileAnalysis, ProjectContext, SourceFile


def build_stub_analysis(file: SourceFile, *, cache_key: str, analysis_time: float) -> FileAnalysis:
    """Return the degraded analysis recorded when a file could not be analyzed."""
    return FileAnalysis(
        file_path=file.path,
        summary=f"{file.language} file - analysis failed",
        importance="low",
        complexity=5,
        functions=[],
        classes=[],
        dependencies=[],
        cache_key=cache_key,
        analysis_time=analysis_time,
        degraded=True,
    )


def overview_without_key_files(context: ProjectContext) -> str:
    return (
        f"{context.name} is a {context.framework} application built with {context.language}. "
        "This project provides functionality through a well-structured codebase with multiple "
        "components working together to deliver a cohesive user experience."
    )


def overview_fallback(context: ProjectContext) -> str:
    return (
        f"{context.name} is a modern {context.framework} application that provides robust "
        "functionality through a well-architected codebase."
    )


def overview_empty_reply(context: ProjectContext) -> str:
    return f"{context.name} - A {context.framework} application."


ARCHITECTURE_EMPTY_REPLY = "Architecture information not available."


def architecture_fallback(context: ProjectContext) -> str:
    return (
        f"{context.name} follows a modern {context.framework} architecture with well-separated "
        "concerns and modular design."
    )


__all__ = [
    "ARCHITECTURE_EMPTY_REPLY",
    "architecture_fallback",
    "build_stub_analysis",
    "overview_empty_reply",
    "overview_fallback",
    "overview_without_key_files",
]

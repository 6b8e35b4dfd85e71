"""Compiles per-file analyses into a structured project document."""

from __future__ import annotations

import asyncio
import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from . import failsafe
from .config import PipelineSettings
from .llm.runner import CompletionService
from .logging import get_logger
from .models import (
    CodeQuality,
    FileAnalysis,
    FileDocumentation,
    FunctionInfo,
    Highlights,
    ProjectContext,
    ProjectDocumentation,
    ProjectMetrics,
)
from .prompting.builder import PromptBuilder
from .prompting.constants import FRAMEWORK_COMMANDS, PYTHON_FRAMEWORKS

StageProgress = Callable[[float], None]

STRUCTURE_FILES_PER_DIRECTORY = 10
KEY_COMPONENT_LIMIT = 8
USAGE_EXAMPLE_LIMIT = 3


@dataclass
class GroupedAnalyses:
    critical: List[FileAnalysis]
    high: List[FileAnalysis]
    medium: List[FileAnalysis]
    low: List[FileAnalysis]
    api: List[FileAnalysis]


def is_api_file(analysis: FileAnalysis) -> bool:
    return "/api/" in analysis.file_path or "route." in analysis.file_path


def group_analyses(analyses: Sequence[FileAnalysis]) -> GroupedAnalyses:
    return GroupedAnalyses(
        critical=[a for a in analyses if a.importance == "critical"],
        high=[a for a in analyses if a.importance == "high"],
        medium=[a for a in analyses if a.importance == "medium"],
        low=[a for a in analyses if a.importance == "low"],
        api=[a for a in analyses if is_api_file(a)],
    )


class DocumentationCompiler:
    """Synthesizes prose sections and derives structural sections from analyses."""

    def __init__(
        self,
        completion: CompletionService,
        *,
        settings: PipelineSettings | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self.completion = completion
        self.settings = settings if settings is not None else PipelineSettings()
        self.prompt_builder = prompt_builder if prompt_builder is not None else PromptBuilder(
            content_char_limit=self.settings.content_char_limit
        )
        self.logger = get_logger("compiler")

    async def compile(
        self,
        analyses: Sequence[FileAnalysis],
        context: ProjectContext,
        on_progress: Optional[StageProgress] = None,
    ) -> ProjectDocumentation:
        grouped = group_analyses(analyses)
        _report(on_progress, 25)

        overview, architecture = await asyncio.gather(
            self.generate_overview(grouped.critical, context),
            self.generate_architecture(grouped.high, context),
        )
        _report(on_progress, 90)

        documentation = ProjectDocumentation(
            overview=overview,
            architecture=architecture,
            getting_started=build_getting_started(context),
            api_reference=build_api_reference(grouped.api),
            project_structure=build_project_structure(analyses),
            key_components=build_key_components(analyses),
            usage_examples=build_usage_examples(analyses, context),
            file_documentations=build_file_documentations(analyses),
            highlights=Highlights(
                key_features=extract_key_features(analyses),
                technologies=extract_technologies(analyses, context),
                use_cases=build_use_cases(context),
                benefits=build_benefits(context),
            ),
            metrics=ProjectMetrics(
                complexity=assess_complexity(analyses),
                maintainability=assess_maintainability(analyses),
                test_coverage=assess_test_coverage(analyses),
                performance=assess_performance(analyses),
            ),
        )
        _report(on_progress, 100)
        return documentation

    async def generate_overview(
        self, critical: Sequence[FileAnalysis], context: ProjectContext
    ) -> str:
        if not critical:
            return failsafe.overview_without_key_files(context)
        return await self._synthesize(
            "overview",
            self.prompt_builder.overview(critical, context),
            max_tokens=self.settings.overview_max_tokens,
            temperature=self.settings.overview_temperature,
            fallback=failsafe.overview_fallback(context),
            empty_reply=failsafe.overview_empty_reply(context),
        )

    async def generate_architecture(
        self, high: Sequence[FileAnalysis], context: ProjectContext
    ) -> str:
        return await self._synthesize(
            "architecture",
            self.prompt_builder.architecture(high, context),
            max_tokens=self.settings.architecture_max_tokens,
            temperature=self.settings.architecture_temperature,
            fallback=failsafe.architecture_fallback(context),
            empty_reply=failsafe.ARCHITECTURE_EMPTY_REPLY,
        )

    async def _synthesize(
        self,
        section: str,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        fallback: str,
        empty_reply: str,
    ) -> str:
        """Run one synthesis call. Errors yield ``fallback``; a blank reply yields ``empty_reply``."""
        try:
            text = await asyncio.wait_for(
                self.completion.complete(
                    prompt,
                    model=self.settings.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=PromptBuilder.SYSTEM_PROMPT,
                ),
                timeout=self.settings.request_timeout,
            )
        except Exception as exc:
            self.logger.warning("Synthesis of %s failed; using fallback copy: %s", section, exc)
            return fallback
        body = text.strip() if isinstance(text, str) else ""
        if not body:
            self.logger.warning("Synthesis of %s returned no text", section)
            return empty_reply
        return body


def _report(on_progress: Optional[StageProgress], value: float) -> None:
    if on_progress is not None:
        on_progress(value)


# ----------------------------------------------------------------------
# Derived sections


def build_getting_started(context: ProjectContext) -> str:
    install, start = FRAMEWORK_COMMANDS.get(context.framework, FRAMEWORK_COMMANDS["Unknown"])
    slug = re.sub(r"\s+", "-", context.name.lower())
    if context.framework in PYTHON_FRAMEWORKS:
        prerequisites = ["- Python 3.10 or higher", "- pip and a virtual environment tool"]
        port = "8000"
    else:
        prerequisites = ["- Node.js (version 16 or higher)", "- npm or yarn package manager"]
        port = "3000"
    lines = [
        "## Getting Started",
        "",
        "### Prerequisites",
        *prerequisites,
        "",
        "### Installation",
        "",
        "1. Clone the repository:",
        "```bash",
        "git clone <repository-url>",
        f"cd {slug}",
        "```",
        "",
        "2. Install dependencies:",
        "```bash",
        install,
        "```",
        "",
        "3. Start the development server:",
        "```bash",
        start,
        "```",
        "",
        f"The application will be available at `http://localhost:{port}` "
        "(or the port specified in your configuration).",
        "",
        "### Environment Setup",
        "Configure any required environment variables by copying `.env.example` to `.env.local` "
        "and filling in the values.",
    ]
    return "\n".join(lines)


def build_api_reference(api_files: Sequence[FileAnalysis]) -> str:
    if not api_files:
        return "No API endpoints found in this project."
    blocks = []
    for analysis in api_files:
        functions = "\n".join(f"- **{f.name}**: {f.description}" for f in analysis.functions)
        blocks.append(f"### {analysis.file_path}\n{analysis.summary}\n\n{functions}".rstrip())
    return "## API Endpoints\n\n" + "\n\n".join(blocks)


def build_project_structure(analyses: Sequence[FileAnalysis]) -> str:
    by_directory: Dict[str, List[str]] = OrderedDict()
    for analysis in analyses:
        directory, _, name = analysis.file_path.rpartition("/")
        by_directory.setdefault(directory or ".", []).append(name)

    lines = ["```"]
    for directory in sorted(by_directory):
        names = by_directory[directory]
        if directory != ".":
            lines.append(f"{directory}/")
        for name in names[:STRUCTURE_FILES_PER_DIRECTORY]:
            lines.append(f"  {name}")
        if len(names) > STRUCTURE_FILES_PER_DIRECTORY:
            lines.append(f"  ... and {len(names) - STRUCTURE_FILES_PER_DIRECTORY} more files")
    lines.append("```")
    return (
        "\n".join(lines)
        + "\n\nThis project follows a well-organized structure with clear separation of concerns."
    )


def build_key_components(analyses: Sequence[FileAnalysis]) -> str:
    components = [a for a in analyses if a.importance in ("critical", "high")][:KEY_COMPONENT_LIMIT]
    if not components:
        return "Key components analysis not available."
    return "\n\n".join(
        f"### {a.file_path}\n\n{a.summary}\n\n**Importance**: {a.importance}\n**Complexity**: {a.complexity}/10"
        for a in components
    )


def build_usage_examples(analyses: Sequence[FileAnalysis], context: ProjectContext) -> str:
    examples: List[FunctionInfo] = [
        function
        for analysis in analyses
        for function in analysis.functions
        if function.complexity == "simple"
    ][:USAGE_EXAMPLE_LIMIT]

    if not examples:
        return (
            "## Usage Examples\n\n"
            f"This {context.framework} application provides various functionality through its "
            "components. Refer to the individual file documentation for specific usage patterns "
            "and examples."
        )

    lines = ["## Usage Examples", ""]
    for function in examples:
        lines.extend([f"### {function.name}", "", function.description, ""])
        if function.parameters:
            lines.append("**Parameters:**")
            lines.extend(
                f"- `{param.name}` ({param.type}): {param.description}" for param in function.parameters
            )
            lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def code_quality(complexity: int) -> CodeQuality:
    return CodeQuality(
        readability=max(1, 10 - complexity // 2),
        complexity=complexity,
        maintainability=max(1, 10 - complexity // 3),
    )


def build_file_documentations(analyses: Sequence[FileAnalysis]) -> Dict[str, FileDocumentation]:
    docs: Dict[str, FileDocumentation] = {}
    for analysis in analyses:
        importance = analysis.importance.capitalize()
        docs[analysis.file_path] = FileDocumentation(
            summary=analysis.summary,
            purpose=f"{importance} component in the project architecture",
            importance=importance,
            functions=list(analysis.functions),
            classes=list(analysis.classes),
            dependencies=list(analysis.dependencies),
            code_quality=code_quality(analysis.complexity),
        )
    return docs


def extract_key_features(analyses: Sequence[FileAnalysis]) -> List[str]:
    features: List[str] = []

    def _add(feature: str) -> None:
        if feature not in features:
            features.append(feature)

    for analysis in analyses:
        if analysis.importance not in ("critical", "high"):
            continue
        path = analysis.file_path
        if "/api/" in path:
            _add("RESTful API")
        if "/auth/" in path:
            _add("Authentication System")
        if "database" in path or "db" in path:
            _add("Database Integration")
        if "/components/" in path:
            _add("Reusable Components")
        if analysis.functions:
            _add("Modular Functions")
    return features[:6]


_DEPENDENCY_TECHNOLOGIES: tuple[tuple[str, str], ...] = (
    ("react", "React"),
    ("next", "Next.js"),
    ("express", "Express.js"),
    ("prisma", "Prisma ORM"),
    ("auth", "Authentication"),
    ("typescript", "TypeScript"),
    ("django", "Django"),
    ("fastapi", "FastAPI"),
    ("flask", "Flask"),
    ("sqlalchemy", "SQLAlchemy"),
)


def extract_technologies(analyses: Sequence[FileAnalysis], context: ProjectContext) -> List[str]:
    technologies: List[str] = []
    for item in (context.framework, context.language):
        if item not in technologies:
            technologies.append(item)
    for analysis in analyses:
        for dependency in analysis.dependencies:
            lowered = dependency.lower()
            for fragment, label in _DEPENDENCY_TECHNOLOGIES:
                if fragment in lowered and label not in technologies:
                    technologies.append(label)
    return technologies[:8]


def build_use_cases(context: ProjectContext) -> List[str]:
    use_cases = [
        f"{context.framework} application development",
        "Code documentation and analysis",
        "Developer workflow automation",
    ]
    if "Next" in context.framework:
        use_cases.extend(["Full-stack web applications", "Server-side rendering"])
    return use_cases[:5]


def build_benefits(context: ProjectContext) -> List[str]:
    return [
        "Well-structured and maintainable codebase",
        f"Modern {context.framework} architecture",
        "Comprehensive error handling",
        "Developer-friendly implementation",
        "Scalable and extensible design",
    ]


def _mean_complexity(analyses: Sequence[FileAnalysis], default: float) -> float:
    if not analyses:
        return default
    return sum(a.complexity for a in analyses) / len(analyses)


def assess_complexity(analyses: Sequence[FileAnalysis]) -> str:
    average = _mean_complexity(analyses, default=5)
    if average <= 4:
        return "Low"
    if average <= 7:
        return "Medium"
    return "High"


def assess_maintainability(analyses: Sequence[FileAnalysis]) -> str:
    critical = [a for a in analyses if a.importance == "critical"]
    average = _mean_complexity(critical, default=5)
    if average <= 3:
        return "Excellent"
    if average <= 5:
        return "Good"
    if average <= 7:
        return "Fair"
    return "Needs Improvement"


def assess_test_coverage(analyses: Sequence[FileAnalysis]) -> str:
    has_tests = any(
        "test" in a.file_path or "spec" in a.file_path or "__tests__" in a.file_path
        for a in analyses
    )
    return "Tests detected in codebase" if has_tests else "No test files detected"


def assess_performance(analyses: Sequence[FileAnalysis]) -> str:
    if analyses:
        complex_files = sum(1 for a in analyses if a.complexity > 7)
        if complex_files / len(analyses) > 0.3:
            return "Consider optimization for complex files"
    return "Good - Well-structured code with reasonable complexity"


__all__ = [
    "DocumentationCompiler",
    "GroupedAnalyses",
    "assess_complexity",
    "assess_maintainability",
    "assess_performance",
    "assess_test_coverage",
    "build_api_reference",
    "build_file_documentations",
    "build_getting_started",
    "build_key_components",
    "build_project_structure",
    "build_usage_examples",
    "code_quality",
    "extract_key_features",
    "extract_technologies",
    "group_analyses",
    "is_api_file",
]

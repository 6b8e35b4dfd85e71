"""Core data models shared across docugenius components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

Importance = Literal["critical", "high", "medium", "low"]
FunctionComplexity = Literal["simple", "moderate", "complex"]
ProgressKind = Literal["started", "categorized", "analyzing", "compiling", "completed", "error"]

IMPORTANCE_LEVELS: tuple[str, ...] = ("critical", "high", "medium", "low")


@dataclass(frozen=True)
class SourceFile:
    """A single repository file handed to the pipeline."""

    path: str
    name: str
    content: str
    language: str
    size: int
    sha: Optional[str] = None


@dataclass(frozen=True)
class RepositoryInfo:
    """Repository metadata supplied by a source enumerator."""

    name: str
    full_name: str
    description: Optional[str] = None
    language: Optional[str] = None
    topics: List[str] = field(default_factory=list)
    default_branch: str = "main"


@dataclass(frozen=True)
class ProjectContext:
    """Read-only project facts shared by every analysis in a run."""

    name: str
    framework: str
    language: str
    description: str = ""
    patterns: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParameterInfo:
    name: str
    type: str
    description: str


@dataclass(frozen=True)
class ReturnInfo:
    type: str
    description: str


@dataclass(frozen=True)
class FunctionInfo:
    name: str
    description: str
    parameters: List[ParameterInfo] = field(default_factory=list)
    complexity: FunctionComplexity = "moderate"
    returns: Optional[ReturnInfo] = None


@dataclass(frozen=True)
class MethodInfo:
    name: str
    description: str
    parameters: List[ParameterInfo] = field(default_factory=list)
    returns: Optional[ReturnInfo] = None
    visibility: Optional[Literal["public", "private", "protected"]] = None


@dataclass(frozen=True)
class ClassInfo:
    name: str
    description: str
    methods: List[MethodInfo] = field(default_factory=list)


@dataclass(frozen=True)
class FileAnalysis:
    """Structured result of analyzing one source file.

    ``cache_key`` is derived from the file path and content only, so repeated
    runs over unchanged input produce the same key. ``degraded`` marks stub
    analyses produced after a failed completion call.
    """

    file_path: str
    summary: str
    importance: Importance
    complexity: int
    functions: List[FunctionInfo] = field(default_factory=list)
    classes: List[ClassInfo] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    cache_key: str = ""
    analysis_time: float = 0.0
    degraded: bool = False


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification emitted to the caller-supplied sink."""

    kind: ProgressKind
    message: str
    progress: float
    stage: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.kind,
            "message": self.message,
            "progress": self.progress,
        }
        if self.stage is not None:
            payload["stage"] = self.stage
        if self.data is not None:
            payload["data"] = self.data
        return payload


@dataclass(frozen=True)
class CodeQuality:
    readability: int
    complexity: int
    maintainability: int


@dataclass(frozen=True)
class FileDocumentation:
    """Presentation-oriented projection of a FileAnalysis."""

    summary: str
    purpose: str
    importance: str
    functions: List[FunctionInfo]
    classes: List[ClassInfo]
    dependencies: List[str]
    code_quality: CodeQuality
    constants: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Highlights:
    key_features: List[str]
    technologies: List[str]
    use_cases: List[str]
    benefits: List[str]


@dataclass(frozen=True)
class ProjectMetrics:
    complexity: Literal["Low", "Medium", "High"]
    maintainability: Literal["Excellent", "Good", "Fair", "Needs Improvement"]
    test_coverage: str
    performance: str


@dataclass(frozen=True)
class ProjectDocumentation:
    """Aggregate document produced by one pipeline run."""

    overview: str
    architecture: str
    getting_started: str
    api_reference: str
    project_structure: str
    key_components: str
    usage_examples: str
    file_documentations: Dict[str, FileDocumentation]
    highlights: Optional[Highlights] = None
    metrics: Optional[ProjectMetrics] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise into the camelCase JSON shape stored and served to clients."""
        payload: Dict[str, Any] = {
            "overview": self.overview,
            "architecture": self.architecture,
            "gettingStarted": self.getting_started,
            "apiReference": self.api_reference,
            "projectStructure": self.project_structure,
            "keyComponents": self.key_components,
            "usageExamples": self.usage_examples,
            "fileDocumentations": {
                path: _file_doc_to_dict(doc) for path, doc in self.file_documentations.items()
            },
        }
        if self.highlights is not None:
            payload["highlights"] = {
                "keyFeatures": list(self.highlights.key_features),
                "technologies": list(self.highlights.technologies),
                "useCases": list(self.highlights.use_cases),
                "benefits": list(self.highlights.benefits),
            }
        if self.metrics is not None:
            payload["metrics"] = {
                "complexity": self.metrics.complexity,
                "maintainability": self.metrics.maintainability,
                "testCoverage": self.metrics.test_coverage,
                "performance": self.metrics.performance,
            }
        return payload


def _params_to_list(parameters: List[ParameterInfo]) -> List[Dict[str, str]]:
    return [{"name": p.name, "type": p.type, "description": p.description} for p in parameters]


def _returns_to_dict(returns: Optional[ReturnInfo]) -> Optional[Dict[str, str]]:
    if returns is None:
        return None
    return {"type": returns.type, "description": returns.description}


def function_to_dict(function: FunctionInfo) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": function.name,
        "description": function.description,
        "parameters": _params_to_list(function.parameters),
        "complexity": function.complexity,
    }
    if function.returns is not None:
        data["returns"] = _returns_to_dict(function.returns)
    return data


def class_to_dict(cls: ClassInfo) -> Dict[str, Any]:
    methods = []
    for method in cls.methods:
        entry: Dict[str, Any] = {
            "name": method.name,
            "description": method.description,
            "parameters": _params_to_list(method.parameters),
        }
        if method.returns is not None:
            entry["returns"] = _returns_to_dict(method.returns)
        if method.visibility is not None:
            entry["visibility"] = method.visibility
        methods.append(entry)
    return {"name": cls.name, "description": cls.description, "methods": methods}


def _file_doc_to_dict(doc: FileDocumentation) -> Dict[str, Any]:
    return {
        "summary": doc.summary,
        "purpose": doc.purpose,
        "importance": doc.importance,
        "keyFunctions": [function_to_dict(function) for function in doc.functions],
        "classes": [class_to_dict(cls) for cls in doc.classes],
        "constants": list(doc.constants),
        "dependencies": list(doc.dependencies),
        "codeQuality": {
            "readability": doc.code_quality.readability,
            "complexity": doc.code_quality.complexity,
            "maintainability": doc.code_quality.maintainability,
        },
    }


__all__ = [
    "IMPORTANCE_LEVELS",
    "ClassInfo",
    "CodeQuality",
    "FileAnalysis",
    "FileDocumentation",
    "FunctionInfo",
    "Highlights",
    "MethodInfo",
    "ParameterInfo",
    "ProgressEvent",
    "ProjectContext",
    "ProjectDocumentation",
    "ProjectMetrics",
    "RepositoryInfo",
    "ReturnInfo",
    "SourceFile",
    "class_to_dict",
    "function_to_dict",
]

"""Strict decoding of per-file analysis responses."""

from __future__ import annotations

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import (
    ClassInfo,
    FileAnalysis,
    FunctionInfo,
    MethodInfo,
    ParameterInfo,
    ReturnInfo,
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ParameterPayload(_Payload):
    name: str
    type: str = "any"
    description: str = ""


class ReturnPayload(_Payload):
    type: str = "void"
    description: str = ""


class FunctionPayload(_Payload):
    name: str
    description: str = ""
    parameters: List[ParameterPayload] = Field(default_factory=list)
    complexity: Literal["simple", "moderate", "complex"] = "moderate"
    returns: Optional[ReturnPayload] = None

    @field_validator("complexity", mode="before")
    @classmethod
    def _lower_complexity(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class MethodPayload(_Payload):
    name: str
    description: str = ""
    parameters: List[ParameterPayload] = Field(default_factory=list)
    returns: Optional[ReturnPayload] = None
    visibility: Optional[Literal["public", "private", "protected"]] = None


class ClassPayload(_Payload):
    name: str
    description: str = ""
    methods: List[MethodPayload] = Field(default_factory=list)


class FileAnalysisPayload(_Payload):
    """Schema the completion service must satisfy for a file analysis."""

    file_path: Optional[str] = Field(default=None, alias="filePath")
    summary: str = Field(min_length=1)
    importance: Literal["critical", "high", "medium", "low"]
    complexity: int = Field(ge=1, le=10)
    functions: List[FunctionPayload] = Field(default_factory=list)
    classes: List[ClassPayload] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)

    @field_validator("importance", mode="before")
    @classmethod
    def _lower_importance(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


def strip_code_fence(text: str) -> str:
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    return match.group(1) if match else stripped


def decode_analysis(
    text: str, *, file_path: str, cache_key: str, analysis_time: float
) -> FileAnalysis:
    """Validate ``text`` against the schema and build a FileAnalysis.

    Raises ``pydantic.ValidationError`` for malformed JSON or schema
    violations. The returned analysis is always keyed by ``file_path``,
    whatever path the response claims.
    """
    payload = FileAnalysisPayload.model_validate_json(strip_code_fence(text))
    return FileAnalysis(
        file_path=file_path,
        summary=payload.summary.strip(),
        importance=payload.importance,
        complexity=payload.complexity,
        functions=[_function(item) for item in payload.functions],
        classes=[_class(item) for item in payload.classes],
        dependencies=[dep for dep in payload.dependencies if dep],
        cache_key=cache_key,
        analysis_time=analysis_time,
    )


def _params(items: List[ParameterPayload]) -> List[ParameterInfo]:
    return [ParameterInfo(name=p.name, type=p.type, description=p.description) for p in items]


def _returns(item: Optional[ReturnPayload]) -> Optional[ReturnInfo]:
    if item is None:
        return None
    return ReturnInfo(type=item.type, description=item.description)


def _function(item: FunctionPayload) -> FunctionInfo:
    return FunctionInfo(
        name=item.name,
        description=item.description,
        parameters=_params(item.parameters),
        complexity=item.complexity,
        returns=_returns(item.returns),
    )


def _class(item: ClassPayload) -> ClassInfo:
    methods = [
        MethodInfo(
            name=method.name,
            description=method.description,
            parameters=_params(method.parameters),
            returns=_returns(method.returns),
            visibility=method.visibility,
        )
        for method in item.methods
    ]
    return ClassInfo(name=item.name, description=item.description, methods=methods)


__all__ = ["FileAnalysisPayload", "decode_analysis", "strip_code_fence"]

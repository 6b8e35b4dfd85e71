"""Project context derivation: framework sniffing from manifests and config files."""

from __future__ import annotations

import json
import re
import tomllib
from typing import Dict, Iterable, List, Optional, Sequence

from ..logging import get_logger
from ..models import ProjectContext, RepositoryInfo, SourceFile

logger = get_logger("analyzers.context")

UNKNOWN_FRAMEWORK = "Unknown"

# Checked in order against package.json "dependencies".
_NODE_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("next", "Next.js"),
    ("react", "React"),
    ("vue", "Vue.js"),
    ("express", "Express.js"),
    ("fastify", "Fastify"),
    ("@nestjs/core", "NestJS"),
)

_PYTHON_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("django", "Django"),
    ("fastapi", "FastAPI"),
    ("flask", "Flask"),
)

_CONFIG_FILE_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("next.config", "Next.js"),
    ("vite.config", "Vite"),
    ("nuxt.config", "Nuxt.js"),
)


def detect_framework(files: Sequence[SourceFile]) -> str:
    """Return a framework label sniffed from manifests or config filenames."""
    package_json = _find_by_name(files, "package.json")
    if package_json is not None:
        framework = _framework_from_package_json(package_json)
        if framework:
            return framework

    python_packages = _python_dependencies(files)
    for package, label in _PYTHON_FRAMEWORKS:
        if package in python_packages:
            return label

    for fragment, label in _CONFIG_FILE_FRAMEWORKS:
        if any(fragment in file.path for file in files):
            return label

    return UNKNOWN_FRAMEWORK


def build_project_context(
    files: Sequence[SourceFile], repository: RepositoryInfo
) -> ProjectContext:
    """Derive the shared project context once per run."""
    return ProjectContext(
        name=repository.name,
        description=repository.description or "",
        framework=detect_framework(files),
        language=repository.language or "unknown",
        patterns=[],
    )


def _find_by_name(files: Iterable[SourceFile], name: str) -> Optional[SourceFile]:
    # Prefer the root-level manifest when a monorepo carries several.
    matches = [file for file in files if file.name == name]
    if not matches:
        return None
    return min(matches, key=lambda file: file.path.count("/"))


def _framework_from_package_json(file: SourceFile) -> Optional[str]:
    try:
        data = json.loads(file.content)
    except json.JSONDecodeError as exc:
        logger.warning("Unable to parse %s: %s", file.path, exc)
        return None
    if not isinstance(data, dict):
        return None
    dependencies = data.get("dependencies")
    if not isinstance(dependencies, dict):
        return None
    for package, label in _NODE_FRAMEWORKS:
        if dependencies.get(package):
            return label
    return None


def _python_dependencies(files: Sequence[SourceFile]) -> set[str]:
    packages: set[str] = set()
    requirements = _find_by_name(files, "requirements.txt")
    if requirements is not None:
        packages.update(_parse_requirements(requirements.content))
    pyproject = _find_by_name(files, "pyproject.toml")
    if pyproject is not None:
        packages.update(_parse_pyproject(pyproject))
    return {package.lower() for package in packages}


def _parse_requirements(text: str) -> List[str]:
    packages: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-")):
            continue
        name = re.split(r"[<>=!~\[; ]", stripped, maxsplit=1)[0].strip()
        if name:
            packages.append(name)
    return packages


def _parse_pyproject(file: SourceFile) -> List[str]:
    try:
        data = tomllib.loads(file.content)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Unable to parse %s: %s", file.path, exc)
        return []

    dependencies: List[object] = []
    project = data.get("project")
    if isinstance(project, dict):
        project_deps = project.get("dependencies", [])
        if isinstance(project_deps, list):
            dependencies.extend(project_deps)
        else:
            logger.warning("Ignoring non-list [project] dependencies in %s", file.path)
    tool = data.get("tool")
    poetry: Dict[str, object] = {}
    if isinstance(tool, dict) and isinstance(tool.get("poetry"), dict):
        poetry = tool["poetry"]
    poetry_deps = poetry.get("dependencies")
    if isinstance(poetry_deps, dict):
        dependencies.extend(poetry_deps.keys())
    elif poetry_deps is not None:
        logger.warning("Ignoring non-table [tool.poetry] dependencies in %s", file.path)

    packages: List[str] = []
    for dep in dependencies:
        if not isinstance(dep, str):
            continue
        name = re.split(r"[<>=!~\[; ]", dep, maxsplit=1)[0].strip()
        if name and name.lower() != "python":
            packages.append(name)
    return packages


__all__ = ["UNKNOWN_FRAMEWORK", "build_project_context", "detect_framework"]

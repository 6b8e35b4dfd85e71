"""Shared file filters and language detection for source enumerators."""

from __future__ import annotations

from pathlib import PurePosixPath

MAX_FILE_BYTES = 100_000
MAX_FETCHED_FILES = 50

# Any path containing one of these fragments (lowercased) is skipped.
EXCLUDED_FRAGMENTS: tuple[str, ...] = (
    "node_modules/",
    ".git/",
    "dist/",
    "build/",
    "coverage/",
    ".next/",
    "out/",
    "public/",
    "assets/",
    "images/",
    "img/",
    "fonts/",
    ".lock",
    "package-lock.json",
    "yarn.lock",
    ".env",
    "docker",
    "readme.md",
    "license",
    "changelog",
    ".gitignore",
    ".gitattributes",
    ".vscode/",
    ".idea/",
    "docs/",
    "documentation/",
)

_LANGUAGE_BY_SUFFIX = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".pyx": "python",
    ".pyi": "python",
    ".java": "java",
    ".kt": "kotlin",
    ".scala": "scala",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".fs": "fsharp",
    ".vb": "vbnet",
    ".swift": "swift",
    ".m": "objectivec",
    ".mm": "objectivec",
    ".dart": "dart",
    ".lua": "lua",
    ".r": "r",
    ".sql": "sql",
    ".sh": "shell",
    ".bat": "batch",
    ".ps1": "powershell",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".sass": "sass",
    ".less": "less",
    ".vue": "vue",
    ".svelte": "svelte",
    ".astro": "astro",
    ".json": "json",
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".graphql": "graphql",
    ".gql": "graphql",
    ".proto": "protobuf",
    ".thrift": "thrift",
    ".tf": "terraform",
    ".hcl": "hcl",
    ".cmake": "cmake",
}

# Build files recognised by suffix without a language mapping of their own.
_EXTRA_CODE_SUFFIXES: tuple[str, ...] = (".gradle", ".maven", ".sbt", ".cargo", ".makefile")


def is_code_file(path: str) -> bool:
    """Return True when ``path`` looks like documentable source code."""
    lowered = path.lower()
    if any(fragment in lowered for fragment in EXCLUDED_FRAGMENTS):
        return False
    if lowered.endswith("makefile"):
        return True
    if lowered.endswith(_EXTRA_CODE_SUFFIXES):
        return True
    return PurePosixPath(lowered).suffix in _LANGUAGE_BY_SUFFIX


def language_for_path(path: str) -> str:
    """Map a path to the lowercase language label stored on SourceFile."""
    filename = PurePosixPath(path).name.lower()
    if "dockerfile" in filename:
        return "dockerfile"
    if "makefile" in filename:
        return "makefile"
    if ".gradle" in filename:
        return "gradle"
    return _LANGUAGE_BY_SUFFIX.get(PurePosixPath(filename).suffix, "text")


def accept(path: str, size: int, *, max_file_bytes: int = MAX_FILE_BYTES) -> bool:
    """Combined filter applied by every enumerator before reading content."""
    return 0 < size <= max_file_bytes and is_code_file(path)


__all__ = [
    "EXCLUDED_FRAGMENTS",
    "MAX_FETCHED_FILES",
    "MAX_FILE_BYTES",
    "accept",
    "is_code_file",
    "language_for_path",
]

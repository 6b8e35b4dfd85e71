"""Shared constants for prompting, fallbacks, and rendering."""

from __future__ import annotations

TRUNCATION_MARKER = "\n... (truncated)"

OVERVIEW_FILE_LIMIT = 5
ARCHITECTURE_FILE_LIMIT = 8

# Install and start commands keyed by detected framework.
FRAMEWORK_COMMANDS: dict[str, tuple[str, str]] = {
    "Next.js": ("npm install", "npm run dev"),
    "React": ("npm install", "npm start"),
    "Vue.js": ("npm install", "npm run serve"),
    "Express.js": ("npm install", "npm start"),
    "Django": ("pip install -r requirements.txt", "python manage.py runserver"),
    "FastAPI": ("pip install -r requirements.txt", "uvicorn main:app --reload"),
    "Flask": ("pip install -r requirements.txt", "flask run"),
    "Unknown": ("npm install", "npm start"),
}

PYTHON_FRAMEWORKS = frozenset({"Django", "FastAPI", "Flask"})

SECTION_TITLES: dict[str, str] = {
    "overview": "Overview",
    "getting_started": "Quick Start",
    "architecture": "Architecture",
    "project_structure": "Project Structure",
    "key_components": "Key Components",
    "api_reference": "API Reference",
    "usage_examples": "Usage Examples",
    "file_documentation": "File Documentation",
}


__all__ = [
    "ARCHITECTURE_FILE_LIMIT",
    "FRAMEWORK_COMMANDS",
    "OVERVIEW_FILE_LIMIT",
    "PYTHON_FRAMEWORKS",
    "SECTION_TITLES",
    "TRUNCATION_MARKER",
]

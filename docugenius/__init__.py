"""Generate project documentation from source files with an LLM."""

__version__ = "0.1.0"

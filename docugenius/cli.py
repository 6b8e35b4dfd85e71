"""CLI entrypoints for docugenius commands."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path

from .config import DocuGeniusConfig, load_config
from .errors import ConfigError, DocuGeniusError
from .logging import configure_logging, get_logger
from .models import ProgressEvent
from .sources.base import SourceEnumerator
from .sources.github import GitHubSourceEnumerator, parse_repo_ref
from .sources.local import LocalSourceEnumerator
from .stores.documents import DocumentStore
from .workflow import DocumentationWorkflow, WorkflowResult, build_pipeline

DEFAULT_OUTPUT = "DOCUMENTATION.md"

logger = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help=f"Where to write the markdown (defaults to {DEFAULT_OUTPUT}).",
    )
    parser.add_argument("--max-files", type=int, help="Maximum number of files to analyze.")
    parser.add_argument("--batch-size", type=int, help="Number of files analyzed concurrently.")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the structured documentation as JSON instead of writing markdown.",
    )
    parser.add_argument("--user", default="local", help="Owner recorded in the documentation store.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docugenius",
        description="Generate project documentation from repository source files.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, help="Also write detailed logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Document a local repository checkout.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    _add_run_options(generate_parser)

    github_parser = subparsers.add_parser(
        "github",
        help="Document a GitHub repository fetched over the REST API.",
    )
    _add_verbose_option(github_parser, suppress_default=True)
    github_parser.add_argument("repository", help="OWNER/REPO or a github.com URL.")
    github_parser.add_argument("--token", help="GitHub token (defaults to $GITHUB_TOKEN).")
    _add_run_options(github_parser)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docugenius commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file, stream=sys.stderr)

    if args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
        return

    config_root = Path(args.path) if args.command == "generate" else Path.cwd()
    try:
        config = _apply_overrides(load_config(config_root), args)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    enumerator: SourceEnumerator
    if args.command == "generate":
        repo_ref = args.path
        enumerator = LocalSourceEnumerator(
            max_file_bytes=config.sources.max_file_bytes,
            max_files=config.sources.max_files,
            exclude_paths=config.sources.exclude_paths,
        )
        default_output = Path(args.path) / DEFAULT_OUTPUT
    elif args.command == "github":
        repo_ref = args.repository
        try:
            _, repo_name = parse_repo_ref(repo_ref)
        except DocuGeniusError as exc:
            parser.exit(1, f"{exc}\n")
        enumerator = GitHubSourceEnumerator(
            args.token,
            max_file_bytes=config.sources.max_file_bytes,
            max_files=config.sources.max_files,
        )
        default_output = Path.cwd() / f"{repo_name}-{DEFAULT_OUTPUT}"
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    store = DocumentStore(config.store.documents_path) if config.store.documents_path else None
    workflow = DocumentationWorkflow(enumerator, build_pipeline(config), store=store)

    try:
        result = asyncio.run(workflow.run(repo_ref, args.user, _log_progress))
    except DocuGeniusError as exc:
        parser.exit(1, f"docugenius {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    _emit(result, args.json, args.output or default_output)


def _apply_overrides(config: DocuGeniusConfig, args: argparse.Namespace) -> DocuGeniusConfig:
    overrides = {}
    if args.max_files is not None:
        overrides["max_files"] = args.max_files
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if overrides:
        config.pipeline = dataclasses.replace(config.pipeline, **overrides)
    return config


def _log_progress(event: ProgressEvent) -> None:
    if event.kind == "error":
        return
    logger.info("%3.0f%% %s", event.progress, event.message)


def _emit(result: WorkflowResult, as_json: bool, output: Path) -> None:
    if as_json:
        json.dump(result.documentation.to_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result.markdown, encoding="utf-8")
    print(f"Documentation written to {_relativize(output)} ({result.files_analyzed} files analyzed)")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

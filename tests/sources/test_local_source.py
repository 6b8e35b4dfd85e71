"""Tests for the local directory enumerator."""

from __future__ import annotations

import pytest

from docugenius.errors import SourceError
from docugenius.sources.local import IgnoreRule, IgnoreRules, LocalSourceEnumerator


def test_lists_code_files_with_languages(repo_builder) -> None:
    repo_builder.write(
        {
            "src/index.ts": "export const app = 1\n",
            "src/utils/format.py": "def fmt(value):\n    return value\n",
            "README.md": "# Hello\n",
            "node_modules/pkg/index.js": "module.exports = 1\n",
            "assets/logo.css": "body {}\n",
        }
    )

    files = repo_builder.files()

    assert sorted(f.path for f in files) == ["src/index.ts", "src/utils/format.py"]
    by_path = {f.path: f for f in files}
    assert by_path["src/index.ts"].language == "typescript"
    assert by_path["src/index.ts"].name == "index.ts"
    assert by_path["src/utils/format.py"].content.startswith("def fmt")
    assert by_path["src/index.ts"].size == len("export const app = 1\n")


def test_gitignore_and_configured_excludes_are_honoured(repo_builder) -> None:
    repo_builder.write(
        {
            ".gitignore": "generated/\n*.min.js\n!keep.min.js\n",
            "generated/api.ts": "export {}\n",
            "src/vendor.min.js": "x\n",
            "src/keep.min.js": "y\n",
            "fixtures/sample.ts": "z\n",
            "src/main.ts": "main()\n",
        }
    )
    enumerator = LocalSourceEnumerator(exclude_paths=["fixtures/"])

    files = enumerator.list_files(str(repo_builder.path()))

    assert sorted(f.path for f in files) == ["src/keep.min.js", "src/main.ts"]


def test_limits_file_count_and_size(repo_builder) -> None:
    repo_builder.write({f"src/mod_{i}.ts": f"export const v{i} = {i}\n" for i in range(5)})
    repo_builder.write({"src/huge.ts": "x" * 2_000})

    files = LocalSourceEnumerator(max_files=3, max_file_bytes=1_000).list_files(str(repo_builder.path()))

    assert len(files) == 3
    assert "src/huge.ts" not in {f.path for f in files}


def test_metadata_uses_directory_name_and_dominant_language(repo_builder) -> None:
    repo_builder.write({"a.py": "a = 1\n", "b.py": "b = 2\n", "c.ts": "c\n"})

    info = LocalSourceEnumerator().get_repo_metadata(str(repo_builder.path()))

    assert info.name == "repo"
    assert info.full_name == "local/repo"
    assert info.language == "python"


def test_missing_directory_raises(tmp_path) -> None:
    with pytest.raises(SourceError):
        LocalSourceEnumerator().list_files(str(tmp_path / "missing"))


def test_ignore_rule_parsing() -> None:
    assert IgnoreRule.parse("# comment") is None
    assert IgnoreRule.parse("   ") is None
    assert IgnoreRule.parse("/build/") == IgnoreRule("build", directory_only=True, anchored=True)
    assert IgnoreRule.parse("!keep.js") == IgnoreRule("keep.js", negate=True)
    assert IgnoreRule.parse("docs/*.md").anchored


def test_last_matching_rule_wins() -> None:
    rules = IgnoreRules([IgnoreRule("*.log"), IgnoreRule("keep.log", negate=True)])

    assert rules.ignores("logs/debug.log", False)
    assert not rules.ignores("logs/keep.log", False)
    assert not IgnoreRule("dist", directory_only=True).matches("dist", False)

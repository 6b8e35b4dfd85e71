"""Enumerates code files from a GitHub repository over the REST API."""

from __future__ import annotations

import base64
import binascii
import json
import os
import re
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..errors import SourceError
from ..logging import get_logger
from ..models import RepositoryInfo, SourceFile
from .base import SourceEnumerator
from .filters import MAX_FETCHED_FILES, MAX_FILE_BYTES, accept, language_for_path

DEFAULT_API_URL = "https://api.github.com"
ENV_TOKEN_KEYS = ("DOCUGENIUS_GITHUB_TOKEN", "GITHUB_TOKEN")

_REPO_URL_RE = re.compile(r"github\.com[/:]([^/\s]+)/([^/\s#?]+?)(?:\.git)?/?$")
_REPO_REF_RE = re.compile(r"^([\w.-]+)/([\w.-]+)$")

Fetcher = Callable[[str], Any]

logger = get_logger("sources.github")


def parse_repo_ref(repo_ref: str) -> Tuple[str, str]:
    """Split ``owner/repo`` or a github.com URL into (owner, repo)."""
    ref = repo_ref.strip()
    match = _REPO_URL_RE.search(ref) or _REPO_REF_RE.match(ref)
    if not match:
        raise SourceError(f"Invalid GitHub repository reference: {repo_ref!r}")
    return match.group(1), match.group(2)


class GitHubSourceEnumerator(SourceEnumerator):
    """Reads repository metadata, the recursive tree, then individual blobs."""

    def __init__(
        self,
        token: str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        max_file_bytes: int = MAX_FILE_BYTES,
        max_files: int = MAX_FETCHED_FILES,
        request_timeout: float = 30.0,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        self.token = token or next((os.getenv(key) for key in ENV_TOKEN_KEYS if os.getenv(key)), None)
        self.api_url = api_url.rstrip("/")
        self.max_file_bytes = max_file_bytes
        self.max_files = max_files
        self.request_timeout = request_timeout
        self._fetch = fetcher or self._http_fetch

    def get_repo_metadata(self, repo_ref: str) -> RepositoryInfo:
        owner, repo = parse_repo_ref(repo_ref)
        data = self._fetch(f"{self.api_url}/repos/{owner}/{repo}")
        if not isinstance(data, dict):
            raise SourceError(f"Unexpected repository payload for {owner}/{repo}")
        return RepositoryInfo(
            name=str(data.get("name") or repo),
            full_name=str(data.get("full_name") or f"{owner}/{repo}"),
            description=data.get("description"),
            language=data.get("language"),
            topics=list(data.get("topics") or []),
            default_branch=str(data.get("default_branch") or "main"),
        )

    def list_files(self, repo_ref: str, branch: str | None = None) -> List[SourceFile]:
        owner, repo = parse_repo_ref(repo_ref)
        target = branch or self.get_repo_metadata(repo_ref).default_branch

        try:
            tree = self._fetch(
                f"{self.api_url}/repos/{owner}/{repo}/git/trees/{quote(target, safe='')}?recursive=1"
            )
        except SourceError as exc:
            raise SourceError(f"Failed to fetch repository files: {exc}") from exc
        entries = tree.get("tree") if isinstance(tree, dict) else None
        if not isinstance(entries, list):
            raise SourceError(f"Failed to fetch repository files: malformed tree for {owner}/{repo}")
        if isinstance(tree, dict) and tree.get("truncated"):
            logger.warning("Tree listing for %s/%s was truncated by the API", owner, repo)

        candidates = [
            entry
            for entry in entries
            if isinstance(entry, dict)
            and entry.get("type") == "blob"
            and isinstance(entry.get("path"), str)
            and isinstance(entry.get("sha"), str)
            and accept(entry["path"], int(entry.get("size") or 0), max_file_bytes=self.max_file_bytes)
        ][: self.max_files]

        files: List[SourceFile] = []
        for entry in candidates:
            path = entry["path"]
            try:
                content = self._fetch_blob(owner, repo, entry["sha"])
            except SourceError as exc:
                logger.error("Failed to fetch content for %s: %s", path, exc)
                continue
            files.append(
                SourceFile(
                    path=path,
                    name=path.rsplit("/", 1)[-1],
                    content=content,
                    language=language_for_path(path),
                    size=int(entry.get("size") or 0),
                    sha=entry["sha"],
                )
            )
        logger.info("Fetched %d of %d candidate files from %s/%s", len(files), len(candidates), owner, repo)
        return files

    def _fetch_blob(self, owner: str, repo: str, sha: str) -> str:
        blob = self._fetch(f"{self.api_url}/repos/{owner}/{repo}/git/blobs/{sha}")
        if not isinstance(blob, dict) or not isinstance(blob.get("content"), str):
            raise SourceError(f"Malformed blob payload for {sha}")
        try:
            raw = base64.b64decode(blob["content"])
        except (binascii.Error, ValueError) as exc:
            raise SourceError(f"Blob {sha} is not valid base64") from exc
        return raw.decode("utf-8", errors="replace")

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "docugenius",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _http_fetch(self, url: str) -> Any:
        request = Request(url, headers=self._headers(), method="GET")
        try:
            with urlopen(request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on network
            raise SourceError(f"GitHub request failed with status {exc.code}: {exc.reason}") from exc
        except URLError as exc:  # pragma: no cover - depends on network
            raise SourceError(f"GitHub request failed: {exc.reason}") from exc
        except TimeoutError as exc:  # pragma: no cover - depends on network
            raise SourceError("GitHub request timed out") from exc
        try:
            return json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise SourceError("GitHub returned invalid JSON") from exc


__all__ = ["GitHubSourceEnumerator", "parse_repo_ref"]

"""Minimal GitHub REST client used to list and download repository files."""

from __future__ import annotations

import json
import os
import socket
from typing import Any, List, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlparse
from urllib.request import Request, urlopen

from ..config import DEFAULT_API_URL, DEFAULT_REQUEST_TIMEOUT
from ..errors import FetchError, InvalidUrlError
from ..logging import get_logger
from ..models import RepoRef

DEFAULT_REF = "HEAD"
_GITHUB_HOSTS = {"github.com", "www.github.com"}


class GitHubClient:
    """Lists and fetches files beneath a GitHub folder."""

    ENV_TOKEN_KEYS = ("REPOLENS_GITHUB_TOKEN", "GH_ACCESS_TOKEN", "GITHUB_TOKEN")

    def __init__(
        self,
        token: str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.token = token or self._first_env_value(self.ENV_TOKEN_KEYS)
        self.api_url = api_url.rstrip("/")
        self.request_timeout = request_timeout
        self.logger = get_logger("github")

    @staticmethod
    def parse_url(text: str) -> RepoRef:
        """Parse ``https://github.com/<owner>/<repo>[/tree|blob/<ref>[/<path>]]``."""
        candidate = (text or "").strip()
        if not candidate:
            raise InvalidUrlError("URL is empty.")
        if "://" not in candidate:
            candidate = f"https://{candidate}"

        parsed = urlparse(candidate)
        host = (parsed.hostname or "").lower()
        if host not in _GITHUB_HOSTS:
            raise InvalidUrlError(f"Not a GitHub URL: {text}")

        segments = [segment for segment in parsed.path.split("/") if segment]
        if len(segments) < 2:
            raise InvalidUrlError(f"URL must name an owner and a repository: {text}")

        owner, repo = segments[0], segments[1]
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        if not repo:
            raise InvalidUrlError(f"URL must name an owner and a repository: {text}")

        if len(segments) == 2:
            return RepoRef(owner=owner, repo=repo, ref=DEFAULT_REF)

        kind = segments[2]
        if kind not in {"tree", "blob"}:
            raise InvalidUrlError(f"Unsupported GitHub URL form '{kind}': {text}")
        if len(segments) < 4:
            raise InvalidUrlError(f"URL is missing a branch or commit: {text}")

        return RepoRef(
            owner=owner,
            repo=repo,
            ref=segments[3],
            path="/".join(segments[4:]),
            is_blob=kind == "blob",
        )

    def list_files_recursive(self, ref: RepoRef) -> List[str]:
        """Return blob paths beneath ``ref.path``, relative to that folder."""
        url = (
            f"{self.api_url}/repos/{quote(ref.owner)}/{quote(ref.repo)}"
            f"/git/trees/{quote(ref.ref, safe='')}?recursive=1"
        )
        payload = self._get_json(url)
        if not isinstance(payload, dict) or not isinstance(payload.get("tree"), list):
            raise FetchError(f"Unexpected tree listing payload from {url}", url=url)
        if payload.get("truncated"):
            self.logger.warning(
                "GitHub truncated the tree listing for %s/%s@%s; some files are missing",
                ref.owner,
                ref.repo,
                ref.ref,
            )

        prefix = f"{ref.path.strip('/')}/" if ref.path.strip("/") else ""
        paths: List[str] = []
        for entry in payload["tree"]:
            if not isinstance(entry, dict) or entry.get("type") != "blob":
                continue
            path = entry.get("path")
            if not isinstance(path, str) or not path.startswith(prefix):
                continue
            paths.append(path[len(prefix):])
        self.logger.debug("Tree listing for %s returned %d blobs", url, len(paths))
        return paths

    def get_content(self, owner: str, repo: str, path: str, ref: str) -> str:
        """Return the raw text of ``path`` at ``ref``."""
        url = (
            f"{self.api_url}/repos/{quote(owner)}/{quote(repo)}"
            f"/contents/{quote(path)}?ref={quote(ref, safe='')}"
        )
        raw = self._request(url, accept="application/vnd.github.raw")
        return raw.decode("utf-8", errors="replace")

    def _get_json(self, url: str) -> Any:
        raw = self._request(url, accept="application/vnd.github+json")
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FetchError(f"GitHub returned invalid JSON for {url}", url=url) from exc

    def _request(self, url: str, *, accept: str) -> bytes:
        headers = {
            "Accept": accept,
            "User-Agent": "repolens",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        http_request = Request(url, headers=headers, method="GET")
        try:
            with urlopen(http_request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
                return response.read()
        except HTTPError as exc:
            detail = _error_detail(exc)
            raise FetchError(
                f"GitHub request failed with status {exc.code}: {detail}",
                url=url,
                status=exc.code,
            ) from exc
        except URLError as exc:
            raise FetchError(f"GitHub request failed: {exc.reason}", url=url) from exc
        except (socket.timeout, TimeoutError) as exc:
            raise FetchError(f"GitHub request timed out after {self.request_timeout}s", url=url) from exc

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> Optional[str]:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


def _error_detail(exc: HTTPError) -> str:
    try:
        body = exc.read().decode("utf-8", errors="ignore")
    except Exception:  # pragma: no cover - body already consumed
        body = ""
    if body:
        try:
            message = json.loads(body).get("message")
        except (json.JSONDecodeError, AttributeError):
            message = None
        if isinstance(message, str) and message:
            return message
        return body.strip()
    return str(exc.reason)


__all__ = ["DEFAULT_REF", "GitHubClient"]

"""Tests for the GitHub REST client."""

from __future__ import annotations

import io
import json
from urllib.error import HTTPError, URLError

import pytest

from repolens.errors import FetchError, InvalidUrlError
from repolens.github.client import GitHubClient
from repolens.models import RepoRef


class FakeResponse:
    def __init__(self, body: bytes):
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


@pytest.fixture
def no_env_token(monkeypatch) -> None:
    for key in GitHubClient.ENV_TOKEN_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://github.com/acme/shop", RepoRef(owner="acme", repo="shop", ref="HEAD")),
        ("github.com/acme/shop.git", RepoRef(owner="acme", repo="shop", ref="HEAD")),
        (
            "https://github.com/acme/shop/tree/main/src/main/java",
            RepoRef(owner="acme", repo="shop", ref="main", path="src/main/java"),
        ),
        (
            "  https://www.github.com/acme/shop/tree/v1.2/  ",
            RepoRef(owner="acme", repo="shop", ref="v1.2"),
        ),
        (
            "https://github.com/acme/shop/blob/main/src/A.java",
            RepoRef(owner="acme", repo="shop", ref="main", path="src/A.java", is_blob=True),
        ),
    ],
)
def test_parse_url_accepts_repository_and_folder_urls(url: str, expected: RepoRef) -> None:
    assert GitHubClient.parse_url(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        "",
        "https://gitlab.com/acme/shop",
        "https://github.com/acme",
        "https://github.com/acme/.git",
        "https://github.com/acme/shop/pulls/1",
        "https://github.com/acme/shop/tree",
    ],
)
def test_parse_url_rejects_unsupported_urls(url: str) -> None:
    with pytest.raises(InvalidUrlError):
        GitHubClient.parse_url(url)


def test_list_files_recursive_filters_blobs_under_folder(monkeypatch, no_env_token) -> None:
    captured = {}
    payload = {
        "truncated": False,
        "tree": [
            {"path": "src", "type": "tree"},
            {"path": "src/A.java", "type": "blob"},
            {"path": "src/pkg/B.java", "type": "blob"},
            {"path": "docs/README.md", "type": "blob"},
            {"path": "srcx/C.java", "type": "blob"},
        ],
    }

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        captured["timeout"] = timeout
        return FakeResponse(json.dumps(payload).encode("utf-8"))

    monkeypatch.setattr("repolens.github.client.urlopen", fake_urlopen)

    client = GitHubClient(request_timeout=12.5)
    paths = client.list_files_recursive(RepoRef(owner="acme", repo="shop", ref="main", path="src"))

    assert paths == ["A.java", "pkg/B.java"]
    assert captured["url"] == "https://api.github.com/repos/acme/shop/git/trees/main?recursive=1"
    assert captured["headers"]["accept"] == "application/vnd.github+json"
    assert "authorization" not in captured["headers"]
    assert captured["timeout"] == 12.5


def test_list_files_recursive_rejects_unexpected_payload(monkeypatch, no_env_token) -> None:
    monkeypatch.setattr(
        "repolens.github.client.urlopen",
        lambda request, timeout=None: FakeResponse(b'{"message": "ok"}'),
    )

    with pytest.raises(FetchError):
        GitHubClient().list_files_recursive(RepoRef(owner="acme", repo="shop", ref="main"))


def test_get_content_requests_raw_file(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        return FakeResponse("class Café {}".encode("utf-8"))

    monkeypatch.setattr("repolens.github.client.urlopen", fake_urlopen)

    client = GitHubClient("secret", api_url="https://ghe.example.com/api/v3/")
    content = client.get_content("acme", "shop", "src/A.java", "main")

    assert content == "class Café {}"
    assert captured["url"] == "https://ghe.example.com/api/v3/repos/acme/shop/contents/src/A.java?ref=main"
    assert captured["headers"]["accept"] == "application/vnd.github.raw"
    assert captured["headers"]["authorization"] == "Bearer secret"


def test_http_errors_become_fetch_errors(monkeypatch, no_env_token) -> None:
    def fake_urlopen(request, timeout=None):
        raise HTTPError(
            request.full_url,
            404,
            "Not Found",
            {},
            io.BytesIO(b'{"message": "Not Found"}'),
        )

    monkeypatch.setattr("repolens.github.client.urlopen", fake_urlopen)

    with pytest.raises(FetchError) as excinfo:
        GitHubClient().get_content("acme", "shop", "A.java", "main")

    assert excinfo.value.status == 404
    assert "Not Found" in str(excinfo.value)
    assert excinfo.value.url.endswith("/contents/A.java?ref=main")


def test_network_errors_become_fetch_errors(monkeypatch, no_env_token) -> None:
    def fake_urlopen(request, timeout=None):
        raise URLError("connection refused")

    monkeypatch.setattr("repolens.github.client.urlopen", fake_urlopen)

    with pytest.raises(FetchError) as excinfo:
        GitHubClient().list_files_recursive(RepoRef(owner="acme", repo="shop", ref="main"))
    assert excinfo.value.status is None
    assert "connection refused" in str(excinfo.value)


def test_invalid_json_becomes_fetch_error(monkeypatch, no_env_token) -> None:
    monkeypatch.setattr(
        "repolens.github.client.urlopen",
        lambda request, timeout=None: FakeResponse(b"<html>"),
    )

    with pytest.raises(FetchError):
        GitHubClient().list_files_recursive(RepoRef(owner="acme", repo="shop", ref="main"))


def test_token_falls_back_to_environment(monkeypatch, no_env_token) -> None:
    monkeypatch.setenv("GH_ACCESS_TOKEN", "from-env")
    assert GitHubClient().token == "from-env"

    monkeypatch.setenv("REPOLENS_GITHUB_TOKEN", "preferred")
    assert GitHubClient().token == "preferred"
    assert GitHubClient("explicit").token == "explicit"

"""Shared fixtures: an in-memory Gitea contents API."""

import base64
import hashlib
import json

import httpx
import pytest

from pytea.api import GiteaClient
from pytea.feature_sets import FeatureSetManager

OWNER = "ops"
REPO = "devops"
PREFIX = f"/api/v1/repos/{OWNER}/{REPO}"


def _sha(content: bytes) -> str:
    return hashlib.sha1(content).hexdigest()


class FakeGitea:
    """Minimal stand-in for the Gitea contents endpoints.

    Files are kept in ``self.files`` keyed by their repository path.
    Every handled request is recorded in ``self.requests``.
    """

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.requests: list[tuple[str, str]] = []
        self.fail_on: dict[tuple[str, str], int] = {}

    def add(self, path: str, content: bytes = b"") -> None:
        self.files[path] = content

    def _is_dir(self, path: str) -> bool:
        prefix = f"{path}/" if path else ""
        return any(p.startswith(prefix) for p in self.files)

    def _file_json(self, path: str) -> dict:
        return {
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "type": "file",
            "sha": _sha(self.files[path]),
            "download_url": f"https://gitea.test/{OWNER}/{REPO}/raw/{path}",
        }

    def _dir_json(self, path: str) -> dict:
        return {
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "type": "dir",
            "sha": _sha(path.encode()),
            "download_url": None,
        }

    def _children(self, path: str) -> list:
        prefix = f"{path}/" if path else ""
        names: dict[str, bool] = {}
        for file_path in self.files:
            if not file_path.startswith(prefix):
                continue
            head, sep, _ = file_path[len(prefix) :].partition("/")
            names[head] = names.get(head, False) or bool(sep)
        return [
            self._dir_json(prefix + name) if is_dir else self._file_json(prefix + name)
            for name, is_dir in sorted(names.items())
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        method = request.method
        self.requests.append((method, path))

        status = self.fail_on.get((method, path))
        if status is not None:
            return httpx.Response(status, json={"message": "injected failure"})

        if path == "/api/v1/version":
            return httpx.Response(200, json={"version": "1.21.4"})
        if path == PREFIX:
            return httpx.Response(
                200,
                json={
                    "id": 7,
                    "name": REPO,
                    "full_name": f"{OWNER}/{REPO}",
                    "description": "deployment artifacts",
                    "default_branch": "main",
                    "empty": False,
                    "updated_at": "2024-05-01T10:00:00Z",
                    "permissions": {"admin": True, "pull": True, "push": True},
                    "owner": {"id": 1, "login": OWNER, "email": "ops@example.com"},
                },
            )
        if path.startswith(f"{PREFIX}/raw/"):
            file_path = path[len(f"{PREFIX}/raw/") :]
            if file_path not in self.files:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(
                200,
                content=self.files[file_path],
                headers={"Content-Type": "application/octet-stream"},
            )
        if path == f"{PREFIX}/contents" or path.startswith(f"{PREFIX}/contents/"):
            file_path = path[len(f"{PREFIX}/contents") :].strip("/")
            return self._contents(method, file_path, request)
        return httpx.Response(404, json={"message": "unknown endpoint"})

    def _contents(self, method: str, path: str, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}

        if method == "GET":
            if path in self.files:
                return httpx.Response(200, json=self._file_json(path))
            if path == "" or self._is_dir(path):
                return httpx.Response(200, json=self._children(path))
            return httpx.Response(404, json={"message": "file does not exist"})

        if method == "POST":
            if path in self.files:
                return httpx.Response(422, json={"message": "repository file already exists"})
            self.files[path] = base64.b64decode(body["content"])
            return httpx.Response(201, json={"content": self._file_json(path)})

        if method == "PUT":
            if path not in self.files:
                return httpx.Response(404, json={"message": "file does not exist"})
            if body.get("sha") != _sha(self.files[path]):
                return httpx.Response(409, json={"message": "sha does not match"})
            self.files[path] = base64.b64decode(body["content"])
            return httpx.Response(200, json={"content": self._file_json(path)})

        if method == "DELETE":
            if path not in self.files:
                return httpx.Response(404, json={"message": "file does not exist"})
            if body.get("sha") != _sha(self.files[path]):
                return httpx.Response(409, json={"message": "sha does not match"})
            del self.files[path]
            return httpx.Response(200, json={"content": None})

        return httpx.Response(405, json={"message": "method not allowed"})


@pytest.fixture
def fake_gitea():
    """Provide an empty in-memory Gitea repository."""
    return FakeGitea()


@pytest.fixture
def client(fake_gitea):
    """Provide a GiteaClient talking to the fake server."""
    gitea_client = GiteaClient(
        url="https://gitea.test",
        api_token="secret-token",
        owner=OWNER,
        repository=REPO,
        transport=httpx.MockTransport(fake_gitea.handler),
    )
    yield gitea_client
    gitea_client.close()


@pytest.fixture
def manager(client, tmp_path):
    """Provide a FeatureSetManager with local folders below tmp_path."""
    (tmp_path / "root").mkdir()
    return FeatureSetManager(
        client,
        author="Test User",
        email="test@example.com",
        script_dir=tmp_path / "bin",
        root=tmp_path / "root",
    )

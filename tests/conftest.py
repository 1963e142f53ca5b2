"""
Shared fixtures: quiet logging and an in-memory GitHub served through
httpx.MockTransport.
"""

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from skillsync.config.schema import LoggingConfig, RegistrySettings
from skillsync.logging import configure_logging
from skillsync.registry.client import RegistryClient


class FakeGitHub:
    """Serves repo info, recursive trees and raw files for one repository."""

    def __init__(self, owner: str = "acme", repo: str = "skills", default_branch: str = "main"):
        self.owner = owner
        self.repo = repo
        self.default_branch = default_branch
        self.repo_status = 200
        self.trees: dict[str, list[dict[str, str]]] = {}
        self.files: dict[tuple[str, str], str] = {}
        self.failing: set[tuple[str, str]] = set()
        self.requests: list[httpx.Request] = []

    @property
    def registry(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"

    def add_file(self, ref: str, path: str, content: str) -> None:
        tree = self.trees.setdefault(ref, [])
        known = {e["path"] for e in tree}
        parts = path.split("/")
        for depth in range(1, len(parts)):
            directory = "/".join(parts[:depth])
            if directory not in known:
                tree.append({"path": directory, "type": "tree"})
                known.add(directory)
        if path not in known:
            tree.append({"path": path, "type": "blob"})
        self.files[(ref, path)] = content

    def add_skill(self, ref: str, category: str, skill: str, files: dict[str, str]) -> None:
        for name, content in files.items():
            self.add_file(ref, f"skills/{category}/{skill}/{name}", content)

    def set_metadata(self, categories: dict[str, Any], ref: str | None = None) -> None:
        self.add_file(
            ref or self.default_branch,
            "skills/metadata.json",
            json.dumps({"categories": categories}),
        )

    def fail_file(self, ref: str, path: str) -> None:
        self.failing.add((ref, path))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        parts = request.url.path.strip("/").split("/")

        if host == "api.github.com" and parts[:1] == ["repos"]:
            if len(parts) == 3:
                if self.repo_status != 200:
                    return httpx.Response(self.repo_status)
                return httpx.Response(200, json={"default_branch": self.default_branch})
            if len(parts) == 6 and parts[3:5] == ["git", "trees"]:
                ref = parts[5]
                if ref not in self.trees:
                    return httpx.Response(404, json={"message": "Not Found"})
                return httpx.Response(200, json={"tree": self.trees[ref], "truncated": False})

        if host == "raw.githubusercontent.com" and len(parts) >= 4:
            ref = parts[2]
            path = "/".join(parts[3:])
            if (ref, path) in self.failing or (ref, path) not in self.files:
                return httpx.Response(404, text="404: Not Found")
            return httpx.Response(200, text=self.files[(ref, path)])

        return httpx.Response(404)

    def client(self, settings: RegistrySettings | None = None) -> RegistryClient:
        return RegistryClient(settings, transport=httpx.MockTransport(self.handler))

    def raw_requests(self) -> list[str]:
        return [r.url.path for r in self.requests if r.url.host == "raw.githubusercontent.com"]


@pytest.fixture(autouse=True)
def quiet_logging():
    configure_logging(LoggingConfig(), quiet=True)
    yield


@pytest.fixture
def github_factory():
    """FakeGitHub class, for tests that need another owner/repo."""
    return FakeGitHub


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def client(github: FakeGitHub):
    c = github.client()
    yield c
    c.close()


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty project root, also the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path

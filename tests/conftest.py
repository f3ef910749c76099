"""Shared fixtures."""

import os
from datetime import datetime

import pytest

from bet.indexer.paths import is_within
from bet.indexer.store import ConfigPaths, IndexStore


class FakeVcs:
    """In-memory ``VersionControl``: a path is a repo if it sits inside one of ``repos``."""

    def __init__(self):
        self.repos: set[str] = set()
        self.first_commits: dict[str, datetime] = {}
        self.dirty: dict[str, bool] = {}
        self.calls: list[tuple[str, str]] = []

    def is_repo(self, path: str) -> bool:
        self.calls.append(("is_repo", path))
        return any(is_within(path, repo) for repo in self.repos)

    def first_commit_time(self, path: str) -> datetime | None:
        self.calls.append(("first_commit_time", path))
        return self.first_commits.get(path)

    def is_dirty(self, path: str) -> bool | None:
        self.calls.append(("is_dirty", path))
        if not self.is_repo(path):
            return None
        return self.dirty.get(path, False)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep settings, logs and the shell flag away from the real user environment."""
    monkeypatch.setenv("BET_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("BET_LOG_DIR", str(tmp_path / "logs"))
    for name in ("BET_LOG_LEVEL", "BET_SCAN_WORKERS", "BET_GIT_TIMEOUT", "BET_EVAL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def store(tmp_path) -> IndexStore:
    return IndexStore(ConfigPaths(config_dir=str(tmp_path / "config")))


@pytest.fixture
def code_root(tmp_path) -> str:
    """An empty directory to use as a scan root."""
    root = tmp_path / "code"
    root.mkdir()
    return str(root)


def _make_project(root: str, rel: str, git: bool = False, readme: str | None = None) -> str:
    """Create ``root/rel`` with an optional ``.git`` directory and README.md."""
    path = os.path.join(root, *rel.split("/"))
    os.makedirs(path, exist_ok=True)
    if git:
        os.makedirs(os.path.join(path, ".git"), exist_ok=True)
    if readme is not None:
        with open(os.path.join(path, "README.md"), "w", encoding="utf-8") as f:
            f.write(readme)
    return path


@pytest.fixture
def make_project():
    return _make_project

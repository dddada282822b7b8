"""Pytest configuration and fixtures for j-artifact-resolver tests."""
from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from j_artifact_resolver import layout
from j_artifact_resolver.config import RemoteRepository, RepositoryConfig
from j_artifact_resolver.models import Coordinate


HELLO = Coordinate(group_id="org.example", artifact_id="hello", version="1.0.0", extension="jar")


def deploy(
    repo_dir: Path,
    coordinate: Coordinate,
    content: bytes = b"payload",
    *,
    version: str | None = None,
) -> Path:
    """Write a file into a repository directory using the Maven layout."""
    path = repo_dir / layout.artifact_path(coordinate, version)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def local_repo(tmp_path: Path) -> Path:
    return tmp_path / "local"


@pytest.fixture
def remote_dirs(tmp_path: Path) -> Callable[[str], Path]:
    """Factory creating empty directories that serve as file:// repositories."""

    def _make(name: str) -> Path:
        path = tmp_path / "remotes" / name
        path.mkdir(parents=True, exist_ok=True)
        return path

    return _make


@pytest.fixture
def make_config(local_repo: Path) -> Callable[..., RepositoryConfig]:
    """Build a RepositoryConfig whose remotes are given as {name: directory}."""

    def _make(remotes: dict[str, Path] | None = None, **kwargs) -> RepositoryConfig:
        repos = {
            name: RemoteRepository(url=path.as_uri()) for name, path in (remotes or {}).items()
        }
        return RepositoryConfig(
            local_repository=str(local_repo),
            remote_repositories=repos,
            **kwargs,
        )

    return _make


@pytest.fixture
def hello() -> Coordinate:
    return HELLO


@pytest.fixture(name="deploy")
def deploy_fixture() -> Callable[..., Path]:
    return deploy

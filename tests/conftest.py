"""Shared test fixtures."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path

import pytest

from shipmark.core.commits import RawCommit
from shipmark.handlers import HandlerRegistry, create_default_registry


def _git(path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def registry() -> HandlerRegistry:
    """A fresh registry with the built-in handlers."""
    return create_default_registry()


@pytest.fixture
def package_json(tmp_path: Path) -> Path:
    """A package.json with unrelated fields around the version."""
    path = tmp_path / "package.json"
    path.write_text(
        json.dumps(
            {
                "name": "test-package",
                "version": "1.0.0",
                "dependencies": {"lodash": "^4.17.21"},
            },
            indent=2,
        )
        + "\n"
    )
    return path


@pytest.fixture
def chart_yaml(tmp_path: Path) -> Path:
    """A Helm Chart.yaml with comments."""
    path = tmp_path / "Chart.yaml"
    path.write_text(
        """\
# Helm chart for the test application
apiVersion: v2
name: test-app
version: 0.1.0
# Version of the application being deployed
appVersion: "1.0.0"
"""
    )
    return path


@pytest.fixture
def values_yaml(tmp_path: Path) -> Path:
    """A Helm values.yaml with a nested image tag."""
    path = tmp_path / "values.yaml"
    path.write_text(
        """\
replicaCount: 2

image:
  repository: ghcr.io/example/app
  # Docker image tag
  tag: "1.0.0"
  pullPolicy: IfNotPresent

ports:
  - name: http
    port: 8080
"""
    )
    return path


@pytest.fixture
def raw_commit() -> RawCommit:
    return RawCommit(
        hash="feat1234567890",
        short_hash="feat123",
        subject="feat: add user authentication",
        body="",
        author="Test",
        date="2024-01-01",
    )


@pytest.fixture
def sample_commits() -> list[RawCommit]:
    subjects = [
        ("a1", "feat(auth): add login", ""),
        ("b2", "fix(core): handle null config", ""),
        ("c3", "docs: update readme", ""),
        ("d4", "chore: bump dependencies", ""),
        ("e5", "feat(api)!: drop v1 endpoints", "BREAKING CHANGE: v1 endpoints are gone"),
        ("f6", "Merge branch 'main'", ""),
    ]
    return [
        RawCommit(
            hash=f"{sha}0000000",
            short_hash=sha,
            subject=subject,
            body=body,
            author="Test",
            date="2024-01-01",
        )
        for sha, subject, body in subjects
    ]


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Path:
    """An initialized git repository with one commit and a package.json."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.name", "Test")
    _git(tmp_path, "config", "user.email", "test@example.com")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    _git(tmp_path, "config", "tag.gpgsign", "false")

    (tmp_path / "package.json").write_text('{\n  "name": "repo",\n  "version": "1.0.0"\n}\n')
    _git(tmp_path, "add", "package.json")
    _git(tmp_path, "commit", "-q", "-m", "chore: initial commit")
    return tmp_path


@pytest.fixture
def git():
    """Run git in a directory: ``git(path, "log")``."""
    return _git

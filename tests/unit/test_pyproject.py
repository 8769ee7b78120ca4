"""Tests for the pyproject.toml handler."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from shipmark.exceptions import DynamicVersionError, VersionFileError
from shipmark.handlers import PyprojectHandler


def write_pyproject(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "pyproject.toml"
    path.write_text(content)
    return path


def load(path: Path) -> dict:
    return tomllib.loads(path.read_text())


class TestCanHandle:
    """Tests for PyprojectHandler.can_handle()."""

    def test_matches_manifest_name(self):
        """pyproject.toml is handled in any directory."""
        handler = PyprojectHandler()

        assert handler.can_handle("pyproject.toml")
        assert handler.can_handle("backend/pyproject.toml")
        assert not handler.can_handle("Cargo.toml")

    def test_rejects_names_that_only_end_with_pyproject_toml(self):
        """Only a file named exactly pyproject.toml is a manifest."""
        handler = PyprojectHandler()

        assert not handler.can_handle("my-pyproject.toml")
        assert not handler.can_handle("tools/legacy_pyproject.toml")


class TestRead:
    """Tests for PyprojectHandler.read()."""

    def test_pep621_version(self, tmp_path: Path):
        """The [project] version is read."""
        write_pyproject(tmp_path, '[project]\nname = "x"\nversion = "1.2.3"\n')
        assert PyprojectHandler().read("pyproject.toml", tmp_path) == "1.2.3"

    def test_poetry_version(self, tmp_path: Path):
        """The [tool.poetry] version is read."""
        write_pyproject(tmp_path, '[tool.poetry]\nname = "x"\nversion = "0.4.0"\n')
        assert PyprojectHandler().read("pyproject.toml", tmp_path) == "0.4.0"

    def test_setuptools_version(self, tmp_path: Path):
        """The [tool.setuptools] version is read."""
        write_pyproject(tmp_path, '[tool.setuptools]\nversion = "3.0.0"\n')
        assert PyprojectHandler().read("pyproject.toml", tmp_path) == "3.0.0"

    def test_project_takes_priority_over_poetry(self, tmp_path: Path):
        """[project] wins over [tool.poetry]."""
        write_pyproject(
            tmp_path,
            '[project]\nversion = "1.0.0"\n\n[tool.poetry]\nversion = "2.0.0"\n',
        )
        assert PyprojectHandler().read("pyproject.toml", tmp_path) == "1.0.0"

    def test_poetry_takes_priority_over_setuptools(self, tmp_path: Path):
        """[tool.poetry] wins over [tool.setuptools]."""
        write_pyproject(
            tmp_path,
            '[tool.setuptools]\nversion = "3.0.0"\n\n[tool.poetry]\nversion = "2.0.0"\n',
        )
        assert PyprojectHandler().read("pyproject.toml", tmp_path) == "2.0.0"

    def test_dynamic_version_is_unreadable(self, tmp_path: Path):
        """A dynamic version is not reported even if a literal one exists."""
        write_pyproject(
            tmp_path,
            '[project]\nname = "x"\nversion = "1.0.0"\ndynamic = ["version"]\n',
        )
        assert PyprojectHandler().read("pyproject.toml", tmp_path) is None

    def test_dynamic_other_fields_do_not_matter(self, tmp_path: Path):
        """Only a dynamic version blocks reading."""
        write_pyproject(tmp_path, '[project]\nversion = "1.0.0"\ndynamic = ["readme"]\n')
        assert PyprojectHandler().read("pyproject.toml", tmp_path) == "1.0.0"

    def test_no_version_anywhere(self, tmp_path: Path):
        """A file without a version has none."""
        write_pyproject(tmp_path, '[project]\nname = "x"\n\n[tool.ruff]\nline-length = 100\n')
        assert PyprojectHandler().read("pyproject.toml", tmp_path) is None

    def test_missing_file(self, tmp_path: Path):
        """A missing file has no version."""
        assert PyprojectHandler().read("pyproject.toml", tmp_path) is None

    def test_invalid_toml_raises(self, tmp_path: Path):
        """Malformed TOML is an error."""
        write_pyproject(tmp_path, "[project\nversion = ")
        with pytest.raises(VersionFileError, match="Invalid TOML"):
            PyprojectHandler().read("pyproject.toml", tmp_path)


class TestWrite:
    """Tests for PyprojectHandler.write()."""

    def test_updates_project_version(self, tmp_path: Path):
        """The [project] version is replaced in place."""
        path = write_pyproject(tmp_path, '[project]\nname = "x"\nversion = "1.0.0"\n')

        PyprojectHandler().write("pyproject.toml", "1.1.0", tmp_path)

        assert load(path)["project"]["version"] == "1.1.0"

    def test_preserves_comments_and_formatting(self, tmp_path: Path):
        content = """\
# Project metadata
[project]
name = "x"  # distribution name
version = "1.0.0"
dependencies = [
    "requests>=2",
]

[tool.ruff]
line-length = 100
"""
        path = write_pyproject(tmp_path, content)

        PyprojectHandler().write("pyproject.toml", "2.0.0", tmp_path)

        assert path.read_text() == content.replace('"1.0.0"', '"2.0.0"')

    def test_updates_poetry_version(self, tmp_path: Path):
        """The [tool.poetry] version is replaced in place."""
        path = write_pyproject(
            tmp_path,
            '[tool.poetry]\nname = "x"\nversion = "0.1.0"\n\n[tool.poetry.dependencies]\npython = "^3.11"\n',
        )

        PyprojectHandler().write("pyproject.toml", "0.2.0", tmp_path)

        data = load(path)
        assert data["tool"]["poetry"]["version"] == "0.2.0"
        assert data["tool"]["poetry"]["dependencies"] == {"python": "^3.11"}
        assert "project" not in data

    def test_poetry_wins_over_setuptools_on_write(self, tmp_path: Path):
        """Writes go to the same location reads come from."""
        path = write_pyproject(
            tmp_path,
            '[tool.setuptools]\nversion = "1.0.0"\n\n[tool.poetry]\nversion = "1.0.0"\n',
        )

        PyprojectHandler().write("pyproject.toml", "1.5.0", tmp_path)

        data = load(path)
        assert data["tool"]["poetry"]["version"] == "1.5.0"
        assert data["tool"]["setuptools"]["version"] == "1.0.0"

    def test_updates_setuptools_version(self, tmp_path: Path):
        """The [tool.setuptools] version is replaced in place."""
        path = write_pyproject(tmp_path, '[tool.setuptools]\nversion = "1.0.0"\n')

        PyprojectHandler().write("pyproject.toml", "1.0.1", tmp_path)

        assert load(path)["tool"]["setuptools"]["version"] == "1.0.1"

    def test_creates_version_in_existing_project_table(self, tmp_path: Path):
        """A version is added to an existing [project] table."""
        path = write_pyproject(tmp_path, '[project]\nname = "x"\n')

        PyprojectHandler().write("pyproject.toml", "0.1.0", tmp_path)

        assert load(path)["project"] == {"name": "x", "version": "0.1.0"}

    def test_creates_project_table(self, tmp_path: Path):
        """A [project] table is created when none exists."""
        path = write_pyproject(tmp_path, '[tool.ruff]\nline-length = 100\n')

        PyprojectHandler().write("pyproject.toml", "0.1.0", tmp_path)

        data = load(path)
        assert data["project"]["version"] == "0.1.0"
        assert data["tool"]["ruff"]["line-length"] == 100

    def test_dynamic_version_refuses_write(self, tmp_path: Path):
        """A dynamic version cannot be written."""
        content = '[project]\nname = "x"\nversion = "1.0.0"\ndynamic = ["version"]\n'
        path = write_pyproject(tmp_path, content)

        with pytest.raises(DynamicVersionError, match="dynamic"):
            PyprojectHandler().write("pyproject.toml", "2.0.0", tmp_path)

        assert path.read_text() == content

    def test_missing_file_raises(self, tmp_path: Path):
        """Writing a missing file is an error."""
        with pytest.raises(VersionFileError, match="File not found"):
            PyprojectHandler().write("pyproject.toml", "1.0.0", tmp_path)

"""Unit coverage for the project version helper."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path

import pytest

from ethiosalary.backend.version import (
    PYPROJECT_PATH,
    get_project_version,
    read_version_from_pyproject,
)


def test_pyproject_declares_a_version() -> None:
    assert read_version_from_pyproject(PYPROJECT_PATH)


def test_get_project_version_prefers_installed_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    get_project_version.cache_clear()
    monkeypatch.setattr(metadata, "version", lambda package: "9.9.9")

    assert get_project_version() == "9.9.9"
    get_project_version.cache_clear()


def test_get_project_version_falls_back_to_pyproject(monkeypatch: pytest.MonkeyPatch) -> None:
    get_project_version.cache_clear()

    def raise_package_not_found(_: str) -> str:
        raise metadata.PackageNotFoundError

    monkeypatch.setattr(metadata, "version", raise_package_not_found)

    assert get_project_version() == read_version_from_pyproject(PYPROJECT_PATH)
    get_project_version.cache_clear()


def test_version_is_read_from_project_table_only(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(
        '[tool.other]\nversion = "0.0.1"\n\n[project]\nname = "x"\nversion = "2.3.4"\n',
        encoding="utf-8",
    )

    assert read_version_from_pyproject(pyproject) == "2.3.4"


def test_missing_version_raises(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "x"\n', encoding="utf-8")

    with pytest.raises(RuntimeError):
        read_version_from_pyproject(pyproject)

"""Expose the installed project version to the API and health checks."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "ethiosalary"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_VERSION_LINE = re.compile(r'^version\s*=\s*["\']([^"\']+)["\']\s*$')


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the packaged version, falling back to ``pyproject.toml`` when needed."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return read_version_from_pyproject(PYPROJECT_PATH)


def read_version_from_pyproject(path: Path) -> str:
    """Return ``[project].version`` from the pyproject file at ``path``.

    Used for source checkouts where the distribution metadata is not
    installed (tests run against ``src`` on ``sys.path``).
    """

    if not path.exists():
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    in_project = False
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("["):
            in_project = line == "[project]"
            continue
        if not in_project:
            continue
        match = _VERSION_LINE.match(line)
        if match:
            return match.group(1)

    raise RuntimeError(f"No [project] version declared in {path.name}")


__all__ = ["PACKAGE_NAME", "get_project_version", "read_version_from_pyproject"]

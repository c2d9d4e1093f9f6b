#!/usr/bin/env python3
"""Check that every locale catalogue defines the keys the backend renders."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import yaml

REPO_ROOT = Path(__file__).resolve().parents[1]
TRANSLATIONS_DIR = REPO_ROOT / "src" / "ethiosalary" / "translations"
PAYROLL_CONFIG = REPO_ROOT / "src" / "ethiosalary" / "backend" / "config" / "data" / "payroll.yaml"

REQUIRED_PREFIXES = ("summary.", "earnings.", "deductions.", "payslip.", "email.")


class ValidationError(Exception):
    """Raised when a catalogue cannot be read."""


def _flatten(tree: dict, prefix: str = "") -> dict[str, str]:
    items: dict[str, str] = {}
    for key, value in tree.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            items.update(_flatten(value, path))
        else:
            items[path] = "" if value is None else str(value)
    return items


def _load_catalogues() -> dict[str, dict[str, dict[str, str]]]:
    catalogues: dict[str, dict[str, dict[str, str]]] = {}
    for path in sorted(TRANSLATIONS_DIR.glob("*.json")):
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        backend = payload.get("backend") or {}
        frontend = payload.get("frontend") or {}
        if not isinstance(backend, dict) or not isinstance(frontend, dict):
            raise ValidationError(f"Catalogue must define backend/frontend mappings: {path}")
        catalogues[path.stem] = {"backend": backend, "frontend": _flatten(frontend)}

    if not catalogues:
        raise ValidationError(f"No translation catalogues found in {TRANSLATIONS_DIR}")
    return catalogues


def _missing_keys(catalogues: dict[str, dict[str, dict[str, str]]], base_locale: str) -> list[str]:
    issues: list[str] = []
    base = catalogues[base_locale]
    for section in ("backend", "frontend"):
        expected = set(base[section])
        for locale, payload in catalogues.items():
            missing = expected - set(payload[section])
            if missing:
                issues.append(
                    f"Locale '{locale}' missing {len(missing)} {section} keys: "
                    f"{', '.join(sorted(missing))}"
                )
    return issues


def _bracket_issues(catalogues: dict[str, dict[str, dict[str, str]]]) -> list[str]:
    with PAYROLL_CONFIG.open("r", encoding="utf-8") as handle:
        config = yaml.safe_load(handle) or {}
    count = len(config.get("tax_brackets") or [])

    issues: list[str] = []
    for locale, payload in catalogues.items():
        for index in range(count):
            if f"brackets.{index}" not in payload["backend"]:
                issues.append(f"Locale '{locale}' has no label for brackets.{index}")
        extra = [
            key
            for key in payload["backend"]
            if key.startswith("brackets.") and not key[len("brackets."):].isdigit()
        ]
        for key in extra:
            issues.append(f"Locale '{locale}' has malformed bracket key '{key}'")
    return issues


def _prefix_issues(catalogues: dict[str, dict[str, dict[str, str]]], base_locale: str) -> list[str]:
    base_keys = catalogues[base_locale]["backend"]
    return [
        f"Base locale '{base_locale}' defines no '{prefix}*' keys"
        for prefix in REQUIRED_PREFIXES
        if not any(key.startswith(prefix) for key in base_keys)
    ]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-locale", default="en", help="Locale every other catalogue must match")
    args = parser.parse_args(argv)

    catalogues = _load_catalogues()
    if args.base_locale not in catalogues:
        print(f"[error] Base locale '{args.base_locale}' not found")
        return 1

    issues = {
        "missing": _missing_keys(catalogues, args.base_locale),
        "brackets": _bracket_issues(catalogues),
        "sections": _prefix_issues(catalogues, args.base_locale),
    }

    for kind, entries in issues.items():
        for issue in entries:
            print(f"[{kind}] {issue}")

    if any(issues.values()):
        return 1

    print(f"Checked {len(catalogues)} catalogues: {', '.join(sorted(catalogues))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

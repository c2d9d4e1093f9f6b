"""Translation catalogue helpers backed by the bundled JSON string pairs."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import cache
from importlib import resources
from typing import Any, Mapping

from werkzeug.datastructures import Accept, LanguageAccept
from werkzeug.http import parse_accept_header

_BASE_LOCALE = "en"
_TRANSLATIONS_PACKAGE = "ethiosalary.translations"

# Common spellings clients send instead of ISO 639-1 codes.
_LOCALE_ALIASES = {
    "amh": "am",
    "amharic": "am",
    "eng": "en",
    "english": "en",
}


@dataclass(frozen=True)
class Translator:
    """Callable helper for retrieving localized strings."""

    locale: str
    _messages: Mapping[str, str]
    _fallback: Mapping[str, str]

    def __call__(self, key: str) -> str:
        return self._messages.get(key) or self._fallback.get(key, key)

    def get(self, key: str, default: str) -> str:
        """Return the message for ``key`` or ``default`` when no catalogue defines it."""

        return self._messages.get(key) or self._fallback.get(key) or default


@dataclass(frozen=True)
class Catalogue:
    """Representation of a locale catalogue backed by the shared resources."""

    locale: str
    backend: Mapping[str, str]
    frontend: Mapping[str, Any]


@cache
def _available_locales() -> tuple[str, ...]:
    """Return the set of locales with published translation payloads."""

    root = resources.files(_TRANSLATIONS_PACKAGE)
    locales = sorted(
        entry.name.rsplit(".", 1)[0]
        for entry in root.iterdir()
        if entry.name.endswith(".json")
    )
    return tuple(locales) or (_BASE_LOCALE,)


@cache
def _read_catalogue_payload(locale: str) -> dict[str, Any]:
    """Load the raw translation payload for the requested locale."""

    resource = resources.files(_TRANSLATIONS_PACKAGE).joinpath(f"{locale}.json")
    if not resource.is_file():
        return {"backend": {}, "frontend": {}}

    with resource.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    backend = payload.get("backend") or {}
    frontend = payload.get("frontend") or {}
    if not isinstance(backend, dict):
        raise ValueError(f"Translation catalogue '{locale}' has a malformed backend section")
    if not isinstance(frontend, dict):
        raise ValueError(f"Translation catalogue '{locale}' has a malformed frontend section")

    return {"backend": backend, "frontend": frontend}


@cache
def _load_catalogue(locale: str) -> Catalogue:
    """Return a cached catalogue representation for the locale."""

    payload = _read_catalogue_payload(locale)
    backend = {key: str(value) for key, value in payload["backend"].items()}
    return Catalogue(locale=locale, backend=backend, frontend=payload["frontend"])


def _primary_tag(tag: str) -> str:
    primary = tag.strip().lower().replace("_", "-").split("-")[0]
    return _LOCALE_ALIASES.get(primary, primary)


def normalise_locale(locale: str | None) -> str:
    """Normalise requested locale (``am-ET``, ``am_ET``, ``Amharic``) to a catalogue key."""

    if not locale:
        return _BASE_LOCALE

    primary = _primary_tag(locale)
    return primary if primary in _available_locales() else _BASE_LOCALE


def locale_from_accept_language(header: str | LanguageAccept | None) -> str | None:
    """Return the highest-weighted supported locale from an ``Accept-Language`` header.

    ``header`` may be the raw value or ``request.accept_languages``. Regional
    tags count towards their primary language; wildcards and ``q=0`` entries
    never select a locale.
    """

    if not header:
        return None

    languages = (
        header
        if isinstance(header, LanguageAccept)
        else parse_accept_header(header, LanguageAccept)
    )
    accepted = Accept(
        [(_primary_tag(value), quality) for value, quality in languages if value != "*"]
    )
    supported = [value for value, _ in accepted if value in _available_locales()]
    return accepted.best_match(supported)


def get_translator(locale: str | None = None) -> Translator:
    """Return a translator instance for the requested locale."""

    normalized = normalise_locale(locale)
    catalogue = _load_catalogue(normalized)
    fallback = _load_catalogue(_BASE_LOCALE)

    return Translator(
        locale=catalogue.locale,
        _messages=catalogue.backend,
        _fallback=fallback.backend,
    )


def load_translations(locale: str | None = None) -> dict[str, Any]:
    """Expose combined backend/frontend translations for API consumers."""

    normalized = normalise_locale(locale)
    catalogue = _load_catalogue(normalized)
    fallback = _load_catalogue(_BASE_LOCALE)

    return {
        "locale": normalized,
        "available_locales": list(_available_locales()),
        "backend": dict(catalogue.backend),
        "frontend": catalogue.frontend,
        "fallback": {
            "locale": _BASE_LOCALE,
            "backend": dict(fallback.backend),
            "frontend": fallback.frontend,
        },
    }


__all__ = [
    "Translator",
    "Catalogue",
    "get_translator",
    "load_translations",
    "locale_from_accept_language",
    "normalise_locale",
]

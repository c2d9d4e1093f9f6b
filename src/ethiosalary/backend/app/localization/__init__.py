"""Shared translation helpers bridging backend services and static catalogues."""

from .catalog import (
    Translator,
    get_translator,
    load_translations,
    locale_from_accept_language,
    normalise_locale,
)

__all__ = [
    "Translator",
    "get_translator",
    "load_translations",
    "locale_from_accept_language",
    "normalise_locale",
]

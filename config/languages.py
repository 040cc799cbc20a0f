"""Languages supported by the GConnect UI and chat assistant.

The UI ships English and Hindi text; the assistant additionally answers
in Hinglish (Hindi written in Latin script) when the user writes that way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

__all__ = [
    "DEFAULT_LOCALE",
    "LANGUAGES",
    "LanguageConfig",
    "get_language",
    "get_ui_locales",
    "normalize_locale",
]


@dataclass(frozen=True, slots=True)
class LanguageConfig:
    """Immutable descriptor for a single supported language."""

    code: str
    name_english: str
    name_native: str
    script: str
    has_ui_translations: bool
    """Whether the static UI text table covers this language."""


LANGUAGES: Final[dict[str, LanguageConfig]] = {
    "en": LanguageConfig(
        code="en",
        name_english="English",
        name_native="English",
        script="Latin",
        has_ui_translations=True,
    ),
    "hi": LanguageConfig(
        code="hi",
        name_english="Hindi",
        name_native="हिन्दी",
        script="Devanagari",
        has_ui_translations=True,
    ),
    "hinglish": LanguageConfig(
        code="hinglish",
        name_english="Hinglish",
        name_native="Hinglish",
        script="Latin",
        has_ui_translations=False,
    ),
}

DEFAULT_LOCALE: Final[str] = "en"


def get_language(code: str) -> LanguageConfig | None:
    """Look up a language by code (case-insensitive)."""
    return LANGUAGES.get(code.strip().lower())


def get_ui_locales() -> list[str]:
    """Codes of languages with a static UI text table."""
    return [lang.code for lang in LANGUAGES.values() if lang.has_ui_translations]


def normalize_locale(code: str | None) -> str:
    """Map *code* to a UI locale, falling back to English.

    Regional tags such as ``hi-IN`` resolve to their base language.
    """
    if not code:
        return DEFAULT_LOCALE
    base = code.strip().lower().replace("_", "-").split("-")[0]
    lang = get_language(base)
    if lang is None or not lang.has_ui_translations:
        return DEFAULT_LOCALE
    return lang.code

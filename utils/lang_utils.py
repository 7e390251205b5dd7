from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__: list[str] = ["AUTO_LANGUAGE", "DEFAULT_LANGUAGE", "LangUtils"]

AUTO_LANGUAGE: Final[str] = "auto"
DEFAULT_LANGUAGE: Final[str] = "en"

# Provider codes that differ from the Google-style codes returned to callers.
_LANGUAGE_CODE_MAP: Final[dict[str, str]] = {
    "zh": "zh-CN",
    "zh-hans": "zh-CN",
    "zh-hant": "zh-TW",
    "en": "en",
    "en-us": "en",
    "en-gb": "en-GB",
    "pt": "pt",
    "pt-br": "pt",
}


class LangUtils:
    """Best-effort language helpers.

    The script heuristic only runs when the provider does not report a source language.
    It is deterministic and never fails: text without a recognised script is treated as English.
    """

    @staticmethod
    def is_auto(code: str | None) -> bool:
        """True when the code leaves the language undetermined (empty, blank or 'auto')."""
        return code is None or not code.strip() or code.strip().lower() == AUTO_LANGUAGE

    @staticmethod
    def normalize_language_code(code: str) -> str:
        """Normalise a provider language code to the Google-style form.

        Regional variants collapse to the form clients expect (e.g. 'EN-US' -> 'en', 'zh-Hans' -> 'zh-CN').
        Codes without a mapping are returned lower-cased.

        Args:
            code (str): Raw language code.

        Returns:
            str: Normalised language code, or an empty string for empty input.
        """
        code = code.strip().lower()
        return _LANGUAGE_CODE_MAP.get(code, code)

    @staticmethod
    def detect_language(text: str, requested: str = "") -> str:
        """Guess the language of the text.

        Args:
            text (str): Text to inspect.
            requested (str): Language asked for by the caller. Used as-is (normalised) unless
                it is empty or 'auto'.

        Returns:
            str: A language code. 'en' when no known script is found.
        """
        if not LangUtils.is_auto(requested):
            return LangUtils.normalize_language_code(requested)

        for char in text:
            if LangUtils.is_cjk(char):
                return "zh-CN"
            if LangUtils.is_cyrillic(char):
                return "ru"
            if LangUtils.is_japanese(char):
                return "ja"
            if LangUtils.is_korean(char):
                return "ko"

        return DEFAULT_LANGUAGE

    @staticmethod
    def is_cjk(char: str) -> bool:
        code: int = ord(char)
        return 0x4E00 <= code <= 0x9FFF or 0x3400 <= code <= 0x4DBF or 0x20000 <= code <= 0x2A6DF

    @staticmethod
    def is_cyrillic(char: str) -> bool:
        return 0x0400 <= ord(char) <= 0x04FF

    @staticmethod
    def is_japanese(char: str) -> bool:
        # Hiragana and Katakana
        return 0x3040 <= ord(char) <= 0x30FF

    @staticmethod
    def is_korean(char: str) -> bool:
        # Hangul syllables
        return 0xAC00 <= ord(char) <= 0xD7AF

    @staticmethod
    def includes(values: Iterable[str], target: str) -> bool:
        return target in values

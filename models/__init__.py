"""Data models for the translation gateway.

This package contains dataclass definitions for configuration, translation requests and
outcomes, the canonical response schema and cached translation entries.
"""

from __future__ import annotations

from models.cache_models import CACHE_FORMAT_VERSION, CachedEntry, CachedEntryFormatError
from models.config_models import CacheSettings, Config, General, TranslationSettings
from models.response_models import (
    Alternative,
    AlternativeTranslation,
    CanonicalResponse,
    DictEntry,
    Dictionary,
    Example,
    Examples,
    LabelInfo,
    LanguageDetectionResult,
    Sentence,
    SpellCheck,
)
from models.translation_models import (
    DEFAULT_FIELDS,
    FIELD_ALIASES,
    FieldToken,
    TranslationOutcome,
    TranslationRequest,
    UpstreamPayload,
)

__all__: list[str] = [
    "CACHE_FORMAT_VERSION",
    "DEFAULT_FIELDS",
    "FIELD_ALIASES",
    "Alternative",
    "AlternativeTranslation",
    "CacheSettings",
    "CachedEntry",
    "CachedEntryFormatError",
    "CanonicalResponse",
    "Config",
    "DictEntry",
    "Dictionary",
    "Example",
    "Examples",
    "FieldToken",
    "General",
    "LabelInfo",
    "LanguageDetectionResult",
    "Sentence",
    "SpellCheck",
    "TranslationOutcome",
    "TranslationRequest",
    "TranslationSettings",
    "UpstreamPayload",
]

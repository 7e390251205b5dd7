"""Cache key derivation.

Keys have the form 'translate:{scope}:{digest}'. The scope is the lower-cased provider name, or
'shared' when translations are reused across providers. The digest covers the trimmed text and
the trimmed, lower-cased languages and model, so it does not depend on the requested fields.
"""

from __future__ import annotations

import hashlib
from typing import Final

__all__: list[str] = [
    "KEY_PREFIX",
    "SHARED_SERVICE_NAME",
    "CacheKeyGenerator",
    "generate_cache_key",
    "generate_shared_cache_key",
]

KEY_PREFIX: Final[str] = "translate"
SHARED_SERVICE_NAME: Final[str] = "shared"
_DIGEST_BYTES: Final[int] = 8


class CacheKeyGenerator:
    def __init__(self, share_across_services: bool = True) -> None:
        self.share_across_services: bool = share_across_services

    def generate(self, service: str, text: str, source_lang: str, target_lang: str, model: str = "") -> str:
        """Build the cache key for a translation.

        Args:
            service (str): Provider name. Ignored when keys are shared across providers.
            text (str): Text to translate.
            source_lang (str): Requested source language.
            target_lang (str): Target language.
            model (str): Model identifier.

        Returns:
            str: The cache key.
        """
        digest: str = self.compute_hash(text, source_lang, target_lang, model)
        scope: str = SHARED_SERVICE_NAME if self.share_across_services else service.lower()
        return f"{KEY_PREFIX}:{scope}:{digest}"

    @staticmethod
    def compute_hash(text: str, source_lang: str, target_lang: str, model: str = "") -> str:
        normalized: str = "|".join(
            (
                text.strip(),
                source_lang.strip().lower(),
                target_lang.strip().lower(),
                model.strip().lower(),
            )
        )
        return hashlib.sha256(normalized.encode("utf-8")).digest()[:_DIGEST_BYTES].hex()


def generate_cache_key(service: str, text: str, source_lang: str, target_lang: str, model: str = "") -> str:
    """Key scoped to one provider."""
    return CacheKeyGenerator(share_across_services=False).generate(service, text, source_lang, target_lang, model)


def generate_shared_cache_key(text: str, source_lang: str, target_lang: str, model: str = "") -> str:
    """Key shared by all providers."""
    return CacheKeyGenerator(share_across_services=True).generate("", text, source_lang, target_lang, model)

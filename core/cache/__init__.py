"""Translation cache package.

Provides the cache contract, its Redis binding, cache key derivation and the cache-aside
decorator for translation providers.
"""

from __future__ import annotations

from core.cache.cached_provider import CachedProviderSettings, CachedTranslationProvider
from core.cache.interface import CacheError, CacheInterface
from core.cache.key import CacheKeyGenerator

__all__: list[str] = [
    "CacheError",
    "CacheInterface",
    "CacheKeyGenerator",
    "CachedProviderSettings",
    "CachedTranslationProvider",
]

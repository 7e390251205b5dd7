"""Cache-aside decorator for translation providers.

Reads go to the cache first and are bounded by the caller's deadline. Misses are forwarded to
the wrapped provider, and successful results are written back on a detached task with its own
timeout, so neither a slow cache nor a cancelled caller delays or loses the response. Cache
failures of any kind are logged and behave like a miss.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from core.cache.interface import CacheError
from core.cache.key import CacheKeyGenerator
from core.trans.format_adapter import FormatAdapter
from core.trans.interface import TranslationProvider
from models.cache_models import CachedEntry, CachedEntryFormatError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from core.cache.interface import CacheInterface
    from models.config_models import CacheSettings
    from models.response_models import CanonicalResponse
    from models.translation_models import TranslationRequest

__all__: list[str] = ["CachedProviderSettings", "CachedTranslationProvider"]

DEFAULT_WRITE_TIMEOUT: Final[float] = 5.0
_KEY_LOG_LENGTH: Final[int] = 24


@dataclass(frozen=True)
class CachedProviderSettings:
    """Behaviour of the cache-aside decorator.

    Attributes:
        ttl (float): Entry lifetime in seconds. 0 keeps entries forever.
        enabled (bool): When False, every call goes straight to the wrapped provider.
        share_across_services (bool): Use the shared key scope instead of the provider name.
        write_timeout (float): Bound for one detached write. Non-positive uses 5 seconds.
    """

    ttl: float = 0.0
    enabled: bool = True
    share_across_services: bool = True
    write_timeout: float = DEFAULT_WRITE_TIMEOUT

    @classmethod
    def from_config(cls, settings: CacheSettings) -> CachedProviderSettings:
        return cls(
            ttl=settings.TTL,
            enabled=settings.ENABLED,
            share_across_services=settings.SHARE_ACROSS_SERVICES,
            write_timeout=settings.ASYNC_WRITE_TIMEOUT,
        )


class CachedTranslationProvider(TranslationProvider):
    """Wraps a provider with a cache-aside layer.

    Args:
        provider (TranslationProvider): Provider called on a miss.
        cache (CacheInterface | None): Cache to use. None disables caching.
        settings (CachedProviderSettings): Decorator settings.
        logger (logging.Logger | None): Logger for cache events. Defaults to the module logger.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        cache: CacheInterface | None,
        settings: CachedProviderSettings,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._provider: TranslationProvider = provider
        self._cache: CacheInterface | None = cache
        self._settings: CachedProviderSettings = settings
        self._write_timeout: float = settings.write_timeout if settings.write_timeout > 0 else DEFAULT_WRITE_TIMEOUT
        self._keys = CacheKeyGenerator(settings.share_across_services)
        self._logger: logging.Logger = logger if logger is not None else LoggerUtils.get_logger(__name__)
        self._pending_writes: set[asyncio.Task[None]] = set()

    @property
    def name(self) -> str:
        return f"cached-{self._provider.name}"

    @property
    def is_available(self) -> bool:
        return self._provider.is_available

    @property
    def default_model(self) -> str:
        return self._provider.default_model

    @property
    def caching(self) -> bool:
        return self._settings.enabled and self._cache is not None

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    async def translate(self, request: TranslationRequest, *, deadline: float | None = None) -> CanonicalResponse:
        return await self.translate_with_model(request, request.model, deadline=deadline)

    async def translate_with_model(
        self, request: TranslationRequest, model: str, *, deadline: float | None = None
    ) -> CanonicalResponse:
        """Serve a translation from the cache, or from the wrapped provider on a miss.

        A hit returns only the sentence pair, the alternatives and the language blocks. Entries are
        keyed on the model actually used, so an empty model resolves to the provider's default.

        Raises:
            TranslateExceptionError: Whatever the wrapped provider raises on a miss.
        """
        if self._cache is None or not self._settings.enabled:
            return await self._provider.translate_with_model(request, model, deadline=deadline)

        model = model or self._provider.default_model
        key: str = self._keys.generate(
            self._provider.name, request.text, request.source_lang, request.target_lang, model
        )

        entry: CachedEntry | None = await self._read(key, deadline)
        if entry is not None:
            self._logger.debug("Cache hit: %s (service=%s)", key[:_KEY_LOG_LENGTH], self._provider.name)
            return FormatAdapter.build_cached_response(entry)

        self._logger.debug("Cache miss, calling '%s': %s", self._provider.name, key[:_KEY_LOG_LENGTH])
        response: CanonicalResponse = await self._provider.translate_with_model(request, model, deadline=deadline)

        if response.degraded:
            self._logger.debug("Degraded response is not cached: %s", key[:_KEY_LOG_LENGTH])
            return response

        self._schedule_write(key, self._build_cached_entry(request, model, response))
        return response

    async def _read(self, key: str, deadline: float | None) -> CachedEntry | None:
        """Read and validate an entry. Every failure is reported as None."""
        if self._cache is None:
            return None

        try:
            async with asyncio.timeout_at(deadline):
                payload: bytes | None = await self._cache.get(key)
        except TimeoutError:
            self._logger.warning("Cache read timed out: %s", key[:_KEY_LOG_LENGTH])
            return None
        except CacheError as err:
            self._logger.warning("Cache read failed: %s (%s)", key[:_KEY_LOG_LENGTH], err)
            return None
        except Exception as err:  # noqa: BLE001
            self._logger.warning(
                "Cache read failed unexpectedly: %s (%s: %s)", key[:_KEY_LOG_LENGTH], type(err).__name__, err
            )
            return None

        if payload is None:
            return None

        try:
            entry: CachedEntry = CachedEntry.from_bytes(payload)
        except CachedEntryFormatError as err:
            self._logger.warning("Ignoring corrupted cache entry: %s (%s)", key[:_KEY_LOG_LENGTH], err)
            return None

        if not entry.is_current:
            self._logger.debug("Cache version mismatch (cached=%d), ignoring entry", entry.version)
            return None
        return entry

    def _build_cached_entry(self, request: TranslationRequest, model: str, response: CanonicalResponse) -> CachedEntry:
        translated: str = response.translated_text
        alternatives: tuple[str, ...] = tuple(
            candidate.word_postproc
            for block in response.alternative_translations
            for candidate in block.alternative
            if candidate.word_postproc and candidate.word_postproc != translated
        )
        return CachedEntry(
            original_text=request.text,
            source_lang=response.src or request.source_lang,
            target_lang=request.target_lang,
            translated_text=translated,
            service=self._provider.name,
            alternatives=alternatives,
            model=model,
            cached_at=CachedEntry.now_millis(),
        )

    def _schedule_write(self, key: str, entry: CachedEntry) -> None:
        """Write the entry on a detached task. The caller's cancellation does not reach it."""
        task: asyncio.Task[None] = asyncio.create_task(self._save(key, entry), name=f"cache-write:{key}")
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _save(self, key: str, entry: CachedEntry) -> None:
        if self._cache is None:
            return

        try:
            async with asyncio.timeout(self._write_timeout):
                await self._cache.set(key, entry.to_bytes(), self._settings.ttl)
        except TimeoutError:
            self._logger.warning("Cache write timed out after %.1fs: %s", self._write_timeout, key[:_KEY_LOG_LENGTH])
        except CacheError as err:
            self._logger.warning("Cache write failed: %s (%s)", key[:_KEY_LOG_LENGTH], err)
        except Exception as err:  # noqa: BLE001
            self._logger.warning(
                "Cache write failed unexpectedly: %s (%s: %s)", key[:_KEY_LOG_LENGTH], type(err).__name__, err
            )
        else:
            self._logger.debug(
                "Cache saved: %s (service=%s, ttl=%s)", key[:_KEY_LOG_LENGTH], entry.service, self._settings.ttl
            )

    async def wait_pending_writes(self) -> None:
        """Wait until every scheduled cache write has finished."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    async def close(self) -> None:
        """Flush pending writes, then close the cache and the wrapped provider."""
        await self.wait_pending_writes()
        if self._cache is not None:
            try:
                await self._cache.close()
            except CacheError as err:
                self._logger.warning("Failed to close the cache: %s", err)
        await self._provider.close()

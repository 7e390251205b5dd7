from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any

import pytest

from core.cache.cached_provider import CachedProviderSettings, CachedTranslationProvider
from core.cache.interface import CacheError, CacheInterface
from core.cache.key import CacheKeyGenerator
from core.trans.engines.deeplx_client import DeepLXClient
from core.trans.engines.deeplx_provider import DeepLXProvider
from core.trans.format_adapter import FormatAdapter
from core.trans.interface import TranslationProvider, TranslationUpstreamError
from handlers.async_comm import AsyncCommStatusError
from models.cache_models import CACHE_FORMAT_VERSION, CachedEntry
from models.config_models import CacheSettings, TranslationSettings
from models.response_models import CanonicalResponse
from models.translation_models import FieldToken, TranslationOutcome, TranslationRequest, UpstreamPayload


class MemoryCache(CacheInterface):
    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.set_calls: list[tuple[str, float]] = []
        self.get_error: BaseException | None = None
        self.set_error: BaseException | None = None
        self.get_delay: float = 0.0
        self.set_delay: float = 0.0
        self.closed = False

    async def get(self, key: str) -> bytes | None:
        if self.get_delay:
            await asyncio.sleep(self.get_delay)
        if self.get_error is not None:
            raise self.get_error
        return self.data.get(key)

    async def set(self, key: str, value: bytes, ttl: float = 0.0) -> None:
        if self.set_delay:
            await asyncio.sleep(self.set_delay)
        if self.set_error is not None:
            raise self.set_error
        self.set_calls.append((key, ttl))
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    async def ping(self) -> None:
        pass

    async def close(self) -> None:
        self.closed = True


class DummyProvider(TranslationProvider):
    """Counts calls and answers with a fixed translation."""

    def __init__(
        self, translated: str = "Hallo", *, alternatives: list[str] | None = None, default_model: str = ""
    ) -> None:
        self.translated = translated
        self.model = default_model
        self.alternatives = alternatives or []
        self.calls: list[dict[str, Any]] = []
        self.error: Exception | None = None
        self.degraded = False
        self.closed = False

    @property
    def name(self) -> str:
        return "Dummy"

    @property
    def default_model(self) -> str:
        return self.model

    @property
    def is_available(self) -> bool:
        return not self.closed

    async def translate(self, request: TranslationRequest, *, deadline: float | None = None) -> CanonicalResponse:
        return await self.translate_with_model(request, request.model, deadline=deadline)

    async def translate_with_model(
        self, request: TranslationRequest, model: str, *, deadline: float | None = None
    ) -> CanonicalResponse:
        self.calls.append({"text": request.text, "model": model, "deadline": deadline})
        if self.error is not None:
            raise self.error
        if self.degraded:
            return FormatAdapter.build_degraded_response(request.text, request.source_lang)
        outcome = TranslationOutcome(
            success=True,
            translated_text=self.translated,
            source_lang="EN",
            raw=UpstreamPayload(data=self.translated, source_lang="EN", alternatives=self.alternatives),
        )
        return FormatAdapter.build_response(request.text, outcome, request.fields)

    async def close(self) -> None:
        self.closed = True


def _gateway(
    provider: TranslationProvider | None = None,
    cache: MemoryCache | None = None,
    **settings: Any,
) -> tuple[CachedTranslationProvider, DummyProvider | TranslationProvider, MemoryCache]:
    inner = provider if provider is not None else DummyProvider()
    memory = cache if cache is not None else MemoryCache()
    return CachedTranslationProvider(inner, memory, CachedProviderSettings(**settings)), inner, memory


def _request(text: str = "Hello", **kwargs: Any) -> TranslationRequest:
    return TranslationRequest(text=text, target_lang="de", source_lang="en", **kwargs)


@pytest.mark.asyncio
async def test_second_identical_request_is_served_from_cache() -> None:
    gateway, inner, cache = _gateway(ttl=30.0)

    first = await gateway.translate(_request())
    await gateway.wait_pending_writes()
    second = await gateway.translate(_request())

    assert len(inner.calls) == 1
    assert len(cache.set_calls) == 1
    assert cache.set_calls[0][1] == 30.0
    assert second == first
    assert second.translated_text == "Hallo"


@pytest.mark.asyncio
async def test_stored_entry_round_trips() -> None:
    gateway, _, cache = _gateway(share_across_services=False)

    await gateway.translate(_request(model="gpt-4"))
    await gateway.wait_pending_writes()

    key: str = CacheKeyGenerator(share_across_services=False).generate("Dummy", "Hello", "en", "de", "gpt-4")
    entry: CachedEntry = CachedEntry.from_bytes(cache.data[key])
    assert entry.original_text == "Hello"
    assert entry.translated_text == "Hallo"
    assert entry.source_lang == "en"
    assert entry.target_lang == "de"
    assert entry.service == "Dummy"
    assert entry.model == "gpt-4"
    assert entry.version == CACHE_FORMAT_VERSION
    assert entry.cached_at > 0


@pytest.mark.asyncio
async def test_alternatives_are_cached_without_primary() -> None:
    gateway, inner, cache = _gateway(DummyProvider(alternatives=["Servus", "Moin"]))
    request: TranslationRequest = _request(fields=frozenset({FieldToken.TRANSLATE, FieldToken.DICTIONARY}))

    fresh = await gateway.translate(request)
    await gateway.wait_pending_writes()
    cached = await gateway.translate(request)

    entry: CachedEntry = CachedEntry.from_bytes(next(iter(cache.data.values())))
    assert entry.alternatives == ("Servus", "Moin")
    assert fresh.dict
    assert cached.dict == []
    assert [a.word_postproc for a in cached.alternative_translations[0].alternative] == ["Servus", "Moin"]
    assert len(inner.calls) == 1


@pytest.mark.asyncio
async def test_version_mismatch_is_a_miss() -> None:
    gateway, inner, cache = _gateway()

    await gateway.translate(_request())
    await gateway.wait_pending_writes()

    key: str = next(iter(cache.data))
    stored: dict[str, Any] = json.loads(cache.data[key])
    stored["version"] = 999_999
    cache.data[key] = json.dumps(stored).encode()

    await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert len(inner.calls) == 2


@pytest.mark.asyncio
async def test_corrupted_entry_is_a_miss() -> None:
    gateway, inner, cache = _gateway()
    key: str = CacheKeyGenerator().generate("Dummy", "Hello", "en", "de")
    cache.data[key] = b"{not json"

    response = await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert response.translated_text == "Hallo"
    assert len(inner.calls) == 1


@pytest.mark.asyncio
async def test_cache_read_error_falls_through(caplog: pytest.LogCaptureFixture) -> None:
    gateway, inner, cache = _gateway()
    cache.get_error = CacheError("redis get failed: connection refused")
    caplog.set_level(logging.WARNING)

    response = await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert response.translated_text == "Hallo"
    assert len(inner.calls) == 1
    assert any("Cache read failed" in rec.getMessage() for rec in caplog.records)


@pytest.mark.asyncio
async def test_unexpected_read_error_is_a_miss(caplog: pytest.LogCaptureFixture) -> None:
    gateway, inner, cache = _gateway()
    cache.get_error = ConnectionError("socket closed")
    caplog.set_level(logging.WARNING)

    response = await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert response.translated_text == "Hallo"
    assert len(inner.calls) == 1
    assert any("ConnectionError" in rec.getMessage() for rec in caplog.records)


@pytest.mark.asyncio
async def test_cache_read_is_bounded_by_deadline() -> None:
    gateway, inner, cache = _gateway()
    cache.get_delay = 1.0
    deadline: float = asyncio.get_running_loop().time() + 0.05

    response = await gateway.translate(_request(), deadline=deadline)
    await gateway.wait_pending_writes()

    assert response.translated_text == "Hallo"
    assert inner.calls[0]["deadline"] == deadline


@pytest.mark.asyncio
async def test_upstream_failure_is_not_cached() -> None:
    server_error = AsyncCommStatusError("HTTP 500", status=500, body="boom")

    class FailingHttp:
        def __init__(self) -> None:
            self.calls = 0

        async def post(self, *, url: str, data: Any, total_timeout: float = 10.0) -> Any:
            self.calls += 1
            raise server_error

        async def close(self) -> None:
            pass

    http = FailingHttp()
    settings = TranslationSettings(API_KEY="sk-test", MAX_RETRIES=2, RETRY_STEP=0.001)
    client = DeepLXClient(settings, http)  # type: ignore[arg-type]
    gateway, _, cache = _gateway(DeepLXProvider(client))

    with pytest.raises(TranslationUpstreamError):
        await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert http.calls == 3
    assert cache.data == {}
    assert gateway.pending_writes == 0


@pytest.mark.asyncio
async def test_degraded_response_is_not_cached() -> None:
    inner = DummyProvider()
    inner.degraded = True
    gateway, _, cache = _gateway(inner)

    response = await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert response.degraded is True
    assert cache.data == {}


@pytest.mark.asyncio
async def test_write_failure_does_not_affect_caller(caplog: pytest.LogCaptureFixture) -> None:
    gateway, _, cache = _gateway()
    cache.set_error = CacheError("redis set failed: read only replica")
    caplog.set_level(logging.WARNING)

    response = await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert response.translated_text == "Hallo"
    assert any("Cache write failed" in rec.getMessage() for rec in caplog.records)


@pytest.mark.asyncio
async def test_unexpected_write_error_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    gateway, _, cache = _gateway()
    cache.set_error = ConnectionError("socket closed")
    caplog.set_level(logging.WARNING)

    response = await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert response.translated_text == "Hallo"
    assert cache.data == {}
    assert gateway.pending_writes == 0
    assert any(
        "Cache write failed" in rec.getMessage() and "ConnectionError" in rec.getMessage() for rec in caplog.records
    )


@pytest.mark.asyncio
async def test_slow_write_is_bounded_by_write_timeout(caplog: pytest.LogCaptureFixture) -> None:
    gateway, _, cache = _gateway(write_timeout=0.01)
    cache.set_delay = 1.0
    caplog.set_level(logging.WARNING)

    await gateway.translate(_request())
    assert gateway.pending_writes == 1
    await gateway.wait_pending_writes()

    assert gateway.pending_writes == 0
    assert cache.data == {}
    assert any("Cache write timed out" in rec.getMessage() for rec in caplog.records)


@pytest.mark.asyncio
async def test_write_survives_caller_cancellation() -> None:
    gateway, _, cache = _gateway()
    cache.set_delay = 0.05

    async def caller() -> None:
        await gateway.translate(_request())
        await asyncio.sleep(10)

    task: asyncio.Task[None] = asyncio.create_task(caller())
    await asyncio.sleep(0.01)
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
    assert gateway.pending_writes == 1
    await gateway.wait_pending_writes()

    assert len(cache.data) == 1


@pytest.mark.asyncio
async def test_disabled_cache_passes_through() -> None:
    gateway, inner, cache = _gateway(enabled=False)

    await gateway.translate(_request())
    await gateway.translate(_request())

    assert gateway.caching is False
    assert len(inner.calls) == 2
    assert cache.data == {}


@pytest.mark.asyncio
async def test_missing_cache_passes_through() -> None:
    inner = DummyProvider()
    gateway = CachedTranslationProvider(inner, None, CachedProviderSettings())

    await gateway.translate(_request())

    assert gateway.caching is False
    assert len(inner.calls) == 1


@pytest.mark.asyncio
async def test_shared_keys_are_reused_across_providers() -> None:
    cache = MemoryCache()
    first, _, _ = _gateway(DummyProvider("Hallo"), cache)
    second_inner = DummyProvider("Servus")
    second = CachedTranslationProvider(second_inner, cache, CachedProviderSettings(share_across_services=True))

    await first.translate(_request())
    await first.wait_pending_writes()
    response = await second.translate(_request())

    assert response.translated_text == "Hallo"
    assert second_inner.calls == []


@pytest.mark.asyncio
async def test_empty_model_is_keyed_on_provider_default() -> None:
    gateway, inner, cache = _gateway(DummyProvider(default_model="model-a"), share_across_services=False)

    await gateway.translate(_request())
    await gateway.wait_pending_writes()

    key: str = CacheKeyGenerator(share_across_services=False).generate("Dummy", "Hello", "en", "de", "model-a")
    assert CachedEntry.from_bytes(cache.data[key]).model == "model-a"
    assert inner.calls[0]["model"] == "model-a"


@pytest.mark.asyncio
async def test_changing_default_model_misses_the_cache() -> None:
    inner = DummyProvider(default_model="model-a")
    gateway, _, _ = _gateway(inner)

    await gateway.translate(_request())
    await gateway.wait_pending_writes()
    inner.model = "model-b"
    await gateway.translate(_request())
    await gateway.wait_pending_writes()
    await gateway.translate(_request(model="model-a"))

    assert [call["model"] for call in inner.calls] == ["model-a", "model-b"]
    assert gateway.default_model == "model-b"


def test_name_and_availability_delegate() -> None:
    gateway, inner, _ = _gateway()

    assert gateway.name == "cached-Dummy"
    assert gateway.is_available is True
    assert inner.is_available is True


def test_settings_from_config() -> None:
    settings = CachedProviderSettings.from_config(
        CacheSettings(ENABLED=True, TTL=12.0, SHARE_ACROSS_SERVICES=False, ASYNC_WRITE_TIMEOUT=2.0)
    )

    assert settings == CachedProviderSettings(ttl=12.0, enabled=True, share_across_services=False, write_timeout=2.0)


@pytest.mark.asyncio
async def test_close_flushes_writes_and_closes_everything() -> None:
    gateway, inner, cache = _gateway()
    cache.set_delay = 0.01

    await gateway.translate(_request())
    await gateway.close()

    assert len(cache.data) == 1
    assert cache.closed is True
    assert inner.closed is True
    assert gateway.is_available is False


@pytest.mark.asyncio
async def test_custom_logger_receives_cache_events(caplog: pytest.LogCaptureFixture) -> None:
    custom: logging.Logger = logging.getLogger("cache-events")
    cache = MemoryCache()
    cache.get_error = CacheError("boom")
    gateway = CachedTranslationProvider(DummyProvider(), cache, CachedProviderSettings(), logger=custom)
    caplog.set_level(logging.WARNING, logger="cache-events")

    await gateway.translate(_request())
    await gateway.wait_pending_writes()

    assert any(rec.name == "cache-events" for rec in caplog.records)

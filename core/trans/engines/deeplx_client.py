"""Retrying HTTP client for the DeepLX translation endpoint.

The client never raises for upstream failures: every call ends in a TranslationOutcome that
either carries the translation or the last observed error, flagged as cancelled or retryable
so that providers can decide how to surface it.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any, Final

from core.trans.interface import ProviderConfigError
from handlers.async_comm import (
    AsyncCommConnectionError,
    AsyncCommDecodeError,
    AsyncCommError,
    AsyncCommStatusError,
    AsyncCommTimeoutError,
    AsyncHttp,
)
from models.config_models import DEFAULT_BASE_URL
from models.translation_models import TranslationOutcome, UpstreamPayload
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import TranslationSettings

__all__: list[str] = ["API_KEY_PREFIX", "DeepLXClient"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

API_KEY_PREFIX: Final[str] = "sk-"
DEFAULT_REQUEST_TIMEOUT: Final[float] = 10.0
DEFAULT_MAX_RETRIES: Final[int] = 2
DEFAULT_RETRY_STEP: Final[float] = 0.2


class DeepLXClient:
    """Talks to a DeepLX endpoint with bounded, linearly backed-off retries.

    Up to max_retries + 1 attempts are made. Timeouts, connection failures, 5xx statuses and
    undecodable bodies are retried; 4xx statuses are returned at once.

    Args:
        settings (TranslationSettings): Provider settings. Non-positive timeouts and steps, and a
            negative retry count, fall back to the defaults.
        http (AsyncHttp | None): Transport to use. Created lazily with the configured pool size
            when omitted.

    Raises:
        ProviderConfigError: If the API key is empty or does not start with 'sk-'.
    """

    def __init__(self, settings: TranslationSettings, http: AsyncHttp | None = None) -> None:
        api_key: str = settings.API_KEY.strip()
        if not api_key.startswith(API_KEY_PREFIX):
            msg: str = f"The API key must start with '{API_KEY_PREFIX}'"
            raise ProviderConfigError(msg)

        self._api_key: str = api_key
        self._base_url: str = ""
        self.set_base_url(settings.BASE_URL or DEFAULT_BASE_URL)
        self.request_timeout: float = settings.TIMEOUT if settings.TIMEOUT > 0 else DEFAULT_REQUEST_TIMEOUT
        self.max_retries: int = settings.MAX_RETRIES if settings.MAX_RETRIES >= 0 else DEFAULT_MAX_RETRIES
        self.retry_step: float = settings.RETRY_STEP if settings.RETRY_STEP > 0 else DEFAULT_RETRY_STEP
        self._pool_size: int = settings.POOL_SIZE
        self.__http: AsyncHttp | None = http
        self._closed: bool = False

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def _http(self) -> AsyncHttp:
        if self.__http is None:
            self.__http = AsyncHttp(pool_size=self._pool_size)
        return self.__http

    def set_base_url(self, base_url: str) -> None:
        """Set a custom endpoint. A trailing slash is removed."""
        self._base_url = base_url.removesuffix("/")

    def build_url(self, model: str = "") -> str:
        if model:
            return f"{self._base_url}/{self._api_key}/{model}"
        return f"{self._base_url}/{self._api_key}"

    def backoff(self, attempt: int) -> float:
        """Delay in seconds after the failed attempt with the given zero-based index."""
        return (attempt + 1) * self.retry_step

    @staticmethod
    def should_retry(err: Exception) -> bool:
        """Check whether a transport error is transient."""
        if isinstance(err, AsyncCommStatusError):
            return DeepLXClient._should_retry_status(err.status)
        return isinstance(err, (AsyncCommTimeoutError, AsyncCommConnectionError, AsyncCommDecodeError))

    @staticmethod
    def _should_retry_status(status: int) -> bool:
        return 500 <= status < 600

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        *,
        model: str = "",
        deadline: float | None = None,
    ) -> TranslationOutcome:
        """Translate text through the upstream endpoint.

        Args:
            text (str): Text to translate.
            target_lang (str): Target language code, sent upper-cased.
            source_lang (str | None): Source language code, sent upper-cased. Omitted when empty.
            model (str): Model appended to the URL path. Empty uses the endpoint default.
            deadline (float | None): Absolute event-loop time. No attempt starts after it and no
                backoff sleep runs past it.

        Returns:
            TranslationOutcome: The translation, or the last error.
        """
        body: dict[str, Any] = {"text": text, "target_lang": target_lang.upper()}
        if source_lang:
            body["source_lang"] = source_lang.upper()
        return await self._do_request(body, model, deadline)

    async def _do_request(self, body: dict[str, Any], model: str, deadline: float | None) -> TranslationOutcome:
        try:
            json.dumps(body)
        except (TypeError, ValueError) as err:
            logger.error("Failed to serialise the request body: %s", err)
            return TranslationOutcome.failure(f"failed to build request: {err}")

        url: str = self.build_url(model)
        loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()
        last_error: str = ""

        for attempt in range(self.max_retries + 1):
            timeout: float = self.request_timeout
            if deadline is not None:
                remaining: float = deadline - loop.time()
                if remaining <= 0:
                    logger.info("Translation cancelled before attempt %d: deadline exceeded", attempt + 1)
                    message: str = "request cancelled: deadline exceeded"
                    if last_error:
                        message = f"{message} ({last_error})"
                    return TranslationOutcome.failure(message, cancelled=True)
                timeout = min(timeout, remaining)

            transient: bool
            try:
                decoded: Any = await self._http.post(url=url, data=body, total_timeout=timeout)
                payload: UpstreamPayload = UpstreamPayload.from_body(decoded)
            except (TypeError, ValueError) as err:
                last_error = f"failed to parse response: {err}"
                transient = True
            except AsyncCommError as err:
                last_error = f"request failed: {err}"
                transient = self.should_retry(err)
            else:
                logger.debug("Translation succeeded on attempt %d", attempt + 1)
                return TranslationOutcome(
                    success=True,
                    translated_text=payload.data,
                    source_lang=payload.source_lang,
                    target_lang=payload.target_lang,
                    raw=payload,
                )

            if not transient:
                logger.warning("Upstream rejected the request: %s", last_error)
                return TranslationOutcome.failure(last_error)

            if attempt < self.max_retries:
                delay: float = self.backoff(attempt)
                if deadline is not None and loop.time() + delay >= deadline:
                    logger.info("Translation cancelled after attempt %d: deadline expires during backoff", attempt + 1)
                    return TranslationOutcome.failure(
                        f"request cancelled: deadline exceeded ({last_error})", cancelled=True
                    )
                logger.debug(
                    "Transient upstream failure, retrying in %.1fs (%d/%d): %s",
                    delay,
                    attempt + 1,
                    self.max_retries,
                    last_error,
                )
                await asyncio.sleep(delay)

        logger.warning("Upstream failed after %d attempts: %s", self.max_retries + 1, last_error)
        return TranslationOutcome.failure(last_error, retryable=True)

    async def close(self) -> None:
        """Close the HTTP transport. Later calls create a new one."""
        self._closed = True
        if self.__http is not None:
            await self.__http.close()

from __future__ import annotations

from typing import TYPE_CHECKING

from core.trans.engines.deeplx_client import DeepLXClient
from core.trans.format_adapter import FormatAdapter
from core.trans.interface import TranslationCancelledError, TranslationProvider, TranslationUpstreamError
from utils.lang_utils import LangUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from handlers.async_comm import AsyncHttp
    from models.config_models import TranslationSettings
    from models.response_models import CanonicalResponse
    from models.translation_models import TranslationOutcome, TranslationRequest


__all__: list[str] = ["DeepLXProvider"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class DeepLXProvider(TranslationProvider):
    """Translation provider backed by a DeepLX endpoint.

    Upstream rejections (4xx) are answered with a degraded echo of the original text.
    Exhausted transient failures and deadline cancellations are raised.
    """

    def __init__(self, client: DeepLXClient, *, default_model: str = "") -> None:
        self._client: DeepLXClient = client
        self._default_model: str = default_model
        self._name: str = "DeepLX"

    @classmethod
    def from_settings(cls, settings: TranslationSettings, http: AsyncHttp | None = None) -> DeepLXProvider:
        """Build the provider and its upstream client.

        Raises:
            ProviderConfigError: If the API key is missing or malformed.
        """
        return cls(DeepLXClient(settings, http), default_model=settings.MODEL)

    @staticmethod
    def fetch_engine_name() -> str:
        return "deeplx"

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self._name = name

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def is_available(self) -> bool:
        return self._client.has_api_key and not self._client.closed

    async def translate(self, request: TranslationRequest, *, deadline: float | None = None) -> CanonicalResponse:
        return await self.translate_with_model(request, request.model, deadline=deadline)

    async def translate_with_model(
        self, request: TranslationRequest, model: str, *, deadline: float | None = None
    ) -> CanonicalResponse:
        """Translate a request through the upstream client.

        Args:
            request (TranslationRequest): Request to translate.
            model (str): Model to use. Empty falls back to the configured default model.
            deadline (float | None): Absolute event-loop time bounding the upstream attempts.

        Returns:
            CanonicalResponse: The translation, or a degraded echo if the upstream rejected it.

        Raises:
            TranslationCancelledError: If the deadline passed before an attempt.
            TranslationUpstreamError: If transient failures exhausted the retries.
        """
        source: str | None = None if LangUtils.is_auto(request.source_lang) else request.source_lang
        outcome: TranslationOutcome = await self._client.translate(
            request.text,
            request.target_lang,
            source,
            model=model or self._default_model,
            deadline=deadline,
        )

        if outcome.success:
            return FormatAdapter.build_response(request.text, outcome, request.fields)

        if outcome.cancelled:
            raise TranslationCancelledError(outcome.error_message)
        if outcome.retryable:
            msg: str = f"{self._name} translation failed: {outcome.error_message}"
            raise TranslationUpstreamError(msg)

        logger.warning("%s translation failed, returning the original text: %s", self._name, outcome.error_message)
        return FormatAdapter.build_degraded_response(request.text, request.source_lang)

    async def close(self) -> None:
        await self._client.close()
        logger.info("'%s' provider closed", self._name)

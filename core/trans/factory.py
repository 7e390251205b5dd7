"""Provider factory and gateway composition.

Providers register themselves on TranslationProvider.registered by name. The factory looks the
requested service type up in that registry, and build_gateway() wires the upstream provider
together with the optional Redis cache described by the configuration.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Final

import core.trans.engines  # noqa: F401  # registers the bundled providers
from core.cache.cached_provider import CachedProviderSettings, CachedTranslationProvider
from core.cache.interface import CacheError
from core.cache.redis_cache import RedisCache
from core.trans.interface import NotSupportedServiceError, ProviderConfigError, TranslationProvider
from models.config_models import TranslationSettings
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from core.cache.interface import CacheInterface
    from models.config_models import Config

__all__: list[str] = ["ProviderFactory", "ServiceType"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class ServiceType(StrEnum):
    DEEPLX = "deeplx"
    BAIDU = "baidu"
    YOUDAO = "youdao"
    GOOGLE = "google"
    CUSTOM = "custom"


_SERVICE_INFO: Final[dict[str, str]] = {
    ServiceType.DEEPLX.value: "DeepLX - LLM-backed translation service compatible with the DeepL API",
    ServiceType.BAIDU.value: "Baidu Translate - mainstream translation service (coming soon)",
    ServiceType.YOUDAO.value: "Youdao Translate - NetEase translation service (coming soon)",
    ServiceType.GOOGLE.value: "Google Translate - official Google translation service (coming soon)",
    ServiceType.CUSTOM.value: "Custom service - user-defined translation endpoint (coming soon)",
}

_NOT_IMPLEMENTED: Final[dict[str, str]] = {
    ServiceType.BAIDU.value: "The Baidu translation service is not yet implemented",
    ServiceType.YOUDAO.value: "The Youdao translation service is not yet implemented",
    ServiceType.GOOGLE.value: "The Google translation service is not yet implemented",
    ServiceType.CUSTOM.value: "The custom translation service needs extra configuration and is not yet implemented",
}

UNKNOWN_SERVICE_INFO: Final[str] = "unknown service type"


class ProviderFactory:
    """Creates translation providers by service type."""

    @staticmethod
    def create_service(service_type: str, settings: TranslationSettings | None) -> TranslationProvider:
        """Create a provider for the service type.

        Args:
            service_type (str): Service type, case-insensitive. See ServiceType.
            settings (TranslationSettings | None): Provider settings. The API key is required.

        Returns:
            TranslationProvider: The provider.

        Raises:
            ProviderConfigError: If the settings or the API key are missing, or the key is malformed.
            NotSupportedServiceError: If the service type is unknown or not yet implemented.
        """
        if settings is None:
            msg = "Translation settings must not be empty"
            raise ProviderConfigError(msg)
        if not settings.API_KEY.strip():
            msg = "The API key must not be empty"
            raise ProviderConfigError(msg)

        name: str = str(service_type).strip().lower()
        if name in _NOT_IMPLEMENTED:
            raise NotSupportedServiceError(_NOT_IMPLEMENTED[name])

        provider_cls: type[TranslationProvider] | None = TranslationProvider.registered.get(name)
        if provider_cls is None:
            msg: str = f"Unsupported service type: '{service_type}'"
            raise NotSupportedServiceError(msg)

        try:
            provider: TranslationProvider = provider_cls.from_settings(settings)
        except ProviderConfigError as err:
            msg = f"Failed to create the '{name}' service: {err}"
            raise ProviderConfigError(msg) from err

        logger.info("Translation service created: '%s'", provider.name)
        return provider

    @staticmethod
    def create_service_simple(service_type: str, api_key: str) -> TranslationProvider:
        """Create a provider with default settings and the given API key."""
        return ProviderFactory.create_service(service_type, TranslationSettings(API_KEY=api_key))

    @staticmethod
    def get_supported_services() -> list[ServiceType]:
        return [ServiceType.DEEPLX]

    @staticmethod
    def get_service_info(service_type: str) -> str:
        return _SERVICE_INFO.get(str(service_type).strip().lower(), UNKNOWN_SERVICE_INFO)

    @staticmethod
    async def build_gateway(
        config: Config,
        *,
        cache: CacheInterface | None = None,
        logger: logging.Logger | None = None,
    ) -> TranslationProvider:
        """Compose the provider described by the configuration.

        Logging is configured from the [GENERAL] section first. When caching is enabled, the
        injected cache is used, or a Redis connection is opened.
        A connection failure is logged and the gateway runs without a cache.

        Args:
            config (Config): Loaded configuration.
            cache (CacheInterface | None): Cache to use instead of connecting to Redis.
            logger (logging.Logger | None): Logger handed to the cache decorator.

        Returns:
            TranslationProvider: The upstream provider, wrapped in the cache decorator when a
                cache is available.

        Raises:
            ProviderConfigError: If the translation settings are unusable.
            NotSupportedServiceError: If the configured service type is not supported.
        """
        log_utils: LoggerUtils = LoggerUtils.configure(config.GENERAL)
        log: logging.Logger = logger if logger is not None else LoggerUtils.get_logger(__name__)
        log.debug("Logging configured (level=%s)", log_utils.get_level().name)

        settings: TranslationSettings = config.TRANSLATION
        provider: TranslationProvider = ProviderFactory.create_service(settings.SERVICE_TYPE, settings)

        if not config.CACHE.ENABLED:
            log.info("Translation cache disabled")
            return provider

        if cache is None:
            try:
                cache = await RedisCache.connect(config.CACHE)
            except CacheError as err:
                log.warning("Redis cache connection failed, running without a cache: %s", err)
                return provider

        log.info(
            "Translation cache enabled (ttl=%s, share_across_services=%s)",
            config.CACHE.TTL,
            config.CACHE.SHARE_ACROSS_SERVICES,
        )
        return CachedTranslationProvider(
            provider,
            cache,
            CachedProviderSettings.from_config(config.CACHE),
            logger=logger,
        )

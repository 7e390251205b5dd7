"""This module defines the abstract base class for translation providers and related exceptions.

Every provider, whether it talks to an upstream HTTP service or decorates another provider,
exposes the same four operations plus close(). Callers never see provider-specific errors:
failures surface as one of the TranslateExceptionError subclasses below.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import TranslationSettings
    from models.response_models import CanonicalResponse
    from models.translation_models import TranslationRequest

__all__: list[str] = [
    "NotSupportedServiceError",
    "ProviderConfigError",
    "TranslateExceptionError",
    "TranslationCancelledError",
    "TranslationProvider",
    "TranslationUpstreamError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslateExceptionError(Exception):
    """An error occurred during the translation process."""


class TranslationUpstreamError(TranslateExceptionError):
    """The upstream provider kept failing until the retries were exhausted."""


class TranslationCancelledError(TranslateExceptionError):
    """The caller's deadline passed before the upstream could be reached."""


class ProviderConfigError(TranslateExceptionError):
    """The provider configuration is missing or invalid."""


class NotSupportedServiceError(TranslateExceptionError):
    """An unknown or not yet implemented service type was requested."""


class TranslationProvider(ABC):
    """Abstract base class for translation providers.

    Subclasses that return a non-empty name from fetch_engine_name() are registered automatically
    and can be built by the factory from TranslationSettings through from_settings().

    Attributes:
        registered (ClassVar[dict[str, type[TranslationProvider]]]): Registered provider classes,
            keyed by their distinguished names.
    """

    registered: ClassVar[dict[str, type[TranslationProvider]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        """Register the subclass in the registered dictionary.

        Args:
            **kwargs: Additional keyword arguments passed to parent class.
        """
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "fetch_engine_name") or not callable(cls.fetch_engine_name):
            msg = "Subclasses of TranslationProvider must implement the static method fetch_engine_name()."
            raise TypeError(msg)

        if not isinstance(cls.fetch_engine_name(), str) or cls.fetch_engine_name() == "":
            return  # decorators and test doubles stay out of the registry

        if getattr(cls.from_settings, "__func__", None) is TranslationProvider.from_settings.__func__:
            msg = f"Registered translation provider '{cls.fetch_engine_name()}' must override from_settings()."
            raise TypeError(msg)

        if cls.fetch_engine_name() in cls.registered:
            msg: str = f"A translation provider with the name '{cls.fetch_engine_name()}' is already registered."
            raise ValueError(msg)

        cls.registered[cls.fetch_engine_name()] = cls
        logger.debug("Translation provider registered: '%s'", cls.fetch_engine_name())

    @staticmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name used to register the provider.

        This method is called during class registration in __init_subclass__, so the
        implementation must be available at subclass definition time. The default empty
        name keeps a subclass out of the registry.

        Returns:
            str: The distinguished name of the provider.
        """
        return ""

    @classmethod
    def from_settings(cls, settings: TranslationSettings) -> TranslationProvider:
        """Build the provider from translation settings.

        Registered providers must override this; registration fails otherwise.

        Raises:
            ProviderConfigError: If the settings are unusable.
        """
        msg = f"{cls.__name__} cannot be built from settings"
        raise NotImplementedError(msg)

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the display name of the provider. Also used to scope cache keys."""
        raise NotImplementedError

    @property
    def default_model(self) -> str:
        """Get the model used when a request names none. Empty means the upstream default."""
        return ""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider can currently accept requests."""
        raise NotImplementedError

    @abstractmethod
    async def translate(self, request: TranslationRequest, *, deadline: float | None = None) -> CanonicalResponse:
        """Translate a request using the model named in the request.

        Args:
            request (TranslationRequest): Request to translate.
            deadline (float | None): Absolute event-loop time after which no new upstream attempt
                may start. None means no deadline.

        Returns:
            CanonicalResponse: The translation. The ld_result block is always present.

        Raises:
            TranslationUpstreamError: If the upstream failed and retries were exhausted.
            TranslationCancelledError: If the deadline passed first.
        """
        raise NotImplementedError

    @abstractmethod
    async def translate_with_model(
        self, request: TranslationRequest, model: str, *, deadline: float | None = None
    ) -> CanonicalResponse:
        """Translate a request using an explicit model, overriding request.model.

        Raises:
            TranslationUpstreamError: If the upstream failed and retries were exhausted.
            TranslationCancelledError: If the deadline passed first.
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release the resources held by the provider."""
        raise NotImplementedError

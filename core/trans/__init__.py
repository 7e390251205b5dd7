"""Translation providers, response formatting and the provider factory.

This package exposes the TranslationProvider interface and its error hierarchy, the DeepLX
provider, the format adapter producing the canonical response, and the factory that composes
the gateway from configuration.
"""

from core.trans.format_adapter import FormatAdapter
from core.trans.interface import (
    NotSupportedServiceError,
    ProviderConfigError,
    TranslateExceptionError,
    TranslationCancelledError,
    TranslationProvider,
    TranslationUpstreamError,
)

__all__: list[str] = [
    "FormatAdapter",
    "NotSupportedServiceError",
    "ProviderConfigError",
    "TranslateExceptionError",
    "TranslationCancelledError",
    "TranslationProvider",
    "TranslationUpstreamError",
]

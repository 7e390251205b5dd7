"""Configuration data models for the translation gateway.

Each dataclass is one INI section. All fields carry documented defaults so that a gateway can be
built from an empty configuration plus an API key. Sections are frozen: configuration is loaded
once, then passed explicitly to the components that need it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

__all__: list[str] = [
    "DEFAULT_BASE_URL",
    "CacheSettings",
    "Config",
    "General",
    "TranslationSettings",
]

DEFAULT_BASE_URL: Final[str] = "https://deeplx.jayogo.com/translate"


@dataclass(frozen=True)
class General:
    DEBUG: bool = False
    LOG_FILE: str = ""
    LOG_LEVEL: str = "INFO"


@dataclass(frozen=True)
class TranslationSettings:
    """Upstream provider settings.

    Attributes:
        SERVICE_TYPE (str): Provider type handled by the factory.
        API_KEY (str): Provider access token, embedded in the request URL.
        BASE_URL (str): Provider endpoint. Empty uses DEFAULT_BASE_URL.
        MODEL (str): Default model used when a request does not name one.
        TIMEOUT (float): Per-attempt timeout in seconds.
        MAX_RETRIES (int): Retries after the first attempt.
        RETRY_STEP (float): Linear backoff step in seconds.
        POOL_SIZE (int): Maximum pooled HTTP connections.
    """

    SERVICE_TYPE: str = "deeplx"
    API_KEY: str = ""
    BASE_URL: str = ""
    MODEL: str = ""
    TIMEOUT: float = 10.0
    MAX_RETRIES: int = 2
    RETRY_STEP: float = 0.2
    POOL_SIZE: int = 100


@dataclass(frozen=True)
class CacheSettings:
    """External cache (Redis) settings.

    Attributes:
        ENABLED (bool): Enable cache-aside for translations.
        ADDR (str): Redis address as 'host:port'.
        PASSWORD (str): Redis password.
        DB (int): Redis database number.
        TTL (float): Entry lifetime in seconds. 0 keeps entries forever.
        SHARE_ACROSS_SERVICES (bool): Use one key scope for all providers.
        POOL_SIZE (int): Maximum Redis connections.
        DIAL_TIMEOUT (float): Connect timeout in seconds.
        READ_TIMEOUT (float): Socket read timeout in seconds.
        WRITE_TIMEOUT (float): Socket write timeout in seconds.
        ASYNC_WRITE_TIMEOUT (float): Bound for one detached cache write.
    """

    ENABLED: bool = False
    ADDR: str = "localhost:6379"
    PASSWORD: str = ""
    DB: int = 0
    TTL: float = 0.0
    SHARE_ACROSS_SERVICES: bool = True
    POOL_SIZE: int = 10
    DIAL_TIMEOUT: float = 5.0
    READ_TIMEOUT: float = 3.0
    WRITE_TIMEOUT: float = 3.0
    ASYNC_WRITE_TIMEOUT: float = 5.0


@dataclass(frozen=True)
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: TranslationSettings = field(default_factory=TranslationSettings)
    CACHE: CacheSettings = field(default_factory=CacheSettings)

"""Contract for the external key-value cache used by the cache-aside decorator."""

from __future__ import annotations

from abc import ABC, abstractmethod

__all__: list[str] = ["CacheError", "CacheInterface"]


class CacheError(Exception):
    """A cache operation failed. Never surfaced to translation callers."""


class CacheInterface(ABC):
    """Asynchronous byte-oriented key-value cache.

    get() distinguishes an absent key (None) from a stored empty value (b"").
    Every operation raises CacheError on failure.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: float = 0.0) -> None:
        """Store a value. A ttl of 0 keeps the entry until it is deleted or evicted."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def ping(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError

"""Redis binding of the cache contract, built on redis.asyncio."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Final

import redis.asyncio as redis
from redis.exceptions import RedisError

from core.cache.interface import CacheError, CacheInterface
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import CacheSettings

__all__: list[str] = ["RedisCache"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_PORT: Final[int] = 6379
DEFAULT_POOL_SIZE: Final[int] = 10
DEFAULT_DIAL_TIMEOUT: Final[float] = 5.0
DEFAULT_IO_TIMEOUT: Final[float] = 3.0


class RedisCache(CacheInterface):
    """Cache stored in Redis.

    Use connect() to build an instance from settings; the constructor accepts an existing client.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client: redis.Redis = client

    @classmethod
    async def connect(cls, settings: CacheSettings) -> RedisCache:
        """Create a pooled client and check it with a ping bounded by the dial timeout.

        Args:
            settings (CacheSettings): Cache settings. Non-positive pool sizes and timeouts fall back
                to the defaults.

        Returns:
            RedisCache: A connected cache.

        Raises:
            CacheError: If the address is invalid or the server does not answer.
        """
        host, port = cls.parse_address(settings.ADDR)
        dial_timeout: float = settings.DIAL_TIMEOUT if settings.DIAL_TIMEOUT > 0 else DEFAULT_DIAL_TIMEOUT
        # redis-py has one socket timeout for reads and writes
        io_timeout: float = max(settings.READ_TIMEOUT, settings.WRITE_TIMEOUT)
        pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=settings.DB,
            password=settings.PASSWORD or None,
            max_connections=settings.POOL_SIZE if settings.POOL_SIZE > 0 else DEFAULT_POOL_SIZE,
            socket_connect_timeout=dial_timeout,
            socket_timeout=io_timeout if io_timeout > 0 else DEFAULT_IO_TIMEOUT,
        )
        cache = cls(redis.Redis(connection_pool=pool))

        try:
            async with asyncio.timeout(dial_timeout):
                await cache.ping()
        except (CacheError, TimeoutError) as err:
            with contextlib.suppress(CacheError):
                await cache.close()
            msg: str = f"redis connection failed ({host}:{port}): {err}"
            raise CacheError(msg) from err

        logger.info("Connected to Redis at %s:%d (db=%d)", host, port, settings.DB)
        return cache

    @staticmethod
    def parse_address(addr: str) -> tuple[str, int]:
        """Split 'host:port'. A missing port uses 6379.

        Raises:
            CacheError: If the port is not a number.
        """
        host, _, port = addr.strip().rpartition(":")
        if not host:
            if port.isdigit():
                return "localhost", int(port)
            return (port or "localhost"), DEFAULT_PORT
        try:
            return host, int(port)
        except ValueError as err:
            msg: str = f"invalid redis address: '{addr}'"
            raise CacheError(msg) from err

    async def get(self, key: str) -> bytes | None:
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as err:
            msg: str = f"redis get failed: {err}"
            raise CacheError(msg) from err

    async def set(self, key: str, value: bytes, ttl: float = 0.0) -> None:
        try:
            if ttl > 0:
                await self._client.set(key, value, px=max(1, int(ttl * 1000)))
            else:
                await self._client.set(key, value)
        except (RedisError, OSError) as err:
            msg: str = f"redis set failed: {err}"
            raise CacheError(msg) from err

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except (RedisError, OSError) as err:
            msg: str = f"redis delete failed: {err}"
            raise CacheError(msg) from err

    async def ping(self) -> None:
        try:
            await self._client.ping()
        except (RedisError, OSError) as err:
            msg: str = f"redis ping failed: {err}"
            raise CacheError(msg) from err

    async def close(self) -> None:
        try:
            await self._client.aclose(close_connection_pool=True)
        except (RedisError, OSError) as err:
            msg: str = f"redis close failed: {err}"
            raise CacheError(msg) from err
        logger.info("Redis connection closed")

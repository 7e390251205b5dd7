"""Communication handlers for the translation gateway.

This package provides the asynchronous HTTP transport used to reach translation providers.
"""

from handlers.async_comm import (
    AsyncCommConnectionError,
    AsyncCommDecodeError,
    AsyncCommError,
    AsyncCommInvalidContentTypeError,
    AsyncCommStatusError,
    AsyncCommTimeoutError,
    AsyncHttp,
)

__all__: list[str] = [
    "AsyncCommConnectionError",
    "AsyncCommDecodeError",
    "AsyncCommError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommStatusError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]

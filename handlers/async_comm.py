"""Asynchronous HTTP transport used to reach translation providers.

The `AsyncHttp` class wraps a pooled aiohttp session and maps low-level failures onto a small
error hierarchy so that callers can tell transient conditions (timeouts, dropped connections,
5xx responses, garbled bodies) from permanent ones (4xx responses).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp import ClientSession, TCPConnector

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from aiohttp import ClientResponse


__all__: list[str] = [
    "AsyncCommConnectionError",
    "AsyncCommDecodeError",
    "AsyncCommError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommStatusError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

CONNECT_TIMEOUT: Final[float] = 1.0
DEFAULT_POOL_SIZE: Final[int] = 100
_BODY_PREVIEW_LENGTH: Final[int] = 200


class AsyncHttp:
    """Asynchronous HTTP client with a shared connection pool.

    The session is created lazily on first use, inside the running event loop, and reused by all
    concurrent requests until `close()` is called. Responses are decoded by content type.
    """

    def __init__(self, *, pool_size: int = DEFAULT_POOL_SIZE) -> None:
        """Initialize the AsyncHttp client.

        Registers the default content type handlers:
            - "text/plain": Decodes bytes to a UTF-8 string.
            - "application/json": Parses bytes as JSON.

        Args:
            pool_size (int): Maximum simultaneous connections. Non-positive uses the default.
        """
        self._pool_size: int = pool_size if pool_size > 0 else DEFAULT_POOL_SIZE
        self.__session: ClientSession | None = None
        self.content_handlers: dict[str, Callable[[bytes], Any]] = {}

        self.add_handler("text/plain", lambda x: x.decode("utf-8"))
        self.add_handler("application/json", lambda x: json.loads(x.decode("utf-8")))
        logger.debug("%s created (pool_size=%d)", self.__class__.__name__, self._pool_size)

    async def __aenter__(self) -> Self:
        self.initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.close()

    def initialize_session(self) -> None:
        """Create the pooled aiohttp session if there is none or it was closed."""
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession(connector=TCPConnector(limit=self._pool_size))
            logger.debug("%s session initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """Get the current session, creating it on first use."""
        self.initialize_session()
        if self.__session is None:
            msg = "Session could not be initialized"
            raise RuntimeError(msg)
        return self.__session

    @property
    def closed(self) -> bool:
        return self.__session is None or self.__session.closed

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
            logger.info("%s session closed", self.__class__.__name__)
        self.__session = None

    async def post(self, *, url: str, data: Any, total_timeout: float = 10.0) -> Any:
        """Send a JSON body with POST and return the decoded response.

        Args:
            url (str): Request URL.
            data (Any): JSON-serialisable request body.
            total_timeout (float): Total timeout for this request in seconds.

        Returns:
            Any: The decoded response body.

        Raises:
            AsyncCommError: Or one of its subclasses, see `_request`.
        """
        return await self._request("POST", url=url, total_timeout=total_timeout, json=data)

    async def get(self, *, url: str, total_timeout: float = 10.0) -> Any:
        return await self._request("GET", url=url, total_timeout=total_timeout)

    def decode_response(self, content_type: str, raw: bytes) -> Any:
        """Decode a response body with the handler registered for its content type.

        Raises:
            AsyncCommInvalidContentTypeError: If no handler is registered for the content type.
            AsyncCommDecodeError: If the handler fails on the body.
        """
        if not raw:
            logger.debug("Received empty response")
            return None

        handler: Callable[[bytes], Any] | None = self.content_handlers.get(content_type)
        if handler is None:
            msg: str = f"Unknown Content-Type '{content_type}'"
            raise AsyncCommInvalidContentTypeError(msg)

        try:
            return handler(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            msg = f"Malformed '{content_type}' response body: {err}"
            raise AsyncCommDecodeError(msg) from err

    def add_handler(self, content_type: str, handler: Callable[[bytes], Any]) -> None:
        """Register a decoder for a content type, replacing any existing one."""
        if content_type in self.content_handlers:
            logger.warning("Handler for content type '%s' already exists, replacing it", content_type)
        self.content_handlers[content_type] = handler

    @staticmethod
    def _build_timeout(total_timeout: float) -> aiohttp.ClientTimeout:
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        if total_timeout < CONNECT_TIMEOUT:
            # keep the connect phase from taking the whole budget
            return aiohttp.ClientTimeout(total=total_timeout)
        return aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

    async def _request(self, method: HTTPMethod, *, url: str, total_timeout: float, **kwargs: Any) -> Any:
        """Perform one HTTP request.

        Raises:
            AsyncCommTimeoutError: The request did not complete in time.
            AsyncCommConnectionError: The connection failed or was dropped.
            AsyncCommStatusError: The server answered with a status of 400 or above.
            AsyncCommInvalidContentTypeError: The response had an unknown content type.
            AsyncCommDecodeError: The response body could not be decoded.
        """
        logger.debug("[%s] timeout=%s", method, total_timeout)
        try:
            async with self.session.request(
                method=method,
                url=url,
                timeout=self._build_timeout(total_timeout),
                **kwargs,
            ) as resp:
                raw: bytes = await resp.read()
                if resp.status >= 400:
                    text: str = raw.decode("utf-8", errors="replace")
                    msg: str = f"HTTP {resp.status}: {text[:_BODY_PREVIEW_LENGTH]}"
                    raise AsyncCommStatusError(msg, status=resp.status, body=text)
                return self.decode_response(self._content_type(resp), raw)

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except (ConnectionResetError, aiohttp.ClientConnectionError) as err:
            logger.debug(err)
            msg = f"Connection to the server failed: {err}"
            raise AsyncCommConnectionError(msg) from err
        except aiohttp.ClientPayloadError as err:
            logger.debug(err)
            msg = f"Incomplete response body: {err}"
            raise AsyncCommDecodeError(msg) from err

    @staticmethod
    def _content_type(resp: ClientResponse) -> str:
        return resp.headers.get("Content-Type", "").split(";")[0].strip().lower()


class AsyncCommError(Exception):
    """Base class for asynchronous communication errors."""

    def __init__(self, msg: str | BaseException) -> None:
        self.msg: str = str(msg)
        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """A request did not complete within its timeout."""


class AsyncCommConnectionError(AsyncCommError):
    """The connection could not be established or was dropped."""


class AsyncCommStatusError(AsyncCommError):
    """The server answered with an error status.

    Attributes:
        status (int): HTTP status code.
        body (str): Response body as text.
    """

    def __init__(self, msg: str, *, status: int, body: str = "") -> None:
        super().__init__(msg)
        self.status: int = status
        self.body: str = body


class AsyncCommDecodeError(AsyncCommError):
    """The response body could not be decoded."""


class AsyncCommInvalidContentTypeError(AsyncCommDecodeError):
    """The response content type has no registered handler."""

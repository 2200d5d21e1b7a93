"""Minimal asynchronous client for the LibreTranslate HTTP API.

Endpoints used: ``/translate``, ``/detect`` and ``/languages``. Requests and responses are
JSON. HTTP failures are raised as the exceptions below; the adapter maps them onto the
translation error hierarchy.
"""

from __future__ import annotations

import json
import logging
from json import JSONDecodeError
from typing import Any, Final

import aiohttp

from utils.logger_utils import LoggerUtils

__all__: list[str] = [
    "DEFAULT_BASE_URL",
    "HTTPConnectionError",
    "HTTPError",
    "HTTPRedirection",
    "HTTPTimeoutError",
    "HTTPTooManyRequests",
    "LibreTranslateClient",
    "LibreTranslateError",
    "LibreTranslateException",
    "ResponseFormatError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_BASE_URL: Final[str] = "https://libretranslate.com"


class LibreTranslateException(Exception):  # noqa: N818
    pass


class LibreTranslateError(LibreTranslateException):
    """The server answered with an ``{"error": ...}`` payload."""


class ResponseFormatError(LibreTranslateException):
    """The response body is not the JSON shape the endpoint documents."""


class HTTPException(LibreTranslateException):
    pass


class HTTPConnectionError(HTTPException):
    pass


class HTTPTimeoutError(HTTPException):
    pass


class HTTPRedirection(HTTPException):
    """HTTP 3xx Redirection Exception"""


class HTTPError(HTTPException):
    """HTTP 4xx/5xx Error Exception"""


class HTTPTooManyRequests(HTTPException):
    """HTTP 429 Too Many Requests Exception"""


class LibreTranslateClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, api_key: str = "", timeout: float = 10.0) -> None:
        self.base_url: str = base_url.rstrip("/")
        self.api_key: str = api_key
        self.timeout: float = timeout
        self.__session: aiohttp.ClientSession | None = None

    @property
    def _session(self) -> aiohttp.ClientSession:
        """Returns current session information

        If the session has not been created or closed, a new session is created.
        """
        if self.__session is None or self.__session.closed:
            self.__session = aiohttp.ClientSession()
        return self.__session

    async def close(self) -> None:
        logger.debug("'%s': 'termination process'", self.__class__.__name__)
        if self.__session is not None:
            await self.__session.close()
            self.__session = None
        logger.debug("'%s': 'finished'", self.__class__.__name__)

    @staticmethod
    def _build_body_preview(body: str, limit: int = 500) -> str:
        body_preview: str = body.strip().replace("\n", "\\n")
        if len(body_preview) > limit:
            return f"{body_preview[:limit]}..."
        return body_preview

    @staticmethod
    def _format_http_error(
        status: int,
        reason: str | None,
        url: str,
        *,
        body_preview: str | None = None,
        location: str | None = None,
    ) -> str:
        status_reason: str = f"{status} {reason}".strip() if reason else str(status)
        parts: list[str] = [f"HTTP {status_reason} from {url}"]
        if location:
            parts.append(f"Location: {location}")
        if body_preview:
            parts.append(f"Body: {body_preview}")
        return ". ".join(parts)

    def _with_key(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.api_key:
            return {**payload, "api_key": self.api_key}
        return payload

    async def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        url: str = f"{self.base_url}{path}"
        try:
            _timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with self._session.request(method, url, json=payload, timeout=_timeout) as response:
                body: str = await response.text()
                if response.status >= 300:
                    body_preview = self._build_body_preview(body)
                    if response.status == 429:
                        msg = self._format_http_error(response.status, response.reason, url, body_preview=body_preview)
                        raise HTTPTooManyRequests(msg)
                    if response.status >= 400:
                        msg = self._format_http_error(response.status, response.reason, url, body_preview=body_preview)
                        raise HTTPError(msg)

                    msg = self._format_http_error(
                        response.status,
                        response.reason,
                        url,
                        location=response.headers.get("Location"),
                    )
                    raise HTTPRedirection(msg)
        except TimeoutError:
            msg = "Timeout occurred for aiohttp.ClientSession"
            raise HTTPTimeoutError(msg) from None
        except ConnectionResetError:
            msg = "connection to host has been disconnected"
            raise HTTPConnectionError(msg) from None
        except aiohttp.ClientConnectorError as err:
            raise HTTPConnectionError(err) from None
        except aiohttp.ClientError as err:
            raise HTTPConnectionError(err) from None

        return self._decode(body)

    @staticmethod
    def _decode(body: str) -> Any:
        try:
            data: Any = json.loads(body)
        except JSONDecodeError as err:
            msg = "failed to decode response"
            raise ResponseFormatError(msg) from err
        if isinstance(data, dict) and "error" in data:
            raise LibreTranslateError(str(data["error"]))
        return data

    async def translate(
        self, text: str | list[str], source: str, target: str, text_format: str = "text"
    ) -> str | list[str]:
        """Translate one text, or a list of texts in a single request."""
        payload: dict[str, Any] = self._with_key({"q": text, "source": source, "target": target, "format": text_format})
        data: Any = await self._request("POST", "/translate", payload)
        try:
            translated: str | list[str] = data["translatedText"]
        except (KeyError, TypeError) as err:
            msg = "invalid response format"
            raise ResponseFormatError(msg) from err
        return translated

    async def detect(self, text: str) -> list[dict[str, Any]]:
        """Return detection candidates, best first, with confidence on a 0-100 scale."""
        data: Any = await self._request("POST", "/detect", self._with_key({"q": text}))
        if not isinstance(data, list):
            msg = "invalid response format"
            raise ResponseFormatError(msg)
        return data

    async def languages(self) -> list[dict[str, Any]]:
        data: Any = await self._request("GET", "/languages")
        if not isinstance(data, list):
            msg = "invalid response format"
            raise ResponseFormatError(msg)
        return data

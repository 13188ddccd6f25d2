# =============================================================================
# SoundTouch Client -- Device HTTP API
# =============================================================================
#
# Thin async transport for the device's XML API on port 8090, plus typed
# getters for the resources that also appear in pushed events.  Owns the
# aiohttp session only if it created it.
# =============================================================================

from __future__ import annotations

import asyncio
from typing import Any, TypeVar
from xml.etree.ElementTree import Element, tostring

import aiohttp

from ._logging import logger
from .connection import ConnectionManager
from .constants import (
    ERROR_ELEMENT,
    ERRORS_ELEMENT,
    HTTP_PORT,
    HTTP_TIMEOUT,
    PATH_BASS,
    PATH_NAME,
    PATH_NOW_PLAYING,
    PATH_PRESETS,
    PATH_VOLUME,
    PATH_ZONE,
    USER_AGENT,
    WEBSOCKET_PORT,
)
from .errors import (
    SoundTouchAPIError,
    SoundTouchConnectionError,
    SoundTouchDecodeError,
    SoundTouchHTTPError,
    SoundTouchTimeoutError,
)
from .models import Bass, Name, NowPlaying, Presets, Volume, Zone
from .protocol import parse_xml
from .types import WebSocketConfig

M = TypeVar("M")

XML_CONTENT_TYPE = "application/xml"


def raise_for_api_error(root: Element) -> None:
    """Raise :class:`SoundTouchAPIError` if *root* is an error document.

    Handles both ``<errors><error value=".." name="..">text</error></errors>``
    and a bare ``<error code="..">text</error>``.
    """
    if root.tag == ERRORS_ELEMENT:
        error = root.find(ERROR_ELEMENT)
        if error is None:
            raise SoundTouchAPIError(0, "device returned an empty error list")
    elif root.tag == ERROR_ELEMENT:
        error = root
    else:
        return

    raw_code = error.get("value") or error.get("code") or "0"
    try:
        code = int(raw_code)
    except ValueError:
        code = 0
    message = (error.text or "").strip()
    raise SoundTouchAPIError(code, message, name=error.get("name", ""))


class SoundTouchClient:
    """Async client for one SoundTouch device.

    Args:
        host: Device host name or IP address.
        port: HTTP API port (default 8090).
        session: Shared ``aiohttp.ClientSession``; one is created lazily
            and closed by :meth:`close` when not given.
        timeout: Total per-request timeout in seconds.
        user_agent: ``User-Agent`` header value.

    Example::

        async with SoundTouchClient("192.168.1.20") as client:
            volume = await client.get_volume()
            ws = client.websocket()
            await ws.connect()
    """

    def __init__(
        self,
        host: str,
        *,
        port: int = HTTP_PORT,
        session: aiohttp.ClientSession | None = None,
        timeout: float = HTTP_TIMEOUT,
        user_agent: str = USER_AGENT,
    ) -> None:
        self._host = host
        self._base_url = f"http://{host}:{port}"
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._user_agent = user_agent

    @property
    def host(self) -> str:
        return self._host

    @property
    def base_url(self) -> str:
        return self._base_url

    # -- Lifecycle ------------------------------------------------------------

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> SoundTouchClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def websocket(
        self,
        config: WebSocketConfig | None = None,
        *,
        port: int = WEBSOCKET_PORT,
    ) -> ConnectionManager:
        """Event listener for the same device.  Not connected yet."""
        return ConnectionManager(self._host, config=config, port=port)

    # -- Transport ------------------------------------------------------------

    async def _request(self, method: str, path: str, *, data: bytes | None = None) -> str:
        headers = {"User-Agent": self._user_agent, "Accept": XML_CONTENT_TYPE}
        if data is not None:
            headers["Content-Type"] = XML_CONTENT_TYPE

        url = f"{self._base_url}{path}"
        logger.debug("HTTP %s %s", method, url)
        try:
            async with self._get_session().request(
                method, url, data=data, headers=headers, timeout=self._timeout
            ) as resp:
                body = await resp.text()
                if not 200 <= resp.status < 300:
                    logger.debug("HTTP error %s %s -> %s", method, url, resp.status)
                    raise SoundTouchHTTPError(resp.status, body)
                logger.debug("HTTP %s -> %s", url, resp.status)
                return body
        except asyncio.TimeoutError as exc:
            raise SoundTouchTimeoutError(f"{method} {path} timed out") from exc
        except aiohttp.ClientError as exc:
            raise SoundTouchConnectionError(f"{method} {path} failed: {exc}") from exc

    async def get(self, path: str) -> Element:
        """GET *path* and return the parsed XML root.

        Raises:
            SoundTouchHTTPError: Non-2xx status.
            SoundTouchAPIError: The device answered with an error document.
            SoundTouchDecodeError: The body is not XML.
        """
        body = await self._request("GET", path)
        root = parse_xml(body)
        raise_for_api_error(root)
        return root

    async def post(self, path: str, body: str | bytes | Element | None = None) -> Element | None:
        """POST an XML body to *path*.

        Returns:
            The parsed response root, or ``None`` for an empty response.
        """
        if isinstance(body, Element):
            data: bytes | None = tostring(body, encoding="utf-8")
        elif isinstance(body, str):
            data = body.encode("utf-8")
        else:
            data = body

        text = await self._request("POST", path, data=data)
        if not text.strip():
            return None
        root = parse_xml(text)
        raise_for_api_error(root)
        return root

    async def _get_model(self, path: str, model: type[M]) -> M:
        root = await self.get(path)
        if root.tag != model.tag:  # type: ignore[attr-defined]
            raise SoundTouchDecodeError(
                f"expected <{model.tag}> from {path}, got <{root.tag}>"  # type: ignore[attr-defined]
            )
        try:
            return model.from_element(root)  # type: ignore[attr-defined]
        except ValueError as exc:
            raise SoundTouchDecodeError(f"invalid value in {path} response: {exc}") from exc

    # -- Typed getters --------------------------------------------------------

    async def get_volume(self) -> Volume:
        return await self._get_model(PATH_VOLUME, Volume)

    async def get_bass(self) -> Bass:
        return await self._get_model(PATH_BASS, Bass)

    async def get_now_playing(self) -> NowPlaying:
        return await self._get_model(PATH_NOW_PLAYING, NowPlaying)

    async def get_presets(self) -> Presets:
        return await self._get_model(PATH_PRESETS, Presets)

    async def get_zone(self) -> Zone:
        return await self._get_model(PATH_ZONE, Zone)

    async def get_name(self) -> Name:
        return await self._get_model(PATH_NAME, Name)

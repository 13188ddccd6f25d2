"""Tests for the device HTTP API client."""

from __future__ import annotations

import asyncio
from typing import Any
from xml.etree.ElementTree import Element

import aiohttp
import pytest

from soundtouch_client.client import SoundTouchClient, raise_for_api_error
from soundtouch_client.connection import ConnectionManager
from soundtouch_client.errors import (
    SoundTouchAPIError,
    SoundTouchConnectionError,
    SoundTouchDecodeError,
    SoundTouchHTTPError,
    SoundTouchTimeoutError,
)
from soundtouch_client.protocol import parse_xml
from soundtouch_client.types import WebSocketConfig


class MockResponse:
    def __init__(self, status: int, text: str = "") -> None:
        self.status = status
        self._text = text

    async def __aenter__(self) -> MockResponse:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def text(self) -> str:
        return self._text


class FakeSession:
    """Queue of canned responses standing in for aiohttp.ClientSession."""

    def __init__(self, *responses: Any) -> None:
        self._queue = list(responses)
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> Any:
        self.calls.append((method, url, kwargs))
        result = self._queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True


def _client(*responses: Any) -> tuple[SoundTouchClient, FakeSession]:
    session = FakeSession(*responses)
    return SoundTouchClient("192.168.1.20", session=session), session


class TestTransport:
    @pytest.mark.asyncio
    async def test_get_parses_xml(self):
        client, session = _client(MockResponse(200, "<name>Kitchen</name>"))
        root = await client.get("/name")

        assert root.tag == "name"
        method, url, kwargs = session.calls[0]
        assert method == "GET"
        assert url == "http://192.168.1.20:8090/name"
        assert kwargs["headers"]["Accept"] == "application/xml"
        assert kwargs["headers"]["User-Agent"].startswith("Bose-SoundTouch-Python-Client/")
        assert kwargs["data"] is None

    @pytest.mark.asyncio
    async def test_non_2xx_status(self):
        client, _ = _client(MockResponse(500, "boom"))
        with pytest.raises(SoundTouchHTTPError) as excinfo:
            await client.get("/volume")
        assert excinfo.value.status == 500
        assert excinfo.value.body == "boom"
        assert str(excinfo.value) == "API request failed with status 500: boom"

    @pytest.mark.asyncio
    async def test_error_document(self):
        body = (
            '<errors deviceID="ABC"><error value="401" name="HTTP_STATUS_UNAUTHORIZED" '
            'severity="Unknown">unauthorized</error></errors>'
        )
        client, _ = _client(MockResponse(200, body))
        with pytest.raises(SoundTouchAPIError) as excinfo:
            await client.get("/presets")
        assert excinfo.value.code == 401
        assert excinfo.value.name == "HTTP_STATUS_UNAUTHORIZED"
        assert excinfo.value.message == "unauthorized"

    @pytest.mark.asyncio
    async def test_unparseable_body(self):
        client, _ = _client(MockResponse(200, "not xml at all"))
        with pytest.raises(SoundTouchDecodeError):
            await client.get("/volume")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        client, _ = _client(aiohttp.ClientConnectionError("refused"))
        with pytest.raises(SoundTouchConnectionError, match="GET /volume failed"):
            await client.get("/volume")

    @pytest.mark.asyncio
    async def test_timeout(self):
        client, _ = _client(asyncio.TimeoutError())
        with pytest.raises(SoundTouchTimeoutError):
            await client.get("/volume")

    @pytest.mark.asyncio
    async def test_post_element_body(self):
        client, session = _client(MockResponse(200, ""))
        body = Element("volume")
        body.text = "30"

        assert await client.post("/volume", body) is None
        method, url, kwargs = session.calls[0]
        assert method == "POST"
        assert url.endswith("/volume")
        assert parse_xml(kwargs["data"]).text == "30"
        assert kwargs["headers"]["Content-Type"] == "application/xml"

    @pytest.mark.asyncio
    async def test_post_returns_response_root(self):
        client, session = _client(MockResponse(200, '<status>/key</status>'))
        root = await client.post("/key", '<key state="press" sender="Gabbo">PLAY</key>')
        assert root.tag == "status"
        assert session.calls[0][2]["data"] == b'<key state="press" sender="Gabbo">PLAY</key>'


class TestTypedGetters:
    @pytest.mark.asyncio
    async def test_get_volume(self):
        client, _ = _client(
            MockResponse(
                200,
                '<volume deviceID="ABC"><targetvolume>30</targetvolume>'
                "<actualvolume>28</actualvolume><muteenabled>true</muteenabled></volume>",
            )
        )
        volume = await client.get_volume()
        assert volume.device_id == "ABC"
        assert (volume.target, volume.actual, volume.muted) == (30, 28, True)
        assert not volume.in_sync

    @pytest.mark.asyncio
    async def test_get_bass(self):
        client, _ = _client(
            MockResponse(200, "<bass><targetbass>-1</targetbass><actualbass>-1</actualbass></bass>")
        )
        bass = await client.get_bass()
        assert bass.at_target

    @pytest.mark.asyncio
    async def test_get_now_playing_standby(self):
        client, _ = _client(
            MockResponse(200, '<nowPlaying deviceID="ABC" source="STANDBY"><ContentItem source="STANDBY" isPresetable="false"/></nowPlaying>')
        )
        now_playing = await client.get_now_playing()
        assert now_playing.source == "STANDBY"
        assert now_playing.is_empty
        assert now_playing.display_title == "Unknown"

    @pytest.mark.asyncio
    async def test_get_presets(self):
        client, _ = _client(
            MockResponse(
                200,
                '<presets><preset id="1"><ContentItem source="TUNEIN">'
                "<itemName>Jazz</itemName></ContentItem></preset>"
                '<preset id="2"/></presets>',
            )
        )
        presets = await client.get_presets()
        assert len(presets.presets) == 2
        assert presets.get(1).display_name == "Jazz"
        assert presets.get(2).is_empty
        assert presets.get(6) is None

    @pytest.mark.asyncio
    async def test_get_zone(self):
        client, session = _client(MockResponse(200, "<zone/>"))
        zone = await client.get_zone()
        assert zone.is_standalone
        assert session.calls[0][1].endswith("/getZone")

    @pytest.mark.asyncio
    async def test_get_name(self):
        client, _ = _client(MockResponse(200, "<name>Kitchen</name>"))
        assert str(await client.get_name()) == "Kitchen"

    @pytest.mark.asyncio
    async def test_unexpected_root(self):
        client, _ = _client(MockResponse(200, "<bass/>"))
        with pytest.raises(SoundTouchDecodeError, match="expected <volume>"):
            await client.get_volume()

    @pytest.mark.asyncio
    async def test_bad_value(self):
        client, _ = _client(MockResponse(200, "<volume><targetvolume>x</targetvolume></volume>"))
        with pytest.raises(SoundTouchDecodeError, match="invalid value"):
            await client.get_volume()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_shared_session_not_closed(self):
        session = FakeSession()
        async with SoundTouchClient("h", session=session):
            pass
        assert session.closed is False

    @pytest.mark.asyncio
    async def test_owned_session_closed(self):
        client = SoundTouchClient("h")
        async with client:
            assert isinstance(client._get_session(), aiohttp.ClientSession)
        assert client._session is None

    def test_websocket_factory(self):
        client = SoundTouchClient("192.168.1.20")
        config = WebSocketConfig(ping_interval=15.0)
        ws = client.websocket(config)
        assert isinstance(ws, ConnectionManager)
        assert ws.url == "ws://192.168.1.20:8080/"
        assert ws.config is config
        assert client.base_url == "http://192.168.1.20:8090"


class TestRaiseForApiError:
    def test_regular_document(self):
        raise_for_api_error(parse_xml("<volume/>"))

    def test_bare_error(self):
        with pytest.raises(SoundTouchAPIError) as excinfo:
            raise_for_api_error(parse_xml('<error code="1019">Invalid source</error>'))
        assert excinfo.value.code == 1019
        assert str(excinfo.value) == "Invalid source"

    def test_empty_error_list(self):
        with pytest.raises(SoundTouchAPIError):
            raise_for_api_error(parse_xml("<errors/>"))

"""Shared fixtures for SoundTouch client tests."""

import asyncio

import pytest
import pytest_asyncio
from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed

from soundtouch_client.types import WebSocketConfig

VOLUME_FRAME = (
    '<updates deviceID="X">'
    '<volumeUpdated deviceID="X"><volume deviceID="X">'
    "<targetvolume>25</targetvolume><actualvolume>25</actualvolume>"
    "<muteenabled>false</muteenabled>"
    "</volume></volumeUpdated>"
    "</updates>"
)

SDK_INFO_FRAME = '<SoundTouchSdkInfo serverVersion="4" serverBuild="trunk r42017 v4 epdbuild"/>'


class FakeDevice:
    """Local WebSocket endpoint standing in for a speaker.

    Records every frame a client sends and lets the test push frames or
    drop the latest connection.
    """

    def __init__(self) -> None:
        self.port = 0
        self.connections = []
        self.received = []
        self.greeting: str | None = None

    async def handler(self, ws) -> None:
        self.connections.append(ws)
        if self.greeting:
            await ws.send(self.greeting)
        try:
            async for message in ws:
                self.received.append(message)
        except ConnectionClosed:
            pass

    async def push(self, frame) -> None:
        await self.connections[-1].send(frame)

    async def drop(self) -> None:
        await self.connections[-1].close(code=1011, reason="device going away")


@pytest_asyncio.fixture
async def device():
    fake = FakeDevice()
    async with serve(fake.handler, "127.0.0.1", 0, subprotocols=["gabbo"]) as server:
        fake.port = next(iter(server.sockets)).getsockname()[1]
        yield fake


@pytest.fixture
def fast_config():
    """Config with short timings so lifecycle tests finish quickly."""

    def make(**overrides) -> WebSocketConfig:
        values = {
            "reconnect_interval": 0.05,
            "ping_interval": 30.0,
            "pong_timeout": 1.0,
            "read_timeout": 5.0,
            "handshake_timeout": 2.0,
        }
        values.update(overrides)
        return WebSocketConfig(**values)

    return make


@pytest.fixture
def wait_until():
    """Poll *predicate* until true or fail after *timeout* seconds."""

    async def poll(predicate, timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                pytest.fail("condition not met in time")
            await asyncio.sleep(0.01)

    return poll


@pytest.fixture
def volume_frame() -> str:
    return VOLUME_FRAME


@pytest.fixture
def sdk_info_frame() -> str:
    return SDK_INFO_FRAME

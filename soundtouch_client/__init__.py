"""Bose SoundTouch client: real-time device events over WebSocket.

Async usage::

    from soundtouch_client import connect

    async with connect("192.168.1.20") as ws:
        ws.on_volume_updated(lambda event: print(event.volume.actual))
        await ws.wait()

Sync usage::

    from soundtouch_client import SyncSoundTouchWebSocket

    ws = SyncSoundTouchWebSocket("192.168.1.20")
    ws.on_now_playing(lambda event: print(event.now_playing.display_title))
    ws.connect()
    ws.wait()
    ws.close()

Device HTTP API::

    async with SoundTouchClient("192.168.1.20") as client:
        volume = await client.get_volume()
"""

from ._version import __version__
from .client import SoundTouchClient
from .connection import ConnectionManager
from .dispatcher import EventHandlers, dispatch
from .errors import (
    AlreadyConnectedError,
    NotConnectedError,
    SoundTouchAPIError,
    SoundTouchConnectionError,
    SoundTouchDecodeError,
    SoundTouchEncodeError,
    SoundTouchError,
    SoundTouchHTTPError,
    SoundTouchTimeoutError,
)
from .events import (
    BassUpdatedEvent,
    ClockDisplayUpdatedEvent,
    ClockTimeUpdatedEvent,
    ConnectionStateUpdatedEvent,
    ErrorUpdatedEvent,
    LanguageUpdatedEvent,
    NameUpdatedEvent,
    NowPlayingUpdatedEvent,
    PresetUpdatedEvent,
    RecentsUpdatedEvent,
    SdkInfo,
    SpecialMessage,
    UpdateEvent,
    UpdatesEnvelope,
    UserActivity,
    VolumeUpdatedEvent,
    WebSocketMessage,
    ZoneUpdatedEvent,
)
from .protocol import EventCodec
from .reconnect import ReconnectPolicy
from .sync_client import SyncSoundTouchWebSocket
from .types import ConnectionState, EventType, SpecialMessageType, WebSocketConfig


def connect(host: str, **kwargs) -> ConnectionManager:
    """Create an event listener for a device.

    Use as an async context manager: the connection is opened on entry
    and closed on exit.  Keyword arguments are forwarded to
    :class:`ConnectionManager` -- common ones: ``config``, ``port``,
    ``handlers``, ``on_state_change``.

    Args:
        host: Device host name or IP address.
        **kwargs: Passed to :class:`ConnectionManager`.

    Raises:
        SoundTouchConnectionError: If the connection cannot be established.

    Example::

        async with connect("192.168.1.20") as ws:
            await ws.wait()
    """
    return ConnectionManager(host, **kwargs)


__all__ = [
    "__version__",
    "connect",
    "ConnectionManager",
    "SyncSoundTouchWebSocket",
    "SoundTouchClient",
    "EventCodec",
    "EventHandlers",
    "dispatch",
    "ReconnectPolicy",
    "ConnectionState",
    "EventType",
    "SpecialMessageType",
    "WebSocketConfig",
    "UpdateEvent",
    "UpdatesEnvelope",
    "NowPlayingUpdatedEvent",
    "VolumeUpdatedEvent",
    "ConnectionStateUpdatedEvent",
    "PresetUpdatedEvent",
    "ZoneUpdatedEvent",
    "BassUpdatedEvent",
    "ClockTimeUpdatedEvent",
    "ClockDisplayUpdatedEvent",
    "NameUpdatedEvent",
    "ErrorUpdatedEvent",
    "RecentsUpdatedEvent",
    "LanguageUpdatedEvent",
    "SpecialMessage",
    "SdkInfo",
    "UserActivity",
    "WebSocketMessage",
    "SoundTouchError",
    "SoundTouchConnectionError",
    "AlreadyConnectedError",
    "NotConnectedError",
    "SoundTouchTimeoutError",
    "SoundTouchDecodeError",
    "SoundTouchEncodeError",
    "SoundTouchHTTPError",
    "SoundTouchAPIError",
]

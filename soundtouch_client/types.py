# =============================================================================
# SoundTouch Client -- Type Definitions
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .constants import (
    HANDSHAKE_TIMEOUT,
    MAX_MESSAGE_SIZE,
    PING_INTERVAL,
    PONG_TIMEOUT,
    READ_BUFFER_SIZE,
    READ_TIMEOUT,
    RECONNECT_INTERVAL,
    RECONNECT_MAX_ATTEMPTS,
    WEBSOCKET_SUBPROTOCOL,
    WRITE_BUFFER_SIZE,
)

if TYPE_CHECKING:
    from ._logging import LogSink


class ConnectionState(str, Enum):
    """WebSocket connection lifecycle state.

    Typical flow: DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED.
    RECONNECTING is transient; DISCONNECTED is both initial and terminal.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class EventType(str, Enum):
    """Child element names of an ``<updates>`` envelope that are understood."""

    NOW_PLAYING = "nowPlayingUpdated"
    VOLUME_UPDATED = "volumeUpdated"
    CONNECTION_STATE = "connectionStateUpdated"
    PRESET_UPDATED = "presetUpdated"
    ZONE_UPDATED = "zoneUpdated"
    BASS_UPDATED = "bassUpdated"
    CLOCK_TIME_UPDATED = "clockTimeUpdated"
    CLOCK_DISPLAY_UPDATED = "clockDisplayUpdated"
    NAME_UPDATED = "nameUpdated"
    ERROR_UPDATED = "errorUpdated"
    RECENTS_UPDATED = "recentsUpdated"
    LANGUAGE_UPDATED = "languageUpdated"

    @property
    def label(self) -> str:
        return _EVENT_LABELS[self]


_EVENT_LABELS = {
    EventType.NOW_PLAYING: "Now Playing Updated",
    EventType.VOLUME_UPDATED: "Volume Updated",
    EventType.CONNECTION_STATE: "Connection State Updated",
    EventType.PRESET_UPDATED: "Preset Updated",
    EventType.ZONE_UPDATED: "Zone Updated",
    EventType.BASS_UPDATED: "Bass Updated",
    EventType.CLOCK_TIME_UPDATED: "Clock Time Updated",
    EventType.CLOCK_DISPLAY_UPDATED: "Clock Display Updated",
    EventType.NAME_UPDATED: "Name Updated",
    EventType.ERROR_UPDATED: "Error Updated",
    EventType.RECENTS_UPDATED: "Recents Updated",
    EventType.LANGUAGE_UPDATED: "Language Updated",
}


class SpecialMessageType(str, Enum):
    """Top-level messages that are not ``<updates>`` envelopes."""

    SDK_INFO = "sdkInfo"
    USER_ACTIVITY = "userActivity"


@dataclass
class WebSocketConfig:
    """Configuration for a device WebSocket connection.

    Attributes:
        reconnect_interval: Fixed delay in seconds between reconnection attempts.
        max_reconnect_attempts: Max retries after a drop, ``0`` for unlimited.
        ping_interval: Seconds between keep-alive pings.
        pong_timeout: Write deadline in seconds for pings and sent messages.
        read_timeout: Seconds of inactivity before the read-loop gives up.
        handshake_timeout: Seconds allowed for the opening handshake.
        read_buffer_size: Requested socket read buffer (advisory).
        write_buffer_size: High-water mark of the outgoing buffer.
        max_message_size: Largest inbound frame accepted, in bytes.
        subprotocols: WebSocket subprotocols offered to the device.
        logger: Log sink; ``None`` uses the ``[WebSocket]``-prefixed logger.
    """

    reconnect_interval: float = RECONNECT_INTERVAL
    max_reconnect_attempts: int = RECONNECT_MAX_ATTEMPTS
    ping_interval: float = PING_INTERVAL
    pong_timeout: float = PONG_TIMEOUT
    read_timeout: float = READ_TIMEOUT
    handshake_timeout: float = HANDSHAKE_TIMEOUT
    read_buffer_size: int = READ_BUFFER_SIZE
    write_buffer_size: int = WRITE_BUFFER_SIZE
    max_message_size: int = MAX_MESSAGE_SIZE
    subprotocols: tuple[str, ...] = (WEBSOCKET_SUBPROTOCOL,)
    logger: LogSink | None = None

    def validate(self) -> None:
        """Raise ``ValueError`` when a field is out of range."""
        for name in (
            "reconnect_interval",
            "ping_interval",
            "pong_timeout",
            "read_timeout",
            "handshake_timeout",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.max_reconnect_attempts < 0:
            raise ValueError("max_reconnect_attempts must be >= 0 (0 = unlimited)")
        for name in ("read_buffer_size", "write_buffer_size", "max_message_size"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

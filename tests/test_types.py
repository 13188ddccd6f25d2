"""Tests for enums, configuration and the logging sink."""

import logging

import pytest

from soundtouch_client._logging import PrefixedLogger, websocket_logger
from soundtouch_client.types import (
    ConnectionState,
    EventType,
    SpecialMessageType,
    WebSocketConfig,
)


class TestConnectionState:
    def test_values(self):
        assert ConnectionState.DISCONNECTED.value == "disconnected"
        assert ConnectionState.CONNECTING.value == "connecting"
        assert ConnectionState.CONNECTED.value == "connected"
        assert ConnectionState.RECONNECTING.value == "reconnecting"

    def test_string_enum(self):
        assert ConnectionState("connected") is ConnectionState.CONNECTED
        assert ConnectionState.CONNECTED == "connected"


class TestEventType:
    def test_twelve_wire_names(self):
        assert {e.value for e in EventType} == {
            "nowPlayingUpdated",
            "volumeUpdated",
            "connectionStateUpdated",
            "presetUpdated",
            "zoneUpdated",
            "bassUpdated",
            "clockTimeUpdated",
            "clockDisplayUpdated",
            "nameUpdated",
            "errorUpdated",
            "recentsUpdated",
            "languageUpdated",
        }

    def test_labels(self):
        assert EventType.VOLUME_UPDATED.label == "Volume Updated"
        assert EventType.NOW_PLAYING.label == "Now Playing Updated"
        assert all(e.label for e in EventType)

    def test_special_message_types(self):
        assert SpecialMessageType.SDK_INFO.value == "sdkInfo"
        assert SpecialMessageType.USER_ACTIVITY.value == "userActivity"


class TestWebSocketConfig:
    def test_defaults(self):
        config = WebSocketConfig()
        assert config.reconnect_interval == 5.0
        assert config.max_reconnect_attempts == 0
        assert config.ping_interval == 30.0
        assert config.pong_timeout == 10.0
        assert config.read_timeout == 60.0
        assert config.handshake_timeout == 10.0
        assert config.read_buffer_size == 1024
        assert config.write_buffer_size == 1024
        assert config.subprotocols == ("gabbo",)
        assert config.logger is None
        config.validate()

    @pytest.mark.parametrize(
        "field",
        ["reconnect_interval", "ping_interval", "pong_timeout", "read_timeout", "handshake_timeout"],
    )
    def test_non_positive_durations(self, field):
        with pytest.raises(ValueError, match=field):
            WebSocketConfig(**{field: 0}).validate()

    def test_negative_attempts(self):
        with pytest.raises(ValueError, match="max_reconnect_attempts"):
            WebSocketConfig(max_reconnect_attempts=-1).validate()

    def test_buffer_sizes(self):
        with pytest.raises(ValueError, match="write_buffer_size"):
            WebSocketConfig(write_buffer_size=0).validate()


class TestLogging:
    def test_websocket_prefix(self, caplog):
        log = websocket_logger()
        assert isinstance(log, PrefixedLogger)
        with caplog.at_level(logging.INFO, logger="soundtouch_client"):
            log.info("Connected to %s", "ws://h:8080/")
        assert caplog.records[-1].name == "soundtouch_client.websocket"
        assert caplog.records[-1].getMessage() == "[WebSocket] Connected to ws://h:8080/"

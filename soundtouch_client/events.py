# =============================================================================
# SoundTouch Client -- Event Types
# =============================================================================
#
# One frozen dataclass per recognized <updates> child element.  Every event
# carries the device id of its wrapper element and a payload snapshot from
# soundtouch_client.models.  The closed set of event classes is registered in
# EVENT_CLASSES, keyed by EventType.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from .models import (
    Bass,
    ClockDisplay,
    ClockTime,
    DeviceConnectionState,
    DeviceError,
    Language,
    Name,
    NowPlaying,
    Preset,
    Recents,
    Volume,
    Zone,
)
from .types import EventType, SpecialMessageType


@dataclass(frozen=True, slots=True)
class UpdateEvent:
    """Base class of every typed sub-event of an ``<updates>`` envelope."""

    device_id: str

    event_type: ClassVar[EventType]
    payload_type: ClassVar[type]
    payload_field: ClassVar[str]

    @property
    def payload(self) -> Any:
        return getattr(self, self.payload_field)


@dataclass(frozen=True, slots=True)
class NowPlayingUpdatedEvent(UpdateEvent):
    now_playing: NowPlaying

    event_type: ClassVar[EventType] = EventType.NOW_PLAYING
    payload_type: ClassVar[type] = NowPlaying
    payload_field: ClassVar[str] = "now_playing"


@dataclass(frozen=True, slots=True)
class VolumeUpdatedEvent(UpdateEvent):
    volume: Volume

    event_type: ClassVar[EventType] = EventType.VOLUME_UPDATED
    payload_type: ClassVar[type] = Volume
    payload_field: ClassVar[str] = "volume"


@dataclass(frozen=True, slots=True)
class ConnectionStateUpdatedEvent(UpdateEvent):
    connection_state: DeviceConnectionState

    event_type: ClassVar[EventType] = EventType.CONNECTION_STATE
    payload_type: ClassVar[type] = DeviceConnectionState
    payload_field: ClassVar[str] = "connection_state"


@dataclass(frozen=True, slots=True)
class PresetUpdatedEvent(UpdateEvent):
    preset: Preset

    event_type: ClassVar[EventType] = EventType.PRESET_UPDATED
    payload_type: ClassVar[type] = Preset
    payload_field: ClassVar[str] = "preset"


@dataclass(frozen=True, slots=True)
class ZoneUpdatedEvent(UpdateEvent):
    zone: Zone

    event_type: ClassVar[EventType] = EventType.ZONE_UPDATED
    payload_type: ClassVar[type] = Zone
    payload_field: ClassVar[str] = "zone"


@dataclass(frozen=True, slots=True)
class BassUpdatedEvent(UpdateEvent):
    bass: Bass

    event_type: ClassVar[EventType] = EventType.BASS_UPDATED
    payload_type: ClassVar[type] = Bass
    payload_field: ClassVar[str] = "bass"


@dataclass(frozen=True, slots=True)
class ClockTimeUpdatedEvent(UpdateEvent):
    clock_time: ClockTime

    event_type: ClassVar[EventType] = EventType.CLOCK_TIME_UPDATED
    payload_type: ClassVar[type] = ClockTime
    payload_field: ClassVar[str] = "clock_time"


@dataclass(frozen=True, slots=True)
class ClockDisplayUpdatedEvent(UpdateEvent):
    clock_display: ClockDisplay

    event_type: ClassVar[EventType] = EventType.CLOCK_DISPLAY_UPDATED
    payload_type: ClassVar[type] = ClockDisplay
    payload_field: ClassVar[str] = "clock_display"


@dataclass(frozen=True, slots=True)
class NameUpdatedEvent(UpdateEvent):
    name: Name

    event_type: ClassVar[EventType] = EventType.NAME_UPDATED
    payload_type: ClassVar[type] = Name
    payload_field: ClassVar[str] = "name"


@dataclass(frozen=True, slots=True)
class ErrorUpdatedEvent(UpdateEvent):
    error: DeviceError

    event_type: ClassVar[EventType] = EventType.ERROR_UPDATED
    payload_type: ClassVar[type] = DeviceError
    payload_field: ClassVar[str] = "error"


@dataclass(frozen=True, slots=True)
class RecentsUpdatedEvent(UpdateEvent):
    recents: Recents

    event_type: ClassVar[EventType] = EventType.RECENTS_UPDATED
    payload_type: ClassVar[type] = Recents
    payload_field: ClassVar[str] = "recents"


@dataclass(frozen=True, slots=True)
class LanguageUpdatedEvent(UpdateEvent):
    language: Language

    event_type: ClassVar[EventType] = EventType.LANGUAGE_UPDATED
    payload_type: ClassVar[type] = Language
    payload_field: ClassVar[str] = "language"


EVENT_CLASSES: dict[EventType, type[UpdateEvent]] = {
    cls.event_type: cls
    for cls in (
        NowPlayingUpdatedEvent,
        VolumeUpdatedEvent,
        ConnectionStateUpdatedEvent,
        PresetUpdatedEvent,
        ZoneUpdatedEvent,
        BassUpdatedEvent,
        ClockTimeUpdatedEvent,
        ClockDisplayUpdatedEvent,
        NameUpdatedEvent,
        ErrorUpdatedEvent,
        RecentsUpdatedEvent,
        LanguageUpdatedEvent,
    )
}


@dataclass(frozen=True, slots=True)
class UpdatesEnvelope:
    """One decoded ``<updates>`` frame.

    Attributes:
        device_id: ``deviceID`` attribute of the ``<updates>`` element.
        events: Recognized sub-events, in document order.
        unknown_elements: Names of child elements that were not recognized.
        timestamp: ``time.time()`` at decode.
    """

    device_id: str
    events: tuple[UpdateEvent, ...] = ()
    unknown_elements: tuple[str, ...] = ()
    timestamp: float = field(default=0.0, compare=False)

    @property
    def is_unknown(self) -> bool:
        """True when no recognized sub-event is present."""
        return not self.events

    def event_types(self) -> tuple[EventType, ...]:
        return tuple(event.event_type for event in self.events)

    def has_event_type(self, event_type: EventType) -> bool:
        return any(event.event_type == event_type for event in self.events)

    def get(self, event_type: EventType) -> UpdateEvent | None:
        """First sub-event of *event_type*, or None."""
        for event in self.events:
            if event.event_type == event_type:
                return event
        return None

    def __str__(self) -> str:
        if not self.events:
            return f"WebSocket Event [Device: {self.device_id}] - No events"
        if len(self.events) == 1:
            return (
                f"WebSocket Event [Device: {self.device_id}] - "
                f"{self.events[0].event_type.label}"
            )
        return f"WebSocket Event [Device: {self.device_id}] - {len(self.events)} events"


# -- Special (non-<updates>) messages -----------------------------------------


@dataclass(frozen=True, slots=True)
class SdkInfo:
    """Sent by the device right after the WebSocket opens."""

    server_version: str = ""
    server_build: str = ""


@dataclass(frozen=True, slots=True)
class UserActivity:
    device_id: str = ""


@dataclass(frozen=True, slots=True)
class SpecialMessage:
    type: SpecialMessageType
    data: SdkInfo | UserActivity
    device_id: str = ""
    raw: bytes = field(default=b"", repr=False)
    timestamp: float = field(default=0.0, compare=False)

    def __str__(self) -> str:
        if isinstance(self.data, SdkInfo):
            return (
                f"SoundTouch SDK Info - Version: {self.data.server_version}, "
                f"Build: {self.data.server_build}"
            )
        return f"User Activity [Device: {self.device_id}]"


WebSocketMessage = Union[UpdatesEnvelope, SpecialMessage]

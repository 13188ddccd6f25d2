# =============================================================================
# SoundTouch Client -- Payload Models
# =============================================================================
#
# Immutable snapshots of the device resources that appear both in HTTP API
# responses and inside pushed <updates> envelopes.  Each model knows how to
# build itself from an ElementTree element; malformed numeric or boolean
# values raise ValueError, which the callers turn into decode errors.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar
from xml.etree.ElementTree import Element

# -- Element helpers ----------------------------------------------------------


def _text(el: Element | None, default: str = "") -> str:
    if el is None or el.text is None:
        return default
    return el.text.strip()


def _child_text(el: Element, tag: str, default: str = "") -> str:
    return _text(el.find(tag), default)


def _parse_int(value: str | None, default: int = 0) -> int:
    if value is None or not value.strip():
        return default
    return int(value.strip())


_TRUE_VALUES = frozenset(("1", "t", "T", "true", "True", "TRUE"))
_FALSE_VALUES = frozenset(("0", "f", "F", "false", "False", "FALSE"))


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    stripped = value.strip()
    if stripped in _TRUE_VALUES:
        return True
    if stripped in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


def _attr_int(el: Element, name: str, default: int = 0) -> int:
    return _parse_int(el.get(name), default)


def _attr_opt_int(el: Element, name: str) -> int | None:
    value = el.get(name)
    if value is None or not value.strip():
        return None
    return int(value.strip())


# -- Enumerations -------------------------------------------------------------


class PlayStatus(str, Enum):
    PLAYING = "PLAY_STATE"
    PAUSED = "PAUSE_STATE"
    STOPPED = "STOP_STATE"
    BUFFERING = "BUFFERING_STATE"
    INVALID = "INVALID_PLAY_STATE"
    STANDBY = "STANDBY"

    @classmethod
    def parse(cls, value: str) -> PlayStatus:
        """Unknown states fall back to STOPPED."""
        try:
            return cls(value)
        except ValueError:
            return cls.STOPPED


class ShuffleSetting(str, Enum):
    OFF = "SHUFFLE_OFF"
    ON = "SHUFFLE_ON"

    @classmethod
    def parse(cls, value: str) -> ShuffleSetting:
        try:
            return cls(value)
        except ValueError:
            return cls.OFF


class RepeatSetting(str, Enum):
    OFF = "REPEAT_OFF"
    ONE = "REPEAT_ONE"
    ALL = "REPEAT_ALL"

    @classmethod
    def parse(cls, value: str) -> RepeatSetting:
        try:
            return cls(value)
        except ValueError:
            return cls.OFF


# -- Shared fragments ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ContentItem:
    """Reference to playable content (a station, playlist, input...)."""

    source: str = ""
    type: str = ""
    location: str = ""
    source_account: str = ""
    is_presetable: bool = False
    item_name: str = ""
    container_art: str = ""

    tag: ClassVar[str] = "ContentItem"

    @classmethod
    def from_element(cls, el: Element) -> ContentItem:
        return cls(
            source=el.get("source", ""),
            type=el.get("type", ""),
            location=el.get("location", ""),
            source_account=el.get("sourceAccount", ""),
            is_presetable=_parse_bool(el.get("isPresetable")),
            item_name=_child_text(el, "itemName"),
            container_art=_child_text(el, "containerArt"),
        )

    @classmethod
    def from_parent(cls, parent: Element) -> ContentItem | None:
        el = parent.find(cls.tag)
        return cls.from_element(el) if el is not None else None


@dataclass(frozen=True, slots=True)
class Art:
    url: str = ""
    status: str = ""

    @classmethod
    def from_element(cls, el: Element) -> Art:
        return cls(url=_text(el), status=el.get("artImageStatus", ""))


@dataclass(frozen=True, slots=True)
class TrackTime:
    """Playback position and total duration, both in seconds."""

    position: int = 0
    total: int = 0

    @classmethod
    def from_element(cls, el: Element) -> TrackTime:
        return cls(position=_parse_int(el.text), total=_attr_int(el, "total"))


# -- Resources ----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NowPlaying:
    """What the device is playing right now."""

    device_id: str = ""
    source: str = ""
    source_account: str = ""
    content_item: ContentItem | None = None
    track: str = ""
    artist: str = ""
    album: str = ""
    station_name: str = ""
    art: Art | None = None
    time: TrackTime | None = None
    skip_enabled: bool = False
    favorite_enabled: bool = False
    skip_previous_enabled: bool = False
    seek_supported: bool = False
    play_status: PlayStatus = PlayStatus.STOPPED
    shuffle_setting: ShuffleSetting = ShuffleSetting.OFF
    repeat_setting: RepeatSetting = RepeatSetting.OFF
    stream_type: str = ""
    track_id: str = ""
    position: int | None = None
    description: str = ""
    station_location: str = ""

    tag: ClassVar[str] = "nowPlaying"

    @classmethod
    def from_element(cls, el: Element) -> NowPlaying:
        art_el = el.find("art")
        time_el = el.find("time")
        seek_el = el.find("seekSupported")
        position_el = el.find("position")
        return cls(
            device_id=el.get("deviceID", ""),
            source=el.get("source", ""),
            source_account=el.get("sourceAccount", ""),
            content_item=ContentItem.from_parent(el),
            track=_child_text(el, "track"),
            artist=_child_text(el, "artist"),
            album=_child_text(el, "album"),
            station_name=_child_text(el, "stationName"),
            art=Art.from_element(art_el) if art_el is not None else None,
            time=TrackTime.from_element(time_el) if time_el is not None else None,
            skip_enabled=el.find("skipEnabled") is not None,
            favorite_enabled=el.find("favoriteEnabled") is not None,
            skip_previous_enabled=el.find("skipPreviousEnabled") is not None,
            seek_supported=(
                _parse_bool(seek_el.get("value")) if seek_el is not None else False
            ),
            play_status=PlayStatus.parse(_child_text(el, "playStatus")),
            shuffle_setting=ShuffleSetting.parse(_child_text(el, "shuffleSetting")),
            repeat_setting=RepeatSetting.parse(_child_text(el, "repeatSetting")),
            stream_type=_child_text(el, "streamType"),
            track_id=_child_text(el, "trackID"),
            position=(
                _parse_int(position_el.text) if position_el is not None else None
            ),
            description=_child_text(el, "description"),
            station_location=_child_text(el, "stationLocation"),
        )

    @property
    def is_playing(self) -> bool:
        return self.play_status == PlayStatus.PLAYING

    @property
    def is_empty(self) -> bool:
        return not (self.track or self.artist or self.album or self.station_name)

    @property
    def display_title(self) -> str:
        if self.track:
            return self.track
        if self.station_name:
            return self.station_name
        if self.content_item and self.content_item.item_name:
            return self.content_item.item_name
        return "Unknown"

    @property
    def display_artist(self) -> str:
        return self.artist or self.description

    @property
    def artwork_url(self) -> str:
        if self.art and self.art.url:
            return self.art.url
        if self.content_item and self.content_item.container_art:
            return self.content_item.container_art
        return ""


@dataclass(frozen=True, slots=True)
class Volume:
    device_id: str = ""
    target: int = 0
    actual: int = 0
    muted: bool = False

    tag: ClassVar[str] = "volume"

    @classmethod
    def from_element(cls, el: Element) -> Volume:
        return cls(
            device_id=el.get("deviceID", ""),
            target=_parse_int(_child_text(el, "targetvolume")),
            actual=_parse_int(_child_text(el, "actualvolume")),
            muted=_parse_bool(_child_text(el, "muteenabled")),
        )

    @property
    def in_sync(self) -> bool:
        return self.target == self.actual


@dataclass(frozen=True, slots=True)
class Bass:
    device_id: str = ""
    target: int = 0
    actual: int = 0

    tag: ClassVar[str] = "bass"

    @classmethod
    def from_element(cls, el: Element) -> Bass:
        return cls(
            device_id=el.get("deviceID", ""),
            target=_parse_int(_child_text(el, "targetbass")),
            actual=_parse_int(_child_text(el, "actualbass")),
        )

    @property
    def at_target(self) -> bool:
        return self.target == self.actual


@dataclass(frozen=True, slots=True)
class DeviceConnectionState:
    """Network connection state as reported by the device itself."""

    state: str = ""
    signal: str = ""
    up: bool = False

    tag: ClassVar[str] = "connectionState"

    @classmethod
    def from_element(cls, el: Element) -> DeviceConnectionState:
        return cls(
            state=el.get("state", ""),
            signal=el.get("signal", ""),
            up=_parse_bool(el.get("up")),
        )

    @property
    def is_connected(self) -> bool:
        return self.state == "CONNECTED"


@dataclass(frozen=True, slots=True)
class Preset:
    id: int = 0
    created_on: int | None = None
    updated_on: int | None = None
    content_item: ContentItem | None = None

    tag: ClassVar[str] = "preset"

    @classmethod
    def from_element(cls, el: Element) -> Preset:
        return cls(
            id=_attr_int(el, "id"),
            created_on=_attr_opt_int(el, "createdOn"),
            updated_on=_attr_opt_int(el, "updatedOn"),
            content_item=ContentItem.from_parent(el),
        )

    @property
    def is_empty(self) -> bool:
        return self.content_item is None

    @property
    def display_name(self) -> str:
        if self.content_item and self.content_item.item_name:
            return self.content_item.item_name
        return f"Preset {self.id}"


@dataclass(frozen=True, slots=True)
class Presets:
    presets: tuple[Preset, ...] = ()

    tag: ClassVar[str] = "presets"

    @classmethod
    def from_element(cls, el: Element) -> Presets:
        return cls(presets=tuple(Preset.from_element(p) for p in el.findall("preset")))

    def get(self, preset_id: int) -> Preset | None:
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        return None


@dataclass(frozen=True, slots=True)
class ZoneMember:
    device_id: str = ""
    ip_address: str = ""

    @classmethod
    def from_element(cls, el: Element) -> ZoneMember:
        return cls(device_id=_text(el), ip_address=el.get("ipaddress", ""))


@dataclass(frozen=True, slots=True)
class Zone:
    """Multiroom zone membership; an empty master means standalone."""

    master: str = ""
    members: tuple[ZoneMember, ...] = ()

    tag: ClassVar[str] = "zone"

    @classmethod
    def from_element(cls, el: Element) -> Zone:
        return cls(
            master=el.get("master", ""),
            members=tuple(ZoneMember.from_element(m) for m in el.findall("member")),
        )

    @property
    def is_standalone(self) -> bool:
        return not self.master

    def is_master(self, device_id: str) -> bool:
        return bool(self.master) and self.master == device_id


@dataclass(frozen=True, slots=True)
class LocalTime:
    year: int = 0
    month: int = 0
    day_of_month: int = 0
    day_of_week: int = 0
    hour: int = 0
    minute: int = 0
    second: int = 0

    @classmethod
    def from_element(cls, el: Element) -> LocalTime:
        return cls(
            year=_attr_int(el, "year"),
            month=_attr_int(el, "month"),
            day_of_month=_attr_int(el, "dayOfMonth"),
            day_of_week=_attr_int(el, "dayOfWeek"),
            hour=_attr_int(el, "hour"),
            minute=_attr_int(el, "minute"),
            second=_attr_int(el, "second"),
        )


@dataclass(frozen=True, slots=True)
class ClockTime:
    utc_time: int = 0
    cue_music: int = 0
    time_format: str = ""
    brightness: int = 0
    clock_error: int = 0
    utc_sync_time: int = 0
    local_time: LocalTime | None = None
    zone: str = ""
    utc: int = 0
    value: str = ""

    tag: ClassVar[str] = "clockTime"

    @classmethod
    def from_element(cls, el: Element) -> ClockTime:
        local_el = el.find("localTime")
        return cls(
            utc_time=_attr_int(el, "utcTime"),
            cue_music=_attr_int(el, "cueMusic"),
            time_format=el.get("timeFormat", ""),
            brightness=_attr_int(el, "brightness"),
            clock_error=_attr_int(el, "clockError"),
            utc_sync_time=_attr_int(el, "utcSyncTime"),
            local_time=LocalTime.from_element(local_el) if local_el is not None else None,
            zone=el.get("zone", ""),
            utc=_attr_int(el, "utc"),
            value=_text(el),
        )


@dataclass(frozen=True, slots=True)
class ClockDisplay:
    device_id: str = ""
    enabled: bool = False
    format: str = ""
    brightness: int = 0
    auto_dim: bool = False
    time_zone: str = ""
    value: str = ""

    tag: ClassVar[str] = "clockDisplay"

    @classmethod
    def from_element(cls, el: Element) -> ClockDisplay:
        return cls(
            device_id=el.get("deviceID", ""),
            enabled=_parse_bool(el.get("enabled")),
            format=el.get("format", ""),
            brightness=_attr_int(el, "brightness"),
            auto_dim=_parse_bool(el.get("autoDim")),
            time_zone=el.get("timeZone", ""),
            value=_text(el),
        )


@dataclass(frozen=True, slots=True)
class Name:
    value: str = ""

    tag: ClassVar[str] = "name"

    @classmethod
    def from_element(cls, el: Element) -> Name:
        return cls(value=_text(el))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class DeviceError:
    """Error state pushed by the device (not a client-side exception)."""

    value: str = ""
    name: str = ""
    text: str = ""

    tag: ClassVar[str] = "error"

    @classmethod
    def from_element(cls, el: Element) -> DeviceError:
        return cls(value=el.get("value", ""), name=el.get("name", ""), text=_text(el))


@dataclass(frozen=True, slots=True)
class RecentItem:
    device_id: str = ""
    created_on: int = 0
    id: str = ""
    content_item: ContentItem | None = None

    @classmethod
    def from_element(cls, el: Element) -> RecentItem:
        return cls(
            device_id=el.get("deviceID", ""),
            created_on=_attr_int(el, "createdOn"),
            id=el.get("id", ""),
            content_item=ContentItem.from_parent(el),
        )


@dataclass(frozen=True, slots=True)
class Recents:
    items: tuple[RecentItem, ...] = ()

    tag: ClassVar[str] = "recents"

    @classmethod
    def from_element(cls, el: Element) -> Recents:
        return cls(items=tuple(RecentItem.from_element(r) for r in el.findall("recent")))


@dataclass(frozen=True, slots=True)
class Language:
    value: str = ""

    tag: ClassVar[str] = "language"

    @classmethod
    def from_element(cls, el: Element) -> Language:
        return cls(value=_text(el))

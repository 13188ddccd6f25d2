"""Tests for payload models."""

import pytest

from soundtouch_client.models import (
    ContentItem,
    DeviceConnectionState,
    NowPlaying,
    PlayStatus,
    Preset,
    RepeatSetting,
    ShuffleSetting,
    Volume,
    Zone,
)
from soundtouch_client.protocol import parse_xml


class TestEnums:
    def test_play_status_fallback(self):
        assert PlayStatus.parse("PAUSE_STATE") is PlayStatus.PAUSED
        assert PlayStatus.parse("SOMETHING_NEW") is PlayStatus.STOPPED
        assert PlayStatus.parse("") is PlayStatus.STOPPED

    def test_shuffle_and_repeat_fallback(self):
        assert ShuffleSetting.parse("bogus") is ShuffleSetting.OFF
        assert RepeatSetting.parse("REPEAT_ONE") is RepeatSetting.ONE
        assert RepeatSetting.parse("bogus") is RepeatSetting.OFF


class TestVolume:
    def test_whitespace_tolerated(self):
        volume = Volume.from_element(
            parse_xml(
                "<volume><targetvolume> 12 </targetvolume>"
                "<actualvolume>12</actualvolume><muteenabled>TRUE</muteenabled></volume>"
            )
        )
        assert volume.target == 12
        assert volume.muted is True
        assert volume.in_sync

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("t", True), ("T", True), ("True", True), ("f", False), ("F", False), ("FALSE", False)],
    )
    def test_short_and_capitalized_bools(self, raw, expected):
        volume = Volume.from_element(parse_xml(f"<volume><muteenabled>{raw}</muteenabled></volume>"))
        assert volume.muted is expected

    def test_invalid_bool(self):
        with pytest.raises(ValueError):
            Volume.from_element(parse_xml("<volume><muteenabled>maybe</muteenabled></volume>"))
        with pytest.raises(ValueError):
            Volume.from_element(parse_xml("<volume><muteenabled>tRuE</muteenabled></volume>"))

    def test_frozen(self):
        with pytest.raises(AttributeError):
            Volume().target = 5


class TestNowPlaying:
    def test_display_fallbacks(self):
        radio = NowPlaying.from_element(
            parse_xml(
                '<nowPlaying source="TUNEIN"><stationName>Jazz FM</stationName>'
                "<description>Smooth</description>"
                '<ContentItem source="TUNEIN"><containerArt>http://art/x.png</containerArt>'
                "</ContentItem></nowPlaying>"
            )
        )
        assert radio.display_title == "Jazz FM"
        assert radio.display_artist == "Smooth"
        assert radio.artwork_url == "http://art/x.png"
        assert not radio.is_empty
        assert not radio.is_playing

    def test_seek_and_position(self):
        np = NowPlaying.from_element(
            parse_xml(
                '<nowPlaying><seekSupported value="true"/><position>17</position>'
                "<skipPreviousEnabled/></nowPlaying>"
            )
        )
        assert np.seek_supported is True
        assert np.position == 17
        assert np.skip_previous_enabled is True
        assert np.time is None


class TestOtherModels:
    def test_content_item_from_parent(self):
        assert ContentItem.from_parent(parse_xml("<preset/>")) is None

    def test_preset_without_timestamps(self):
        preset = Preset.from_element(parse_xml('<preset id="4"/>'))
        assert preset.id == 4
        assert preset.created_on is None
        assert preset.display_name == "Preset 4"

    def test_zone_master(self):
        zone = Zone.from_element(parse_xml('<zone master="A"><member ipaddress="1.2.3.4">B</member></zone>'))
        assert not zone.is_standalone
        assert zone.is_master("A")
        assert not zone.is_master("B")

    def test_device_connection_state(self):
        state = DeviceConnectionState.from_element(parse_xml('<connectionState state="CONNECTED" up="false"/>'))
        assert state.is_connected
        assert state.up is False

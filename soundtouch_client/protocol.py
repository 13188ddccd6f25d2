# =============================================================================
# SoundTouch Client -- Event Codec
# =============================================================================
#
# Decodes frames pushed by the device over the WebSocket:
#
#   <updates deviceID="...">          -> UpdatesEnvelope
#       <volumeUpdated deviceID="..."><volume>...</volume></volumeUpdated>
#       ...
#   </updates>
#   <SoundTouchSdkInfo .../>          -> SpecialMessage (SDK_INFO)
#   <userActivityUpdate deviceID=""/> -> SpecialMessage (USER_ACTIVITY)
#
# Anything else at the top level is a decode error.  Unknown children of
# <updates> are kept by name and never rejected.  The codec is pure: it does
# no I/O and no logging.
# =============================================================================

from __future__ import annotations

import time
from xml.etree.ElementTree import Element, ParseError

import defusedxml.ElementTree as ET
from defusedxml.common import DefusedXmlException

from .constants import (
    DEVICE_ID_ATTR,
    SDK_INFO_ELEMENT,
    UPDATES_ELEMENT,
    USER_ACTIVITY_ELEMENT,
)
from .errors import SoundTouchDecodeError
from .events import (
    EVENT_CLASSES,
    SdkInfo,
    SpecialMessage,
    UpdateEvent,
    UpdatesEnvelope,
    UserActivity,
    WebSocketMessage,
)
from .types import EventType, SpecialMessageType


def parse_xml(data: bytes | str) -> Element:
    """Parse untrusted XML into an element, raising SoundTouchDecodeError."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        return ET.fromstring(data)
    except (ParseError, DefusedXmlException) as exc:
        raise SoundTouchDecodeError(f"failed to parse XML: {exc}") from exc


class EventCodec:
    """Turns raw WebSocket text frames into typed messages."""

    def decode(self, data: bytes | str) -> WebSocketMessage:
        """Decode one frame.

        Raises:
            SoundTouchDecodeError: Malformed XML, an unrecognized top-level
                element, or an unparseable value inside a known payload.
        """
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        root = parse_xml(raw)
        received_at = time.time()

        try:
            if root.tag == UPDATES_ELEMENT:
                return self._decode_updates(root, received_at)
            if root.tag == SDK_INFO_ELEMENT:
                return SpecialMessage(
                    type=SpecialMessageType.SDK_INFO,
                    data=SdkInfo(
                        server_version=root.get("serverVersion", ""),
                        server_build=root.get("serverBuild", ""),
                    ),
                    raw=raw,
                    timestamp=received_at,
                )
            if root.tag == USER_ACTIVITY_ELEMENT:
                device_id = root.get(DEVICE_ID_ATTR, "")
                return SpecialMessage(
                    type=SpecialMessageType.USER_ACTIVITY,
                    data=UserActivity(device_id=device_id),
                    device_id=device_id,
                    raw=raw,
                    timestamp=received_at,
                )
        except ValueError as exc:
            raise SoundTouchDecodeError(
                f"invalid value in <{root.tag}> message: {exc}"
            ) from exc

        raise SoundTouchDecodeError(f"unrecognized message element <{root.tag}>")

    def _decode_updates(self, root: Element, received_at: float) -> UpdatesEnvelope:
        events: list[UpdateEvent] = []
        unknown: list[str] = []
        for child in root:
            event = self._decode_event(child)
            if event is None:
                unknown.append(child.tag)
            else:
                events.append(event)
        return UpdatesEnvelope(
            device_id=root.get(DEVICE_ID_ATTR, ""),
            events=tuple(events),
            unknown_elements=tuple(unknown),
            timestamp=received_at,
        )

    @staticmethod
    def _decode_event(child: Element) -> UpdateEvent | None:
        try:
            event_type = EventType(child.tag)
        except ValueError:
            return None

        event_cls = EVENT_CLASSES[event_type]
        payload_cls = event_cls.payload_type
        payload_el = child.find(payload_cls.tag)
        payload = (
            payload_cls.from_element(payload_el)
            if payload_el is not None
            else payload_cls()
        )
        return event_cls(child.get(DEVICE_ID_ATTR, ""), payload)

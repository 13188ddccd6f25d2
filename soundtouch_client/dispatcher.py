# =============================================================================
# SoundTouch Client -- Event Dispatcher
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ._logging import LogSink, logger
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
    SpecialMessage,
    UpdatesEnvelope,
    VolumeUpdatedEvent,
    WebSocketMessage,
    ZoneUpdatedEvent,
)
from .types import EventType

Handler = Optional[Callable[[Any], Any]]


@dataclass(frozen=True)
class EventHandlers:
    """Callback table: at most one handler per event type.

    Frozen so that a table handed to a reader is never modified underneath
    it; edits go through :func:`dataclasses.replace`.
    """

    on_now_playing: Optional[Callable[[NowPlayingUpdatedEvent], Any]] = None
    on_volume_updated: Optional[Callable[[VolumeUpdatedEvent], Any]] = None
    on_connection_state: Optional[Callable[[ConnectionStateUpdatedEvent], Any]] = None
    on_preset_updated: Optional[Callable[[PresetUpdatedEvent], Any]] = None
    on_zone_updated: Optional[Callable[[ZoneUpdatedEvent], Any]] = None
    on_bass_updated: Optional[Callable[[BassUpdatedEvent], Any]] = None
    on_clock_time_updated: Optional[Callable[[ClockTimeUpdatedEvent], Any]] = None
    on_clock_display_updated: Optional[
        Callable[[ClockDisplayUpdatedEvent], Any]
    ] = None
    on_name_updated: Optional[Callable[[NameUpdatedEvent], Any]] = None
    on_error_updated: Optional[Callable[[ErrorUpdatedEvent], Any]] = None
    on_recents_updated: Optional[Callable[[RecentsUpdatedEvent], Any]] = None
    on_language_updated: Optional[Callable[[LanguageUpdatedEvent], Any]] = None
    on_unknown_event: Optional[Callable[[UpdatesEnvelope], Any]] = None
    on_special_message: Optional[Callable[[SpecialMessage], Any]] = None

    def for_event_type(self, event_type: EventType) -> Handler:
        return getattr(self, HANDLER_SLOTS[event_type])


# Event type -> EventHandlers attribute.  Covers every EventType member.
HANDLER_SLOTS: dict[EventType, str] = {
    EventType.NOW_PLAYING: "on_now_playing",
    EventType.VOLUME_UPDATED: "on_volume_updated",
    EventType.CONNECTION_STATE: "on_connection_state",
    EventType.PRESET_UPDATED: "on_preset_updated",
    EventType.ZONE_UPDATED: "on_zone_updated",
    EventType.BASS_UPDATED: "on_bass_updated",
    EventType.CLOCK_TIME_UPDATED: "on_clock_time_updated",
    EventType.CLOCK_DISPLAY_UPDATED: "on_clock_display_updated",
    EventType.NAME_UPDATED: "on_name_updated",
    EventType.ERROR_UPDATED: "on_error_updated",
    EventType.RECENTS_UPDATED: "on_recents_updated",
    EventType.LANGUAGE_UPDATED: "on_language_updated",
}


def _invoke(handler: Callable[[Any], Any], arg: Any, log: LogSink, what: str) -> None:
    try:
        handler(arg)
    except Exception:
        log.exception("Handler error for '%s'", what)


def dispatch(
    message: WebSocketMessage,
    handlers: EventHandlers,
    *,
    log: LogSink | None = None,
) -> None:
    """Invoke the callbacks registered for *message*.

    Every recognized sub-event of an envelope goes to its typed handler,
    in document order.  An envelope without any recognized sub-event goes
    to ``on_unknown_event``.  Missing handlers are skipped and exceptions
    raised by handlers are logged, so this never raises.

    Handlers run synchronously on the caller's task (the read-loop) and
    must return quickly; a blocking handler stalls delivery of later frames.
    """
    log = log or logger

    if isinstance(message, SpecialMessage):
        if handlers.on_special_message is not None:
            _invoke(handlers.on_special_message, message, log, message.type.value)
        return

    if message.is_unknown:
        if handlers.on_unknown_event is not None:
            _invoke(handlers.on_unknown_event, message, log, "unknown")
        elif log.isEnabledFor(logging.DEBUG):
            log.debug("Received unknown event types: %s", list(message.unknown_elements))
        return

    for event in message.events:
        handler = handlers.for_event_type(event.event_type)
        if handler is not None:
            _invoke(handler, event, log, event.event_type.value)

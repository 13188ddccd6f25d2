# =============================================================================
# SoundTouch Client -- Synchronous Wrapper
# =============================================================================
#
# Thread-based wrapper around ConnectionManager for blocking usage.
# =============================================================================

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Any, Awaitable, Callable, TypeVar

from ._logging import logger
from .connection import ConnectionManager
from .constants import WEBSOCKET_PORT
from .dispatcher import EventHandlers
from .errors import NotConnectedError, SoundTouchTimeoutError
from .types import ConnectionState, WebSocketConfig

H = TypeVar("H", bound=Callable[..., Any])
T = TypeVar("T")


class SyncSoundTouchWebSocket:
    """Blocking / thread-based event listener.

    Runs a :class:`ConnectionManager` on a background event loop thread.
    All public methods are thread-safe and block until complete.  Event
    callbacks are invoked on the background thread.

    Args:
        host: Device host name or IP address.
        config: Connection configuration.
        port: WebSocket port of the device (default 8080).
        on_state_change: Called with each new :class:`ConnectionState`.

    Example::

        ws = SyncSoundTouchWebSocket("192.168.1.20")

        @ws.on_now_playing
        def playing(event):
            print(event.now_playing.display_title)

        ws.connect()
        ws.wait()
    """

    def __init__(
        self,
        host: str,
        *,
        config: WebSocketConfig | None = None,
        port: int = WEBSOCKET_PORT,
        on_state_change: Callable[[ConnectionState], Any] | None = None,
    ) -> None:
        self._manager = ConnectionManager(
            host, config=config, port=port, on_state_change=on_state_change
        )
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._loop_ready = threading.Event()
        self._thread_lock = threading.Lock()

    # -- Lifecycle ------------------------------------------------------------

    def connect(self, timeout: float = 15.0) -> None:
        """Connect on the background thread.  Blocks until the handshake is done.

        Raises:
            AlreadyConnectedError: Already connected or connecting.
            SoundTouchTimeoutError: *timeout* expired first.
            SoundTouchConnectionError: The device could not be reached.
        """
        self._run(self._manager.connect(), timeout, "connect")

    def connect_with_config(self, config: WebSocketConfig, timeout: float = 15.0) -> None:
        self._run(self._manager.connect_with_config(config), timeout, "connect")

    def disconnect(self, timeout: float = 5.0) -> None:
        """Disconnect and stop the background thread.

        Raises:
            NotConnectedError: Already disconnected.
        """
        if self._loop is None:
            raise NotConnectedError()
        try:
            self._run(self._manager.disconnect(), timeout, "disconnect")
        finally:
            self._stop_loop()

    def close(self) -> None:
        """Disconnect if needed and stop the background thread.  Never raises."""
        if self._loop is not None and self._manager.state != ConnectionState.DISCONNECTED:
            try:
                self._run(self._manager.disconnect(), 5.0, "disconnect")
            except Exception as exc:
                logger.debug("Disconnect during close failed: %s", exc)
        self._stop_loop()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the connection is terminally closed.

        Returns:
            False if *timeout* expired first, True otherwise.
        """
        loop = self._loop
        if loop is None:
            return True
        future = asyncio.run_coroutine_threadsafe(self._manager.wait(), loop)
        try:
            future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            return False
        return True

    def __enter__(self) -> SyncSoundTouchWebSocket:
        self.connect()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -- Send -----------------------------------------------------------------

    def send_message(self, data: str | bytes, timeout: float = 5.0) -> None:
        """Send a text frame (blocks until written).

        Raises:
            NotConnectedError: No open connection.
            SoundTouchEncodeError: ``data`` is bytes that are not valid UTF-8.
        """
        if self._loop is None:
            raise NotConnectedError()
        self._run(self._manager.send_message(data), timeout, "send")

    # -- Properties -----------------------------------------------------------

    @property
    def host(self) -> str:
        return self._manager.host

    @property
    def url(self) -> str:
        return self._manager.url

    @property
    def is_connected(self) -> bool:
        return self._manager.is_connected

    @property
    def state(self) -> ConnectionState:
        return self._manager.state

    @property
    def handlers(self) -> EventHandlers:
        return self._manager.handlers

    # -- Handler registration -------------------------------------------------

    def set_handlers(self, handlers: EventHandlers) -> None:
        self._manager.set_handlers(handlers)

    def on_now_playing(self, handler: H | None) -> H | None:
        return self._manager.on_now_playing(handler)

    def on_volume_updated(self, handler: H | None) -> H | None:
        return self._manager.on_volume_updated(handler)

    def on_connection_state(self, handler: H | None) -> H | None:
        return self._manager.on_connection_state(handler)

    def on_preset_updated(self, handler: H | None) -> H | None:
        return self._manager.on_preset_updated(handler)

    def on_zone_updated(self, handler: H | None) -> H | None:
        return self._manager.on_zone_updated(handler)

    def on_bass_updated(self, handler: H | None) -> H | None:
        return self._manager.on_bass_updated(handler)

    def on_clock_time_updated(self, handler: H | None) -> H | None:
        return self._manager.on_clock_time_updated(handler)

    def on_clock_display_updated(self, handler: H | None) -> H | None:
        return self._manager.on_clock_display_updated(handler)

    def on_name_updated(self, handler: H | None) -> H | None:
        return self._manager.on_name_updated(handler)

    def on_error_updated(self, handler: H | None) -> H | None:
        return self._manager.on_error_updated(handler)

    def on_recents_updated(self, handler: H | None) -> H | None:
        return self._manager.on_recents_updated(handler)

    def on_language_updated(self, handler: H | None) -> H | None:
        return self._manager.on_language_updated(handler)

    def on_unknown_event(self, handler: H | None) -> H | None:
        return self._manager.on_unknown_event(handler)

    def on_special_message(self, handler: H | None) -> H | None:
        return self._manager.on_special_message(handler)

    # -- Internal -------------------------------------------------------------

    def _run(self, coro: Awaitable[T], timeout: float | None, what: str) -> T:
        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise SoundTouchTimeoutError(f"{what} timed out after {timeout}s") from None

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._thread_lock:
            if self._loop is not None and self._thread and self._thread.is_alive():
                return self._loop
            self._loop_ready.clear()
            self._thread = threading.Thread(
                target=self._run_loop, daemon=True, name="soundtouch-websocket"
            )
            self._thread.start()
        self._loop_ready.wait()
        assert self._loop is not None
        return self._loop

    def _stop_loop(self) -> None:
        with self._thread_lock:
            loop, thread = self._loop, self._thread
        if loop is not None:
            loop.call_soon_threadsafe(loop.stop)
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=5.0)

    def _run_loop(self) -> None:
        """Background thread: run the event loop until stopped."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._loop_ready.set()
        try:
            loop.run_forever()
        except Exception as exc:
            logger.error("Background loop error: %s", exc)
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()
            with self._thread_lock:
                if self._loop is loop:
                    self._loop = None

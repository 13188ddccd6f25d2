# =============================================================================
# SoundTouch Client -- Connection Manager
# =============================================================================
#
# WebSocket lifecycle for one device: connect, read-loop, keep-alive ping
# loop, disconnect and fixed-interval reconnection.
#
#   DISCONNECTED --connect()--> CONNECTING --handshake--> CONNECTED
#   CONNECTED --read error / deadline--> RECONNECTING | DISCONNECTED
#   RECONNECTING --attempt ok--> CONNECTED, --exhausted--> DISCONNECTED
#   any state but DISCONNECTED --disconnect()--> DISCONNECTED
#
# Mutable fields are guarded by one threading.Lock that is only held for
# flag and reference swaps, never across an await.
# =============================================================================

from __future__ import annotations

import asyncio
import dataclasses
import threading
from typing import Any, Awaitable, Callable, TypeVar

import websockets
import websockets.asyncio.client
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from ._logging import LogSink, websocket_logger
from .constants import USER_AGENT, WEBSOCKET_PATH, WEBSOCKET_PORT, WS_CLOSE_NORMAL
from .dispatcher import EventHandlers, dispatch
from .errors import (
    AlreadyConnectedError,
    NotConnectedError,
    SoundTouchConnectionError,
    SoundTouchDecodeError,
    SoundTouchEncodeError,
    SoundTouchTimeoutError,
)
from .protocol import EventCodec
from .reconnect import ReconnectPolicy
from .types import ConnectionState, WebSocketConfig

H = TypeVar("H", bound=Callable[..., Any])


def websocket_url(host: str, port: int = WEBSOCKET_PORT) -> str:
    """WebSocket endpoint of a device: its host on the notification port."""
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"  # bare IPv6 literal
    return f"ws://{host}:{port}{WEBSOCKET_PATH}"


class ConnectionManager:
    """Event listener connection to a single SoundTouch device.

    Frames pushed by the device are decoded by :class:`EventCodec` and
    handed to :func:`dispatch` on the read-loop task, strictly in arrival
    order.  Errors raised inside the background tasks are reported only
    through the configured logger and through :attr:`state`.

    Args:
        host: Device host name or IP address.
        config: Default configuration used by :meth:`connect`.
        port: WebSocket port of the device (default 8080).
        handlers: Initial callback table.
        on_state_change: Called with the new :class:`ConnectionState` after
            every transition.
        sleep: Awaitable sleep used between reconnection attempts.

    Example::

        ws = ConnectionManager("192.168.1.20")

        @ws.on_volume_updated
        def volume(event):
            print(event.volume.actual)

        await ws.connect()
        await ws.wait()
    """

    def __init__(
        self,
        host: str,
        *,
        config: WebSocketConfig | None = None,
        port: int = WEBSOCKET_PORT,
        handlers: EventHandlers | None = None,
        on_state_change: Callable[[ConnectionState], Any] | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self._host = host
        self._url = websocket_url(host, port)
        self._config = config or WebSocketConfig()
        self._config.validate()
        self._session_config = self._config
        self._default_log: LogSink = self._config.logger or websocket_logger()
        self._log: LogSink = self._default_log
        self._codec = EventCodec()
        self._on_state_change = on_state_change
        self._sleep = sleep

        self._lock = threading.Lock()
        self._handlers = handlers or EventHandlers()
        self._state = ConnectionState.DISCONNECTED
        self._ws: websockets.asyncio.client.ClientConnection | None = None
        self._reconnect_enabled = False

        # Per-session cancellation token and terminal-close signal
        self._stop: asyncio.Event | None = None
        self._closed: asyncio.Event | None = None

        # Tasks
        self._read_task: asyncio.Task[None] | None = None
        self._ping_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None

    # -- Properties -----------------------------------------------------------

    @property
    def host(self) -> str:
        return self._host

    @property
    def url(self) -> str:
        return self._url

    @property
    def config(self) -> WebSocketConfig:
        return self._config

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._state == ConnectionState.CONNECTED and self._ws is not None

    @property
    def handlers(self) -> EventHandlers:
        with self._lock:
            return self._handlers

    # -- Handler registration -------------------------------------------------

    def set_handlers(self, handlers: EventHandlers) -> None:
        """Replace the whole callback table."""
        with self._lock:
            self._handlers = handlers

    def _set_handler(self, slot: str, handler: H | None) -> H | None:
        with self._lock:
            self._handlers = dataclasses.replace(self._handlers, **{slot: handler})
        return handler

    # Each setter returns its argument so it can be used as a decorator.

    def on_now_playing(self, handler: H | None) -> H | None:
        return self._set_handler("on_now_playing", handler)

    def on_volume_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_volume_updated", handler)

    def on_connection_state(self, handler: H | None) -> H | None:
        return self._set_handler("on_connection_state", handler)

    def on_preset_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_preset_updated", handler)

    def on_zone_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_zone_updated", handler)

    def on_bass_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_bass_updated", handler)

    def on_clock_time_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_clock_time_updated", handler)

    def on_clock_display_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_clock_display_updated", handler)

    def on_name_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_name_updated", handler)

    def on_error_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_error_updated", handler)

    def on_recents_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_recents_updated", handler)

    def on_language_updated(self, handler: H | None) -> H | None:
        return self._set_handler("on_language_updated", handler)

    def on_unknown_event(self, handler: H | None) -> H | None:
        return self._set_handler("on_unknown_event", handler)

    def on_special_message(self, handler: H | None) -> H | None:
        return self._set_handler("on_special_message", handler)

    # -- Connect / Disconnect -------------------------------------------------

    async def connect(self) -> None:
        """Open the WebSocket with the default configuration."""
        await self.connect_with_config(self._config)

    async def connect_with_config(self, config: WebSocketConfig) -> None:
        """Open the WebSocket and start the read and keep-alive loops.

        Raises:
            AlreadyConnectedError: A connection is open or being opened.
            SoundTouchTimeoutError: The handshake did not finish in time.
            SoundTouchConnectionError: The device could not be reached.
        """
        config.validate()
        with self._lock:
            if self._state != ConnectionState.DISCONNECTED:
                raise AlreadyConnectedError()
            old = self._state
            self._state = ConnectionState.CONNECTING
            self._log = config.logger or self._default_log
            self._session_config = config
            self._stop = stop = asyncio.Event()
            self._closed = closed = asyncio.Event()
            self._reconnect_enabled = True
        self._emit_state(old, ConnectionState.CONNECTING)

        try:
            await self._open(config, stop)
        except BaseException:
            with self._lock:
                failed = self._state == ConnectionState.CONNECTING
                if failed:
                    self._state = ConnectionState.DISCONNECTED
                    self._reconnect_enabled = False
            if failed:
                self._emit_state(ConnectionState.CONNECTING, ConnectionState.DISCONNECTED)
            closed.set()
            raise

    async def disconnect(self) -> None:
        """Stop reconnection, cancel both loops and close the socket.

        Raises:
            NotConnectedError: The handle is already disconnected.
        """
        with self._lock:
            if self._state == ConnectionState.DISCONNECTED:
                raise NotConnectedError()
            old = self._state
            self._state = ConnectionState.DISCONNECTED
            self._reconnect_enabled = False
            stop, closed = self._stop, self._closed
            ws, self._ws = self._ws, None
            tasks = [
                t
                for t in (self._read_task, self._ping_task, self._reconnect_task)
                if t is not None
            ]
            self._read_task = self._ping_task = self._reconnect_task = None
            if stop is not None:
                stop.set()
        self._emit_state(old, ConnectionState.DISCONNECTED)

        # Cancel tasks and await completion before closing the socket
        current = asyncio.current_task()
        tasks = [t for t in tasks if t is not current]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if ws is not None:
            await self._close_socket(ws)
            self._log.info("Disconnected")
        if closed is not None:
            closed.set()

    async def wait(self) -> None:
        """Block until the handle is terminally disconnected.

        Returns immediately if it was never connected.  A drop followed by
        a successful reconnection does not count as terminal.
        """
        closed = self._closed
        if closed is None:
            return
        await closed.wait()

    async def __aenter__(self) -> ConnectionManager:
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self.state != ConnectionState.DISCONNECTED:
            await self.disconnect()

    # -- Send -----------------------------------------------------------------

    async def send_message(self, data: str | bytes) -> None:
        """Send a text frame to the device.

        Raises:
            NotConnectedError: No open socket.
            SoundTouchTimeoutError: The write deadline elapsed.
            SoundTouchEncodeError: ``data`` is bytes that are not valid UTF-8.
            SoundTouchConnectionError: The socket failed while sending.
        """
        with self._lock:
            ws = self._ws
            config_timeout = self._session_config.pong_timeout
        if ws is None:
            raise NotConnectedError()
        if isinstance(data, (bytes, bytearray)):
            try:
                data = bytes(data).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise SoundTouchEncodeError(f"message is not valid UTF-8: {exc}") from exc
        try:
            await asyncio.wait_for(ws.send(data), timeout=config_timeout)
        except asyncio.TimeoutError as exc:
            raise SoundTouchTimeoutError(
                f"send timed out after {config_timeout}s"
            ) from exc
        except Exception as exc:
            raise SoundTouchConnectionError(f"send failed: {exc}") from exc

    # -- Internal: connect ----------------------------------------------------

    async def _dial(self, config: WebSocketConfig) -> websockets.asyncio.client.ClientConnection:
        return await websockets.asyncio.client.connect(
            self._url,
            subprotocols=list(config.subprotocols) or None,
            user_agent_header=USER_AGENT,
            open_timeout=None,  # asyncio.wait_for handles timeout
            ping_interval=None,  # keep-alive is driven by _ping_loop
            ping_timeout=None,
            max_size=config.max_message_size,
            write_limit=config.write_buffer_size,
        )

    async def _open(self, config: WebSocketConfig, stop: asyncio.Event) -> None:
        """Handshake, then publish the socket and start both loops."""
        self._log.info("Connecting to %s", self._url)
        try:
            ws = await asyncio.wait_for(self._dial(config), timeout=config.handshake_timeout)
        except asyncio.TimeoutError as exc:
            raise SoundTouchTimeoutError(
                f"WebSocket handshake timed out after {config.handshake_timeout}s"
            ) from exc
        except Exception as exc:
            raise SoundTouchConnectionError(f"failed to connect to WebSocket: {exc}") from exc

        with self._lock:
            cancelled = stop.is_set()
            if not cancelled:
                old = self._state
                self._ws = ws
                self._state = ConnectionState.CONNECTED
                self._read_task = asyncio.create_task(self._read_loop(ws, config, stop))
                self._ping_task = asyncio.create_task(self._ping_loop(ws, config, stop))

        if cancelled:
            await self._close_socket(ws)
            raise SoundTouchConnectionError("connection attempt cancelled by disconnect")

        self._emit_state(old, ConnectionState.CONNECTED)
        self._log.info("Connected to %s", self._url)

    # -- Internal: read-loop --------------------------------------------------

    async def _read_loop(
        self,
        ws: websockets.asyncio.client.ClientConnection,
        config: WebSocketConfig,
        stop: asyncio.Event,
    ) -> None:
        """Receive frames until the socket fails or the session stops."""
        try:
            while not stop.is_set():
                try:
                    message = await asyncio.wait_for(ws.recv(), timeout=config.read_timeout)
                except asyncio.TimeoutError:
                    self._log.warning(
                        "No frame received for %.0fs, dropping connection",
                        config.read_timeout,
                    )
                    break
                except ConnectionClosedOK:
                    self._log.info("WebSocket closed by device")
                    break
                except ConnectionClosedError as exc:
                    self._log.warning("WebSocket read error: %s", exc)
                    break
                except Exception as exc:
                    self._log.warning("WebSocket read error: %s", exc)
                    break

                # Only text frames carry events
                if isinstance(message, str):
                    self._handle_message(message, stop)
        except asyncio.CancelledError:
            return

        await self._teardown(ws, config, stop)

    def _handle_message(self, data: str, stop: asyncio.Event) -> None:
        try:
            message = self._codec.decode(data)
        except SoundTouchDecodeError as exc:
            self._log.warning("Failed to parse WebSocket message: %s", exc)
            return
        if stop.is_set():
            return
        with self._lock:
            handlers = self._handlers
        dispatch(message, handlers, log=self._log)

    async def _teardown(
        self,
        ws: websockets.asyncio.client.ClientConnection,
        config: WebSocketConfig,
        stop: asyncio.Event,
    ) -> None:
        """Release a socket the read-loop gave up on and pick the next state."""
        with self._lock:
            if self._ws is not ws:
                return  # disconnect() already took it
            old = self._state
            self._ws = None
            reconnect = self._reconnect_enabled and not stop.is_set()
            new = ConnectionState.RECONNECTING if reconnect else ConnectionState.DISCONNECTED
            self._state = new
            ping_task, self._ping_task = self._ping_task, None
            self._read_task = None
            if reconnect:
                self._reconnect_task = asyncio.create_task(self._reconnect(config, stop))
            else:
                self._reconnect_enabled = False
            closed = self._closed
        self._emit_state(old, new)

        if ping_task is not None:
            ping_task.cancel()
            await asyncio.gather(ping_task, return_exceptions=True)
        await self._close_socket(ws)

        if not reconnect and closed is not None:
            closed.set()

    async def _close_socket(self, ws: websockets.asyncio.client.ClientConnection) -> None:
        try:
            await asyncio.wait_for(
                ws.close(code=WS_CLOSE_NORMAL), timeout=self._session_config.pong_timeout
            )
        except Exception as exc:
            self._log.debug("Error closing socket: %s", exc)

    # -- Internal: keep-alive -------------------------------------------------

    async def _ping_loop(
        self,
        ws: websockets.asyncio.client.ClientConnection,
        config: WebSocketConfig,
        stop: asyncio.Event,
    ) -> None:
        """Send a protocol ping every ``ping_interval`` seconds.

        A failed ping only ends this loop; the read deadline is what
        notices a dead peer.
        """
        try:
            while True:
                await asyncio.sleep(config.ping_interval)
                if stop.is_set():
                    return
                with self._lock:
                    if self._ws is not ws:
                        return
                try:
                    await asyncio.wait_for(ws.ping(), timeout=config.pong_timeout)
                except Exception as exc:
                    self._log.warning("Failed to send ping: %s", exc)
                    return
        except asyncio.CancelledError:
            return

    # -- Internal: reconnection -----------------------------------------------

    async def _reconnect(self, config: WebSocketConfig, stop: asyncio.Event) -> None:
        policy = ReconnectPolicy(
            config.reconnect_interval,
            config.max_reconnect_attempts,
            sleep=self._sleep,
            log=self._log,
        )
        try:
            ok = await policy.run(lambda: self._open(config, stop), stop)
        except asyncio.CancelledError:
            return

        with self._lock:
            if self._reconnect_task is asyncio.current_task():
                self._reconnect_task = None
            gave_up = not ok and self._state == ConnectionState.RECONNECTING
            if gave_up:
                self._state = ConnectionState.DISCONNECTED
                self._reconnect_enabled = False
            closed = self._closed
        if gave_up:
            self._log.warning("Reconnection abandoned, connection closed")
            self._emit_state(ConnectionState.RECONNECTING, ConnectionState.DISCONNECTED)
            if closed is not None:
                closed.set()

    # -- State management -----------------------------------------------------

    def _emit_state(self, old: ConnectionState, new: ConnectionState) -> None:
        if old == new:
            return
        self._log.debug("State: %s -> %s", old.value, new.value)
        if self._on_state_change:
            try:
                self._on_state_change(new)
            except Exception:
                self._log.exception("State change handler failed")

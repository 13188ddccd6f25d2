# =============================================================================
# SoundTouch Client -- Error Types
# =============================================================================


class SoundTouchError(Exception):
    """Base exception for all SoundTouch client errors."""


class SoundTouchConnectionError(SoundTouchError):
    """Connection-related errors (failed to connect, lost connection)."""


class AlreadyConnectedError(SoundTouchConnectionError):
    """``connect()`` called while a connection is open or being opened."""

    def __init__(self, message: str = "already connected") -> None:
        super().__init__(message)


class NotConnectedError(SoundTouchConnectionError):
    """Operation requires an open connection and there is none."""

    def __init__(self, message: str = "not connected") -> None:
        super().__init__(message)


class SoundTouchTimeoutError(SoundTouchError):
    """Operation timed out."""


class SoundTouchDecodeError(SoundTouchError):
    """Malformed or unrecognized XML (event frame or API response)."""


class SoundTouchEncodeError(SoundTouchError):
    """Outgoing payload cannot be sent as a text frame."""


class SoundTouchHTTPError(SoundTouchError):
    """Device HTTP API answered with a non-2xx status."""

    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"API request failed with status {status}: {body}")


class SoundTouchAPIError(SoundTouchError):
    """Device HTTP API answered with an ``<errors>`` document."""

    def __init__(self, code: int, message: str, name: str = "") -> None:
        self.code = code
        self.name = name
        self.message = message
        super().__init__(message or name or f"device error {code}")

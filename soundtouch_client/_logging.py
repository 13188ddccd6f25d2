# =============================================================================
# SoundTouch Client -- Logging
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, MutableMapping, Union

logger = logging.getLogger("soundtouch_client")

# Anything accepted as a log sink by the connection manager.
LogSink = Union[logging.Logger, logging.LoggerAdapter]

WEBSOCKET_LOG_PREFIX = "[WebSocket] "


class PrefixedLogger(logging.LoggerAdapter):
    """Logger adapter that prepends a fixed prefix to every message."""

    def __init__(self, base: logging.Logger, prefix: str) -> None:
        super().__init__(base, {"prefix": prefix})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{self.extra['prefix']}{msg}", kwargs


def websocket_logger() -> PrefixedLogger:
    """Default sink for WebSocket lifecycle and background-task errors."""
    return PrefixedLogger(logger.getChild("websocket"), WEBSOCKET_LOG_PREFIX)

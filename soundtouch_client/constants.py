# =============================================================================
# SoundTouch Client -- Protocol Constants
# =============================================================================

from ._version import __version__ as CLIENT_VERSION

USER_AGENT = f"Bose-SoundTouch-Python-Client/{CLIENT_VERSION}"

# -- Ports --------------------------------------------------------------------

HTTP_PORT = 8090
WEBSOCKET_PORT = 8080
WEBSOCKET_PATH = "/"
WEBSOCKET_SUBPROTOCOL = "gabbo"

# -- Timing (seconds) --------------------------------------------------------

RECONNECT_INTERVAL = 5.0
RECONNECT_MAX_ATTEMPTS = 0  # 0 = unlimited
PING_INTERVAL = 30.0
PONG_TIMEOUT = 10.0
READ_TIMEOUT = 60.0
HANDSHAKE_TIMEOUT = 10.0
HTTP_TIMEOUT = 10.0

# -- Buffers -------------------------------------------------------------------

READ_BUFFER_SIZE = 1024
WRITE_BUFFER_SIZE = 1024
MAX_MESSAGE_SIZE = 1_048_576  # 1 MB

# -- WebSocket close codes -----------------------------------------------------

WS_CLOSE_NORMAL = 1000

# -- XML element names ---------------------------------------------------------

UPDATES_ELEMENT = "updates"
SDK_INFO_ELEMENT = "SoundTouchSdkInfo"
USER_ACTIVITY_ELEMENT = "userActivityUpdate"
ERRORS_ELEMENT = "errors"
ERROR_ELEMENT = "error"
DEVICE_ID_ATTR = "deviceID"

# -- Device HTTP API paths -----------------------------------------------------

PATH_VOLUME = "/volume"
PATH_BASS = "/bass"
PATH_NOW_PLAYING = "/now_playing"
PATH_PRESETS = "/presets"
PATH_ZONE = "/getZone"
PATH_NAME = "/name"

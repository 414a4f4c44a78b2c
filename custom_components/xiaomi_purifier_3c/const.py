"""Constants for Xiaomi Air Purifier 3C integration.

This module contains all the constants used throughout the integration,
including configuration keys, timing values and the device model.
"""

DOMAIN = "xiaomi_purifier_3c"

MANUFACTURER = "Xiaomi"
MODEL = "zhimi.airpurifier.mb4"
MODEL_NAME = "Mi Air Purifier 3C"
FIRMWARE_UNKNOWN = "unknown"

CONF_DID = "did"
CONF_BREAKPOINTS = "breakpoints"

DEFAULT_NAME = "Air Purifier"
DEFAULT_BREAKPOINTS = (5, 15, 35, 55)
BREAKPOINT_COUNT = 4
TOKEN_LENGTH = 32

POLL_INTERVAL = 30  # Seconds between property polls
RECONNECT_DELAY = 30  # Seconds to wait before reconnecting
DEFAULT_CALL_TIMEOUT = 10  # Seconds before an RPC call is abandoned

METHOD_INFO = "miIO.info"
METHOD_GET_PROPERTIES = "get_properties"
METHOD_SET_PROPERTIES = "set_properties"

ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_INVALID_TOKEN = "invalid_token"
ERROR_INVALID_BREAKPOINTS = "invalid_breakpoints"
ERROR_UNKNOWN = "unknown_error"

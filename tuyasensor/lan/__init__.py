# -*- coding: utf-8 -*-
"""
Tuya LAN protocol engine for sensor status queries.

Supports Protocol versions 3.3, 3.4 and 3.5 over the 55AA frame format,
with the device local key used directly as the AES key.
"""

# =============================================================================
# PUBLIC API
# =============================================================================

# Session
from .device import connect, TuyaSession, SessionState, TuyaLoggingAdapter

# Message types
from .message import (
    TuyaMessage,
    TuyaHeader,
    DeviceStatus,
)

# Exceptions
from .message import (
    TuyaError,
    FramingError,
    DecryptError,
    ParseError,
)
# Note: ConnectionError and TimeoutError shadow builtins, import them from .message

# Data points
from .datapoints import (
    DataPoint,
    SensorReading,
    SENSOR_DATA_POINTS,
    map_data_points,
)

# Protocol functions (for advanced use)
from .protocol import (
    calculate_crc32,
    generate_payload,
    pack_message,
    parse_header,
    unpack_message,
    decrypt_payload,
    parse_status,
)

# Cipher (for advanced use)
from .cipher import AESCipher

# Constants
from .constants import (
    ProtocolVersion,
    PREFIX_55AA,
    PREFIX_55AA_BIN,
    SUFFIX_55AA,
    SUFFIX_55AA_BIN,
    CMD_DP_QUERY,
    CMD_DP_QUERY_NEW,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    MAX_PAYLOAD_SIZE,
    ERR_JSON,
    ERR_CONNECT,
    ERR_TIMEOUT,
    ERR_PAYLOAD,
    ERR_PARAMS,
    ERROR_MESSAGES,
)

__all__ = [
    # Session
    "connect",
    "TuyaSession",
    "SessionState",
    "TuyaLoggingAdapter",
    # Messages
    "TuyaMessage",
    "TuyaHeader",
    "DeviceStatus",
    # Exceptions
    "TuyaError",
    "FramingError",
    "DecryptError",
    "ParseError",
    # Data points
    "DataPoint",
    "SensorReading",
    "SENSOR_DATA_POINTS",
    "map_data_points",
    # Protocol
    "calculate_crc32",
    "generate_payload",
    "pack_message",
    "parse_header",
    "unpack_message",
    "decrypt_payload",
    "parse_status",
    # Cipher
    "AESCipher",
    # Constants
    "ProtocolVersion",
    "PREFIX_55AA",
    "PREFIX_55AA_BIN",
    "SUFFIX_55AA",
    "SUFFIX_55AA_BIN",
    "CMD_DP_QUERY",
    "CMD_DP_QUERY_NEW",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT",
    "MAX_PAYLOAD_SIZE",
    "ERR_JSON",
    "ERR_CONNECT",
    "ERR_TIMEOUT",
    "ERR_PAYLOAD",
    "ERR_PARAMS",
    "ERROR_MESSAGES",
]

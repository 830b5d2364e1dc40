# -*- coding: utf-8 -*-
"""
Tuya LAN Protocol Constants.

Protocol versions:
- 3.3: 55AA prefix, ECB encryption, CRC32 checksum, DP_QUERY (0x0A)
- 3.4, 3.5: 55AA prefix, ECB encryption, CRC32 checksum, DP_QUERY_NEW (0x10),
  16-byte version header after the command field and a 4-byte return code
  in device responses

The local key is used directly as the AES key for every packet.
"""

from enum import Enum

# =============================================================================
# MESSAGE PREFIXES AND SUFFIXES
# =============================================================================

PREFIX_55AA = 0x000055AA
PREFIX_55AA_BIN = b"\x00\x00\x55\xaa"
SUFFIX_55AA = 0x0000AA55
SUFFIX_55AA_BIN = b"\x00\x00\xaa\x55"

# =============================================================================
# TUYA COMMAND TYPES
# =============================================================================

CMD_DP_QUERY = 0x0A           # FRM_QUERY_STAT - Query data points (10)
CMD_DP_QUERY_NEW = 0x10       # FRM_QUERY_STAT_NEW - New DP query (16)

# =============================================================================
# PROTOCOL VERSION HEADERS
# =============================================================================

VERSION_33 = b"3.3"
VERSION_34 = b"3.4"
VERSION_35 = b"3.5"

# Protocol 3.x header: version + NUL + 12 zero bytes
PROTOCOL_3X_HEADER_PAD = 13 * b"\x00"
PROTOCOL_3X_HEADER_SIZE = 16


class ProtocolVersion(Enum):
    """Supported protocol generations with their frame layout constants."""

    V3_3 = "3.3"
    V3_4 = "3.4"
    V3_5 = "3.5"

    @classmethod
    def parse(cls, value) -> "ProtocolVersion":
        """Convert "3.4", 3.4 or a ProtocolVersion into a ProtocolVersion.

        Raises:
            ValueError: If the version is not one of 3.3, 3.4 or 3.5
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Unsupported protocol version: {value!r}")
        if isinstance(value, (int, float)):
            text = f"{value:.1f}"
            if float(text) != value:
                raise ValueError(f"Unsupported protocol version: {value!r}")
            value = text
        try:
            return cls(str(value).strip())
        except ValueError:
            raise ValueError(f"Unsupported protocol version: {value!r}") from None

    @property
    def command(self) -> int:
        """Status query command for this version."""
        return _LAYOUT[self][0]

    @property
    def version_header(self) -> bytes:
        """Bytes inserted after the command field (empty for 3.3)."""
        return _LAYOUT[self][1]

    @property
    def retcode_size(self) -> int:
        """Size of the return code that leads device responses."""
        return _LAYOUT[self][2]

    def __str__(self) -> str:
        return self.value


# version -> (command, version header, response retcode size)
_LAYOUT = {
    ProtocolVersion.V3_3: (CMD_DP_QUERY, b"", 0),
    ProtocolVersion.V3_4: (CMD_DP_QUERY_NEW, VERSION_34 + PROTOCOL_3X_HEADER_PAD, 4),
    ProtocolVersion.V3_5: (CMD_DP_QUERY_NEW, VERSION_35 + PROTOCOL_3X_HEADER_PAD, 4),
}

# =============================================================================
# MESSAGE STRUCTURE FORMATS (struct module)
# =============================================================================

# 55AA format header: prefix(4) + seqno(4) + cmd(4) + length(4)
HEADER_FMT_55AA = ">4I"  # 4 x uint32 big-endian
HEADER_SIZE_55AA = 16

# Request header start: prefix(4) + seqno(4) + cmd(4)
REQUEST_PREFIX_FMT = ">3I"

# Length field on its own
LENGTH_FMT = ">I"

# Retcode format
RETCODE_FMT = ">I"
RETCODE_SIZE = 4

# 55AA footer with CRC32: crc(4) + suffix(4)
FOOTER_FMT_55AA_CRC = ">II"
FOOTER_SIZE_55AA_CRC = 8

# =============================================================================
# TIMING AND LIMITS
# =============================================================================

DEFAULT_PORT = 6668
DEFAULT_TIMEOUT = 5  # seconds
MAX_PAYLOAD_SIZE = 2048  # bytes - sanity check on the length field
SEQNO_MODULO = 1 << 32

# =============================================================================
# ENCRYPTION
# =============================================================================

AES_BLOCK_SIZE = 16
LOCAL_KEY_SIZE = 16

# =============================================================================
# ERROR CODES
# =============================================================================

ERR_JSON = 900
ERR_CONNECT = 901
ERR_TIMEOUT = 902
ERR_PAYLOAD = 904
ERR_PARAMS = 912

ERROR_MESSAGES = {
    ERR_JSON: "Invalid JSON Response from Device",
    ERR_CONNECT: "Network Error: Unable to Connect",
    ERR_TIMEOUT: "Timeout Waiting for Device",
    ERR_PAYLOAD: "Unexpected Payload from Device",
    ERR_PARAMS: "Missing Function Parameters",
    None: "Unknown Error",
}

# -*- coding: utf-8 -*-
"""
Tuya Message structures.

Defines data structures and exceptions for Tuya protocol messages.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import (
    PREFIX_55AA,
    ERR_CONNECT,
    ERR_JSON,
    ERR_PAYLOAD,
    ERR_TIMEOUT,
    ERROR_MESSAGES,
)


@dataclass
class TuyaHeader:
    """Parsed message header.

    Attributes:
        prefix: Message prefix (0x55AA)
        seqno: Sequence number
        cmd: Command type
        length: Number of bytes following the 16-byte header
        total_length: Total message length including header and footer
    """
    prefix: int
    seqno: int
    cmd: int
    length: int
    total_length: int


@dataclass
class TuyaMessage:
    """Unpacked device response.

    Attributes:
        seqno: Sequence number
        cmd: Command type
        payload: Encrypted payload segment (retcode and footer removed)
        retcode: Return code (0 = success, always 0 for 3.3)
        crc: CRC32 carried by the frame
        crc_good: Whether the carried CRC matches the frame (informational)
        suffix: Frame suffix as received
        prefix: Message prefix
    """
    seqno: int
    cmd: int
    payload: bytes = b""
    retcode: int = 0
    crc: int = 0
    crc_good: bool = True
    suffix: int = 0
    prefix: int = PREFIX_55AA


@dataclass
class DeviceStatus:
    """Device status response.

    Attributes:
        dps: Data points dictionary {dp_id: value}
        devId: Device ID echoed by the device, if any
        t: Timestamp
    """
    dps: Dict[str, Any] = field(default_factory=dict)
    devId: Optional[str] = None
    t: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "DeviceStatus":
        """Create DeviceStatus from parsed JSON response.

        Raises:
            ParseError: If the response has no "dps" object
        """
        dps = data.get("dps")
        if not isinstance(dps, dict):
            raise ParseError("Response has no dps object")

        return cls(
            dps=dps,
            devId=data.get("devId"),
            t=data.get("t")
        )


class TuyaError(Exception):
    """Base exception for Tuya errors."""

    error_code: Optional[int] = None

    @property
    def error_message(self) -> str:
        """Human readable description of the error code."""
        return ERROR_MESSAGES.get(self.error_code, ERROR_MESSAGES[None])


class ConnectionError(TuyaError):
    """Error connecting to or writing to the device."""
    error_code = ERR_CONNECT


class TimeoutError(TuyaError):
    """No response from the device within the timeout."""
    error_code = ERR_TIMEOUT


class FramingError(TuyaError):
    """Bad prefix, short read or out-of-range length field."""
    error_code = ERR_PAYLOAD


class DecryptError(TuyaError):
    """Ciphertext is not a non-empty multiple of the block size."""
    error_code = ERR_PAYLOAD


class ParseError(TuyaError):
    """Response is not valid JSON or lacks the dps object."""
    error_code = ERR_JSON

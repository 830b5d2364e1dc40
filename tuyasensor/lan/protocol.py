# -*- coding: utf-8 -*-
"""
Tuya Protocol message packing and unpacking.

Message formats:
===============

Request (Protocol 3.3):
    000055aa [SEQNO:4] [CMD:4] [LENGTH:4] [PAYLOAD] [CRC:4] 0000aa55

Request (Protocol 3.4/3.5):
    000055aa [SEQNO:4] [CMD:4] [VERSION:16] [LENGTH:4] [PAYLOAD] [CRC:4] 0000aa55
    - VERSION: b"3.4" or b"3.5", a NUL byte and 12 zero bytes

    - LENGTH: len(PAYLOAD) + 8 (crc and suffix)
    - CRC: CRC32 of every byte before it
    - PAYLOAD: AES-ECB encrypted JSON, always a multiple of 16 bytes

Response:
    000055aa [SEQNO:4] [CMD:4] [LENGTH:4] [RETCODE:4]? [PAYLOAD] [CRC:4] 0000aa55
    - LENGTH: number of bytes after the 16-byte header
    - RETCODE: present for 3.4/3.5 only
    - PAYLOAD: AES-ECB encrypted JSON, or plain JSON on some firmwares
"""

import binascii
import json
import struct
import logging
import math
import time
from typing import Optional, Union

from .cipher import AESCipher
from .constants import (
    PREFIX_55AA, PREFIX_55AA_BIN, SUFFIX_55AA,
    HEADER_FMT_55AA, HEADER_SIZE_55AA,
    REQUEST_PREFIX_FMT, LENGTH_FMT,
    RETCODE_FMT,
    FOOTER_FMT_55AA_CRC, FOOTER_SIZE_55AA_CRC,
    MAX_PAYLOAD_SIZE,
    ProtocolVersion,
)
from .message import (
    TuyaHeader, TuyaMessage, DeviceStatus,
    FramingError, ParseError,
)

_LOGGER = logging.getLogger(__name__)


def _reject_constant(name: str):
    raise ParseError(f"Invalid JSON constant: {name}")


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ParseError(f"Number out of range: {text[:32]}")
    return value


def _parse_bounded_int(text: str) -> int:
    try:
        value = int(text)
        float(value)
    except (ValueError, OverflowError):
        raise ParseError(f"Number out of range: {text[:32]}") from None
    return value


_JSON_DECODER = json.JSONDecoder(
    parse_float=_parse_finite_float,
    parse_int=_parse_bounded_int,
    parse_constant=_reject_constant,
)


# =============================================================================
# CHECKSUM
# =============================================================================

def calculate_crc32(data: bytes) -> int:
    """Calculate CRC32 checksum (reflected, poly 0xEDB88320)."""
    return binascii.crc32(data) & 0xFFFFFFFF


# =============================================================================
# PAYLOAD GENERATION
# =============================================================================

def generate_payload(device_id: str, timestamp: Optional[int] = None) -> bytes:
    """Build the JSON body of a status query.

    Args:
        device_id: Device ID, also used as gateway and user id
        timestamp: Seconds to put in "t" (defaults to wall clock)

    Returns:
        Compact UTF-8 JSON bytes (unencrypted)
    """
    if timestamp is None:
        timestamp = int(time.time())

    json_data = {
        "gwId": device_id,
        "devId": device_id,
        "uid": device_id,
        "t": str(timestamp),
    }
    return json.dumps(json_data, separators=(",", ":")).encode("utf-8")


# =============================================================================
# MESSAGE PACKING
# =============================================================================

def pack_message(
    seqno: int,
    cmd: int,
    payload: bytes,
    key: Union[str, bytes, AESCipher],
    protocol_version: ProtocolVersion
) -> bytes:
    """Pack a message for sending to device.

    Args:
        seqno: Sequence number
        cmd: Command type
        payload: Payload bytes (unencrypted)
        key: Local key, or a ready AESCipher
        protocol_version: Protocol version

    Returns:
        Packed message bytes ready to send
    """
    cipher = key if isinstance(key, AESCipher) else AESCipher(key)
    encrypted = cipher.encrypt_ecb(payload)

    # Length = payload + crc + suffix, version header not counted
    length = len(encrypted) + FOOTER_SIZE_55AA_CRC

    header = (
        struct.pack(REQUEST_PREFIX_FMT, PREFIX_55AA, seqno, cmd)
        + protocol_version.version_header
        + struct.pack(LENGTH_FMT, length)
    )

    data_to_sign = header + encrypted
    crc = calculate_crc32(data_to_sign)
    footer = struct.pack(FOOTER_FMT_55AA_CRC, crc, SUFFIX_55AA)

    return data_to_sign + footer


# =============================================================================
# MESSAGE UNPACKING
# =============================================================================

def parse_header(data: bytes) -> TuyaHeader:
    """Parse the fixed 16-byte response header.

    Raises:
        FramingError: If the prefix is wrong or the length is out of range
    """
    if len(data) < HEADER_SIZE_55AA:
        raise FramingError(
            f"Not enough data for 55AA header: need {HEADER_SIZE_55AA}, got {len(data)}"
        )

    if data[:4] != PREFIX_55AA_BIN:
        prefix_hex = binascii.hexlify(data[:4]).decode()
        raise FramingError(f"Unknown header prefix: {prefix_hex}")

    prefix, seqno, cmd, length = struct.unpack(HEADER_FMT_55AA, data[:HEADER_SIZE_55AA])

    if length == 0 or length > MAX_PAYLOAD_SIZE:
        raise FramingError(f"Header claims packet size {length}, allowed 1..{MAX_PAYLOAD_SIZE}")

    return TuyaHeader(
        prefix=prefix,
        seqno=seqno,
        cmd=cmd,
        length=length,
        total_length=HEADER_SIZE_55AA + length
    )


def unpack_message(
    header: TuyaHeader,
    payload: bytes,
    protocol_version: ProtocolVersion,
    header_bytes: Optional[bytes] = None
) -> TuyaMessage:
    """Split the bytes that follow a header into retcode, payload and footer.

    Args:
        header: Parsed header
        payload: The header.length bytes following the header
        protocol_version: Protocol version (decides the retcode offset)
        header_bytes: Raw header, used to check the carried CRC

    Returns:
        TuyaMessage with the still encrypted payload segment

    Raises:
        FramingError: On a short read or a frame too small for its footer
    """
    if len(payload) != header.length:
        raise FramingError(f"Short read: need {header.length}, got {len(payload)}")

    retcode_size = protocol_version.retcode_size
    payload_len = header.length - retcode_size - FOOTER_SIZE_55AA_CRC
    if payload_len < 0:
        raise FramingError(
            f"Frame of {header.length} bytes too small for v{protocol_version} layout"
        )

    retcode = 0
    if retcode_size:
        retcode = struct.unpack(RETCODE_FMT, payload[:retcode_size])[0]

    footer_start = retcode_size + payload_len
    crc, suffix = struct.unpack(
        FOOTER_FMT_55AA_CRC, payload[footer_start:footer_start + FOOTER_SIZE_55AA_CRC]
    )
    if suffix != SUFFIX_55AA:
        _LOGGER.debug("55AA suffix mismatch: got %08X", suffix)

    # The CRC is carried but not enforced, some firmwares send bad values
    crc_good = True
    if header_bytes is not None:
        crc_good = calculate_crc32(header_bytes + payload[:footer_start]) == crc
        if not crc_good:
            _LOGGER.debug("55AA CRC mismatch for seqno %d (ignored)", header.seqno)

    return TuyaMessage(
        seqno=header.seqno,
        cmd=header.cmd,
        payload=payload[retcode_size:footer_start],
        retcode=retcode,
        crc=crc,
        crc_good=crc_good,
        suffix=suffix,
        prefix=header.prefix
    )


# =============================================================================
# PAYLOAD DECODING
# =============================================================================

def decrypt_payload(data: bytes, cipher: AESCipher) -> str:
    """Turn a response payload segment into text.

    Some firmwares answer with plain JSON even on an encrypted session: if a
    "{" appears anywhere in the segment, everything from the first "{" on is
    taken as the plaintext and the cipher is skipped. Ciphertext that happens
    to contain 0x7B is misread this way.

    Raises:
        DecryptError: If the segment has to be decrypted and is not block aligned
        ParseError: If the plaintext is not UTF-8
    """
    brace = data.find(b"{")
    if brace >= 0:
        plaintext = data[brace:]
    else:
        plaintext = cipher.decrypt_ecb(data)

    # Text ends at the first NUL, like the C string the device firmware builds
    plaintext = plaintext.split(b"\x00", 1)[0]

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Payload is not UTF-8: {e}") from e


def parse_status(text: str) -> DeviceStatus:
    """Parse decrypted response text into a DeviceStatus.

    Anything after the first complete JSON value is ignored.

    Raises:
        ParseError: If text is not a JSON object with a "dps" object
    """
    try:
        json_payload, _ = _JSON_DECODER.raw_decode(text.lstrip())
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(json_payload, dict):
        raise ParseError("Response is not a JSON object")

    return DeviceStatus.from_dict(json_payload)

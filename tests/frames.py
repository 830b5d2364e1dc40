"""Frame builders and socket helpers for tests."""

import json
import socket
import struct

from tuyasensor.lan import AESCipher, ProtocolVersion, calculate_crc32

LOCAL_KEY = "0123456789abcdef"
DEVICE_ID = "bf0123456789abcdefgh"


def encrypt_without_brace(body: bytes, key: str = LOCAL_KEY) -> bytes:
    """Encrypt a JSON object, bumping its "t" field until no 0x7B byte appears.

    The decoder takes any ciphertext holding "{" for plain JSON.
    """
    cipher = AESCipher(key)
    data = json.loads(body)
    for t in range(1000):
        ciphertext = cipher.encrypt_ecb(json.dumps(data, separators=(",", ":")).encode())
        if b"{" not in ciphertext:
            return ciphertext
        data["t"] = t
    raise AssertionError("no brace-free ciphertext found")


def build_response(
    body: bytes,
    version: ProtocolVersion = ProtocolVersion.V3_3,
    key: str = LOCAL_KEY,
    seqno: int = 1,
    cmd: int = 0x0A,
    retcode: int = 0,
    encrypt: bool = True,
    avoid_brace: bool = True,
) -> bytes:
    """Build a device response frame the way a device would send it."""
    if not encrypt:
        payload = body
    elif avoid_brace:
        payload = encrypt_without_brace(body, key)
    else:
        payload = AESCipher(key).encrypt_ecb(body)
    if version.retcode_size:
        payload = struct.pack(">I", retcode) + payload

    length = len(payload) + 8
    header = struct.pack(">4I", 0x000055AA, seqno, cmd, length)
    crc = calculate_crc32(header + payload)
    return header + payload + struct.pack(">II", crc, 0x0000AA55)


def split_requests(data: bytes, version: ProtocolVersion = ProtocolVersion.V3_3) -> list:
    """Split a byte stream of request frames into individual frames."""
    frames = []
    length_offset = 12 + len(version.version_header)
    while data:
        length = struct.unpack(">I", data[length_offset:length_offset + 4])[0]
        total = length_offset + 4 + length
        frames.append(data[:total])
        data = data[total:]
    return frames


def drain(sock: socket.socket) -> bytes:
    """Read everything currently buffered on sock."""
    sock.settimeout(0.2)
    data = b""
    try:
        while True:
            chunk = sock.recv(65536)
            if not chunk:
                break
            data += chunk
    except (socket.timeout, ConnectionResetError):
        pass
    return data

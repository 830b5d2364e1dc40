# -*- coding: utf-8 -*-
"""
Tuya Device communication module.

Provides a blocking, single-connection session that queries the status of a
Tuya sensor over the LAN protocol (versions 3.3, 3.4 and 3.5).
"""

import logging
import select
import socket
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .cipher import AESCipher
from .constants import (
    DEFAULT_PORT, DEFAULT_TIMEOUT,
    HEADER_SIZE_55AA,
    SEQNO_MODULO,
    ProtocolVersion,
)
from .datapoints import SensorReading, map_data_points
from .message import (
    DeviceStatus, TuyaHeader,
    TuyaError, FramingError,
    ConnectionError as TuyaConnectionError,
    TimeoutError as TuyaTimeoutError,
)
from .protocol import (
    decrypt_payload, generate_payload, pack_message,
    parse_header, parse_status, unpack_message,
)

_LOGGER = logging.getLogger(__name__)


# =============================================================================
# LOGGING ADAPTER
# =============================================================================

class TuyaLoggingAdapter(logging.LoggerAdapter):
    """Adapter that adds device ID to log messages."""

    def process(self, msg, kwargs):
        dev_id = self.extra.get("device_id", "???")
        # Show first and last 3 chars of device ID
        short_id = f"{dev_id[:3]}...{dev_id[-3:]}" if len(dev_id) > 6 else dev_id
        return f"[{short_id}] {msg}", kwargs


# =============================================================================
# SESSION
# =============================================================================

class SessionState(Enum):
    """Connection state of a TuyaSession."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    QUERYING = "querying"


class TuyaSession:
    """Blocking session with one Tuya device.

    Owns the TCP socket, the sequence counter and the latest SensorReading.
    Calls are expected to be serialized by the caller (one poll loop).
    """

    def __init__(
        self,
        device_id: str,
        address: str,
        local_key: Union[str, bytes],
        protocol_version: Union[ProtocolVersion, str, float] = ProtocolVersion.V3_3,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        enable_debug: bool = False,
        connection_factory: Callable[..., socket.socket] = socket.create_connection
    ):
        """Initialize session.

        Args:
            device_id: Device ID
            address: Device IP address or host name
            local_key: 16-byte device local key, used as the AES key
            protocol_version: Protocol version (3.3, 3.4, 3.5)
            port: Device port (default 6668)
            timeout: Connect and response timeout in seconds
            enable_debug: Enable debug logging
            connection_factory: Called as factory((address, port), timeout)
        """
        self.device_id = device_id
        self.address = address
        self.port = port
        self.timeout = timeout
        self.protocol_version = ProtocolVersion.parse(protocol_version)
        self.enable_debug = enable_debug

        self._cipher = AESCipher(local_key)
        self._connection_factory = connection_factory
        self._socket: Optional[socket.socket] = None
        self._logger = TuyaLoggingAdapter(_LOGGER, {"device_id": device_id})

        self.state = SessionState.DISCONNECTED
        self.seqno = 1
        self.reading = SensorReading()
        self.last_status: Dict[str, Any] = {}
        self.last_error: Optional[TuyaError] = None

    def debug(self, msg: str, *args) -> None:
        """Log debug if enabled."""
        if self.enable_debug:
            self._logger.debug(msg, *args)

    def __enter__(self) -> "TuyaSession":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()

    # =========================================================================
    # CONNECTION
    # =========================================================================

    def connect(self) -> bool:
        """Open the TCP connection.

        Returns:
            True if connected (or already connected), False on failure
        """
        if self.is_connected():
            return True

        self.state = SessionState.CONNECTING
        self._logger.info(
            "Connecting to %s:%d (v%s)", self.address, self.port, self.protocol_version
        )
        try:
            sock = self._connection_factory((self.address, self.port), self.timeout)
            sock.settimeout(self.timeout)
        except OSError as e:
            self._logger.warning("Connection failed: %s", e)
            self.state = SessionState.DISCONNECTED
            self.last_error = TuyaConnectionError(f"Unable to connect: {e}")
            return False

        self._socket = sock
        self.state = SessionState.CONNECTED
        self.debug("Connection established")
        return True

    def disconnect(self) -> None:
        """Close the connection. Always ends in DISCONNECTED."""
        if self._socket is not None:
            self.debug("Closing connection")
            try:
                self._socket.close()
            except OSError as e:
                self.debug("Error closing socket: %s", e)
        self._socket = None
        self.state = SessionState.DISCONNECTED

    def is_connected(self) -> bool:
        """Return True while a socket is open."""
        return self._socket is not None

    # =========================================================================
    # STATUS
    # =========================================================================

    def fetch_status(self) -> bool:
        """Query the device and update the reading.

        Failures are recorded in last_error; the reading is left untouched.

        Returns:
            True on success, False on any error
        """
        try:
            status = self.query()
        except TuyaError as e:
            self.last_error = e
            self._logger.warning("Status query failed (%s): %s", type(e).__name__, e)
            return False

        self.last_error = None
        self.last_status = status.dps
        map_data_points(status.dps, self.reading)
        self.debug("Reading: %s", self.reading)
        return True

    def query(self) -> DeviceStatus:
        """Send one status query and return the decoded response.

        Raises:
            ConnectionError: If the device cannot be reached or written to
            TimeoutError: If no response arrives in time
            FramingError: On a malformed or truncated response
            DecryptError: If the payload is not block aligned
            ParseError: If the payload is not JSON with a dps object
        """
        if not self.is_connected() and not self.connect():
            raise self.last_error or TuyaConnectionError("Unable to connect")

        self.state = SessionState.QUERYING
        try:
            self._send_query()
            try:
                header, header_bytes, payload = self._read_response()
            except (TuyaTimeoutError, FramingError):
                # A late or partial reply would be read by the next query
                self.disconnect()
                raise

            msg = unpack_message(
                header,
                payload,
                self.protocol_version,
                header_bytes=header_bytes
            )
            self.debug(
                "Response: cmd=%d seqno=%d retcode=%d payload_len=%d",
                msg.cmd, msg.seqno, msg.retcode, len(msg.payload)
            )

            text = decrypt_payload(msg.payload, self._cipher)
            self.debug("Decoded payload: %s", text)
            return parse_status(text)
        finally:
            if self.state is SessionState.QUERYING:
                self.state = SessionState.CONNECTED

    def _send_query(self) -> None:
        """Encode and write a status query, consuming one sequence number."""
        payload = generate_payload(self.device_id)
        seqno = self.seqno
        self.seqno = (self.seqno + 1) % SEQNO_MODULO

        data = pack_message(
            seqno=seqno,
            cmd=self.protocol_version.command,
            payload=payload,
            key=self._cipher,
            protocol_version=self.protocol_version
        )
        self.debug("Sending query seqno=%d (%d bytes)", seqno, len(data))

        try:
            self._socket.sendall(data)
        except OSError as e:
            self.disconnect()
            raise TuyaConnectionError(f"Write failed: {e}") from e

    def _read_response(self) -> Tuple[TuyaHeader, bytes, bytes]:
        """Wait for a response and read one complete frame.

        Returns:
            Tuple of (parsed header, raw 16-byte header, payload following it)
        """
        try:
            readable, _, _ = select.select([self._socket], [], [], self.timeout)
        except (OSError, ValueError) as e:
            self.disconnect()
            raise TuyaConnectionError(f"Socket unusable: {e}") from e

        if not readable:
            raise TuyaTimeoutError(f"No response within {self.timeout} seconds")

        header_bytes = self._recv_exactly(HEADER_SIZE_55AA)
        header = parse_header(header_bytes)
        return header, header_bytes, self._recv_exactly(header.length)

    def _recv_exactly(self, size: int) -> bytes:
        """Read exactly size bytes.

        Raises:
            FramingError: If the peer closes or stalls before size bytes arrive
        """
        data = b""
        while len(data) < size:
            try:
                chunk = self._socket.recv(size - len(data))
            except socket.timeout:
                raise FramingError(f"Short read: need {size}, got {len(data)}") from None
            except OSError as e:
                self.disconnect()
                raise TuyaConnectionError(f"Read failed: {e}") from e

            if not chunk:
                self.disconnect()
                raise FramingError(f"Short read: need {size}, got {len(data)} (connection closed)")
            data += chunk

        return data


# =============================================================================
# CONNECTION FUNCTION
# =============================================================================

def connect(
    address: str,
    device_id: str,
    local_key: Union[str, bytes],
    protocol_version: Union[ProtocolVersion, str, float] = ProtocolVersion.V3_3,
    enable_debug: bool = False,
    port: int = DEFAULT_PORT,
    timeout: float = DEFAULT_TIMEOUT
) -> TuyaSession:
    """Create a session and connect it to a Tuya device.

    Returns:
        Connected TuyaSession instance

    Raises:
        ConnectionError: If the connection cannot be established
    """
    session = TuyaSession(
        device_id=device_id,
        address=address,
        local_key=local_key,
        protocol_version=protocol_version,
        port=port,
        timeout=timeout,
        enable_debug=enable_debug
    )
    if not session.connect():
        raise session.last_error
    return session

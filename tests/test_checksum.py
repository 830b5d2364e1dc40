"""Tests for the CRC32 checksum."""

import pytest

from tuyasensor.lan import calculate_crc32


def reference_crc32(data: bytes) -> int:
    """Bitwise reflected CRC-32, poly 0xEDB88320."""
    crc = 0xFFFFFFFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            crc = (crc >> 1) ^ (0xEDB88320 if crc & 1 else 0)
    return crc ^ 0xFFFFFFFF


class TestCrc32:
    """Tests for calculate_crc32."""

    def test_empty(self):
        """CRC of no data is zero."""
        assert calculate_crc32(b"") == 0x00000000

    def test_single_byte(self):
        """CRC of a single byte."""
        assert calculate_crc32(b"a") == 0xE8B7BE43

    def test_check_value(self):
        """Standard CRC-32 check value."""
        assert calculate_crc32(b"123456789") == 0xCBF43926

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"\x00",
            b"\xff",
            b"The quick brown fox jumps over the lazy dog",
            bytes(range(256)) * 3,
        ],
    )
    def test_matches_reference(self, data):
        """Matches a bitwise reference implementation."""
        assert calculate_crc32(data) == reference_crc32(data)

    def test_is_unsigned_32bit(self):
        """Result is always in the uint32 range."""
        crc = calculate_crc32(b"\xff" * 100)
        assert 0 <= crc <= 0xFFFFFFFF

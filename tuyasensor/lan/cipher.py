# -*- coding: utf-8 -*-
"""
AES Cipher module for Tuya communication.

ECB mode encryption/decryption with PKCS7 padding, as used by the 55AA
frames of Protocol 3.3-3.5 when the local key is the cipher key.
"""

from typing import Union

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .constants import AES_BLOCK_SIZE, LOCAL_KEY_SIZE
from .message import DecryptError


class AESCipher:
    """AES-128 ECB cipher keyed with the device local key."""

    def __init__(self, key: Union[str, bytes]):
        """Initialize cipher with encryption key.

        Args:
            key: 16-byte AES key (device local_key)
        """
        if isinstance(key, str):
            key = key.encode("latin1")
        if len(key) != LOCAL_KEY_SIZE:
            raise ValueError(f"AES key must be {LOCAL_KEY_SIZE} bytes, got {len(key)}")

        self.key = key
        self._ecb_cipher = Cipher(
            algorithms.AES(key),
            modes.ECB(),
            backend=default_backend()
        )

    def encrypt_ecb(self, plaintext: bytes) -> bytes:
        """Pad and encrypt data using AES-ECB mode.

        The output is always ((len(plaintext) // 16) + 1) * 16 bytes long:
        block-aligned input still gets a full block of padding.
        """
        plaintext = self._pkcs7_pad(plaintext)

        encryptor = self._ecb_cipher.encryptor()
        return encryptor.update(plaintext) + encryptor.finalize()

    def decrypt_ecb(self, ciphertext: bytes) -> bytes:
        """Decrypt data using AES-ECB mode and strip the padding.

        Raises:
            DecryptError: If ciphertext is empty or not block aligned
        """
        if not ciphertext or len(ciphertext) % AES_BLOCK_SIZE:
            raise DecryptError(
                f"Ciphertext length {len(ciphertext)} is not a non-zero multiple of {AES_BLOCK_SIZE}"
            )

        decryptor = self._ecb_cipher.decryptor()
        plaintext = decryptor.update(ciphertext) + decryptor.finalize()

        return self._pkcs7_unpad(plaintext)

    # =========================================================================
    # PADDING
    # =========================================================================

    @staticmethod
    def _pkcs7_pad(data: bytes) -> bytes:
        """Apply PKCS7 padding to data."""
        pad_len = AES_BLOCK_SIZE - (len(data) % AES_BLOCK_SIZE)
        return data + bytes([pad_len] * pad_len)

    @staticmethod
    def _pkcs7_unpad(data: bytes) -> bytes:
        """Remove PKCS7 padding from data.

        Only the last byte is inspected; the pad bytes themselves are not
        checked. An out-of-range pad value leaves the data untouched.
        """
        if not data:
            return data
        pad_len = data[-1]
        if pad_len > AES_BLOCK_SIZE or pad_len == 0:
            return data
        return data[:-pad_len]

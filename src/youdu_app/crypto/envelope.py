"""Encrypted envelope codec for Youdu payloads.

Every business payload exchanged with the Youdu server travels as an
envelope: a base64 string wrapping AES-256-CBC ciphertext of::

    nonce (16 random bytes) | len(payload) (uint32, big-endian) | payload | app_id

The IV is the first 16 bytes of the AES key. There is no MAC; the app id
embedded after the payload is the only binding between a ciphertext and the
application, so callers must compare it with :func:`open_envelope` (or
:meth:`EnvelopeCodec.open`) rather than :func:`decrypt` alone.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
import struct
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..errors import ConfigError, EnvelopeError

KEY_SIZE = 32
BLOCK_SIZE = 16
NONCE_SIZE = 16
LENGTH_SIZE = 4
# Peers derived from the WeChat scheme pad to 32 bytes; accept both on decode.
MAX_PAD = 32

_LENGTH = struct.Struct(">I")


@dataclass(frozen=True)
class Envelope:
    """Decoded envelope contents.

    Attributes:
        payload: Plaintext business payload.
        length: Payload length declared in the envelope header.
        app_id: Application ID the envelope was sealed for.
    """

    payload: bytes
    length: int
    app_id: str

    def json(self) -> Any:
        """Decode the payload as JSON."""
        try:
            return json.loads(self.payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise EnvelopeError(f"Envelope payload is not valid JSON: {exc}") from exc


def decode_aes_key(encoded: str) -> bytes:
    """Decode a base64 AES key and check it is 256 bits long.

    Raises:
        ConfigError: If the string is not base64 or the key is not 32 bytes.
    """
    try:
        key = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigError(f"Base64 decode error: {exc}") from exc
    if len(key) != KEY_SIZE:
        raise ConfigError(f"Invalid AES key size: expected {KEY_SIZE} bytes, got {len(key)}")
    return key


def _cipher(key: bytes) -> Cipher:
    if len(key) != KEY_SIZE:
        raise ConfigError(f"Invalid AES key size: expected {KEY_SIZE} bytes, got {len(key)}")
    return Cipher(algorithms.AES(key), modes.CBC(key[:BLOCK_SIZE]))


def encrypt(payload: bytes, key: bytes, app_id: str) -> str:
    """Seal ``payload`` for ``app_id`` under ``key``.

    Args:
        payload: Plaintext bytes.
        key: 32-byte AES key.
        app_id: Application ID appended after the payload.

    Returns:
        Base64 encoded ciphertext.
    """
    plain = os.urandom(NONCE_SIZE) + _LENGTH.pack(len(payload)) + payload + app_id.encode("utf-8")

    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plain) + padder.finalize()

    encryptor = _cipher(key).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(ciphertext).decode("ascii")


def _unpad(data: bytes) -> bytes:
    pad_len = data[-1]
    if not 1 <= pad_len <= MAX_PAD or pad_len > len(data):
        raise EnvelopeError("Invalid PKCS#7 padding")
    if data[-pad_len:] != bytes([pad_len]) * pad_len:
        raise EnvelopeError("Invalid PKCS#7 padding")
    return data[:-pad_len]


def decrypt(ciphertext: str | bytes, key: bytes) -> Envelope:
    """Open an envelope without checking who it was sealed for.

    Raises:
        EnvelopeError: On malformed base64, bad block alignment, invalid
            padding, or a declared length larger than the remaining data.
    """
    try:
        raw = base64.b64decode(ciphertext, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EnvelopeError(f"Malformed base64 ciphertext: {exc}") from exc

    if not raw or len(raw) % BLOCK_SIZE:
        raise EnvelopeError(
            f"Ciphertext length {len(raw)} is not a positive multiple of {BLOCK_SIZE}"
        )

    decryptor = _cipher(key).decryptor()
    plain = _unpad(decryptor.update(raw) + decryptor.finalize())

    if len(plain) < NONCE_SIZE + LENGTH_SIZE:
        raise EnvelopeError("Envelope too short")

    body = plain[NONCE_SIZE:]
    (length,) = _LENGTH.unpack_from(body)
    rest = body[LENGTH_SIZE:]
    if length > len(rest):
        raise EnvelopeError(f"Declared length {length} exceeds remaining {len(rest)} bytes")

    try:
        app_id = rest[length:].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EnvelopeError("Envelope app id is not valid UTF-8") from exc

    return Envelope(payload=rest[:length], length=length, app_id=app_id)


def open_envelope(ciphertext: str | bytes, key: bytes, app_id: str) -> Envelope:
    """Decrypt an envelope and reject it unless it was sealed for ``app_id``."""
    envelope = decrypt(ciphertext, key)
    if envelope.app_id != app_id:
        raise EnvelopeError(
            f"App id mismatch: expected {app_id!r}, got {envelope.app_id!r}"
        )
    return envelope


class EnvelopeCodec:
    """Envelope codec bound to one application's key and id."""

    def __init__(self, key: bytes, app_id: str) -> None:
        if len(key) != KEY_SIZE:
            raise ConfigError(f"Invalid AES key size: expected {KEY_SIZE} bytes, got {len(key)}")
        self._key = key
        self.app_id = app_id

    @classmethod
    def from_base64(cls, encoded_key: str, app_id: str) -> EnvelopeCodec:
        return cls(decode_aes_key(encoded_key), app_id)

    def seal(self, payload: bytes) -> str:
        return encrypt(payload, self._key, self.app_id)

    def open(self, ciphertext: str | bytes) -> Envelope:
        return open_envelope(ciphertext, self._key, self.app_id)

    def open_json(self, ciphertext: str | bytes) -> Any:
        return self.open(ciphertext).json()

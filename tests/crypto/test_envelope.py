"""Tests for the envelope codec."""

from __future__ import annotations

import base64
import struct

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from youdu_app.crypto import (
    Envelope,
    EnvelopeCodec,
    decode_aes_key,
    decrypt,
    encrypt,
    open_envelope,
)
from youdu_app.errors import ConfigError, EnvelopeError

ZERO_KEY = bytes(32)
KEY = bytes(range(32))


def _raw_encrypt(plain: bytes, key: bytes = KEY) -> str:
    """Encrypt already padded plaintext, bypassing the codec."""
    encryptor = Cipher(algorithms.AES(key), modes.CBC(key[:16])).encryptor()
    return base64.b64encode(encryptor.update(plain) + encryptor.finalize()).decode()


class TestDecodeAesKey:
    """Tests for decode_aes_key."""

    def test_valid_key(self) -> None:
        encoded = base64.b64encode(KEY).decode()
        assert decode_aes_key(encoded) == KEY

    def test_wrong_length(self) -> None:
        encoded = base64.b64encode(bytes(16)).decode()
        with pytest.raises(ConfigError, match="32"):
            decode_aes_key(encoded)

    def test_not_base64(self) -> None:
        with pytest.raises(ConfigError):
            decode_aes_key("not a key!")

    def test_codec_rejects_short_key(self) -> None:
        with pytest.raises(ConfigError):
            EnvelopeCodec(bytes(31), "A1")


class TestEncryptDecrypt:
    """Round trips and the zero-key scenario."""

    def test_zero_key_hello(self) -> None:
        """A payload sealed under the all-zero key opens to the same fields."""
        cipher = encrypt(b"hello", ZERO_KEY, "A1")

        # nonce + length + payload + app id is 27 bytes, padded to 32
        assert len(base64.b64decode(cipher)) == 32

        envelope = decrypt(cipher, ZERO_KEY)
        assert envelope == Envelope(payload=b"hello", length=5, app_id="A1")

    def test_nonce_is_random(self) -> None:
        assert encrypt(b"hello", KEY, "A1") != encrypt(b"hello", KEY, "A1")

    @pytest.mark.parametrize(
        "payload",
        [b"", b"x", bytes(range(256)) * 3, "中文消息 🎉".encode()],
    )
    def test_round_trip(self, payload: bytes) -> None:
        envelope = open_envelope(encrypt(payload, KEY, "yd-app"), KEY, "yd-app")
        assert envelope.payload == payload
        assert envelope.length == len(payload)

    def test_ciphertext_is_block_aligned(self) -> None:
        for size in range(0, 40):
            raw = base64.b64decode(encrypt(bytes(size), KEY, "A1"))
            assert len(raw) % 16 == 0

    def test_accepts_bytes_ciphertext(self) -> None:
        cipher = encrypt(b"data", KEY, "A1").encode()
        assert decrypt(cipher, KEY).payload == b"data"


class TestAppIdBinding:
    """Tests for open_envelope and EnvelopeCodec.open."""

    def test_mismatched_app_id(self) -> None:
        cipher = encrypt(b"hello", KEY, "A1")
        with pytest.raises(EnvelopeError, match="App id mismatch"):
            open_envelope(cipher, KEY, "A2")

    def test_decrypt_reports_app_id(self) -> None:
        assert decrypt(encrypt(b"hello", KEY, "A1"), KEY).app_id == "A1"

    def test_codec_open(self) -> None:
        sender = EnvelopeCodec(KEY, "A1")
        receiver = EnvelopeCodec(KEY, "A2")
        cipher = sender.seal(b"{}")

        assert sender.open_json(cipher) == {}
        with pytest.raises(EnvelopeError):
            receiver.open(cipher)


class TestMalformed:
    """Rejection of ciphertexts that cannot be opened."""

    def test_malformed_base64(self) -> None:
        with pytest.raises(EnvelopeError, match="base64"):
            decrypt("not base64!!", KEY)

    def test_empty(self) -> None:
        with pytest.raises(EnvelopeError):
            decrypt("", KEY)

    def test_unaligned_length(self) -> None:
        with pytest.raises(EnvelopeError, match="multiple of 16"):
            decrypt(base64.b64encode(bytes(15)).decode(), KEY)

    def test_tampered_first_block(self) -> None:
        """Flipping a bit of block one corrupts the declared length in block two."""
        raw = bytearray(base64.b64decode(encrypt(b"hello", KEY, "A1")))
        raw[0] ^= 0x01

        with pytest.raises(EnvelopeError):
            decrypt(base64.b64encode(bytes(raw)).decode(), KEY)

    def test_tampered_never_yields_original(self) -> None:
        cipher = encrypt(b"hello", KEY, "A1")
        raw = base64.b64decode(cipher)
        for index in range(len(raw)):
            tampered = bytearray(raw)
            tampered[index] ^= 0x80
            try:
                envelope = open_envelope(base64.b64encode(bytes(tampered)).decode(), KEY, "A1")
            except EnvelopeError:
                continue
            assert (envelope.payload, envelope.app_id) != (b"hello", "A1")

    def test_invalid_padding(self) -> None:
        plain = bytes(16) + struct.pack(">I", 1) + b"x" + b"A1" + bytes(9)
        with pytest.raises(EnvelopeError, match="padding"):
            decrypt(_raw_encrypt(plain), KEY)

    def test_declared_length_overflow(self) -> None:
        body = bytes(16) + struct.pack(">I", 100) + b"short"
        plain = body + bytes([7]) * 7
        with pytest.raises(EnvelopeError, match="Declared length"):
            decrypt(_raw_encrypt(plain), KEY)

    def test_too_short(self) -> None:
        with pytest.raises(EnvelopeError, match="too short"):
            decrypt(_raw_encrypt(bytes([16]) * 16), KEY)

    def test_accepts_32_byte_padding(self) -> None:
        """Peers padding to 32-byte blocks are still understood."""
        body = bytes(16) + struct.pack(">I", 14) + b"hello world!!!" + b"A1"
        pad = 32 - len(body) % 32
        assert pad > 16
        envelope = decrypt(_raw_encrypt(body + bytes([pad]) * pad), KEY)

        assert envelope.payload == b"hello world!!!"
        assert envelope.app_id == "A1"


class TestEnvelopeJson:
    def test_json_payload(self) -> None:
        envelope = Envelope(payload=b'{"a": 1}', length=8, app_id="A1")
        assert envelope.json() == {"a": 1}

    def test_invalid_json_payload(self) -> None:
        envelope = Envelope(payload=b"1700000000x", length=11, app_id="A1")
        with pytest.raises(EnvelopeError):
            envelope.json()

"""Envelope encryption used on every Youdu payload."""

from .envelope import (
    Envelope,
    EnvelopeCodec,
    decode_aes_key,
    decrypt,
    encrypt,
    open_envelope,
)

__all__ = [
    "Envelope",
    "EnvelopeCodec",
    "decode_aes_key",
    "decrypt",
    "encrypt",
    "open_envelope",
]

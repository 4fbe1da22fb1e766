"""
Standard (RFC 4648) base64 for image payloads.

Decoding is tolerant of the line-wrapped output many encoders produce:
surrounding whitespace and embedded CR/LF characters are dropped before the
text is decoded. Missing trailing padding is restored. Anything else outside
the standard alphabet is rejected with ``DecodeError``.
"""
from __future__ import annotations

import base64
import binascii

from .errors import DecodeError

PAD = "="
MAX_PADDING = 2


def _clean(text: str) -> str:
    return text.strip().replace("\n", "").replace("\r", "")


def count_padding(text: str) -> int:
    """Number of trailing ``=`` characters in *text* (after cleaning)."""
    clean = _clean(text)
    return len(clean) - len(clean.rstrip(PAD))


def decode(text: str) -> bytes:
    """Decode base64 *text* to bytes. Empty (or blank) text gives ``b""``."""
    if not isinstance(text, str):
        raise DecodeError(f"expected str, got {type(text).__name__}")

    clean = _clean(text)
    if not clean:
        return b""

    padding = count_padding(clean)
    if padding > MAX_PADDING:
        raise DecodeError(f"too many padding characters ({padding})")

    body = clean[: len(clean) - padding]
    if PAD in body:
        raise DecodeError("padding character inside encoded data")

    remainder = len(body) % 4
    if remainder == 1:
        raise DecodeError(f"invalid length {len(body)}: not a base64 quantum")
    if padding and (len(body) + padding) % 4 != 0:
        raise DecodeError(
            f"{padding} padding character(s) do not complete a {len(body)}-character body"
        )

    try:
        return base64.b64decode(body + PAD * ((4 - remainder) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(str(exc)) from exc


def encode(data: bytes) -> str:
    """Encode *data* as padded standard base64 text."""
    return base64.b64encode(bytes(data)).decode("ascii")

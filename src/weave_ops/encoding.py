"""URL-safe base64 (no padding) helpers used for every binary wire field."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Final

__all__ = [
    "b64url_decode",
    "b64url_encode",
    "int_from_bytes",
    "int_to_bytes",
]

_B64URL_ALPHABET: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]*$")


def b64url_encode(data: bytes) -> str:
    """Encode ``data`` with the URL-safe alphabet and strip trailing padding."""

    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    """Decode unpadded URL-safe base64 text.

    The decoder is strict: characters outside ``A-Z a-z 0-9 - _``, padding
    characters and impossible lengths are rejected instead of being skipped.

    Args:
        text: Encoded value. The empty string decodes to ``b""``.

    Returns:
        The decoded bytes.

    Raises:
        ValueError: If ``text`` is not valid unpadded base64url.
    """

    if not isinstance(text, str):
        raise ValueError(f"expected base64url text, got {type(text).__name__}")
    if not _B64URL_ALPHABET.match(text):
        raise ValueError("illegal character in base64url data")
    if len(text) % 4 == 1:
        raise ValueError(f"illegal base64url data length {len(text)}")
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except binascii.Error as exc:  # pragma: no cover - guarded by the checks above
        raise ValueError(f"malformed base64url data: {exc}") from exc


def int_to_bytes(value: int) -> bytes:
    """Return the minimal big-endian representation of a non-negative integer.

    Zero maps to ``b""``, matching arbitrary-precision integer byte views.
    """

    if value < 0:
        raise ValueError("negative integers have no unsigned byte form")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def int_from_bytes(data: bytes) -> int:
    """Interpret ``data`` as an unsigned big-endian integer."""

    return int.from_bytes(data, "big")

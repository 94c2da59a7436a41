from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    """
    Ensure input is bytes.

    Accepts:
      - bytes / bytearray / memoryview  -> bytes(data)
      - str: treated as hex; optional '0x' prefix; even-length enforced
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return from_hex(data)
    raise TypeError(f"Unsupported type for ensure_bytes: {type(data)!r}")


def from_hex(s: str) -> bytes:
    """
    Hex string (optionally '0x' prefixed) -> bytes. Even length is enforced.
    """
    if not isinstance(s, str):
        raise TypeError("from_hex expects a string")
    if s.startswith(("0x", "0X")):
        s = s[2:]
    if len(s) % 2 != 0:
        raise ValueError("hex string must have even length")
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


# --- Zarith naturals and integers --------------------------------------------


def uvarint_encode(n: int) -> bytes:
    """
    Encode a natural number as base-128 little-endian groups.

    Every byte but the last carries the 0x80 continuation bit.

    Example:
        0    -> b'\\x00'
        32   -> b'\\x20'
        4096 -> b'\\x80\\x20'
    """
    if n < 0:
        raise ValueError("uvarint_encode expects a non-negative integer")
    out = bytearray()
    while True:
        to_write = n & 0x7F
        n >>= 7
        if n:
            out.append(to_write | 0x80)
        else:
            out.append(to_write)
            break
    return bytes(out)


def svarint_encode(n: int) -> bytes:
    """
    Encode a signed integer.

    The first byte holds the continuation bit (0x80), the sign bit (0x40) and
    the six low bits of the magnitude; every following byte holds seven more
    magnitude bits, little-endian.

    Example:
        -64    -> b'\\xc0\\x01'
        -120053 -> b'\\xf5\\xd3\\x0e'
    """
    magnitude = abs(n)
    first = magnitude & 0x3F
    if n < 0:
        first |= 0x40
    magnitude >>= 6
    if magnitude:
        first |= 0x80
    out = bytearray([first])
    while magnitude:
        to_write = magnitude & 0x7F
        magnitude >>= 7
        out.append(to_write | 0x80 if magnitude else to_write)
    return bytes(out)


__all__ = [
    "BytesLike",
    "ensure_bytes",
    "from_hex",
    "uvarint_encode",
    "svarint_encode",
]

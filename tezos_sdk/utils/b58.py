"""
Base58check with the chain's versioned prefixes.

Every base58 string the node uses (addresses, keys, signatures, block and
protocol hashes) is `base58check(prefix || payload)`, where the prefix bytes
make the rendered string start with a recognisable tag (tz1, edpk, B, ...).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import base58


class Prefix(bytes, Enum):
    # Public key hashes / addresses
    TZ1 = bytes([6, 161, 159])
    TZ2 = bytes([6, 161, 161])
    TZ3 = bytes([6, 161, 164])
    KT1 = bytes([2, 90, 121])
    # Public keys
    EDPK = bytes([13, 15, 37, 217])
    SPPK = bytes([3, 254, 226, 86])
    P2PK = bytes([3, 178, 139, 127])
    # Secret keys
    EDSK = bytes([43, 246, 78, 7])
    EDSK_SEED = bytes([13, 15, 58, 7])
    SPSK = bytes([17, 162, 224, 201])
    P2SK = bytes([16, 81, 238, 189])
    # Signatures
    EDSIG = bytes([9, 245, 205, 134, 18])
    SPSIG = bytes([13, 115, 101, 19, 63])
    P2SIG = bytes([54, 240, 44, 52])
    SIG = bytes([4, 130, 43])
    # Chain objects
    BLOCK = bytes([1, 52])
    PROTOCOL = bytes([2, 170])
    CHAIN_ID = bytes([87, 82, 0])
    OPERATION = bytes([5, 116])
    SCRIPT_EXPR = bytes([13, 44, 64, 27])


def b58check_encode(payload: bytes, prefix: Prefix) -> str:
    """Encode `payload` behind `prefix` as a base58check string."""
    return base58.b58encode_check(prefix.value + bytes(payload)).decode("ascii")


def b58check_decode(value: str, prefix: Prefix, *, length: Optional[int] = None) -> Optional[bytes]:
    """
    Decode a base58check string and strip `prefix`.

    Returns None when the checksum is wrong, the string is not base58, the
    prefix does not match, or the payload is not `length` bytes long.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        raw = base58.b58decode_check(value)
    except ValueError:
        return None
    if not raw.startswith(prefix.value):
        return None
    payload = raw[len(prefix.value):]
    if length is not None and len(payload) != length:
        return None
    return payload


__all__ = ["Prefix", "b58check_encode", "b58check_decode"]

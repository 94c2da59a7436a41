"""
Address helpers.

Implicit accounts are `tz1` (ed25519), `tz2` (secp256k1) and `tz3` (p256),
all base58check over a 20-byte public key hash. Originated contracts are
`KT1` over a 20-byte contract hash.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import TezosSdkError
from .utils.b58 import Prefix, b58check_decode, b58check_encode

HASH_LEN = 20


class SigningCurve(str, Enum):
    ED25519 = "ed25519"
    SECP256K1 = "secp256k1"
    P256 = "p256"

    @property
    def tag(self) -> int:
        """Curve byte used in binary encodings."""
        return _CURVE_TAGS[self]


_CURVE_TAGS = {SigningCurve.ED25519: 0, SigningCurve.SECP256K1: 1, SigningCurve.P256: 2}

_IMPLICIT_PREFIXES = {
    "tz1": (Prefix.TZ1, SigningCurve.ED25519),
    "tz2": (Prefix.TZ2, SigningCurve.SECP256K1),
    "tz3": (Prefix.TZ3, SigningCurve.P256),
}

_PKH_PREFIX = {curve: prefix for prefix, curve in _IMPLICIT_PREFIXES.values()}


class AddressError(TezosSdkError, ValueError):
    """Raised when a string is not a valid address."""


@dataclass(frozen=True)
class ParsedAddress:
    address: str
    hash: bytes
    curve: Optional[SigningCurve] = None  # None for originated (KT1) contracts

    @property
    def is_implicit(self) -> bool:
        return self.curve is not None


def parse_address(address: str) -> ParsedAddress:
    """Decode and validate a tz1/tz2/tz3/KT1 address."""
    if not isinstance(address, str) or len(address) < 3:
        raise AddressError(f"not an address: {address!r}")
    tag = address[:3]
    if tag == "KT1":
        payload = b58check_decode(address, Prefix.KT1, length=HASH_LEN)
        if payload is None:
            raise AddressError(f"invalid contract address: {address!r}")
        return ParsedAddress(address=address, hash=payload)
    if tag in _IMPLICIT_PREFIXES:
        prefix, curve = _IMPLICIT_PREFIXES[tag]
        payload = b58check_decode(address, prefix, length=HASH_LEN)
        if payload is None:
            raise AddressError(f"invalid implicit address: {address!r}")
        return ParsedAddress(address=address, hash=payload, curve=curve)
    raise AddressError(f"unknown address prefix: {address!r}")


def is_valid_address(address: str) -> bool:
    try:
        parse_address(address)
    except AddressError:
        return False
    return True


def is_implicit(address: str) -> bool:
    return address.startswith(tuple(_IMPLICIT_PREFIXES)) and is_valid_address(address)


def encode_public_key_hash(pkh: bytes, curve: SigningCurve) -> str:
    """Render a 20-byte public key hash as a tz1/tz2/tz3 address."""
    if len(pkh) != HASH_LEN:
        raise AddressError(f"public key hash must be {HASH_LEN} bytes, got {len(pkh)}")
    return b58check_encode(pkh, _PKH_PREFIX[curve])


__all__ = [
    "SigningCurve",
    "AddressError",
    "ParsedAddress",
    "parse_address",
    "is_valid_address",
    "is_implicit",
    "encode_public_key_hash",
]

"""
tezos_sdk.wallet.keys
=====================

Secret and public keys for the three signing curves the chain accepts.

Signing always covers `blake2b_256(0x03 || bytes)`: the 0x03 watermark marks
the bytes as a manager operation, and the 32-byte digest is what the curve
signs. Curve math is delegated to `cryptography`:

- ed25519: `Ed25519PrivateKey` (deterministic, 64-byte signatures).
- secp256k1 / p256: ECDSA over the prehashed digest, re-encoded from DER as
  64 bytes `r || s` with `s` normalised to the lower half of the curve order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from ..address import SigningCurve, encode_public_key_hash
from ..utils.b58 import Prefix, b58check_decode, b58check_encode
from ..utils.bytes import BytesLike, from_hex
from ..utils.hash import blake2b_160, blake2b_256

OPERATION_WATERMARK = b"\x03"

_EC_CURVES = {
    SigningCurve.SECP256K1: ec.SECP256K1,
    SigningCurve.P256: ec.SECP256R1,
}

_EC_ORDERS = {
    SigningCurve.SECP256K1: 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
    SigningCurve.P256: 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551,
}

_PK_PREFIX = {
    SigningCurve.ED25519: Prefix.EDPK,
    SigningCurve.SECP256K1: Prefix.SPPK,
    SigningCurve.P256: Prefix.P2PK,
}

_PK_LEN = {SigningCurve.ED25519: 32, SigningCurve.SECP256K1: 33, SigningCurve.P256: 33}

_ECDSA = ec.ECDSA(Prehashed(hashes.SHA256()))


def signing_digest(data: Union[BytesLike, str]) -> bytes:
    """Watermark and hash forged operation bytes (or their hex) for signing."""
    raw = from_hex(data) if isinstance(data, str) else bytes(data)
    return blake2b_256(OPERATION_WATERMARK + raw)


class KeyFormatError(ValueError):
    """Raised when a key string or raw key material cannot be decoded."""


# -----------------------------------------------------------------------------
# Public keys
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class PublicKey:
    key: bytes
    curve: SigningCurve = SigningCurve.ED25519

    def __post_init__(self) -> None:
        if len(self.key) != _PK_LEN[self.curve]:
            raise KeyFormatError(
                f"{self.curve.value} public key must be {_PK_LEN[self.curve]} bytes, got {len(self.key)}"
            )

    @classmethod
    def from_base58(cls, value: str) -> "PublicKey":
        for curve, prefix in _PK_PREFIX.items():
            payload = b58check_decode(value, prefix, length=_PK_LEN[curve])
            if payload is not None:
                return cls(payload, curve)
        raise KeyFormatError(f"invalid public key: {value!r}")

    @property
    def base58check_representation(self) -> str:
        return b58check_encode(self.key, _PK_PREFIX[self.curve])

    @property
    def public_key_hash(self) -> str:
        """tz1/tz2/tz3 address derived from this key."""
        return encode_public_key_hash(blake2b_160(self.key), self.curve)

    def verify(self, signature: bytes, data: Union[BytesLike, str]) -> bool:
        """Check a 64-byte signature over watermarked `data`."""
        if len(signature) != 64:
            return False
        digest = signing_digest(data)
        try:
            if self.curve is SigningCurve.ED25519:
                ed25519.Ed25519PublicKey.from_public_bytes(self.key).verify(signature, digest)
            else:
                pub = ec.EllipticCurvePublicKey.from_encoded_point(_EC_CURVES[self.curve](), self.key)
                r = int.from_bytes(signature[:32], "big")
                s = int.from_bytes(signature[32:], "big")
                pub.verify(encode_dss_signature(r, s), digest, _ECDSA)
        except InvalidSignature:
            return False
        return True

    def __str__(self) -> str:
        return self.base58check_representation


# -----------------------------------------------------------------------------
# Secret keys
# -----------------------------------------------------------------------------


class SecretKey:
    """
    A secret key on one of the supported curves.

    Accepted base58 forms: `edsk` (64-byte seed+public key or 32-byte seed),
    `spsk` and `p2sk` (32-byte scalars).
    """

    __slots__ = ("_secret", "curve", "_private")

    def __init__(self, secret: bytes, curve: SigningCurve = SigningCurve.ED25519) -> None:
        self.curve = curve
        if curve is SigningCurve.ED25519:
            if len(secret) not in (32, 64):
                raise KeyFormatError("ed25519 secret key must be a 32-byte seed or 64 bytes")
            self._secret = bytes(secret[:32])
            self._private = ed25519.Ed25519PrivateKey.from_private_bytes(self._secret)
            if len(secret) == 64 and secret[32:] != self.public_key.key:
                raise KeyFormatError("ed25519 secret key does not match its public key")
        else:
            if len(secret) != 32:
                raise KeyFormatError(f"{curve.value} secret key must be 32 bytes")
            scalar = int.from_bytes(secret, "big")
            if not 0 < scalar < _EC_ORDERS[curve]:
                raise KeyFormatError(f"{curve.value} secret key is out of range")
            self._secret = bytes(secret)
            self._private = ec.derive_private_key(scalar, _EC_CURVES[curve]())

    @classmethod
    def from_base58(cls, value: str) -> "SecretKey":
        payload = b58check_decode(value, Prefix.EDSK, length=64)
        if payload is not None:
            return cls(payload, SigningCurve.ED25519)
        payload = b58check_decode(value, Prefix.EDSK_SEED, length=32)
        if payload is not None:
            return cls(payload, SigningCurve.ED25519)
        payload = b58check_decode(value, Prefix.SPSK, length=32)
        if payload is not None:
            return cls(payload, SigningCurve.SECP256K1)
        payload = b58check_decode(value, Prefix.P2SK, length=32)
        if payload is not None:
            return cls(payload, SigningCurve.P256)
        raise KeyFormatError("invalid secret key")

    @classmethod
    def from_seed(cls, seed: bytes, curve: SigningCurve = SigningCurve.ED25519) -> "SecretKey":
        """Derive from raw seed material; only the first 32 bytes are used."""
        if len(seed) < 32:
            raise KeyFormatError("seed must be at least 32 bytes")
        return cls(bytes(seed[:32]), curve)

    @property
    def public_key(self) -> PublicKey:
        pub = self._private.public_key()
        if self.curve is SigningCurve.ED25519:
            raw = pub.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)
        else:
            raw = pub.public_bytes(serialization.Encoding.X962, serialization.PublicFormat.CompressedPoint)
        return PublicKey(raw, self.curve)

    @property
    def base58check_representation(self) -> str:
        if self.curve is SigningCurve.ED25519:
            return b58check_encode(self._secret + self.public_key.key, Prefix.EDSK)
        prefix = Prefix.SPSK if self.curve is SigningCurve.SECP256K1 else Prefix.P2SK
        return b58check_encode(self._secret, prefix)

    def sign_digest(self, digest: bytes) -> bytes:
        """Sign a 32-byte digest, returning 64 bytes."""
        if self.curve is SigningCurve.ED25519:
            return self._private.sign(digest)
        r, s = decode_dss_signature(self._private.sign(digest, _ECDSA))
        order = _EC_ORDERS[self.curve]
        if s > order // 2:
            s = order - s
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def sign(self, data: Union[BytesLike, str]) -> bytes:
        """Sign forged operation bytes (or their hex) under the operation watermark."""
        return self.sign_digest(signing_digest(data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretKey):
            return NotImplemented
        return self.curve == other.curve and self._secret == other._secret

    def __hash__(self) -> int:
        return hash((self.curve, self._secret))

    def __repr__(self) -> str:
        return f"SecretKey(curve={self.curve.value}, public_key={self.public_key})"


def try_public_key(value: str) -> Optional[PublicKey]:
    try:
        return PublicKey.from_base58(value)
    except KeyFormatError:
        return None


__all__ = [
    "OPERATION_WATERMARK",
    "signing_digest",
    "KeyFormatError",
    "PublicKey",
    "SecretKey",
    "try_public_key",
]

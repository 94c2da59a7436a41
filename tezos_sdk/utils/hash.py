from __future__ import annotations

import hashlib

from .bytes import BytesLike, ensure_bytes


def blake2b_256(data: BytesLike) -> bytes:
    """Return the 32-byte BLAKE2b digest of *data*."""
    return hashlib.blake2b(ensure_bytes(data), digest_size=32).digest()


def blake2b_160(data: BytesLike) -> bytes:
    """Return the 20-byte BLAKE2b digest used for public key hashes."""
    return hashlib.blake2b(ensure_bytes(data), digest_size=20).digest()


__all__ = ["blake2b_256", "blake2b_160"]

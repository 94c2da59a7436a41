"""
tezos_sdk.wallet.signer
=======================

The signing seam used by the operation pipeline.

Anything with a `public_key` and a `sign(hex)` method can sign operations: a
local `Wallet`, a hardware device, a remote signer. `sign` receives the forged
operation hex, applies the operation watermark and digest itself, and returns
64 signature bytes, or None when it cannot sign.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

from ..address import SigningCurve
from .keys import KeyFormatError, PublicKey, SecretKey
from .mnemonic import create_mnemonic, mnemonic_to_seed

log = logging.getLogger(__name__)

__all__ = ["SigningProvider", "Wallet"]


@runtime_checkable
class SigningProvider(Protocol):
    @property
    def public_key(self) -> PublicKey: ...

    def sign(self, hex: str) -> Optional[bytes]: ...


@dataclass(frozen=True)
class Wallet:
    """A local signing provider backed by a `SecretKey`."""

    secret_key: SecretKey
    # the phrase a wallet was restored or generated from, if any
    mnemonic: Optional[str] = field(default=None, compare=False, repr=False)
    address: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", self.secret_key.public_key.public_key_hash)

    @classmethod
    def from_secret_key(cls, value: str) -> "Wallet":
        return cls(SecretKey.from_base58(value))

    @classmethod
    def from_seed(cls, seed: bytes, curve: SigningCurve = SigningCurve.ED25519) -> "Wallet":
        return cls(SecretKey.from_seed(seed, curve))

    @classmethod
    def from_mnemonic(
        cls, phrase: str, passphrase: str = "", curve: SigningCurve = SigningCurve.ED25519
    ) -> "Wallet":
        """Restore the wallet a BIP-39 `phrase` and optional `passphrase` derive."""
        return cls(SecretKey.from_seed(mnemonic_to_seed(phrase, passphrase), curve), mnemonic=phrase)

    @classmethod
    def generate(cls, passphrase: str = "", curve: SigningCurve = SigningCurve.ED25519) -> "Wallet":
        """A new wallet from a freshly generated 12-word mnemonic."""
        return cls.from_mnemonic(create_mnemonic(), passphrase, curve)

    @property
    def public_key(self) -> PublicKey:
        return self.secret_key.public_key

    @property
    def curve(self) -> SigningCurve:
        return self.secret_key.curve

    def sign(self, hex: str) -> Optional[bytes]:
        try:
            return self.secret_key.sign(hex)
        except (ValueError, KeyFormatError) as e:
            log.debug("wallet %s refused to sign: %s", self.address, e)
            return None

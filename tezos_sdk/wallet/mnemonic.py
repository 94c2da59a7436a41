"""
BIP-39 mnemonic helpers for wallet generation and restore.

- Generation and checksum validation use the `mnemonic` (Trezor) package with
  the English wordlist.
- Seed derivation is standard BIP-39 (PBKDF2-HMAC-SHA512 over the NFKD
  normalized phrase, salt "mnemonic" + passphrase, 2048 rounds). Tezos wallets
  use the first 32 bytes of the 64-byte seed as the secret key seed, so a
  phrase restores the same keys here as in other Tezos wallets.
- Restoring does not enforce the checksum: any phrase derives a seed. Call
  `validate_mnemonic()` first when user input should be rejected early.
"""

from __future__ import annotations

from mnemonic import Mnemonic

_WORDLIST = "english"
_STRENGTHS = {12: 128, 15: 160, 18: 192, 21: 224, 24: 256}


def create_mnemonic(num_words: int = 12) -> str:
    """Create a new English mnemonic of 12, 15, 18, 21 or 24 words."""
    try:
        strength = _STRENGTHS[num_words]
    except KeyError:
        raise ValueError(f"num_words must be one of {sorted(_STRENGTHS)}") from None
    return Mnemonic(_WORDLIST).generate(strength=strength)


def validate_mnemonic(phrase: str) -> bool:
    words = phrase.split()
    if len(words) not in _STRENGTHS:
        return False
    return bool(Mnemonic(_WORDLIST).check(" ".join(words)))


def mnemonic_to_seed(phrase: str, passphrase: str = "") -> bytes:
    """The 32-byte secret key seed for `phrase` and `passphrase`."""
    return Mnemonic.to_seed(" ".join(phrase.split()), passphrase)[:32]


__all__ = ["create_mnemonic", "validate_mnemonic", "mnemonic_to_seed"]

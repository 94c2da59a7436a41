from .keys import PublicKey, SecretKey  # noqa: F401
from .signer import SigningProvider, Wallet  # noqa: F401
from .mnemonic import create_mnemonic, mnemonic_to_seed, validate_mnemonic  # noqa: F401

"""
Tezos SDK for Python.
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import SDKConfig  # noqa: F401
from .errors import ErrorKind, TezosError, TezosSdkError  # noqa: F401

# RPC
from .rpc.http import RpcClient  # noqa: F401

# Addresses & keys
from .address import SigningCurve, is_valid_address, parse_address  # noqa: F401
from .wallet.keys import PublicKey, SecretKey  # noqa: F401
from .wallet.signer import SigningProvider, Wallet  # noqa: F401
from .wallet.mnemonic import create_mnemonic, validate_mnemonic  # noqa: F401

# Types
from .types.core import (  # noqa: F401
    Delegation,
    ForgingPolicy,
    OperationFeePolicy,
    OperationFees,
    OperationMetadata,
    Origination,
    Reveal,
    Tez,
    Transaction,
)

# Tx helpers
from .tx.build import OperationFactory, default_fees, operation_payload  # noqa: F401
from .tx.encode import forge_payload  # noqa: F401
from .tx.estimate import FeeEstimator  # noqa: F401
from .tx.forging import ForgingService  # noqa: F401
from .tx.metadata import OperationMetadataProvider  # noqa: F401
from .tx.send import InjectionService, PreapplicationService, SubmissionPipeline  # noqa: F401
from .tx.simulate import SimulationService  # noqa: F401

# Client
from .client import TezosNodeClient  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "SDKConfig",
    "ErrorKind", "TezosError", "TezosSdkError",
    # RPC
    "RpcClient",
    # Addresses & keys
    "SigningCurve", "is_valid_address", "parse_address",
    "PublicKey", "SecretKey", "SigningProvider", "Wallet",
    "create_mnemonic", "validate_mnemonic",
    # Types
    "Delegation", "ForgingPolicy", "OperationFeePolicy", "OperationFees",
    "OperationMetadata", "Origination", "Reveal", "Tez", "Transaction",
    # Tx
    "OperationFactory", "default_fees", "operation_payload", "forge_payload",
    "FeeEstimator", "ForgingService", "OperationMetadataProvider",
    "InjectionService", "PreapplicationService", "SubmissionPipeline",
    "SimulationService",
    # Client
    "TezosNodeClient",
]

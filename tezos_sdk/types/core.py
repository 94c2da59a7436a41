"""
Core chain types for the Python SDK.

Two kinds of objects live here:
- Ergonomic frozen dataclasses for operations, fees and payloads.
- `.to_rpc_dict()` converters that render them as the JSON the node expects
  (amounts and limits as decimal strings, hashes as base58 strings).

Nothing here performs network I/O; these are just types and converters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from enum import Enum
from functools import total_ordering
from typing import Any, Dict, List, Optional, Tuple, Union

from ..address import SigningCurve
from ..utils.b58 import Prefix, b58check_encode

# --- Common aliases ----------------------------------------------------------

Address = str  # base58check tz1/tz2/tz3/KT1
BlockHash = str  # base58check "B..."
ProtocolHash = str  # base58check "P..."


# --- Tez ---------------------------------------------------------------------

MUTEZ_PER_TEZ = 1_000_000
_DECIMALS = 6


@total_ordering
class Tez:
    """
    A non-negative amount of tez, stored as an integer number of mutez.

    - `Tez("3500000")` parses the node's string representation (mutez).
    - `Tez(1.5)`, `Tez(Decimal("1.5"))` and `Tez(2)` take an amount in tez;
      digits past the sixth decimal are dropped.
    - `Tez.from_mutez(10)` builds from an integer mutez count.
    """

    __slots__ = ("_mutez",)

    def __init__(self, value: Union[str, int, float, Decimal]) -> None:
        if isinstance(value, bool):
            raise TypeError("Tez does not accept bool")
        if isinstance(value, str):
            if not value.isdigit():
                raise ValueError(f"not a mutez string: {value!r}")
            mutez = int(value)
        elif isinstance(value, (int, float, Decimal)):
            try:
                amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
                mutez = int((amount * MUTEZ_PER_TEZ).to_integral_value(rounding=ROUND_DOWN))
            except InvalidOperation as e:
                raise ValueError(f"not a tez amount: {value!r}") from e
        else:
            raise TypeError(f"Unsupported type for Tez: {type(value)!r}")
        if mutez < 0:
            raise ValueError(f"Tez cannot be negative: {value!r}")
        self._mutez = mutez

    @classmethod
    def from_mutez(cls, mutez: int) -> "Tez":
        if int(mutez) < 0:
            raise ValueError(f"Tez cannot be negative: {mutez!r}")
        return cls(str(int(mutez)))

    @classmethod
    def zero(cls) -> "Tez":
        return cls.from_mutez(0)

    @property
    def mutez(self) -> int:
        return self._mutez

    @property
    def rpc_representation(self) -> str:
        """Integer mutez as a decimal string, e.g. "10" for 0.000010 tez."""
        return str(self._mutez)

    @property
    def human_readable_representation(self) -> str:
        """Tez with six decimals, e.g. "3.500000"."""
        whole, frac = divmod(self._mutez, MUTEZ_PER_TEZ)
        return f"{whole}.{frac:0{_DECIMALS}d}"

    def __add__(self, other: "Tez") -> "Tez":
        if not isinstance(other, Tez):
            return NotImplemented
        return Tez.from_mutez(self._mutez + other._mutez)

    def __sub__(self, other: "Tez") -> "Tez":
        if not isinstance(other, Tez):
            return NotImplemented
        return Tez.from_mutez(self._mutez - other._mutez)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tez):
            return NotImplemented
        return self._mutez == other._mutez

    def __lt__(self, other: "Tez") -> bool:
        if not isinstance(other, Tez):
            return NotImplemented
        return self._mutez < other._mutez

    def __hash__(self) -> int:
        return hash(self._mutez)

    def __repr__(self) -> str:
        return f"Tez({self.human_readable_representation})"

    def __str__(self) -> str:
        return f"{self.human_readable_representation} ꜩ"


# --- Fees --------------------------------------------------------------------


@dataclass(frozen=True)
class OperationFees:
    fee: Tez
    gas_limit: int
    storage_limit: int

    def to_rpc_dict(self) -> Dict[str, str]:
        return {
            "fee": self.fee.rpc_representation,
            "gas_limit": str(int(self.gas_limit)),
            "storage_limit": str(int(self.storage_limit)),
        }


# --- Operations --------------------------------------------------------------


class OperationKind(str, Enum):
    REVEAL = "reveal"
    TRANSACTION = "transaction"
    ORIGINATION = "origination"
    DELEGATION = "delegation"


@dataclass(frozen=True, kw_only=True)
class Operation:
    """Fields shared by every manager operation."""

    source: Address
    fees: OperationFees

    kind = OperationKind.TRANSACTION  # overridden per subclass

    @property
    def requires_reveal(self) -> bool:
        return True

    def to_rpc_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind.value, "source": self.source}
        out.update(self.fees.to_rpc_dict())
        return out


@dataclass(frozen=True, kw_only=True)
class Reveal(Operation):
    public_key: str  # base58check edpk/sppk/p2pk

    kind = OperationKind.REVEAL

    @property
    def requires_reveal(self) -> bool:
        return False

    def to_rpc_dict(self) -> Dict[str, Any]:
        out = super().to_rpc_dict()
        out["public_key"] = self.public_key
        return out


@dataclass(frozen=True, kw_only=True)
class Transaction(Operation):
    destination: Address
    amount: Tez
    # Micheline JSON, e.g. {"entrypoint": "default", "value": {...}}
    parameters: Optional[Dict[str, Any]] = None

    kind = OperationKind.TRANSACTION

    def to_rpc_dict(self) -> Dict[str, Any]:
        out = super().to_rpc_dict()
        out["amount"] = self.amount.rpc_representation
        out["destination"] = self.destination
        if self.parameters is not None:
            out["parameters"] = self.parameters
        return out


@dataclass(frozen=True, kw_only=True)
class Delegation(Operation):
    # None withdraws the current delegate
    delegate: Optional[Address] = None

    kind = OperationKind.DELEGATION

    def to_rpc_dict(self) -> Dict[str, Any]:
        out = super().to_rpc_dict()
        if self.delegate is not None:
            out["delegate"] = self.delegate
        return out


@dataclass(frozen=True, kw_only=True)
class Origination(Operation):
    balance: Tez = field(default_factory=Tez.zero)
    code: Optional[List[Any]] = None  # Micheline
    storage: Optional[Any] = None  # Micheline
    delegate: Optional[Address] = None

    kind = OperationKind.ORIGINATION

    @property
    def manager(self) -> Address:
        return self.source

    def to_rpc_dict(self) -> Dict[str, Any]:
        out = super().to_rpc_dict()
        out["manager_pubkey"] = self.manager
        out["balance"] = self.balance.rpc_representation
        out["spendable"] = False
        out["delegatable"] = False
        if self.delegate is not None:
            out["delegate"] = self.delegate
        if self.code is not None:
            out["script"] = {"code": self.code, "storage": self.storage}
        return out


# --- Metadata & payloads -----------------------------------------------------


@dataclass(frozen=True)
class OperationMetadata:
    """Chain state needed to build a payload. Fetched fresh for every attempt."""

    chain_id: str
    branch: BlockHash
    protocol: ProtocolHash
    address_counter: int
    manager_key: Optional[str] = None

    @property
    def is_revealed(self) -> bool:
        return self.manager_key is not None


@dataclass(frozen=True)
class OperationWithCounter:
    operation: Operation
    counter: int

    def to_rpc_dict(self) -> Dict[str, Any]:
        out = self.operation.to_rpc_dict()
        out["counter"] = str(int(self.counter))
        return out


@dataclass(frozen=True)
class OperationPayload:
    operations: Tuple[OperationWithCounter, ...]
    branch: BlockHash

    def to_rpc_dict(self) -> Dict[str, Any]:
        return {
            "branch": self.branch,
            "contents": [op.to_rpc_dict() for op in self.operations],
        }


_SIGNATURE_PREFIX = {
    SigningCurve.ED25519: Prefix.EDSIG,
    SigningCurve.SECP256K1: Prefix.SPSIG,
    SigningCurve.P256: Prefix.P2SIG,
}


def encode_signature(signature: bytes, curve: SigningCurve) -> str:
    """Render a 64-byte signature in base58check with its curve prefix."""
    return b58check_encode(signature, _SIGNATURE_PREFIX[curve])


@dataclass(frozen=True)
class SignedOperationPayload:
    payload: OperationPayload
    signature: bytes
    curve: SigningCurve = SigningCurve.ED25519

    @property
    def base58_signature(self) -> str:
        return encode_signature(self.signature, self.curve)

    def to_rpc_dict(self) -> Dict[str, Any]:
        out = self.payload.to_rpc_dict()
        out["signature"] = self.base58_signature
        return out


@dataclass(frozen=True)
class SignedProtocolOperationPayload:
    signed: SignedOperationPayload
    protocol: ProtocolHash

    def to_rpc_dict(self) -> Dict[str, Any]:
        out = self.signed.to_rpc_dict()
        out["protocol"] = self.protocol
        return out

    def to_rpc_list(self) -> List[Dict[str, Any]]:
        """Shape accepted by the preapply endpoint: a one-element list."""
        return [self.to_rpc_dict()]


# --- Simulation --------------------------------------------------------------


@dataclass(frozen=True)
class SimulationSuccess:
    consumed_gas: int
    consumed_storage: int


@dataclass(frozen=True)
class SimulationFailure:
    errors: Tuple[Any, ...] = ()


SimulationResult = Union[SimulationSuccess, SimulationFailure]


# --- Policies ----------------------------------------------------------------


class ForgingPolicy(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"
    LOCAL_WITH_REMOTE_FALLBACK = "local_with_remote_fallback"


@dataclass(frozen=True)
class OperationFeePolicy:
    """
    How an operation's fees are chosen: protocol defaults, caller-supplied
    values, or estimated by simulating the operation against the node.
    """

    mode: str
    fees: Optional[OperationFees] = None

    DEFAULT = "default"
    CUSTOM = "custom"
    ESTIMATE = "estimate"

    @classmethod
    def default(cls) -> "OperationFeePolicy":
        return cls(cls.DEFAULT)

    @classmethod
    def custom(cls, fees: OperationFees) -> "OperationFeePolicy":
        return cls(cls.CUSTOM, fees)

    @classmethod
    def estimate(cls) -> "OperationFeePolicy":
        return cls(cls.ESTIMATE)


__all__ = [
    "Address",
    "BlockHash",
    "ProtocolHash",
    "MUTEZ_PER_TEZ",
    "Tez",
    "OperationFees",
    "OperationKind",
    "Operation",
    "Reveal",
    "Transaction",
    "Delegation",
    "Origination",
    "OperationMetadata",
    "OperationWithCounter",
    "OperationPayload",
    "encode_signature",
    "SignedOperationPayload",
    "SignedProtocolOperationPayload",
    "SimulationSuccess",
    "SimulationFailure",
    "SimulationResult",
    "ForgingPolicy",
    "OperationFeePolicy",
]

"""
tezos_sdk.tx.encode
===================

Local forging: the binary encoding of operations that the node would
otherwise produce through its `forge/operations` RPC.

Every function returns lowercase hex. Primitive encoders return None for
input they cannot represent ("no result"); the operation encoders raise
`TezosError(localForgingNotSupportedForOperation)` for operation shapes that
cannot be forged here (Micheline parameters or scripts) and for operations
whose fields fail to encode.

Layout of a forged payload
--------------------------
    branch (32 bytes)
    for each operation:
        tag (1 byte) | source | fee | counter | gas_limit | storage_limit | kind-specific fields

Naturals use base-128 little-endian groups with a continuation bit; see
`tezos_sdk.utils.bytes.uvarint_encode`.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from ..address import AddressError, parse_address
from ..errors import ErrorKind, TezosError
from ..types.core import (
    Delegation,
    Operation,
    OperationKind,
    OperationPayload,
    OperationWithCounter,
    Origination,
    Reveal,
    Transaction,
)
from ..utils.b58 import Prefix, b58check_decode, b58check_encode
from ..utils.bytes import from_hex, svarint_encode, uvarint_encode
from ..utils.hash import blake2b_256
from ..wallet.keys import try_public_key

OPERATION_TAGS: Dict[OperationKind, int] = {
    OperationKind.REVEAL: 0x07,
    OperationKind.TRANSACTION: 0x08,
    OperationKind.ORIGINATION: 0x09,
    OperationKind.DELEGATION: 0x0A,
}

_TRUE = "ff"
_FALSE = "00"


# -----------------------------------------------------------------------------
# Primitives
# -----------------------------------------------------------------------------


def forge_bool(value: bool) -> str:
    return _TRUE if value else _FALSE


def forge_unsigned_int(value: int) -> Optional[str]:
    if value < 0:
        return None
    return uvarint_encode(value).hex()


def forge_signed_int(value: int) -> str:
    return svarint_encode(value).hex()


def forge_address(address: str) -> Optional[str]:
    """
    22-byte contract id: `00 | curve | hash` for implicit accounts,
    `01 | hash | 00` for originated contracts.
    """
    try:
        parsed = parse_address(address)
    except AddressError:
        return None
    if parsed.curve is None:
        return "01" + parsed.hash.hex() + "00"
    return "00" + f"{parsed.curve.tag:02x}" + parsed.hash.hex()


def forge_public_key_hash(address: str) -> Optional[str]:
    """21-byte public key hash `curve | hash`; implicit accounts only."""
    try:
        parsed = parse_address(address)
    except AddressError:
        return None
    if parsed.curve is None:
        return None
    return f"{parsed.curve.tag:02x}" + parsed.hash.hex()


def forge_public_key(public_key: str) -> Optional[str]:
    pk = try_public_key(public_key)
    if pk is None:
        return None
    return f"{pk.curve.tag:02x}" + pk.key.hex()


def forge_branch(branch: str) -> Optional[str]:
    payload = b58check_decode(branch, Prefix.BLOCK, length=32)
    return payload.hex() if payload is not None else None


def forge_protocol(protocol: str) -> Optional[str]:
    payload = b58check_decode(protocol, Prefix.PROTOCOL, length=32)
    return payload.hex() if payload is not None else None


def script_expression_hash(packed_hex: str) -> Optional[str]:
    """The `expr...` key under which a big map stores a value whose packed form is `packed_hex`."""
    try:
        packed = from_hex(packed_hex)
    except (TypeError, ValueError):
        return None
    return b58check_encode(blake2b_256(packed), Prefix.SCRIPT_EXPR)


# -----------------------------------------------------------------------------
# Operations
# -----------------------------------------------------------------------------


def _unsupported(operation: Operation, reason: str) -> TezosError:
    return TezosError(
        ErrorKind.LOCAL_FORGING_NOT_SUPPORTED_FOR_OPERATION,
        underlying_error=f"{operation.kind.value}: {reason}",
    )


def _require(value: Optional[str], operation: Operation, what: str) -> str:
    if value is None:
        raise _unsupported(operation, f"cannot encode {what}")
    return value


def _forge_reveal(op: Reveal) -> str:
    return _require(forge_public_key(op.public_key), op, "public_key")


def _forge_transaction(op: Transaction) -> str:
    if op.parameters is not None:
        raise _unsupported(op, "parameters require Micheline encoding")
    return (
        _require(forge_unsigned_int(op.amount.mutez), op, "amount")
        + _require(forge_address(op.destination), op, "destination")
        + forge_bool(False)
    )


def _forge_delegation(op: Delegation) -> str:
    if op.delegate is None:
        return forge_bool(False)
    return forge_bool(True) + _require(forge_public_key_hash(op.delegate), op, "delegate")


def _forge_origination(op: Origination) -> str:
    if op.code is not None:
        raise _unsupported(op, "script requires Micheline encoding")
    out = (
        _require(forge_public_key_hash(op.manager), op, "manager")
        + _require(forge_unsigned_int(op.balance.mutez), op, "balance")
        + forge_bool(False)  # spendable
        + forge_bool(False)  # delegatable
    )
    if op.delegate is None:
        out += forge_bool(False)
    else:
        out += forge_bool(True) + _require(forge_public_key_hash(op.delegate), op, "delegate")
    return out + forge_bool(False)  # script


_BODY_FORGERS: Dict[OperationKind, Callable[..., str]] = {
    OperationKind.REVEAL: _forge_reveal,
    OperationKind.TRANSACTION: _forge_transaction,
    OperationKind.ORIGINATION: _forge_origination,
    OperationKind.DELEGATION: _forge_delegation,
}


def forge_operation(operation_with_counter: OperationWithCounter) -> str:
    op = operation_with_counter.operation
    tag = OPERATION_TAGS.get(op.kind)
    body = _BODY_FORGERS.get(op.kind)
    if tag is None or body is None:
        raise _unsupported(op, "unknown operation kind")
    fees = op.fees
    return (
        f"{tag:02x}"
        + _require(forge_address(op.source), op, "source")
        + _require(forge_unsigned_int(fees.fee.mutez), op, "fee")
        + _require(forge_unsigned_int(operation_with_counter.counter), op, "counter")
        + _require(forge_unsigned_int(fees.gas_limit), op, "gas_limit")
        + _require(forge_unsigned_int(fees.storage_limit), op, "storage_limit")
        + body(op)
    )


def forge_payload(payload: OperationPayload) -> str:
    """Forge a whole payload: branch followed by every operation in order."""
    branch = forge_branch(payload.branch)
    if branch is None:
        raise TezosError(
            ErrorKind.LOCAL_FORGING_NOT_SUPPORTED_FOR_OPERATION,
            underlying_error=f"cannot encode branch {payload.branch!r}",
        )
    return branch + "".join(forge_operation(op) for op in payload.operations)


__all__ = [
    "OPERATION_TAGS",
    "forge_bool",
    "forge_unsigned_int",
    "forge_signed_int",
    "forge_address",
    "forge_public_key_hash",
    "forge_public_key",
    "forge_branch",
    "forge_protocol",
    "script_expression_hash",
    "forge_operation",
    "forge_payload",
]

"""
tezos_sdk.tx.build
==================

Builders for manager operations and for the payload that carries them.

Design notes
------------
- `operation_payload` turns a list of operations into an `OperationPayload`:
  it prepends a reveal when the source has no manager key on chain and some
  operation needs one, and numbers the operations with consecutive counters
  starting at `address_counter + 1`.
- `OperationFactory` builds single operations and picks their fees according
  to an `OperationFeePolicy`: protocol defaults, caller-supplied values, or an
  estimate obtained by simulating the operation (see `tezos_sdk.tx.estimate`).
- Default fees mirror what the node's own client suggests for each kind.

Examples
--------
    factory = OperationFactory(fee_estimator=estimator)
    op = await factory.transaction(
        source=wallet.address, destination="tz1...", amount=Tez(1.5),
        fee_policy=OperationFeePolicy.estimate(), signing_provider=wallet,
    )
    payload = operation_payload([op], wallet.address, wallet, metadata)
"""

from __future__ import annotations

import dataclasses
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..errors import ErrorKind, TezosError
from ..types.core import (
    Delegation,
    Operation,
    OperationFeePolicy,
    OperationFees,
    OperationKind,
    OperationMetadata,
    OperationPayload,
    OperationWithCounter,
    Origination,
    Reveal,
    Tez,
    Transaction,
)
from ..wallet.signer import SigningProvider

# -----------------------------------------------------------------------------
# Default fees
# -----------------------------------------------------------------------------

_DEFAULT_FEES: Dict[OperationKind, OperationFees] = {
    OperationKind.REVEAL: OperationFees(fee=Tez.from_mutez(1268), gas_limit=10_000, storage_limit=0),
    OperationKind.TRANSACTION: OperationFees(fee=Tez.from_mutez(1284), gas_limit=10_200, storage_limit=257),
    OperationKind.DELEGATION: OperationFees(fee=Tez.from_mutez(1257), gas_limit=10_000, storage_limit=0),
    OperationKind.ORIGINATION: OperationFees(fee=Tez.from_mutez(1265), gas_limit=10_000, storage_limit=257),
}


def default_fees(kind: OperationKind) -> OperationFees:
    return _DEFAULT_FEES[kind]


# -----------------------------------------------------------------------------
# Payload factory
# -----------------------------------------------------------------------------


def needs_reveal(operations: Sequence[Operation], metadata: OperationMetadata) -> bool:
    if metadata.manager_key is not None:
        return False
    if any(op.kind is OperationKind.REVEAL for op in operations):
        return False
    return any(op.requires_reveal for op in operations)


def operation_payload(
    operations: Sequence[Operation],
    source: str,
    signing_provider: SigningProvider,
    metadata: OperationMetadata,
) -> OperationPayload:
    """Number `operations` with counters and prepend a reveal when needed."""
    ops: List[Operation] = list(operations)
    if needs_reveal(ops, metadata):
        reveal = Reveal(
            source=source,
            public_key=signing_provider.public_key.base58check_representation,
            fees=default_fees(OperationKind.REVEAL),
        )
        ops.insert(0, reveal)
    first = metadata.address_counter + 1
    numbered = tuple(OperationWithCounter(operation=op, counter=first + i) for i, op in enumerate(ops))
    return OperationPayload(operations=numbered, branch=metadata.branch)


# -----------------------------------------------------------------------------
# Operation factory
# -----------------------------------------------------------------------------


class _FeeEstimator(Protocol):
    async def estimate(
        self, operation: Operation, source: str, signing_provider: SigningProvider
    ) -> OperationFees: ...


class OperationFactory:
    """Build operations whose fees follow an `OperationFeePolicy`."""

    def __init__(self, fee_estimator: Optional[_FeeEstimator] = None) -> None:
        self.fee_estimator = fee_estimator

    async def _apply_policy(
        self,
        operation: Operation,
        fee_policy: OperationFeePolicy,
        signing_provider: Optional[SigningProvider],
    ) -> Operation:
        if fee_policy.mode == OperationFeePolicy.DEFAULT:
            return operation
        if fee_policy.mode == OperationFeePolicy.CUSTOM:
            if fee_policy.fees is None:
                raise TezosError(ErrorKind.TRANSACTION_FORMATION_FAILURE, underlying_error="custom fee policy without fees")
            return dataclasses.replace(operation, fees=fee_policy.fees)
        if fee_policy.mode == OperationFeePolicy.ESTIMATE:
            if self.fee_estimator is None or signing_provider is None:
                raise TezosError(
                    ErrorKind.TRANSACTION_FORMATION_FAILURE,
                    underlying_error="fee estimation needs an estimator and a signing provider",
                )
            fees = await self.fee_estimator.estimate(operation, operation.source, signing_provider)
            return dataclasses.replace(operation, fees=fees)
        raise TezosError(ErrorKind.TRANSACTION_FORMATION_FAILURE, underlying_error=f"unknown fee policy {fee_policy.mode!r}")

    async def reveal(
        self,
        *,
        source: str,
        public_key: str,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
        signing_provider: Optional[SigningProvider] = None,
    ) -> Reveal:
        op = Reveal(source=source, public_key=public_key, fees=default_fees(OperationKind.REVEAL))
        return await self._apply_policy(op, fee_policy, signing_provider)  # type: ignore[return-value]

    async def transaction(
        self,
        *,
        source: str,
        destination: str,
        amount: Tez,
        parameters: Optional[Dict[str, Any]] = None,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
        signing_provider: Optional[SigningProvider] = None,
    ) -> Transaction:
        op = Transaction(
            source=source,
            destination=destination,
            amount=amount,
            parameters=parameters,
            fees=default_fees(OperationKind.TRANSACTION),
        )
        return await self._apply_policy(op, fee_policy, signing_provider)  # type: ignore[return-value]

    async def smart_contract_invocation(
        self,
        *,
        source: str,
        contract: str,
        parameter: Any,
        entrypoint: str = "default",
        amount: Tez = Tez.zero(),
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
        signing_provider: Optional[SigningProvider] = None,
    ) -> Transaction:
        """A transaction that carries Micheline `parameter` to `entrypoint` of `contract`."""
        return await self.transaction(
            source=source,
            destination=contract,
            amount=amount,
            parameters={"entrypoint": entrypoint, "value": parameter},
            fee_policy=fee_policy,
            signing_provider=signing_provider,
        )

    async def delegation(
        self,
        *,
        source: str,
        delegate: Optional[str],
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
        signing_provider: Optional[SigningProvider] = None,
    ) -> Delegation:
        op = Delegation(source=source, delegate=delegate, fees=default_fees(OperationKind.DELEGATION))
        return await self._apply_policy(op, fee_policy, signing_provider)  # type: ignore[return-value]

    async def register_delegate(self, *, source: str, **kwargs: Any) -> Delegation:
        """Register `source` as a baker by delegating to itself."""
        return await self.delegation(source=source, delegate=source, **kwargs)

    async def undelegate(self, *, source: str, **kwargs: Any) -> Delegation:
        return await self.delegation(source=source, delegate=None, **kwargs)

    async def origination(
        self,
        *,
        source: str,
        balance: Tez = Tez.zero(),
        code: Optional[List[Any]] = None,
        storage: Optional[Any] = None,
        delegate: Optional[str] = None,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
        signing_provider: Optional[SigningProvider] = None,
    ) -> Origination:
        op = Origination(
            source=source,
            balance=balance,
            code=code,
            storage=storage,
            delegate=delegate,
            fees=default_fees(OperationKind.ORIGINATION),
        )
        return await self._apply_policy(op, fee_policy, signing_provider)  # type: ignore[return-value]


__all__ = [
    "default_fees",
    "needs_reveal",
    "operation_payload",
    "OperationFactory",
]

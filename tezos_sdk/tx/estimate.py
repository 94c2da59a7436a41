"""
tezos_sdk.tx.estimate
=====================

Fee estimation.

The fee of an operation pays for its gas and for its own serialized size,
and the size depends on the fee (naturals are variable length). The estimator
therefore simulates once to learn gas and storage, then forges repeatedly,
raising the fee until it covers the size of the bytes that carry it.

All rates are in nanotez (1 mutez = 1000 nanotez); converting to mutez rounds
up.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from ..errors import ErrorKind, TezosError
from ..types.core import (
    Operation,
    OperationFees,
    OperationMetadata,
    OperationPayload,
    OperationWithCounter,
    SimulationFailure,
    Tez,
)
from ..wallet.signer import SigningProvider
from .forging import ForgingService
from .metadata import OperationMetadataProvider
from .simulate import SimulationService

log = logging.getLogger(__name__)

NANOTEZ_PER_MUTEZ = 1000


@dataclass(frozen=True)
class FeeConstants:
    minimal_fee: int = 100_000  # nanotez
    fee_per_gas_unit: int = 100  # nanotez
    fee_per_storage_byte: int = 1_000  # nanotez, per forged byte
    max_gas: int = 800_000
    max_storage: int = 60_000
    gas_safety_margin: int = 100
    storage_safety_margin: int = 257
    fee_safety_margin: Tez = Tez.from_mutez(100)
    max_iterations: int = 16


def nanotez_to_mutez(nanotez: int) -> int:
    return -(-nanotez // NANOTEZ_PER_MUTEZ)


class FeeEstimator:
    def __init__(
        self,
        forging_service: ForgingService,
        metadata_provider: OperationMetadataProvider,
        simulation_service: SimulationService,
        constants: FeeConstants = FeeConstants(),
    ) -> None:
        self.forging_service = forging_service
        self.metadata_provider = metadata_provider
        self.simulation_service = simulation_service
        self.constants = constants

    def gas_fee(self, gas_limit: int) -> Tez:
        """Minimal fee plus the gas component, in mutez."""
        c = self.constants
        return Tez.from_mutez(nanotez_to_mutez(c.minimal_fee) + nanotez_to_mutez(gas_limit * c.fee_per_gas_unit))

    def size_fee(self, forged_hex: str) -> Tez:
        """Fee owed for the serialized size of `forged_hex`."""
        size = len(forged_hex) // 2
        return Tez.from_mutez(nanotez_to_mutez(size * self.constants.fee_per_storage_byte))

    async def estimate(
        self,
        operation: Operation,
        source: str,
        signing_provider: SigningProvider,
    ) -> OperationFees:
        c = self.constants
        try:
            metadata = await self.metadata_provider.metadata(source)
        except TezosError as e:
            raise TezosError(ErrorKind.TRANSACTION_FORMATION_FAILURE, underlying_error=e) from e

        dry_run = dataclasses.replace(
            operation,
            fees=OperationFees(fee=Tez.zero(), gas_limit=c.max_gas, storage_limit=c.max_storage),
        )
        try:
            result = await self.simulation_service.simulate(dry_run, source, signing_provider, metadata)
        except TezosError as e:
            if e.kind is ErrorKind.TRANSACTION_FORMATION_FAILURE:
                raise
            raise TezosError(ErrorKind.TRANSACTION_FORMATION_FAILURE, underlying_error=e) from e
        if isinstance(result, SimulationFailure):
            raise TezosError(
                ErrorKind.TRANSACTION_FORMATION_FAILURE,
                underlying_error="simulation failed",
                errors=result.errors,
            )

        gas_limit = result.consumed_gas + c.gas_safety_margin
        storage_limit = result.consumed_storage + c.storage_safety_margin
        initial_fee = self.gas_fee(gas_limit)
        fees = OperationFees(fee=initial_fee, gas_limit=gas_limit, storage_limit=storage_limit)

        for iteration in range(c.max_iterations):
            forged = await self._forge(operation, fees, metadata)
            required = self.size_fee(forged)
            paid = fees.fee - initial_fee
            log.debug(
                "fee iteration %d: fee=%s size=%d required=%s",
                iteration,
                fees.fee.rpc_representation,
                len(forged) // 2,
                required.rpc_representation,
            )
            if paid >= required:
                final = dataclasses.replace(fees, fee=fees.fee + c.fee_safety_margin)
                log.debug(
                    "estimated %s: fee=%s gas=%d storage=%d",
                    operation.kind.value,
                    final.fee.rpc_representation,
                    final.gas_limit,
                    final.storage_limit,
                )
                return final
            fees = dataclasses.replace(fees, fee=fees.fee + (required - paid))

        raise TezosError(
            ErrorKind.TRANSACTION_FORMATION_FAILURE,
            underlying_error=f"fee did not converge after {c.max_iterations} iterations",
        )

    async def _forge(self, operation: Operation, fees: OperationFees, metadata: OperationMetadata) -> str:
        candidate = dataclasses.replace(operation, fees=fees)
        payload = OperationPayload(
            operations=(OperationWithCounter(operation=candidate, counter=metadata.address_counter + 1),),
            branch=metadata.branch,
        )
        try:
            return await self.forging_service.forge(payload, metadata)
        except TezosError as e:
            raise TezosError(ErrorKind.TRANSACTION_FORMATION_FAILURE, underlying_error=e) from e


__all__ = ["FeeConstants", "FeeEstimator", "nanotez_to_mutez", "NANOTEZ_PER_MUTEZ"]

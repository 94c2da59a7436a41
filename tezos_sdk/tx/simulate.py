"""
tezos_sdk.tx.simulate
=====================

Dry-run an operation against the node's `run_operation` helper to learn how
much gas and storage it consumes. The payload is signed with an all-zero
signature; the node does not check signatures when simulating.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..address import SigningCurve
from ..errors import ErrorKind, TezosError
from ..rpc import endpoints
from ..types.core import (
    Operation,
    OperationMetadata,
    SignedOperationPayload,
    SimulationFailure,
    SimulationResult,
    SimulationSuccess,
)
from ..wallet.signer import SigningProvider
from .build import operation_payload
from .metadata import OperationMetadataProvider, _RpcClient

log = logging.getLogger(__name__)

ZERO_SIGNATURE = bytes(64)


def _to_int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


def _consumed_gas(result: dict) -> int:
    if result.get("consumed_gas") is not None:
        return _to_int(result["consumed_gas"])
    if result.get("consumed_milligas") is not None:
        return -(-_to_int(result["consumed_milligas"]) // 1000)
    return 0


def _object(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{what} is not an object: {value!r}")
    return value


def parse_simulation(body: Any) -> SimulationResult:
    """
    Sum consumed gas and paid storage over every operation result, internal
    results included. Any status other than "applied" makes the simulation a
    failure carrying the reported errors.
    """
    if not isinstance(body, dict) or not isinstance(body.get("contents"), list):
        raise ValueError("run_operation response has no contents")
    gas = 0
    storage = 0
    failed = False
    errors: List[Any] = []
    for content in body["contents"]:
        metadata = _object(_object(content, "operation").get("metadata"), "metadata")
        results: List[dict] = [_object(metadata.get("operation_result"), "operation_result")]
        results += [
            _object(_object(internal, "internal operation").get("result"), "internal result")
            for internal in metadata.get("internal_operation_results") or []
        ]
        for result in results:
            if result.get("status") != "applied":
                failed = True
                errors.extend(result.get("errors") or [])
                continue
            gas += _consumed_gas(result)
            storage += _to_int(result.get("paid_storage_size_diff"))
    if failed:
        return SimulationFailure(errors=tuple(errors))
    return SimulationSuccess(consumed_gas=gas, consumed_storage=storage)


class SimulationService:
    def __init__(self, rpc: _RpcClient, metadata_provider: OperationMetadataProvider) -> None:
        self.rpc = rpc
        self.metadata_provider = metadata_provider

    async def simulate(
        self,
        operation: Operation,
        source: str,
        signing_provider: SigningProvider,
        metadata: Optional[OperationMetadata] = None,
    ) -> SimulationResult:
        if metadata is None:
            try:
                metadata = await self.metadata_provider.metadata(source)
            except TezosError as e:
                raise TezosError(ErrorKind.TRANSACTION_FORMATION_FAILURE, underlying_error=e) from e

        payload = operation_payload([operation], source, signing_provider, metadata)
        signed = SignedOperationPayload(payload=payload, signature=ZERO_SIGNATURE, curve=SigningCurve.ED25519)
        body = {"operation": signed.to_rpc_dict(), "chain_id": metadata.chain_id}

        try:
            response = await self.rpc.post(endpoints.RUN_OPERATION, body, check_operation_results=False)
        except TezosError as e:
            raise TezosError(ErrorKind.TRANSACTION_FORMATION_FAILURE, underlying_error=e) from e

        try:
            result = parse_simulation(response)
        except (KeyError, TypeError, ValueError) as e:
            raise TezosError(ErrorKind.UNEXPECTED_RESPONSE, underlying_error=f"could not parse simulation: {e}") from e

        if isinstance(result, SimulationFailure):
            log.debug("simulation of %s from %s failed: %s", operation.kind.value, source, list(result.errors))
        else:
            log.debug(
                "simulation of %s from %s: gas=%d storage=%d",
                operation.kind.value,
                source,
                result.consumed_gas,
                result.consumed_storage,
            )
        return result


__all__ = ["SimulationService", "parse_simulation", "ZERO_SIGNATURE"]

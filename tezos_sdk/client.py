"""
TezosNodeClient: one object that wires the RPC client and every service of
the operation pipeline from an `SDKConfig`.

Example:
    wallet = Wallet.from_secret_key("edsk...")
    async with TezosNodeClient(SDKConfig(node_url="https://node.example")) as client:
        op_hash = await client.send(
            amount=Tez(1.5), destination="tz1...", signing_provider=wallet,
            fee_policy=OperationFeePolicy.estimate(),
        )
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from .config import SDKConfig
from .errors import ErrorKind, TezosError
from .rpc import endpoints
from .rpc.http import RpcClient
from .tx.build import OperationFactory
from .tx.encode import script_expression_hash
from .tx.estimate import FeeEstimator
from .tx.forging import ForgingService
from .tx.metadata import OperationMetadataProvider, parse_counter, parse_manager_key
from .tx.send import InjectionService, PreapplicationService, SubmissionPipeline
from .tx.simulate import SimulationService
from .types.core import Operation, OperationFeePolicy, OperationFees, SimulationResult, Tez
from .wallet.signer import SigningProvider

log = logging.getLogger(__name__)

PACK_DATA_GAS = "8000"


def _address_of(signing_provider: SigningProvider) -> str:
    return signing_provider.public_key.public_key_hash


class TezosNodeClient:
    def __init__(self, config: Optional[SDKConfig] = None, *, rpc: Optional[RpcClient] = None) -> None:
        self.config = config or SDKConfig.from_env()
        self.rpc = rpc or RpcClient(
            self.config.node_url,
            timeout=self.config.request_timeout,
            headers=self.config.http_headers(),
        )
        self.metadata_provider = OperationMetadataProvider(self.rpc)
        self.forging_service = ForgingService(self.rpc, self.config.forging_policy)
        self.simulation_service = SimulationService(self.rpc, self.metadata_provider)
        self.fee_estimator = FeeEstimator(self.forging_service, self.metadata_provider, self.simulation_service)
        self.operation_factory = OperationFactory(self.fee_estimator)
        self.preapplication_service = PreapplicationService(self.rpc)
        self.injection_service = InjectionService(self.rpc)
        self.pipeline = SubmissionPipeline(
            self.metadata_provider,
            self.forging_service,
            self.preapplication_service,
            self.injection_service,
        )

    async def __aenter__(self) -> "TezosNodeClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        await self.rpc.aclose()

    # --- queries ---------------------------------------------------------

    async def get_head(self) -> Any:
        return await self.rpc.get(endpoints.HEAD)

    async def get_balance(self, address: str) -> Tez:
        body = await self.rpc.get(endpoints.balance(address))
        try:
            return Tez(str(body))
        except ValueError as e:
            raise TezosError(ErrorKind.UNEXPECTED_RESPONSE, underlying_error=f"balance: {body!r}") from e

    async def get_counter(self, address: str) -> int:
        body = await self.rpc.get(endpoints.counter(address))
        try:
            return parse_counter(body)
        except ValueError as e:
            raise TezosError(ErrorKind.UNEXPECTED_RESPONSE, underlying_error=str(e)) from e

    async def get_manager_key(self, address: str) -> Optional[str]:
        body = await self.rpc.get(endpoints.manager_key(address))
        try:
            return parse_manager_key(body)
        except ValueError as e:
            raise TezosError(ErrorKind.UNEXPECTED_RESPONSE, underlying_error=str(e)) from e

    async def get_delegate(self, address: str) -> Optional[str]:
        """The delegate of `address`, or None when it has none (the node answers 404)."""
        try:
            body = await self.rpc.get(endpoints.delegate(address))
        except TezosError as e:
            if e.http_status == 404:
                return None
            raise
        if body is not None and not isinstance(body, str):
            raise TezosError(ErrorKind.UNEXPECTED_RESPONSE, underlying_error=f"delegate: {body!r}")
        return body

    async def get_contract_storage(self, address: str) -> Any:
        """Micheline JSON of the storage of contract `address`."""
        return await self.rpc.get(endpoints.storage(address))

    async def get_big_map_value(self, address: str, key: Any, key_type: str) -> Any:
        """
        Look `key` up in the big map of contract `address`.

        `key` is Micheline JSON (e.g. `{"string": "tz1..."}`) and `key_type`
        the comparable type of the big map keys (e.g. "address").
        """
        payload = {"key": key, "type": {"prim": key_type}}
        return await self.rpc.post(endpoints.big_map_get(address), payload)

    async def get_big_map_value_by_id(self, big_map_id: int, key: Any, key_type: str) -> Any:
        """
        Look `key` up in big map `big_map_id`. The node packs the key, the
        client hashes the packed bytes into the `expr...` lookup key.
        """
        body = await self.rpc.post(
            endpoints.PACK_DATA, {"data": key, "type": {"prim": key_type}, "gas": PACK_DATA_GAS}
        )
        packed = body.get("packed") if isinstance(body, dict) else body
        expression = script_expression_hash(packed) if isinstance(packed, str) else None
        if expression is None:
            raise TezosError(ErrorKind.UNEXPECTED_RESPONSE, underlying_error=f"pack_data: {body!r}")
        log.debug("big map %s key %s -> %s", big_map_id, key, expression)
        return await self.rpc.get(endpoints.big_map_value(big_map_id, expression))

    # --- operations ------------------------------------------------------

    async def estimate_fees(self, operation: Operation, signing_provider: SigningProvider) -> OperationFees:
        return await self.fee_estimator.estimate(operation, operation.source, signing_provider)

    async def run_operation(self, operation: Operation, signing_provider: SigningProvider) -> SimulationResult:
        """Dry-run `operation` against the head block without injecting it."""
        return await self.simulation_service.simulate(operation, operation.source, signing_provider)

    async def forge_sign_preapply_and_inject(
        self,
        operations: Sequence[Operation],
        source: str,
        signing_provider: SigningProvider,
    ) -> str:
        return await self.pipeline.forge_sign_preapply_and_inject(operations, source, signing_provider)

    async def send(
        self,
        *,
        amount: Tez,
        destination: str,
        signing_provider: SigningProvider,
        parameters: Optional[dict] = None,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
    ) -> str:
        source = _address_of(signing_provider)
        op = await self.operation_factory.transaction(
            source=source,
            destination=destination,
            amount=amount,
            parameters=parameters,
            fee_policy=fee_policy,
            signing_provider=signing_provider,
        )
        return await self.forge_sign_preapply_and_inject([op], source, signing_provider)

    async def call_contract(
        self,
        *,
        contract: str,
        parameter: Any,
        signing_provider: SigningProvider,
        entrypoint: str = "default",
        amount: Tez = Tez.zero(),
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
    ) -> str:
        source = _address_of(signing_provider)
        op = await self.operation_factory.smart_contract_invocation(
            source=source,
            contract=contract,
            parameter=parameter,
            entrypoint=entrypoint,
            amount=amount,
            fee_policy=fee_policy,
            signing_provider=signing_provider,
        )
        return await self.forge_sign_preapply_and_inject([op], source, signing_provider)

    async def delegate(
        self,
        *,
        delegate: str,
        signing_provider: SigningProvider,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
    ) -> str:
        source = _address_of(signing_provider)
        op = await self.operation_factory.delegation(
            source=source, delegate=delegate, fee_policy=fee_policy, signing_provider=signing_provider
        )
        return await self.forge_sign_preapply_and_inject([op], source, signing_provider)

    async def undelegate(
        self,
        *,
        signing_provider: SigningProvider,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
    ) -> str:
        source = _address_of(signing_provider)
        op = await self.operation_factory.undelegate(
            source=source, fee_policy=fee_policy, signing_provider=signing_provider
        )
        return await self.forge_sign_preapply_and_inject([op], source, signing_provider)

    async def register_delegate(
        self,
        *,
        signing_provider: SigningProvider,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
    ) -> str:
        source = _address_of(signing_provider)
        op = await self.operation_factory.register_delegate(
            source=source, fee_policy=fee_policy, signing_provider=signing_provider
        )
        return await self.forge_sign_preapply_and_inject([op], source, signing_provider)

    async def reveal(
        self,
        *,
        signing_provider: SigningProvider,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
    ) -> str:
        source = _address_of(signing_provider)
        op = await self.operation_factory.reveal(
            source=source,
            public_key=signing_provider.public_key.base58check_representation,
            fee_policy=fee_policy,
            signing_provider=signing_provider,
        )
        return await self.forge_sign_preapply_and_inject([op], source, signing_provider)

    async def originate(
        self,
        *,
        signing_provider: SigningProvider,
        balance: Tez = Tez.zero(),
        code: Optional[List[Any]] = None,
        storage: Optional[Any] = None,
        fee_policy: OperationFeePolicy = OperationFeePolicy.default(),
    ) -> str:
        source = _address_of(signing_provider)
        op = await self.operation_factory.origination(
            source=source,
            balance=balance,
            code=code,
            storage=storage,
            fee_policy=fee_policy,
            signing_provider=signing_provider,
        )
        return await self.forge_sign_preapply_and_inject([op], source, signing_provider)


__all__ = ["TezosNodeClient"]

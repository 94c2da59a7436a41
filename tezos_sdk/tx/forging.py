"""
tezos_sdk.tx.forging
====================

Turn an `OperationPayload` into the hex bytes that get signed, following a
`ForgingPolicy`:

- REMOTE: ask the node (`helpers/forge/operations`).
- LOCAL: use `tezos_sdk.tx.encode`; operations it cannot encode raise
  `localForgingNotSupportedForOperation`.
- LOCAL_WITH_REMOTE_FALLBACK: local first, remote only when the local forger
  reports that specific error. This is a fallback, not a retry.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import ErrorKind, TezosError
from ..rpc import endpoints
from ..types.core import ForgingPolicy, OperationMetadata, OperationPayload
from .encode import forge_payload
from .metadata import _RpcClient

log = logging.getLogger(__name__)


class ForgingService:
    def __init__(self, rpc: _RpcClient, policy: ForgingPolicy = ForgingPolicy.REMOTE) -> None:
        self.rpc = rpc
        self.policy = policy

    async def forge(
        self,
        payload: OperationPayload,
        metadata: OperationMetadata,
        policy: Optional[ForgingPolicy] = None,
    ) -> str:
        policy = policy or self.policy
        if policy is ForgingPolicy.REMOTE:
            return await self.forge_remote(payload, metadata)
        if policy is ForgingPolicy.LOCAL:
            return self.forge_local(payload)
        if policy is ForgingPolicy.LOCAL_WITH_REMOTE_FALLBACK:
            try:
                return self.forge_local(payload)
            except TezosError as e:
                if e.kind is not ErrorKind.LOCAL_FORGING_NOT_SUPPORTED_FOR_OPERATION:
                    raise
                log.warning("local forging unsupported (%s); forging remotely", e.underlying_error)
                return await self.forge_remote(payload, metadata)
        raise TezosError(ErrorKind.UNKNOWN, underlying_error=f"unknown forging policy {policy!r}")

    def forge_local(self, payload: OperationPayload) -> str:
        return forge_payload(payload)

    async def forge_remote(self, payload: OperationPayload, metadata: OperationMetadata) -> str:
        result = await self.rpc.post(endpoints.forge_operations(metadata.branch), payload.to_rpc_dict())
        if not isinstance(result, str):
            raise TezosError(ErrorKind.UNEXPECTED_RESPONSE, underlying_error=f"forge returned {type(result).__name__}")
        return result


__all__ = ["ForgingService"]

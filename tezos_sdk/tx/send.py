"""
tezos_sdk.tx.send
=================

Sign forged operations, preapply them and inject them.

Primary entry points
--------------------
- sign_forged(forged_hex, signing_provider) -> SignedBytes
    Ask the signing provider for a signature over the forged bytes.

- PreapplicationService.preapply(signed_protocol_payload, metadata)
    Dry-run the signed payload in the context of its branch; a failed
    operation result raises `preapplicationError` carrying the first error id.

- InjectionService.inject(injectable_hex) -> str
    Broadcast the signed bytes; returns the operation hash.

- SubmissionPipeline.forge_sign_preapply_and_inject(operations, source, signing_provider) -> str
    Fetch metadata, build the payload, forge, sign, preapply, inject. The
    stages run strictly in order and the first failure stops the pipeline;
    nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ..address import SigningCurve
from ..errors import ErrorKind, TezosError, error_ids
from ..rpc import endpoints
from ..types.core import (
    Operation,
    OperationMetadata,
    SignedOperationPayload,
    SignedProtocolOperationPayload,
)
from ..wallet.signer import SigningProvider
from .build import operation_payload
from .forging import ForgingService
from .metadata import OperationMetadataProvider, _RpcClient

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Signing
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SignedBytes:
    forged_hex: str
    signature: bytes
    curve: SigningCurve

    @property
    def injectable_hex(self) -> str:
        return self.forged_hex + self.signature.hex()


def sign_forged(forged_hex: str, signing_provider: SigningProvider) -> SignedBytes:
    try:
        signature = signing_provider.sign(forged_hex)
        curve = signing_provider.public_key.curve
    except Exception as e:
        raise TezosError(ErrorKind.SIGNING_ERROR, underlying_error=f"{type(e).__name__}: {e}") from e
    if signature is None:
        raise TezosError(ErrorKind.SIGNING_ERROR, underlying_error="signing provider returned no signature")
    if len(signature) != 64:
        raise TezosError(ErrorKind.SIGNING_ERROR, underlying_error=f"signature must be 64 bytes, got {len(signature)}")
    return SignedBytes(forged_hex=forged_hex, signature=bytes(signature), curve=curve)


# -----------------------------------------------------------------------------
# Preapplication
# -----------------------------------------------------------------------------


def preapplication_errors(body: Any) -> Optional[List[Any]]:
    """Errors of the first failed operation result in a preapply response, if any."""
    items = body if isinstance(body, list) else [body]
    for item in items:
        if not isinstance(item, dict):
            continue
        contents = item.get("contents")
        for content in contents if isinstance(contents, list) else []:
            metadata = content.get("metadata") if isinstance(content, dict) else None
            result = metadata.get("operation_result") if isinstance(metadata, dict) else None
            if isinstance(result, dict) and result.get("status") == "failed":
                errors = result.get("errors")
                return list(errors) if isinstance(errors, list) else []
    return None


class PreapplicationService:
    def __init__(self, rpc: _RpcClient) -> None:
        self.rpc = rpc

    async def preapply(self, payload: SignedProtocolOperationPayload, metadata: OperationMetadata) -> Any:
        body = await self.rpc.post(
            endpoints.preapply_operations(metadata.branch),
            payload.to_rpc_list(),
            check_operation_results=False,
        )
        errors = preapplication_errors(body)
        if errors is not None:
            ids = error_ids(errors)
            first = ids[0] if ids else "unknown"
            log.warning("preapplication failed: %s", first)
            raise TezosError(ErrorKind.PREAPPLICATION_ERROR, underlying_error=first, errors=tuple(errors))
        return body


# -----------------------------------------------------------------------------
# Injection
# -----------------------------------------------------------------------------


class InjectionService:
    def __init__(self, rpc: _RpcClient) -> None:
        self.rpc = rpc

    async def inject(self, injectable_hex: str) -> str:
        result = await self.rpc.post(endpoints.INJECT_OPERATION, injectable_hex)
        if not isinstance(result, str):
            raise TezosError(ErrorKind.UNEXPECTED_RESPONSE, underlying_error=f"injection returned {result!r}")
        log.info("injected operation %s", result)
        return result


# -----------------------------------------------------------------------------
# Pipeline
# -----------------------------------------------------------------------------


class SubmissionPipeline:
    def __init__(
        self,
        metadata_provider: OperationMetadataProvider,
        forging_service: ForgingService,
        preapplication_service: PreapplicationService,
        injection_service: InjectionService,
    ) -> None:
        self.metadata_provider = metadata_provider
        self.forging_service = forging_service
        self.preapplication_service = preapplication_service
        self.injection_service = injection_service

    async def forge_sign_preapply_and_inject(
        self,
        operations: Sequence[Operation],
        source: str,
        signing_provider: SigningProvider,
    ) -> str:
        """Submit `operations` from `source`; returns the operation hash."""
        metadata = await self.metadata_provider.metadata(source)
        payload = operation_payload(operations, source, signing_provider, metadata)
        forged = await self.forging_service.forge(payload, metadata)
        signed = sign_forged(forged, signing_provider)
        protocol_payload = SignedProtocolOperationPayload(
            signed=SignedOperationPayload(payload=payload, signature=signed.signature, curve=signed.curve),
            protocol=metadata.protocol,
        )
        await self.preapplication_service.preapply(protocol_payload, metadata)
        return await self.injection_service.inject(signed.injectable_hex)


__all__ = [
    "SignedBytes",
    "sign_forged",
    "preapplication_errors",
    "PreapplicationService",
    "InjectionService",
    "SubmissionPipeline",
]

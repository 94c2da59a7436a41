"""
tezos_sdk.tx.metadata
=====================

Fetch the chain state an operation payload is built against: the head block
(branch, protocol, chain id), the source's counter and its revealed manager
key. The three requests run concurrently and the result exists only once all
three have completed; metadata is never cached between attempts.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

from ..errors import ErrorKind, TezosError
from ..rpc import endpoints
from ..types.core import OperationMetadata

log = logging.getLogger(__name__)


class _RpcClient(Protocol):
    """Minimal interface expected from tezos_sdk.rpc.http.RpcClient."""

    async def get(self, path: str) -> Any: ...

    async def post(self, path: str, payload: Any, *, check_operation_results: bool = True) -> Any: ...


def parse_manager_key(body: Any) -> Optional[str]:
    """
    The manager key RPC answers with a bare key string, JSON null for an
    unrevealed account, or (older nodes) an object with an optional "key".
    """
    if body is None:
        return None
    if isinstance(body, str):
        return body or None
    if isinstance(body, dict):
        key = body.get("key")
        return key if isinstance(key, str) and key else None
    raise ValueError(f"unexpected manager key response: {body!r}")


def parse_counter(body: Any) -> int:
    if isinstance(body, bool):
        raise ValueError(f"unexpected counter response: {body!r}")
    if isinstance(body, int):
        return body
    if isinstance(body, str) and body.isdigit():
        return int(body)
    raise ValueError(f"unexpected counter response: {body!r}")


class OperationMetadataProvider:
    def __init__(self, rpc: _RpcClient) -> None:
        self.rpc = rpc

    async def metadata(self, address: str) -> OperationMetadata:
        """Join head, counter and manager key into an `OperationMetadata`."""
        try:
            responses = await asyncio.gather(
                self.rpc.get(endpoints.HEAD),
                self.rpc.get(endpoints.counter(address)),
                self.rpc.get(endpoints.manager_key(address)),
                return_exceptions=True,
            )
            for response in responses:
                if isinstance(response, BaseException):
                    raise response
            head, counter, manager_key = responses
            result = OperationMetadata(
                chain_id=str(head["chain_id"]),
                branch=str(head["hash"]),
                protocol=str(head["protocol"]),
                address_counter=parse_counter(counter),
                manager_key=parse_manager_key(manager_key),
            )
        except TezosError as e:
            log.debug("metadata for %s failed: %s", address, e)
            raise TezosError(ErrorKind.UNKNOWN, underlying_error=e, message="could not fetch metadata") from e
        except (KeyError, TypeError, ValueError) as e:
            log.debug("metadata for %s malformed: %s", address, e)
            raise TezosError(ErrorKind.UNKNOWN, underlying_error=repr(e), message="could not fetch metadata") from e
        log.debug(
            "metadata for %s: branch=%s counter=%d revealed=%s",
            address,
            result.branch,
            result.address_counter,
            result.is_revealed,
        )
        return result


__all__ = ["OperationMetadataProvider", "parse_manager_key", "parse_counter"]

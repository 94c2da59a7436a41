"""
Async HTTP client for the node's JSON RPC.

- One `httpx.AsyncClient` per `RpcClient`; close it with `aclose()` or use
  `async with`.
- Every failure surfaces as `TezosError`:
    transport failure          -> rpcError
    HTTP 4xx                   -> unexpectedRequestFormat
    HTTP 5xx                   -> unexpectedResponse
    any other non-200 status   -> unknown
    body that is not JSON      -> unexpectedResponse
    200 whose operation result
    is failed or backtracked   -> operationError
- No retries: the operation pipeline never retries on its own.

Example:
    async with RpcClient("http://127.0.0.1:8732") as rpc:
        head = await rpc.get("/chains/main/blocks/head")
        print(head["hash"])
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from ..errors import ErrorKind, TezosError
from ..version import user_agent

log = logging.getLogger(__name__)

JSON = Union[dict, list, str, int, float, bool, None]

_FAILED_STATUSES = ("failed", "backtracked")


def error_for_status(status: int, body: str) -> TezosError:
    message = body[:512]
    if 400 <= status < 500:
        kind = ErrorKind.UNEXPECTED_REQUEST_FORMAT
    elif 500 <= status < 600:
        kind = ErrorKind.UNEXPECTED_RESPONSE
    else:
        kind = ErrorKind.UNKNOWN
    return TezosError(kind, underlying_error=message, http_status=status)


def failed_operation_errors(body: JSON) -> Optional[List[Any]]:
    """
    Inspect an operation-shaped response (`{"contents": [...]}`).

    Returns the reported errors when any operation result, top-level or
    internal, is failed or backtracked; None otherwise.
    """
    if not isinstance(body, dict) or not isinstance(body.get("contents"), list):
        return None
    failed = False
    errors: List[Any] = []
    for content in body["contents"]:
        metadata = content.get("metadata") if isinstance(content, dict) else None
        if not isinstance(metadata, dict):
            continue
        results = [metadata.get("operation_result")]
        results += [
            internal.get("result")
            for internal in metadata.get("internal_operation_results") or []
            if isinstance(internal, dict)
        ]
        for result in results:
            if isinstance(result, dict) and result.get("status") in _FAILED_STATUSES:
                failed = True
                errors.extend(result.get("errors") or [])
    return errors if failed else None


@dataclass
class RpcClient:
    """Asynchronous client for the node's REST-style JSON RPC."""

    url: str
    timeout: float = 30.0
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.AsyncBaseTransport] = None
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self.url = self.url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.url,
            timeout=self.timeout,
            headers=merged_headers,
            transport=self.transport,
        )

    # --- context manager -------------------------------------------------

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- public API ------------------------------------------------------

    async def get(self, path: str) -> JSON:
        return await self._request("GET", path, None, check_operation_results=True)

    async def post(self, path: str, payload: JSON, *, check_operation_results: bool = True) -> JSON:
        """
        POST `payload` as JSON. Pass `check_operation_results=False` when the
        caller interprets failed operation results itself (simulation,
        preapplication).
        """
        return await self._request("POST", path, payload, check_operation_results=check_operation_results)

    # --- internals -------------------------------------------------------

    async def _request(self, method: str, path: str, payload: JSON, *, check_operation_results: bool) -> JSON:
        if self._client.is_closed:
            raise TezosError(ErrorKind.UNKNOWN, underlying_error=f"rpc client for {self.url} is closed")
        content = None if method == "GET" else json.dumps(payload, separators=(",", ":"))
        log.debug("rpc %s %s", method, path)
        try:
            r = await self._client.request(method, path, content=content)
        except httpx.HTTPError as e:
            log.debug("rpc %s %s transport failure: %s", method, path, e)
            raise TezosError(ErrorKind.RPC_ERROR, underlying_error=str(e) or type(e).__name__) from e

        if r.status_code != 200:
            log.debug("rpc %s %s -> HTTP %s", method, path, r.status_code)
            raise error_for_status(r.status_code, r.text)

        try:
            body = r.json()
        except ValueError as e:
            raise TezosError(
                ErrorKind.UNEXPECTED_RESPONSE,
                underlying_error=f"non-JSON response: {r.text[:256]}",
                http_status=r.status_code,
            ) from e

        if check_operation_results:
            errors = failed_operation_errors(body)
            if errors is not None:
                raise TezosError(ErrorKind.OPERATION_ERROR, underlying_error="operation failed", errors=tuple(errors))
        return body


__all__ = ["RpcClient", "error_for_status", "failed_operation_errors", "JSON"]

"""
Typed error classes for the Python SDK.

Every stage of the operation pipeline (metadata, simulation, fee estimation,
forging, signing, preapplication, injection) either returns its value or
raises `TezosError`. The `kind` tells callers which failure mode happened and
`underlying_error` carries the wrapped cause (an error id reported by the node
or the `TezosError` of an earlier stage).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence, Tuple, Union

__all__ = [
    "TezosSdkError",
    "ErrorKind",
    "TezosError",
    "error_ids",
]


class TezosSdkError(Exception):
    """Base class for all SDK errors."""


class ErrorKind(str, Enum):
    UNKNOWN = "unknown"
    INVALID_URL = "invalidURL"
    RPC_ERROR = "rpcError"
    UNEXPECTED_RESPONSE = "unexpectedResponse"
    UNEXPECTED_REQUEST_FORMAT = "unexpectedRequestFormat"
    SIGNING_ERROR = "signingError"
    PREAPPLICATION_ERROR = "preapplicationError"
    TRANSACTION_FORMATION_FAILURE = "transactionFormationFailure"
    LOCAL_FORGING_NOT_SUPPORTED_FOR_OPERATION = "localForgingNotSupportedForOperation"
    OPERATION_ERROR = "operationError"


@dataclass(eq=False)
class TezosError(TezosSdkError):
    """
    Raised by every service when a stage fails.

    Fields:
      - kind: failure category
      - underlying_error: wrapped cause (node error id, message, or an earlier TezosError)
      - errors: raw error objects reported by the node, when any
      - http_status: status code of the failing RPC response, when any
      - message: context added by the stage that wrapped the cause
    """

    kind: ErrorKind
    underlying_error: Optional[Union[str, "TezosError"]] = None
    errors: Tuple[Any, ...] = field(default_factory=tuple)
    http_status: Optional[int] = None
    message: Optional[str] = None

    def __post_init__(self) -> None:
        self.errors = tuple(self.errors or ())
        super().__init__(str(self))

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"TezosError[{self.kind.value}]"]
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        if self.message:
            parts.append(self.message)
        if self.underlying_error is not None:
            parts.append(f"underlying={self.underlying_error}")
        if self.errors:
            parts.append(f"errors={list(self.errors)!r}")
        return " ".join(parts)

    @property
    def root_cause(self) -> Optional[Union[str, "TezosError"]]:
        """Innermost wrapped cause, following nested TezosErrors."""
        cause: Optional[Union[str, TezosError]] = self.underlying_error
        while isinstance(cause, TezosError) and cause.underlying_error is not None:
            cause = cause.underlying_error
        return cause


def error_ids(errors: Sequence[Any]) -> Tuple[str, ...]:
    """Extract the `id` field of node-reported error objects."""
    out = []
    for err in errors or ():
        if isinstance(err, dict) and err.get("id"):
            out.append(str(err["id"]))
    return tuple(out)

"""
SDK configuration: node endpoint, transport timeout and forging policy.

- Loads sane defaults and supports overrides via environment variables (TEZOS_*).
- Provides helpers for building HTTP headers and validating endpoints.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import ErrorKind, TezosError
from .types.core import ForgingPolicy
from .version import user_agent

_DEFAULT_NODE = "http://127.0.0.1:8732"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise TezosError(ErrorKind.INVALID_URL, underlying_error=f"URL must start with {allowed}, got: {url!r}")
    return url


def _parse_policy(val: Any) -> ForgingPolicy:
    if isinstance(val, ForgingPolicy):
        return val
    try:
        return ForgingPolicy(str(val).strip().lower())
    except ValueError as e:
        raise ValueError(f"unknown forging policy: {val!r}") from e


@dataclass(slots=True)
class SDKConfig:
    node_url: str = field(default_factory=lambda: _DEFAULT_NODE)
    # Transport only; the operation pipeline itself never times out
    request_timeout: float = 30.0
    forging_policy: ForgingPolicy = ForgingPolicy.REMOTE
    user_agent: str = field(default_factory=user_agent)

    def __post_init__(self) -> None:
        _ensure_scheme(self.node_url, ("http", "https"))
        self.forging_policy = _parse_policy(self.forging_policy)

    @classmethod
    def from_env(cls, prefix: str = "TEZOS_") -> "SDKConfig":
        """
        Create config from environment variables:

        TEZOS_NODE_URL          (http/https)
        TEZOS_TIMEOUT           (float seconds, HTTP)
        TEZOS_FORGING_POLICY    (remote | local | local_with_remote_fallback)
        TEZOS_USER_AGENT        (str)
        """
        node = _env(f"{prefix}NODE_URL", _DEFAULT_NODE)
        timeout = float(_env(f"{prefix}TIMEOUT", "30.0"))
        policy = _parse_policy(_env(f"{prefix}FORGING_POLICY", ForgingPolicy.REMOTE.value))
        ua = _env(f"{prefix}USER_AGENT", user_agent())
        return cls(
            node_url=node or _DEFAULT_NODE,
            request_timeout=timeout,
            forging_policy=policy,
            user_agent=ua or user_agent(),
        )

    @classmethod
    def with_overrides(cls, base: Optional["SDKConfig"] = None, **overrides: Any) -> "SDKConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data})
        return cls(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_url": self.node_url,
            "request_timeout": float(self.request_timeout),
            "forging_policy": self.forging_policy.value,
            "user_agent": self.user_agent,
        }


__all__ = ["SDKConfig"]

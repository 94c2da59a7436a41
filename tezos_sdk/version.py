"""
Version helpers for the Tezos Python SDK.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.1.0"


def user_agent() -> str:
    """Default User-Agent sent with every RPC request."""
    return f"tezos-sdk-py/{__version__}"


__all__ = ["__version__", "user_agent"]

"""
Shared pytest fixtures:
- A node URL that respx intercepts
- A deterministic ed25519 wallet and a scriptable fake signing provider
- Metadata and head/counter/manager-key bodies for a typical account
"""
from __future__ import annotations

import json
from typing import Optional

import httpx
import pytest

from tezos_sdk.rpc import endpoints
from tezos_sdk.types.core import OperationMetadata
from tezos_sdk.wallet.keys import PublicKey
from tezos_sdk.wallet.signer import Wallet

NODE = "http://tezos-node.test:8732"

SECRET_KEY = "edskS4pbuA7rwMjsZGmHU18aMP96VmjegxBzwMZs3DrcXHcMV7VyfQLkD5pqEE84wAMHzi8oVZF6wbgxv3FKzg7cLqzURjaXUp"
PUBLIC_KEY = "edpku9ZF6UUAEo1AL3NWy1oxHLL6AfQcGYwA5hFKrEKVHMT3Xx889A"
ADDRESS = "tz1Y3qqTg9HdrzZGbEjiCPmwuZ7fWVxpPtRw"

BRANCH = "BLNB68pLiAgXiJHXNUK7CDKRnCx1TqzaNGsRXsASg38wNueb8bx"
PROTOCOL = "PsddFKi32cMJ2qPjf43Qv5GDWLDPZb3T3bF6fLKiF5HtvHNU7aP"
CHAIN_ID = "NetXdQprcVkpaWU"

DESTINATION = "tz1Y68Da76MHixYhJhyU36bVh7a8C9UmtvrR"
CONTRACT = "KT1NrjjM791v7cyo6VGy7rrzB3Dg3p1mQki3"
BAKER = "tz3e75hU4EhDU3ukyJueh5v6UvEHzGwkg3yC"


def url(path: str) -> str:
    return NODE + path


class FakeSigner:
    """Signing provider that returns a fixed signature and records what it signed."""

    def __init__(self, signature: Optional[bytes] = b"\x11" * 64, public_key: str = PUBLIC_KEY) -> None:
        self.signature = signature
        self._public_key = PublicKey.from_base58(public_key)
        self.signed: list[str] = []

    @property
    def public_key(self) -> PublicKey:
        return self._public_key

    def sign(self, hex: str) -> Optional[bytes]:
        self.signed.append(hex)
        return self.signature


@pytest.fixture
def wallet() -> Wallet:
    return Wallet.from_secret_key(SECRET_KEY)


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def metadata() -> OperationMetadata:
    return OperationMetadata(
        chain_id=CHAIN_ID,
        branch=BRANCH,
        protocol=PROTOCOL,
        address_counter=41,
        manager_key=PUBLIC_KEY,
    )


@pytest.fixture
def unrevealed_metadata(metadata: OperationMetadata) -> OperationMetadata:
    return OperationMetadata(
        chain_id=metadata.chain_id,
        branch=metadata.branch,
        protocol=metadata.protocol,
        address_counter=metadata.address_counter,
        manager_key=None,
    )


def mock_metadata(respx_mock, address: str = ADDRESS, *, counter: str = "41", manager_key=PUBLIC_KEY) -> None:
    """Route the three metadata requests for `address`."""
    respx_mock.get(url(endpoints.HEAD)).mock(
        return_value=httpx.Response(200, json={"hash": BRANCH, "protocol": PROTOCOL, "chain_id": CHAIN_ID})
    )
    respx_mock.get(url(endpoints.counter(address))).mock(return_value=httpx.Response(200, json=counter))
    # httpx drops json=None, the node answers a literal null for unrevealed keys
    respx_mock.get(url(endpoints.manager_key(address))).mock(
        return_value=httpx.Response(
            200, content=json.dumps(manager_key).encode(), headers={"content-type": "application/json"}
        )
    )


def applied(consumed_gas: str = "10100", paid_storage: Optional[str] = None, internal=None) -> dict:
    result = {"status": "applied", "consumed_gas": consumed_gas}
    if paid_storage is not None:
        result["paid_storage_size_diff"] = paid_storage
    metadata = {"operation_result": result}
    if internal is not None:
        metadata["internal_operation_results"] = internal
    return {"kind": "transaction", "metadata": metadata}

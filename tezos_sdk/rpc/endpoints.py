"""RPC paths used by the SDK. All are relative to the node's base URL."""

from __future__ import annotations

HEAD = "/chains/main/blocks/head"
RUN_OPERATION = "/chains/main/blocks/head/helpers/scripts/run_operation"
INJECT_OPERATION = "/injection/operation"
PACK_DATA = "/chains/main/blocks/head/helpers/scripts/pack_data"


def counter(address: str) -> str:
    return f"/chains/main/blocks/head/context/contracts/{address}/counter"


def manager_key(address: str) -> str:
    return f"/chains/main/blocks/head/context/contracts/{address}/manager_key"


def balance(address: str) -> str:
    return f"/chains/main/blocks/head/context/contracts/{address}/balance"


def forge_operations(branch: str) -> str:
    return f"/chains/main/blocks/{branch}/helpers/forge/operations"


def preapply_operations(branch: str) -> str:
    return f"/chains/main/blocks/{branch}/helpers/preapply/operations"


def delegate(address: str) -> str:
    return f"/chains/main/blocks/head/context/contracts/{address}/delegate"


def storage(address: str) -> str:
    return f"/chains/main/blocks/head/context/contracts/{address}/storage"


def big_map_get(address: str) -> str:
    return f"/chains/main/blocks/head/context/contracts/{address}/big_map_get"


def big_map_value(big_map_id: int, expression: str) -> str:
    return f"/chains/main/blocks/head/context/big_maps/{int(big_map_id)}/{expression}"


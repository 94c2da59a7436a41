import hashlib
import json

import base58
import httpx
import pytest
import respx

from tezos_sdk.client import TezosNodeClient
from tezos_sdk.config import SDKConfig
from tezos_sdk.errors import ErrorKind, TezosError
from tezos_sdk.rpc import endpoints
from tezos_sdk.tx.build import default_fees
from tezos_sdk.types.core import (
    ForgingPolicy,
    OperationFeePolicy,
    OperationKind,
    SimulationSuccess,
    Tez,
    Transaction,
)

from conftest import ADDRESS, BAKER, BRANCH, CONTRACT, DESTINATION, NODE, PUBLIC_KEY, applied, mock_metadata, url

PREAPPLIED = [{"contents": [{"metadata": {"operation_result": {"status": "applied"}}}]}]


def _client(policy=ForgingPolicy.LOCAL) -> TezosNodeClient:
    return TezosNodeClient(SDKConfig(node_url=NODE, forging_policy=policy))


def _mock_submission():
    preapply = respx.post(url(endpoints.preapply_operations(BRANCH))).mock(
        return_value=httpx.Response(200, json=PREAPPLIED)
    )
    inject = respx.post(url(endpoints.INJECT_OPERATION)).mock(return_value=httpx.Response(200, json="ooHash"))
    return preapply, inject


@pytest.mark.asyncio
@respx.mock
async def test_queries():
    respx.get(url(endpoints.balance(ADDRESS))).mock(return_value=httpx.Response(200, json="3500000"))
    respx.get(url(endpoints.counter(ADDRESS))).mock(return_value=httpx.Response(200, json="7"))
    respx.get(url(endpoints.manager_key(ADDRESS))).mock(return_value=httpx.Response(200, json=PUBLIC_KEY))
    async with _client() as client:
        balance = await client.get_balance(ADDRESS)
        assert balance.human_readable_representation == "3.500000"
        assert await client.get_counter(ADDRESS) == 7
        assert await client.get_manager_key(ADDRESS) == PUBLIC_KEY


@pytest.mark.asyncio
@respx.mock
async def test_malformed_balance():
    respx.get(url(endpoints.balance(ADDRESS))).mock(return_value=httpx.Response(200, json={"oops": 1}))
    async with _client() as client:
        with pytest.raises(TezosError) as exc:
            await client.get_balance(ADDRESS)
    assert exc.value.kind is ErrorKind.UNEXPECTED_RESPONSE


@pytest.mark.asyncio
@respx.mock
async def test_send_with_default_fees(wallet):
    mock_metadata(respx)
    preapply, _ = _mock_submission()
    async with _client() as client:
        assert await client.send(amount=Tez(1), destination=DESTINATION, signing_provider=wallet) == "ooHash"
    content = json.loads(preapply.calls.last.request.content)[0]["contents"][0]
    assert content["fee"] == "1284"
    assert content["destination"] == DESTINATION
    assert content["amount"] == "1000000"


@pytest.mark.asyncio
@respx.mock
async def test_send_with_estimated_fees(wallet):
    mock_metadata(respx)
    respx.post(url(endpoints.RUN_OPERATION)).mock(
        return_value=httpx.Response(200, json={"contents": [applied("10100")]})
    )
    preapply, _ = _mock_submission()
    async with _client() as client:
        await client.send(
            amount=Tez(1),
            destination=DESTINATION,
            signing_provider=wallet,
            fee_policy=OperationFeePolicy.estimate(),
        )
    content = json.loads(preapply.calls.last.request.content)[0]["contents"][0]
    assert content["fee"] == "1308"
    assert content["gas_limit"] == "10200"
    assert content["storage_limit"] == "257"


@pytest.mark.asyncio
@respx.mock
async def test_delegation_helpers(wallet):
    mock_metadata(respx)
    preapply, _ = _mock_submission()
    async with _client() as client:
        await client.delegate(delegate=BAKER, signing_provider=wallet)
        assert json.loads(preapply.calls.last.request.content)[0]["contents"][0]["delegate"] == BAKER
        await client.register_delegate(signing_provider=wallet)
        assert json.loads(preapply.calls.last.request.content)[0]["contents"][0]["delegate"] == ADDRESS
        await client.undelegate(signing_provider=wallet)
        assert "delegate" not in json.loads(preapply.calls.last.request.content)[0]["contents"][0]


@pytest.mark.asyncio
@respx.mock
async def test_contract_call_falls_back_to_remote_forging(wallet):
    mock_metadata(respx)
    forge = respx.post(url(endpoints.forge_operations(BRANCH))).mock(return_value=httpx.Response(200, json="ab" * 40))
    preapply, inject = _mock_submission()
    async with _client(ForgingPolicy.LOCAL_WITH_REMOTE_FALLBACK) as client:
        await client.call_contract(contract=CONTRACT, parameter={"int": "1"}, signing_provider=wallet)
    assert forge.call_count == 1
    assert json.loads(inject.calls.last.request.content).startswith("ab" * 40)
    sent = json.loads(preapply.calls.last.request.content)[0]["contents"][0]
    assert sent["parameters"] == {"entrypoint": "default", "value": {"int": "1"}}


@pytest.mark.asyncio
@respx.mock
async def test_reveal_and_originate(wallet):
    mock_metadata(respx, manager_key=None)
    preapply, _ = _mock_submission()
    async with _client() as client:
        await client.reveal(signing_provider=wallet)
        contents = json.loads(preapply.calls.last.request.content)[0]["contents"]
        assert [c["kind"] for c in contents] == ["reveal"]

        await client.originate(signing_provider=wallet, balance=Tez(1))
        contents = json.loads(preapply.calls.last.request.content)[0]["contents"]
        assert [c["kind"] for c in contents] == ["reveal", "origination"]
        assert contents[1]["manager_pubkey"] == ADDRESS


@pytest.mark.asyncio
@respx.mock
async def test_get_delegate():
    respx.get(url(endpoints.delegate(ADDRESS))).mock(return_value=httpx.Response(200, json=BAKER))
    respx.get(url(endpoints.delegate(DESTINATION))).mock(return_value=httpx.Response(404, text="not found"))
    async with _client() as client:
        assert await client.get_delegate(ADDRESS) == BAKER
        assert await client.get_delegate(DESTINATION) is None


@pytest.mark.asyncio
@respx.mock
async def test_get_delegate_surfaces_other_failures():
    respx.get(url(endpoints.delegate(ADDRESS))).mock(return_value=httpx.Response(500, text="down"))
    async with _client() as client:
        with pytest.raises(TezosError) as exc:
            await client.get_delegate(ADDRESS)
    assert exc.value.kind is ErrorKind.UNEXPECTED_RESPONSE


@pytest.mark.asyncio
@respx.mock
async def test_get_contract_storage():
    storage = {"prim": "Pair", "args": [[], {"int": "1089999900"}]}
    respx.get(url(endpoints.storage(CONTRACT))).mock(return_value=httpx.Response(200, json=storage))
    async with _client() as client:
        assert await client.get_contract_storage(CONTRACT) == storage


@pytest.mark.asyncio
@respx.mock
async def test_get_big_map_value_posts_key_and_type():
    route = respx.post(url(endpoints.big_map_get(CONTRACT))).mock(
        return_value=httpx.Response(200, json={"int": "100"})
    )
    async with _client() as client:
        value = await client.get_big_map_value(CONTRACT, {"string": ADDRESS}, "address")
    assert value == {"int": "100"}
    assert json.loads(route.calls.last.request.content) == {"key": {"string": ADDRESS}, "type": {"prim": "address"}}


@pytest.mark.asyncio
@respx.mock
async def test_get_big_map_value_by_id_hashes_packed_key():
    packed = "050a000000160000" + "ab" * 20
    expression = base58.b58encode_check(
        bytes([13, 44, 64, 27]) + hashlib.blake2b(bytes.fromhex(packed), digest_size=32).digest()
    ).decode()
    pack = respx.post(url(endpoints.PACK_DATA)).mock(
        return_value=httpx.Response(200, json={"packed": packed, "gas": "7000"})
    )
    value = respx.get(url(endpoints.big_map_value(17, expression))).mock(
        return_value=httpx.Response(200, json={"int": "5"})
    )
    async with _client() as client:
        assert await client.get_big_map_value_by_id(17, {"string": ADDRESS}, "address") == {"int": "5"}
    assert expression.startswith("expr")
    assert json.loads(pack.calls.last.request.content) == {
        "data": {"string": ADDRESS},
        "type": {"prim": "address"},
        "gas": "8000",
    }
    assert value.called


@pytest.mark.asyncio
@respx.mock
async def test_get_big_map_value_by_id_rejects_bad_pack_response():
    respx.post(url(endpoints.PACK_DATA)).mock(return_value=httpx.Response(200, json={"packed": "xyz"}))
    async with _client() as client:
        with pytest.raises(TezosError) as exc:
            await client.get_big_map_value_by_id(17, {"int": "1"}, "nat")
    assert exc.value.kind is ErrorKind.UNEXPECTED_RESPONSE


@pytest.mark.asyncio
@respx.mock(assert_all_called=False)
async def test_run_operation_simulates_without_injecting(respx_mock, wallet):
    mock_metadata(respx_mock)
    respx_mock.post(url(endpoints.RUN_OPERATION)).mock(
        return_value=httpx.Response(200, json={"contents": [applied("10100", "257")]})
    )
    inject = respx_mock.post(url(endpoints.INJECT_OPERATION)).mock(return_value=httpx.Response(200, json="ooHash"))
    op = Transaction(
        source=ADDRESS, destination=DESTINATION, amount=Tez(1), fees=default_fees(OperationKind.TRANSACTION)
    )
    async with _client() as client:
        result = await client.run_operation(op, wallet)
    assert result == SimulationSuccess(consumed_gas=10100, consumed_storage=257)
    assert not inject.called

import pytest

from tezos_sdk.config import SDKConfig
from tezos_sdk.errors import ErrorKind, TezosError
from tezos_sdk.types.core import ForgingPolicy


def test_defaults(monkeypatch):
    for name in ("TEZOS_NODE_URL", "TEZOS_TIMEOUT", "TEZOS_FORGING_POLICY", "TEZOS_USER_AGENT"):
        monkeypatch.delenv(name, raising=False)
    cfg = SDKConfig.from_env()
    assert cfg.node_url == "http://127.0.0.1:8732"
    assert cfg.forging_policy is ForgingPolicy.REMOTE
    assert cfg.http_headers()["User-Agent"].startswith("tezos-sdk-py/")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TEZOS_NODE_URL", "https://mainnet.example")
    monkeypatch.setenv("TEZOS_TIMEOUT", "5")
    monkeypatch.setenv("TEZOS_FORGING_POLICY", "local_with_remote_fallback")
    cfg = SDKConfig.from_env()
    assert cfg.node_url == "https://mainnet.example"
    assert cfg.request_timeout == 5.0
    assert cfg.forging_policy is ForgingPolicy.LOCAL_WITH_REMOTE_FALLBACK


def test_invalid_url_is_rejected(monkeypatch):
    monkeypatch.setenv("TEZOS_NODE_URL", "ftp://node")
    with pytest.raises(TezosError) as exc:
        SDKConfig.from_env()
    assert exc.value.kind is ErrorKind.INVALID_URL


def test_with_overrides_ignores_unknown_keys():
    base = SDKConfig(node_url="http://a:1")
    cfg = SDKConfig.with_overrides(base, forging_policy="local", nope=1)
    assert cfg.forging_policy is ForgingPolicy.LOCAL
    assert cfg.node_url == "http://a:1"
    assert cfg.to_dict()["forging_policy"] == "local"

import pytest

from tezos_sdk.address import (
    AddressError,
    SigningCurve,
    is_implicit,
    is_valid_address,
    parse_address,
)
from tezos_sdk.errors import ErrorKind, TezosError
from tezos_sdk.tx.send import sign_forged
from tezos_sdk.wallet.keys import KeyFormatError, PublicKey, SecretKey
from tezos_sdk.wallet.signer import SigningProvider, Wallet

from conftest import ADDRESS, CONTRACT, PUBLIC_KEY, SECRET_KEY, FakeSigner

DEADBEEF_SIGNATURE = bytes(
    [
        208, 47, 19, 208, 168, 253, 44, 130, 231, 240, 15, 213, 223, 59, 178, 60, 130, 146, 175, 120, 119, 21, 237, 130,
        115, 88, 31, 213, 202, 126, 150, 205, 13, 237, 56, 251, 254, 240, 202, 228, 141, 180, 235, 175, 184, 189, 172,
        121, 43, 25, 235, 97, 235, 140, 144, 168, 32, 75, 190, 101, 126, 99, 117, 13,
    ]
)

SECP256K1_SECRET = "spsk2rBDDeUqakQ42nBHDGQTtP3GErb6AahHPwF9bhca3Q5KA5HESE"


def test_secret_key_roundtrip_and_public_key():
    sk = SecretKey.from_base58(SECRET_KEY)
    assert sk.curve is SigningCurve.ED25519
    assert sk.base58check_representation == SECRET_KEY
    assert sk.public_key.base58check_representation == PUBLIC_KEY
    assert sk.public_key.public_key_hash == ADDRESS


def test_invalid_secret_key():
    with pytest.raises(KeyFormatError):
        SecretKey.from_base58("edsko0O")


def test_ed25519_signature_vector():
    sk = SecretKey.from_base58(SECRET_KEY)
    assert sk.sign("deadbeef") == DEADBEEF_SIGNATURE
    assert sk.public_key.verify(DEADBEEF_SIGNATURE, "deadbeef")
    assert not sk.public_key.verify(DEADBEEF_SIGNATURE, "deadbeee")


def test_secp256k1_key_signs_low_s_and_verifies():
    sk = SecretKey.from_base58(SECP256K1_SECRET)
    assert sk.curve is SigningCurve.SECP256K1
    assert sk.base58check_representation == SECP256K1_SECRET
    pk = sk.public_key
    assert pk.base58check_representation.startswith("sppk")
    assert pk.public_key_hash.startswith("tz2")
    assert PublicKey.from_base58(pk.base58check_representation) == pk

    sig = sk.sign("deadbeef")
    assert len(sig) == 64
    s = int.from_bytes(sig[32:], "big")
    assert s <= 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141 // 2
    assert pk.verify(sig, "deadbeef")


def test_p256_key_from_seed():
    sk = SecretKey.from_seed(bytes(range(1, 33)), SigningCurve.P256)
    pk = sk.public_key
    assert pk.base58check_representation.startswith("p2pk")
    assert pk.public_key_hash.startswith("tz3")
    assert pk.verify(sk.sign("cafe"), "cafe")
    assert SecretKey.from_base58(sk.base58check_representation) == sk


def test_wallet_is_a_signing_provider(wallet):
    assert isinstance(wallet, SigningProvider)
    assert wallet.address == ADDRESS
    assert wallet.sign("deadbeef") == DEADBEEF_SIGNATURE
    assert wallet.sign("not hex") is None


def test_injectable_bytes_append_signature(wallet):
    signed = sign_forged("deadbeef", wallet)
    assert signed.signature == DEADBEEF_SIGNATURE
    assert signed.injectable_hex == "deadbeef" + DEADBEEF_SIGNATURE.hex()


def test_sign_forged_reports_signing_errors():
    with pytest.raises(TezosError) as exc:
        sign_forged("deadbeef", FakeSigner(signature=None))
    assert exc.value.kind is ErrorKind.SIGNING_ERROR


def test_addresses():
    assert parse_address(ADDRESS).curve is SigningCurve.ED25519
    assert parse_address(CONTRACT).curve is None
    assert is_valid_address(CONTRACT)
    assert is_implicit(ADDRESS) and not is_implicit(CONTRACT)
    assert not is_valid_address("tz4abc")
    with pytest.raises(AddressError):
        parse_address("KT1notanaddress")


def test_wallet_from_seed_derives_matching_address():
    w = Wallet.from_seed(bytes(32))
    assert w.address == w.public_key.public_key_hash
    assert w.address.startswith("tz1")

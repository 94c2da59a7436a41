import pytest

from tezos_sdk.address import SigningCurve
from tezos_sdk.wallet.mnemonic import create_mnemonic, mnemonic_to_seed, validate_mnemonic
from tezos_sdk.wallet.signer import Wallet

from conftest import ADDRESS, PUBLIC_KEY, SECRET_KEY

MNEMONIC = "soccer click number muscle police corn couch bitter gorilla camp camera shove expire praise pill"
PASSPHRASE = "TezosKitTest"


def test_mnemonic_restores_known_wallet():
    wallet = Wallet.from_mnemonic(MNEMONIC)
    assert wallet.mnemonic == MNEMONIC
    assert wallet.address == ADDRESS
    assert wallet.public_key.base58check_representation == PUBLIC_KEY
    assert wallet.secret_key.base58check_representation == SECRET_KEY
    # the phrase is not part of identity
    assert wallet == Wallet.from_secret_key(SECRET_KEY)
    assert Wallet.from_secret_key(SECRET_KEY).mnemonic is None


def test_empty_passphrase_is_no_passphrase():
    assert Wallet.from_mnemonic(MNEMONIC, "") == Wallet.from_mnemonic(MNEMONIC)


def test_passphrase_changes_the_keys():
    wallet = Wallet.from_mnemonic(MNEMONIC, PASSPHRASE)
    assert wallet.public_key.base58check_representation == "edpktnCgi3C7ZLyLrF4NAebDkgu5PZRRJ9BafxskVEj6U1GycyRird"
    assert wallet.secret_key.base58check_representation == (
        "edskRjazzmroxmJagYDhCT1jXna8m9H2qvjtPAcrZYZ31og4ud1u2kkxYGv8e7CjmbW33QubzugueXqLFPMbM2eAj6j3AQHrCW"
    )
    assert wallet.address == "tz1ZfhME1B2kmagqEJ9P7PE8joM3TbVQ5r4v"


def test_wallets_differ_by_phrase_and_passphrase():
    first = Wallet.from_mnemonic(MNEMONIC, PASSPHRASE)
    assert first == Wallet.from_mnemonic(MNEMONIC, PASSPHRASE)
    assert first != Wallet.from_mnemonic("pear pear pear pear pear pear pear", PASSPHRASE)
    assert first != Wallet.from_mnemonic(MNEMONIC, "TezosKit2")
    assert first != Wallet.from_mnemonic("pear pear pear pear", "TezosKit2")


def test_seed_is_first_half_of_bip39_seed():
    seed = mnemonic_to_seed("abandon " * 11 + "about")
    assert len(seed) == 32
    assert seed.hex().startswith("5eb00bbddcf069084889a8ab9155568165f5c453")


def test_generated_wallets_carry_a_valid_mnemonic():
    wallet = Wallet.generate()
    assert validate_mnemonic(wallet.mnemonic)
    assert len(wallet.mnemonic.split()) == 12
    assert wallet == Wallet.from_mnemonic(wallet.mnemonic)
    assert Wallet.generate(PASSPHRASE) != wallet


def test_generated_secp256k1_wallet():
    wallet = Wallet.generate(curve=SigningCurve.SECP256K1)
    assert wallet.curve is SigningCurve.SECP256K1
    assert wallet.address.startswith("tz2")


def test_validate_mnemonic():
    assert validate_mnemonic("abandon " * 11 + "about")
    assert validate_mnemonic(create_mnemonic(24))
    assert not validate_mnemonic("abandon " * 12)
    assert not validate_mnemonic("pear pear pear pear")
    assert not validate_mnemonic("")


def test_create_mnemonic_rejects_odd_lengths():
    with pytest.raises(ValueError):
        create_mnemonic(13)

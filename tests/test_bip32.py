"""
Tests for BIP39 seed and BIP32 HD key derivation.
"""

import pytest

from cosmos_transfer.errors import DerivationError
from cosmos_transfer.wallet.bip32 import HARDENED_OFFSET, HDKey, mnemonic_to_seed, parse_path

# BIP32 test vector 1
VECTOR1_SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")


def test_mnemonic_to_seed(test_mnemonic):
    seed = mnemonic_to_seed(test_mnemonic)
    assert len(seed) == 64
    assert isinstance(seed, bytearray)
    assert seed.hex() == (
        "5eb00bbddcf069084889a8ab9155568165f5c453ccb85e70811aaed6f6da5fc1"
        "9a5ac40b389cd370d086206dec8aa6c43daea6690f20ad3d8d48b2d2ce9e38e4"
    )


def test_mnemonic_to_seed_with_passphrase(test_mnemonic):
    seed = mnemonic_to_seed(test_mnemonic, "TREZOR")
    assert seed.hex() == (
        "c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e5349553"
        "1f09a6987599d18264c1e1c92f2cf141630c7a3c4ab7c81b2f001698e7463b04"
    )


def test_mnemonic_to_seed_accepts_bytes(test_mnemonic):
    assert mnemonic_to_seed(bytearray(test_mnemonic.encode())) == mnemonic_to_seed(test_mnemonic)


def test_hdkey_from_seed():
    master = HDKey.from_seed(VECTOR1_SEED)

    assert master.depth == 0
    assert master.get_private_key_bytes().hex() == (
        "e8f32e723decf4051aefac8e2c93c9c5b214313817cdb01a1494b917c8436b35"
    )
    assert master.chain_code.hex() == (
        "873dff81c02f525623fd1fe5167eac3a55a049de3d314bb42ee227ffed37d508"
    )
    assert master.get_public_key_bytes().hex() == (
        "0339a36013301597daef41fbe593a02cc513d0b55527ec2df1050e2e8ff49c85c2"
    )


def test_hardened_derivation():
    child = HDKey.from_seed(VECTOR1_SEED).derive("m/0'")
    assert child.depth == 1
    assert child.get_private_key_bytes().hex() == (
        "edb2e14f9ee77d26dd93b4ecede8d16ed408ce149b6cd80b0715a2d911a0afea"
    )


def test_mixed_derivation():
    child = HDKey.from_seed(VECTOR1_SEED).derive("m/0h/1")
    assert child.depth == 2
    assert child.get_private_key_bytes().hex() == (
        "3c6cb8d0f6a264c91ea8b5030fadaa8e538b020f0a387421a12de9319dc93368"
    )


def test_derivation_is_incremental():
    master = HDKey.from_seed(VECTOR1_SEED)
    stepwise = master.derive("m/0'").derive("m/1")
    assert stepwise.get_private_key_bytes() == master.derive("m/0'/1").get_private_key_bytes()


def test_cosmos_path(test_mnemonic):
    key = HDKey.from_seed(mnemonic_to_seed(test_mnemonic)).derive("m/44'/118'/0'/0/0")

    assert key.depth == 5
    assert len(key.get_private_key_bytes()) == 32
    pubkey = key.get_public_key_bytes()
    assert len(pubkey) == 33
    assert pubkey[0] in (2, 3)


def test_parse_path():
    assert parse_path("m/44'/118'/0'/0/0") == [
        44 + HARDENED_OFFSET,
        118 + HARDENED_OFFSET,
        HARDENED_OFFSET,
        0,
        0,
    ]
    assert parse_path("m") == []


@pytest.mark.parametrize("path", ["44'/0", "m/abc", "m/-1", "m/2147483648"])
def test_parse_path_invalid(path):
    with pytest.raises(DerivationError):
        parse_path(path)

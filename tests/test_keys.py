"""
Tests for mnemonic -> key pair -> address derivation.
"""

from __future__ import annotations

import pytest

from cosmos_transfer.errors import DerivationError, InvalidMnemonic
from cosmos_transfer.secret import SecretPhrase
from cosmos_transfer.wallet.bip32 import HDKey, mnemonic_to_seed
from cosmos_transfer.wallet.keys import COSMOS_HD_PATH, KeyPair, derive, validate_mnemonic


def test_derive_matches_bip32(test_mnemonic: str) -> None:
    expected = HDKey.from_seed(mnemonic_to_seed(test_mnemonic)).derive(COSMOS_HD_PATH)
    key = derive(test_mnemonic)

    assert bytes(key.private_key) == expected.get_private_key_bytes()
    assert key.public_key == expected.get_public_key_bytes()


def test_derive_is_deterministic(funded_mnemonic: str) -> None:
    first = derive(funded_mnemonic)
    second = derive(SecretPhrase(funded_mnemonic))
    assert first.public_key == second.public_key
    assert first.address() == second.address()


def test_address_shape(funded_mnemonic: str) -> None:
    address = derive(funded_mnemonic).address()
    assert address.startswith("osmo1")
    # 4 prefix + 1 separator + 32 data + 6 checksum
    assert len(address) == 43
    assert address == address.lower()


def test_address_prefix(funded_mnemonic: str) -> None:
    key = derive(funded_mnemonic)
    assert key.address("cosmos").startswith("cosmos1")
    assert key.address("cosmos")[7:-6] == key.address("osmo")[5:-6]


@pytest.mark.parametrize(
    "mnemonic,prefix,expected",
    [
        (
            "abandon abandon abandon abandon abandon abandon "
            "abandon abandon abandon abandon abandon about",
            "cosmos",
            "cosmos19rl4cm2hmr8afy4kldpxz3fka4jguq0auqdal4",
        ),
        (
            "test test test test test test test test test test test junk",
            "osmo",
            "osmo15yk64u7zc9g9k2yr2wmzeva5qgwxps6ywful0v",
        ),
    ],
)
def test_known_addresses(mnemonic: str, prefix: str, expected: str) -> None:
    assert derive(mnemonic).address(prefix) == expected


def test_passphrase_changes_key(test_mnemonic: str) -> None:
    assert derive(test_mnemonic).public_key != derive(test_mnemonic, passphrase="x").public_key


def test_different_mnemonics_differ(test_mnemonic: str, funded_mnemonic: str) -> None:
    assert derive(test_mnemonic).address() != derive(funded_mnemonic).address()


def test_invalid_checksum() -> None:
    phrase = " ".join(["abandon"] * 12)
    with pytest.raises(InvalidMnemonic):
        derive(phrase)


def test_unknown_word(test_mnemonic: str) -> None:
    with pytest.raises(InvalidMnemonic):
        validate_mnemonic(test_mnemonic.replace("about", "aboot"))


def test_keypair_wipe(test_mnemonic: str) -> None:
    with derive(test_mnemonic) as key:
        buffer = key.private_key
        assert any(buffer)
    assert not any(buffer)
    assert key.is_wiped
    with pytest.raises(DerivationError):
        _ = key.private_key


def test_keypair_repr_hides_private_key(test_mnemonic: str) -> None:
    key = derive(test_mnemonic)
    assert bytes(key.private_key).hex() not in repr(key)
    assert key.public_key_hex in repr(key)


def test_keypair_rejects_bad_length() -> None:
    with pytest.raises(DerivationError):
        KeyPair(b"\x01" * 31, b"\x02" * 33)

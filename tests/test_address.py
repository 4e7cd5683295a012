"""
Tests for bech32 account address handling.
"""

from __future__ import annotations

import bech32
import pytest

from cosmos_transfer.address import (
    address_of,
    decode_address,
    encode_address,
    hash160,
    validate_address,
)
from cosmos_transfer.errors import InvalidAddress

# BIP32 test vector 1 master public key
VECTOR1_PUBKEY = "0339a36013301597daef41fbe593a02cc513d0b55527ec2df1050e2e8ff49c85c2"


def test_hash160_known_vector() -> None:
    # Fingerprint of the BIP32 vector 1 master key is the first 4 bytes of hash160
    assert hash160(bytes.fromhex(VECTOR1_PUBKEY))[:4].hex() == "3442193e"


def test_address_of_roundtrip() -> None:
    address = address_of(VECTOR1_PUBKEY)
    assert address.startswith("osmo1")
    assert decode_address(address, "osmo") == hash160(bytes.fromhex(VECTOR1_PUBKEY))


def test_address_of_rejects_uncompressed() -> None:
    with pytest.raises(ValueError, match="pubkey length"):
        address_of(b"\x04" + b"\x00" * 64)


def test_32_byte_payload_accepted() -> None:
    address = encode_address("osmo", bytes(range(32)))
    assert decode_address(address, "osmo") == bytes(range(32))


@pytest.mark.parametrize("length", [0, 19, 21, 31, 33])
def test_wrong_payload_length(length: int) -> None:
    address = encode_address("osmo", b"\x07" * length)
    with pytest.raises(InvalidAddress, match="bytes"):
        decode_address(address, "osmo")


def test_wrong_prefix() -> None:
    address = encode_address("cosmos", b"\x01" * 20)
    with pytest.raises(InvalidAddress, match="expected 'osmo'"):
        validate_address(address, "osmo")


def test_any_prefix_when_unspecified() -> None:
    address = encode_address("cosmos", b"\x01" * 20)
    assert decode_address(address) == b"\x01" * 20


def test_bad_checksum() -> None:
    address = encode_address("osmo", b"\x01" * 20)
    last = "q" if address[-1] != "q" else "p"
    with pytest.raises(InvalidAddress):
        validate_address(address[:-1] + last, "osmo")


def test_bech32m_rejected() -> None:
    data = bech32.convertbits(b"\x01" * 20, 8, 5)
    # Same payload with the bech32m constant (BIP350) must not validate as bech32

    values = bech32.bech32_hrp_expand("osmo") + data
    polymod = bech32.bech32_polymod(values + [0] * 6) ^ 0x2BC830A3
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    bech32m_address = "osmo1" + "".join(bech32.CHARSET[d] for d in data + checksum)

    with pytest.raises(InvalidAddress):
        validate_address(bech32m_address, "osmo")


@pytest.mark.parametrize("value", ["", "osmo", "osmo1", "not an address", "OSMO1qqqq"])
def test_garbage(value: str) -> None:
    with pytest.raises(InvalidAddress):
        validate_address(value, "osmo")


def test_validate_returns_address() -> None:
    address = encode_address("osmo", b"\x01" * 20)
    assert validate_address(address, "osmo") == address

"""
Cosmos account address utilities.

Address = bech32(prefix, RIPEMD160(SHA256(compressed_pubkey))).

Uses external libraries for security-critical operations:
- bech32: BIP173 bech32 encoding (Cosmos uses plain bech32, not bech32m)
"""

from __future__ import annotations

import hashlib

import bech32 as bech32_lib

from cosmos_transfer.errors import InvalidAddress

# Account addresses hash a pubkey (20 bytes); module and contract accounts use 32
VALID_PAYLOAD_LENGTHS = (20, 32)

COMPRESSED_PUBKEY_LENGTH = 33


def hash160(data: bytes) -> bytes:
    """
    RIPEMD160(SHA256(data)) - Used for secp256k1 account addresses.

    Args:
        data: Input data to hash

    Returns:
        20-byte hash
    """
    return hashlib.new("ripemd160", hashlib.sha256(data).digest()).digest()


def encode_address(prefix: str, payload: bytes) -> str:
    """Bech32-encode raw address bytes under the given human-readable prefix."""
    data = bech32_lib.convertbits(payload, 8, 5)
    if data is None:
        raise InvalidAddress("Failed to convert address payload to 5-bit groups")
    result = bech32_lib.bech32_encode(prefix, data)
    if result is None:
        raise InvalidAddress("Failed to encode bech32 address")
    return result


def address_of(public_key: bytes | str, prefix: str = "osmo") -> str:
    """
    Convert a compressed secp256k1 public key to its account address.

    Args:
        public_key: 33-byte compressed public key (bytes or hex string)
        prefix: Bech32 human-readable prefix (e.g. "osmo", "cosmos")

    Returns:
        Bech32 account address
    """
    if isinstance(public_key, str):
        public_key = bytes.fromhex(public_key)

    if len(public_key) != COMPRESSED_PUBKEY_LENGTH:
        raise ValueError(f"Invalid compressed pubkey length: {len(public_key)}")

    return encode_address(prefix, hash160(public_key))


def decode_address(address: str, prefix: str | None = None) -> bytes:
    """
    Decode and validate a bech32 account address.

    Args:
        address: Bech32 address string
        prefix: Expected human-readable prefix (any prefix accepted if None)

    Returns:
        Raw address payload (20 or 32 bytes)

    Raises:
        InvalidAddress: On bad checksum, wrong prefix or wrong payload length
    """
    decoded = bech32_lib.bech32_decode(address)
    hrp, data = decoded[0], decoded[1]
    if hrp is None or data is None:
        raise InvalidAddress(f"Invalid bech32 address: {address}")

    if prefix is not None and hrp != prefix:
        raise InvalidAddress(f"Address {address} has prefix '{hrp}', expected '{prefix}'")

    payload = bech32_lib.convertbits(data, 5, 8, False)
    if payload is None:
        raise InvalidAddress(f"Invalid bech32 payload padding: {address}")

    if len(payload) not in VALID_PAYLOAD_LENGTHS:
        raise InvalidAddress(
            f"Address {address} decodes to {len(payload)} bytes, "
            f"expected one of {VALID_PAYLOAD_LENGTHS}"
        )
    return bytes(payload)


def validate_address(address: str, prefix: str) -> str:
    """Return the address unchanged if it is a valid account address for ``prefix``."""
    decode_address(address, prefix)
    return address

"""
BIP32 HD key derivation on secp256k1.
Cosmos SDK chains use the BIP44 path m/44'/118'/0'/0/0.
"""

from __future__ import annotations

import hashlib
import hmac
import unicodedata

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from cosmos_transfer.errors import DerivationError

HARDENED_OFFSET = 0x80000000

# secp256k1 group order
SECP256K1_N = int("FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16)


def parse_path(path: str) -> list[int]:
    """
    Parse path notation (e.g. "m/44'/118'/0'/0/0") into child indices.
    ' or h marks hardened derivation.
    """
    if not path.startswith("m"):
        raise DerivationError("Path must start with 'm'")

    indices: list[int] = []
    for part in path.split("/")[1:]:
        if not part:
            continue

        hardened = part.endswith("'") or part.endswith("h")
        index_str = part.rstrip("'h")
        if not index_str.isdigit():
            raise DerivationError(f"Invalid path component: {part}")
        index = int(index_str)
        if index >= HARDENED_OFFSET:
            raise DerivationError(f"Path index out of range: {part}")

        indices.append(index + HARDENED_OFFSET if hardened else index)

    return indices


def _private_key_from_int(value: int) -> ec.EllipticCurvePrivateKey:
    if not 0 < value < SECP256K1_N:
        raise DerivationError("Derived scalar is outside the secp256k1 group order")
    try:
        return ec.derive_private_key(value, ec.SECP256K1())
    except ValueError as e:
        raise DerivationError(f"Curve arithmetic failed: {e}") from e


class HDKey:
    """
    Hierarchical Deterministic private key.
    Implements BIP32 private parent -> private child derivation.
    """

    def __init__(self, private_key: ec.EllipticCurvePrivateKey, chain_code: bytes, depth: int = 0):
        self.private_key = private_key
        self.public_key = private_key.public_key()
        self.chain_code = chain_code
        self.depth = depth

    @classmethod
    def from_seed(cls, seed: bytes | bytearray) -> HDKey:
        """Create master HD key from seed"""
        hmac_result = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()
        key_int = int.from_bytes(hmac_result[:32], "big")
        return cls(_private_key_from_int(key_int), hmac_result[32:], depth=0)

    def derive(self, path: str) -> HDKey:
        """Derive the descendant key at ``path`` (relative to this key)."""
        key = self
        for index in parse_path(path):
            key = key._derive_child(index)
        return key

    def _derive_child(self, index: int) -> HDKey:
        if index >= HARDENED_OFFSET:
            data = b"\x00" + self.get_private_key_bytes() + index.to_bytes(4, "big")
        else:
            data = self.get_public_key_bytes() + index.to_bytes(4, "big")

        hmac_result = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        offset_int = int.from_bytes(hmac_result[:32], "big")
        if offset_int >= SECP256K1_N:
            raise DerivationError(f"Invalid child key at index {index}")

        parent_key_int = self.private_key.private_numbers().private_value
        child_key_int = (parent_key_int + offset_int) % SECP256K1_N

        return HDKey(_private_key_from_int(child_key_int), hmac_result[32:], self.depth + 1)

    def get_private_key_bytes(self) -> bytes:
        """Get private key as 32 bytes"""
        return self.private_key.private_numbers().private_value.to_bytes(32, "big")

    def get_public_key_bytes(self) -> bytes:
        """Get the 33-byte compressed public key"""
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )


def mnemonic_to_seed(mnemonic: bytes | bytearray | str, passphrase: str = "") -> bytearray:
    """
    Convert a BIP39 mnemonic to its 64-byte seed.

    Returns a bytearray so callers can zero it once the master key exists.
    """
    from hashlib import pbkdf2_hmac

    if isinstance(mnemonic, str):
        mnemonic_bytes: bytes | bytearray = unicodedata.normalize("NFKD", mnemonic).encode("utf-8")
    else:
        mnemonic_bytes = mnemonic
    salt = unicodedata.normalize("NFKD", "mnemonic" + passphrase).encode("utf-8")

    return bytearray(pbkdf2_hmac("sha512", mnemonic_bytes, salt, 2048, dklen=64))

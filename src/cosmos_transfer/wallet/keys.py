"""
Mnemonic -> key pair -> address.

All functions here are pure: the same phrase, passphrase and path always give
the same key pair.
"""

from __future__ import annotations

from mnemonic import Mnemonic

from cosmos_transfer.address import address_of
from cosmos_transfer.errors import DerivationError, InvalidMnemonic
from cosmos_transfer.secret import SecretPhrase, _zero
from cosmos_transfer.wallet.bip32 import HDKey, mnemonic_to_seed

# BIP44 coin type 118 (ATOM), shared by Osmosis and most Cosmos SDK chains
COSMOS_HD_PATH = "m/44'/118'/0'/0/0"


class KeyPair:
    """
    secp256k1 private scalar and compressed public key.

    The private key is held in a bytearray and zeroed by ``wipe()`` or when
    the ``with`` block exits.
    """

    def __init__(self, private_key: bytes | bytearray, public_key: bytes):
        if len(private_key) != 32:
            raise DerivationError(f"Invalid private key length: {len(private_key)}")
        self._private_key = bytearray(private_key)
        self.public_key = bytes(public_key)
        self._wiped = False

    @property
    def private_key(self) -> bytearray:
        if self._wiped:
            raise DerivationError("Private key has already been wiped")
        return self._private_key

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex()

    def address(self, prefix: str = "osmo") -> str:
        return address_of(self.public_key, prefix)

    def wipe(self) -> None:
        _zero(self._private_key)
        self._wiped = True

    def __enter__(self) -> KeyPair:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.wipe()

    def __del__(self) -> None:
        buffer = getattr(self, "_private_key", None)
        if buffer is not None:
            _zero(buffer)

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key_hex})"


def validate_mnemonic(phrase: SecretPhrase | str) -> None:
    """
    Check BIP39 wordlist membership and checksum.

    Raises:
        InvalidMnemonic: If any word is unknown or the checksum does not match
    """
    text = phrase.reveal() if isinstance(phrase, SecretPhrase) else phrase
    if not Mnemonic("english").check(text):
        raise InvalidMnemonic("Mnemonic failed BIP39 wordlist/checksum validation")


def derive(
    phrase: SecretPhrase | str,
    path: str = COSMOS_HD_PATH,
    passphrase: str = "",
) -> KeyPair:
    """
    Derive the key pair for ``path`` from a BIP39 mnemonic.

    Args:
        phrase: Mnemonic phrase
        path: BIP32 derivation path
        passphrase: Optional BIP39 passphrase (the "25th word")

    Returns:
        KeyPair at the given path

    Raises:
        InvalidMnemonic: If the mnemonic checksum fails
        DerivationError: On curve arithmetic failure (fatal, not retried)
    """
    validate_mnemonic(phrase)

    mnemonic_bytes = phrase.as_bytes() if isinstance(phrase, SecretPhrase) else phrase
    seed = mnemonic_to_seed(mnemonic_bytes, passphrase)
    try:
        child = HDKey.from_seed(seed).derive(path)
    finally:
        _zero(seed)

    return KeyPair(child.get_private_key_bytes(), child.get_public_key_bytes())


__all__ = ["COSMOS_HD_PATH", "KeyPair", "derive", "validate_mnemonic", "address_of"]

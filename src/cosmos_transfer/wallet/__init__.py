"""
Wallet key derivation.
"""

from cosmos_transfer.wallet.bip32 import HDKey, mnemonic_to_seed
from cosmos_transfer.wallet.keys import COSMOS_HD_PATH, KeyPair, address_of, derive

__all__ = ["HDKey", "KeyPair", "COSMOS_HD_PATH", "address_of", "derive", "mnemonic_to_seed"]

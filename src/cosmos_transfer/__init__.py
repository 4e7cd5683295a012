"""
cosmos-transfer: send tokens on a Cosmos test network from a BIP39 mnemonic.

Pipeline: SecretSource -> key derivation -> transaction builder -> signer -> broadcaster.
"""

from cosmos_transfer.errors import TransferError
from cosmos_transfer.models import BroadcastResult, Coin, parse_coin

__version__ = "0.1.0"

__all__ = ["TransferError", "BroadcastResult", "Coin", "parse_coin", "__version__"]

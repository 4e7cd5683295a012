"""
Chain endpoint backends.
"""

from cosmos_transfer.backends.base import AccountInfoProvider, ChainBackend, TransactionSubmitter
from cosmos_transfer.backends.rest import RestBackend

__all__ = ["AccountInfoProvider", "TransactionSubmitter", "ChainBackend", "RestBackend"]

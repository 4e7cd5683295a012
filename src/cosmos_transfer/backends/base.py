"""
Capability interfaces the pipeline needs from a chain endpoint.

Keeping them minimal lets tests run the whole pipeline against stubs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cosmos_transfer.models import AccountInfo, BroadcastResult


class AccountInfoProvider(ABC):
    """Read-only account and chain queries."""

    @abstractmethod
    async def get_account(self, address: str) -> AccountInfo:
        """
        Fetch account number and sequence.

        Raises:
            AccountNotFound: If the account does not exist on chain
            NetworkConnectionError: If the endpoint is unreachable
        """

    @abstractmethod
    async def get_chain_id(self) -> str:
        """Chain identifier reported by the node."""

    @abstractmethod
    async def get_balance(self, address: str, denom: str) -> int:
        """Spendable balance of ``denom`` held by ``address``."""


class TransactionSubmitter(ABC):
    """Transaction simulation, submission and lookup."""

    @abstractmethod
    async def simulate(self, tx_bytes: bytes) -> int:
        """
        Dry-run a transaction.

        Returns:
            Gas used

        Raises:
            RejectedByNetwork: If the transaction would fail
        """

    @abstractmethod
    async def broadcast(self, tx_bytes: bytes) -> BroadcastResult:
        """
        Submit a signed transaction once and wait for the CheckTx verdict.

        Returns:
            Result with status ACCEPTED

        Raises:
            RejectedByNetwork: If CheckTx fails
            NetworkConnectionError: If the endpoint is unreachable
        """

    @abstractmethod
    async def get_tx(self, txhash: str) -> BroadcastResult | None:
        """
        Look up an included transaction.

        Returns:
            COMMITTED or REJECTED result, or None if not (yet) found
        """

    async def close(self) -> None:
        """Release network resources."""


class ChainBackend(AccountInfoProvider, TransactionSubmitter):
    """An endpoint offering both capabilities."""

"""
Error taxonomy for the transfer pipeline.

Every error carries a stable machine-readable ``code`` and the process
``exit_code`` the CLI uses when it ends an invocation.
"""

from __future__ import annotations


class TransferError(Exception):
    """Base class for all errors raised by the transfer pipeline."""

    code = "TRANSFER_ERROR"
    exit_code = 1


class TransferCancelled(TransferError):
    """The user declined at the confirmation prompt. Nothing was broadcast."""

    code = "CANCELLED"
    exit_code = 1


class InvalidArgument(TransferError):
    code = "INVALID_ARGUMENT"
    exit_code = 2


class InvalidAmount(InvalidArgument):
    code = "INVALID_AMOUNT"


class ChainIdMismatch(InvalidArgument):
    code = "CHAIN_ID_MISMATCH"


class SecretUnavailable(TransferError):
    code = "SECRET_UNAVAILABLE"
    exit_code = 3


class InvalidMnemonic(SecretUnavailable):
    code = "INVALID_MNEMONIC"


class InvalidAddress(TransferError):
    code = "INVALID_ADDRESS"
    exit_code = 4


class InvalidDenomination(TransferError):
    code = "INVALID_DENOMINATION"
    exit_code = 4


class NetworkError(TransferError):
    code = "NETWORK_ERROR"
    exit_code = 5


class NetworkConnectionError(NetworkError):
    """Endpoint unreachable or failing. Retryable by the user, never automatically."""

    code = "CONNECTION_ERROR"

    def __init__(self, message: str, txhash: str | None = None):
        super().__init__(message)
        self.txhash = txhash


class RejectedByNetwork(TransferError):
    """The network refused the transaction (CheckTx or DeliverTx failure)."""

    code = "REJECTED_BY_NETWORK"
    exit_code = 6

    def __init__(
        self,
        message: str,
        *,
        reason: str,
        network_code: int,
        codespace: str = "",
        txhash: str | None = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.network_code = network_code
        self.codespace = codespace
        self.txhash = txhash


class AccountNotFound(RejectedByNetwork):
    code = "ACCOUNT_NOT_FOUND"

    def __init__(self, address: str):
        super().__init__(
            f"Account {address} does not exist on chain (never funded?)",
            reason="account_not_found",
            network_code=5,
            codespace="sdk",
        )
        self.address = address


class TimedOutPendingUnknown(TransferError):
    """Accepted by the node but inclusion was not observed in time. Outcome unknown."""

    code = "TIMED_OUT_PENDING_UNKNOWN"
    exit_code = 7

    def __init__(self, txhash: str, timeout: float):
        super().__init__(
            f"Transaction {txhash} was accepted but not seen in a block within "
            f"{timeout:g}s. It may still be included; query the chain to find out."
        )
        self.txhash = txhash
        self.timeout = timeout


class DerivationError(TransferError):
    code = "DERIVATION_ERROR"
    exit_code = 8


class SigningError(TransferError):
    code = "SIGNING_ERROR"
    exit_code = 8


__all__ = [
    "TransferError",
    "TransferCancelled",
    "InvalidArgument",
    "InvalidAmount",
    "ChainIdMismatch",
    "SecretUnavailable",
    "InvalidMnemonic",
    "InvalidAddress",
    "InvalidDenomination",
    "NetworkError",
    "NetworkConnectionError",
    "RejectedByNetwork",
    "AccountNotFound",
    "TimedOutPendingUnknown",
    "DerivationError",
    "SigningError",
]

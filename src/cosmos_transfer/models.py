"""
Transfer data models.
"""

from __future__ import annotations

import hashlib
import re
from enum import Enum

from pydantic.dataclasses import dataclass

from cosmos_transfer.errors import InvalidAmount, InvalidArgument

# Cosmos SDK denomination syntax (sdk.Coin validation)
DENOM_PATTERN = r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}"
DENOM_RE = re.compile(rf"^{DENOM_PATTERN}$")
COIN_RE = re.compile(rf"^([0-9]+)({DENOM_PATTERN})$")

# Cosmos SDK auth default for MaxMemoCharacters
MAX_MEMO_CHARACTERS = 256


@dataclass(frozen=True)
class Coin:
    """An integer amount of a single denomination (e.g. 1000 uosmo)."""

    amount: int
    denom: str

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise InvalidAmount(f"Amount must be non-negative, got {self.amount}")

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


def parse_coin(value: str) -> Coin:
    """
    Parse ``<amount><denom>`` into a Coin.

    Args:
        value: e.g. "1000uosmo" or "5ibc/27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2"

    Returns:
        Parsed Coin

    Raises:
        InvalidArgument: If the string is not an integer immediately followed by a denom
    """
    match = COIN_RE.match(value.strip())
    if not match:
        raise InvalidArgument(
            f"Invalid coin '{value}': expected <amount><denom>, e.g. 1000uosmo"
        )
    return Coin(amount=int(match.group(1)), denom=match.group(2))


def is_valid_denom(denom: str) -> bool:
    return bool(DENOM_RE.match(denom))


@dataclass(frozen=True)
class Fee:
    """Transaction fee: the coin paid plus the gas limit it buys."""

    amount: Coin
    gas_limit: int


@dataclass(frozen=True)
class AccountInfo:
    """On-chain account state needed to sign (from the auth module)."""

    address: str
    account_number: int
    sequence: int


@dataclass(frozen=True)
class UnsignedTransaction:
    """A bank send, fully specified but not yet signed."""

    sender: str
    recipient: str
    amount: Coin
    fee: Fee
    sequence: int
    account_number: int
    chain_id: str
    memo: str = ""


@dataclass(frozen=True)
class SignedTransaction:
    """
    An UnsignedTransaction together with its encoded body/auth info and signature.

    ``body_bytes`` and ``auth_info_bytes`` are exactly the bytes that were
    signed; the network verifies the signature against them, not against the
    decoded fields.
    """

    tx: UnsignedTransaction
    body_bytes: bytes
    auth_info_bytes: bytes
    signature: bytes
    public_key: bytes

    @property
    def tx_bytes(self) -> bytes:
        """TxRaw encoding, ready for broadcast."""
        from cosmos_transfer.tx.proto import encode_tx_raw

        return encode_tx_raw(self.body_bytes, self.auth_info_bytes, [self.signature])

    @property
    def txhash(self) -> str:
        """Transaction hash as reported by the chain (upper-case hex SHA256 of TxRaw)."""
        return hashlib.sha256(self.tx_bytes).hexdigest().upper()


class BroadcastStatus(str, Enum):
    ACCEPTED = "accepted"  # passed CheckTx, inclusion not (yet) observed
    COMMITTED = "committed"  # included in a block with code 0
    REJECTED = "rejected"  # refused at CheckTx, or included with a non-zero code


@dataclass(frozen=True)
class BroadcastResult:
    """Outcome of a successful submission."""

    txhash: str
    status: BroadcastStatus
    code: int = 0
    height: int = 0
    codespace: str = ""
    raw_log: str = ""
    gas_wanted: int = 0
    gas_used: int = 0

    @property
    def is_committed(self) -> bool:
        return self.status == BroadcastStatus.COMMITTED

    def summary(self) -> dict[str, int | str]:
        """Compact summary printed by the CLI."""
        return {"Code": self.code, "Height": self.height, "TxHash": self.txhash}


__all__ = [
    "Coin",
    "Fee",
    "AccountInfo",
    "UnsignedTransaction",
    "SignedTransaction",
    "BroadcastStatus",
    "BroadcastResult",
    "parse_coin",
    "is_valid_denom",
    "MAX_MEMO_CHARACTERS",
]

"""
Transfer transaction construction.

The builder validates inputs and produces an immutable UnsignedTransaction;
``encode_body`` / ``encode_auth_info`` give the exact bytes that get signed.
No network access happens here: sequence, account number and chain id come
from the caller.
"""

from __future__ import annotations

from collections.abc import Collection

from loguru import logger

from cosmos_transfer.address import validate_address
from cosmos_transfer.errors import InvalidAmount, InvalidArgument, InvalidDenomination
from cosmos_transfer.models import (
    MAX_MEMO_CHARACTERS,
    Coin,
    Fee,
    UnsignedTransaction,
    is_valid_denom,
)
from cosmos_transfer.tx import proto

DEFAULT_GAS_LIMIT = 200_000
# Gas limit, sequence and account number are uint64 on the wire
MAX_UINT64 = 2**64 - 1
DEFAULT_DENOMINATIONS = frozenset({"uosmo"})


def check_denom(coin: Coin, denominations: Collection[str], what: str = "amount") -> None:
    """
    Raises:
        InvalidDenomination: If the denom is malformed or not in ``denominations``
    """
    if not is_valid_denom(coin.denom):
        raise InvalidDenomination(f"Malformed {what} denomination: '{coin.denom}'")
    if coin.denom not in denominations:
        raise InvalidDenomination(
            f"Unrecognized {what} denomination '{coin.denom}'. "
            f"Accepted: {', '.join(sorted(denominations))}"
        )


def build(
    sender: str,
    recipient: str,
    amount: Coin,
    fee: Coin | Fee,
    sequence: int,
    chain_id: str,
    memo: str | None = None,
    *,
    account_number: int = 0,
    prefix: str = "osmo",
    denominations: Collection[str] = DEFAULT_DENOMINATIONS,
) -> UnsignedTransaction:
    """
    Build an unsigned bank send.

    Args:
        sender: Sender account address (must match the signing key)
        recipient: Destination account address
        amount: Coin to transfer (amount must be > 0)
        fee: Fee coin (gas limit defaults to DEFAULT_GAS_LIMIT) or full Fee
        sequence: Sender account sequence from the account lookup
        chain_id: Target chain identifier (e.g. "osmo-test-5")
        memo: Optional memo
        account_number: Sender account number from the account lookup
        prefix: Bech32 prefix all addresses must carry
        denominations: Recognised denominations

    Returns:
        UnsignedTransaction

    Raises:
        InvalidAmount: If amount is zero
        InvalidAddress: If sender or recipient is malformed or has the wrong prefix
        InvalidDenomination: If a denomination is not recognised
        InvalidArgument: On out-of-range gas, sequence or account number, a missing
            chain id, or an oversized memo
    """
    if amount.amount <= 0:
        raise InvalidAmount(f"Transfer amount must be greater than zero, got {amount}")
    check_denom(amount, denominations, "amount")

    if not isinstance(fee, Fee):
        fee = Fee(amount=fee, gas_limit=DEFAULT_GAS_LIMIT)
    check_denom(fee.amount, denominations, "fee")
    if fee.gas_limit <= 0:
        raise InvalidArgument(f"Gas limit must be positive, got {fee.gas_limit}")
    if fee.gas_limit > MAX_UINT64:
        raise InvalidArgument(f"Gas limit {fee.gas_limit} does not fit in 64 bits")

    validate_address(sender, prefix)
    validate_address(recipient, prefix)

    if sequence < 0 or account_number < 0:
        raise InvalidArgument("Sequence and account number must be non-negative")
    if sequence > MAX_UINT64 or account_number > MAX_UINT64:
        raise InvalidArgument("Sequence and account number must fit in 64 bits")
    if not chain_id:
        raise InvalidArgument("Chain id is required")

    memo = memo or ""
    if len(memo) > MAX_MEMO_CHARACTERS:
        raise InvalidArgument(
            f"Memo is {len(memo)} characters, maximum is {MAX_MEMO_CHARACTERS}"
        )

    tx = UnsignedTransaction(
        sender=sender,
        recipient=recipient,
        amount=amount,
        fee=fee,
        sequence=sequence,
        account_number=account_number,
        chain_id=chain_id,
        memo=memo,
    )
    logger.debug(
        f"Built transfer of {amount} {sender} -> {recipient} "
        f"(fee {fee.amount}, gas {fee.gas_limit}, seq {sequence}, chain {chain_id})"
    )
    return tx


def encode_body(tx: UnsignedTransaction) -> bytes:
    """TxBody bytes holding the single MsgSend."""
    msg = proto.encode_msg_send(tx.sender, tx.recipient, [(tx.amount.denom, tx.amount.amount)])
    return proto.encode_tx_body([proto.encode_any(proto.MSG_SEND_TYPE_URL, msg)], memo=tx.memo)


def encode_auth_info(tx: UnsignedTransaction, public_key: bytes) -> bytes:
    """AuthInfo bytes: one SIGN_MODE_DIRECT signer plus the fee."""
    # Zero coins are invalid in sdk.Coins; a free tx carries an empty fee amount
    fee_coins = [(tx.fee.amount.denom, tx.fee.amount.amount)] if tx.fee.amount.amount else []
    return proto.encode_auth_info(
        [proto.encode_signer_info(public_key, tx.sequence)],
        proto.encode_fee(fee_coins, tx.fee.gas_limit),
    )

"""
End-to-end transfer: mnemonic -> keys -> account lookup -> build -> sign -> broadcast.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from cosmos_transfer.address import validate_address
from cosmos_transfer.backends.base import ChainBackend
from cosmos_transfer.broadcast import Broadcaster
from cosmos_transfer.cli_common import ResolvedEndpointSettings
from cosmos_transfer.errors import ChainIdMismatch, NetworkError, SigningError, TransferCancelled
from cosmos_transfer.models import BroadcastResult, Coin, Fee, UnsignedTransaction
from cosmos_transfer.secret import SecretPhrase
from cosmos_transfer.settings import ChainSettings
from cosmos_transfer.tx.builder import build, check_denom
from cosmos_transfer.tx.signing import sign, verify
from cosmos_transfer.wallet.keys import COSMOS_HD_PATH, KeyPair, derive


@dataclass(frozen=True)
class TransferRequest:
    """What the user asked for on the command line."""

    amount: Coin
    destination: str
    memo: str = ""
    fee: Coin | None = None
    gas_limit: int | None = None


def compute_fee(gas_limit: int, gas_price: float, denom: str) -> Coin:
    """Fee covering ``gas_limit`` at ``gas_price``, rounded up to a whole unit."""
    return Coin(amount=math.ceil(gas_limit * gas_price), denom=denom)


async def resolve_chain_id(backend: ChainBackend, expected: str | None) -> str:
    """
    Ask the node for its chain id and check it against the configured one.

    Raises:
        ChainIdMismatch: If a chain id is configured and the node reports another
    """
    node_chain_id = await backend.get_chain_id()
    if expected and node_chain_id != expected:
        raise ChainIdMismatch(
            f"Endpoint serves chain '{node_chain_id}' but '{expected}' is configured"
        )
    return node_chain_id


async def estimate_gas_limit(
    backend: ChainBackend,
    tx: UnsignedTransaction,
    key: KeyPair,
    gas_adjustment: float,
) -> int:
    """Simulate ``tx`` and scale the gas used by ``gas_adjustment``."""
    gas_used = await backend.simulate(sign(tx, key).tx_bytes)
    gas_limit = math.ceil(gas_used * gas_adjustment)
    logger.info(f"Simulated gas used {gas_used:,}, gas limit {gas_limit:,}")
    return gas_limit


async def execute_transfer(
    request: TransferRequest,
    phrase: SecretPhrase,
    backend: ChainBackend,
    chain: ChainSettings,
    endpoint: ResolvedEndpointSettings,
    *,
    bip39_passphrase: str = "",
    confirm: Callable[[UnsignedTransaction], bool] | None = None,
) -> BroadcastResult:
    """
    Run one transfer.

    Args:
        request: Amount, destination and optional memo/fee/gas overrides
        phrase: Mnemonic; wiped as soon as the key pair is derived
        backend: Endpoint providing account lookup and submission
        chain: Chain parameters (prefix, denominations, gas pricing)
        endpoint: Resolved endpoint and broadcast settings
        bip39_passphrase: Optional BIP39 passphrase
        confirm: Called with the final transaction before broadcast; False cancels

    Returns:
        BroadcastResult (COMMITTED, or ACCEPTED when not waiting for inclusion)

    Raises:
        TransferError: Any pipeline failure; nothing is retried
    """
    # Cheap local checks first so bad input never touches the secret or the network
    validate_address(request.destination, chain.address_prefix)
    check_denom(request.amount, chain.denominations, "amount")
    if request.fee is not None:
        check_denom(request.fee, chain.denominations, "fee")

    # The mnemonic is not needed past derivation
    try:
        key = derive(phrase, COSMOS_HD_PATH, bip39_passphrase)
    finally:
        phrase.wipe()

    with key:
        sender = key.address(chain.address_prefix)
        logger.info(f"Sender wallet address: {sender}")
        logger.info(f"Destination wallet address: {request.destination}")

        chain_id = await resolve_chain_id(backend, endpoint.chain_id)
        account = await backend.get_account(sender)

        try:
            balance = await backend.get_balance(sender, request.amount.denom)
            logger.info(f"Balance: {balance:,}{request.amount.denom}")
        except NetworkError as e:
            logger.warning(f"Could not fetch balance: {e}")

        def _build(fee: Coin, gas_limit: int) -> UnsignedTransaction:
            return build(
                sender,
                request.destination,
                request.amount,
                Fee(amount=fee, gas_limit=gas_limit),
                account.sequence,
                chain_id,
                request.memo,
                account_number=account.account_number,
                prefix=chain.address_prefix,
                denominations=chain.denominations,
            )

        gas_limit = request.gas_limit or chain.gas_limit
        if request.gas_limit is None and chain.simulate:
            draft = _build(compute_fee(gas_limit, chain.gas_price, chain.fee_denom), gas_limit)
            gas_limit = await estimate_gas_limit(backend, draft, key, chain.gas_adjustment)

        fee = request.fee or compute_fee(gas_limit, chain.gas_price, chain.fee_denom)
        tx = _build(fee, gas_limit)
        signed = sign(tx, key)

    if not verify(signed):
        raise SigningError("Produced signature does not verify")

    if confirm is not None and not confirm(tx):
        raise TransferCancelled("Transaction cancelled by user")

    broadcaster = Broadcaster(
        backend,
        wait_for_inclusion=endpoint.wait_for_inclusion,
        timeout=endpoint.inclusion_timeout,
        poll_interval=endpoint.poll_interval,
    )
    return await broadcaster.submit(signed)

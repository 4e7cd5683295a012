"""
Transfer command.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from cosmos_transfer.cli import app
from cosmos_transfer.cli_common import (
    ResolvedEndpointSettings,
    log_resolved_settings,
    resolve_endpoint_settings,
    setup_cli,
)
from cosmos_transfer.errors import SecretUnavailable, TransferError
from cosmos_transfer.models import BroadcastResult, Coin, UnsignedTransaction, parse_coin
from cosmos_transfer.secret import SecretPhrase, SecretSource, resolve_bip39_passphrase
from cosmos_transfer.settings import ChainSettings
from cosmos_transfer.tx.builder import MAX_UINT64


@app.command()
def send(
    coin: Annotated[str, typer.Argument(help="Amount and denomination, e.g. 1000uosmo")],
    destination: Annotated[str, typer.Argument(help="Destination address (osmo1...)")],
    mnemonic_file: Annotated[
        Path | None,
        typer.Option("--mnemonic-file", "-f", help="Mnemonic file (default: wallet/wallet.key)"),
    ] = None,
    fee: Annotated[
        str | None,
        typer.Option("--fee", help="Explicit fee, e.g. 5000uosmo (default: gas x gas price)"),
    ] = None,
    gas: Annotated[
        int | None,
        typer.Option(
            "--gas", help="Explicit gas limit (default: simulate)", min=1, max=MAX_UINT64
        ),
    ] = None,
    memo: Annotated[str, typer.Option("--memo", help="Transaction memo")] = "",
    rest_url: Annotated[
        str | None, typer.Option("--rest-url", help="REST (LCD) endpoint")
    ] = None,
    chain_id: Annotated[str | None, typer.Option("--chain-id", help="Expected chain id")] = None,
    wait: Annotated[
        bool | None,
        typer.Option("--wait/--no-wait", help="Wait for block inclusion after broadcast"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Seconds to wait for inclusion"),
    ] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", "-l", help="Log level"),
    ] = None,
) -> None:
    """Send tokens from the wallet to an address."""
    settings = setup_cli(log_level)

    endpoint = resolve_endpoint_settings(
        settings,
        rest_url=rest_url,
        chain_id=chain_id,
        wait_for_inclusion=wait,
        inclusion_timeout=timeout,
    )
    log_resolved_settings(endpoint)

    phrase: SecretPhrase | None = None
    try:
        amount = parse_coin(coin)
        explicit_fee = parse_coin(fee) if fee is not None else None

        if mnemonic_file is not None and not mnemonic_file.is_file():
            raise SecretUnavailable(f"Mnemonic file not found: {mnemonic_file}")
        source = SecretSource(
            mnemonic_file=mnemonic_file or Path(settings.wallet.mnemonic_file),
            env_var=settings.wallet.mnemonic_env,
        )
        phrase = source.load()
        configured_passphrase = settings.wallet.bip39_passphrase
        bip39_passphrase = resolve_bip39_passphrase(
            configured=(
                configured_passphrase.get_secret_value() if configured_passphrase else None
            )
        )

        result = asyncio.run(
            _send_transfer(
                amount,
                destination,
                phrase,
                settings.chain,
                endpoint,
                memo=memo,
                fee=explicit_fee,
                gas_limit=gas,
                bip39_passphrase=bip39_passphrase,
                skip_confirmation=yes,
            )
        )
    except TransferError as e:
        txhash = getattr(e, "txhash", None)
        logger.error(f"[{e.code}] {e}")
        if txhash:
            logger.error(f"Transaction hash: {txhash}")
        raise typer.Exit(e.exit_code)
    except RuntimeError as e:
        logger.error(str(e))
        raise typer.Exit(1)
    finally:
        if phrase is not None:
            phrase.wipe()

    if result.is_committed:
        logger.success(f"Transaction committed at height {result.height}: {result.txhash}")
    else:
        logger.info(f"Transaction accepted into mempool: {result.txhash}")
    typer.echo(json.dumps(result.summary()))


async def _send_transfer(
    amount: Coin,
    destination: str,
    phrase: SecretPhrase,
    chain: ChainSettings,
    endpoint: ResolvedEndpointSettings,
    *,
    memo: str,
    fee: Coin | None,
    gas_limit: int | None,
    bip39_passphrase: str,
    skip_confirmation: bool,
) -> BroadcastResult:
    """Transfer implementation."""
    from cosmos_transfer.backends.rest import RestBackend
    from cosmos_transfer.confirmation import confirm_transaction
    from cosmos_transfer.pipeline import TransferRequest, execute_transfer

    def _confirm(tx: UnsignedTransaction) -> bool:
        return confirm_transaction(
            amount=str(tx.amount),
            destination=tx.recipient,
            fee=str(tx.fee.amount),
            additional_info={
                "Sender": tx.sender,
                "Chain id": tx.chain_id,
                "Gas limit": f"{tx.fee.gas_limit:,}",
                "Memo": tx.memo or "(none)",
            },
            skip_confirmation=skip_confirmation,
        )

    backend = RestBackend(endpoint.rest_url, timeout=endpoint.request_timeout)
    try:
        return await execute_transfer(
            TransferRequest(
                amount=amount,
                destination=destination,
                memo=memo,
                fee=fee,
                gas_limit=gas_limit,
            ),
            phrase,
            backend,
            chain,
            endpoint,
            bip39_passphrase=bip39_passphrase,
            confirm=_confirm,
        )
    finally:
        await backend.close()

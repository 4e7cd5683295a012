"""
Cosmos SDK REST (LCD / gRPC-gateway) backend.
Works with any public or self-hosted node exposing the standard API.
"""

from __future__ import annotations

import base64
from typing import Any

import httpx
from loguru import logger

from cosmos_transfer.backends.base import ChainBackend
from cosmos_transfer.errors import (
    AccountNotFound,
    NetworkConnectionError,
    NetworkError,
    RejectedByNetwork,
)
from cosmos_transfer.models import AccountInfo, BroadcastResult, BroadcastStatus

DEFAULT_REQUEST_TIMEOUT = 30.0

# Cosmos SDK root codespace errors (types/errors/errors.go)
SDK_ERROR_REASONS: dict[int, str] = {
    2: "tx_decode",
    3: "invalid_sequence",
    4: "unauthorized",
    5: "insufficient_funds",
    6: "unknown_request",
    7: "invalid_address",
    8: "invalid_pubkey",
    9: "unknown_address",
    10: "invalid_coins",
    11: "out_of_gas",
    12: "memo_too_large",
    13: "insufficient_fee",
    18: "invalid_request",
    19: "tx_in_mempool_cache",
    20: "mempool_is_full",
    21: "tx_too_large",
    28: "invalid_chain_id",
    30: "tx_timeout_height",
    32: "incorrect_account_sequence",
}

# gRPC-gateway errors only carry free text; the sdk error message is its suffix
_MESSAGE_TO_SDK_CODE: tuple[tuple[str, int], ...] = (
    ("incorrect account sequence", 32),
    ("insufficient funds", 5),
    ("insufficient fee", 13),
    ("out of gas", 11),
    ("signature verification failed", 4),
    ("unauthorized", 4),
    ("invalid address", 7),
    ("invalid coins", 10),
    ("memo too large", 12),
    ("tx parse error", 2),
    ("invalid chain-id", 28),
)

# gRPC status NOT_FOUND
GRPC_NOT_FOUND = 5


def reason_for(code: int, codespace: str = "sdk") -> str:
    """Stable reason name for a network error code."""
    if codespace in ("", "sdk") and code in SDK_ERROR_REASONS:
        return SDK_ERROR_REASONS[code]
    return f"{codespace or 'sdk'}_{code}"


def _rejection_from_message(message: str, txhash: str | None = None) -> RejectedByNetwork:
    lowered = message.lower()
    code = next((c for phrase, c in _MESSAGE_TO_SDK_CODE if phrase in lowered), 1)
    reason = reason_for(code) if code != 1 else "unknown"
    return RejectedByNetwork(
        f"Rejected by network ({reason}): {message}",
        reason=reason,
        network_code=code,
        codespace="sdk",
        txhash=txhash,
    )


def _unwrap_base_account(account: dict[str, Any]) -> dict[str, Any]:
    """Find the BaseAccount inside module/vesting account wrappers."""
    if "account_number" in account:
        return account
    for key in ("base_account", "base_vesting_account"):
        if key in account:
            return _unwrap_base_account(account[key])
    raise NetworkError(f"Unsupported account type: {account.get('@type', 'unknown')}")


def parse_tx_response(data: dict[str, Any], default_status: BroadcastStatus) -> BroadcastResult:
    """Convert a ``tx_response`` JSON object into a BroadcastResult."""
    code = int(data.get("code", 0))
    return BroadcastResult(
        txhash=str(data.get("txhash", "")).upper(),
        status=default_status if code == 0 else BroadcastStatus.REJECTED,
        code=code,
        height=int(data.get("height", 0) or 0),
        codespace=data.get("codespace", "") or "",
        raw_log=data.get("raw_log", "") or "",
        gas_wanted=int(data.get("gas_wanted", 0) or 0),
        gas_used=int(data.get("gas_used", 0) or 0),
    )


def rejection_from_result(result: BroadcastResult) -> RejectedByNetwork:
    reason = reason_for(result.code, result.codespace)
    return RejectedByNetwork(
        f"Rejected by network ({reason}, code {result.code}): {result.raw_log}",
        reason=reason,
        network_code=result.code,
        codespace=result.codespace,
        txhash=result.txhash or None,
    )


class RestBackend(ChainBackend):
    """
    Chain backend using the Cosmos SDK REST API.

    Usage:
        backend = RestBackend("https://lcd.osmotest5.osmosis.zone")
        account = await backend.get_account("osmo1...")
        result = await backend.broadcast(signed.tx_bytes)
        await backend.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: REST endpoint root
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"Request to {self.base_url}{path} failed: {e!r}")
            raise NetworkConnectionError(f"Cannot reach {self.base_url}: {e!r}") from e

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(
                f"Malformed response from {response.request.url} (HTTP {response.status_code})"
            ) from e
        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected response shape from {response.request.url}")
        return data

    def _check_server_error(self, response: httpx.Response) -> None:
        if response.status_code >= 500:
            raise NetworkConnectionError(
                f"Endpoint error HTTP {response.status_code} from {response.request.url}: "
                f"{response.text[:200]}"
            )

    async def get_account(self, address: str) -> AccountInfo:
        response = await self._request("GET", f"/cosmos/auth/v1beta1/accounts/{address}")
        if response.status_code == 404:
            raise AccountNotFound(address)
        self._check_server_error(response)
        data = self._json(response)

        if response.status_code != 200:
            if data.get("code") == GRPC_NOT_FOUND or "not found" in str(data.get("message", "")):
                raise AccountNotFound(address)
            raise NetworkError(f"Account lookup failed: {data.get('message', response.text)}")

        try:
            base = _unwrap_base_account(data["account"])
            info = AccountInfo(
                address=base.get("address", address),
                account_number=int(base.get("account_number", 0)),
                sequence=int(base.get("sequence", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"Malformed account response for {address}: {e}") from e

        logger.debug(
            f"Account {address}: number={info.account_number}, sequence={info.sequence}"
        )
        return info

    async def get_chain_id(self) -> str:
        response = await self._request("GET", "/cosmos/base/tendermint/v1beta1/node_info")
        self._check_server_error(response)
        data = self._json(response)
        try:
            chain_id = data["default_node_info"]["network"]
        except (KeyError, TypeError) as e:
            raise NetworkError("Node info response has no chain id") from e
        logger.debug(f"Node reports chain id {chain_id}")
        return str(chain_id)

    async def get_balance(self, address: str, denom: str) -> int:
        response = await self._request(
            "GET",
            f"/cosmos/bank/v1beta1/balances/{address}/by_denom",
            params={"denom": denom},
        )
        self._check_server_error(response)
        data = self._json(response)
        if response.status_code != 200:
            raise NetworkError(f"Balance query failed: {data.get('message', response.text)}")
        balance = data.get("balance") or {}
        return int(balance.get("amount", 0))

    async def simulate(self, tx_bytes: bytes) -> int:
        response = await self._request(
            "POST",
            "/cosmos/tx/v1beta1/simulate",
            json={"tx_bytes": base64.b64encode(tx_bytes).decode("ascii")},
        )
        self._check_server_error(response)
        data = self._json(response)
        if response.status_code != 200:
            raise _rejection_from_message(str(data.get("message", response.text)))

        try:
            gas_used = int(data["gas_info"]["gas_used"])
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError("Simulation response has no gas_info.gas_used") from e
        logger.debug(f"Simulated gas used: {gas_used}")
        return gas_used

    async def broadcast(self, tx_bytes: bytes) -> BroadcastResult:
        response = await self._request(
            "POST",
            "/cosmos/tx/v1beta1/txs",
            json={
                "tx_bytes": base64.b64encode(tx_bytes).decode("ascii"),
                "mode": "BROADCAST_MODE_SYNC",
            },
        )
        self._check_server_error(response)
        data = self._json(response)
        if response.status_code != 200:
            raise _rejection_from_message(str(data.get("message", response.text)))

        if "tx_response" not in data:
            raise NetworkError("Broadcast response has no tx_response")
        result = parse_tx_response(data["tx_response"], BroadcastStatus.ACCEPTED)
        if result.status == BroadcastStatus.REJECTED:
            raise rejection_from_result(result)
        return result

    async def get_tx(self, txhash: str) -> BroadcastResult | None:
        response = await self._request("GET", f"/cosmos/tx/v1beta1/txs/{txhash}")
        if response.status_code == 404:
            return None
        if response.status_code != 200 and "not found" in response.text.lower():
            return None
        self._check_server_error(response)
        data = self._json(response)
        if response.status_code != 200:
            raise NetworkError(f"Tx lookup failed: {data.get('message', response.text)}")
        if "tx_response" not in data:
            raise NetworkError("Tx lookup response has no tx_response")
        return parse_tx_response(data["tx_response"], BroadcastStatus.COMMITTED)

    async def close(self) -> None:
        await self.client.aclose()

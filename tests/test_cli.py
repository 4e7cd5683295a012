"""
Tests for the cli-tool command (typer CliRunner, stubbed chain backend).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from _cosmos_transfer_test_helpers import (
    FUNDED_MNEMONIC,
    TEST_DESTINATION,
    StubBackend,
    committed,
)
from typer.testing import CliRunner

from cosmos_transfer.cli import app
from cosmos_transfer.errors import RejectedByNetwork

runner = CliRunner()


@pytest.fixture
def wallet_file() -> Path:
    path = Path("wallet") / "wallet.key"
    path.parent.mkdir()
    path.write_text(FUNDED_MNEMONIC + "\n")
    os.chmod(path, 0o600)
    return path


def invoke(backend: StubBackend, *args: str):
    with patch("cosmos_transfer.backends.rest.RestBackend", return_value=backend) as factory:
        result = runner.invoke(app, list(args))
    return result, factory


def summary_of(output: str) -> dict:
    line = next(line for line in output.splitlines() if line.startswith("{"))
    return json.loads(line)


def test_transfer_prints_summary(wallet_file: Path) -> None:
    backend = StubBackend(tx_lookups=[committed(height=321)])
    result, factory = invoke(backend, "1000uosmo", TEST_DESTINATION, "--yes")

    assert result.exit_code == 0, result.output
    summary = summary_of(result.stdout)
    assert summary["Code"] == 0
    assert summary["Height"] == 321
    assert len(summary["TxHash"]) == 64
    assert backend.closed
    assert factory.call_args.args[0] == "https://lcd.osmotest5.osmosis.zone"


def test_rest_url_option(wallet_file: Path) -> None:
    backend = StubBackend(tx_lookups=[committed()])
    result, factory = invoke(
        backend, "1000uosmo", TEST_DESTINATION, "-y", "--rest-url", "http://localhost:1317"
    )
    assert result.exit_code == 0, result.output
    assert factory.call_args.args[0] == "http://localhost:1317"


def test_no_wait(wallet_file: Path) -> None:
    backend = StubBackend()
    result, _ = invoke(backend, "1000uosmo", TEST_DESTINATION, "-y", "--no-wait")

    assert result.exit_code == 0, result.output
    assert summary_of(result.stdout)["Height"] == 0
    assert backend.lookups == []


def test_mnemonic_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MNEMONIC", FUNDED_MNEMONIC)
    result, _ = invoke(StubBackend(tx_lookups=[committed()]), "5uosmo", TEST_DESTINATION, "-y")
    assert result.exit_code == 0, result.output


def test_mnemonic_file_option(tmp_path: Path) -> None:
    path = tmp_path / "other.key"
    path.write_text(FUNDED_MNEMONIC)
    result, _ = invoke(
        StubBackend(tx_lookups=[committed()]),
        "5uosmo",
        TEST_DESTINATION,
        "-y",
        "--mnemonic-file",
        str(path),
    )
    assert result.exit_code == 0, result.output


def test_missing_arguments() -> None:
    result = runner.invoke(app, ["1000uosmo"])
    assert result.exit_code == 2


def test_invalid_amount(wallet_file: Path) -> None:
    backend = StubBackend()
    result, _ = invoke(backend, "lots", TEST_DESTINATION, "-y")
    assert result.exit_code == 2
    assert backend.broadcasts == []


def test_zero_amount(wallet_file: Path) -> None:
    result, _ = invoke(StubBackend(), "0uosmo", TEST_DESTINATION, "-y")
    assert result.exit_code == 2


def test_gas_must_be_positive(wallet_file: Path) -> None:
    result, _ = invoke(StubBackend(), "1uosmo", TEST_DESTINATION, "-y", "--gas", "0")
    assert result.exit_code == 2


def test_gas_beyond_uint64(wallet_file: Path) -> None:
    backend = StubBackend()
    result, _ = invoke(backend, "1uosmo", TEST_DESTINATION, "-y", "--gas", str(2**64))
    assert result.exit_code == 2
    assert backend.broadcasts == []


def test_no_mnemonic() -> None:
    result, _ = invoke(StubBackend(), "1000uosmo", TEST_DESTINATION, "-y")
    assert result.exit_code == 3


def test_invalid_mnemonic(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MNEMONIC", " ".join(["abandon"] * 12))
    result, _ = invoke(StubBackend(), "1000uosmo", TEST_DESTINATION, "-y")
    assert result.exit_code == 3


def test_invalid_address(wallet_file: Path) -> None:
    backend = StubBackend()
    result, _ = invoke(backend, "1000uosmo", "cosmos1invalid", "-y")
    assert result.exit_code == 4
    assert backend.broadcasts == []


def test_unknown_denomination(wallet_file: Path) -> None:
    result, _ = invoke(StubBackend(), "1000uatom", TEST_DESTINATION, "-y")
    assert result.exit_code == 4


def test_rejected(wallet_file: Path) -> None:
    rejection = RejectedByNetwork(
        "insufficient funds", reason="insufficient_funds", network_code=5, codespace="sdk"
    )
    backend = StubBackend(broadcast_outcomes=[rejection])
    result, _ = invoke(backend, "1000uosmo", TEST_DESTINATION, "-y")
    assert result.exit_code == 6
    assert len(backend.broadcasts) == 1


def test_account_not_found(wallet_file: Path) -> None:
    result, _ = invoke(StubBackend(accounts={}), "1000uosmo", TEST_DESTINATION, "-y")
    assert result.exit_code == 6


def test_chain_id_mismatch(wallet_file: Path) -> None:
    result, _ = invoke(
        StubBackend(chain_id="osmosis-1"), "1000uosmo", TEST_DESTINATION, "-y"
    )
    assert result.exit_code == 2


def test_timed_out(wallet_file: Path) -> None:
    backend = StubBackend()
    result, _ = invoke(backend, "1000uosmo", TEST_DESTINATION, "-y", "--timeout", "0.05")
    assert result.exit_code == 7
    assert len(backend.broadcasts) == 1


def test_non_interactive_without_yes(wallet_file: Path) -> None:
    backend = StubBackend()
    result, _ = invoke(backend, "1000uosmo", TEST_DESTINATION)
    assert result.exit_code == 1
    assert backend.broadcasts == []
    assert backend.closed


def test_confirmation_declined(wallet_file: Path) -> None:
    backend = StubBackend()
    with patch("cosmos_transfer.confirmation.confirm_transaction", return_value=False):
        result, _ = invoke(backend, "1000uosmo", TEST_DESTINATION)
    assert result.exit_code == 1
    assert backend.broadcasts == []


def test_log_file_written(wallet_file: Path) -> None:
    result, _ = invoke(StubBackend(tx_lookups=[committed()]), "1000uosmo", TEST_DESTINATION, "-y")
    assert result.exit_code == 0, result.output

    log_files = list(Path("logs").glob("cli-tool_*.log"))
    assert len(log_files) == 1
    content = log_files[0].read_text()
    assert "Sender wallet address: osmo1" in content
    assert FUNDED_MNEMONIC not in content


def test_explicit_mnemonic_file_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    # An explicit file never falls back to the environment
    monkeypatch.setenv("MNEMONIC", FUNDED_MNEMONIC)
    result, _ = invoke(
        StubBackend(), "1000uosmo", TEST_DESTINATION, "-y", "--mnemonic-file", "nope.key"
    )
    assert result.exit_code == 3

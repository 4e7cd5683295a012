"""
Pytest configuration and fixtures for cosmos-transfer tests.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from cosmos_transfer.settings import reset_settings


@pytest.fixture
def test_mnemonic() -> str:
    """Test mnemonic (BIP39 test vector)"""
    return (
        "abandon abandon abandon abandon abandon abandon "
        "abandon abandon abandon abandon abandon about"
    )


@pytest.fixture
def funded_mnemonic() -> str:
    """Well-known development mnemonic used as the sending wallet."""
    return "test test test test test test test test test test test junk"


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """
    Run every test in its own working directory with no user config.

    Keeps wallet/ and logs/ lookups and the config file away from the real
    home directory.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COSMOS_TRANSFER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("COSMOS_TRANSFER_CONFIG_FILE", str(tmp_path / "no-config.toml"))
    for var in ("MNEMONIC", "BIP39_PASSPHRASE", "NO_INTERACTIVE"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()

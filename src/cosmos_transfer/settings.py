"""
Settings management for cosmos-transfer.

This module provides a centralized configuration system using pydantic-settings
that supports:
1. TOML configuration file (~/.cosmos-transfer/config.toml)
2. Environment variables
3. CLI arguments (via typer, handled by the CLI)

Priority (highest to lowest):
1. CLI arguments
2. Environment variables
3. Config file
4. Default values

Environment Variable Naming:
    - Use uppercase with double underscore for nested settings
    - Examples: REST__URL, CHAIN__GAS_PRICE, BROADCAST__INCLUSION_TIMEOUT
    - Maps to TOML sections: REST__URL -> [rest] url
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cosmos_transfer.models import is_valid_denom
from cosmos_transfer.paths import CONFIG_FILE_ENV, get_default_data_dir


class ChainSettings(BaseModel):
    """Target chain parameters. Defaults describe the Osmosis testnet."""

    chain_id: str | None = Field(
        default="osmo-test-5",
        description="Expected chain id; checked against the node. Empty to trust the node",
    )
    address_prefix: str = Field(
        default="osmo",
        min_length=1,
        description="Bech32 human-readable prefix of account addresses",
    )
    denominations: list[str] = Field(
        default_factory=lambda: ["uosmo"],
        description="Denominations accepted for transfers and fees",
    )
    fee_denom: str = Field(
        default="uosmo",
        description="Denomination fees are paid in",
    )
    gas_price: float = Field(
        default=0.025,
        ge=0.0,
        description="Gas price in fee_denom per unit of gas",
    )
    gas_limit: int = Field(
        default=200_000,
        gt=0,
        description="Gas limit used when simulation is disabled",
    )
    simulate: bool = Field(
        default=True,
        description="Estimate gas by simulating the transaction first",
    )
    gas_adjustment: float = Field(
        default=1.3,
        ge=1.0,
        description="Multiplier applied to simulated gas",
    )

    @field_validator("denominations")
    @classmethod
    def check_denominations(cls, v: list[str]) -> list[str]:
        bad = [d for d in v if not is_valid_denom(d)]
        if bad:
            raise ValueError(f"Malformed denominations: {bad}")
        if not v:
            raise ValueError("At least one denomination is required")
        return v


class RestSettings(BaseModel):
    """REST endpoint configuration."""

    url: str = Field(
        default="https://lcd.osmotest5.osmosis.zone",
        description="Cosmos SDK REST (LCD) base URL",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Per-request timeout in seconds",
    )


class BroadcastSettings(BaseModel):
    """Submission behaviour."""

    wait_for_inclusion: bool = Field(
        default=True,
        description="Poll until the transaction is included in a block",
    )
    inclusion_timeout: float = Field(
        default=60.0,
        gt=0.0,
        description="Seconds to wait for inclusion before reporting an unknown outcome",
    )
    poll_interval: float = Field(
        default=2.0,
        gt=0.0,
        description="Seconds between inclusion polls",
    )


class WalletSettings(BaseModel):
    """Where the mnemonic comes from. The file wins over the environment variable."""

    mnemonic_file: str = Field(
        default="wallet/wallet.key",
        description="Mnemonic file (relative paths resolve against the working directory)",
    )
    mnemonic_env: str = Field(
        default="MNEMONIC",
        description="Environment variable read when the mnemonic file is absent",
    )
    bip39_passphrase: SecretStr | None = Field(
        default=None,
        description="Optional BIP39 passphrase (13th/25th word)",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Log level: TRACE, DEBUG, INFO, WARNING, ERROR",
    )
    file_logging: bool = Field(
        default=True,
        description="Also write each run to logs/cli-tool_<timestamp>.log",
    )
    log_dir: str = Field(
        default="logs",
        description="Directory for log files",
    )


class CosmosTransferSettings(BaseSettings):
    """
    Main settings class.

    Loads configuration from multiple sources with the following priority:
    1. CLI arguments (passed as init kwargs / overrides)
    2. Environment variables
    3. TOML config file
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    chain: ChainSettings = Field(default_factory=ChainSettings)
    rest: RestSettings = Field(default_factory=RestSettings)
    broadcast: BroadcastSettings = Field(default_factory=BroadcastSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Priority (highest to lowest):
        1. init_settings
        2. env_settings (environment variables with __ delimiter)
        3. toml_settings (config.toml file)
        """
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    Settings source that reads from a TOML config file.

    The file is $COSMOS_TRANSFER_CONFIG_FILE if set, else config.toml in the
    data directory.
    """

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        self._config: dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        config_path = get_config_path()

        if not config_path.exists():
            logger.debug(f"Config file not found at {config_path}, using defaults")
            return

        import tomllib

        try:
            with open(config_path, "rb") as f:
                self._config = tomllib.load(f)
            logger.debug(f"Loaded config from {config_path}")
        except tomllib.TOMLDecodeError as e:
            logger.error(f"Invalid TOML syntax in config file {config_path}: {e}")
            sys.exit(2)
        except OSError as e:
            logger.error(f"Failed to read config file {config_path}: {e}")
            sys.exit(2)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        value = self._config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return self._config


def get_config_path() -> Path:
    """Get the path to the config file."""
    env_path = os.environ.get(CONFIG_FILE_ENV)
    if env_path:
        return Path(env_path)
    return get_default_data_dir() / "config.toml"


# Global settings instance (lazy-loaded)
_settings: CosmosTransferSettings | None = None


def get_settings(**overrides: Any) -> CosmosTransferSettings:
    """
    Get the settings instance.

    On first call, loads settings from all sources. Subsequent calls
    return the cached instance unless reset_settings() is called.
    """
    global _settings
    if _settings is None or overrides:
        _settings = CosmosTransferSettings(**overrides)
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None


__all__ = [
    "CosmosTransferSettings",
    "ChainSettings",
    "RestSettings",
    "BroadcastSettings",
    "WalletSettings",
    "LoggingSettings",
    "get_settings",
    "reset_settings",
    "get_config_path",
]

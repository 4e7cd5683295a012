"""
Path utilities for the cosmos-transfer data and log directories.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

DATA_DIR_ENV = "COSMOS_TRANSFER_DATA_DIR"
CONFIG_FILE_ENV = "COSMOS_TRANSFER_CONFIG_FILE"

LOG_FILE_PREFIX = "cli-tool"


def get_default_data_dir() -> Path:
    """
    Get the default data directory.

    Returns ~/.cosmos-transfer or $COSMOS_TRANSFER_DATA_DIR if set.
    """
    env_path = os.getenv(DATA_DIR_ENV)
    return Path(env_path) if env_path else Path.home() / ".cosmos-transfer"


def get_log_file_path(log_dir: Path, now: datetime | None = None) -> Path:
    """
    Per-run log file: <log_dir>/cli-tool_YYYY-MM-DD_HH-MM-SS.log

    Creates ``log_dir`` if it does not exist.
    """
    now = now or datetime.now()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"{LOG_FILE_PREFIX}_{now:%Y-%m-%d_%H-%M-%S}.log"

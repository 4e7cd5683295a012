"""
Common CLI setup: logging and settings resolution.

Resolver functions take CLI args + settings and return resolved values with
priority CLI > settings (env + config) > defaults.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from cosmos_transfer.paths import get_log_file_path
from cosmos_transfer.settings import CosmosTransferSettings, get_settings, reset_settings

FILE_LOG_FORMAT = "[{time:YYYY-MM-DD HH:mm:ss}][{level}] {name}: {message}"


@dataclass
class ResolvedEndpointSettings:
    """Resolved endpoint and broadcast settings ready for use."""

    rest_url: str
    request_timeout: float
    chain_id: str | None
    wait_for_inclusion: bool
    inclusion_timeout: float
    poll_interval: float


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """
    Configure loguru logging with consistent format.

    Args:
        level: Log level (TRACE, DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file that receives the same records, uncoloured
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        level=level.upper(),
        colorize=True,
    )
    if log_file is not None:
        logger.add(
            log_file,
            format=FILE_LOG_FORMAT,
            level=level.upper(),
            colorize=False,
            mode="a",
            encoding="utf-8",
        )


def setup_cli(log_level: str | None = None) -> CosmosTransferSettings:
    """
    Common CLI setup: reset settings cache, configure logging, return settings.

    Log level priority: CLI argument > settings (env/config) > default "INFO"
    """
    reset_settings()
    settings = get_settings()

    effective_log_level = log_level if log_level is not None else settings.logging.level
    log_file = None
    if settings.logging.file_logging:
        log_file = get_log_file_path(Path(settings.logging.log_dir))
    setup_logging(effective_log_level, log_file)

    return settings


def resolve_endpoint_settings(
    settings: CosmosTransferSettings,
    *,
    rest_url: str | None = None,
    chain_id: str | None = None,
    wait_for_inclusion: bool | None = None,
    inclusion_timeout: float | None = None,
) -> ResolvedEndpointSettings:
    """
    Resolve endpoint settings with priority: CLI > Settings (env + config) > Defaults.
    """
    resolved_chain_id = chain_id if chain_id is not None else settings.chain.chain_id
    return ResolvedEndpointSettings(
        rest_url=rest_url if rest_url is not None else settings.rest.url,
        request_timeout=settings.rest.request_timeout,
        chain_id=resolved_chain_id or None,
        wait_for_inclusion=(
            wait_for_inclusion
            if wait_for_inclusion is not None
            else settings.broadcast.wait_for_inclusion
        ),
        inclusion_timeout=(
            inclusion_timeout
            if inclusion_timeout is not None
            else settings.broadcast.inclusion_timeout
        ),
        poll_interval=settings.broadcast.poll_interval,
    )


def log_resolved_settings(endpoint: ResolvedEndpointSettings) -> None:
    """Log resolved settings for transparency (never includes secrets)."""
    logger.info(f"REST endpoint: {endpoint.rest_url}")
    logger.info(f"Chain id: {endpoint.chain_id or '(from node)'}")
    if endpoint.wait_for_inclusion:
        logger.info(f"Inclusion timeout: {endpoint.inclusion_timeout:g}s")

"""
User confirmation prompt before funds move.
"""

from __future__ import annotations

import os
import sys
from typing import Any


def is_interactive_mode() -> bool:
    """
    Check if we're running in interactive mode.

    Returns False if NO_INTERACTIVE env var is set or if not attached to a TTY.
    """
    if os.environ.get("NO_INTERACTIVE"):
        return False
    return sys.stdin.isatty() and sys.stdout.isatty()


def confirm_transaction(
    amount: str,
    destination: str,
    fee: str,
    additional_info: dict[str, Any] | None = None,
    skip_confirmation: bool = False,
) -> bool:
    """
    Prompt user to confirm a transfer.

    Args:
        amount: Amount with denomination (e.g. "1000uosmo")
        destination: Destination address
        fee: Fee with denomination
        additional_info: Extra rows to display (sender, chain id, memo, ...)
        skip_confirmation: If True, skip prompt (from --yes flag)

    Returns:
        True if user confirms, False otherwise

    Raises:
        RuntimeError: If in non-interactive mode without skip_confirmation
    """
    if skip_confirmation:
        return True

    if not is_interactive_mode():
        raise RuntimeError(
            "Cannot prompt for confirmation in non-interactive mode. "
            "Use --yes to skip confirmation."
        )

    print("\n" + "=" * 80)
    print("TRANSACTION CONFIRMATION - SEND")
    print("=" * 80)
    print(f"Amount:       {amount}")
    print(f"Destination:  {destination}")
    print(f"Fee:          {fee}")
    for key, value in (additional_info or {}).items():
        print(f"{key + ':':<14}{value}")
    print("=" * 80)

    try:
        response = input("\nProceed with this transaction? [y/N]: ").strip().lower()
        return response in ("y", "yes")
    except (KeyboardInterrupt, EOFError):
        print("\n\nTransaction cancelled by user.")
        return False

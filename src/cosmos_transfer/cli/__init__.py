"""
Cosmos transfer CLI package.

The single transfer command lives in ``cosmos_transfer.cli.send`` and is
registered on the ``app`` Typer instance defined here.
"""

from __future__ import annotations

import typer

app = typer.Typer(
    name="cli-tool",
    help="Transfer tokens on a Cosmos test network",
    add_completion=False,
)


def main() -> None:
    """Entry point for the ``cli-tool`` console script."""
    app()


# Import submodules to register their ``@app.command()`` decorated functions.
# These imports MUST come after ``app`` is defined above.
from cosmos_transfer.cli import send  # noqa: E402, F401

if __name__ == "__main__":
    main()

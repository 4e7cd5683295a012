"""
Mnemonic loading and in-memory handling.

The mnemonic lives in a mutable buffer that is overwritten with zeros when
the owning ``with`` block exits. It is never logged and never written to disk
by this tool.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path

from loguru import logger

from cosmos_transfer.errors import SecretUnavailable

# BIP39 standard lengths: 128..256 bits of entropy
ACCEPTED_WORD_COUNTS = (12, 15, 18, 21, 24)

DEFAULT_MNEMONIC_FILE = Path("wallet") / "wallet.key"
DEFAULT_MNEMONIC_ENV = "MNEMONIC"
BIP39_PASSPHRASE_ENV = "BIP39_PASSPHRASE"


def _zero(buffer: bytearray) -> None:
    for i in range(len(buffer)):
        buffer[i] = 0


class SecretPhrase:
    """
    Scoped owner of a mnemonic phrase.

    Usage:
        with SecretSource(path, "MNEMONIC").load() as phrase:
            key = derive(phrase)
        # phrase buffer is zeroed here
    """

    def __init__(self, phrase: str | bytes | bytearray):
        if isinstance(phrase, (bytes, bytearray)):
            raw = bytearray(phrase)
            try:
                text = raw.decode("utf-8")
            finally:
                _zero(raw)
        else:
            text = phrase
        self._buffer = bytearray(" ".join(text.split()).encode("utf-8"))
        self._wiped = False

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    @property
    def word_count(self) -> int:
        return len(self._checked_buffer().split())

    def as_bytes(self) -> bytearray:
        """Borrow the underlying buffer (valid until wipe)."""
        return self._checked_buffer()

    def reveal(self) -> str:
        """Return the phrase as a str. Python strings cannot be zeroed; keep the result short-lived."""
        return self._checked_buffer().decode("utf-8")

    def wipe(self) -> None:
        _zero(self._buffer)
        self._wiped = True

    def _checked_buffer(self) -> bytearray:
        if self._wiped:
            raise SecretUnavailable("Mnemonic has already been wiped")
        return self._buffer

    def __enter__(self) -> SecretPhrase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.wipe()

    def __del__(self) -> None:
        buffer = getattr(self, "_buffer", None)
        if buffer is not None:
            _zero(buffer)

    def __repr__(self) -> str:
        if self._wiped:
            return "SecretPhrase(<wiped>)"
        return f"SecretPhrase(<{self.word_count} words redacted>)"

    __str__ = __repr__


class SecretSource:
    """
    Loads the mnemonic from exactly one source.

    Precedence: the mnemonic file wins when it exists; the environment
    variable is only read when the file is absent.
    """

    def __init__(
        self,
        mnemonic_file: Path | None = DEFAULT_MNEMONIC_FILE,
        env_var: str | None = DEFAULT_MNEMONIC_ENV,
    ):
        self.mnemonic_file = mnemonic_file
        self.env_var = env_var

    def load(self) -> SecretPhrase:
        """
        Read the mnemonic.

        Returns:
            SecretPhrase with a standard word count (checksum is checked at derivation)

        Raises:
            SecretUnavailable: If no source holds a phrase or the word count is wrong
        """
        if self.mnemonic_file is not None and self.mnemonic_file.is_file():
            phrase = self._read_file(self.mnemonic_file)
            source = f"file ({self.mnemonic_file})"
        elif self.env_var and os.environ.get(self.env_var, "").strip():
            phrase = SecretPhrase(os.environ[self.env_var])
            source = f"{self.env_var} env"
        else:
            raise SecretUnavailable(self._missing_message())

        word_count = phrase.word_count
        if word_count not in ACCEPTED_WORD_COUNTS:
            phrase.wipe()
            raise SecretUnavailable(
                f"Mnemonic from {source} has {word_count} words, "
                f"expected one of {ACCEPTED_WORD_COUNTS}"
            )

        logger.info(f"Mnemonic loaded from {source}")
        return phrase

    def _read_file(self, path: Path) -> SecretPhrase:
        try:
            mode = path.stat().st_mode
            content = bytearray(path.read_bytes())
        except OSError as e:
            raise SecretUnavailable(f"Cannot read mnemonic file {path}: {e}") from e

        if mode & (stat.S_IRWXG | stat.S_IRWXO):
            logger.warning(
                f"Mnemonic file {path} is accessible by other users; consider chmod 600"
            )

        try:
            return SecretPhrase(content)
        except UnicodeDecodeError as e:
            raise SecretUnavailable(f"Mnemonic file {path} is not valid UTF-8 text") from e
        finally:
            _zero(content)

    def _missing_message(self) -> str:
        options = []
        if self.mnemonic_file is not None:
            options.append(f"create {self.mnemonic_file}")
        if self.env_var:
            options.append(f"set the {self.env_var} environment variable")
        if not options:
            return "No mnemonic source configured"
        return "No mnemonic found: " + " or ".join(options)


def resolve_bip39_passphrase(
    bip39_passphrase: str | None = None,
    configured: str | None = None,
) -> str:
    """
    Resolve the optional BIP39 passphrase.

    Priority: explicit argument > BIP39_PASSPHRASE env > config > empty.
    """
    if bip39_passphrase:
        return bip39_passphrase
    if env_passphrase := os.environ.get(BIP39_PASSPHRASE_ENV):
        return env_passphrase
    if configured:
        return configured
    return ""

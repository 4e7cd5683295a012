"""
Tests for the confirmation prompt.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from cosmos_transfer.confirmation import confirm_transaction, is_interactive_mode


def test_skip_confirmation() -> None:
    assert confirm_transaction("1000uosmo", "osmo1dest", "5000uosmo", skip_confirmation=True)


def test_non_interactive_requires_yes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NO_INTERACTIVE", "1")
    assert not is_interactive_mode()
    with pytest.raises(RuntimeError, match="--yes"):
        confirm_transaction("1000uosmo", "osmo1dest", "5000uosmo")


@pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), ("n", False), ("", False)])
def test_prompt_answer(answer: str, expected: bool, capsys: pytest.CaptureFixture[str]) -> None:
    with (
        patch("cosmos_transfer.confirmation.is_interactive_mode", return_value=True),
        patch("builtins.input", return_value=answer),
    ):
        result = confirm_transaction(
            "1000uosmo", "osmo1dest", "5000uosmo", additional_info={"Memo": "hi"}
        )

    assert result is expected
    out = capsys.readouterr().out
    assert "Amount:       1000uosmo" in out
    assert "Destination:  osmo1dest" in out
    assert "Memo:" in out


def test_prompt_interrupted() -> None:
    with (
        patch("cosmos_transfer.confirmation.is_interactive_mode", return_value=True),
        patch("builtins.input", side_effect=KeyboardInterrupt),
    ):
        assert confirm_transaction("1000uosmo", "osmo1dest", "5000uosmo") is False

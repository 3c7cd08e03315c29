"""Tests for the rich-based prompter."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from scaffolding import prompter as prompter_module
from scaffolding.errors import OperationCancelled
from scaffolding.prompter import Prompter


@pytest.fixture
def prompter() -> Prompter:
    return Prompter(Console(file=io.StringIO()))


def test_select_returns_value(prompter: Prompter, monkeypatch) -> None:
    seen = {}

    def fake_ask(message, **kwargs):
        seen.update(kwargs)
        return "2"

    monkeypatch.setattr(prompter_module.Prompt, "ask", fake_ask)

    value = prompter.select("Pick:", [("One", 1), ("Two", 2), ("Three", 3)], initial=2)

    assert value == 2
    assert seen["choices"] == ["1", "2", "3"]
    assert seen["default"] == "3"
    assert "Two" in prompter.console.file.getvalue()


def test_select_without_choices(prompter: Prompter) -> None:
    with pytest.raises(ValueError):
        prompter.select("Pick:", [])


def test_number_returns_int_for_whole_values(prompter: Prompter, monkeypatch) -> None:
    monkeypatch.setattr(prompter_module.FloatPrompt, "ask", lambda *a, **kw: 3000.0)
    assert prompter.number("Port:", default=8080) == 3000

    monkeypatch.setattr(prompter_module.FloatPrompt, "ask", lambda *a, **kw: 1.5)
    assert prompter.number("Ratio:") == 1.5


@pytest.mark.parametrize("interrupt", [KeyboardInterrupt, EOFError])
def test_interrupt_cancels(prompter: Prompter, monkeypatch, interrupt) -> None:
    def fake_ask(*args, **kwargs):
        raise interrupt()

    monkeypatch.setattr(prompter_module.Prompt, "ask", fake_ask)
    monkeypatch.setattr(prompter_module.Confirm, "ask", fake_ask)

    with pytest.raises(OperationCancelled):
        prompter.text("Project name:")
    with pytest.raises(OperationCancelled):
        prompter.confirm("Continue?")

"""pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from enhanced_cot.config import reload_config
from enhanced_cot.tools.chain import ChainOfThoughtEngine, reset_chain_manager
from enhanced_cot.tools.cot_types import ChainState


@pytest.fixture(autouse=True)
def fresh_globals(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Give every test its own config and session registry."""
    monkeypatch.setenv("DISABLE_COT_LOGGING", "true")
    reload_config()
    reset_chain_manager()
    yield
    reset_chain_manager()


@pytest.fixture
def engine() -> ChainOfThoughtEngine:
    """Engine with default Auto-CoT settings."""
    return ChainOfThoughtEngine()


@pytest.fixture
def state() -> ChainState:
    """Empty session state."""
    return ChainState(session_id="test")


def make_input(thought: str, number: int = 1, total: int = 3, **extra: Any) -> dict[str, Any]:
    """Build a wire-format submission."""
    return {
        "thought": thought,
        "thoughtNumber": number,
        "totalThoughts": total,
        "nextThoughtNeeded": number < total,
        **extra,
    }

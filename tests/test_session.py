"""Unit tests for the SessionManager registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

import pytest

from enhanced_cot.utils.session import SessionManager, SessionNotFoundError


@dataclass
class MockState:
    """Mock state object for testing."""

    session_id: str
    value: str = ""
    updated_at: datetime = field(default_factory=datetime.now)


class MockManager(SessionManager[MockState]):
    """Concrete implementation for testing."""

    def create_session(self, session_id: str, value: str = "") -> MockState:
        """Create and register a new session."""
        state = MockState(session_id=session_id, value=value)
        self._register_session(session_id, state)
        return state


class TestSessionManagerBasics:
    """Tests for basic SessionManager operations."""

    def test_init_empty(self) -> None:
        """New manager should have no sessions."""
        assert MockManager().session_count() == 0

    def test_register_and_exists(self) -> None:
        """Registered sessions are visible."""
        mgr = MockManager()
        mgr.create_session("s1")
        assert mgr.session_exists("s1")
        assert not mgr.session_exists("s2")

    def test_session_context(self) -> None:
        """session() yields the live state for mutation."""
        mgr = MockManager()
        mgr.create_session("s1")
        with mgr.session("s1") as state:
            state.value = "updated"
        assert mgr._get_session("s1").value == "updated"

    def test_missing_session(self) -> None:
        """Unknown ids raise SessionNotFoundError."""
        with pytest.raises(SessionNotFoundError) as exc_info:
            with MockManager().session("nope"):
                pass
        assert exc_info.value.session_id == "nope"

    def test_register_replaces(self) -> None:
        """Registering an existing id replaces its state."""
        mgr = MockManager()
        mgr.create_session("s1", value="first")
        mgr.create_session("s1", value="second")
        assert mgr.session_count() == 1
        assert mgr._get_session("s1").value == "second"


class TestCleanupStale:
    """Tests for stale session cleanup."""

    def test_removes_old_sessions(self) -> None:
        """Sessions idle past max_age are removed."""
        mgr = MockManager()
        old = mgr.create_session("old")
        mgr.create_session("fresh")
        old.updated_at = datetime.now() - timedelta(hours=1)
        assert mgr.cleanup_stale(timedelta(minutes=30)) == ["old"]
        assert mgr.session_exists("fresh")

    def test_predicate_filters(self) -> None:
        """Only sessions matching the predicate are eligible."""
        mgr = MockManager()
        for sid in ("a", "b"):
            mgr.create_session(sid).updated_at = datetime.now() - timedelta(hours=1)
        removed = mgr.cleanup_stale(
            timedelta(minutes=30), predicate=lambda s: s.session_id == "a"
        )
        assert removed == ["a"]
        assert mgr.session_exists("b")

    def test_requires_updated_at(self) -> None:
        """States without updated_at are rejected."""
        mgr: SessionManager[object] = SessionManager()
        mgr._register_session("x", object())
        with pytest.raises(TypeError):
            mgr.cleanup_stale(timedelta(minutes=1))

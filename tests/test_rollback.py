"""Unit tests for snapshots and rollback."""

from __future__ import annotations

import pytest

from enhanced_cot.tools.branching import attach_to_branch
from enhanced_cot.tools.cot_types import ChainState, ReasoningMode, ThoughtRecord
from enhanced_cot.tools.rollback import (
    available_snapshots,
    can_rollback,
    rollback,
    save_snapshot,
)
from enhanced_cot.tools.store import append_thought
from enhanced_cot.utils.errors import RollbackError


def _add(
    state: ChainState, number: int, branch_from: int | None = None, branch_id: str | None = None
) -> ThoughtRecord:
    record = ThoughtRecord(
        thought_number=number,
        text=f"thought {number}",
        total_thoughts=4,
        mode=ReasoningMode.CONCISE,
        word_count=2,
        token_count=3,
        next_thought_needed=True,
        branch_from_thought=branch_from,
        branch_id=branch_id,
    )
    append_thought(state, record)
    attach_to_branch(state, record)
    save_snapshot(state, number)
    return record


@pytest.fixture
def three_thoughts(state: ChainState) -> ChainState:
    """History [1, 2, 3] with a snapshot after each."""
    for n in (1, 2, 3):
        _add(state, n)
    return state


class TestSnapshots:
    """Tests for snapshot bookkeeping."""

    def test_snapshot_per_thought(self, three_thoughts: ChainState) -> None:
        """Each appended thought leaves a sorted snapshot key."""
        assert available_snapshots(three_thoughts) == [1, 2, 3]
        assert len(three_thoughts.snapshots[2]) == 2

    def test_can_rollback_bounds(self, three_thoughts: ChainState) -> None:
        """Only 1..len(history) are valid targets."""
        assert can_rollback(three_thoughts, 1)
        assert can_rollback(three_thoughts, 3)
        assert not can_rollback(three_thoughts, 0)
        assert not can_rollback(three_thoughts, 4)


class TestRollback:
    """Tests for rollback."""

    def test_truncates_history(self, three_thoughts: ChainState) -> None:
        """Rolling back to 2 keeps thoughts 1 and 2."""
        entry = rollback(three_thoughts, 2, "wrong turn")
        assert [r.thought_number for r in three_thoughts.history] == [1, 2]
        assert entry.reason == "wrong turn"
        assert entry.corrected_thought.thought_number == 2
        assert len(entry.previous_states) == 3
        assert three_thoughts.rollback_log == [entry]

    def test_rollback_id_format(self, three_thoughts: ChainState) -> None:
        """Ids embed the target thought."""
        entry = rollback(three_thoughts, 1, "reset")
        assert entry.rollback_id.startswith("rollback_1_")

    def test_snapshots_retained(self, three_thoughts: ChainState) -> None:
        """Snapshots survive a rollback."""
        rollback(three_thoughts, 1, "reset")
        assert available_snapshots(three_thoughts) == [1, 2, 3]

    def test_prunes_late_branch(self, three_thoughts: ChainState) -> None:
        """A branch whose only member forked from thought 3 is removed."""
        _add(three_thoughts, 4, branch_from=3, branch_id="A")
        assert list(three_thoughts.branches) == ["A"]
        rollback(three_thoughts, 2, "drop branch")
        assert three_thoughts.branches == {}

    def test_keeps_early_branch(self, three_thoughts: ChainState) -> None:
        """Branches forked at or before the target survive."""
        _add(three_thoughts, 2, branch_from=1, branch_id="A")
        rollback(three_thoughts, 2, "keep branch")
        assert list(three_thoughts.branches) == ["A"]

    def test_repeated_numbers_all_kept(self, state: ChainState) -> None:
        """Records sharing a number at or below the target all survive."""
        _add(state, 1)
        _add(state, 2)
        _add(state, 2, branch_from=1, branch_id="A")
        _add(state, 3)
        entry = rollback(state, 2, "renumbered")
        assert [r.thought_number for r in state.history] == [1, 2, 2]
        assert entry.corrected_thought is state.history[1]

    @pytest.mark.parametrize("target", [0, 4, 10])
    def test_out_of_range(self, three_thoughts: ChainState, target: int) -> None:
        """Targets outside the history fail without mutation."""
        with pytest.raises(RollbackError) as exc_info:
            rollback(three_thoughts, target, "bad")
        assert str(exc_info.value).startswith(f"Cannot rollback to thought {target}")
        assert exc_info.value.operation == "rollback"
        assert exc_info.value.details["historyLength"] == 3
        assert len(three_thoughts.history) == 3
        assert three_thoughts.rollback_log == []

    def test_number_not_present(self, state: ChainState) -> None:
        """An in-range number no record carries fails."""
        _add(state, 1)
        _add(state, 5)
        with pytest.raises(RollbackError):
            rollback(state, 2, "gap")

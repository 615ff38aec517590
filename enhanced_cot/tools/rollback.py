"""History snapshots and rollback with an audit log.

Rollback locates its target by thought number, not list position, and
truncates history to every record numbered at or below the target. Under
repeated numbering across branches this keeps all records sharing a number
<= target, and the located target is the first record with that number.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime

from loguru import logger

from enhanced_cot.tools.branching import prune_branches
from enhanced_cot.tools.cot_types import ChainState, RollbackEntry
from enhanced_cot.utils.errors import RollbackError


def save_snapshot(state: ChainState, thought_number: int) -> None:
    """Record a copy of history as it stands right after ``thought_number`` was appended."""
    state.snapshots[thought_number] = list(state.history)


def available_snapshots(state: ChainState) -> list[int]:
    return sorted(state.snapshots)


def can_rollback(state: ChainState, thought_number: int) -> bool:
    """True iff ``thought_number`` is within 1..len(history)."""
    return 1 <= thought_number <= len(state.history)


def _rollback_id(thought_number: int) -> str:
    return f"rollback_{thought_number}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def rollback(state: ChainState, thought_number: int, reason: str) -> RollbackEntry:
    """Truncate history back to ``thought_number``.

    Args:
        state: Session to modify.
        thought_number: Target thought; it and every lower-numbered record survive.
        reason: Free-text audit reason.

    Returns:
        The audit entry appended to the rollback log.

    Raises:
        RollbackError: If the target is out of range or no record carries it.

    """
    history_length = len(state.history)
    if not can_rollback(state, thought_number):
        raise RollbackError(
            f"Cannot rollback to thought {thought_number}: "
            f"history has {history_length} thought(s)",
            {"requestedThought": thought_number, "historyLength": history_length},
        )

    target = next((r for r in state.history if r.thought_number == thought_number), None)
    if target is None:
        raise RollbackError(
            f"Cannot rollback to thought {thought_number}: no thought with that number in history",
            {"requestedThought": thought_number, "historyLength": history_length},
        )

    entry = RollbackEntry(
        rollback_id=_rollback_id(thought_number),
        previous_states=list(state.history),
        reason=reason,
        corrected_thought=target,
    )
    state.history = [r for r in state.history if r.thought_number <= thought_number]
    prune_branches(state, thought_number)
    state.rollback_log.append(entry)
    state.updated_at = datetime.now()

    logger.info(
        f"Session {state.session_id}: rolled back to thought {thought_number} "
        f"({history_length} -> {len(state.history)} thoughts): {reason}"
    )
    return entry

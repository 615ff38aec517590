"""Thought history storage and derived metrics."""

from __future__ import annotations

from datetime import datetime

from loguru import logger

from enhanced_cot.tools.classifier import calculate_efficiency
from enhanced_cot.tools.cot_types import (
    DEFAULT_THRESHOLDS,
    ChainMetrics,
    ChainState,
    ReasoningMode,
    ThoughtRecord,
    Thresholds,
)


def append_thought(state: ChainState, record: ThoughtRecord) -> ThoughtRecord:
    """Append a record to the session history.

    ``total_thoughts`` is raised to ``thought_number`` when the caller
    underestimated the chain length.
    """
    if record.thought_number > record.total_thoughts:
        record.total_thoughts = record.thought_number
    state.history.append(record)
    state.updated_at = datetime.now()
    logger.debug(
        f"Session {state.session_id}: appended thought {record.thought_number}/"
        f"{record.total_thoughts} ({record.mode.value}, {record.word_count} words)"
    )
    return record


def compute_metrics(
    state: ChainState,
    now: datetime | None = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> ChainMetrics:
    """Recompute aggregate metrics from the current history."""
    if now is None:
        now = datetime.now()

    history = state.history
    total_words = sum(t.word_count for t in history)
    total_tokens = sum(t.token_count for t in history)

    distribution = {mode.value: 0 for mode in ReasoningMode}
    for t in history:
        distribution[t.mode.value] += 1

    return ChainMetrics(
        total_tokens=total_tokens,
        total_words=total_words,
        average_words_per_thought=total_words / len(history) if history else 0.0,
        efficiency=calculate_efficiency(history, thresholds),
        latency_ms=int((now - state.start_time).total_seconds() * 1000),
        mode_distribution=distribution,
    )
